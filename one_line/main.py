"""
Main entry point for one-line.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .completion import SUPPORTED_SHELLS, generate_completion, install_completion, read_completion_candidates
from .config import ConfigManager, get_config
from .constants import APP_DESCRIPTION, APP_NAME, APP_VERSION, COMMANDS_FILENAME, SUBCOMMANDS
from .core import CommandManager, OneLineError, needs_sanitization, suggest_alternatives
from .core.models import Command
from .rich_ui import CommandRenderer, ask_name, ask_steps, confirm

logger = logging.getLogger(__name__)

COMPLETE_SUBCOMMAND = "__complete"

# Global options that take a value; used to find the first positional token.
_VALUE_OPTIONS = ("--config-dir", "--log-level")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog=APP_NAME, description=APP_DESCRIPTION)

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory holding commands.json and config.json (default: ~/.one-line)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    subparsers = parser.add_subparsers(dest="subcommand")

    subparsers.add_parser("list", aliases=["ls"], help="List all saved commands")

    add = subparsers.add_parser("add", help="Add a new command")
    add.add_argument("name", nargs="?", help="Command name (prompted when omitted)")
    add.add_argument("-s", "--step", dest="steps", action="append", help="A step; repeat for more")
    add.add_argument("--alias", help="Explicit alias instead of one derived from the name")
    add.add_argument("-y", "--yes", action="store_true", help="Accept PATH collision warnings")

    run = subparsers.add_parser("run", help="Run a saved command by name, alias or id")
    run.add_argument("name")
    run.add_argument("--cwd", help="Working directory for every step")

    delete = subparsers.add_parser("delete", aliases=["rm"], help="Delete a saved command")
    delete.add_argument("name")
    delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    edit = subparsers.add_parser("edit", help="Rename a command or replace its steps")
    edit.add_argument("name")
    edit.add_argument("--name", dest="new_name", help="New display name")
    edit.add_argument("-s", "--step", dest="steps", action="append", help="Replacement step; repeat for more")

    completion = subparsers.add_parser("completion", help="Print or install shell completion")
    completion.add_argument("shell", nargs="?", choices=SUPPORTED_SHELLS)
    completion.add_argument("--install", action="store_true", help="Append to the shell rc file")

    subparsers.add_parser(COMPLETE_SUBCOMMAND, help=argparse.SUPPRESS)

    return parser


def normalize_argv(argv: Sequence[str]) -> List[str]:
    """
    Turn ``one-line <alias>`` into ``one-line run <alias>``.

    The first positional token that is not a known subcommand is treated
    as the command to run.
    """
    argv = list(argv)
    index = 0
    while index < len(argv):
        token = argv[index]
        if token in _VALUE_OPTIONS:
            index += 2
            continue
        if token.startswith("-"):
            index += 1
            continue
        if token not in SUBCOMMANDS and token != COMPLETE_SUBCOMMAND:
            argv.insert(index, "run")
        break
    return argv


def setup_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve(manager: CommandManager, renderer: CommandRenderer, token: str) -> Optional[Command]:
    command = manager.find_command(token)
    if command is None:
        renderer.print_error(f'Command "{token}" not found')
    return command


def cmd_list(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    renderer.print_command_list(manager.list_commands())
    return 0


def cmd_add(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    name = args.name or ask_name()
    if manager.get_command_by_name(name):
        renderer.print_error("A command with this name already exists")
        return 1

    alias = manager.preview_alias(args.alias or name)
    renderer.print_alias_preview(name, alias, needs_sanitization(args.alias or name))

    # `one-line <alias>` would dispatch to the subcommand instead.
    if alias in SUBCOMMANDS:
        renderer.print_error(
            f"Cannot use '{alias}' as alias - it's a {APP_NAME} subcommand",
            suggest_alternatives(alias),
        )
        return 1

    validation = manager.check_alias(alias)
    renderer.print_validation(validation)
    if not validation.valid:
        return 1
    if validation.warning and not args.yes:
        if not confirm("Continue anyway?", default=False, console=renderer.console):
            renderer.print_info("Cancelled.")
            return 0

    steps = args.steps or ask_steps(console=renderer.console)

    command = manager.create_command(name, steps, alias)
    renderer.print_command_created(command)
    return 0


def cmd_run(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    command = _resolve(manager, renderer, args.name)
    if command is None:
        return 1

    renderer.print_run_header(command)
    total = len(command.steps)
    result = manager.run_command_by_id(
        command.id,
        args.cwd or os.getcwd(),
        lambda index, output: renderer.print_step_complete(index, total),
    )
    renderer.print_result(result, show_output=config.ui.show_output)
    return 0 if result.success else 1


def cmd_delete(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    command = _resolve(manager, renderer, args.name)
    if command is None:
        return 1

    if config.ui.confirm_delete and not args.yes:
        if not confirm(f'Delete command "{command.name}"?', default=False, console=renderer.console):
            renderer.print_info("Cancelled.")
            return 0

    if not manager.delete_command(command.id):
        renderer.print_error("Failed to delete command")
        return 1
    renderer.print_success(f'Command "{command.name}" deleted successfully!')
    return 0


def cmd_edit(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    command = _resolve(manager, renderer, args.name)
    if command is None:
        return 1

    new_name = args.new_name
    steps = args.steps
    if new_name is None and steps is None:
        renderer.print_info(f"Edit Command: {command.name}")
        entered = ask_name(default=command.name)
        if entered != command.name:
            new_name = entered
        if confirm("Replace steps?", default=False, console=renderer.console):
            steps = ask_steps(command.steps, console=renderer.console)

    if new_name is None and steps is None:
        renderer.print_info("Nothing to change.")
        return 0

    updated = manager.update_command(command.id, name=new_name, steps=steps)
    if new_name is not None:
        renderer.print_success(f'Command renamed to "{updated.name}"')
    if steps is not None:
        renderer.print_success("Command steps updated!")
    return 0


def cmd_completion(manager: CommandManager, renderer: CommandRenderer, args: argparse.Namespace, config: ConfigManager) -> int:
    if args.install:
        installed, rc_file = install_completion(args.shell)
        if installed:
            renderer.print_success(f"Tab completion installed in {rc_file}. Restart your shell to use it.")
        else:
            renderer.print_info(f"Tab completion already installed in {rc_file}")
        return 0

    if not args.shell:
        renderer.print_error(f"Choose a shell: {', '.join(SUPPORTED_SHELLS)}")
        return 1
    print(generate_completion(args.shell))
    return 0


HANDLERS = {
    "list": cmd_list,
    "ls": cmd_list,
    "add": cmd_add,
    "run": cmd_run,
    "delete": cmd_delete,
    "rm": cmd_delete,
    "edit": cmd_edit,
    "completion": cmd_completion,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    argv = normalize_argv(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(argv)

    config = ConfigManager(args.config_dir) if args.config_dir else get_config()
    setup_logging(args.log_level or config.config.log_level)

    # Completion must stay read-only and fast: it never builds a store.
    if args.subcommand == COMPLETE_SUBCOMMAND:
        for alias in read_completion_candidates(config.config_dir / COMMANDS_FILENAME):
            print(alias)
        return 0

    renderer = CommandRenderer()
    manager = CommandManager.from_config(config)

    if args.subcommand is None:
        commands = manager.list_commands()
        renderer.print_command_list(commands)
        if commands:
            renderer.print_info(f"Run one with: {APP_NAME} <alias>")
        return 0

    handler = HANDLERS[args.subcommand]
    try:
        return handler(manager, renderer, args, config)
    except OneLineError as e:
        renderer.print_error(e.message, getattr(e, "suggestions", ()))
        return 1
    except (KeyboardInterrupt, EOFError):
        renderer.print_info("Cancelled.")
        return 1
    except OSError as e:
        logger.debug("Unexpected I/O failure", exc_info=True)
        renderer.print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
