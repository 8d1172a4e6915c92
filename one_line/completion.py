"""
Shell tab-completion for one-line.

Generated scripts ask ``one-line __complete`` for the saved aliases, which
reads commands.json directly and orders them by usage, then alphabetically.
"""
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import APP_NAME, COMPLETION_MARKER, SUBCOMMANDS
from .core.manager import sort_for_completion
from .core.models import Command
from .core.storage import upgrade_snapshot
from .utils import is_macos

logger = logging.getLogger(__name__)

SUPPORTED_SHELLS = ("bash", "zsh", "fish")

# Subcommands whose first argument is a saved command.
_TARGET_SUBCOMMANDS = "run delete rm edit"

_BASH_TEMPLATE = '''
__MARKER__() {
    local cur prev aliases
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"
    aliases="$(__PROG__ __complete 2>/dev/null)"
    if [ "$COMP_CWORD" -eq 1 ]; then
        COMPREPLY=($(compgen -W "$aliases __SUBCOMMANDS__" -- "$cur"))
    elif [ "$COMP_CWORD" -eq 2 ]; then
        case "$prev" in
            __TARGETS_CASE__) COMPREPLY=($(compgen -W "$aliases" -- "$cur")) ;;
            completion) COMPREPLY=($(compgen -W "__SHELLS__" -- "$cur")) ;;
        esac
    fi
}
complete -o nosort -F __MARKER__ __PROG__
'''

_ZSH_TEMPLATE = '''
#compdef __PROG__
__MARKER__() {
    local -a aliases subcommands
    aliases=(${(f)"$(__PROG__ __complete 2>/dev/null)"})
    subcommands=(__SUBCOMMANDS__)
    if (( CURRENT == 2 )); then
        compadd -V one-line-aliases -- $aliases
        compadd -- $subcommands
    elif (( CURRENT == 3 )); then
        case ${words[2]} in
            __TARGETS_CASE__) compadd -V one-line-aliases -- $aliases ;;
            completion) compadd -- __SHELLS__ ;;
        esac
    fi
}
compdef __MARKER__ __PROG__
'''

_FISH_TEMPLATE = '''
function __MARKER__
    __PROG__ __complete 2>/dev/null
end
complete -c __PROG__ -f -k -n __fish_use_subcommand -a '(__MARKER__)'
complete -c __PROG__ -f -n __fish_use_subcommand -a '__SUBCOMMANDS__'
complete -c __PROG__ -f -k -n '__fish_seen_subcommand_from __TARGETS__' -a '(__MARKER__)'
complete -c __PROG__ -f -n '__fish_seen_subcommand_from completion' -a '__SHELLS__'
'''

_TEMPLATES = {
    "bash": _BASH_TEMPLATE,
    "zsh": _ZSH_TEMPLATE,
    "fish": _FISH_TEMPLATE,
}


def read_completion_candidates(commands_file: Path) -> List[str]:
    """
    Read aliases straight from a commands.json file.

    Args:
        commands_file: Store file to read

    Returns:
        Aliases, most used first then alphabetical; empty on any failure
    """
    try:
        with open(commands_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        commands = [Command.from_dict(record) for record in upgrade_snapshot(data)]
    except (OSError, ValueError, TypeError) as e:
        logger.debug(f"No completion candidates from {commands_file}: {e}")
        return []
    return [cmd.alias for cmd in sort_for_completion(commands) if cmd.alias]


def generate_completion(shell: str) -> str:
    """
    Generate a completion script.

    Args:
        shell: One of SUPPORTED_SHELLS

    Raises:
        ValueError: For an unsupported shell
    """
    template = _TEMPLATES.get(shell)
    if template is None:
        raise ValueError(
            f"Unsupported shell: {shell}. Choose from {', '.join(SUPPORTED_SHELLS)}"
        )
    return (
        template
        .replace("__MARKER__", COMPLETION_MARKER)
        .replace("__PROG__", APP_NAME)
        .replace("__SUBCOMMANDS__", " ".join(SUBCOMMANDS))
        .replace("__TARGETS_CASE__", "|".join(_TARGET_SUBCOMMANDS.split()))
        .replace("__TARGETS__", _TARGET_SUBCOMMANDS)
        .replace("__SHELLS__", " ".join(SUPPORTED_SHELLS))
    )


def detect_shell(shell_path: Optional[str] = None) -> str:
    """
    Guess the user's shell from $SHELL.

    Falls back to zsh on macOS and bash elsewhere.
    """
    shell_name = os.path.basename(shell_path or os.environ.get("SHELL", ""))
    for name in SUPPORTED_SHELLS:
        if name in shell_name:
            return name
    return "zsh" if is_macos() else "bash"


def rc_file_for(shell: str, home: Optional[Path] = None) -> Path:
    """Startup file the completion script is appended to."""
    home = Path(home) if home is not None else Path.home()
    if shell == "zsh":
        return home / ".zshrc"
    if shell == "fish":
        return home / ".config" / "fish" / "config.fish"
    return home / ".bashrc"


def is_completion_installed(rc_file: Path) -> bool:
    """Check whether ``rc_file`` already carries the completion script."""
    try:
        return COMPLETION_MARKER in Path(rc_file).read_text(encoding='utf-8')
    except FileNotFoundError:
        return False


def install_completion(
    shell: Optional[str] = None,
    rc_file: Optional[Path] = None,
    home: Optional[Path] = None,
) -> Tuple[bool, Path]:
    """
    Append the completion script to the shell's rc file.

    Args:
        shell: Target shell; detected when omitted
        rc_file: File to append to; derived from the shell when omitted
        home: Home directory used to derive the rc file

    Returns:
        (installed, rc_file); installed is False when it was already present

    Raises:
        ValueError: For an unsupported shell
        OSError: If the rc file cannot be written
    """
    shell = shell or detect_shell()
    script = generate_completion(shell)
    rc_file = Path(rc_file) if rc_file is not None else rc_file_for(shell, home)

    if is_completion_installed(rc_file):
        logger.debug(f"Completion already present in {rc_file}")
        return False, rc_file

    rc_file.parent.mkdir(parents=True, exist_ok=True)
    with open(rc_file, 'a', encoding='utf-8') as f:
        f.write(f"\n# {APP_NAME} tab completion{script}\n")
    logger.info(f"Installed {shell} completion into {rc_file}")
    return True, rc_file
