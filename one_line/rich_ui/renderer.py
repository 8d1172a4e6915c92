"""
Rich UI renderer for one-line.
Renders command listings, step progress and run results.
"""
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.models import Command, ExecutionResult, ValidationResult
from ..utils import format_timestamp, pluralize, truncate_string


class CommandRenderer:
    """
    Console output for the CLI front end.

    Every message goes through one rich Console so tests can capture it.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(highlight=False)

    @property
    def console(self) -> Console:
        """Get the Rich console."""
        return self._console

    def print_error(self, message: str, suggestions: Sequence[str] = ()) -> None:
        """Print an error, with alias suggestions when there are any."""
        self._console.print(Text(f"[ERROR] {message}", style="bold red"))
        if suggestions:
            self._console.print("[yellow]Suggestions:[/yellow]")
            for suggestion in suggestions:
                self._console.print(Text(f"  - {suggestion}", style="dim"))

    def print_warning(self, message: str) -> None:
        self._console.print(Text(f"[WARNING] {message}", style="bold yellow"))

    def print_success(self, message: str) -> None:
        self._console.print(Text(f"[SUCCESS] {message}", style="bold green"))

    def print_info(self, message: str) -> None:
        self._console.print(Text(message, style="cyan"))

    def print_command_list(self, commands: List[Command]) -> None:
        """
        Print saved commands as a table, one row per command.

        Args:
            commands: Commands in the order they should appear
        """
        if not commands:
            self._console.print("[yellow]No commands saved yet.[/yellow]")
            return

        table = Table(title="Saved Commands", border_style="cyan", show_lines=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold cyan")
        table.add_column("Alias", style="magenta")
        table.add_column("Steps")
        table.add_column("Runs", justify="right")
        table.add_column("Created", style="dim")

        for index, cmd in enumerate(commands, start=1):
            steps = "\n".join(
                f"{i}) {truncate_string(step, 70)}" for i, step in enumerate(cmd.steps, start=1)
            )
            table.add_row(
                str(index),
                cmd.name,
                cmd.alias,
                Text(steps),
                str(cmd.usage_count),
                format_timestamp(cmd.created_at),
            )

        self._console.print(table)

    def print_command_created(self, command: Command) -> None:
        self.print_success(f'Command "{command.name}" created successfully!')
        self._console.print("[dim]Run it with any of these:[/dim]")
        self._console.print(Text(f"  one-line {command.alias}", style="cyan"))
        self._console.print(Text(f'  one-line run "{command.name}"', style="cyan"))

    def print_alias_preview(self, name: str, alias: str, sanitized: bool) -> None:
        label = "Generated alias" if sanitized else "Alias"
        self._console.print(Text.assemble((f"{label}: ", "cyan"), (alias or "(empty)", "bold cyan")))

    def print_validation(self, validation: ValidationResult) -> None:
        """Print a blocking error or a PATH warning from alias validation."""
        if not validation.valid:
            self.print_error(validation.error or "Invalid alias", validation.suggestions)
        elif validation.warning:
            self.print_warning(validation.warning)

    def print_run_header(self, command: Command) -> None:
        self._console.print(Text(f"Running: {command.name}", style="bold blue"))

    def print_step_complete(self, index: int, total: int) -> None:
        self._console.print(Text(f"✓ Step {index + 1}/{total} completed", style="green"))

    def print_result(self, result: ExecutionResult, show_output: bool = True) -> None:
        """
        Print the outcome of a run.

        The transcript is always shown on failure; on success only when
        ``show_output`` is set.
        """
        if result.success:
            self.print_success(
                f"All commands completed successfully! ({pluralize(len(result.outcomes), 'step')})"
            )
            if show_output and result.output.strip():
                self._console.print("[dim]Output:[/dim]")
                self._console.print(Text(result.output))
            return

        if result.failed_step is not None:
            self.print_error(f"Command failed at step {result.failed_step + 1}")
        self._console.print(Text(result.error or "Unknown error", style="red"))
        if result.output.strip():
            self._console.print("[dim]Output:[/dim]")
            self._console.print(Text(result.output))
