"""Interactive prompts for one-line."""
from typing import List, Optional, Sequence

from prompt_toolkit import prompt
from prompt_toolkit.validation import ValidationError, Validator
from rich.console import Console
from rich.prompt import Confirm


class _NotBlankValidator(Validator):
    def __init__(self, message: str) -> None:
        self._message = message

    def validate(self, document) -> None:
        if not document.text.strip():
            raise ValidationError(message=self._message, cursor_position=0)


def ask_name(default: str = "") -> str:
    """Prompt for a command name until a non-blank one is entered."""
    return prompt(
        "Command name: ",
        default=default,
        validator=_NotBlankValidator("Name cannot be empty"),
    ).strip()


def ask_steps(current: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> List[str]:
    """
    Prompt for steps one per line; an empty line finishes.

    At least one step is required.
    """
    console = console or Console()
    if current:
        console.print("[dim]Current steps:[/dim]")
        for index, step in enumerate(current, start=1):
            console.print(f"[dim]  {index}. {step}[/dim]")
    console.print("[dim]Enter command steps (press Enter on empty line to finish):[/dim]")

    steps: List[str] = []
    while True:
        validator = _NotBlankValidator("At least one command step is required") if not steps else None
        step = prompt(f"Step {len(steps) + 1}: ", validator=validator).strip()
        if not step:
            return steps
        steps.append(step)


def confirm(message: str, default: bool = False, console: Optional[Console] = None) -> bool:
    """Yes/no question on the console."""
    return Confirm.ask(message, default=default, console=console)
