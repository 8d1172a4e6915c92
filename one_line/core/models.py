"""
Data types shared by the one-line core.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .errors import ErrorType

# Invoked after each successful step with (step_index, combined_output).
StepCallback = Callable[[int, str], None]


@dataclass
class Command:
    """
    A saved sequence of shell steps.

    Attributes:
        id: Opaque unique identifier, fixed at creation
        name: Display name, unique ignoring case
        alias: Shell-safe token derived from the name, unique
        steps: Ordered shell command strings, never empty
        created_at: ISO-8601 creation timestamp
        usage_count: Number of successful runs
    """
    id: str
    name: str
    alias: str
    steps: List[str]
    created_at: str
    usage_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk record layout."""
        return {
            "id": self.id,
            "name": self.name,
            "alias": self.alias,
            "steps": list(self.steps),
            "createdAt": self.created_at,
            "usageCount": self.usage_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Command':
        """
        Build a Command from an already-upgraded record.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        try:
            record_id = data["id"]
            name = data["name"]
            alias = data["alias"]
            steps = data["steps"]
        except KeyError as e:
            raise ValueError(f"Command record missing field {e}") from e

        if not isinstance(record_id, str) or not record_id:
            raise ValueError("Command record has an invalid id")
        if not isinstance(name, str) or not isinstance(alias, str):
            raise ValueError(f"Command record {record_id} has a non-string name or alias")
        if not isinstance(steps, list) or not steps or not all(isinstance(s, str) for s in steps):
            raise ValueError(f"Command record {record_id} has invalid steps")

        usage = data.get("usageCount") or 0
        if not isinstance(usage, int) or isinstance(usage, bool) or usage < 0:
            raise ValueError(f"Command record {record_id} has an invalid usage count")

        return cls(
            id=record_id,
            name=name,
            alias=alias,
            steps=list(steps),
            created_at=str(data.get("createdAt", "")),
            usage_count=usage,
        )


@dataclass
class ValidationResult:
    """Outcome of checking an alias before it is stored."""
    valid: bool
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    warning: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)


@dataclass
class StepOutput:
    """Captured output of one successful step."""
    stdout: str
    stderr: str

    @property
    def combined(self) -> str:
        return self.stdout + self.stderr


@dataclass
class StepOutcome:
    """
    One executed step, as yielded by CommandExecutor.iter_sequence.

    ``record`` is the transcript entry for the step, already formatted.
    """
    index: int
    total: int
    step: str
    success: bool
    output: str
    record: str
    error: Optional[str] = None


@dataclass
class ExecutionResult:
    """Result of running a command's steps."""
    success: bool
    output: str = ""
    error: Optional[str] = None
    failed_step: Optional[int] = None
    error_type: Optional[ErrorType] = None
    outcomes: List[StepOutcome] = field(default_factory=list)

    @classmethod
    def not_found(cls, message: str) -> 'ExecutionResult':
        """Failed result for a command that could not be resolved."""
        return cls(success=False, output="", error=message, error_type=ErrorType.NOT_FOUND)
