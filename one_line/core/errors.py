"""
Error types for the one-line core.

Validation errors are raised before the store is touched. Execution errors
are carried inside an ExecutionResult by the executor and the manager.
"""
from enum import Enum
from typing import List, Optional


class ErrorType(Enum):
    """Kinds of failure the core reports."""
    EMPTY_NAME = "empty_name"
    EMPTY_STEPS = "empty_steps"
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_ALIAS = "duplicate_alias"
    RESERVED_ALIAS = "reserved_alias"
    EMPTY_ALIAS = "empty_alias"
    NOT_FOUND = "not_found"
    STEP_EXECUTION = "step_execution"
    STORE_WRITE = "store_write"


class OneLineError(Exception):
    """Base class for every error raised by the core."""

    error_type: ErrorType = ErrorType.STEP_EXECUTION

    def __init__(self, message: str, error_type: Optional[ErrorType] = None):
        if error_type is not None:
            self.error_type = error_type
        self.message = message
        super().__init__(message)


class EmptyNameError(OneLineError):
    error_type = ErrorType.EMPTY_NAME

    def __init__(self, message: str = "Name cannot be empty"):
        super().__init__(message)


class EmptyStepsError(OneLineError):
    error_type = ErrorType.EMPTY_STEPS

    def __init__(self, message: str = "At least one command step is required"):
        super().__init__(message)


class DuplicateNameError(OneLineError):
    error_type = ErrorType.DUPLICATE_NAME

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Command with name "{name}" already exists')


class DuplicateAliasError(OneLineError):
    error_type = ErrorType.DUPLICATE_ALIAS

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"A command with alias '{alias}' already exists")


class ReservedAliasError(OneLineError):
    """Alias collides with a reserved system command."""

    error_type = ErrorType.RESERVED_ALIAS

    def __init__(self, alias: str, suggestions: Optional[List[str]] = None):
        self.alias = alias
        self.suggestions = list(suggestions or [])
        super().__init__(f"Cannot use '{alias}' as alias - it's a system command")


class EmptyAliasError(OneLineError):
    error_type = ErrorType.EMPTY_ALIAS

    def __init__(self, message: str = "Alias cannot be empty"):
        super().__init__(message)


class CommandNotFoundError(OneLineError):
    error_type = ErrorType.NOT_FOUND

    def __init__(self, token: str, kind: str = "id"):
        self.token = token
        self.kind = kind
        super().__init__(f'Command with {kind} "{token}" not found')


class StepExecutionError(OneLineError):
    """
    A single step could not be launched or exited non-zero.

    Attributes:
        step: The shell text that was run
        return_code: Exit status, or None when the process never started
        stdout: Whatever the step printed before failing
        stderr: Whatever the step printed to stderr
        timed_out: True when the configured per-step timeout expired
    """

    error_type = ErrorType.STEP_EXECUTION

    def __init__(
        self,
        message: str,
        step: str = "",
        return_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ):
        self.step = step
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr
        self.timed_out = timed_out
        super().__init__(message)


class StoreWriteError(OneLineError):
    error_type = ErrorType.STORE_WRITE
