"""Command registry and execution core for one-line."""
from .aliases import (
    RESERVED_COMMANDS,
    check_command_in_path,
    is_reserved_command,
    needs_sanitization,
    sanitize_command_name,
    suggest_alternatives,
    validate_alias,
)
from .errors import (
    CommandNotFoundError,
    DuplicateAliasError,
    DuplicateNameError,
    EmptyAliasError,
    EmptyNameError,
    EmptyStepsError,
    ErrorType,
    OneLineError,
    ReservedAliasError,
    StepExecutionError,
    StoreWriteError,
)
from .executor import CommandExecutor
from .manager import CommandManager, sort_for_completion
from .models import Command, ExecutionResult, StepOutcome, StepOutput, ValidationResult
from .storage import CommandStorage

__all__ = [
    'RESERVED_COMMANDS', 'check_command_in_path', 'is_reserved_command',
    'needs_sanitization', 'sanitize_command_name', 'suggest_alternatives', 'validate_alias',
    'CommandNotFoundError', 'DuplicateAliasError', 'DuplicateNameError', 'EmptyAliasError',
    'EmptyNameError', 'EmptyStepsError', 'ErrorType', 'OneLineError', 'ReservedAliasError',
    'StepExecutionError', 'StoreWriteError',
    'CommandExecutor',
    'CommandManager', 'sort_for_completion',
    'Command', 'ExecutionResult', 'StepOutcome', 'StepOutput', 'ValidationResult',
    'CommandStorage',
]
