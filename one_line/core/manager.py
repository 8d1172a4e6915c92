"""
Command manager for one-line.

The single entry point front ends use: it composes CommandStorage and
CommandExecutor. CRUD calls raise the typed errors from ``errors``; run
calls never raise for a missing command or a failing step and report both
through ExecutionResult.
"""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .aliases import sanitize_command_name, validate_alias
from .errors import CommandNotFoundError
from .executor import CommandExecutor
from .models import Command, ExecutionResult, StepCallback, ValidationResult
from .storage import CommandStorage

logger = logging.getLogger(__name__)


def sort_for_completion(commands: Sequence[Command]) -> List[Command]:
    """Most used first, then alphabetical by alias."""
    return sorted(commands, key=lambda cmd: (-cmd.usage_count, cmd.alias))


class CommandManager:
    """
    Facade over storage and execution.

    Args:
        storage: Store to use
        executor: Executor to use; a default one when omitted
        track_usage: Increment a command's usage count after each
            successful run through this manager
    """

    def __init__(
        self,
        storage: CommandStorage,
        executor: Optional[CommandExecutor] = None,
        track_usage: bool = True,
    ) -> None:
        self._storage = storage
        self._executor = executor or CommandExecutor()
        self._track_usage = track_usage

    @classmethod
    def from_config(cls, config) -> 'CommandManager':
        """Build a manager from a ConfigManager."""
        return cls(
            storage=CommandStorage(Path(config.config_dir)),
            executor=CommandExecutor(
                shell=config.execution.shell,
                timeout=config.execution.step_timeout,
            ),
            track_usage=config.config.track_usage,
        )

    @property
    def storage(self) -> CommandStorage:
        return self._storage

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    # Storage operations

    def list_commands(self) -> List[Command]:
        """All saved commands in insertion order."""
        return self._storage.get_all_commands()

    def get_command_by_id(self, command_id: str) -> Optional[Command]:
        return self._storage.get_command_by_id(command_id)

    def get_command_by_name(self, name: str) -> Optional[Command]:
        return self._storage.get_command_by_name(name)

    def get_command_by_alias(self, alias: str) -> Optional[Command]:
        return self._storage.get_command_by_alias(alias)

    def find_command(self, token: str) -> Optional[Command]:
        """Resolve ``token`` as an id, then a name, then an alias."""
        return (
            self._storage.get_command_by_id(token)
            or self._storage.get_command_by_name(token)
            or self._storage.get_command_by_alias(token)
        )

    def check_alias(self, alias: str) -> ValidationResult:
        """Validate an alias against the aliases currently saved."""
        existing = [cmd.alias for cmd in self.list_commands()]
        return validate_alias(alias, existing, path_lookup=self._storage.path_lookup)

    def preview_alias(self, name: str) -> str:
        """Alias that create_command would derive from ``name``."""
        return sanitize_command_name(name)

    def create_command(self, name: str, steps: Sequence[str], alias: Optional[str] = None) -> Command:
        return self._storage.add_command(name, steps, alias)

    def rename_command(self, command_id: str, new_name: str) -> Command:
        return self._storage.update_command(command_id, name=new_name)

    def replace_steps(self, command_id: str, steps: Sequence[str]) -> Command:
        return self._storage.update_command(command_id, steps=steps)

    def update_command(
        self,
        command_id: str,
        name: Optional[str] = None,
        steps: Optional[Sequence[str]] = None,
    ) -> Command:
        return self._storage.update_command(command_id, name=name, steps=steps)

    def delete_command(self, command_id: str) -> bool:
        return self._storage.delete_command(command_id)

    def delete_command_by_name(self, name: str) -> bool:
        return self._storage.delete_command_by_name(name)

    def increment_usage(self, command_id: str) -> None:
        self._storage.increment_usage_count(command_id)

    def clear(self) -> None:
        self._storage.clear_all_commands()

    def completion_candidates(self) -> List[str]:
        """Aliases ordered for tab completion."""
        return [cmd.alias for cmd in sort_for_completion(self.list_commands())]

    # Execution operations

    def _run(
        self,
        command: Command,
        cwd: Optional[str],
        on_step_complete: Optional[StepCallback],
    ) -> ExecutionResult:
        logger.debug(f"Running command {command.alias!r} ({len(command.steps)} steps)")
        result = self._executor.execute_command(command, cwd, on_step_complete)
        if result.success and self._track_usage:
            self._storage.increment_usage_count(command.id)
        return result

    def run_command_by_id(
        self,
        command_id: str,
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        command = self._storage.get_command_by_id(command_id)
        if command is None:
            return ExecutionResult.not_found(CommandNotFoundError(command_id).message)
        return self._run(command, cwd, on_step_complete)

    def run_command_by_name(
        self,
        name: str,
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        """Resolve by name first, then by alias."""
        command = self._storage.get_command_by_name(name) or self._storage.get_command_by_alias(name)
        if command is None:
            return ExecutionResult.not_found(CommandNotFoundError(name, "name or alias").message)
        return self._run(command, cwd, on_step_complete)

    def run(
        self,
        token: str,
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        """Run the command identified by id, name or alias."""
        command = self.find_command(token)
        if command is None:
            return ExecutionResult.not_found(CommandNotFoundError(token, "id, name or alias").message)
        return self._run(command, cwd, on_step_complete)

    def run_steps(
        self,
        steps: Sequence[str],
        cwd: Optional[str] = None,
        on_step_complete: Optional[StepCallback] = None,
    ) -> ExecutionResult:
        """Run an unsaved list of steps."""
        return self._executor.execute_sequence(steps, cwd, on_step_complete)
