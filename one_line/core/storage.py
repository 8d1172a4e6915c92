"""
Command storage for one-line.

Persists every saved Command as one JSON snapshot. Each mutation re-reads
the file, applies its change and writes the whole snapshot back through a
temp file and an atomic rename. There is no cross-process lock, so two
processes writing at once lose one update.
"""
import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..constants import COMMANDS_FILENAME, STORE_VERSION
from .aliases import check_command_in_path, sanitize_command_name, validate_alias
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
    StoreWriteError,
)
from .models import Command

logger = logging.getLogger(__name__)


class StoreVersionError(ValueError):
    """The store file was written by a newer release."""


def _name_key(name: str) -> str:
    """Key used to compare display names for uniqueness."""
    return sanitize_command_name(name) or name.strip().lower()


def upgrade_snapshot(data: Any) -> List[Dict[str, Any]]:
    """
    Bring a raw parsed file up to the current record layout.

    Records written before aliases existed get one derived from their name,
    and a missing usage count becomes zero. Nothing is written back.

    Args:
        data: Whatever json.load returned

    Returns:
        Upgraded record dicts, in file order

    Raises:
        StoreVersionError: If the file declares a newer layout version
        ValueError: If the top-level shape is wrong
    """
    if not isinstance(data, dict):
        raise ValueError("Store root must be an object")

    version = data.get("version", 0)
    if not isinstance(version, int):
        raise ValueError(f"Unsupported store version: {version!r}")
    if version > STORE_VERSION:
        raise StoreVersionError(f"Unsupported store version: {version!r}")

    records = data.get("commands", [])
    if not isinstance(records, list):
        raise ValueError("'commands' must be a list")

    upgraded: List[Dict[str, Any]] = []
    for raw in records:
        if not isinstance(raw, dict):
            raise ValueError("Command record must be an object")
        record = dict(raw)
        if not record.get("alias") and isinstance(record.get("name"), str):
            record["alias"] = sanitize_command_name(record["name"])
            logger.debug(f"Migrated command {record.get('id')!r}: derived alias {record['alias']!r}")
        if record.get("usageCount") is None:
            record["usageCount"] = 0
        upgraded.append(record)
    return upgraded


class CommandStorage:
    """
    File-backed store of Command records.

    Args:
        config_dir: Directory holding commands.json; created on first use
        path_lookup: PATH predicate handed to alias validation
    """

    def __init__(
        self,
        config_dir: Path,
        path_lookup: Callable[[str], bool] = check_command_in_path,
    ) -> None:
        self._config_dir = Path(config_dir)
        self._config_file = self._config_dir / COMMANDS_FILENAME
        self._path_lookup = path_lookup
        self._ensure_config_dir()

    @property
    def config_file(self) -> Path:
        """Path of the JSON snapshot."""
        return self._config_file

    @property
    def path_lookup(self) -> Callable[[str], bool]:
        return self._path_lookup

    def _ensure_config_dir(self) -> None:
        """Create the directory and an empty store if missing."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        if not self._config_file.exists():
            self._save_data([])

    def _load_data(self, for_update: bool = False) -> List[Command]:
        """
        Read the snapshot; any read or parse failure yields no commands.

        Args:
            for_update: The caller is about to write the snapshot back

        Raises:
            StoreWriteError: With ``for_update``, if the file comes from a
                newer release, since overwriting it would drop its records
        """
        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return [Command.from_dict(record) for record in upgrade_snapshot(data)]
        except FileNotFoundError:
            return []
        except StoreVersionError as e:
            if for_update:
                raise StoreWriteError(
                    f"Refusing to overwrite {self._config_file}: {e}. Upgrade one-line to modify it."
                ) from e
            logger.warning(f"Ignoring command store from a newer release {self._config_file}: {e}")
            return []
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable command store {self._config_file}: {e}")
            return []

    def _load_for_update(self) -> List[Command]:
        return self._load_data(for_update=True)

    def _save_data(self, commands: Sequence[Command]) -> None:
        """Replace the snapshot on disk with ``commands``."""
        data = {
            "version": STORE_VERSION,
            "commands": [command.to_dict() for command in commands],
        }
        self._config_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{COMMANDS_FILENAME}.", suffix=".tmp", dir=str(self._config_dir)
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self._config_file)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StoreWriteError(f"Failed to write {self._config_file}: {e}") from e

    def get_all_commands(self) -> List[Command]:
        """All saved commands in insertion order."""
        return self._load_data()

    def get_command_by_id(self, command_id: str) -> Optional[Command]:
        return next((cmd for cmd in self._load_data() if cmd.id == command_id), None)

    def get_command_by_name(self, name: str) -> Optional[Command]:
        """Exact name match, ignoring case."""
        wanted = name.lower()
        return next((cmd for cmd in self._load_data() if cmd.name.lower() == wanted), None)

    def get_command_by_alias(self, alias: str) -> Optional[Command]:
        """Exact alias match, ignoring case."""
        wanted = alias.lower()
        return next((cmd for cmd in self._load_data() if cmd.alias.lower() == wanted), None)

    @staticmethod
    def _check_steps(steps: Sequence[str]) -> List[str]:
        steps = list(steps or [])
        if not steps or any(not isinstance(s, str) or not s.strip() for s in steps):
            raise EmptyStepsError()
        return steps

    def add_command(
        self,
        name: str,
        steps: Sequence[str],
        alias: Optional[str] = None,
    ) -> Command:
        """
        Create and persist a new command.

        Args:
            name: Display name
            steps: Shell commands to run in order
            alias: Explicit alias; derived from the name when omitted

        Returns:
            The stored Command

        Raises:
            EmptyNameError, EmptyStepsError, DuplicateNameError,
            DuplicateAliasError, ReservedAliasError, EmptyAliasError
        """
        if not name or not name.strip():
            raise EmptyNameError()
        name = name.strip()
        steps = self._check_steps(steps)

        commands = self._load_for_update()

        key = _name_key(name)
        if any(_name_key(cmd.name) == key for cmd in commands):
            raise DuplicateNameError(name)

        command_alias = sanitize_command_name(alias) if alias else sanitize_command_name(name)
        if command_alias and any(cmd.alias.lower() == command_alias for cmd in commands):
            raise DuplicateAliasError(command_alias)

        validation = validate_alias(
            command_alias, [cmd.alias for cmd in commands], path_lookup=self._path_lookup
        )
        if not validation.valid:
            if validation.error_type == ErrorType.RESERVED_ALIAS:
                raise ReservedAliasError(command_alias, validation.suggestions)
            if validation.error_type == ErrorType.EMPTY_ALIAS:
                raise EmptyAliasError()
            if validation.error_type == ErrorType.DUPLICATE_ALIAS:
                raise DuplicateAliasError(command_alias)
            raise OneLineError(validation.error or "Invalid alias")
        if validation.warning:
            logger.warning(validation.warning)

        command = Command(
            id=str(uuid.uuid4()),
            name=name,
            alias=command_alias,
            steps=steps,
            created_at=datetime.now(timezone.utc).isoformat(),
            usage_count=0,
        )
        commands.append(command)
        self._save_data(commands)
        logger.debug(f"Added command {command.alias!r} ({command.id})")
        return command

    def update_command(
        self,
        command_id: str,
        name: Optional[str] = None,
        steps: Optional[Sequence[str]] = None,
    ) -> Command:
        """
        Rename a command and/or replace its steps. The alias is kept.

        Raises:
            CommandNotFoundError, EmptyNameError, EmptyStepsError, DuplicateNameError
        """
        commands = self._load_for_update()
        command = next((cmd for cmd in commands if cmd.id == command_id), None)
        if command is None:
            raise CommandNotFoundError(command_id)

        new_name = None
        if name is not None:
            if not name.strip():
                raise EmptyNameError()
            new_name = name.strip()
            key = _name_key(new_name)
            if any(cmd.id != command_id and _name_key(cmd.name) == key for cmd in commands):
                raise DuplicateNameError(new_name)

        new_steps = self._check_steps(steps) if steps is not None else None

        if new_name is not None:
            command.name = new_name
        if new_steps is not None:
            command.steps = new_steps

        self._save_data(commands)
        return command

    def increment_usage_count(self, command_id: str) -> None:
        """Bump the usage counter; unknown ids are ignored."""
        commands = self._load_for_update()
        for cmd in commands:
            if cmd.id == command_id:
                cmd.usage_count += 1
                self._save_data(commands)
                return

    def delete_command(self, command_id: str) -> bool:
        """
        Remove a command.

        Returns:
            True if a command was removed
        """
        commands = self._load_for_update()
        remaining = [cmd for cmd in commands if cmd.id != command_id]
        if len(remaining) == len(commands):
            return False
        self._save_data(remaining)
        return True

    def delete_command_by_name(self, name: str) -> bool:
        command = self.get_command_by_name(name)
        if command is None:
            return False
        return self.delete_command(command.id)

    def clear_all_commands(self) -> None:
        """Replace the snapshot with an empty one."""
        self._load_for_update()
        self._save_data([])
