"""
Constants and configuration defaults for one-line.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "one-line"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "Combine multiple terminal commands into single named shortcuts"

HOME_ENV_VAR: Final[str] = "ONE_LINE_HOME"

# Used when HOME_ENV_VAR is unset; see config.resolve_config_dir.
DEFAULT_CONFIG_DIR: Final[Path] = Path.home() / ".one-line"
COMMANDS_FILENAME: Final[str] = "commands.json"
CONFIG_FILENAME: Final[str] = "config.json"

# Layout version written into commands.json. Files without one are version 0.
STORE_VERSION: Final[int] = 1

DEFAULT_POSIX_SHELL: Final[str] = "/bin/sh"
DEFAULT_WINDOWS_SHELL: Final[str] = "cmd.exe"
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

COMPLETION_MARKER: Final[str] = "_one_line_completion"

SUBCOMMANDS: Final[tuple] = ("list", "ls", "add", "run", "delete", "rm", "edit", "completion")
