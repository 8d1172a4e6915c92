"""
Configuration management for one-line.
Handles loading, saving, and accessing configuration from a JSON file and environment variables.
"""
import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_DIR,
    DEFAULT_LOG_LEVEL,
    HOME_ENV_VAR,
)

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def resolve_config_dir(config_dir: Optional[Path] = None) -> Path:
    """
    Resolve the per-user configuration directory.

    Args:
        config_dir: Explicit directory; wins over everything else

    Returns:
        The explicit directory, else $ONE_LINE_HOME, else ~/.one-line
    """
    if config_dir is not None:
        return Path(config_dir).expanduser()
    env_dir = os.environ.get(HOME_ENV_VAR, "").strip()
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_CONFIG_DIR


@dataclass
class ExecutionConfig:
    """Step execution settings."""
    shell: Optional[str] = None
    step_timeout: Optional[float] = None


def _execution_from_dict(data: Any) -> ExecutionConfig:
    """
    Build an ExecutionConfig from the file's "execution" section.

    A numeric string timeout such as "30" is accepted.

    Raises:
        TypeError: If the section or a value has the wrong type
        ValueError: If step_timeout is not a positive number
    """
    config = ExecutionConfig(**data)

    if config.shell is not None and not isinstance(config.shell, str):
        raise TypeError(f"execution.shell must be a string, got {config.shell!r}")

    timeout = config.step_timeout
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float, str)):
            raise TypeError(f"execution.step_timeout must be a number, got {timeout!r}")
        timeout = float(timeout)
        if timeout <= 0:
            raise ValueError(f"execution.step_timeout must be positive, got {timeout}")
        config.step_timeout = timeout
    return config


@dataclass
class UIConfig:
    """CLI rendering settings."""
    show_output: bool = True
    confirm_delete: bool = True


@dataclass
class AppConfig:
    """Main application configuration."""
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    track_usage: bool = True
    log_level: str = DEFAULT_LOG_LEVEL


class ConfigManager:
    """
    Manages application configuration with support for a JSON file and environment variables.

    Environment variables take precedence over config file values.
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = resolve_config_dir(config_dir)
        self._config_file = self._config_dir / CONFIG_FILENAME
        self._config: AppConfig = AppConfig()
        self._load_config()
        self._load_env_vars()

    @property
    def config_dir(self) -> Path:
        """Directory holding config.json and commands.json."""
        return self._config_dir

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        if not self._config_file.exists():
            return

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if 'execution' in data:
                self._config.execution = _execution_from_dict(data['execution'])
            if 'ui' in data:
                self._config.ui = UIConfig(**data['ui'])
            if 'track_usage' in data:
                self._config.track_usage = bool(data['track_usage'])
            if 'log_level' in data:
                self._config.log_level = str(data['log_level'])
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load config file {self._config_file}: {e}")
            self._config = AppConfig()

    def _load_env_vars(self) -> None:
        """Apply ONE_LINE_* environment overrides."""
        shell = os.environ.get("ONE_LINE_SHELL", "").strip()
        if shell:
            self._config.execution.shell = shell

        level = os.environ.get("ONE_LINE_LOG_LEVEL", "").strip()
        if level:
            self._config.log_level = level.upper()

        track = os.environ.get("ONE_LINE_TRACK_USAGE", "").strip().lower()
        if track in _TRUTHY:
            self._config.track_usage = True
        elif track in _FALSY:
            self._config.track_usage = False

    def _save_config(self) -> None:
        """Save current configuration to JSON file."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        data = {
            'execution': asdict(self._config.execution),
            'ui': asdict(self._config.ui),
            'track_usage': self._config.track_usage,
            'log_level': self._config.log_level,
        }

        with open(self._config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self._config

    @property
    def execution(self) -> ExecutionConfig:
        return self._config.execution

    @property
    def ui(self) -> UIConfig:
        return self._config.ui

    def update_execution(self, **kwargs: Any) -> None:
        """Update execution configuration."""
        for key, value in kwargs.items():
            if hasattr(self._config.execution, key):
                setattr(self._config.execution, key, value)
        self._save_config()

    def update_ui(self, **kwargs: Any) -> None:
        """Update UI configuration."""
        for key, value in kwargs.items():
            if hasattr(self._config.ui, key):
                setattr(self._config.ui, key, value)
        self._save_config()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = AppConfig()
        self._load_config()
        self._load_env_vars()

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._config = AppConfig()
        self._save_config()


_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the CLI's default configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
