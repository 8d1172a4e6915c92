"""
Alias derivation and safety checks.

Turns display names into shell-safe aliases and rejects aliases that would
shadow shell built-ins or common tools.
"""
import logging
import re
import shutil
from typing import Callable, Iterable, List, Optional

from ..constants import APP_NAME
from .errors import ErrorType
from .models import ValidationResult

logger = logging.getLogger(__name__)

RESERVED_COMMANDS = frozenset({
    # Shell built-ins
    'cd', 'pwd', 'echo', 'exit', 'source', 'alias', 'export', 'history', 'set', 'unset',
    # File operations
    'ls', 'cat', 'grep', 'find', 'chmod', 'chown', 'sudo', 'su',
    'cp', 'mv', 'rm', 'mkdir', 'rmdir', 'touch', 'ln', 'less', 'more', 'head', 'tail',
    # Development tools
    'git', 'npm', 'node', 'python', 'pip', 'cargo', 'go', 'java', 'ruby', 'php',
    'docker', 'kubectl', 'terraform', 'ansible', 'make', 'cmake',
    # Package managers
    'apt', 'yum', 'brew', 'pacman', 'dnf', 'snap',
    # System utilities
    'kill', 'ps', 'top', 'htop', 'ssh', 'scp', 'curl', 'wget',
    APP_NAME,
})

# Prefixes that tend to collide, mapped to their one-letter abbreviation.
HIGH_COLLISION_PREFIXES = {
    'git': 'g',
    'npm': 'n',
    'docker': 'd',
    'kubectl': 'k',
}

MAX_SUGGESTIONS = 3

_NON_ALNUM_RUN = re.compile(r'[^a-z0-9]+')


def sanitize_command_name(name: str) -> str:
    """
    Convert a command name to a shell-safe alias.

    Lower-cases, trims, collapses every run of characters outside
    ``[a-z0-9]`` into one hyphen and strips hyphens from both ends.
    "Build My Program" becomes "build-my-program".

    Args:
        name: Display name

    Returns:
        Alias, possibly empty
    """
    return _NON_ALNUM_RUN.sub('-', name.lower().strip()).strip('-')


def needs_sanitization(name: str) -> bool:
    """Check if a name differs from its sanitized alias."""
    return name != sanitize_command_name(name)


def is_reserved_command(alias: str) -> bool:
    """Check if an alias is a reserved system command."""
    return alias.lower() in RESERVED_COMMANDS


def check_command_in_path(alias: str) -> bool:
    """
    Check if an executable with this name exists on PATH.

    Not finding one is not an error.
    """
    if not alias:
        return False
    try:
        return shutil.which(alias) is not None
    except OSError as e:
        logger.debug(f"PATH lookup for {alias!r} failed: {e}")
        return False


def suggest_alternatives(original_alias: str) -> List[str]:
    """
    Generate up to three alternative aliases.

    Args:
        original_alias: The rejected alias

    Returns:
        Distinct suggestions, none equal to the original
    """
    suggestions: List[str] = []

    for prefix, abbreviation in HIGH_COLLISION_PREFIXES.items():
        if original_alias.startswith(prefix):
            suggestions.append('my' + original_alias)
            suggestions.append(original_alias.replace(prefix, abbreviation, 1))
            break

    suggestions.append(f"my-{original_alias}")
    suggestions.append(f"{original_alias}-cmd")
    suggestions.append(f"{original_alias}1")

    if '-' in original_alias:
        parts = [p for p in original_alias.split('-') if p]
        abbreviated = ''.join(p[0] for p in parts)
        if len(abbreviated) >= 2 and abbreviated != original_alias:
            suggestions.append(abbreviated)

    unique: List[str] = []
    for suggestion in suggestions:
        if suggestion and suggestion != original_alias and suggestion not in unique:
            unique.append(suggestion)
    return unique[:MAX_SUGGESTIONS]


def validate_alias(
    alias: Optional[str],
    existing_aliases: Iterable[str],
    path_lookup: Callable[[str], bool] = check_command_in_path,
) -> ValidationResult:
    """
    Validate an alias for safety and conflicts.

    Args:
        alias: Candidate alias
        existing_aliases: Aliases already in the store
        path_lookup: Predicate telling whether a name is on PATH

    Returns:
        ValidationResult; a PATH collision is only a warning
    """
    if not alias or not alias.strip():
        return ValidationResult(
            valid=False,
            error="Alias cannot be empty",
            error_type=ErrorType.EMPTY_ALIAS,
        )

    if is_reserved_command(alias):
        return ValidationResult(
            valid=False,
            error=f"Cannot use '{alias}' as alias - it's a system command",
            error_type=ErrorType.RESERVED_ALIAS,
            suggestions=suggest_alternatives(alias),
        )

    lowered = alias.lower()
    if any(existing.lower() == lowered for existing in existing_aliases):
        return ValidationResult(
            valid=False,
            error=f"A command with alias '{alias}' already exists",
            error_type=ErrorType.DUPLICATE_ALIAS,
        )

    if path_lookup(alias):
        return ValidationResult(
            valid=True,
            warning=f"Command '{alias}' already exists in your PATH",
        )

    return ValidationResult(valid=True)
