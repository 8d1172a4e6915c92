"""
Utility functions for one-line.
"""
import sys
from datetime import datetime
from typing import Optional


def truncate_string(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The string to truncate
        max_length: Maximum length of the output string
        suffix: Suffix to append when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def format_timestamp(iso_timestamp: Optional[str], fmt: str = "%Y-%m-%d %H:%M") -> str:
    """
    Format an ISO-8601 timestamp for display in local time.

    Unparseable input is returned unchanged.
    """
    if not iso_timestamp:
        return ""
    try:
        parsed = datetime.fromisoformat(iso_timestamp.replace('Z', '+00:00'))
    except ValueError:
        return iso_timestamp
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime(fmt)


def pluralize(count: int, word: str) -> str:
    """'1 step', '2 steps'."""
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform == 'win32'


def is_macos() -> bool:
    """Check if running on macOS."""
    return sys.platform == 'darwin'
