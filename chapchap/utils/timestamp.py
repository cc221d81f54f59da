"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Timestamp for directory names, e.g. 20251114_123456."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, used for event records."""
    return datetime.now().isoformat()


def today() -> str:
    """Date for dated output folders, e.g. 2025-11-14."""
    return datetime.now().strftime("%Y-%m-%d")


def long_date() -> str:
    """Date as written in a letter, e.g. November 14, 2025."""
    current = datetime.now()
    return f"{current:%B} {current.day}, {current.year}"
