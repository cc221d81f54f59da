"""
Drafting context logger.

Provides logging interface for the drafting context with automatic [draft] prefix.
All drafting modules should import from this module, not from loguru directly.
"""

from pathlib import Path

from loguru import logger

from chapchap.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[draft]"


def setup_drafting_logger(log_dir: Path) -> Path:
    """Setup logger for the drafting context. Returns path to log file."""
    return _setup_logger(context_name="draft", log_dir=log_dir)


def _log_info(message: str) -> None:
    """Log info message with [draft] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [draft] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [draft] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
