"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from chapchap.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Render backend": os.getenv("RENDER_BACKEND", "primitive")},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(document_name: str, template_id: str, backend: str, log_file: Path = None) -> None:
    """Log start of a generation run with context."""
    _log_info(f"Starting generation: {document_name}")
    if log_file:
        _log_info(f"Log file: {log_file}")
    _log_debug(f"  Template: {template_id}")
    _log_debug(f"  Backend: {backend}")


def log_render_result(document_name: str, result, elapsed_time: float) -> None:
    """
    Log generation result with the internal error details.

    Args:
        document_name: Document identifier
        result: GenerationResult from generate_document()
        elapsed_time: Time taken
    """
    if result.success:
        _log_success(f"{document_name}: {result.page_count} page(s) ({elapsed_time:.2f}s)")
        if result.pdf_path:
            _log_debug(f"  PDF: {result.pdf_path}")
        return

    _log_error(f"Generation failed: {document_name} ({elapsed_time:.2f}s)")
    _log_error(f"  Kind: {result.error_kind}")
    if result.block_index is not None:
        _log_error(f"  Block: {result.block_index}")
    if result.error:
        # Multi-line error messages are logged raw to keep their layout
        logger.opt(raw=True).debug(f"\n{'=' * 80}\nERROR DETAIL:\n{'=' * 80}\n{result.error}\n")
