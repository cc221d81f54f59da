"""Custom exceptions for rendering context with block and backend references."""

from typing import Optional

from chapchap.exceptions import DocumentGenerationError


class LayoutError(DocumentGenerationError):
    """
    Exception raised when an atomic block cannot be placed on an empty page.

    Attributes:
        reason: What made the block unplaceable (too tall, too wide, ...)
        block_index: Global index of the offending block
        section_index: Index of the section the block belongs to
    """

    kind = "layout_error"

    def __init__(
        self,
        reason: str,
        block_index: Optional[int] = None,
        section_index: Optional[int] = None,
    ):
        self.reason = reason
        self.block_index = block_index
        self.section_index = section_index

        parts = [reason]
        if block_index is not None:
            parts.append(f"Block: {block_index}")
        if section_index is not None:
            parts.append(f"Section: {section_index}")

        super().__init__("\n".join(parts))


class RenderBackendError(DocumentGenerationError):
    """
    Exception raised when a backend cannot turn a layout into PDF bytes.

    Attributes:
        message: Error description
        backend: Backend name
        original_error: The underlying library error, if any
    """

    kind = "render_backend_error"

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.backend = backend
        self.original_error = original_error

        parts = [message]
        if backend:
            parts.append(f"Backend: {backend}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class RenderTimeoutError(RenderBackendError):
    """Exception raised when rendering exceeds the caller's time limit."""

    kind = "render_timeout"

    def __init__(self, timeout_s: float, backend: Optional[str] = None):
        self.timeout_s = timeout_s
        super().__init__(f"Rendering exceeded {timeout_s}s", backend=backend)
