"""
Rendering Context

Responsibilities:
- Measures sections into atomic blocks with real font metrics
- Paginates blocks onto fixed-size pages (Layout Engine)
- Draws pages to PDF bytes through interchangeable backends
- Saves generated documents and records generation events
- Checks a rendered PDF against the layout it came from

Owns: Page geometry, pagination, PDF output
Never: Changes document content or section order
"""

from chapchap.contexts.rendering.backends import RenderOutput, available_backends, get_backend
from chapchap.contexts.rendering.exceptions import (
    LayoutError,
    RenderBackendError,
    RenderTimeoutError,
)
from chapchap.contexts.rendering.geometry import LayoutResult
from chapchap.contexts.rendering.layout_diagnostics import DocumentDiagnostics, analyze_layout
from chapchap.contexts.rendering.layout_engine import LayoutEngine, paginate
from chapchap.contexts.rendering.renderer import (
    USER_ERROR_MESSAGE,
    GenerationResult,
    generate_batch,
    generate_document,
    layout,
    render,
)

__all__ = [
    # Entry points
    "render",
    "layout",
    "generate_document",
    "generate_batch",
    "GenerationResult",
    "USER_ERROR_MESSAGE",
    # Layout
    "LayoutEngine",
    "LayoutResult",
    "paginate",
    # Backends
    "RenderOutput",
    "get_backend",
    "available_backends",
    # Diagnostics
    "analyze_layout",
    "DocumentDiagnostics",
    # Errors
    "LayoutError",
    "RenderBackendError",
    "RenderTimeoutError",
]
