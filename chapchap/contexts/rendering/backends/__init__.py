"""
Renderer Backends

Importing this package registers every built-in backend:
- primitive: vector PDF drawn with the reportlab canvas
- raster: Pillow-painted pages embedded as full-page images
"""

from chapchap.contexts.rendering.backends import primitive, raster  # noqa: F401
from chapchap.contexts.rendering.backends.base import (
    RenderBackend,
    RenderOutput,
    available_backends,
    get_backend,
    register_backend,
)

__all__ = [
    "RenderBackend",
    "RenderOutput",
    "available_backends",
    "get_backend",
    "register_backend",
]
