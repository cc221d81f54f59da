"""
Renderer Backend interface and registry.

A backend turns a LayoutResult into PDF bytes. Backends never make layout
decisions: they draw every placed block at the position the Layout Engine
computed, page by page. Implementations register themselves by name and are
looked up with get_backend(), so call sites never branch on backend type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Type

from chapchap.contexts.rendering.exceptions import RenderBackendError
from chapchap.contexts.rendering.geometry import LayoutResult, PageFrame, PlacedBlock


@dataclass
class RenderOutput:
    """
    Result of drawing a layout.

    Attributes:
        pdf_bytes: Complete PDF document
        page_count: Pages written (always equals the layout's page count)
        block_order: Global block indices in the order they were drawn
    """

    pdf_bytes: bytes
    page_count: int
    block_order: List[int] = field(default_factory=list)


class RenderBackend(ABC):
    """Base class for renderer backends."""

    name: str = ""

    @abstractmethod
    def render(self, layout: LayoutResult) -> RenderOutput:
        """
        Draw a layout to PDF bytes.

        Raises:
            RenderBackendError: If drawing fails (unsupported glyph, bad image, ...)
        """

    @staticmethod
    def block_origin(frame: PageFrame, placed: PlacedBlock) -> tuple:
        """Top-left corner of a placed block in top-down page coordinates."""
        return frame.margin_left, frame.margin_top + placed.y


_BACKENDS: Dict[str, Type[RenderBackend]] = {}


def register_backend(name: str) -> Callable[[Type[RenderBackend]], Type[RenderBackend]]:
    """Class decorator registering a backend under a name."""

    def decorator(cls: Type[RenderBackend]) -> Type[RenderBackend]:
        cls.name = name
        _BACKENDS[name] = cls
        return cls

    return decorator


def available_backends() -> List[str]:
    return sorted(_BACKENDS)


def get_backend(name: str, **options) -> RenderBackend:
    """
    Instantiate a registered backend.

    Raises:
        RenderBackendError: If no backend is registered under that name
    """
    if name not in _BACKENDS:
        raise RenderBackendError(
            f"Unknown render backend '{name}' (available: {', '.join(available_backends())})",
            backend=name,
        )
    return _BACKENDS[name](**options)
