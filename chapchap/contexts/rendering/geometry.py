"""
Layout Geometry

Data structures shared by measurement, the Layout Engine and the backends.

Coordinates are PDF points measured top-down:
- PageFrame describes the page and its content area (margins)
- Block offsets (dx, dy) are relative to the block's top-left corner, which
  sits at the left edge of the content area
- PlacedBlock.y is the block's top relative to the top of the content area
- Page shapes use page coordinates (0, 0 = top-left corner of the page)

Backends convert to their own coordinate systems.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from reportlab.lib.pagesizes import A4, LETTER

PAGE_SIZES = {"A4": A4, "LETTER": LETTER}


def expand_hex(color: str) -> str:
    """Normalize "#RGB" to "#RRGGBB" (both backends accept the long form)."""
    if len(color) == 4 and color.startswith("#"):
        return "#" + "".join(c * 2 for c in color[1:])
    return color


@dataclass(frozen=True)
class TextStyle:
    """Text style with palette and font slots resolved to concrete values."""

    font: str
    size: float
    leading: float
    color: str
    uppercase: bool = False


@dataclass
class TextLine:
    """
    One run of text on a single baseline.

    Attributes:
        text: Text as drawn (already uppercased where the style asks for it)
        style: Key into LayoutResult.styles
        dx: Left edge of the text, from the block's left edge
        dy: Baseline, from the block's top edge
        width: Measured advance width
    """

    text: str
    style: str
    dx: float
    dy: float
    width: float


@dataclass
class Shape:
    """
    Non-text mark.

    kind is one of:
        rule:  thin filled rectangle (dividers)
        rect:  filled rectangle (bands, bars)
        box:   stroked rectangle outline
        image: raster image from `source` (file path or data: URL)
    """

    kind: str
    dx: float
    dy: float
    width: float
    height: float
    color: str = ""
    source: str = ""


@dataclass
class Block:
    """
    Atomic unit of layout: never split across pages.

    Attributes:
        index: Global position in the document's block sequence
        kind: identity, heading, line, bullet, entry_head or signature
        section_index: Index of the section this block belongs to
        height: Vertical extent, including any space reserved below the content
        width: Horizontal extent of the content (checked against the frame)
        space_before: Gap above the block; dropped when the block opens a page
        lines: Positioned text runs
        shapes: Positioned marks (rules, rectangles, images)
    """

    index: int
    kind: str
    section_index: int
    height: float
    width: float
    space_before: float = 0.0
    lines: List[TextLine] = field(default_factory=list)
    shapes: List[Shape] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(line.text for line in self.lines)


@dataclass
class BlockGroup:
    """
    Blocks the engine prefers to keep on one page.

    A single-block group is a paragraph line, a bullet or a header. An entry
    (head, detail lines, bullets) is a multi-block group; when it cannot fit
    on any page it is split at block boundaries, but its first `keep` blocks
    (head plus first bullet) always stay together.
    """

    blocks: List[Block]
    keep: int = 1

    @property
    def is_entry(self) -> bool:
        return len(self.blocks) > 1


@dataclass
class MeasuredSection:
    index: int
    kind: str
    heading: Optional[Block]
    groups: List[BlockGroup]

    @property
    def blocks(self) -> List[Block]:
        result = [self.heading] if self.heading else []
        for group in self.groups:
            result.extend(group.blocks)
        return result


@dataclass
class PageFrame:
    """Page size and margins; the content area is what remains."""

    width: float
    height: float
    margin_top: float
    margin_bottom: float
    margin_left: float
    margin_right: float
    # Decorations repeated on every page, in page coordinates
    page_shapes: List[Shape] = field(default_factory=list)

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom


@dataclass
class PlacedBlock:
    block: Block
    # Top of the block, from the top of the content area
    y: float


@dataclass
class Page:
    index: int
    blocks: List[PlacedBlock] = field(default_factory=list)
    used_height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.blocks


@dataclass
class LayoutResult:
    """
    Paginated document, ready for any backend.

    Equal inputs produce equal results (dataclass equality compares all
    geometry), which is what makes preview and export agree.
    """

    pages: List[Page]
    frame: PageFrame
    styles: Dict[str, TextStyle]
    title: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def block_order(self) -> List[int]:
        """Global block indices in placement order."""
        return [placed.block.index for page in self.pages for placed in page.blocks]

    def find_block(self, index: int) -> Optional[PlacedBlock]:
        for page in self.pages:
            for placed in page.blocks:
                if placed.block.index == index:
                    return placed
        return None

    def page_of(self, index: int) -> Optional[int]:
        """0-based page index holding a block, or None."""
        for page in self.pages:
            if any(placed.block.index == index for placed in page.blocks):
                return page.index
        return None

    def to_dict(self) -> Dict:
        """Plain summary of the page geometry (CLI output, previews)."""
        return {
            "title": self.title,
            "page_size": [round(self.frame.width, 2), round(self.frame.height, 2)],
            "content_height": round(self.frame.content_height, 2),
            "pages": [
                {
                    "index": page.index,
                    "used_height": round(page.used_height, 2),
                    "blocks": [
                        {
                            "index": placed.block.index,
                            "kind": placed.block.kind,
                            "section": placed.block.section_index,
                            "y": round(placed.y, 2),
                            "height": round(placed.block.height, 2),
                            "text": placed.block.text[:60],
                        }
                        for placed in page.blocks
                    ],
                }
                for page in self.pages
            ],
        }
