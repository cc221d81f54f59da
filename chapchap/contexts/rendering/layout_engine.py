"""
Layout Engine

Places measured blocks onto fixed-size pages. Greedy, single pass over the
sections in order, no backtracking:

1. A running vertical offset is kept per page against the content height;
   a block's space_before is dropped when it opens a page.
2. A heading is only placed together with the first content chunk of its
   section (its first group, or the first `keep` blocks of a split entry).
   If they do not fit in the remaining space they move to the next page.
3. A group (an entry, a paragraph line, a bullet) moves to the next page
   whole when it does not fit. An entry taller than an empty page is split
   at block boundaries starting on the current page, keeping its head with
   its first bullet.
4. A block that cannot fit on an empty page (too tall or too wide) raises
   LayoutError with its global index. Nothing is dropped or clipped.
"""

from typing import Dict, List, Optional

from chapchap.contexts.rendering.exceptions import LayoutError
from chapchap.contexts.rendering.geometry import (
    Block,
    BlockGroup,
    LayoutResult,
    MeasuredSection,
    Page,
    PageFrame,
    PlacedBlock,
    TextStyle,
)
from chapchap.contexts.rendering.logger import _log_debug

# Rounding slack when comparing accumulated float heights
EPSILON = 0.01


def _stack_height(blocks: List[Block], at_top: bool) -> float:
    """Height of blocks stacked in order, first space_before dropped at page top."""
    total = 0.0
    for position, block in enumerate(blocks):
        if position > 0 or not at_top:
            total += block.space_before
        total += block.height
    return total


class LayoutEngine:
    """
    Paginates measured sections for one page frame.

    Example:
        >>> engine = LayoutEngine(frame)
        >>> result = engine.paginate(measured_sections, styles)
        >>> result.page_count
        1
    """

    def __init__(self, frame: PageFrame):
        self.frame = frame
        self.capacity = frame.content_height
        self.pages: List[Page] = []
        self.page: Optional[Page] = None

    # =========================================================================
    # Cursor
    # =========================================================================

    def _new_page(self) -> None:
        self.page = Page(index=len(self.pages))
        self.pages.append(self.page)

    def _remaining(self) -> float:
        return self.capacity - self.page.used_height

    def _fits(self, blocks: List[Block]) -> bool:
        return _stack_height(blocks, self.page.is_empty) <= self._remaining() + EPSILON

    def _place(self, block: Block) -> None:
        y = self.page.used_height
        if not self.page.is_empty:
            y += block.space_before
        self.page.blocks.append(PlacedBlock(block=block, y=y))
        self.page.used_height = y + block.height

    def _check_block(self, block: Block) -> None:
        """Reject blocks that no page could ever hold."""
        if block.width > self.frame.content_width + EPSILON:
            raise LayoutError(
                f"Block is wider than the content area ({block.width:.1f} > {self.frame.content_width:.1f} pt)",
                block_index=block.index,
                section_index=block.section_index,
            )
        if block.height > self.capacity + EPSILON:
            raise LayoutError(
                f"Block is taller than an empty page ({block.height:.1f} > {self.capacity:.1f} pt)",
                block_index=block.index,
                section_index=block.section_index,
            )

    def _place_together(self, blocks: List[Block]) -> None:
        """Place blocks on one page: here if they fit, else on a fresh page."""
        if not self._fits(blocks):
            if self.page.is_empty:
                raise LayoutError(
                    "Blocks that must stay together do not fit on an empty page",
                    block_index=blocks[0].index,
                    section_index=blocks[0].section_index,
                )
            self._new_page()
            if not self._fits(blocks):
                raise LayoutError(
                    "Blocks that must stay together do not fit on an empty page",
                    block_index=blocks[0].index,
                    section_index=blocks[0].section_index,
                )
        for block in blocks:
            self._place(block)

    # =========================================================================
    # Groups
    # =========================================================================

    def _place_group(self, group: BlockGroup, heading: Optional[Block]) -> None:
        leading = [heading] if heading else []
        unit = leading + group.blocks

        if self._fits(unit):
            for block in unit:
                self._place(block)
            return

        if _stack_height(unit, at_top=True) <= self.capacity + EPSILON or not group.is_entry:
            # Fits on an empty page (or cannot be split): move it whole
            self._place_together(unit)
            return

        # Entry taller than a page, or a heading that cannot share an empty
        # page with it: split at block boundaries
        _log_debug(f"Splitting entry at block {group.blocks[0].index} across pages")
        self._place_together(leading + group.blocks[: group.keep])
        for block in group.blocks[group.keep :]:
            self._place_together([block])

    def paginate(self, sections: List[MeasuredSection], styles: Dict[str, TextStyle],
                 title: str = "") -> LayoutResult:
        """
        Lay out sections onto pages.

        Args:
            sections: Measured sections in document order
            styles: Resolved text styles (passed through to the result)
            title: Document title for the PDF metadata

        Returns:
            LayoutResult with at least one page

        Raises:
            LayoutError: If a block cannot fit on an empty page
        """
        self.pages = []
        self._new_page()

        for section in sections:
            for block in section.blocks:
                self._check_block(block)

            if not section.groups:
                if section.heading:
                    self._place_together([section.heading])
                continue

            for position, group in enumerate(section.groups):
                self._place_group(group, section.heading if position == 0 else None)

        _log_debug(
            f"Laid out {sum(len(s.blocks) for s in sections)} blocks on {len(self.pages)} page(s)"
        )
        return LayoutResult(pages=self.pages, frame=self.frame, styles=dict(styles), title=title)


def paginate(sections: List[MeasuredSection], frame: PageFrame, styles: Dict[str, TextStyle],
             title: str = "") -> LayoutResult:
    """Convenience wrapper: paginate with a fresh engine."""
    return LayoutEngine(frame).paginate(sections, styles, title=title)
