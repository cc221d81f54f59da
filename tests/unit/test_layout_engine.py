"""Unit tests for the Layout Engine, on hand-built blocks and a small page frame."""

import pytest

from chapchap.contexts.rendering import LayoutEngine, LayoutError, paginate
from chapchap.contexts.rendering.geometry import (
    Block,
    BlockGroup,
    MeasuredSection,
    PageFrame,
    TextLine,
    TextStyle,
)

STYLES = {"body": TextStyle(font="Helvetica", size=10, leading=10, color="#000000")}


def _frame(content_height: float = 100, content_width: float = 200) -> PageFrame:
    return PageFrame(
        width=content_width + 20,
        height=content_height + 20,
        margin_top=10,
        margin_bottom=10,
        margin_left=10,
        margin_right=10,
    )


class BlockFactory:
    """Numbers blocks in creation order, like the measurer does."""

    def __init__(self):
        self.next_index = 0

    def block(self, kind: str, section: int, height: float = 10, space_before: float = 0,
              width: float = 50) -> Block:
        block = Block(
            index=self.next_index,
            kind=kind,
            section_index=section,
            height=height,
            width=width,
            space_before=space_before,
            lines=[TextLine(f"{kind} {self.next_index}", "body", 0, 8, width)],
        )
        self.next_index += 1
        return block

    def heading(self, section: int, **kwargs) -> Block:
        return self.block("heading", section, **kwargs)

    def lines(self, section: int, count: int, **kwargs):
        return [BlockGroup([self.block("line", section, **kwargs)]) for _ in range(count)]

    def entry(self, section: int, bullets: int, **kwargs) -> BlockGroup:
        blocks = [self.block("entry_head", section, **kwargs)]
        blocks += [self.block("bullet", section, **kwargs) for _ in range(bullets)]
        return BlockGroup(blocks, keep=min(2, len(blocks)))


def _kinds(page):
    return [placed.block.kind for placed in page.blocks]


def _total_blocks(sections):
    return sum(len(section.blocks) for section in sections)


@pytest.mark.unit
def test_single_page():
    """Test that content shorter than a page stays on one page."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "header", None, [BlockGroup([f.block("identity", 0, height=30)])]),
        MeasuredSection(1, "summary", f.heading(1), f.lines(1, 3)),
    ]
    result = paginate(sections, _frame(), STYLES)

    assert result.page_count == 1
    assert result.block_order() == [0, 1, 2, 3, 4]
    assert [placed.y for placed in result.pages[0].blocks] == [0, 30, 40, 50, 60]
    assert result.pages[0].used_height == 70


@pytest.mark.unit
def test_content_conservation_across_pages():
    """Test that every block is placed exactly once, in order."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", f.heading(0), f.lines(0, 14)),
        MeasuredSection(1, "experience", f.heading(1), [f.entry(1, 3), f.entry(1, 4)]),
        MeasuredSection(2, "skills", f.heading(2), f.lines(2, 9)),
    ]
    result = paginate(sections, _frame(), STYLES)

    assert result.page_count > 1
    assert result.block_order() == list(range(_total_blocks(sections)))
    for page in result.pages:
        assert page.used_height <= 100 + 0.01


@pytest.mark.unit
def test_space_before_dropped_at_page_top():
    """Test that a block opening a page ignores its space_before."""
    f = BlockFactory()
    groups = [BlockGroup([f.block("line", 0, height=40, space_before=15)]) for _ in range(3)]
    result = paginate([MeasuredSection(0, "summary", None, groups)], _frame(), STYLES)

    assert result.page_count == 2
    assert [placed.y for placed in result.pages[0].blocks] == [0, 55]
    assert [placed.y for placed in result.pages[1].blocks] == [0]


@pytest.mark.unit
def test_orphan_heading_moves_to_next_page():
    """Test that a heading never ends a page without its first content."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", None, f.lines(0, 8)),
        MeasuredSection(1, "skills", f.heading(1), f.lines(1, 2, height=15)),
    ]
    result = paginate(sections, _frame(), STYLES)

    # 80 used: heading (10) + first line (15) would need 105
    assert _kinds(result.pages[0]) == ["line"] * 8
    assert _kinds(result.pages[1]) == ["heading", "line", "line"]


@pytest.mark.unit
def test_no_page_ends_with_heading():
    """Test the orphan-heading rule across many section boundaries."""
    f = BlockFactory()
    sections = [
        MeasuredSection(index, "summary", f.heading(index), f.lines(index, count))
        for index, count in enumerate([3, 5, 2, 7, 1, 4, 6, 2])
    ]
    result = paginate(sections, _frame(), STYLES)

    assert result.page_count > 1
    for page in result.pages:
        assert page.blocks[-1].block.kind != "heading"


@pytest.mark.unit
def test_entry_moves_whole():
    """Test that an entry that fits on a page is never split."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", None, f.lines(0, 5)),
        MeasuredSection(1, "experience", f.heading(1), [f.entry(1, 3), f.entry(1, 5)]),
    ]
    result = paginate(sections, _frame(), STYLES)

    # Page 1: 5 lines + heading + first entry (4 blocks) = 100
    assert _kinds(result.pages[0]) == ["line"] * 5 + ["heading", "entry_head", "bullet", "bullet", "bullet"]
    assert _kinds(result.pages[1]) == ["entry_head"] + ["bullet"] * 5


@pytest.mark.unit
def test_oversized_entry_splits_at_bullets():
    """Test one entry with 12 bullets where only 8 fit on page 1."""
    f = BlockFactory()
    heading = f.heading(0)
    entry = f.entry(0, 12)
    result = paginate([MeasuredSection(0, "experience", heading, [entry])], _frame(), STYLES)

    assert result.page_count == 2
    assert _kinds(result.pages[0]) == ["heading", "entry_head"] + ["bullet"] * 8
    # The heading is not repeated on the continuation page
    assert _kinds(result.pages[1]) == ["bullet"] * 4
    assert result.block_order() == list(range(14))


@pytest.mark.unit
def test_split_entry_starts_on_current_page():
    """Test that a split entry fills the current page before breaking."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", None, f.lines(0, 4)),
        MeasuredSection(1, "experience", f.heading(1), [f.entry(1, 12)]),
    ]
    result = paginate(sections, _frame(), STYLES)

    assert _kinds(result.pages[0]) == ["line"] * 4 + ["heading", "entry_head"] + ["bullet"] * 4
    assert _kinds(result.pages[1]) == ["bullet"] * 8


@pytest.mark.unit
def test_entry_head_keeps_first_bullet():
    """Test that an entry head is never the last block of a page when split."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", None, f.lines(0, 9)),
        MeasuredSection(1, "experience", None, [f.entry(1, 11)]),
    ]
    result = paginate(sections, _frame(), STYLES)

    # Only one slot left on page 1: head and first bullet move together
    assert _kinds(result.pages[0]) == ["line"] * 9
    assert _kinds(result.pages[1])[:2] == ["entry_head", "bullet"]
    assert result.block_order() == list(range(_total_blocks(sections)))


@pytest.mark.unit
def test_heading_only_section():
    """Test a section with a heading and no groups."""
    f = BlockFactory()
    result = paginate([MeasuredSection(0, "summary", f.heading(0), [])], _frame(), STYLES)

    assert result.block_order() == [0]


@pytest.mark.unit
def test_layout_is_idempotent():
    """Test that laying out the same sections twice gives equal results."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", f.heading(0), f.lines(0, 12)),
        MeasuredSection(1, "experience", f.heading(1), [f.entry(1, 12)]),
    ]

    assert paginate(sections, _frame(), STYLES) == paginate(sections, _frame(), STYLES)


@pytest.mark.unit
def test_too_tall_block():
    """Test that a block taller than an empty page is a layout error."""
    f = BlockFactory()
    sections = [
        MeasuredSection(0, "summary", None, f.lines(0, 2)),
        MeasuredSection(1, "skills", None, [BlockGroup([f.block("bullet", 1, height=150)])]),
    ]

    with pytest.raises(LayoutError) as exc_info:
        paginate(sections, _frame(), STYLES)

    assert exc_info.value.block_index == 2
    assert exc_info.value.section_index == 1
    assert exc_info.value.kind == "layout_error"


@pytest.mark.unit
def test_too_wide_block():
    """Test that a block wider than the content area is a layout error."""
    f = BlockFactory()
    sections = [MeasuredSection(0, "summary", None, [BlockGroup([f.block("line", 0, width=250)])])]

    with pytest.raises(LayoutError) as exc_info:
        paginate(sections, _frame(), STYLES)

    assert exc_info.value.block_index == 0


@pytest.mark.unit
def test_heading_and_block_exceed_empty_page():
    """Test that a heading which can never share a page with its content is reported."""
    f = BlockFactory()
    sections = [MeasuredSection(0, "summary", f.heading(0), [BlockGroup([f.block("line", 0, height=95)])])]

    with pytest.raises(LayoutError) as exc_info:
        paginate(sections, _frame(), STYLES)

    assert exc_info.value.block_index == 0


@pytest.mark.unit
def test_engine_reuse():
    """Test that an engine can paginate more than once."""
    f = BlockFactory()
    sections = [MeasuredSection(0, "summary", None, f.lines(0, 15))]
    engine = LayoutEngine(_frame())

    first = engine.paginate(sections, STYLES)
    second = engine.paginate(sections, STYLES)
    assert first.page_count == second.page_count == 2
    assert second.block_order() == list(range(15))


@pytest.mark.unit
def test_layout_result_lookups():
    """Test page_of, find_block and to_dict."""
    f = BlockFactory()
    result = paginate([MeasuredSection(0, "summary", None, f.lines(0, 12))], _frame(), STYLES, title="Amina")

    assert result.page_of(0) == 0
    assert result.page_of(11) == 1
    assert result.page_of(99) is None
    assert result.find_block(10).y == 0
    summary = result.to_dict()
    assert summary["title"] == "Amina"
    assert len(summary["pages"]) == 2
    assert summary["pages"][1]["blocks"][0]["index"] == 10
