"""
Block Measurement

Converts Sections into MeasuredSections of atomic Blocks. Line breaks are
computed here with reportlab font metrics, so the primitive backend draws
exactly the lines the Layout Engine paginated.

Spacing conventions:
- A section's first block gets `section_gap` as space_before unless the
  section has a heading (the heading carries the gap instead)
- Headings and entry heads reserve their trailing space inside their height
- space_before is dropped when a block opens a page
"""

from typing import Dict, List, Optional, Tuple

from reportlab.pdfbase import pdfmetrics

from chapchap.contexts.rendering.geometry import (
    PAGE_SIZES,
    Block,
    BlockGroup,
    MeasuredSection,
    PageFrame,
    Shape,
    TextLine,
    TextStyle,
    expand_hex,
)
from chapchap.contexts.rendering.images import image_source_available
from chapchap.contexts.rendering.logger import _log_warning
from chapchap.contexts.templating.exceptions import TemplateDefinitionError
from chapchap.contexts.templating.sections import (
    BulletListContent,
    EntryContent,
    EntryListContent,
    IdentityContent,
    ParagraphContent,
    Section,
    SignatureContent,
)

CONTACT_SEPARATOR = "  |  "
IDENTITY_GAP = 14
SIGNATURE_IMAGE_SIZE = (160, 54)


def resolve_styles(style: Dict) -> Dict[str, TextStyle]:
    """Resolve every text style's font and colour slots to concrete values."""
    fonts = style["fonts"]
    palette = style["palette"]

    resolved = {}
    for name, text_style in style["text"].items():
        font = fonts.get(text_style["font"], text_style["font"])
        try:
            pdfmetrics.getFont(font)
        except KeyError as e:
            raise TemplateDefinitionError(f"Unknown font '{font}' in text style '{name}'") from e

        resolved[name] = TextStyle(
            font=font,
            size=float(text_style["size"]),
            leading=float(text_style["leading"]),
            color=expand_hex(palette.get(text_style["color"], text_style["color"])),
            uppercase=bool(text_style.get("uppercase", False)),
        )
    return resolved


def build_frame(style: Dict) -> PageFrame:
    """Page geometry plus the decorations drawn on every page."""
    page = style["page"]
    size = page["size"]
    if isinstance(size, str):
        if size.upper() not in PAGE_SIZES:
            raise TemplateDefinitionError(f"Unknown page size '{size}' (expected one of {list(PAGE_SIZES)})")
        width, height = PAGE_SIZES[size.upper()]
    else:
        width, height = float(size[0]), float(size[1])

    primary = expand_hex(style["palette"]["primary"])
    decorations = style["decorations"]
    shapes = []
    if decorations["accent_bar"]:
        shapes.append(Shape("rect", 0, 0, float(decorations["accent_bar"]), height, color=primary))
    if decorations["top_line"]:
        shapes.append(Shape("rect", 0, 0, width, float(decorations["top_line"]), color=primary))

    return PageFrame(
        width=width,
        height=height,
        margin_top=float(page["margin_top"]),
        margin_bottom=float(page["margin_bottom"]),
        margin_left=float(page["margin_left"]),
        margin_right=float(page["margin_right"]),
        page_shapes=shapes,
    )


def _measurable(text: str) -> str:
    # Standard PDF fonts use WinAnsi; unsupported glyphs are reported by the backend
    return text.encode("cp1252", errors="replace").decode("cp1252")


def text_width(text: str, style: TextStyle) -> float:
    return pdfmetrics.stringWidth(_measurable(text), style.font, style.size)


def _break_word(word: str, style: TextStyle, max_width: float) -> Tuple[str, str]:
    """Split off the longest prefix that fits (at least one character)."""
    cut = 1
    while cut < len(word) and text_width(word[: cut + 1], style) <= max_width:
        cut += 1
    return word[:cut], word[cut:]


def wrap_text(text: str, style: TextStyle, max_width: float) -> List[str]:
    """
    Greedy word wrap against font metrics.

    Words wider than max_width are broken by characters, so no returned line
    is wider than max_width unless a single character is.
    """
    lines = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if text_width(candidate, style) <= max_width:
            current = candidate
            continue

        if current:
            lines.append(current)
        while len(word) > 1 and text_width(word, style) > max_width:
            head, word = _break_word(word, style, max_width)
            lines.append(head)
        current = word

    if current:
        lines.append(current)
    return lines


def baseline(style: TextStyle, top: float) -> float:
    """Baseline of a line whose box starts at `top`, text centred in its leading."""
    return top + (style.leading + style.size * 0.72) / 2


class BlockMeasurer:
    """
    Builds Blocks for one document, numbering them in document order.

    Args:
        style: Resolved template style tree
        frame: Page geometry
        styles: Resolved text styles
    """

    def __init__(self, style: Dict, frame: PageFrame, styles: Dict[str, TextStyle]):
        self.style = style
        self.frame = frame
        self.styles = styles
        self.spacing = style["spacing"]
        self.decorations = style["decorations"]
        self.palette = style["palette"]
        self.width = frame.content_width
        self._next_index = 0

    def _block(self, kind: str, section_index: int, height: float, space_before: float,
               lines: List[TextLine], shapes: Optional[List[Shape]] = None,
               width: Optional[float] = None) -> Block:
        shapes = shapes or []
        if width is None:
            extents = [line.dx + line.width for line in lines]
            extents += [s.dx + s.width for s in shapes if s.kind in ("image", "box")]
            width = max(extents, default=0.0)

        block = Block(
            index=self._next_index,
            kind=kind,
            section_index=section_index,
            height=height,
            width=width,
            space_before=space_before,
            lines=lines,
            shapes=shapes,
        )
        self._next_index += 1
        return block

    def _styled(self, text: str, style_name: str) -> str:
        return text.upper() if self.styles[style_name].uppercase else text

    def _text_rows(self, text: str, style_name: str, left: float, avail: float,
                   top: float, align: str = "left") -> Tuple[List[TextLine], float]:
        """Wrap text into positioned lines; returns (lines, bottom)."""
        style = self.styles[style_name]
        lines = []
        for row in wrap_text(self._styled(text, style_name), style, avail):
            width = text_width(row, style)
            if align == "center":
                dx = left + (avail - width) / 2
            elif align == "right":
                dx = left + avail - width
            else:
                dx = left
            lines.append(TextLine(row, style_name, dx, baseline(style, top), width))
            top += style.leading
        return lines, top

    # =========================================================================
    # Per-content measurement
    # =========================================================================

    def heading(self, text: str, section_index: int) -> Block:
        lines, bottom = self._text_rows(text, "heading", 0, self.width, 0)
        shapes = []
        if self.decorations["heading_rule"]:
            shapes.append(Shape("rule", 0, bottom + 2, self.width, 0.75, color=expand_hex(self.palette["rule"])))
            bottom += 3
        return self._block(
            "heading",
            section_index,
            height=bottom + self.spacing["heading_after"],
            space_before=self.spacing["section_gap"],
            lines=lines,
            shapes=shapes,
        )

    def identity(self, content: IdentityContent, section_index: int) -> Block:
        deco = self.decorations
        band = bool(deco["header_band"])
        pad = deco["band_padding"] if band else 0
        align = deco["header_align"]

        shapes = []
        text_left, text_right = 0.0, self.width

        monogram = deco["monogram_size"] if content.initials else 0
        if monogram:
            shapes.append(Shape("box", 0, pad, monogram, monogram, color=expand_hex(self.palette["primary"])))
            style = self.styles["monogram"]
            width = text_width(content.initials, style)
            mono_line = TextLine(
                content.initials,
                "monogram",
                (monogram - width) / 2,
                pad + (monogram + style.size * 0.72) / 2,
                width,
            )
            text_left = monogram + IDENTITY_GAP

        photo = 0
        if content.photo:
            if image_source_available(content.photo):
                photo = deco["photo_size"]
            else:
                _log_warning(f"Photo not found, header drawn without it: {content.photo[:60]}")
        if photo:
            if align == "right":
                shapes.append(Shape("image", text_left, pad, photo, photo, source=content.photo))
                text_left += photo + IDENTITY_GAP
            else:
                shapes.append(Shape("image", self.width - photo, pad, photo, photo, source=content.photo))
                text_right = self.width - photo - IDENTITY_GAP

        avail = max(text_right - text_left, 1.0)
        lines = [mono_line] if monogram else []
        top = pad
        rows = [
            (content.name, "name"),
            (content.title, "title"),
            (CONTACT_SEPARATOR.join(content.contact_items), "contact"),
        ]
        for text, style_name in rows:
            if text:
                row_lines, top = self._text_rows(text, style_name, text_left, avail, top, align)
                lines.extend(row_lines)

        content_height = pad + max(top - pad, photo, monogram) + pad
        if band:
            # Band bleeds to the page edges above and beside the content area
            shapes.insert(
                0,
                Shape(
                    "rect",
                    -self.frame.margin_left,
                    -self.frame.margin_top,
                    self.frame.width,
                    self.frame.margin_top + content_height,
                    color=expand_hex(self.palette["primary"]),
                ),
            )

        return self._block(
            "identity",
            section_index,
            height=content_height + self.spacing["header_after"],
            space_before=0,
            lines=lines,
            shapes=shapes,
        )

    def paragraph_lines(self, content: ParagraphContent, section_index: int,
                        lead_space: float) -> List[BlockGroup]:
        style = self.styles[content.style]
        gap = self.spacing["paragraph_gap"] if content.gap is None else content.gap

        groups = []
        for paragraph in [p for p in content.paragraphs if p.strip()]:
            for row_index, row in enumerate(wrap_text(self._styled(paragraph, content.style), style, self.width)):
                if not groups:
                    space_before = lead_space
                else:
                    space_before = gap if row_index == 0 else 0
                line = TextLine(row, content.style, 0, baseline(style, 0), text_width(row, style))
                block = self._block("line", section_index, style.leading, space_before, [line])
                groups.append(BlockGroup([block]))
        return groups

    def bullet(self, text: str, style_name: str, section_index: int, space_before: float) -> Block:
        style = self.styles[style_name]
        glyph = self.style["bullet"]["glyph"]
        indent = self.style["bullet"]["indent"]

        lines = [TextLine(glyph, style_name, 0, baseline(style, 0), text_width(glyph, style))]
        row_lines, bottom = self._text_rows(text, style_name, indent, self.width - indent, 0)
        lines.extend(row_lines)
        return self._block("bullet", section_index, bottom, space_before, lines)

    def bullet_items(self, content: BulletListContent, section_index: int,
                     lead_space: float) -> List[BlockGroup]:
        groups = []
        for item in [i for i in content.items if i.strip()]:
            space_before = lead_space if not groups else self.spacing["bullet_gap"]
            groups.append(BlockGroup([self.bullet(item, content.style, section_index, space_before)]))
        return groups

    def entry_head(self, entry: EntryContent, section_index: int, space_before: float) -> Block:
        date_style = self.styles["entry_dates"]
        lines = []
        top = 0.0

        dates_width = text_width(entry.dates, date_style) if entry.dates else 0.0
        if entry.dates:
            lines.append(
                TextLine(entry.dates, "entry_dates", self.width - dates_width, baseline(date_style, 0), dates_width)
            )

        title_avail = self.width - (dates_width + 10 if entry.dates else 0)
        if entry.title:
            title_lines, top = self._text_rows(entry.title, "entry_title", 0, max(title_avail, 1.0), top)
            lines.extend(title_lines)
        elif entry.dates:
            top = date_style.leading

        if entry.subtitle:
            subtitle_lines, top = self._text_rows(entry.subtitle, "entry_subtitle", 0, self.width, top)
            lines.extend(subtitle_lines)

        return self._block(
            "entry_head",
            section_index,
            height=top + self.spacing["entry_head_after"],
            space_before=space_before,
            lines=lines,
        )

    def entry(self, entry: EntryContent, section_index: int, space_before: float) -> BlockGroup:
        blocks = []
        if entry.title or entry.subtitle or entry.dates:
            blocks.append(self.entry_head(entry, section_index, space_before))

        for detail in entry.lines:
            lines, bottom = self._text_rows(detail, "detail", 0, self.width, 0)
            blocks.append(self._block("line", section_index, bottom, space_before if not blocks else 0, lines))

        for bullet_index, text in enumerate(entry.bullets):
            if not blocks:
                gap = space_before
            else:
                gap = self.spacing["bullet_gap"] if bullet_index else 0
            blocks.append(self.bullet(text, "bullet", section_index, gap))

        return BlockGroup(blocks, keep=min(2, len(blocks)))

    def entries(self, content: EntryListContent, section_index: int, lead_space: float) -> List[BlockGroup]:
        groups = []
        for entry in content.entries:
            if entry.is_empty:
                continue
            space_before = lead_space if not groups else self.spacing["entry_gap"]
            groups.append(self.entry(entry, section_index, space_before))
        return groups

    def signature(self, content: SignatureContent, section_index: int, lead_space: float) -> Block:
        lines, top = self._text_rows(content.closing, "body", 0, self.width, 0)
        shapes = []

        image = content.image if image_source_available(content.image) else ""
        if content.image and not image:
            _log_warning("Drawn signature unreadable, using typed signature")

        if image:
            width, height = SIGNATURE_IMAGE_SIZE
            shapes.append(Shape("image", 0, top + 6, width, height, source=image))
            top += height + 12
        elif content.name:
            typed, top = self._text_rows(content.name, "signature", 0, self.width, top + 6)
            lines.extend(typed)

        if content.name:
            name_lines, top = self._text_rows(content.name, "strong", 0, self.width, top)
            lines.extend(name_lines)

        return self._block("signature", section_index, top, lead_space, lines, shapes)

    # =========================================================================
    # Sections
    # =========================================================================

    def section(self, section: Section, section_index: int) -> MeasuredSection:
        heading = self.heading(section.heading, section_index) if section.heading else None
        lead_space = 0 if heading else self.spacing["section_gap"]
        content = section.content

        if isinstance(content, IdentityContent):
            groups = [BlockGroup([self.identity(content, section_index)])]
        elif isinstance(content, ParagraphContent):
            groups = self.paragraph_lines(content, section_index, lead_space)
        elif isinstance(content, BulletListContent):
            groups = self.bullet_items(content, section_index, lead_space)
        elif isinstance(content, EntryListContent):
            groups = self.entries(content, section_index, lead_space)
        elif isinstance(content, SignatureContent):
            groups = [BlockGroup([self.signature(content, section_index, lead_space)])]
        else:
            raise TypeError(f"Unsupported section content: {type(content).__name__}")

        return MeasuredSection(index=section_index, kind=section.kind, heading=heading, groups=groups)


def measure_sections(
    sections: List[Section], style: Dict
) -> Tuple[List[MeasuredSection], PageFrame, Dict[str, TextStyle]]:
    """
    Measure sections for a resolved template style.

    Returns:
        (measured sections, page frame, resolved text styles)
    """
    frame = build_frame(style)
    styles = resolve_styles(style)
    measurer = BlockMeasurer(style, frame, styles)
    measured = [measurer.section(section, index) for index, section in enumerate(sections)]
    return measured, frame, styles
