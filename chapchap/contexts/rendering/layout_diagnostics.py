"""
Layout diagnostics for rendered PDF validation.

Reads a primitive-backend PDF back with pdfplumber and compares it with the
LayoutResult it was drawn from, so that what the preview showed and what the
user downloads can be checked against each other.

Detection capabilities:
- Page count mismatch between layout and PDF
- Displaced blocks: a block's text found on a different page than computed
- Missing blocks: a block's text not found anywhere in the PDF
- Overfull pages: placed content running past the bottom margin

Known limitation: raster PDFs contain no text layer, so every block of a
raster PDF is reported missing. Run diagnostics on primitive output.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from chapchap.contexts.rendering.geometry import LayoutResult
from chapchap.utils.pdf_processing import PDFDocument, PDFSource, normalize_for_matching

# Character count for prefix matching
MATCH_LENGTH = 30

# Rounding slack for the bottom-margin check
EPSILON = 0.01


class IssueTemplates:
    """Centralized issue message templates (f-string style)."""

    # Document-level
    PAGE_COUNT_MISMATCH = "Page count mismatch: {actual} (expected {intended})"

    # Page-level
    CONTENT_BELOW_MARGIN = "Page {page}: content ends {amount:.1f}pt below the bottom margin"

    # Block-level
    BLOCK_DISPLACED = "Block {index} ({kind}): found on page {actual} (expected page {intended})"
    BLOCK_NOT_FOUND = "Block {index} ({kind}): text not found (expected page {intended})"


# =============================================================================
# Diagnostics Hierarchy
# =============================================================================


@dataclass
class Diagnostics:
    """Base class for hierarchical diagnostics."""

    components: List["Diagnostics"] = field(default_factory=list)

    def get_issues(self) -> List[str]:
        """Generate issues for this level based on field values. Override in subclasses."""
        return []

    def get_inherited_issues(self) -> List[str]:
        """Collect issues from this level and all descendants."""
        all_issues = list(self.get_issues())
        for component in self.components:
            all_issues.extend(component.get_inherited_issues())
        return all_issues

    @property
    def is_valid(self) -> bool:
        """True if no issues at this level or any descendant."""
        return len(self.get_inherited_issues()) == 0


@dataclass
class BlockDiagnostics(Diagnostics):
    """Diagnostics for a single text block."""

    block_index: int = 0
    kind: str = ""
    intended_page: int = 0
    actual_page: Optional[int] = None

    def get_issues(self) -> List[str]:
        if self.actual_page is None:
            return [
                IssueTemplates.BLOCK_NOT_FOUND.format(
                    index=self.block_index, kind=self.kind, intended=self.intended_page
                )
            ]
        if self.actual_page != self.intended_page:
            return [
                IssueTemplates.BLOCK_DISPLACED.format(
                    index=self.block_index,
                    kind=self.kind,
                    actual=self.actual_page,
                    intended=self.intended_page,
                )
            ]
        return []


@dataclass
class PageDiagnostics(Diagnostics):
    """Diagnostics for a single intended page."""

    intended_page_number: int = 0
    overflow_amount: float = 0.0

    def get_issues(self) -> List[str]:
        if self.overflow_amount > EPSILON:
            return [
                IssueTemplates.CONTENT_BELOW_MARGIN.format(
                    page=self.intended_page_number, amount=self.overflow_amount
                )
            ]
        return []


@dataclass
class DocumentDiagnostics(Diagnostics):
    """Top-level diagnostics for the entire document."""

    actual_page_count: int = 0
    intended_page_count: int = 0

    def get_issues(self) -> List[str]:
        issues = []
        if self.actual_page_count != self.intended_page_count:
            issues.append(
                IssueTemplates.PAGE_COUNT_MISMATCH.format(
                    actual=self.actual_page_count,
                    intended=self.intended_page_count,
                )
            )
        return issues


# =============================================================================
# Helper Functions
# =============================================================================


def _block_prefix(block) -> str:
    """Normalized start of a block's first text line ("" if it has no matchable text)."""
    for line in block.lines:
        normalized = normalize_for_matching(line.text)
        if normalized:
            return normalized[:MATCH_LENGTH]
    return ""


def _find_page(prefix: str, pdf: PDFDocument, intended_page: int) -> Optional[int]:
    """Page holding prefix: the intended page first, then the first line match anywhere."""
    if prefix in pdf.get_character_stream(intended_page):
        return intended_page
    matches = pdf.find_all(prefix, limit=1)
    return matches[0][0] if matches else None


# =============================================================================
# Main Analysis Function
# =============================================================================


def analyze_layout(layout: LayoutResult, pdf_source: PDFSource) -> DocumentDiagnostics:
    """
    Analyze a rendered PDF against the layout it was drawn from.

    Builds a hierarchical diagnostics tree (Document -> Page -> Block).

    Args:
        layout: LayoutResult the PDF was rendered from
        pdf_source: PDF bytes or path

    Returns:
        DocumentDiagnostics tree. Call .get_inherited_issues() for all issues,
        or .is_valid to check if document passes validation.
    """
    pdf = PDFDocument(pdf_source)
    capacity = layout.frame.content_height

    document_diagnostics = DocumentDiagnostics(
        actual_page_count=pdf.page_count,
        intended_page_count=layout.page_count,
    )

    for page in layout.pages:
        page_number = page.index + 1
        bottom = max((placed.y + placed.block.height for placed in page.blocks), default=0.0)
        page_diagnostics = PageDiagnostics(
            intended_page_number=page_number,
            overflow_amount=max(0.0, bottom - capacity),
        )

        for placed in page.blocks:
            prefix = _block_prefix(placed.block)
            if not prefix:
                continue
            page_diagnostics.components.append(
                BlockDiagnostics(
                    block_index=placed.block.index,
                    kind=placed.block.kind,
                    intended_page=page_number,
                    actual_page=_find_page(prefix, pdf, page_number),
                )
            )

        document_diagnostics.components.append(page_diagnostics)

    return document_diagnostics
