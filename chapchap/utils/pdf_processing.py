"""
PDF processing utilities for reading back generated documents.

Main class:
    PDFDocument: Parsed PDF with line-based text extraction and search.

Helper functions:
    page_count: Quick page count without full extraction.
    normalize_for_matching: Text normalization for fuzzy matching.
    cluster_by_y_tolerance: Y-coordinate clustering for line detection.
"""

import io
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pdfplumber
from PyPDF2 import PdfReader

PDFSource = Union[str, Path, bytes]


def _open_source(source: PDFSource):
    """Return something both PyPDF2 and pdfplumber can open."""
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return str(source)


def page_count(source: PDFSource) -> Optional[int]:
    """Get page count from a PDF path or PDF bytes, or None if unreadable."""
    try:
        reader = PdfReader(_open_source(source))
        return len(reader.pages)
    except Exception:
        return None


def normalize_for_matching(text: str) -> str:
    """Keep only lowercase alphanumeric characters for fuzzy text matching."""
    return "".join(c for c in text.lower() if c.isalnum())


def cluster_by_y_tolerance(chars: List, tolerance: float = 3.0) -> List[List]:
    """
    Group characters into lines by Y-coordinate proximity.

    Handles baseline shifts between bold/regular text that would otherwise split lines.
    """
    if not chars:
        return []

    sorted_chars = sorted(chars, key=lambda c: c["top"])

    lines = []
    current_line = [sorted_chars[0]]
    current_y = sorted_chars[0]["top"]

    for char in sorted_chars[1:]:
        if abs(char["top"] - current_y) <= tolerance:
            current_line.append(char)
        else:
            lines.append(current_line)
            current_line = [char]
            current_y = char["top"]

    if current_line:
        lines.append(current_line)

    return lines


class PDFDocument:
    """
    Parsed PDF with line-based text extraction.

    Page data is lazily loaded and cached on first access.

    Args:
        source: Path to a PDF file or the PDF bytes themselves
        y_tolerance: Max Y-distance (points) to group characters as same line.

    Example:
        >>> pdf = PDFDocument(pdf_bytes)
        >>> for line in pdf.get_lines(page=1):
        ...     print(line)
    """

    def __init__(self, source: PDFSource, y_tolerance: float = 3.0):
        if isinstance(source, (str, Path)):
            source = Path(source)
            if not source.exists():
                raise FileNotFoundError(f"PDF not found: {source}")

        self.source = source
        self.y_tolerance = y_tolerance
        self._pages_cache: Optional[Dict[int, List[str]]] = None
        self._page_count: Optional[int] = None

    @property
    def page_count(self) -> int:
        if self._page_count is None:
            self._page_count = page_count(self.source) or 0
        return self._page_count

    def _extract_pages(self) -> Dict[int, List[str]]:
        """Extract text lines from all pages, top-to-bottom."""
        pages_data: Dict[int, List[str]] = {}

        with pdfplumber.open(_open_source(self.source)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                pages_data[page_num] = self._chars_to_lines(page.chars)

        return pages_data

    def _chars_to_lines(self, chars: List) -> List[str]:
        """Convert character list to text lines with Y-clustering."""
        text_lines = []
        for char_objs in cluster_by_y_tolerance(chars, tolerance=self.y_tolerance):
            char_objs.sort(key=lambda c: c["x0"])
            text_lines.append("".join(c["text"] for c in char_objs))
        return text_lines

    def _ensure_loaded(self) -> None:
        if self._pages_cache is None:
            self._pages_cache = self._extract_pages()

    def get_lines(self, page: int) -> List[str]:
        """
        Get text lines for a specific page (1-indexed).

        Returns:
            List of text lines, top-to-bottom order. Empty if the page doesn't exist.
        """
        self._ensure_loaded()
        return self._pages_cache.get(page, [])

    def get_character_stream(self, page: int) -> str:
        """Normalized character stream for a page (see normalize_for_matching)."""
        return normalize_for_matching("".join(self.get_lines(page)))

    def find_all(self, text: str, limit: Optional[int] = None) -> List[Tuple[int, int]]:
        """
        Find all lines containing text (normalized substring match).

        Returns:
            List of (page, line_index) tuples for each match.
        """
        self._ensure_loaded()
        results: List[Tuple[int, int]] = []
        text_norm = normalize_for_matching(text)

        for page_num in sorted(self._pages_cache.keys()):
            for line_idx, line in enumerate(self._pages_cache[page_num]):
                if text_norm in normalize_for_matching(line):
                    results.append((page_num, line_idx))
                    if limit and len(results) >= limit:
                        return results

        return results
