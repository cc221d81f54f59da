"""
Default values for CHAPCHAP template definitions.

Every template definition is merged on top of these defaults, so a definition
file only lists what makes it different. Provides:
- DEFAULT_STYLE: page geometry, palette, fonts, text styles, spacing, decorations
- DEFAULT_FORMATS: Jinja2 format strings that turn draft records into text
- DEFAULT_CV_SECTIONS / DEFAULT_LETTER_SECTIONS: section order

Units are PDF points (1/72 inch). Colors and fonts inside text styles name a
palette/font slot ("primary", "bold") or give a literal value ("#333333",
"Courier").
"""

from copy import deepcopy
from typing import Any, Dict, List

DEFAULT_PALETTE = {
    "primary": "#2563EB",
    "text": "#1F2937",
    "muted": "#6B7280",
    "rule": "#E5E7EB",
    "band_text": "#FFFFFF",
}

DEFAULT_FONTS = {
    "regular": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
}

DEFAULT_TEXT_STYLES = {
    "name": {"font": "bold", "size": 24, "leading": 28, "color": "text", "uppercase": False},
    "title": {"font": "regular", "size": 12, "leading": 16, "color": "primary"},
    "contact": {"font": "regular", "size": 9, "leading": 12, "color": "muted"},
    "heading": {"font": "bold", "size": 12, "leading": 16, "color": "primary", "uppercase": True},
    "body": {"font": "regular", "size": 10, "leading": 14, "color": "text"},
    "strong": {"font": "bold", "size": 10, "leading": 14, "color": "text"},
    "entry_title": {"font": "bold", "size": 11, "leading": 14, "color": "text"},
    "entry_subtitle": {"font": "regular", "size": 10, "leading": 13, "color": "primary"},
    "entry_dates": {"font": "regular", "size": 9, "leading": 14, "color": "muted"},
    "detail": {"font": "regular", "size": 9, "leading": 12, "color": "muted"},
    "bullet": {"font": "regular", "size": 9.5, "leading": 13, "color": "text"},
    "signature": {"font": "italic", "size": 20, "leading": 26, "color": "text"},
    "monogram": {"font": "bold", "size": 16, "leading": 20, "color": "primary"},
}

DEFAULT_SPACING = {
    # Space above a section heading (dropped at the top of a page)
    "section_gap": 14,
    "heading_after": 6,
    "entry_gap": 8,
    "paragraph_gap": 6,
    "bullet_gap": 2,
    "entry_head_after": 2,
    "header_after": 4,
}

DEFAULT_DECORATIONS = {
    # Filled band behind the identity header, bleeding to the page edges
    "header_band": False,
    "band_padding": 16,
    "header_align": "left",
    # Thin rule under each section heading
    "heading_rule": True,
    # Left accent bar width on every page (0 = none)
    "accent_bar": 0,
    # Solid line across the top edge of every page (0 = none)
    "top_line": 0,
    "photo_size": 70,
    # Boxed initials next to the name
    "monogram": False,
    "monogram_size": 44,
}

DEFAULT_STYLE = {
    "page": {
        "size": "A4",
        "margin_top": 40,
        "margin_bottom": 40,
        "margin_left": 44,
        "margin_right": 44,
    },
    "palette": DEFAULT_PALETTE,
    "fonts": DEFAULT_FONTS,
    "text": DEFAULT_TEXT_STYLES,
    "spacing": DEFAULT_SPACING,
    "bullet": {"glyph": "•", "indent": 12},
    "decorations": DEFAULT_DECORATIONS,
}

# Jinja2 format strings per section kind, rendered with the entry's fields
DEFAULT_FORMATS = {
    "experience": {
        "title": "{{ job_title }}",
        "subtitle": "{{ [company, location] | select | join(' | ') }}",
        "dates": "{{ [start_date, 'Present' if is_current else end_date] | select | join(' - ') }}",
    },
    "education": {
        "title": "{{ degree }}{% if field_of_study %} in {{ field_of_study }}{% endif %}",
        "subtitle": "{{ [institution, location] | select | join(' | ') }}",
        "dates": "{{ graduation_date }}",
    },
    "certifications": {
        "title": "{{ name }}",
        "subtitle": "{{ issuer }}",
        "dates": "{{ date }}",
    },
    "references": {
        "title": "{{ name }}",
        "subtitle": "{{ [title, company] | select | join(', ') }}",
        "lines": ["{{ phone }}", "{{ email }}"],
    },
    "skills": {"item": "{{ name }}"},
    "languages": {"item": "{% if name %}{{ name }} - {{ proficiency | capitalize }}{% endif %}"},
    "accomplishments": {"item": "{{ description }}"},
    "links": {"item": "{{ url }}"},
    "salutation": {"text": "Dear {{ recipient.name or 'Hiring Manager' }},"},
}

DEFAULT_CV_SECTIONS = [
    {"kind": "header"},
    {"kind": "summary", "heading": "Professional Summary"},
    {"kind": "experience", "heading": "Work Experience"},
    {"kind": "education", "heading": "Education"},
    {"kind": "skills", "heading": "Skills"},
    {"kind": "languages", "heading": "Languages"},
    {"kind": "certifications", "heading": "Certifications"},
    {"kind": "accomplishments", "heading": "Accomplishments"},
    {"kind": "links", "heading": "Links"},
    {"kind": "references", "heading": "References"},
]

DEFAULT_LETTER_SECTIONS = [
    {"kind": "header"},
    {"kind": "date"},
    {"kind": "recipient"},
    {"kind": "salutation"},
    {"kind": "body"},
    {"kind": "closing", "closing": "Sincerely,"},
]


def get_default_style() -> Dict[str, Any]:
    """Deep copy of DEFAULT_STYLE, safe to mutate."""
    return deepcopy(DEFAULT_STYLE)


def get_default_sections(document_type: str) -> List[Dict[str, Any]]:
    """Deep copy of the default section order for a document type."""
    sections = DEFAULT_LETTER_SECTIONS if document_type == "letter" else DEFAULT_CV_SECTIONS
    return deepcopy(sections)
