"""
Section Data Structures

A template turns a draft into an ordered list of Sections. A Section is
{kind, heading, content} where content is one of a small tagged union:

- paragraph:   free text, split into lines by the layout engine
- bullet_list: independent items, each kept whole
- entry_list:  records (job, degree, ...) with a head and optional bullets
- identity:    the document header (name, title, contact, photo)
- signature:   letter closing with a typed or drawn signature

Sections are plain data; they know nothing about fonts or page sizes.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class ParagraphContent:
    paragraphs: List[str] = field(default_factory=list)
    style: str = "body"
    # Space between paragraphs; None means the template's paragraph_gap
    gap: Optional[float] = None
    content_type: str = field(default="paragraph", init=False)

    @property
    def is_empty(self) -> bool:
        return not any(p.strip() for p in self.paragraphs)


@dataclass
class BulletListContent:
    items: List[str] = field(default_factory=list)
    style: str = "bullet"
    content_type: str = field(default="bullet_list", init=False)

    @property
    def is_empty(self) -> bool:
        return not any(item.strip() for item in self.items)


@dataclass
class EntryContent:
    """
    One record of an entry list.

    Attributes:
        entry_id: Id of the draft entry this came from
        title: First head line (job title, degree, ...)
        subtitle: Second head line (company, institution, ...)
        dates: Date range shown right-aligned on the title line
        lines: Plain detail lines (reference phone/email, ...)
        bullets: Achievement bullets
    """

    entry_id: str = ""
    title: str = ""
    subtitle: str = ""
    dates: str = ""
    lines: List[str] = field(default_factory=list)
    bullets: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.subtitle or self.dates or self.lines or self.bullets)


@dataclass
class EntryListContent:
    entries: List[EntryContent] = field(default_factory=list)
    content_type: str = field(default="entry_list", init=False)

    @property
    def is_empty(self) -> bool:
        return all(entry.is_empty for entry in self.entries)


@dataclass
class IdentityContent:
    name: str = ""
    title: str = ""
    contact_items: List[str] = field(default_factory=list)
    photo: str = ""
    initials: str = ""
    content_type: str = field(default="identity", init=False)

    @property
    def is_empty(self) -> bool:
        return not self.name


@dataclass
class SignatureContent:
    closing: str = "Sincerely,"
    name: str = ""
    # data: URL of a drawn signature; empty for typed signatures
    image: str = ""
    content_type: str = field(default="signature", init=False)

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.image)


SectionContent = Union[
    ParagraphContent, BulletListContent, EntryListContent, IdentityContent, SignatureContent
]


@dataclass
class Section:
    """
    Attributes:
        kind: Section kind from the template definition (e.g. "experience")
        heading: Heading text, or None for sections drawn without one
        content: Tagged content (see module docstring)
    """

    kind: str
    heading: Optional[str]
    content: SectionContent

    @property
    def content_type(self) -> str:
        return self.content.content_type

    @property
    def content_count(self) -> int:
        """Number of content items (paragraphs, bullets, entry lines) for accounting."""
        content = self.content
        if isinstance(content, ParagraphContent):
            return len([p for p in content.paragraphs if p.strip()])
        if isinstance(content, BulletListContent):
            return len([i for i in content.items if i.strip()])
        if isinstance(content, EntryListContent):
            return sum(len(e.lines) + len(e.bullets) for e in content.entries if not e.is_empty)
        return 1
