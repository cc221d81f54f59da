"""
Section Builder

Turns a draft into the ordered Sections a template asks for. Each section entry
in a definition is {kind, heading, ...options}; the kind selects a builder
below and the options tune it (max_bullets, inline, style, closing).

Building is a pure function of (definition, document). A section whose source
data is empty is left out entirely, the same way for every template.
"""

from typing import Any, Callable, Dict, List

from chapchap.contexts.drafting.document_model import CVData, Document, LetterData
from chapchap.contexts.templating.exceptions import TemplateDefinitionError
from chapchap.contexts.templating.registries import FormatRegistry, TemplateDefinition
from chapchap.contexts.templating.sections import (
    BulletListContent,
    EntryContent,
    EntryListContent,
    IdentityContent,
    ParagraphContent,
    Section,
    SectionContent,
    SignatureContent,
)

_formats = FormatRegistry()

# Section kind -> draft list it reads, for entry and bullet sections
CV_LIST_SOURCES = {
    "experience": "work_experiences",
    "education": "education",
    "certifications": "certifications",
    "references": "references",
    "skills": "skills",
    "languages": "languages",
    "accomplishments": "accomplishments",
    "links": "social_links",
}


def _initials(name: str) -> str:
    return "".join(part[0] for part in name.split()[:2]).upper()


def _non_empty(values: List[str]) -> List[str]:
    return [value for value in values if value and value.strip()]


# =============================================================================
# CV builders
# =============================================================================


def _cv_header(definition: TemplateDefinition, cv: CVData, options: Dict[str, Any]) -> IdentityContent:
    info = cv.personal_info
    contact = [info.email, info.phone, info.location, info.linkedin, info.website]
    contact += [link.url for link in cv.social_links if link.show_in_header]

    return IdentityContent(
        name=info.full_name,
        title=info.professional_title,
        contact_items=_non_empty(contact),
        photo=info.photo_url if definition.has_photo else "",
        initials=_initials(info.full_name) if definition.style["decorations"]["monogram"] else "",
    )


def _cv_summary(definition: TemplateDefinition, cv: CVData, options: Dict[str, Any]) -> ParagraphContent:
    paragraphs = [p.strip() for p in cv.summary.split("\n\n")]
    return ParagraphContent(paragraphs=_non_empty(paragraphs), style=options.get("style", "body"))


def _cv_entries(definition: TemplateDefinition, cv: CVData, options: Dict[str, Any]) -> EntryListContent:
    """Entry lists: experience, education, certifications, references."""
    kind = options["kind"]
    fmt = definition.formats.get(kind, {})
    max_bullets = options.get("max_bullets")

    entries = []
    for record in getattr(cv, CV_LIST_SOURCES[kind]):
        context = record.model_dump()
        bullets = _non_empty(list(getattr(record, "achievements", [])))
        if max_bullets is not None:
            bullets = bullets[:max_bullets]

        entry = EntryContent(
            entry_id=record.id,
            title=_formats.render(fmt["title"], context) if "title" in fmt else "",
            subtitle=_formats.render(fmt["subtitle"], context) if "subtitle" in fmt else "",
            dates=_formats.render(fmt["dates"], context) if "dates" in fmt else "",
            lines=_non_empty([_formats.render(line, context) for line in fmt.get("lines", [])]),
            bullets=bullets,
        )
        if not entry.is_empty:
            entries.append(entry)

    return EntryListContent(entries=entries)


def _cv_items(definition: TemplateDefinition, cv: CVData, options: Dict[str, Any]) -> SectionContent:
    """Item lists: skills, languages, accomplishments, links."""
    kind = options["kind"]
    item_format = definition.formats.get(kind, {}).get("item", "{{ name }}")
    items = _non_empty(
        [_formats.render(item_format, record.model_dump()) for record in getattr(cv, CV_LIST_SOURCES[kind])]
    )

    if options.get("inline"):
        separator = options.get("separator", "  •  ")
        return ParagraphContent(paragraphs=[separator.join(items)] if items else [], style="body")
    return BulletListContent(items=items, style=options.get("style", "bullet"))


# =============================================================================
# Letter builders
# =============================================================================


def _letter_header(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> IdentityContent:
    sender = letter.sender
    return IdentityContent(
        name=sender.name,
        title=options.get("title", ""),
        contact_items=_non_empty([sender.email, sender.phone, sender.city]),
        initials=_initials(sender.name) if definition.style["decorations"]["monogram"] else "",
    )


def _letter_date(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> ParagraphContent:
    return ParagraphContent(paragraphs=_non_empty([letter.date]), style=options.get("style", "body"))


def _letter_recipient(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> ParagraphContent:
    recipient = letter.recipient
    # Address block lines sit directly under each other
    return ParagraphContent(
        paragraphs=_non_empty([recipient.name, recipient.company, recipient.city]),
        style=options.get("style", "body"),
        gap=0,
    )


def _letter_salutation(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> ParagraphContent:
    text = _formats.render(definition.formats["salutation"]["text"], letter.model_dump())
    return ParagraphContent(paragraphs=_non_empty([text]), style=options.get("style", "body"))


def _letter_body(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> ParagraphContent:
    return ParagraphContent(paragraphs=_non_empty(letter.paragraphs), style=options.get("style", "body"))


def _letter_closing(definition: TemplateDefinition, letter: LetterData, options: Dict[str, Any]) -> SignatureContent:
    signature = letter.signature
    return SignatureContent(
        closing=options.get("closing", "Sincerely,"),
        name=letter.sender.name,
        image=signature.data_url if signature.mode == "draw" else "",
    )


Builder = Callable[[TemplateDefinition, Any, Dict[str, Any]], SectionContent]

BUILDERS: Dict[str, Dict[str, Builder]] = {
    "cv": {
        "header": _cv_header,
        "summary": _cv_summary,
        "experience": _cv_entries,
        "education": _cv_entries,
        "certifications": _cv_entries,
        "references": _cv_entries,
        "skills": _cv_items,
        "languages": _cv_items,
        "accomplishments": _cv_items,
        "links": _cv_items,
    },
    "letter": {
        "header": _letter_header,
        "date": _letter_date,
        "recipient": _letter_recipient,
        "salutation": _letter_salutation,
        "body": _letter_body,
        "closing": _letter_closing,
    },
}


def build_sections(definition: TemplateDefinition, document: Document) -> List[Section]:
    """
    Build the ordered, non-empty Sections of a document for a template.

    Args:
        definition: Resolved template definition
        document: CVData or LetterData matching definition.document_type

    Returns:
        Sections in definition order, empty ones omitted

    Raises:
        TemplateDefinitionError: If the document type does not match or a
                                 section kind is unknown
        TemplateRenderError: If a format string fails to render
    """
    if document.document_type != definition.document_type:
        raise TemplateDefinitionError(
            f"Template is for {definition.document_type} documents, got {document.document_type}",
            template_id=definition.id,
        )

    builders = BUILDERS[definition.document_type]
    sections = []
    for entry in definition.sections:
        kind = entry["kind"]
        if kind not in builders:
            raise TemplateDefinitionError(
                f"Unknown section kind '{kind}' (expected one of {sorted(builders)})",
                template_id=definition.id,
                definition_path=definition.source_path,
            )

        content = builders[kind](definition, document, entry)
        if content.is_empty:
            continue
        sections.append(Section(kind=kind, heading=entry.get("heading"), content=content))

    return sections
