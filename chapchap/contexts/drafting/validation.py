"""
Render gate for drafts.

Drafts are allowed to be incomplete while the user works through the wizard;
this module decides whether a draft is complete enough to be rendered.
"""

from collections import Counter
from typing import Dict, List

from chapchap.contexts.drafting.document_model import CV_ENTRY_LISTS, CVData, Document, LetterData
from chapchap.contexts.drafting.exceptions import ValidationError


def missing_mandatory_fields(document: Document) -> List[str]:
    """
    List mandatory fields that are empty.

    CV: first name, last name and at least one contact method (email or phone).
    Letter: sender name and at least one non-empty paragraph.
    """
    missing = []

    if isinstance(document, CVData):
        info = document.personal_info
        if not info.first_name:
            missing.append("personal_info.first_name")
        if not info.last_name:
            missing.append("personal_info.last_name")
        if not (info.email or info.phone):
            missing.append("personal_info.email|phone")
    elif isinstance(document, LetterData):
        if not document.sender.name:
            missing.append("sender.name")
        if not any(paragraph.strip() for paragraph in document.paragraphs):
            missing.append("paragraphs")
    else:
        raise TypeError(f"Not a draft document: {type(document).__name__}")

    return missing


def duplicate_entry_ids(document: Document) -> Dict[str, List[str]]:
    """Map entry list name -> ids that occur more than once in that list."""
    if not isinstance(document, CVData):
        return {}

    duplicates = {}
    for list_name in CV_ENTRY_LISTS:
        counts = Counter(entry.id for entry in getattr(document, list_name))
        repeated = sorted(entry_id for entry_id, count in counts.items() if count > 1)
        if repeated:
            duplicates[list_name] = repeated
    return duplicates


def validate_document(document: Document) -> None:
    """
    Reject drafts that must not reach the layout engine.

    Raises:
        ValidationError: If mandatory fields are missing or entry ids repeat
    """
    missing = missing_mandatory_fields(document)
    duplicates = duplicate_entry_ids(document)

    if missing or duplicates:
        raise ValidationError(
            f"{document.document_type.upper()} draft is not ready to render",
            missing_fields=missing,
            duplicate_ids=duplicates,
        )
