"""
Drafting Context

Responsibilities:
- Defines the Document Model for CV and cover-letter drafts
- Applies wizard step updates as new draft versions (commit)
- Gates drafts that are not ready to render (validation)
- Loads and saves draft files

Owns: Draft data, draft updates, render readiness
Never: Decides how a draft looks on the page
"""

from chapchap.contexts.drafting.document_model import (
    CVData,
    Document,
    LetterData,
    document_from_dict,
    document_to_dict,
)
from chapchap.contexts.drafting.exceptions import ValidationError
from chapchap.contexts.drafting.letter_body import generate_letter_body, with_default_body
from chapchap.contexts.drafting.storage import load_document, save_document
from chapchap.contexts.drafting.validation import validate_document
from chapchap.contexts.drafting.wizard import (
    add_entry,
    commit,
    move_entry,
    remove_entry,
    update_entry,
)

__all__ = [
    # Document model
    "CVData",
    "LetterData",
    "Document",
    "document_from_dict",
    "document_to_dict",
    # Validation
    "ValidationError",
    "validate_document",
    # Draft updates
    "commit",
    "add_entry",
    "update_entry",
    "remove_entry",
    "move_entry",
    # Files
    "load_document",
    "save_document",
    # Letters
    "generate_letter_body",
    "with_default_body",
]
