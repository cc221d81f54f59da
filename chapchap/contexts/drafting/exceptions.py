"""Custom exceptions for the drafting context."""

from typing import Dict, List, Optional

from chapchap.exceptions import DocumentGenerationError


class ValidationError(DocumentGenerationError):
    """
    Exception raised when a document is not fit to be rendered.

    Raised before any layout work happens, either because mandatory identity
    fields are missing or because the draft does not match the schema.

    Attributes:
        message: Error description
        missing_fields: Dotted paths of mandatory fields that are empty
        duplicate_ids: Entry list name -> ids that appear more than once
        schema_errors: Messages from schema validation of raw input
    """

    kind = "validation_error"

    def __init__(
        self,
        message: str,
        missing_fields: Optional[List[str]] = None,
        duplicate_ids: Optional[Dict[str, List[str]]] = None,
        schema_errors: Optional[List[str]] = None,
    ):
        self.message = message
        self.missing_fields = missing_fields or []
        self.duplicate_ids = duplicate_ids or {}
        self.schema_errors = schema_errors or []

        parts = [message]
        if self.missing_fields:
            parts.append(f"Missing fields: {', '.join(self.missing_fields)}")
        for list_name, ids in self.duplicate_ids.items():
            parts.append(f"Duplicate ids in {list_name}: {', '.join(ids)}")
        for error in self.schema_errors[:5]:
            parts.append(f"  - {error}")
        if len(self.schema_errors) > 5:
            parts.append(f"  ... and {len(self.schema_errors) - 5} more")

        super().__init__("\n".join(parts))
