"""Custom exceptions for templating context with template references."""

from pathlib import Path
from typing import List, Optional

from chapchap.exceptions import DocumentGenerationError


class UnknownTemplateError(DocumentGenerationError):
    """
    Exception raised when a template id does not resolve to a registered definition.

    Attributes:
        template_id: The requested id
        document_type: Document type the caller asked for ("cv", "letter" or None)
        available: Registered ids for that document type
    """

    kind = "unknown_template"

    def __init__(
        self,
        template_id: str,
        document_type: Optional[str] = None,
        available: Optional[List[str]] = None,
    ):
        self.template_id = template_id
        self.document_type = document_type
        self.available = available or []

        scope = f"{document_type} " if document_type else ""
        parts = [f"Unknown {scope}template: '{template_id}'"]
        if self.available:
            parts.append(f"Available: {', '.join(self.available)}")

        super().__init__("\n".join(parts))


class TemplateDefinitionError(DocumentGenerationError):
    """
    Exception raised when a template definition file is malformed.

    Attributes:
        message: Error description
        template_id: Definition being loaded
        definition_path: Path of the offending file
    """

    kind = "template_definition_error"

    def __init__(
        self,
        message: str,
        template_id: Optional[str] = None,
        definition_path: Optional[Path] = None,
    ):
        self.message = message
        self.template_id = template_id
        self.definition_path = definition_path

        parts = [message]
        if template_id:
            parts.append(f"Template: {template_id}")
        if definition_path:
            parts.append(f"Definition: {definition_path}")

        super().__init__("\n".join(parts))


class TemplateRenderError(DocumentGenerationError):
    """
    Exception raised when a section format string fails to render.

    Attributes:
        message: Error description
        format_string: The Jinja2 format string
        original_error: The original Jinja2 error
    """

    kind = "template_render_error"

    def __init__(
        self,
        message: str,
        format_string: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.format_string = format_string
        self.original_error = original_error

        parts = [message]
        if format_string:
            parts.append(f"Format: {format_string}")
        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class StyleOverrideError(DocumentGenerationError):
    """
    Exception raised when a colour override or style preset cannot be applied.

    Attributes:
        message: Error description
        override: The rejected colour or preset name
        available: Valid choices, when there is a fixed set
    """

    kind = "style_override_error"

    def __init__(
        self,
        message: str,
        override: Optional[str] = None,
        available: Optional[List[str]] = None,
    ):
        self.message = message
        self.override = override
        self.available = available or []

        parts = [message]
        if self.available:
            parts.append(f"Available: {', '.join(self.available)}")

        super().__init__("\n".join(parts))
