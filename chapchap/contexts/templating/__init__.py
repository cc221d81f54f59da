"""
Templating Context

Responsibilities:
- Loads Template Definitions (YAML data files) and resolves variants
- Applies colour overrides and named style presets
- Turns a draft into ordered Sections (paragraph, bullet list, entry list,
  identity header, signature)

Owns: Template definitions, section order, text shaping of draft records
Never: Measures text or decides page breaks
"""

from chapchap.contexts.templating.config_resolver import apply_overrides, apply_presets
from chapchap.contexts.templating.exceptions import (
    StyleOverrideError,
    TemplateDefinitionError,
    TemplateRenderError,
    UnknownTemplateError,
)
from chapchap.contexts.templating.registries import (
    FormatRegistry,
    TemplateDefinition,
    TemplateRegistry,
    get_registry,
)
from chapchap.contexts.templating.section_builder import build_sections
from chapchap.contexts.templating.sections import Section

__all__ = [
    # Definitions
    "TemplateDefinition",
    "TemplateRegistry",
    "FormatRegistry",
    "get_registry",
    # Overrides
    "apply_overrides",
    "apply_presets",
    # Sections
    "Section",
    "build_sections",
    # Errors
    "UnknownTemplateError",
    "TemplateDefinitionError",
    "TemplateRenderError",
    "StyleOverrideError",
]
