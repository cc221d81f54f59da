"""
Templating Registries

Centralized registries for loading and caching template definitions and the
Jinja2 format strings they use.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from jinja2 import Environment, StrictUndefined, Template, TemplateError
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from chapchap.contexts.templating.defaults import (
    DEFAULT_FORMATS,
    get_default_sections,
    get_default_style,
)
from chapchap.contexts.templating.exceptions import (
    TemplateDefinitionError,
    TemplateRenderError,
    UnknownTemplateError,
)
from chapchap.contexts.templating.logger import _log_debug

load_dotenv()
DEFINITIONS_PATH = Path(
    os.getenv(
        "TEMPLATE_DEFINITIONS_PATH",
        str(Path(__file__).resolve().parent / "definitions"),
    )
)

DOCUMENT_TYPES = ("cv", "letter")


@dataclass
class TemplateDefinition:
    """
    Fully resolved template definition (defaults, parents and variant merged).

    A definition is data, not code: adding a template means adding a YAML
    file, never new control flow.

    Attributes:
        id: Template identifier (file stem)
        name: Display name
        document_type: "cv" or "letter"
        style: Complete style tree (see defaults.DEFAULT_STYLE)
        sections: Ordered section entries ({kind, heading, ...options})
        formats: Jinja2 format strings per section kind
        extends: Parent template id, if this is a variant
    """

    id: str
    name: str
    document_type: str
    style: Dict[str, Any]
    sections: List[Dict[str, Any]]
    formats: Dict[str, Any] = field(default_factory=dict)
    description: str = ""
    category: str = ""
    has_photo: bool = False
    extends: Optional[str] = None
    source_path: Optional[Path] = None

    @property
    def primary_color(self) -> str:
        return self.style["palette"]["primary"]


class TemplateRegistry:
    """
    Registry for loading and caching template definitions.

    Definitions live in {definitions_path}/{document_type}/{template_id}.yaml.
    A definition may `extend` another one of the same document type; the
    child is merged over its parent, which is merged over the defaults.
    """

    def __init__(self, definitions_path: Path = None):
        """
        Initialize the template registry.

        Args:
            definitions_path: Base path for definition files. Defaults to
                              TEMPLATE_DEFINITIONS_PATH from environment
        """
        if definitions_path is None:
            definitions_path = DEFINITIONS_PATH

        self.definitions_path = Path(definitions_path)
        self._cache: Dict[str, TemplateDefinition] = {}
        self._index: Optional[Dict[str, Path]] = None

    def _build_index(self) -> Dict[str, Path]:
        """Map template id -> definition file, across all document types."""
        index = {}
        for document_type in DOCUMENT_TYPES:
            type_dir = self.definitions_path / document_type
            if not type_dir.is_dir():
                continue
            for path in sorted(type_dir.glob("*.yaml")):
                if path.stem in index:
                    raise TemplateDefinitionError(
                        "Template id registered twice", template_id=path.stem, definition_path=path
                    )
                index[path.stem] = path
        return index

    @property
    def index(self) -> Dict[str, Path]:
        if self._index is None:
            self._index = self._build_index()
        return self._index

    def list_templates(self, document_type: Optional[str] = None) -> List[str]:
        """Registered template ids, optionally restricted to one document type."""
        return [
            template_id
            for template_id, path in self.index.items()
            if document_type is None or path.parent.name == document_type
        ]

    def has_template(self, template_id: str, document_type: Optional[str] = None) -> bool:
        return template_id in self.list_templates(document_type)

    def _load_raw(self, template_id: str, chain: List[str]) -> Dict[str, Any]:
        """Load one definition merged over its parents (not over the defaults)."""
        if template_id in chain:
            raise TemplateDefinitionError(
                f"Circular 'extends': {' -> '.join(chain + [template_id])}", template_id=template_id
            )

        path = self.index[template_id]
        try:
            raw = OmegaConf.load(path)
        except (OmegaConfBaseException, OSError, ValueError) as e:
            raise TemplateDefinitionError(
                f"Could not read definition: {e}", template_id=template_id, definition_path=path
            ) from e

        parent_id = raw.get("extends")
        if parent_id is None:
            return OmegaConf.to_container(raw, resolve=True)

        if parent_id not in self.index or self.index[parent_id].parent != path.parent:
            raise TemplateDefinitionError(
                f"Parent template '{parent_id}' not found", template_id=template_id, definition_path=path
            )
        parent = OmegaConf.create(self._load_raw(parent_id, chain + [template_id]))
        # Variant identity never comes from the parent
        for key in ("id", "name", "description"):
            if key in parent:
                del parent[key]
        return OmegaConf.to_container(OmegaConf.merge(parent, raw), resolve=True)

    def get(self, template_id: str, document_type: Optional[str] = None) -> TemplateDefinition:
        """
        Get a resolved template definition, loading and caching it if necessary.

        Args:
            template_id: Template identifier (e.g. 'oliver', 'grace-mint')
            document_type: If given, the template must be of this type

        Returns:
            TemplateDefinition

        Raises:
            UnknownTemplateError: If the id is not registered (for that document type)
            TemplateDefinitionError: If the definition file is malformed
        """
        if not template_id or template_id not in self.index:
            raise UnknownTemplateError(
                str(template_id), document_type, available=self.list_templates(document_type)
            )

        if template_id not in self._cache:
            self._cache[template_id] = self._resolve(template_id)
        definition = self._cache[template_id]

        if document_type is not None and definition.document_type != document_type:
            raise UnknownTemplateError(
                template_id, document_type, available=self.list_templates(document_type)
            )
        return definition

    def _resolve(self, template_id: str) -> TemplateDefinition:
        path = self.index[template_id]
        document_type = path.parent.name
        raw = self._load_raw(template_id, chain=[])

        declared_type = raw.get("document_type", document_type)
        if declared_type != document_type:
            raise TemplateDefinitionError(
                f"document_type '{declared_type}' does not match folder '{document_type}'",
                template_id=template_id,
                definition_path=path,
            )

        try:
            style = OmegaConf.merge(
                OmegaConf.create(get_default_style()), OmegaConf.create(raw.get("style") or {})
            )
            formats = OmegaConf.merge(
                OmegaConf.create(DEFAULT_FORMATS), OmegaConf.create(raw.get("formats") or {})
            )
        except OmegaConfBaseException as e:
            raise TemplateDefinitionError(
                f"Invalid style or formats: {e}", template_id=template_id, definition_path=path
            ) from e

        sections = raw.get("sections") or get_default_sections(document_type)
        for entry in sections:
            if "kind" not in entry:
                raise TemplateDefinitionError(
                    f"Section entry without 'kind': {entry}", template_id=template_id, definition_path=path
                )

        _log_debug(f"Resolved template '{template_id}' ({document_type}) from {path.name}")
        return TemplateDefinition(
            id=template_id,
            name=raw.get("name", template_id),
            document_type=document_type,
            style=OmegaConf.to_container(style, resolve=True),
            sections=sections,
            formats=OmegaConf.to_container(formats, resolve=True),
            description=raw.get("description", ""),
            category=raw.get("category", ""),
            has_photo=bool(raw.get("has_photo", False)),
            extends=raw.get("extends"),
            source_path=path,
        )

    def clear_cache(self):
        """Clear the definition cache and the file index."""
        self._cache.clear()
        self._index = None

    def is_cached(self, template_id: str) -> bool:
        return template_id in self._cache


class FormatRegistry:
    """
    Compiles and caches the Jinja2 format strings used to build section text.

    StrictUndefined makes a format that names a missing field fail loudly
    instead of rendering an empty string.
    """

    def __init__(self):
        self._cache: Dict[str, Template] = {}
        self.env = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_template(self, format_string: str) -> Template:
        if format_string not in self._cache:
            try:
                self._cache[format_string] = self.env.from_string(format_string)
            except TemplateError as e:
                raise TemplateRenderError(
                    "Invalid format string", format_string=format_string, original_error=e
                ) from e
        return self._cache[format_string]

    def render(self, format_string: str, context: Dict[str, Any]) -> str:
        """Render a format string and collapse surrounding whitespace."""
        try:
            text = self.get_template(format_string).render(context)
        except TemplateError as e:
            raise TemplateRenderError(
                "Format string failed to render", format_string=format_string, original_error=e
            ) from e
        return " ".join(text.split())

    def is_cached(self, format_string: str) -> bool:
        return format_string in self._cache


_default_registry: Optional[TemplateRegistry] = None


def get_registry() -> TemplateRegistry:
    """Process-wide registry over DEFINITIONS_PATH."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TemplateRegistry()
    return _default_registry
