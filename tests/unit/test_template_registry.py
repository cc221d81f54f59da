"""Unit tests for TemplateRegistry, FormatRegistry and style overrides."""

from pathlib import Path

import pytest

from chapchap.contexts.templating import (
    FormatRegistry,
    StyleOverrideError,
    TemplateDefinitionError,
    TemplateRegistry,
    TemplateRenderError,
    UnknownTemplateError,
    apply_overrides,
    apply_presets,
)
from chapchap.contexts.templating.config_resolver import load_style_presets

CV_TEMPLATES = [
    "aparna-dark", "aparna-gold", "centered-traditional", "charles", "classic-elegant",
    "creative-yellow", "denice", "diamond-monogram", "grace-coral", "grace-minimal",
    "grace-mint", "grace-navy", "grace-teal", "hexagon-blue", "kathleen", "kelly",
    "lauren-icons", "lauren-orange", "lesley", "modern-header", "nelly-gray", "nelly-mint",
    "nelly-purple", "nelly-sidebar", "oliver", "professional-sidebar", "richard",
    "teal-accent", "thomas", "timeline-gray",
]
LETTER_TEMPLATES = ["contempo", "managerial", "pacific", "professional", "refined", "whitespace"]


def _write_definition(base: Path, document_type: str, template_id: str, body: str) -> None:
    folder = base / document_type
    folder.mkdir(parents=True, exist_ok=True)
    (folder / f"{template_id}.yaml").write_text(body)


@pytest.mark.unit
def test_template_registry_init():
    """Test TemplateRegistry initialization."""
    registry = TemplateRegistry()
    assert registry.definitions_path.exists()
    assert registry._cache == {}


@pytest.mark.unit
def test_list_templates():
    """Test that every shipped template is registered under its document type."""
    registry = TemplateRegistry()

    assert registry.list_templates("cv") == CV_TEMPLATES
    assert registry.list_templates("letter") == LETTER_TEMPLATES
    assert len(registry.list_templates()) == len(CV_TEMPLATES) + len(LETTER_TEMPLATES)
    assert registry.has_template("oliver", "cv")
    assert not registry.has_template("oliver", "letter")


@pytest.mark.unit
@pytest.mark.parametrize("template_id", CV_TEMPLATES + LETTER_TEMPLATES)
def test_every_template_resolves(template_id):
    """Test that every definition resolves to a complete style tree."""
    definition = TemplateRegistry().get(template_id)

    assert definition.id == template_id
    assert definition.name
    assert definition.primary_color.startswith("#")
    assert definition.sections[0]["kind"] == "header"
    for key in ("page", "palette", "fonts", "text", "spacing", "bullet", "decorations"):
        assert key in definition.style


@pytest.mark.unit
def test_get_oliver():
    """Test loading a base definition."""
    definition = TemplateRegistry().get("oliver")

    assert definition.document_type == "cv"
    assert definition.has_photo is True
    assert definition.primary_color == "#E07A38"
    assert definition.style["decorations"]["header_align"] == "center"
    # Defaults fill what the file leaves out
    assert definition.style["spacing"]["section_gap"] == 14
    assert definition.formats["experience"]["title"] == "{{ job_title }}"


@pytest.mark.unit
def test_variant_inherits_parent():
    """Test that a variant is merged over its parent."""
    registry = TemplateRegistry()
    parent = registry.get("charles")
    variant = registry.get("thomas")

    assert variant.extends == "charles"
    assert variant.name == "Thomas"
    assert variant.primary_color == "#8ECFC8"
    assert variant.style["decorations"]["header_band"] is True
    assert variant.has_photo == parent.has_photo
    assert variant.style["text"]["name"]["color"] == "band_text"


@pytest.mark.unit
def test_letter_variant_inherits_parent():
    """Test variant resolution for letter templates."""
    definition = TemplateRegistry().get("refined", "letter")

    assert definition.document_type == "letter"
    assert definition.style["fonts"]["regular"] == "Times-Roman"
    assert definition.style["decorations"]["top_line"] == 3


@pytest.mark.unit
def test_template_caching():
    """Test that definitions are cached after first load."""
    registry = TemplateRegistry()

    definition1 = registry.get("grace-navy")
    assert registry.is_cached("grace-navy")

    definition2 = registry.get("grace-navy")
    assert definition1 is definition2

    registry.clear_cache()
    assert not registry.is_cached("grace-navy")


@pytest.mark.unit
@pytest.mark.parametrize("template_id", ["does-not-exist", "", None])
def test_unknown_template(template_id):
    """Test error for ids that are not registered."""
    with pytest.raises(UnknownTemplateError) as exc_info:
        TemplateRegistry().get(template_id)

    assert exc_info.value.kind == "unknown_template"


@pytest.mark.unit
def test_wrong_document_type():
    """Test that a letter template is unknown to CV rendering."""
    with pytest.raises(UnknownTemplateError) as exc_info:
        TemplateRegistry().get("contempo", "cv")

    assert "oliver" in exc_info.value.available
    assert "contempo" not in exc_info.value.available


@pytest.mark.unit
def test_definitions_from_custom_path(tmp_path):
    """Test that adding a template only takes a YAML file."""
    _write_definition(tmp_path, "cv", "plain", "name: Plain\nstyle:\n  palette:\n    primary: '#111111'\n")
    definition = TemplateRegistry(tmp_path).get("plain")

    assert definition.primary_color == "#111111"
    assert [entry["kind"] for entry in definition.sections][:3] == ["header", "summary", "experience"]


@pytest.mark.unit
def test_circular_extends(tmp_path):
    """Test that extends cycles are reported."""
    _write_definition(tmp_path, "cv", "a", "extends: b\nname: A\n")
    _write_definition(tmp_path, "cv", "b", "extends: a\nname: B\n")

    with pytest.raises(TemplateDefinitionError, match="Circular"):
        TemplateRegistry(tmp_path).get("a")


@pytest.mark.unit
def test_parent_must_share_document_type(tmp_path):
    """Test that a CV variant cannot extend a letter template."""
    _write_definition(tmp_path, "letter", "base", "name: Base\n")
    _write_definition(tmp_path, "cv", "child", "extends: base\nname: Child\n")

    with pytest.raises(TemplateDefinitionError, match="not found"):
        TemplateRegistry(tmp_path).get("child")


@pytest.mark.unit
def test_duplicate_template_id(tmp_path):
    """Test that an id registered under both document types is rejected."""
    _write_definition(tmp_path, "cv", "same", "name: Same\n")
    _write_definition(tmp_path, "letter", "same", "name: Same\n")

    with pytest.raises(TemplateDefinitionError):
        TemplateRegistry(tmp_path).list_templates()


@pytest.mark.unit
def test_section_without_kind(tmp_path):
    """Test that every section entry needs a kind."""
    _write_definition(tmp_path, "cv", "broken", "name: Broken\nsections:\n  - heading: Skills\n")

    with pytest.raises(TemplateDefinitionError):
        TemplateRegistry(tmp_path).get("broken")


# =============================================================================
# Overrides and presets
# =============================================================================


@pytest.mark.unit
def test_color_override_does_not_touch_cache():
    """Test that a colour override returns a copy."""
    registry = TemplateRegistry()
    definition = registry.get("oliver")
    overridden = apply_overrides(definition, color_override="#0F766E")

    assert overridden.primary_color == "#0F766E"
    assert registry.get("oliver").primary_color == "#E07A38"


@pytest.mark.unit
def test_no_override_returns_same_definition():
    """Test that nothing is copied when there is nothing to apply."""
    definition = TemplateRegistry().get("oliver")
    assert apply_overrides(definition) is definition
    assert apply_presets(definition, []) is definition


@pytest.mark.unit
@pytest.mark.parametrize("color", ["red", "#12345", "0F766E", "#GGGGGG"])
def test_invalid_color_override(color):
    """Test that only #RGB and #RRGGBB are accepted."""
    with pytest.raises(StyleOverrideError):
        apply_overrides(TemplateRegistry().get("oliver"), color_override=color)


@pytest.mark.unit
def test_style_overrides_merge():
    """Test nested style overrides."""
    definition = apply_overrides(
        TemplateRegistry().get("oliver"), style_overrides={"spacing": {"section_gap": 30}}
    )
    assert definition.style["spacing"]["section_gap"] == 30
    assert definition.style["spacing"]["entry_gap"] == 8


@pytest.mark.unit
def test_load_style_presets():
    """Test preset flattening."""
    presets = load_style_presets()

    assert "spacing_tight" in presets
    assert "fonts_serif" in presets
    assert presets["headings_plain"]["decorations"]["heading_rule"] is False


@pytest.mark.unit
def test_presets_apply_in_order():
    """Test that later presets override earlier ones."""
    definition = apply_presets(TemplateRegistry().get("oliver"), ["fonts_serif", "fonts_sans"])
    assert definition.style["fonts"]["regular"] == "Helvetica"

    tight = apply_presets(TemplateRegistry().get("oliver"), ["spacing_tight"])
    assert tight.style["spacing"]["section_gap"] == 10


@pytest.mark.unit
def test_unknown_preset():
    """Test error for a preset that does not exist."""
    with pytest.raises(StyleOverrideError, match="not found"):
        apply_presets(TemplateRegistry().get("oliver"), ["spacing_huge"])


# =============================================================================
# Format strings
# =============================================================================


@pytest.mark.unit
def test_format_registry_render_and_cache():
    """Test rendering and caching of format strings."""
    formats = FormatRegistry()
    text = formats.render("{{ [company, location] | select | join(' | ') }}", {"company": "Acme", "location": ""})

    assert text == "Acme"
    assert formats.is_cached("{{ [company, location] | select | join(' | ') }}")


@pytest.mark.unit
def test_format_registry_missing_field():
    """Test that a format naming a missing field fails loudly."""
    with pytest.raises(TemplateRenderError):
        FormatRegistry().render("{{ missing }}", {})


@pytest.mark.unit
def test_format_registry_invalid_syntax():
    """Test error for a format string that does not compile."""
    with pytest.raises(TemplateRenderError):
        FormatRegistry().render("{% if %}", {})
