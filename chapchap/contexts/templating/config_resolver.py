"""
Style Override Resolution for Document Generation

Applies a caller's colour override and named style presets on top of a
resolved template definition. Presets are composable and can override each
other, allowing flexible combination of spacing, fonts, etc.

Examples:
    # Brand colour chosen in the editor
    >>> apply_overrides(definition, color_override="#0F766E")

    # Apply multiple presets (later overrides earlier)
    >>> apply_presets(definition, ["spacing_tight", "fonts_serif"])
"""

import os
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from chapchap.contexts.templating.exceptions import StyleOverrideError
from chapchap.contexts.templating.registries import TemplateDefinition

load_dotenv()
STYLE_PRESETS_PATH = Path(
    os.getenv(
        "STYLE_PRESETS_PATH",
        str(Path(__file__).resolve().parent / "definitions" / "presets.yaml"),
    )
)

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def load_style_presets(config_path: Path = None) -> Dict[str, Any]:
    """
    Load presets.yaml and flatten to a single-level dict.

    Collapses nested structure: spacing.tight -> spacing_tight

    Returns:
        Flattened dict mapping preset names to style fragments
        Example: {"spacing_tight": {"spacing": {...}}, "fonts_serif": {...}}
    """
    if config_path is None:
        config_path = STYLE_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


def _merge_style(style: Dict[str, Any], fragment: Dict[str, Any]) -> Dict[str, Any]:
    merged = OmegaConf.merge(OmegaConf.create(style), OmegaConf.create(fragment))
    return OmegaConf.to_container(merged, resolve=True)


def apply_overrides(
    definition: TemplateDefinition,
    color_override: Optional[str] = None,
    style_overrides: Optional[Dict[str, Any]] = None,
) -> TemplateDefinition:
    """
    Return a copy of a definition with the primary colour and/or style keys replaced.

    The registry's cached definition is never modified.

    Args:
        definition: Resolved template definition
        color_override: Hex colour ("#RGB" or "#RRGGBB") for the primary palette slot
        style_overrides: Nested style fragment merged over definition.style

    Raises:
        StyleOverrideError: If color_override is not a hex colour
    """
    if color_override is None and not style_overrides:
        return definition

    style = definition.style
    if style_overrides:
        style = _merge_style(style, style_overrides)
    if color_override is not None:
        if not HEX_COLOR.match(color_override):
            raise StyleOverrideError(
                f"Invalid colour override '{color_override}' (expected #RGB or #RRGGBB)",
                override=color_override,
            )
        style = _merge_style(style, {"palette": {"primary": color_override}})

    return replace(definition, style=style)


def apply_presets(
    definition: TemplateDefinition,
    preset_names: List[str],
    config_path: Path = None,
) -> TemplateDefinition:
    """
    Apply named style presets to a definition.

    Presets are applied in order, with later presets overriding earlier ones.

    Raises:
        StyleOverrideError: If a preset is not found
    """
    if not preset_names:
        return definition

    presets_dict = load_style_presets(config_path)

    style = definition.style
    for preset_name in preset_names:
        if preset_name not in presets_dict:
            raise StyleOverrideError(
                f"Preset '{preset_name}' not found",
                override=preset_name,
                available=sorted(presets_dict),
            )
        style = _merge_style(style, presets_dict[preset_name])

    return replace(definition, style=style)
