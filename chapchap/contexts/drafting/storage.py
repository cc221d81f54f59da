"""
Draft files.

Drafts are saved between wizard sessions as YAML (or JSON) files. Loading goes
through OmegaConf, which reads both formats, and then through the document
schema, so a hand-edited draft is checked the same way as browser input.
"""

import json
from pathlib import Path
from typing import Optional, Union

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from chapchap.contexts.drafting.document_model import (
    Document,
    document_from_dict,
    document_to_dict,
)
from chapchap.contexts.drafting.exceptions import ValidationError
from chapchap.contexts.drafting.logger import _log_debug

DRAFT_SUFFIXES = (".yaml", ".yml", ".json")


def load_document(path: Union[str, Path], document_type: Optional[str] = None) -> Document:
    """
    Load a CV or letter draft from a YAML/JSON file.

    Args:
        path: Draft file
        document_type: "cv" or "letter"; detected from the keys when None

    Returns:
        CVData or LetterData instance

    Raises:
        FileNotFoundError: If path does not exist
        ValidationError: If the file does not contain a valid draft
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Draft file not found: {path}")
    if path.suffix.lower() not in DRAFT_SUFFIXES:
        raise ValidationError(f"Unsupported draft format '{path.suffix}' (expected one of {DRAFT_SUFFIXES})")

    try:
        # Drafts are user text: "${...}" is kept literally, never interpolated
        data = OmegaConf.to_container(OmegaConf.load(path), resolve=False)
    except OmegaConfBaseException as e:
        raise ValidationError(f"Could not read draft {path}", schema_errors=[str(e)]) from e
    _log_debug(f"Loaded draft from {path}")
    return document_from_dict(data, document_type=document_type)


def save_document(document: Document, path: Union[str, Path]) -> Path:
    """
    Save a draft as YAML or JSON depending on the file suffix.

    Returns:
        Path written
    """
    path = Path(path)
    if path.suffix.lower() not in DRAFT_SUFFIXES:
        raise ValueError(f"Unsupported draft format '{path.suffix}' (expected one of {DRAFT_SUFFIXES})")

    path.parent.mkdir(parents=True, exist_ok=True)
    data = document_to_dict(document)

    if path.suffix.lower() == ".json":
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        OmegaConf.save(OmegaConf.create(data), path)

    _log_debug(f"Saved {document.document_type} draft to {path}")
    return path
