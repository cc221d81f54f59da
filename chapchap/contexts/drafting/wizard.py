"""
Draft updates for the CV and letter wizards.

Every wizard step hands its partial form state to commit(), which returns a
new draft and leaves the previous one untouched. There is no shared mutable
draft: the caller owns each version and passes it on explicitly.

Entry list helpers (add/update/remove/move) follow the same rule.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from chapchap.contexts.drafting.document_model import (
    CV_ENTRY_LISTS,
    CVData,
    Document,
    Entry,
)
from chapchap.contexts.drafting.exceptions import ValidationError
from chapchap.contexts.drafting.logger import _log_debug

# Step order of each wizard (ids only, the UI lives elsewhere)
WIZARD_STEPS = {
    "cv": [
        "template",
        "personal",
        "experience",
        "education",
        "skills",
        "summary",
        "references",
        "additional",
        "preview",
        "download",
    ],
    "letter": ["template", "job", "strengths", "signature", "preview", "download"],
}


def next_step(document_type: str, current: str) -> Optional[str]:
    """Step after `current`, or None on the last step."""
    steps = WIZARD_STEPS[document_type]
    index = steps.index(current)
    return steps[index + 1] if index + 1 < len(steps) else None


def previous_step(document_type: str, current: str) -> Optional[str]:
    """Step before `current`, or None on the first step."""
    steps = WIZARD_STEPS[document_type]
    index = steps.index(current)
    return steps[index - 1] if index > 0 else None


# =============================================================================
# Helpers
# =============================================================================


def _to_snake_keys(data: Any) -> Any:
    """Recursively convert dict keys from camelCase to snake_case."""
    if isinstance(data, dict):
        return {to_snake(str(key)): _to_snake_keys(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_to_snake_keys(item) for item in data]
    return data


def _deep_merge(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Merge update into base: nested dicts merge, lists and scalars are replaced."""
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _revalidate(model, data: Dict[str, Any]):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Update does not match the draft schema",
            schema_errors=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ],
        ) from e


def _entries(document: Document, list_name: str) -> List[Entry]:
    """Deep copies of the entries in a CV entry list."""
    if not isinstance(document, CVData) or list_name not in CV_ENTRY_LISTS:
        raise KeyError(f"Unknown entry list: {list_name}")
    return [entry.model_copy(deep=True) for entry in getattr(document, list_name)]


def _find(entries: List[Entry], entry_id: str, list_name: str) -> int:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    raise KeyError(f"No entry with id '{entry_id}' in {list_name}")


def _with_entries(document: CVData, list_name: str, entries: List[Entry]) -> CVData:
    updated = document.model_copy(deep=True)
    setattr(updated, list_name, entries)
    return updated


# =============================================================================
# Operations
# =============================================================================


def commit(document: Document, partial_update: Dict[str, Any]) -> Document:
    """
    Apply one wizard step's form state to a draft.

    Nested records (personal_info, sender, ...) are merged field by field;
    list fields are replaced wholesale. Keys may be camelCase or snake_case.

    Args:
        document: Current draft (not modified)
        partial_update: Fields changed by the step

    Returns:
        New draft of the same type

    Raises:
        KeyError: If the update names a field the draft does not have
        ValidationError: If the merged draft does not match the schema
    """
    current = document.model_dump()
    update = _to_snake_keys(partial_update or {})

    unknown = sorted(set(update) - set(current))
    if unknown:
        raise KeyError(f"Unknown {document.document_type} fields: {', '.join(unknown)}")

    _log_debug(f"Committing {document.document_type} fields: {', '.join(sorted(update)) or '-'}")
    return _revalidate(type(document), _deep_merge(current, update))


def add_entry(
    document: CVData,
    list_name: str,
    entry: Optional[Any] = None,
    position: Optional[int] = None,
) -> CVData:
    """
    Add an entry to a CV entry list.

    Args:
        document: Current draft (not modified)
        list_name: Entry list field (e.g. "work_experiences")
        entry: Record instance or raw dict; an empty record when None
        position: Insert position (default: append)

    Raises:
        KeyError: Unknown list name
        ValidationError: Entry data does not match the schema or its id is taken
    """
    entries = _entries(document, list_name)
    record_cls = CV_ENTRY_LISTS[list_name]

    if isinstance(entry, record_cls):
        record = entry.model_copy(deep=True)
    else:
        record = _revalidate(record_cls, _to_snake_keys(entry or {}))

    if any(existing.id == record.id for existing in entries):
        raise ValidationError(
            f"Cannot add entry to {list_name}", duplicate_ids={list_name: [record.id]}
        )

    if position is None:
        entries.append(record)
    else:
        entries.insert(position, record)

    _log_debug(f"Added {list_name} entry {record.id}")
    return _with_entries(document, list_name, entries)


def update_entry(
    document: CVData, list_name: str, entry_id: str, changes: Dict[str, Any]
) -> CVData:
    """Merge changes into one entry. The entry keeps its id and position."""
    entries = _entries(document, list_name)
    index = _find(entries, entry_id, list_name)

    changes = {key: value for key, value in _to_snake_keys(changes).items() if key != "id"}
    merged = _deep_merge(entries[index].model_dump(), changes)
    entries[index] = _revalidate(CV_ENTRY_LISTS[list_name], merged)

    _log_debug(f"Updated {list_name} entry {entry_id}")
    return _with_entries(document, list_name, entries)


def remove_entry(document: CVData, list_name: str, entry_id: str) -> CVData:
    """Remove one entry; the remaining entries keep their order."""
    entries = _entries(document, list_name)
    del entries[_find(entries, entry_id, list_name)]

    _log_debug(f"Removed {list_name} entry {entry_id}")
    return _with_entries(document, list_name, entries)


def move_entry(document: CVData, list_name: str, entry_id: str, new_index: int) -> CVData:
    """
    Move one entry to new_index (0-based, after removal of the entry).

    Raises:
        IndexError: If new_index is outside the list
    """
    entries = _entries(document, list_name)
    if not 0 <= new_index < len(entries):
        raise IndexError(f"Position {new_index} out of range for {list_name} ({len(entries)} entries)")

    record = entries.pop(_find(entries, entry_id, list_name))
    entries.insert(new_index, record)

    _log_debug(f"Moved {list_name} entry {entry_id} to position {new_index}")
    return _with_entries(document, list_name, entries)
