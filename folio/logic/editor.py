import copy
import logging
from typing import Any, Dict

from folio.logic.store import RecordStore
from folio.logic.validator import ValidationResult, validate
from folio.models.errors import FieldError

logger = logging.getLogger(__name__)


def _list_index(key: Any, items: list) -> int:
    """Position in `items` named by `key`; len(items) means append."""
    index = int(key)
    if not 0 <= index <= len(items):
        raise ValueError(f"index {key} is outside 0..{len(items)}")
    return index


def deep_merge(base: Any, edits: Any) -> Any:
    """
    Merges an edit batch into a record's wire form.
    Dicts merge key by key, a list of edits merges index by index when the
    edit is a dict keyed by position ({"0": {...}}), anything else replaces.
    """
    if isinstance(base, dict) and isinstance(edits, dict):
        merged = dict(base)
        for key, value in edits.items():
            merged[key] = deep_merge(base.get(key), value) if key in base else value
        return merged
    if isinstance(base, list) and isinstance(edits, dict):
        merged = list(base)
        for key, value in edits.items():
            index = _list_index(key, merged)
            if index == len(merged):
                merged.append(value)
            else:
                merged[index] = deep_merge(merged[index], value)
        return merged
    return edits


def set_path(data: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """
    Returns a copy of `data` with the dotted `path` set to `value`, e.g.
    set_path(wire, "skills.0.level", 80). Index len(list) appends.
    """
    result = copy.deepcopy(data)
    parts = path.split(".")
    node = result
    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        if isinstance(node, list):
            index = _list_index(part, node)
            if index == len(node):
                node.append(value if last else {})
            elif last:
                node[index] = value
            node = node[index]
        elif isinstance(node, dict):
            if last:
                node[part] = value
            else:
                if not isinstance(node.get(part), (dict, list)):
                    node[part] = [] if parts[i + 1].isdigit() else {}
                node = node[part]
        else:
            raise ValueError(f"{'.'.join(parts[:i])} holds a {type(node).__name__}, not a section")
    return result


def apply_edits(store: RecordStore, edits: Dict[str, Any]) -> ValidationResult:
    """
    Validates an admin edit batch against the current record and commits it
    only when the merged result is well formed. Rejected edits leave the
    store untouched.
    """
    current = store.get()
    if current is None:
        return ValidationResult(errors=[FieldError(path="", reason="there is no record to edit")])
    try:
        candidate = deep_merge(current.to_wire(), edits)
    except (ValueError, IndexError, TypeError) as e:
        return ValidationResult(errors=[FieldError(path="", reason=f"edit batch does not fit the record: {e}")])

    result = validate(candidate)
    if result.ok:
        store.set(result.record)
        logger.info("Admin edit committed (%d top-level keys)", len(edits))
    else:
        logger.warning("Admin edit rejected with %d error(s)", len(result.errors))
    return result


def remove_entry(store: RecordStore, section: str, index: int) -> ValidationResult:
    """Drops one entry of a list section ("skills", "projects", ...) and commits."""
    current = store.get()
    if current is None:
        return ValidationResult(errors=[FieldError(path="", reason="there is no record to edit")])
    wire = current.to_wire()
    entries = wire.get(section)
    if not isinstance(entries, list) or not 0 <= index < len(entries):
        return ValidationResult(errors=[FieldError(path=f"{section}.{index}", reason="no such entry")])
    wire[section] = entries[:index] + entries[index + 1:]
    result = validate(wire)
    if result.ok:
        store.set(result.record)
    return result
