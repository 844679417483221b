"""
Normalization of legacy recipe documents into the canonical schema.

Older snapshots of the app stored ingredients, instructions and memories as
plain strings, used camelCase keys and stored `0`/`""` for unset enrichment
fields. Rows are migrated on read so the rest of the code only sees the
canonical shape.
"""
from __future__ import annotations

from typing import Any

from receitas.app.domain.models import SCHEMA_VERSION, SubStep, Unit

LEGACY_INSTRUCTION_SUB_STEP = SubStep.OUTROS.value

_TOP_LEVEL_RENAMES = {
    "userId": "user_id",
    "imageUrl": "image_url",
    "preparationTime": "preparation_time",
    "secretMessage": "secret_message",
    "createdAt": "created_at",
    "schemaVersion": "schema_version",
}

_UNITS = {unit.value for unit in Unit}
_SUB_STEPS = {sub_step.value for sub_step in SubStep}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return str(value) if isinstance(value, str) else ""


def _migrate_ingredient(entry: Any) -> dict[str, Any] | None:
    if isinstance(entry, str):
        return {"name": entry, "quantity": "", "unit": None}
    if not isinstance(entry, dict):
        return None
    unit = entry.get("unit")
    return {
        "name": _text(entry.get("name")),
        "quantity": _text(entry.get("quantity")),
        "unit": unit if unit in _UNITS else None,
    }


def _migrate_instruction(entry: Any) -> dict[str, Any] | None:
    if isinstance(entry, str):
        return {"step": entry, "sub_step": LEGACY_INSTRUCTION_SUB_STEP}
    if not isinstance(entry, dict):
        return None
    sub_step = entry.get("sub_step", entry.get("subStep"))
    return {
        "step": _text(entry.get("step")),
        "sub_step": sub_step if sub_step in _SUB_STEPS else LEGACY_INSTRUCTION_SUB_STEP,
    }


def _migrate_memory(entry: Any) -> dict[str, Any] | None:
    if isinstance(entry, str):
        return {"text": entry, "image_url": None}
    if not isinstance(entry, dict):
        return None
    return {
        "text": _text(entry.get("text")),
        "image_url": entry.get("image_url", entry.get("imageUrl")) or None,
    }


def _migrate_list(value: Any, migrate_entry) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    migrated = (migrate_entry(entry) for entry in value)
    return [entry for entry in migrated if entry is not None]


def is_legacy_document(row: dict[str, Any]) -> bool:
    return row.get("schema_version") != SCHEMA_VERSION or any(
        key in row for key in _TOP_LEVEL_RENAMES
    )


def migrate_recipe_document(row: dict[str, Any]) -> dict[str, Any]:
    """
    Return a canonical copy of a stored recipe row.

    Safe to apply to rows that are already canonical.
    """
    doc = dict(row)
    for legacy_key, key in _TOP_LEVEL_RENAMES.items():
        if legacy_key in doc:
            value = doc.pop(legacy_key)
            doc.setdefault(key, value)

    doc["ingredients"] = _migrate_list(doc.get("ingredients"), _migrate_ingredient)
    doc["instructions"] = _migrate_list(doc.get("instructions"), _migrate_instruction)
    doc["memories"] = _migrate_list(doc.get("memories"), _migrate_memory)

    for key in ("difficulty", "preparation_time", "secret_message", "image_url"):
        if not doc.get(key):
            doc[key] = None

    rating = doc.get("rating")
    if isinstance(rating, (int, float)) and 1 <= rating <= 5:
        doc["rating"] = int(rating)
    else:
        doc["rating"] = None

    doc["schema_version"] = SCHEMA_VERSION
    return doc
