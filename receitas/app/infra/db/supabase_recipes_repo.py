from __future__ import annotations

import logging
from dataclasses import fields as dataclass_fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TypeVar

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from receitas.app.config import settings
from receitas.app.domain.errors import IndexBuildingError, StoreReadError, StoreWriteError
from receitas.app.domain.migration import is_legacy_document, migrate_recipe_document
from receitas.app.domain.models import (
    Difficulty,
    Ingredient,
    Instruction,
    Memory,
    Occasion,
    PreparationTime,
    Recipe,
    SubStep,
    Unit,
)
from receitas.app.infra.db.base import RecipeRepository

logger = logging.getLogger(__name__)

# SQLSTATE object_not_in_prerequisite_state: raised while the backing index is unusable
INDEX_NOT_READY_CODES = {"55000"}
# SQLSTATE invalid_text_representation: malformed uuid
INVALID_ID_CODES = {"22P02"}

LIST_FIELDS = ("ingredients", "instructions", "memories")

E = TypeVar("E", bound=Enum)


def _create_supabase_client() -> Client:
    return create_client(str(settings.SUPABASE_URL), settings.SUPABASE_SERVICE_ROLE_KEY)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _enum_or_none(enum_cls: type[E], value: Any) -> Optional[E]:
    try:
        return enum_cls(value) if value else None
    except ValueError:
        return None


def to_json_value(value: Any) -> Any:
    """Serialize domain values (dataclasses, enums, lists) into JSON-friendly data."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json_value(getattr(value, f.name)) for f in dataclass_fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _is_blank(entry: Any) -> bool:
    if isinstance(entry, str):
        return not entry.strip()
    return bool(getattr(entry, "is_blank", False))


def strip_blank_entries(fields: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(fields)
    for key in LIST_FIELDS:
        if key in cleaned and isinstance(cleaned[key], list):
            cleaned[key] = [entry for entry in cleaned[key] if not _is_blank(entry)]
    return cleaned


def row_to_recipe(row: dict[str, Any]) -> Recipe:
    doc = migrate_recipe_document(row)
    return Recipe(
        id=str(doc["id"]),
        user_id=str(doc.get("user_id") or ""),
        title=str(doc.get("title") or ""),
        description=str(doc.get("description") or ""),
        ingredients=[
            Ingredient(
                name=item["name"],
                quantity=item["quantity"],
                unit=_enum_or_none(Unit, item["unit"]),
            )
            for item in doc["ingredients"]
        ],
        instructions=[
            Instruction(step=item["step"], sub_step=SubStep(item["sub_step"]))
            for item in doc["instructions"]
        ],
        image_url=doc.get("image_url"),
        occasion=_enum_or_none(Occasion, doc.get("occasion")) or Occasion.DIA_A_DIA,
        difficulty=_enum_or_none(Difficulty, doc.get("difficulty")),
        preparation_time=_enum_or_none(PreparationTime, doc.get("preparation_time")),
        secret_message=doc.get("secret_message"),
        rating=doc.get("rating"),
        memories=[
            Memory(text=item["text"], image_url=item["image_url"]) for item in doc["memories"]
        ],
        created_at=_parse_datetime(doc.get("created_at")),
        schema_version=doc["schema_version"],
    )


def _error_code(error: APIError) -> str:
    return str(getattr(error, "code", "") or "")


def _is_index_not_ready(error: APIError) -> bool:
    if _error_code(error) in INDEX_NOT_READY_CODES:
        return True
    message = str(getattr(error, "message", "") or error).lower()
    return "index" in message and ("building" in message or "not ready" in message)


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def create(self, fields: dict[str, Any], owner_id: str) -> str:
        row = {key: to_json_value(value) for key, value in strip_blank_entries(fields).items()}
        row.pop("id", None)
        row.pop("created_at", None)
        row["user_id"] = owner_id

        try:
            result = self._client.table(self.TABLE_NAME).insert(row).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to create recipe for user=%s: %s", owner_id, error)
            raise StoreWriteError("create", str(error)) from error

        if not result.data:
            raise StoreWriteError("create", "insert returned no rows")

        recipe_id = str(result.data[0]["id"])
        logger.info("Created recipe: id=%s, user=%s", recipe_id, owner_id)
        return recipe_id

    def get(self, recipe_id: str) -> Optional[Recipe]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("id", recipe_id)
                .limit(1)
                .execute()
            )
        except APIError as error:
            if _error_code(error) in INVALID_ID_CODES:
                return None
            logger.error("Failed to fetch recipe %s: %s", recipe_id, error)
            raise StoreReadError("get", str(error)) from error
        except httpx.HTTPError as error:
            logger.error("Network error fetching recipe %s: %s", recipe_id, error)
            raise StoreReadError("get", str(error)) from error

        if not result.data:
            return None
        return row_to_recipe(result.data[0])

    def list(self, owner_id: str) -> list[Recipe]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("user_id", owner_id)
                .order("created_at", desc=True)
                .execute()
            )
        except APIError as error:
            if _is_index_not_ready(error):
                logger.warning("Recipes index not ready for user=%s: %s", owner_id, error)
                raise IndexBuildingError("list", str(error)) from error
            logger.error("Failed to list recipes for user=%s: %s", owner_id, error)
            raise StoreReadError("list", str(error)) from error
        except httpx.HTTPError as error:
            logger.error("Network error listing recipes for user=%s: %s", owner_id, error)
            raise StoreReadError("list", str(error)) from error

        recipes: list[Recipe] = []
        for row in result.data or []:
            if str(row.get("user_id")) != owner_id:
                logger.warning("Dropping recipe %s not owned by user=%s", row.get("id"), owner_id)
                continue
            recipes.append(row_to_recipe(row))
        return recipes

    def update(self, recipe_id: str, fields: dict[str, Any]) -> None:
        row = {key: to_json_value(value) for key, value in strip_blank_entries(fields).items()}
        for immutable in ("id", "user_id", "created_at"):
            row.pop(immutable, None)

        try:
            self._client.table(self.TABLE_NAME).update(row).eq("id", recipe_id).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to update recipe %s: %s", recipe_id, error)
            raise StoreWriteError("update", str(error)) from error
        logger.info("Updated recipe: id=%s, fields=%s", recipe_id, sorted(row))

    def delete(self, recipe_id: str) -> None:
        try:
            self._client.table(self.TABLE_NAME).delete().eq("id", recipe_id).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to delete recipe %s: %s", recipe_id, error)
            raise StoreWriteError("delete", str(error)) from error
        logger.info("Deleted recipe: id=%s", recipe_id)

    def migrate_legacy_documents(self, dry_run: bool = False, page_size: int = 200) -> int:
        """Rewrite legacy-shaped rows in the canonical schema. Returns how many were legacy."""
        migrated = 0
        start = 0
        while True:
            try:
                result = (
                    self._client.table(self.TABLE_NAME)
                    .select("*")
                    .order("id")
                    .range(start, start + page_size - 1)
                    .execute()
                )
            except (APIError, httpx.HTTPError) as error:
                raise StoreReadError("migrate", str(error)) from error

            rows = result.data or []
            for row in rows:
                if not is_legacy_document(row):
                    continue
                migrated += 1
                doc = migrate_recipe_document(row)
                recipe_id = str(doc.pop("id"))
                if dry_run:
                    logger.info("Would migrate recipe %s", recipe_id)
                    continue
                for immutable in ("user_id", "created_at"):
                    doc.pop(immutable, None)
                self.update(recipe_id, doc)

            if len(rows) < page_size:
                return migrated
            start += page_size
