from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from receitas.app.domain.errors import StoreReadError, StoreWriteError
from receitas.app.domain.models import UserProfile
from receitas.app.infra.db.base import ProfileRepository
from receitas.app.infra.db.supabase_recipes_repo import (
    _create_supabase_client,
    _parse_datetime,
)

logger = logging.getLogger(__name__)


def _row_to_profile(row: dict[str, Any]) -> UserProfile:
    favorites = row.get("favorite_recipes")
    return UserProfile(
        id=str(row["id"]),
        display_name=str(row.get("display_name") or ""),
        email=str(row.get("email") or ""),
        photo_url=row.get("photo_url") or None,
        bio=str(row.get("bio") or ""),
        favorite_recipes=[str(item) for item in favorites] if isinstance(favorites, list) else [],
        created_at=_parse_datetime(row.get("created_at")),
    )


class SupabaseProfileRepository(ProfileRepository):
    TABLE_NAME = "users"

    def __init__(self, client: Client | None = None):
        self._client = client or _create_supabase_client()

    def get(self, user_id: str) -> Optional[UserProfile]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to fetch profile %s: %s", user_id, error)
            raise StoreReadError("get_profile", str(error)) from error

        if not result.data:
            return None
        return _row_to_profile(result.data[0])

    def create(self, profile: UserProfile) -> UserProfile:
        row = {
            "id": profile.id,
            "display_name": profile.display_name,
            "email": profile.email,
            "photo_url": profile.photo_url,
            "bio": profile.bio,
            "favorite_recipes": list(profile.favorite_recipes),
        }
        try:
            result = self._client.table(self.TABLE_NAME).upsert(row).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to create profile %s: %s", profile.id, error)
            raise StoreWriteError("create_profile", str(error)) from error

        logger.info("Created profile: id=%s", profile.id)
        return _row_to_profile(result.data[0]) if result.data else profile

    def update(self, user_id: str, fields: dict[str, Any]) -> None:
        try:
            self._client.table(self.TABLE_NAME).update(fields).eq("id", user_id).execute()
        except (APIError, httpx.HTTPError) as error:
            logger.error("Failed to update profile %s: %s", user_id, error)
            raise StoreWriteError("update_profile", str(error)) from error
        logger.info("Updated profile: id=%s, fields=%s", user_id, sorted(fields))
