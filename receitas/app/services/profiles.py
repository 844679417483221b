from __future__ import annotations

import logging
from typing import Any, Optional

from receitas.app.domain.models import ImageUpload, UserProfile
from receitas.app.infra.db.base import ProfileRepository
from receitas.app.services.images import ImageStore
from receitas.app.services.session import CurrentUser

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, repository: ProfileRepository, images: ImageStore):
        self._repo = repository
        self._images = images

    def get_or_create(self, user: CurrentUser) -> UserProfile:
        """Return the user's profile, creating it from the auth identity on first view."""
        profile = self._repo.get(user.id)
        if profile is not None:
            return profile
        logger.info("Creating profile on first view: user=%s", user.id)
        return self._repo.create(
            UserProfile(
                id=user.id,
                display_name=user.name or "",
                email=user.email or "",
                photo_url=user.photo_url,
            )
        )

    def update(
        self,
        user: CurrentUser,
        display_name: Optional[str] = None,
        bio: Optional[str] = None,
        photo: Optional[ImageUpload] = None,
    ) -> UserProfile:
        profile = self.get_or_create(user)
        changes: dict[str, Any] = {}
        if display_name is not None:
            changes["display_name"] = display_name.strip()
        if bio is not None:
            changes["bio"] = bio.strip()
        if photo is not None:
            changes["photo_url"] = self._images.upload_profile_photo(user.id, photo)

        if changes:
            self._repo.update(user.id, changes)
            profile.display_name = changes.get("display_name", profile.display_name)
            profile.bio = changes.get("bio", profile.bio)
            profile.photo_url = changes.get("photo_url", profile.photo_url)
        return profile

    def add_favorite(self, user: CurrentUser, recipe_id: str) -> UserProfile:
        profile = self.get_or_create(user)
        if recipe_id not in profile.favorite_recipes:
            profile.favorite_recipes = [*profile.favorite_recipes, recipe_id]
            self._repo.update(user.id, {"favorite_recipes": profile.favorite_recipes})
        return profile

    def remove_favorite(self, user: CurrentUser, recipe_id: str) -> UserProfile:
        profile = self.get_or_create(user)
        if recipe_id in profile.favorite_recipes:
            profile.favorite_recipes = [r for r in profile.favorite_recipes if r != recipe_id]
            self._repo.update(user.id, {"favorite_recipes": profile.favorite_recipes})
        return profile
