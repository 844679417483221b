# receitas/app/services/recipes.py
"""
Recipe use cases: listing with filters, and the create/edit/delete flows
that coordinate image uploads with document writes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from receitas.app.domain.errors import (
    RecipeNotFoundError,
    RecipeValidationError,
    StoreWriteError,
    UploadError,
)
from receitas.app.domain.filters import EmptyState, RecipeFilter, empty_state, filter_recipes
from receitas.app.domain.form import RecipeForm
from receitas.app.domain.models import ImageUpload, Recipe
from receitas.app.infra.db.base import RecipeRepository
from receitas.app.services.images import ImageStore

logger = logging.getLogger(__name__)


@dataclass
class RecipeListing:
    recipes: list[Recipe]
    unfiltered_total: int
    empty_state: EmptyState


class RecipeService:
    """
    Every operation is scoped to `owner_id`: recipes of other users are
    reported as missing.
    """

    def __init__(self, repository: RecipeRepository, images: ImageStore):
        self._repo = repository
        self._images = images

    def list_recipes(self, owner_id: str, criteria: Optional[RecipeFilter] = None) -> RecipeListing:
        recipes = [r for r in self._repo.list(owner_id) if r.user_id == owner_id]
        filtered = filter_recipes(recipes, criteria or RecipeFilter())
        return RecipeListing(
            recipes=filtered,
            unfiltered_total=len(recipes),
            empty_state=empty_state(recipes, filtered),
        )

    def get_recipe(self, owner_id: str, recipe_id: str) -> Optional[Recipe]:
        recipe = self._repo.get(recipe_id)
        if recipe is None or recipe.user_id != owner_id:
            return None
        return recipe

    def _require_recipe(self, owner_id: str, recipe_id: str) -> Recipe:
        recipe = self.get_recipe(owner_id, recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    def create_recipe(
        self,
        owner_id: str,
        form: RecipeForm,
        cover: Optional[ImageUpload] = None,
        memory_images: Optional[Mapping[int, ImageUpload]] = None,
    ) -> str:
        form.validate()
        uploaded = self._upload_images(owner_id, form, cover, memory_images or {})
        try:
            return self._repo.create(form.to_fields(), owner_id)
        except StoreWriteError:
            self._discard(owner_id, uploaded)
            raise

    def update_recipe(
        self,
        owner_id: str,
        recipe_id: str,
        form: RecipeForm,
        cover: Optional[ImageUpload] = None,
        memory_images: Optional[Mapping[int, ImageUpload]] = None,
    ) -> Recipe:
        current = self._require_recipe(owner_id, recipe_id)
        form.validate()
        uploaded = self._upload_images(owner_id, form, cover, memory_images or {})
        fields = form.to_fields()
        try:
            self._repo.update(recipe_id, fields)
        except StoreWriteError:
            self._discard(owner_id, uploaded)
            raise

        kept = {fields["image_url"], *(m.image_url for m in fields["memories"])}
        self._discard(owner_id, [url for url in current.image_urls if url not in kept])

        updated = self._repo.get(recipe_id)
        if updated is None:
            # Deleted while saving
            self._discard(owner_id, uploaded)
            raise RecipeNotFoundError(recipe_id)
        return updated

    def delete_recipe(self, owner_id: str, recipe_id: str) -> None:
        recipe = self._require_recipe(owner_id, recipe_id)
        self._discard(owner_id, recipe.image_urls)
        self._repo.delete(recipe_id)

    def _upload_images(
        self,
        owner_id: str,
        form: RecipeForm,
        cover: Optional[ImageUpload],
        memory_images: Mapping[int, ImageUpload],
    ) -> list[str]:
        """
        Upload the newly selected images and point the form at them.
        On failure, images uploaded so far are removed and the error re-raised.
        """
        for index in memory_images:
            if not 0 <= index < len(form.memories):
                raise RecipeValidationError(
                    "A imagem não corresponde a nenhuma memória", field="memories"
                )
        # Reject bad files before uploading any of them
        for image in [cover, *memory_images.values()]:
            if image is not None:
                self._images.check(image)

        uploaded: list[str] = []
        try:
            if cover is not None:
                url = self._images.upload(owner_id, cover, kind="cover")
                uploaded.append(url)
                form.image_url = url
            for index, image in sorted(memory_images.items()):
                url = self._images.upload(owner_id, image, kind="memory")
                uploaded.append(url)
                form.memories.update_at(index, "image_url", url)
        except UploadError:
            self._discard(owner_id, uploaded)
            raise
        return uploaded

    def _discard(self, owner_id: str, urls: list[str]) -> None:
        for url in urls:
            self._images.delete_by_url(owner_id, url)
