# receitas/app/infra/db/base.py
"""
Abstract base classes for the recipe and profile stores.
This interface allows swapping the backing document store.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from receitas.app.domain.models import Recipe, UserProfile


class RecipeRepository(ABC):
    """
    Abstract interface for recipe persistence.

    Implementations:
    - SupabaseRecipeRepository: `recipes` table in Supabase
    """

    @abstractmethod
    def create(self, fields: dict[str, Any], owner_id: str) -> str:
        """
        Persist a new recipe owned by `owner_id`.

        Args:
            fields: Recipe fields (domain values) as produced by the form
            owner_id: Identity of the owner

        Returns:
            The id assigned by the store

        Raises:
            StoreWriteError: On network or permission failure
        """
        pass

    @abstractmethod
    def get(self, recipe_id: str) -> Optional[Recipe]:
        """
        Fetch a single recipe.

        Args:
            recipe_id: The recipe id

        Returns:
            The recipe, or None if the id does not resolve

        Raises:
            StoreReadError: On network or permission failure
        """
        pass

    @abstractmethod
    def list(self, owner_id: str) -> list[Recipe]:
        """
        Fetch every recipe owned by `owner_id`, newest first.

        Args:
            owner_id: Identity of the owner

        Returns:
            Recipes ordered by creation date descending

        Raises:
            IndexBuildingError: When the (user_id, created_at) index is not ready
            StoreReadError: On any other failure
        """
        pass

    @abstractmethod
    def update(self, recipe_id: str, fields: dict[str, Any]) -> None:
        """
        Overwrite the named fields of an existing recipe.
        List fields are replaced as a whole, never merged.

        Raises:
            StoreWriteError: On network or permission failure
        """
        pass

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        """
        Remove a recipe. Stored images are not touched.

        Raises:
            StoreWriteError: On network or permission failure
        """
        pass


class ProfileRepository(ABC):
    """
    Abstract interface for user profiles (one per identity).
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserProfile]:
        pass

    @abstractmethod
    def create(self, profile: UserProfile) -> UserProfile:
        pass

    @abstractmethod
    def update(self, user_id: str, fields: dict[str, Any]) -> None:
        pass
