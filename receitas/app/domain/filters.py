"""
In-memory search and facet filtering over a user's loaded recipes.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from receitas.app.domain.models import Recipe

ALL_OCCASIONS = "Todas"
ALL_DIFFICULTIES = "Todas"
ALL_PREPARATION_TIMES = "Todos"


class EmptyState(str, Enum):
    NONE = "none"
    NO_RECIPES = "no_recipes"
    NO_MATCHES = "no_matches"


@dataclass
class RecipeFilter:
    """Active search/filter selections. Empty values mean "all"."""
    query: str = ""
    occasion: Optional[str] = ALL_OCCASIONS
    difficulty: Optional[str] = ALL_DIFFICULTIES
    preparation_time: Optional[str] = ALL_PREPARATION_TIMES

    @property
    def is_empty(self) -> bool:
        return (
            not self.query.strip()
            and _is_all(self.occasion, ALL_OCCASIONS)
            and _is_all(self.difficulty, ALL_DIFFICULTIES)
            and _is_all(self.preparation_time, ALL_PREPARATION_TIMES)
        )


def _is_all(selection: Optional[str], sentinel: str) -> bool:
    return not selection or selection == sentinel


def _facet_matches(value: Optional[Enum], selection: Optional[str], sentinel: str) -> bool:
    if _is_all(selection, sentinel):
        return True
    return value is not None and value.value == selection


def matches(recipe: Recipe, criteria: RecipeFilter) -> bool:
    query = criteria.query.strip().lower()
    if query and query not in recipe.title.lower():
        return False
    return (
        _facet_matches(recipe.occasion, criteria.occasion, ALL_OCCASIONS)
        and _facet_matches(recipe.difficulty, criteria.difficulty, ALL_DIFFICULTIES)
        and _facet_matches(
            recipe.preparation_time, criteria.preparation_time, ALL_PREPARATION_TIMES
        )
    )


def filter_recipes(recipes: Iterable[Recipe], criteria: RecipeFilter) -> list[Recipe]:
    """Recipes matching every active selection, in their original order."""
    return [recipe for recipe in recipes if matches(recipe, criteria)]


def empty_state(all_recipes: list[Recipe], filtered: list[Recipe]) -> EmptyState:
    if not all_recipes:
        return EmptyState.NO_RECIPES
    if not filtered:
        return EmptyState.NO_MATCHES
    return EmptyState.NONE
