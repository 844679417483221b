from __future__ import annotations

from receitas.app.domain.filters import (
    ALL_DIFFICULTIES,
    ALL_OCCASIONS,
    ALL_PREPARATION_TIMES,
    EmptyState,
    RecipeFilter,
    empty_state,
    filter_recipes,
)
from receitas.app.domain.models import Difficulty, Occasion, PreparationTime, Recipe


def make_recipe(recipe_id: str, title: str, **overrides) -> Recipe:
    return Recipe(id=recipe_id, user_id="u1", title=title, **overrides)


def sample_recipes() -> list[Recipe]:
    return [
        make_recipe(
            "r1",
            "Bolo de Chocolate",
            occasion=Occasion.DOCES,
            difficulty=Difficulty.MEDIO,
            preparation_time=PreparationTime.MEDIO,
        ),
        make_recipe(
            "r2",
            "Salada",
            occasion=Occasion.SALGADOS,
            difficulty=Difficulty.FACIL,
            preparation_time=PreparationTime.RAPIDO,
        ),
        make_recipe("r3", "Mousse de chocolate", occasion=Occasion.DOCES),
    ]


class TestFilterRecipes:
    def test_no_filters_returns_list_unchanged(self) -> None:
        recipes = sample_recipes()
        assert filter_recipes(recipes, RecipeFilter()) == recipes
        assert RecipeFilter().is_empty

    def test_none_and_empty_selections_mean_all(self) -> None:
        recipes = sample_recipes()
        criteria = RecipeFilter(query="", occasion=None, difficulty="", preparation_time=None)
        assert filter_recipes(recipes, criteria) == recipes

    def test_search_is_case_insensitive_substring(self) -> None:
        recipes = [make_recipe("r1", "Bolo de Chocolate"), make_recipe("r2", "Salada")]

        result = filter_recipes(recipes, RecipeFilter(query="choc"))

        assert [r.title for r in result] == ["Bolo de Chocolate"]

    def test_occasion_filter(self) -> None:
        recipes = [
            make_recipe("r1", "Brigadeiro", occasion=Occasion.DOCES),
            make_recipe("r2", "Coxinha", occasion=Occasion.SALGADOS),
        ]

        result = filter_recipes(recipes, RecipeFilter(occasion="Salgados"))

        assert [r.id for r in result] == ["r2"]

    def test_recipes_without_facet_do_not_match_specific_selection(self) -> None:
        result = filter_recipes(sample_recipes(), RecipeFilter(difficulty="Médio"))
        assert [r.id for r in result] == ["r1"]

    def test_preparation_time_filter(self) -> None:
        criteria = RecipeFilter(preparation_time="Rápido (até 30 min)")
        assert [r.id for r in filter_recipes(sample_recipes(), criteria)] == ["r2"]

    def test_filters_are_conjunctive_and_keep_order(self) -> None:
        recipes = sample_recipes()
        criteria = RecipeFilter(query="CHOCOLATE", occasion="Doces")

        result = filter_recipes(recipes, criteria)

        assert [r.id for r in result] == ["r1", "r3"]

    def test_result_is_ordered_subset(self) -> None:
        recipes = sample_recipes()
        for criteria in (
            RecipeFilter(query="a"),
            RecipeFilter(occasion="Doces"),
            RecipeFilter(difficulty="Fácil", preparation_time="Rápido (até 30 min)"),
        ):
            result = filter_recipes(recipes, criteria)
            positions = [recipes.index(r) for r in result]
            assert positions == sorted(positions)

    def test_sentinels(self) -> None:
        criteria = RecipeFilter(
            occasion=ALL_OCCASIONS,
            difficulty=ALL_DIFFICULTIES,
            preparation_time=ALL_PREPARATION_TIMES,
        )
        assert criteria.is_empty
        assert filter_recipes(sample_recipes(), criteria) == sample_recipes()


class TestEmptyState:
    def test_no_recipes_at_all(self) -> None:
        assert empty_state([], []) == EmptyState.NO_RECIPES

    def test_no_matches(self) -> None:
        assert empty_state(sample_recipes(), []) == EmptyState.NO_MATCHES

    def test_has_results(self) -> None:
        recipes = sample_recipes()
        assert empty_state(recipes, recipes[:1]) == EmptyState.NONE
