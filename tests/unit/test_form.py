from __future__ import annotations

import pytest

from receitas.app.domain.errors import RecipeValidationError
from receitas.app.domain.form import RecipeForm
from receitas.app.domain.models import (
    Ingredient,
    Instruction,
    Memory,
    Occasion,
    Recipe,
    SubStep,
    Unit,
)


def filled_form() -> RecipeForm:
    form = RecipeForm(title="Bolo de Chocolate", description="O preferido lá de casa")
    form.ingredients.append()
    form.ingredients.update_at(0, "name", "Farinha")
    form.ingredients.update_at(0, "quantity", "200")
    form.ingredients.update_at(0, "unit", "g")
    form.instructions.append()
    form.instructions.update_at(0, "step", "Misturar tudo")
    return form


class TestListField:
    def test_append_adds_blank_row_with_defaults(self) -> None:
        form = RecipeForm()

        row = form.instructions.append()

        assert len(form.instructions) == 1
        assert row == Instruction(step="", sub_step=SubStep.BOLO)

    def test_append_then_remove_last_restores_previous_state(self) -> None:
        form = filled_form()
        before = form.ingredients.items

        form.ingredients.append()
        form.ingredients.remove_at(len(form.ingredients) - 1)

        assert form.ingredients.items == before

    def test_remove_keeps_relative_order(self) -> None:
        form = RecipeForm()
        for name in ("Ovos", "Açúcar", "Farinha"):
            form.ingredients.append()
            form.ingredients.update_at(len(form.ingredients) - 1, "name", name)

        removed = form.ingredients.remove_at(1)

        assert removed.name == "Açúcar"
        assert [i.name for i in form.ingredients] == ["Ovos", "Farinha"]
        assert "Açúcar" not in [i.name for i in form.ingredients]

    def test_update_leaves_siblings_untouched(self) -> None:
        form = RecipeForm()
        form.memories.append()
        form.memories.append()
        first = form.memories[0]

        form.memories.update_at(1, "text", "Natal de 2019")

        assert form.memories[0] is first
        assert form.memories[1] == Memory(text="Natal de 2019")

    def test_update_coerces_enum_values(self) -> None:
        form = filled_form()
        form.instructions.update_at(0, "sub_step", "Cobertura")
        form.ingredients.update_at(0, "unit", "")

        assert form.instructions[0].sub_step == SubStep.COBERTURA
        assert form.ingredients[0].unit is None

    def test_update_unknown_field_raises(self) -> None:
        form = filled_form()
        with pytest.raises(ValueError):
            form.ingredients.update_at(0, "colour", "red")

    def test_out_of_range_index_raises(self) -> None:
        form = filled_form()
        with pytest.raises(IndexError):
            form.ingredients.remove_at(5)
        with pytest.raises(IndexError):
            form.ingredients.update_at(-1, "name", "x")

    def test_iteration_returns_snapshot(self) -> None:
        form = filled_form()
        rows = list(form.ingredients)
        form.ingredients.remove_at(0)
        assert len(rows) == 1


class TestRecipeFormValidation:
    def test_blank_form_starts_with_one_row_each(self) -> None:
        form = RecipeForm.blank()
        assert len(form.ingredients) == 1
        assert len(form.instructions) == 1
        assert len(form.memories) == 1

    def test_title_required(self) -> None:
        form = filled_form()
        form.title = "   "
        with pytest.raises(RecipeValidationError) as exc_info:
            form.validate()
        assert exc_info.value.field == "title"

    def test_description_required(self) -> None:
        form = filled_form()
        form.description = ""
        with pytest.raises(RecipeValidationError) as exc_info:
            form.validate()
        assert exc_info.value.field == "description"

    def test_ingredient_needs_name(self) -> None:
        form = filled_form()
        form.ingredients.append()
        form.ingredients.update_at(1, "quantity", "2")
        with pytest.raises(RecipeValidationError) as exc_info:
            form.validate()
        assert exc_info.value.field == "ingredients"

    def test_ingredient_needs_quantity(self) -> None:
        form = filled_form()
        form.ingredients.update_at(0, "quantity", "")
        with pytest.raises(RecipeValidationError) as exc_info:
            form.validate()
        assert "Farinha" in exc_info.value.user_message

    def test_to_taste_ingredient_needs_no_quantity(self) -> None:
        form = filled_form()
        form.ingredients.append()
        form.ingredients.update_at(1, "name", "Sal")
        form.ingredients.update_at(1, "unit", Unit.QB)
        form.validate()

    def test_rating_range(self) -> None:
        form = filled_form()
        form.rating = 6
        with pytest.raises(RecipeValidationError):
            form.validate()


class TestRecipeFormPayload:
    def test_blank_rows_are_dropped(self) -> None:
        form = filled_form()
        form.ingredients.append()
        form.instructions.append()
        form.memories.append()

        fields = form.to_fields()

        assert len(fields["ingredients"]) == 1
        assert len(fields["instructions"]) == 1
        assert fields["memories"] == []

    def test_values_are_trimmed(self) -> None:
        form = filled_form()
        form.title = "  Bolo  "
        form.secret_message = "   "

        fields = form.to_fields()

        assert fields["title"] == "Bolo"
        assert fields["secret_message"] is None
        assert fields["ingredients"][0] == Ingredient(name="Farinha", quantity="200", unit=Unit.GRAMA)

    def test_invalid_form_produces_no_payload(self) -> None:
        form = filled_form()
        form.title = ""
        with pytest.raises(RecipeValidationError):
            form.to_fields()

    def test_from_recipe_copies_rows(self) -> None:
        recipe = Recipe(
            id="r1",
            user_id="u1",
            title="Bolo",
            description="Fofo",
            occasion=Occasion.ANIVERSARIO,
            ingredients=[Ingredient("Ovos", "3")],
            instructions=[Instruction("Bater", SubStep.BOLO)],
            memories=[Memory("Festa")],
            rating=4,
        )

        form = RecipeForm.from_recipe(recipe)
        form.ingredients.update_at(0, "quantity", "4")

        assert recipe.ingredients[0].quantity == "3"
        assert form.occasion == Occasion.ANIVERSARIO
        assert form.rating == 4
        assert form.to_fields()["memories"] == [Memory("Festa")]
