from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from receitas.app.domain.form import RecipeForm
from receitas.app.domain.models import (
    Difficulty,
    Ingredient,
    Instruction,
    Memory,
    Occasion,
    PreparationTime,
    SubStep,
    Unit,
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class IngredientItem(BaseModel):
    name: str = ""
    quantity: str = ""
    unit: Optional[Unit] = None

    @field_validator("unit", mode="before")
    @classmethod
    def blank_unit_is_unset(cls, value):
        return _blank_to_none(value)


class InstructionItem(BaseModel):
    step: str = ""
    subStep: SubStep = SubStep.BOLO


class MemoryItem(BaseModel):
    text: str = ""
    imageUrl: Optional[str] = None


class RecipePayload(BaseModel):
    """Body of the create/edit form, sent as the `payload` multipart field."""
    title: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=5000)
    occasion: Occasion = Occasion.DIA_A_DIA
    difficulty: Optional[Difficulty] = None
    preparationTime: Optional[PreparationTime] = None
    secretMessage: str = ""
    rating: Optional[int] = None
    imageUrl: Optional[str] = None
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[InstructionItem] = Field(default_factory=list)
    memories: list[MemoryItem] = Field(default_factory=list)

    @field_validator("difficulty", "preparationTime", "imageUrl", mode="before")
    @classmethod
    def blank_is_unset(cls, value):
        return _blank_to_none(value)

    @field_validator("rating", mode="before")
    @classmethod
    def zero_rating_is_unset(cls, value):
        return None if value in (0, "0", "") else value

    def to_form(self) -> RecipeForm:
        form = RecipeForm(
            title=self.title,
            description=self.description,
            occasion=self.occasion,
            difficulty=self.difficulty,
            preparation_time=self.preparationTime,
            secret_message=self.secretMessage,
            rating=self.rating,
            image_url=self.imageUrl,
        )
        for item in self.ingredients:
            form.ingredients.append()
            index = len(form.ingredients) - 1
            form.ingredients.update_at(index, "name", item.name)
            form.ingredients.update_at(index, "quantity", item.quantity)
            form.ingredients.update_at(index, "unit", item.unit)
        for item in self.instructions:
            form.instructions.append()
            index = len(form.instructions) - 1
            form.instructions.update_at(index, "step", item.step)
            form.instructions.update_at(index, "sub_step", item.subStep)
        for item in self.memories:
            form.memories.append()
            index = len(form.memories) - 1
            form.memories.update_at(index, "text", item.text)
            form.memories.update_at(index, "image_url", item.imageUrl)
        return form


class RecipeResponse(BaseModel):
    id: str
    title: str
    description: str = ""
    ingredients: list[IngredientItem] = Field(default_factory=list)
    instructions: list[InstructionItem] = Field(default_factory=list)
    imageUrl: Optional[str] = None
    occasion: Occasion
    difficulty: Optional[Difficulty] = None
    preparationTime: Optional[PreparationTime] = None
    secretMessage: Optional[str] = None
    rating: Optional[int] = None
    memories: list[MemoryItem] = Field(default_factory=list)
    createdAt: Optional[str] = None


class InstructionSectionResponse(BaseModel):
    subStep: SubStep
    steps: list[str]


class RecipeDetailResponse(RecipeResponse):
    sections: list[InstructionSectionResponse] = Field(default_factory=list)
    showSpecialFields: bool = False


class RecipeListResponse(BaseModel):
    items: list[RecipeResponse]
    total: int
    unfilteredTotal: int
    emptyState: Literal["none", "no_recipes", "no_matches"]


class RecipeCreatedResponse(BaseModel):
    id: str


class FilterOptions(BaseModel):
    occasions: list[str]
    difficulties: list[str]
    preparationTimes: list[str]


class RecipeOptionsResponse(BaseModel):
    occasions: list[Occasion]
    difficulties: list[Difficulty]
    preparationTimes: list[PreparationTime]
    subSteps: list[SubStep]
    units: list[Unit]
    filters: FilterOptions


def ingredient_item(ingredient: Ingredient) -> IngredientItem:
    return IngredientItem(name=ingredient.name, quantity=ingredient.quantity, unit=ingredient.unit)


def instruction_item(instruction: Instruction) -> InstructionItem:
    return InstructionItem(step=instruction.step, subStep=instruction.sub_step)


def memory_item(memory: Memory) -> MemoryItem:
    return MemoryItem(text=memory.text, imageUrl=memory.image_url)
