"""
Editable state of the create/edit recipe form.

List fields are addressed by position: rows have no identity of their own,
so removing a row simply shifts the following ones up.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from receitas.app.domain.errors import RecipeValidationError
from receitas.app.domain.models import (
    SCHEMA_VERSION,
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

T = TypeVar("T")

Coercer = Callable[[Any], Any]


def _optional_enum(enum_cls) -> Coercer:
    def coerce(value: Any):
        if value is None or value == "":
            return None
        return enum_cls(value)
    return coerce


class ListField(Generic[T]):
    """Ordered, variable-length list of dataclass rows."""

    def __init__(
        self,
        factory: Callable[[], T],
        items: Iterable[T] = (),
        coercers: Optional[dict[str, Coercer]] = None,
    ):
        self._factory = factory
        self._items: list[T] = list(items)
        self._coercers = coercers or {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> T:
        return self._items[self._check_index(index)]

    @property
    def items(self) -> list[T]:
        return list(self._items)

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self._items):
            raise IndexError(f"Row {index} out of range (size {len(self._items)})")
        return index

    def append(self) -> T:
        """Add a blank row at the end and return it."""
        row = self._factory()
        self._items.append(row)
        return row

    def remove_at(self, index: int) -> T:
        return self._items.pop(self._check_index(index))

    def update_at(self, index: int, field_name: str, value: Any) -> T:
        """Replace one field of one row; sibling rows are untouched."""
        self._check_index(index)
        row = self._items[index]
        if field_name not in {f.name for f in fields(row)}:
            raise ValueError(f"Unknown field {field_name!r} for {type(row).__name__}")
        coerce = self._coercers.get(field_name)
        if coerce is not None:
            value = coerce(value)
        updated = replace(row, **{field_name: value})
        self._items[index] = updated
        return updated

    def non_blank(self) -> list[T]:
        return [row for row in self._items if not getattr(row, "is_blank", False)]


def _ingredient_field(items: Iterable[Ingredient] = ()) -> ListField[Ingredient]:
    return ListField(Ingredient, items, coercers={"unit": _optional_enum(Unit)})


def _instruction_field(items: Iterable[Instruction] = ()) -> ListField[Instruction]:
    return ListField(Instruction, items, coercers={"sub_step": SubStep})


def _memory_field(items: Iterable[Memory] = ()) -> ListField[Memory]:
    return ListField(Memory, items)


@dataclass
class RecipeForm:
    title: str = ""
    description: str = ""
    occasion: Occasion = Occasion.DIA_A_DIA
    difficulty: Optional[Difficulty] = None
    preparation_time: Optional[PreparationTime] = None
    secret_message: str = ""
    rating: Optional[int] = None
    image_url: Optional[str] = None
    ingredients: ListField[Ingredient] = field(default_factory=_ingredient_field)
    instructions: ListField[Instruction] = field(default_factory=_instruction_field)
    memories: ListField[Memory] = field(default_factory=_memory_field)

    @classmethod
    def blank(cls) -> "RecipeForm":
        """A new-recipe form with one empty row per list."""
        form = cls()
        form.ingredients.append()
        form.instructions.append()
        form.memories.append()
        return form

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeForm":
        return cls(
            title=recipe.title,
            description=recipe.description,
            occasion=recipe.occasion,
            difficulty=recipe.difficulty,
            preparation_time=recipe.preparation_time,
            secret_message=recipe.secret_message or "",
            rating=recipe.rating,
            image_url=recipe.image_url,
            ingredients=_ingredient_field(replace(i) for i in recipe.ingredients),
            instructions=_instruction_field(replace(i) for i in recipe.instructions),
            memories=_memory_field(replace(m) for m in recipe.memories),
        )

    def validate(self) -> None:
        if not self.title.strip():
            raise RecipeValidationError("O título da receita é obrigatório", field="title")
        if not self.description.strip():
            raise RecipeValidationError("A descrição da receita é obrigatória", field="description")
        for position, ingredient in enumerate(self.ingredients.non_blank(), start=1):
            if not ingredient.name.strip():
                raise RecipeValidationError(
                    f"O ingrediente {position} precisa de um nome", field="ingredients"
                )
            if ingredient.unit != Unit.QB and not ingredient.quantity.strip():
                raise RecipeValidationError(
                    f"Indique a quantidade de {ingredient.name.strip()}", field="ingredients"
                )
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise RecipeValidationError("A avaliação deve estar entre 1 e 5", field="rating")

    def to_fields(self) -> dict[str, Any]:
        """Validated payload for the recipe store; blank rows are left out."""
        self.validate()
        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "ingredients": [
                replace(i, name=i.name.strip(), quantity=i.quantity.strip())
                for i in self.ingredients.non_blank()
            ],
            "instructions": [
                replace(i, step=i.step.strip()) for i in self.instructions.non_blank()
            ],
            "image_url": self.image_url or None,
            "occasion": self.occasion,
            "difficulty": self.difficulty,
            "preparation_time": self.preparation_time,
            "secret_message": self.secret_message.strip() or None,
            "rating": self.rating,
            "memories": [
                replace(m, text=m.text.strip()) for m in self.memories.non_blank()
            ],
            "schema_version": SCHEMA_VERSION,
        }
