# receitas/app/domain/models.py
"""
Domain models for the recipe book.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

SCHEMA_VERSION = 2


class Occasion(str, Enum):
    """Recipe occasion. `DIA_A_DIA` is the everyday default."""
    DIA_A_DIA = "Dia a Dia"
    ANIVERSARIO = "Aniversário"
    DIA_DOS_NAMORADOS = "Dia dos Namorados"
    DATA_ESPECIAL = "Data Especial"
    SURPRESA = "Surpresa"
    OUTRA = "Outra"
    DOCES = "Doces"
    SALGADOS = "Salgados"


class Difficulty(str, Enum):
    FACIL = "Fácil"
    MEDIO = "Médio"
    DIFICIL = "Difícil"


class PreparationTime(str, Enum):
    RAPIDO = "Rápido (até 30 min)"
    MEDIO = "Médio (30-60 min)"
    DEMORADO = "Demorado (mais de 60 min)"


class SubStep(str, Enum):
    """Section an instruction belongs to. The first member is the default."""
    BOLO = "Bolo"
    COBERTURA = "Cobertura"
    CALDAS = "Caldas"
    RECHEIO = "Recheio"
    MONTAGEM = "Montagem"
    OUTROS = "Outros"


class Unit(str, Enum):
    GRAMA = "g"
    QUILO = "kg"
    MILILITRO = "ml"
    LITRO = "l"
    CHAVENA = "chávena"
    COLHER_SOPA = "colher de sopa"
    COLHER_CHA = "colher de chá"
    UNIDADE = "unidade"
    QB = "q.b."  # quanto baste: no quantity needed


@dataclass
class Ingredient:
    name: str = ""
    quantity: str = ""
    unit: Optional[Unit] = None

    @property
    def is_blank(self) -> bool:
        return not self.name.strip() and not self.quantity.strip()


@dataclass
class Instruction:
    step: str = ""
    sub_step: SubStep = SubStep.BOLO

    @property
    def is_blank(self) -> bool:
        return not self.step.strip()


@dataclass
class Memory:
    text: str = ""
    image_url: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip() and not self.image_url


@dataclass
class InstructionSection:
    """Instructions sharing a sub-step, in display order."""
    sub_step: SubStep
    steps: list[Instruction]


@dataclass
class Recipe:
    """
    A recipe owned by a single user.
    `id` and `created_at` are assigned by the store.
    """
    id: str
    user_id: str
    title: str
    description: str = ""
    ingredients: list[Ingredient] = field(default_factory=list)
    instructions: list[Instruction] = field(default_factory=list)
    image_url: Optional[str] = None
    occasion: Occasion = Occasion.DIA_A_DIA

    # Enrichment, shown only for special occasions
    difficulty: Optional[Difficulty] = None
    preparation_time: Optional[PreparationTime] = None
    secret_message: Optional[str] = None
    rating: Optional[int] = None
    memories: list[Memory] = field(default_factory=list)

    created_at: Optional[datetime] = None
    schema_version: int = SCHEMA_VERSION

    @property
    def is_special(self) -> bool:
        """Whether the special fields (secret message, rating, memories) apply."""
        return self.occasion != Occasion.DIA_A_DIA

    @property
    def image_urls(self) -> list[str]:
        """Every stored image referenced by this recipe."""
        urls = [self.image_url] if self.image_url else []
        urls.extend(memory.image_url for memory in self.memories if memory.image_url)
        return urls

    def instruction_sections(self) -> list[InstructionSection]:
        """Group instructions by sub-step, sections ordered by first appearance."""
        sections: dict[SubStep, InstructionSection] = {}
        for instruction in self.instructions:
            section = sections.get(instruction.sub_step)
            if section is None:
                section = InstructionSection(sub_step=instruction.sub_step, steps=[])
                sections[instruction.sub_step] = section
            section.steps.append(instruction)
        return list(sections.values())


@dataclass
class UserProfile:
    id: str
    display_name: str = ""
    email: str = ""
    photo_url: Optional[str] = None
    bio: str = ""
    favorite_recipes: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class ImageUpload:
    """An image selected for upload, already read into memory."""
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class AuthSession:
    """Tokens returned by a successful login."""
    user_id: str
    email: Optional[str]
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
