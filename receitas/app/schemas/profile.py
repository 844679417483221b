from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: str
    displayName: str = ""
    email: str = ""
    photoURL: Optional[str] = None
    bio: str = ""
    favoriteRecipes: list[str] = Field(default_factory=list)
