from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    userId: str
    email: Optional[str] = None
    accessToken: str
    refreshToken: Optional[str] = None
    expiresAt: Optional[int] = None
