# src/store/schemas/user_schema.py
from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, SecretStr, field_validator

from src.store.schemas.common import CamelModel, CamelOut


class UserRegister(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: SecretStr = Field(min_length=6, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator("email", mode="before")
    @classmethod
    def _lower(cls, v: str) -> str:
        return (v or "").strip().lower()


class UserLogin(CamelModel):
    email: EmailStr
    password: SecretStr


class UserRead(CamelOut):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_admin: bool
    is_active: bool
