from __future__ import annotations

from datetime import datetime
from enum import Enum

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import ensure_utc, utcnow
from .task import Category


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class UserPreferences(BaseModel):
    theme: Theme = Theme.LIGHT
    default_category: Category = Category.GENERAL
    notifications: bool = True


class User(Document):
    """Registered account. ``hashed_password`` never leaves the service layer."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=50)
    email: Indexed(str, unique=True)  # type: ignore[valid-type]
    hashed_password: str
    is_active: bool = True
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    avatar: str | None = None
    last_login: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value: object) -> str:
        return str(value or "").strip().lower()

    @field_validator("last_login", "created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    class Settings:
        name = "users"


__all__ = ["Theme", "User", "UserPreferences"]
