"""Public account representations and account-management payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, HttpUrl, model_validator

from ..models import Category, Theme, User
from .common import APIModel
from .task import TaskRead


class PreferencesRead(APIModel):
    theme: Theme
    default_category: Category
    notifications: bool


class UserPublic(APIModel):
    """Account fields safe to return to clients; no password material."""

    id: str
    name: str
    email: str
    is_active: bool
    preferences: PreferencesRead
    avatar: str | None = None
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, user: User) -> "UserPublic":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            is_active=user.is_active,
            preferences=PreferencesRead(
                theme=user.preferences.theme,
                default_category=user.preferences.default_category,
                notifications=user.preferences.notifications,
            ),
            avatar=user.avatar,
            last_login=user.last_login,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserEnvelope(APIModel):
    user: UserPublic


class PreferencesPatch(APIModel):
    """Preference fields to merge; omitted keys keep their stored value."""

    theme: Theme | None = None
    default_category: Category | None = None
    notifications: bool | None = None


class PreferencesUpdate(PreferencesPatch):
    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "PreferencesUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one preference must be provided.")
        return self


class PreferencesResponse(APIModel):
    message: str
    preferences: PreferencesRead


class AvatarUpdate(APIModel):
    avatar: HttpUrl


class AvatarResponse(APIModel):
    message: str
    avatar: str


class AccountDeactivateRequest(APIModel):
    password: str = Field(min_length=1)


class UserStats(APIModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int


class UserProfileResponse(APIModel):
    user: UserPublic
    stats: UserStats


class ExportedUser(APIModel):
    name: str
    email: str
    preferences: PreferencesRead
    created_at: datetime


class UserExportData(APIModel):
    user: ExportedUser
    tasks: list[TaskRead]
    exported_at: datetime


class UserExportResponse(APIModel):
    message: str
    data: UserExportData


class CategoriesResponse(APIModel):
    categories: list[Category]
    default_category: Category | None = None


__all__ = [
    "AccountDeactivateRequest",
    "AvatarResponse",
    "AvatarUpdate",
    "CategoriesResponse",
    "ExportedUser",
    "PreferencesPatch",
    "PreferencesRead",
    "PreferencesResponse",
    "PreferencesUpdate",
    "UserEnvelope",
    "UserExportData",
    "UserExportResponse",
    "UserProfileResponse",
    "UserPublic",
    "UserStats",
]
