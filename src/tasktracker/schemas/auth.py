"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common import APIModel
from .user import PreferencesPatch, UserPublic


class RegisterRequest(APIModel):
    """Sign-up payload; the field rules are checked together by the service."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Ana Souza", "email": "ana@example.com", "password": "Secret123"}
        }
    )

    name: str
    email: str
    password: str


class LoginRequest(APIModel):
    email: str
    password: str


class AuthResponse(APIModel):
    message: str
    token: str
    user: UserPublic


class ProfileUpdateRequest(APIModel):
    name: str | None = None
    email: str | None = None
    preferences: PreferencesPatch | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "ProfileUpdateRequest":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class ProfileUpdateResponse(APIModel):
    message: str
    user: UserPublic


class ChangePasswordRequest(APIModel):
    current_password: str = Field(min_length=1)
    new_password: str


class TokenPayload(BaseModel):
    """Validated JWT claims."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime | None = None


__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "ProfileUpdateResponse",
    "RegisterRequest",
    "TokenPayload",
]
