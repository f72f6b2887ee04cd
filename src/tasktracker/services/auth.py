"""Authentication service: registration, login and token checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from email_validator import EmailNotValidError
from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings
from ..core.security import (
    ExpiredSignatureError,
    GeneratedToken,
    JWTError,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from ..core.validation import (
    email_issues,
    name_issues,
    normalize_email,
    validate_new_password,
    validate_registration,
)
from ..errors import (
    AccountDeactivatedError,
    ApplicationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
    ValidationError,
    WrongPasswordError,
)
from ..models import User
from ..repositories import parse_object_id
from ..schemas.auth import TokenPayload
from .users import UserService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthResult:
    """An authenticated account together with its freshly issued token."""

    user: User
    token: GeneratedToken


class AuthService:
    """High-level authentication workflows."""

    def __init__(self, settings: Settings, user_service: UserService) -> None:
        self._settings = settings
        self._user_service = user_service

    def issue_token(self, user: User) -> GeneratedToken:
        if user.id is None:
            raise ApplicationError("User must be persisted before issuing tokens.")
        return create_access_token(subject=str(user.id), settings=self._settings)

    async def register(self, *, name: str, email: str, password: str) -> AuthResult:
        clean_name, clean_email = validate_registration(name, email, password)
        user = await self._user_service.create_user(name=clean_name, email=clean_email, password=password)
        return AuthResult(user=user, token=self.issue_token(user))

    async def login(self, *, email: str, password: str) -> AuthResult:
        """Exchange credentials for a token.

        Unknown address, deactivated account and wrong password all raise the
        same ``InvalidCredentialsError``.
        """
        try:
            lookup = normalize_email(email)
        except EmailNotValidError:
            lookup = email.strip().lower()

        user = await self._user_service.get_user_by_email(lookup)
        if user is None:
            logger.warning("Login rejected", extra={"reason": "unknown_account"})
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.warning("Login rejected", extra={"reason": "inactive", "account_id": str(user.id)})
            raise InvalidCredentialsError()
        if not verify_password(password, user.hashed_password):
            logger.warning("Login rejected", extra={"reason": "bad_password", "account_id": str(user.id)})
            raise InvalidCredentialsError()

        await self._user_service.record_login(user)
        logger.info("Login succeeded", extra={"account_id": str(user.id)})
        return AuthResult(user=user, token=self.issue_token(user))

    def _decode(self, token: str) -> TokenPayload:
        try:
            claims = decode_access_token(token=token, settings=self._settings)
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTError as exc:
            raise InvalidTokenError() from exc
        try:
            return TokenPayload.model_validate(claims)
        except PydanticValidationError as exc:
            raise InvalidTokenError() from exc

    async def authenticate(self, token: str | None) -> User:
        """Resolve a bearer token to an active account or raise a 401 error."""
        if not token:
            raise MissingTokenError()
        payload = self._decode(token)
        user_id = parse_object_id(payload.sub)
        if user_id is None:
            raise InvalidTokenError()
        user = await self._user_service.get_user(user_id)
        if user is None:
            raise InvalidTokenError("Token subject no longer exists.")
        if not user.is_active:
            raise AccountDeactivatedError()
        return user

    async def authenticate_optional(self, token: str | None) -> User | None:
        """Like :meth:`authenticate` but anonymous instead of failing."""
        try:
            return await self.authenticate(token)
        except (MissingTokenError, InvalidTokenError, TokenExpiredError, AccountDeactivatedError):
            return None

    async def change_password(self, user: User, *, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            raise WrongPasswordError()
        validate_new_password(new_password)
        user.hashed_password = get_password_hash(new_password)
        await self._user_service.save(user)
        logger.info("Password changed", extra={"account_id": str(user.id)})

    async def update_profile(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        preferences: Mapping[str, Any] | None = None,
    ) -> User:
        issues = []
        clean_email: str | None = None
        if name is not None:
            issues.extend(name_issues(name))
        if email is not None:
            clean_email, problems = email_issues(email)
            issues.extend(problems)
        if issues:
            raise ValidationError("Invalid profile data.", errors=issues)

        if name is not None:
            user.name = name.strip()
        if clean_email is not None and clean_email != user.email:
            if await self._user_service.repository.email_taken(clean_email, exclude=user):
                raise DuplicateEmailError()
            user.email = clean_email
        if preferences:
            self._user_service.merge_preferences(user, **dict(preferences))
        return await self._user_service.save(user)


__all__ = ["AuthResult", "AuthService"]
