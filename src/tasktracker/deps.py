"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .core.config import Settings
from .core.context import bind_user_id
from .models import User
from .services import AuthService, ServiceContainer, TaskService, UserService

_bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /auth/login or /auth/register.")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_auth_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> AuthService:
    return services.auth


def get_user_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> UserService:
    return services.users


def get_task_service(services: Annotated[ServiceContainer, Depends(get_services)]) -> TaskService:
    return services.tasks


SettingsDependency = Annotated[Settings, Depends(get_app_settings)]
AuthServiceDependency = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDependency = Annotated[UserService, Depends(get_user_service)]
TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is not None:
        return credentials.credentials
    # A header with another scheme is still a (bad) credential, not a missing one.
    raw = request.headers.get("Authorization", "").strip()
    scheme, _, param = raw.partition(" ")
    if scheme.lower() == "bearer" and not param.strip():
        return None
    return raw or None


def require_current_user() -> Callable[..., Awaitable[User]]:
    """Return a dependency resolving the bearer token to an active account."""

    async def _dependency(
        request: Request,
        auth_service: AuthServiceDependency,
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    ) -> User:
        user = await auth_service.authenticate(_extract_token(request, credentials))
        bind_user_id(str(user.id))
        return user

    return _dependency


async def optional_current_user(
    request: Request,
    auth_service: AuthServiceDependency,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User | None:
    """Resolve the caller when a valid token is sent; anonymous otherwise."""

    user = await auth_service.authenticate_optional(_extract_token(request, credentials))
    if user is not None:
        bind_user_id(str(user.id))
    return user


CurrentUserDependency = Annotated[User, Depends(require_current_user())]
OptionalUserDependency = Annotated[User | None, Depends(optional_current_user)]


__all__ = [
    "AuthServiceDependency",
    "CurrentUserDependency",
    "OptionalUserDependency",
    "SettingsDependency",
    "TaskServiceDependency",
    "UserServiceDependency",
    "get_app_settings",
    "get_services",
    "optional_current_user",
    "require_current_user",
]
