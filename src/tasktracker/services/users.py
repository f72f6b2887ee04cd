"""Service layer for account records and account self-management."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from pymongo.errors import DuplicateKeyError

from ..core.security import get_password_hash, verify_password
from ..errors import DuplicateEmailError, WrongPasswordError
from ..models import Category, Task, Theme, User, UserPreferences, utcnow
from ..repositories import TaskRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UserTaskCounts:
    total: int
    completed: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


@dataclass(slots=True)
class UserExport:
    user: User
    tasks: list[Task]
    exported_at: datetime


class UserService:
    """High-level business operations for ``User`` documents."""

    def __init__(
        self,
        repository: UserRepository | None = None,
        task_repository: TaskRepository | None = None,
    ) -> None:
        self._repository = repository or UserRepository()
        self._task_repository = task_repository or TaskRepository()

    @property
    def repository(self) -> UserRepository:
        return self._repository

    async def create_user(self, *, name: str, email: str, password: str) -> User:
        """Persist a new account; ``email`` must already be normalised."""
        if await self._repository.email_taken(email):
            raise DuplicateEmailError()
        user = User(name=name, email=email, hashed_password=get_password_hash(password))
        try:
            await self._repository.add(user)
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent registration for the same address.
            raise DuplicateEmailError() from exc
        logger.info("User registered", extra={"account_id": str(user.id)})
        return user

    async def get_user(self, user_id) -> User | None:
        return await self._repository.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._repository.get_by_email(email)

    async def save(self, user: User) -> User:
        try:
            return await self._repository.save(user)
        except DuplicateKeyError as exc:
            raise DuplicateEmailError() from exc

    async def record_login(self, user: User) -> User:
        user.last_login = utcnow()
        return await self._repository.save(user)

    async def task_counts(self, user: User) -> UserTaskCounts:
        total = await self._task_repository.count({"user_id": user.id})
        completed = await self._task_repository.count({"user_id": user.id, "completed": True})
        return UserTaskCounts(total=total, completed=completed)

    def merge_preferences(
        self,
        user: User,
        *,
        theme: Theme | None = None,
        default_category: Category | None = None,
        notifications: bool | None = None,
    ) -> UserPreferences:
        """Overlay the supplied preference fields on the stored ones."""
        changes: dict[str, object] = {}
        if theme is not None:
            changes["theme"] = theme
        if default_category is not None:
            changes["default_category"] = default_category
        if notifications is not None:
            changes["notifications"] = notifications
        user.preferences = user.preferences.model_copy(update=changes)
        return user.preferences

    async def update_preferences(
        self,
        user: User,
        *,
        theme: Theme | None = None,
        default_category: Category | None = None,
        notifications: bool | None = None,
    ) -> UserPreferences:
        self.merge_preferences(
            user,
            theme=theme,
            default_category=default_category,
            notifications=notifications,
        )
        await self._repository.save(user)
        return user.preferences

    async def update_avatar(self, user: User, avatar_url: str) -> str:
        user.avatar = avatar_url
        await self._repository.save(user)
        return avatar_url

    async def deactivate_account(self, user: User, password: str) -> None:
        """Soft-delete: the account stays stored but can no longer sign in."""
        if not verify_password(password, user.hashed_password):
            raise WrongPasswordError("Incorrect password.")
        user.is_active = False
        await self._repository.save(user)
        logger.info("Account deactivated", extra={"account_id": str(user.id)})

    async def export_data(self, user: User) -> UserExport:
        tasks = await self._task_repository.list_for_owner(user.id)
        return UserExport(user=user, tasks=tasks, exported_at=utcnow())

    @staticmethod
    def categories() -> list[Category]:
        return list(Category)


__all__ = ["UserExport", "UserService", "UserTaskCounts"]
