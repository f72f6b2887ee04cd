"""Business services, built once per application and shared by requests."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import Settings
from ..repositories import TaskRepository, UserRepository
from .auth import AuthResult, AuthService
from .tasks import TaskFilters, TaskPage, TaskService, TaskStatisticsResult
from .users import UserService


@dataclass(slots=True)
class ServiceContainer:
    auth: AuthService
    users: UserService
    tasks: TaskService


def build_services(settings: Settings) -> ServiceContainer:
    """Wire repositories into services for one application instance."""

    task_repository = TaskRepository()
    users = UserService(UserRepository(), task_repository)
    return ServiceContainer(
        auth=AuthService(settings, users),
        users=users,
        tasks=TaskService(settings, task_repository),
    )


__all__ = [
    "AuthResult",
    "AuthService",
    "ServiceContainer",
    "TaskFilters",
    "TaskPage",
    "TaskService",
    "TaskStatisticsResult",
    "UserService",
    "build_services",
]
