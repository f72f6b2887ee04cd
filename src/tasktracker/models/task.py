from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Protocol

from beanie import Document, PydanticObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import ensure_utc, utcnow

_SECONDS_PER_DAY = 24 * 60 * 60


class Category(str, Enum):
    WORK = "Trabalho"
    PERSONAL = "Pessoal"
    STUDIES = "Estudos"
    HEALTH = "Saúde"
    SHOPPING = "Compras"
    LEISURE = "Lazer"
    FAMILY = "Família"
    GENERAL = "Geral"


class Priority(str, Enum):
    LOW = "baixa"
    MEDIUM = "média"
    HIGH = "alta"
    URGENT = "urgente"


class Reminder(BaseModel):
    enabled: bool = False
    date: datetime | None = None

    @field_validator("date", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class Subtask(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    title: str = Field(min_length=1, max_length=100)
    completed: bool = False
    completed_at: datetime | None = None

    @field_validator("completed_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)


class Task(Document):
    """A to-do item owned by exactly one user."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    completed: bool = False
    category: Category = Category.GENERAL
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    completed_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    user_id: PydanticObjectId
    reminder: Reminder = Field(default_factory=Reminder)
    subtasks: list[Subtask] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("due_date", "completed_at", "created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    class Settings:
        name = "tasks"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("completed", ASCENDING)], name="tasks_owner_completed"),
            IndexModel([("user_id", ASCENDING), ("category", ASCENDING)], name="tasks_owner_category"),
            IndexModel([("user_id", ASCENDING), ("due_date", ASCENDING)], name="tasks_owner_due_date"),
            IndexModel([("user_id", ASCENDING), ("priority", ASCENDING)], name="tasks_owner_priority"),
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)], name="tasks_owner_created_at"),
        ]


class Completable(Protocol):
    completed: bool
    completed_at: datetime | None


def apply_completion_transition(item: Completable, completed: bool, *, now: datetime) -> None:
    """Move ``item`` to ``completed`` and keep ``completed_at`` consistent.

    false -> true stamps ``now``; true -> false clears the stamp; re-asserting
    the current state leaves an existing stamp untouched.
    """

    if completed and not item.completed:
        item.completed_at = now
    elif completed and item.completed_at is None:
        item.completed_at = now
    elif not completed:
        item.completed_at = None
    item.completed = completed


def is_overdue(task: Task, now: datetime) -> bool:
    return task.due_date is not None and not task.completed and task.due_date < now


def subtask_progress(task: Task) -> dict[str, int]:
    total = len(task.subtasks)
    done = sum(1 for subtask in task.subtasks if subtask.completed)
    percentage = math.floor(done * 100 / total + 0.5) if total else 0
    return {"completed": done, "total": total, "percentage": percentage}


def days_until_due(task: Task, now: datetime) -> int | None:
    """Whole days left until the due date, rounded up; negative once late."""

    if task.due_date is None:
        return None
    return math.ceil((task.due_date - now).total_seconds() / _SECONDS_PER_DAY)


__all__ = [
    "Category",
    "Priority",
    "Reminder",
    "Subtask",
    "Task",
    "apply_completion_transition",
    "days_until_due",
    "is_overdue",
    "subtask_progress",
]
