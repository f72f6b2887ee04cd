"""Task payloads, list envelopes and dashboard statistics."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import ConfigDict, Field, StringConstraints, field_validator, model_validator

from ..models import (
    Category,
    Priority,
    Task,
    days_until_due,
    is_overdue,
    subtask_progress,
    utcnow,
)
from .common import APIModel

TagText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=30)]

TASK_CREATE_EXAMPLE = {
    "title": "Prepare sprint review",
    "description": "Collect demo notes and metrics.",
    "category": Category.WORK.value,
    "priority": Priority.HIGH.value,
    "dueDate": "2030-01-15T17:00:00Z",
    "tags": ["sprint", "demo"],
}


def _drop_blank_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    return [tag for tag in tags if tag]


class ReminderSchema(APIModel):
    enabled: bool = False
    date: datetime | None = None


class SubtaskRead(APIModel):
    id: str
    title: str
    completed: bool
    completed_at: datetime | None = None


class SubtaskProgress(APIModel):
    completed: int
    total: int
    percentage: int


class TaskRead(APIModel):
    """A stored task plus the fields derived from it at read time."""

    id: str
    title: str
    description: str | None = None
    completed: bool
    category: Category
    priority: Priority
    due_date: datetime | None = None
    completed_at: datetime | None = None
    tags: list[str]
    user: str
    reminder: ReminderSchema
    subtasks: list[SubtaskRead]
    created_at: datetime
    updated_at: datetime
    is_overdue: bool
    subtask_progress: SubtaskProgress
    days_until_due: int | None = None

    @classmethod
    def from_document(cls, task: Task, *, now: datetime | None = None) -> "TaskRead":
        current = now or utcnow()
        return cls(
            id=str(task.id),
            title=task.title,
            description=task.description,
            completed=task.completed,
            category=task.category,
            priority=task.priority,
            due_date=task.due_date,
            completed_at=task.completed_at,
            tags=list(task.tags),
            user=str(task.user_id),
            reminder=ReminderSchema(enabled=task.reminder.enabled, date=task.reminder.date),
            subtasks=[
                SubtaskRead(
                    id=str(subtask.id),
                    title=subtask.title,
                    completed=subtask.completed,
                    completed_at=subtask.completed_at,
                )
                for subtask in task.subtasks
            ],
            created_at=task.created_at,
            updated_at=task.updated_at,
            is_overdue=is_overdue(task, current),
            subtask_progress=SubtaskProgress(**subtask_progress(task)),
            days_until_due=days_until_due(task, current),
        )


class TaskCreate(APIModel):
    """Payload for creating a task; the owner always comes from the token."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": TASK_CREATE_EXAMPLE},
    )

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    category: Category = Category.GENERAL
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    tags: list[TagText] = Field(default_factory=list)
    reminder: ReminderSchema | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="after")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        return _drop_blank_tags(value) or []


class SubtaskWrite(APIModel):
    """A subtask inside a full ``subtasks`` replacement list."""

    id: str | None = None
    title: str = Field(min_length=1, max_length=100)
    completed: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class SubtaskCreate(APIModel):
    model_config = ConfigDict(json_schema_extra={"example": {"title": "Book meeting room"}})

    title: str = Field(min_length=1, max_length=100)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class TaskUpdate(APIModel):
    """Partial update. Only keys present in the body are applied.

    ``description``, ``dueDate`` and ``reminder.date`` may be sent as null to
    clear them; ``subtasks`` replaces the whole list.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"completed": True, "priority": Priority.URGENT.value}},
    )

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    completed: bool | None = None
    category: Category | None = None
    priority: Priority | None = None
    due_date: datetime | None = None
    tags: list[TagText] | None = None
    reminder: ReminderSchema | None = None
    subtasks: list[SubtaskWrite] | None = None

    @field_validator("title", "completed", "category", "priority", "tags", "subtasks", mode="before")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        # Omit the key to leave the field alone; only clearable fields accept null.
        if value is None:
            raise ValueError("Field cannot be null.")
        return value

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags", mode="after")
    @classmethod
    def _clean_tags(cls, value: list[str] | None) -> list[str] | None:
        return _drop_blank_tags(value)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self


class Pagination(APIModel):
    current_page: int
    total_pages: int
    total_tasks: int
    has_next: bool
    has_prev: bool


class TaskStats(APIModel):
    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    pending: int = Field(ge=0)
    overdue: int = Field(ge=0)


class TaskListResponse(APIModel):
    tasks: list[TaskRead]
    pagination: Pagination
    stats: TaskStats


class TaskMutationResponse(APIModel):
    message: str
    task: TaskRead


class CategoryBreakdown(APIModel):
    category: Category
    total: int
    completed: int


class PriorityBreakdown(APIModel):
    priority: Priority
    total: int
    completed: int


class WeekdayCount(APIModel):
    day: int = Field(ge=1, le=7, description="1 = Sunday, 7 = Saturday")
    label: str
    count: int


class DashboardStats(APIModel):
    general: TaskStats
    categories: list[CategoryBreakdown]
    priorities: list[PriorityBreakdown]
    weekly: list[WeekdayCount]


__all__ = [
    "CategoryBreakdown",
    "DashboardStats",
    "Pagination",
    "PriorityBreakdown",
    "ReminderSchema",
    "SubtaskCreate",
    "SubtaskProgress",
    "SubtaskRead",
    "SubtaskWrite",
    "TaskCreate",
    "TaskListResponse",
    "TaskMutationResponse",
    "TaskRead",
    "TaskStats",
    "TaskUpdate",
    "WeekdayCount",
]
