"""Beanie documents stored in MongoDB."""

from .common import ensure_utc, utcnow
from .task import (
    Category,
    Priority,
    Reminder,
    Subtask,
    Task,
    apply_completion_transition,
    days_until_due,
    is_overdue,
    subtask_progress,
)
from .user import Theme, User, UserPreferences

DOCUMENT_MODELS = [User, Task]

__all__ = [
    "Category",
    "DOCUMENT_MODELS",
    "Priority",
    "Reminder",
    "Subtask",
    "Task",
    "Theme",
    "User",
    "UserPreferences",
    "apply_completion_transition",
    "days_until_due",
    "ensure_utc",
    "is_overdue",
    "subtask_progress",
    "utcnow",
]
