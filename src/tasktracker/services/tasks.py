"""Task query engine: filtered listing, CRUD and statistics."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from beanie import PydanticObjectId
from pymongo import ASCENDING, DESCENDING

from ..core.config import Settings
from ..errors import InvalidDueDateError, InvalidIdError, NotFoundError, ValidationError
from ..models import (
    Category,
    Priority,
    Reminder,
    Subtask,
    Task,
    apply_completion_transition,
    ensure_utc,
    utcnow,
)
from ..repositories import TaskRepository, parse_object_id
from ..repositories.tasks import overdue_clause

logger = logging.getLogger(__name__)

SORT_FIELDS: dict[str, str] = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "dueDate": "due_date",
    "title": "title",
    "priority": "priority",
    "category": "category",
    "completed": "completed",
}
SORT_ORDERS: dict[str, int] = {"asc": ASCENDING, "desc": DESCENDING}
WEEKDAY_LABELS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
_PRIORITY_RANK = {priority: rank for rank, priority in enumerate(Priority)}
_PLAIN_FIELDS = ("title", "category", "priority", "tags")


@dataclass(slots=True)
class TaskFilters:
    """Listing criteria; unset fields do not constrain the result."""

    category: Category | None = None
    completed: bool | None = None
    priority: Priority | None = None
    overdue: bool = False
    search: str | None = None


@dataclass(slots=True)
class TaskStatisticsResult:
    total: int
    completed: int
    overdue: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


@dataclass(slots=True)
class TaskPage:
    tasks: list[Task]
    page: int
    limit: int
    total: int
    stats: TaskStatisticsResult

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return (self.page - 1) * self.limit + self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(slots=True)
class GroupCount:
    key: str
    total: int
    completed: int


@dataclass(slots=True)
class DashboardResult:
    general: TaskStatisticsResult
    categories: list[GroupCount] = field(default_factory=list)
    priorities: list[GroupCount] = field(default_factory=list)
    weekly: list[tuple[int, str, int]] = field(default_factory=list)


def start_of_week(now: datetime) -> datetime:
    """Midnight (UTC) of the Sunday that opens the week containing ``now``."""

    days_since_sunday = (now.weekday() + 1) % 7
    return (now - timedelta(days=days_since_sunday)).replace(hour=0, minute=0, second=0, microsecond=0)


class TaskService:
    """High-level business orchestration for ``Task`` documents.

    Every operation is scoped to ``owner_id``; a task belonging to someone else
    is reported exactly like a missing one.
    """

    def __init__(self, settings: Settings, repository: TaskRepository | None = None) -> None:
        self._settings = settings
        self._repository = repository or TaskRepository()

    @property
    def repository(self) -> TaskRepository:
        return self._repository

    @staticmethod
    def _parse_task_id(task_id: str) -> PydanticObjectId:
        parsed = parse_object_id(task_id)
        if parsed is None:
            raise InvalidIdError("Invalid task id.")
        return parsed

    @staticmethod
    def _ensure_future_due_date(due_date: datetime, now: datetime) -> None:
        if due_date <= now:
            raise InvalidDueDateError()

    def _build_query(self, owner_id: PydanticObjectId, filters: TaskFilters, now: datetime) -> dict[str, Any]:
        query: dict[str, Any] = {"user_id": owner_id}
        if filters.category is not None:
            query["category"] = filters.category.value
        if filters.priority is not None:
            query["priority"] = filters.priority.value
        if filters.completed is not None:
            query["completed"] = filters.completed
        if filters.overdue:
            # Overrides any explicit ``completed`` filter.
            query.update(overdue_clause(now))
        search = (filters.search or "").strip()
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
                {"tags": {"$regex": pattern, "$options": "i"}},
            ]
        return query

    def _build_sort(self, sort_by: str, sort_order: str) -> list[tuple[str, int]]:
        field_name = SORT_FIELDS.get(sort_by)
        if field_name is None:
            raise ValidationError(
                "Unsupported sort field.",
                errors=[{"field": "sortBy", "message": f"Must be one of: {', '.join(SORT_FIELDS)}."}],
            )
        direction = SORT_ORDERS.get(sort_order.lower())
        if direction is None:
            raise ValidationError(
                "Unsupported sort order.",
                errors=[{"field": "sortOrder", "message": "Must be 'asc' or 'desc'."}],
            )
        # ``_id`` keeps pages stable when the primary key has ties.
        return [(field_name, direction), ("_id", direction)]

    def _page_size(self, limit: int | None) -> int:
        if limit is None:
            return self._settings.default_page_size
        return min(max(limit, 1), self._settings.max_page_size)

    async def list_tasks(
        self,
        owner_id: PydanticObjectId,
        *,
        filters: TaskFilters | None = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int | None = None,
    ) -> TaskPage:
        """Return one page of the owner's tasks plus whole-collection stats."""
        now = utcnow()
        page = max(page, 1)
        page_size = self._page_size(limit)
        query = self._build_query(owner_id, filters or TaskFilters(), now)
        sort = self._build_sort(sort_by, sort_order)

        tasks = await self._repository.find_page(query, sort=sort, skip=(page - 1) * page_size, limit=page_size)
        total = await self._repository.count(query)
        stats = await self.general_stats(owner_id, now=now)
        return TaskPage(tasks=tasks, page=page, limit=page_size, total=total, stats=stats)

    async def get_task(self, owner_id: PydanticObjectId, task_id: str) -> Task:
        task = await self._repository.get_for_owner(self._parse_task_id(task_id), owner_id)
        if task is None:
            raise NotFoundError("Task not found.")
        return task

    async def create_task(
        self,
        owner_id: PydanticObjectId,
        *,
        title: str,
        description: str | None = None,
        category: Category = Category.GENERAL,
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
        tags: Iterable[str] | None = None,
        reminder: Mapping[str, Any] | None = None,
    ) -> Task:
        now = utcnow()
        due = ensure_utc(due_date)
        if due is not None:
            self._ensure_future_due_date(due, now)
        task = Task(
            title=title,
            description=description,
            category=category,
            priority=priority,
            due_date=due,
            tags=list(tags or []),
            user_id=owner_id,
            reminder=Reminder(**reminder) if reminder else Reminder(),
            created_at=now,
            updated_at=now,
        )
        await self._repository.add(task)
        logger.info("Task created", extra={"task_id": str(task.id)})
        return task

    @staticmethod
    def _merge_subtasks(
        current: list[Subtask],
        incoming: Iterable[Mapping[str, Any]],
        now: datetime,
    ) -> list[Subtask]:
        """Replace the subtask list, carrying completion stamps by subtask id."""
        existing = {str(subtask.id): subtask for subtask in current}
        merged: list[Subtask] = []
        for item in incoming:
            previous = existing.get(str(item.get("id") or ""))
            if previous is None:
                subtask = Subtask(title=item["title"])
            else:
                subtask = previous.model_copy()
                subtask.title = item["title"]
            apply_completion_transition(subtask, bool(item.get("completed", False)), now=now)
            merged.append(subtask)
        return merged

    async def update_task(
        self,
        owner_id: PydanticObjectId,
        task_id: str,
        changes: Mapping[str, Any],
    ) -> Task:
        """Apply the keys present in ``changes`` and persist the task."""
        task = await self.get_task(owner_id, task_id)
        now = utcnow()

        for name in _PLAIN_FIELDS:
            if changes.get(name) is not None:
                setattr(task, name, changes[name])
        if "description" in changes:
            task.description = changes["description"]
        if "due_date" in changes:
            due = ensure_utc(changes["due_date"])
            if due is not None and due != task.due_date:
                self._ensure_future_due_date(due, now)
            task.due_date = due
        if changes.get("reminder") is not None:
            task.reminder = Reminder(**changes["reminder"])
        if changes.get("subtasks") is not None:
            task.subtasks = self._merge_subtasks(task.subtasks, changes["subtasks"], now)
        if changes.get("completed") is not None:
            apply_completion_transition(task, bool(changes["completed"]), now=now)

        await self._repository.save(task)
        logger.info("Task updated", extra={"task_id": str(task.id), "fields": sorted(changes)})
        return task

    async def delete_task(self, owner_id: PydanticObjectId, task_id: str) -> None:
        task = await self.get_task(owner_id, task_id)
        await self._repository.delete(task)
        logger.info("Task deleted", extra={"task_id": task_id})

    async def add_subtask(self, owner_id: PydanticObjectId, task_id: str, title: str) -> Task:
        task = await self.get_task(owner_id, task_id)
        task.subtasks.append(Subtask(title=title))
        await self._repository.save(task)
        return task

    async def general_stats(self, owner_id: PydanticObjectId, *, now: datetime | None = None) -> TaskStatisticsResult:
        current = now or utcnow()
        total = await self._repository.count({"user_id": owner_id})
        completed = await self._repository.count({"user_id": owner_id, "completed": True})
        overdue = await self._repository.count_overdue(owner_id, current)
        return TaskStatisticsResult(total=total, completed=completed, overdue=overdue)

    async def dashboard_stats(self, owner_id: PydanticObjectId, *, now: datetime | None = None) -> DashboardResult:
        current = now or utcnow()
        general = await self.general_stats(owner_id, now=current)

        categories = [
            GroupCount(key=row["value"], total=row["total"], completed=row["completed"])
            for row in await self._repository.group_counts(owner_id, "category")
        ]
        categories.sort(key=lambda group: (-group.total, group.key))

        priorities = [
            GroupCount(key=row["value"], total=row["total"], completed=row["completed"])
            for row in await self._repository.group_counts(owner_id, "priority")
        ]
        priorities.sort(key=lambda group: _PRIORITY_RANK.get(Priority(group.key), len(_PRIORITY_RANK)))

        week_start = start_of_week(current)
        per_day = await self._repository.created_per_weekday(
            owner_id,
            start=week_start,
            end=week_start + timedelta(days=7),
        )
        weekly = [(day, WEEKDAY_LABELS[day - 1], per_day.get(day, 0)) for day in range(1, 8)]
        return DashboardResult(general=general, categories=categories, priorities=priorities, weekly=weekly)


__all__ = [
    "DashboardResult",
    "GroupCount",
    "TaskFilters",
    "TaskPage",
    "TaskService",
    "TaskStatisticsResult",
    "WEEKDAY_LABELS",
    "start_of_week",
]
