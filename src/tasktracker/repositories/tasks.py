"""Repository for task documents and their aggregate queries."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from beanie import PydanticObjectId

from ..models import Task
from .base import BaseRepository, as_bson_datetime

SortSpec = Sequence[tuple[str, int]]


class TaskRepository(BaseRepository[Task]):
    """Concrete repository for ``Task`` documents.

    Every query is scoped by ``user_id``; callers never see another owner's
    documents through this class.
    """

    def __init__(self) -> None:
        super().__init__(Task)

    async def get_for_owner(self, task_id: PydanticObjectId, owner_id: PydanticObjectId) -> Task | None:
        return await Task.find_one({"_id": task_id, "user_id": owner_id})

    async def list_for_owner(self, owner_id: PydanticObjectId) -> list[Task]:
        return await Task.find({"user_id": owner_id}).sort(("created_at", -1), ("_id", -1)).to_list()

    async def find_page(
        self,
        query: Mapping[str, Any],
        *,
        sort: SortSpec,
        skip: int,
        limit: int,
    ) -> list[Task]:
        """Return one page of tasks matching ``query`` in ``sort`` order."""
        return await Task.find(dict(query)).sort(*sort).skip(skip).limit(limit).to_list()

    async def count(self, query: Mapping[str, Any]) -> int:
        return await Task.find(dict(query)).count()

    async def count_overdue(self, owner_id: PydanticObjectId, now: datetime) -> int:
        return await self.count({"user_id": owner_id, **overdue_clause(now)})

    async def group_counts(self, owner_id: PydanticObjectId, field: str) -> list[dict[str, Any]]:
        """Count total and completed tasks per distinct value of ``field``."""
        pipeline = [
            {"$match": {"user_id": owner_id}},
            {
                "$group": {
                    "_id": f"${field}",
                    "total": {"$sum": 1},
                    "completed": {"$sum": {"$cond": ["$completed", 1, 0]}},
                }
            },
        ]
        rows = await Task.aggregate(pipeline).to_list()
        return [
            {"value": row["_id"], "total": int(row["total"]), "completed": int(row["completed"])}
            for row in rows
        ]

    async def created_per_weekday(
        self,
        owner_id: PydanticObjectId,
        *,
        start: datetime,
        end: datetime,
    ) -> dict[int, int]:
        """Map MongoDB ``$dayOfWeek`` (1 = Sunday) to tasks created in ``[start, end)``."""
        pipeline = [
            {
                "$match": {
                    "user_id": owner_id,
                    "created_at": {"$gte": as_bson_datetime(start), "$lt": as_bson_datetime(end)},
                }
            },
            {"$group": {"_id": {"$dayOfWeek": "$created_at"}, "count": {"$sum": 1}}},
        ]
        rows = await Task.aggregate(pipeline).to_list()
        return {int(row["_id"]): int(row["count"]) for row in rows}


def overdue_clause(now: datetime) -> dict[str, Any]:
    """Filter fragment selecting incomplete tasks whose due date has passed."""

    return {"completed": False, "due_date": {"$ne": None, "$lt": as_bson_datetime(now)}}


__all__ = ["TaskRepository", "overdue_clause"]
