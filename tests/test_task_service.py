from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from beanie import PydanticObjectId

from tasktracker.errors import InvalidDueDateError, InvalidIdError, NotFoundError, ValidationError
from tasktracker.models import Category, Priority, Task
from tasktracker.services import ServiceContainer, TaskFilters

pytestmark = pytest.mark.asyncio


async def test_list_tasks_uses_default_page_size(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    for index in range(12):
        await services.tasks.create_task(owner, title=f"Task {index}")

    page = await services.tasks.list_tasks(owner)

    assert len(page.tasks) == 10
    assert page.total == 12
    assert page.total_pages == 2
    assert page.has_next is True
    assert page.stats.total == 12
    assert page.stats.pending == 12


async def test_oversized_limit_is_clamped(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    await services.tasks.create_task(owner, title="Only")

    page = await services.tasks.list_tasks(owner, limit=10_000)

    assert page.limit == 100


async def test_empty_listing_has_no_pages(services: ServiceContainer) -> None:
    page = await services.tasks.list_tasks(PydanticObjectId())

    assert page.tasks == []
    assert page.total_pages == 0
    assert page.has_next is False
    assert page.has_prev is False


async def test_unknown_sort_field_is_rejected(services: ServiceContainer) -> None:
    with pytest.raises(ValidationError):
        await services.tasks.list_tasks(PydanticObjectId(), sort_by="user_id")
    with pytest.raises(ValidationError):
        await services.tasks.list_tasks(PydanticObjectId(), sort_order="sideways")


async def test_filters_are_scoped_to_owner(services: ServiceContainer) -> None:
    owner, other = PydanticObjectId(), PydanticObjectId()
    await services.tasks.create_task(owner, title="Mine", category=Category.WORK)
    await services.tasks.create_task(other, title="Theirs", category=Category.WORK)

    page = await services.tasks.list_tasks(owner, filters=TaskFilters(category=Category.WORK))

    assert [task.title for task in page.tasks] == ["Mine"]


async def test_priority_sort_follows_stored_values(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    await services.tasks.create_task(owner, title="b", priority=Priority.URGENT)
    await services.tasks.create_task(owner, title="a", priority=Priority.HIGH)

    page = await services.tasks.list_tasks(owner, sort_by="priority", sort_order="asc")

    assert [task.priority for task in page.tasks] == [Priority.HIGH, Priority.URGENT]


async def test_get_task_distinguishes_bad_ids_from_missing_ones(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    with pytest.raises(InvalidIdError):
        await services.tasks.get_task(owner, "123")
    with pytest.raises(NotFoundError):
        await services.tasks.get_task(owner, str(PydanticObjectId()))


async def test_create_rejects_past_due_date(services: ServiceContainer) -> None:
    with pytest.raises(InvalidDueDateError):
        await services.tasks.create_task(
            PydanticObjectId(),
            title="Too late",
            due_date=datetime.now(timezone.utc) - timedelta(seconds=1),
        )


async def test_naive_due_dates_are_read_as_utc(services: ServiceContainer) -> None:
    naive = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=3)
    task = await services.tasks.create_task(PydanticObjectId(), title="Naive", due_date=naive)

    assert task.due_date is not None
    assert task.due_date.tzinfo is not None


async def test_subtask_replacement_keeps_completion_stamps(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    task = await services.tasks.create_task(owner, title="Parent")
    task = await services.tasks.add_subtask(owner, str(task.id), "Keep")
    keep = task.subtasks[0]

    task = await services.tasks.update_task(
        owner,
        str(task.id),
        {"subtasks": [{"id": str(keep.id), "title": "Keep", "completed": True}]},
    )
    stamped = task.subtasks[0].completed_at
    assert stamped is not None

    task = await services.tasks.update_task(
        owner,
        str(task.id),
        {
            "subtasks": [
                {"id": str(keep.id), "title": "Keep renamed", "completed": True},
                {"title": "New one", "completed": False},
            ]
        },
    )
    assert task.subtasks[0].id == keep.id
    assert task.subtasks[0].title == "Keep renamed"
    assert task.subtasks[0].completed_at == stamped
    assert task.subtasks[1].completed is False

    stored = await Task.get(task.id)
    assert stored is not None
    assert [subtask.title for subtask in stored.subtasks] == ["Keep renamed", "New one"]


async def test_update_bumps_updated_at_only(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    task = await services.tasks.create_task(owner, title="Stamp")
    created_at = task.created_at

    updated = await services.tasks.update_task(owner, str(task.id), {"description": "details"})

    assert updated.created_at == created_at
    assert updated.updated_at >= created_at
    assert updated.description == "details"


async def test_dashboard_orders_groups(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    await services.tasks.create_task(owner, title="1", category=Category.STUDIES, priority=Priority.URGENT)
    await services.tasks.create_task(owner, title="2", category=Category.HEALTH, priority=Priority.LOW)
    await services.tasks.create_task(owner, title="3", category=Category.HEALTH, priority=Priority.LOW)
    await services.tasks.create_task(owner, title="4", category=Category.FAMILY, priority=Priority.HIGH)

    result = await services.tasks.dashboard_stats(owner)

    assert [group.key for group in result.categories] == ["Saúde", "Estudos", "Família"]
    assert [group.key for group in result.priorities] == ["baixa", "alta", "urgente"]
    assert result.general.total == 4
    assert len(result.weekly) == 7
    assert sum(count for _, _, count in result.weekly) == 4


async def test_dashboard_weekly_ignores_previous_weeks(services: ServiceContainer) -> None:
    owner = PydanticObjectId()
    old = Task(title="Old", user_id=owner, created_at=datetime.now(timezone.utc) - timedelta(days=8))
    await old.insert()

    result = await services.tasks.dashboard_stats(owner)

    assert result.general.total == 1
    assert sum(count for _, _, count in result.weekly) == 0
