from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from beanie import PydanticObjectId
from httpx import AsyncClient

from tasktracker.models import Task

pytestmark = pytest.mark.asyncio


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


async def _create(client: AsyncClient, account, **payload) -> dict:
    body = {"title": "Task", **payload}
    response = await client.post("/api/tasks", json=body, headers=account.headers)
    assert response.status_code == 201, response.text
    return response.json()["task"]


async def _insert_overdue(owner_id: str, title: str = "Late task", **fields) -> Task:
    task = Task(
        title=title,
        user_id=PydanticObjectId(owner_id),
        due_date=datetime.now(timezone.utc) - timedelta(days=2),
        **fields,
    )
    await task.insert()
    return task


async def test_create_task_applies_defaults(client: AsyncClient, register_user) -> None:
    account = await register_user()

    response = await client.post(
        "/api/tasks",
        json={"title": "  Buy milk  ", "tags": ["home", "  ", "errand"], "user": str(PydanticObjectId())},
        headers=account.headers,
    )

    assert response.status_code == 201, response.text
    task = response.json()["task"]
    assert task["title"] == "Buy milk"
    assert task["category"] == "Geral"
    assert task["priority"] == "média"
    assert task["completed"] is False
    assert task["completedAt"] is None
    assert task["tags"] == ["home", "errand"]
    assert task["user"] == account.id
    assert task["isOverdue"] is False
    assert task["subtaskProgress"] == {"completed": 0, "total": 0, "percentage": 0}
    assert task["daysUntilDue"] is None

    fetched = await client.get(f"/api/tasks/{task['id']}", headers=account.headers)
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Buy milk"


async def test_create_task_requires_a_title(client: AsyncClient, register_user) -> None:
    account = await register_user()

    response = await client.post("/api/tasks", json={"title": "   "}, headers=account.headers)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert response.json()["details"]["errors"][0]["field"] == "title"


async def test_due_date_must_be_in_the_future(client: AsyncClient, register_user) -> None:
    account = await register_user()
    yesterday = datetime.now(timezone.utc) - timedelta(days=1)
    tomorrow = datetime.now(timezone.utc) + timedelta(days=1)

    rejected = await client.post(
        "/api/tasks",
        json={"title": "Past", "dueDate": _iso(yesterday)},
        headers=account.headers,
    )
    assert rejected.status_code == 400
    assert rejected.json()["code"] == "invalid_due_date"

    accepted = await client.post(
        "/api/tasks",
        json={"title": "Future", "dueDate": _iso(tomorrow)},
        headers=account.headers,
    )
    assert accepted.status_code == 201
    assert accepted.json()["task"]["daysUntilDue"] == 1


async def test_update_rechecks_only_changed_due_dates(client: AsyncClient, register_user) -> None:
    account = await register_user()
    late = await _insert_overdue(account.id)

    # Editing other fields of an already overdue task is allowed.
    renamed = await client.put(f"/api/tasks/{late.id}", json={"title": "Renamed"}, headers=account.headers)
    assert renamed.status_code == 200
    assert renamed.json()["task"]["isOverdue"] is True

    past = datetime.now(timezone.utc) - timedelta(hours=3)
    moved = await client.put(f"/api/tasks/{late.id}", json={"dueDate": _iso(past)}, headers=account.headers)
    assert moved.status_code == 400
    assert moved.json()["code"] == "invalid_due_date"

    cleared = await client.put(f"/api/tasks/{late.id}", json={"dueDate": None}, headers=account.headers)
    assert cleared.status_code == 200
    assert cleared.json()["task"]["dueDate"] is None
    assert cleared.json()["task"]["isOverdue"] is False


async def test_completion_transitions_manage_completed_at(client: AsyncClient, register_user) -> None:
    account = await register_user()
    task = await _create(client, account)

    done = await client.put(f"/api/tasks/{task['id']}", json={"completed": True}, headers=account.headers)
    assert done.status_code == 200
    stamped = done.json()["task"]["completedAt"]
    assert stamped is not None

    again = await client.put(f"/api/tasks/{task['id']}", json={"completed": True}, headers=account.headers)
    assert again.json()["task"]["completedAt"] == stamped

    reopened = await client.put(f"/api/tasks/{task['id']}", json={"completed": False}, headers=account.headers)
    assert reopened.json()["task"]["completed"] is False
    assert reopened.json()["task"]["completedAt"] is None


async def test_update_requires_at_least_one_field(client: AsyncClient, register_user) -> None:
    account = await register_user()
    task = await _create(client, account)

    response = await client.put(f"/api/tasks/{task['id']}", json={}, headers=account.headers)

    assert response.status_code == 400


@pytest.mark.parametrize("field", ["title", "completed", "category", "priority", "tags", "subtasks"])
async def test_update_rejects_null_for_required_fields(client: AsyncClient, register_user, field: str) -> None:
    account = await register_user()
    task = await _create(client, account, title="Keep")

    response = await client.put(f"/api/tasks/{task['id']}", json={field: None}, headers=account.headers)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert response.json()["details"]["errors"][0]["field"] == field
    unchanged = await client.get(f"/api/tasks/{task['id']}", headers=account.headers)
    assert unchanged.json()["title"] == "Keep"


async def test_update_accepts_null_for_clearable_fields(client: AsyncClient, register_user) -> None:
    account = await register_user()
    task = await _create(client, account, description="Some notes")

    response = await client.put(
        f"/api/tasks/{task['id']}",
        json={"description": None, "dueDate": None, "reminder": None},
        headers=account.headers,
    )

    assert response.status_code == 200
    assert response.json()["task"]["description"] is None


async def test_pagination_walks_every_task_once(client: AsyncClient, register_user) -> None:
    account = await register_user()
    for index in range(25):
        await _create(client, account, title=f"Task {index:02d}")

    seen: list[str] = []
    for page in (1, 2, 3):
        response = await client.get(f"/api/tasks?page={page}&limit=10", headers=account.headers)
        assert response.status_code == 200
        seen.extend(task["id"] for task in response.json()["tasks"])

    last = response.json()
    assert len(last["tasks"]) == 5
    assert last["pagination"] == {
        "currentPage": 3,
        "totalPages": 3,
        "totalTasks": 25,
        "hasNext": False,
        "hasPrev": True,
    }
    assert len(seen) == len(set(seen)) == 25

    first = await client.get("/api/tasks", headers=account.headers)
    assert len(first.json()["tasks"]) == 10
    assert first.json()["pagination"]["hasNext"] is True
    assert first.json()["pagination"]["hasPrev"] is False


async def test_page_limit_is_bounded(client: AsyncClient, register_user) -> None:
    account = await register_user()

    too_large = await client.get("/api/tasks?limit=101", headers=account.headers)
    assert too_large.status_code == 400
    zero_page = await client.get("/api/tasks?page=0", headers=account.headers)
    assert zero_page.status_code == 400


async def test_filters_combine(client: AsyncClient, register_user) -> None:
    account = await register_user()
    await _create(client, account, title="Report", category="Trabalho", priority="alta")
    await _create(client, account, title="Gym", category="Saúde", priority="baixa")
    finished = await _create(client, account, title="Invoice", category="Trabalho", priority="alta")
    await client.put(f"/api/tasks/{finished['id']}", json={"completed": True}, headers=account.headers)

    work = await client.get("/api/tasks", params={"category": "Trabalho"}, headers=account.headers)
    assert {task["title"] for task in work.json()["tasks"]} == {"Report", "Invoice"}

    pending_work = await client.get(
        "/api/tasks",
        params={"category": "Trabalho", "completed": "false"},
        headers=account.headers,
    )
    assert [task["title"] for task in pending_work.json()["tasks"]] == ["Report"]

    low = await client.get("/api/tasks", params={"priority": "baixa"}, headers=account.headers)
    assert [task["title"] for task in low.json()["tasks"]] == ["Gym"]

    bad = await client.get("/api/tasks", params={"category": "Nope"}, headers=account.headers)
    assert bad.status_code == 400


async def test_overdue_filter_overrides_completed(client: AsyncClient, register_user) -> None:
    account = await register_user()
    await _insert_overdue(account.id, title="Late")
    await _insert_overdue(account.id, title="Late but done", completed=True)
    await _create(client, account, title="On time")

    response = await client.get(
        "/api/tasks",
        params={"overdue": "true", "completed": "true"},
        headers=account.headers,
    )

    assert response.status_code == 200
    tasks = response.json()["tasks"]
    assert [task["title"] for task in tasks] == ["Late"]
    assert tasks[0]["isOverdue"] is True
    assert response.json()["stats"]["overdue"] == 1

    everything = await client.get("/api/tasks", params={"overdue": "false"}, headers=account.headers)
    assert everything.json()["pagination"]["totalTasks"] == 3


async def test_search_matches_title_description_and_tags(client: AsyncClient, register_user) -> None:
    account = await register_user()
    await _create(client, account, title="Quarterly report")
    await _create(client, account, title="Call", description="Discuss the REPORT draft")
    await _create(client, account, title="Groceries", tags=["reporting"])
    await _create(client, account, title="Unrelated")
    await _create(client, account, title="Regex (a+b)")

    response = await client.get("/api/tasks", params={"search": "report"}, headers=account.headers)
    assert {task["title"] for task in response.json()["tasks"]} == {"Quarterly report", "Call", "Groceries"}

    literal = await client.get("/api/tasks", params={"search": "(a+b)"}, headers=account.headers)
    assert [task["title"] for task in literal.json()["tasks"]] == ["Regex (a+b)"]


async def test_sorting(client: AsyncClient, register_user) -> None:
    account = await register_user()
    for title in ("banana", "apple", "cherry"):
        await _create(client, account, title=title)

    ascending = await client.get(
        "/api/tasks",
        params={"sortBy": "title", "sortOrder": "asc"},
        headers=account.headers,
    )
    assert [task["title"] for task in ascending.json()["tasks"]] == ["apple", "banana", "cherry"]

    newest_first = await client.get("/api/tasks", headers=account.headers)
    assert [task["title"] for task in newest_first.json()["tasks"]] == ["cherry", "apple", "banana"]

    unknown = await client.get("/api/tasks", params={"sortBy": "hashedPassword"}, headers=account.headers)
    assert unknown.status_code == 400
    assert unknown.json()["details"]["errors"][0]["field"] == "sortBy"


async def test_tasks_are_isolated_per_owner(client: AsyncClient, register_user) -> None:
    owner = await register_user()
    intruder = await register_user()
    task = await _create(client, owner, title="Private")

    for method in ("GET", "PUT", "DELETE"):
        kwargs = {"json": {"title": "Mine now"}} if method == "PUT" else {}
        response = await client.request(method, f"/api/tasks/{task['id']}", headers=intruder.headers, **kwargs)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    listing = await client.get("/api/tasks", headers=intruder.headers)
    assert listing.json()["tasks"] == []

    still_there = await client.get(f"/api/tasks/{task['id']}", headers=owner.headers)
    assert still_there.json()["title"] == "Private"


async def test_malformed_task_id_is_a_bad_request(client: AsyncClient, register_user) -> None:
    account = await register_user()

    response = await client.get("/api/tasks/not-an-id", headers=account.headers)

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_id"


async def test_tasks_require_authentication(client: AsyncClient) -> None:
    response = await client.get("/api/tasks")
    assert response.status_code == 401


async def test_subtasks_can_be_added_and_toggled(client: AsyncClient, register_user) -> None:
    account = await register_user()
    task = await _create(client, account)

    added = await client.post(
        f"/api/tasks/{task['id']}/subtasks",
        json={"title": "First step"},
        headers=account.headers,
    )
    assert added.status_code == 200, added.text
    await client.post(f"/api/tasks/{task['id']}/subtasks", json={"title": "Second step"}, headers=account.headers)
    fetched = await client.get(f"/api/tasks/{task['id']}", headers=account.headers)
    subtasks = fetched.json()["subtasks"]
    assert [subtask["title"] for subtask in subtasks] == ["First step", "Second step"]

    first = subtasks[0]
    toggled = await client.put(
        f"/api/tasks/{task['id']}",
        json={"subtasks": [{**first, "completed": True}, subtasks[1]]},
        headers=account.headers,
    )
    assert toggled.status_code == 200
    body = toggled.json()["task"]
    assert body["subtasks"][0]["id"] == first["id"]
    assert body["subtasks"][0]["completedAt"] is not None
    assert body["subtasks"][1]["completedAt"] is None
    assert body["subtaskProgress"] == {"completed": 1, "total": 2, "percentage": 50}

    empty = await client.post(f"/api/tasks/{task['id']}/subtasks", json={"title": " "}, headers=account.headers)
    assert empty.status_code == 400


async def test_delete_task(client: AsyncClient, register_user) -> None:
    account = await register_user()
    task = await _create(client, account)

    deleted = await client.delete(f"/api/tasks/{task['id']}", headers=account.headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"]

    missing = await client.get(f"/api/tasks/{task['id']}", headers=account.headers)
    assert missing.status_code == 404


async def test_dashboard_statistics(client: AsyncClient, register_user) -> None:
    account = await register_user()
    await _create(client, account, title="A", category="Trabalho", priority="urgente")
    await _create(client, account, title="B", category="Trabalho", priority="baixa")
    done = await _create(client, account, title="C", category="Lazer", priority="baixa")
    await client.put(f"/api/tasks/{done['id']}", json={"completed": True}, headers=account.headers)
    await _insert_overdue(account.id, title="D", category="Lazer")

    response = await client.get("/api/tasks/stats/dashboard", headers=account.headers)

    assert response.status_code == 200, response.text
    stats = response.json()
    general = stats["general"]
    assert general == {"total": 4, "completed": 1, "pending": 3, "overdue": 1}
    assert general["completed"] + general["pending"] == general["total"]

    assert stats["categories"] == [
        {"category": "Lazer", "total": 2, "completed": 1},
        {"category": "Trabalho", "total": 2, "completed": 0},
    ]
    assert [row["priority"] for row in stats["priorities"]] == ["baixa", "média", "urgente"]

    weekly = stats["weekly"]
    assert [row["day"] for row in weekly] == list(range(1, 8))
    assert weekly[0]["label"] == "Sunday"
    today = datetime.now(timezone.utc).isoweekday() % 7 + 1
    assert weekly[today - 1]["count"] == 4
    assert sum(row["count"] for row in weekly) == 4
