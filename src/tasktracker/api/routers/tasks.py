"""Routes handling task CRUD, listing and statistics."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, TaskServiceDependency
from ...models import Category, Priority, utcnow
from ...schemas import (
    CategoryBreakdown,
    DashboardStats,
    MessageResponse,
    Pagination,
    PriorityBreakdown,
    SubtaskCreate,
    TaskCreate,
    TaskListResponse,
    TaskMutationResponse,
    TaskRead,
    TaskStats,
    TaskUpdate,
    WeekdayCount,
)
from ...services import TaskFilters, TaskStatisticsResult

router = APIRouter(prefix="/tasks", tags=["tasks"])

PageQuery = Annotated[int, Query(ge=1, description="1-indexed page number.")]
LimitQuery = Annotated[
    int | None,
    Query(ge=1, le=100, description="Tasks per page (defaults to 10)."),
]
CategoryQuery = Annotated[Category | None, Query(description="Only tasks in this category.")]
PriorityQuery = Annotated[Priority | None, Query(description="Only tasks with this priority.")]
CompletedQuery = Annotated[bool | None, Query(description="Filter by completion state.")]
OverdueQuery = Annotated[
    bool,
    Query(description="When true, only incomplete tasks past their due date (overrides `completed`)."),
]
SearchQuery = Annotated[
    str | None,
    Query(max_length=200, description="Case-insensitive text matched against title, description and tags."),
]
SortByQuery = Annotated[
    str,
    Query(alias="sortBy", description="createdAt, updatedAt, dueDate, title, priority, category or completed."),
]
SortOrderQuery = Annotated[Literal["asc", "desc"], Query(alias="sortOrder")]


def _stats(result: TaskStatisticsResult) -> TaskStats:
    return TaskStats(
        total=result.total,
        completed=result.completed,
        pending=result.pending,
        overdue=result.overdue,
    )


@router.get("", response_model=TaskListResponse, summary="List tasks with filters, search and pagination")
async def list_tasks(
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
    page: PageQuery = 1,
    limit: LimitQuery = None,
    category: CategoryQuery = None,
    completed: CompletedQuery = None,
    priority: PriorityQuery = None,
    overdue: OverdueQuery = False,
    search: SearchQuery = None,
    sort_by: SortByQuery = "createdAt",
    sort_order: SortOrderQuery = "desc",
) -> TaskListResponse:
    result = await service.list_tasks(
        current_user.id,
        filters=TaskFilters(
            category=category,
            completed=completed,
            priority=priority,
            overdue=overdue,
            search=search,
        ),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    now = utcnow()
    return TaskListResponse(
        tasks=[TaskRead.from_document(task, now=now) for task in result.tasks],
        pagination=Pagination(
            current_page=result.page,
            total_pages=result.total_pages,
            total_tasks=result.total,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
        stats=_stats(result.stats),
    )


@router.get("/stats/dashboard", response_model=DashboardStats, summary="Aggregate statistics for the dashboard")
async def dashboard_stats(current_user: CurrentUserDependency, service: TaskServiceDependency) -> DashboardStats:
    result = await service.dashboard_stats(current_user.id)
    return DashboardStats(
        general=_stats(result.general),
        categories=[
            CategoryBreakdown(category=group.key, total=group.total, completed=group.completed)
            for group in result.categories
        ],
        priorities=[
            PriorityBreakdown(priority=group.key, total=group.total, completed=group.completed)
            for group in result.priorities
        ],
        weekly=[WeekdayCount(day=day, label=label, count=count) for day, label, count in result.weekly],
    )


@router.get("/{task_id}", response_model=TaskRead, summary="Retrieve a task by id")
async def get_task(task_id: str, current_user: CurrentUserDependency, service: TaskServiceDependency) -> TaskRead:
    task = await service.get_task(current_user.id, task_id)
    return TaskRead.from_document(task)


@router.post(
    "",
    response_model=TaskMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    payload: TaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskMutationResponse:
    task = await service.create_task(
        current_user.id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        priority=payload.priority,
        due_date=payload.due_date,
        tags=payload.tags,
        reminder=payload.reminder.model_dump() if payload.reminder else None,
    )
    return TaskMutationResponse(message="Task created successfully.", task=TaskRead.from_document(task))


@router.put("/{task_id}", response_model=TaskMutationResponse, summary="Update an existing task")
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskMutationResponse:
    task = await service.update_task(current_user.id, task_id, payload.model_dump(exclude_unset=True))
    return TaskMutationResponse(message="Task updated successfully.", task=TaskRead.from_document(task))


@router.delete("/{task_id}", response_model=MessageResponse, summary="Delete a task")
async def delete_task(
    task_id: str,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> MessageResponse:
    await service.delete_task(current_user.id, task_id)
    return MessageResponse(message="Task deleted successfully.")


@router.post("/{task_id}/subtasks", response_model=TaskMutationResponse, summary="Append a subtask")
async def add_subtask(
    task_id: str,
    payload: SubtaskCreate,
    current_user: CurrentUserDependency,
    service: TaskServiceDependency,
) -> TaskMutationResponse:
    task = await service.add_subtask(current_user.id, task_id, payload.title)
    return TaskMutationResponse(message="Subtask added successfully.", task=TaskRead.from_document(task))
