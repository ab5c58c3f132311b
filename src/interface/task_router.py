"""Task REST endpoints. Every route is scoped to the authenticated user."""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status

from src.domain.create_models import TaskCreate
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.update_models import TaskUpdate
from src.domain.user import User
from src.interface.auth import get_current_user
from src.modules.tasks import service as task_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _task_list(tasks: list[Task]) -> dict[str, Any]:
    return {
        "status": "success",
        "results": len(tasks),
        "data": {"tasks": [task.model_dump(mode="json") for task in tasks]},
    }


def _single_task(task: Task) -> dict[str, Any]:
    return {"status": "success", "data": {"task": task.model_dump(mode="json")}}


@router.get("/overdue/tasks")
async def list_overdue_tasks(user: User = Depends(get_current_user)) -> dict[str, Any]:
    """List the user's past-due, non-completed tasks."""
    tasks = await task_service.get_overdue_tasks(owner_id=user.id)
    return _task_list(tasks)


@router.get("/graph")
async def get_dependency_graph(user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Return the user's tasks and dependency edges for visualization."""
    graph = await task_service.get_dependency_graph(owner_id=user.id)
    return {"status": "success", "data": graph.model_dump(mode="json")}


@router.get("")
async def list_tasks(
    *,
    user: User = Depends(get_current_user),
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    priority: TaskPriority | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> dict[str, Any]:
    """List the user's tasks, optionally filtered by status, priority and due-date range."""
    tasks = await task_service.get_tasks(
        owner_id=user.id,
        status=task_status,
        priority=priority,
        start_date=start_date,
        end_date=end_date,
    )
    return _task_list(tasks)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Create a task owned by the user."""
    task = await task_service.create_task(owner_id=user.id, payload=payload)
    return _single_task(task)


@router.get("/{task_id}")
async def get_task(task_id: str, user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Get one of the user's tasks."""
    task = await task_service.get_task(owner_id=user.id, task_id=task_id)
    return _single_task(task)


@router.patch("/{task_id}")
async def update_task(task_id: str, payload: TaskUpdate, user: User = Depends(get_current_user)) -> dict[str, Any]:
    """Partially update one of the user's tasks."""
    task = await task_service.update_task(owner_id=user.id, task_id=task_id, payload=payload)
    return _single_task(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, user: User = Depends(get_current_user)) -> Response:
    """Delete one of the user's tasks."""
    await task_service.delete_task(owner_id=user.id, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
