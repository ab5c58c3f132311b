"""Task service for CRUD operations, dependency checks and derived status."""

import logging
from datetime import datetime
from typing import Any

from src.core.clock import parse_timestamp, utc_now
from src.core.errors import TaskNotFoundError
from src.core.logging import span
from src.domain.create_models import TaskCreate
from src.domain.task import (
    DependencyGraph,
    DependencyGraphEdge,
    DependencyGraphNode,
    DependencySummary,
    Task,
    TaskPriority,
    TaskStatus,
)
from src.domain.update_models import TaskUpdate
from src.modules.tasks import task_store
from src.modules.tasks.dependency_validator import dedupe_dependencies, validate_dependencies
from src.modules.tasks.status import apply_status_on_save, derive_status, sweep_overdue


logger = logging.getLogger(__name__)


def _to_task(record: dict[str, Any], *, now: datetime, summaries: dict[str, dict[str, Any]]) -> Task:
    """Build the Task returned to callers: effective status plus resolvable prerequisites."""
    due_date = parse_timestamp(record["due_date"])
    details = []
    for dep_id in record.get("dependencies", []):
        summary = summaries.get(dep_id)
        if summary is None:
            logger.warning(
                "Skipping dangling dependency",
                extra={"task_id": record["id"], "dependency_id": dep_id},
            )
            continue
        details.append(
            DependencySummary(
                id=summary["id"],
                title=summary["title"],
                status=derive_status(summary["status"], parse_timestamp(summary["due_date"]), now),
            )
        )

    return Task.model_validate(
        {
            **record,
            "status": derive_status(record["status"], due_date, now),
            "dependency_details": details,
        }
    )


async def _to_tasks(records: list[dict[str, Any]], *, owner_id: str, now: datetime) -> list[Task]:
    """Convert records to Tasks, fetching all referenced prerequisites in one query."""
    dependency_ids = {dep_id for record in records for dep_id in record.get("dependencies", [])}
    known = {record["id"]: record for record in records}
    missing = dependency_ids - known.keys()

    summaries = dict(known)
    if missing:
        for summary in await task_store.find_summaries(ids=missing, owner_id=owner_id):
            summaries[summary["id"]] = summary

    return [_to_task(record, now=now, summaries=summaries) for record in records]


async def create_task(*, owner_id: str, payload: TaskCreate, now: datetime | None = None) -> Task:
    """Create a task for a user.

    Args:
        owner_id: Owning user ID (from the authenticated session)
        payload: Validated task fields
        now: Reference time for the overdue rule (defaults to the current time)

    Returns:
        The created task

    Raises:
        InvalidDependencyError: If a dependency is unknown or belongs to someone else
    """
    with span("task_service.create_task"):
        now = now or utc_now()
        dependencies = dedupe_dependencies(payload.dependencies)

        await validate_dependencies(task_id=None, proposed_dependencies=dependencies, owner_id=owner_id)

        data = payload.model_dump()
        data["dependencies"] = dependencies
        data["status"] = apply_status_on_save(status=payload.status, due_date=payload.due_date, now=now)

        record = await task_store.create(owner_id=owner_id, data=data)
        logger.info("Created task %s for owner_id=%s", record["id"], owner_id)

        tasks = await _to_tasks([record], owner_id=owner_id, now=now)
        return tasks[0]


async def get_tasks(
    *,
    owner_id: str,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    now: datetime | None = None,
) -> list[Task]:
    """Get a user's tasks with optional filters, sorted by due date.

    Args:
        owner_id: Owning user ID
        status: Filter by status
        priority: Filter by priority
        start_date: Only tasks due at or after this time
        end_date: Only tasks due at or before this time
        now: Reference time for the overdue rule

    Returns:
        Matching tasks, earliest due first
    """
    with span("task_service.get_tasks"):
        now = now or utc_now()
        await sweep_overdue(owner_id=owner_id, now=now)

        records = await task_store.find_many(
            owner_id=owner_id,
            status=status,
            priority=priority,
            due_after=start_date,
            due_before=end_date,
        )
        return await _to_tasks(records, owner_id=owner_id, now=now)


async def get_task(*, owner_id: str, task_id: str, now: datetime | None = None) -> Task:
    """Get one of a user's tasks.

    Raises:
        TaskNotFoundError: If no such task belongs to the user
    """
    with span("task_service.get_task"):
        now = now or utc_now()
        await sweep_overdue(owner_id=owner_id, now=now)

        record = await task_store.find_one(task_id=task_id, owner_id=owner_id)
        if record is None:
            raise TaskNotFoundError

        tasks = await _to_tasks([record], owner_id=owner_id, now=now)
        return tasks[0]


async def get_overdue_tasks(*, owner_id: str, now: datetime | None = None) -> list[Task]:
    """Get a user's past-due, non-completed tasks, earliest due first."""
    with span("task_service.get_overdue_tasks"):
        now = now or utc_now()
        await sweep_overdue(owner_id=owner_id, now=now)

        records = await task_store.find_overdue(owner_id=owner_id, now=now)
        return await _to_tasks(records, owner_id=owner_id, now=now)


async def update_task(*, owner_id: str, task_id: str, payload: TaskUpdate, now: datetime | None = None) -> Task:
    """Apply a partial update to one of a user's tasks.

    Dependencies are validated before anything is written, and the overdue rule
    is re-applied to the merged status and due date.

    Raises:
        TaskNotFoundError: If no such task belongs to the user
        InvalidDependencyError: If a dependency is unknown or belongs to someone else
        CircularDependencyError: If the new dependencies would close a cycle
    """
    with span("task_service.update_task"):
        now = now or utc_now()

        existing = await task_store.find_one(task_id=task_id, owner_id=owner_id)
        if existing is None:
            raise TaskNotFoundError

        patch = payload.to_patch()

        if "dependencies" in patch:
            dependencies = dedupe_dependencies(patch["dependencies"])
            await validate_dependencies(task_id=task_id, proposed_dependencies=dependencies, owner_id=owner_id)
            patch["dependencies"] = dependencies

        due_date = patch.get("due_date") or parse_timestamp(existing["due_date"])
        requested_status = patch.get("status", existing["status"])
        patch["status"] = apply_status_on_save(status=requested_status, due_date=due_date, now=now)

        record = await task_store.find_one_and_update(task_id=task_id, owner_id=owner_id, patch=patch)
        if record is None:
            # Deleted between the lookup and the write
            raise TaskNotFoundError

        logger.info("Updated task %s (fields: %s)", task_id, sorted(patch))
        tasks = await _to_tasks([record], owner_id=owner_id, now=now)
        return tasks[0]


async def delete_task(*, owner_id: str, task_id: str) -> Task:
    """Delete one of a user's tasks.

    Tasks that depend on it keep the now-dangling ID; readers treat it as satisfied.

    Raises:
        TaskNotFoundError: If no such task belongs to the user
    """
    with span("task_service.delete_task"):
        record = await task_store.find_one_and_delete(task_id=task_id, owner_id=owner_id)
        if record is None:
            raise TaskNotFoundError

        logger.info("Deleted task %s for owner_id=%s", task_id, owner_id)
        tasks = await _to_tasks([record], owner_id=owner_id, now=utc_now())
        return tasks[0]


async def get_dependency_graph(*, owner_id: str, now: datetime | None = None) -> DependencyGraph:
    """Get the user's tasks as nodes and their dependencies as edges.

    Edges pointing at deleted tasks are left out.
    """
    with span("task_service.get_dependency_graph"):
        tasks = await get_tasks(owner_id=owner_id, now=now)
        task_ids = {task.id for task in tasks}

        nodes = [
            DependencyGraphNode(id=task.id, title=task.title, status=task.status, priority=task.priority)
            for task in tasks
        ]
        edges = [
            DependencyGraphEdge(source=task.id, target=dep_id)
            for task in tasks
            for dep_id in task.dependencies
            if dep_id in task_ids
        ]
        return DependencyGraph(nodes=nodes, edges=edges)
