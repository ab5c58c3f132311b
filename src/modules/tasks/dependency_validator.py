"""Dependency validation guarding every task create/update.

Validation only reads from the task store. A rejected mutation raises before
the caller writes anything.
"""

import logging
from collections import deque

from src.core.config import settings
from src.core.errors import CircularDependencyError, DependencyLimitExceededError, InvalidDependencyError
from src.core.logging import log_with_user_context, span
from src.modules.tasks import task_store


logger = logging.getLogger(__name__)


def dedupe_dependencies(dependency_ids: list[str]) -> list[str]:
    """Drop repeated IDs, keeping the first occurrence of each."""
    return list(dict.fromkeys(dependency_ids))


async def validate_dependencies(
    *,
    task_id: str | None,
    proposed_dependencies: list[str],
    owner_id: str,
    traversal_limit: int | None = None,
) -> None:
    """Check that a proposed dependency list keeps the owner's graph valid.

    Args:
        task_id: Task being updated, or None for a task not created yet
        proposed_dependencies: Candidate prerequisite IDs (duplicates allowed)
        owner_id: Requesting user
        traversal_limit: Max distinct tasks to expand during the cycle check
            (defaults to settings.dependency_traversal_limit)

    Raises:
        InvalidDependencyError: An ID is unknown or owned by someone else
        CircularDependencyError: The task would depend on itself, directly or transitively
        DependencyLimitExceededError: The reachable graph exceeds the traversal limit
        db_client.DatabaseError: The store failed during validation
    """
    with span("dependency_validator.validate_dependencies"):
        if not proposed_dependencies:
            return

        distinct_ids = set(proposed_dependencies)
        owned_count = await task_store.count_by_ids_and_owner(ids=distinct_ids, owner_id=owner_id)
        if owned_count != len(distinct_ids):
            log_with_user_context(
                logger,
                "info",
                "Rejected unknown or foreign dependency",
                user_id=owner_id,
                task_id=task_id,
                requested=len(distinct_ids),
                found=owned_count,
            )
            raise InvalidDependencyError

        if task_id is None:
            return

        if task_id in distinct_ids:
            log_with_user_context(logger, "info", "Rejected self-dependency", user_id=owner_id, task_id=task_id)
            raise CircularDependencyError("A task cannot depend on itself")

        await _check_transitive_cycle(
            task_id=task_id,
            start=dedupe_dependencies(proposed_dependencies),
            owner_id=owner_id,
            limit=traversal_limit if traversal_limit is not None else settings.dependency_traversal_limit,
        )


async def _check_transitive_cycle(*, task_id: str, start: list[str], owner_id: str, limit: int) -> None:
    """Breadth-first walk from the proposed prerequisites, looking for a path back to task_id."""
    queue: deque[str] = deque(start)
    visited: set[str] = set()

    while queue:
        current = queue.popleft()
        if current in visited:
            continue

        visited.add(current)
        if len(visited) > limit:
            log_with_user_context(
                logger, "warning", "Dependency traversal limit reached", user_id=owner_id, task_id=task_id, limit=limit
            )
            raise DependencyLimitExceededError(f"Dependency graph is too large to validate (limit {limit} tasks)")

        prerequisites = await task_store.get_dependency_ids_of(task_id=current)
        if task_id in prerequisites:
            log_with_user_context(
                logger, "info", "Rejected circular dependency", user_id=owner_id, task_id=task_id, via=current
            )
            raise CircularDependencyError

        queue.extend(dep for dep in prerequisites if dep not in visited)

    logger.debug("Dependency graph acyclic", extra={"task_id": task_id, "visited": len(visited)})
