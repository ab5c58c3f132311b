"""Overdue status derivation for tasks.

A task is overdue when its due date has passed and it is not completed. The
rule is applied three ways:

- ``derive_status``: pure, used when rendering any task returned to a caller.
- ``apply_status_on_save``: forced onto every create/update right before it is
  persisted.
- ``sweep_overdue``: bulk rewrite of stored statuses run before reads, so
  stored state converges to the derived one.
"""

import logging
from datetime import datetime

from src.core.clock import ensure_utc, utc_now
from src.core.logging import span
from src.domain.task import TaskStatus
from src.modules.tasks import task_store


logger = logging.getLogger(__name__)


def is_past_due(*, due_date: datetime, now: datetime) -> bool:
    """Whether the due date lies strictly before now."""
    return ensure_utc(due_date) < ensure_utc(now)


def derive_status(stored_status: TaskStatus | str, due_date: datetime, now: datetime) -> TaskStatus:
    """Compute the effective status from the stored status and due date.

    Completion always wins over lateness; otherwise a past due date means
    overdue, whatever was stored.
    """
    status = TaskStatus(stored_status)
    if status == TaskStatus.COMPLETED:
        return TaskStatus.COMPLETED
    if is_past_due(due_date=due_date, now=now):
        return TaskStatus.OVERDUE
    return status


def apply_status_on_save(*, status: TaskStatus | str, due_date: datetime, now: datetime) -> TaskStatus:
    """Status to persist for a task about to be saved.

    Same rule as ``derive_status``, plus a stale ``overdue`` on a task whose due
    date has moved into the future falls back to ``pending``.
    """
    effective = derive_status(status, due_date, now)
    if effective == TaskStatus.OVERDUE and not is_past_due(due_date=due_date, now=now):
        return TaskStatus.PENDING
    return effective


async def sweep_overdue(*, owner_id: str | None = None, now: datetime | None = None) -> int:
    """Persist the overdue status for every past-due, non-completed task.

    Args:
        owner_id: Restrict the sweep to one owner's tasks (None sweeps everyone)
        now: Reference time (defaults to the current time)

    Returns:
        Number of tasks whose stored status changed
    """
    with span("task_status.sweep_overdue"):
        affected = await task_store.bulk_set_overdue(now=now or utc_now(), owner_id=owner_id)
        if affected:
            logger.info("Marked %d tasks overdue", affected, extra={"owner_id": owner_id})
        return affected
