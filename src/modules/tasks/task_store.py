"""Task persistence scoped by owner, on top of db_client."""

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any

from src.core import db_client
from src.core.clock import format_timestamp, utc_now
from src.core.config import constants
from src.core.db_client import sanitize_param
from src.domain.task import TaskStatus


logger = logging.getLogger(__name__)

COLLECTION = "tasks"


def _is_record_id(value: str) -> bool:
    """Only canonical integer IDs ("7", never "07" or "+7") can match a row.

    The store compares IDs as integers, so any other spelling would alias an
    existing task while comparing unequal as a string.
    """
    return isinstance(value, str) and value.isdecimal() and value == str(int(value))


def _serialize(data: dict[str, Any]) -> dict[str, Any]:
    """Convert a task payload into column values."""
    serialized: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, datetime):
            serialized[key] = format_timestamp(value)
        elif isinstance(value, Enum):
            serialized[key] = value.value
        else:
            serialized[key] = value
    return serialized


def _id_group(ids: Iterable[str]) -> str:
    """Build an OR group matching any of the given IDs."""
    return "(" + " || ".join(f'id = "{sanitize_param(task_id)}"' for task_id in ids) + ")"


async def _list_all(*, filter_query: str, sort: str) -> list[dict[str, Any]]:
    """Read every matching task, one page at a time."""
    page_size = constants.DEFAULT_PER_PAGE_LIMIT
    records: list[dict[str, Any]] = []
    page = 1

    while True:
        batch = await db_client.list_records(
            collection=COLLECTION,
            filter_query=filter_query,
            sort=sort,
            page=page,
            per_page=page_size,
        )
        records.extend(batch)
        if len(batch) < page_size:
            return records
        page += 1


async def create(*, owner_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a task for an owner and return the stored record."""
    return await db_client.create_record(collection=COLLECTION, data={**_serialize(data), "owner_id": int(owner_id)})


async def find_one(*, task_id: str, owner_id: str) -> dict[str, Any] | None:
    """Return the owner's task with this ID, or None."""
    if not _is_record_id(task_id):
        return None

    return await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=f'id = "{sanitize_param(task_id)}" && owner_id = "{sanitize_param(owner_id)}"',
    )


async def find_many(
    *,
    owner_id: str,
    status: TaskStatus | None = None,
    priority: str | None = None,
    due_after: datetime | None = None,
    due_before: datetime | None = None,
    exclude_status: TaskStatus | None = None,
) -> list[dict[str, Any]]:
    """List all of an owner's matching tasks, sorted by due date ascending.

    Args:
        owner_id: Owning user ID
        status: Only tasks with this stored status
        priority: Only tasks with this priority
        due_after: Only tasks due at or after this time
        due_before: Only tasks due at or before this time
        exclude_status: Skip tasks with this stored status
    """
    filters = [f'owner_id = "{sanitize_param(owner_id)}"']

    if status:
        filters.append(f'status = "{sanitize_param(status.value)}"')

    if exclude_status:
        filters.append(f'status != "{sanitize_param(exclude_status.value)}"')

    if priority:
        filters.append(f'priority = "{sanitize_param(priority)}"')

    if due_after:
        filters.append(f'due_date >= "{format_timestamp(due_after)}"')

    if due_before:
        filters.append(f'due_date <= "{format_timestamp(due_before)}"')

    filter_query = " && ".join(filters)
    records = await _list_all(filter_query=filter_query, sort="+due_date")

    logger.debug("Retrieved %d tasks with filters: %s", len(records), filter_query)
    return records


async def find_overdue(*, owner_id: str, now: datetime) -> list[dict[str, Any]]:
    """List an owner's non-completed tasks whose due date has passed."""
    filters = [
        f'owner_id = "{sanitize_param(owner_id)}"',
        f'status != "{TaskStatus.COMPLETED.value}"',
        f'due_date < "{format_timestamp(now)}"',
    ]
    return await _list_all(filter_query=" && ".join(filters), sort="+due_date")


async def find_summaries(*, ids: Iterable[str], owner_id: str) -> list[dict[str, Any]]:
    """Fetch the owner's tasks among the given IDs (missing IDs are simply absent)."""
    wanted = sorted({task_id for task_id in ids if _is_record_id(task_id)})
    if not wanted:
        return []

    return await db_client.list_records(
        collection=COLLECTION,
        filter_query=f'owner_id = "{sanitize_param(owner_id)}" && {_id_group(wanted)}',
        per_page=len(wanted),
    )


async def count_by_ids_and_owner(*, ids: set[str], owner_id: str) -> int:
    """Count how many of the given IDs are tasks owned by this user."""
    wanted = {task_id for task_id in ids if _is_record_id(task_id)}
    if not wanted:
        return 0

    return await db_client.count_records(
        collection=COLLECTION,
        filter_query=f'owner_id = "{sanitize_param(owner_id)}" && {_id_group(sorted(wanted))}',
    )


async def get_dependency_ids_of(*, task_id: str) -> list[str]:
    """Return the stored dependency list of a task, or [] if the task no longer exists."""
    if not _is_record_id(task_id):
        return []

    try:
        record = await db_client.get_record(collection=COLLECTION, record_id=task_id)
    except db_client.RecordNotFoundError:
        logger.warning("Dangling dependency reference treated as satisfied", extra={"task_id": task_id})
        return []

    return [str(dep) for dep in record.get("dependencies", [])]


async def bulk_set_overdue(*, now: datetime, owner_id: str | None = None) -> int:
    """Mark every non-completed, past-due task as overdue and return how many changed.

    Tasks that are already overdue are not touched, so an immediate second call
    reports zero.
    """
    filters = [
        f'status != "{TaskStatus.COMPLETED.value}"',
        f'status != "{TaskStatus.OVERDUE.value}"',
        f'due_date < "{format_timestamp(now)}"',
    ]
    if owner_id is not None:
        filters.insert(0, f'owner_id = "{sanitize_param(owner_id)}"')

    return await db_client.update_records(
        collection=COLLECTION,
        filter_query=" && ".join(filters),
        data={"status": TaskStatus.OVERDUE.value, "updated": format_timestamp(utc_now())},
    )


async def find_one_and_update(*, task_id: str, owner_id: str, patch: dict[str, Any]) -> dict[str, Any] | None:
    """Apply a patch to the owner's task in one conditional write.

    Returns:
        The updated record, or None if no such task belongs to the owner
    """
    if not _is_record_id(task_id):
        return None

    data = {**_serialize(patch), "updated": format_timestamp(utc_now())}
    affected = await db_client.update_records(
        collection=COLLECTION,
        filter_query=f'id = "{sanitize_param(task_id)}" && owner_id = "{sanitize_param(owner_id)}"',
        data=data,
    )
    if affected == 0:
        return None

    return await db_client.get_record(collection=COLLECTION, record_id=task_id)


async def find_one_and_delete(*, task_id: str, owner_id: str) -> dict[str, Any] | None:
    """Delete the owner's task and return it, or None if there was nothing to delete."""
    record = await find_one(task_id=task_id, owner_id=owner_id)
    if record is None:
        return None

    try:
        await db_client.delete_record(collection=COLLECTION, record_id=task_id)
    except db_client.RecordNotFoundError:
        # Deleted concurrently between the lookup and the delete
        return None

    return record
