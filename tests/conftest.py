"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.core import db_client
from src.core.config import constants, settings
from src.domain.create_models import UserCreate
from src.domain.user import User
from src.modules.tasks import task_store
from src.services import user_service


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time passed to services as "now"."""
    return NOW


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Keep PBKDF2 cheap so registering users in tests stays fast."""
    monkeypatch.setattr(constants, "PASSWORD_HASH_ITERATIONS", 1_000)


@pytest.fixture
async def test_db(tmp_path, monkeypatch) -> AsyncGenerator[str]:
    """Point the store at a fresh SQLite file for each test."""
    db_path = str(tmp_path / "tasks.db")
    monkeypatch.setattr(settings, "sqlite_db_path", db_path)

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()


async def make_user(name: str, email: str) -> User:
    """Register a user with a throwaway password."""
    return await user_service.register(
        payload=UserCreate(name=name, email=email, password="password123", passwordConfirm="password123")
    )


@pytest.fixture
async def owner(test_db) -> User:
    """The user most tests act as."""
    return await make_user("Test User", "test@example.com")


@pytest.fixture
async def other_owner(test_db) -> User:
    """A second user whose tasks must stay invisible to the first."""
    return await make_user("Other User", "other@example.com")


@pytest.fixture
def store_task():
    """Insert a task row directly, bypassing the service layer."""

    async def _store_task(
        owner_id: str,
        *,
        title: str = "Task",
        due_date: datetime | None = None,
        status: str = "pending",
        priority: str = "medium",
        dependencies: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> dict[str, Any]:
        return await task_store.create(
            owner_id=owner_id,
            data={
                "title": title,
                "description": "",
                "due_date": due_date or NOW + timedelta(days=7),
                "status": status,
                "priority": priority,
                "dependencies": dependencies or [],
                "tags": tags or [],
            },
        )

    return _store_task
