"""Pytest configuration and fixtures for API integration tests."""

from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from src.core.config import settings
from src.main import app


@pytest.fixture
def client(tmp_path, monkeypatch) -> Generator[TestClient]:
    """Run the app (lifespan included) against a fresh SQLite file."""
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "api.db"))
    monkeypatch.setattr(settings, "environment", "test")

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_user(client) -> Callable[..., dict[str, str]]:
    """Register a user and return Authorization headers for them."""

    def _register_user(*, name: str = "Test User", email: str = "test@example.com") -> dict[str, str]:
        response = client.post(
            "/api/users/register",
            json={"name": name, "email": email, "password": "password123", "passwordConfirm": "password123"},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register_user


@pytest.fixture
def auth_headers(register_user) -> dict[str, str]:
    return register_user()


@pytest.fixture
def other_auth_headers(register_user) -> dict[str, str]:
    return register_user(name="Other User", email="other@example.com")


@pytest.fixture
def due_in() -> Callable[[float], str]:
    """ISO timestamp the given number of days from the real current time."""

    def _due_in(days: float) -> str:
        return (datetime.now(UTC) + timedelta(days=days)).isoformat()

    return _due_in


@pytest.fixture
def create_task(client, auth_headers, due_in) -> Callable[..., dict]:
    """POST a task (as the default user unless headers are given) and return its JSON."""

    def _create_task(title: str = "Task", *, headers: dict[str, str] | None = None, **fields) -> dict:
        body = {"title": title, "dueDate": due_in(7), **fields}
        response = client.post("/api/tasks", json=body, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["task"]

    return _create_task
