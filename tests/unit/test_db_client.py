"""Tests for the SQLite client and its filter language."""

import pytest

from src.core import db_client
from src.core.db_client import (
    ConstraintViolationError,
    DatabaseError,
    RecordNotFoundError,
    _build_order_by,
    parse_filter,
    sanitize_param,
)


@pytest.mark.unit
class TestParseFilter:
    def test_empty_filter(self):
        assert parse_filter("") == ("", [])

    def test_single_comparison(self):
        assert parse_filter('status = "pending"') == ("status = ?", ["pending"])

    def test_numeric_values_become_ints(self):
        assert parse_filter('owner_id = "12"') == ("owner_id = ?", [12])

    def test_and_conditions(self):
        where, params = parse_filter('owner_id = "1" && status != "completed" && due_date < "2026-10-19T12:00:00.000Z"')

        assert where == "owner_id = ? AND status != ? AND due_date < ?"
        assert params == [1, "completed", "2026-10-19T12:00:00.000Z"]

    def test_or_group(self):
        where, params = parse_filter('owner_id = "1" && (id = "2" || id = "3")')

        assert where == "owner_id = ? AND (id = ? OR id = ?)"
        assert params == [1, 2, 3]

    def test_like_operator_escapes_wildcards(self):
        where, params = parse_filter('title ~ "50%_off"')

        assert where == "title LIKE ? ESCAPE '\\'"
        assert params == ["%50\\%\\_off%"]

    def test_invalid_syntax(self):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            parse_filter("status pending")

    def test_sanitize_param_escapes_quotes(self):
        assert sanitize_param('say "hi"') == 'say \\"hi\\"'


@pytest.mark.unit
class TestBuildOrderBy:
    @pytest.mark.parametrize(
        ("sort", "expected"),
        [
            ("", "id ASC"),
            ("+due_date", "due_date ASC, id ASC"),
            ("-created", "created DESC, id ASC"),
            ("due_date DESC", "due_date DESC, id ASC"),
            ("due_date; DROP TABLE tasks", "id ASC"),
        ],
    )
    def test_sort_specs(self, sort, expected):
        assert _build_order_by(sort) == expected


@pytest.mark.unit
class TestCrud:
    async def test_create_and_get(self, test_db):
        record = await db_client.create_record(
            collection="users", data={"name": "Ada", "email": "ada@example.com", "password_hash": "x"}
        )

        fetched = await db_client.get_record(collection="users", record_id=record["id"])

        assert isinstance(record["id"], str)
        assert fetched["email"] == "ada@example.com"
        assert fetched["created"].endswith("Z")

    async def test_unique_constraint(self, test_db):
        data = {"name": "Ada", "email": "ada@example.com", "password_hash": "x"}
        await db_client.create_record(collection="users", data=data)

        with pytest.raises(ConstraintViolationError):
            await db_client.create_record(collection="users", data={**data, "email": "ADA@example.com"})

    async def test_get_missing_record(self, test_db):
        with pytest.raises(RecordNotFoundError):
            await db_client.get_record(collection="users", record_id="404")

    async def test_update_missing_record(self, test_db):
        with pytest.raises(RecordNotFoundError):
            await db_client.update_record(collection="users", record_id="404", data={"name": "x"})

    async def test_delete_missing_record(self, test_db):
        with pytest.raises(RecordNotFoundError):
            await db_client.delete_record(collection="users", record_id="404")

    async def test_update_records_returns_affected_count(self, owner, store_task):
        await store_task(owner.id, priority="low")
        await store_task(owner.id, priority="low")
        await store_task(owner.id, priority="high")

        affected = await db_client.update_records(
            collection="tasks", filter_query='priority = "low"', data={"priority": "medium"}
        )

        assert affected == 2
        assert await db_client.count_records(collection="tasks", filter_query='priority = "medium"') == 2

    async def test_list_records_pagination(self, owner, store_task):
        for i in range(5):
            await store_task(owner.id, title=f"T{i}")

        page = await db_client.list_records(collection="tasks", page=2, per_page=2)

        assert [r["title"] for r in page] == ["T2", "T3"]

    async def test_invalid_collection_name(self, test_db):
        with pytest.raises(DatabaseError):
            await db_client.list_records(collection="tasks; DROP TABLE users")

    async def test_missing_table_surfaces_as_database_error(self, tmp_path, monkeypatch):
        monkeypatch.setattr(db_client.settings, "sqlite_db_path", str(tmp_path / "empty.db"))
        try:
            with pytest.raises(DatabaseError, match="does not exist"):
                await db_client.create_record(collection="tasks", data={"title": "x"})
        finally:
            await db_client.close_connection()
