"""Unit tests for dependency validation."""

from unittest.mock import AsyncMock, patch

import pytest

from src.core import db_client
from src.core.errors import CircularDependencyError, DependencyLimitExceededError, InvalidDependencyError
from src.modules.tasks.dependency_validator import dedupe_dependencies, validate_dependencies


@pytest.mark.unit
class TestDedupeDependencies:
    def test_keeps_first_occurrence_order(self):
        assert dedupe_dependencies(["3", "1", "3", "2", "1"]) == ["3", "1", "2"]

    def test_empty_list(self):
        assert dedupe_dependencies([]) == []


@pytest.mark.unit
class TestOwnershipCheck:
    """Existence and ownership of proposed prerequisites."""

    async def test_empty_list_is_always_valid(self, owner):
        await validate_dependencies(task_id=None, proposed_dependencies=[], owner_id=owner.id)

    async def test_empty_list_skips_store_entirely(self):
        with patch("src.modules.tasks.dependency_validator.task_store") as store:
            await validate_dependencies(task_id="1", proposed_dependencies=[], owner_id="1")

        store.count_by_ids_and_owner.assert_not_called()

    async def test_own_existing_tasks_are_valid_for_new_task(self, owner, store_task):
        a = await store_task(owner.id, title="A")
        b = await store_task(owner.id, title="B")

        await validate_dependencies(task_id=None, proposed_dependencies=[a["id"], b["id"]], owner_id=owner.id)

    async def test_nonexistent_id_is_rejected(self, owner, store_task):
        a = await store_task(owner.id)

        with pytest.raises(InvalidDependencyError) as exc_info:
            await validate_dependencies(task_id=None, proposed_dependencies=[a["id"], "99999"], owner_id=owner.id)

        assert "do not exist or do not belong to you" in str(exc_info.value)

    async def test_other_users_task_is_rejected(self, owner, other_owner, store_task):
        foreign = await store_task(other_owner.id, title="Not yours")

        with pytest.raises(InvalidDependencyError):
            await validate_dependencies(task_id=None, proposed_dependencies=[foreign["id"]], owner_id=owner.id)

    async def test_malformed_id_is_treated_as_nonexistent(self, owner):
        with pytest.raises(InvalidDependencyError):
            await validate_dependencies(task_id=None, proposed_dependencies=["not-an-id"], owner_id=owner.id)

    async def test_duplicate_ids_are_counted_once(self, owner, store_task):
        a = await store_task(owner.id)

        await validate_dependencies(task_id=None, proposed_dependencies=[a["id"], a["id"]], owner_id=owner.id)

    async def test_ownership_is_checked_before_self_dependency(self, owner, store_task):
        task = await store_task(owner.id)

        with pytest.raises(InvalidDependencyError):
            await validate_dependencies(task_id=task["id"], proposed_dependencies=[task["id"], "424242"], owner_id=owner.id)


@pytest.mark.unit
class TestCycleDetection:
    """Direct and transitive cycle detection on update."""

    async def test_self_dependency_is_rejected(self, owner, store_task):
        task = await store_task(owner.id)

        with pytest.raises(CircularDependencyError) as exc_info:
            await validate_dependencies(task_id=task["id"], proposed_dependencies=[task["id"]], owner_id=owner.id)

        assert str(exc_info.value) == "A task cannot depend on itself"

    async def test_direct_two_task_cycle_is_rejected(self, owner, store_task):
        a = await store_task(owner.id, title="A")
        b = await store_task(owner.id, title="B", dependencies=[a["id"]])

        with pytest.raises(CircularDependencyError) as exc_info:
            await validate_dependencies(task_id=a["id"], proposed_dependencies=[b["id"]], owner_id=owner.id)

        assert str(exc_info.value) == "Circular dependency detected"

    async def test_transitive_chain_cycle_is_rejected(self, owner, store_task):
        # C depends on B, B depends on A; making A depend on C closes the loop
        a = await store_task(owner.id, title="A")
        b = await store_task(owner.id, title="B", dependencies=[a["id"]])
        c = await store_task(owner.id, title="C", dependencies=[b["id"]])

        with pytest.raises(CircularDependencyError):
            await validate_dependencies(task_id=a["id"], proposed_dependencies=[c["id"]], owner_id=owner.id)

    async def test_extending_chain_forward_is_accepted(self, owner, store_task):
        a = await store_task(owner.id, title="A")
        b = await store_task(owner.id, title="B", dependencies=[a["id"]])
        c = await store_task(owner.id, title="C")

        await validate_dependencies(task_id=c["id"], proposed_dependencies=[b["id"]], owner_id=owner.id)

    async def test_diamond_is_not_a_cycle(self, owner, store_task):
        root = await store_task(owner.id, title="Root")
        left = await store_task(owner.id, title="Left", dependencies=[root["id"]])
        right = await store_task(owner.id, title="Right", dependencies=[root["id"]])
        top = await store_task(owner.id, title="Top")

        await validate_dependencies(
            task_id=top["id"], proposed_dependencies=[left["id"], right["id"]], owner_id=owner.id
        )

    async def test_preexisting_cycle_elsewhere_does_not_loop_forever(self, owner, store_task):
        x = await store_task(owner.id, title="X")
        y = await store_task(owner.id, title="Y", dependencies=[x["id"]])
        await db_client.update_record(collection="tasks", record_id=x["id"], data={"dependencies": [y["id"]]})
        target = await store_task(owner.id, title="Target")

        await validate_dependencies(task_id=target["id"], proposed_dependencies=[x["id"]], owner_id=owner.id)

    async def test_dangling_reference_in_graph_is_treated_as_satisfied(self, owner, store_task):
        gone = await store_task(owner.id, title="Gone")
        middle = await store_task(owner.id, title="Middle", dependencies=[gone["id"]])
        await db_client.delete_record(collection="tasks", record_id=gone["id"])
        target = await store_task(owner.id, title="Target")

        await validate_dependencies(task_id=target["id"], proposed_dependencies=[middle["id"]], owner_id=owner.id)

    async def test_traversal_limit_exceeded(self, owner, store_task):
        previous = await store_task(owner.id, title="T0")
        for i in range(1, 5):
            previous = await store_task(owner.id, title=f"T{i}", dependencies=[previous["id"]])
        target = await store_task(owner.id, title="Target")

        with pytest.raises(DependencyLimitExceededError):
            await validate_dependencies(
                task_id=target["id"], proposed_dependencies=[previous["id"]], owner_id=owner.id, traversal_limit=3
            )

    async def test_traversal_within_limit_passes(self, owner, store_task):
        previous = await store_task(owner.id, title="T0")
        for i in range(1, 3):
            previous = await store_task(owner.id, title=f"T{i}", dependencies=[previous["id"]])
        target = await store_task(owner.id, title="Target")

        await validate_dependencies(
            task_id=target["id"], proposed_dependencies=[previous["id"]], owner_id=owner.id, traversal_limit=3
        )

    async def test_store_failure_propagates(self):
        with patch(
            "src.modules.tasks.dependency_validator.task_store.count_by_ids_and_owner",
            new=AsyncMock(side_effect=db_client.DatabaseError("connection lost")),
        ):
            with pytest.raises(db_client.DatabaseError):
                await validate_dependencies(task_id="1", proposed_dependencies=["2"], owner_id="1")

    async def test_store_failure_during_traversal_propagates(self):
        with (
            patch(
                "src.modules.tasks.dependency_validator.task_store.count_by_ids_and_owner",
                new=AsyncMock(return_value=1),
            ),
            patch(
                "src.modules.tasks.dependency_validator.task_store.get_dependency_ids_of",
                new=AsyncMock(side_effect=db_client.DatabaseError("timeout")),
            ),
            pytest.raises(db_client.DatabaseError),
        ):
            await validate_dependencies(task_id="1", proposed_dependencies=["2"], owner_id="1")


@pytest.mark.unit
class TestNonCanonicalIds:
    """Zero-padded and signed spellings must not alias an existing task."""

    @pytest.mark.parametrize("spelling", ["0{}", "00{}", "+{}", " {}"])
    async def test_alias_of_own_id_is_not_a_valid_dependency(self, owner, store_task, spelling):
        task = await store_task(owner.id)

        with pytest.raises(InvalidDependencyError):
            await validate_dependencies(
                task_id=task["id"], proposed_dependencies=[spelling.format(task["id"])], owner_id=owner.id
            )

    async def test_alias_cannot_be_used_to_build_a_cycle(self, owner, store_task):
        a = await store_task(owner.id, title="A")

        with pytest.raises(InvalidDependencyError):
            await validate_dependencies(task_id=None, proposed_dependencies=["0" + a["id"]], owner_id=owner.id)
