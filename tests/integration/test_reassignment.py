"""Reassignment: single, bulk and per-user moves with history."""

import pytest

from caseflow.domain.exceptions import ConflictRetryException, ValidationException
from tests.factories import register


@pytest.fixture
async def owned(services):
    await register(services, "t1", assigned_to_user_id="alice")
    await register(services, "t2", assigned_to_user_id="alice")
    await register(services, "t3", assigned_to_user_id="alice", status="done")
    await register(services, "x1", case_id="case-2", assigned_to_user_id="alice")
    return services


async def test_reassign_records_history(owned) -> None:
    updated = await owned.reassignment.reassign_task("t1", "bob", "manager", reason="leave")
    assert updated.assigned_to_user_id == "bob"
    assert updated.version == 2

    history = await owned.reassignment.history("t1")
    assert len(history) == 1
    assert (history[0].from_user_id, history[0].to_user_id) == ("alice", "bob")
    assert history[0].reassigned_by == "manager"
    assert history[0].reason == "leave"

    bob_inbox = await owned.notifications.list_for_user("bob")
    assert [n.type for n in bob_inbox] == ["task_assigned"]


async def test_reassign_with_stale_version(owned) -> None:
    with pytest.raises(ConflictRetryException):
        await owned.reassignment.reassign_task("t1", "bob", "manager", expected_version=7)
    assert (await owned.tasks.get_task("t1")).assigned_to_user_id == "alice"


async def test_reassign_to_current_owner(owned) -> None:
    with pytest.raises(ValidationException):
        await owned.reassignment.reassign_task("t1", "alice", "manager")


async def test_bulk_reassign_isolates_failures(owned) -> None:
    result = await owned.reassignment.bulk_reassign(["t1", "ghost", "t2"], "carol", "manager")
    assert result.succeeded == ["t1", "t2"]
    assert [f.task_id for f in result.failed] == ["ghost"]
    assert (await owned.tasks.get_task("t2")).assigned_to_user_id == "carol"


async def test_reassign_all_moves_only_open_tasks_in_scope(owned) -> None:
    result = await owned.reassignment.reassign_all_from_user(
        "alice", "dave", "manager", scope="case-1"
    )
    assert result.reassigned_count == 2
    assert result.failed == []
    assert (await owned.tasks.get_task("t3")).assigned_to_user_id == "alice"
    assert (await owned.tasks.get_task("x1")).assigned_to_user_id == "alice"
