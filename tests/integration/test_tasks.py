"""Task store: registration, status transitions, blocking and archival."""

import pytest

from caseflow.domain.exceptions import (
    ConflictRetryException,
    ResourceNotFoundException,
    TaskBlockedException,
    ValidationException,
)
from tests.factories import register


async def test_register_and_get(services) -> None:
    created = await register(services, "t1", assigned_to_user_id="alice", priority="high")
    fetched = await services.tasks.get_task("t1")
    assert fetched == created
    assert fetched.version == 1
    assert fetched.status == "pending"


async def test_register_rejects_duplicate_id(services) -> None:
    await register(services, "t1")
    with pytest.raises(ValidationException):
        await register(services, "t1")


async def test_register_rejects_unknown_stage_and_status(services) -> None:
    with pytest.raises(ResourceNotFoundException):
        await register(services, "t1", stage_id="nope")
    with pytest.raises(ValidationException):
        await register(services, "t2", status="archived")


async def test_stage_must_belong_to_case(services) -> None:
    stage = await services.tasks.create_stage("case-2", "Intake", 0, "tester")
    with pytest.raises(ValidationException):
        await register(services, "t1", stage_id=stage.id)


async def test_transitions_stamp_lifecycle_times(services) -> None:
    await register(services, "t1")

    started = await services.tasks.transition_status("t1", "in-progress", "alice")
    assert started.previous_status == "pending"
    assert started.task.started_at is not None

    done = await services.tasks.transition_status("t1", "done", "alice")
    assert done.task.completed_at is not None

    reopened = await services.tasks.transition_status("t1", "review", "alice")
    assert reopened.task.completed_at is None
    assert reopened.task.started_at == started.task.started_at


async def test_same_status_is_a_no_op(services) -> None:
    task = await register(services, "t1")
    result = await services.tasks.transition_status("t1", "pending", "alice")
    assert result.task.version == task.version


async def test_start_blocked_until_prerequisites_done(services) -> None:
    await register(services, "a")
    await register(services, "b")
    await services.dependencies.set_dependencies("a", ["b"], "blocking", "tester")

    with pytest.raises(TaskBlockedException) as exc_info:
        await services.tasks.transition_status("a", "in-progress", "alice")
    assert exc_info.value.details["blocked_by"] == ["b"]

    await services.tasks.transition_status("b", "done", "bob")
    result = await services.tasks.transition_status("a", "in-progress", "alice")
    assert result.task.status == "in-progress"


async def test_other_transitions_ignore_dependencies(services) -> None:
    await register(services, "a")
    await register(services, "b")
    await services.dependencies.set_dependencies("a", ["b"], "blocking", "tester")
    result = await services.tasks.transition_status("a", "review", "alice")
    assert result.task.status == "review"


async def test_stale_version_is_a_conflict(services) -> None:
    await register(services, "t1")
    await services.tasks.transition_status("t1", "review", "alice", expected_version=1)
    with pytest.raises(ConflictRetryException):
        await services.tasks.transition_status("t1", "done", "bob", expected_version=1)


async def test_archived_tasks_leave_listings(services) -> None:
    await register(services, "t1")
    await register(services, "t2")
    await services.tasks.archive_task("t1", "tester")

    listed = await services.tasks.list_tasks(case_id="case-1")
    assert [t.id for t in listed] == ["t2"]
    everything = await services.tasks.list_tasks(case_id="case-1", include_archived=True)
    assert {t.id for t in everything} == {"t1", "t2"}

    with pytest.raises(ValidationException):
        await services.tasks.transition_status("t1", "done", "tester")


async def test_status_changes_are_audited(services) -> None:
    await register(services, "t1")
    await services.tasks.transition_status("t1", "review", "alice")
    entries = await services.audit.query_by_case("case-1")
    actions = [e.action for e in entries]
    assert "task_created" in actions
    change = next(e for e in entries if e.action == "status_changed")
    assert change.previous_value == {"status": "pending"}
    assert change.new_value == {"status": "review"}
    assert change.user_id == "alice"
