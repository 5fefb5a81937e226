"""Parallel groups: completion rules and completion notifications."""

import pytest

from caseflow.application.dtos.parallel import ParallelGroupCreate
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from tests.factories import register


@pytest.fixture
async def stage(services):
    stage = await services.tasks.create_stage("case-1", "Review", 1, "tester")
    await register(services, "p1", stage_id=stage.id, assigned_to_user_id="u1")
    await register(services, "p2", stage_id=stage.id, assigned_to_user_id="u2")
    await register(services, "p3", stage_id=stage.id, assigned_to_user_id="u1")
    return stage


async def test_all_rule_completes_on_last_member(services, stage) -> None:
    group = await services.parallel.create(
        ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "p2"], completion_rule="all"),
        "tester",
    )

    first = await services.tasks.transition_status("p1", "done", "tester")
    assert [(g.group_id, g.is_complete) for g in first.groups] == [(group.id, False)]

    second = await services.tasks.transition_status("p2", "done", "tester")
    assert second.groups[0].is_complete is True
    assert second.groups[0].became_complete is True
    assert second.groups[0].percentage == 100.0

    for user in ("u1", "u2"):
        inbox = await services.notifications.list_for_user(user)
        assert sum(1 for n in inbox if n.type == "stage_completed") == 1


async def test_percentage_rule(services, stage) -> None:
    group = await services.parallel.create(
        ParallelGroupCreate(
            stage_id=stage.id,
            task_ids=["p1", "p2", "p3"],
            completion_rule="percentage",
            completion_threshold=60,
        ),
        "tester",
    )
    await services.tasks.transition_status("p1", "done", "tester")
    status = await services.parallel.status(group.id)
    assert (status.completed_count, status.is_complete) == (1, False)

    await services.tasks.transition_status("p2", "done", "tester")
    status = await services.parallel.status(group.id)
    assert status.percentage == 66.7
    assert status.is_complete is True


async def test_any_rule(services, stage) -> None:
    group = await services.parallel.create(
        ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "p2"], completion_rule="any"),
        "tester",
    )
    await services.tasks.transition_status("p2", "done", "tester")
    assert (await services.parallel.status(group.id)).is_complete is True


async def test_group_validation(services, stage) -> None:
    with pytest.raises(ValidationException):
        await services.parallel.create(
            ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "p1"], completion_rule="all"),
            "tester",
        )
    with pytest.raises(ValidationException):
        await services.parallel.create(
            ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "p2"], completion_rule="percentage"),
            "tester",
        )
    with pytest.raises(ResourceNotFoundException):
        await services.parallel.create(
            ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "ghost"], completion_rule="all"),
            "tester",
        )


async def test_remove_member(services, stage) -> None:
    group = await services.parallel.create(
        ParallelGroupCreate(stage_id=stage.id, task_ids=["p1", "p2", "p3"], completion_rule="all"),
        "tester",
    )
    updated = await services.parallel.remove_member(group.id, "p3", "tester")
    assert updated.task_ids == ["p1", "p2"]

    with pytest.raises(ValidationException):
        await services.parallel.remove_member(group.id, "p2", "tester")

    assert [g.id for g in await services.parallel.groups_containing("p1")] == [group.id]
    assert await services.parallel.groups_containing("p3") == []
