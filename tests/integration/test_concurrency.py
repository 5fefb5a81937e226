"""Two sessions on one database racing for the same rows.

SQLite serialises writers, so each race is staged in order: the loser
reads (or skips its existence check) first, the winner commits, then the
loser writes.
"""

from unittest.mock import AsyncMock

import pytest

from caseflow.api.v1.dependencies import compose_services
from caseflow.application.dtos.sla import SLARuleSet
from caseflow.application.dtos.task import TaskCreate
from caseflow.domain.approval import decide
from caseflow.domain.exceptions import ConflictRetryException, NotCurrentApproverException
from caseflow.infrastructure.persistence.repositories import (
    ApprovalRepository,
    DependencyRepository,
    SLARuleRepository,
    TaskRepository,
)
from caseflow.shared.enums import ApprovalAction
from tests.factories import NOW, register


async def _seed(session_factory, *task_ids: str, approvers: list[str] | None = None) -> None:
    async with session_factory() as db, db.begin():
        services = compose_services(db)
        for task_id in task_ids:
            await register(services, task_id, assigned_to_user_id="owner")
        if approvers:
            await services.approvals.create(task_ids[0], approvers, "lead")


async def test_reassign_with_version_another_session_moved(session_factory) -> None:
    await _seed(session_factory, "x")
    async with session_factory() as a_db, session_factory() as b_db:
        a, b = compose_services(a_db), compose_services(b_db)
        seen_by_a = await a.tasks.get_task("x")
        await a_db.commit()
        seen_by_b = await b.tasks.get_task("x")
        await b_db.commit()
        assert seen_by_a.version == seen_by_b.version

        await a.reassignment.reassign_task("x", "alice", "lead", expected_version=seen_by_a.version)
        await a_db.commit()

        with pytest.raises(ConflictRetryException):
            await b.reassignment.reassign_task(
                "x", "bob", "lead", expected_version=seen_by_b.version
            )
        await b_db.rollback()

    async with session_factory() as db:
        assert (await compose_services(db).tasks.get_task("x")).assigned_to_user_id == "alice"


async def test_stale_task_row_cannot_be_flushed(session_factory) -> None:
    await _seed(session_factory, "x")
    async with session_factory() as b_db:
        repo = TaskRepository(b_db)
        row = await repo.get_by_id("x")
        await b_db.commit()

        async with session_factory() as a_db:
            await compose_services(a_db).reassignment.reassign_task("x", "alice", "lead")
            await a_db.commit()

        # row still carries the version read before the other session's commit
        row.assigned_to_user_id = "bob"
        with pytest.raises(ConflictRetryException) as exc_info:
            await repo._flush_versioned("x")
        assert exc_info.value.details["entity_type"] == "task"
        await b_db.rollback()


async def test_second_decision_on_stale_chain_conflicts(session_factory) -> None:
    await _seed(session_factory, "x", approvers=["u1", "u2"])
    async with session_factory() as a_db, session_factory() as b_db:
        a, b = compose_services(a_db), compose_services(b_db)
        stale = await b.approvals.get("x")
        await b_db.commit()

        await a.approvals.process("x", "u1", "approve")
        await a_db.commit()

        transition = decide(
            "x",
            stale.status,
            stale.current_step,
            [s.approver_id for s in stale.steps],
            "u1",
            ApprovalAction.APPROVE,
        )
        with pytest.raises(ConflictRetryException):
            await ApprovalRepository(b_db).apply(
                "x", transition, comments=None, decided_at=NOW, expected_version=stale.version
            )
        await b_db.rollback()

        # a fresh read sees the chain has moved on to u2
        with pytest.raises(NotCurrentApproverException):
            await b.approvals.process("x", "u1", "approve")
        await b_db.rollback()


async def test_stale_chain_row_cannot_be_flushed(session_factory) -> None:
    await _seed(session_factory, "x", approvers=["u1", "u2"])
    async with session_factory() as b_db:
        repo = ApprovalRepository(b_db)
        chain = await repo.get_by_task("x")
        row = await repo.get_by_id(chain.id)
        await b_db.commit()

        async with session_factory() as a_db:
            await compose_services(a_db).approvals.process("x", "u1", "reject")
            await a_db.commit()

        row.status = "approved"
        with pytest.raises(ConflictRetryException):
            await repo._flush_versioned(row.id)
        await b_db.rollback()


async def test_concurrent_task_id_insert_conflicts(session_factory) -> None:
    await _seed(session_factory, "dup")
    async with session_factory() as b_db:
        # the existence check passed before the other insert committed
        with pytest.raises(ConflictRetryException):
            await TaskRepository(b_db).create(TaskCreate(case_id="case-1", id="dup", title="Again"))
        await b_db.rollback()


async def test_concurrent_first_dependency_set_conflicts(session_factory) -> None:
    await _seed(session_factory, "x", "y", "z")
    async with session_factory() as a_db, session_factory() as b_db:
        repo_b = DependencyRepository(b_db)
        repo_b._row_for = AsyncMock(return_value=None)

        await compose_services(a_db).dependencies.set_dependencies("x", ["y"], "blocking", "lead")
        await a_db.commit()

        with pytest.raises(ConflictRetryException):
            await repo_b.replace("x", "blocking", ["z"])
        await b_db.rollback()

    async with session_factory() as db:
        deps = await compose_services(db).dependencies.get_dependencies("x")
    assert deps.blocking == ["y"]


async def test_concurrent_first_sla_rule_conflicts(session_factory) -> None:
    async with session_factory() as a_db, session_factory() as b_db:
        repo_b = SLARuleRepository(b_db)
        repo_b._find_row = AsyncMock(return_value=None)

        await compose_services(a_db).sla.set_rule(
            SLARuleSet(priority="high", warning_threshold_hours=1, breach_threshold_hours=2), "lead"
        )
        await a_db.commit()

        with pytest.raises(ConflictRetryException):
            await repo_b.upsert(
                SLARuleSet(priority="high", warning_threshold_hours=3, breach_threshold_hours=4)
            )
        await b_db.rollback()


async def test_concurrent_first_approval_chain_conflicts(session_factory) -> None:
    await _seed(session_factory, "x")
    async with session_factory() as a_db, session_factory() as b_db:
        repo_b = ApprovalRepository(b_db)
        repo_b._row_for_task = AsyncMock(return_value=None)

        await compose_services(a_db).approvals.create("x", ["u1"], "lead")
        await a_db.commit()

        with pytest.raises(ConflictRetryException):
            await repo_b.replace("x", ["u2"])
        await b_db.rollback()
