"""Approval chains end to end against the database."""

import pytest

from caseflow.domain.exceptions import (
    ChainNotPendingException,
    NotCurrentApproverException,
    ValidationException,
)
from tests.factories import register


@pytest.fixture
async def task(services):
    return await register(services, "t1", assigned_to_user_id="owner")


async def test_two_step_approval(services, task) -> None:
    chain = await services.approvals.create("t1", ["alice", "bob"], "owner")
    assert chain.status == "pending"
    assert chain.current_approver_id == "alice"

    with pytest.raises(NotCurrentApproverException):
        await services.approvals.process("t1", "bob", "approve")

    chain = await services.approvals.process("t1", "alice", "approve", comments="ok")
    assert chain.status == "pending"
    assert chain.current_step == 1
    assert chain.steps[0].status == "approved"
    assert chain.steps[0].comments == "ok"

    chain = await services.approvals.process("t1", "bob", "approve")
    assert chain.status == "approved"
    assert chain.completed_at is not None
    assert chain.current_approver_id is None

    with pytest.raises(ChainNotPendingException):
        await services.approvals.process("t1", "bob", "approve")

    bob_inbox = await services.notifications.list_for_user("bob")
    assert [n.type for n in bob_inbox] == ["approval_required"]
    owner_inbox = await services.notifications.list_for_user("owner")
    assert "approval_completed" in [n.type for n in owner_inbox]


async def test_rejection_ends_chain(services, task) -> None:
    await services.approvals.create("t1", ["alice", "bob"], "owner")
    chain = await services.approvals.process("t1", "alice", "reject", comments="missing docs")
    assert chain.status == "rejected"
    assert chain.steps[0].status == "rejected"
    assert chain.steps[1].status == "pending"


async def test_pending_chain_cannot_be_replaced(services, task) -> None:
    await services.approvals.create("t1", ["alice"], "owner")
    with pytest.raises(ValidationException):
        await services.approvals.create("t1", ["carol"], "owner")

    await services.approvals.process("t1", "alice", "reject")
    replacement = await services.approvals.create("t1", ["carol"], "owner")
    assert replacement.current_approver_id == "carol"


async def test_invalid_approver_lists(services, task) -> None:
    with pytest.raises(ValidationException):
        await services.approvals.create("t1", [], "owner")
    with pytest.raises(ValidationException):
        await services.approvals.create("t1", ["alice", "alice"], "owner")


async def test_unknown_action(services, task) -> None:
    await services.approvals.create("t1", ["alice"], "owner")
    with pytest.raises(ValidationException):
        await services.approvals.process("t1", "alice", "maybe")
