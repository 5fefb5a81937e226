"""Approval chain state machine.

A chain is an ordered list of approver steps. It starts pending at step 0;
approving the last step approves the chain, and any rejection rejects it
immediately. Approved and rejected are terminal.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from caseflow.domain.exceptions import (
    ChainNotPendingException,
    NotCurrentApproverException,
    ValidationException,
)
from caseflow.shared.enums import ApprovalAction, ApprovalStatus


@dataclass(frozen=True)
class ApprovalTransition:
    """Outcome of one approver decision.

    Attributes:
        step_index: Index of the step that was decided.
        step_status: New status of that step.
        chain_status: Chain status after the decision.
        current_step: Chain current_step after the decision.
        next_approver_id: Approver now due to act, or None when terminal.
    """

    step_index: int
    step_status: ApprovalStatus
    chain_status: ApprovalStatus
    current_step: int
    next_approver_id: str | None

    @property
    def is_terminal(self) -> bool:
        return self.chain_status != ApprovalStatus.PENDING


def validate_approvers(approver_ids: Sequence[str]) -> list[str]:
    """Return approvers in order; at least one, no blanks or repeats."""
    cleaned = [a.strip() for a in approver_ids]
    if not cleaned:
        raise ValidationException(
            "Approval chain needs at least one approver", field="approver_ids"
        )
    if any(not a for a in cleaned):
        raise ValidationException(
            "Approver ids must be non-empty", field="approver_ids"
        )
    if len(set(cleaned)) != len(cleaned):
        raise ValidationException(
            "An approver may appear only once in a chain", field="approver_ids"
        )
    return cleaned


def decide(
    task_id: str,
    chain_status: str,
    current_step: int,
    approver_ids: Sequence[str],
    approver_id: str,
    action: ApprovalAction,
) -> ApprovalTransition:
    """Apply an approver's action to the chain and return the transition.

    Raises:
        ChainNotPendingException: Chain already approved or rejected.
        NotCurrentApproverException: approver_id is not the current step's approver.
    """
    if chain_status != ApprovalStatus.PENDING.value:
        raise ChainNotPendingException(task_id, chain_status)
    expected = approver_ids[current_step]
    if approver_id != expected:
        raise NotCurrentApproverException(task_id, approver_id, expected)

    if action == ApprovalAction.REJECT:
        return ApprovalTransition(
            step_index=current_step,
            step_status=ApprovalStatus.REJECTED,
            chain_status=ApprovalStatus.REJECTED,
            current_step=current_step,
            next_approver_id=None,
        )

    next_step = current_step + 1
    if next_step >= len(approver_ids):
        return ApprovalTransition(
            step_index=current_step,
            step_status=ApprovalStatus.APPROVED,
            chain_status=ApprovalStatus.APPROVED,
            current_step=next_step,
            next_approver_id=None,
        )
    return ApprovalTransition(
        step_index=current_step,
        step_status=ApprovalStatus.APPROVED,
        chain_status=ApprovalStatus.PENDING,
        current_step=next_step,
        next_approver_id=approver_ids[next_step],
    )
