"""Approval chain service: create chains and apply approver decisions."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from caseflow.application.dtos.approval import ApprovalChainResult
from caseflow.domain.approval import decide, validate_approvers
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.shared.enums import (
    ApprovalAction,
    ApprovalStatus,
    AuditAction,
    AuditEntityType,
)
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import utc_now

if TYPE_CHECKING:
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import (
        IApprovalRepository,
        ITaskRepository,
    )
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.notifications import NotificationService

logger = get_logger(__name__)


def parse_action(value: str) -> ApprovalAction:
    try:
        return ApprovalAction(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown approval action {value!r}; expected one of {ApprovalAction.values()}",
            field="action",
        ) from e


class ApprovalService:
    """Sequential approval chains, one per task."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        approval_repo: "IApprovalRepository",
        audit: "AuditTrailService",
        notifications: "NotificationService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.task_repo = task_repo
        self.approval_repo = approval_repo
        self.audit = audit
        self.notifications = notifications
        self.clock = clock

    async def _require_task(self, task_id: str) -> "TaskResult":
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def create(
        self, task_id: str, approver_ids: list[str], actor: str
    ) -> ApprovalChainResult:
        """Start a chain; the first approver is notified.

        A finished (approved/rejected) chain is replaced; a pending one is not.

        Raises:
            ValidationException: No approvers, repeated approver, or a chain is pending.
            ResourceNotFoundException: Unknown task.
        """
        approvers = validate_approvers(approver_ids)
        task = await self._require_task(task_id)
        existing = await self.approval_repo.get_by_task(task_id)
        if existing is not None and existing.status == ApprovalStatus.PENDING.value:
            raise ValidationException(
                "Task already has a pending approval chain",
                field="task_id",
                chain_id=existing.id,
            )
        chain = await self.approval_repo.replace(task_id, approvers)
        await self.audit.record(
            entity_type=AuditEntityType.APPROVAL_CHAIN,
            entity_id=chain.id,
            action=AuditAction.APPROVAL_CHAIN_CREATED,
            user_id=actor,
            case_id=task.case_id,
            previous_value=(
                {"chain_id": existing.id, "status": existing.status} if existing else None
            ),
            new_value={"task_id": task_id, "approver_ids": approvers, "status": chain.status},
        )
        await self.notifications.approval_required(task, approvers[0], 1, len(approvers))
        return chain

    async def get(self, task_id: str) -> ApprovalChainResult:
        chain = await self.approval_repo.get_by_task(task_id)
        if chain is None:
            raise ResourceNotFoundException("approval_chain", task_id)
        return chain

    async def process(
        self,
        task_id: str,
        approver_id: str,
        action: str,
        comments: str | None = None,
    ) -> ApprovalChainResult:
        """Apply the current approver's decision.

        Raises:
            ChainNotPendingException: Chain already approved or rejected.
            NotCurrentApproverException: approver_id is not the current step's approver.
            ConflictRetryException: Another decision was recorded concurrently.
        """
        decision = parse_action(action)
        chain = await self.get(task_id)
        transition = decide(
            task_id,
            chain.status,
            chain.current_step,
            [s.approver_id for s in chain.steps],
            approver_id,
            decision,
        )
        updated = await self.approval_repo.apply(
            task_id,
            transition,
            comments=comments,
            decided_at=self.clock(),
            expected_version=chain.version,
        )
        task = await self._require_task(task_id)

        if transition.chain_status == ApprovalStatus.REJECTED:
            audit_action = AuditAction.APPROVAL_CHAIN_REJECTED
        elif transition.chain_status == ApprovalStatus.APPROVED:
            audit_action = AuditAction.APPROVAL_CHAIN_APPROVED
        else:
            audit_action = AuditAction.APPROVAL_STEP_APPROVED
        await self.audit.record(
            entity_type=AuditEntityType.APPROVAL_CHAIN,
            entity_id=updated.id,
            action=audit_action,
            user_id=approver_id,
            case_id=task.case_id,
            previous_value={"status": chain.status, "current_step": chain.current_step},
            new_value={"status": updated.status, "current_step": updated.current_step},
            metadata={"step": transition.step_index, "comments": comments},
        )

        if transition.next_approver_id is not None:
            await self.notifications.approval_required(
                task,
                transition.next_approver_id,
                transition.current_step + 1,
                len(updated.steps),
            )
        else:
            await self.notifications.approval_completed(task, updated.status)
        logger.info(
            "Approval chain %s for task %s: %s by %s -> %s",
            updated.id, task_id, decision.value, approver_id, updated.status,
        )
        return updated
