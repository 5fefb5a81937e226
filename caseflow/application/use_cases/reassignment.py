"""Reassignment service: move task ownership singly, in bulk, or from one user to another."""

from __future__ import annotations

from typing import TYPE_CHECKING

from caseflow.application.dtos.audit_log import AuditLogQuery
from caseflow.application.dtos.reassignment import (
    BulkReassignResult,
    ReassignAllResult,
    ReassignmentFailure,
    ReassignmentHistoryItem,
)
from caseflow.application.dtos.task import TaskResult
from caseflow.domain.exceptions import (
    ConflictRetryException,
    ResourceNotFoundException,
    ValidationException,
    WorkflowEngineException,
)
from caseflow.shared.enums import AuditAction, AuditEntityType
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import unique_ids

if TYPE_CHECKING:
    from caseflow.application.interfaces.repositories import ITaskRepository
    from caseflow.application.interfaces.services import IUnitOfWork
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.notifications import NotificationService

logger = get_logger(__name__)


class ReassignmentService:
    """Changes task owners. Each task has exactly one owner at a time."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        uow: "IUnitOfWork",
        audit: "AuditTrailService",
        notifications: "NotificationService",
        max_retries: int = 3,
    ) -> None:
        self.task_repo = task_repo
        self.uow = uow
        self.audit = audit
        self.notifications = notifications
        self.max_retries = max_retries

    async def reassign_task(
        self,
        task_id: str,
        new_assignee: str,
        actor: str,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> TaskResult:
        """Give the task a new owner; the new owner is notified.

        Raises:
            ValidationException: Blank assignee or already the owner.
            ResourceNotFoundException: Unknown task.
            ConflictRetryException: The task changed concurrently.
        """
        new_assignee = new_assignee.strip()
        if not new_assignee:
            raise ValidationException("New assignee is required", field="new_assignee")
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        if task.assigned_to_user_id == new_assignee:
            raise ValidationException(
                f"Task {task_id} is already assigned to {new_assignee}",
                field="new_assignee",
            )
        updated = await self.task_repo.update(
            task_id,
            expected_version=expected_version,
            assigned_to_user_id=new_assignee,
        )
        await self.audit.record(
            entity_type=AuditEntityType.TASK,
            entity_id=task_id,
            action=AuditAction.TASK_REASSIGNED,
            user_id=actor,
            case_id=task.case_id,
            previous_value={"assigned_to_user_id": task.assigned_to_user_id},
            new_value={"assigned_to_user_id": new_assignee},
            metadata={"reason": reason} if reason else None,
        )
        await self.notifications.task_assigned(updated, actor)
        return updated

    async def _reassign_isolated(
        self,
        task_id: str,
        new_assignee: str,
        actor: str,
        reason: str | None,
    ) -> ReassignmentFailure | None:
        """Reassign inside a savepoint, retrying lost version races."""
        for attempt in range(1, self.max_retries + 1):
            try:
                async with self.uow.savepoint():
                    await self.reassign_task(task_id, new_assignee, actor, reason)
                return None
            except ConflictRetryException as e:
                if attempt == self.max_retries:
                    return ReassignmentFailure(task_id, e.error_code, e.message)
                logger.info(
                    "Reassign %s conflicted (attempt %d/%d); retrying",
                    task_id, attempt, self.max_retries,
                )
            except WorkflowEngineException as e:
                return ReassignmentFailure(task_id, e.error_code, e.message)
        return None

    async def bulk_reassign(
        self,
        task_ids: list[str],
        new_assignee: str,
        actor: str,
        reason: str | None = None,
    ) -> BulkReassignResult:
        """Reassign each task independently; failures do not stop the batch."""
        succeeded: list[str] = []
        failed: list[ReassignmentFailure] = []
        for task_id in unique_ids(task_ids):
            failure = await self._reassign_isolated(task_id, new_assignee, actor, reason)
            if failure is None:
                succeeded.append(task_id)
            else:
                failed.append(failure)
        logger.info(
            "Bulk reassign to %s: %d succeeded, %d failed",
            new_assignee, len(succeeded), len(failed),
        )
        return BulkReassignResult(succeeded=succeeded, failed=failed)

    async def reassign_all_from_user(
        self,
        from_user: str,
        to_user: str,
        actor: str,
        scope: str | None = None,
        reason: str | None = None,
    ) -> ReassignAllResult:
        """Move every open, non-archived task of from_user (optionally one case) to to_user."""
        if from_user.strip() == to_user.strip():
            raise ValidationException(
                "Source and target users must differ", field="to_user"
            )
        tasks = await self.task_repo.list(
            assignee=from_user, case_id=scope, open_only=True
        )
        count = 0
        failed: list[ReassignmentFailure] = []
        for task in tasks:
            failure = await self._reassign_isolated(task.id, to_user, actor, reason)
            if failure is None:
                count += 1
            else:
                failed.append(failure)
        return ReassignAllResult(reassigned_count=count, failed=failed)

    async def history(self, task_id: str, limit: int = 100) -> list[ReassignmentHistoryItem]:
        """Reassignments of a task from the audit trail, newest first."""
        entries = await self.audit.query(
            AuditLogQuery(
                entity_type=AuditEntityType.TASK.value,
                entity_id=task_id,
                action=AuditAction.TASK_REASSIGNED.value,
                limit=limit,
            )
        )
        return [
            ReassignmentHistoryItem(
                task_id=task_id,
                from_user_id=(e.previous_value or {}).get("assigned_to_user_id"),
                to_user_id=(e.new_value or {}).get("assigned_to_user_id"),
                reassigned_by=e.user_id,
                reason=(e.metadata or {}).get("reason"),
                timestamp=e.timestamp,
                metadata=e.metadata,
            )
            for e in entries
        ]
