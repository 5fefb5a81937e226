"""Notification dispatcher: persist, forward to the outbound sink, and read back."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from caseflow.application.dtos.notification import NotificationCreate, NotificationResult
from caseflow.domain.exceptions import ResourceNotFoundException
from caseflow.shared.enums import NotificationPriority, NotificationType
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import utc_now

if TYPE_CHECKING:
    from caseflow.application.dtos.parallel import ParallelGroupResult
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import INotificationRepository
    from caseflow.application.interfaces.services import INotificationSink

logger = get_logger(__name__)

_SLA_PRIORITY = {
    "critical": NotificationPriority.URGENT,
    "high": NotificationPriority.HIGH,
}


class NotificationService:
    """Creates notification events and serves a user's inbox."""

    def __init__(
        self,
        notification_repo: "INotificationRepository",
        sink: "INotificationSink | None" = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.notification_repo = notification_repo
        self.sink = sink
        self.clock = clock

    async def dispatch(self, data: NotificationCreate) -> NotificationResult:
        """Persist the notification and hand it to the outbound sink."""
        created = await self.notification_repo.create(data)
        if self.sink is not None:
            await self.sink.deliver(created)
        logger.debug("Dispatched %s notification %s to %s", data.type, created.id, data.user_id)
        return created

    async def task_assigned(
        self, task: "TaskResult", assigned_by: str
    ) -> NotificationResult | None:
        if not task.assigned_to_user_id:
            return None
        return await self.dispatch(
            NotificationCreate(
                user_id=task.assigned_to_user_id,
                type=NotificationType.TASK_ASSIGNED.value,
                title="Task assigned",
                message=f'You have been assigned "{task.title}" by {assigned_by}.',
                task_id=task.id,
                case_id=task.case_id,
                priority=(
                    NotificationPriority.HIGH.value
                    if task.priority in ("high", "critical")
                    else NotificationPriority.NORMAL.value
                ),
            )
        )

    async def approval_required(
        self, task: "TaskResult", approver_id: str, step_number: int, total_steps: int
    ) -> NotificationResult:
        return await self.dispatch(
            NotificationCreate(
                user_id=approver_id,
                type=NotificationType.APPROVAL_REQUIRED.value,
                title="Approval required",
                message=(
                    f'Your approval is required for "{task.title}" '
                    f"(step {step_number} of {total_steps})."
                ),
                task_id=task.id,
                case_id=task.case_id,
                priority=NotificationPriority.HIGH.value,
            )
        )

    async def approval_completed(
        self, task: "TaskResult", outcome: str
    ) -> NotificationResult | None:
        """Tell the task owner the chain finished (approved or rejected)."""
        if not task.assigned_to_user_id:
            return None
        return await self.dispatch(
            NotificationCreate(
                user_id=task.assigned_to_user_id,
                type=NotificationType.APPROVAL_COMPLETED.value,
                title=f"Approval {outcome}",
                message=f'The approval chain for "{task.title}" was {outcome}.',
                task_id=task.id,
                case_id=task.case_id,
                priority=NotificationPriority.NORMAL.value,
            )
        )

    async def sla_warning(
        self, task: "TaskResult", hours_remaining: float
    ) -> NotificationResult | None:
        if not task.assigned_to_user_id:
            return None
        return await self.dispatch(
            NotificationCreate(
                user_id=task.assigned_to_user_id,
                type=NotificationType.SLA_WARNING.value,
                title="SLA warning",
                message=(
                    f'"{task.title}" will breach its SLA in {hours_remaining:.1f} hours.'
                ),
                task_id=task.id,
                case_id=task.case_id,
                priority=_SLA_PRIORITY.get(task.priority, NotificationPriority.NORMAL).value,
            )
        )

    async def sla_breach(
        self, task: "TaskResult", hours_overdue: float
    ) -> NotificationResult | None:
        if not task.assigned_to_user_id:
            return None
        return await self.dispatch(
            NotificationCreate(
                user_id=task.assigned_to_user_id,
                type=NotificationType.SLA_BREACH.value,
                title="SLA breached",
                message=f'"{task.title}" is {hours_overdue:.1f} hours past its SLA.',
                task_id=task.id,
                case_id=task.case_id,
                priority=NotificationPriority.URGENT.value,
            )
        )

    async def stage_completed(
        self,
        group: "ParallelGroupResult",
        trigger: "TaskResult",
        user_ids: list[str],
    ) -> list[NotificationResult]:
        """Notify each distinct owner that a parallel group completed."""
        label = group.name or group.id
        sent = []
        for user_id in user_ids:
            sent.append(
                await self.dispatch(
                    NotificationCreate(
                        user_id=user_id,
                        type=NotificationType.STAGE_COMPLETED.value,
                        title="Parallel tasks completed",
                        message=f'Group "{label}" completed when "{trigger.title}" was done.',
                        task_id=trigger.id,
                        case_id=trigger.case_id,
                        priority=NotificationPriority.NORMAL.value,
                    )
                )
            )
        return sent

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> list[NotificationResult]:
        return await self.notification_repo.list_for_user(
            user_id, unread_only=unread_only, limit=limit
        )

    async def mark_read(self, notification_id: str, user_id: str) -> NotificationResult:
        """Mark one notification read. Another user's notification counts as not found."""
        result = await self.notification_repo.mark_read(
            notification_id, user_id, self.clock()
        )
        if result is None:
            raise ResourceNotFoundException("notification", notification_id)
        return result

    async def mark_all_read(self, user_id: str) -> int:
        return await self.notification_repo.mark_all_read(user_id, self.clock())

    async def unread_count(self, user_id: str) -> int:
        return await self.notification_repo.unread_count(user_id)
