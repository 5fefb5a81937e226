"""Task store: stages, task registration, status transitions and archival."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from caseflow.application.dtos.task import (
    StageResult,
    StatusTransitionResult,
    TaskCreate,
    TaskResult,
)
from caseflow.application.use_cases.sla import parse_priority
from caseflow.domain.exceptions import (
    ResourceNotFoundException,
    TaskBlockedException,
    ValidationException,
)
from caseflow.shared.enums import AuditAction, AuditEntityType, TaskStatus
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import utc_now

if TYPE_CHECKING:
    from caseflow.application.interfaces.repositories import (
        IStageRepository,
        ITaskRepository,
    )
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.dependencies import DependencyService
    from caseflow.application.use_cases.notifications import NotificationService
    from caseflow.application.use_cases.parallel import ParallelGroupService

logger = get_logger(__name__)


def parse_status(value: str) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown task status {value!r}; expected one of {TaskStatus.values()}",
            field="status",
        ) from e


class TaskService:
    """Registers tasks mirrored from the case service and moves them through statuses."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        stage_repo: "IStageRepository",
        dependencies: "DependencyService",
        parallel: "ParallelGroupService",
        audit: "AuditTrailService",
        notifications: "NotificationService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.task_repo = task_repo
        self.stage_repo = stage_repo
        self.dependencies = dependencies
        self.parallel = parallel
        self.audit = audit
        self.notifications = notifications
        self.clock = clock

    async def create_stage(
        self, case_id: str, name: str, order: int, actor: str
    ) -> StageResult:
        if not name.strip():
            raise ValidationException("Stage name is required", field="name")
        stage = await self.stage_repo.create(case_id, name.strip(), order)
        await self.audit.record(
            entity_type=AuditEntityType.STAGE,
            entity_id=stage.id,
            action=AuditAction.STAGE_CREATED,
            user_id=actor,
            case_id=case_id,
            new_value={"name": stage.name, "order": stage.order},
        )
        return stage

    async def list_stages(self, case_id: str) -> list[StageResult]:
        return await self.stage_repo.list(case_id)

    async def register_task(self, data: TaskCreate, actor: str) -> TaskResult:
        """Create a task; its owner (if any) is notified.

        Raises:
            ValidationException: Bad status/priority, blank title, or id already taken.
            ResourceNotFoundException: Unknown stage.
        """
        parse_status(data.status)
        parse_priority(data.priority)
        if not data.title.strip():
            raise ValidationException("Task title is required", field="title")
        if data.stage_id is not None:
            stage = await self.stage_repo.get(data.stage_id)
            if stage is None:
                raise ResourceNotFoundException("stage", data.stage_id)
            if stage.case_id != data.case_id:
                raise ValidationException(
                    "Stage belongs to a different case", field="stage_id"
                )
        if data.id is not None and await self.task_repo.get(data.id) is not None:
            raise ValidationException(f"Task {data.id} already exists", field="id")

        task = await self.task_repo.create(data)
        await self.audit.record(
            entity_type=AuditEntityType.TASK,
            entity_id=task.id,
            action=AuditAction.TASK_CREATED,
            user_id=actor,
            case_id=task.case_id,
            new_value={
                "title": task.title,
                "status": task.status,
                "priority": task.priority,
                "stage_id": task.stage_id,
                "assigned_to_user_id": task.assigned_to_user_id,
            },
        )
        await self.notifications.task_assigned(task, actor)
        return task

    async def get_task(self, task_id: str) -> TaskResult:
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def list_tasks(
        self,
        *,
        case_id: str | None = None,
        stage_id: str | None = None,
        assignee: str | None = None,
        status: str | None = None,
        include_archived: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TaskResult]:
        if status is not None:
            parse_status(status)
        return await self.task_repo.list(
            case_id=case_id,
            stage_id=stage_id,
            assignee=assignee,
            status=status,
            include_archived=include_archived,
            skip=skip,
            limit=limit,
        )

    async def transition_status(
        self,
        task_id: str,
        new_status: str,
        actor: str,
        expected_version: int | None = None,
    ) -> StatusTransitionResult:
        """Move a task to a new status.

        Starting work requires every blocking prerequisite to be done. The
        first start stamps started_at; done stamps completed_at and leaving
        done clears it. Completing a task re-evaluates its parallel groups.

        Raises:
            TaskBlockedException: Moving to in-progress with unmet blocking dependencies.
            ValidationException: Unknown status or archived task.
            ConflictRetryException: The task changed concurrently.
        """
        target = parse_status(new_status)
        task = await self.get_task(task_id)
        if task.archived_at is not None:
            raise ValidationException("Archived tasks cannot change status", field="status")
        if target.value == task.status:
            return StatusTransitionResult(task=task, previous_status=task.status)

        if target == TaskStatus.IN_PROGRESS:
            check = await self.dependencies.can_start(task_id)
            if not check.can_start:
                raise TaskBlockedException(task_id, check.blocked_by)

        now = self.clock()
        changes: dict[str, object] = {"status": target.value}
        if target == TaskStatus.IN_PROGRESS and task.started_at is None:
            changes["started_at"] = now
        if target == TaskStatus.DONE:
            changes["completed_at"] = now
        elif task.status == TaskStatus.DONE.value:
            changes["completed_at"] = None
        updated = await self.task_repo.update(
            task_id, expected_version=expected_version, **changes
        )
        await self.audit.record(
            entity_type=AuditEntityType.TASK,
            entity_id=task_id,
            action=AuditAction.STATUS_CHANGED,
            user_id=actor,
            case_id=task.case_id,
            previous_value={"status": task.status},
            new_value={"status": updated.status},
        )
        groups = []
        if target == TaskStatus.DONE:
            groups = await self.parallel.on_task_status_changed(updated, task.status)
        logger.debug("Task %s: %s -> %s", task_id, task.status, updated.status)
        return StatusTransitionResult(task=updated, previous_status=task.status, groups=groups)

    async def archive_task(self, task_id: str, actor: str) -> TaskResult:
        """Stamp archived_at; archived tasks drop out of scans and analytics."""
        task = await self.get_task(task_id)
        if task.archived_at is not None:
            return task
        updated = await self.task_repo.update(task_id, archived_at=self.clock())
        await self.audit.record(
            entity_type=AuditEntityType.TASK,
            entity_id=task_id,
            action=AuditAction.TASK_ARCHIVED,
            user_id=actor,
            case_id=task.case_id,
            new_value={"archived_at": updated.archived_at},
        )
        return updated
