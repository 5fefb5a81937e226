"""Time tracking: start/stop timers per (task, user) and report totals."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from caseflow.application.dtos.time_entry import TimeEntryResult
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.shared.enums import AuditAction, AuditEntityType
from caseflow.shared.utils import hours_between, utc_now

if TYPE_CHECKING:
    from caseflow.application.interfaces.repositories import (
        ITaskRepository,
        ITimeEntryRepository,
    )
    from caseflow.application.use_cases.audit import AuditTrailService


class TimeTrackingService:
    """At most one running timer per (task, user)."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        time_repo: "ITimeEntryRepository",
        audit: "AuditTrailService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.task_repo = task_repo
        self.time_repo = time_repo
        self.audit = audit
        self.clock = clock

    async def start(
        self,
        task_id: str,
        user_id: str,
        *,
        billable: bool = True,
        description: str | None = None,
    ) -> TimeEntryResult:
        """Start a timer.

        Raises:
            ResourceNotFoundException: Unknown task.
            ValidationException: A timer is already running for (task, user).
        """
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        if await self.time_repo.get_open(task_id, user_id) is not None:
            raise ValidationException(
                "A timer is already running for this task and user",
                field="task_id",
                task_id=task_id,
                user_id=user_id,
            )
        entry = await self.time_repo.start(
            task_id, user_id, self.clock(), billable=billable, description=description
        )
        await self.audit.record(
            entity_type=AuditEntityType.TIME_ENTRY,
            entity_id=entry.id,
            action=AuditAction.TIME_ENTRY_STARTED,
            user_id=user_id,
            case_id=task.case_id,
            new_value={"task_id": task_id, "start_time": entry.start_time},
        )
        return entry

    async def stop(
        self, task_id: str, user_id: str, description: str | None = None
    ) -> TimeEntryResult:
        """Stop the running timer; duration is rounded to whole minutes.

        Raises:
            ResourceNotFoundException: No running timer for (task, user).
        """
        open_entry = await self.time_repo.get_open(task_id, user_id)
        if open_entry is None:
            raise ResourceNotFoundException("open time entry", f"{task_id}/{user_id}")
        end_time = self.clock()
        minutes = max(0, round(hours_between(open_entry.start_time, end_time) * 60))
        entry = await self.time_repo.stop(task_id, user_id, end_time, minutes, description)
        task = await self.task_repo.get(task_id)
        await self.audit.record(
            entity_type=AuditEntityType.TIME_ENTRY,
            entity_id=entry.id,
            action=AuditAction.TIME_ENTRY_STOPPED,
            user_id=user_id,
            case_id=task.case_id if task else None,
            new_value={"end_time": entry.end_time, "duration_minutes": minutes},
        )
        return entry

    async def list_entries(self, task_id: str) -> list[TimeEntryResult]:
        return await self.time_repo.list_for_task(task_id)

    async def total_minutes(self, task_id: str) -> int:
        return await self.time_repo.total_minutes(task_id=task_id)
