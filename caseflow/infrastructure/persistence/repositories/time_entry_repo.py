"""Task time entry repository."""

from __future__ import annotations

from datetime import datetime
from statistics import mean

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.time_entry import TimeEntryResult
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.infrastructure.persistence.models.task import Task
from caseflow.infrastructure.persistence.models.time_entry import TaskTimeEntry
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc, hours_between


def _to_result(e: TaskTimeEntry) -> TimeEntryResult:
    return TimeEntryResult(
        id=e.id,
        task_id=e.task_id,
        user_id=e.user_id,
        start_time=ensure_utc(e.start_time),
        end_time=ensure_utc(e.end_time),
        duration_minutes=e.duration_minutes,
        description=e.description,
        billable=e.billable,
    )


class TimeEntryRepository(BaseRepository[TaskTimeEntry]):
    """Time entries. Implements ITimeEntryRepository."""

    entity_type = "time_entry"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskTimeEntry)

    async def _open_row(self, task_id: str, user_id: str) -> TaskTimeEntry | None:
        result = await self.db.execute(
            select(TaskTimeEntry).where(
                and_(
                    TaskTimeEntry.task_id == task_id,
                    TaskTimeEntry.user_id == user_id,
                    TaskTimeEntry.end_time.is_(None),
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_open(self, task_id: str, user_id: str) -> TimeEntryResult | None:
        row = await self._open_row(task_id, user_id)
        return _to_result(row) if row else None

    async def start(
        self,
        task_id: str,
        user_id: str,
        start_time: datetime,
        *,
        billable: bool = True,
        description: str | None = None,
    ) -> TimeEntryResult:
        """Open an entry. A concurrent open entry trips the partial unique index."""
        entry = TaskTimeEntry(
            task_id=task_id,
            user_id=user_id,
            start_time=start_time,
            billable=billable,
            description=description,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(entry)
                await self.db.flush()
        except IntegrityError as e:
            raise ValidationException(
                "A timer is already running for this task and user",
                field="task_id",
                task_id=task_id,
                user_id=user_id,
            ) from e
        return _to_result(entry)

    async def stop(
        self,
        task_id: str,
        user_id: str,
        end_time: datetime,
        duration_minutes: int,
        description: str | None = None,
    ) -> TimeEntryResult:
        row = await self._open_row(task_id, user_id)
        if row is None:
            raise ResourceNotFoundException("open time entry", f"{task_id}/{user_id}")
        row.end_time = end_time
        row.duration_minutes = duration_minutes
        if description is not None:
            row.description = description
        await self.db.flush()
        return _to_result(row)

    async def list_for_task(self, task_id: str) -> list[TimeEntryResult]:
        result = await self.db.execute(
            select(TaskTimeEntry)
            .where(TaskTimeEntry.task_id == task_id)
            .order_by(TaskTimeEntry.start_time.desc())
        )
        return [_to_result(e) for e in result.scalars().all()]

    async def total_minutes(
        self, *, task_id: str | None = None, case_id: str | None = None
    ) -> int:
        """Sum of closed entry durations for a task, a case, or everything."""
        stmt = select(func.coalesce(func.sum(TaskTimeEntry.duration_minutes), 0)).where(
            TaskTimeEntry.end_time.is_not(None)
        )
        if task_id is not None:
            stmt = stmt.where(TaskTimeEntry.task_id == task_id)
        if case_id is not None:
            stmt = stmt.join(Task, Task.id == TaskTimeEntry.task_id).where(
                Task.case_id == case_id
            )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def average_entry_hours(self, *, case_id: str | None = None) -> float | None:
        """Mean ``end_time - start_time`` in hours over closed entries; None when there are none."""
        stmt = select(TaskTimeEntry.start_time, TaskTimeEntry.end_time).where(
            TaskTimeEntry.end_time.is_not(None)
        )
        if case_id is not None:
            stmt = stmt.join(Task, Task.id == TaskTimeEntry.task_id).where(
                Task.case_id == case_id
            )
        rows = (await self.db.execute(stmt)).all()
        if not rows:
            return None
        return mean(hours_between(start, end) for start, end in rows)
