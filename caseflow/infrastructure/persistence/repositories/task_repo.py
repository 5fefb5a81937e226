"""Stage and task repositories."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.task import StageResult, TaskCreate, TaskResult
from caseflow.infrastructure.persistence.models.task import Stage, Task
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.enums import TaskStatus
from caseflow.shared.utils import ensure_utc, utc_now

_UPDATABLE_FIELDS = frozenset({
    "stage_id", "title", "description", "status", "priority",
    "assigned_to_user_id", "started_at", "due_at", "completed_at",
    "archived_at", "sla_state", "sla_breached_at",
})


def _stage_to_result(s: Stage) -> StageResult:
    """Map Stage ORM to StageResult DTO."""
    return StageResult(
        id=s.id,
        case_id=s.case_id,
        name=s.name,
        order=s.order,
        created_at=ensure_utc(s.created_at),
        skipped_at=ensure_utc(s.skipped_at),
    )


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        case_id=t.case_id,
        stage_id=t.stage_id,
        title=t.title,
        description=t.description,
        status=t.status,
        priority=t.priority,
        assigned_to_user_id=t.assigned_to_user_id,
        created_at=ensure_utc(t.created_at),
        updated_at=ensure_utc(t.updated_at),
        started_at=ensure_utc(t.started_at),
        due_at=ensure_utc(t.due_at),
        completed_at=ensure_utc(t.completed_at),
        archived_at=ensure_utc(t.archived_at),
        sla_state=t.sla_state,
        sla_breached_at=ensure_utc(t.sla_breached_at),
        version=t.version,
    )


class StageRepository(BaseRepository[Stage]):
    """Stage repository. Implements IStageRepository."""

    entity_type = "stage"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Stage)

    async def create(self, case_id: str, name: str, order: int) -> StageResult:
        stage = Stage(case_id=case_id, name=name, order=order)
        self.db.add(stage)
        await self.db.flush()
        await self.db.refresh(stage)
        return _stage_to_result(stage)

    async def get(self, stage_id: str) -> StageResult | None:
        stage = await self.get_by_id(stage_id)
        return _stage_to_result(stage) if stage else None

    async def list(self, case_id: str | None = None) -> list[StageResult]:
        """Stages of a case (or all cases) by order."""
        stmt = select(Stage).order_by(Stage.case_id, Stage.order, Stage.created_at)
        if case_id is not None:
            stmt = stmt.where(Stage.case_id == case_id)
        result = await self.db.execute(stmt)
        return [_stage_to_result(s) for s in result.scalars().all()]

    async def mark_skipped(self, stage_id: str, at: datetime) -> tuple[StageResult, bool]:
        """Stamp skipped_at unless already set; the flag says whether this call set it."""
        stage = await self._load_for_update(stage_id)
        if stage.skipped_at is not None:
            return _stage_to_result(stage), False
        stage.skipped_at = at
        await self.db.flush()
        return _stage_to_result(stage), True


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    entity_type = "task"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def create(self, data: TaskCreate) -> TaskResult:
        """Insert a task; a concurrent insert of the same id raises ConflictRetryException."""
        created_at = data.created_at or utc_now()
        task = Task(
            id=data.id,
            case_id=data.case_id,
            stage_id=data.stage_id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            assigned_to_user_id=data.assigned_to_user_id,
            started_at=data.started_at,
            due_at=data.due_at,
            created_at=created_at,
            completed_at=created_at if data.status == TaskStatus.DONE.value else None,
        )
        await self._insert_unique(task, data.id)
        await self.db.refresh(task)
        return _to_result(task)

    async def get(self, task_id: str) -> TaskResult | None:
        task = await self.get_by_id(task_id)
        return _to_result(task) if task else None

    async def get_many(self, task_ids: Iterable[str]) -> dict[str, TaskResult]:
        """Tasks by id; missing ids are simply absent from the result."""
        ids = list(task_ids)
        if not ids:
            return {}
        result = await self.db.execute(select(Task).where(Task.id.in_(ids)))
        return {t.id: _to_result(t) for t in result.scalars().all()}

    async def get_statuses(self, task_ids: Iterable[str]) -> dict[str, str]:
        ids = list(task_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(Task.id, Task.status).where(Task.id.in_(ids))
        )
        return {row.id: row.status for row in result.all()}

    async def list(
        self,
        *,
        case_id: str | None = None,
        stage_id: str | None = None,
        assignee: str | None = None,
        status: str | None = None,
        open_only: bool = False,
        include_archived: bool = False,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[TaskResult]:
        """List tasks with optional filters, oldest first.

        open_only excludes done tasks; archived tasks are excluded unless
        include_archived is set.
        """
        conditions: list[Any] = []
        if case_id is not None:
            conditions.append(Task.case_id == case_id)
        if stage_id is not None:
            conditions.append(Task.stage_id == stage_id)
        if assignee is not None:
            conditions.append(Task.assigned_to_user_id == assignee)
        if status is not None:
            conditions.append(Task.status == status)
        if open_only:
            conditions.append(Task.status != TaskStatus.DONE.value)
        if not include_archived:
            conditions.append(Task.archived_at.is_(None))
        stmt = select(Task).order_by(Task.created_at, Task.id).offset(skip)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return [_to_result(t) for t in result.scalars().all()]

    async def update(
        self,
        task_id: str,
        *,
        expected_version: int | None = None,
        **changes: Any,
    ) -> TaskResult:
        """Apply field changes under the optimistic lock; return the updated task.

        Raises:
            ResourceNotFoundException: Task does not exist.
            ConflictRetryException: Version moved (expected_version or concurrent write).
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update task fields: {sorted(unknown)}")
        task = await self._load_for_update(task_id, expected_version)
        for key, value in changes.items():
            setattr(task, key, value)
        await self._flush_versioned(task_id)
        await self.db.refresh(task)
        return _to_result(task)
