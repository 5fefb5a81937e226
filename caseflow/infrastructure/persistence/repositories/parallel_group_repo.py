"""Parallel task group repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.parallel import ParallelGroupCreate, ParallelGroupResult
from caseflow.infrastructure.persistence.models.parallel_group import ParallelTaskGroup
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc


def _to_result(g: ParallelTaskGroup) -> ParallelGroupResult:
    return ParallelGroupResult(
        id=g.id,
        stage_id=g.stage_id,
        name=g.name,
        task_ids=list(g.task_ids),
        completion_rule=g.completion_rule,
        completion_threshold=g.completion_threshold,
        version=g.version,
        created_at=ensure_utc(g.created_at),
    )


class ParallelGroupRepository(BaseRepository[ParallelTaskGroup]):
    """Parallel groups. Implements IParallelGroupRepository."""

    entity_type = "parallel_group"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ParallelTaskGroup)

    async def create(self, data: ParallelGroupCreate) -> ParallelGroupResult:
        group = ParallelTaskGroup(
            stage_id=data.stage_id,
            name=data.name,
            task_ids=list(data.task_ids),
            completion_rule=data.completion_rule,
            completion_threshold=data.completion_threshold,
        )
        self.db.add(group)
        await self.db.flush()
        await self.db.refresh(group)
        return _to_result(group)

    async def get(self, group_id: str) -> ParallelGroupResult | None:
        group = await self.get_by_id(group_id)
        return _to_result(group) if group else None

    async def list_for_stage(self, stage_id: str) -> list[ParallelGroupResult]:
        result = await self.db.execute(
            select(ParallelTaskGroup)
            .where(ParallelTaskGroup.stage_id == stage_id)
            .order_by(ParallelTaskGroup.created_at)
        )
        return [_to_result(g) for g in result.scalars().all()]

    async def list_containing(self, task_id: str) -> list[ParallelGroupResult]:
        """Groups whose membership includes task_id.

        Membership is a JSON array; filtered here so the query stays
        portable across SQLite and PostgreSQL.
        """
        result = await self.db.execute(
            select(ParallelTaskGroup).order_by(ParallelTaskGroup.created_at)
        )
        return [
            _to_result(g) for g in result.scalars().all() if task_id in g.task_ids
        ]

    async def set_members(
        self,
        group_id: str,
        task_ids: list[str],
        *,
        expected_version: int | None = None,
    ) -> ParallelGroupResult:
        """Replace membership under the group's optimistic lock."""
        group = await self._load_for_update(group_id, expected_version)
        group.task_ids = list(task_ids)
        await self._flush_versioned(group_id)
        await self.db.refresh(group)
        return _to_result(group)
