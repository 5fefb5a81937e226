"""Task dependency repository."""

from __future__ import annotations

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.infrastructure.persistence.models.dependency import TaskDependency
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.enums import DependencyType


class DependencyRepository(BaseRepository[TaskDependency]):
    """Dependency sets keyed by (task, type). Implements IDependencyRepository."""

    entity_type = "dependency"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskDependency)

    async def get_for_task(self, task_id: str) -> dict[str, list[str]]:
        """Prerequisites of a task by dependency type (missing types are empty)."""
        result = await self.db.execute(
            select(TaskDependency).where(TaskDependency.task_id == task_id)
        )
        sets = {t: [] for t in DependencyType.values()}
        for row in result.scalars().all():
            sets[row.dependency_type] = list(row.depends_on)
        return sets

    async def blocking_edges(self) -> dict[str, list[str]]:
        """All blocking edges: task id -> prerequisite ids."""
        result = await self.db.execute(
            select(TaskDependency.task_id, TaskDependency.depends_on).where(
                TaskDependency.dependency_type == DependencyType.BLOCKING.value
            )
        )
        return {row.task_id: list(row.depends_on) for row in result.all() if row.depends_on}

    async def _row_for(self, task_id: str, dependency_type: str) -> TaskDependency | None:
        result = await self.db.execute(
            select(TaskDependency)
            .where(
                and_(
                    TaskDependency.task_id == task_id,
                    TaskDependency.dependency_type == dependency_type,
                )
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def replace(
        self, task_id: str, dependency_type: str, depends_on: list[str]
    ) -> list[str]:
        """Replace the (task, type) set; return the previous set.

        Two first-time writers for the same (task, type) race on the unique
        key; the loser raises ConflictRetryException.
        """
        row = await self._row_for(task_id, dependency_type)
        if row is None:
            row = TaskDependency(
                task_id=task_id,
                dependency_type=dependency_type,
                depends_on=list(depends_on),
            )
            await self._insert_unique(row, task_id)
            return []
        previous = list(row.depends_on)
        row.depends_on = list(depends_on)
        await self._flush_versioned(row.id)
        return previous
