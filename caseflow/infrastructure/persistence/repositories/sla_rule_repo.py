"""SLA rule repository."""

from __future__ import annotations

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.sla import SLARuleResult, SLARuleSet
from caseflow.infrastructure.persistence.models.sla_rule import SLARule
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc


def _to_result(r: SLARule) -> SLARuleResult:
    return SLARuleResult(
        id=r.id,
        name=r.name,
        priority=r.priority,
        scope=r.scope,
        warning_threshold_hours=r.warning_threshold_hours,
        breach_threshold_hours=r.breach_threshold_hours,
        auto_notify=r.auto_notify,
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
    )


class SLARuleRepository(BaseRepository[SLARule]):
    """SLA rules keyed by (priority, scope). Implements ISLARuleRepository."""

    entity_type = "sla_rule"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SLARule)

    async def _find_row(self, priority: str, scope: str | None) -> SLARule | None:
        scope_cond = SLARule.scope.is_(None) if scope is None else SLARule.scope == scope
        result = await self.db.execute(
            select(SLARule)
            .where(and_(SLARule.priority == priority, scope_cond))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find(self, priority: str, scope: str | None) -> SLARuleResult | None:
        row = await self._find_row(priority, scope)
        return _to_result(row) if row else None

    async def get(self, rule_id: str) -> SLARuleResult | None:
        row = await self.get_by_id(rule_id)
        return _to_result(row) if row else None

    async def upsert(self, data: SLARuleSet) -> tuple[SLARuleResult, SLARuleResult | None]:
        """Create or replace the rule for (priority, scope); return (new, previous)."""
        row = await self._find_row(data.priority, data.scope)
        previous = _to_result(row) if row else None
        if row is None:
            row = SLARule(
                name=data.name,
                priority=data.priority,
                scope=data.scope,
                warning_threshold_hours=data.warning_threshold_hours,
                breach_threshold_hours=data.breach_threshold_hours,
                auto_notify=data.auto_notify,
            )
            await self._insert_unique(row, data.priority)
        else:
            row.name = data.name
            row.warning_threshold_hours = data.warning_threshold_hours
            row.breach_threshold_hours = data.breach_threshold_hours
            row.auto_notify = data.auto_notify
            await self._flush_versioned(row.id)
        await self.db.refresh(row)
        return _to_result(row), previous

    async def list(self, scope: str | None = None) -> list[SLARuleResult]:
        """All rules, or the rules of one scope."""
        stmt = select(SLARule).order_by(SLARule.scope, SLARule.priority)
        if scope is not None:
            stmt = stmt.where(SLARule.scope == scope)
        result = await self.db.execute(stmt)
        return [_to_result(r) for r in result.scalars().all()]

    async def delete(self, rule_id: str) -> SLARuleResult | None:
        """Delete a rule; return what was deleted, or None if missing."""
        row = await self.get_by_id(rule_id)
        if row is None:
            return None
        deleted = _to_result(row)
        await self.db.delete(row)
        await self.db.flush()
        return deleted
