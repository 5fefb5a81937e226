"""Conditional rule repository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.condition import ConditionalRuleCreate, ConditionalRuleResult
from caseflow.infrastructure.persistence.models.conditional_rule import ConditionalRule
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc


def _to_result(r: ConditionalRule) -> ConditionalRuleResult:
    return ConditionalRuleResult(
        id=r.id,
        stage_id=r.stage_id,
        field=r.field,
        operator=r.operator,
        value=r.value,
        then_action=r.then_action,
        then_value=r.then_value,
        created_by=r.created_by,
        created_at=ensure_utc(r.created_at),
    )


class ConditionalRuleRepository(BaseRepository[ConditionalRule]):
    """Conditional rules. Implements IConditionalRuleRepository."""

    entity_type = "conditional_rule"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ConditionalRule)

    async def create(self, data: ConditionalRuleCreate) -> ConditionalRuleResult:
        """Append the rule after the stage's existing ones."""
        count = await self.db.scalar(
            select(func.count())
            .select_from(ConditionalRule)
            .where(ConditionalRule.stage_id == data.stage_id)
        )
        rule = ConditionalRule(
            stage_id=data.stage_id,
            field=data.field,
            operator=data.operator,
            value=data.value,
            then_action=data.then_action,
            then_value=data.then_value,
            created_by=data.created_by,
            position=count or 0,
        )
        self.db.add(rule)
        await self.db.flush()
        await self.db.refresh(rule)
        return _to_result(rule)

    async def list_for_stage(self, stage_id: str) -> list[ConditionalRuleResult]:
        result = await self.db.execute(
            select(ConditionalRule)
            .where(ConditionalRule.stage_id == stage_id)
            .order_by(ConditionalRule.position, ConditionalRule.created_at)
        )
        return [_to_result(r) for r in result.scalars().all()]
