"""Approval chain repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.approval import ApprovalChainResult, ApprovalStepResult
from caseflow.domain.approval import ApprovalTransition
from caseflow.domain.exceptions import ConflictRetryException, ResourceNotFoundException
from caseflow.infrastructure.persistence.models.approval import ApprovalChain, ApprovalStep
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc


def _to_result(c: ApprovalChain) -> ApprovalChainResult:
    return ApprovalChainResult(
        id=c.id,
        task_id=c.task_id,
        status=c.status,
        current_step=c.current_step,
        version=c.version,
        created_at=ensure_utc(c.created_at),
        completed_at=ensure_utc(c.completed_at),
        steps=[
            ApprovalStepResult(
                approver_id=s.approver_id,
                order=s.step_order,
                status=s.status,
                comments=s.comments,
                decided_at=ensure_utc(s.decided_at),
            )
            for s in sorted(c.steps, key=lambda s: s.step_order)
        ],
    )


class ApprovalRepository(BaseRepository[ApprovalChain]):
    """Approval chains (one per task). Implements IApprovalRepository."""

    entity_type = "approval_chain"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ApprovalChain)

    async def _row_for_task(self, task_id: str) -> ApprovalChain | None:
        result = await self.db.execute(
            select(ApprovalChain)
            .where(ApprovalChain.task_id == task_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_task(self, task_id: str) -> ApprovalChainResult | None:
        row = await self._row_for_task(task_id)
        return _to_result(row) if row else None

    async def replace(self, task_id: str, approver_ids: list[str]) -> ApprovalChainResult:
        """Drop any existing chain for the task and create a fresh pending one.

        Racing a concurrent replace for the same task raises ConflictRetryException.
        """
        existing = await self._row_for_task(task_id)
        if existing is not None:
            await self.db.delete(existing)
            await self._flush_versioned(existing.id)
        chain = ApprovalChain(
            task_id=task_id,
            status="pending",
            current_step=0,
            steps=[
                ApprovalStep(approver_id=approver_id, step_order=i, status="pending")
                for i, approver_id in enumerate(approver_ids)
            ],
        )
        await self._insert_unique(chain, task_id)
        await self.db.refresh(chain, attribute_names=["steps", "version", "created_at"])
        return _to_result(chain)

    async def apply(
        self,
        task_id: str,
        transition: ApprovalTransition,
        *,
        comments: str | None,
        decided_at: datetime,
        expected_version: int,
    ) -> ApprovalChainResult:
        """Persist one approver decision under the chain's optimistic lock."""
        chain = await self._row_for_task(task_id)
        if chain is None:
            raise ResourceNotFoundException("approval_chain", task_id)
        if chain.version != expected_version:
            raise ConflictRetryException(self.entity_type, chain.id)
        step = next(s for s in chain.steps if s.step_order == transition.step_index)
        step.status = transition.step_status.value
        step.comments = comments
        step.decided_at = decided_at
        chain.status = transition.chain_status.value
        chain.current_step = transition.current_step
        if transition.is_terminal:
            chain.completed_at = decided_at
        await self._flush_versioned(chain.id)
        await self.db.refresh(chain, attribute_names=["steps", "version", "updated_at"])
        return _to_result(chain)
