"""Audit log repository. Append-only; implements IAuditLogRepository."""

from __future__ import annotations

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogQuery,
    AuditLogResult,
    AuditStats,
)
from caseflow.infrastructure.persistence.models.audit_log import AuditLog
from caseflow.shared.utils import ensure_utc, generate_cuid


def _orm_to_result(row: AuditLog) -> AuditLogResult:
    """Map ORM to application DTO."""
    return AuditLogResult(
        id=row.id,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        case_id=row.case_id,
        action=row.action,
        user_id=row.user_id,
        timestamp=ensure_utc(row.timestamp),
        previous_value=row.previous_value,
        new_value=row.new_value,
        metadata=row.audit_metadata,
        request_id=row.request_id,
    )


class AuditLogRepository:
    """Append-only audit log repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, entry: AuditLogEntryCreate) -> AuditLogResult:
        """Append one audit log entry; return created record."""
        row = AuditLog(
            id=generate_cuid(),
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            case_id=entry.case_id,
            action=entry.action,
            user_id=entry.user_id,
            previous_value=entry.previous_value,
            new_value=entry.new_value,
            audit_metadata=entry.metadata,
            request_id=entry.request_id,
        )
        self.db.add(row)
        await self.db.flush()
        return _orm_to_result(row)

    async def list(self, query: AuditLogQuery) -> list[AuditLogResult]:
        """List audit log entries with optional filters (newest first)."""
        conditions = []
        if query.entity_type is not None:
            conditions.append(AuditLog.entity_type == query.entity_type)
        if query.entity_id is not None:
            conditions.append(AuditLog.entity_id == query.entity_id)
        if query.user_id is not None:
            conditions.append(AuditLog.user_id == query.user_id)
        if query.action is not None:
            conditions.append(AuditLog.action == query.action)
        if query.from_timestamp is not None:
            conditions.append(AuditLog.timestamp >= query.from_timestamp)
        if query.to_timestamp is not None:
            conditions.append(AuditLog.timestamp <= query.to_timestamp)

        stmt = select(AuditLog)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = (
            stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(query.skip)
            .limit(query.limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def list_by_case(self, case_id: str, limit: int = 100) -> list[AuditLogResult]:
        """Entries for one case, newest first."""
        result = await self.db.execute(
            select(AuditLog)
            .where(AuditLog.case_id == case_id)
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def stats(self) -> AuditStats:
        """Counts by entity type and by action."""
        by_type = await self.db.execute(
            select(AuditLog.entity_type, func.count()).group_by(AuditLog.entity_type)
        )
        by_action = await self.db.execute(
            select(AuditLog.action, func.count()).group_by(AuditLog.action)
        )
        type_counts = {row[0]: int(row[1]) for row in by_type.all()}
        return AuditStats(
            total=sum(type_counts.values()),
            by_entity_type=type_counts,
            by_action={row[0]: int(row[1]) for row in by_action.all()},
        )
