"""Audit trail recorder: append-only engine history."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from caseflow.application.dtos.audit_log import (
    AuditLogEntryCreate,
    AuditLogQuery,
    AuditLogResult,
    AuditStats,
)
from caseflow.shared.context import get_request_id

if TYPE_CHECKING:
    from caseflow.application.interfaces.repositories import IAuditLogRepository


def to_jsonable(value: Any) -> Any:
    """Convert datetimes, enums and containers so the value can be stored as JSON."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


class AuditTrailService:
    """Records and queries audit entries. Every engine state change goes through record()."""

    def __init__(self, audit_repo: "IAuditLogRepository") -> None:
        self.audit_repo = audit_repo

    async def record(
        self,
        *,
        entity_type: str,
        entity_id: str,
        action: str,
        user_id: str,
        case_id: str | None = None,
        previous_value: dict[str, Any] | None = None,
        new_value: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLogResult:
        """Append one entry; the current request id is attached automatically."""
        entry = AuditLogEntryCreate(
            entity_type=str(getattr(entity_type, "value", entity_type)),
            entity_id=entity_id,
            action=str(getattr(action, "value", action)),
            user_id=user_id,
            case_id=case_id,
            previous_value=to_jsonable(previous_value),
            new_value=to_jsonable(new_value),
            metadata=to_jsonable(metadata),
            request_id=get_request_id(),
        )
        return await self.audit_repo.create(entry)

    async def query(self, query: AuditLogQuery) -> list[AuditLogResult]:
        return await self.audit_repo.list(query)

    async def query_by_case(self, case_id: str, limit: int = 100) -> list[AuditLogResult]:
        return await self.audit_repo.list_by_case(case_id, limit)

    async def stats(self) -> AuditStats:
        return await self.audit_repo.stats()
