"""Audit log API: read-only queries over the append-only trail."""

from datetime import datetime

from fastapi import APIRouter, Query

from caseflow.api.v1.dependencies import ReadServices
from caseflow.application.dtos.audit_log import AuditLogQuery
from caseflow.schemas.audit_log import AuditLogResponse, AuditStatsResponse

router = APIRouter()


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_logs(
    services: ReadServices,
    entity_type: str | None = None,
    entity_id: str | None = None,
    user_id: str | None = None,
    action: str | None = None,
    from_timestamp: datetime | None = None,
    to_timestamp: datetime | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Filter the trail; newest first."""
    entries = await services.audit.query(
        AuditLogQuery(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            action=action,
            from_timestamp=from_timestamp,
            to_timestamp=to_timestamp,
            skip=skip,
            limit=limit,
        )
    )
    return [AuditLogResponse.model_validate(e) for e in entries]


@router.get("/stats", response_model=AuditStatsResponse)
async def audit_stats(services: ReadServices):
    """Entry counts by entity type and action."""
    return AuditStatsResponse.model_validate(await services.audit.stats())


@router.get("/cases/{case_id}", response_model=list[AuditLogResponse])
async def case_audit_logs(
    case_id: str,
    services: ReadServices,
    limit: int = Query(100, ge=1, le=1000),
):
    """Trail for everything in one case."""
    entries = await services.audit.query_by_case(case_id, limit)
    return [AuditLogResponse.model_validate(e) for e in entries]
