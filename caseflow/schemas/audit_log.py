"""Audit log API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    """Single audit entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: str
    entity_id: str
    case_id: str | None
    action: str
    user_id: str
    timestamp: datetime
    previous_value: dict[str, Any] | None
    new_value: dict[str, Any] | None
    metadata: dict[str, Any] | None
    request_id: str | None


class AuditStatsResponse(BaseModel):
    """Entry counts overall, by entity type and by action."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    by_entity_type: dict[str, int]
    by_action: dict[str, int]
