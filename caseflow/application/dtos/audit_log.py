"""DTOs for the engine audit trail (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditLogEntryCreate:
    """Input for appending one audit entry."""

    entity_type: str
    entity_id: str
    action: str
    user_id: str
    case_id: str | None = None
    previous_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    request_id: str | None = None


@dataclass(frozen=True)
class AuditLogResult:
    """Audit entry as stored."""

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


@dataclass(frozen=True)
class AuditLogQuery:
    """Filters for listing audit entries."""

    entity_type: str | None = None
    entity_id: str | None = None
    user_id: str | None = None
    action: str | None = None
    from_timestamp: datetime | None = None
    to_timestamp: datetime | None = None
    skip: int = 0
    limit: int = 100


@dataclass(frozen=True)
class AuditStats:
    """Entry counts by entity type and by action."""

    total: int
    by_entity_type: dict[str, int] = field(default_factory=dict)
    by_action: dict[str, int] = field(default_factory=dict)
