"""Append-only audit trail table."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Connection, Index, String, event
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CuidMixin, aware_timestamp


class AuditLog(CuidMixin, Base):
    """One state change: who did it, to which entity, with before/after snapshots.

    Rows are written once. The ORM refuses updates and deletes below, and the
    Postgres migration installs a trigger that does the same for raw SQL.
    """

    __tablename__ = "workflow_audit_log"

    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    case_id: Mapped[str | None] = mapped_column(String, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    timestamp: Mapped[datetime] = aware_timestamp(index=True)
    previous_value: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    new_value: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    # "metadata" is reserved on declarative classes.
    audit_metadata: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON)
    request_id: Mapped[str | None] = mapped_column(String)

    __table_args__ = (Index("ix_workflow_audit_log_entity", "entity_type", "entity_id"),)


def _refuse_mutation(_mapper: Mapper[Any], _connection: Connection, target: AuditLog) -> None:
    raise ValueError(f"Audit entry {target.id} is append-only and cannot be changed or removed")


event.listen(AuditLog, "before_update", _refuse_mutation)
event.listen(AuditLog, "before_delete", _refuse_mutation)
