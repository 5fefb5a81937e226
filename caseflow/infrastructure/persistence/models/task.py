"""Stage and task ORM models. Tasks are never deleted, only archived."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)


class Stage(CuidMixin, CreatedAtMixin, Base):
    """Ordered stage within a case process. Table: workflow_stage.

    skipped_at is set once, when a conditional rule skips the stage.
    """

    __tablename__ = "workflow_stage"

    case_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(
        "stage_order", Integer, nullable=False, default=0
    )
    skipped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Task(CuidMixin, TimestampMixin, Base):
    """Engine-tracked task. Table: workflow_task. Versioned (optimistic lock)."""

    __tablename__ = "workflow_task"

    case_id: Mapped[str] = mapped_column(String, nullable=False)
    stage_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow_stage.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", server_default="pending"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    assigned_to_user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sla_state: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sla_breached_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_workflow_task_case_status", "case_id", "status"),
        Index("ix_workflow_task_assignee", "assigned_to_user_id", "status"),
    )
