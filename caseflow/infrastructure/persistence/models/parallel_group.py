"""Parallel task group ORM model."""

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class ParallelTaskGroup(CuidMixin, TimestampMixin, Base):
    """Tasks of a stage that complete together under a rule. Table: workflow_parallel_group."""

    __tablename__ = "workflow_parallel_group"

    stage_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_stage.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    task_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    completion_rule: Mapped[str] = mapped_column(String(16), nullable=False)
    completion_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
