"""Task dependency ORM model: one row per (task, dependency type)."""

from sqlalchemy import JSON, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class TaskDependency(CuidMixin, TimestampMixin, Base):
    """Prerequisite set of a task for one dependency type. Table: workflow_task_dependency."""

    __tablename__ = "workflow_task_dependency"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dependency_type: Mapped[str] = mapped_column(String(32), nullable=False)
    depends_on: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("task_id", "dependency_type", name="uq_task_dependency_type"),
    )
