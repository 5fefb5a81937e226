"""SLA rule ORM model. Unique on (priority, scope); scope NULL means global."""

from sqlalchemy import Boolean, Float, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class SLARule(CuidMixin, TimestampMixin, Base):
    """Warning/breach thresholds for a priority. Table: workflow_sla_rule."""

    __tablename__ = "workflow_sla_rule"

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    priority: Mapped[str] = mapped_column(String(16), nullable=False)
    scope: Mapped[str | None] = mapped_column(String, nullable=True)
    warning_threshold_hours: Mapped[float] = mapped_column(Float, nullable=False)
    breach_threshold_hours: Mapped[float] = mapped_column(Float, nullable=False)
    auto_notify: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("priority", "scope", name="uq_sla_rule_priority_scope"),
        # NULLs are distinct in unique constraints; one global rule per priority.
        Index(
            "uq_sla_rule_global_priority",
            "priority",
            unique=True,
            sqlite_where=text("scope IS NULL"),
            postgresql_where=text("scope IS NULL"),
        ),
    )
