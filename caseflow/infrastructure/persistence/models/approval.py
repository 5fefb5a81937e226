"""Approval chain and step ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class ApprovalChain(CuidMixin, TimestampMixin, Base):
    """Ordered approval chain for a task (one per task). Table: workflow_approval_chain."""

    __tablename__ = "workflow_approval_chain"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_task.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", server_default="pending"
    )
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    steps: Mapped[list["ApprovalStep"]] = relationship(
        back_populates="chain",
        order_by="ApprovalStep.step_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}


class ApprovalStep(CuidMixin, Base):
    """One approver's step within a chain. Table: workflow_approval_step."""

    __tablename__ = "workflow_approval_step"

    chain_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_approval_chain.id", ondelete="CASCADE"), nullable=False, index=True
    )
    approver_id: Mapped[str] = mapped_column(String, nullable=False)
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", server_default="pending"
    )
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    chain: Mapped[ApprovalChain] = relationship(back_populates="steps")

    __table_args__ = (
        UniqueConstraint("chain_id", "step_order", name="uq_approval_step_order"),
    )
