"""Conditional rules attached to stages."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from caseflow.infrastructure.persistence.database import Base
from caseflow.infrastructure.persistence.models.mixins import CreatedAtMixin, CuidMixin


class ConditionalRule(CuidMixin, CreatedAtMixin, Base):
    """``if context[field] <operator> value then <action>(then_value)`` for one stage.

    Rules of a stage run in position order, which is the order they were
    added. Table: workflow_conditional_rule.
    """

    __tablename__ = "workflow_conditional_rule"

    stage_id: Mapped[str] = mapped_column(
        String, ForeignKey("workflow_stage.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field: Mapped[str] = mapped_column(String(255), nullable=False)
    operator: Mapped[str] = mapped_column(String(32), nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    then_action: Mapped[str] = mapped_column(String(32), nullable=False)
    then_value: Mapped[Any] = mapped_column(JSON, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
