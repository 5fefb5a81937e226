"""Column mixins shared by the engine's tables.

Models with optimistic locking add their own ``version`` column and map it
with ``__mapper_args__ = {"version_id_col": version}``.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from caseflow.shared.utils import generate_cuid, utc_now


def aware_timestamp(**kwargs: Any) -> Mapped[datetime]:
    """Non-null timezone-aware column stamped by the app clock, with a DB default as backstop."""
    return mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        **kwargs,
    )


class CuidMixin:
    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class CreatedAtMixin:
    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return aware_timestamp()


class TimestampMixin(CreatedAtMixin):
    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return aware_timestamp(onupdate=utc_now)
