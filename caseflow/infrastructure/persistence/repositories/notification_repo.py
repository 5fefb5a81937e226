"""Notification repository. Only the read flag is mutable."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.dtos.notification import NotificationCreate, NotificationResult
from caseflow.infrastructure.persistence.models.notification import Notification
from caseflow.infrastructure.persistence.repositories.base import BaseRepository
from caseflow.shared.utils import ensure_utc


def _to_result(n: Notification) -> NotificationResult:
    return NotificationResult(
        id=n.id,
        user_id=n.user_id,
        type=n.type,
        title=n.title,
        message=n.message,
        task_id=n.task_id,
        case_id=n.case_id,
        priority=n.priority,
        read=n.read,
        created_at=ensure_utc(n.created_at),
        read_at=ensure_utc(n.read_at),
    )


class NotificationRepository(BaseRepository[Notification]):
    """Notification store. Implements INotificationRepository."""

    entity_type = "notification"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)

    async def create(self, data: NotificationCreate) -> NotificationResult:
        row = Notification(
            user_id=data.user_id,
            type=data.type,
            title=data.title,
            message=data.message,
            task_id=data.task_id,
            case_id=data.case_id,
            priority=data.priority,
            read=False,
        )
        self.db.add(row)
        await self.db.flush()
        return _to_result(row)

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> list[NotificationResult]:
        """Newest first."""
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        result = await self.db.execute(stmt)
        return [_to_result(n) for n in result.scalars().all()]

    async def mark_read(
        self, notification_id: str, user_id: str, read_at: datetime
    ) -> NotificationResult | None:
        """Mark one of the user's notifications read; None if not theirs or missing."""
        row = await self.get_by_id(notification_id)
        if row is None or row.user_id != user_id:
            return None
        if not row.read:
            row.read = True
            row.read_at = read_at
            await self.db.flush()
        return _to_result(row)

    async def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
            .values(read=True, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def unread_count(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
        )
        return int(result.scalar_one())
