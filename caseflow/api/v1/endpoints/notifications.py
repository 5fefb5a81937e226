"""Notification API: a user's inbox."""

from fastapi import APIRouter, Query, Request

from caseflow.api.v1.dependencies import ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter()


@router.get("/{user_id}", response_model=list[NotificationResponse])
async def list_notifications(
    user_id: str,
    services: ReadServices,
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=500),
):
    """Notifications for a user, newest first."""
    items = await services.notifications.list_for_user(
        user_id, unread_only=unread_only, limit=limit
    )
    return [NotificationResponse.model_validate(n) for n in items]


@router.get("/{user_id}/unread-count", response_model=UnreadCountResponse)
async def unread_count(user_id: str, services: ReadServices):
    """Number of unread notifications."""
    return UnreadCountResponse(
        user_id=user_id, unread=await services.notifications.unread_count(user_id)
    )


@router.post("/{user_id}/read-all", response_model=MarkAllReadResponse)
@limit_writes
async def mark_all_read(request: Request, user_id: str, services: WriteServices):
    """Mark every unread notification read."""
    updated = await services.notifications.mark_all_read(user_id)
    return MarkAllReadResponse(user_id=user_id, updated=updated)


@router.post("/{user_id}/{notification_id}/read", response_model=NotificationResponse)
@limit_writes
async def mark_read(
    request: Request,
    user_id: str,
    notification_id: str,
    services: WriteServices,
):
    """Mark one notification read (404 if it is not the user's)."""
    item = await services.notifications.mark_read(notification_id, user_id)
    return NotificationResponse.model_validate(item)
