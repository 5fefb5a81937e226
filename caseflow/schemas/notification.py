"""Notification API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: str
    title: str
    message: str
    task_id: str | None
    case_id: str | None
    priority: str
    read: bool
    created_at: datetime
    read_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    """Unread notification count for a user."""

    user_id: str
    unread: int


class MarkAllReadResponse(BaseModel):
    """Number of notifications marked read."""

    user_id: str
    updated: int
