"""DTOs for notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationCreate:
    """Notification to persist and forward."""

    user_id: str
    type: str
    title: str
    message: str
    task_id: str | None = None
    case_id: str | None = None
    priority: str = "normal"


@dataclass(frozen=True)
class NotificationResult:
    """Persisted notification."""

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
