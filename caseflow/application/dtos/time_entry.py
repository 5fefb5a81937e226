"""DTOs for task time entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeEntryResult:
    """Work session on a task. end_time and duration are None while open."""

    id: str
    task_id: str
    user_id: str
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    description: str | None
    billable: bool
