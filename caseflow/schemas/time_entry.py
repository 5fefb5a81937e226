"""Time entry API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TimeEntryStartRequest(BaseModel):
    """Start a timer for (task, user)."""

    user_id: str = Field(..., min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=2000)
    billable: bool = True


class TimeEntryStopRequest(BaseModel):
    """Stop the open timer for (task, user)."""

    user_id: str = Field(..., min_length=1, max_length=128)
    description: str | None = Field(default=None, max_length=2000)


class TimeEntryResponse(BaseModel):
    """Time entry response; end_time and duration are null while running."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    user_id: str
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    description: str | None
    billable: bool


class TimeTotalResponse(BaseModel):
    """Sum of closed entries for a task."""

    task_id: str
    total_minutes: int
