"""SLA rule and status API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SLARuleSetRequest(BaseModel):
    """Create or replace the rule for (priority, scope)."""

    priority: str
    warning_threshold_hours: float
    breach_threshold_hours: float
    scope: str | None = Field(default=None, max_length=64)
    name: str | None = Field(default=None, max_length=255)
    auto_notify: bool = True


class SLARuleResponse(BaseModel):
    """SLA rule response; id is null for built-in defaults."""

    model_config = ConfigDict(from_attributes=True)

    id: str | None
    name: str | None
    priority: str
    scope: str | None
    warning_threshold_hours: float
    breach_threshold_hours: float
    auto_notify: bool
    is_default: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskSLAStatusResponse(BaseModel):
    """Live SLA classification for one task."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    state: str
    elapsed_hours: float
    rule: SLARuleResponse
    hours_remaining: float | None = None
    hours_overdue: float | None = None


class BreachScanRequest(BaseModel):
    """Options for a breach scan."""

    scope: str | None = None
    notify: bool = True


class BreachScanItemResponse(BaseModel):
    """A task found in warning or breach."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    case_id: str
    title: str
    assigned_to_user_id: str | None
    priority: str
    state: str
    elapsed_hours: float
    hours_remaining: float | None = None
    hours_overdue: float | None = None


class BreachScanErrorResponse(BaseModel):
    """A task the scan could not record."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    error_code: str
    message: str


class BreachScanResponse(BaseModel):
    """Breach scan outcome: warnings by urgency, breaches by overdue hours."""

    model_config = ConfigDict(from_attributes=True)

    warnings: list[BreachScanItemResponse]
    breaches: list[BreachScanItemResponse]
    errors: list[BreachScanErrorResponse]
    scanned: int
    state_changes: int
