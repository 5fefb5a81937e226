"""Task and stage API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StageCreateRequest(BaseModel):
    """Request body for creating a stage within a case."""

    case_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    order: int = Field(default=0, ge=0)


class StageResponse(BaseModel):
    """Stage response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    case_id: str
    name: str
    order: int
    created_at: datetime
    skipped_at: datetime | None = None


class TaskCreateRequest(BaseModel):
    """Request body for registering a task. id is optional (generated when omitted)."""

    case_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=500)
    id: str | None = Field(default=None, min_length=1, max_length=64)
    stage_id: str | None = None
    description: str | None = None
    status: str = "pending"
    priority: str = "medium"
    assigned_to_user_id: str | None = Field(default=None, max_length=128)
    created_at: datetime | None = None
    started_at: datetime | None = None
    due_at: datetime | None = None


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    case_id: str
    stage_id: str | None
    title: str
    description: str | None
    status: str
    priority: str
    assigned_to_user_id: str | None
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None
    due_at: datetime | None
    completed_at: datetime | None
    archived_at: datetime | None
    sla_state: str | None
    sla_breached_at: datetime | None
    version: int


class StatusUpdateRequest(BaseModel):
    """Request body for a status transition; expected_version enables optimistic checks."""

    status: str = Field(..., min_length=1)
    expected_version: int | None = Field(default=None, ge=1)


class GroupEvaluationResponse(BaseModel):
    """Parallel group re-evaluation caused by a status change."""

    model_config = ConfigDict(from_attributes=True)

    group_id: str
    completed_count: int
    total_count: int
    percentage: float
    is_complete: bool
    became_complete: bool


class StatusTransitionResponse(BaseModel):
    """Result of a status transition."""

    model_config = ConfigDict(from_attributes=True)

    task: TaskResponse
    previous_status: str
    groups: list[GroupEvaluationResponse] = []
