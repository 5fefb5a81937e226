"""Parallel task group API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ParallelGroupCreateRequest(BaseModel):
    """Request body for creating a parallel group."""

    stage_id: str = Field(..., min_length=1)
    task_ids: list[str] = Field(..., max_length=500)
    completion_rule: str = "all"
    completion_threshold: int | None = None
    name: str | None = Field(default=None, max_length=255)


class ParallelGroupResponse(BaseModel):
    """Parallel group response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    stage_id: str
    name: str | None
    task_ids: list[str]
    completion_rule: str
    completion_threshold: int | None
    version: int
    created_at: datetime


class ParallelGroupStatusResponse(BaseModel):
    """Completion snapshot of a group."""

    model_config = ConfigDict(from_attributes=True)

    group_id: str
    completion_rule: str
    completion_threshold: int | None
    completed_count: int
    total_count: int
    percentage: float
    is_complete: bool
