"""Reassignment API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReassignRequest(BaseModel):
    """Reassign a single task."""

    new_assignee: str = Field(..., min_length=1, max_length=128)
    reason: str | None = Field(default=None, max_length=1000)
    expected_version: int | None = Field(default=None, ge=1)


class BulkReassignRequest(BaseModel):
    """Reassign many tasks; each succeeds or fails on its own."""

    task_ids: list[str] = Field(..., min_length=1, max_length=500)
    new_assignee: str = Field(..., min_length=1, max_length=128)
    reason: str | None = Field(default=None, max_length=1000)


class ReassignAllRequest(BaseModel):
    """Move every open task of one user to another, optionally within one case."""

    from_user_id: str = Field(..., min_length=1, max_length=128)
    to_user_id: str = Field(..., min_length=1, max_length=128)
    scope: str | None = None
    reason: str | None = Field(default=None, max_length=1000)


class ReassignmentFailureResponse(BaseModel):
    """Per-task failure in a batch reassignment."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    error_code: str
    message: str


class BulkReassignResponse(BaseModel):
    """Outcome of a bulk reassignment."""

    model_config = ConfigDict(from_attributes=True)

    succeeded: list[str]
    failed: list[ReassignmentFailureResponse]


class ReassignAllResponse(BaseModel):
    """Outcome of reassigning all of a user's open tasks."""

    model_config = ConfigDict(from_attributes=True)

    reassigned_count: int
    failed: list[ReassignmentFailureResponse]


class ReassignmentHistoryResponse(BaseModel):
    """One past reassignment of a task."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    from_user_id: str | None
    to_user_id: str | None
    reassigned_by: str
    reason: str | None
    timestamp: datetime
    metadata: dict[str, Any] | None = None
