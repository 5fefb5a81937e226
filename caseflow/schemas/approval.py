"""Approval chain API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ApprovalChainCreateRequest(BaseModel):
    """Ordered approvers for a task's chain."""

    approver_ids: list[str] = Field(..., max_length=50)


class ApprovalDecisionRequest(BaseModel):
    """Approve or reject the current step."""

    approver_id: str = Field(..., min_length=1, max_length=128)
    action: str
    comments: str | None = Field(default=None, max_length=4000)


class ApprovalStepResponse(BaseModel):
    """One step of a chain."""

    model_config = ConfigDict(from_attributes=True)

    approver_id: str
    order: int
    status: str
    comments: str | None = None
    decided_at: datetime | None = None


class ApprovalChainResponse(BaseModel):
    """Approval chain with its steps and the approver currently expected to act."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    status: str
    current_step: int
    current_approver_id: str | None
    version: int
    created_at: datetime
    completed_at: datetime | None = None
    steps: list[ApprovalStepResponse]
