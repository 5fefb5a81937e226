"""DTOs for approval chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ApprovalStepResult:
    """One approver step."""

    approver_id: str
    order: int
    status: str
    comments: str | None = None
    decided_at: datetime | None = None


@dataclass(frozen=True)
class ApprovalChainResult:
    """Approval chain with ordered steps."""

    id: str
    task_id: str
    status: str
    current_step: int
    version: int
    created_at: datetime
    completed_at: datetime | None = None
    steps: list[ApprovalStepResult] = field(default_factory=list)

    @property
    def current_approver_id(self) -> str | None:
        if self.status != "pending" or self.current_step >= len(self.steps):
            return None
        return self.steps[self.current_step].approver_id
