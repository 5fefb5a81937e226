"""DTOs for stages and tasks (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class StageResult:
    """Ordered stage of a case."""

    id: str
    case_id: str
    name: str
    order: int
    created_at: datetime
    skipped_at: datetime | None = None


@dataclass(frozen=True)
class TaskCreate:
    """Command to register a task with the engine."""

    case_id: str
    title: str
    id: str | None = None
    stage_id: str | None = None
    description: str | None = None
    status: str = "pending"
    priority: str = "medium"
    assigned_to_user_id: str | None = None
    created_at: datetime | None = None
    started_at: datetime | None = None
    due_at: datetime | None = None


@dataclass(frozen=True)
class TaskResult:
    """Engine-tracked task."""

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


@dataclass(frozen=True)
class GroupEvaluation:
    """Parallel group re-evaluated after a member task changed status."""

    group_id: str
    completed_count: int
    total_count: int
    percentage: float
    is_complete: bool
    became_complete: bool


@dataclass(frozen=True)
class StatusTransitionResult:
    """Task after a status change, plus the groups re-evaluated because of it."""

    task: TaskResult
    previous_status: str
    groups: list[GroupEvaluation] = field(default_factory=list)
