"""DTOs for parallel task groups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ParallelGroupCreate:
    """Command to create a parallel group."""

    stage_id: str
    task_ids: list[str]
    completion_rule: str
    completion_threshold: int | None = None
    name: str | None = None


@dataclass(frozen=True)
class ParallelGroupResult:
    """Persisted parallel group."""

    id: str
    stage_id: str
    name: str | None
    task_ids: list[str]
    completion_rule: str
    completion_threshold: int | None
    version: int
    created_at: datetime


@dataclass(frozen=True)
class ParallelGroupStatusResult:
    """Completion snapshot of a group."""

    group_id: str
    completion_rule: str
    completion_threshold: int | None
    completed_count: int
    total_count: int
    percentage: float
    is_complete: bool
