"""DTOs for reassignment results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ReassignmentFailure:
    """Task that could not be reassigned, with the error code."""

    task_id: str
    error_code: str
    message: str


@dataclass(frozen=True)
class BulkReassignResult:
    """Per-item outcome of a bulk reassignment."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[ReassignmentFailure] = field(default_factory=list)


@dataclass(frozen=True)
class ReassignAllResult:
    """Outcome of moving all open tasks from one user to another."""

    reassigned_count: int
    failed: list[ReassignmentFailure] = field(default_factory=list)


@dataclass(frozen=True)
class ReassignmentHistoryItem:
    """One reassignment taken from the audit trail."""

    task_id: str
    from_user_id: str | None
    to_user_id: str | None
    reassigned_by: str
    reason: str | None
    timestamp: datetime
    metadata: dict[str, Any] | None = None
