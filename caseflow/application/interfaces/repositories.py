"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from caseflow.application.dtos.approval import ApprovalChainResult
    from caseflow.application.dtos.audit_log import (
        AuditLogEntryCreate,
        AuditLogQuery,
        AuditLogResult,
        AuditStats,
    )
    from caseflow.application.dtos.condition import (
        ConditionalRuleCreate,
        ConditionalRuleResult,
    )
    from caseflow.application.dtos.notification import (
        NotificationCreate,
        NotificationResult,
    )
    from caseflow.application.dtos.parallel import (
        ParallelGroupCreate,
        ParallelGroupResult,
    )
    from caseflow.application.dtos.sla import SLARuleResult, SLARuleSet
    from caseflow.application.dtos.task import StageResult, TaskCreate, TaskResult
    from caseflow.application.dtos.time_entry import TimeEntryResult
    from caseflow.domain.approval import ApprovalTransition


class IStageRepository(Protocol):
    """Protocol for stage repository."""

    async def create(self, case_id: str, name: str, order: int) -> "StageResult":
        """Create a stage."""

    async def get(self, stage_id: str) -> "StageResult | None":
        """Return stage by id or None."""

    async def list(self, case_id: str | None = None) -> list["StageResult"]:
        """Stages of a case (or all) by order."""

    async def mark_skipped(self, stage_id: str, at: datetime) -> tuple["StageResult", bool]:
        """Set skipped_at once; True when this call set it."""


class ITaskRepository(Protocol):
    """Protocol for task repository (versioned writes)."""

    async def create(self, data: "TaskCreate") -> "TaskResult":
        """Create a task; return created result."""

    async def get(self, task_id: str) -> "TaskResult | None":
        """Return task by id or None."""

    async def get_many(self, task_ids: Iterable[str]) -> dict[str, "TaskResult"]:
        """Return existing tasks keyed by id."""

    async def get_statuses(self, task_ids: Iterable[str]) -> dict[str, str]:
        """Return status per existing task id."""

    async def list(
        self,
        *,
        case_id: str | None = None,
        stage_id: str | None = None,
        assignee: str | None = None,
        status: str | None = None,
        open_only: bool = False,
        include_archived: bool = False,
        skip: int = 0,
        limit: int | None = None,
    ) -> list["TaskResult"]:
        """List tasks matching filters (archived excluded by default)."""

    async def update(
        self,
        task_id: str,
        *,
        expected_version: int | None = None,
        **changes: Any,
    ) -> "TaskResult":
        """Apply changes; raise ConflictRetryException on a lost version race."""


class IDependencyRepository(Protocol):
    """Protocol for task dependency sets."""

    async def get_for_task(self, task_id: str) -> dict[str, list[str]]:
        """Prerequisites by dependency type."""

    async def blocking_edges(self) -> dict[str, list[str]]:
        """All blocking edges (task id -> prerequisite ids)."""

    async def replace(
        self, task_id: str, dependency_type: str, depends_on: list[str]
    ) -> list[str]:
        """Replace the (task, type) set; return the previous set."""


class ISLARuleRepository(Protocol):
    """Protocol for SLA rules."""

    async def find(self, priority: str, scope: str | None) -> "SLARuleResult | None":
        """Exact (priority, scope) rule or None."""

    async def get(self, rule_id: str) -> "SLARuleResult | None":
        """Rule by id or None."""

    async def upsert(
        self, data: "SLARuleSet"
    ) -> tuple["SLARuleResult", "SLARuleResult | None"]:
        """Create or replace; return (new, previous)."""

    async def list(self, scope: str | None = None) -> list["SLARuleResult"]:
        """All rules or the rules of one scope."""

    async def delete(self, rule_id: str) -> "SLARuleResult | None":
        """Delete a rule; return it, or None if missing."""


class IApprovalRepository(Protocol):
    """Protocol for approval chains."""

    async def get_by_task(self, task_id: str) -> "ApprovalChainResult | None":
        """Chain for a task or None."""

    async def replace(self, task_id: str, approver_ids: list[str]) -> "ApprovalChainResult":
        """Replace any chain of the task with a new pending one."""

    async def apply(
        self,
        task_id: str,
        transition: "ApprovalTransition",
        *,
        comments: str | None,
        decided_at: datetime,
        expected_version: int,
    ) -> "ApprovalChainResult":
        """Persist an approver decision (versioned)."""


class IParallelGroupRepository(Protocol):
    """Protocol for parallel groups."""

    async def create(self, data: "ParallelGroupCreate") -> "ParallelGroupResult":
        """Create a group."""

    async def get(self, group_id: str) -> "ParallelGroupResult | None":
        """Group by id or None."""

    async def list_for_stage(self, stage_id: str) -> list["ParallelGroupResult"]:
        """Groups of a stage."""

    async def list_containing(self, task_id: str) -> list["ParallelGroupResult"]:
        """Groups that include the task."""

    async def set_members(
        self,
        group_id: str,
        task_ids: list[str],
        *,
        expected_version: int | None = None,
    ) -> "ParallelGroupResult":
        """Replace membership (versioned)."""


class IConditionalRuleRepository(Protocol):
    """Protocol for per-stage conditional rules."""

    async def create(self, data: "ConditionalRuleCreate") -> "ConditionalRuleResult":
        """Append a rule to its stage."""

    async def list_for_stage(self, stage_id: str) -> list["ConditionalRuleResult"]:
        """Rules of a stage in the order they were added."""


class ITimeEntryRepository(Protocol):
    """Protocol for time entries."""

    async def get_open(self, task_id: str, user_id: str) -> "TimeEntryResult | None":
        """Open entry for (task, user) or None."""

    async def start(
        self,
        task_id: str,
        user_id: str,
        start_time: datetime,
        *,
        billable: bool = True,
        description: str | None = None,
    ) -> "TimeEntryResult":
        """Open an entry."""

    async def stop(
        self,
        task_id: str,
        user_id: str,
        end_time: datetime,
        duration_minutes: int,
        description: str | None = None,
    ) -> "TimeEntryResult":
        """Close the open entry for (task, user)."""

    async def list_for_task(self, task_id: str) -> list["TimeEntryResult"]:
        """Entries of a task, newest first."""

    async def total_minutes(
        self, *, task_id: str | None = None, case_id: str | None = None
    ) -> int:
        """Sum of closed entry durations."""

    async def average_entry_hours(self, *, case_id: str | None = None) -> float | None:
        """Mean duration in hours of closed entries, or None without any."""


class INotificationRepository(Protocol):
    """Protocol for notification storage."""

    async def create(self, data: "NotificationCreate") -> "NotificationResult":
        """Persist a notification."""

    async def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> list["NotificationResult"]:
        """User's notifications, newest first."""

    async def mark_read(
        self, notification_id: str, user_id: str, read_at: datetime
    ) -> "NotificationResult | None":
        """Mark read; None if missing or not the user's."""

    async def mark_all_read(self, user_id: str, read_at: datetime) -> int:
        """Mark all read; return number changed."""

    async def unread_count(self, user_id: str) -> int:
        """Number of unread notifications."""


class IAuditLogRepository(Protocol):
    """Protocol for the engine audit trail (DIP). Append-only."""

    async def create(self, entry: "AuditLogEntryCreate") -> "AuditLogResult":
        """Append one audit log entry; return created record."""

    async def list(self, query: "AuditLogQuery") -> list["AuditLogResult"]:
        """Filtered entries, newest first."""

    async def list_by_case(self, case_id: str, limit: int = 100) -> list["AuditLogResult"]:
        """Entries for a case, newest first."""

    async def stats(self) -> "AuditStats":
        """Counts by entity type and action."""
