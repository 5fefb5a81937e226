"""DTOs for SLA rules, task SLA status and breach scans."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SLARuleSet:
    """Command to create or replace the rule for (priority, scope)."""

    priority: str
    warning_threshold_hours: float
    breach_threshold_hours: float
    scope: str | None = None
    name: str | None = None
    auto_notify: bool = True


@dataclass(frozen=True)
class SLARuleResult:
    """Persisted SLA rule. id is None for built-in defaults."""

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


@dataclass(frozen=True)
class TaskSLAStatus:
    """Derived SLA classification of a task."""

    task_id: str
    state: str
    elapsed_hours: float
    rule: SLARuleResult
    hours_remaining: float | None = None
    hours_overdue: float | None = None


@dataclass(frozen=True)
class BreachScanItem:
    """One task in a breach scan result."""

    task_id: str
    case_id: str
    title: str
    assigned_to_user_id: str | None
    priority: str
    state: str
    elapsed_hours: float
    hours_remaining: float | None = None
    hours_overdue: float | None = None


@dataclass(frozen=True)
class BreachScanError:
    """Task the breach scan could not update."""

    task_id: str
    error_code: str
    message: str


@dataclass(frozen=True)
class BreachScanResult:
    """Warnings (least time left first) and breaches (most overdue first)."""

    warnings: list[BreachScanItem] = field(default_factory=list)
    breaches: list[BreachScanItem] = field(default_factory=list)
    errors: list[BreachScanError] = field(default_factory=list)
    scanned: int = 0
    state_changes: int = 0
