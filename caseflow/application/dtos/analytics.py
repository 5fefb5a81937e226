"""DTOs for workflow analytics (no dependency on ORM).

All fields are JSON-friendly (dates as ISO strings) so results can be
cached as plain dicts and rebuilt with from_dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class StageProgress:
    """Share of a stage's tasks that are done."""

    stage_id: str
    stage_name: str
    total: int
    completed: int
    percentage: int


@dataclass
class TimelinePoint:
    """Tasks created and completed on one UTC day."""

    date: str
    created: int
    completed: int


@dataclass
class WorkflowMetrics:
    """Aggregate task metrics for a case (or all cases).

    ``average_completion_time`` is the mean length of closed time entries;
    ``average_cycle_time`` the mean started-to-done span of done tasks. Both
    are hours.
    """

    scope: str | None
    total_tasks: int
    completed_tasks: int
    tasks_by_status: dict[str, int]
    tasks_by_priority: dict[str, int]
    tasks_by_assignee: dict[str, int]
    overdue_tasks: int
    sla_breaches: int
    average_completion_time: float | None
    average_cycle_time: float | None
    tracked_hours: float
    stage_progress: list[StageProgress] = field(default_factory=list)
    timeline_data: list[TimelinePoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowMetrics:
        values = dict(data)
        values["stage_progress"] = [StageProgress(**s) for s in data["stage_progress"]]
        values["timeline_data"] = [TimelinePoint(**t) for t in data["timeline_data"]]
        return cls(**values)


@dataclass
class TaskVelocity:
    """Completed tasks per day over a trailing window."""

    scope: str | None
    window_days: int
    completed_in_window: int
    tasks_per_day: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskVelocity:
        return cls(**data)


@dataclass
class StageDuration:
    """Mean time-in-stage of done tasks, in days."""

    stage_id: str
    stage_name: str
    average_days: float
    completed_tasks: int


@dataclass
class BlockedTask:
    """Task that cannot start, with its unmet blocking prerequisites."""

    task_id: str
    title: str
    blocked_by: list[str]


@dataclass
class OverloadedUser:
    """User whose open-task count exceeds the threshold."""

    user_id: str
    open_tasks: int


@dataclass
class BottleneckAnalysis:
    """Where work is slow, blocked, or piling up."""

    scope: str | None
    overload_threshold: int
    slowest_stages: list[StageDuration] = field(default_factory=list)
    blocked_tasks: list[BlockedTask] = field(default_factory=list)
    overloaded_users: list[OverloadedUser] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BottleneckAnalysis:
        return cls(
            scope=data["scope"],
            overload_threshold=data["overload_threshold"],
            slowest_stages=[StageDuration(**s) for s in data["slowest_stages"]],
            blocked_tasks=[BlockedTask(**b) for b in data["blocked_tasks"]],
            overloaded_users=[OverloadedUser(**u) for u in data["overloaded_users"]],
        )
