"""DTOs for task dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TaskDependencies:
    """Blocking and informational prerequisites of a task."""

    task_id: str
    blocking: list[str] = field(default_factory=list)
    informational: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CanStartResult:
    """Whether a task may move to in-progress."""

    task_id: str
    can_start: bool
    blocked_by: list[str] = field(default_factory=list)
    informational: list[str] = field(default_factory=list)
