"""Analytics use case: workflow metrics, velocity and bottlenecks.

Results are derived from the task store on demand and cached for a short
TTL when a cache and key builder are configured.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from datetime import datetime, timedelta
from statistics import mean
from typing import TYPE_CHECKING, Any, TypeVar

from caseflow.application.dtos.analytics import (
    BlockedTask,
    BottleneckAnalysis,
    OverloadedUser,
    StageDuration,
    StageProgress,
    TaskVelocity,
    TimelinePoint,
    WorkflowMetrics,
)
from caseflow.domain.exceptions import ValidationException
from caseflow.shared.enums import SLAState, TaskPriority, TaskStatus
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.telemetry.tracing import traced
from caseflow.shared.utils import hours_between, utc_now

if TYPE_CHECKING:
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import (
        IStageRepository,
        ITaskRepository,
        ITimeEntryRepository,
    )
    from caseflow.application.interfaces.services import ICacheService
    from caseflow.application.use_cases.dependencies import DependencyService
    from caseflow.application.use_cases.sla import SLAService

logger = get_logger(__name__)

T = TypeVar("T")

UNASSIGNED = "unassigned"


class AnalyticsService:
    """Aggregates task data into metrics, velocity and bottleneck reports."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        stage_repo: "IStageRepository",
        time_repo: "ITimeEntryRepository",
        dependencies: "DependencyService",
        sla: "SLAService",
        *,
        cache: "ICacheService | None" = None,
        key_builder: Callable[..., str] | None = None,
        cache_ttl: int = 30,
        overload_threshold: int = 5,
        slowest_stages_limit: int = 5,
        timeline_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.task_repo = task_repo
        self.stage_repo = stage_repo
        self.time_repo = time_repo
        self.dependencies = dependencies
        self.sla = sla
        self.cache = cache
        self.key_builder = key_builder
        self.cache_ttl = cache_ttl
        self.overload_threshold = overload_threshold
        self.slowest_stages_limit = slowest_stages_limit
        self.timeline_days = timeline_days
        self.clock = clock

    async def _cached(
        self,
        key_parts: tuple[Any, ...],
        compute: Callable[[], Awaitable[T]],
        from_dict: Callable[[dict[str, Any]], T],
    ) -> T:
        """Serve from cache when possible; otherwise compute and store."""
        use_cache = (
            self.cache is not None
            and self.key_builder is not None
            and self.cache.is_available()
        )
        if not use_cache:
            return await compute()
        key = self.key_builder(*key_parts)
        hit = await self.cache.get(key)
        if hit is not None:
            return from_dict(hit)
        result = await compute()
        await self.cache.set(key, asdict(result), ttl=self.cache_ttl)
        return result

    @traced("analytics.metrics")
    async def metrics(self, scope: str | None = None) -> WorkflowMetrics:
        """Task counts, SLA figures, stage progress, time-entry and cycle durations, timeline."""
        return await self._cached(
            ("metrics", scope),
            lambda: self._compute_metrics(scope),
            WorkflowMetrics.from_dict,
        )

    async def _compute_metrics(self, scope: str | None) -> WorkflowMetrics:
        tasks = await self.task_repo.list(case_id=scope)
        open_tasks = [t for t in tasks if t.status != TaskStatus.DONE.value]
        done_tasks = [t for t in tasks if t.status == TaskStatus.DONE.value]

        by_status = {s: 0 for s in TaskStatus.values()}
        by_status.update(Counter(t.status for t in tasks))
        by_priority = {p: 0 for p in TaskPriority.values()}
        by_priority.update(Counter(t.priority for t in tasks))
        by_assignee = dict(Counter(t.assigned_to_user_id or UNASSIGNED for t in tasks))

        classified = await self.sla.classify_tasks(open_tasks)
        overdue = sum(1 for _, s in classified if s.state == SLAState.BREACHED.value)

        cycle_hours = [
            hours_between(t.started_at, t.completed_at)
            for t in done_tasks
            if t.started_at is not None and t.completed_at is not None
        ]
        entry_hours = await self.time_repo.average_entry_hours(case_id=scope)
        tracked_minutes = await self.time_repo.total_minutes(case_id=scope)

        return WorkflowMetrics(
            scope=scope,
            total_tasks=len(tasks),
            completed_tasks=len(done_tasks),
            tasks_by_status=by_status,
            tasks_by_priority=by_priority,
            tasks_by_assignee=by_assignee,
            overdue_tasks=overdue,
            sla_breaches=sum(1 for t in tasks if t.sla_breached_at is not None),
            average_completion_time=None if entry_hours is None else round(entry_hours, 1),
            average_cycle_time=round(mean(cycle_hours), 1) if cycle_hours else None,
            tracked_hours=round(tracked_minutes / 60, 2),
            stage_progress=await self._stage_progress(scope, tasks),
            timeline_data=self._timeline(tasks),
        )

    async def _stage_progress(
        self, scope: str | None, tasks: list["TaskResult"]
    ) -> list[StageProgress]:
        progress = []
        for stage in await self.stage_repo.list(scope):
            stage_tasks = [t for t in tasks if t.stage_id == stage.id]
            completed = sum(1 for t in stage_tasks if t.status == TaskStatus.DONE.value)
            progress.append(
                StageProgress(
                    stage_id=stage.id,
                    stage_name=stage.name,
                    total=len(stage_tasks),
                    completed=completed,
                    percentage=round(completed / len(stage_tasks) * 100) if stage_tasks else 0,
                )
            )
        return progress

    def _timeline(self, tasks: list["TaskResult"]) -> list[TimelinePoint]:
        """Created/completed counts per UTC day, oldest day first, today last."""
        today = self.clock().date()
        created = Counter(t.created_at.date() for t in tasks)
        completed = Counter(t.completed_at.date() for t in tasks if t.completed_at)
        points = []
        for offset in range(self.timeline_days - 1, -1, -1):
            day = today - timedelta(days=offset)
            points.append(
                TimelinePoint(date=day.isoformat(), created=created[day], completed=completed[day])
            )
        return points

    @traced("analytics.velocity")
    async def velocity(
        self, scope: str | None = None, window_days: int = 7
    ) -> TaskVelocity:
        """Tasks completed per day over the trailing window, rounded to 0.1."""
        if window_days < 1:
            raise ValidationException("window_days must be at least 1", field="window_days")
        return await self._cached(
            ("velocity", scope, window_days),
            lambda: self._compute_velocity(scope, window_days),
            TaskVelocity.from_dict,
        )

    async def _compute_velocity(self, scope: str | None, window_days: int) -> TaskVelocity:
        since = self.clock() - timedelta(days=window_days)
        done = await self.task_repo.list(case_id=scope, status=TaskStatus.DONE.value)
        count = sum(1 for t in done if t.completed_at is not None and t.completed_at >= since)
        return TaskVelocity(
            scope=scope,
            window_days=window_days,
            completed_in_window=count,
            tasks_per_day=round(count / window_days, 1),
        )

    @traced("analytics.bottlenecks")
    async def bottlenecks(
        self, scope: str | None = None, overload_threshold: int | None = None
    ) -> BottleneckAnalysis:
        """Slowest stages, blocked tasks and overloaded users."""
        threshold = (
            self.overload_threshold if overload_threshold is None else overload_threshold
        )
        if threshold < 0:
            raise ValidationException(
                "overload_threshold cannot be negative", field="overload_threshold"
            )
        return await self._cached(
            ("bottlenecks", scope, threshold),
            lambda: self._compute_bottlenecks(scope, threshold),
            BottleneckAnalysis.from_dict,
        )

    async def _compute_bottlenecks(
        self, scope: str | None, threshold: int
    ) -> BottleneckAnalysis:
        tasks = await self.task_repo.list(case_id=scope)

        slowest = []
        for stage in await self.stage_repo.list(scope):
            days = [
                hours_between(t.created_at, t.completed_at) / 24
                for t in tasks
                if t.stage_id == stage.id
                and t.status == TaskStatus.DONE.value
                and t.completed_at is not None
            ]
            if days:
                slowest.append(
                    StageDuration(
                        stage_id=stage.id,
                        stage_name=stage.name,
                        average_days=round(mean(days), 1),
                        completed_tasks=len(days),
                    )
                )
        slowest.sort(key=lambda s: s.average_days, reverse=True)

        blocked = [
            BlockedTask(task_id=task.id, title=task.title, blocked_by=unmet)
            for task, unmet in await self.dependencies.blocked_tasks(tasks)
        ]

        open_counts = Counter(
            t.assigned_to_user_id
            for t in tasks
            if t.status != TaskStatus.DONE.value and t.assigned_to_user_id
        )
        overloaded = sorted(
            (
                OverloadedUser(user_id=user_id, open_tasks=count)
                for user_id, count in open_counts.items()
                if count > threshold
            ),
            key=lambda u: (-u.open_tasks, u.user_id),
        )
        return BottleneckAnalysis(
            scope=scope,
            overload_threshold=threshold,
            slowest_stages=slowest[: self.slowest_stages_limit],
            blocked_tasks=blocked,
            overloaded_users=overloaded,
        )
