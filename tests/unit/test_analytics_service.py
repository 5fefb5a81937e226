"""AnalyticsService unit tests: calculations and cache behaviour."""

from dataclasses import asdict
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from caseflow.application.dtos.analytics import TaskVelocity
from caseflow.application.dtos.sla import TaskSLAStatus
from caseflow.application.dtos.task import StageResult
from caseflow.application.use_cases.analytics import AnalyticsService
from caseflow.application.use_cases.sla import default_rule
from caseflow.domain.exceptions import ValidationException
from tests.factories import NOW, make_task


def _key(*parts) -> str:
    return ":".join(str(p) for p in parts)


def _sla_status(task, state: str) -> TaskSLAStatus:
    return TaskSLAStatus(task_id=task.id, state=state, elapsed_hours=0.0, rule=default_rule("medium"))


@pytest.fixture
def repos():
    task_repo = AsyncMock()
    stage_repo = AsyncMock()
    stage_repo.list = AsyncMock(return_value=[])
    time_repo = AsyncMock()
    time_repo.total_minutes = AsyncMock(return_value=0)
    time_repo.average_entry_hours = AsyncMock(return_value=None)
    dependencies = AsyncMock()
    dependencies.blocked_tasks = AsyncMock(return_value=[])
    sla = AsyncMock()
    sla.classify_tasks = AsyncMock(return_value=[])
    return task_repo, stage_repo, time_repo, dependencies, sla


@pytest.fixture
def cache():
    mock = MagicMock()
    mock.is_available.return_value = True
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    return mock


def _service(repos, **kwargs) -> AnalyticsService:
    return AnalyticsService(*repos, clock=lambda: NOW, **kwargs)


async def test_velocity_counts_trailing_window(repos) -> None:
    task_repo = repos[0]
    task_repo.list = AsyncMock(
        return_value=[
            make_task("a", status="done", completed_at=NOW - timedelta(days=1)),
            make_task("b", status="done", completed_at=NOW - timedelta(days=3)),
            make_task("c", status="done", completed_at=NOW - timedelta(days=10)),
        ]
    )
    result = await _service(repos).velocity("case-1", window_days=7)
    assert result.completed_in_window == 2
    assert result.tasks_per_day == 0.3
    task_repo.list.assert_awaited_once_with(case_id="case-1", status="done")


async def test_velocity_rejects_empty_window(repos) -> None:
    with pytest.raises(ValidationException):
        await _service(repos).velocity(window_days=0)


async def test_metrics_aggregates_tasks(repos) -> None:
    task_repo, stage_repo, time_repo, _, sla = repos
    stage_repo.list = AsyncMock(
        return_value=[
            StageResult(id="s1", case_id="case-1", name="Intake", order=0, created_at=NOW),
            StageResult(id="s2", case_id="case-1", name="Review", order=1, created_at=NOW),
        ]
    )
    tasks = [
        make_task(
            "d1",
            stage_id="s1",
            status="done",
            started_at=NOW - timedelta(hours=5),
            completed_at=NOW - timedelta(hours=2),
            sla_breached_at=NOW - timedelta(hours=3),
        ),
        make_task("o1", stage_id="s1", status="in-progress", priority="high"),
        make_task("o2", stage_id="s1", assigned_to_user_id=None),
    ]
    task_repo.list = AsyncMock(return_value=tasks)
    sla.classify_tasks = AsyncMock(
        return_value=[(tasks[1], _sla_status(tasks[1], "breached")), (tasks[2], _sla_status(tasks[2], "on_track"))]
    )
    time_repo.total_minutes = AsyncMock(return_value=95)
    time_repo.average_entry_hours = AsyncMock(return_value=2.04)

    metrics = await _service(repos, timeline_days=3).metrics("case-1")

    assert metrics.total_tasks == 3
    assert metrics.completed_tasks == 1
    assert metrics.tasks_by_status["done"] == 1
    assert metrics.tasks_by_status["review"] == 0
    assert metrics.tasks_by_priority == {"low": 0, "medium": 2, "high": 1, "critical": 0}
    assert metrics.tasks_by_assignee == {"owner": 2, "unassigned": 1}
    assert metrics.overdue_tasks == 1
    assert metrics.sla_breaches == 1
    assert metrics.average_completion_time == 2.0
    assert metrics.average_cycle_time == 3.0
    time_repo.average_entry_hours.assert_awaited_once_with(case_id="case-1")
    assert metrics.tracked_hours == 1.58
    progress = {p.stage_id: p for p in metrics.stage_progress}
    assert progress["s1"].percentage == 33
    assert progress["s2"].total == 0 and progress["s2"].percentage == 0
    assert [p.date for p in metrics.timeline_data] == ["2026-02-28", "2026-03-01", "2026-03-02"]
    assert metrics.timeline_data[-1].created == 3
    assert metrics.timeline_data[-1].completed == 1


async def test_bottlenecks_orders_overloaded_users(repos) -> None:
    task_repo, stage_repo, _, dependencies, _ = repos
    tasks = (
        [make_task(f"a{i}", assigned_to_user_id="alice") for i in range(3)]
        + [make_task(f"b{i}", assigned_to_user_id="bob") for i in range(2)]
        + [make_task("c0", assigned_to_user_id="carol")]
        + [make_task("z0", assigned_to_user_id="zed"), make_task("z1", assigned_to_user_id="zed")]
        + [make_task("done", assigned_to_user_id="carol", status="done")]
    )
    task_repo.list = AsyncMock(return_value=tasks)
    dependencies.blocked_tasks = AsyncMock(return_value=[(tasks[0], ["b0"])])

    result = await _service(repos).bottlenecks(overload_threshold=1)

    assert [(u.user_id, u.open_tasks) for u in result.overloaded_users] == [
        ("alice", 3),
        ("bob", 2),
        ("zed", 2),
    ]
    assert result.blocked_tasks[0].task_id == "a0"
    assert result.blocked_tasks[0].blocked_by == ["b0"]
    assert result.overload_threshold == 1


async def test_bottlenecks_slowest_stages_descending(repos) -> None:
    task_repo, stage_repo, _, _, _ = repos
    stage_repo.list = AsyncMock(
        return_value=[
            StageResult(id="fast", case_id="c", name="Fast", order=0, created_at=NOW),
            StageResult(id="slow", case_id="c", name="Slow", order=1, created_at=NOW),
            StageResult(id="empty", case_id="c", name="Empty", order=2, created_at=NOW),
        ]
    )
    start = NOW - timedelta(days=10)
    task_repo.list = AsyncMock(
        return_value=[
            make_task("f", stage_id="fast", status="done", created_at=start, completed_at=start + timedelta(days=1)),
            make_task("s1", stage_id="slow", status="done", created_at=start, completed_at=start + timedelta(days=4)),
            make_task("s2", stage_id="slow", status="done", created_at=start, completed_at=start + timedelta(days=5)),
        ]
    )

    result = await _service(repos).bottlenecks()

    assert [(s.stage_id, s.average_days) for s in result.slowest_stages] == [
        ("slow", 4.5),
        ("fast", 1.0),
    ]


async def test_bottlenecks_rejects_negative_threshold(repos) -> None:
    with pytest.raises(ValidationException):
        await _service(repos).bottlenecks(overload_threshold=-1)


async def test_cache_hit_skips_repositories(repos, cache) -> None:
    cached = TaskVelocity(scope=None, window_days=7, completed_in_window=4, tasks_per_day=0.6)
    cache.get = AsyncMock(return_value=asdict(cached))

    result = await _service(repos, cache=cache, key_builder=_key).velocity()

    assert result == cached
    cache.get.assert_awaited_once_with("velocity:None:7")
    repos[0].list.assert_not_awaited()
    cache.set.assert_not_awaited()


async def test_cache_miss_computes_and_stores(repos, cache) -> None:
    repos[0].list = AsyncMock(return_value=[])

    result = await _service(repos, cache=cache, key_builder=_key, cache_ttl=30).velocity("case-9", 14)

    cache.set.assert_awaited_once_with("velocity:case-9:14", asdict(result), ttl=30)


async def test_unavailable_cache_is_bypassed(repos, cache) -> None:
    cache.is_available.return_value = False
    repos[0].list = AsyncMock(return_value=[])

    await _service(repos, cache=cache, key_builder=_key).velocity()

    cache.get.assert_not_awaited()
    cache.set.assert_not_awaited()
