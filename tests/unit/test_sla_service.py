"""SLAService unit tests: rule resolution and breach scans with mocked ports."""

from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from caseflow.application.dtos.sla import SLARuleResult
from caseflow.application.use_cases.sla import SLAService
from caseflow.domain.exceptions import ConflictRetryException, NoRuleConfiguredException
from tests.factories import NOW, make_task


class _FakeUnitOfWork:
    @asynccontextmanager
    async def savepoint(self):
        yield

    async def lock(self, name: str) -> None:
        return None


def _rule(priority: str, scope: str | None, warning: float, breach: float) -> SLARuleResult:
    return SLARuleResult(
        id=f"rule-{priority}-{scope}",
        name=None,
        priority=priority,
        scope=scope,
        warning_threshold_hours=warning,
        breach_threshold_hours=breach,
        auto_notify=True,
    )


@pytest.fixture
def sla_mocks():
    task_repo = AsyncMock()
    rule_repo = AsyncMock()
    rule_repo.list = AsyncMock(return_value=[])
    rule_repo.find = AsyncMock(return_value=None)
    audit = AsyncMock()
    notifications = AsyncMock()
    svc = SLAService(
        task_repo, rule_repo, _FakeUnitOfWork(), audit, notifications, clock=lambda: NOW
    )
    return svc, task_repo, rule_repo, audit, notifications


async def test_resolve_prefers_case_rule_over_global(sla_mocks) -> None:
    svc, _, rule_repo, _, _ = sla_mocks
    scoped = _rule("high", "case-1", 1, 2)
    rule_repo.find = AsyncMock(side_effect=lambda p, s: scoped if s == "case-1" else None)
    assert await svc.resolve_rule("high", "case-1") == scoped


async def test_resolve_without_rule_raises_unless_default(sla_mocks) -> None:
    svc, _, rule_repo, _, _ = sla_mocks
    rule_repo.find = AsyncMock(return_value=None)
    with pytest.raises(NoRuleConfiguredException):
        await svc.resolve_rule("high", "case-1")
    default = await svc.resolve_rule("high", "case-1", use_default=True)
    assert default.is_default
    assert (default.warning_threshold_hours, default.breach_threshold_hours) == (24.0, 48.0)


async def test_breach_scan_sorts_and_records_changes(sla_mocks) -> None:
    """Critical defaults are warning at 4h and breach at 8h."""
    svc, task_repo, _, audit, notifications = sla_mocks
    tasks = [
        make_task("fresh", priority="critical", created_at=NOW - timedelta(hours=1)),
        make_task("warn-late", priority="critical", created_at=NOW - timedelta(hours=7)),
        make_task("warn-early", priority="critical", created_at=NOW - timedelta(hours=5)),
        make_task("over-2", priority="critical", created_at=NOW - timedelta(hours=10)),
        make_task("over-12", priority="critical", created_at=NOW - timedelta(hours=20)),
    ]
    task_repo.list = AsyncMock(return_value=tasks)

    result = await svc.check_breaches()

    assert [w.task_id for w in result.warnings] == ["warn-late", "warn-early"]
    assert [b.task_id for b in result.breaches] == ["over-12", "over-2"]
    assert result.scanned == 5
    assert result.state_changes == 4
    assert result.errors == []
    assert notifications.sla_warning.await_count == 2
    assert notifications.sla_breach.await_count == 2
    breach_updates = [
        c for c in task_repo.update.call_args_list if c.kwargs.get("sla_state") == "breached"
    ]
    assert all(c.kwargs["sla_breached_at"] == NOW for c in breach_updates)
    task_repo.list.assert_awaited_once_with(case_id=None, open_only=True)
    assert audit.record.await_count == 4


async def test_breach_scan_skips_tasks_already_in_state(sla_mocks) -> None:
    svc, task_repo, _, audit, notifications = sla_mocks
    task_repo.list = AsyncMock(
        return_value=[
            make_task(
                "t1",
                priority="critical",
                created_at=NOW - timedelta(hours=10),
                sla_state="breached",
                sla_breached_at=NOW - timedelta(hours=2),
            )
        ]
    )

    result = await svc.check_breaches()

    assert len(result.breaches) == 1
    assert result.state_changes == 0
    task_repo.update.assert_not_awaited()
    notifications.sla_breach.assert_not_awaited()


async def test_breach_scan_without_notify(sla_mocks) -> None:
    svc, task_repo, _, _, notifications = sla_mocks
    task_repo.list = AsyncMock(
        return_value=[make_task("t1", priority="critical", created_at=NOW - timedelta(hours=9))]
    )
    result = await svc.check_breaches(notify=False)
    assert result.state_changes == 1
    notifications.sla_breach.assert_not_awaited()


async def test_breach_scan_reports_per_task_errors(sla_mocks) -> None:
    svc, task_repo, _, _, _ = sla_mocks
    task_repo.list = AsyncMock(
        return_value=[
            make_task("bad", priority="critical", created_at=NOW - timedelta(hours=9)),
            make_task("good", priority="critical", created_at=NOW - timedelta(hours=9)),
        ]
    )

    async def update(task_id, **changes):
        if task_id == "bad":
            raise ConflictRetryException("task", task_id)

    task_repo.update = AsyncMock(side_effect=update)

    result = await svc.check_breaches()

    assert result.state_changes == 1
    assert [(e.task_id, e.error_code) for e in result.errors] == [("bad", "CONFLICT_RETRY")]
    assert {b.task_id for b in result.breaches} == {"bad", "good"}


async def test_done_tasks_never_breach(sla_mocks) -> None:
    svc, task_repo, rule_repo, _, _ = sla_mocks
    task_repo.get = AsyncMock(
        return_value=make_task(
            "t1", priority="critical", status="done", created_at=NOW - timedelta(days=3)
        )
    )
    status = await svc.get_status("t1", use_default=True)
    assert status.state == "on_track"
