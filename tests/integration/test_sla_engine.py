"""SLA rules, task classification and breach scans against the database."""

from datetime import timedelta

import pytest

from caseflow.application.dtos.sla import SLARuleSet
from caseflow.domain.exceptions import (
    NoRuleConfiguredException,
    ResourceNotFoundException,
    ValidationException,
)
from caseflow.shared.utils import utc_now
from tests.factories import register


async def test_set_rule_replaces_same_priority_and_scope(services) -> None:
    first = await services.sla.set_rule(SLARuleSet("high", 10, 20), "admin")
    second = await services.sla.set_rule(SLARuleSet("high", 5, 15, name="tighter"), "admin")

    rules = await services.sla.list_rules()
    assert len(rules) == 1
    assert rules[0].id == first.id == second.id
    assert (rules[0].warning_threshold_hours, rules[0].breach_threshold_hours) == (5, 15)


async def test_invalid_thresholds_rejected(services) -> None:
    with pytest.raises(ValidationException):
        await services.sla.set_rule(SLARuleSet("high", 20, 20), "admin")
    with pytest.raises(ValidationException):
        await services.sla.set_rule(SLARuleSet("high", -1, 5), "admin")
    with pytest.raises(ValidationException):
        await services.sla.set_rule(SLARuleSet("urgent", 1, 5), "admin")


async def test_case_rule_overrides_global(services) -> None:
    await services.sla.set_rule(SLARuleSet("high", 10, 20), "admin")
    await services.sla.set_rule(SLARuleSet("high", 1, 2, scope="case-1"), "admin")
    await register(services, "t1", priority="high", created_at=utc_now() - timedelta(hours=3))
    await register(
        services, "t2", case_id="case-2", priority="high", created_at=utc_now() - timedelta(hours=3)
    )

    scoped = await services.sla.get_status("t1")
    assert scoped.state == "breached"
    assert scoped.rule.scope == "case-1"

    global_status = await services.sla.get_status("t2")
    assert global_status.state == "on_track"
    assert global_status.rule.scope is None


async def test_missing_rule(services) -> None:
    await register(services, "t1", priority="low")
    with pytest.raises(NoRuleConfiguredException):
        await services.sla.get_status("t1")
    status = await services.sla.get_status("t1", use_default=True)
    assert status.rule.is_default
    assert status.state == "on_track"


async def test_delete_rule(services) -> None:
    rule = await services.sla.set_rule(SLARuleSet("low", 1, 2), "admin")
    await services.sla.delete_rule(rule.id, "admin")
    assert await services.sla.list_rules() == []
    with pytest.raises(ResourceNotFoundException):
        await services.sla.delete_rule(rule.id, "admin")


async def test_breach_scan_persists_state_once(services) -> None:
    await register(
        services, "late", priority="critical", assigned_to_user_id="alice",
        created_at=utc_now() - timedelta(hours=10),
    )
    await register(
        services, "soon", priority="critical", assigned_to_user_id="bob",
        created_at=utc_now() - timedelta(hours=5),
    )
    await register(services, "fresh", priority="critical")

    first = await services.sla.check_breaches(scope="case-1")
    assert [b.task_id for b in first.breaches] == ["late"]
    assert [w.task_id for w in first.warnings] == ["soon"]
    assert first.state_changes == 2

    late = await services.tasks.get_task("late")
    assert late.sla_state == "breached"
    assert late.sla_breached_at is not None
    assert (await services.tasks.get_task("soon")).sla_state == "warning"

    alice_inbox = await services.notifications.list_for_user("alice")
    assert sum(1 for n in alice_inbox if n.type == "sla_breach") == 1

    second = await services.sla.check_breaches(scope="case-1")
    assert second.state_changes == 0
    assert len(second.breaches) == 1
    alice_inbox = await services.notifications.list_for_user("alice")
    assert sum(1 for n in alice_inbox if n.type == "sla_breach") == 1


async def test_breach_scan_ignores_done_and_other_cases(services) -> None:
    await register(
        services, "done", priority="critical", status="done",
        created_at=utc_now() - timedelta(hours=30),
    )
    await register(
        services, "elsewhere", case_id="case-9", priority="critical",
        created_at=utc_now() - timedelta(hours=30),
    )
    result = await services.sla.check_breaches(scope="case-1")
    assert result.scanned == 0
    assert result.breaches == []
