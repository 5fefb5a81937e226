"""Audit trail: append-only storage, queries and stats."""

import pytest
from sqlalchemy import select

from caseflow.application.dtos.audit_log import AuditLogQuery
from caseflow.infrastructure.persistence.models import AuditLog
from tests.factories import register


async def test_entries_cannot_be_updated(services, session) -> None:
    await register(services, "t1")
    row = (await session.execute(select(AuditLog).limit(1))).scalar_one()
    row.action = "tampered"
    with pytest.raises(ValueError):
        await session.flush()


async def test_entries_cannot_be_deleted(services, session) -> None:
    await register(services, "t1")
    row = (await session.execute(select(AuditLog).limit(1))).scalar_one()
    await session.delete(row)
    with pytest.raises(ValueError):
        await session.flush()


async def test_query_filters_and_stats(services) -> None:
    await register(services, "t1")
    await register(services, "t2", case_id="case-2")
    await services.tasks.transition_status("t1", "review", "alice")

    by_user = await services.audit.query(AuditLogQuery(user_id="alice"))
    assert [(e.entity_id, e.action) for e in by_user] == [("t1", "status_changed")]

    by_entity = await services.audit.query(AuditLogQuery(entity_type="task", entity_id="t2"))
    assert [e.action for e in by_entity] == ["task_created"]

    assert {e.entity_id for e in await services.audit.query_by_case("case-2")} == {"t2"}

    stats = await services.audit.stats()
    assert stats.total == 3
    assert stats.by_action == {"task_created": 2, "status_changed": 1}
    assert stats.by_entity_type == {"task": 3}
