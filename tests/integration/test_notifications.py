"""Notification inbox and outbound delivery."""

import pytest

from caseflow.api.v1.dependencies import compose_services
from caseflow.domain.exceptions import ResourceNotFoundException
from tests.factories import register


class _RecordingSink:
    def __init__(self) -> None:
        self.delivered = []

    async def deliver(self, notification) -> None:
        self.delivered.append(notification)


async def test_assignment_is_delivered_to_sink(session) -> None:
    sink = _RecordingSink()
    services = compose_services(session, sink=sink)
    await register(services, "t1", assigned_to_user_id="alice", priority="critical")
    await register(services, "t2")

    assert [(n.user_id, n.type, n.priority) for n in sink.delivered] == [
        ("alice", "task_assigned", "high")
    ]


async def test_inbox_read_state(services) -> None:
    await register(services, "t1", assigned_to_user_id="alice")
    await register(services, "t2", assigned_to_user_id="alice")
    inbox = await services.notifications.list_for_user("alice")
    assert len(inbox) == 2
    assert await services.notifications.unread_count("alice") == 2

    with pytest.raises(ResourceNotFoundException):
        await services.notifications.mark_read(inbox[0].id, "bob")

    read = await services.notifications.mark_read(inbox[0].id, "alice")
    assert read.read is True
    assert read.read_at is not None
    unread = await services.notifications.list_for_user("alice", unread_only=True)
    assert [n.id for n in unread] == [inbox[1].id]

    assert await services.notifications.mark_all_read("alice") == 1
    assert await services.notifications.unread_count("alice") == 0
