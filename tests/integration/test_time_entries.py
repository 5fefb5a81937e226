"""Time tracking with a controllable clock."""

from datetime import timedelta

import pytest

from caseflow.application.use_cases import TimeTrackingService
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.infrastructure.persistence.repositories import TaskRepository, TimeEntryRepository
from tests.factories import NOW, register


class _Clock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


@pytest.fixture
async def timer(services, session):
    await register(services, "t1")
    clock = _Clock()
    svc = TimeTrackingService(
        TaskRepository(session), TimeEntryRepository(session), services.audit, clock=clock
    )
    return svc, clock


async def test_start_stop_rounds_to_minutes(timer) -> None:
    svc, clock = timer
    entry = await svc.start("t1", "alice", description="drafting")
    assert entry.end_time is None

    clock.now = NOW + timedelta(minutes=90, seconds=20)
    stopped = await svc.stop("t1", "alice")
    assert stopped.id == entry.id
    assert stopped.duration_minutes == 90
    assert await svc.total_minutes("t1") == 90


async def test_one_running_timer_per_user(timer) -> None:
    svc, _ = timer
    await svc.start("t1", "alice")
    with pytest.raises(ValidationException):
        await svc.start("t1", "alice")
    other = await svc.start("t1", "bob", billable=False)
    assert other.billable is False


async def test_stop_without_timer(timer) -> None:
    svc, _ = timer
    with pytest.raises(ResourceNotFoundException):
        await svc.stop("t1", "alice")


async def test_unknown_task(timer) -> None:
    svc, _ = timer
    with pytest.raises(ResourceNotFoundException):
        await svc.start("ghost", "alice")


async def test_entries_newest_first(timer) -> None:
    svc, clock = timer
    await svc.start("t1", "alice")
    clock.now = NOW + timedelta(minutes=10)
    await svc.stop("t1", "alice")
    clock.now = NOW + timedelta(minutes=20)
    await svc.start("t1", "alice")

    entries = await svc.list_entries("t1")
    assert [e.end_time is None for e in entries] == [True, False]
    assert await svc.total_minutes("t1") == 10
