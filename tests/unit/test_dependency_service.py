"""DependencyService unit tests with mocked repositories."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from caseflow.application.use_cases.dependencies import DependencyService
from caseflow.domain.exceptions import (
    CycleDetectedException,
    ResourceNotFoundException,
    ValidationException,
)
from tests.factories import make_task


class _FakeUnitOfWork:
    def __init__(self) -> None:
        self.locks: list[str] = []

    @asynccontextmanager
    async def savepoint(self):
        yield

    async def lock(self, name: str) -> None:
        self.locks.append(name)


@pytest.fixture
def service_mocks():
    task_repo = AsyncMock()
    dependency_repo = AsyncMock()
    audit = AsyncMock()
    uow = _FakeUnitOfWork()
    tasks = {tid: make_task(tid) for tid in ("A", "B", "C")}
    task_repo.get = AsyncMock(side_effect=lambda tid: tasks.get(tid))
    task_repo.get_many = AsyncMock(
        side_effect=lambda ids: {tid: tasks[tid] for tid in ids if tid in tasks}
    )
    dependency_repo.get_for_task = AsyncMock(
        return_value={"blocking": [], "informational": []}
    )
    dependency_repo.replace = AsyncMock(return_value=[])
    svc = DependencyService(task_repo, dependency_repo, uow, audit)
    return svc, task_repo, dependency_repo, audit, uow


async def test_blocking_cycle_is_rejected_without_writing(service_mocks) -> None:
    """B -> C -> A exists; A -> B would close a cycle."""
    svc, _, dependency_repo, audit, uow = service_mocks
    dependency_repo.blocking_edges = AsyncMock(return_value={"B": ["C"], "C": ["A"]})

    with pytest.raises(CycleDetectedException) as exc_info:
        await svc.set_dependencies("A", ["B"], "blocking", "actor")

    assert exc_info.value.details["cycle"] == ["A", "B", "C", "A"]
    dependency_repo.replace.assert_not_awaited()
    audit.record.assert_not_awaited()
    assert uow.locks, "graph lock must be taken before reading edges"


async def test_blocking_set_is_deduplicated_and_audited(service_mocks) -> None:
    svc, _, dependency_repo, audit, _ = service_mocks
    dependency_repo.blocking_edges = AsyncMock(return_value={})

    await svc.set_dependencies("A", ["B", "C", "B"], "blocking", "actor")

    dependency_repo.replace.assert_awaited_once_with("A", "blocking", ["B", "C"])
    kwargs = audit.record.call_args.kwargs
    assert kwargs["new_value"] == {"type": "blocking", "depends_on": ["B", "C"]}
    assert kwargs["user_id"] == "actor"


async def test_unknown_prerequisite_is_not_found(service_mocks) -> None:
    svc, _, dependency_repo, _, _ = service_mocks
    with pytest.raises(ResourceNotFoundException):
        await svc.set_dependencies("A", ["missing"], "blocking", "actor")
    dependency_repo.replace.assert_not_awaited()


async def test_informational_self_reference_is_invalid(service_mocks) -> None:
    svc, _, _, _, _ = service_mocks
    with pytest.raises(ValidationException):
        await svc.set_dependencies("A", ["A"], "informational", "actor")


async def test_informational_edges_skip_cycle_check(service_mocks) -> None:
    """Informational edges may point 'backwards' without being a cycle."""
    svc, _, dependency_repo, _, uow = service_mocks
    dependency_repo.blocking_edges = AsyncMock(return_value={"B": ["A"]})
    await svc.set_dependencies("A", ["B"], "informational", "actor")
    dependency_repo.blocking_edges.assert_not_awaited()
    assert uow.locks == []


async def test_unknown_dependency_type(service_mocks) -> None:
    svc, _, _, _, _ = service_mocks
    with pytest.raises(ValidationException):
        await svc.set_dependencies("A", ["B"], "soft", "actor")


async def test_can_start_lists_unfinished_blockers(service_mocks) -> None:
    svc, task_repo, dependency_repo, _, _ = service_mocks
    dependency_repo.get_for_task = AsyncMock(
        return_value={"blocking": ["B", "C"], "informational": []}
    )
    task_repo.get_statuses = AsyncMock(return_value={"B": "done", "C": "review"})

    result = await svc.can_start("A")

    assert result.can_start is False
    assert result.blocked_by == ["C"]
