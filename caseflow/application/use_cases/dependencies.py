"""Dependency graph service: set prerequisites, reject cycles, answer can-start."""

from __future__ import annotations

from typing import TYPE_CHECKING

from caseflow.application.dtos.dependency import CanStartResult, TaskDependencies
from caseflow.domain.exceptions import (
    CycleDetectedException,
    ResourceNotFoundException,
    ValidationException,
)
from caseflow.domain.graph import find_cycle, unmet_dependencies
from caseflow.shared.enums import AuditAction, AuditEntityType, DependencyType, TaskStatus
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import unique_ids

if TYPE_CHECKING:
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import (
        IDependencyRepository,
        ITaskRepository,
    )
    from caseflow.application.interfaces.services import IUnitOfWork
    from caseflow.application.use_cases.audit import AuditTrailService

logger = get_logger(__name__)

# Serialises blocking-graph writers so two tasks cannot jointly close a cycle.
GRAPH_LOCK_NAME = "caseflow:dependency-graph"


def parse_dependency_type(value: str) -> DependencyType:
    try:
        return DependencyType(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown dependency type {value!r}; expected one of {DependencyType.values()}",
            field="type",
        ) from e


class DependencyService:
    """Maintains per-task dependency sets; blocking edges stay acyclic."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        dependency_repo: "IDependencyRepository",
        uow: "IUnitOfWork",
        audit: "AuditTrailService",
    ) -> None:
        self.task_repo = task_repo
        self.dependency_repo = dependency_repo
        self.uow = uow
        self.audit = audit

    async def _require_task(self, task_id: str) -> "TaskResult":
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    async def set_dependencies(
        self,
        task_id: str,
        depends_on: list[str],
        dependency_type: str,
        actor: str,
    ) -> TaskDependencies:
        """Replace the task's set for one dependency type.

        Blocking sets are checked for cycles against the current graph with
        this task's blocking set replaced. Nothing is written on rejection.

        Raises:
            ResourceNotFoundException: The task or a prerequisite does not exist.
            CycleDetectedException: The new blocking set would close a cycle.
            ValidationException: Unknown type, or an informational self-reference.
        """
        dep_type = parse_dependency_type(dependency_type)
        task = await self._require_task(task_id)
        targets = unique_ids(depends_on)
        found = await self.task_repo.get_many(targets)
        for target in targets:
            if target not in found:
                raise ResourceNotFoundException("task", target)

        if dep_type == DependencyType.BLOCKING:
            await self.uow.lock(GRAPH_LOCK_NAME)
            edges = await self.dependency_repo.blocking_edges()
            cycle = find_cycle(task_id, targets, edges)
            if cycle is not None:
                logger.info("Rejected blocking dependencies for %s: cycle %s", task_id, cycle)
                raise CycleDetectedException(task_id, cycle)
        elif task_id in targets:
            raise ValidationException("A task cannot depend on itself", field="depends_on")

        previous = await self.dependency_repo.replace(task_id, dep_type.value, targets)
        await self.audit.record(
            entity_type=AuditEntityType.DEPENDENCY,
            entity_id=task_id,
            action=AuditAction.DEPENDENCIES_SET,
            user_id=actor,
            case_id=task.case_id,
            previous_value={"type": dep_type.value, "depends_on": previous},
            new_value={"type": dep_type.value, "depends_on": targets},
        )
        return await self.get_dependencies(task_id)

    async def get_dependencies(self, task_id: str) -> TaskDependencies:
        await self._require_task(task_id)
        sets = await self.dependency_repo.get_for_task(task_id)
        return TaskDependencies(
            task_id=task_id,
            blocking=sets[DependencyType.BLOCKING.value],
            informational=sets[DependencyType.INFORMATIONAL.value],
        )

    async def can_start(self, task_id: str) -> CanStartResult:
        """A task can start iff every blocking prerequisite is done."""
        deps = await self.get_dependencies(task_id)
        statuses = await self.task_repo.get_statuses(deps.blocking)
        blocked_by = unmet_dependencies(deps.blocking, statuses)
        return CanStartResult(
            task_id=task_id,
            can_start=not blocked_by,
            blocked_by=blocked_by,
            informational=deps.informational,
        )

    async def blocked_tasks(
        self, tasks: list["TaskResult"]
    ) -> list[tuple["TaskResult", list[str]]]:
        """Open tasks among `tasks` that cannot start, with their unmet prerequisites."""
        edges = await self.dependency_repo.blocking_edges()
        candidates = [
            t for t in tasks
            if t.status != TaskStatus.DONE.value and edges.get(t.id)
        ]
        prerequisite_ids = {dep for t in candidates for dep in edges[t.id]}
        statuses = await self.task_repo.get_statuses(prerequisite_ids)
        blocked = []
        for task in candidates:
            unmet = unmet_dependencies(edges[task.id], statuses)
            if unmet:
                blocked.append((task, unmet))
        return blocked
