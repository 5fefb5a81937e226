"""Parallel group evaluator: create groups and compute their completion."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from caseflow.application.dtos.parallel import (
    ParallelGroupCreate,
    ParallelGroupResult,
    ParallelGroupStatusResult,
)
from caseflow.application.dtos.task import GroupEvaluation
from caseflow.core.constants import MIN_PARALLEL_GROUP_SIZE
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.domain.parallel import evaluate, validate_group
from caseflow.shared.enums import AuditAction, AuditEntityType, CompletionRule
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import unique_ids

if TYPE_CHECKING:
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import (
        IParallelGroupRepository,
        IStageRepository,
        ITaskRepository,
    )
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.notifications import NotificationService

logger = get_logger(__name__)


def parse_rule(value: str) -> CompletionRule:
    try:
        return CompletionRule(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown completion rule {value!r}; expected one of {CompletionRule.values()}",
            field="completion_rule",
        ) from e


def _status_of(
    group: ParallelGroupResult, statuses: dict[str, str]
) -> ParallelGroupStatusResult:
    snapshot = evaluate(
        CompletionRule(group.completion_rule),
        group.completion_threshold,
        [statuses.get(task_id, "") for task_id in group.task_ids],
    )
    return ParallelGroupStatusResult(
        group_id=group.id,
        completion_rule=group.completion_rule,
        completion_threshold=group.completion_threshold,
        completed_count=snapshot.completed_count,
        total_count=snapshot.total_count,
        percentage=snapshot.percentage,
        is_complete=snapshot.is_complete,
    )


class ParallelGroupService:
    """Groups of tasks in a stage that complete under an all/any/percentage rule."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        stage_repo: "IStageRepository",
        group_repo: "IParallelGroupRepository",
        audit: "AuditTrailService",
        notifications: "NotificationService",
    ) -> None:
        self.task_repo = task_repo
        self.stage_repo = stage_repo
        self.group_repo = group_repo
        self.audit = audit
        self.notifications = notifications

    async def create(self, data: ParallelGroupCreate, actor: str) -> ParallelGroupResult:
        """Create a group of at least two distinct existing tasks.

        Raises:
            ValidationException: Unknown rule, too few tasks, or bad percentage threshold.
            ResourceNotFoundException: Unknown stage or member task.
        """
        rule = parse_rule(data.completion_rule)
        stage = await self.stage_repo.get(data.stage_id)
        if stage is None:
            raise ResourceNotFoundException("stage", data.stage_id)
        task_ids = unique_ids(data.task_ids)
        threshold = validate_group(task_ids, rule, data.completion_threshold)
        found = await self.task_repo.get_many(task_ids)
        for task_id in task_ids:
            if task_id not in found:
                raise ResourceNotFoundException("task", task_id)

        group = await self.group_repo.create(
            replace(
                data,
                task_ids=task_ids,
                completion_rule=rule.value,
                completion_threshold=threshold,
            )
        )
        await self.audit.record(
            entity_type=AuditEntityType.PARALLEL_GROUP,
            entity_id=group.id,
            action=AuditAction.PARALLEL_GROUP_CREATED,
            user_id=actor,
            case_id=stage.case_id,
            new_value={
                "stage_id": group.stage_id,
                "task_ids": group.task_ids,
                "completion_rule": group.completion_rule,
                "completion_threshold": group.completion_threshold,
            },
        )
        return group

    async def _require_group(self, group_id: str) -> ParallelGroupResult:
        group = await self.group_repo.get(group_id)
        if group is None:
            raise ResourceNotFoundException("parallel_group", group_id)
        return group

    async def get(self, group_id: str) -> ParallelGroupResult:
        return await self._require_group(group_id)

    async def status(self, group_id: str) -> ParallelGroupStatusResult:
        """Completion snapshot. Read-only; safe to call repeatedly."""
        group = await self._require_group(group_id)
        statuses = await self.task_repo.get_statuses(group.task_ids)
        return _status_of(group, statuses)

    async def list_for_stage(self, stage_id: str) -> list[ParallelGroupResult]:
        return await self.group_repo.list_for_stage(stage_id)

    async def groups_containing(self, task_id: str) -> list[ParallelGroupResult]:
        return await self.group_repo.list_containing(task_id)

    async def remove_member(
        self, group_id: str, task_id: str, actor: str
    ) -> ParallelGroupResult:
        """Drop a task from the group; completion is then computed on the remaining members.

        Raises:
            ValidationException: Task not a member, or fewer than two members would remain.
        """
        group = await self._require_group(group_id)
        if task_id not in group.task_ids:
            raise ValidationException(
                f"Task {task_id} is not a member of group {group_id}", field="task_id"
            )
        remaining = [t for t in group.task_ids if t != task_id]
        if len(remaining) < MIN_PARALLEL_GROUP_SIZE:
            raise ValidationException(
                f"A parallel group needs at least {MIN_PARALLEL_GROUP_SIZE} tasks",
                field="task_id",
            )
        updated = await self.group_repo.set_members(
            group_id, remaining, expected_version=group.version
        )
        stage = await self.stage_repo.get(group.stage_id)
        await self.audit.record(
            entity_type=AuditEntityType.PARALLEL_GROUP,
            entity_id=group_id,
            action=AuditAction.PARALLEL_MEMBER_REMOVED,
            user_id=actor,
            case_id=stage.case_id if stage else None,
            previous_value={"task_ids": group.task_ids},
            new_value={"task_ids": updated.task_ids},
        )
        return updated

    async def on_task_status_changed(
        self, task: "TaskResult", previous_status: str
    ) -> list[GroupEvaluation]:
        """Re-evaluate every group containing the task.

        A group that goes from incomplete to complete because of this change
        notifies each distinct owner of its member tasks.
        """
        evaluations = []
        for group in await self.group_repo.list_containing(task.id):
            members = await self.task_repo.get_many(group.task_ids)
            after_statuses = {tid: t.status for tid, t in members.items()}
            before_statuses = {**after_statuses, task.id: previous_status}
            after = _status_of(group, after_statuses)
            before = _status_of(group, before_statuses)
            became_complete = after.is_complete and not before.is_complete
            if became_complete:
                owners = unique_ids(
                    members[tid].assigned_to_user_id or ""
                    for tid in group.task_ids
                    if tid in members
                )
                await self.notifications.stage_completed(group, task, owners)
                logger.info("Parallel group %s completed by task %s", group.id, task.id)
            evaluations.append(
                GroupEvaluation(
                    group_id=group.id,
                    completed_count=after.completed_count,
                    total_count=after.total_count,
                    percentage=after.percentage,
                    is_complete=after.is_complete,
                    became_complete=became_complete,
                )
            )
        return evaluations
