"""Conditional branching: per-stage rules evaluated against a caller's context."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from caseflow.application.dtos.condition import (
    ConditionalRuleCreate,
    ConditionalRuleResult,
    ConditionEvaluation,
    RuleOutcome,
)
from caseflow.application.dtos.notification import NotificationCreate
from caseflow.application.dtos.task import StageResult, TaskCreate
from caseflow.domain.conditions import (
    matches,
    parse_action,
    parse_operator,
    validate_action,
    validate_condition,
)
from caseflow.domain.exceptions import ResourceNotFoundException, ValidationException
from caseflow.shared.enums import (
    AuditAction,
    AuditEntityType,
    ConditionalAction,
    ConditionOperator,
    NotificationType,
)
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.utils import utc_now

if TYPE_CHECKING:
    from caseflow.application.interfaces.repositories import (
        IConditionalRuleRepository,
        IStageRepository,
        ITaskRepository,
    )
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.notifications import NotificationService
    from caseflow.application.use_cases.reassignment import ReassignmentService
    from caseflow.application.use_cases.tasks import TaskService

logger = get_logger(__name__)


class ConditionalRuleService:
    """Stores stage rules and runs the actions of those whose condition holds.

    Actions act on the rule's stage:
      skip_stage    stamps the stage skipped (once).
      add_task      registers a task in the stage from the rule's template.
      assign_to     reassigns the stage's open tasks to one user.
      set_priority  sets the priority of the stage's open tasks.
      notify        sends one notification.
    """

    def __init__(
        self,
        rule_repo: "IConditionalRuleRepository",
        stage_repo: "IStageRepository",
        task_repo: "ITaskRepository",
        tasks: "TaskService",
        reassignment: "ReassignmentService",
        audit: "AuditTrailService",
        notifications: "NotificationService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.rule_repo = rule_repo
        self.stage_repo = stage_repo
        self.task_repo = task_repo
        self.tasks = tasks
        self.reassignment = reassignment
        self.audit = audit
        self.notifications = notifications
        self.clock = clock

    async def _require_stage(self, stage_id: str) -> StageResult:
        stage = await self.stage_repo.get(stage_id)
        if stage is None:
            raise ResourceNotFoundException("stage", stage_id)
        return stage

    async def add_rule(
        self,
        stage_id: str,
        field: str,
        operator: str,
        value: Any,
        then_action: str,
        then_value: Any,
        actor: str,
    ) -> ConditionalRuleResult:
        """Append a rule to a stage.

        Raises:
            ValidationException: Blank field, unknown operator or action, or a
                value/then_value that does not fit them.
            ResourceNotFoundException: Unknown stage.
        """
        field = field.strip()
        if not field:
            raise ValidationException("Condition field is required", field="field")
        op = parse_operator(operator)
        action = parse_action(then_action)
        stored_value = validate_condition(op, value)
        stored_then = validate_action(action, then_value)
        stage = await self._require_stage(stage_id)

        rule = await self.rule_repo.create(
            ConditionalRuleCreate(
                stage_id=stage.id,
                field=field,
                operator=op.value,
                value=stored_value,
                then_action=action.value,
                then_value=stored_then,
                created_by=actor,
            )
        )
        await self.audit.record(
            entity_type=AuditEntityType.STAGE,
            entity_id=stage.id,
            action=AuditAction.CONDITIONAL_RULE_ADDED,
            user_id=actor,
            case_id=stage.case_id,
            new_value={
                "rule_id": rule.id,
                "field": rule.field,
                "operator": rule.operator,
                "value": rule.value,
                "then_action": rule.then_action,
                "then_value": rule.then_value,
            },
        )
        return rule

    async def list_rules(self, stage_id: str) -> list[ConditionalRuleResult]:
        await self._require_stage(stage_id)
        return await self.rule_repo.list_for_stage(stage_id)

    async def evaluate(
        self, stage_id: str, context: Mapping[str, Any], actor: str
    ) -> ConditionEvaluation:
        """Evaluate every rule of the stage in order; run each matching rule's action.

        A field missing from ``context`` compares as None. Each triggered rule
        is audited as conditional_rule_triggered on the stage.

        Raises:
            ResourceNotFoundException: Unknown stage.
        """
        stage = await self._require_stage(stage_id)
        outcomes: list[RuleOutcome] = []
        for rule in await self.rule_repo.list_for_stage(stage_id):
            if not matches(rule.field, ConditionOperator(rule.operator), rule.value, context):
                outcomes.append(RuleOutcome(rule=rule, executed=False))
                continue
            affected = await self._run_action(rule, stage, actor)
            await self.audit.record(
                entity_type=AuditEntityType.STAGE,
                entity_id=stage.id,
                action=AuditAction.CONDITIONAL_RULE_TRIGGERED,
                user_id=actor,
                case_id=stage.case_id,
                new_value={
                    "rule_id": rule.id,
                    "then_action": rule.then_action,
                    "then_value": rule.then_value,
                    "affected_task_ids": affected,
                },
                metadata={"field": rule.field, "actual": context.get(rule.field)},
            )
            logger.info(
                "Conditional rule %s on stage %s ran %s", rule.id, stage.id, rule.then_action
            )
            outcomes.append(RuleOutcome(rule=rule, executed=True, affected_task_ids=affected))
        return ConditionEvaluation(stage_id=stage.id, actions_triggered=outcomes)

    async def _run_action(
        self, rule: ConditionalRuleResult, stage: StageResult, actor: str
    ) -> list[str]:
        action = ConditionalAction(rule.then_action)
        if action == ConditionalAction.SKIP_STAGE:
            await self._skip_stage(stage, rule, actor)
            return []
        if action == ConditionalAction.ADD_TASK:
            template = rule.then_value
            task = await self.tasks.register_task(
                TaskCreate(
                    case_id=stage.case_id,
                    stage_id=stage.id,
                    title=template["title"],
                    description=template.get("description"),
                    priority=template["priority"],
                    assigned_to_user_id=template.get("assigned_to_user_id"),
                ),
                actor,
            )
            return [task.id]
        if action == ConditionalAction.ASSIGN_TO:
            return await self._assign_open_tasks(stage, rule, actor)
        if action == ConditionalAction.SET_PRIORITY:
            return await self._set_open_task_priority(stage, rule, actor)
        await self.notifications.dispatch(
            NotificationCreate(
                user_id=rule.then_value["user_id"],
                type=NotificationType.TASK_ASSIGNED.value,
                title=rule.then_value["title"],
                message=rule.then_value["message"],
                case_id=stage.case_id,
            )
        )
        return []

    async def _skip_stage(
        self, stage: StageResult, rule: ConditionalRuleResult, actor: str
    ) -> None:
        skipped, changed = await self.stage_repo.mark_skipped(stage.id, self.clock())
        if not changed:
            return
        await self.audit.record(
            entity_type=AuditEntityType.STAGE,
            entity_id=stage.id,
            action=AuditAction.STAGE_SKIPPED,
            user_id=actor,
            case_id=stage.case_id,
            new_value={"skipped_at": skipped.skipped_at},
            metadata={"rule_id": rule.id},
        )

    async def _assign_open_tasks(
        self, stage: StageResult, rule: ConditionalRuleResult, actor: str
    ) -> list[str]:
        assignee = rule.then_value
        moved: list[str] = []
        for task in await self.task_repo.list(stage_id=stage.id, open_only=True):
            if task.assigned_to_user_id == assignee:
                continue
            await self.reassignment.reassign_task(
                task.id, assignee, actor, reason=f"conditional rule {rule.id}"
            )
            moved.append(task.id)
        return moved

    async def _set_open_task_priority(
        self, stage: StageResult, rule: ConditionalRuleResult, actor: str
    ) -> list[str]:
        priority = rule.then_value
        changed: list[str] = []
        for task in await self.task_repo.list(stage_id=stage.id, open_only=True):
            if task.priority == priority:
                continue
            await self.task_repo.update(task.id, priority=priority)
            await self.audit.record(
                entity_type=AuditEntityType.TASK,
                entity_id=task.id,
                action=AuditAction.PRIORITY_CHANGED,
                user_id=actor,
                case_id=task.case_id,
                previous_value={"priority": task.priority},
                new_value={"priority": priority},
                metadata={"rule_id": rule.id},
            )
            changed.append(task.id)
        return changed
