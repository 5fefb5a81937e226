"""SLA rule engine: rules per priority/scope, task classification and breach scans."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime
from typing import TYPE_CHECKING

from caseflow.application.dtos.sla import (
    BreachScanError,
    BreachScanItem,
    BreachScanResult,
    SLARuleResult,
    SLARuleSet,
    TaskSLAStatus,
)
from caseflow.core.constants import SYSTEM_ACTOR
from caseflow.domain.exceptions import (
    NoRuleConfiguredException,
    ResourceNotFoundException,
    ValidationException,
    WorkflowEngineException,
)
from caseflow.domain.sla import SLAThresholds, classify, elapsed_hours
from caseflow.shared.enums import (
    AuditAction,
    AuditEntityType,
    SLAState,
    TaskPriority,
    TaskStatus,
)
from caseflow.shared.telemetry.logging import get_logger
from caseflow.shared.telemetry.tracing import add_span_attributes, traced
from caseflow.shared.utils import utc_now

if TYPE_CHECKING:
    from caseflow.application.dtos.task import TaskResult
    from caseflow.application.interfaces.repositories import (
        ISLARuleRepository,
        ITaskRepository,
    )
    from caseflow.application.interfaces.services import IUnitOfWork
    from caseflow.application.use_cases.audit import AuditTrailService
    from caseflow.application.use_cases.notifications import NotificationService

logger = get_logger(__name__)


def parse_priority(value: str) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown priority {value!r}; expected one of {TaskPriority.values()}",
            field="priority",
        ) from e


def default_rule(priority: str) -> SLARuleResult:
    """Built-in rule for a priority (not persisted)."""
    thresholds = SLAThresholds.default_for(priority)
    return SLARuleResult(
        id=None,
        name=f"default-{priority}",
        priority=priority,
        scope=None,
        warning_threshold_hours=thresholds.warning_hours,
        breach_threshold_hours=thresholds.breach_hours,
        auto_notify=True,
        is_default=True,
    )


class SLAService:
    """Resolves SLA rules and classifies tasks against them."""

    def __init__(
        self,
        task_repo: "ITaskRepository",
        rule_repo: "ISLARuleRepository",
        uow: "IUnitOfWork",
        audit: "AuditTrailService",
        notifications: "NotificationService",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.task_repo = task_repo
        self.rule_repo = rule_repo
        self.uow = uow
        self.audit = audit
        self.notifications = notifications
        self.clock = clock

    async def set_rule(self, data: SLARuleSet, actor: str) -> SLARuleResult:
        """Create or replace the rule for (priority, scope).

        Raises:
            ValidationException: Unknown priority or thresholds not 0 <= warning < breach.
        """
        parse_priority(data.priority)
        SLAThresholds(data.warning_threshold_hours, data.breach_threshold_hours)
        rule, previous = await self.rule_repo.upsert(data)
        assert rule.id is not None
        await self.audit.record(
            entity_type=AuditEntityType.SLA_RULE,
            entity_id=rule.id,
            action=AuditAction.SLA_RULE_SET,
            user_id=actor,
            case_id=rule.scope,
            previous_value=asdict(previous) if previous else None,
            new_value=asdict(rule),
        )
        return rule

    async def list_rules(self, scope: str | None = None) -> list[SLARuleResult]:
        return await self.rule_repo.list(scope)

    async def delete_rule(self, rule_id: str, actor: str) -> None:
        deleted = await self.rule_repo.delete(rule_id)
        if deleted is None:
            raise ResourceNotFoundException("sla_rule", rule_id)
        await self.audit.record(
            entity_type=AuditEntityType.SLA_RULE,
            entity_id=rule_id,
            action=AuditAction.SLA_RULE_DELETED,
            user_id=actor,
            case_id=deleted.scope,
            previous_value=asdict(deleted),
        )

    async def resolve_rule(
        self, priority: str, case_id: str | None, use_default: bool = False
    ) -> SLARuleResult:
        """Case-scoped rule, then global rule, then (if allowed) the built-in default."""
        if case_id is not None:
            scoped = await self.rule_repo.find(priority, case_id)
            if scoped is not None:
                return scoped
        global_rule = await self.rule_repo.find(priority, None)
        if global_rule is not None:
            return global_rule
        if use_default:
            return default_rule(priority)
        raise NoRuleConfiguredException(priority, case_id)

    def _status_for(
        self, task: "TaskResult", rule: SLARuleResult, now: datetime
    ) -> TaskSLAStatus:
        thresholds = SLAThresholds(rule.warning_threshold_hours, rule.breach_threshold_hours)
        result = classify(
            elapsed_hours(task.created_at, task.started_at, now),
            thresholds,
            is_done=task.status == TaskStatus.DONE.value,
        )
        return TaskSLAStatus(
            task_id=task.id,
            state=result.state.value,
            elapsed_hours=round(result.elapsed_hours, 2),
            rule=rule,
            hours_remaining=(
                round(result.hours_remaining, 2) if result.hours_remaining is not None else None
            ),
            hours_overdue=(
                round(result.hours_overdue, 2) if result.hours_overdue is not None else None
            ),
        )

    async def get_status(self, task_id: str, use_default: bool = False) -> TaskSLAStatus:
        """Classify one task now.

        Raises:
            ResourceNotFoundException: Unknown task.
            NoRuleConfiguredException: No scoped or global rule and use_default is False.
        """
        task = await self.task_repo.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        rule = await self.resolve_rule(task.priority, task.case_id, use_default)
        return self._status_for(task, rule, self.clock())

    async def classify_tasks(
        self, tasks: list["TaskResult"]
    ) -> list[tuple["TaskResult", TaskSLAStatus]]:
        """Classify many tasks with one rule lookup (defaults where no rule matches)."""
        rules = {(r.priority, r.scope): r for r in await self.rule_repo.list()}
        now = self.clock()
        classified = []
        for task in tasks:
            rule = (
                rules.get((task.priority, task.case_id))
                or rules.get((task.priority, None))
                or default_rule(task.priority)
            )
            classified.append((task, self._status_for(task, rule, now)))
        return classified

    @traced("sla.check_breaches")
    async def check_breaches(
        self, scope: str | None = None, notify: bool = True
    ) -> BreachScanResult:
        """Scan open tasks, record SLA state changes and notify owners.

        Each changed task is written in its own savepoint; a failure is
        reported in `errors` and does not undo other tasks.
        """
        tasks = await self.task_repo.list(case_id=scope, open_only=True)
        now = self.clock()
        warnings: list[BreachScanItem] = []
        breaches: list[BreachScanItem] = []
        errors: list[BreachScanError] = []
        state_changes = 0

        for task, status in await self.classify_tasks(tasks):
            if status.state == SLAState.WARNING.value:
                warnings.append(_scan_item(task, status))
            elif status.state == SLAState.BREACHED.value:
                breaches.append(_scan_item(task, status))
            if status.state == (task.sla_state or SLAState.ON_TRACK.value):
                continue
            try:
                async with self.uow.savepoint():
                    await self._record_state_change(task, status, now, notify)
                state_changes += 1
            except WorkflowEngineException as e:
                logger.warning(
                    "SLA state update failed for task %s: %s", task.id, e.error_code
                )
                errors.append(BreachScanError(task.id, e.error_code, e.message))

        warnings.sort(key=_hours_remaining)
        breaches.sort(key=_hours_overdue, reverse=True)
        add_span_attributes(
            scanned=len(tasks), warnings=len(warnings), breaches=len(breaches)
        )
        logger.info(
            "SLA scan scope=%s: %d tasks, %d warnings, %d breaches, %d changes",
            scope or "all", len(tasks), len(warnings), len(breaches), state_changes,
        )
        return BreachScanResult(
            warnings=warnings,
            breaches=breaches,
            errors=errors,
            scanned=len(tasks),
            state_changes=state_changes,
        )

    async def _record_state_change(
        self,
        task: "TaskResult",
        status: TaskSLAStatus,
        now: datetime,
        notify: bool,
    ) -> None:
        changes: dict[str, object] = {"sla_state": status.state}
        if status.state == SLAState.BREACHED.value and task.sla_breached_at is None:
            changes["sla_breached_at"] = now
        await self.task_repo.update(task.id, **changes)
        await self.audit.record(
            entity_type=AuditEntityType.TASK,
            entity_id=task.id,
            action=AuditAction.SLA_STATE_CHANGED,
            user_id=SYSTEM_ACTOR,
            case_id=task.case_id,
            previous_value={"sla_state": task.sla_state},
            new_value={
                "sla_state": status.state,
                "hours_remaining": status.hours_remaining,
                "hours_overdue": status.hours_overdue,
            },
            metadata={"rule_id": status.rule.id, "rule_default": status.rule.is_default},
        )
        if not (notify and status.rule.auto_notify):
            return
        if status.state == SLAState.WARNING.value:
            await self.notifications.sla_warning(task, status.hours_remaining or 0.0)
        elif status.state == SLAState.BREACHED.value:
            await self.notifications.sla_breach(task, status.hours_overdue or 0.0)


def _scan_item(task: "TaskResult", status: TaskSLAStatus) -> BreachScanItem:
    return BreachScanItem(
        task_id=task.id,
        case_id=task.case_id,
        title=task.title,
        assigned_to_user_id=task.assigned_to_user_id,
        priority=task.priority,
        state=status.state,
        elapsed_hours=status.elapsed_hours,
        hours_remaining=status.hours_remaining,
        hours_overdue=status.hours_overdue,
    )


def _hours_remaining(item: BreachScanItem) -> float:
    # classify() sets hours_remaining on every warning.
    assert item.hours_remaining is not None, item.task_id
    return item.hours_remaining


def _hours_overdue(item: BreachScanItem) -> float:
    # classify() sets hours_overdue on every breach.
    assert item.hours_overdue is not None, item.task_id
    return item.hours_overdue
