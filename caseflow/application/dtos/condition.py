"""DTOs for conditional branching."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ConditionalRuleCreate:
    """Validated rule to store against a stage."""

    stage_id: str
    field: str
    operator: str
    value: Any
    then_action: str
    then_value: Any = None
    created_by: str | None = None


@dataclass(frozen=True)
class ConditionalRuleResult:
    """Stored conditional rule."""

    id: str
    stage_id: str
    field: str
    operator: str
    value: Any
    then_action: str
    then_value: Any
    created_by: str | None
    created_at: datetime


@dataclass(frozen=True)
class RuleOutcome:
    """One rule's result in an evaluation; affected_task_ids lists tasks the action touched."""

    rule: ConditionalRuleResult
    executed: bool
    affected_task_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConditionEvaluation:
    """All rules of a stage evaluated against one context, in rule order."""

    stage_id: str
    actions_triggered: list[RuleOutcome]
