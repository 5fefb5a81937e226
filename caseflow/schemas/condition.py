"""Conditional branching API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConditionalRuleCreateRequest(BaseModel):
    """Rule for a stage: if context[field] <operator> value, run then_action with then_value."""

    stage_id: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1, max_length=255)
    operator: str
    value: Any = None
    then_action: str
    then_value: Any = None


class ConditionalRuleResponse(BaseModel):
    """Stored conditional rule."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    stage_id: str
    field: str
    operator: str
    value: Any
    then_action: str
    then_value: Any
    created_by: str | None
    created_at: datetime


class RuleOutcomeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rule: ConditionalRuleResponse
    executed: bool
    affected_task_ids: list[str]


class ConditionEvaluationResponse(BaseModel):
    """Every rule of the stage, in order, and whether its action ran."""

    model_config = ConfigDict(from_attributes=True)

    stage_id: str
    actions_triggered: list[RuleOutcomeResponse]
