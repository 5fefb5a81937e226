"""Conditional branching API: add stage rules, list them, evaluate a context."""

from typing import Any

from fastapi import APIRouter, Body, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.condition import (
    ConditionalRuleCreateRequest,
    ConditionalRuleResponse,
    ConditionEvaluationResponse,
)

router = APIRouter()


@router.post("", response_model=ConditionalRuleResponse, status_code=201)
@limit_writes
async def add_rule(
    request: Request,
    body: ConditionalRuleCreateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Append a conditional rule to a stage."""
    rule = await services.conditions.add_rule(
        body.stage_id,
        body.field,
        body.operator,
        body.value,
        body.then_action,
        body.then_value,
        actor,
    )
    return ConditionalRuleResponse.model_validate(rule)


@router.get("/{stage_id}", response_model=list[ConditionalRuleResponse])
async def list_rules(stage_id: str, services: ReadServices):
    """Rules of a stage in evaluation order."""
    rules = await services.conditions.list_rules(stage_id)
    return [ConditionalRuleResponse.model_validate(r) for r in rules]


@router.post("/{stage_id}/evaluate", response_model=ConditionEvaluationResponse)
@limit_writes
async def evaluate_rules(
    request: Request,
    stage_id: str,
    services: WriteServices,
    actor: Actor,
    context: dict[str, Any] = Body(...),
):
    """Evaluate the stage's rules against the posted context and run matching actions."""
    evaluation = await services.conditions.evaluate(stage_id, context, actor)
    return ConditionEvaluationResponse.model_validate(evaluation)
