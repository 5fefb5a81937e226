"""SLA API: manage rules, read a task's SLA state and run breach scans."""

from fastapi import APIRouter, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.application.dtos.sla import SLARuleSet
from caseflow.core.limiter import limit_batch, limit_writes
from caseflow.schemas.sla import (
    BreachScanRequest,
    BreachScanResponse,
    SLARuleResponse,
    SLARuleSetRequest,
    TaskSLAStatusResponse,
)

router = APIRouter()


@router.put("/rules", response_model=SLARuleResponse)
@limit_writes
async def set_rule(
    request: Request,
    body: SLARuleSetRequest,
    services: WriteServices,
    actor: Actor,
):
    """Create or replace the rule for (priority, scope)."""
    rule = await services.sla.set_rule(SLARuleSet(**body.model_dump()), actor)
    return SLARuleResponse.model_validate(rule)


@router.get("/rules", response_model=list[SLARuleResponse])
async def list_rules(services: ReadServices, scope: str | None = None):
    """List configured rules, optionally limited to one scope."""
    return [SLARuleResponse.model_validate(r) for r in await services.sla.list_rules(scope)]


@router.delete("/rules/{rule_id}", status_code=204)
@limit_writes
async def delete_rule(
    request: Request,
    rule_id: str,
    services: WriteServices,
    actor: Actor,
) -> None:
    """Delete a rule."""
    await services.sla.delete_rule(rule_id, actor)


@router.get("/tasks/{task_id}", response_model=TaskSLAStatusResponse)
async def get_task_status(
    task_id: str,
    services: ReadServices,
    use_default: bool = False,
):
    """Live SLA state of a task (404 NO_RULE_CONFIGURED without a rule unless use_default)."""
    status = await services.sla.get_status(task_id, use_default=use_default)
    return TaskSLAStatusResponse.model_validate(status)


@router.post("/check-breaches", response_model=BreachScanResponse)
@limit_batch
async def check_breaches(
    request: Request,
    body: BreachScanRequest,
    services: WriteServices,
):
    """Scan open tasks, record state changes and notify owners."""
    result = await services.sla.check_breaches(scope=body.scope, notify=body.notify)
    return BreachScanResponse.model_validate(result)
