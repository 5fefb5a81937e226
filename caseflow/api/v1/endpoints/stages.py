"""Stage API: create and list the stages of a case."""

from fastapi import APIRouter, Query, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.task import StageCreateRequest, StageResponse

router = APIRouter()


@router.post("", response_model=StageResponse, status_code=201)
@limit_writes
async def create_stage(
    request: Request,
    body: StageCreateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Create a stage within a case."""
    stage = await services.tasks.create_stage(body.case_id, body.name, body.order, actor)
    return StageResponse.model_validate(stage)


@router.get("", response_model=list[StageResponse])
async def list_stages(
    services: ReadServices,
    case_id: str = Query(..., min_length=1),
):
    """List stages of a case in order."""
    stages = await services.tasks.list_stages(case_id)
    return [StageResponse.model_validate(s) for s in stages]
