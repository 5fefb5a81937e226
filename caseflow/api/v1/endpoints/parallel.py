"""Parallel group API: create groups, read completion status, remove members."""

from fastapi import APIRouter, Query, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.application.dtos.parallel import ParallelGroupCreate
from caseflow.core.limiter import limit_writes
from caseflow.schemas.parallel import (
    ParallelGroupCreateRequest,
    ParallelGroupResponse,
    ParallelGroupStatusResponse,
)

router = APIRouter()


@router.post("", response_model=ParallelGroupResponse, status_code=201)
@limit_writes
async def create_group(
    request: Request,
    body: ParallelGroupCreateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Create a parallel group of at least two tasks in one stage."""
    group = await services.parallel.create(ParallelGroupCreate(**body.model_dump()), actor)
    return ParallelGroupResponse.model_validate(group)


@router.get("", response_model=list[ParallelGroupResponse])
async def list_groups(services: ReadServices, stage_id: str = Query(..., min_length=1)):
    """Groups defined on a stage."""
    groups = await services.parallel.list_for_stage(stage_id)
    return [ParallelGroupResponse.model_validate(g) for g in groups]


@router.get("/by-task/{task_id}", response_model=list[ParallelGroupResponse])
async def groups_for_task(task_id: str, services: ReadServices):
    """Groups that contain the task."""
    groups = await services.parallel.groups_containing(task_id)
    return [ParallelGroupResponse.model_validate(g) for g in groups]


@router.get("/{group_id}", response_model=ParallelGroupResponse)
async def get_group(group_id: str, services: ReadServices):
    """Get a group by id."""
    return ParallelGroupResponse.model_validate(await services.parallel.get(group_id))


@router.get("/{group_id}/status", response_model=ParallelGroupStatusResponse)
async def group_status(group_id: str, services: ReadServices):
    """Completion snapshot against current member statuses."""
    return ParallelGroupStatusResponse.model_validate(await services.parallel.status(group_id))


@router.delete("/{group_id}/tasks/{task_id}", response_model=ParallelGroupResponse)
@limit_writes
async def remove_member(
    request: Request,
    group_id: str,
    task_id: str,
    services: WriteServices,
    actor: Actor,
):
    """Remove one task from a group; at least two members must remain."""
    group = await services.parallel.remove_member(group_id, task_id, actor)
    return ParallelGroupResponse.model_validate(group)
