"""Task API: register, read, list, change status and archive tasks."""

from fastapi import APIRouter, Query, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.application.dtos.task import TaskCreate
from caseflow.core.limiter import limit_writes
from caseflow.schemas.task import (
    StatusTransitionResponse,
    StatusUpdateRequest,
    TaskCreateRequest,
    TaskResponse,
)

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def register_task(
    request: Request,
    body: TaskCreateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Register a task; the owner (if any) is notified."""
    task = await services.tasks.register_task(TaskCreate(**body.model_dump()), actor)
    return TaskResponse.model_validate(task)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    services: ReadServices,
    case_id: str | None = None,
    stage_id: str | None = None,
    assignee: str | None = None,
    status: str | None = None,
    include_archived: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List tasks, oldest first, with optional filters."""
    tasks = await services.tasks.list_tasks(
        case_id=case_id,
        stage_id=stage_id,
        assignee=assignee,
        status=status,
        include_archived=include_archived,
        skip=skip,
        limit=limit,
    )
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, services: ReadServices):
    """Get a task by id."""
    return TaskResponse.model_validate(await services.tasks.get_task(task_id))


@router.patch("/{task_id}/status", response_model=StatusTransitionResponse)
@limit_writes
async def update_status(
    request: Request,
    task_id: str,
    body: StatusUpdateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Move a task to a new status (409 TASK_BLOCKED when prerequisites are open)."""
    result = await services.tasks.transition_status(
        task_id, body.status, actor, expected_version=body.expected_version
    )
    return StatusTransitionResponse.model_validate(result)


@router.post("/{task_id}/archive", response_model=TaskResponse)
@limit_writes
async def archive_task(
    request: Request,
    task_id: str,
    services: WriteServices,
    actor: Actor,
):
    """Archive a task; archived tasks leave scans and analytics."""
    return TaskResponse.model_validate(await services.tasks.archive_task(task_id, actor))
