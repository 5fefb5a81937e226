"""Dependency API: replace dependency sets and check whether a task can start."""

from fastapi import APIRouter, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.dependency import (
    CanStartResponse,
    DependencySetRequest,
    TaskDependenciesResponse,
)

router = APIRouter()


@router.put("/{task_id}", response_model=TaskDependenciesResponse)
@limit_writes
async def set_dependencies(
    request: Request,
    task_id: str,
    body: DependencySetRequest,
    services: WriteServices,
    actor: Actor,
):
    """Replace the task's blocking or informational set (409 CYCLE_DETECTED on a cycle)."""
    deps = await services.dependencies.set_dependencies(
        task_id, body.depends_on, body.type, actor
    )
    return TaskDependenciesResponse.model_validate(deps)


@router.get("/{task_id}", response_model=TaskDependenciesResponse)
async def get_dependencies(task_id: str, services: ReadServices):
    """Both dependency sets of a task."""
    deps = await services.dependencies.get_dependencies(task_id)
    return TaskDependenciesResponse.model_validate(deps)


@router.get("/{task_id}/can-start", response_model=CanStartResponse)
async def can_start(task_id: str, services: ReadServices):
    """Whether every blocking prerequisite is done."""
    return CanStartResponse.model_validate(await services.dependencies.can_start(task_id))
