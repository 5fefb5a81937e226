"""Reassignment API: single, bulk and per-user reassignment plus history."""

from fastapi import APIRouter, Query, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.core.limiter import limit_batch, limit_writes
from caseflow.schemas.reassignment import (
    BulkReassignRequest,
    BulkReassignResponse,
    ReassignAllRequest,
    ReassignAllResponse,
    ReassignmentHistoryResponse,
    ReassignRequest,
)
from caseflow.schemas.task import TaskResponse

router = APIRouter()


@router.post("/tasks/{task_id}", response_model=TaskResponse)
@limit_writes
async def reassign_task(
    request: Request,
    task_id: str,
    body: ReassignRequest,
    services: WriteServices,
    actor: Actor,
):
    """Reassign one task (409 CONFLICT_RETRY when expected_version is stale)."""
    task = await services.reassignment.reassign_task(
        task_id,
        body.new_assignee,
        actor,
        reason=body.reason,
        expected_version=body.expected_version,
    )
    return TaskResponse.model_validate(task)


@router.post("/bulk", response_model=BulkReassignResponse)
@limit_batch
async def bulk_reassign(
    request: Request,
    body: BulkReassignRequest,
    services: WriteServices,
    actor: Actor,
):
    """Reassign many tasks; failures are reported per task."""
    result = await services.reassignment.bulk_reassign(
        body.task_ids, body.new_assignee, actor, reason=body.reason
    )
    return BulkReassignResponse.model_validate(result)


@router.post("/all", response_model=ReassignAllResponse)
@limit_batch
async def reassign_all(
    request: Request,
    body: ReassignAllRequest,
    services: WriteServices,
    actor: Actor,
):
    """Move every open task of one user to another."""
    result = await services.reassignment.reassign_all_from_user(
        body.from_user_id, body.to_user_id, actor, scope=body.scope, reason=body.reason
    )
    return ReassignAllResponse.model_validate(result)


@router.get("/tasks/{task_id}/history", response_model=list[ReassignmentHistoryResponse])
async def history(
    task_id: str,
    services: ReadServices,
    limit: int = Query(100, ge=1, le=1000),
):
    """Past reassignments of a task, newest first."""
    items = await services.reassignment.history(task_id, limit)
    return [ReassignmentHistoryResponse.model_validate(i) for i in items]
