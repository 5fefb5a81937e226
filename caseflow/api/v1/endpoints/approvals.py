"""Approval API: create chains and record approve/reject decisions."""

from fastapi import APIRouter, Request

from caseflow.api.v1.dependencies import Actor, ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.approval import (
    ApprovalChainCreateRequest,
    ApprovalChainResponse,
    ApprovalDecisionRequest,
)

router = APIRouter()


@router.post("/{task_id}", response_model=ApprovalChainResponse, status_code=201)
@limit_writes
async def create_chain(
    request: Request,
    task_id: str,
    body: ApprovalChainCreateRequest,
    services: WriteServices,
    actor: Actor,
):
    """Create the task's approval chain; the first approver is notified."""
    chain = await services.approvals.create(task_id, body.approver_ids, actor)
    return ApprovalChainResponse.model_validate(chain)


@router.get("/{task_id}", response_model=ApprovalChainResponse)
async def get_chain(task_id: str, services: ReadServices):
    """Get the task's approval chain."""
    return ApprovalChainResponse.model_validate(await services.approvals.get(task_id))


@router.post("/{task_id}/decision", response_model=ApprovalChainResponse)
@limit_writes
async def decide(
    request: Request,
    task_id: str,
    body: ApprovalDecisionRequest,
    services: WriteServices,
):
    """Approve or reject the current step (403 when not the current approver)."""
    chain = await services.approvals.process(
        task_id, body.approver_id, body.action, body.comments
    )
    return ApprovalChainResponse.model_validate(chain)
