"""Time tracking API: start and stop timers, list entries, total minutes."""

from fastapi import APIRouter, Request

from caseflow.api.v1.dependencies import ReadServices, WriteServices
from caseflow.core.limiter import limit_writes
from caseflow.schemas.time_entry import (
    TimeEntryResponse,
    TimeEntryStartRequest,
    TimeEntryStopRequest,
    TimeTotalResponse,
)

router = APIRouter()


@router.post("/{task_id}/start", response_model=TimeEntryResponse, status_code=201)
@limit_writes
async def start_timer(
    request: Request,
    task_id: str,
    body: TimeEntryStartRequest,
    services: WriteServices,
):
    """Open a time entry (400 when the user already has one open on the task)."""
    entry = await services.time.start(
        task_id, body.user_id, billable=body.billable, description=body.description
    )
    return TimeEntryResponse.model_validate(entry)


@router.post("/{task_id}/stop", response_model=TimeEntryResponse)
@limit_writes
async def stop_timer(
    request: Request,
    task_id: str,
    body: TimeEntryStopRequest,
    services: WriteServices,
):
    """Close the open entry and record its duration in minutes."""
    entry = await services.time.stop(task_id, body.user_id, description=body.description)
    return TimeEntryResponse.model_validate(entry)


@router.get("/{task_id}", response_model=list[TimeEntryResponse])
async def list_entries(task_id: str, services: ReadServices):
    """Entries for a task, newest first."""
    return [TimeEntryResponse.model_validate(e) for e in await services.time.list_entries(task_id)]


@router.get("/{task_id}/total", response_model=TimeTotalResponse)
async def total(task_id: str, services: ReadServices):
    """Minutes over closed entries."""
    return TimeTotalResponse(task_id=task_id, total_minutes=await services.time.total_minutes(task_id))
