"""Analytics API: metrics, velocity and bottlenecks per case or overall."""

from fastapi import APIRouter, Query

from caseflow.api.v1.dependencies import ReadServices
from caseflow.core.config import get_settings
from caseflow.schemas.analytics import (
    BottleneckAnalysisResponse,
    TaskVelocityResponse,
    WorkflowMetricsResponse,
)

router = APIRouter()


@router.get("/metrics", response_model=WorkflowMetricsResponse)
async def metrics(services: ReadServices, scope: str | None = None):
    """Workflow metrics; scope is a case id (omit for all cases)."""
    return WorkflowMetricsResponse.model_validate(await services.analytics.metrics(scope))


@router.get("/velocity", response_model=TaskVelocityResponse)
async def velocity(
    services: ReadServices,
    scope: str | None = None,
    window_days: int | None = Query(None, ge=1, le=365),
):
    """Completed tasks per day over the trailing window."""
    window = window_days or get_settings().velocity_window_days
    return TaskVelocityResponse.model_validate(
        await services.analytics.velocity(scope, window)
    )


@router.get("/bottlenecks", response_model=BottleneckAnalysisResponse)
async def bottlenecks(
    services: ReadServices,
    scope: str | None = None,
    overload_threshold: int | None = Query(None, ge=0),
):
    """Slowest stages, blocked tasks and overloaded users."""
    return BottleneckAnalysisResponse.model_validate(
        await services.analytics.bottlenecks(scope, overload_threshold)
    )
