"""API v1 router aggregation.

Engine routers live under /workflow/engine; health sits at the top level.
"""

from fastapi import APIRouter

from caseflow.api.v1.endpoints import (
    analytics,
    approvals,
    audit_log,
    conditions,
    dependencies,
    health,
    notifications,
    parallel,
    reassign,
    sla,
    stages,
    tasks,
    time_entries,
)

ENGINE_PREFIX = "/workflow/engine"

engine_router = APIRouter(prefix=ENGINE_PREFIX)
engine_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
engine_router.include_router(stages.router, prefix="/stages", tags=["stages"])
engine_router.include_router(
    dependencies.router, prefix="/dependencies", tags=["dependencies"]
)
engine_router.include_router(sla.router, prefix="/sla", tags=["sla"])
engine_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
engine_router.include_router(time_entries.router, prefix="/time", tags=["time"])
engine_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
engine_router.include_router(audit_log.router, prefix="/audit", tags=["audit"])
engine_router.include_router(parallel.router, prefix="/parallel", tags=["parallel"])
engine_router.include_router(reassign.router, prefix="/reassign", tags=["reassign"])
engine_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
engine_router.include_router(conditions.router, prefix="/conditions", tags=["conditions"])

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(engine_router)
