"""Liveness and readiness checks."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.core.config import get_settings
from caseflow.infrastructure.persistence.database import get_db
from caseflow.schemas.health import ComponentState, HealthResponse, ReadinessResponse
from caseflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _cache_state(request: Request) -> ComponentState:
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        return "disabled"
    return "ok" if cache.is_available() else "unavailable"


@router.get("", response_model=HealthResponse)
def liveness() -> HealthResponse:
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"model": ReadinessResponse, "description": "Database unreachable"}},
)
async def readiness(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReadinessResponse | JSONResponse:
    """200 once the database answers a trivial query, 503 until then."""
    cache = _cache_state(request)
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database not ready: %s", exc)
        body = ReadinessResponse(status="not_ready", database="unavailable", cache=cache)
        return JSONResponse(status_code=503, content=body.model_dump())
    return ReadinessResponse(cache=cache)
