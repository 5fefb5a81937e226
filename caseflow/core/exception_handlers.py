"""Translate exceptions into the engine's JSON error envelope.

Every error body has the same three keys: ``error`` (a stable code),
``message`` and ``details``.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from caseflow.core.config import get_settings
from caseflow.domain.exceptions import WorkflowEngineException
from caseflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

# Codes absent here are client errors (400).
_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "NOT_CURRENT_APPROVER": 403,
    "RESOURCE_NOT_FOUND": 404,
    "NO_RULE_CONFIGURED": 404,
    "CYCLE_DETECTED": 409,
    "TASK_BLOCKED": 409,
    "CHAIN_NOT_PENDING": 409,
    "CONFLICT_RETRY": 409,
}


def status_for(exc: WorkflowEngineException) -> int:
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _envelope(status: int, error: str, message: Any, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": error, "message": message, "details": details or {}},
    )


def jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    """Pydantic error dicts with ``ctx`` values stringified (they may hold exception objects)."""
    result = []
    for err in errors:
        item = dict(err)
        if "ctx" in item:
            item["ctx"] = {key: str(value) for key, value in item["ctx"].items()}
        result.append(item)
    return result


async def _on_engine_error(request: Request, exc: WorkflowEngineException) -> JSONResponse:
    status = status_for(exc)
    if status >= 409:
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
        )
    return JSONResponse(status_code=status, content=exc.to_dict())


async def _on_request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(
        422,
        "VALIDATION_ERROR",
        "Request validation failed",
        jsonable_errors(exc.errors()),
    )


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, "HTTP_ERROR", exc.detail)


async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return _envelope(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkflowEngineException, _on_engine_error)
    app.add_exception_handler(RequestValidationError, _on_request_invalid)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unexpected)
