"""ASGI entry point: ``uvicorn caseflow.main:app``.

``create_app`` reads settings when called, so tests can change the
environment and clear the settings cache before building their own app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from caseflow.api.v1 import api_router
from caseflow.core.config import Settings, get_settings
from caseflow.core.exception_handlers import register_exception_handlers
from caseflow.core.lifespan import create_lifespan
from caseflow.core.limiter import limiter
from caseflow.middleware import (
    CorrelationIDMiddleware,
    RequestContextMiddleware,
    RequestIDMiddleware,
    RequestSizeLimitMiddleware,
    TimeoutMiddleware,
)

API_PREFIX = "/api/v1"


def _install_middleware(app: FastAPI, settings: Settings) -> None:
    # Innermost first. A request passes timeout, size limit, request id,
    # correlation id, context and CORS in that order.
    origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware, actor_header_name=settings.actor_header_name)
    app.add_middleware(CorrelationIDMiddleware, header_name=settings.correlation_id_header)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.app_name} workflow engine",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)
    _install_middleware(app, settings)
    app.include_router(api_router, prefix=API_PREFIX)
    return app


app = create_app()
