"""Startup and shutdown of process-wide resources."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from caseflow.core.config import Settings, get_settings
from caseflow.infrastructure.cache.redis_cache import CacheService
from caseflow.infrastructure.persistence.database import dispose_engine, get_engine
from caseflow.infrastructure.services.notification_sink import LogOnlyNotificationSink
from caseflow.shared.telemetry.logging import get_logger, setup_logging
from caseflow.shared.telemetry.telemetry import EngineTracing, get_tracing, set_tracing

logger = get_logger(__name__)


async def _open_cache(settings: Settings) -> CacheService | None:
    if not settings.redis_enabled:
        logger.info("Analytics cache disabled by configuration")
        return None
    cache = CacheService()
    await cache.connect()
    return cache


def _start_tracing(app: FastAPI, settings: Settings) -> None:
    if not settings.telemetry_enabled:
        return
    tracing = EngineTracing(settings)
    if tracing.start():
        tracing.attach(app, get_engine())
        set_tracing(tracing)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the cache, sink and tracing on startup; release them in reverse on exit."""
    settings = get_settings()
    setup_logging()

    app.state.notification_sink = LogOnlyNotificationSink()
    app.state.cache = await _open_cache(settings)
    _start_tracing(app, settings)
    logger.info("Engine %s v%s ready", settings.app_name, settings.app_version)

    try:
        yield
    finally:
        cache: CacheService | None = getattr(app.state, "cache", None)
        if cache is not None:
            await cache.disconnect()
            app.state.cache = None

        tracing = get_tracing()
        if tracing is not None:
            tracing.stop()
            set_tracing(None)

        await dispose_engine()
        logger.info("Engine %s stopped", settings.app_name)
