"""OpenTelemetry tracer provider for the engine process.

``EngineTracing`` owns one tracer provider built from Settings. Span export
goes to the console, an OTLP gRPC collector, or nowhere. Once started it can
be attached to the FastAPI app and the async SQL engine.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from caseflow.core.config import Settings

logger = logging.getLogger(__name__)

# Health checks are polled constantly and would drown the useful spans.
UNTRACED_PATHS = "/api/v1/health,/api/v1/health/ready"

EXPORTER_KINDS = ("console", "otlp", "none")


def build_span_exporter(kind: str, endpoint: str | None) -> SpanExporter | None:
    """Exporter for ``kind``; None means spans are sampled but never shipped."""
    if kind == "none":
        return None
    if kind == "otlp":
        if not endpoint:
            logger.warning("OTLP exporter selected without an endpoint; falling back to console")
            return ConsoleSpanExporter()
        return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
    if kind not in EXPORTER_KINDS:
        logger.warning("Unrecognised span exporter %r; falling back to console", kind)
    return ConsoleSpanExporter()


class EngineTracing:
    """Tracer provider lifecycle for one engine process."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.provider: TracerProvider | None = None

    @property
    def active(self) -> bool:
        return self.provider is not None

    def start(self) -> bool:
        """Build and register the global tracer provider.

        A broken exporter configuration must not stop the engine from
        serving requests, so failures are logged and leave tracing off.

        Returns:
            True when the provider was installed.
        """
        s = self._settings
        resource = Resource.create(
            {
                SERVICE_NAME: s.app_name,
                SERVICE_VERSION: s.app_version,
                "deployment.environment": s.telemetry_environment,
            }
        )
        try:
            provider = TracerProvider(
                resource=resource,
                sampler=TraceIdRatioBased(s.telemetry_sample_rate),
            )
            exporter = build_span_exporter(s.telemetry_exporter, s.telemetry_otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Tracing disabled: tracer provider could not be started")
            return False
        self.provider = provider
        logger.info(
            "Tracing started (exporter=%s, sample_rate=%s)",
            s.telemetry_exporter,
            s.telemetry_sample_rate,
        )
        return True

    def attach(self, app: FastAPI, engine: AsyncEngine) -> None:
        """Emit spans for HTTP requests and SQL statements."""
        if self.provider is None:
            return
        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=self.provider, excluded_urls=UNTRACED_PATHS
        )
        SQLAlchemyInstrumentor().instrument(
            engine=engine.sync_engine, tracer_provider=self.provider
        )
        logger.debug("Request and SQL spans enabled")

    def stop(self) -> None:
        """Flush buffered spans; safe to call more than once."""
        if self.provider is None:
            return
        self.provider.shutdown()
        self.provider = None
        logger.info("Tracing stopped")


_current: EngineTracing | None = None
_current_lock = threading.RLock()


def get_tracing() -> EngineTracing | None:
    """Tracing installed by the lifespan, if any."""
    with _current_lock:
        return _current


def set_tracing(tracing: EngineTracing | None) -> None:
    global _current
    with _current_lock:
        _current = tracing
