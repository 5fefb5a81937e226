"""Logging and tracing for the engine."""

from caseflow.shared.telemetry.logging import get_logger, setup_logging
from caseflow.shared.telemetry.telemetry import EngineTracing, get_tracing, set_tracing
from caseflow.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "EngineTracing",
    "add_span_attributes",
    "get_logger",
    "get_tracing",
    "set_tracing",
    "setup_logging",
    "traced",
]
