"""Spans around engine operations.

``@traced`` wraps service coroutines. Only identifier keyword arguments are
copied onto the span; request payloads never are.
"""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

R = TypeVar("R")

SPAN_ARGUMENTS = frozenset(
    {
        "task_id",
        "case_id",
        "scope",
        "stage_id",
        "group_id",
        "user_id",
        "approver_id",
        "entity_type",
        "entity_id",
        "window_days",
        "limit",
    }
)


def traced(name: str | None = None) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Run the decorated coroutine inside a span; failures mark it as error and re-raise."""

    def decorate(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"@traced only wraps coroutine functions, not {func.__qualname__}")
        span_name = name or f"{func.__module__}.{func.__qualname__}"
        tracer = trace.get_tracer(func.__module__)

        @wraps(func)
        async def run(*args: Any, **kwargs: Any) -> R:
            with tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                for key in SPAN_ARGUMENTS.intersection(kwargs):
                    if kwargs[key] is not None:
                        span.set_attribute(f"arg.{key}", str(kwargs[key]))
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return run

    return decorate


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Annotate the active span; does nothing when tracing is off."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(attributes)
