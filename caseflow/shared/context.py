"""Request context management using contextvars.

Async-safe storage for request-scoped values (request id, correlation id,
acting user). Middleware sets them; the logging filter and the audit
recorder read them.

Usage:
    set_request_context(request_id="abc", correlation_id="abc")
    set_current_actor("user-123")
    actor = get_current_actor_id()
"""

from contextvars import ContextVar
from dataclasses import dataclass

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_current_actor_id: ContextVar[str | None] = ContextVar(
    "current_actor_id", default=None
)


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of the current request context."""

    request_id: str | None
    correlation_id: str | None
    actor_id: str | None


def set_request_context(
    request_id: str | None, correlation_id: str | None = None
) -> None:
    """Bind request and correlation ids to the current async task."""
    _request_id.set(request_id)
    _correlation_id.set(correlation_id)


def set_current_actor(actor_id: str | None) -> None:
    """Bind the acting user id (from the actor header) to the current task."""
    _current_actor_id.set(actor_id)


def clear_request_context() -> None:
    """Reset all request-scoped values."""
    _request_id.set(None)
    _correlation_id.set(None)
    _current_actor_id.set(None)


def get_request_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return _request_id.get()


def get_correlation_id() -> str | None:
    """Return the current correlation id, or None outside a request."""
    return _correlation_id.get()


def get_current_actor_id() -> str | None:
    """Return the acting user id, or None if not set."""
    return _current_actor_id.get()


def get_request_context() -> RequestContext:
    """Return a snapshot of the current request context."""
    return RequestContext(
        request_id=_request_id.get(),
        correlation_id=_correlation_id.get(),
        actor_id=_current_actor_id.get(),
    )
