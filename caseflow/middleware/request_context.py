"""Request context middleware.

Binds request id, correlation id and the acting user (actor header) to
contextvars for the duration of the request, so log records and audit
entries pick them up. Must sit inside RequestIDMiddleware and
CorrelationIDMiddleware.
"""

from typing import Callable

from caseflow.middleware._asgi import get_header
from caseflow.shared.context import (
    clear_request_context,
    set_current_actor,
    set_request_context,
)

ACTOR_ID_MAX_LENGTH = 128


def RequestContextMiddleware(
    app: Callable, actor_header_name: str = "X-Actor-ID"
) -> Callable:
    """Set request-scoped context before the route runs; clear it afterwards."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope.get("state", {})
        set_request_context(state.get("request_id"), state.get("correlation_id"))
        actor = (get_header(scope, actor_header_name) or "").strip()
        set_current_actor(actor[:ACTOR_ID_MAX_LENGTH] or None)
        try:
            await app(scope, receive, send)
        finally:
            clear_request_context()

    return asgi_app
