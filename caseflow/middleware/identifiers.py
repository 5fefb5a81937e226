"""Request and correlation identifiers.

Both ids are echoed back on the response and stored in ``scope["state"]`` so
request context, logs and audit entries can pick them up. Client supplied
values are accepted only when short and limited to ``[A-Za-z0-9_-]``; anything
else is replaced, which keeps arbitrary bytes out of log lines.
"""

import re
import uuid
from typing import Callable

from caseflow.middleware._asgi import get_header, with_response_header

MAX_ID_LENGTH = 64
_SAFE_ID = re.compile(rf"[A-Za-z0-9_-]{{1,{MAX_ID_LENGTH}}}")


def sanitize_request_id(raw: str | None) -> str:
    """``raw`` stripped if it is a safe identifier, else a fresh uuid4."""
    candidate = (raw or "").strip()
    if _SAFE_ID.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())


def _identifier_middleware(
    app: Callable,
    header_name: str,
    state_key: str,
    fallback: Callable[[dict], str | None],
) -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope.setdefault("state", {})
        supplied = get_header(scope, header_name)
        value = sanitize_request_id(supplied) if supplied else (fallback(state) or str(uuid.uuid4()))
        state[state_key] = value

        async def send_with_id(message: dict) -> None:
            await send(with_response_header(message, header_name, value))

        await app(scope, receive, send_with_id)

    return asgi_app


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Forward a safe client request id or mint one."""
    return _identifier_middleware(app, header_name, "request_id", lambda state: None)


def CorrelationIDMiddleware(app: Callable, header_name: str = "X-Correlation-ID") -> Callable:
    """Forward the client's correlation id; without one, reuse the request id.

    Must sit inside ``RequestIDMiddleware`` for the fallback to apply.
    """
    return _identifier_middleware(
        app, header_name, "correlation_id", lambda state: state.get("request_id")
    )
