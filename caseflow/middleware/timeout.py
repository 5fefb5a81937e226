"""Per-request deadline.

A request still running after ``timeout_seconds`` is cancelled. If nothing
has been sent yet the client gets a 504 in the usual error envelope;
otherwise the connection is simply ended.
"""

import asyncio
from typing import Callable

from caseflow.middleware._asgi import send_json_error
from caseflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def TimeoutMiddleware(app: Callable, timeout_seconds: int) -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        headers_sent = False

        async def tracking_send(message: dict) -> None:
            nonlocal headers_sent
            headers_sent = headers_sent or message["type"] == "http.response.start"
            await send(message)

        try:
            await asyncio.wait_for(app(scope, receive, tracking_send), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "%s %s cancelled after %ss",
                scope.get("method", "?"),
                scope.get("path", "?"),
                timeout_seconds,
            )
            if not headers_sent:
                await send_json_error(
                    send,
                    504,
                    "GATEWAY_TIMEOUT",
                    f"Request exceeded the {timeout_seconds}s processing limit",
                    {"timeout_seconds": timeout_seconds},
                )

    return asgi_app
