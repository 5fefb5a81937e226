"""ASGI helpers for the raw middleware in this package."""

import json
from typing import Any, Callable

Header = tuple[bytes, bytes]


def get_header(scope: dict, name: str) -> str | None:
    """First value of ``name`` in the request, matched case-insensitively."""
    key = name.lower().encode("latin-1")
    return next(
        (v.decode("utf-8", errors="replace") for k, v in scope.get("headers", ()) if k.lower() == key),
        None,
    )


def with_response_header(message: dict, name: str, value: str) -> dict:
    """Add ``name: value`` when ``message`` starts the response; pass anything else through."""
    if message["type"] != "http.response.start":
        return message
    extra: Header = (name.encode("latin-1"), value.encode("latin-1"))
    message["headers"] = [*message.get("headers", ()), extra]
    return message


async def send_json_error(
    send: Callable, status: int, error: str, message: str, details: dict[str, Any]
) -> None:
    """Write a complete JSON error response in the engine's error envelope."""
    payload = {"error": error, "message": message, "details": details}
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [(b"content-type", b"application/json")],
        }
    )
    await send({"type": "http.response.body", "body": json.dumps(payload).encode()})
