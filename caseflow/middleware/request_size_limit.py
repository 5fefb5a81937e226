"""Request body size cap.

Bodies over ``max_bytes`` get a 413, whether the size is declared up front in
Content-Length or only discovered while the body streams in.
"""

from typing import Callable

from caseflow.middleware._asgi import get_header, send_json_error


class _BodyTooLarge(Exception):
    def __init__(self, size: int) -> None:
        super().__init__(size)
        self.size = size


async def _reject(send: Callable, max_bytes: int, size: int) -> None:
    await send_json_error(
        send,
        413,
        "PAYLOAD_TOO_LARGE",
        f"Request body must be at most {max_bytes} bytes",
        {"max_bytes": max_bytes, "content_length": size},
    )


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared is not None and declared.isdigit():
            if int(declared) > max_bytes:
                await _reject(send, max_bytes, int(declared))
            else:
                await app(scope, receive, send)
            return

        seen = 0

        async def counting_receive() -> dict:
            nonlocal seen
            message = await receive()
            if message["type"] == "http.request":
                seen += len(message.get("body", b""))
                if seen > max_bytes:
                    raise _BodyTooLarge(seen)
            return message

        try:
            await app(scope, counting_receive, send)
        except _BodyTooLarge as exc:
            await _reject(send, max_bytes, exc.size)

    return asgi_app
