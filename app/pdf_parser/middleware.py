"""
ASGI middleware enforcing the upload size ceiling.

Oversized requests never reach the routes: a declared Content-Length
above the limit is refused before the body is read, and a streamed
body is cut off as soon as it crosses the limit.
"""

import logging

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

LIMIT_REACHED_MESSAGE = "File size limit has been reached"


class _BodyTooLarge(Exception):
    """Raised from the wrapped receive channel once the limit is crossed."""

    pass


class UploadSizeLimitMiddleware:
    """
    Reject HTTP requests whose body is larger than ``max_bytes``.

    Rejections are answered with a plain-text 413, never with the
    JSON envelope used by the application routes.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = _content_length(scope)
        if declared is not None and declared > self.max_bytes:
            logger.warning(
                "Rejecting %s %s: declared body of %d bytes exceeds %d",
                scope["method"],
                scope["path"],
                declared,
                self.max_bytes,
            )
            await self._reject(scope, receive, send)
            return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise _BodyTooLarge()
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except _BodyTooLarge:
            # Upload files already spooled by a partial form parse are not
            # reachable from here; they are closed when garbage collected.
            logger.warning(
                "Rejecting %s %s: streamed body exceeds %d bytes",
                scope["method"],
                scope["path"],
                self.max_bytes,
            )
            if response_started:
                raise
            await self._reject(scope, receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = PlainTextResponse(LIMIT_REACHED_MESSAGE, status_code=413)
        # Close the connection instead of draining the rest of the body
        response.headers["connection"] = "close"
        await response(scope, receive, send)


def _content_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None
