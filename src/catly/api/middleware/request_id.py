"""Request ID middleware for the catly APIs.

Every request gets a correlation ID before anything else runs. Route logs,
error envelopes and the 413 written by the body limit all read it from the
shared ASGI scope state, and the response echoes it in X-Request-Id.
"""

from __future__ import annotations

import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from catly.api.error_model import REQUEST_ID_HEADER

MAX_REQUEST_ID_LENGTH = 128


def accepted_request_id(value: str | None) -> str | None:
    """Return a caller-supplied request ID if it is safe to log and echo.

    Blank, overlong or non-printable values are dropped so a client cannot
    forge log lines or inflate headers.
    """
    if value is None:
        return None
    value = value.strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH:
        return None
    if not value.isascii() or not value.isprintable():
        return None
    return value


class RequestIdMiddleware:
    """Attach a request ID to the scope state and the response headers."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = accepted_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER))
        if request_id is None:
            request_id = str(uuid.uuid4())

        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        await self.app(scope, receive, send_with_request_id)
