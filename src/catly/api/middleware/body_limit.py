"""Request body size limit middleware.

Enforces the deployment-level maximum payload size at the transport layer, so
oversized uploads are rejected before routing, decoding or validation.
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from catly.api.error_model import make_error_response_no_request

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Pure ASGI middleware rejecting request bodies above a byte limit.

    Behavior:
    - Declared Content-Length above the limit => 413 without reading the body
    - Otherwise the body is buffered while counting; crossing the limit
      => 413, else the buffered messages are replayed to the application
    """

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            max_body_size: Largest accepted request body in bytes.
        """
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = _content_length(scope)
        if declared is not None and declared > self.max_body_size:
            await self._reject(scope, receive, send, declared)
            return

        buffered: list[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_size:
                await self._reject(scope, receive, send, received)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        state: dict[str, Any] = scope.get("state") or {}
        logger.info(
            "request body rejected: %d bytes exceeds %d request_id=%s",
            size,
            self.max_body_size,
            state.get("request_id"),
        )
        response = make_error_response_no_request(
            code="REQUEST_TOO_LARGE",
            message=f"request body exceeds the maximum of {self.max_body_size} bytes",
            http_status=413,
            request_id=state.get("request_id"),
        )
        await response(scope, receive, send)


def _content_length(scope: Scope) -> int | None:
    """Read the declared Content-Length header, if any and well-formed."""
    for key, value in scope.get("headers", []):
        if key.lower() == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None
