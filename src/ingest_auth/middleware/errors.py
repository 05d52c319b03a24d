# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware for the management endpoint.

Catches exceptions raised further down the chain and converts them to
plain-text HTTP responses.

Exception handling:
    - HTTPException: status code, detail and extra headers (401 challenge,
      405 Allow)
    - Exception: 500 Internal Server Error, logged with traceback

Config:
    debug (bool): If True, include traceback in 500 responses. Default: False.

Example::

    [errors]
    debug = true
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..exceptions import HTTPException

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

__all__ = ["ErrorMiddleware"]


class ErrorMiddleware(BaseMiddleware):
    """Convert exceptions from HTTP requests into responses.

    Non-HTTP scopes (lifespan) pass through unchanged.

    Class Attributes:
        middleware_name: "errors" - identifier for config.
        middleware_order: 100 - outermost, catches everything below.
        middleware_default: True - enabled by default.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("debug", "logger")

    def __init__(
        self,
        app: ASGIApp,
        debug: bool = False,
        logger: logging.Logger | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug
        self.logger = logger or logging.getLogger("ingest_auth")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except HTTPException as e:
            await self._send_http_error(send, e)
        except Exception as e:
            self.logger.exception(f"Unhandled error on {scope.get('path', '')}: {e}")
            await self._send_server_error(send)

    async def _send_http_error(self, send: Send, exc: HTTPException) -> None:
        body_bytes = (exc.detail or "").encode("utf-8")

        headers: list[tuple[bytes, bytes]] = [
            (b"content-type", b"text/plain; charset=utf-8"),
            (b"content-length", str(len(body_bytes)).encode()),
        ]
        if exc.headers:
            headers.extend((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in exc.headers)

        await send({"type": "http.response.start", "status": exc.status_code, "headers": headers})
        await send({"type": "http.response.body", "body": body_bytes})

    async def _send_server_error(self, send: Send) -> None:
        """Send 500; the traceback is included only when ``debug`` is on."""
        if self.debug:
            body = f"Internal Server Error\n\n{traceback.format_exc()}"
        else:
            body = "Internal Server Error"

        body_bytes = body.encode("utf-8")

        await send(
            {
                "type": "http.response.start",
                "status": 500,
                "headers": [
                    (b"content-type", b"text/plain; charset=utf-8"),
                    (b"content-length", str(len(body_bytes)).encode()),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body_bytes})
