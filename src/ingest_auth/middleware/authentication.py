# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication middleware for the management endpoint.

One strategy per listener, chosen by the ``[auth]`` config section. The
middleware owns routing of the login URL; the strategy owns credentials.

Request flow:
    disabled strategy       -> downstream app, untouched
    path == login path      -> POST: strategy.login(request) answers directly
                               other methods: 405, Allow: POST
                               body over max-body: 413
    any other path          -> strategy.auth_request(request)
                               ok: scope["auth"] = {"backend": <auth type>}
                               AuthenticationError: 401 (+ WWW-Authenticate)

The rejection reason is logged with the requester address and never sent to
the client.

Raises:
    HTTPUnauthorized / HTTPMethodNotAllowed / HTTPPayloadTooLarge: converted by
        ErrorMiddleware.
    AuthConfigError: at construction, for an invalid ``[auth]`` section.

Example::

    [middleware]
    auth = true

    [auth]
    auth-type = "cookie"
    login-url = "/login"
    username = "admin"
    password = "${INGEST_PASSWORD}"
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from . import BaseMiddleware
from ..authentication import AuthConfig, AuthStrategy, new_auth_strategy
from ..exceptions import (
    AuthenticationError,
    HTTPMethodNotAllowed,
    HTTPPayloadTooLarge,
    HTTPUnauthorized,
)
from ..request import MAX_FORM_BODY, BodyTooLargeError, HttpRequest

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

__all__ = ["AuthMiddleware"]


class AuthMiddleware(BaseMiddleware):
    """Reject unauthenticated HTTP requests and serve the login URL.

    Attributes:
        strategy: Active AuthStrategy.
        login_path: Path part of the login URL, "" when the strategy has none.
        max_body: Size limit for login request bodies.
        logger: Logger for login and rejection messages.

    Class Attributes:
        middleware_name: "auth" - identifier for config.
        middleware_order: 400 - runs after error handling.
        middleware_default: False - disabled by default.
    """

    middleware_name = "auth"
    middleware_order = 400
    middleware_default = False

    __slots__ = ("strategy", "login_path", "logger", "max_body")

    def __init__(
        self,
        app: ASGIApp,
        logger: logging.Logger | None = None,
        strategy: AuthStrategy | None = None,
        max_body: int = MAX_FORM_BODY,
        **entries: Any,
    ) -> None:
        """Initialize authentication middleware.

        Args:
            app: Next ASGI application in the middleware chain.
            logger: Logger handed to the strategy. Defaults to "ingest_auth.auth".
            strategy: Prebuilt strategy; when given, ``entries`` only supply
                ``login_url``.
            max_body: Largest login body accepted, in bytes. Larger bodies
                get 413 without being read to the end.
            **entries: ``[auth]`` section keys (auth_type, username, password,
                login_url, token_name, token_value).
        """
        super().__init__(app)
        self.logger = logger or logging.getLogger("ingest_auth.auth")
        self.max_body = max_body
        if strategy is None:
            config = AuthConfig.from_mapping(entries)
            config.validate()
            login_url, strategy = new_auth_strategy(config, self.logger)
        else:
            login_url = str(entries.get("login_url") or "")
        self.strategy = strategy
        self.login_path = urlsplit(login_url).path if login_url else ""
        self.logger.info(f"authentication type: {strategy.auth_type}")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.strategy.enabled:
            await self.app(scope, receive, send)
            return

        request = HttpRequest(scope)

        if self.login_path and request.path == self.login_path:
            if request.method != "POST":
                raise HTTPMethodNotAllowed("POST")
            try:
                await request.read_body(receive, self.max_body)
            except BodyTooLargeError as e:
                self.logger.info(f"{request.requester} login rejected: {e}")
                raise HTTPPayloadTooLarge() from e
            response = self.strategy.login(request)
            await response(scope, receive, send)
            return

        try:
            self.strategy.auth_request(request)
        except AuthenticationError as e:
            self.logger.info(f"{request.requester} authentication failed: {e}")
            challenge = self.strategy.challenge
            headers = {"WWW-Authenticate": challenge} if challenge else None
            raise HTTPUnauthorized(headers=headers) from e

        scope["auth"] = {"backend": self.strategy.auth_type}
        await self.app(scope, receive, send)
