# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Management server - status endpoint behind the authentication chain.

ManagementServer is the ASGI entry point that:
- Loads configuration from a TOML file (or takes a ready dict)
- Builds the middleware chain (errors -> auth) around StatusApp
- Handles ASGI lifespan protocol (startup/shutdown)
- Runs itself under uvicorn

Usage:
    from ingest_auth import ManagementServer

    server = ManagementServer.from_file("ingest-auth.toml")
    server.run()

Request flow:
    uvicorn -> ManagementServer.__call__
        -> ErrorMiddleware -> AuthMiddleware -> StatusApp

When ``[auth]`` validates as disabled, AuthMiddleware is left out of the
chain regardless of ``[middleware] auth``. An enabled ``[auth]`` section with
``[middleware] auth`` switched off is a configuration error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .config import ConfigError, auth_config, load_config, server_settings
from .exceptions import HTTPMethodNotAllowed
from .lifespan import ServerLifespan
from .middleware import middleware_chain, parse_enabled
from .response import Response
from .types import ASGIApp, Receive, Scope, Send

__all__ = ["ManagementServer", "StatusApp"]


class StatusApp:
    """Innermost app: ``GET``/``HEAD`` on any path answers ``{"status": "ok"}``."""

    __slots__ = ()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return
        if scope.get("method", "GET") not in ("GET", "HEAD"):
            raise HTTPMethodNotAllowed("GET, HEAD")
        response = Response()
        response.set_result({"status": "ok"})
        await response(scope, receive, send)


class ManagementServer:
    """
    ASGI application for the authenticated management endpoint.

    Attributes:
        config: Parsed configuration dict.
        settings: host, port and log_level from ``[server]``.
        auth_enabled: True when the ``[auth]`` section selects a strategy.
        lifespan: ServerLifespan for startup/shutdown.
        dispatcher: Middleware chain wrapping the status app.
        logger: Server logger instance.
    """

    __slots__ = ("config", "settings", "auth_enabled", "lifespan", "dispatcher", "logger")

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        app: ASGIApp | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Args:
            config: Configuration mapping as returned by ``load_config``.
            app: Innermost ASGI app. Defaults to StatusApp.
            logger: Logger handed to the middleware. Defaults to "ingest_auth".

        Raises:
            ConfigError / AuthConfigError / EntropyError: Invalid configuration
                or strategy construction failure.
        """
        self.config: dict[str, Any] = dict(config or {})
        self.settings = server_settings(self.config)
        self.logger = logger or logging.getLogger("ingest_auth.server")
        self.auth_enabled = auth_config(self.config).validate()
        self.lifespan = ServerLifespan(self.logger)

        middleware = dict(self.config.get("middleware") or {})
        if not self.auth_enabled:
            middleware["auth"] = False
        elif not parse_enabled(middleware.get("auth", True)):
            raise ConfigError("[auth] is configured but [middleware] auth is off")
        else:
            middleware["auth"] = True

        self.dispatcher = middleware_chain(middleware, app or StatusApp(), full_config=self.config)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> ManagementServer:
        """Load a TOML file and build the server from it."""
        return cls(load_config(path), **kwargs)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self.lifespan(scope, receive, send)
        else:
            await self.dispatcher(scope, receive, send)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Run the server using Uvicorn."""
        import uvicorn

        host = host or self.settings["host"]
        port = port if port is not None else self.settings["port"]

        self.logger.info(f"Starting server on {host}:{port}")
        uvicorn.run(self, host=host, port=port, log_level=self.settings["log_level"])

    def __repr__(self) -> str:
        return (
            f"ManagementServer(host={self.settings['host']!r}, "
            f"port={self.settings['port']}, auth_enabled={self.auth_enabled})"
        )
