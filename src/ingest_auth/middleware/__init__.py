# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Middleware package - ASGI middleware for ingest-auth."""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

MIDDLEWARE_REGISTRY: dict[str, type["BaseMiddleware"]] = {}


class BaseMiddleware(ABC):
    """Base class for all middleware. Subclasses auto-register via __init_subclass__.

    Class attributes:
        middleware_name: Registry key (default: class name).
        middleware_order: Order in chain (lower = earlier). Ranges:
            100: Core (errors)
            400: Authentication (auth)
            500-800: Business logic (custom)
        middleware_default: Default on/off state. Default: False.
    """

    middleware_name: str = ""
    middleware_order: int = 500
    middleware_default: bool = False

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp, **kwargs: Any) -> None:
        """Initialize middleware with wrapped app.

        Args:
            app: The ASGI app to wrap (next in chain).
            **kwargs: Middleware-specific configuration from the TOML section
                named after the middleware.
        """
        self.app = app

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        name = cls.middleware_name or cls.__name__
        if name in MIDDLEWARE_REGISTRY:
            raise ValueError(f"Middleware name '{name}' already registered")
        cls.middleware_name = name
        MIDDLEWARE_REGISTRY[name] = cls

    @abstractmethod
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


def _autodiscover() -> None:
    """Import all middleware modules in this package to trigger registration."""
    package_dir = Path(__file__).parent
    for py_file in package_dir.glob("*.py"):
        if py_file.name.startswith("_"):
            continue
        module_name = py_file.stem
        importlib.import_module(f".{module_name}", __package__)


def section_kwargs(section: Mapping[str, Any] | None) -> dict[str, Any]:
    """Turn a config section into keyword arguments (``login-url`` -> ``login_url``)."""
    if not section:
        return {}
    return {str(key).replace("-", "_"): value for key, value in section.items()}


def middleware_chain(
    middleware_config: str | list[str] | Mapping[str, Any] | None,
    app: ASGIApp,
    full_config: Mapping[str, Any] | None = None,
) -> ASGIApp:
    """Build middleware chain from config with automatic ordering.

    Uses middleware_order class attribute for sorting (lower = earlier in chain).
    Uses middleware_default class attribute for default on/off state.

    TOML format::

        [middleware]
        auth = true
        errors = true   # default=True, so usually omitted

        [errors]
        debug = false

        [auth]
        auth-type = "jwt"
        login-url = "/login"
        username = "admin"
        password = "${INGEST_PASSWORD}"

    Args:
        middleware_config: Dict {name: on/off}, comma-separated string, or list.
        app: The innermost ASGI app.
        full_config: Full config mapping; each middleware reads the section
            named after it.

    Returns:
        Wrapped ASGI app with middleware chain.
    """
    config_dict: dict[str, bool] = {}

    if isinstance(middleware_config, str):
        # "errors, auth" -> all enabled
        for name in middleware_config.split(","):
            name = name.strip()
            if name:
                config_dict[name] = True
    elif isinstance(middleware_config, Mapping):
        for name, value in middleware_config.items():
            config_dict[name] = parse_enabled(value)
    elif middleware_config:
        for name in middleware_config:
            config_dict[name] = True

    enabled: list[tuple[int, str, type[BaseMiddleware]]] = []

    for name, cls in MIDDLEWARE_REGISTRY.items():
        if name in config_dict:
            is_enabled = config_dict[name]
        else:
            is_enabled = cls.middleware_default

        if is_enabled:
            enabled.append((cls.middleware_order, name, cls))

    enabled.sort(key=lambda x: x[0])

    # first in order = outermost wrapper
    for _order, name, cls in reversed(enabled):
        config: dict[str, Any] = {}
        if full_config is not None:
            config = section_kwargs(full_config.get(name))
        app = cls(app, **config)

    return app


def parse_enabled(value: Any) -> bool:
    """Parse on/off/true/false value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("on", "true", "yes", "1")
    return bool(value)


_autodiscover()
# export by class name: registry keys ("errors", "auth") would shadow submodules
globals().update({cls.__name__: cls for cls in MIDDLEWARE_REGISTRY.values()})

__all__ = [
    "BaseMiddleware",
    "MIDDLEWARE_REGISTRY",
    "middleware_chain",
    "parse_enabled",
    "section_kwargs",
    *(cls.__name__ for cls in MIDDLEWARE_REGISTRY.values()),
]
