# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication configuration, validation and strategy construction.

Startup sequence used by AuthMiddleware::

    config = AuthConfig.from_mapping(section)   # [auth] table of the TOML file
    enabled = config.validate()                 # raises AuthConfigError
    login_url, strategy = new_auth_strategy(config, logger)

Validation rules per auth type:

    none / ""             nothing required, enabled=False
    basic                 username, password
    jwt, cookie           login-url (must parse, with a path), username, password
    preshared-token       token-value (token-name defaults to "Bearer")
    preshared-parameter   token-value (token-name defaults to "Bearer")

Type tags are case-insensitive and whitespace-trimmed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from ..exceptions import (
    InvalidAuthTypeError,
    InvalidLoginURLError,
    LoginURLRequiredError,
    MissingPasswordError,
    MissingTokenValueError,
    MissingUsernameError,
    NilLoggerError,
)
from .base import DEFAULT_TOKEN_NAME, AuthStrategy, DisabledStrategy
from .basic import BasicStrategy
from .jwt_auth import JWTStrategy
from .preshared import PresharedParamStrategy, PresharedTokenStrategy
from .session import CookieSessionStrategy

__all__ = [
    "AuthType",
    "AuthConfig",
    "STRATEGY_REGISTRY",
    "parse_auth_type",
    "new_auth_strategy",
]


class AuthType(str, Enum):
    """Recognized authentication type tags."""

    NONE = "none"
    BASIC = "basic"
    JWT = "jwt"
    COOKIE = "cookie"
    PRESHARED_TOKEN = "preshared-token"
    PRESHARED_PARAM = "preshared-parameter"

    def __str__(self) -> str:
        return self.value


STRATEGY_REGISTRY: dict[AuthType, type[AuthStrategy]] = {
    AuthType.NONE: DisabledStrategy,
    AuthType.BASIC: BasicStrategy,
    AuthType.JWT: JWTStrategy,
    AuthType.COOKIE: CookieSessionStrategy,
    AuthType.PRESHARED_TOKEN: PresharedTokenStrategy,
    AuthType.PRESHARED_PARAM: PresharedParamStrategy,
}

# normalized section key (lowercase, no "-" or "_") -> AuthConfig field
_FIELD_ALIASES: dict[str, str] = {
    "type": "auth_type",
    "authtype": "auth_type",
    "username": "username",
    "password": "password",
    "loginurl": "login_url",
    "tokenname": "token_name",
    "tokenvalue": "token_value",
}


def parse_auth_type(value: str | AuthType | None) -> AuthType:
    """Normalize a type tag.

    Empty or missing values mean authentication is disabled.

    Raises:
        InvalidAuthTypeError: Non-empty value that names no strategy.
    """
    if isinstance(value, AuthType):
        return value
    tag = (value or "").strip().lower()
    if not tag:
        return AuthType.NONE
    try:
        return AuthType(tag)
    except ValueError:
        raise InvalidAuthTypeError(tag) from None


@dataclass
class AuthConfig:
    """Authentication settings for one listener.

    Treat as immutable once ``validate()`` has returned: validation fills in
    the default token name for the preshared types.
    """

    auth_type: AuthType | str = AuthType.NONE
    username: str = ""
    password: str = field(default="", repr=False)
    login_url: str = ""
    token_name: str = ""
    token_value: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        self.auth_type = parse_auth_type(self.auth_type)

    @classmethod
    def from_mapping(cls, section: Mapping[str, Any] | None) -> AuthConfig:
        """Build from a config section.

        Keys are matched case-insensitively with ``-`` and ``_`` ignored, so
        ``auth-type``, ``Auth-Type``, ``auth_type`` and ``AuthType`` are the
        same key. Unknown keys are ignored.
        """
        kwargs: dict[str, str] = {}
        for key, value in (section or {}).items():
            normalized = str(key).lower().replace("-", "").replace("_", "")
            name = _FIELD_ALIASES.get(normalized)
            if name is not None and value is not None:
                kwargs[name] = str(value)
        return cls(**kwargs)

    @property
    def type(self) -> AuthType:
        return parse_auth_type(self.auth_type)

    def validate(self) -> bool:
        """Check the fields required by the auth type.

        Returns:
            True when authentication is enabled, False for ``none``.

        Raises:
            AuthConfigError: Missing or invalid field for the type.
        """
        auth_type = self.type
        if auth_type is AuthType.NONE:
            return False
        if auth_type is AuthType.BASIC:
            self._require_credentials(auth_type)
        elif auth_type in (AuthType.JWT, AuthType.COOKIE):
            self._require_login_url(auth_type)
            self._require_credentials(auth_type)
        else:
            if not self.token_name:
                self.token_name = DEFAULT_TOKEN_NAME
            if not self.token_value:
                raise MissingTokenValueError(auth_type.value)
        return True

    def _require_credentials(self, auth_type: AuthType) -> None:
        if not self.username:
            raise MissingUsernameError(auth_type.value)
        if not self.password:
            raise MissingPasswordError(auth_type.value)

    def _require_login_url(self, auth_type: AuthType) -> None:
        if not self.login_url:
            raise LoginURLRequiredError(auth_type.value)
        try:
            parsed = urlsplit(self.login_url)
        except ValueError as e:
            raise InvalidLoginURLError(self.login_url, auth_type.value, str(e)) from e
        if not parsed.path:
            raise InvalidLoginURLError(self.login_url, auth_type.value, "missing path")


def new_auth_strategy(
    config: AuthConfig, logger: logging.Logger | None
) -> tuple[str, AuthStrategy]:
    """Build the strategy selected by ``config``.

    Returns:
        ``(login_url, strategy)``. ``login_url`` is empty unless the strategy
        has a login step (jwt, cookie).

    Raises:
        NilLoggerError: ``logger`` is None.
        MissingTokenNameError / MissingTokenValueError: Preshared strategy
            without token name or value.
        MissingUsernameError / MissingPasswordError: Credential strategies
            without credentials.
        EntropyError: JWT signing secret could not be generated.
    """
    if logger is None:
        raise NilLoggerError()
    auth_type = config.type
    if auth_type is AuthType.NONE:
        return "", DisabledStrategy()
    if auth_type is AuthType.BASIC:
        return "", BasicStrategy(config.username, config.password, logger)
    if auth_type is AuthType.JWT:
        return config.login_url, JWTStrategy(config.username, config.password, logger)
    if auth_type is AuthType.COOKIE:
        return config.login_url, CookieSessionStrategy(config.username, config.password, logger)
    if auth_type is AuthType.PRESHARED_TOKEN:
        return "", PresharedTokenStrategy(config.token_name, config.token_value, logger)
    return "", PresharedParamStrategy(config.token_name, config.token_value, logger)
