# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication strategies for AuthMiddleware.

Each strategy validates one kind of credential. The factory picks one from
the ``[auth]`` config section.

Exports:
    AuthStrategy: ABC for strategies
    DisabledStrategy: auth-type "none"
    BasicStrategy: "Authorization: Basic <base64>"
    JWTStrategy: "Authorization: Bearer <jwt>" issued by the login URL
    CookieSessionStrategy: "_ingestauth" cookie issued by the login URL
    PresharedTokenStrategy: "Authorization: <token-name> <token-value>"
    PresharedParamStrategy: "?<token-name>=<token-value>"
    SessionStore: expiring session id map used by the cookie strategy
    AuthConfig / AuthType / new_auth_strategy: configuration and factory
    STRATEGY_REGISTRY: Dict mapping AuthType to strategy class
"""

from .base import (
    COOKIE_NAME,
    DEFAULT_TOKEN_NAME,
    ISSUER,
    JWT_SCHEME,
    SECRET_SIZE,
    SESSION_DURATION,
    AuthStrategy,
    DisabledStrategy,
)
from .basic import BasicStrategy
from .entropy import random_secret
from .extractors import extract_basic_credentials, extract_header_token, extract_query_token
from .factory import STRATEGY_REGISTRY, AuthConfig, AuthType, new_auth_strategy, parse_auth_type
from .jwt_auth import JWTStrategy
from .preshared import PresharedParamStrategy, PresharedTokenStrategy
from .session import CookieSessionStrategy, SessionStore

__all__ = [
    "AuthConfig",
    "AuthStrategy",
    "AuthType",
    "BasicStrategy",
    "COOKIE_NAME",
    "CookieSessionStrategy",
    "DEFAULT_TOKEN_NAME",
    "DisabledStrategy",
    "ISSUER",
    "JWTStrategy",
    "JWT_SCHEME",
    "PresharedParamStrategy",
    "PresharedTokenStrategy",
    "SECRET_SIZE",
    "SESSION_DURATION",
    "STRATEGY_REGISTRY",
    "SessionStore",
    "extract_basic_credentials",
    "extract_header_token",
    "extract_query_token",
    "new_auth_strategy",
    "parse_auth_type",
    "random_secret",
]
