# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""ingest-auth - Authentication middleware for an ingest management endpoint.

Main components:
    ManagementServer: ASGI entry point, loads config, builds the chain
    AuthMiddleware: login route + per-request authentication
    ErrorMiddleware: Exception handling and error responses

Strategies (auth-type):
    none                 DisabledStrategy
    basic                BasicStrategy
    jwt                  JWTStrategy
    cookie               CookieSessionStrategy
    preshared-token      PresharedTokenStrategy
    preshared-parameter  PresharedParamStrategy

Usage:
    from ingest_auth import ManagementServer

    server = ManagementServer.from_file("ingest-auth.toml")
    server.run()  # Starts uvicorn
"""

__version__ = "0.1.0"

from .authentication import (
    STRATEGY_REGISTRY,
    AuthConfig,
    AuthStrategy,
    AuthType,
    BasicStrategy,
    CookieSessionStrategy,
    DisabledStrategy,
    JWTStrategy,
    PresharedParamStrategy,
    PresharedTokenStrategy,
    SessionStore,
    new_auth_strategy,
    parse_auth_type,
    random_secret,
)
from .config import ConfigError, find_config_file, load_config
from .datastructures import Address, Headers, QueryParams, parse_cookie_header
from .exceptions import (
    AuthConfigError,
    AuthenticationError,
    EntropyError,
    HTTPException,
    HTTPUnauthorized,
)
from .middleware import middleware_chain
from .middleware.authentication import AuthMiddleware
from .middleware.errors import ErrorMiddleware
from .request import FormDataError, HttpRequest
from .response import Response, make_cookie
from .server import ManagementServer, StatusApp
from .types import ASGIApp, Clock, Message, Receive, Scope, Send

__all__ = [
    # Authentication
    "AuthConfig",
    "AuthStrategy",
    "AuthType",
    "BasicStrategy",
    "CookieSessionStrategy",
    "DisabledStrategy",
    "JWTStrategy",
    "PresharedParamStrategy",
    "PresharedTokenStrategy",
    "STRATEGY_REGISTRY",
    "SessionStore",
    "new_auth_strategy",
    "parse_auth_type",
    "random_secret",
    # Config
    "ConfigError",
    "find_config_file",
    "load_config",
    # Data structures
    "Address",
    "Headers",
    "QueryParams",
    "parse_cookie_header",
    # Exceptions
    "AuthConfigError",
    "AuthenticationError",
    "EntropyError",
    "HTTPException",
    "HTTPUnauthorized",
    # Middleware
    "AuthMiddleware",
    "ErrorMiddleware",
    "middleware_chain",
    # Request / response
    "FormDataError",
    "HttpRequest",
    "Response",
    "make_cookie",
    # Server
    "ManagementServer",
    "StatusApp",
    # ASGI types
    "ASGIApp",
    "Clock",
    "Message",
    "Receive",
    "Scope",
    "Send",
]
