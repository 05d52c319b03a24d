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

"""
Exception classes for ingest-auth.

Module Structure
----------------
Four families, each with its own base class so callers can catch a whole
family at the boundary where it is handled:

1. HTTPException - HTTP error responses raised inside the middleware chain
   and converted to responses by ErrorMiddleware.
2. AuthConfigError - invalid authentication configuration. Raised while
   validating an AuthConfig or constructing a strategy. Fatal: the service
   must not start.
3. AuthenticationError - a single request was rejected. Raised by
   ``AuthStrategy.auth_request`` and caught by AuthMiddleware, which logs it
   with the requester address and answers 401. Never fatal.
4. EntropyError - the secure random source failed. Fatal to strategy
   construction.

HTTPException
-------------
Attributes:
    status_code (int): HTTP status code (expected 4xx or 5xx)
    detail (str): Error detail message (default: "")
    headers (list[tuple[str, str]] | None): Optional response headers.
        Input can be dict[str, str] or list[tuple[str, str]], stored as list.

Example:
    >>> raise HTTPException(404, detail="Not found")
    >>> raise HTTPUnauthorized(headers={"WWW-Authenticate": 'Basic realm="ingest"'})

AuthenticationError
-------------------
The message of each subclass is fixed and safe to log. Callers must not
forward it to the client: the middleware always answers a bare 401.

    MissingAuthenticationError    no usable credential in the request
    BadCredentialsError           basic auth username/password mismatch
    UnauthorizedError             credential present but not accepted
    SessionExpiredError           session cookie known but past its expiry
    MissingParameterError         query parameter token absent or empty
    InvalidOrExpiredTokenError    JWT failed any verification step
    UnexpectedSigningMethodError  JWT not signed with an HMAC algorithm
"""

from __future__ import annotations

__all__ = [
    "HTTPException",
    "HTTPUnauthorized",
    "HTTPMethodNotAllowed",
    "HTTPPayloadTooLarge",
    "AuthConfigError",
    "InvalidAuthTypeError",
    "LoginURLRequiredError",
    "InvalidLoginURLError",
    "MissingUsernameError",
    "MissingPasswordError",
    "MissingTokenNameError",
    "MissingTokenValueError",
    "NilLoggerError",
    "AuthenticationError",
    "MissingAuthenticationError",
    "BadCredentialsError",
    "UnauthorizedError",
    "SessionExpiredError",
    "MissingParameterError",
    "InvalidOrExpiredTokenError",
    "UnexpectedSigningMethodError",
    "EntropyError",
]


class HTTPException(Exception):
    """
    HTTP exception with status code and detail.

    Raise this inside the middleware chain to return an HTTP error response.
    ErrorMiddleware catches it and sends the status code, detail and headers.

    Attributes:
        status_code: HTTP status code (expected 4xx or 5xx, not validated)
        detail: Error detail message
        headers: Response headers as list of tuples (supports duplicate names)
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        """
        Initialize HTTP exception.

        Args:
            status_code: HTTP status code (4xx, 5xx expected)
            detail: Error detail message (default: "")
            headers: Response headers as dict or list of tuples (default: None).
                     Dict is converted to list internally to support duplicate names.
        """
        self.status_code = status_code
        self.detail = detail
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        super().__init__(detail)

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"HTTPException(status_code={self.status_code}, detail={self.detail!r})"


class HTTPUnauthorized(HTTPException):
    """HTTP 401 Unauthorized exception."""

    def __init__(
        self,
        detail: str = "Unauthorized",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(401, detail=detail, headers=headers)


class HTTPMethodNotAllowed(HTTPException):
    """HTTP 405 Method Not Allowed exception."""

    def __init__(self, allow: str, detail: str = "Method not allowed") -> None:
        super().__init__(405, detail=detail, headers={"Allow": allow})


class HTTPPayloadTooLarge(HTTPException):
    """HTTP 413 Content Too Large exception."""

    def __init__(self, detail: str = "Content too large") -> None:
        super().__init__(413, detail=detail)


# -----------------------------------------------------------------------------
# Configuration errors
# -----------------------------------------------------------------------------


class AuthConfigError(Exception):
    """Authentication configuration is invalid; the service must not start."""


class InvalidAuthTypeError(AuthConfigError):
    """Auth type tag is not one of the recognized strategies."""

    def __init__(self, value: str) -> None:
        self.value = value
        # callers that choose to keep going treat the type as disabled
        self.fallback = "none"
        super().__init__(f"Invalid authentication type {value!r}")


class LoginURLRequiredError(AuthConfigError):
    """Stateful strategy configured without a login URL."""

    def __init__(self, auth_type: str) -> None:
        self.auth_type = auth_type
        super().__init__(f"Authentication type {auth_type} requires a login URL")


class InvalidLoginURLError(AuthConfigError):
    """Login URL does not parse as a URL with a path."""

    def __init__(self, url: str, auth_type: str, reason: str) -> None:
        self.url = url
        self.auth_type = auth_type
        super().__init__(f"Invalid login url {url!r} for {auth_type} authentication: {reason}")


class MissingUsernameError(AuthConfigError):
    """Username required by the auth type is empty."""

    def __init__(self, auth_type: str) -> None:
        self.auth_type = auth_type
        super().__init__(f"Missing username for {auth_type} authentication")


class MissingPasswordError(AuthConfigError):
    """Password required by the auth type is empty."""

    def __init__(self, auth_type: str) -> None:
        self.auth_type = auth_type
        super().__init__(f"Missing password for {auth_type} authentication")


class MissingTokenNameError(AuthConfigError):
    """Preshared token name (header scheme or query parameter) is empty."""

    def __init__(self) -> None:
        super().__init__("Token name is invalid")


class MissingTokenValueError(AuthConfigError):
    """Preshared token value is empty."""

    def __init__(self, auth_type: str = "") -> None:
        self.auth_type = auth_type
        if auth_type:
            super().__init__(f"Missing token value for auth type {auth_type}")
        else:
            super().__init__("Token value cannot be empty")


class NilLoggerError(AuthConfigError):
    """Strategy construction attempted without a logger."""

    def __init__(self) -> None:
        super().__init__("A logger is required to build an authentication strategy")


# -----------------------------------------------------------------------------
# Per-request authentication errors
# -----------------------------------------------------------------------------


class AuthenticationError(Exception):
    """A request was rejected by the active strategy (maps to HTTP 401)."""

    message = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class MissingAuthenticationError(AuthenticationError):
    message = "Missing authentication"


class BadCredentialsError(AuthenticationError):
    message = "Bad username or password"


class UnauthorizedError(AuthenticationError):
    message = "Unauthorized"


class SessionExpiredError(AuthenticationError):
    message = "Session expired"


class MissingParameterError(AuthenticationError):
    message = "Missing parameter"

    def __init__(self, name: str = "") -> None:
        self.name = name
        super().__init__(f"Missing {name} parameter" if name else None)


class InvalidOrExpiredTokenError(AuthenticationError):
    message = "invalid or expired token"


class UnexpectedSigningMethodError(AuthenticationError):
    message = "Unexpected signing method"

    def __init__(self, algorithm: str = "") -> None:
        self.algorithm = algorithm
        super().__init__(f"Unexpected signing method {algorithm!r}" if algorithm else None)


# -----------------------------------------------------------------------------
# Entropy
# -----------------------------------------------------------------------------


class EntropyError(Exception):
    """Secure random source failed or returned a short read."""
