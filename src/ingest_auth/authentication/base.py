# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication strategy contract and fixed constants.

Every strategy answers two questions for AuthMiddleware:

- ``login(request)``: handle a POST to the login URL and build the response.
  Only the stateful strategies (JWT, cookie session) have a login URL; the
  others answer 404, which is never reached in practice because the
  middleware only routes the login URL the factory returned.
- ``auth_request(request)``: return None to let the request through, raise
  an ``AuthenticationError`` subclass to reject it.

Constants below are part of the wire contract and are not configurable.
"""

from __future__ import annotations

import hmac
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, ClassVar

from ..request import FormDataError
from ..response import Response

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = [
    "AuthStrategy",
    "DisabledStrategy",
    "COOKIE_NAME",
    "DEFAULT_TOKEN_NAME",
    "JWT_SCHEME",
    "ISSUER",
    "SESSION_DURATION",
    "SECRET_SIZE",
    "USERNAME_FIELD",
    "PASSWORD_FIELD",
    "check_login_form",
    "not_found",
    "secrets_equal",
]

COOKIE_NAME = "_ingestauth"
DEFAULT_TOKEN_NAME = "Bearer"
JWT_SCHEME = "Bearer"
ISSUER = "ingest-auth"
SESSION_DURATION = timedelta(hours=48)
SECRET_SIZE = 32

USERNAME_FIELD = "username"
PASSWORD_FIELD = "password"


def not_found() -> Response:
    return Response("Not found", status_code=404, media_type="text/plain")


def secrets_equal(given: str, expected: str) -> bool:
    """Exact, constant-time string comparison."""
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def check_login_form(
    request: HttpRequest, username: str, password: str, logger: logging.Logger
) -> Response | None:
    """Validate the username/password fields of a login POST.

    Returns:
        None when the credentials match, otherwise the response to send:
        400 for an unreadable form, 403 for wrong credentials.
    """
    try:
        given_user = request.form_value(USERNAME_FIELD)
        given_pass = request.form_value(PASSWORD_FIELD)
    except FormDataError as e:
        logger.info(f"bad login request {e}")
        return Response("Bad request", status_code=400, media_type="text/plain")
    # both fields are always compared
    user_ok = secrets_equal(given_user, username)
    pass_ok = secrets_equal(given_pass, password)
    if not (user_ok and pass_ok):
        logger.info(f"{request.requester} Failed login")
        return Response("Forbidden", status_code=403, media_type="text/plain")
    return None


class AuthStrategy(ABC):
    """Base class for authentication strategies.

    Class Attributes:
        auth_type: Config tag of the strategy ("basic", "jwt", ...).
        challenge: ``WWW-Authenticate`` value sent with 401 responses, or None.
    """

    auth_type: ClassVar[str] = ""
    challenge: ClassVar[str | None] = None

    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    def login(self, request: HttpRequest) -> Response:
        """Handle a login POST. Stateless strategies answer ``not_found()``."""
        ...

    @abstractmethod
    def auth_request(self, request: HttpRequest) -> None:
        """Accept the request or raise an AuthenticationError subclass."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} auth_type={self.auth_type!r}>"


class DisabledStrategy(AuthStrategy):
    """No authentication. AuthMiddleware passes every request through."""

    auth_type = "none"

    @property
    def enabled(self) -> bool:
        return False

    def login(self, request: HttpRequest) -> Response:
        return not_found()

    def auth_request(self, request: HttpRequest) -> None:
        return None
