# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""HTTP Basic authentication against one configured username/password.

Handles: ``Authorization: Basic <base64(username:password)>``

Credentials are compared as plaintext; confidentiality of the header is left
to the transport (HTTPS in front of the management endpoint).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import (
    BadCredentialsError,
    MissingPasswordError,
    MissingUsernameError,
)
from ..response import Response
from .base import AuthStrategy, not_found, secrets_equal
from .extractors import extract_basic_credentials

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = ["BasicStrategy"]


class BasicStrategy(AuthStrategy):
    """Basic authentication (username:password)."""

    auth_type = "basic"
    challenge = 'Basic realm="ingest"'

    __slots__ = ("_username", "_password", "_logger")

    def __init__(self, username: str, password: str, logger: logging.Logger) -> None:
        if not username:
            raise MissingUsernameError(self.auth_type)
        if not password:
            raise MissingPasswordError(self.auth_type)
        self._username = username
        self._password = password
        self._logger = logger

    def login(self, request: HttpRequest) -> Response:
        return not_found()

    def auth_request(self, request: HttpRequest) -> None:
        username, password = extract_basic_credentials(request)
        user_ok = secrets_equal(username, self._username)
        pass_ok = secrets_equal(password, self._password)
        if not (user_ok and pass_ok):
            raise BadCredentialsError()
