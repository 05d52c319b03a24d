# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Preshared secret strategies.

Both compare a request credential with one configured value and differ only
in where the credential travels:

    PresharedTokenStrategy   Authorization: <token-name> <token-value>
    PresharedParamStrategy   ?<token-name>=<token-value>
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import MissingTokenNameError, MissingTokenValueError, UnauthorizedError
from ..response import Response
from .base import AuthStrategy, not_found, secrets_equal
from .extractors import extract_header_token, extract_query_token

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = ["PresharedTokenStrategy", "PresharedParamStrategy"]


def _require_token(name: str, value: str) -> None:
    if not name:
        raise MissingTokenNameError()
    if not value:
        raise MissingTokenValueError()


class PresharedTokenStrategy(AuthStrategy):
    """Static token in the Authorization header under a configured scheme."""

    auth_type = "preshared-token"

    __slots__ = ("_token_name", "_token_value", "_logger")

    def __init__(self, token_name: str, token_value: str, logger: logging.Logger) -> None:
        _require_token(token_name, token_value)
        self._token_name = token_name
        self._token_value = token_value
        self._logger = logger

    @property
    def token_name(self) -> str:
        return self._token_name

    def login(self, request: HttpRequest) -> Response:
        return not_found()

    def auth_request(self, request: HttpRequest) -> None:
        token = extract_header_token(request, self._token_name)
        if not secrets_equal(token, self._token_value):
            raise UnauthorizedError()


class PresharedParamStrategy(AuthStrategy):
    """Static token in a named URL query parameter."""

    auth_type = "preshared-parameter"

    __slots__ = ("_token_name", "_token_value", "_logger")

    def __init__(self, token_name: str, token_value: str, logger: logging.Logger) -> None:
        _require_token(token_name, token_value)
        self._token_name = token_name
        self._token_value = token_value
        self._logger = logger

    @property
    def token_name(self) -> str:
        return self._token_name

    def login(self, request: HttpRequest) -> Response:
        return not_found()

    def auth_request(self, request: HttpRequest) -> None:
        token = extract_query_token(request, self._token_name)
        if not secrets_equal(token, self._token_value):
            raise UnauthorizedError()
