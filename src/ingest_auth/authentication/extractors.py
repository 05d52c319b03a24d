# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Credential extraction from requests.

Pure functions: they read the request and either return the credential or
raise the AuthenticationError the calling strategy reports.

    Authorization: <scheme> <token>     extract_header_token
    ?<name>=<token>                     extract_query_token
    Authorization: Basic base64(u:p)    extract_basic_credentials
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from ..exceptions import (
    MissingAuthenticationError,
    MissingParameterError,
    MissingTokenNameError,
)

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = [
    "extract_basic_credentials",
    "extract_header_token",
    "extract_query_token",
]


def extract_header_token(request: HttpRequest, scheme: str) -> str:
    """Return the credential following ``scheme + " "`` in Authorization.

    The scheme match is exact (case-sensitive), as the configured token name
    is part of the shared secret contract.

    Raises:
        MissingTokenNameError: ``scheme`` is empty.
        MissingAuthenticationError: Header absent or prefixed differently.
    """
    if not scheme:
        raise MissingTokenNameError()
    header = request.headers.get("authorization")
    if not header:
        raise MissingAuthenticationError("Missing Authorization header value")
    prefix = f"{scheme} "
    if not header.startswith(prefix):
        raise MissingAuthenticationError("invalid authorization token name")
    return header[len(prefix):]


def extract_query_token(request: HttpRequest, name: str) -> str:
    """Return the first non-empty value of query parameter ``name``.

    Repeated parameters are tolerated: ``?t=&t=abc`` yields ``"abc"``.

    Raises:
        MissingTokenNameError: ``name`` is empty.
        MissingParameterError: Parameter absent or every occurrence empty.
    """
    if not name:
        raise MissingTokenNameError()
    value = request.query_params.first_non_empty(name)
    if value is None:
        raise MissingParameterError(name)
    return value


def extract_basic_credentials(request: HttpRequest) -> tuple[str, str]:
    """Decode ``Authorization: Basic base64(username:password)``.

    Scheme comparison is case-insensitive (RFC 7617). The password may
    contain colons; the username may not.

    Raises:
        MissingAuthenticationError: Header absent, other scheme, bad base64,
            or no colon separator.
    """
    header = request.headers.get("authorization")
    if not header or " " not in header:
        raise MissingAuthenticationError()
    scheme, encoded = header.split(" ", 1)
    if scheme.lower() != "basic":
        raise MissingAuthenticationError()
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        raise MissingAuthenticationError() from None
    if ":" not in decoded:
        raise MissingAuthenticationError()
    username, password = decoded.split(":", 1)
    return username, password
