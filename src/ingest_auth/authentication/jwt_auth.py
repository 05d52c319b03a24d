# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""JSON Web Token authentication with a per-process signing secret.

Flow:
    1. Client POSTs ``username``/``password`` (urlencoded) to the login URL.
    2. ``login`` answers with a compact JWS signed HS256 by a secret drawn at
       construction time: claims ``{"iss": ISSUER, "nbf": now, "exp": now + 48h}``.
    3. Client sends ``Authorization: Bearer <token>`` on every request.

The server keeps no per-token state. The secret lives only in this instance,
so every token becomes invalid when the process restarts.

Verification (``auth_request``):
    - header algorithm must be an HMAC algorithm (HS256/HS384/HS512);
      anything else (``none``, RS*, ES*) is refused before key use
    - signature, required claims and issuer are checked by ``jwt.decode``
    - ``nbf <= now <= exp`` against the injected clock

Every failure surfaces to the caller as ``InvalidOrExpiredTokenError``; the
specific reason is chained as ``__cause__`` and logged at DEBUG.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import jwt

from ..exceptions import (
    EntropyError,
    InvalidOrExpiredTokenError,
    MissingPasswordError,
    MissingUsernameError,
    UnexpectedSigningMethodError,
)
from ..response import Response
from ..types import Clock
from .base import (
    ISSUER,
    JWT_SCHEME,
    SECRET_SIZE,
    SESSION_DURATION,
    AuthStrategy,
    check_login_form,
)
from .entropy import random_secret
from .extractors import extract_header_token

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = ["JWTStrategy", "HMAC_ALGORITHMS", "SIGNING_ALGORITHM"]

SIGNING_ALGORITHM = "HS256"
HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]
REQUIRED_CLAIMS = ["iss", "nbf", "exp"]


class JWTStrategy(AuthStrategy):
    """Stateless bearer tokens signed with an in-memory HMAC secret."""

    auth_type = "jwt"
    challenge = f"{JWT_SCHEME} realm=\"ingest\""

    __slots__ = ("_secret", "_username", "_password", "_logger", "_clock")

    def __init__(
        self,
        username: str,
        password: str,
        logger: logging.Logger,
        clock: Clock = time.time,
    ) -> None:
        """
        Raises:
            MissingUsernameError / MissingPasswordError: Empty credentials.
            EntropyError: Signing secret could not be generated.
        """
        if not username:
            raise MissingUsernameError(self.auth_type)
        if not password:
            raise MissingPasswordError(self.auth_type)
        self._secret = random_secret(SECRET_SIZE).encode("ascii")
        self._username = username
        self._password = password
        self._logger = logger
        self._clock = clock

    def issue_token(self) -> str:
        """Mint a token valid from now for SESSION_DURATION."""
        now = int(self._clock())
        claims = {
            "iss": ISSUER,
            "nbf": now,
            "exp": now + int(SESSION_DURATION.total_seconds()),
        }
        return jwt.encode(claims, self._secret, algorithm=SIGNING_ALGORITHM)

    def login(self, request: HttpRequest) -> Response:
        rejected = check_login_form(request, self._username, self._password, self._logger)
        if rejected is not None:
            return rejected
        try:
            token = self.issue_token()
        except (jwt.PyJWTError, EntropyError, TypeError, ValueError) as e:
            self._logger.info(f"{request.requester} Bad JWT token: {e}")
            return Response("Internal Server Error", status_code=500, media_type="text/plain")
        self._logger.info(f"{request.requester} Successful login")
        return Response(token, status_code=200, media_type="text/plain")

    def auth_request(self, request: HttpRequest) -> None:
        token = extract_header_token(request, JWT_SCHEME)
        try:
            self._verify(token)
        except (jwt.PyJWTError, UnexpectedSigningMethodError) as e:
            self._logger.debug(f"{request.requester} JWT rejected: {e}")
            raise InvalidOrExpiredTokenError() from e

    def _verify(self, token: str) -> dict[str, Any]:
        header = jwt.get_unverified_header(token)
        algorithm = str(header.get("alg", ""))
        if algorithm not in HMAC_ALGORITHMS:
            raise UnexpectedSigningMethodError(algorithm)
        claims: dict[str, Any] = jwt.decode(
            token,
            self._secret,
            algorithms=HMAC_ALGORITHMS,
            issuer=ISSUER,
            options={
                "require": REQUIRED_CLAIMS,
                "verify_exp": False,
                "verify_nbf": False,
            },
        )
        now = self._clock()
        if now < claims["nbf"]:
            raise jwt.ImmatureSignatureError("The token is not yet valid (nbf)")
        if now > claims["exp"]:
            raise jwt.ExpiredSignatureError("Signature has expired")
        return claims
