# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Server-side session cookies.

Flow:
    1. Client POSTs ``username``/``password`` to the login URL.
    2. ``login`` stores a fresh random session id with an expiry 48h ahead and
       answers ``Set-Cookie: _ingestauth=<id>; Expires=...; Path=/``.
    3. Browser sends the cookie back; ``auth_request`` looks it up.

SessionStore
============
A dict of ``session_id -> expires_at`` (POSIX seconds) behind a single
``threading.Lock``. The lock is held for dictionary work only; callers log
after releasing it.

Expired entries are removed in two places and nowhere else:

- ``check`` deletes the entry it finds expired (and reports SessionExpired)
- ``add`` sweeps the whole map after inserting, so cleanup cost is paid by
  login traffic rather than a background timer

With no new logins, expired entries that are never presented again stay in
memory until the next login.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..exceptions import (
    EntropyError,
    MissingAuthenticationError,
    MissingPasswordError,
    MissingUsernameError,
    SessionExpiredError,
    UnauthorizedError,
)
from ..response import Response, make_cookie
from ..types import Clock
from .base import (
    COOKIE_NAME,
    SECRET_SIZE,
    SESSION_DURATION,
    AuthStrategy,
    check_login_form,
)
from .entropy import random_secret

if TYPE_CHECKING:
    from ..request import HttpRequest

__all__ = ["SessionStore", "CookieSessionStrategy"]


class SessionStore:
    """Concurrency-safe mapping of session id to expiry time."""

    __slots__ = ("_lock", "_sessions", "_clock")

    def __init__(self, clock: Clock = time.time) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, float] = {}
        self._clock = clock

    def add(self, session_id: str, expires_at: float) -> int:
        """Insert a session, then drop every expired entry.

        Returns:
            Number of expired entries removed by the sweep.
        """
        with self._lock:
            self._sessions[session_id] = expires_at
            return self._sweep_locked(self._clock())

    def check(self, session_id: str) -> None:
        """Accept a live session id.

        Raises:
            UnauthorizedError: Unknown id.
            SessionExpiredError: Known but ``now > expires_at``; the entry is
                removed before returning.
        """
        now = self._clock()
        with self._lock:
            expires_at = self._sessions.get(session_id)
            if expires_at is None:
                raise UnauthorizedError()
            if now > expires_at:
                del self._sessions[session_id]
                raise SessionExpiredError()

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [sid for sid, expires_at in self._sessions.items() if now > expires_at]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __repr__(self) -> str:
        return f"SessionStore(sessions={len(self)})"


class CookieSessionStrategy(AuthStrategy):
    """Login-issued session ids carried in the ``_ingestauth`` cookie."""

    auth_type = "cookie"

    __slots__ = ("_username", "_password", "_logger", "_clock", "_store")

    def __init__(
        self,
        username: str,
        password: str,
        logger: logging.Logger,
        clock: Clock = time.time,
    ) -> None:
        if not username:
            raise MissingUsernameError(self.auth_type)
        if not password:
            raise MissingPasswordError(self.auth_type)
        self._username = username
        self._password = password
        self._logger = logger
        self._clock = clock
        self._store = SessionStore(clock)

    @property
    def session_count(self) -> int:
        return len(self._store)

    def login(self, request: HttpRequest) -> Response:
        rejected = check_login_form(request, self._username, self._password, self._logger)
        if rejected is not None:
            return rejected
        expires_at = self._clock() + SESSION_DURATION.total_seconds()
        try:
            session_id = random_secret(SECRET_SIZE, urlsafe=True)
        except EntropyError as e:
            self._logger.error(f"Failed to generate cookie: {e}")
            return Response("Internal Server Error", status_code=500, media_type="text/plain")
        swept = self._store.add(session_id, expires_at)
        if swept:
            self._logger.debug(f"expired {swept} sessions")
        cookie = make_cookie(
            COOKIE_NAME,
            session_id,
            expires=datetime.fromtimestamp(expires_at, tz=timezone.utc),
            path="/",
            httponly=True,
        )
        self._logger.info(f"{request.requester} Successful login")
        return Response("", status_code=200, headers=[cookie], media_type="text/plain")

    def auth_request(self, request: HttpRequest) -> None:
        session_id = request.cookies.get(COOKIE_NAME)
        if not session_id:
            raise MissingAuthenticationError("invalid cookie")
        self._store.check(session_id)
