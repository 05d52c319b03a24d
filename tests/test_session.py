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

"""Tests for SessionStore and CookieSessionStrategy."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any

import pytest

from ingest_auth.authentication import (
    COOKIE_NAME,
    SESSION_DURATION,
    CookieSessionStrategy,
    SessionStore,
)
from ingest_auth.exceptions import (
    MissingAuthenticationError,
    SessionExpiredError,
    UnauthorizedError,
)
from ingest_auth.request import HttpRequest

NOW = 1_700_000_000.0
DURATION = SESSION_DURATION.total_seconds()
FORM = (b"content-type", b"application/x-www-form-urlencoded")


class FakeClock:
    """Settable wall clock."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_request(cookie: str | None = None, body: bytes | None = None) -> HttpRequest:
    headers: list[tuple[bytes, bytes]] = [FORM]
    if cookie is not None:
        headers.append((b"cookie", cookie.encode("latin-1")))
    scope: dict[str, Any] = {
        "type": "http",
        "method": "POST" if body is not None else "GET",
        "path": "/",
        "query_string": b"",
        "headers": headers,
        "client": ("192.0.2.20", 40000),
    }
    return HttpRequest(scope, body=body)


def cookie_pair(set_cookie: str) -> str:
    """``name=value`` part of a Set-Cookie header."""
    return set_cookie.split(";", 1)[0]


class TestSessionStore:
    """Tests for SessionStore."""

    def test_check_live(self) -> None:
        store = SessionStore(FakeClock())
        store.add("a", NOW + 10)
        assert store.check("a") is None
        assert "a" in store

    def test_unknown(self) -> None:
        store = SessionStore(FakeClock())
        with pytest.raises(UnauthorizedError):
            store.check("nope")

    def test_valid_at_expiry_instant(self) -> None:
        clock = FakeClock()
        store = SessionStore(clock)
        store.add("a", NOW + 10)
        clock.now = NOW + 10
        assert store.check("a") is None

    def test_expired_is_removed(self) -> None:
        clock = FakeClock()
        store = SessionStore(clock)
        store.add("a", NOW + 10)
        clock.now = NOW + 11
        with pytest.raises(SessionExpiredError):
            store.check("a")
        assert "a" not in store
        with pytest.raises(UnauthorizedError):
            store.check("a")

    def test_add_sweeps_expired(self) -> None:
        clock = FakeClock()
        store = SessionStore(clock)
        assert store.add("a", NOW + 10) == 0
        assert store.add("b", NOW + 100) == 0
        clock.now = NOW + 50
        assert store.add("c", NOW + 150) == 1
        assert len(store) == 2
        assert "a" not in store

    def test_sweep(self) -> None:
        clock = FakeClock()
        store = SessionStore(clock)
        store.add("a", NOW + 10)
        store.add("b", NOW + 20)
        clock.now = NOW + 30
        assert len(store) == 2
        assert store.sweep() == 2
        assert len(store) == 0

    def test_readd_replaces_expiry(self) -> None:
        clock = FakeClock()
        store = SessionStore(clock)
        store.add("a", NOW + 10)
        store.add("a", NOW + 100)
        clock.now = NOW + 50
        assert store.check("a") is None
        assert len(store) == 1

    def test_concurrent_access(self) -> None:
        """Parallel add/check from many threads keeps the map consistent."""
        store = SessionStore()
        far = 4_000_000_000.0
        workers, per_worker = 8, 250
        errors: list[BaseException] = []
        barrier = threading.Barrier(workers)

        def work(worker: int) -> None:
            barrier.wait()
            try:
                for i in range(per_worker):
                    sid = f"{worker}-{i}"
                    store.add(sid, far)
                    store.check(sid)
                    if i:
                        store.check(f"{worker}-{i - 1}")
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(work, range(workers)))

        assert errors == []
        assert len(store) == workers * per_worker


class TestCookieSessionStrategy:
    """Tests for CookieSessionStrategy."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def strategy(self, clock: FakeClock) -> CookieSessionStrategy:
        return CookieSessionStrategy("admin", "s3cret", logging.getLogger("tests.session"), clock=clock)

    def login(self, strategy: CookieSessionStrategy) -> str:
        response = strategy.login(make_request(body=b"username=admin&password=s3cret"))
        assert response.status_code == 200
        set_cookies = [value for name, value in response.headers if name == "set-cookie"]
        assert len(set_cookies) == 1
        return set_cookies[0]

    def test_login_sets_cookie(self, strategy: CookieSessionStrategy) -> None:
        set_cookie = self.login(strategy)
        assert set_cookie.startswith(f"{COOKIE_NAME}=")
        assert "; Path=/" in set_cookie
        assert "; HttpOnly" in set_cookie
        expires = datetime.fromtimestamp(NOW + DURATION, tz=timezone.utc)
        assert f"Expires={format_datetime(expires, usegmt=True)}" in set_cookie
        assert strategy.session_count == 1

    def test_cookie_accepted(self, strategy: CookieSessionStrategy) -> None:
        pair = cookie_pair(self.login(strategy))
        assert strategy.auth_request(make_request(cookie=pair)) is None

    def test_cookie_among_others(self, strategy: CookieSessionStrategy) -> None:
        pair = cookie_pair(self.login(strategy))
        assert strategy.auth_request(make_request(cookie=f"theme=dark; {pair}")) is None

    def test_distinct_sessions(self, strategy: CookieSessionStrategy) -> None:
        first = cookie_pair(self.login(strategy))
        second = cookie_pair(self.login(strategy))
        assert first != second
        assert strategy.session_count == 2
        assert strategy.auth_request(make_request(cookie=first)) is None
        assert strategy.auth_request(make_request(cookie=second)) is None

    def test_expired_session(self, strategy: CookieSessionStrategy, clock: FakeClock) -> None:
        pair = cookie_pair(self.login(strategy))
        clock.now = NOW + DURATION + 1
        with pytest.raises(SessionExpiredError):
            strategy.auth_request(make_request(cookie=pair))
        assert strategy.session_count == 0

    def test_login_sweeps(self, strategy: CookieSessionStrategy, clock: FakeClock) -> None:
        self.login(strategy)
        clock.now = NOW + DURATION + 1
        self.login(strategy)
        assert strategy.session_count == 1

    def test_unknown_session(self, strategy: CookieSessionStrategy) -> None:
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request(cookie=f"{COOKIE_NAME}=forged"))

    def test_missing_cookie(self, strategy: CookieSessionStrategy) -> None:
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request())
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request(cookie="theme=dark"))

    def test_empty_cookie(self, strategy: CookieSessionStrategy) -> None:
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request(cookie=f"{COOKIE_NAME}="))

    def test_failed_login(self, strategy: CookieSessionStrategy) -> None:
        response = strategy.login(make_request(body=b"username=admin&password=wrong"))
        assert response.status_code == 403
        assert not [v for n, v in response.headers if n == "set-cookie"]
        assert strategy.session_count == 0

    def test_entropy_failure(
        self, strategy: CookieSessionStrategy, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(size: int) -> bytes:
            raise OSError("no entropy")

        monkeypatch.setattr("os.urandom", broken)
        response = strategy.login(make_request(body=b"username=admin&password=s3cret"))
        assert response.status_code == 500
        assert strategy.session_count == 0

    def test_concurrent_logins_and_checks(self) -> None:
        """Parallel logins and cookie checks on one strategy lose no session."""
        strategy = CookieSessionStrategy("admin", "s3cret", logging.getLogger("tests.session"))
        workers, per_worker = 8, 50
        barrier = threading.Barrier(workers)
        errors: list[BaseException] = []
        issued: list[list[str]] = [[] for _ in range(workers)]

        def work(worker: int) -> None:
            barrier.wait()
            try:
                for _ in range(per_worker):
                    response = strategy.login(make_request(body=b"username=admin&password=s3cret"))
                    assert response.status_code == 200
                    set_cookie = next(v for n, v in response.headers if n == "set-cookie")
                    issued[worker].append(cookie_pair(set_cookie))
                    strategy.auth_request(make_request(cookie=issued[worker][-1]))
                    strategy.auth_request(make_request(cookie=issued[worker][0]))
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            list(pool.map(work, range(workers)))

        assert errors == []
        pairs = [pair for worker_pairs in issued for pair in worker_pairs]
        assert len(set(pairs)) == workers * per_worker
        assert strategy.session_count == workers * per_worker
        for pair in pairs:
            assert strategy.auth_request(make_request(cookie=pair)) is None
