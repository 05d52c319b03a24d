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

"""Tests for the stateless strategies, extractors and secret generator."""

from __future__ import annotations

import base64
import logging
from typing import Any

import pytest

from ingest_auth.authentication import (
    BasicStrategy,
    DisabledStrategy,
    PresharedParamStrategy,
    PresharedTokenStrategy,
    extract_basic_credentials,
    extract_header_token,
    extract_query_token,
    random_secret,
)
from ingest_auth.exceptions import (
    BadCredentialsError,
    EntropyError,
    MissingAuthenticationError,
    MissingParameterError,
    MissingPasswordError,
    MissingTokenNameError,
    MissingTokenValueError,
    MissingUsernameError,
    UnauthorizedError,
)
from ingest_auth.request import HttpRequest

logger = logging.getLogger("tests.strategies")


def make_request(
    authorization: str | None = None,
    query_string: bytes = b"",
) -> HttpRequest:
    headers: list[tuple[bytes, bytes]] = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("latin-1")))
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": query_string,
        "headers": headers,
        "client": ("127.0.0.1", 50000),
    }
    return HttpRequest(scope)


def basic_header(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


class TestExtractHeaderToken:
    """Tests for extract_header_token."""

    def test_token(self) -> None:
        assert extract_header_token(make_request("Bearer abc"), "Bearer") == "abc"

    def test_token_keeps_spaces(self) -> None:
        assert extract_header_token(make_request("Bearer a b"), "Bearer") == "a b"

    def test_custom_scheme(self) -> None:
        assert extract_header_token(make_request("X-Key abc"), "X-Key") == "abc"

    def test_missing_header(self) -> None:
        with pytest.raises(MissingAuthenticationError):
            extract_header_token(make_request(), "Bearer")

    def test_wrong_scheme(self) -> None:
        with pytest.raises(MissingAuthenticationError):
            extract_header_token(make_request("Basic abc"), "Bearer")

    def test_scheme_is_case_sensitive(self) -> None:
        with pytest.raises(MissingAuthenticationError):
            extract_header_token(make_request("bearer abc"), "Bearer")

    def test_scheme_without_space(self) -> None:
        with pytest.raises(MissingAuthenticationError):
            extract_header_token(make_request("Bearerabc"), "Bearer")

    def test_empty_scheme(self) -> None:
        with pytest.raises(MissingTokenNameError):
            extract_header_token(make_request("Bearer abc"), "")

    def test_empty_token(self) -> None:
        """A bare prefix yields an empty credential; strategies reject it."""
        assert extract_header_token(make_request("Bearer "), "Bearer") == ""


class TestExtractQueryToken:
    """Tests for extract_query_token."""

    def test_token(self) -> None:
        assert extract_query_token(make_request(query_string=b"token=abc"), "token") == "abc"

    def test_first_non_empty(self) -> None:
        request = make_request(query_string=b"token=&token=abc&token=def")
        assert extract_query_token(request, "token") == "abc"

    def test_missing(self) -> None:
        with pytest.raises(MissingParameterError):
            extract_query_token(make_request(query_string=b"other=abc"), "token")

    def test_all_empty(self) -> None:
        with pytest.raises(MissingParameterError):
            extract_query_token(make_request(query_string=b"token=&token="), "token")

    def test_empty_name(self) -> None:
        with pytest.raises(MissingTokenNameError):
            extract_query_token(make_request(query_string=b"token=abc"), "")


class TestExtractBasicCredentials:
    """Tests for extract_basic_credentials."""

    def test_credentials(self) -> None:
        assert extract_basic_credentials(make_request(basic_header("admin", "s3cret"))) == (
            "admin",
            "s3cret",
        )

    def test_password_with_colon(self) -> None:
        request = make_request(basic_header("admin", "a:b:c"))
        assert extract_basic_credentials(request) == ("admin", "a:b:c")

    def test_scheme_case_insensitive(self) -> None:
        header = basic_header("admin", "pw").replace("Basic", "basic")
        assert extract_basic_credentials(make_request(header)) == ("admin", "pw")

    @pytest.mark.parametrize(
        "header",
        [None, "Bearer abc", "Basic", "Basic !!!notbase64", "Basic " + base64.b64encode(b"nocolon").decode()],
    )
    def test_rejected(self, header: str | None) -> None:
        with pytest.raises(MissingAuthenticationError):
            extract_basic_credentials(make_request(header))


class TestRandomSecret:
    """Tests for random_secret."""

    def test_length(self) -> None:
        secret = random_secret(32)
        assert len(base64.b64decode(secret)) == 32

    def test_urlsafe_alphabet(self) -> None:
        for _ in range(20):
            secret = random_secret(32, urlsafe=True)
            assert "+" not in secret
            assert "/" not in secret
            assert len(base64.urlsafe_b64decode(secret)) == 32

    def test_distinct(self) -> None:
        assert len({random_secret(32) for _ in range(50)}) == 50

    def test_source_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(size: int) -> bytes:
            raise OSError("no entropy")

        monkeypatch.setattr("os.urandom", broken)
        with pytest.raises(EntropyError):
            random_secret(32)

    def test_short_read(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("os.urandom", lambda size: b"\x00" * (size - 1))
        with pytest.raises(EntropyError):
            random_secret(32)


class TestDisabledStrategy:
    """Tests for DisabledStrategy."""

    def test_accepts_everything(self) -> None:
        strategy = DisabledStrategy()
        assert strategy.enabled is False
        assert strategy.auth_request(make_request()) is None

    def test_login_not_found(self) -> None:
        assert DisabledStrategy().login(make_request()).status_code == 404


class TestBasicStrategy:
    """Tests for BasicStrategy."""

    @pytest.fixture
    def strategy(self) -> BasicStrategy:
        return BasicStrategy("admin", "s3cret", logger)

    def test_valid(self, strategy: BasicStrategy) -> None:
        assert strategy.auth_request(make_request(basic_header("admin", "s3cret"))) is None

    def test_wrong_password(self, strategy: BasicStrategy) -> None:
        with pytest.raises(BadCredentialsError):
            strategy.auth_request(make_request(basic_header("admin", "wrong")))

    def test_wrong_username(self, strategy: BasicStrategy) -> None:
        with pytest.raises(BadCredentialsError):
            strategy.auth_request(make_request(basic_header("root", "s3cret")))

    def test_case_sensitive(self, strategy: BasicStrategy) -> None:
        with pytest.raises(BadCredentialsError):
            strategy.auth_request(make_request(basic_header("Admin", "s3cret")))

    def test_prefix_not_enough(self, strategy: BasicStrategy) -> None:
        with pytest.raises(BadCredentialsError):
            strategy.auth_request(make_request(basic_header("admin", "s3cre")))

    def test_missing_header(self, strategy: BasicStrategy) -> None:
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request())

    def test_challenge(self, strategy: BasicStrategy) -> None:
        assert strategy.challenge == 'Basic realm="ingest"'

    def test_login_not_found(self, strategy: BasicStrategy) -> None:
        assert strategy.login(make_request()).status_code == 404

    def test_empty_credentials(self) -> None:
        with pytest.raises(MissingUsernameError):
            BasicStrategy("", "p", logger)
        with pytest.raises(MissingPasswordError):
            BasicStrategy("u", "", logger)


class TestPresharedTokenStrategy:
    """Tests for PresharedTokenStrategy."""

    def test_valid(self) -> None:
        strategy = PresharedTokenStrategy("Bearer", "s3cret", logger)
        assert strategy.auth_request(make_request("Bearer s3cret")) is None

    def test_custom_name(self) -> None:
        strategy = PresharedTokenStrategy("Token", "s3cret", logger)
        assert strategy.auth_request(make_request("Token s3cret")) is None
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request("Bearer s3cret"))

    def test_wrong_value(self) -> None:
        strategy = PresharedTokenStrategy("Bearer", "s3cret", logger)
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request("Bearer s3cre"))
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request("Bearer s3cret "))

    def test_missing_header(self) -> None:
        strategy = PresharedTokenStrategy("Bearer", "s3cret", logger)
        with pytest.raises(MissingAuthenticationError):
            strategy.auth_request(make_request())

    def test_empty_token(self) -> None:
        strategy = PresharedTokenStrategy("Bearer", "s3cret", logger)
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request("Bearer "))

    def test_construction(self) -> None:
        with pytest.raises(MissingTokenNameError):
            PresharedTokenStrategy("", "s3cret", logger)
        with pytest.raises(MissingTokenValueError):
            PresharedTokenStrategy("Bearer", "", logger)

    def test_login_not_found(self) -> None:
        strategy = PresharedTokenStrategy("Bearer", "s3cret", logger)
        assert strategy.login(make_request()).status_code == 404


class TestPresharedParamStrategy:
    """Tests for PresharedParamStrategy."""

    @pytest.fixture
    def strategy(self) -> PresharedParamStrategy:
        return PresharedParamStrategy("token", "s3cret", logger)

    def test_valid(self, strategy: PresharedParamStrategy) -> None:
        assert strategy.auth_request(make_request(query_string=b"token=s3cret")) is None

    def test_encoded_value(self) -> None:
        strategy = PresharedParamStrategy("token", "a+b=", logger)
        assert strategy.auth_request(make_request(query_string=b"token=a%2Bb%3D")) is None

    def test_skips_empty_occurrences(self, strategy: PresharedParamStrategy) -> None:
        assert strategy.auth_request(make_request(query_string=b"token=&token=s3cret")) is None

    def test_first_non_empty_decides(self, strategy: PresharedParamStrategy) -> None:
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request(query_string=b"token=wrong&token=s3cret"))

    def test_wrong_value(self, strategy: PresharedParamStrategy) -> None:
        with pytest.raises(UnauthorizedError):
            strategy.auth_request(make_request(query_string=b"token=nope"))

    def test_missing(self, strategy: PresharedParamStrategy) -> None:
        with pytest.raises(MissingParameterError):
            strategy.auth_request(make_request())

    def test_all_empty(self, strategy: PresharedParamStrategy) -> None:
        with pytest.raises(MissingParameterError):
            strategy.auth_request(make_request(query_string=b"token="))

    def test_header_ignored(self, strategy: PresharedParamStrategy) -> None:
        with pytest.raises(MissingParameterError):
            strategy.auth_request(make_request("Bearer s3cret"))
