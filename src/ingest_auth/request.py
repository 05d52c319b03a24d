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
HTTP request adapter used by the authentication strategies.

``HttpRequest`` wraps an ASGI scope and exposes the pieces a strategy needs:
the ``Authorization`` header, cookies, the query string, the urlencoded login
form and the requester's address.

Body handling:
    The body is only read when explicitly requested through ``read_body()``.
    AuthMiddleware does that for the login route alone, so protected requests
    reach the downstream app with their ``receive`` stream untouched.

Example:
    request = HttpRequest(scope)
    request.headers.get("authorization")
    await request.read_body(receive)      # login route only
    request.form_value("username")
"""

from __future__ import annotations

from .datastructures import (
    Address,
    Headers,
    QueryParams,
    headers_from_scope,
    parse_cookie_header,
    query_params_from_scope,
)
from .types import Receive, Scope

__all__ = ["HttpRequest", "FormDataError", "BodyTooLargeError", "MAX_FORM_BODY"]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MAX_FORM_BODY = 10 * 1024 * 1024


class FormDataError(ValueError):
    """The request body is not a valid urlencoded form."""


class BodyTooLargeError(FormDataError):
    """The request body is larger than the allowed size."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"request body exceeds {limit} bytes")


class HttpRequest:
    """HTTP request adapter wrapping ASGI scope."""

    __slots__ = (
        "_scope",
        "_body",
        "_body_read",
        "_headers",
        "_cookies",
        "_query",
        "_form",
    )

    def __init__(self, scope: Scope, body: bytes | None = None) -> None:
        """
        Args:
            scope: ASGI HTTP scope.
            body: Already-available request body. When None the body is
                considered unread until ``read_body()`` is awaited.
        """
        self._scope = scope
        self._body: bytes = body or b""
        self._body_read = body is not None
        self._headers: Headers | None = None
        self._cookies: dict[str, str] | None = None
        self._query: QueryParams | None = None
        self._form: QueryParams | None = None

    async def read_body(self, receive: Receive, max_body: int | None = MAX_FORM_BODY) -> bytes:
        """Consume ``http.request`` messages until ``more_body`` is false.

        Raises:
            BodyTooLargeError: ``Content-Length`` or the bytes received so far
                exceed ``max_body``. Reading stops there; the rest of the
                stream is left unread.
        """
        if self._body_read:
            return self._body
        if max_body is not None:
            declared = self.headers.get("content-length")
            if declared and declared.strip().isdigit() and int(declared) > max_body:
                raise BodyTooLargeError(max_body)
        chunks: list[bytes] = []
        size = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if max_body is not None and size > max_body:
                raise BodyTooLargeError(max_body)
            chunks.append(chunk)
            if not message.get("more_body", False):
                break
        self._body = b"".join(chunks)
        self._body_read = True
        return self._body

    @property
    def scope(self) -> Scope:
        """Raw ASGI scope dict."""
        return self._scope

    @property
    def method(self) -> str:
        return str(self._scope.get("method", "GET")).upper()

    @property
    def path(self) -> str:
        return str(self._scope.get("path", "/"))

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def headers(self) -> Headers:
        """Request headers (case-insensitive)."""
        if self._headers is None:
            self._headers = headers_from_scope(self._scope)
        return self._headers

    @property
    def cookies(self) -> dict[str, str]:
        """Cookies from every ``Cookie`` header, first occurrence wins."""
        if self._cookies is None:
            self._cookies = parse_cookie_header("; ".join(self.headers.getlist("cookie")))
        return self._cookies

    @property
    def query_params(self) -> QueryParams:
        """Query string parameters."""
        if self._query is None:
            self._query = query_params_from_scope(self._scope)
        return self._query

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def form(self) -> QueryParams:
        """
        Urlencoded body fields.

        Raises:
            FormDataError: Body not yet read, unsupported content type, or
                malformed urlencoded data.
        """
        if self._form is None:
            if not self._body_read:
                raise FormDataError("request body has not been read")
            media_type = (self.content_type or FORM_CONTENT_TYPE).split(";", 1)[0].strip()
            if media_type.lower() != FORM_CONTENT_TYPE:
                raise FormDataError(f"unsupported form content type {media_type!r}")
            try:
                self._form = QueryParams(self._body.decode("utf-8"), strict=True)
            except (UnicodeDecodeError, ValueError) as e:
                raise FormDataError(f"malformed form body: {e}") from e
        return self._form

    def form_value(self, name: str) -> str:
        """
        First value of ``name`` from the form body, then the query string.

        Returns an empty string when the field is absent everywhere.
        """
        value = self.form.get(name)
        if value is None:
            value = self.query_params.get(name)
        return value or ""

    @property
    def client(self) -> Address | None:
        """Client address (host, port) if available."""
        client = self._scope.get("client")
        if client:
            return Address(host=client[0], port=client[1])
        return None

    @property
    def client_ip(self) -> str:
        """Socket peer address, "unknown" when the server does not report one."""
        client = self.client
        return client.host if client else "unknown"

    @property
    def forwarded_for(self) -> str | None:
        """
        Client address claimed by ``X-Forwarded-For`` (first hop) or
        ``X-Real-IP``. Set by the client or a proxy, so never trusted alone.
        """
        forwarded = self.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",", 1)[0].strip()
            if first:
                return first
        real_ip = self.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()
        return None

    @property
    def requester(self) -> str:
        """
        Requester for audit logs: the socket peer, followed by the forwarded
        address when a proxy header is present.

        Example:
            ``10.0.0.1 (forwarded for 203.0.113.7)``
        """
        forwarded = self.forwarded_for
        if forwarded:
            return f"{self.client_ip} (forwarded for {forwarded})"
        return self.client_ip

    def __repr__(self) -> str:
        return f"<HttpRequest method={self.method} path={self.path!r}>"
