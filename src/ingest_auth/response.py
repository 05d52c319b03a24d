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
HTTP Response for ASGI.

Login handlers build a Response and the middleware sends it::

    response = strategy.login(request)
    await response(scope, receive, send)

Response Methods
================
set_result(result)
    Set body from a value, auto-detecting the content type:
    dict/list -> JSON, str -> text/plain, bytes -> octet-stream, None -> empty.

Helper Functions
================
make_cookie(key, value, **options)
    Creates a Set-Cookie header tuple for use with the headers parameter.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any
from urllib.parse import quote

from .types import Receive, Scope, Send

__all__ = [
    "Response",
    "make_cookie",
]

# Type alias for headers input
HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None


def _normalize_headers(headers: HeadersInput) -> list[tuple[str, str]]:
    """Normalize dict / list-of-tuples / None to a list of tuples."""
    if headers is None:
        return []
    if isinstance(headers, list):
        return list(headers)
    return list(headers.items())


class Response:
    """
    HTTP response usable as an ASGI application.

    Attributes:
        body: Encoded response body as bytes.
        status_code: HTTP status code.

    Example:
        >>> response = Response("forbidden", status_code=403, media_type="text/plain")
        >>> await response(scope, receive, send)
    """

    __slots__ = ("body", "status_code", "_media_type", "_headers")

    charset: str = "utf-8"

    def __init__(
        self,
        content: bytes | str | None = None,
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
    ) -> None:
        self.status_code = status_code
        self._headers: list[tuple[str, str]] = _normalize_headers(headers)
        self._media_type = media_type
        self.body = self._encode_content(content)
        self._update_content_headers()

    def _encode_content(self, content: bytes | str | None) -> bytes:
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return content.encode(self.charset)

    def _get_content_type(self) -> str | None:
        """Content-type header value, with charset for text types."""
        if self._media_type is None:
            return None
        if self._media_type.startswith("text/") and "charset" not in self._media_type:
            return f"{self._media_type}; charset={self.charset}"
        return self._media_type

    def _update_content_headers(self) -> None:
        """Rewrite content-type and content-length from the current body."""
        self._headers = [
            (name, value)
            for name, value in self._headers
            if name.lower() not in ("content-type", "content-length")
        ]
        content_type = self._get_content_type()
        if content_type:
            self._headers.append(("content-type", content_type))
        self._headers.append(("content-length", str(len(self.body))))

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Response headers as (name, value) tuples."""
        return list(self._headers)

    @property
    def media_type(self) -> str | None:
        return self._media_type

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """ASGI headers: lowercase names, latin-1 encoded."""
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Send http.response.start and http.response.body."""
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._build_headers(),
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": self.body,
            }
        )

    def set_result(self, result: Any) -> None:
        """
        Set response body from result.

        - dict/list: application/json
        - bytes: application/octet-stream
        - str: text/plain
        - None: text/plain (empty body)
        - other: text/plain (str conversion)
        """
        if isinstance(result, (dict, list)):
            self.body = json.dumps(result, ensure_ascii=False).encode("utf-8")
            self._media_type = "application/json"
        elif isinstance(result, bytes):
            self.body = result
            self._media_type = "application/octet-stream"
        elif result is None:
            self.body = b""
            self._media_type = "text/plain"
        else:
            self.body = str(result).encode(self.charset)
            self._media_type = "text/plain"
        self._update_content_headers()

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, media_type={self._media_type!r})"


def make_cookie(
    key: str,
    value: str = "",
    *,
    expires: datetime | None = None,
    path: str = "/",
    httponly: bool = False,
    samesite: str | None = "lax",
) -> tuple[str, str]:
    """
    Create a Set-Cookie header tuple.

    Args:
        key: Cookie name.
        value: Cookie value (percent-encoded; ``parse_cookie_header`` decodes it).
        expires: Absolute expiry, rendered as an HTTP date in GMT. Naive
            datetimes are taken as UTC.
        path: Cookie path (default "/").
        httponly: If True, cookie not accessible via JavaScript.
        samesite: SameSite policy ("strict", "lax", "none", or None to omit).

    Returns:
        Tuple of ("set-cookie", cookie_string) for use in Response headers.

    Example:
        >>> make_cookie("_ingestauth", "abc", path="/", httponly=True)
        ('set-cookie', '_ingestauth=abc; Path=/; HttpOnly; SameSite=Lax')
    """
    cookie = f"{key}={quote(value, safe='')}"

    if expires is not None:
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        cookie += f"; Expires={format_datetime(expires.astimezone(timezone.utc), usegmt=True)}"
    if path:
        cookie += f"; Path={path}"
    if httponly:
        cookie += "; HttpOnly"
    if samesite:
        cookie += f"; SameSite={samesite.capitalize()}"

    return ("set-cookie", cookie)
