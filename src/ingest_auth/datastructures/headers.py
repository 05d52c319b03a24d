# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Case-insensitive request headers.

ASGI delivers headers as ``list[tuple[bytes, bytes]]`` in Latin-1. The
authentication strategies only ever read from them (``Authorization``,
``Cookie``, ``X-Forwarded-For``), so ``Headers`` is read-only.

Example::

    headers = headers_from_scope({"headers": [(b"Authorization", b"Bearer abc")]})
    headers.get("authorization")  # "Bearer abc"
"""

from collections.abc import Mapping
from typing import Any, Iterator

__all__ = ["Headers", "headers_from_scope"]


class Headers:
    """
    Immutable, case-insensitive HTTP headers with multi-value support.

    Names are normalized to lowercase, values are kept as sent.

    Example:
        >>> headers = Headers([(b"Cookie", b"a=1"), (b"cookie", b"b=2")])
        >>> headers.get("COOKIE")
        'a=1'
        >>> headers.getlist("cookie")
        ['a=1', 'b=2']
    """

    __slots__ = ("_headers",)

    def __init__(self, raw_headers: list[tuple[bytes, bytes]]) -> None:
        self._headers: list[tuple[str, str]] = [
            (name.decode("latin-1").lower(), value.decode("latin-1"))
            for name, value in raw_headers
        ]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for ``key`` (case-insensitive) or ``default``."""
        key_lower = key.lower()
        for name, value in self._headers:
            if name == key_lower:
                return value
        return default

    def getlist(self, key: str) -> list[str]:
        """Return every value sent for ``key``, in order."""
        key_lower = key.lower()
        return [value for name, value in self._headers if name == key_lower]

    def keys(self) -> list[str]:
        """Unique header names in order of first occurrence."""
        seen: set[str] = set()
        result: list[str] = []
        for name, _ in self._headers:
            if name not in seen:
                seen.add(name)
                result.append(name)
        return result

    def items(self) -> list[tuple[str, str]]:
        return list(self._headers)

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"Headers({self._headers!r})"


def headers_from_scope(scope: Mapping[str, Any]) -> Headers:
    """Build Headers from an ASGI scope, empty if the scope carries none."""
    return Headers(scope.get("headers", []))
