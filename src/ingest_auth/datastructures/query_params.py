# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Parsed query string and form parameters.

The same structure serves the URL query string (preshared-parameter
strategy) and ``application/x-www-form-urlencoded`` login bodies, which
share one encoding.

Design Notes
============
- Case-sensitive names (unlike Headers)
- Blank values are preserved (``?key=`` gives ``""``), so callers can tell an
  empty occurrence from a missing parameter
- Repeated names keep every value in arrival order
"""

from collections.abc import Mapping
from typing import Any, Iterator
from urllib.parse import parse_qs

__all__ = ["QueryParams", "query_params_from_scope"]


class QueryParams:
    """
    Multi-value, blank-preserving view of a urlencoded string.

    Example:
        >>> params = QueryParams(b"token=&token=abc&page=1")
        >>> params.get("token")
        ''
        >>> params.getlist("token")
        ['', 'abc']
        >>> params.first_non_empty("token")
        'abc'
    """

    __slots__ = ("_params",)

    def __init__(self, query_string: bytes | str, *, strict: bool = False) -> None:
        """
        Args:
            query_string: Raw urlencoded data. Bytes are decoded as Latin-1.
            strict: Raise ValueError on malformed fields instead of skipping
                them. Used for login form bodies.
        """
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        if query_string:
            self._params = parse_qs(
                query_string, keep_blank_values=True, strict_parsing=strict
            )
        else:
            self._params = {}

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for ``key`` or ``default``."""
        values = self._params.get(key)
        if values:
            return values[0]
        return default

    def getlist(self, key: str) -> list[str]:
        return list(self._params.get(key, []))

    def first_non_empty(self, key: str) -> str | None:
        """Return the first non-empty value for ``key``, or None."""
        for value in self._params.get(key, []):
            if value:
                return value
        return None

    def keys(self) -> list[str]:
        return list(self._params.keys())

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return key in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __bool__(self) -> bool:
        return bool(self._params)

    def __repr__(self) -> str:
        return f"QueryParams({self._params!r})"


def query_params_from_scope(scope: Mapping[str, Any]) -> QueryParams:
    """Parse ``scope["query_string"]``; empty QueryParams when absent."""
    return QueryParams(scope.get("query_string", b""))
