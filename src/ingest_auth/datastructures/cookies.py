# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Request ``Cookie`` header parsing.

``http.cookies.SimpleCookie`` rejects unquoted values containing ``=`` or
``/``, both of which occur in base64 session identifiers, and drops the whole
header on the first bad pair. Browsers are lenient here, so this parser is
too: pairs are split on ``;``, each on its first ``=``, and values are
percent-decoded (``make_cookie`` percent-encodes them).

The first occurrence of a name wins, matching what a browser sends first
(the most specific path).
"""

from urllib.parse import unquote

__all__ = ["parse_cookie_header"]


def parse_cookie_header(value: str | None) -> dict[str, str]:
    """
    Parse a ``Cookie`` request header into a dict.

    Example:
        >>> parse_cookie_header('_ingestauth=abc%3D; theme="dark"')
        {'_ingestauth': 'abc=', 'theme': 'dark'}
    """
    cookies: dict[str, str] = {}
    if not value:
        return cookies
    for chunk in value.split(";"):
        if "=" in chunk:
            name, raw = chunk.split("=", 1)
        else:
            # nameless cookie, as browsers treat it
            name, raw = "", chunk
        name = name.strip()
        raw = raw.strip()
        if len(raw) >= 2 and raw[0] == raw[-1] == '"':
            raw = raw[1:-1]
        if not name and not raw:
            continue
        cookies.setdefault(name, unquote(raw))
    return cookies
