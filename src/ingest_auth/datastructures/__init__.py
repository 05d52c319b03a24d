# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Data structures wrapping raw ASGI request data.

Mapping from ASGI to ingest-auth classes::

    scope["client"] = ("1.2.3.4", 80)      →  Address(host, port)
    scope["headers"] = [(b"...", b"...")]  →  Headers (case-insensitive)
    scope["query_string"] = b"a=1&b=2"     →  QueryParams (parsed)
    "Cookie: a=1; b=2"                     →  dict via parse_cookie_header
"""

from .address import Address
from .cookies import parse_cookie_header
from .headers import Headers, headers_from_scope
from .query_params import QueryParams, query_params_from_scope

__all__ = [
    "Address",
    "Headers",
    "QueryParams",
    "headers_from_scope",
    "parse_cookie_header",
    "query_params_from_scope",
]
