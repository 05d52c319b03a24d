# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ASGI type definitions for ingest-auth.

The authentication layer speaks plain ASGI so it can sit in front of any
management endpoint served by an ASGI server (uvicorn in ``server.py``).

Type Definitions
================

Scope : MutableMapping[str, Any]
    Connection metadata (type, method, path, headers, query_string, client).

Message : MutableMapping[str, Any]
    Message exchanged with the server, keyed by ``"type"``
    (``http.request``, ``http.response.start``, ``http.response.body``,
    ``lifespan.startup`` ...).

Receive : Callable[[], Awaitable[Message]]
    Async callable returning the next incoming message.

Send : Callable[[Message], Awaitable[None]]
    Async callable sending a message to the server.

ASGIApp : Callable[[Scope, Receive, Send], Awaitable[None]]
    Any ASGI application, including every middleware in the chain.

Design Decisions
================
MutableMapping instead of TypedDict: ASGI servers add their own scope keys
and the middleware stores ``scope["auth"]``, so a rigid TypedDict would get in
the way. Validation happens in ``HttpRequest``.
"""

from typing import Any, Awaitable, Callable, MutableMapping

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp", "Clock"]

# ASGI Scope - connection metadata
Scope = MutableMapping[str, Any]

# ASGI Message - sent/received data
Message = MutableMapping[str, Any]

# ASGI Receive - callable to receive messages
Receive = Callable[[], Awaitable[Message]]

# ASGI Send - callable to send messages
Send = Callable[[Message], Awaitable[None]]

# ASGI Application - the main callable
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

# Wall clock in POSIX seconds, injected into stateful strategies
Clock = Callable[[], float]
