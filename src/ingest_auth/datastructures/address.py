# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Client/server address wrapper for ASGI ``scope["client"]``."""

__all__ = ["Address"]


class Address:
    """
    Named access to an ASGI ``(host, port)`` pair.

    Example:
        >>> addr = Address("192.168.1.1", 8080)
        >>> addr.host
        '192.168.1.1'
        >>> addr == ("192.168.1.1", 8080)
        True
    """

    __slots__ = ("host", "port")

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port

    def __repr__(self) -> str:
        return f"Address(host={self.host!r}, port={self.port})"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.host == other.host and self.port == other.port
        if isinstance(other, tuple) and len(other) == 2:
            return bool(self.host == other[0] and self.port == other[1])
        return False
