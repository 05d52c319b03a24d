# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Secure random secrets for JWT signing keys and session identifiers."""

from __future__ import annotations

import base64
import os

from ..exceptions import EntropyError

__all__ = ["random_secret"]


def random_secret(size: int, *, urlsafe: bool = False) -> str:
    """Return ``size`` bytes from the OS CSPRNG, base64 encoded.

    Args:
        size: Number of random bytes to draw.
        urlsafe: Use the URL-safe alphabet (``-`` and ``_``), for values that
            travel in cookies.

    Raises:
        EntropyError: The random source failed or returned a short read.
    """
    try:
        buff = os.urandom(size)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Failed to read {size} random bytes: {e}") from e
    if len(buff) != size:
        raise EntropyError(f"Failed to generate random buffer: got {len(buff)} of {size} bytes")
    if urlsafe:
        return base64.urlsafe_b64encode(buff).decode("ascii")
    return base64.b64encode(buff).decode("ascii")
