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
ASGI Lifespan Management.

ServerLifespan answers the ASGI lifespan protocol for ManagementServer. The
strategy is built when the server object is constructed, so startup and
shutdown only report state to the server log.

Definition::

    class ServerLifespan:
        async def __call__(scope, receive, send) -> None
"""

from __future__ import annotations

import logging

from .types import Receive, Scope, Send

__all__ = ["ServerLifespan"]


class ServerLifespan:
    """ASGI lifespan handler."""

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("ingest_auth.lifespan")

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send  # noqa: ARG002
    ) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                self._logger.info("ingest-auth started")
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                self._logger.info("ingest-auth stopped")
                await send({"type": "lifespan.shutdown.complete"})
                return
