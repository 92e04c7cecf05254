"""Asyncio adapter for blocking transports.

Protocol clients written with asyncio can drive a :class:`TransportBase`
through this wrapper. Each blocking call runs in the loop's default executor,
so error semantics are exactly those of the wrapped transport.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import TypeVar

if TYPE_CHECKING:
    from pipelaunch.ipc.connections.base import TransportBase

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncPipeTransport:
    """Expose ``send``/``receive``/``close`` of a blocking transport as coroutines."""

    def __init__(self, transport: TransportBase) -> None:
        self._transport = transport

    @property
    def transport(self) -> TransportBase:
        return self._transport

    @property
    def closed(self) -> bool:
        return self._transport.closed

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def send(self, payload: bytes) -> None:
        await self._run(self._transport.send, payload)

    async def receive(self) -> bytes:
        return await self._run(self._transport.receive)

    async def close(self) -> None:
        # Closing is quick and must not wait behind a blocked receive().
        self._transport.close()

    async def __aenter__(self) -> AsyncPipeTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
