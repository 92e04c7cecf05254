"""IPC module for pipelaunch.

The framed pipe transport plus its asyncio facade.
"""

from pipelaunch.ipc.async_adapter import AsyncPipeTransport
from pipelaunch.ipc.connections.base import TransportBase
from pipelaunch.ipc.pipe_transport import FramedPipeTransport

__all__ = [
    "AsyncPipeTransport",
    "FramedPipeTransport",
    "TransportBase",
]
