"""pipelaunch.ipc.connections package

Expose TransportBase at package level; concrete transports live in
``pipelaunch.ipc``.
"""

from pipelaunch.ipc.connections.base import TransportBase

__all__ = ["TransportBase"]
