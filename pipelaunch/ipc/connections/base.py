"""Base class for message transports handed to a protocol client."""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod


class TransportBase(ABC):
    """Duplex message channel.

    A protocol client only ever talks to this interface: one writer calling
    :meth:`send`, one reader loop calling :meth:`receive`, and :meth:`close`.
    """

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once the transport has been closed."""

    @abstractmethod
    def send(self, payload: bytes) -> None:
        """Send one message."""

    @abstractmethod
    def receive(self) -> bytes:
        """Block until one whole message is available and return it."""

    @abstractmethod
    def close(self) -> None:
        """Close the transport."""

    def __enter__(self) -> TransportBase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
