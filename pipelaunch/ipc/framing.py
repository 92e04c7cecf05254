"""NUL-delimited message framing.

Every message on the wire is the raw payload followed by a single ``0x00``
byte. There is no length prefix and no escaping, so payloads must not
contain the delimiter themselves.
"""

from __future__ import annotations

from pipelaunch.constants import FRAME_DELIMITER


def pack_frame(payload: bytes) -> bytes:
    """Return ``payload`` terminated by the frame delimiter.

    Raises ``ValueError`` if the payload itself contains the delimiter.
    """
    if FRAME_DELIMITER in payload:
        msg = "payload contains the frame delimiter"
        raise ValueError(msg)
    return bytes(payload) + FRAME_DELIMITER


class FrameBuffer:
    """Accumulates raw bytes and yields complete frames."""

    def __init__(self) -> None:
        self._data = bytearray()
        self._scanned = 0

    def __len__(self) -> int:
        return len(self._data)

    def feed(self, chunk: bytes) -> None:
        self._data += chunk

    def take(self) -> bytes | None:
        """Pop the next complete frame (delimiter stripped), or ``None``."""
        idx = self._data.find(FRAME_DELIMITER, self._scanned)
        if idx < 0:
            self._scanned = len(self._data)
            return None
        frame = bytes(self._data[:idx])
        del self._data[: idx + 1]
        self._scanned = 0
        return frame

    def clear(self) -> int:
        """Drop any buffered partial frame and return how many bytes were dropped."""
        dropped = len(self._data)
        self._data.clear()
        self._scanned = 0
        return dropped
