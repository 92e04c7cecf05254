"""Framed message transport over a pair of raw OS pipes.

``FramedPipeTransport`` owns one inbound and one outbound pipe descriptor and
speaks the browser's pipe convention: NUL-terminated messages in both
directions. Any I/O failure closes the transport before the error reaches the
caller, so a broken transport is never left half open.

The transport has no lock around ``send`` or ``receive``. The protocol client
is expected to serialise writes and own the single reader loop; ``send`` and
``receive`` use different descriptors and never contend with each other.
"""

from __future__ import annotations

import contextlib
import logging
import os
import selectors
import sys
import threading

from pipelaunch.constants import READ_CHUNK_SIZE
from pipelaunch.constants import TRAFFIC_LOGGER_NAME
from pipelaunch.errors import FramingError
from pipelaunch.errors import TransportClosedError
from pipelaunch.errors import TransportError
from pipelaunch.ipc.connections.base import TransportBase
from pipelaunch.ipc.framing import FrameBuffer
from pipelaunch.ipc.framing import pack_frame

logger = logging.getLogger(__name__)
traffic_logger = logging.getLogger(TRAFFIC_LOGGER_NAME)


class _SelectorWaiter:
    """Waits for the inbound pipe to become readable, or for close().

    A private wake-up pipe lets close() from another thread interrupt a
    receive() that is blocked waiting for data.
    """

    def __init__(self, read_fd: int) -> None:
        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_w, False)
        self._selector = selectors.DefaultSelector()
        self._selector.register(read_fd, selectors.EVENT_READ)
        self._selector.register(self._wake_r, selectors.EVENT_READ)

    def wait(self) -> bool:
        """Block until data is readable; return False if woken by close()."""
        events = self._selector.select()
        return not any(key.fd == self._wake_r for key, _ in events)

    def wake(self) -> None:
        with contextlib.suppress(OSError):
            os.write(self._wake_w, b"\x01")

    def close(self) -> None:
        self._selector.close()
        for fd in (self._wake_r, self._wake_w):
            with contextlib.suppress(OSError):
                os.close(fd)


class _BlockingWaiter:
    """Anonymous pipes cannot be polled on Windows; reads simply block."""

    def __init__(self, read_fd: int) -> None:
        self._read_fd = read_fd

    def wait(self) -> bool:
        return True

    def wake(self) -> None:
        return None

    def close(self) -> None:
        return None


_Waiter = _BlockingWaiter if sys.platform == "win32" else _SelectorWaiter


class FramedPipeTransport(TransportBase):
    """Duplex NUL-framed channel over an inbound and an outbound pipe.

    ``read_fd`` carries bytes from the child, ``write_fd`` carries bytes to
    it. The transport takes ownership of both descriptors, even when the
    constructor itself fails.
    """

    def __init__(self, read_fd: int, write_fd: int) -> None:
        with contextlib.ExitStack() as rollback:
            rollback.callback(os.close, write_fd)
            rollback.callback(os.close, read_fd)
            self._reader = os.fdopen(read_fd, "rb", buffering=0)
            # From here on the file object owns read_fd.
            rollback.pop_all()
            rollback.callback(self._reader.close)
            rollback.callback(os.close, write_fd)
            self._writer = os.fdopen(write_fd, "wb", buffering=0)
            rollback.pop_all()
            rollback.callback(self._reader.close)
            rollback.callback(self._writer.close)
            self._waiter = _Waiter(read_fd)
            rollback.pop_all()

        self._frames = FrameBuffer()
        self._closed = False
        self._state_lock = threading.Lock()
        self._receiving = False
        self._reader_released = False

    @property
    def closed(self) -> bool:
        return self._closed

    def fileno_pair(self) -> tuple[int, int]:
        """Return ``(read_fd, write_fd)``; only meaningful while open."""
        return self._reader.fileno(), self._writer.fileno()

    def send(self, payload: bytes) -> None:
        """Write ``payload`` followed by the NUL delimiter."""
        if self._closed:
            raise TransportClosedError(operation="send")

        try:
            frame = pack_frame(payload)
        except ValueError as err:
            self._close_after_failure()
            raise FramingError(
                "message contains a NUL byte and cannot be framed",
                operation="send",
                cause=err,
            ) from err

        view = memoryview(frame)
        try:
            while view:
                written = self._writer.write(view)
                view = view[written:]
        except (OSError, ValueError) as err:
            if self._closed:
                raise TransportClosedError(operation="send", cause=err) from err
            self._close_after_failure()
            raise TransportError("failed to write to pipe", operation="send", cause=err) from err

        traffic_logger.debug("Sent message: %s", payload)

    def receive(self) -> bytes:
        """Return the next message with its delimiter stripped.

        Only one receive may be in flight. If :meth:`close` runs while it is
        blocked, it wakes up, releases the inbound pipe and raises
        :class:`TransportClosedError`.
        """
        with self._state_lock:
            if self._closed:
                raise TransportClosedError(operation="receive")
            self._receiving = True
        try:
            return self._read_frame()
        finally:
            with self._state_lock:
                self._receiving = False
                release = self._closed
            if release:
                error = self._release_reader()
                if error is not None:
                    logger.debug("Error closing inbound pipe after receive", exc_info=error)

    def _read_frame(self) -> bytes:
        while True:
            if self._closed:
                raise TransportClosedError(operation="receive")

            frame = self._frames.take()
            if frame is not None:
                traffic_logger.debug("Received message: %s", frame)
                return frame

            try:
                if not self._waiter.wait():
                    raise TransportClosedError(operation="receive")
                chunk = self._reader.read(READ_CHUNK_SIZE)
            except (OSError, ValueError) as err:
                if self._closed:
                    raise TransportClosedError(operation="receive", cause=err) from err
                self._close_after_failure()
                raise TransportError(
                    "failed to read from pipe", operation="receive", cause=err
                ) from err

            if not chunk:
                discarded = self._frames.clear()
                self._close_after_failure()
                if discarded:
                    raise FramingError(
                        "pipe closed in the middle of a message",
                        operation="receive",
                        discarded_bytes=discarded,
                    )
                raise TransportError("pipe closed by peer", operation="receive")

            self._frames.feed(chunk)

    def close(self) -> None:
        """Close both pipes.

        Both descriptors are always closed; the first close error, if any, is
        raised afterwards. Closing an already closed transport does nothing.
        While a receive is blocked, the inbound pipe is handed back to that
        receive, which closes it as soon as it wakes up.
        """
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            reader_busy = self._receiving
            if reader_busy:
                self._waiter.wake()

        errors: list[OSError] = []
        if not reader_busy:
            error = self._release_reader()
            if error is not None:
                errors.append(error)
        try:
            self._writer.close()
        except OSError as err:
            errors.append(err)
        logger.debug("Pipe transport closed")

        if errors:
            raise TransportError("failed to close pipe", operation="close", cause=errors[0]) from errors[0]

    def _release_reader(self) -> OSError | None:
        with self._state_lock:
            if self._reader_released:
                return None
            self._reader_released = True
        self._waiter.close()
        try:
            self._reader.close()
        except OSError as err:
            return err
        return None

    def _close_after_failure(self) -> None:
        try:
            self.close()
        except TransportError:
            logger.debug("Error while closing a failed transport", exc_info=True)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<FramedPipeTransport {state}>"
