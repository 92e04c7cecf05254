"""Child process supervision.

``spawn_process`` starts the browser; ``ProcessHandle.watch`` attaches the
exit watcher, a daemon thread whose only job is to block until the child
terminates and then resolve the handle's ``exit`` future exactly once.
"""

from __future__ import annotations

from concurrent import futures
import contextlib
import logging
import subprocess
import threading
from typing import TYPE_CHECKING
from typing import Any

from pipelaunch.constants import DEFAULT_EXIT_TIMEOUT
from pipelaunch.errors import SpawnError

if TYPE_CHECKING:
    from pipelaunch.config.launch_config import LaunchConfig

logger = logging.getLogger(__name__)


def apply_default_setup(config: LaunchConfig, options: dict[str, Any]) -> dict[str, Any]:
    """Fill in the process attributes that have nothing to do with the pipes."""
    output = None if config.forward_output else subprocess.DEVNULL
    options.setdefault("cwd", config.working_dir)
    options.setdefault("env", None if config.env is None else dict(config.env))
    options.setdefault("stdin", subprocess.DEVNULL)
    options.setdefault("stdout", output)
    options.setdefault("stderr", output)
    return options


def spawn_process(binary: str, args: list[str], options: dict[str, Any]) -> subprocess.Popen:
    """Start ``binary`` with ``args``; raise :class:`SpawnError` if the OS refuses."""
    logger.info("Launching %s with %d args", binary, len(args))
    logger.debug("Browser argv: %s", args)
    try:
        return subprocess.Popen([binary, *args], **options)  # noqa: S603
    except (OSError, ValueError, subprocess.SubprocessError) as err:
        msg = f"failed to start {binary}"
        raise SpawnError(msg, binary=binary, cause=err) from err


class ProcessHandle:
    """A running child process plus its one-shot exit signal."""

    def __init__(self, popen: subprocess.Popen) -> None:
        self._popen = popen
        self._exit: futures.Future[int] = futures.Future()
        self._watcher: threading.Thread | None = None

    @classmethod
    def watch(cls, popen: subprocess.Popen) -> ProcessHandle:
        """Wrap ``popen`` and start its exit watcher."""
        handle = cls(popen)
        handle._start_watcher()
        return handle

    def _start_watcher(self) -> None:
        def _wait_and_signal() -> None:
            try:
                code = self._popen.wait()
            except Exception as err:  # noqa: BLE001 - delivered via the future
                logger.debug("Wait failed for pid=%s", self.pid, exc_info=True)
                self._exit.set_exception(err)
                return
            logger.info("Browser process exited: pid=%s code=%s", self.pid, code)
            self._exit.set_result(code)

        self._watcher = threading.Thread(
            target=_wait_and_signal,
            daemon=True,
            name=f"pipelaunch-exit-{self.pid}",
        )
        self._watcher.start()

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def popen(self) -> subprocess.Popen:
        return self._popen

    @property
    def exit(self) -> futures.Future[int]:
        """Future resolved with the return code once the child terminates."""
        return self._exit

    @property
    def returncode(self) -> int | None:
        if not self._exit.done():
            return None
        return self._exit.result()

    def is_running(self) -> bool:
        return not self._exit.done()

    def wait(self, timeout: float | None = None) -> int:
        """Block until the child exits; raise ``TimeoutError`` on timeout."""
        try:
            return self._exit.result(timeout=timeout)
        except futures.TimeoutError as err:
            msg = f"process {self.pid} still running after {timeout}s"
            raise TimeoutError(msg) from err

    def kill(self, timeout: float = DEFAULT_EXIT_TIMEOUT) -> int:
        """Terminate the child, escalating to kill after ``timeout`` seconds."""
        if self._exit.done():
            return self._exit.result()
        logger.info("Terminating browser process pid=%s", self.pid)
        with contextlib.suppress(ProcessLookupError):
            self._popen.terminate()
        try:
            return self.wait(timeout)
        except TimeoutError:
            logger.warning("Process pid=%s ignored terminate, killing", self.pid)
            with contextlib.suppress(ProcessLookupError):
                self._popen.kill()
            return self.wait()

    def __repr__(self) -> str:
        state = "running" if self.is_running() else f"exited({self.returncode})"
        return f"<ProcessHandle pid={self.pid} {state}>"
