"""Launch a browser wired to this process through two OS pipes.

Instead of opening a remote-debugging port, the browser is started with
``--remote-debugging-pipe`` and talks to us over a pair of anonymous pipes:

* pair 1: we write, the browser reads;
* pair 2: the browser writes, we read.

The launch sequence runs synchronously on the caller's thread::

    create pipes -> bind child ends -> format args -> spawn
        -> close child ends here -> start exit watcher -> build transport

Until the browser is running, every endpoint is registered on a rollback
stack, so any failure closes all descriptors allocated so far before the
error propagates.
"""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from pipelaunch.config import get_config
from pipelaunch.errors import PipeBindingError
from pipelaunch.errors import PipeCreationError
from pipelaunch.errors import PipeLaunchError
from pipelaunch.errors import TransportError
from pipelaunch.errors import log_error
from pipelaunch.ipc.pipe_transport import FramedPipeTransport
from pipelaunch.launcher import flags as launch_flags
from pipelaunch.launcher import pipe_binder
from pipelaunch.launcher import profile
from pipelaunch.launcher.pipe_binder import SpawnAttributes
from pipelaunch.launcher.process import ProcessHandle
from pipelaunch.launcher.process import apply_default_setup
from pipelaunch.launcher.process import spawn_process

if TYPE_CHECKING:
    from concurrent import futures
    from pathlib import Path
    import subprocess

    from pipelaunch.config import LaunchConfig
    from pipelaunch.launcher.flags import LaunchFlags
    from pipelaunch.launcher.pipe_binder import ProcessConfigurator

    Binder = Callable[[int, int, LaunchFlags], ProcessConfigurator]
    Spawner = Callable[[str, list[str], dict[str, Any]], subprocess.Popen]

logger = logging.getLogger(__name__)


def _create_pipe(direction: str) -> tuple[int, int]:
    try:
        return os.pipe()
    except OSError as err:
        msg = f"failed to create {direction} pipe"
        raise PipeCreationError(msg, direction=direction, cause=err) from err


def _close_fd(fd: int) -> None:
    try:
        os.close(fd)
    except OSError:
        logger.warning("Failed to close pipe fd %d", fd, exc_info=True)


class PipeLauncher:
    """Launches one browser process and hands back a pipe transport.

    A configuration launches at most once, so launchers sharing one config
    object share that limit; use :meth:`LaunchConfig.copy` for a fresh one.
    The configuration, and in particular its flags, stays mutable until
    :meth:`launch_with_pipes` formats it.
    """

    def __init__(
        self,
        config: LaunchConfig | None = None,
        *,
        spawner: Spawner | None = None,
        binder: Binder | None = None,
        popen_options: Callable[[SpawnAttributes], dict[str, Any]] | None = None,
    ) -> None:
        self.config = config if config is not None else get_config().copy()
        self._spawner = spawner or spawn_process
        self._binder = binder or pipe_binder.bind_child_pipes
        self._popen_options = popen_options or pipe_binder.popen_options
        self._process: ProcessHandle | None = None
        self._temp_user_data_dir: Path | None = None

    @classmethod
    def new_pipe_mode(cls, config: LaunchConfig | None = None, **kwargs: Any) -> PipeLauncher:
        """Create a launcher whose flags select the pipe transport.

        The remote-debugging port and the zombie-reaping helper are removed
        (the browser exits on its own once its pipes close) and
        ``--remote-debugging-pipe`` is set.
        """
        base = config if config is not None else get_config()
        config = base.copy()
        config.flags.delete(launch_flags.REMOTE_DEBUGGING_PORT)
        config.flags.delete(launch_flags.LEAKLESS)
        config.flags.set(launch_flags.REMOTE_DEBUGGING_PIPE)
        return cls(config, **kwargs)

    @property
    def flags(self) -> LaunchFlags:
        return self.config.flags

    @property
    def launched(self) -> bool:
        return self.config.launched

    @property
    def process(self) -> ProcessHandle | None:
        return self._process

    @property
    def pid(self) -> int | None:
        return None if self._process is None else self._process.pid

    @property
    def exit(self) -> futures.Future[int] | None:
        """One-shot exit signal of the launched browser."""
        return None if self._process is None else self._process.exit

    def _prepare(self, rollback: contextlib.ExitStack) -> str:
        """Resolve the binary and set up the browser profile."""
        binary = profile.resolve_binary(self.config.bin)

        created = profile.ensure_user_data_dir(self.config.flags)
        if created is not None:
            self._temp_user_data_dir = created
            rollback.callback(self._remove_temp_user_data_dir)

        user_data_dir = self.config.flags.first(launch_flags.USER_DATA_DIR)
        if self.config.user_preferences and user_data_dir:
            profile.write_user_preferences(user_data_dir, self.config.user_preferences)
        return binary

    def _bind(self, read_fd: int, write_fd: int) -> ProcessConfigurator:
        try:
            return self._binder(read_fd, write_fd, self.config.flags)
        except PipeLaunchError:
            raise
        except OSError as err:
            msg = "failed to bind child pipes"
            raise PipeBindingError(msg, cause=err) from err

    def launch_with_pipes(self) -> tuple[FramedPipeTransport, ProcessHandle]:
        """Start the browser and return ``(transport, process)``.

        Raises:
            ConfigurationError: the configuration is invalid.
            AlreadyLaunchedError: this configuration was already launched.
            PipeCreationError: an OS pipe could not be created.
            PipeBindingError: the child ends could not be made inheritable.
            SpawnError: the operating system refused to start the browser.
        """
        self.config.validate()
        self.config.mark_launched()

        with contextlib.ExitStack() as rollback:
            binary = self._prepare(rollback)

            # Pair 1: we write, the browser reads.
            child_read, parent_write = _create_pipe("write")
            rollback.callback(_close_fd, parent_write)
            rollback.callback(_close_fd, child_read)

            # Pair 2: the browser writes, we read.
            parent_read, child_write = _create_pipe("read")
            rollback.callback(_close_fd, parent_read)
            rollback.callback(_close_fd, child_write)

            configure = self._bind(child_read, child_write)

            # The Windows binder adds a flag, so format only after binding.
            args = self.config.flags.format()

            attributes = SpawnAttributes()
            configure(attributes)
            options = apply_default_setup(self.config, self._popen_options(attributes))

            popen = self._spawner(binary, args, options)
            rollback.pop_all()

        # The child holds its own copies now.
        _close_fd(child_read)
        _close_fd(child_write)

        process = ProcessHandle.watch(popen)
        self._process = process

        try:
            transport = FramedPipeTransport(parent_read, parent_write)
        except OSError as err:
            process.kill(self.config.exit_timeout)
            msg = "failed to set up pipe transport"
            raise TransportError(msg, operation="open", cause=err) from err

        logger.info("Browser launched with pipes (pid=%s)", process.pid)
        return transport, process

    def must_launch_with_pipes(self) -> tuple[FramedPipeTransport, ProcessHandle]:
        """Like :meth:`launch_with_pipes`, but any launch error exits the program."""
        try:
            return self.launch_with_pipes()
        except PipeLaunchError as err:
            log_error(err, level=logging.CRITICAL)
            raise SystemExit(1) from err

    def kill(self) -> int | None:
        """Terminate the browser if it was launched; return its exit code."""
        if self._process is None:
            return None
        return self._process.kill(self.config.exit_timeout)

    def cleanup(self, timeout: float | None = None) -> None:
        """Wait for the browser to exit, then remove a temporary profile."""
        if self._process is not None:
            self._process.wait(timeout)
        self._remove_temp_user_data_dir()

    def _remove_temp_user_data_dir(self) -> None:
        if self._temp_user_data_dir is not None:
            profile.remove_user_data_dir(self._temp_user_data_dir)
            self._temp_user_data_dir = None


def launch_with_pipes(config: LaunchConfig | None = None) -> tuple[FramedPipeTransport, ProcessHandle]:
    """Launch a browser in pipe mode with ``config`` (or the default config)."""
    return PipeLauncher.new_pipe_mode(config).launch_with_pipes()


def must_launch_with_pipes(
    config: LaunchConfig | None = None,
) -> tuple[FramedPipeTransport, ProcessHandle]:
    """Must-succeed form of :func:`launch_with_pipes`."""
    return PipeLauncher.new_pipe_mode(config).must_launch_with_pipes()
