"""Explicit-handle pipe binding for Windows.

Windows has no notion of "descriptor 3 and 4" for a new process. The two
child-side pipe handles are made inheritable, passed through the explicit
handle list of the process attributes, and announced to the browser with
``--remote-debugging-io-pipes=<read>,<write>``.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from typing import TYPE_CHECKING
from typing import Any

from pipelaunch.errors import PipeBindingError
from pipelaunch.launcher.flags import REMOTE_DEBUGGING_IO_PIPES
from pipelaunch.launcher.pipe_binder.base import SpawnAttributes

if TYPE_CHECKING:
    from pipelaunch.launcher.flags import LaunchFlags
    from pipelaunch.launcher.pipe_binder.base import ProcessConfigurator

logger = logging.getLogger(__name__)


def _os_handle(fd: int) -> int:
    import msvcrt  # noqa: PLC0415 - only importable on Windows

    return msvcrt.get_osfhandle(fd)


def _get_inheritable(handle: int) -> bool:
    return os.get_handle_inheritable(handle)


def _set_inheritable(handle: int, inheritable: bool) -> None:
    os.set_handle_inheritable(handle, inheritable)


def _mark_inheritable(handle: int, which: str) -> None:
    try:
        _set_inheritable(handle, True)
    except OSError as err:
        raise PipeBindingError(
            f"failed to make {which} handle inheritable",
            which=which,
            handle=handle,
            cause=err,
        ) from err


def bind_child_pipes(read_fd: int, write_fd: int, flags: LaunchFlags) -> ProcessConfigurator:
    """Mark both child-side handles inheritable and announce them on ``flags``.

    On failure nothing is closed and the read handle's previous inheritance
    flag is restored, so both endpoints remain fully owned by the caller.
    """
    try:
        read_handle = _os_handle(read_fd)
        write_handle = _os_handle(write_fd)
    except OSError as err:
        raise PipeBindingError("failed to resolve pipe handles", cause=err) from err

    read_was_inheritable = _get_inheritable(read_handle)
    _mark_inheritable(read_handle, "read")
    try:
        _mark_inheritable(write_handle, "write")
    except PipeBindingError:
        if not read_was_inheritable:
            with contextlib.suppress(OSError):
                _set_inheritable(read_handle, False)
        raise

    flags.set(REMOTE_DEBUGGING_IO_PIPES, f"{read_handle},{write_handle}")
    logger.debug("Child pipes bound by handle: read=%d write=%d", read_handle, write_handle)

    def configure(attributes: SpawnAttributes) -> None:
        attributes.inherited_handles = [read_handle, write_handle]

    return configure


def popen_options(attributes: SpawnAttributes) -> dict[str, Any]:
    """Translate spawn attributes into ``subprocess.Popen`` keyword arguments."""
    if not attributes.inherited_handles:
        return {}
    startupinfo = subprocess.STARTUPINFO()
    startupinfo.lpAttributeList = {"handle_list": list(attributes.inherited_handles)}
    return {"startupinfo": startupinfo, "close_fds": True}
