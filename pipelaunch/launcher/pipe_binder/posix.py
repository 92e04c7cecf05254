"""Descriptor-order pipe binding for POSIX systems.

The browser reads commands from descriptor 3 and writes replies to
descriptor 4. Nothing has to be marked or announced on the command line;
the binder only records which parent descriptors must land on those
numbers, and :func:`popen_options` moves them there in the child.
"""

from __future__ import annotations

import fcntl
import logging
import os
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable

from pipelaunch.constants import CHILD_READ_FD
from pipelaunch.constants import CHILD_WRITE_FD
from pipelaunch.launcher.pipe_binder.base import SpawnAttributes

if TYPE_CHECKING:
    from pipelaunch.launcher.flags import LaunchFlags
    from pipelaunch.launcher.pipe_binder.base import ProcessConfigurator

logger = logging.getLogger(__name__)


def bind_child_pipes(read_fd: int, write_fd: int, flags: LaunchFlags) -> ProcessConfigurator:
    """Arrange for ``read_fd``/``write_fd`` to become descriptors 3 and 4.

    ``flags`` is left untouched: the child finds its pipes by number.
    """

    def configure(attributes: SpawnAttributes) -> None:
        attributes.extra_fds.extend((read_fd, write_fd))

    logger.debug(
        "Child pipes bound by position: fd %d -> %d, fd %d -> %d",
        read_fd,
        CHILD_READ_FD,
        write_fd,
        CHILD_WRITE_FD,
    )
    return configure


def _remap_fds(fds: list[int], first: int = CHILD_READ_FD) -> Callable[[], None]:
    """Build a pre-exec hook that dups ``fds`` onto ``first``, ``first + 1``, ...

    The sources are first staged above the target range so that a source
    which already sits on a target number is never clobbered.
    """
    floor = first + len(fds)

    def remap() -> None:
        staged = [fcntl.fcntl(fd, fcntl.F_DUPFD, floor) for fd in fds]
        for target, fd in enumerate(staged, start=first):
            os.dup2(fd, target, inheritable=True)
        for fd in staged:
            os.close(fd)

    return remap


def popen_options(attributes: SpawnAttributes) -> dict[str, Any]:
    """Translate spawn attributes into ``subprocess.Popen`` keyword arguments.

    The targets are listed in ``pass_fds`` so that ``close_fds`` keeps them
    after the hook has run while closing everything else. Popen needs every
    ``pass_fds`` entry open in the parent; that holds because the launcher's
    own pipes occupy the lowest free numbers, which covers 3 and 4.
    """
    if not attributes.extra_fds:
        return {}
    targets = tuple(range(CHILD_READ_FD, CHILD_READ_FD + len(attributes.extra_fds)))
    return {
        "preexec_fn": _remap_fds(list(attributes.extra_fds)),
        "pass_fds": targets,
        "close_fds": True,
    }
