"""Platform pipe binding.

Exactly one variant is exported, chosen once at import time for the running
platform. Both share the contract::

    bind_child_pipes(read_fd, write_fd, flags) -> ProcessConfigurator
    popen_options(attributes) -> dict
"""

from __future__ import annotations

import sys

from pipelaunch.launcher.pipe_binder.base import ProcessConfigurator
from pipelaunch.launcher.pipe_binder.base import SpawnAttributes

if sys.platform == "win32":
    from pipelaunch.launcher.pipe_binder.windows import bind_child_pipes
    from pipelaunch.launcher.pipe_binder.windows import popen_options
else:
    from pipelaunch.launcher.pipe_binder.posix import bind_child_pipes
    from pipelaunch.launcher.pipe_binder.posix import popen_options

__all__ = [
    "ProcessConfigurator",
    "SpawnAttributes",
    "bind_child_pipes",
    "popen_options",
]
