"""pipelaunch - drive a browser over its debugging pipes instead of a WebSocket."""

from pipelaunch.config import LaunchConfig
from pipelaunch.errors import PipeLaunchError
from pipelaunch.ipc import AsyncPipeTransport
from pipelaunch.ipc import FramedPipeTransport
from pipelaunch.launcher.pipe_launcher import PipeLauncher
from pipelaunch.launcher.pipe_launcher import launch_with_pipes
from pipelaunch.launcher.pipe_launcher import must_launch_with_pipes
from pipelaunch.launcher.process import ProcessHandle

__all__ = [
    "AsyncPipeTransport",
    "FramedPipeTransport",
    "LaunchConfig",
    "PipeLaunchError",
    "PipeLauncher",
    "ProcessHandle",
    "__version__",
    "launch_with_pipes",
    "must_launch_with_pipes",
]
__version__ = "0.1.0"
