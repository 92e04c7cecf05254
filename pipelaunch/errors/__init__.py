"""Error handling for pipelaunch."""

from pipelaunch.errors.pipelaunch_errors import AlreadyLaunchedError
from pipelaunch.errors.pipelaunch_errors import BrowserNotFoundError
from pipelaunch.errors.pipelaunch_errors import ConfigurationError
from pipelaunch.errors.pipelaunch_errors import FramingError
from pipelaunch.errors.pipelaunch_errors import PipeBindingError
from pipelaunch.errors.pipelaunch_errors import PipeCreationError
from pipelaunch.errors.pipelaunch_errors import PipeLaunchError
from pipelaunch.errors.pipelaunch_errors import SpawnError
from pipelaunch.errors.pipelaunch_errors import TransportClosedError
from pipelaunch.errors.pipelaunch_errors import TransportError
from pipelaunch.errors.pipelaunch_errors import log_error

__all__ = [
    "AlreadyLaunchedError",
    "BrowserNotFoundError",
    "ConfigurationError",
    "FramingError",
    "PipeBindingError",
    "PipeCreationError",
    "PipeLaunchError",
    "SpawnError",
    "TransportClosedError",
    "TransportError",
    "log_error",
]
