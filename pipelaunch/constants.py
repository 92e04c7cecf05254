"""
Constants used throughout pipelaunch.

Values dictated by the browser's pipe convention must not change.
"""
from typing import Final

# Wire convention
FRAME_DELIMITER: Final[bytes] = b"\x00"
READ_CHUNK_SIZE: Final[int] = 64 * 1024

# Descriptor numbers the child reads from / writes to on POSIX
CHILD_READ_FD: Final[int] = 3
CHILD_WRITE_FD: Final[int] = 4

# Process supervision
DEFAULT_EXIT_TIMEOUT: Final[float] = 5.0  # seconds between terminate() and kill()

# Logger names
TRAFFIC_LOGGER_NAME: Final[str] = "pipelaunch.transport.traffic"

# Prefix for launcher-internal flags that are never passed to the browser
INTERNAL_FLAG_PREFIX: Final[str] = "pipelaunch-"
