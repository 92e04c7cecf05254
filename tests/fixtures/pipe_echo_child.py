"""Stand-in browser that speaks the pipe convention.

Reads NUL-terminated messages from fd 3 and answers on fd 4:

* ``argv``  -> JSON list of the command-line arguments it received
* ``fds``   -> JSON object mapping each open descriptor to its inode
* ``exit``  -> exits with status 0
* ``crash`` -> exits immediately with status 3 without replying
* ``hold``  -> stops answering (keeps the pipes open) until killed
* anything else is echoed back unchanged
"""

from __future__ import annotations

import json
import os
import sys
import time


def open_descriptors() -> dict[str, int]:
    found = {}
    for fd in range(256):
        try:
            found[str(fd)] = os.fstat(fd).st_ino
        except OSError:
            continue
    return found


def main() -> int:
    inbound = os.fdopen(3, "rb", buffering=0)
    outbound = os.fdopen(4, "wb", buffering=0)
    buffer = b""
    while True:
        chunk = inbound.read(65536)
        if not chunk:
            return 0
        buffer += chunk
        while b"\x00" in buffer:
            message, _, buffer = buffer.partition(b"\x00")
            if message == b"exit":
                return 0
            if message == b"crash":
                os._exit(3)
            if message == b"hold":
                while True:
                    time.sleep(1)
            if message == b"argv":
                message = json.dumps(sys.argv[1:]).encode("utf-8")
            elif message == b"fds":
                message = json.dumps(open_descriptors()).encode("utf-8")
            outbound.write(message + b"\x00")


if __name__ == "__main__":
    sys.exit(main())
