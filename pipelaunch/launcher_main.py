"""
Command-line front end: launch a browser over pipes and relay messages.

Each line read from stdin is sent to the browser as one message; every
message received from the browser is printed on its own line on stdout.
The program ends when stdin closes or the browser exits.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import TYPE_CHECKING

from pipelaunch.config import LaunchConfig
from pipelaunch.errors import TransportError
from pipelaunch.launcher.flags import ARGUMENTS
from pipelaunch.launcher.flags import LaunchFlags
from pipelaunch.launcher.flags import default_flags
from pipelaunch.launcher.flags import parse_flag
from pipelaunch.launcher.pipe_launcher import PipeLauncher

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Sequence
    from typing import TextIO

    from pipelaunch.ipc.connections.base import TransportBase
    from pipelaunch.launcher.process import ProcessHandle

logger = logging.getLogger(__name__)

# Eventually this can just be logging.getLevelNamesMapping()
NAME_TO_LEVEL: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Launch a browser over debugging pipes")
    parser.add_argument("--bin", type=str, help="Browser executable (default: search PATH)")
    parser.add_argument(
        "--flag",
        action="append",
        default=[],
        help="Browser flag as name or name=v1,v2 (repeatable)",
    )
    parser.add_argument(
        "--no-default-flags",
        action="store_true",
        help="Start from an empty flag set instead of the automation defaults",
    )
    parser.add_argument(
        "--arg", action="append", default=[], help="Positional argument for the browser"
    )
    parser.add_argument("--cwd", type=str, help="Working directory for the browser")
    parser.add_argument(
        "--forward-output",
        action="store_true",
        help="Show the browser's stdout/stderr instead of discarding it",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=list(NAME_TO_LEVEL),
        help="Log level (default: WARNING)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LaunchConfig:
    flags = LaunchFlags() if args.no_default_flags else default_flags()
    for spec in args.flag:
        name, values = parse_flag(spec)
        flags.set(name, *(values or []))
    if args.arg:
        flags.append(ARGUMENTS, *args.arg)

    config = LaunchConfig(
        bin=args.bin,
        flags=flags,
        working_dir=args.cwd,
        forward_output=args.forward_output,
        log_level=args.log_level,
    )
    config.validate()
    return config


def relay_incoming(transport: TransportBase, out: TextIO) -> None:
    """Print every message from the browser until the transport fails."""
    while True:
        try:
            message = transport.receive()
        except TransportError as err:
            logger.info("Stopped reading from browser: %s", err)
            return
        out.write(message.decode("utf-8", errors="replace") + "\n")
        out.flush()


def relay_outgoing(transport: TransportBase, source: Iterable[str]) -> None:
    """Send each non-empty line of ``source`` as one message."""
    for line in source:
        line = line.rstrip("\r\n")
        if not line:
            continue
        try:
            transport.send(line.encode("utf-8"))
        except TransportError:
            logger.exception("Failed to send message to browser")
            return


def _close_quietly(transport: TransportBase) -> None:
    try:
        transport.close()
    except TransportError:
        logger.debug("Error closing transport", exc_info=True)


def configure_logging(config: LaunchConfig) -> None:
    logging.basicConfig(
        level=NAME_TO_LEVEL.get(config.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )


def relay_session(
    transport: TransportBase,
    process: ProcessHandle,
    source: Iterable[str],
    out: TextIO,
) -> None:
    """Relay messages until ``source`` ends or the browser exits.

    Both directions run on daemon threads; whichever side finishes first
    ends the session and closes the transport, which stops the other.
    """
    finished = threading.Event()
    process.exit.add_done_callback(lambda _fut: finished.set())

    def _pump() -> None:
        try:
            relay_outgoing(transport, source)
        finally:
            finished.set()

    reader = threading.Thread(
        target=relay_incoming, args=(transport, out), daemon=True, name="pipelaunch-reader"
    )
    writer = threading.Thread(target=_pump, daemon=True, name="pipelaunch-writer")
    reader.start()
    writer.start()

    finished.wait()
    if process.exit.done():
        logger.info("Browser exited, ending session")
    _close_quietly(transport)
    reader.join(timeout=1.0)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    config = build_config(args)
    configure_logging(config)

    launcher = PipeLauncher.new_pipe_mode(config)
    transport, process = launcher.must_launch_with_pipes()

    try:
        relay_session(transport, process, sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        _close_quietly(transport)
        code = launcher.kill()
        launcher.cleanup()

    sys.exit(code if code and code > 0 else 0)


if __name__ == "__main__":
    main()
