from __future__ import annotations

import contextlib
import os
from pathlib import Path
import stat
import sys

import pytest

from pipelaunch.config import LaunchConfig
from pipelaunch.config import reset_config
from pipelaunch.ipc.pipe_transport import FramedPipeTransport
from pipelaunch.launcher.flags import LaunchFlags

FIXTURES = Path(__file__).resolve().parent / "fixtures"
ECHO_CHILD = FIXTURES / "pipe_echo_child.py"


@pytest.fixture(autouse=True)
def _reset_default_config():
    reset_config()
    yield
    reset_config()


class PipePeer:
    """The far side of a FramedPipeTransport built on two plain os.pipe() pairs."""

    def __init__(self) -> None:
        # transport reads from in_r; the peer writes into in_w
        self.in_r, self.in_w = os.pipe()
        # transport writes into out_w; the peer reads from out_r
        self.out_r, self.out_w = os.pipe()
        self._closed: set[int] = set()

    def write(self, data: bytes) -> None:
        os.write(self.in_w, data)

    def read_exact(self, n: int) -> bytes:
        data = b""
        while len(data) < n:
            chunk = os.read(self.out_r, n - len(data))
            if not chunk:
                break
            data += chunk
        return data

    def close_writer(self) -> None:
        self._close(self.in_w)

    def close_reader(self) -> None:
        self._close(self.out_r)

    def _close(self, fd: int) -> None:
        if fd not in self._closed:
            self._closed.add(fd)
            os.close(fd)

    def cleanup(self) -> None:
        self.close_writer()
        self.close_reader()


@pytest.fixture
def pipe_peer():
    peer = PipePeer()
    transport = FramedPipeTransport(peer.in_r, peer.out_w)
    yield transport, peer
    with contextlib.suppress(Exception):
        transport.close()
    peer.cleanup()


def _fd_is_open(fd: int) -> bool:
    try:
        os.fstat(fd)
    except OSError:
        return False
    return True


@pytest.fixture
def fd_is_open():
    return _fd_is_open


@pytest.fixture
def echo_browser(tmp_path: Path) -> Path:
    """Executable wrapper that runs the echo child with the test interpreter."""
    script = tmp_path / "fake-browser"
    script.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{ECHO_CHILD}" "$@"\n')
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def echo_config(echo_browser: Path, tmp_path: Path) -> LaunchConfig:
    flags = LaunchFlags().set("user-data-dir", str(tmp_path / "profile"))
    return LaunchConfig(bin=str(echo_browser), flags=flags, exit_timeout=2.0)
