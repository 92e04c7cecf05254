"""Tests for spawning and supervising child processes."""

from __future__ import annotations

import subprocess
import sys
import threading

import pytest

from pipelaunch.config import LaunchConfig
from pipelaunch.errors import SpawnError
from pipelaunch.launcher.process import ProcessHandle
from pipelaunch.launcher.process import apply_default_setup
from pipelaunch.launcher.process import spawn_process


def _spawn(code: str) -> subprocess.Popen:
    return spawn_process(
        sys.executable,
        ["-c", code],
        {"stdin": subprocess.DEVNULL, "stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL},
    )


def test_apply_default_setup_discards_output():
    options = apply_default_setup(LaunchConfig(working_dir="/tmp", env={"A": "1"}), {})

    assert options["cwd"] == "/tmp"
    assert options["env"] == {"A": "1"}
    assert options["stdin"] == subprocess.DEVNULL
    assert options["stdout"] == subprocess.DEVNULL
    assert options["stderr"] == subprocess.DEVNULL


def test_apply_default_setup_forwards_output_and_keeps_binder_options():
    options = apply_default_setup(LaunchConfig(forward_output=True), {"close_fds": False})

    assert options["stdout"] is None
    assert options["stderr"] is None
    assert options["env"] is None
    assert options["close_fds"] is False


def test_spawn_missing_binary_raises(tmp_path):
    missing = str(tmp_path / "no-such-browser")

    with pytest.raises(SpawnError) as excinfo:
        spawn_process(missing, [], {})

    assert excinfo.value.binary == missing
    assert isinstance(excinfo.value.cause, OSError)


def test_exit_future_carries_return_code():
    handle = ProcessHandle.watch(_spawn("import sys; sys.exit(7)"))

    assert handle.exit.result(timeout=10) == 7
    assert handle.returncode == 7
    assert not handle.is_running()
    assert "exited(7)" in repr(handle)


def test_exit_callbacks_run_once():
    handle = ProcessHandle.watch(_spawn("pass"))
    seen: list[int] = []
    done = threading.Event()

    def _on_exit(fut):
        seen.append(fut.result())
        done.set()

    handle.exit.add_done_callback(_on_exit)

    assert done.wait(timeout=10)
    assert seen == [0]


def test_wait_timeout_raises_while_running():
    handle = ProcessHandle.watch(_spawn("import time; time.sleep(30)"))
    try:
        assert handle.is_running()
        assert handle.returncode is None
        with pytest.raises(TimeoutError):
            handle.wait(timeout=0.05)
    finally:
        handle.kill(timeout=5)


def test_kill_terminates_running_child():
    handle = ProcessHandle.watch(_spawn("import time; time.sleep(30)"))

    code = handle.kill(timeout=5)

    assert code != 0
    assert handle.exit.done()
    # killing again just reports the code
    assert handle.kill() == code


class _StubbornPopen:
    """Ignores terminate(); only kill() ends it."""

    pid = 99

    def __init__(self) -> None:
        self._done = threading.Event()
        self.calls: list[str] = []

    def wait(self, timeout=None):
        self._done.wait()
        return -9

    def terminate(self) -> None:
        self.calls.append("terminate")

    def kill(self) -> None:
        self.calls.append("kill")
        self._done.set()


def test_kill_escalates_after_timeout():
    popen = _StubbornPopen()
    handle = ProcessHandle.watch(popen)

    assert handle.kill(timeout=0.05) == -9
    assert popen.calls == ["terminate", "kill"]


class _BrokenWaitPopen:
    pid = 100

    def wait(self, timeout=None):
        raise OSError("wait failed")


def test_wait_failure_is_delivered_through_future():
    handle = ProcessHandle.watch(_BrokenWaitPopen())

    with pytest.raises(OSError):
        handle.exit.result(timeout=5)
