import errno
import logging

from pipelaunch.errors import AlreadyLaunchedError
from pipelaunch.errors import BrowserNotFoundError
from pipelaunch.errors import ConfigurationError
from pipelaunch.errors import FramingError
from pipelaunch.errors import PipeBindingError
from pipelaunch.errors import PipeCreationError
from pipelaunch.errors import PipeLaunchError
from pipelaunch.errors import SpawnError
from pipelaunch.errors import TransportClosedError
from pipelaunch.errors import TransportError
from pipelaunch.errors import log_error


def test_hierarchy():
    for cls in (
        ConfigurationError,
        AlreadyLaunchedError,
        PipeCreationError,
        PipeBindingError,
        SpawnError,
        TransportError,
    ):
        assert issubclass(cls, PipeLaunchError)
    assert issubclass(BrowserNotFoundError, ConfigurationError)
    assert issubclass(TransportClosedError, TransportError)
    assert issubclass(FramingError, TransportError)


def test_cause_is_kept_and_shown():
    cause = OSError(errno.EMFILE, "Too many open files")
    err = PipeCreationError("failed to create read pipe", direction="read", cause=cause)

    assert err.cause is cause
    assert "caused by" in str(err)
    assert err.to_dict() == {
        "error": "PipeCreationError",
        "message": "failed to create read pipe",
        "details": {"direction": "read"},
    }


def test_binding_error_details():
    err = PipeBindingError("failed to make write handle inheritable", which="write", handle=0)

    assert err.details == {"which": "write", "handle": 0}
    assert str(err) == "failed to make write handle inheritable"


def test_default_messages():
    assert str(AlreadyLaunchedError()) == "browser has already been launched"
    assert str(TransportClosedError()) == "transport is closed"
    assert TransportClosedError().error_code == "TransportClosedError"


def test_browser_not_found_lists_search():
    err = BrowserNotFoundError("no browser", searched=["chrome", "chromium"])

    assert err.config_key == "bin"
    assert err.searched == ["chrome", "chromium"]
    assert err.details["searched"] == ["chrome", "chromium"]
    assert err.error_code == "BrowserNotFoundError"


def test_framing_error_keeps_discarded_count():
    err = FramingError("truncated", discarded_bytes=0, operation="receive")

    assert err.discarded_bytes == 0
    assert err.details == {"discarded_bytes": 0, "operation": "receive"}


def test_log_error_uses_level(caplog):
    with caplog.at_level(logging.DEBUG, logger="pipelaunch.errors"):
        log_error(SpawnError("failed to start x", binary="x"), level=logging.CRITICAL)

    record = caplog.records[-1]
    assert record.levelno == logging.CRITICAL
    assert "SpawnError" in record.getMessage()
