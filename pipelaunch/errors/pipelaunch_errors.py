"""Error hierarchy for the pipe launcher.

Every failure surfaced by the launcher, the platform binders and the framed
transport is one of the exceptions below. OS-level errors are never swallowed:
they are kept on ``cause`` and chained with ``raise ... from``.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class PipeLaunchError(Exception):
    """Base exception for all pipelaunch errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for structured logging."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class ConfigurationError(PipeLaunchError):
    """Raised when a launch configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        kwargs.setdefault("error_code", "ConfigurationError")
        super().__init__(message, details=details, **kwargs)
        self.config_key = config_key


class BrowserNotFoundError(ConfigurationError):
    """Raised when no browser binary is configured or found on PATH."""

    def __init__(self, message: str, *, searched: list[str] | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if searched:
            details["searched"] = list(searched)
        super().__init__(
            message,
            config_key="bin",
            error_code="BrowserNotFoundError",
            details=details,
            **kwargs,
        )
        self.searched = list(searched or [])


class AlreadyLaunchedError(PipeLaunchError):
    """Raised when a launcher is asked to launch a second time."""

    def __init__(self, message: str = "browser has already been launched", **kwargs: Any) -> None:
        super().__init__(message, error_code="AlreadyLaunchedError", **kwargs)


class PipeCreationError(PipeLaunchError):
    """Raised when one of the two OS pipes cannot be created."""

    def __init__(self, message: str, *, direction: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if direction:
            details["direction"] = direction
        super().__init__(message, error_code="PipeCreationError", details=details, **kwargs)
        self.direction = direction


class PipeBindingError(PipeLaunchError):
    """Raised when the child-side pipe ends cannot be made inheritable."""

    def __init__(
        self,
        message: str,
        *,
        which: str | None = None,
        handle: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if which:
            details["which"] = which
        if handle is not None:
            details["handle"] = handle
        super().__init__(message, error_code="PipeBindingError", details=details, **kwargs)
        self.which = which
        self.handle = handle


class SpawnError(PipeLaunchError):
    """Raised when the operating system refuses to start the child."""

    def __init__(self, message: str, *, binary: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if binary:
            details["binary"] = binary
        super().__init__(message, error_code="SpawnError", details=details, **kwargs)
        self.binary = binary


class TransportError(PipeLaunchError):
    """Raised for any I/O failure on an established pipe transport."""

    def __init__(self, message: str, *, operation: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        kwargs.setdefault("error_code", "TransportError")
        super().__init__(message, details=details, **kwargs)
        self.operation = operation


class TransportClosedError(TransportError):
    """Raised when a closed transport is used."""

    def __init__(self, message: str = "transport is closed", **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "TransportClosedError")
        super().__init__(message, **kwargs)


class FramingError(TransportError):
    """Raised when the byte stream violates the NUL-delimited framing."""

    def __init__(self, message: str, *, discarded_bytes: int | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if discarded_bytes is not None:
            details["discarded_bytes"] = discarded_bytes
        kwargs.setdefault("error_code", "FramingError")
        super().__init__(message, details=details, **kwargs)
        self.discarded_bytes = discarded_bytes


def log_error(error: PipeLaunchError, *, level: int = logging.ERROR) -> None:
    """Log a pipelaunch error together with its structured details."""
    logger.log(level, "%s: %s %s", error.error_code, error, error.details or "")
