"""Launch configuration for pipelaunch.

``LaunchConfig`` gathers everything the launcher needs besides the pipes
themselves: which binary to run, the browser flags, and the cross-cutting
process attributes (working directory, environment, output handling).
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
import threading
from typing import Any
from typing import Literal

from pipelaunch.constants import DEFAULT_EXIT_TIMEOUT
from pipelaunch.errors import AlreadyLaunchedError
from pipelaunch.errors import ConfigurationError
from pipelaunch.launcher.flags import ARGUMENTS
from pipelaunch.launcher.flags import LaunchFlags
from pipelaunch.launcher.flags import default_flags
from pipelaunch.launcher.flags import parse_flag

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LaunchConfig:
    """Settings for one browser launch."""

    bin: str | None = None
    flags: LaunchFlags = field(default_factory=default_flags)
    working_dir: str | None = None
    env: dict[str, str] | None = None
    user_preferences: dict[str, Any] = field(default_factory=dict)
    forward_output: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    exit_timeout: float = DEFAULT_EXIT_TIMEOUT

    # Launch state; copies start out unlaunched.
    _launched: bool = field(default=False, init=False, repr=False, compare=False)
    _launch_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LaunchConfig:
        """Create a config from a JSON-style mapping.

        Recognised keys: ``bin``, ``flags`` (mapping or list of ``name=v``
        strings), ``args``, ``cwd``, ``env``, ``preferences``,
        ``forwardOutput``, ``logLevel``, ``exitTimeout``.
        """
        flags = default_flags() if data.get("defaultFlags", True) else LaunchFlags()
        raw_flags = data.get("flags") or {}
        if isinstance(raw_flags, dict):
            for name, values in raw_flags.items():
                if values is None or values is True:
                    flags.set(name)
                elif values is False:
                    flags.delete(name)
                elif isinstance(values, str):
                    flags.set(name, values)
                else:
                    flags.set(name, *[str(v) for v in values])
        else:
            for spec in raw_flags:
                name, values = parse_flag(str(spec))
                flags.set(name, *(values or []))
        if data.get("args"):
            flags.append(ARGUMENTS, *[str(a) for a in data["args"]])

        config = cls(
            bin=data.get("bin"),
            flags=flags,
            working_dir=data.get("cwd"),
            env=data.get("env"),
            user_preferences=dict(data.get("preferences") or {}),
            forward_output=bool(data.get("forwardOutput", False)),
            log_level=str(data.get("logLevel", "INFO")).upper(),  # type: ignore[arg-type]
            exit_timeout=data.get("exitTimeout", DEFAULT_EXIT_TIMEOUT),
        )
        config.validate()
        return config

    def copy(self) -> LaunchConfig:
        """Return a copy whose flags and mappings can be mutated independently.

        The copy has not been launched, whatever the state of this config.
        """
        return replace(
            self,
            flags=self.flags.copy(),
            env=None if self.env is None else dict(self.env),
            user_preferences=dict(self.user_preferences),
        )

    @property
    def launched(self) -> bool:
        return self._launched

    def mark_launched(self) -> None:
        """Record a launch with this configuration.

        Raises:
            AlreadyLaunchedError: the configuration was already launched.
        """
        with self._launch_lock:
            if self._launched:
                raise AlreadyLaunchedError
            self._launched = True

    def validate(self) -> None:
        """Validate configuration and raise errors for invalid setups."""
        if self.bin is not None and not str(self.bin).strip():
            raise ConfigurationError(
                "Browser binary path must not be empty",
                config_key="bin",
            )

        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level: {self.log_level!r}",
                config_key="log_level",
                details={"allowed": list(LOG_LEVELS)},
            )

        try:
            timeout = float(self.exit_timeout)
        except (TypeError, ValueError) as err:
            raise ConfigurationError(
                f"Malformed exit timeout: {self.exit_timeout!r}",
                config_key="exit_timeout",
                cause=err,
            ) from err
        if timeout <= 0:
            raise ConfigurationError(
                "Exit timeout must be positive",
                config_key="exit_timeout",
                details={"exit_timeout": self.exit_timeout},
            )
        self.exit_timeout = timeout

        if self.env is not None:
            bad = sorted(
                str(k)
                for k, v in self.env.items()
                if not isinstance(k, str) or not isinstance(v, str)
            )
            if bad:
                raise ConfigurationError(
                    "Environment entries must be strings",
                    config_key="env",
                    details={"keys": bad},
                )


# Default configuration instance
DEFAULT_CONFIG = LaunchConfig()
