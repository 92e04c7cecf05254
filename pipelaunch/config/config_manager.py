"""Process-wide default launch configuration.

Launchers built without an explicit config take a copy of the current
default, so changing the default never affects a launcher already created.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    import types

from pipelaunch.config.launch_config import DEFAULT_CONFIG
from pipelaunch.config.launch_config import LaunchConfig

logger = logging.getLogger(__name__)

_UPDATABLE_KEYS = frozenset(
    {"bin", "working_dir", "env", "user_preferences", "forward_output", "log_level", "exit_timeout"}
)


class ConfigManager:
    """Thread-safe manager for the default launch configuration."""

    def __init__(self, default_config: LaunchConfig) -> None:
        self._lock = threading.RLock()
        self._default_config = default_config
        self._current_config = default_config

    def get_config(self) -> LaunchConfig:
        with self._lock:
            return self._current_config

    def set_config(self, config: LaunchConfig) -> None:
        with self._lock:
            config.validate()
            self._current_config = config

    def update_config(self, **kwargs: Any) -> None:
        """Update scalar fields of the current configuration."""
        with self._lock:
            unknown_keys = sorted(set(kwargs) - _UPDATABLE_KEYS)
            if unknown_keys:
                logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown_keys))

            updated = self._current_config.copy()
            for key in _UPDATABLE_KEYS.intersection(kwargs):
                setattr(updated, key, kwargs[key])

            updated.validate()
            self._current_config = updated

    def reset_config(self) -> None:
        with self._lock:
            self._current_config = self._default_config


_config_manager = ConfigManager(DEFAULT_CONFIG)


def get_config() -> LaunchConfig:
    """Get the current default configuration."""
    return _config_manager.get_config()


def set_config(config: LaunchConfig) -> None:
    """Replace the current default configuration."""
    _config_manager.set_config(config)


def update_config(**kwargs: Any) -> None:
    """Update the current default configuration with new values."""
    _config_manager.update_config(**kwargs)


def reset_config() -> None:
    """Reset configuration to defaults."""
    _config_manager.reset_config()


class ConfigContext:
    """Context manager for temporary default-configuration changes."""

    def __init__(self, **kwargs: Any) -> None:
        self._changes = kwargs
        self._original_config: LaunchConfig | None = None

    def __enter__(self) -> LaunchConfig:
        self._original_config = _config_manager.get_config()
        _config_manager.update_config(**self._changes)
        return _config_manager.get_config()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        if self._original_config is not None:
            _config_manager.set_config(self._original_config)


def config_context(**kwargs: Any) -> ConfigContext:
    """Create a context manager for temporary configuration changes."""
    return ConfigContext(**kwargs)
