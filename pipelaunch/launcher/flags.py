"""Browser command-line flags.

``LaunchFlags`` is the mutable flag set handed to the launcher. It stays
editable until :meth:`LaunchFlags.format` turns it into the argument list,
which the launcher only does after the platform binder has run.
"""

from __future__ import annotations

from typing import Final
from typing import Iterator

from pipelaunch.constants import INTERNAL_FLAG_PREFIX

# Positional arguments are stored under the empty name
ARGUMENTS: Final[str] = ""

HEADLESS: Final[str] = "headless"
USER_DATA_DIR: Final[str] = "user-data-dir"
REMOTE_DEBUGGING_PORT: Final[str] = "remote-debugging-port"
REMOTE_DEBUGGING_PIPE: Final[str] = "remote-debugging-pipe"
REMOTE_DEBUGGING_IO_PIPES: Final[str] = "remote-debugging-io-pipes"

# External zombie-reaping helper, launcher-internal
LEAKLESS: Final[str] = INTERNAL_FLAG_PREFIX + "leakless"


def is_internal(name: str) -> bool:
    return name.startswith(INTERNAL_FLAG_PREFIX)


def parse_flag(spec: str) -> tuple[str, list[str] | None]:
    """Parse ``name`` or ``name=v1,v2`` (leading dashes optional)."""
    spec = spec.lstrip("-")
    if not spec:
        msg = "empty flag"
        raise ValueError(msg)
    name, sep, raw = spec.partition("=")
    if not sep:
        return name, None
    return name, raw.split(",") if raw else [""]


class LaunchFlags:
    """Ordered flag name -> values mapping.

    A value of ``None`` marks a bare switch (``--headless``); a list renders
    as ``--name=v1,v2``.
    """

    def __init__(self, initial: dict[str, list[str] | None] | None = None) -> None:
        self._flags: dict[str, list[str] | None] = {}
        for name, values in (initial or {}).items():
            self._flags[name] = None if values is None else list(values)

    def set(self, name: str, *values: str) -> LaunchFlags:
        """Set ``name``, replacing any previous values."""
        self._flags[name] = list(values) if values else None
        return self

    def append(self, name: str, *values: str) -> LaunchFlags:
        """Append values to ``name``, creating it if needed."""
        current = self._flags.get(name) or []
        self._flags[name] = [*current, *values]
        return self

    def delete(self, name: str) -> LaunchFlags:
        self._flags.pop(name, None)
        return self

    def get(self, name: str) -> list[str] | None:
        values = self._flags.get(name)
        return None if values is None else list(values)

    def first(self, name: str) -> str | None:
        values = self._flags.get(name)
        return values[0] if values else None

    def has(self, name: str) -> bool:
        return name in self._flags

    def copy(self) -> LaunchFlags:
        return LaunchFlags(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LaunchFlags):
            return NotImplemented
        return self._flags == other._flags

    def __repr__(self) -> str:
        return f"LaunchFlags({self._flags!r})"

    def format(self) -> list[str]:
        """Render the flags as a browser argument list.

        Switches come first, sorted by their rendered text; positional
        arguments follow in insertion order. Internal flags are skipped.
        """
        rendered = []
        for name, values in self._flags.items():
            if name == ARGUMENTS or is_internal(name):
                continue
            arg = f"--{name}"
            if values is not None:
                arg += "=" + ",".join(values)
            rendered.append(arg)
        rendered.sort()
        return rendered + list(self._flags.get(ARGUMENTS) or [])


def default_flags() -> LaunchFlags:
    """Flags for a regular automation launch."""
    return LaunchFlags(
        {
            HEADLESS: None,
            "no-startup-window": None,
            "no-first-run": None,
            "disable-background-networking": None,
            "disable-background-timer-throttling": None,
            "disable-backgrounding-occluded-windows": None,
            "disable-breakpad": None,
            "disable-client-side-phishing-detection": None,
            "disable-component-extensions-with-background-pages": None,
            "disable-default-apps": None,
            "disable-dev-shm-usage": None,
            "disable-features": ["site-per-process", "TranslateUI"],
            "disable-hang-monitor": None,
            "disable-ipc-flooding-protection": None,
            "disable-popup-blocking": None,
            "disable-prompt-on-repost": None,
            "disable-renderer-backgrounding": None,
            "disable-site-isolation-trials": None,
            "disable-sync": None,
            "enable-automation": None,
            "enable-features": ["NetworkService", "NetworkServiceInProcess"],
            "force-color-profile": ["srgb"],
            "metrics-recording-only": None,
            "use-mock-keychain": None,
            REMOTE_DEBUGGING_PORT: ["0"],
            LEAKLESS: None,
        }
    )
