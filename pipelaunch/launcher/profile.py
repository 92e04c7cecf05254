"""Pre-launch preparation: browser binary lookup and profile setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path
import shutil
import tempfile
from typing import TYPE_CHECKING
from typing import Any

from pipelaunch.errors import BrowserNotFoundError
from pipelaunch.launcher.flags import USER_DATA_DIR

if TYPE_CHECKING:
    from pipelaunch.launcher.flags import LaunchFlags

logger = logging.getLogger(__name__)

BROWSER_NAMES = (
    "chrome",
    "google-chrome",
    "google-chrome-stable",
    "chromium",
    "chromium-browser",
    "microsoft-edge",
    "msedge",
    "chrome.exe",
    "msedge.exe",
)


def resolve_binary(explicit: str | None = None) -> str:
    """Return ``explicit`` or the first known browser executable on PATH."""
    if explicit:
        return explicit
    for name in BROWSER_NAMES:
        found = shutil.which(name)
        if found:
            logger.debug("Found browser binary %s", found)
            return found
    raise BrowserNotFoundError(
        "No browser binary configured and none found on PATH",
        searched=list(BROWSER_NAMES),
    )


def ensure_user_data_dir(flags: LaunchFlags) -> Path | None:
    """Create a temporary profile directory when ``user-data-dir`` is unset.

    Returns the created directory, or ``None`` if the flag was already set.
    """
    if flags.first(USER_DATA_DIR):
        return None
    path = Path(tempfile.mkdtemp(prefix="pipelaunch-profile-"))
    flags.set(USER_DATA_DIR, str(path))
    logger.debug("Using temporary user data dir %s", path)
    return path


def write_user_preferences(user_data_dir: str | Path, prefs: dict[str, Any]) -> Path | None:
    """Write ``prefs`` to ``<user_data_dir>/Default/Preferences``."""
    if not prefs:
        return None
    target = Path(user_data_dir) / "Default" / "Preferences"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(prefs), encoding="utf-8")
    logger.debug("Wrote %d preference key(s) to %s", len(prefs), target)
    return target


def remove_user_data_dir(path: Path) -> None:
    """Remove a temporary profile directory created by this module."""
    shutil.rmtree(path, ignore_errors=True)
