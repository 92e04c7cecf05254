"""Types shared by the platform pipe binders."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Callable


@dataclass
class SpawnAttributes:
    """Inheritance attributes of the process about to be spawned.

    ``extra_fds`` is ordered: entry ``i`` becomes descriptor ``3 + i`` in the
    child. ``inherited_handles`` is the explicit handle list used on Windows.
    """

    extra_fds: list[int] = field(default_factory=list)
    inherited_handles: list[int] = field(default_factory=list)


# Deferred mutation applied once, right before spawn
ProcessConfigurator = Callable[[SpawnAttributes], None]
