"""Raw telemetry attribute access (one line of text per sysfs file)."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)

# Returned for any attribute that can't be read.
MISSING = "0"

HWMON_PREFIX = "hwmon/"
_FALLBACK_HWMON = "hwmon1"


def _hwmon_order(name: str) -> tuple[int, str]:
    """Sort hwmon2 before hwmon10; odd names go last."""
    suffix = name[len("hwmon"):]
    return (int(suffix) if suffix.isdigit() else sys.maxsize, name)


class MetricSource(Protocol):
    def read_line(self, name: str) -> str:
        """Return the first line of attribute *name*, or ``MISSING``."""
        ...


class SysfsSource:
    """Reads attributes relative to a device root such as
    ``/sys/class/drm/card0/device``.

    Names starting with ``hwmon/`` are resolved inside the device's hardware
    monitor directory (``hwmon/hwmonN``), which is located once and cached.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)
        self._hwmon_dir: Path | None = None

    def _find_hwmon_dir(self) -> Path:
        """Find the hwmon directory once, cache the path."""
        if self._hwmon_dir is not None:
            return self._hwmon_dir
        base = self.root / "hwmon"
        try:
            entries = sorted(
                (p for p in os.listdir(base) if p.startswith("hwmon")), key=_hwmon_order
            )
        except OSError:
            entries = []
        self._hwmon_dir = base / (entries[0] if entries else _FALLBACK_HWMON)
        log.debug("using hwmon directory %s", self._hwmon_dir)
        return self._hwmon_dir

    def path_for(self, name: str) -> Path:
        if name.startswith(HWMON_PREFIX):
            return self._find_hwmon_dir() / name[len(HWMON_PREFIX):]
        return self.root / name

    def read_line(self, name: str) -> str:
        path = self.path_for(name)
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return f.readline().strip()
        except OSError as e:
            log.debug("cannot read %s: %s", path, e)
            return MISSING
