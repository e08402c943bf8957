"""Shared fixtures: an in-memory telemetry source and a recording curses window."""

from __future__ import annotations

import curses
from typing import Any, Callable

import pytest

from amdmon.source import MISSING

MIB = 1024 * 1024


class DictSource:
    """MetricSource backed by a dict; unknown names read as missing."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})
        self.reads: list[str] = []

    def read_line(self, name: str) -> str:
        self.reads.append(name)
        return self.values.get(name, MISSING)


class FakeWindow:
    """Just enough of ``curses.window`` to draw into a character grid.

    Writes that fall outside the window raise ``curses.error`` like curses
    does, and are counted in ``errors``.
    """

    def __init__(self, lines: int = 24, cols: int = 80, keys: list[int] | None = None) -> None:
        self.lines = lines
        self.cols = cols
        self.cells: dict[tuple[int, int], tuple[str, int]] = {}
        self.cursor = (0, 0)
        self.keys = list(keys or [])
        self.events: list[str] = []
        self.errors = 0
        self.timeout_ms: int | None = None
        self.on_getch: Callable[[int], None] | None = None
        self.getch_calls = 0

    def _fail(self, msg: str) -> None:
        self.errors += 1
        raise curses.error(msg)

    def getmaxyx(self) -> tuple[int, int]:
        return self.lines, self.cols

    def move(self, y: int, x: int) -> None:
        if not (0 <= y < self.lines and 0 <= x < self.cols):
            self._fail(f"move({y}, {x}) out of bounds")
        self.cursor = (y, x)

    def clrtoeol(self) -> None:
        y, x = self.cursor
        for c in range(x, self.cols):
            self.cells.pop((y, c), None)
        self.events.append(f"clrtoeol:{y}")

    def addstr(self, *args: Any) -> None:
        if isinstance(args[0], str):
            (y, x), text, rest = self.cursor, args[0], args[1:]
        else:
            y, x, text, rest = args[0], args[1], args[2], args[3:]
        attr = rest[0] if rest else 0
        if not (0 <= y < self.lines and 0 <= x < self.cols):
            self._fail(f"addstr at ({y}, {x}) out of bounds")
        for i, ch in enumerate(text):
            if x + i >= self.cols:
                self._fail(f"addstr past end of row {y}")
            self.cells[(y, x + i)] = (ch, attr)
        self.cursor = (y, min(x + len(text), self.cols - 1))
        self.events.append(f"addstr:{y}:{text}")

    def clear(self) -> None:
        self.cells.clear()
        self.events.append("clear")

    def refresh(self) -> None:
        self.events.append("refresh")

    def timeout(self, ms: int) -> None:
        self.timeout_ms = ms

    def getch(self) -> int:
        self.getch_calls += 1
        self.events.append("getch")
        key = self.keys.pop(0) if self.keys else ord("q")
        if self.on_getch is not None:
            self.on_getch(self.getch_calls)
        return key

    # ── Inspection helpers ─────────────────────────────────────────────────

    def row_text(self, y: int) -> str:
        return "".join(
            self.cells.get((y, c), (" ", 0))[0] for c in range(self.cols)
        ).rstrip()

    def attr_at(self, y: int, x: int) -> int:
        return self.cells[(y, x)][1]


def amd_readings() -> dict[str, str]:
    """A plausible set of sysfs readings for a mid-load card."""
    return {
        "mem_info_vram_total": str(1024 * MIB),
        "mem_info_gtt_total": str(4096 * MIB),
        "mem_info_vis_vram_total": str(256 * MIB),
        "mem_info_vram_used": str(512 * MIB),
        "mem_info_gtt_used": str(100 * MIB),
        "mem_info_vis_vram_used": str(200 * MIB),
        "gpu_busy_percent": "42",
        "current_link_speed": "16.0 GT/s PCIe",
        "current_link_width": "16",
        "hwmon/power1_cap_min": "0",
        "hwmon/power1_cap_max": "100000000",
        "hwmon/power1_average": "33000000",
        "hwmon/temp1_crit": "100000",
        "hwmon/temp1_input": "67000",
        "hwmon/fan1_min": "0",
        "hwmon/fan1_max": "3000",
        "hwmon/fan1_input": "1200",
        "hwmon/in0_input": "850",
        "hwmon/freq1_input": "1850000000",
        "hwmon/freq2_input": "1000000000",
    }


@pytest.fixture
def source() -> DictSource:
    return DictSource(amd_readings())


@pytest.fixture
def window() -> FakeWindow:
    return FakeWindow()
