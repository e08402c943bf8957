"""The fixed catalogue of dashboard rows and which of them are shown."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class MetricKind(enum.Enum):
    BUSY = enum.auto()
    VRAM = enum.auto()
    GTT = enum.auto()
    CPU_VIS = enum.auto()
    POWER = enum.auto()
    TEMPERATURE = enum.auto()
    FAN = enum.auto()
    VOLTAGE = enum.auto()
    GFX_CLOCK = enum.auto()
    MEM_CLOCK = enum.auto()
    LINK_SPEED = enum.auto()
    LINK_WIDTH = enum.auto()


@dataclass(frozen=True)
class RowSpec:
    key: str       # name accepted by --disable
    kind: MetricKind
    label: str     # static text drawn left of the value
    is_bar: bool   # False = plain value, no bar


# ── Row table (display order) ──────────────────────────────────────────────

ROWS: tuple[RowSpec, ...] = (
    RowSpec("busy",        MetricKind.BUSY,        "GPU busy:",    True),
    RowSpec("vram",        MetricKind.VRAM,        "GPU vram:",    True),
    RowSpec("gtt",         MetricKind.GTT,         "GTT:",         True),
    RowSpec("cpu_vis",     MetricKind.CPU_VIS,     "CPU Vis:",     True),
    RowSpec("power",       MetricKind.POWER,       "Power draw:",  True),
    RowSpec("temperature", MetricKind.TEMPERATURE, "Temperature:", True),
    RowSpec("fan",         MetricKind.FAN,         "Fan speed:",   True),
    RowSpec("voltage",     MetricKind.VOLTAGE,     "Voltage:",     False),
    RowSpec("gfx_clock",   MetricKind.GFX_CLOCK,   "GFX clock:",   False),
    RowSpec("mem_clock",   MetricKind.MEM_CLOCK,   "Mem clock:",   False),
    RowSpec("link_speed",  MetricKind.LINK_SPEED,  "Link speed:",  False),
    RowSpec("link_width",  MetricKind.LINK_WIDTH,  "Link width:",  False),
)

_BY_KEY: dict[str, RowSpec] = {spec.key: spec for spec in ROWS}


class RowRegistry:
    """Enabled/disabled flag per row. Mutated only while parsing options."""

    def __init__(self) -> None:
        self._enabled: dict[MetricKind, bool] = {spec.kind: True for spec in ROWS}

    def disable(self, name: str) -> None:
        """Disable the row called *name*; unknown names are ignored."""
        spec = _BY_KEY.get(name)
        if spec is not None:
            self._enabled[spec.kind] = False

    def disable_list(self, csv: str) -> None:
        """Disable every row in a comma separated list, e.g. ``"busy,fan"``."""
        for token in csv.split(","):
            self.disable(token)

    def is_enabled(self, kind: MetricKind) -> bool:
        return self._enabled[kind]

    def all_disabled(self) -> bool:
        return not any(self._enabled.values())

    def enabled(self) -> list[RowSpec]:
        """Enabled rows in display order."""
        return [spec for spec in ROWS if self._enabled[spec.kind]]

    def __len__(self) -> int:
        return len(self._enabled)
