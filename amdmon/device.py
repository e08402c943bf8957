"""Turns raw device counters into display text and bar fractions.

Calibration bounds (memory totals, power cap range, critical temperature,
fan range) are read once when the ``Device`` is built; every ``fetch`` reads
a single live counter and normalises it against them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from amdmon.rows import MetricKind
from amdmon.source import MetricSource

log = logging.getLogger(__name__)

MIB = 1024 * 1024


class MalformedReading(ValueError):
    """An attribute file held something that isn't a number."""

    def __init__(self, name: str, raw: str) -> None:
        super().__init__(f"{name}: not a number: {raw!r}")
        self.name = name
        self.raw = raw


@dataclass(frozen=True)
class MetricSample:
    text: str
    fraction: float | None = None  # None = plain value, unclamped otherwise


def _ratio(num: float, den: float) -> float:
    """num / den, with a zero denominator reported as NaN (unknown)."""
    if den == 0:
        return float("nan")
    return num / den


class Device:
    def __init__(self, source: MetricSource) -> None:
        self.source = source

        self.vram_total = self._calibration("mem_info_vram_total")
        self.gtt_total = self._calibration("mem_info_gtt_total")
        self.vis_vram_total = self._calibration("mem_info_vis_vram_total")

        self.power_min = self._calibration("hwmon/power1_cap_min")
        self.power_max = self._calibration("hwmon/power1_cap_max")

        self.temp_crit = self._calibration("hwmon/temp1_crit")

        self.fan_min = self._calibration("hwmon/fan1_min")
        self.fan_max = self._calibration("hwmon/fan1_max")

        self._fetchers: dict[MetricKind, Callable[[], MetricSample]] = {
            MetricKind.BUSY: self.busy,
            MetricKind.VRAM: self.vram,
            MetricKind.GTT: self.gtt,
            MetricKind.CPU_VIS: self.vis_vram,
            MetricKind.POWER: self.power,
            MetricKind.TEMPERATURE: self.temperature,
            MetricKind.FAN: self.fan,
            MetricKind.VOLTAGE: self.voltage,
            MetricKind.GFX_CLOCK: self.gfx_clock,
            MetricKind.MEM_CLOCK: self.mem_clock,
            MetricKind.LINK_SPEED: self.link_speed,
            MetricKind.LINK_WIDTH: self.link_width,
        }

    # ── Parsing helpers ────────────────────────────────────────────────────

    def _read_int(self, name: str) -> tuple[str, int]:
        raw = self.source.read_line(name)
        try:
            return raw, int(raw)
        except ValueError as e:
            raise MalformedReading(name, raw) from e

    def _read_float(self, name: str) -> tuple[str, float]:
        raw = self.source.read_line(name)
        try:
            return raw, float(raw)
        except ValueError as e:
            raise MalformedReading(name, raw) from e

    def _calibration(self, name: str) -> int:
        try:
            return self._read_int(name)[1]
        except MalformedReading as e:
            log.warning("bad calibration value, using 0: %s", e)
            return 0

    # ── Bar metrics ────────────────────────────────────────────────────────

    def busy(self) -> MetricSample:
        raw, pc = self._read_float("gpu_busy_percent")
        return MetricSample(raw + "%", pc / 100)

    def _memory(self, name: str, total: int) -> MetricSample:
        _, used = self._read_int(name)
        return MetricSample(f"{used // MIB}/{total // MIB}MiB", _ratio(used, total))

    def vram(self) -> MetricSample:
        return self._memory("mem_info_vram_used", self.vram_total)

    def gtt(self) -> MetricSample:
        return self._memory("mem_info_gtt_used", self.gtt_total)

    def vis_vram(self) -> MetricSample:
        return self._memory("mem_info_vis_vram_used", self.vis_vram_total)

    def power(self) -> MetricSample:
        _, p = self._read_int("hwmon/power1_average")
        pc = _ratio(p - self.power_min, self.power_max - self.power_min)
        return MetricSample(f"{int(p / 1_000_000)}W", pc)

    def temperature(self) -> MetricSample:
        _, t = self._read_int("hwmon/temp1_input")
        return MetricSample(f"{int(t / 1000)}C", _ratio(t, self.temp_crit))

    def fan(self) -> MetricSample:
        raw, rpm = self._read_float("hwmon/fan1_input")
        pc = _ratio(rpm - self.fan_min, self.fan_max - self.fan_min)
        return MetricSample(raw + "RPM", pc)

    # ── Plain values ───────────────────────────────────────────────────────

    def voltage(self) -> MetricSample:
        return MetricSample(self.source.read_line("hwmon/in0_input") + "mV")

    def _clock(self, name: str) -> MetricSample:
        _, hz = self._read_int(name)
        return MetricSample(f"{hz // 1_000_000}MHz")

    def gfx_clock(self) -> MetricSample:
        return self._clock("hwmon/freq1_input")

    def mem_clock(self) -> MetricSample:
        return self._clock("hwmon/freq2_input")

    def link_speed(self) -> MetricSample:
        return MetricSample(self.source.read_line("current_link_speed"))

    def link_width(self) -> MetricSample:
        return MetricSample("x" + self.source.read_line("current_link_width"))

    def fetch(self, kind: MetricKind) -> MetricSample:
        """Read the live counter for *kind*.

        Raises:
            MalformedReading: the attribute isn't numeric.
        """
        return self._fetchers[kind]()
