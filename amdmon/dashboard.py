"""Interactive terminal dashboard for an amdgpu device.

Shows GPU load, memory, power, temperature, fan, voltage, clocks and PCIe
link state read from sysfs, one row per metric, using curses. Bars are
coloured green/yellow/red by how full they are.

Usage:
    amdmon
    amdmon --update 1 --disable fan,voltage --device /sys/class/drm/card1/device

Keys: q, Ctrl-D or Esc to quit.
"""

from __future__ import annotations

import argparse
import curses
import logging
import os
import sys
from pathlib import Path

from amdmon.config import (
    RunConfig,
    build_run_config,
    check_interval,
    dump_default_config,
    load_config,
)
from amdmon.device import Device, MalformedReading, MetricSample
from amdmon.logs import configure_logging
from amdmon.render import HPAD, TEXT_LEN, VPAD, Palette, draw_bar, draw_label, draw_labels
from amdmon.rows import ROWS, RowSpec
from amdmon.signals import SignalBridge
from amdmon.source import SysfsSource

log = logging.getLogger(__name__)

END_OF_TRANSMISSION = 4
ESCAPE = 27
QUIT_KEYS = (ord("q"), END_OF_TRANSMISSION, ESCAPE)

ESC_DELAY_MS = 25

UNKNOWN = MetricSample("n/a")


def _resize_screen() -> None:
    """Tell curses about the terminal's new size."""
    try:
        size = os.get_terminal_size(sys.__stdout__.fileno())
    except (OSError, AttributeError, ValueError):
        return
    try:
        curses.resizeterm(size.lines, size.columns)
    except curses.error:
        pass


# ── Main loop ──────────────────────────────────────────────────────────────


class DashboardLoop:
    """Redraws every enabled row each tick; ``getch`` with a timeout paces it."""

    def __init__(
        self,
        stdscr: curses.window,
        device: Device,
        config: RunConfig,
        signals: SignalBridge,
    ) -> None:
        self.stdscr = stdscr
        self.device = device
        self.config = config
        self.signals = signals
        self.palette = Palette(config.use_color, config.colors)
        self._bad_rows: set[str] = set()

    def setup(self) -> None:
        self.stdscr.timeout(max(1, round(self.config.interval * 1000)))
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        curses.set_escdelay(ESC_DELAY_MS)
        self.palette.init()
        self.stdscr.clear()
        draw_labels(self.stdscr, self.config.rows, self.palette)

    def relayout(self) -> None:
        _resize_screen()
        self.stdscr.clear()
        draw_labels(self.stdscr, self.config.rows, self.palette)

    def _sample(self, spec: RowSpec) -> MetricSample:
        try:
            sample = self.device.fetch(spec.kind)
        except MalformedReading as e:
            if spec.key not in self._bad_rows:
                log.warning("%s row unavailable: %s", spec.key, e)
                self._bad_rows.add(spec.key)
            return UNKNOWN
        if spec.key in self._bad_rows:
            log.info("%s row recovered", spec.key)
            self._bad_rows.discard(spec.key)
        return sample

    def draw_rows(self) -> None:
        _, max_x = self.stdscr.getmaxyx()
        bar_width = max_x - TEXT_LEN - HPAD

        for i, spec in enumerate(self.config.rows.enabled()):
            row = VPAD + i
            sample = self._sample(spec)
            if spec.is_bar and sample.fraction is not None:
                draw_bar(
                    self.stdscr, row, TEXT_LEN, bar_width,
                    sample.fraction, sample.text, self.palette,
                )
            else:
                draw_label(self.stdscr, row, TEXT_LEN, sample.text, self.palette)

        self.stdscr.refresh()

    def run(self) -> None:
        self.setup()
        resize_pending = False

        while True:
            if self.signals.check_and_clear_terminate():
                log.info("terminate requested")
                return
            if self.signals.check_and_clear_resize() or resize_pending:
                self.relayout()
                resize_pending = False

            self.draw_rows()

            # Blocks for up to the update interval; -1 means no key.
            key = self.stdscr.getch()
            if key in QUIT_KEYS:
                return
            resize_pending = key == curses.KEY_RESIZE


def _dashboard_loop(
    stdscr: curses.window, device: Device, config: RunConfig, signals: SignalBridge
) -> None:
    DashboardLoop(stdscr, device, config, signals).run()


# ── CLI entry point ────────────────────────────────────────────────────────


def _interval(value: str) -> float:
    try:
        return check_interval(float(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{value!r}: {e}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amdmon",
        description="Live terminal dashboard for amdgpu telemetry.",
        epilog=(
            "Valid rows for --disable: "
            + ", ".join(spec.key for spec in ROWS)
            + ". Other values are silently ignored."
        ),
    )
    parser.add_argument(
        "-u",
        "--update",
        type=_interval,
        default=None,
        metavar="N",
        help="Seconds between refreshes (default: 2)",
    )
    parser.add_argument(
        "-n",
        "--no-color",
        action="store_true",
        help="Disable colours",
    )
    parser.add_argument(
        "-d",
        "--disable",
        action="append",
        metavar="ROWS",
        help="Comma separated list of rows to hide (may be repeated)",
    )
    parser.add_argument(
        "--device",
        type=Path,
        default=None,
        metavar="PATH",
        help="Device sysfs directory (default: /sys/class/drm/card0/device)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the default configuration as TOML and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.dump_config:
        print(dump_default_config(), end="")
        return 0

    config = build_run_config(load_config(args.config), args)

    if config.rows.all_disabled():
        print("All rows disabled. Exiting.")
        return 0

    try:
        configure_logging(config.log_file)
    except OSError as e:
        print(f"amdmon: cannot open log file {config.log_file}: {e}", file=sys.stderr)
        return 1

    log.info("monitoring %s every %ss", config.device, config.interval)
    device = Device(SysfsSource(config.device))

    signals = SignalBridge()
    signals.install()
    try:
        curses.wrapper(_dashboard_loop, device, config, signals)
    except KeyboardInterrupt:
        pass
    finally:
        signals.uninstall()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
