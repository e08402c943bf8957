"""curses drawing for dashboard rows: bracketed bars and plain values."""

from __future__ import annotations

import curses
import enum
import math
from typing import Any

from amdmon.config import DEFAULT_CONFIG
from amdmon.rows import RowRegistry

# ── Layout ─────────────────────────────────────────────────────────────────

VPAD = 1
HPAD = 2
TEXT_LEN = 13 + HPAD  # column where values start

BAR_GLYPH = "|"

# Band thresholds on the clamped fraction
WARN_AT = 0.33
BAD_AT = 0.67


class Color(enum.IntEnum):
    """Colour roles; the value doubles as the curses colour-pair ID."""

    LABEL = 1
    VALUE = 2
    OK = 3
    WARN = 4
    BAD = 5


class Palette:
    """Maps colour roles to curses attributes; all zero when colour is off."""

    def __init__(self, use_color: bool, colors: dict[str, str] | None = None) -> None:
        self.use_color = use_color
        self.colors = dict(colors or DEFAULT_CONFIG["colors"])

    def init(self) -> None:
        if not self.use_color:
            return
        if not curses.has_colors():
            self.use_color = False
            return
        curses.start_color()
        curses.use_default_colors()
        for role in Color:
            name = self.colors[role.name.lower()]
            curses.init_pair(role.value, getattr(curses, f"COLOR_{name.upper()}"), -1)

    def attr(self, role: Color) -> int:
        if not self.use_color:
            return 0
        return curses.color_pair(role.value)


def clamp_fraction(fraction: float) -> float:
    """Clamp to [0, 1]; NaN and infinities mean "unknown" and become 0."""
    if not math.isfinite(fraction):
        return 0.0
    return min(max(fraction, 0.0), 1.0)


def band_for(fraction: float) -> Color:
    if fraction < WARN_AT:
        return Color.OK
    if fraction < BAD_AT:
        return Color.WARN
    return Color.BAD


# ── curses primitives ──────────────────────────────────────────────────────


def _safe(win: curses.window, *args: Any) -> None:
    """addstr wrapper that swallows out-of-bounds errors."""
    try:
        win.addstr(*args)
    except curses.error:
        pass


def _clear_row(win: curses.window, row: int, col: int) -> None:
    try:
        win.move(row, col)
        win.clrtoeol()
    except curses.error:
        pass


def draw_bar(
    win: curses.window,
    row: int,
    col: int,
    width: int,
    fraction: float,
    text: str,
    palette: Palette,
) -> None:
    """Render ``[||||||      text]`` in exactly *width* columns.

    The bar colour follows the band of *fraction*; brackets and text don't.
    If *text* plus the brackets doesn't fit, the row is left blank.
    """
    _clear_row(win, row, col)

    fraction = clamp_fraction(fraction)
    track = width - (2 + len(text))
    if track < 0:
        return
    bars = int(track * fraction)

    _safe(win, row, col, "[", curses.A_BOLD)
    if bars:
        _safe(win, row, col + 1, BAR_GLYPH * bars, palette.attr(band_for(fraction)))
    text_col = col + track + 1
    _safe(win, row, text_col, text, palette.attr(Color.VALUE) | curses.A_BOLD)
    _safe(win, row, text_col + len(text), "]", curses.A_BOLD)


def draw_label(
    win: curses.window, row: int, col: int, text: str, palette: Palette
) -> None:
    """Clear the row and write *text* bold, without a bar."""
    _clear_row(win, row, col)
    _safe(win, row, col, text, palette.attr(Color.LABEL) | curses.A_BOLD)


def draw_labels(win: curses.window, rows: RowRegistry, palette: Palette) -> None:
    """Static row titles, packed densely from VPAD downwards."""
    for i, spec in enumerate(rows.enabled()):
        _safe(win, VPAD + i, HPAD, spec.label, palette.attr(Color.LABEL))
