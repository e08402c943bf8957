"""OS signals folded into two flags the dashboard loop polls once per tick.

The handlers do nothing but store ``True``; all real work (resizing the
screen, leaving the loop) happens on the loop's own schedule.
"""

from __future__ import annotations

import signal
from types import FrameType
from typing import Any

TERMINATE_SIGNALS = (signal.SIGINT, signal.SIGTERM)
RESIZE_SIGNALS = (signal.SIGWINCH,) if hasattr(signal, "SIGWINCH") else ()


class SignalBridge:
    def __init__(self) -> None:
        self._terminate = False
        self._resize = False
        self._previous: dict[int, Any] = {}

    # ── Handlers (signal context) ──────────────────────────────────────────

    def _on_terminate(self, signum: int, frame: FrameType | None) -> None:
        self._terminate = True

    def _on_resize(self, signum: int, frame: FrameType | None) -> None:
        self._resize = True

    # ── Installation ───────────────────────────────────────────────────────

    def install(self) -> None:
        for sig in TERMINATE_SIGNALS:
            self._previous[sig] = signal.signal(sig, self._on_terminate)
        for sig in RESIZE_SIGNALS:
            self._previous[sig] = signal.signal(sig, self._on_resize)

    def uninstall(self) -> None:
        for sig, handler in self._previous.items():
            # None means the old handler wasn't set from Python
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
        self._previous.clear()

    # ── Polling (loop context) ─────────────────────────────────────────────

    def check_and_clear_terminate(self) -> bool:
        if not self._terminate:
            return False
        self._terminate = False
        return True

    def check_and_clear_resize(self) -> bool:
        # Only clear after seeing it set; a signal landing in between is merged.
        if not self._resize:
            return False
        self._resize = False
        return True
