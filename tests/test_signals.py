"""Tests for amdmon.signals."""

from __future__ import annotations

import signal
from collections.abc import Iterator

import pytest

from amdmon.signals import SignalBridge


@pytest.fixture
def bridge() -> Iterator[SignalBridge]:
    b = SignalBridge()
    b.install()
    yield b
    b.uninstall()


class TestFlags:
    def test_initially_clear(self) -> None:
        b = SignalBridge()
        assert b.check_and_clear_terminate() is False
        assert b.check_and_clear_resize() is False

    def test_check_clears(self) -> None:
        b = SignalBridge()
        b._on_terminate(signal.SIGTERM, None)
        assert b.check_and_clear_terminate() is True
        assert b.check_and_clear_terminate() is False

    def test_flags_are_independent(self) -> None:
        b = SignalBridge()
        b._on_resize(signal.SIGWINCH, None)
        assert b.check_and_clear_terminate() is False
        assert b.check_and_clear_resize() is True

    def test_repeated_signals_merge(self) -> None:
        b = SignalBridge()
        for _ in range(3):
            b._on_resize(signal.SIGWINCH, None)
        assert b.check_and_clear_resize() is True
        assert b.check_and_clear_resize() is False


class TestInstalled:
    @pytest.mark.parametrize("sig", [signal.SIGINT, signal.SIGTERM])
    def test_terminate_signals(self, bridge: SignalBridge, sig: signal.Signals) -> None:
        signal.raise_signal(sig)
        assert bridge.check_and_clear_terminate() is True
        assert bridge.check_and_clear_resize() is False

    def test_resize_signal(self, bridge: SignalBridge) -> None:
        signal.raise_signal(signal.SIGWINCH)
        assert bridge.check_and_clear_resize() is True
        assert bridge.check_and_clear_terminate() is False

    def test_uninstall_restores_handlers(self) -> None:
        before = signal.getsignal(signal.SIGINT)
        b = SignalBridge()
        b.install()
        assert signal.getsignal(signal.SIGINT) != before
        b.uninstall()
        assert signal.getsignal(signal.SIGINT) == before
