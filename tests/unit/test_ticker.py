from __future__ import annotations

import threading

import pytest

from bumptrack.tracker.ticker import Ticker


def test_ticker_invokes_callback_until_stopped() -> None:
    fired = threading.Event()
    calls: list[int] = []

    def _callback() -> None:
        calls.append(1)
        if len(calls) >= 3:
            fired.set()

    with Ticker(0.01, _callback) as ticker:
        assert fired.wait(timeout=2.0)
        assert ticker.running
    assert not ticker.running

    count = len(calls)
    fired.clear()
    assert not fired.wait(timeout=0.05)
    assert len(calls) == count


def test_ticker_stops_after_callback_error() -> None:
    calls: list[int] = []
    failed = threading.Event()

    def _callback() -> None:
        calls.append(1)
        failed.set()
        raise RuntimeError("boom")

    ticker = Ticker(0.01, _callback)
    ticker.start()
    assert failed.wait(timeout=2.0)
    ticker.stop()
    assert calls == [1]


def test_ticker_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        Ticker(0, lambda: None)
