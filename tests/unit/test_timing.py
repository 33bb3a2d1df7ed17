from __future__ import annotations

import pytest

from bumptrack.api.schemas import ContractionLog, KickSession, ms_to_datetime, ms_to_iso, to_ms
from bumptrack.tracker.timing import (
    FIRST_CONTRACTION,
    calculate_interval,
    contraction_duration,
    derive_kick_timer,
    derive_pressure,
    format_duration_seconds,
    format_interval,
    format_session_duration,
    format_time_remaining,
    round_half_up,
)

T0 = 1_760_000_000_000
MINUTE = 60_000


def _kick_session(period: int = 2, started_at_ms: int = T0) -> KickSession:
    return KickSession(id="k1", started_at=ms_to_datetime(started_at_ms), period=period)


def _contraction(log_id: str, start_ms: int, end_ms: int) -> ContractionLog:
    return ContractionLog(
        id=log_id,
        counter_id="c1",
        started_at=ms_to_datetime(start_ms),
        ended_at=ms_to_datetime(end_ms),
        duration=contraction_duration(start_ms, end_ms),
    )


def test_kick_timer_midway_through_period() -> None:
    timer = derive_kick_timer(_kick_session(period=2), T0 + 61 * MINUTE)

    assert timer.remaining_ms == 3_540_000
    assert timer.elapsed_minutes == 61
    assert timer.percentage == pytest.approx(50.8333, abs=1e-3)
    assert not timer.expired


def test_kick_timer_clamps_after_period() -> None:
    timer = derive_kick_timer(_kick_session(period=1), T0 + 90 * MINUTE)

    assert timer.remaining_ms == 0
    assert timer.percentage == 100.0
    assert timer.expired


def test_kick_timer_expires_exactly_at_period_end() -> None:
    timer = derive_kick_timer(_kick_session(period=1), T0 + 60 * MINUTE)
    assert timer.remaining_ms == 0
    assert timer.expired


def test_pressure_ramps_to_full_over_twenty_seconds() -> None:
    assert derive_pressure(T0, T0).pressure_level == 0.0
    half = derive_pressure(T0, T0 + 10_500)
    assert half.elapsed_seconds == 10
    assert half.pressure_level == pytest.approx(50.0)
    full = derive_pressure(T0, T0 + 45_000)
    assert full.elapsed_seconds == 45
    assert full.pressure_level == 100.0


def test_pressure_ramp_is_configurable() -> None:
    state = derive_pressure(T0, T0 + 10_000, ramp_seconds=40)
    assert state.pressure_level == pytest.approx(25.0)


def test_contraction_duration_truncates_and_floors_at_zero() -> None:
    assert contraction_duration(T0, T0 + 17_900) == 17
    assert contraction_duration(T0, T0 + 45_000) == 45
    assert contraction_duration(T0 + 5_000, T0) == 0


def test_interval_between_consecutive_contractions() -> None:
    logs = [
        _contraction("a", T0, T0 + 30_000),
        _contraction("b", T0 + 45_000, T0 + 62_000),
        _contraction("c", T0 + 152_000, T0 + 197_000),
    ]

    assert calculate_interval(logs, 0) is None
    assert calculate_interval(logs, 1) == 15
    assert calculate_interval(logs, 2) == 90
    assert calculate_interval(logs, 3) is None
    assert format_interval(logs, 0) == FIRST_CONTRACTION
    assert format_interval(logs, 1) == "15 sec"
    assert format_interval(logs, 2) == "1m 30s"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0 sec"), (59, "59 sec"), (60, "1m 0s"), (125, "2m 5s")],
)
def test_format_duration_seconds(seconds: int, expected: str) -> None:
    assert format_duration_seconds(seconds) == expected


def test_format_time_remaining() -> None:
    assert format_time_remaining(3_540_000) == "00:59:00"
    assert format_time_remaining(7_199_999) == "01:59:59"
    assert format_time_remaining(-5) == "00:00:00"


def test_format_session_duration_uses_now_for_open_sessions() -> None:
    started = ms_to_datetime(T0)
    assert format_session_duration(started, None, T0 + 42 * MINUTE) == "42 min"
    assert format_session_duration(started, ms_to_datetime(T0 + 135 * MINUTE), T0) == "2h 15m"


def test_round_half_up_matches_browser_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(2.49) == 2


def test_iso_timestamps_round_trip_with_millisecond_precision() -> None:
    stamp = ms_to_iso(T0 + 123)
    assert stamp.endswith(".123Z")
    assert to_ms(ms_to_datetime(T0 + 123)) == T0 + 123


@pytest.mark.parametrize("period", [1, 2, 7, 24])
def test_remaining_time_never_increases_across_the_period(period: int) -> None:
    session = _kick_session(period=period)
    period_ms = period * 3_600_000
    step_ms = period_ms // 40 + 1
    previous = None

    for now_ms in range(T0, T0 + period_ms + 5 * step_ms, step_ms):
        timer = derive_kick_timer(session, now_ms)
        assert timer.remaining_ms == max(0, period_ms - (now_ms - T0))
        assert timer.remaining_ms >= 0
        if previous is not None:
            assert timer.remaining_ms <= previous
        previous = timer.remaining_ms

    assert previous == 0
