"""Pure time derivations for kick countdowns, contraction pressure and intervals."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from bumptrack.api.schemas import ContractionLog, KickSession, to_ms

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
DEFAULT_PRESSURE_RAMP_SECONDS = 20
FIRST_CONTRACTION = "First contraction"


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class KickTimerState:
    elapsed_minutes: int
    percentage: float
    remaining_ms: int

    @property
    def expired(self) -> bool:
        return self.remaining_ms <= 0


@dataclass(frozen=True)
class PressureState:
    elapsed_seconds: int = 0
    pressure_level: float = 0.0


IDLE_PRESSURE = PressureState()


def derive_kick_timer(session: KickSession, now_ms: int) -> KickTimerState:
    """Countdown and progress of ``session`` at ``now_ms``."""

    elapsed_ms = now_ms - to_ms(session.started_at)
    period_ms = session.period * MS_PER_HOUR
    remaining_ms = max(0, period_ms - elapsed_ms)
    percentage = min(100.0, elapsed_ms / period_ms * 100)
    return KickTimerState(
        elapsed_minutes=elapsed_ms // MS_PER_MINUTE,
        percentage=percentage,
        remaining_ms=remaining_ms,
    )


def derive_pressure(
    started_at_ms: int,
    now_ms: int,
    *,
    ramp_seconds: int = DEFAULT_PRESSURE_RAMP_SECONDS,
) -> PressureState:
    """Gauge level for a contraction in progress; full after ``ramp_seconds``."""

    elapsed_seconds = max(0, (now_ms - started_at_ms) // MS_PER_SECOND)
    level = min(100.0, elapsed_seconds / ramp_seconds * 100)
    return PressureState(elapsed_seconds=elapsed_seconds, pressure_level=level)


def contraction_duration(started_at_ms: int, ended_at_ms: int) -> int:
    return max(0, (ended_at_ms - started_at_ms) // MS_PER_SECOND)


def calculate_interval(logs: Sequence[ContractionLog], index: int) -> Optional[int]:
    """Seconds between the previous contraction's end and this one's start.

    ``None`` marks the first contraction of the collection.
    """
    if index <= 0 or index >= len(logs):
        return None
    gap_ms = to_ms(logs[index].started_at) - to_ms(logs[index - 1].ended_at)
    return gap_ms // MS_PER_SECOND


def format_interval(logs: Sequence[ContractionLog], index: int) -> str:
    seconds = calculate_interval(logs, index)
    if seconds is None:
        return FIRST_CONTRACTION
    return format_duration_seconds(seconds)


def format_duration_seconds(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds} sec"
    minutes, remainder = divmod(seconds, 60)
    return f"{minutes}m {remainder}s"


def format_time_remaining(ms: int) -> str:
    total_seconds = max(0, ms) // MS_PER_SECOND
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_session_duration(started_at: datetime, ended_at: Optional[datetime], now_ms: int) -> str:
    end_ms = to_ms(ended_at) if ended_at is not None else now_ms
    minutes = max(0, end_ms - to_ms(started_at)) // MS_PER_MINUTE
    if minutes < 60:
        return f"{minutes} min"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h {remainder}m"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


__all__ = [
    "DEFAULT_PRESSURE_RAMP_SECONDS",
    "FIRST_CONTRACTION",
    "IDLE_PRESSURE",
    "KickTimerState",
    "MS_PER_HOUR",
    "PressureState",
    "calculate_interval",
    "contraction_duration",
    "derive_kick_timer",
    "derive_pressure",
    "format_duration_seconds",
    "format_interval",
    "format_session_duration",
    "format_time_remaining",
    "round_half_up",
    "wall_clock_ms",
]
