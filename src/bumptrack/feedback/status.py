"""Console rendering for kick and contraction sessions."""

from __future__ import annotations

import sys
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence, TextIO

from bumptrack.api.schemas import ContractionLog, ContractionSession, KickLog, KickSession
from bumptrack.history.aggregates import summarize_contractions
from bumptrack.tracker.contractions import ContractionTracker
from bumptrack.tracker.kicks import KickTracker
from bumptrack.tracker.timing import (
    KickTimerState,
    PressureState,
    format_duration_seconds,
    format_interval,
    format_session_duration,
    format_time_remaining,
    wall_clock_ms,
)

_BAR_WIDTH = 20


def _default_now() -> float:
    return time.monotonic()


class ConsoleStatusReporter:
    """Renders session tables, countdowns and the pressure gauge.

    ``render_*`` calls made more often than ``refresh_interval`` are dropped
    unless forced.
    """

    def __init__(
        self,
        *,
        refresh_interval: float = 1.0,
        output: Optional[TextIO] = None,
        now_fn: Optional[Callable[[], float]] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ) -> None:
        self._output = output or sys.stdout
        self._refresh_interval = max(0.1, float(refresh_interval))
        self._now = now_fn or _default_now
        self._clock_ms = clock_ms or wall_clock_ms
        self._last_render: Optional[float] = None

    def render_kicks(self, tracker: KickTracker, *, force: bool = False) -> bool:
        return self._emit(kick_lines(tracker.sessions, tracker.timers, self._clock_ms()), force=force)

    def render_contractions(self, tracker: ContractionTracker, *, force: bool = False) -> bool:
        lines = contraction_lines(tracker.sessions, self._clock_ms())
        current = tracker.in_progress
        if current is not None:
            target = current.session_id or "next active session"
            lines.append(f"Recording contraction for {target}")
            lines.append(pressure_line(tracker.pressure))
        return self._emit(lines, force=force)

    def render_pressure(self, pressure: PressureState, *, force: bool = False) -> bool:
        return self._emit([pressure_line(pressure)], force=force)

    def render_kick_logs(self, logs: Sequence[KickLog]) -> None:
        self._emit(kick_log_lines(logs), force=True)

    def render_contraction_logs(self, logs: Sequence[ContractionLog]) -> None:
        self._emit(contraction_log_lines(logs), force=True)

    def _emit(self, lines: List[str], *, force: bool) -> bool:
        now = self._now()
        if not force and self._last_render is not None and now - self._last_render < self._refresh_interval:
            return False
        self._output.write("\n".join(lines) + "\n")
        self._output.flush()
        self._last_render = now
        return True


def kick_lines(sessions: Sequence[KickSession], timers: dict, now_ms: int) -> List[str]:
    if not sessions:
        return ["No kick counter sessions yet."]
    lines = [
        "ID                       | STATUS   | KICKS | PERIOD | REMAINING | PROGRESS",
        "-" * 94,
    ]
    for session in sessions:
        timer: Optional[KickTimerState] = timers.get(session.id)
        if timer is not None:
            remaining = format_time_remaining(timer.remaining_ms)
            progress = _bar(timer.percentage)
        else:
            remaining = "--:--:--"
            progress = format_session_duration(session.started_at, session.finished_at, now_ms)
        lines.append(
            f"{_short(session.id):<24} | {session.status:<8} | {session.kick_count:>5} | "
            f"{session.period:>4}h  | {remaining:>9} | {progress}"
        )
    return lines


def contraction_lines(sessions: Sequence[ContractionSession], now_ms: int) -> List[str]:
    if not sessions:
        return ["No contraction counter sessions yet."]
    lines = [
        "ID                       | STATUS | CONTRACTIONS | DURATION | STARTED",
        "-" * 80,
    ]
    for session in sessions:
        ended = session.updated_at if not session.active else None
        duration = "-"
        if session.created_at is not None:
            duration = format_session_duration(session.created_at, ended, now_ms)
        lines.append(
            f"{_short(session.id):<24} | {session.status.value:<6} | {len(session.contraction_logs):>12} | "
            f"{duration:>8} | {_local(session.created_at)}"
        )
    return lines


def kick_log_lines(logs: Sequence[KickLog]) -> List[str]:
    if not logs:
        return ["No kicks recorded for this session."]
    lines = ["#   | TIME     | ID", "-" * 40]
    for index, log in enumerate(logs, start=1):
        lines.append(f"{index:<3} | {_clock(log.happened_at)} | {log.id}")
    return lines


def contraction_log_lines(logs: Sequence[ContractionLog]) -> List[str]:
    if not logs:
        return ["No contractions recorded for this session."]
    lines = ["#   | START    | END      | DURATION   | INTERVAL          | ID", "-" * 80]
    for index, log in enumerate(logs):
        lines.append(
            f"{index + 1:<3} | {_clock(log.started_at)} | {_clock(log.ended_at)} | "
            f"{format_duration_seconds(log.duration):<10} | {format_interval(logs, index):<17} | {log.id}"
        )
    summary = summarize_contractions(logs)
    if summary is not None:
        lines.append(
            f"Total {summary.total_logs} | avg duration {format_duration_seconds(summary.average_duration)} | "
            f"avg interval {format_duration_seconds(summary.average_interval_seconds)}"
        )
    return lines


def pressure_line(pressure: PressureState) -> str:
    return f"Pressure {_bar(pressure.pressure_level)} {pressure.elapsed_seconds}s"


def _bar(percentage: float) -> str:
    clamped = max(0.0, min(100.0, percentage))
    filled = int(clamped / 100 * _BAR_WIDTH)
    return f"[{'#' * filled}{' ' * (_BAR_WIDTH - filled)}] {clamped:5.1f}%"


def _short(identifier: str) -> str:
    return identifier if len(identifier) <= 24 else identifier[:21] + "..."


def _clock(value: datetime) -> str:
    return value.astimezone().strftime("%H:%M:%S")


def _local(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


__all__ = [
    "ConsoleStatusReporter",
    "contraction_lines",
    "contraction_log_lines",
    "kick_lines",
    "kick_log_lines",
    "pressure_line",
]
