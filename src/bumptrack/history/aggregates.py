"""Summary statistics over kick and contraction logs."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from bumptrack.api.schemas import ContractionLog, KickLog, KickSession, to_ms
from bumptrack.tracker.timing import MS_PER_HOUR, round_half_up

LOGGER = logging.getLogger(__name__)
_STATS_VERSION = "1.0.0"


@dataclass(frozen=True)
class ContractionSummary:
    total_logs: int
    average_duration: int
    average_interval_seconds: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class KickSummary:
    session_id: str
    period_hours: int
    kick_count: int
    first_kick: Optional[str]
    last_kick: Optional[str]
    kicks_per_hour: Optional[float]

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def summarize_contractions(logs: Sequence[ContractionLog]) -> Optional[ContractionSummary]:
    """Average duration and spacing of a session's contractions.

    The average interval is 0 until at least two contractions exist.
    """
    entries = list(logs)
    if not entries:
        return None
    average_duration = round_half_up(sum(log.duration for log in entries) / len(entries))

    gaps_ms: List[int] = [
        to_ms(entries[index].started_at) - to_ms(entries[index - 1].ended_at)
        for index in range(1, len(entries))
    ]
    average_interval = 0
    if gaps_ms:
        average_interval = round_half_up(sum(gaps_ms) / len(gaps_ms) / 1000)

    return ContractionSummary(
        total_logs=len(entries),
        average_duration=average_duration,
        average_interval_seconds=average_interval,
    )


def summarize_kicks(session: KickSession, logs: Sequence[KickLog], now_ms: int) -> KickSummary:
    ordered = sorted(logs, key=lambda log: log.happened_at)
    end_ms = to_ms(session.finished_at) if session.finished_at is not None else now_ms
    window_ms = min(max(0, end_ms - to_ms(session.started_at)), session.period * MS_PER_HOUR)
    kicks_per_hour = None
    if window_ms > 0:
        kicks_per_hour = round(len(ordered) / (window_ms / MS_PER_HOUR), 2)
    return KickSummary(
        session_id=session.id,
        period_hours=session.period,
        kick_count=len(ordered),
        first_kick=_iso(ordered[0].happened_at) if ordered else None,
        last_kick=_iso(ordered[-1].happened_at) if ordered else None,
        kicks_per_hour=kicks_per_hour,
    )


def persist_summary(payload: Dict[str, object], *, out_path: Path) -> None:
    """Write a summary section as JSON, stamped with version and time."""
    document: Dict[str, object] = {
        "stats_version": _STATS_VERSION,
        "generated_ts": _now_iso(),
    }
    document.update(payload)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    LOGGER.info("Summary written to %s", out_path)


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = [
    "ContractionSummary",
    "KickSummary",
    "persist_summary",
    "summarize_contractions",
    "summarize_kicks",
]
