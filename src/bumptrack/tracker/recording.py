"""Single-slot state machine for the contraction currently being recorded."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RecordingState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class RecordingSource(str, Enum):
    BUTTON = "button"
    HOLD = "hold"


@dataclass(frozen=True)
class InProgressContraction:
    started_at_ms: int
    source: RecordingSource
    session_id: Optional[str] = None


class RecordingBusyError(RuntimeError):
    """A contraction is already being recorded."""


class RecordingSlot:
    """Holds at most one in-progress contraction per tracker.

    Button recordings are bound to a session when they begin; hold
    recordings are bound when they end.
    """

    def __init__(self) -> None:
        self._current: Optional[InProgressContraction] = None

    @property
    def state(self) -> RecordingState:
        return RecordingState.IDLE if self._current is None else RecordingState.RECORDING

    @property
    def current(self) -> Optional[InProgressContraction]:
        return self._current

    def is_recording(self, *, source: Optional[RecordingSource] = None, session_id: Optional[str] = None) -> bool:
        current = self._current
        if current is None:
            return False
        if source is not None and current.source is not source:
            return False
        if session_id is not None and current.session_id != session_id:
            return False
        return True

    def begin_recording(
        self,
        started_at_ms: int,
        source: RecordingSource,
        *,
        session_id: Optional[str] = None,
    ) -> InProgressContraction:
        if self._current is not None:
            raise RecordingBusyError(
                f"contraction already in progress (source={self._current.source.value})"
            )
        if source is RecordingSource.BUTTON and not session_id:
            raise ValueError("button recordings need a session id")
        self._current = InProgressContraction(
            started_at_ms=started_at_ms,
            source=source,
            session_id=session_id,
        )
        return self._current

    def end_recording(
        self,
        *,
        source: Optional[RecordingSource] = None,
        session_id: Optional[str] = None,
    ) -> Optional[InProgressContraction]:
        """Clear and return the recording when it matches; otherwise leave it in place."""
        if not self.is_recording(source=source, session_id=session_id):
            return None
        current, self._current = self._current, None
        return current


__all__ = [
    "InProgressContraction",
    "RecordingBusyError",
    "RecordingSlot",
    "RecordingSource",
    "RecordingState",
]
