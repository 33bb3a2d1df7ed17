"""Contraction session tracker with a single in-progress recording slot."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from bumptrack.api.client import RequestError
from bumptrack.api.schemas import ContractionLog, ContractionSession
from bumptrack.feedback.notifications import Notifier, error, info, success, warning
from bumptrack.tracker.base import BaseTracker
from bumptrack.tracker.recording import (
    InProgressContraction,
    RecordingBusyError,
    RecordingSlot,
    RecordingSource,
)
from bumptrack.tracker.timing import (
    DEFAULT_PRESSURE_RAMP_SECONDS,
    IDLE_PRESSURE,
    MS_PER_SECOND,
    PressureState,
    contraction_duration,
    derive_pressure,
    format_duration_seconds,
)

LOGGER = logging.getLogger(__name__)


class ContractionCounterService(Protocol):
    def list_sessions(self) -> List[ContractionSession]:
        ...

    def create_session(self) -> ContractionSession:
        ...

    def close_session(self, session_id: str) -> ContractionSession:
        ...

    def delete_session(self, session_id: str) -> None:
        ...

    def create_log(
        self,
        session_id: str,
        started_at_ms: int,
        ended_at_ms: int,
        duration: int,
    ) -> ContractionLog:
        ...

    def list_logs(self, session_id: str) -> List[ContractionLog]:
        ...

    def delete_log(self, log_id: str) -> None:
        ...


class ContractionTracker(BaseTracker[ContractionSession, ContractionLog]):
    """Local view of the user's contraction sessions.

    Contractions are recorded either with an explicit start/end pair bound
    to a session, or with press-and-hold which picks (or creates) an active
    session on release. Both share one ``RecordingSlot``, so only one
    contraction can be in progress at a time.
    """

    label = "contraction"

    def __init__(
        self,
        api: ContractionCounterService,
        notifier: Optional[Notifier] = None,
        *,
        now_fn: Optional[Callable[[], int]] = None,
        pressure_ramp_seconds: int = DEFAULT_PRESSURE_RAMP_SECONDS,
    ) -> None:
        super().__init__(notifier, now_fn=now_fn)
        self._api = api
        self._slot = RecordingSlot()
        self._pressure = IDLE_PRESSURE
        self._ramp_seconds = pressure_ramp_seconds

    @property
    def in_progress(self) -> Optional[InProgressContraction]:
        with self._lock:
            return self._slot.current

    @property
    def pressure(self) -> PressureState:
        with self._lock:
            return self._pressure

    def tick(self, now_ms: Optional[int] = None) -> PressureState:
        """Recompute the pressure gauge for the contraction in progress."""

        with self._lock:
            current = self._slot.current
            if current is None:
                self._pressure = IDLE_PRESSURE
            else:
                now = self._now() if now_ms is None else now_ms
                self._pressure = derive_pressure(current.started_at_ms, now, ramp_seconds=self._ramp_seconds)
            return self._pressure

    def active_contraction_elapsed(self) -> int:
        with self._lock:
            current = self._slot.current
        if current is None:
            return 0
        return max(0, (self._now() - current.started_at_ms) // MS_PER_SECOND)

    def create_session(self) -> Optional[ContractionSession]:
        try:
            created = self._api.create_session()
        except RequestError as exc:
            LOGGER.warning("Creating contraction counter failed: %s", exc)
            error(self._notifier, "Failed to create new contraction counter. Please try again.")
            return None
        with self._lock:
            self._prepend(created)
        success(self._notifier, "New contraction counter session created successfully!")
        return created

    def close_session(self, session_id: str) -> Optional[ContractionSession]:
        if not self._claim(session_id):
            return None
        try:
            closed = self._api.close_session(session_id)
        except RequestError as exc:
            LOGGER.warning("Closing contraction counter %s failed: %s", session_id, exc)
            error(self._notifier, "Failed to close contraction counter. Please try again.")
            return None
        finally:
            self._release(session_id)
        with self._lock:
            self._replace(session_id, lambda _item: closed)
            self._abandon_recording(session_id)
        success(self._notifier, "Contraction counter session closed successfully!")
        return closed

    def start_contraction(self, session_id: str) -> bool:
        """Mark a contraction as started for ``session_id``; no request is made."""

        started_at_ms = self._now()
        with self._lock:
            session = self._find(session_id)
            if session is None or not session.active:
                warning(self._notifier, "Session not active", "Contractions can only be recorded on an active session.")
                return False
            try:
                self._slot.begin_recording(started_at_ms, RecordingSource.BUTTON, session_id=session_id)
            except RecordingBusyError:
                self._warn_busy()
                return False
            self._pressure = IDLE_PRESSURE
        info(self._notifier, "Contraction Started", "Recording contraction in progress...")
        return True

    def end_contraction(self, session_id: str) -> Optional[ContractionLog]:
        ended_at_ms = self._now()
        with self._lock:
            current = self._slot.end_recording(source=RecordingSource.BUTTON, session_id=session_id)
            if current is None:
                return None
            self._pressure = IDLE_PRESSURE
        duration = contraction_duration(current.started_at_ms, ended_at_ms)
        try:
            log = self._api.create_log(session_id, current.started_at_ms, ended_at_ms, duration)
        except RequestError as exc:
            LOGGER.warning("Recording contraction for %s failed: %s", session_id, exc)
            error(self._notifier, "Failed to record contraction. Please try again.")
            return None
        with self._lock:
            self._append_log(session_id, log)
        success(self._notifier, f"Contraction recorded: {format_duration_seconds(log.duration)}")
        return log

    def press(self) -> bool:
        """Begin a press-and-hold recording; no request is made."""

        started_at_ms = self._now()
        with self._lock:
            try:
                self._slot.begin_recording(started_at_ms, RecordingSource.HOLD)
            except RecordingBusyError:
                self._warn_busy()
                return False
            self._pressure = IDLE_PRESSURE
        info(self._notifier, "Recording contraction", "Keep pressing until the contraction ends")
        return True

    def release(self) -> Optional[ContractionLog]:
        """Finish a press-and-hold recording against the first active session.

        A new session is created and added to the list first when none is
        active.
        """

        ended_at_ms = self._now()
        with self._lock:
            current = self._slot.end_recording(source=RecordingSource.HOLD)
            if current is None:
                return None
            self._pressure = IDLE_PRESSURE
            target = next((session for session in self._sessions if session.active), None)
        duration = contraction_duration(current.started_at_ms, ended_at_ms)

        if target is None:
            try:
                target = self._api.create_session()
            except RequestError as exc:
                LOGGER.warning("Creating contraction counter on release failed: %s", exc)
                error(self._notifier, "Failed to record contraction. Please try again.")
                return None
            with self._lock:
                self._prepend(target)
            LOGGER.debug("Created contraction counter %s for held contraction", target.id)

        try:
            log = self._api.create_log(target.id, current.started_at_ms, ended_at_ms, duration)
        except RequestError as exc:
            LOGGER.warning("Recording held contraction for %s failed: %s", target.id, exc)
            error(self._notifier, "Failed to record contraction. Please try again.")
            return None
        with self._lock:
            self._append_log(target.id, log)
        success(
            self._notifier,
            f"Duration: {format_duration_seconds(log.duration)}",
            message="Contraction Recorded",
        )
        return log

    def _append_log(self, session_id: str, log: ContractionLog) -> None:
        self._replace(
            session_id,
            lambda item: item.model_copy(update={"contraction_logs": item.contraction_logs + [log]}),
        )
        if self._selected_session_id == session_id:
            self._selected_logs.append(log)

    def _abandon_recording(self, session_id: str) -> None:
        if self._slot.end_recording(source=RecordingSource.BUTTON, session_id=session_id) is not None:
            self._pressure = IDLE_PRESSURE
            LOGGER.info("Discarded in-progress contraction for %s", session_id)

    def _warn_busy(self) -> None:
        warning(
            self._notifier,
            "Contraction in progress",
            "Finish the current contraction before starting another.",
        )

    def _on_session_removed(self, session_id: str) -> None:
        self._abandon_recording(session_id)

    def _list_sessions(self) -> Sequence[ContractionSession]:
        return self._api.list_sessions()

    def _delete_session_remote(self, session_id: str) -> None:
        self._api.delete_session(session_id)

    def _list_logs(self, session_id: str) -> Sequence[ContractionLog]:
        return self._api.list_logs(session_id)

    def _delete_log_remote(self, log_id: str) -> None:
        self._api.delete_log(log_id)

    def _with_logs(self, session: ContractionSession, logs: Sequence[ContractionLog]) -> ContractionSession:
        return session.model_copy(update={"contraction_logs": list(logs)})

    def _without_log(self, session: ContractionSession, log_id: str) -> ContractionSession:
        return session.model_copy(
            update={"contraction_logs": [log for log in session.contraction_logs if log.id != log_id]}
        )


__all__ = ["ContractionCounterService", "ContractionTracker"]
