"""Kick session tracker: countdowns, kick recording and reconciliation."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from bumptrack.api.client import RequestError
from bumptrack.api.schemas import KickLog, KickSession
from bumptrack.feedback.notifications import Notifier, error, success, warning
from bumptrack.tracker.base import BaseTracker
from bumptrack.tracker.timing import KickTimerState, derive_kick_timer
from bumptrack.validation import validate_period

LOGGER = logging.getLogger(__name__)


class KickCounterService(Protocol):
    def list_sessions(self) -> List[KickSession]:
        ...

    def create_session(self, started_at_ms: int, period: Optional[int] = None) -> KickSession:
        ...

    def create_log(self, session_id: str, happened_at_ms: int) -> KickLog:
        ...

    def finish_session(self, session_id: str) -> KickSession:
        ...

    def delete_session(self, session_id: str) -> None:
        ...

    def list_logs(self, session_id: str) -> List[KickLog]:
        ...

    def delete_log(self, log_id: str) -> None:
        ...


class KickTracker(BaseTracker[KickSession, KickLog]):
    """Local view of the user's kick sessions.

    Every running session gets a ``KickTimerState`` recomputed from the wall
    clock on each ``tick``. Kicks are refused once the period has elapsed.
    """

    label = "kick"

    def __init__(
        self,
        api: KickCounterService,
        notifier: Optional[Notifier] = None,
        *,
        now_fn: Optional[Callable[[], int]] = None,
    ) -> None:
        super().__init__(notifier, now_fn=now_fn)
        self._api = api
        self._timers: Dict[str, KickTimerState] = {}

    @property
    def timers(self) -> Dict[str, KickTimerState]:
        with self._lock:
            return dict(self._timers)

    def timer_for(self, session_id: str) -> Optional[KickTimerState]:
        with self._lock:
            return self._timers.get(session_id)

    def tick(self, now_ms: Optional[int] = None) -> Dict[str, KickTimerState]:
        """Recompute the derived countdown of every running session."""

        with self._lock:
            self._recompute(self._now() if now_ms is None else now_ms)
            return dict(self._timers)

    def can_record_kick(self, session_id: str) -> bool:
        with self._lock:
            session = self._find(session_id)
        if session is None or not session.running:
            return False
        return not derive_kick_timer(session, self._now()).expired

    def create_session(self, period_hours: int) -> Optional[KickSession]:
        period = validate_period(period_hours)
        started_at_ms = self._now()
        try:
            created = self._api.create_session(started_at_ms, period)
        except RequestError as exc:
            LOGGER.warning("Creating kick counter failed: %s", exc)
            error(self._notifier, "Failed to create new kick counter. Please try again.")
            return None
        session = created.model_copy(
            update={"finished_at": None, "is_active": True, "kick_count": 0, "period": period}
        )
        with self._lock:
            self._prepend(session)
        success(self._notifier, "New kick counter session created successfully!")
        return session

    def record_kick(self, session_id: str) -> Optional[KickLog]:
        happened_at_ms = self._now()
        with self._lock:
            session = self._find(session_id)
        if session is None:
            warning(self._notifier, "Unknown session", f"No kick counter with id {session_id}.")
            return None
        if not session.running:
            warning(self._notifier, "Session finished", "This kick counter session has already been finished.")
            return None
        if derive_kick_timer(session, happened_at_ms).expired:
            warning(
                self._notifier,
                "Time period ended",
                "The time period for this session has ended. You can finish the session now.",
            )
            return None
        if not self._claim(session_id):
            return None
        try:
            log = self._api.create_log(session_id, happened_at_ms)
        except RequestError as exc:
            LOGGER.warning("Recording kick for %s failed: %s", session_id, exc)
            error(self._notifier, "Failed to record kick. Please try again.")
            return None
        finally:
            self._release(session_id)
        with self._lock:
            if not self._replace(session_id, lambda item: _with_recorded_kick(item, log)):
                return log
            if self._selected_session_id == session_id:
                self._selected_logs.append(log)
        success(self._notifier, "Kick recorded successfully!")
        return log

    def finish_session(self, session_id: str) -> Optional[KickSession]:
        if not self._claim(session_id):
            return None
        try:
            finished = self._api.finish_session(session_id)
        except RequestError as exc:
            LOGGER.warning("Finishing kick counter %s failed: %s", session_id, exc)
            error(self._notifier, "Failed to finish kick counter. Please try again.")
            return None
        finally:
            self._release(session_id)
        with self._lock:
            self._replace(session_id, lambda _item: finished)
        success(self._notifier, "Kick counter session finished successfully!")
        return finished

    def _after_change(self) -> None:
        self._recompute(self._now())

    def _recompute(self, now_ms: int) -> None:
        self._timers = {
            session.id: derive_kick_timer(session, now_ms)
            for session in self._sessions
            if session.running
        }

    def _list_sessions(self) -> Sequence[KickSession]:
        return self._api.list_sessions()

    def _delete_session_remote(self, session_id: str) -> None:
        self._api.delete_session(session_id)

    def _list_logs(self, session_id: str) -> Sequence[KickLog]:
        return self._api.list_logs(session_id)

    def _delete_log_remote(self, log_id: str) -> None:
        self._api.delete_log(log_id)

    def _with_logs(self, session: KickSession, logs: Sequence[KickLog]) -> KickSession:
        return session.model_copy(update={"kick_logs": list(logs), "kick_count": len(logs)})

    def _without_log(self, session: KickSession, log_id: str) -> KickSession:
        kick_logs = session.kick_logs
        if kick_logs is not None:
            kick_logs = [log for log in kick_logs if log.id != log_id]
        return session.model_copy(
            update={"kick_logs": kick_logs, "kick_count": max(0, session.kick_count - 1)}
        )


def _with_recorded_kick(session: KickSession, log: KickLog) -> KickSession:
    kick_logs = session.kick_logs
    if kick_logs is not None:
        kick_logs = kick_logs + [log]
    return session.model_copy(update={"kick_count": session.kick_count + 1, "kick_logs": kick_logs})


__all__ = ["KickCounterService", "KickTracker"]
