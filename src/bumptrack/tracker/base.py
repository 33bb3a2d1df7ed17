"""Shared reconciliation logic for the kick and contraction trackers."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, List, Optional, Sequence, Set, TypeVar

from bumptrack.api.client import RequestError
from bumptrack.feedback.notifications import Notifier, NullNotifier, error, success, warning
from bumptrack.tracker.timing import wall_clock_ms

LOGGER = logging.getLogger(__name__)

SessionT = TypeVar("SessionT")
LogT = TypeVar("LogT")


class BaseTracker(ABC, Generic[SessionT, LogT]):
    """Holds the last server-confirmed sessions and the open log view.

    Local state changes only after the server acknowledges a mutation; a
    failed request leaves everything as it was and surfaces an error
    notification. Updates addressed to an id that is no longer held are
    no-ops, so a late response never re-inserts a deleted session.
    """

    label: str

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        *,
        now_fn: Optional[Callable[[], int]] = None,
    ) -> None:
        self._notifier: Notifier = notifier or NullNotifier()
        self._now = now_fn or wall_clock_ms
        self._lock = threading.RLock()
        self._sessions: List[SessionT] = []
        self._selected_session_id: Optional[str] = None
        self._selected_logs: List[LogT] = []
        self._pending: Set[str] = set()

    @property
    def sessions(self) -> List[SessionT]:
        with self._lock:
            return list(self._sessions)

    @property
    def selected_session_id(self) -> Optional[str]:
        return self._selected_session_id

    @property
    def selected_logs(self) -> List[LogT]:
        with self._lock:
            return list(self._selected_logs)

    def clock(self) -> int:
        """Current time in epoch milliseconds as seen by this tracker."""
        return self._now()

    def session(self, session_id: str) -> Optional[SessionT]:
        with self._lock:
            return self._find(session_id)

    def is_pending(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._pending

    def refresh(self) -> bool:
        """Replace the session list with the server's."""

        try:
            sessions = self._list_sessions()
        except RequestError as exc:
            LOGGER.warning("Loading %s counters failed: %s", self.label, exc)
            error(self._notifier, f"Failed to load {self.label} counters. Please try again later.")
            return False
        with self._lock:
            self._sessions = list(sessions)
            self._after_change()
        LOGGER.debug("Loaded %d %s counters", len(sessions), self.label)
        return True

    def delete_session(self, session_id: str) -> bool:
        if not self._claim(session_id):
            return False
        try:
            self._delete_session_remote(session_id)
        except RequestError as exc:
            LOGGER.warning("Deleting %s counter %s failed: %s", self.label, session_id, exc)
            error(self._notifier, f"Failed to delete {self.label} counter. Please try again.")
            return False
        finally:
            self._release(session_id)
        with self._lock:
            self._sessions = [item for item in self._sessions if self._session_id(item) != session_id]
            if self._selected_session_id == session_id:
                self._selected_session_id = None
                self._selected_logs = []
            self._on_session_removed(session_id)
            self._after_change()
        success(self._notifier, f"{self.label.capitalize()} counter session deleted successfully!")
        return True

    def fetch_logs(self, session_id: str) -> Optional[List[LogT]]:
        """Open the log view for ``session_id`` with the server's collection."""

        try:
            logs = self._list_logs(session_id)
        except RequestError as exc:
            LOGGER.warning("Loading %s logs for %s failed: %s", self.label, session_id, exc)
            error(self._notifier, f"Failed to load {self.label} logs. Please try again.")
            return None
        with self._lock:
            self._selected_session_id = session_id
            self._selected_logs = list(logs)
            self._replace(session_id, lambda item: self._with_logs(item, logs))
        return list(logs)

    def delete_log(self, log_id: str) -> bool:
        with self._lock:
            owner = next(
                (self._log_session_id(log) for log in self._selected_logs if self._log_id(log) == log_id),
                self._selected_session_id,
            )
        if owner is not None and not self._claim(owner):
            return False
        try:
            self._delete_log_remote(log_id)
        except RequestError as exc:
            LOGGER.warning("Deleting %s log %s failed: %s", self.label, log_id, exc)
            error(self._notifier, f"Failed to delete {self.label} log. Please try again.")
            return False
        finally:
            if owner is not None:
                self._release(owner)
        with self._lock:
            self._selected_logs = [log for log in self._selected_logs if self._log_id(log) != log_id]
            if owner is not None:
                self._replace(owner, lambda item: self._without_log(item, log_id))
        success(self._notifier, f"{self.label.capitalize()} log deleted successfully!")
        return True

    def close_logs(self) -> None:
        with self._lock:
            self._selected_session_id = None
            self._selected_logs = []

    def _claim(self, session_id: str) -> bool:
        with self._lock:
            if session_id in self._pending:
                warning(
                    self._notifier,
                    "Request in progress",
                    "Please wait for the previous action on this session to finish.",
                )
                return False
            self._pending.add(session_id)
            return True

    def _release(self, session_id: str) -> None:
        with self._lock:
            self._pending.discard(session_id)

    def _find(self, session_id: str) -> Optional[SessionT]:
        return next((item for item in self._sessions if self._session_id(item) == session_id), None)

    def _prepend(self, session: SessionT) -> None:
        session_id = self._session_id(session)
        self._sessions = [session] + [item for item in self._sessions if self._session_id(item) != session_id]
        self._after_change()

    def _replace(self, session_id: str, update: Callable[[SessionT], SessionT]) -> bool:
        for index, item in enumerate(self._sessions):
            if self._session_id(item) == session_id:
                self._sessions[index] = update(item)
                self._after_change()
                return True
        LOGGER.debug("Ignoring update for unknown %s counter %s", self.label, session_id)
        return False

    def _after_change(self) -> None:
        """Hook run under the lock after the session list changes."""

    def _on_session_removed(self, session_id: str) -> None:
        """Hook run under the lock after a session is deleted."""

    @staticmethod
    def _session_id(session: SessionT) -> str:
        return getattr(session, "id")

    @staticmethod
    def _log_id(log: LogT) -> str:
        return getattr(log, "id")

    @staticmethod
    def _log_session_id(log: LogT) -> str:
        return getattr(log, "counter_id")

    @abstractmethod
    def _list_sessions(self) -> Sequence[SessionT]:
        ...

    @abstractmethod
    def _delete_session_remote(self, session_id: str) -> None:
        ...

    @abstractmethod
    def _list_logs(self, session_id: str) -> Sequence[LogT]:
        ...

    @abstractmethod
    def _delete_log_remote(self, log_id: str) -> None:
        ...

    @abstractmethod
    def _with_logs(self, session: SessionT, logs: Sequence[LogT]) -> SessionT:
        """Session re-synchronised with a freshly fetched log collection."""

    @abstractmethod
    def _without_log(self, session: SessionT, log_id: str) -> SessionT:
        """Session after one of its logs was deleted."""


__all__ = ["BaseTracker"]
