"""Repeating one-second tick with deterministic teardown."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)


class Ticker:
    """Calls ``callback`` every ``interval_s`` on a daemon thread until stopped.

    Use as a context manager so the tick stops with the view that owns it.
    """

    def __init__(self, interval_s: float, callback: Callable[[], None], *, name: str = "bumptrack-tick") -> None:
        if interval_s <= 0:
            raise ValueError("Ticker interval must be positive")
        self._interval_s = float(interval_s)
        self._callback = callback
        self._name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def __enter__(self) -> "Ticker":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            try:
                self._callback()
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception("Tick callback failed; stopping %s", self._name)
                return


__all__ = ["Ticker"]
