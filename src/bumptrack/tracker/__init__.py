"""Local reconciliation layer for kick and contraction sessions."""

from bumptrack.tracker.contractions import ContractionCounterService, ContractionTracker
from bumptrack.tracker.kicks import KickCounterService, KickTracker
from bumptrack.tracker.recording import RecordingSlot, RecordingSource, RecordingState
from bumptrack.tracker.ticker import Ticker
from bumptrack.tracker.timing import KickTimerState, PressureState, derive_kick_timer, derive_pressure

__all__ = [
    "ContractionCounterService",
    "ContractionTracker",
    "KickCounterService",
    "KickTimerState",
    "KickTracker",
    "PressureState",
    "RecordingSlot",
    "RecordingSource",
    "RecordingState",
    "Ticker",
    "derive_kick_timer",
    "derive_pressure",
]
