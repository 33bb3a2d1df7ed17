from __future__ import annotations

import pytest

from bumptrack.tracker.recording import (
    RecordingBusyError,
    RecordingSlot,
    RecordingSource,
    RecordingState,
)


def test_slot_starts_idle() -> None:
    slot = RecordingSlot()
    assert slot.state is RecordingState.IDLE
    assert slot.current is None
    assert not slot.is_recording()
    assert slot.end_recording() is None


def test_button_recording_is_bound_to_session() -> None:
    slot = RecordingSlot()
    current = slot.begin_recording(1_000, RecordingSource.BUTTON, session_id="c1")

    assert slot.state is RecordingState.RECORDING
    assert current.session_id == "c1"
    assert slot.is_recording(source=RecordingSource.BUTTON, session_id="c1")
    assert not slot.is_recording(session_id="c2")
    assert not slot.is_recording(source=RecordingSource.HOLD)


def test_button_recording_requires_session() -> None:
    with pytest.raises(ValueError):
        RecordingSlot().begin_recording(1_000, RecordingSource.BUTTON)


def test_only_one_recording_at_a_time() -> None:
    slot = RecordingSlot()
    slot.begin_recording(1_000, RecordingSource.HOLD)

    with pytest.raises(RecordingBusyError):
        slot.begin_recording(2_000, RecordingSource.BUTTON, session_id="c1")
    with pytest.raises(RecordingBusyError):
        slot.begin_recording(2_000, RecordingSource.HOLD)

    ended = slot.end_recording()
    assert ended is not None and ended.started_at_ms == 1_000
    assert slot.state is RecordingState.IDLE
    slot.begin_recording(3_000, RecordingSource.BUTTON, session_id="c1")
    assert slot.is_recording(source=RecordingSource.BUTTON)


def test_end_recording_leaves_non_matching_recording_in_place() -> None:
    slot = RecordingSlot()
    slot.begin_recording(1_000, RecordingSource.BUTTON, session_id="c1")

    assert slot.end_recording(source=RecordingSource.HOLD) is None
    assert slot.end_recording(session_id="c2") is None
    assert slot.state is RecordingState.RECORDING

    ended = slot.end_recording(source=RecordingSource.BUTTON, session_id="c1")
    assert ended is not None and ended.session_id == "c1"
    assert slot.state is RecordingState.IDLE
