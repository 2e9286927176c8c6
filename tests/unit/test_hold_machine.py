"""Unit tests for HoldStateMachine."""

import pytest
from unittest.mock import MagicMock

from holdtalk.core.hold_machine import HoldStateMachine
from holdtalk.errors import DeviceError, EncodingError, PermissionDenied, SessionActiveError
from holdtalk.models.audio import EncodedRecording
from holdtalk.models.events import NO_OUTCOME, OutcomeKind, PlaybackHandle, RecordingState

HOLD_MS = 700


@pytest.fixture
def capture():
    mock = MagicMock()
    mock.stop.return_value = EncodedRecording(data=b'RIFF-ish', sample_rate=44100, sample_count=4)
    return mock


@pytest.fixture
def recordings():
    mock = MagicMock()
    mock.last_recording.return_value = PlaybackHandle(source="default", path="default.wav")
    mock.publish.side_effect = lambda recording: PlaybackHandle(source="recording", data=recording.data)
    return mock


@pytest.fixture
def outcomes():
    return []


@pytest.fixture
def machine(capture, recordings, scheduler, outcomes):
    return HoldStateMachine(
        capture=capture,
        recordings=recordings,
        scheduler=scheduler,
        hold_duration_ms=HOLD_MS,
        on_outcome=outcomes.append,
    )


@pytest.mark.unit
class TestHoldStateMachine:
    """Test cases for HoldStateMachine."""

    def test_starts_idle(self, machine):
        assert machine.state is RecordingState.IDLE
        assert machine.is_recording is False

    def test_press_start_arms(self, machine, scheduler, capture):
        machine.on_press_start()

        assert machine.state is RecordingState.ARMING
        assert len(scheduler.pending()) == 1
        assert scheduler.pending()[0].due_ms == HOLD_MS
        capture.start.assert_not_called()

    def test_release_before_timeout_requests_playback(self, machine, scheduler, capture, recordings, outcomes):
        machine.on_press_start()
        scheduler.advance(300)

        outcome = machine.on_press_end()
        scheduler.advance(10000)

        assert outcome.kind is OutcomeKind.PLAYBACK_REQUESTED
        assert outcome.handle == recordings.last_recording.return_value
        assert outcomes == [outcome]
        assert machine.state is RecordingState.IDLE
        capture.start.assert_not_called()
        capture.stop.assert_not_called()

    def test_hold_past_timeout_starts_capture_once(self, machine, scheduler, capture):
        machine.on_press_start()
        scheduler.advance(HOLD_MS - 1)
        capture.start.assert_not_called()

        scheduler.advance(1)

        assert machine.state is RecordingState.RECORDING
        capture.start.assert_called_once()

    def test_release_while_recording_saves(self, machine, scheduler, capture, recordings, outcomes):
        machine.on_press_start()
        scheduler.advance(HOLD_MS)

        outcome = machine.on_press_end()

        capture.stop.assert_called_once()
        recordings.publish.assert_called_once_with(capture.stop.return_value)
        assert outcome.kind is OutcomeKind.RECORDING_SAVED
        assert outcome.handle.data == b'RIFF-ish'
        assert outcomes == [outcome]
        assert machine.state is RecordingState.IDLE

    def test_empty_recording_keeps_previous(self, machine, scheduler, capture, recordings, outcomes):
        capture.stop.return_value = None
        machine.on_press_start()
        scheduler.advance(HOLD_MS)

        outcome = machine.on_press_end()

        assert outcome is NO_OUTCOME
        recordings.publish.assert_not_called()
        assert outcomes == []
        assert machine.state is RecordingState.IDLE

    def test_encoding_error_returns_to_idle(self, machine, scheduler, capture, recordings):
        capture.stop.side_effect = EncodingError("bad rate")
        machine.on_press_start()
        scheduler.advance(HOLD_MS)

        outcome = machine.on_press_end()

        assert outcome.kind is OutcomeKind.NONE
        assert isinstance(outcome.error, EncodingError)
        recordings.publish.assert_not_called()
        assert machine.state is RecordingState.IDLE

    def test_release_while_idle_is_noop(self, machine, capture, recordings, outcomes):
        assert machine.on_press_end() is NO_OUTCOME
        assert machine.on_press_end() is NO_OUTCOME

        recordings.last_recording.assert_not_called()
        capture.stop.assert_not_called()
        assert outcomes == []

    def test_press_start_ignored_unless_idle(self, machine, scheduler, capture):
        machine.on_press_start()
        machine.on_press_start()
        assert len(scheduler.timers) == 1

        scheduler.advance(HOLD_MS)
        machine.on_press_start()

        assert machine.state is RecordingState.RECORDING
        assert len(scheduler.timers) == 1
        capture.start.assert_called_once()

    @pytest.mark.parametrize("error", [PermissionDenied("denied"), DeviceError("unplugged")])
    def test_capture_failure_returns_to_idle(self, machine, scheduler, capture, outcomes, error):
        capture.start.side_effect = error
        machine.on_press_start()

        scheduler.advance(HOLD_MS)

        assert machine.state is RecordingState.IDLE
        assert len(outcomes) == 1
        assert outcomes[0].kind is OutcomeKind.CAPTURE_FAILED
        assert outcomes[0].error is error

        # The release that follows finds nothing to do
        assert machine.on_press_end() is NO_OUTCOME
        capture.stop.assert_not_called()

    def test_programming_error_propagates_but_resets(self, machine, scheduler, capture):
        capture.start.side_effect = SessionActiveError("already active")
        machine.on_press_start()

        with pytest.raises(SessionActiveError):
            scheduler.advance(HOLD_MS)
        assert machine.state is RecordingState.IDLE

    def test_timer_callback_after_cancel_is_ignored(self, machine, scheduler, capture):
        """A timer callback dispatched after release must not start capture."""
        machine.on_press_start()
        timer = scheduler.timers[0]
        machine.on_press_end()

        assert timer.cancelled is True
        timer.fn()

        capture.start.assert_not_called()
        assert machine.state is RecordingState.IDLE

    def test_stale_timer_from_previous_press_is_ignored(self, machine, scheduler, capture):
        machine.on_press_start()
        first_timer = scheduler.timers[0]
        scheduler.advance(100)
        machine.on_press_end()

        machine.on_press_start()
        first_timer.fn()
        capture.start.assert_not_called()
        assert machine.state is RecordingState.ARMING

        scheduler.advance(HOLD_MS)
        capture.start.assert_called_once()

    def test_injected_timeout_races_start_capture_once(self, machine, scheduler, capture):
        machine.on_press_start()
        timer = scheduler.timers[0]

        scheduler.advance(HOLD_MS)
        for _ in range(5):
            timer.fn()
            machine.on_hold_timeout()

        capture.start.assert_called_once()
        assert machine.state is RecordingState.RECORDING

    def test_reset_while_recording_aborts_capture(self, machine, scheduler, capture):
        machine.on_press_start()
        scheduler.advance(HOLD_MS)

        machine.reset()

        capture.abort.assert_called_once()
        capture.stop.assert_not_called()
        assert machine.state is RecordingState.IDLE

    def test_reset_while_arming_cancels_timer(self, machine, scheduler, capture):
        machine.on_press_start()

        machine.reset()
        scheduler.advance(HOLD_MS * 2)

        capture.start.assert_not_called()
        capture.abort.assert_not_called()
        assert machine.state is RecordingState.IDLE

    def test_zero_hold_duration(self, capture, recordings, scheduler):
        machine = HoldStateMachine(capture, recordings, scheduler, hold_duration_ms=0)
        machine.on_press_start()
        scheduler.advance(0)

        capture.start.assert_called_once()

    def test_negative_hold_duration_rejected(self, capture, recordings, scheduler):
        with pytest.raises(ValueError):
            HoldStateMachine(capture, recordings, scheduler, hold_duration_ms=-1)

    def test_works_without_outcome_listener(self, capture, recordings, scheduler):
        machine = HoldStateMachine(capture, recordings, scheduler, hold_duration_ms=HOLD_MS)
        machine.on_press_start()

        outcome = machine.on_press_end()

        assert outcome.kind is OutcomeKind.PLAYBACK_REQUESTED
