"""Press-and-hold state machine driving capture start and stop."""

import logging
from typing import Any, Callable, Optional

from ..errors import CaptureError, EncodingError
from ..models.events import NO_OUTCOME, HoldOutcome, OutcomeKind, RecordingState

logger = logging.getLogger(__name__)

DEFAULT_HOLD_DURATION_MS = 5000


class HoldStateMachine:
    """Idle -> arming -> recording -> idle, driven by press/release and a hold timer.

    All three entry points must be called from the same thread of control
    (the dispatcher). The hold timer is guarded twice: it is cancelled on
    release, and the timeout handler checks a liveness flag and the gesture
    id before acting, so a late timer callback can never start capture.
    """

    def __init__(
        self,
        capture,
        recordings,
        scheduler,
        hold_duration_ms: int = DEFAULT_HOLD_DURATION_MS,
        on_outcome: Optional[Callable[[HoldOutcome], None]] = None,
    ):
        """Initialize the state machine.

        Args:
            capture: CaptureSession started and stopped by the machine
            recordings: RecordingService receiving finished recordings
            scheduler: Object with ``call_later(seconds, fn)`` returning a
                cancellable handle
            hold_duration_ms: How long the zone must be held before recording
            on_outcome: Called with every non-empty outcome
        """
        if hold_duration_ms < 0:
            raise ValueError(f"Hold duration must not be negative: {hold_duration_ms}")

        self.capture = capture
        self.recordings = recordings
        self.scheduler = scheduler
        self.hold_duration_ms = hold_duration_ms
        self.on_outcome = on_outcome

        self.state = RecordingState.IDLE
        self._hold_timer: Any = None
        self._hold_armed = False
        self._press_id = 0

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.RECORDING

    def on_press_start(self) -> None:
        """Arm the hold timer. Only valid from idle."""
        if self.state is not RecordingState.IDLE:
            logger.debug(f"Ignoring press start in state {self.state.value}")
            return

        self._cancel_hold_timer()
        self._press_id += 1
        press_id = self._press_id

        self.state = RecordingState.ARMING
        self._hold_armed = True
        self._hold_timer = self.scheduler.call_later(
            self.hold_duration_ms / 1000.0,
            lambda: self.on_hold_timeout(press_id),
        )
        logger.debug(f"Armed hold timer for press {press_id} ({self.hold_duration_ms}ms)")

    def on_hold_timeout(self, press_id: Optional[int] = None) -> HoldOutcome:
        """Start capturing if the zone is still held."""
        if not self._hold_armed or self.state is not RecordingState.ARMING:
            logger.debug("Ignoring hold timeout, press already ended")
            return NO_OUTCOME
        if press_id is not None and press_id != self._press_id:
            logger.debug(f"Ignoring hold timeout from stale press {press_id}")
            return NO_OUTCOME

        self._hold_armed = False
        self._hold_timer = None
        self.state = RecordingState.RECORDING

        try:
            self.capture.start()
        except CaptureError as e:
            self.state = RecordingState.IDLE
            logger.error(f"Could not start recording: {e}")
            return self._emit(HoldOutcome(OutcomeKind.CAPTURE_FAILED, error=e))
        except Exception:
            self.state = RecordingState.IDLE
            raise

        logger.info("Recording started")
        return NO_OUTCOME

    def on_press_end(self) -> HoldOutcome:
        """Cancel the hold timer, then play back or finish the recording."""
        self._cancel_hold_timer()

        if self.state is RecordingState.ARMING:
            self.state = RecordingState.IDLE
            handle = self.recordings.last_recording()
            logger.info(f"Released while arming, playing {handle.source} recording")
            return self._emit(HoldOutcome(OutcomeKind.PLAYBACK_REQUESTED, handle=handle))

        if self.state is RecordingState.RECORDING:
            self.state = RecordingState.IDLE
            return self._finish_recording()

        logger.debug("Ignoring press end while idle")
        return NO_OUTCOME

    def reset(self) -> None:
        """Return to idle, discarding any capture in progress."""
        self._cancel_hold_timer()
        if self.state is RecordingState.RECORDING:
            logger.warning("Resetting while recording, capture discarded")
            self.capture.abort()
        self.state = RecordingState.IDLE

    def _finish_recording(self) -> HoldOutcome:
        try:
            recording = self.capture.stop()
        except EncodingError as e:
            logger.error(f"Recording could not be encoded, keeping previous one: {e}")
            return self._emit(HoldOutcome(OutcomeKind.NONE, error=e))

        if recording is None:
            logger.info("Recording stopped with no audio, keeping previous one")
            return NO_OUTCOME

        handle = self.recordings.publish(recording)
        logger.info(f"Recording saved ({recording.duration_seconds:.2f}s)")
        return self._emit(HoldOutcome(OutcomeKind.RECORDING_SAVED, handle=handle))

    def _cancel_hold_timer(self) -> None:
        self._hold_armed = False
        timer = self._hold_timer
        self._hold_timer = None
        if timer is not None:
            timer.cancel()

    def _emit(self, outcome: HoldOutcome) -> HoldOutcome:
        if self.on_outcome is not None:
            self.on_outcome(outcome)
        return outcome
