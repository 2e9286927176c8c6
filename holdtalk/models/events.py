"""State and outcome models for the hold-to-record interaction."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RecordingState(Enum):
    """Interaction state of the main zone."""
    IDLE = "idle"
    ARMING = "arming"
    RECORDING = "recording"


class OutcomeKind(Enum):
    """What a press/release gesture produced for the presentation layer."""
    NONE = "none"
    PLAYBACK_REQUESTED = "playback_requested"
    RECORDING_SAVED = "recording_saved"
    CAPTURE_FAILED = "capture_failed"


@dataclass(frozen=True)
class PlaybackHandle:
    """Something the player can play: recording bytes or a fallback asset."""
    source: str  # "recording" | "default"
    data: Optional[bytes] = None
    path: Optional[str] = None
    durable: bool = True  # False if the recording could not be persisted

    @property
    def is_default(self) -> bool:
        return self.source == "default"


@dataclass(frozen=True)
class HoldOutcome:
    """Result of a gesture event emitted at the UI boundary."""
    kind: OutcomeKind
    handle: Optional[PlaybackHandle] = None
    error: Optional[Exception] = None


NO_OUTCOME = HoldOutcome(OutcomeKind.NONE)
