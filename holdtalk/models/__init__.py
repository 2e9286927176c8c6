"""Data models for the Holdtalk application."""

from .audio import AudioStats, AudioFrame, EncodedRecording
from .events import (
    RecordingState,
    OutcomeKind,
    PlaybackHandle,
    HoldOutcome,
    NO_OUTCOME,
)

__all__ = [
    "AudioStats",
    "AudioFrame",
    "EncodedRecording",
    "RecordingState",
    "OutcomeKind",
    "PlaybackHandle",
    "HoldOutcome",
    "NO_OUTCOME",
]
