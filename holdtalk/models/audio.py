"""Audio-related data models."""

from dataclasses import dataclass, field
from datetime import datetime

import numpy as np


@dataclass
class AudioStats:
    """Audio capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    frames_per_buffer: int
    total_frames: int
    total_samples: int


@dataclass
class AudioFrame:
    """A single block of mono float32 samples delivered by the capture device."""
    samples: np.ndarray
    sample_rate: int
    sequence_number: int
    timestamp: float  # Time when this frame was captured

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class EncodedRecording:
    """A complete, independently playable WAV recording."""
    data: bytes
    sample_rate: int
    sample_count: int
    channels: int = 1
    sample_width: int = 2  # 16-bit PCM
    partial: bool = False  # True if the device was lost mid-capture
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def data_bytes(self) -> int:
        """Size of the PCM payload, excluding the header."""
        return self.sample_count * self.channels * self.sample_width

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.sample_count / self.sample_rate
