"""Append-only sample buffer for a single capture session."""

import logging
import threading
from typing import List

import numpy as np

from ..models.audio import AudioFrame

logger = logging.getLogger(__name__)


class SampleBuffer:
    """Accumulates captured mono frames in arrival order until drained."""

    def __init__(self):
        """Initialize an empty buffer."""
        self._chunks: List[np.ndarray] = []
        self._total_samples = 0
        self.lock = threading.Lock()

    def append(self, frame: AudioFrame) -> None:
        """Add a frame's samples to the end of the buffer."""
        samples = np.asarray(frame.samples, dtype=np.float32).reshape(-1)
        if samples.size == 0:
            return

        with self.lock:
            self._chunks.append(samples)
            self._total_samples += samples.size

        logger.debug(f"Appended frame {frame.sequence_number}: {samples.size} samples, "
                     f"buffer now has {self._total_samples} samples")

    def total_samples(self) -> int:
        """Running count of all appended samples."""
        with self.lock:
            return self._total_samples

    def frame_count(self) -> int:
        with self.lock:
            return len(self._chunks)

    def drain(self) -> np.ndarray:
        """Return every sample in arrival order and reset the buffer to empty."""
        with self.lock:
            chunks = self._chunks
            self._chunks = []
            self._total_samples = 0

        if not chunks:
            return np.zeros(0, dtype=np.float32)

        samples = np.concatenate(chunks)
        logger.debug(f"Drained {len(chunks)} frames ({samples.size} samples)")
        return samples
