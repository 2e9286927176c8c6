"""Audible acknowledgment that recording has started."""

import logging
from abc import ABC, abstractmethod
from threading import Thread
from typing import Optional

import numpy as np
import pyaudio

logger = logging.getLogger(__name__)


class RecordingFeedback(ABC):
    """Collaborator signalled when capture starts. Must never block or raise."""

    @abstractmethod
    def signal_recording_started(self) -> None:
        """Emit the "recording started" cue."""
        pass


class NullFeedback(RecordingFeedback):
    """Feedback that does nothing, used when feedback is disabled."""

    def signal_recording_started(self) -> None:
        logger.debug("Feedback disabled, skipping start cue")


def generate_tone(frequency_hz: float, duration_ms: int, volume: float, sample_rate: int) -> np.ndarray:
    """Generate a sine tone as float32 samples."""
    sample_count = int(sample_rate * duration_ms / 1000)
    t = np.arange(sample_count) / sample_rate
    return (np.sin(2 * np.pi * frequency_hz * t) * volume).astype(np.float32)


class ToneFeedback(RecordingFeedback):
    """Plays a short sine beep on the default output device in the background."""

    def __init__(
        self,
        frequency_hz: float = 880.0,
        duration_ms: int = 200,
        volume: float = 0.2,
        sample_rate: int = 44100,
    ):
        """Initialize tone feedback.

        Args:
            frequency_hz: Tone frequency
            duration_ms: Tone length in milliseconds
            volume: Linear gain in [0, 1]
            sample_rate: Output sample rate
        """
        self.frequency_hz = frequency_hz
        self.duration_ms = duration_ms
        self.volume = max(0.0, min(1.0, volume))
        self.sample_rate = sample_rate
        self.tone = generate_tone(frequency_hz, duration_ms, self.volume, sample_rate)
        self.thread: Optional[Thread] = None

    def signal_recording_started(self) -> None:
        """Start playing the tone without waiting for it to finish."""
        try:
            self.thread = Thread(target=self._play, daemon=True)
            self.thread.name = "ToneFeedbackThread"
            self.thread.start()
        except RuntimeError as e:
            logger.warning(f"Could not start feedback tone: {e}")

    def _play(self) -> None:
        pyaudio_instance = None
        stream = None
        try:
            pyaudio_instance = pyaudio.PyAudio()
            stream = pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=self.sample_rate,
                output=True,
            )
            stream.write(self.tone.tobytes())
            stream.stop_stream()
        except Exception as e:
            logger.warning(f"Feedback tone unavailable: {e}")
        finally:
            if stream is not None:
                stream.close()
            if pyaudio_instance is not None:
                pyaudio_instance.terminate()
