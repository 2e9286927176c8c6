"""Microphone capture session feeding a sample buffer."""

import logging
import time
from datetime import datetime
from typing import Optional

import numpy as np
import pyaudio

from ..errors import DeviceError, SessionActiveError
from ..models.audio import AudioFrame, AudioStats, EncodedRecording
from .buffer import SampleBuffer
from .encoder import encode_recording
from .feedback import NullFeedback, RecordingFeedback
from .permission import PermissionGate

logger = logging.getLogger(__name__)

DEFAULT_FRAMES_PER_BUFFER = 4096


class CaptureSession:
    """Owns the microphone input stream for one recording at a time.

    The PyAudio host instance is acquired by ``open()`` and released by
    ``close()``; the input stream itself only exists between ``start()`` and
    ``stop()``. Every exit path releases the stream.
    """

    def __init__(
        self,
        sample_rate: Optional[int] = None,
        frames_per_buffer: int = DEFAULT_FRAMES_PER_BUFFER,
        input_device_index: Optional[int] = None,
        permission: Optional[PermissionGate] = None,
        feedback: Optional[RecordingFeedback] = None,
    ):
        """Initialize capture session.

        Args:
            sample_rate: Capture rate in Hz, None for the device native rate
            frames_per_buffer: Samples per delivered frame
            input_device_index: PyAudio device index, None for the default input
            permission: Gate checked before every start
            feedback: Collaborator signalled once capture is running
        """
        self.sample_rate = sample_rate
        self.frames_per_buffer = frames_per_buffer
        self.input_device_index = input_device_index
        self.permission = permission or PermissionGate()
        self.feedback = feedback or NullFeedback()

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self.buffer = SampleBuffer()
        self.active_sample_rate: Optional[int] = None
        self.device_error: Optional[DeviceError] = None

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_frames = 0

    @property
    def is_recording(self) -> bool:
        return self.stream is not None

    def open(self) -> None:
        """Acquire the PyAudio host instance."""
        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()
            logger.debug("PyAudio instance created")

    def close(self) -> None:
        """Release the stream, if any, and the PyAudio host instance."""
        if self.is_recording:
            logger.warning("Closing capture session while recording")
            self.abort()

        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            logger.debug("PyAudio instance terminated")

    def __enter__(self) -> "CaptureSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """Acquire the microphone and begin collecting frames.

        Raises:
            SessionActiveError: If a capture is already running
            PermissionDenied: If microphone access is refused
            DeviceError: If the input stream cannot be opened
        """
        if self.is_recording:
            raise SessionActiveError("A capture session is already active")

        self.permission.ensure()
        self.open()

        rate = self._resolve_sample_rate()
        self.buffer = SampleBuffer()
        self.device_error = None
        self.total_frames = 0
        self.active_sample_rate = rate

        try:
            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=rate,
                input=True,
                input_device_index=self.input_device_index,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=self._on_audio,
            )
        except (OSError, ValueError) as e:
            self.stream = None
            logger.error(f"Could not open input stream: {e}")
            raise DeviceError(f"Microphone unavailable: {e}") from e

        self.start_time = datetime.now()
        logger.info(f"Capture started: {rate}Hz, {self.frames_per_buffer} samples/frame")
        self._signal_feedback()

    def stop(self) -> Optional[EncodedRecording]:
        """Stop capturing, release the microphone and encode what was captured.

        Returns:
            The encoded recording, or None if no audio was captured
        """
        if not self.is_recording:
            logger.warning("No recording in progress")
            return None

        self._release_stream()

        samples = self.buffer.drain()
        partial = self.device_error is not None
        if partial:
            logger.warning(f"Microphone lost mid-recording ({self.device_error}), "
                           f"keeping {samples.size} captured samples")

        if samples.size == 0:
            logger.info("No audio captured, nothing to encode")
            return None

        logger.info(f"Capture stopped. Total frames: {self.total_frames}")
        return encode_recording(samples, self.active_sample_rate, partial=partial)

    def abort(self) -> None:
        """Release the microphone and discard captured audio."""
        if not self.is_recording:
            return
        self._release_stream()
        discarded = self.buffer.drain()
        logger.info(f"Capture aborted, discarded {discarded.size} samples")

    def _resolve_sample_rate(self) -> int:
        if self.sample_rate:
            return int(self.sample_rate)

        try:
            if self.input_device_index is None:
                info = self.pyaudio_instance.get_default_input_device_info()
            else:
                info = self.pyaudio_instance.get_device_info_by_index(self.input_device_index)
        except (OSError, ValueError) as e:
            raise DeviceError(f"No input device available: {e}") from e

        return int(info['defaultSampleRate'])

    def _on_audio(self, in_data, frame_count, time_info, status):
        """PyAudio stream callback, runs on the PortAudio thread."""
        try:
            if status & pyaudio.paInputOverflow:
                logger.debug("Input overflow reported by device")

            frame = AudioFrame(
                samples=np.frombuffer(in_data, dtype=np.float32).copy(),
                sample_rate=self.active_sample_rate,
                sequence_number=self.total_frames,
                timestamp=time.time(),
            )
            self.total_frames += 1
            self.buffer.append(frame)
            return (None, pyaudio.paContinue)
        except Exception as e:
            self.device_error = DeviceError(str(e))
            logger.error(f"Error in capture callback: {e}")
            return (None, pyaudio.paAbort)

    def _release_stream(self) -> None:
        stream = self.stream
        self.stream = None
        if stream is None:
            return

        try:
            if not stream.is_active() and self.device_error is None:
                self.device_error = DeviceError("Input stream stopped unexpectedly")
            stream.stop_stream()
        except OSError as e:
            if self.device_error is None:
                self.device_error = DeviceError(str(e))
            logger.error(f"Error stopping input stream: {e}")
        finally:
            try:
                stream.close()
            except OSError as e:
                logger.error(f"Error closing input stream: {e}")
        logger.debug("Input stream released")

    def _signal_feedback(self) -> None:
        try:
            self.feedback.signal_recording_started()
        except Exception as e:
            logger.warning(f"Recording feedback failed: {e}")

    def get_recording_stats(self) -> AudioStats:
        """Get current capture statistics."""
        duration = 0.0
        if self.start_time and self.is_recording:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.active_sample_rate or self.sample_rate or 0,
            frames_per_buffer=self.frames_per_buffer,
            total_frames=self.total_frames,
            total_samples=self.buffer.total_samples(),
        )

    def __del__(self):
        """Ensure the microphone is released on deletion."""
        if getattr(self, 'stream', None) is not None:
            self._release_stream()
