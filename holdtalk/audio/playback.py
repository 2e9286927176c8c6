"""Playback of recordings, the default asset and prompt files."""

import io
import logging
import wave
from threading import Event, Lock, Thread
from typing import Optional

import pyaudio

from ..models.events import PlaybackHandle

logger = logging.getLogger(__name__)


class WavPlayer:
    """Plays WAV data on the default output device, one sound at a time.

    ``play_bytes`` and ``stop`` may be called from the keyboard thread and
    the dispatcher thread at once; the lock keeps at most one playback
    thread owned by the player.
    """

    def __init__(self, chunk_size: int = 1024):
        self.chunk_size = chunk_size
        self.playback_thread: Optional[Thread] = None
        self.stop_event = Event()
        self._lock = Lock()

    def play_handle(self, handle: PlaybackHandle) -> None:
        """Play a playback handle from the start."""
        if handle.data is not None:
            self.play_bytes(handle.data)
        elif handle.path:
            self.play_file(handle.path)
        else:
            logger.warning("Nothing to play")

    def play_file(self, path: str) -> None:
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.warning(f"Cannot play {path}: {e}")
            return
        self.play_bytes(data)

    def play_bytes(self, data: bytes) -> None:
        """Stop whatever is playing and start playing ``data`` in the background."""
        with self._lock:
            self._stop_locked()
            # Each playback watches its own event so a straggler never resumes
            self.stop_event = Event()
            self.playback_thread = Thread(target=self._play, args=(data, self.stop_event), daemon=True)
            self.playback_thread.name = "WavPlayerThread"
            self.playback_thread.start()

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def _stop_locked(self) -> None:
        self.stop_event.set()
        if self.playback_thread and self.playback_thread.is_alive():
            self.playback_thread.join(timeout=1.0)
            if self.playback_thread.is_alive():
                logger.warning("Playback thread did not stop within 1s")
        self.playback_thread = None

    def _play(self, data: bytes, stop_event: Event) -> None:
        pyaudio_instance = None
        stream = None
        try:
            with wave.open(io.BytesIO(data), 'rb') as wf:
                pyaudio_instance = pyaudio.PyAudio()
                stream = pyaudio_instance.open(
                    format=pyaudio_instance.get_format_from_width(wf.getsampwidth()),
                    channels=wf.getnchannels(),
                    rate=wf.getframerate(),
                    output=True,
                )
                chunk = wf.readframes(self.chunk_size)
                while chunk and not stop_event.is_set():
                    stream.write(chunk)
                    chunk = wf.readframes(self.chunk_size)
                stream.stop_stream()
        except (wave.Error, EOFError, OSError) as e:
            logger.warning(f"Playback failed: {e}")
        finally:
            if stream is not None:
                stream.close()
            if pyaudio_instance is not None:
                pyaudio_instance.terminate()
