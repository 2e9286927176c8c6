"""Holds the current recording and resolves what to play back."""

import logging
import threading
from typing import Optional

from ..errors import StorageError
from ..models.audio import EncodedRecording
from ..models.events import PlaybackHandle
from ..storage.recording_store import RecordingStore

logger = logging.getLogger(__name__)


class RecordingService:
    """Owns the single "current" recording and its persistence.

    Only ``publish()`` replaces the current recording; any number of readers
    may look it up. A reader holding the previous recording keeps valid data.
    """

    def __init__(self, store: RecordingStore, default_asset: Optional[str] = None):
        """Initialize recording service.

        Args:
            store: Persistence gateway for the latest recording
            default_asset: Path to the audio played when nothing was recorded yet
        """
        self.store = store
        self.default_asset = default_asset
        self._current: Optional[EncodedRecording] = None
        self._current_durable = True
        self._lock = threading.Lock()

    @property
    def current_recording(self) -> Optional[EncodedRecording]:
        return self._current

    def publish(self, recording: EncodedRecording) -> PlaybackHandle:
        """Make ``recording`` current and persist it.

        A storage failure is logged as a warning; the recording stays current
        in memory and the returned handle is marked not durable.
        """
        durable = True
        try:
            self.store.save(recording.data)
        except StorageError as e:
            durable = False
            logger.warning(f"Recording kept in memory only, save failed: {e}")

        with self._lock:
            self._current = recording
            self._current_durable = durable

        logger.info(f"Current recording replaced: {recording.duration_seconds:.2f}s, "
                    f"durable={durable}")
        return PlaybackHandle(source="recording", data=recording.data, durable=durable)

    def last_recording(self) -> PlaybackHandle:
        """Resolve the handle for "play last recording".

        Order: current in-memory recording, then the stored one, then the
        default asset. Storage errors fall through to the default asset.
        """
        with self._lock:
            current = self._current
            durable = self._current_durable
        if current is not None:
            return PlaybackHandle(source="recording", data=current.data, durable=durable)

        try:
            data = self.store.load()
        except StorageError as e:
            logger.warning(f"Could not load stored recording, using default: {e}")
            data = None

        if data:
            return PlaybackHandle(source="recording", data=data)

        logger.debug("No recording yet, using default asset")
        return PlaybackHandle(source="default", path=self.default_asset)
