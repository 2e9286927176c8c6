"""Single-slot persistence for the latest encoded recording."""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..errors import StorageError

logger = logging.getLogger(__name__)


class RecordingStore(ABC):
    """Key-value blob store holding the recording under one well-known slot."""

    @abstractmethod
    def save(self, data: bytes) -> None:
        """Store ``data``, replacing any prior value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def load(self) -> Optional[bytes]:
        """Return the stored recording, or None if nothing is stored.

        Raises:
            StorageError: If the read fails
        """
        pass


class MemoryRecordingStore(RecordingStore):
    """In-process store, useful when nothing should touch the disk."""

    def __init__(self):
        self._data: Optional[bytes] = None

    def save(self, data: bytes) -> None:
        self._data = bytes(data)

    def load(self) -> Optional[bytes]:
        return self._data

    def clear(self) -> None:
        self._data = None


class FileRecordingStore(RecordingStore):
    """Stores the recording as ``<data_dir>/<slot>.wav``."""

    def __init__(self, data_dir: str = "./data", slot: str = "latest_recording"):
        """Initialize file store.

        Args:
            data_dir: Directory holding the slot file
            slot: Slot name, used as the file stem
        """
        self.data_dir = Path(data_dir)
        self.slot = slot
        self.path = self.data_dir / f"{slot}.wav"
        logger.info(f"FileRecordingStore initialized with slot file: {self.path}")

    def save(self, data: bytes) -> None:
        """Write to a temporary file and atomically replace the slot file."""
        tmp_path = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.slot}-", suffix=".tmp", dir=self.data_dir)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, self.path)
            tmp_path = None
            logger.info(f"Recording saved: {self.path} ({len(data)} bytes)")
        except OSError as e:
            logger.error(f"Error saving recording: {e}")
            raise StorageError(f"Could not save recording to {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def load(self) -> Optional[bytes]:
        if not self.path.exists():
            logger.debug(f"No stored recording at {self.path}")
            return None

        try:
            with open(self.path, 'rb') as f:
                return f.read()
        except OSError as e:
            logger.error(f"Error loading recording: {e}")
            raise StorageError(f"Could not load recording from {self.path}: {e}") from e

    def clear(self) -> None:
        """Remove the stored recording, if any."""
        try:
            self.path.unlink()
            logger.info(f"Removed stored recording: {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Could not remove {self.path}: {e}") from e
