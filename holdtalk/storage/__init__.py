"""Persistence for encoded recordings."""

from .recording_store import RecordingStore, FileRecordingStore, MemoryRecordingStore

__all__ = [
    "RecordingStore",
    "FileRecordingStore",
    "MemoryRecordingStore",
]
