"""Unit tests for RecordingService."""

import pytest
from unittest.mock import MagicMock

from holdtalk.errors import StorageError
from holdtalk.models.audio import EncodedRecording
from holdtalk.services.recording_service import RecordingService
from holdtalk.storage.recording_store import MemoryRecordingStore


def make_recording(data=b'RIFF0000WAVE'):
    return EncodedRecording(data=data, sample_rate=44100, sample_count=100)


@pytest.mark.unit
class TestRecordingService:
    """Test cases for RecordingService."""

    def test_default_asset_when_nothing_recorded(self):
        service = RecordingService(MemoryRecordingStore(), default_asset="assets/default.wav")

        handle = service.last_recording()

        assert handle.is_default
        assert handle.path == "assets/default.wav"
        assert handle.data is None

    def test_publish_saves_and_becomes_current(self):
        store = MemoryRecordingStore()
        service = RecordingService(store)
        recording = make_recording()

        handle = service.publish(recording)

        assert store.load() == recording.data
        assert service.current_recording is recording
        assert handle.source == "recording"
        assert handle.data == recording.data
        assert handle.durable is True

    def test_new_recording_replaces_current(self):
        service = RecordingService(MemoryRecordingStore())
        first = make_recording(b'first')
        second = make_recording(b'second')

        first_handle = service.publish(first)
        service.publish(second)

        assert service.last_recording().data == b'second'
        # Earlier holders keep valid data
        assert first_handle.data == b'first'

    def test_stored_recording_used_after_restart(self):
        store = MemoryRecordingStore()
        store.save(b'from last session')
        service = RecordingService(store, default_asset="default.wav")

        handle = service.last_recording()

        assert handle.source == "recording"
        assert handle.data == b'from last session'

    def test_storage_failure_keeps_recording_in_memory(self):
        store = MagicMock()
        store.save.side_effect = StorageError("disk full")
        service = RecordingService(store)
        recording = make_recording()

        handle = service.publish(recording)

        assert handle.durable is False
        assert service.current_recording is recording
        last = service.last_recording()
        assert last.data == recording.data
        assert last.durable is False

    def test_load_failure_falls_back_to_default(self):
        store = MagicMock()
        store.load.side_effect = StorageError("unreadable")
        service = RecordingService(store, default_asset="default.wav")

        handle = service.last_recording()

        assert handle.is_default
        assert handle.path == "default.wav"
