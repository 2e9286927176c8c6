"""Pytest configuration and fixtures for Holdtalk tests."""

import pytest
import tempfile
import logging
from unittest.mock import Mock, patch
import numpy as np


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEVICE_SAMPLE_RATE = 44100
BLOCK_SIZE = 4096


def pytest_addoption(parser):
    parser.addoption("--hardware", action="store_true", default=False,
                     help="run tests that need a real microphone")


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: multi-component tests with mocked hardware")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="needs --hardware")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


class ManualTimer:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, due_ms: int, fn):
        self.due_ms = due_ms
        self.fn = fn
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for EventDispatcher.call_later driven by advance()."""

    def __init__(self):
        self.now_ms = 0
        self.timers = []

    def call_later(self, delay_seconds, fn):
        timer = ManualTimer(self.now_ms + int(round(delay_seconds * 1000)), fn)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, ms: int) -> None:
        """Move time forward, firing due timers in order."""
        target = self.now_ms + ms
        while True:
            due = [t for t in self.pending() if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_ms)
            self.now_ms = timer.due_ms
            timer.fired = True
            timer.fn()
        self.now_ms = target


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.is_active.return_value = True
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'index': 0,
            'name': 'Mock Microphone',
            'defaultSampleRate': float(DEVICE_SAMPLE_RATE),
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def sine_block():
    """Generate one float32 block of a 440 Hz sine wave."""
    def generate(size=BLOCK_SIZE, sample_rate=DEVICE_SAMPLE_RATE, offset=0, amplitude=0.5):
        t = (np.arange(size) + offset) / sample_rate
        return (np.sin(2 * np.pi * 440 * t) * amplitude).astype(np.float32)
    return generate


@pytest.fixture
def deliver_frames(mock_pyaudio):
    """Push float32 blocks through the stream callback handed to PyAudio.open."""
    def deliver(blocks, status=0):
        callback = mock_pyaudio['instance'].open.call_args.kwargs['stream_callback']
        results = []
        for block in blocks:
            data = block.tobytes() if isinstance(block, np.ndarray) else block
            results.append(callback(data, len(data) // 4, {}, status))
        return results
    return deliver
