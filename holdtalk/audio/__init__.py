"""Audio capture, encoding and playback module."""

from .buffer import SampleBuffer
from .capture import CaptureSession
from .encoder import encode_wav, decode_wav, encode_recording
from .feedback import RecordingFeedback, ToneFeedback, NullFeedback
from .permission import PermissionGate
from .playback import WavPlayer

__all__ = [
    'SampleBuffer',
    'CaptureSession',
    'encode_wav',
    'decode_wav',
    'encode_recording',
    'RecordingFeedback',
    'ToneFeedback',
    'NullFeedback',
    'PermissionGate',
    'WavPlayer',
]
