"""Error taxonomy for the recording pipeline."""


class HoldTalkError(Exception):
    """Base class for all holdtalk errors."""


class CaptureError(HoldTalkError):
    """Microphone could not be acquired or failed while capturing."""


class PermissionDenied(CaptureError):
    """Microphone access was refused."""


class DeviceError(CaptureError):
    """Capture hardware is unavailable or failed mid-session."""


class SessionActiveError(HoldTalkError, RuntimeError):
    """A capture session was started while another one is active."""


class StorageError(HoldTalkError):
    """Persisting or loading the recording failed."""


class EncodingError(HoldTalkError, ValueError):
    """Samples could not be turned into a WAV container."""
