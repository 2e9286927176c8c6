"""WAV encoding and decoding for captured float samples.

The container is the canonical 44-byte RIFF/WAVE header followed by mono
16-bit little-endian PCM. Floats are clamped to [-1.0, 1.0] and scaled
asymmetrically: negative values by 32768, non-negative values by 32767.
"""

import io
import logging
import struct
import wave
from typing import Tuple

import numpy as np

from ..errors import EncodingError
from ..models.audio import EncodedRecording

logger = logging.getLogger(__name__)

HEADER_SIZE = 44
CHANNELS = 1
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT_TAG = 1

NEGATIVE_SCALE = 32768.0
POSITIVE_SCALE = 32767.0

_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')
MAX_CHUNK_SIZE = 0xFFFFFFFF


def build_wav_header(sample_count: int, sample_rate: int) -> bytes:
    """Build the 44-byte header for mono 16-bit PCM."""
    data_bytes = sample_count * BYTES_PER_SAMPLE
    block_align = CHANNELS * BYTES_PER_SAMPLE
    if sample_rate * block_align > MAX_CHUNK_SIZE:
        raise EncodingError(f"Sample rate too large for a WAV header: {sample_rate}")
    if 36 + data_bytes > MAX_CHUNK_SIZE:
        raise EncodingError(f"Recording too large for a WAV file: {data_bytes} bytes")
    return _HEADER.pack(
        b'RIFF',
        36 + data_bytes,
        b'WAVE',
        b'fmt ',
        16,  # fmt chunk size
        PCM_FORMAT_TAG,
        CHANNELS,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b'data',
        data_bytes,
    )


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Convert float samples to little-endian int16 PCM."""
    values = np.nan_to_num(np.asarray(samples, dtype=np.float64).reshape(-1),
                           nan=0.0, posinf=1.0, neginf=-1.0)
    clamped = np.clip(values, -1.0, 1.0)
    scaled = np.where(clamped < 0, clamped * NEGATIVE_SCALE, clamped * POSITIVE_SCALE)
    # astype truncates toward zero
    return scaled.astype('<i2')


def pcm16_to_float(pcm: np.ndarray) -> np.ndarray:
    """Inverse of float_to_pcm16, up to one quantization step."""
    values = np.asarray(pcm, dtype=np.float64)
    return np.where(values < 0, values / NEGATIVE_SCALE, values / POSITIVE_SCALE).astype(np.float32)


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float samples in [-1, 1] into a complete WAV byte stream.

    Args:
        samples: Mono float samples in arrival order
        sample_rate: Sample rate in Hz, must be positive

    Returns:
        Header plus PCM payload

    Raises:
        EncodingError: If there are no samples or the sample rate is invalid
    """
    if sample_rate is None or int(sample_rate) <= 0:
        raise EncodingError(f"Invalid sample rate: {sample_rate}")
    if int(sample_rate) * BYTES_PER_SAMPLE > MAX_CHUNK_SIZE:
        raise EncodingError(f"Sample rate too large for a WAV header: {sample_rate}")

    pcm = float_to_pcm16(samples)
    if pcm.size == 0:
        raise EncodingError("No samples to encode")

    header = build_wav_header(pcm.size, int(sample_rate))
    return header + pcm.tobytes()


def encode_recording(samples: np.ndarray, sample_rate: int, partial: bool = False) -> EncodedRecording:
    """Encode samples and wrap them with their metadata."""
    data = encode_wav(samples, sample_rate)
    sample_count = (len(data) - HEADER_SIZE) // BYTES_PER_SAMPLE
    logger.info(f"Encoded recording: {sample_count} samples at {sample_rate}Hz "
                f"({len(data)} bytes{', partial' if partial else ''})")
    return EncodedRecording(
        data=data,
        sample_rate=int(sample_rate),
        sample_count=sample_count,
        partial=partial,
    )


def decode_wav(data: bytes) -> Tuple[np.ndarray, int]:
    """Decode a mono 16-bit PCM WAV stream into float samples and its rate.

    Raises:
        EncodingError: If the stream is not mono 16-bit PCM WAV
    """
    try:
        with wave.open(io.BytesIO(data), 'rb') as wf:
            if wf.getnchannels() != CHANNELS or wf.getsampwidth() != BYTES_PER_SAMPLE:
                raise EncodingError(
                    f"Unsupported WAV layout: {wf.getnchannels()} channels, "
                    f"{wf.getsampwidth() * 8} bits"
                )
            sample_rate = wf.getframerate()
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        raise EncodingError(f"Invalid WAV data: {e}") from e

    pcm = np.frombuffer(frames, dtype='<i2')
    return pcm16_to_float(pcm), sample_rate
