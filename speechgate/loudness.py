"""
Loudness estimation over signed 16-bit PCM blocks.
Full-block, unweighted RMS in raw sample units (not normalized to [0, 1]).
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

PCM16_DTYPE = np.dtype("<i2")
PCM16_FULL_SCALE = 32768.0
BYTES_PER_SAMPLE = PCM16_DTYPE.itemsize

BufferLike = Union[bytes, bytearray, memoryview]


class BufferUnavailable(Exception):
    """Raised when an audio block cannot be read or mapped."""


def block_from_bytes(data: Optional[BufferLike]) -> np.ndarray:
    """
    Typed int16 view over a raw little-endian PCM buffer.
    Every 2 bytes is one sample; a trailing odd byte is not a sample and is dropped.
    """
    if data is None:
        raise BufferUnavailable("audio buffer could not be mapped")
    try:
        view = memoryview(data)
    except TypeError as e:
        raise BufferUnavailable(f"audio buffer is not readable: {e}") from e
    n_bytes = view.nbytes
    n_samples = n_bytes // BYTES_PER_SAMPLE
    if n_bytes % BYTES_PER_SAMPLE:
        logger.debug("Dropping trailing odd byte from %d-byte buffer", n_bytes)
    if n_samples == 0:
        return np.zeros(0, dtype=PCM16_DTYPE)
    # strided views are copied out in logical order
    raw = view.cast("B") if view.c_contiguous else view.tobytes()
    return np.frombuffer(raw, dtype=PCM16_DTYPE, count=n_samples)


def rms(samples: np.ndarray) -> float:
    """RMS of a PCM16 block: sqrt(sum(x^2) / N). Empty block -> 0.0."""
    samples = np.asarray(samples)
    n = samples.size
    if n == 0:
        return 0.0
    x = samples.astype(np.float64).ravel()
    sum_squares = float(np.dot(x, x))
    return float(np.sqrt(sum_squares / n))


def rms_from_bytes(data: Optional[BufferLike]) -> float:
    """RMS of a raw PCM16 byte buffer. Raises BufferUnavailable if data is None."""
    return rms(block_from_bytes(data))


def rms_dbfs(rms_value: float) -> float:
    """16-bit RMS in dBFS (ref 32768). Safe for zeros; for display only."""
    if rms_value < 1e-10:
        return -100.0
    return 20.0 * float(np.log10(rms_value / PCM16_FULL_SCALE))
