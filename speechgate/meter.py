"""
Live microphone level meter for picking a gate threshold.
Captures int16 blocks with sounddevice and records their RMS.
"""

from __future__ import annotations

import logging
import queue
import time
from typing import Optional

import numpy as np

from .gate import DEFAULT_THRESHOLD
from .loudness import rms

logger = logging.getLogger(__name__)


class LevelStats:
    """Running collection of per-block RMS values."""

    def __init__(self):
        self.values: list[float] = []

    def add(self, value: float) -> None:
        self.values.append(float(value))

    @property
    def count(self) -> int:
        return len(self.values)

    @property
    def mean(self) -> float:
        return float(np.mean(self.values)) if self.values else 0.0

    @property
    def peak(self) -> float:
        return max(self.values, default=0.0)

    def percentile(self, q: float) -> float:
        if not self.values:
            return 0.0
        return float(np.percentile(self.values, q))


def suggest_threshold(ambient: LevelStats, speech: LevelStats) -> float:
    """
    Midpoint between loud ambient (p95) and typical speech (median).
    Falls back to the default when the two do not separate.
    """
    noise_floor = ambient.percentile(95)
    speech_level = speech.percentile(50)
    if speech.count == 0 or speech_level <= noise_floor:
        logger.warning(
            "Speech (%.1f) not louder than ambient (%.1f); keeping default threshold",
            speech_level,
            noise_floor,
        )
        return DEFAULT_THRESHOLD
    return (noise_floor + speech_level) / 2.0


class MicMeter:
    """Measures block RMS from an input device via sounddevice's callback stream."""

    def __init__(self, sr: int = 16000, block_ms: float = 20.0, device: Optional[int] = None):
        self.sr = sr
        self.block_samples = max(1, int(sr * block_ms / 1000.0))
        self.device = device
        self._q: queue.Queue[float] = queue.Queue(maxsize=1024)

    def _callback(self, indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.warning("[mic] %s", status)
        try:
            self._q.put_nowait(rms(indata[:, 0]))
        except queue.Full:
            logger.debug("Level queue full, dropping block")

    def measure(self, seconds: float, on_level=None) -> LevelStats:
        import sounddevice as sd

        stats = LevelStats()
        while not self._q.empty():
            self._q.get_nowait()
        deadline = time.monotonic() + seconds
        with sd.InputStream(
            samplerate=self.sr,
            blocksize=self.block_samples,
            device=self.device,
            channels=1,
            dtype="int16",
            callback=self._callback,
        ):
            while time.monotonic() < deadline:
                try:
                    value = self._q.get(timeout=0.5)
                except queue.Empty:
                    continue
                stats.add(value)
                if on_level is not None:
                    on_level(value)
        return stats


def list_devices() -> None:
    import sounddevice as sd

    print("\nAvailable input devices:")
    print("-" * 60)
    default_in = sd.default.device[0]
    for i, dev in enumerate(sd.query_devices()):
        if dev["max_input_channels"] <= 0:
            continue
        tag = " [default-in]" if i == default_in else ""
        print(f"  [{i:2d}] {dev['name']:<36} in={dev['max_input_channels']}{tag}")
    print()
