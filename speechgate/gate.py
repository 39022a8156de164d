"""
Speech gate: loudness above threshold mutes playback, otherwise unmutes.

Default policy is level-triggered and stateless: every block is decided from its
own loudness and produces exactly one volume write. An optional release threshold
and hangover (in blocks) keep the gate muted briefly after speech to avoid
flapping near the threshold.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from .loudness import BufferLike, BufferUnavailable, rms, rms_dbfs, rms_from_bytes

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 10000.0


class GateDecision(str, Enum):
    """Playback state derived from microphone loudness."""

    MUTED = "muted"
    UNMUTED = "unmuted"


class VolumeControl(Protocol):
    """Playback volume handle; 0.0 is silent, 1.0 is full."""

    def set_volume(self, level: float) -> None: ...


class VolumePropertyWriteFailure(Exception):
    """The playback side rejected or failed a volume write."""


class GateController:
    def __init__(
        self,
        volume: VolumeControl,
        threshold: float = DEFAULT_THRESHOLD,
        initial_state: GateDecision = GateDecision.UNMUTED,
        muted_level: float = 0.0,
        unmuted_level: float = 1.0,
        release_threshold: Optional[float] = None,
        hangover_blocks: int = 0,
    ):
        if threshold < 0:
            raise ValueError("threshold must be >= 0")
        if release_threshold is not None and not 0 <= release_threshold <= threshold:
            raise ValueError("Require 0 <= release_threshold <= threshold")
        for name, level in (("muted_level", muted_level), ("unmuted_level", unmuted_level)):
            if not 0.0 <= level <= 1.0:
                raise ValueError(f"{name} must be in [0.0, 1.0], got {level}")
        if hangover_blocks < 0:
            raise ValueError("hangover_blocks must be >= 0")
        self.volume = volume
        self.threshold = float(threshold)
        self.muted_level = muted_level
        self.unmuted_level = unmuted_level
        self.release_threshold = release_threshold
        self.hangover_blocks = hangover_blocks
        self._state = GateDecision(initial_state)
        self._hangover_count = 0
        self._last_loudness: Optional[float] = None
        self._blocks = 0
        self._transitions = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> GateDecision:
        return self._state

    @property
    def last_loudness(self) -> Optional[float]:
        return self._last_loudness

    @property
    def blocks(self) -> int:
        return self._blocks

    @property
    def transitions(self) -> int:
        return self._transitions

    def level_for(self, decision: GateDecision) -> float:
        if decision is GateDecision.MUTED:
            return self.muted_level
        return self.unmuted_level

    def decide(self, loudness: float) -> GateDecision:
        """Stateless rule: strictly above threshold mutes; at or below unmutes."""
        if loudness > self.threshold:
            return GateDecision.MUTED
        return GateDecision.UNMUTED

    def _next_state(self, loudness: float) -> tuple[GateDecision, int]:
        """(decision, hangover count after this block); does not touch self."""
        decision = self.decide(loudness)
        if decision is GateDecision.MUTED:
            return decision, self.hangover_blocks
        if self._state is not GateDecision.MUTED:
            return decision, self._hangover_count
        release = self.threshold if self.release_threshold is None else self.release_threshold
        if loudness > release:
            return GateDecision.MUTED, self.hangover_blocks
        if self._hangover_count > 0:
            return GateDecision.MUTED, self._hangover_count - 1
        return decision, self._hangover_count

    def update(self, loudness: float) -> GateDecision:
        """
        Decide for one block and write the matching volume level (exactly once).
        Gate state only advances once the write succeeds.
        """
        with self._lock:
            decision, hangover = self._next_state(loudness)
            level = self.level_for(decision)
            logger.debug("RMS level: %.1f (%.1f dBFS)", loudness, rms_dbfs(loudness))
            try:
                self.volume.set_volume(level)
            except Exception as e:
                raise VolumePropertyWriteFailure(f"Failed to set volume to {level}: {e}") from e
            self._hangover_count = hangover
            self._blocks += 1
            self._last_loudness = loudness
            if decision is not self._state:
                self._transitions += 1
                if decision is GateDecision.MUTED:
                    logger.info("Speech detected (RMS %.1f > %.1f), muting playback", loudness, self.threshold)
                else:
                    logger.info("No speech (RMS %.1f), resuming playback", loudness)
            self._state = decision
            return decision

    def process_block(self, samples: np.ndarray) -> GateDecision:
        return self.update(rms(samples))

    def process_bytes(self, data: Optional[BufferLike]) -> GateDecision:
        """
        Handler for one captured block of raw PCM16 bytes.
        An unreadable buffer is treated as silence, so playback continues.
        """
        try:
            loudness = rms_from_bytes(data)
        except BufferUnavailable as e:
            logger.warning("%s; treating block as silence", e)
            loudness = 0.0
        return self.update(loudness)
