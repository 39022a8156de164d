"""Gate and pipeline configuration (defaults match the single-threshold policy)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .gate import DEFAULT_THRESHOLD, GateController, GateDecision, VolumeControl

DEFAULT_URI = "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3"


@dataclass
class GateParams:
    """Parameters for the speech gate and the capture/playback pipelines."""

    # Gate (raw 16-bit RMS units; loudness > threshold -> mute)
    threshold: float = DEFAULT_THRESHOLD
    # Debounce, off by default: unmute only at/below release_threshold, after hangover quiet blocks
    release_threshold: Optional[float] = None
    hangover_blocks: int = 0
    initial_state: str = "unmuted"
    muted_volume: float = 0.0
    unmuted_volume: float = 1.0
    # Playback
    uri: str = DEFAULT_URI
    duration_s: float = 5.0  # 0 = run until SIGINT/SIGTERM
    # Capture
    mic_device: Optional[str] = None  # pulsesrc device name; None = default source
    mic_gain: float = 1.0
    sample_rate: int = 16000
    block_ms: float = 20.0

    @property
    def block_samples(self) -> int:
        return max(1, int(self.sample_rate * self.block_ms / 1000.0))

    @property
    def initial_decision(self) -> GateDecision:
        return GateDecision(self.initial_state)

    def validate(self) -> None:
        if self.threshold < 0:
            raise ValueError("threshold must be >= 0.")
        if self.release_threshold is not None and not 0 <= self.release_threshold <= self.threshold:
            raise ValueError("Require 0 <= release_threshold <= threshold.")
        if self.hangover_blocks < 0:
            raise ValueError("hangover_blocks must be >= 0.")
        if self.initial_state not in {d.value for d in GateDecision}:
            raise ValueError(f"initial_state must be 'muted' or 'unmuted', got {self.initial_state!r}.")
        for name in ("muted_volume", "unmuted_volume"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0.0, 1.0], got {value}.")
        if self.sample_rate <= 0 or self.block_ms <= 0:
            raise ValueError("Require sample_rate > 0 and block_ms > 0.")
        if self.duration_s < 0:
            raise ValueError("duration_s must be >= 0.")
        if self.mic_gain < 0:
            raise ValueError("mic_gain must be >= 0.")

    def make_controller(self, volume: VolumeControl) -> GateController:
        return GateController(
            volume,
            threshold=self.threshold,
            initial_state=self.initial_decision,
            muted_level=self.muted_volume,
            unmuted_level=self.unmuted_volume,
            release_threshold=self.release_threshold,
            hangover_blocks=self.hangover_blocks,
        )
