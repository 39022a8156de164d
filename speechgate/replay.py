"""
Offline replay: run a recorded signal through the gate block by block,
exactly as a live capture source would deliver it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path

import numpy as np

from .audio import load_pcm16
from .config import GateParams
from .gate import GateDecision
from .loudness import rms
from .streaming import StreamingChunker


class RecordingVolume:
    """VolumeControl that remembers every write instead of touching a device."""

    def __init__(self):
        self.levels: list[float] = []

    def set_volume(self, level: float) -> None:
        self.levels.append(level)

    @property
    def current(self):
        return self.levels[-1] if self.levels else None


@dataclass
class BlockResult:
    index: int
    start_s: float
    loudness: float
    decision: GateDecision
    volume: float


@dataclass
class ReplayReport:
    sample_rate: int
    block_samples: int
    threshold: float
    blocks: list[BlockResult] = field(default_factory=list)
    transitions: int = 0

    @property
    def muted_ratio(self) -> float:
        if not self.blocks:
            return 0.0
        muted = sum(1 for b in self.blocks if b.decision is GateDecision.MUTED)
        return muted / len(self.blocks)

    @property
    def peak_loudness(self) -> float:
        return max((b.loudness for b in self.blocks), default=0.0)

    def to_dict(self) -> dict:
        return {
            "sample_rate": self.sample_rate,
            "block_samples": self.block_samples,
            "threshold": self.threshold,
            "transitions": self.transitions,
            "muted_ratio": round(self.muted_ratio, 4),
            "peak_loudness": round(self.peak_loudness, 2),
            "blocks": [
                {**asdict(b), "decision": b.decision.value, "loudness": round(b.loudness, 2)}
                for b in self.blocks
            ],
        }


def replay_samples(samples: np.ndarray, sr: int, params: GateParams) -> ReplayReport:
    """Gate an int16 signal at rate sr using params.block_ms blocks."""
    chunker = StreamingChunker(sr, params.block_ms)
    volume = RecordingVolume()
    controller = params.make_controller(volume)
    report = ReplayReport(
        sample_rate=sr,
        block_samples=chunker.block_samples,
        threshold=params.threshold,
    )
    for i, (block, start, _end) in enumerate(chunker.chunk(samples)):
        loudness = rms(block)
        decision = controller.update(loudness)
        report.blocks.append(
            BlockResult(
                index=i,
                start_s=start / sr,
                loudness=loudness,
                decision=decision,
                volume=volume.current,
            )
        )
    report.transitions = controller.transitions
    return report


def replay_file(path: str | Path, params: GateParams) -> ReplayReport:
    """Load a WAV at params.sample_rate and gate it."""
    samples = load_pcm16(path, params.sample_rate)
    return replay_samples(samples, params.sample_rate, params)
