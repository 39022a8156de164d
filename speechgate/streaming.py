"""
Capture-shaped blocking of a long PCM16 signal.
Non-overlapping fixed blocks, the size a live source would deliver.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np


class StreamingChunker:
    """
    Yields consecutive blocks of block_ms.
    The last block may be short; it is not zero-padded since padding changes RMS.
    """

    def __init__(self, sr: int, block_ms: float = 20.0):
        self.sr = sr
        self.block_ms = block_ms
        self.block_samples = max(1, int(sr * block_ms / 1000.0))

    def chunk(self, samples: np.ndarray) -> Iterator[tuple[np.ndarray, int, int]]:
        """Yield (block, start_sample, end_sample) in arrival order."""
        n = len(samples)
        for start in range(0, n, self.block_samples):
            end = min(start + self.block_samples, n)
            yield samples[start:end], start, end

    def num_blocks(self, n_samples: int) -> int:
        return (n_samples + self.block_samples - 1) // self.block_samples
