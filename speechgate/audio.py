"""Audio I/O: load/save PCM16 WAV, resample, float <-> int16 conversion."""

from __future__ import annotations

from pathlib import Path

import librosa
import numpy as np
import soundfile as sf

from .loudness import PCM16_FULL_SCALE


def pcm16_to_float(samples: np.ndarray) -> np.ndarray:
    """int16 -> float32 in [-1, 1)."""
    return (np.asarray(samples, dtype=np.float32) / PCM16_FULL_SCALE).astype(np.float32)


def float_to_pcm16(audio: np.ndarray) -> np.ndarray:
    """float in [-1, 1] -> int16, clipped (no wraparound on overs)."""
    scaled = np.round(np.asarray(audio, dtype=np.float64) * PCM16_FULL_SCALE)
    return np.clip(scaled, -32768, 32767).astype(np.int16)


def resample(samples: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """Resample PCM16 to target_sr using librosa."""
    if orig_sr == target_sr:
        return samples
    wav = librosa.resample(
        pcm16_to_float(samples).astype(np.float64),
        orig_sr=orig_sr,
        target_sr=target_sr,
        res_type="soxr_hq",
    )
    return float_to_pcm16(wav)


def load_pcm16(path: str | Path, sr: int, mono: bool = True) -> np.ndarray:
    """
    Load audio as int16 at target sample rate.
    Downmixes to mono by averaging channels; no normalization (RMS must stay in raw units).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    samples, file_sr = sf.read(path, dtype="int16", always_2d=True)
    if mono:
        samples = samples.astype(np.int32).mean(axis=1).round().astype(np.int16)
    elif samples.shape[1] == 1:
        samples = samples[:, 0]
    else:
        samples = samples.reshape(-1)  # interleaved
        if file_sr != sr:
            raise ValueError("Resampling is only supported for mono input.")
    if file_sr != sr:
        samples = resample(samples, file_sr, sr)
    return samples


def save_pcm16(path: str | Path, samples: np.ndarray, sr: int) -> None:
    """Write int16 samples to a PCM_16 WAV at sample rate sr."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(path, np.asarray(samples, dtype=np.int16), sr, subtype="PCM_16")
