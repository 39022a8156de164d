import numpy as np
import pytest

from speechgate.gate import DEFAULT_THRESHOLD
from speechgate.meter import LevelStats, MicMeter, suggest_threshold


def _stats(values):
    s = LevelStats()
    for v in values:
        s.add(v)
    return s


def test_level_stats():
    s = _stats([100.0, 200.0, 300.0])
    assert s.count == 3
    assert s.mean == pytest.approx(200.0)
    assert s.peak == 300.0
    assert s.percentile(50) == pytest.approx(200.0)


def test_empty_stats():
    s = LevelStats()
    assert s.mean == 0.0
    assert s.peak == 0.0
    assert s.percentile(95) == 0.0


def test_suggest_threshold_midpoint():
    ambient = _stats([200.0] * 20)
    speech = _stats([6000.0] * 20)
    assert suggest_threshold(ambient, speech) == pytest.approx(3100.0)


def test_suggest_threshold_falls_back(caplog):
    ambient = _stats([5000.0] * 10)
    speech = _stats([4000.0] * 10)
    with caplog.at_level("WARNING"):
        assert suggest_threshold(ambient, speech) == DEFAULT_THRESHOLD
    assert "keeping default threshold" in caplog.text
    assert suggest_threshold(ambient, LevelStats()) == DEFAULT_THRESHOLD


def test_mic_callback_queues_block_rms():
    meter = MicMeter(sr=16000, block_ms=20.0)
    assert meter.block_samples == 320
    indata = np.full((320, 1), -3000, dtype=np.int16)
    meter._callback(indata, 320, None, None)
    assert meter._q.get_nowait() == pytest.approx(3000.0)
