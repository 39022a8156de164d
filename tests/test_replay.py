import json

import numpy as np

from speechgate.audio import save_pcm16
from speechgate.config import GateParams
from speechgate.gate import GateDecision
from speechgate.replay import RecordingVolume, replay_file, replay_samples


def _speech_burst(sr=16000):
    # 100 ms quiet, 100 ms loud, 100 ms quiet
    quiet = np.full(sr // 10, 500, dtype=np.int16)
    loud = np.full(sr // 10, 15000, dtype=np.int16)
    return np.concatenate([quiet, loud, quiet])


def test_recording_volume():
    vol = RecordingVolume()
    assert vol.current is None
    vol.set_volume(0.0)
    vol.set_volume(1.0)
    assert vol.levels == [0.0, 1.0]
    assert vol.current == 1.0


def test_replay_mutes_during_burst():
    report = replay_samples(_speech_burst(), 16000, GateParams())
    decisions = [b.decision for b in report.blocks]
    assert len(decisions) == 15
    assert decisions[:5] == [GateDecision.UNMUTED] * 5
    assert decisions[5:10] == [GateDecision.MUTED] * 5
    assert decisions[10:] == [GateDecision.UNMUTED] * 5
    assert [b.volume for b in report.blocks[4:6]] == [1.0, 0.0]
    assert report.transitions == 2
    assert report.muted_ratio == 5 / 15
    assert report.peak_loudness == 15000.0
    assert report.blocks[5].start_s == 0.1


def test_replay_with_hangover():
    report = replay_samples(_speech_burst(), 16000, GateParams(hangover_blocks=3))
    muted = sum(1 for b in report.blocks if b.decision is GateDecision.MUTED)
    assert muted == 8


def test_replay_empty_signal():
    report = replay_samples(np.zeros(0, dtype=np.int16), 16000, GateParams())
    assert report.blocks == []
    assert report.muted_ratio == 0.0
    assert report.peak_loudness == 0.0


def test_replay_file_and_report_json(tmp_path):
    path = tmp_path / "room.wav"
    save_pcm16(path, _speech_burst(), 16000)
    report = replay_file(path, GateParams())
    d = report.to_dict()
    json.dumps(d)
    assert d["transitions"] == 2
    assert d["blocks"][5]["decision"] == "muted"
    assert d["blocks"][5]["volume"] == 0.0
    assert len(d["blocks"]) == 15
