# speechgate: mute URL playback while the microphone hears speech

from .config import GateParams
from .loudness import BufferUnavailable, block_from_bytes, rms, rms_from_bytes
from .gate import GateController, GateDecision, VolumeControl, VolumePropertyWriteFailure
from .streaming import StreamingChunker
from .audio import load_pcm16, save_pcm16
from .replay import RecordingVolume, replay_file

__all__ = [
    "GateParams",
    "BufferUnavailable",
    "block_from_bytes",
    "rms",
    "rms_from_bytes",
    "GateController",
    "GateDecision",
    "VolumeControl",
    "VolumePropertyWriteFailure",
    "StreamingChunker",
    "load_pcm16",
    "save_pcm16",
    "RecordingVolume",
    "replay_file",
]
