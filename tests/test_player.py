import struct

import pytest

try:
    from speechgate import player
except (ImportError, ValueError):
    pytest.skip("GStreamer Python bindings not available", allow_module_level=True)

from speechgate.gate import GateController, GateDecision
from speechgate.replay import RecordingVolume


class FakePlaybin:
    def __init__(self):
        self.props = {"volume": 1.0}

    def set_property(self, name, value):
        self.props[name] = value

    def get_property(self, name):
        return self.props[name]


class FakeMapInfo:
    def __init__(self, data):
        self.data = data


class FakeBuffer:
    def __init__(self, data):
        self._data = data
        self.flags = None
        self.unmapped = 0

    def map(self, flags):
        self.flags = flags
        return True, FakeMapInfo(self._data)

    def unmap(self, info):
        self.unmapped += 1


class FakeInfo:
    def __init__(self, buffer):
        self._buffer = buffer

    def get_buffer(self):
        return self._buffer


class FakePad:
    def __init__(self):
        self.mask = None
        self.probe = None

    def add_probe(self, mask, callback):
        self.mask = mask
        self.probe = callback
        return 1


class FakeLevel:
    def __init__(self):
        self.pad = FakePad()

    def get_static_pad(self, name):
        assert name == "src"
        return self.pad


def test_playbin_volume_writes_property():
    playbin = FakePlaybin()
    vol = player.PlaybinVolume(playbin)
    vol.set_volume(0)
    assert playbin.props["volume"] == 0.0
    assert vol.get_volume() == 0.0


def test_level_probe_maps_read_only_and_returns_ok():
    level = FakeLevel()
    vol = RecordingVolume()
    gate = GateController(vol)
    assert player.attach_level_probe(level, gate) == 1
    assert level.pad.mask == player.Gst.PadProbeType.BUFFER

    buf = FakeBuffer(struct.pack("<2h", 15000, -15000))
    ret = level.pad.probe(level.pad, FakeInfo(buf))
    assert ret == player.Gst.PadProbeReturn.OK
    assert buf.flags == player.Gst.MapFlags.READ
    assert gate.state is GateDecision.MUTED
    assert buf.unmapped == 1


def test_level_probe_returns_ok_without_buffer():
    level = FakeLevel()
    vol = RecordingVolume()
    player.attach_level_probe(level, GateController(vol))
    assert level.pad.probe(level.pad, FakeInfo(None)) == player.Gst.PadProbeReturn.OK
    assert vol.levels == []


def test_make_element_missing_plugin():
    with pytest.raises(RuntimeError):
        player.make_element("no-such-element-factory")
