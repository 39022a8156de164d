import math
import struct

import numpy as np
import pytest

from speechgate.loudness import (
    BufferUnavailable,
    block_from_bytes,
    rms,
    rms_dbfs,
    rms_from_bytes,
)


@pytest.mark.parametrize("n", [0, 1, 7, 1000])
def test_all_zero_blocks_are_silent(n):
    assert rms(np.zeros(n, dtype=np.int16)) == 0.0


def test_empty_block_is_zero_not_an_error():
    assert rms(np.array([], dtype=np.int16)) == 0.0
    assert rms_from_bytes(b"") == 0.0


@pytest.mark.parametrize("value", [1, 5000, -5000, 32767, -32768])
def test_constant_block_equals_magnitude(value, constant_block):
    assert rms(constant_block(value)) == pytest.approx(abs(value))


def test_order_independent():
    rng = np.random.default_rng(0)
    block = rng.integers(-32768, 32768, size=512, dtype=np.int16)
    shuffled = rng.permutation(block)
    assert rms(block) == pytest.approx(rms(shuffled), rel=1e-12)


def test_scaling_scales_loudness():
    block = np.array([100, -200, 300, -400, 0, 50], dtype=np.int16)
    k = 7
    assert rms(block * k) == pytest.approx(k * rms(block))


def test_full_scale_does_not_overflow():
    block = np.full(100_000, -32768, dtype=np.int16)
    assert rms(block) == pytest.approx(32768.0)


def test_known_value():
    block = np.array([3, 4], dtype=np.int16)
    assert rms(block) == pytest.approx(math.sqrt((9 + 16) / 2))


def test_block_from_bytes_little_endian():
    data = struct.pack("<3h", 1, -2, 32767)
    block = block_from_bytes(data)
    assert block.tolist() == [1, -2, 32767]


def test_block_from_bytes_drops_trailing_odd_byte():
    data = struct.pack("<2h", 10, -10) + b"\x7f"
    assert block_from_bytes(data).tolist() == [10, -10]
    assert block_from_bytes(b"\x01").size == 0


def test_block_from_memoryview():
    data = bytearray(struct.pack("<2h", 1000, -1000))
    assert rms_from_bytes(memoryview(data)) == pytest.approx(1000.0)


def test_unmappable_buffer_raises():
    with pytest.raises(BufferUnavailable):
        block_from_bytes(None)
    with pytest.raises(BufferUnavailable):
        rms_from_bytes(None)


def test_rms_dbfs():
    assert rms_dbfs(0.0) == -100.0
    assert rms_dbfs(32768.0) == pytest.approx(0.0)
    assert rms_dbfs(16384.0) == pytest.approx(-6.0206, abs=1e-3)


def test_strided_memoryview_is_decoded_in_order():
    samples = np.array([100, 7, -200, 7, 300, 7], dtype=np.int16)
    strided = memoryview(samples)[::2]
    assert not strided.c_contiguous
    assert block_from_bytes(strided).tolist() == [100, -200, 300]


def test_unreadable_object_raises_buffer_unavailable():
    with pytest.raises(BufferUnavailable):
        block_from_bytes(12345)
