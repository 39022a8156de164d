import numpy as np
import pytest

from speechgate.replay import RecordingVolume


@pytest.fixture
def volume():
    return RecordingVolume()


@pytest.fixture
def constant_block():
    def make(value: int, n: int = 1000) -> np.ndarray:
        return np.full(n, value, dtype=np.int16)

    return make
