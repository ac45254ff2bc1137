import numpy as np
import pytest

from terrain_synth import NoiseField, TerrainConfig


class ConstantNoise:
    """A noise source that returns the same value everywhere."""
    def __init__(self, value):
        self.value = value

    def sample(self, x, y):
        return np.full(np.shape(x), self.value, dtype=np.float64)


class RecordingNoise:
    """A noise source that records every coordinate grid it is asked for."""
    def __init__(self, value=0.0):
        self.value = value
        self.calls = []

    def sample(self, x, y):
        self.calls.append((np.array(x), np.array(y)))
        return np.full(np.shape(x), self.value, dtype=np.float64)


@pytest.fixture
def small_config():
    return TerrainConfig(width=16, height=12, scale=10.0, octaves=4, persistence=0.5, lacunarity=2.0)


@pytest.fixture
def noise_field():
    return NoiseField(42)
