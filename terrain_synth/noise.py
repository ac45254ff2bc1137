# terrain_synth/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides a seeded 2D Perlin noise field. The field is built once
per seed and is read-only afterwards, so it can be shared freely between
threads or copied into worker processes.

Data Contract:
---------------
- Inputs:
    - seed: An unsigned 32-bit integer.
    - x, y: Scalars or broadcastable NumPy arrays of coordinates.
- Outputs:
    - Noise values in the range [-1, 1]; a float for scalar input, otherwise
      an array with the broadcast shape of x and y.
- Side Effects: None.
- Invariants: The same seed and coordinates always produce the same value.
  The function is continuous in x and y.
================================================================================
"""

import logging
from typing import Protocol

import numpy as np
from numba import njit

from . import config as DEFAULTS
from .terrain_config import validate_seed

# Pre-defined gradient vectors for performance.
_GRADIENT_VECTORS = np.array([[0, 1], [0, -1], [1, 0], [-1, 0]])
_TABLE_SIZE = DEFAULTS.PERMUTATION_TABLE_SIZE


class NoiseSource(Protocol):
    """
    The capability the synthesizer needs from a noise function. Any object
    with a matching `sample` method can stand in for NoiseField.
    """
    def sample(self, x, y): ...


@njit(nogil=True)
def _lerp(a, b, x):
    "Linear interpolation."
    return a + x * (b - a)

@njit(nogil=True)
def _fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit(nogil=True)
def _gradient(h, x, y):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h % 4]
    return g[0] * x + g[1] * y

@njit(nogil=True)
def _perlin_2d(p, xs, ys):
    """
    Evaluates a single octave of Perlin noise for flat coordinate arrays.
    Octave summation is left to the caller.
    """
    n = xs.shape[0]
    out = np.empty(n)
    size = _TABLE_SIZE

    for i in range(n):
        x = xs[i]
        y = ys[i]

        if not (np.isfinite(x) and np.isfinite(y)):
            out[i] = 0.0
            continue

        # Lattice coordinates stay floats; huge inputs would overflow int64.
        fx = np.floor(x)
        fy = np.floor(y)

        xf = x - fx
        yf = y - fy

        u = _fade(xf)
        v = _fade(yf)

        px0 = int(fx % size)
        px1 = (px0 + 1) % size
        py0 = int(fy % size)
        py1 = (py0 + 1) % size

        idx00 = p[p[px0] + py0]
        idx01 = p[p[px0] + py1]
        idx10 = p[p[px1] + py0]
        idx11 = p[p[px1] + py1]

        g00 = _gradient(idx00, xf, yf)
        g01 = _gradient(idx01, xf, yf - 1)
        g10 = _gradient(idx10, xf - 1, yf)
        g11 = _gradient(idx11, xf - 1, yf - 1)

        x1 = _lerp(g00, g10, u)
        x2 = _lerp(g01, g11, u)
        out[i] = _lerp(x1, x2, v)

    return out


def make_permutation_table(seed: int) -> np.ndarray:
    """
    Shuffles the lattice indices with a generator seeded from `seed` and
    doubles the table so lookups never need to wrap.
    """
    p = np.arange(DEFAULTS.PERMUTATION_TABLE_SIZE, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.concatenate([p, p])


class NoiseField:
    """
    A deterministic 2D gradient noise function for one seed.
    """
    def __init__(self, seed: int, logger: logging.Logger = None):
        self.seed = validate_seed(seed)
        logger = logger or logging.getLogger(__name__)

        table = make_permutation_table(self.seed)
        table.setflags(write=False)
        self._p = table
        logger.debug(f"Permutation table built for seed {self.seed}.")

    @property
    def permutation_table(self) -> np.ndarray:
        return self._p

    def sample(self, x, y):
        """
        Samples the noise field at (x, y).

        Args:
            x, y: Scalars or NumPy arrays. Arrays are broadcast together.

        Returns:
            A float for scalar input, otherwise a float64 array shaped like
            the broadcast inputs.
        """
        xs, ys = np.broadcast_arrays(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))
        shape = xs.shape
        values = _perlin_2d(self._p, np.ascontiguousarray(xs).ravel(), np.ascontiguousarray(ys).ravel())
        if not shape:
            return float(values[0])
        return values.reshape(shape)

    def __repr__(self):
        return f"NoiseField(seed={self.seed})"
