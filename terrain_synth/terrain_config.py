# terrain_synth/terrain_config.py

"""
================================================================================
TERRAIN CONFIGURATION SNAPSHOT
================================================================================
This module defines the immutable configuration consumed by each synthesis
call, together with seed validation and JSON config loading.

Data Contract:
---------------
- Inputs:
    - A user dictionary (or JSON file) overriding the internal defaults.
- Outputs:
    - A frozen, validated TerrainConfig.
- Side Effects: None (load_config reads a file).
- Invariants: A TerrainConfig that exists is valid. Invalid values raise
  InvalidConfigurationError at construction time, before any computation.
================================================================================
"""

import json
import numbers
import dataclasses
from dataclasses import dataclass

import numpy as np

from . import config as DEFAULTS


class InvalidConfigurationError(ValueError):
    """Raised when a configuration or seed is rejected before synthesis."""


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def validate_seed(seed) -> int:
    """Checks that a seed is an unsigned 32-bit integer and returns it as int."""
    if not _is_int(seed):
        raise InvalidConfigurationError(f"Seed must be an integer, got {seed!r}.")
    if not 0 <= seed <= DEFAULTS.MAX_SEED:
        raise InvalidConfigurationError(
            f"Seed must be in [0, {DEFAULTS.MAX_SEED}], got {seed}."
        )
    return int(seed)


def random_seed() -> int:
    """Draws a fresh, uniformly random unsigned 32-bit seed."""
    rng = np.random.default_rng()
    return int(rng.integers(0, DEFAULTS.MAX_SEED, endpoint=True))


@dataclass(frozen=True)
class TerrainConfig:
    """
    An immutable snapshot of the terrain parameters.

    Attributes:
        width (int): Output width in pixels. Zero yields an empty buffer.
        height (int): Output height in pixels. Zero yields an empty buffer.
        scale (float): Base noise frequency across the image.
        octaves (int): Number of noise layers summed.
        persistence (float): Amplitude decay per octave, in [0, 1].
        lacunarity (float): Frequency growth per octave, at least 1.
        pixel_size (int): Requested quantization level count. Currently inert.
    """
    width: int = DEFAULTS.DEFAULT_WIDTH
    height: int = DEFAULTS.DEFAULT_HEIGHT
    scale: float = DEFAULTS.DEFAULT_SCALE
    octaves: int = DEFAULTS.DEFAULT_OCTAVES
    persistence: float = DEFAULTS.DEFAULT_PERSISTENCE
    lacunarity: float = DEFAULTS.DEFAULT_LACUNARITY
    pixel_size: int = DEFAULTS.DEFAULT_PIXEL_SIZE

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not _is_int(value) or value < 0:
                raise InvalidConfigurationError(
                    f"'{name}' must be a non-negative integer, got {value!r}."
                )
        if not _is_int(self.octaves) or self.octaves < 1:
            raise InvalidConfigurationError(
                f"'octaves' must be an integer >= 1, got {self.octaves!r}."
            )
        if not _is_int(self.pixel_size) or self.pixel_size < 1:
            raise InvalidConfigurationError(
                f"'pixel_size' must be an integer >= 1, got {self.pixel_size!r}."
            )
        for name in ("scale", "persistence", "lacunarity"):
            value = getattr(self, name)
            if not _is_real(value) or not np.isfinite(value):
                raise InvalidConfigurationError(
                    f"'{name}' must be a finite number, got {value!r}."
                )
        if self.scale <= 0:
            raise InvalidConfigurationError(f"'scale' must be positive, got {self.scale}.")
        if not 0.0 <= self.persistence <= 1.0:
            raise InvalidConfigurationError(
                f"'persistence' must be in [0, 1], got {self.persistence}."
            )
        if self.lacunarity < 1.0:
            raise InvalidConfigurationError(
                f"'lacunarity' must be >= 1, got {self.lacunarity}."
            )

    @classmethod
    def from_dict(cls, config: dict) -> "TerrainConfig":
        """
        Builds a config from a user dictionary, falling back to the internal
        defaults for any key that is not provided.
        """
        known = {field.name for field in dataclasses.fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise InvalidConfigurationError(f"Unknown terrain parameters: {', '.join(unknown)}")

        return cls(
            width=config.get('width', DEFAULTS.DEFAULT_WIDTH),
            height=config.get('height', DEFAULTS.DEFAULT_HEIGHT),
            scale=config.get('scale', DEFAULTS.DEFAULT_SCALE),
            octaves=config.get('octaves', DEFAULTS.DEFAULT_OCTAVES),
            persistence=config.get('persistence', DEFAULTS.DEFAULT_PERSISTENCE),
            lacunarity=config.get('lacunarity', DEFAULTS.DEFAULT_LACUNARITY),
            pixel_size=config.get('pixel_size', DEFAULTS.DEFAULT_PIXEL_SIZE),
        )

    def replace(self, **changes) -> "TerrainConfig":
        """Returns a new, re-validated snapshot with the given fields changed."""
        try:
            return dataclasses.replace(self, **changes)
        except TypeError as e:
            raise InvalidConfigurationError(str(e)) from e

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


def load_config(path: str, section: str = "terrain_parameters") -> TerrainConfig:
    """
    Loads a TerrainConfig from a JSON file. If the document has a top-level
    `section` key, only that object is used; otherwise the whole document is.
    """
    with open(path, 'r') as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidConfigurationError(f"Error decoding JSON from {path}: {e}") from e

    if not isinstance(document, dict):
        raise InvalidConfigurationError(f"Expected a JSON object in {path}.")

    params = document.get(section, document)
    if not isinstance(params, dict):
        raise InvalidConfigurationError(f"Section '{section}' in {path} must be a JSON object.")
    return TerrainConfig.from_dict(params)
