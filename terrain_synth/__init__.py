# terrain_synth/__init__.py

# Public API of the terrain synthesizer.

from .terrain_config import (
    TerrainConfig,
    InvalidConfigurationError,
    load_config,
    random_seed,
    validate_seed,
)
from .noise import NoiseField, NoiseSource
from .synthesizer import PixelBuffer, TerrainSynthesizer, octave_schedule, synthesize
from .preview import TerrainPreview
from .logging_setup import setup_logging

__all__ = [
    "TerrainConfig",
    "InvalidConfigurationError",
    "load_config",
    "random_seed",
    "validate_seed",
    "NoiseField",
    "NoiseSource",
    "PixelBuffer",
    "TerrainSynthesizer",
    "octave_schedule",
    "synthesize",
    "TerrainPreview",
    "setup_logging",
]
