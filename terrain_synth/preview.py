# terrain_synth/preview.py

"""
================================================================================
TERRAIN PREVIEW STATE
================================================================================
The caller-side state holder for interactive use. It owns the mutable copy of
the configuration and seed, regenerates the terrain whenever either changes,
and always keeps the last successfully generated buffer so a rejected update
never leaves a display without an image.

Rendering to a window is left to whatever presentation layer drives this
object; it only needs `preview.buffer.to_image()` or `preview.buffer.tobytes()`.
================================================================================
"""

import logging

from . import config as DEFAULTS
from .synthesizer import PixelBuffer, synthesize
from .terrain_config import TerrainConfig, InvalidConfigurationError, random_seed, validate_seed


def clamp_to_ranges(changes: dict) -> dict:
    """Clamps slider-controlled parameters to their control ranges."""
    clamped = dict(changes)
    for name, (low, high) in DEFAULTS.PARAMETER_RANGES.items():
        value = clamped.get(name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            clamped[name] = min(max(value, low), high)
    return clamped


class TerrainPreview:
    """The application state for a live terrain preview."""

    def __init__(self, config: TerrainConfig = None, seed: int = None, logger: logging.Logger = None):
        """
        Initializes the preview and generates the first buffer.

        Args:
            config (TerrainConfig, optional): Starting parameters. Defaults apply if None.
            seed (int, optional): Starting seed. A random seed is drawn if None.
            logger (logging.Logger, optional): The logger for all output.
        """
        self.logger = logger or logging.getLogger(__name__)
        self._config = config if config is not None else TerrainConfig()
        self._seed = validate_seed(seed) if seed is not None else random_seed()
        self._buffer = None
        self.logger.info(f"TerrainPreview initialized with seed: {self._seed}")
        self.regenerate()

    @property
    def config(self) -> TerrainConfig:
        return self._config

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def buffer(self) -> PixelBuffer:
        return self._buffer

    def regenerate(self) -> PixelBuffer:
        """Synthesizes a new buffer from the current seed and config."""
        self._buffer = synthesize(self._seed, self._config, logger=self.logger)
        return self._buffer

    def update(self, **changes) -> PixelBuffer:
        """
        Applies parameter changes and regenerates. Slider-controlled values
        are clamped to their ranges first.

        Raises:
            InvalidConfigurationError: If the changes are rejected. The
                previous config and buffer stay in place.
        """
        try:
            new_config = self._config.replace(**clamp_to_ranges(changes))
        except InvalidConfigurationError as e:
            self.logger.error(f"Rejected terrain update {changes}: {e}. Keeping the previous terrain.")
            raise

        self._buffer = synthesize(self._seed, new_config, logger=self.logger)
        self._config = new_config
        return self._buffer

    def new_seed(self) -> PixelBuffer:
        """Draws a fresh random seed and regenerates."""
        self._seed = random_seed()
        self.logger.info(f"New seed: {self._seed}")
        return self.regenerate()
