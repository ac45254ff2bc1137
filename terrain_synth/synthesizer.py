# terrain_synth/synthesizer.py

"""
================================================================================
CORE TERRAIN SYNTHESIZER
================================================================================
This module turns a noise field and a terrain configuration into a complete
RGBA pixel buffer: fractal octave summation, height normalization, biome
classification and color quantization.

Data Contract:
---------------
- Inputs:
    - seed (int) or a NoiseSource instance.
    - config (TerrainConfig or dict): The terrain parameters.
    - logger: An optional Python logging object for runtime messages.
- Outputs:
    - A PixelBuffer of config.width x config.height opaque RGBA pixels,
      row-major.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed and configuration, the output is
  byte-identical, whether it was computed serially or across worker
  processes.
================================================================================
"""

import os
import time
import logging
import multiprocessing
from dataclasses import dataclass

import numpy as np
from PIL import Image
from tqdm import tqdm

from . import config as DEFAULTS
from . import color_maps
from .noise import NoiseField, NoiseSource
from .terrain_config import TerrainConfig, InvalidConfigurationError, validate_seed, _is_int


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    A freshly synthesized image. `pixels` has shape (height, width, 4) and
    dtype uint8, so flat pixel index y * width + x is row-major.
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected or self.pixels.dtype != np.uint8:
            raise ValueError(
                f"Pixel array must be uint8 with shape {expected}, "
                f"got {self.pixels.dtype} {self.pixels.shape}."
            )
        pixels = np.array(self.pixels, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def empty(cls, width: int, height: int) -> "PixelBuffer":
        return cls(width, height, np.zeros((height, width, 4), dtype=np.uint8))

    def __len__(self):
        return self.width * self.height

    def tobytes(self) -> bytes:
        """Returns the row-major RGBA bytes, 4 per pixel."""
        return self.pixels.tobytes()

    def pixel(self, x: int, y: int) -> tuple:
        """Returns the RGBA tuple at column x, row y."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) is outside a {self.width}x{self.height} buffer.")
        return tuple(int(c) for c in self.pixels[y, x])

    def to_image(self) -> Image.Image:
        """Wraps the buffer in a Pillow RGBA image for display."""
        if len(self) == 0:
            return Image.new('RGBA', (self.width, self.height))
        return Image.fromarray(np.ascontiguousarray(self.pixels))


def octave_schedule(config: TerrainConfig) -> list[tuple[float, float]]:
    """
    Returns the (frequency, amplitude) pair used for each octave, built by
    repeated multiplication exactly as the summation loop applies them.
    """
    schedule = []
    amplitude = 1.0
    frequency = 1.0
    for _ in range(config.octaves):
        schedule.append((frequency, amplitude))
        amplitude *= config.persistence
        frequency *= config.lacunarity
    return schedule


def _coerce_config(config) -> TerrainConfig:
    if isinstance(config, TerrainConfig):
        return config
    if isinstance(config, dict):
        return TerrainConfig.from_dict(config)
    raise InvalidConfigurationError(
        f"Expected a TerrainConfig or dict, got {type(config).__name__}."
    )


class TerrainSynthesizer:
    """
    Produces terrain images from any NoiseSource. The synthesizer keeps no
    reference to the configs it is given and never mutates its noise source.
    """
    def __init__(self, noise_source: NoiseSource, logger: logging.Logger = None):
        """
        Initializes the synthesizer.

        Args:
            noise_source (NoiseSource): The noise function to sample.
            logger (logging.Logger, optional): The logger for all output.
        """
        self.noise_source = noise_source
        self.logger = logger or logging.getLogger(__name__)
        self._color_lut = color_maps.create_quantized_biome_color_lut(DEFAULTS.QUANTIZATION_LEVELS)

    def get_normalized_heights(self, config: TerrainConfig, row_start: int = 0, row_stop: int = None) -> np.ndarray:
        """
        Computes the normalized height of every pixel in rows
        [row_start, row_stop). The result has shape (rows, config.width).

        Heights are (sum + 1) / 2 and are not clamped, so multi-octave sums
        can fall outside [0, 1].
        """
        if row_stop is None:
            row_stop = config.height
        if not 0 <= row_start <= row_stop <= config.height:
            raise ValueError(
                f"Row range [{row_start}, {row_stop}) is outside a height of {config.height}."
            )

        # Centered unit square: [-0.5, 0.5) on both axes.
        nx = np.arange(config.width, dtype=np.float64) / config.width - 0.5
        ny = np.arange(row_start, row_stop, dtype=np.float64) / config.height - 0.5
        nx_grid, ny_grid = np.meshgrid(nx, ny)

        noise_value = np.zeros(nx_grid.shape)
        for frequency, amplitude in octave_schedule(config):
            sample_x = nx_grid * frequency * config.scale
            sample_y = ny_grid * frequency * config.scale
            noise_value += self.noise_source.sample(sample_x, sample_y) * amplitude

        return (noise_value + 1) / 2

    def colorize(self, height_values: np.ndarray) -> np.ndarray:
        """Converts normalized heights into opaque, quantized RGBA pixels."""
        biome_map = color_maps.calculate_biome_map(height_values)
        rgb = color_maps.get_terrain_color_array(biome_map, self._color_lut)
        alpha = np.full(rgb.shape[:-1] + (1,), DEFAULTS.OPAQUE_ALPHA, dtype=np.uint8)
        return np.concatenate([rgb, alpha], axis=-1)

    def synthesize(self, config) -> PixelBuffer:
        """Generates a complete PixelBuffer for `config`."""
        config = _coerce_config(config)
        if config.width == 0 or config.height == 0:
            self.logger.debug(f"Empty {config.width}x{config.height} request, returning an empty buffer.")
            return PixelBuffer.empty(config.width, config.height)

        start_time = time.perf_counter()
        pixels = self.colorize(self.get_normalized_heights(config))
        elapsed = time.perf_counter() - start_time

        self.logger.info(
            f"Synthesized {config.width}x{config.height} terrain "
            f"({config.octaves} octaves) in {elapsed:.3f} seconds."
        )
        return PixelBuffer(config.width, config.height, pixels)


# --- Global state for worker processes ---
worker_synthesizer = None

def init_worker(seed: int):
    """Builds the noise field once per worker process."""
    global worker_synthesizer
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_synthesizer = TerrainSynthesizer(NoiseField(seed, logger=worker_logger), logger=worker_logger)

def render_band(task: tuple) -> tuple:
    """Renders rows [row_start, row_stop) and returns them with their offset."""
    config, row_start, row_stop = task
    heights = worker_synthesizer.get_normalized_heights(config, row_start, row_stop)
    return row_start, worker_synthesizer.colorize(heights)


def _synthesize_parallel(seed: int, config: TerrainConfig, workers: int, band_rows: int,
                         show_progress: bool, logger: logging.Logger) -> PixelBuffer:
    tasks = [
        (config, row_start, min(row_start + band_rows, config.height))
        for row_start in range(0, config.height, band_rows)
    ]
    num_workers = min(workers, len(tasks))
    logger.info(f"Using {num_workers} worker processes for {len(tasks)} row bands.")

    start_time = time.perf_counter()
    pixels = np.empty((config.height, config.width, 4), dtype=np.uint8)
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=(seed,)) as pool:
        results_iterator = pool.imap_unordered(render_band, tasks)
        for row_start, band in tqdm(results_iterator, total=len(tasks), desc="Synthesizing Rows", disable=not show_progress):
            pixels[row_start:row_start + band.shape[0]] = band

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"Synthesized {config.width}x{config.height} terrain for seed {seed} "
        f"across {num_workers} workers in {elapsed:.3f} seconds."
    )
    return PixelBuffer(config.width, config.height, pixels)


def synthesize(seed: int, config, logger: logging.Logger = None, workers: int = 1,
               band_rows: int = DEFAULTS.PARALLEL_BAND_ROWS, show_progress: bool = False) -> PixelBuffer:
    """
    Full regeneration entry point.

    Args:
        seed (int): Unsigned 32-bit seed selecting the noise field.
        config (TerrainConfig or dict): The terrain parameters.
        logger (logging.Logger, optional): The logger for all output.
        workers (int, optional): Worker processes to spread rows across.
            None uses all but one CPU. 1 (the default) stays in-process.
        band_rows (int, optional): Rows per task in the parallel path.
        show_progress (bool, optional): Show a tqdm bar in the parallel path.

    Raises:
        InvalidConfigurationError: If the seed, config or worker settings are
            rejected. Nothing is computed in that case.
    """
    logger = logger or logging.getLogger(__name__)
    seed = validate_seed(seed)
    config = _coerce_config(config)

    if workers is None:
        workers = max(1, multiprocessing.cpu_count() - 1)
    if not _is_int(workers) or workers < 1:
        raise InvalidConfigurationError(f"'workers' must be a positive integer, got {workers!r}.")
    workers = int(workers)
    if not _is_int(band_rows) or band_rows < 1:
        raise InvalidConfigurationError(f"'band_rows' must be a positive integer, got {band_rows!r}.")
    band_rows = int(band_rows)

    if workers > 1 and config.width > 0 and config.height > band_rows:
        return _synthesize_parallel(seed, config, workers, band_rows, show_progress, logger)

    return TerrainSynthesizer(NoiseField(seed, logger=logger), logger=logger).synthesize(config)
