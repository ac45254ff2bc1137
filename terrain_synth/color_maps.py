# terrain_synth/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the biome constants and the functions that turn
normalized heights into RGB colors, plus the channel quantization applied to
every biome color.

It is a pure, stateless utility. Thresholds and colors are fixed constants
and do not depend on the terrain configuration.
================================================================================
"""
import numpy as np

from . import config as DEFAULTS
from .terrain_config import InvalidConfigurationError

# --- Biome ID Constants ---
BIOME_ID_DEEP_WATER = 0
BIOME_ID_WATER = 1
BIOME_ID_SAND = 2
BIOME_ID_GRASS = 3
BIOME_ID_MOUNTAIN = 4
BIOME_ID_SNOW = 5

BIOME_NAMES = ("deep_water", "water", "sand", "grass", "mountain", "snow")

# --- Default Color Mappings ---
COLOR_MAP_TERRAIN = {
    "deep_water": (0, 0, 255),
    "water": (65, 105, 225),
    "sand": (210, 180, 140),
    "grass": (34, 139, 34),
    "mountain": (139, 69, 19),
    "snow": (255, 255, 255),
}


# --- Color Lookup Table (LUT) Generation ---
def create_biome_color_lut() -> np.ndarray:
    """Creates a LUT where the index is the Biome ID and the value is the RGB color."""
    return np.array([COLOR_MAP_TERRAIN[name] for name in BIOME_NAMES], dtype=np.uint8)


def create_quantized_biome_color_lut(levels: int = DEFAULTS.QUANTIZATION_LEVELS) -> np.ndarray:
    """Creates the biome LUT with every color already quantized to `levels`."""
    return quantize_colors(create_biome_color_lut(), levels)


# --- Quantization ---
def quantize_colors(colors: np.ndarray, levels: int) -> np.ndarray:
    """
    Reduces each channel to multiples of `255 // levels`, rounding half away
    from zero and clamping to [0, 255].

    At levels=1 the step is 255, so every channel snaps to 0 or 255.

    Raises:
        InvalidConfigurationError: If `levels` is not a positive integer.
    """
    if isinstance(levels, bool) or not isinstance(levels, (int, np.integer)) or levels < 1:
        raise InvalidConfigurationError(
            f"Quantization levels must be a positive integer, got {levels!r}."
        )
    step = 255 // int(levels)
    values = np.asarray(colors, dtype=np.float32)
    stepped = np.floor(values / step + 0.5) * step
    return np.clip(stepped, 0, 255).astype(np.uint8)


def quantize_color(color: tuple, levels: int) -> tuple:
    """Quantizes a single RGB triple. See quantize_colors."""
    return tuple(int(c) for c in quantize_colors(np.array(color), levels))


# --- Biome & Color Array Generation Functions ---
def calculate_biome_map(height_values: np.ndarray) -> np.ndarray:
    """
    Classifies normalized heights into biome IDs.

    Each band is right-open and tested in ascending order, so heights below
    0 land in deep water and heights at or above the last level are snow.
    Heights are not clamped first.
    """
    levels = DEFAULTS.TERRAIN_LEVELS
    heights = np.asarray(height_values)
    conditions = [
        heights < levels["deep_water"],
        heights < levels["water"],
        heights < levels["sand"],
        heights < levels["grass"],
        heights < levels["mountain"],
    ]
    choices = [BIOME_ID_DEEP_WATER, BIOME_ID_WATER, BIOME_ID_SAND, BIOME_ID_GRASS, BIOME_ID_MOUNTAIN]
    return np.select(conditions, choices, default=BIOME_ID_SNOW).astype(np.uint8)


def get_terrain_color_array(biome_map: np.ndarray, biome_lut: np.ndarray) -> np.ndarray:
    """
    Converts an integer biome map into an RGB color array using a
    pre-computed lookup table. The output keeps the (rows, cols) layout of
    the input with a trailing channel axis.
    """
    return biome_lut[biome_map]


def get_biome_colors(height_values: np.ndarray) -> np.ndarray:
    """Maps normalized heights straight to their unquantized biome colors."""
    return get_terrain_color_array(calculate_biome_map(height_values), create_biome_color_lut())
