# terrain_synth/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the terrain
synthesizer. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RUN.
Instead, pass a configuration dictionary to TerrainConfig.from_dict().
================================================================================
"""

# --- Noise Generation ---
# Seeds are unsigned 32-bit integers.
MAX_SEED = 0xFFFFFFFF
# The permutation table covers one period of the lattice.
PERMUTATION_TABLE_SIZE = 256

# --- Terrain Parameters ---
DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 512
DEFAULT_SCALE = 50.0
DEFAULT_OCTAVES = 6
DEFAULT_PERSISTENCE = 0.5
DEFAULT_LACUNARITY = 2.0
DEFAULT_PIXEL_SIZE = 1

# --- Control Ranges ---
# Inclusive (min, max) bounds of the interactive controls. A preview clamps
# incoming values to these bounds the way a slider would.
PARAMETER_RANGES = {
    "scale": (1.0, 100.0),
    "octaves": (1, 8),
    "persistence": (0.0, 1.0),
    "lacunarity": (1.0, 4.0),
    "pixel_size": (1, 16),
}

# --- Biome Levels (Normalized Height) ---
# Exclusive upper bound of each band, ascending. Anything at or above the
# last bound is snow.
TERRAIN_LEVELS = {
    "deep_water": 0.3,
    "water": 0.4,
    "sand": 0.5,
    "grass": 0.7,
    "mountain": 0.8,
}

# --- Color Quantization ---
# Number of levels applied to every biome color. Fixed at 1; the configured
# pixel_size is carried through but does not feed quantization.
QUANTIZATION_LEVELS = 1

# --- Rendering ---
OPAQUE_ALPHA = 255
# Rows per band handed to each worker process in parallel synthesis.
PARALLEL_BAND_ROWS = 64
