import logging

import numpy as np
import pytest

from terrain_synth import (
    InvalidConfigurationError,
    NoiseField,
    PixelBuffer,
    TerrainConfig,
    TerrainSynthesizer,
    octave_schedule,
    synthesize,
)
from conftest import ConstantNoise, RecordingNoise

QUANTIZED_PALETTE = {
    (0, 0, 255),
    (255, 255, 255),
    (0, 255, 0),
    (255, 0, 0),
}


def test_same_seed_and_config_is_byte_identical(small_config):
    assert synthesize(42, small_config).tobytes() == synthesize(42, small_config).tobytes()


def test_dimensions_match_config(small_config):
    buffer = synthesize(3, small_config)
    assert (buffer.width, buffer.height) == (16, 12)
    assert buffer.pixels.shape == (12, 16, 4)
    assert len(buffer) == 16 * 12
    assert len(buffer.tobytes()) == 16 * 12 * 4


@pytest.mark.parametrize("width, height", [(0, 0), (0, 7), (9, 0)])
def test_zero_dimension_gives_empty_buffer(width, height):
    buffer = synthesize(1, TerrainConfig(width=width, height=height))
    assert (buffer.width, buffer.height) == (width, height)
    assert len(buffer) == 0
    assert buffer.tobytes() == b""


def test_end_to_end_four_by_four():
    config = TerrainConfig(width=4, height=4, scale=10, octaves=1, persistence=0.5, lacunarity=2)
    buffer = synthesize(42, config)
    data = buffer.tobytes()
    assert len(data) == 64
    assert all(alpha == 255 for alpha in data[3::4])
    for i in range(0, len(data), 4):
        assert tuple(data[i:i + 3]) in QUANTIZED_PALETTE


def test_different_seeds_give_different_terrain():
    config = TerrainConfig(width=32, height=32, scale=10.0, octaves=4)
    for seed_a, seed_b in [(1, 2), (42, 43), (1000, 99999), (0, 2**32 - 1)]:
        assert synthesize(seed_a, config).tobytes() != synthesize(seed_b, config).tobytes()


def test_octave_amplitudes_decay_geometrically():
    config = TerrainConfig(octaves=6, persistence=0.3, lacunarity=2.5)
    schedule = octave_schedule(config)
    assert len(schedule) == 6
    amplitudes = [amplitude for _, amplitude in schedule]
    frequencies = [frequency for frequency, _ in schedule]
    assert amplitudes == pytest.approx([0.3 ** k for k in range(6)])
    assert frequencies == pytest.approx([2.5 ** k for k in range(6)])
    assert all(later < earlier for earlier, later in zip(amplitudes, amplitudes[1:]))


def test_octave_contributions_shrink_by_persistence():
    # With unit noise everywhere, each extra octave adds persistence**k to the sum.
    base = TerrainConfig(width=2, height=2, octaves=1, persistence=0.5)
    synthesizer = TerrainSynthesizer(ConstantNoise(1.0))
    previous = synthesizer.get_normalized_heights(base)
    for octaves in range(2, 5):
        current = synthesizer.get_normalized_heights(base.replace(octaves=octaves))
        assert np.allclose(current - previous, 0.5 ** (octaves - 1) / 2)
        previous = current


def test_sample_coordinates_follow_frequency_and_scale():
    noise = RecordingNoise()
    config = TerrainConfig(width=4, height=2, scale=8.0, octaves=3, persistence=0.5, lacunarity=3.0)
    TerrainSynthesizer(noise).get_normalized_heights(config)
    assert len(noise.calls) == 3
    first_x, first_y = noise.calls[0]
    assert first_x[0].tolist() == [-4.0, -2.0, 0.0, 2.0]
    assert first_y[:, 0].tolist() == [-4.0, 0.0]
    for k, (x, y) in enumerate(noise.calls):
        assert np.allclose(x, first_x * 3.0 ** k)
        assert np.allclose(y, first_y * 3.0 ** k)


@pytest.mark.parametrize("noise_value, expected", [
    (-1.0, (0, 0, 255, 255)),
    (-0.1, (255, 255, 255, 255)),
    (0.1, (0, 255, 0, 255)),
    (0.5, (255, 0, 0, 255)),
    (0.9, (255, 255, 255, 255)),
])
def test_injected_height_is_classified_and_quantized(noise_value, expected):
    config = TerrainConfig(width=3, height=2, octaves=1)
    buffer = TerrainSynthesizer(ConstantNoise(noise_value)).synthesize(config)
    assert {buffer.pixel(x, y) for x in range(3) for y in range(2)} == {expected}


def test_unclamped_sums_land_in_extreme_bands():
    config = TerrainConfig(width=2, height=2, octaves=3, persistence=1.0)
    high = TerrainSynthesizer(ConstantNoise(1.0))
    low = TerrainSynthesizer(ConstantNoise(-1.0))
    assert np.allclose(high.get_normalized_heights(config), 2.0)
    assert np.allclose(low.get_normalized_heights(config), -1.0)
    assert high.synthesize(config).pixel(0, 0) == (255, 255, 255, 255)
    assert low.synthesize(config).pixel(1, 1) == (0, 0, 255, 255)


def test_row_band_matches_full_grid(noise_field, small_config):
    synthesizer = TerrainSynthesizer(noise_field)
    full = synthesizer.get_normalized_heights(small_config)
    band = synthesizer.get_normalized_heights(small_config, 5, 9)
    assert np.array_equal(band, full[5:9])


def test_row_band_out_of_range(noise_field, small_config):
    with pytest.raises(ValueError):
        TerrainSynthesizer(noise_field).get_normalized_heights(small_config, 4, 13)


def test_pixel_index_is_row_major(small_config):
    buffer = synthesize(5, small_config)
    data = buffer.tobytes()
    x, y = 11, 7
    offset = (y * small_config.width + x) * 4
    assert buffer.pixel(x, y) == tuple(data[offset:offset + 4])
    with pytest.raises(IndexError):
        buffer.pixel(small_config.width, 0)


def test_buffer_is_read_only(small_config):
    buffer = synthesize(5, small_config)
    with pytest.raises(ValueError):
        buffer.pixels[0, 0, 0] = 1


def test_noise_field_is_left_untouched(noise_field, small_config):
    before = noise_field.permutation_table.copy()
    TerrainSynthesizer(noise_field).synthesize(small_config)
    assert np.array_equal(noise_field.permutation_table, before)


def test_synthesizer_matches_module_entry_point(noise_field, small_config):
    direct = TerrainSynthesizer(noise_field).synthesize(small_config)
    assert direct.tobytes() == synthesize(42, small_config).tobytes()


def test_dict_config_is_accepted():
    buffer = synthesize(8, {"width": 5, "height": 3, "octaves": 2})
    assert (buffer.width, buffer.height) == (5, 3)


def test_to_image():
    buffer = synthesize(8, TerrainConfig(width=6, height=4, octaves=2))
    image = buffer.to_image()
    assert image.mode == "RGBA"
    assert image.size == (6, 4)
    assert image.tobytes() == buffer.tobytes()


def test_pixel_buffer_rejects_bad_arrays():
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(2, 2, np.zeros((2, 2, 4), dtype=np.float64))


@pytest.mark.parametrize("seed", [-5, 2**32, 3.0])
def test_invalid_seed_rejected_before_synthesis(seed, small_config):
    with pytest.raises(InvalidConfigurationError):
        synthesize(seed, small_config)


@pytest.mark.parametrize("bad_config", [None, [16, 16], "16x16"])
def test_invalid_config_type_rejected(bad_config):
    with pytest.raises(InvalidConfigurationError):
        synthesize(1, bad_config)


@pytest.mark.parametrize("kwargs", [{"workers": 0}, {"workers": 2.0}, {"band_rows": 0}])
def test_invalid_parallel_settings_rejected(kwargs, small_config):
    with pytest.raises(InvalidConfigurationError):
        synthesize(1, small_config, **kwargs)


def test_numpy_integer_parallel_settings_accepted(small_config):
    expected = synthesize(1, small_config).tobytes()
    assert synthesize(1, small_config, workers=np.int64(1)).tobytes() == expected
    assert synthesize(1, small_config, workers=np.int32(1), band_rows=np.int64(4)).tobytes() == expected


def test_pixel_buffer_leaves_caller_array_writable():
    arr = np.zeros((1, 1, 4), dtype=np.uint8)
    buffer = PixelBuffer(1, 1, arr)
    arr[0, 0, 0] = 5
    assert buffer.pixel(0, 0) == (0, 0, 0, 0)
    with pytest.raises(ValueError):
        buffer.pixels[0, 0, 0] = 1


def test_parallel_synthesis_matches_serial():
    config = TerrainConfig(width=20, height=17, scale=12.0, octaves=5)
    serial = synthesize(2024, config)
    parallel = synthesize(2024, config, workers=2, band_rows=3)
    assert parallel.tobytes() == serial.tobytes()


def test_synthesis_is_logged(caplog, small_config):
    with caplog.at_level(logging.INFO, logger="terrain_synth"):
        synthesize(11, small_config)
    assert "Synthesized 16x12 terrain" in caplog.text
