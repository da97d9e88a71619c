import numpy as np
import pytest

from pixie_stitch.color.palette_loader import DMC, Palette, load_palette
from pixie_stitch.color.palette_matcher import (
    PaletteMatcher,
    color_distance,
    quantize_image,
    rgb_to_lab,
)
from pixie_stitch.core.errors import ConfigurationError
from pixie_stitch.core.types import PixelColor
from tests.utils import make_rgba_image


def test_nearest_color():
    pal = load_palette("DMC")
    c = PaletteMatcher(pal).nearest_color((0, 0, 0))
    assert pal.thread_id(c) in {"310"}  # black-like


def test_palette_has_no_duplicates_and_known_codes():
    assert len(DMC) > 400
    assert len(set(DMC.colors)) == len(DMC)
    assert DMC.thread_id(PixelColor(255, 255, 255)) is not None
    assert DMC.thread_id(PixelColor(1, 2, 3)) is None


def test_unknown_brand_is_configuration_error():
    with pytest.raises(ConfigurationError):
        load_palette("Anchor")


def test_duplicate_palette_colors_are_rejected():
    with pytest.raises(ConfigurationError):
        Palette.from_table("X", [("1", (1, 2, 3)), ("2", (1, 2, 3))])


def test_quantized_color_is_never_farther_than_any_palette_entry():
    rng = np.random.default_rng(3)
    samples = rng.integers(0, 256, size=(25, 3))
    matcher = PaletteMatcher(DMC)
    palette_lab = rgb_to_lab(DMC.rgb_array())
    for rgb in samples:
        chosen = matcher.nearest_color(tuple(int(v) for v in rgb))
        sample_lab = rgb_to_lab(np.array([rgb]))[0]
        best = np.linalg.norm(palette_lab - sample_lab, axis=1).min()
        assert color_distance(rgb, chosen.rgb) <= best + 1e-6


def test_quantization_is_idempotent_and_keeps_transparency():
    image = make_rgba_image(
        [
            [(250, 10, 10), (10, 250, 10), (0, 0, 0, 0)],
            [(123, 45, 67), (3, 3, 3, 128), (9, 9, 9, 0)],
        ]
    )
    once = quantize_image(image, DMC)
    twice = quantize_image(once, DMC)
    assert np.array_equal(once, twice)

    # transparent pixels pass through untouched, opaque ones become fully opaque palette colors
    assert tuple(once[0, 2]) == (0, 0, 0, 0)
    assert tuple(once[1, 2]) == (9, 9, 9, 0)
    assert once[1, 1, 3] == 255
    for y, x in [(0, 0), (0, 1), (1, 0), (1, 1)]:
        assert PixelColor(*once[y, x].tolist()) in DMC


def test_matches_brute_force_search_and_is_deterministic():
    rng = np.random.default_rng(11)
    samples = rng.integers(0, 256, size=(40, 3))
    matcher = PaletteMatcher(DMC)
    indices = matcher.nearest_indices(samples)
    palette_lab = rgb_to_lab(DMC.rgb_array())
    sample_lab = rgb_to_lab(samples)
    distances = np.linalg.norm(sample_lab[:, None, :] - palette_lab[None, :, :], axis=2)
    chosen = distances[np.arange(len(samples)), indices]
    assert np.allclose(chosen, distances.min(axis=1), atol=1e-6)
    assert np.array_equal(indices, matcher.nearest_indices(samples))


def test_match_does_not_depend_on_the_rest_of_the_batch():
    rng = np.random.default_rng(17)
    samples = rng.integers(0, 256, size=(30, 3))
    matcher = PaletteMatcher(DMC)
    together = matcher.nearest_indices(samples)
    alone = [int(matcher.nearest_indices(sample[None, :])[0]) for sample in samples]
    reversed_batch = matcher.nearest_indices(samples[::-1])[::-1]
    assert together.tolist() == alone
    assert np.array_equal(together, reversed_batch)
