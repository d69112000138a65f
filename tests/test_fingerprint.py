import pytest
from PIL import Image

from conftest import BLUE, GREEN, make_edge_tile, make_horizon_tile
from tilewave.enums import Direction
from tilewave.errors import InvalidConfigurationError
from tilewave.model.fingerprint import DEFAULT_FINGERPRINT_FUNC, Fingerprint, get_color_fingerprint_func


def test_fingerprints_compare_byte_wise():
    assert Fingerprint(b"d4789c1e") == Fingerprint.from_hex("d4789c1e")
    assert Fingerprint(b"d4789c1e") != Fingerprint(b"d4789c1f")
    assert len({Fingerprint(b"d4789c1e"), Fingerprint.from_hex("d4789c1e")}) == 1


def test_from_hex_keeps_the_first_eight_characters():
    assert Fingerprint.from_hex("7ed0cfd4ffff") == Fingerprint(b"7ed0cfd4")


def test_from_hex_pads_short_input():
    fingerprint = Fingerprint.from_hex("s")
    assert fingerprint.value == b"s\x00\x00\x00\x00\x00\x00\x00"
    assert str(fingerprint) == "s"


def test_str_returns_the_textual_form():
    assert str(Fingerprint.from_hex("95282254")) == "95282254"


def test_wrong_length_is_rejected():
    with pytest.raises(ValueError):
        Fingerprint(b"abc")


def test_solid_tile_has_the_same_fingerprint_on_every_edge():
    tile = Image.new("RGBA", (8, 8), BLUE)
    fingerprints = {DEFAULT_FINGERPRINT_FUNC(tile, direction) for direction in Direction}
    assert len(fingerprints) == 1


def test_fingerprint_is_deterministic_and_hex():
    tile = make_horizon_tile()
    first = DEFAULT_FINGERPRINT_FUNC(tile, Direction.LEFT)
    second = DEFAULT_FINGERPRINT_FUNC(tile.copy(), Direction.LEFT)
    assert first == second
    int(str(first), 16)


def test_matching_edges_of_different_tiles_share_a_fingerprint():
    sky = Image.new("RGBA", (8, 8), BLUE)
    horizon = make_horizon_tile()
    ground = Image.new("RGBA", (8, 8), GREEN)

    assert DEFAULT_FINGERPRINT_FUNC(sky, Direction.DOWN) == DEFAULT_FINGERPRINT_FUNC(horizon, Direction.UP)
    assert DEFAULT_FINGERPRINT_FUNC(horizon, Direction.DOWN) == DEFAULT_FINGERPRINT_FUNC(ground, Direction.UP)
    assert DEFAULT_FINGERPRINT_FUNC(horizon, Direction.LEFT) != DEFAULT_FINGERPRINT_FUNC(sky, Direction.RIGHT)


def test_edges_are_sampled_independently():
    tile = make_edge_tile((0, 0, 0, 255), up=(255, 0, 0, 255), right=(0, 0, 255, 255))
    up = DEFAULT_FINGERPRINT_FUNC(tile, Direction.UP)
    down = DEFAULT_FINGERPRINT_FUNC(tile, Direction.DOWN)
    left = DEFAULT_FINGERPRINT_FUNC(tile, Direction.LEFT)
    right = DEFAULT_FINGERPRINT_FUNC(tile, Direction.RIGHT)
    assert down == left
    assert len({up, down, right}) == 3


def test_discarded_bits_round_similar_colors_together():
    dark = Image.new("RGBA", (8, 8), (0x10, 0x20, 0x30, 0xFF))
    slightly_lighter = Image.new("RGBA", (8, 8), (0x11, 0x22, 0x33, 0xFF))

    exact = get_color_fingerprint_func(3)
    rounded = get_color_fingerprint_func(3, discard_bits=4)

    assert exact(dark, Direction.UP) != exact(slightly_lighter, Direction.UP)
    assert rounded(dark, Direction.UP) == rounded(slightly_lighter, Direction.UP)


def test_sample_count_changes_the_fingerprint():
    tile = make_horizon_tile()
    assert get_color_fingerprint_func(2)(tile, Direction.LEFT) != get_color_fingerprint_func(3)(tile, Direction.LEFT)


def test_non_rgba_images_are_converted():
    rgb_tile = Image.new("RGB", (8, 8), BLUE[:3])
    rgba_tile = Image.new("RGBA", (8, 8), BLUE)
    assert DEFAULT_FINGERPRINT_FUNC(rgb_tile, Direction.UP) == DEFAULT_FINGERPRINT_FUNC(rgba_tile, Direction.UP)


@pytest.mark.parametrize("sample_count, discard_bits", [(0, 0), (3, -1), (3, 8)])
def test_invalid_fingerprint_settings_are_rejected(sample_count, discard_bits):
    with pytest.raises(InvalidConfigurationError):
        get_color_fingerprint_func(sample_count, discard_bits)
