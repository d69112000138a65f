"""Shared pytest fixtures for tilewave tests."""

from __future__ import annotations

import logging

import pytest
from PIL import Image

from tilewave.constants import LOGGER_NAME
from tilewave.enums import Direction
from tilewave.model.fingerprint import Fingerprint
from tilewave.model.module_catalog import ModuleCatalog


# =============================================================================
# Label tiles
# =============================================================================
#
# A label tile is a tuple of four short edge labels (up, down, left, right). The label fingerprint function turns each
# label into a fingerprint, so tests can spell out adjacency directly.

SKY = ("s", "s", "s", "s")
GROUND = ("g", "g", "g", "g")
HORIZON = ("s", "g", "h", "h")


def label_fingerprint(tile: tuple[str, str, str, str], direction: Direction) -> Fingerprint:
    return Fingerprint.from_hex(tile[direction.value])


@pytest.fixture
def fingerprint_func():
    return label_fingerprint


@pytest.fixture
def single_catalog() -> ModuleCatalog:
    """One module that borders itself on every side."""
    return ModuleCatalog.from_tiles([("a", "a", "a", "a")], label_fingerprint)


@pytest.fixture
def landscape_catalog() -> ModuleCatalog:
    """Sky above an optional horizon row above ground; two sky variants so the random choice matters.

    Module indices: 0 = sky, 1 = cloud (same edges as sky), 2 = horizon, 3 = ground.
    """
    cloud = ("s", "s", "s", "s")
    return ModuleCatalog.from_tiles([SKY, cloud, HORIZON, GROUND], label_fingerprint)


@pytest.fixture
def incompatible_catalog() -> ModuleCatalog:
    """Two modules whose fingerprints never match in any direction."""
    return ModuleCatalog.from_tiles([("a1", "a2", "a3", "a4"), ("b1", "b2", "b3", "b4")], label_fingerprint)


# =============================================================================
# Image tiles
# =============================================================================

BLUE = (40, 90, 220, 255)
GREEN = (30, 160, 60, 255)


def make_edge_tile(
    base: tuple[int, int, int, int],
    up: tuple[int, int, int, int] | None = None,
    down: tuple[int, int, int, int] | None = None,
    left: tuple[int, int, int, int] | None = None,
    right: tuple[int, int, int, int] | None = None,
    size: int = 8,
) -> Image.Image:
    """Creates a tile filled with 'base' whose outermost rows / columns may be painted in other colors."""
    img = Image.new("RGBA", (size, size), base)
    for i in range(size):
        if up is not None:
            img.putpixel((i, 0), up)
        if down is not None:
            img.putpixel((i, size - 1), down)
    for i in range(1, size - 1):
        if left is not None:
            img.putpixel((0, i), left)
        if right is not None:
            img.putpixel((size - 1, i), right)
    return img


def make_horizon_tile(size: int = 8) -> Image.Image:
    """Creates a tile with blue in its top half and green in its bottom half."""
    img = Image.new("RGBA", (size, size), BLUE)
    for x in range(size):
        for y in range(size // 2, size):
            img.putpixel((x, y), GREEN)
    return img


@pytest.fixture
def landscape_images() -> list[Image.Image]:
    """Image version of the landscape catalog: sky, horizon, ground."""
    return [Image.new("RGBA", (8, 8), BLUE), make_horizon_tile(), Image.new("RGBA", (8, 8), GREEN)]


@pytest.fixture
def landscape_folder(tmp_path, landscape_images):
    folder = tmp_path / "tiles"
    folder.mkdir()
    for name, img in zip(["0_sky.png", "1_horizon.png", "2_ground.png"], landscape_images):
        img.save(folder / name)
    return folder


@pytest.fixture
def incompatible_folder(tmp_path):
    """Two image tiles whose edges never match each other or themselves."""
    folder = tmp_path / "incompatible"
    folder.mkdir()
    colors = [(255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255), (255, 255, 0, 255)]
    other_colors = [(255, 0, 255, 255), (0, 255, 255, 255), (128, 128, 128, 255), (255, 128, 0, 255)]
    make_edge_tile((0, 0, 0, 255), *colors).save(folder / "a.png")
    make_edge_tile((255, 255, 255, 255), *other_colors).save(folder / "b.png")
    return folder


@pytest.fixture(autouse=True)
def _reset_tilewave_logging():
    """Removes the handlers 'setup_logging()' installs, so they never outlive the captured streams of a test."""
    yield
    root_logger = logging.getLogger(LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)
