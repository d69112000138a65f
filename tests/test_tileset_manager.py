import numpy as np
import pytest
from PIL import Image

from conftest import BLUE, GREEN
from tilewave.errors import InvalidConfigurationError
from tilewave.model.tileset_manager import TilesetManager


def test_from_folder_loads_images_in_name_order(landscape_folder):
    (landscape_folder / "notes.txt").write_text("not a tile")
    (landscape_folder / "subfolder.png").mkdir()

    manager = TilesetManager.from_folder(landscape_folder)

    assert len(manager.tiles) == 3
    assert manager.tile_size == (8, 8)
    assert manager.tiles[0].getpixel((0, 0)) == BLUE
    assert manager.tiles[2].getpixel((0, 0)) == GREEN


def test_from_folder_without_images_is_rejected(tmp_path):
    (tmp_path / "readme.md").write_text("empty")
    with pytest.raises(InvalidConfigurationError):
        TilesetManager.from_folder(tmp_path)


def test_from_missing_folder_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        TilesetManager.from_folder(tmp_path / "missing")


def test_from_tileset_image_slices_row_by_row(tmp_path):
    sheet = Image.new("RGBA", (8, 8), BLUE)
    sheet.paste(Image.new("RGBA", (4, 4), GREEN), (4, 0))
    sheet_path = tmp_path / "sheet.png"
    sheet.save(sheet_path)

    manager = TilesetManager.from_tileset_image(sheet_path, (4, 4))

    assert len(manager.tiles) == 4
    assert manager.tile_size == (4, 4)
    assert [tile.getpixel((0, 0)) for tile in manager.tiles] == [BLUE, GREEN, BLUE, BLUE]


def test_from_tileset_image_smaller_than_a_tile_is_rejected(tmp_path):
    sheet_path = tmp_path / "tiny.png"
    Image.new("RGBA", (2, 2)).save(sheet_path)
    with pytest.raises(InvalidConfigurationError):
        TilesetManager.from_tileset_image(sheet_path, (4, 4))


def test_empty_tileset_is_rejected():
    with pytest.raises(InvalidConfigurationError):
        TilesetManager([])


def test_rgb_tiles_are_converted(landscape_images):
    manager = TilesetManager([img.convert("RGB") for img in landscape_images])
    assert all(tile.mode == "RGBA" for tile in manager.tiles)


def test_get_tilemap_img_places_tiles_by_index(landscape_images):
    manager = TilesetManager(landscape_images)

    img = manager.get_tilemap_img(np.array([[0, 2, -1]]))

    assert img.size == (24, 8)
    assert img.getpixel((1, 1)) == BLUE
    assert img.getpixel((9, 1)) == GREEN
    # Cells without a module stay transparent.
    assert img.getpixel((17, 1))[3] == 0


def test_save_tilemap_img_creates_folders_and_replaces_files(tmp_path, landscape_images):
    manager = TilesetManager(landscape_images)
    target = tmp_path / "out" / "nested" / "map.png"

    manager.save_tilemap_img(manager.get_tilemap_img(np.array([[0]])), target)
    saved_path = manager.save_tilemap_img(manager.get_tilemap_img(np.array([[2, 2]])), target)

    assert saved_path == target
    with Image.open(target) as img:
        assert img.size == (16, 8)


def test_save_tilemap_img_as_jpeg(tmp_path, landscape_images):
    manager = TilesetManager(landscape_images)
    target = manager.save_tilemap_img(manager.get_tilemap_img(np.array([[1]])), tmp_path / "map.jpg")
    with Image.open(target) as img:
        assert img.mode == "RGB"
