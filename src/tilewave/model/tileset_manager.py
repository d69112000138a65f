"""Manages the tile images fed into the solver and the rendering of solved grids."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from tilewave.constants import TILE_IMG_EXTENSIONS
from tilewave.errors import InvalidConfigurationError

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class TilesetManager:
    """Manages the loading of tile images and the compositing of tilemaps.

    The tiles are kept in input order, so the index of a tile equals the index of the module the catalog builds from
    it. This lets the manager render the module index arrays exported by the solver.
    """

    # The dimensions (width, height) of a single tile in pixels.
    _tile_size: tuple[int, int]
    # A fully transparent tile image used to represent cells without any possible module.
    _empty_tile: Image.Image
    # The tile images, the list index equals the tile index.
    _tiles: list[Image.Image]

    def __init__(self, tiles: Iterable[Image.Image]) -> None:
        """Initializes the manager with tile images already in memory.

        The tile size is taken from the first tile, all tiles are expected to share it.

        Args:
            tiles: The tile images, the order defines the tile indices.

        Raises:
            InvalidConfigurationError: If no tile is given.
        """
        self._tiles = [tile if tile.mode == "RGBA" else tile.convert("RGBA") for tile in tiles]

        if not self._tiles:
            raise InvalidConfigurationError("the tileset needs at least one tile image")

        self._tile_size = self._tiles[0].size
        self._empty_tile = Image.new("RGBA", self._tile_size)

    @classmethod
    def from_folder(cls, folder: str | Path) -> TilesetManager:
        """Loads every image file of a folder as one tile.

        Files are read in sorted name order, files without an image extension are skipped.

        Args:
            folder: The folder containing the tile images.

        Returns:
            The new tileset manager.
        """
        tiles = []
        for path in sorted(Path(folder).iterdir()):
            if not path.is_file() or path.suffix.lower() not in TILE_IMG_EXTENSIONS:
                continue
            with Image.open(path) as img:
                tiles.append(img.convert("RGBA"))
            logger.debug("Loaded tile %d from %s", len(tiles) - 1, path)

        if not tiles:
            raise InvalidConfigurationError(f"no tile images found in {folder}")

        return cls(tiles)

    @classmethod
    def from_tileset_image(cls, tileset_img_path: str | Path, tile_size: tuple[int, int]) -> TilesetManager:
        """Loads a tileset image (sprite sheet) and slices it into tiles.

        The tiles are indexed by reading the tileset image row by row. Partial tiles at the right and bottom border are
        ignored.

        Args:
            tileset_img_path: The file path to the source tileset image.
            tile_size: The dimensions (width, height) of a single tile in pixels.

        Returns:
            The new tileset manager.
        """
        if tile_size[0] <= 0 or tile_size[1] <= 0:
            raise InvalidConfigurationError(f"the tile size must be positive, got {tile_size}")

        with Image.open(tileset_img_path) as img:
            tileset_img = img.convert("RGBA")

        tiles = []
        rows = tileset_img.size[1] // tile_size[1]
        cols = tileset_img.size[0] // tile_size[0]
        for row in range(rows):
            for col in range(cols):
                box = (
                    col * tile_size[0],
                    row * tile_size[1],
                    (col + 1) * tile_size[0],
                    (row + 1) * tile_size[1],
                )
                tiles.append(tileset_img.crop(box))

        if not tiles:
            raise InvalidConfigurationError(f"{tileset_img_path} is smaller than a single {tile_size} tile")

        return cls(tiles)

    @property
    def tiles(self) -> list[Image.Image]:
        """The tile images, in tile index order."""
        return list(self._tiles)

    @property
    def tile_size(self) -> tuple[int, int]:
        return self._tile_size

    def get_tilemap_img(self, tilemap_array: NDArray[np.int_]) -> Image.Image:
        """Renders a tilemap array into a complete PIL Image object.

        The tilemap array contains tile indices, as exported by the solver. The method iterates through the array,
        fetches the corresponding tile images, and pastes them onto a new canvas. An index of -1 is replaced by the
        transparent empty tile.

        Args:
            tilemap_array: A 2D array containing tile indices.

        Returns:
            A PIL Image representing the visual tilemap.
        """
        # tile_size is (width, height) while tilemap_array.shape is (rows, cols), so the indices have to be swapped.
        img_size = (tilemap_array.shape[1] * self._tile_size[0], tilemap_array.shape[0] * self._tile_size[1])
        tilemap_img = Image.new("RGBA", img_size)
        for row in range(tilemap_array.shape[0]):
            for col in range(tilemap_array.shape[1]):
                box = (
                    col * self._tile_size[0],
                    row * self._tile_size[1],
                    (col + 1) * self._tile_size[0],
                    (row + 1) * self._tile_size[1],
                )

                tile_index = int(tilemap_array[row, col])
                if tile_index != -1:
                    tilemap_img.paste(self._tiles[tile_index], box)
                else:
                    tilemap_img.paste(self._empty_tile, box)
        return tilemap_img

    def save_tilemap_img(self, tilemap_img: Image.Image, file_path: str | Path) -> Path:
        """Saves a generated tilemap image, replacing an existing file and creating missing parent folders.

        Args:
            tilemap_img: The PIL Image object to be saved.
            file_path: The destination path (including filename and extension).

        Returns:
            The path the image was saved to.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".jpg", ".jpeg"):
            # JPEG has no alpha channel.
            tilemap_img = tilemap_img.convert("RGB")
        tilemap_img.save(path)
        logger.info("Saved tilemap image to %s", path)
        return path
