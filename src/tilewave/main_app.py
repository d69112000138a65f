"""Serves as the command line entry point of the tilemap generator."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
import random
import sys
from typing import TextIO, TYPE_CHECKING

from tilewave import constants
from tilewave.enums import Direction
from tilewave.errors import InvalidConfigurationError
from tilewave.logging_config import setup_logging
from tilewave.model.fingerprint import Fingerprint, get_color_fingerprint_func
from tilewave.model.tileset_manager import TilesetManager
from tilewave.model.wfc import Wave

if TYPE_CHECKING:
    from PIL import Image

    from tilewave.model.fingerprint import FingerprintFunc
    from tilewave.model.possibility_space import PossibilitySpace

logger = logging.getLogger(__name__)

EXIT_SOLVED = 0
EXIT_EXHAUSTED = 1
EXIT_INVALID_CONFIGURATION = 2


def parse_border(text: str) -> tuple[Direction, Direction, Fingerprint]:
    """Parses a 'SIDE[:EDGE]:FINGERPRINT' border constraint, e.g. 'up:d4789c1e' or 'down:left:7ed0cfd4'.

    EDGE names the tile edge whose fingerprint is compared and defaults to SIDE, the edge facing out of the map.

    Returns:
        The side of the map, the tile edge and the fingerprint.
    """
    parts = text.split(":")
    if len(parts) not in (2, 3) or not parts[-1].strip():
        raise argparse.ArgumentTypeError(f"expected SIDE[:EDGE]:FINGERPRINT, got {text!r}")
    try:
        side = Direction.from_name(parts[0])
        edge = Direction.from_name(parts[1]) if len(parts) == 3 else side
        return side, edge, Fingerprint.from_hex(parts[-1])
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilewave",
        description="Generates a tilemap in which all adjacent tiles match, using Wave Function Collapse.",
    )
    parser.add_argument("tileset", help="folder of tile images, or a tileset image when --tile-size is given")
    parser.add_argument(
        "--tile-size",
        nargs=2,
        type=int,
        metavar=("WIDTH", "HEIGHT"),
        help="slice the tileset image into tiles of this size (in pixels)",
    )
    parser.add_argument("--width", type=int, default=constants.TILEMAP_SIZE_DEFAULT, help="tilemap width in tiles")
    parser.add_argument("--height", type=int, default=constants.TILEMAP_SIZE_DEFAULT, help="tilemap height in tiles")
    parser.add_argument("--seed", type=int, default=None, help="random seed (random if omitted)")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=constants.WFC_MAX_ATTEMPTS_DEFAULT,
        help="number of attempts before giving up",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=constants.FINGERPRINT_SAMPLES_DEFAULT,
        help="number of colors sampled along each tile edge",
    )
    parser.add_argument(
        "--discard-bits",
        type=int,
        default=constants.FINGERPRINT_DISCARD_BITS_DEFAULT,
        help="least significant bits dropped from each color channel before hashing",
    )
    parser.add_argument(
        "--border",
        type=parse_border,
        action="append",
        default=[],
        metavar="SIDE[:EDGE]:FINGERPRINT",
        help="only allow tiles on this side of the map whose EDGE (default: the edge facing SIDE) has this fingerprint "
        "(repeatable, SIDE and EDGE are one of up, down, left, right)",
    )
    parser.add_argument(
        "--output",
        default=constants.OUTPUT_IMG_PATH_DEFAULT,
        help="output image path, '{seed}' is replaced by the seed",
    )
    parser.add_argument("--print-fingerprints", action="store_true", help="print the fingerprint of every tile edge")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="increase console log verbosity")
    parser.add_argument("--log-file", default=None, help="write a debug log to this file")
    return parser


def print_fingerprint_table(
    tiles: Sequence[Image.Image], fingerprint_func: FingerprintFunc, file: TextIO | None = None
) -> None:
    """Prints the fingerprint of each edge of each tile, used to look up values for border constraints."""
    out = file if file is not None else sys.stdout
    print("|------|-----------|-------------|-----------|", file=out)
    print("| Tile | Direction | Fingerprint | Size      |", file=out)
    print("|------|-----------|-------------|-----------|", file=out)
    for index, tile in enumerate(tiles):
        size = f"{tile.size[0]}x{tile.size[1]}"
        for direction in Direction:
            fingerprint = str(fingerprint_func(tile, direction))
            print(f"| {index:<4} | {direction.name.lower():<9} | {fingerprint:<11} | {size:<9} |", file=out)
    print("|------|-----------|-------------|-----------|", file=out)


def apply_border_constraints(
    space: PossibilitySpace, borders: Sequence[tuple[Direction, Direction, Fingerprint]]
) -> None:
    """Narrows the cells along each given side to modules showing the fingerprint on the given tile edge."""
    for side, edge, fingerprint in borders:
        changed = space.constrain_border(side, lambda module, e=edge, f=fingerprint: module.fingerprint(e) == f)
        logger.debug("Border %s:%s:%s narrowed %d cell(s)", side.name.lower(), edge.name.lower(), fingerprint, changed)


def run(args: argparse.Namespace) -> int:
    """Loads the tileset, solves the wave and saves the resulting image.

    Returns:
        The process exit code.
    """
    if args.tile_size is not None:
        tileset_manager = TilesetManager.from_tileset_image(args.tileset, tuple(args.tile_size))
    else:
        tileset_manager = TilesetManager.from_folder(args.tileset)

    fingerprint_func = get_color_fingerprint_func(args.samples, args.discard_bits)

    if args.print_fingerprints:
        print_fingerprint_table(tileset_manager.tiles, fingerprint_func)

    seed = args.seed if args.seed is not None else random.randint(0, constants.RANDOM_SEED_MAX)

    wave = Wave.from_tiles(tileset_manager.tiles, args.width, args.height, fingerprint_func)
    wave.initialize(seed)
    apply_border_constraints(wave.possibility_space, args.border)

    result = wave.collapse(args.max_attempts)
    if not result.solved:
        # The partial grid is still written.
        print(
            f"unable to generate: no solution after {result.attempts} attempt(s), "
            f"last contradiction at {result.contradiction}",
            file=sys.stderr,
        )

    tilemap_img = tileset_manager.get_tilemap_img(wave.export())
    output_path = tileset_manager.save_tilemap_img(tilemap_img, args.output.format(seed=seed))
    print(f"Image saved to: {output_path} (seed {seed})")

    return EXIT_SOLVED if result.solved else EXIT_EXHAUSTED


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    console_level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    setup_logging(console_level, args.log_file)

    try:
        return run(args)
    except InvalidConfigurationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIGURATION


if __name__ == "__main__":
    sys.exit(main())
