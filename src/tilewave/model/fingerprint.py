"""Contains the edge fingerprint value type and the functions deriving fingerprints from tile images."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import hashlib
from typing import Any, TYPE_CHECKING

from tilewave.constants import (
    FINGERPRINT_DISCARD_BITS_DEFAULT,
    FINGERPRINT_DISCARD_BITS_MAX_LIMIT,
    FINGERPRINT_SAMPLES_DEFAULT,
    FINGERPRINT_SAMPLES_MIN_LIMIT,
    FINGERPRINT_SIZE,
)
from tilewave.enums import Direction
from tilewave.errors import InvalidConfigurationError

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class Fingerprint:
    """Opaque value describing what is allowed to touch one edge of a module.

    Two modules may be placed next to each other exactly if the fingerprints on their touching edges are equal. The
    value is compared byte by byte; no ordering is defined.

    Attributes:
        value: The raw fingerprint bytes (always FINGERPRINT_SIZE bytes long).
    """

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != FINGERPRINT_SIZE:
            raise ValueError(f"a fingerprint needs exactly {FINGERPRINT_SIZE} bytes, got {len(self.value)}")

    @classmethod
    def from_hex(cls, text: str) -> Fingerprint:
        """Creates a fingerprint from its textual form (e.g. 'd4789c1e').

        Only the first FINGERPRINT_SIZE characters are used, shorter input is padded with zero bytes. This is the same
        form that 'str()' returns and that the fingerprint table of the command line prints.

        Args:
            text: The textual form of the fingerprint.

        Returns:
            The fingerprint with the given textual form.
        """
        raw = text.strip().encode("ascii")[:FINGERPRINT_SIZE]
        return cls(raw.ljust(FINGERPRINT_SIZE, b"\x00"))

    def __str__(self) -> str:
        return self.value.rstrip(b"\x00").decode("ascii", errors="replace")


# Signature of a function deriving the fingerprint of a tile in a given direction.
FingerprintFunc = Callable[[Any, Direction], Fingerprint]


def get_color_fingerprint_func(
    sample_count: int = FINGERPRINT_SAMPLES_DEFAULT, discard_bits: int = FINGERPRINT_DISCARD_BITS_DEFAULT
) -> FingerprintFunc:
    """Returns a fingerprint function that hashes colors sampled along a tile edge.

    The returned function samples 'sample_count' evenly spaced pixels along the requested edge of a PIL image,
    optionally drops the least significant bits of every color channel (which rounds the colors to allow for some
    tolerance), concatenates the colors as hex text and keeps the first FINGERPRINT_SIZE hex characters of its SHA-256
    digest.

    Args:
        sample_count: The number of colors sampled along each edge.
        discard_bits: The number of least significant bits dropped from each color channel.

    Returns:
        A deterministic function mapping (tile image, direction) to a fingerprint.
    """
    if sample_count < FINGERPRINT_SAMPLES_MIN_LIMIT:
        raise InvalidConfigurationError(
            f"sample_count must be at least {FINGERPRINT_SAMPLES_MIN_LIMIT}, got {sample_count}"
        )
    if not 0 <= discard_bits <= FINGERPRINT_DISCARD_BITS_MAX_LIMIT:
        raise InvalidConfigurationError(
            f"discard_bits must be in [0, {FINGERPRINT_DISCARD_BITS_MAX_LIMIT}], got {discard_bits}"
        )

    def fingerprint_func(img: Image.Image, direction: Direction) -> Fingerprint:
        colors = _sample_edge_colors(img, direction, sample_count)
        text = "".join(_hex_from_color(color, discard_bits) for color in colors)
        digest = hashlib.sha256(text.encode("ascii")).hexdigest()
        return Fingerprint(digest[:FINGERPRINT_SIZE].encode("ascii"))

    return fingerprint_func


def _sample_edge_colors(img: Image.Image, direction: Direction, sample_count: int) -> list[tuple[int, int, int, int]]:
    """Reads 'sample_count' RGBA colors along one edge, skipping the corners."""
    rgba_img = img if img.mode == "RGBA" else img.convert("RGBA")
    width, height = rgba_img.size
    # Dividing by sample_count + 1 keeps the samples strictly between the two corners of the edge.
    step_x = width // (sample_count + 1)
    step_y = height // (sample_count + 1)

    colors = []
    for i in range(1, sample_count + 1):
        match direction:
            case Direction.UP:
                coords = (step_x * i, 0)
            case Direction.DOWN:
                coords = (step_x * i, height - 1)
            case Direction.LEFT:
                coords = (0, step_y * i)
            case Direction.RIGHT:
                coords = (width - 1, step_y * i)
        colors.append(tuple(rgba_img.getpixel(coords)))
    return colors


def _hex_from_color(color: tuple[int, ...], discard_bits: int) -> str:
    """Formats an RGBA color as eight hex digits."""
    return "".join(f"{channel >> discard_bits:02x}" for channel in color)


DEFAULT_FINGERPRINT_FUNC: FingerprintFunc = get_color_fingerprint_func()
