"""Similarity scoring for SnapPair.

Two thumbnails are only compared when their sizes fall into the same
8-pixel buckets. The comparison itself is a normalized mean squared error
over the RGB channels:

    equality = mean((a - b) ** 2) / 255 ** 2

so identical images score 0.0 and the worst possible score is 1.0.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, ImageChops, ImageStat

from .errors import ImageProcessingError

BUCKET = 8


@dataclass(frozen=True)
class Dimensions:
    """Width/height of a thumbnail in pixels."""

    width: int
    height: int


@dataclass(frozen=True)
class Difference:
    """Outcome of comparing two thumbnails."""

    is_equal: bool
    equality: float  # 0.0 = identical


def dimensions_compatible(a: Dimensions, b: Dimensions) -> bool:
    """True if both width and height land in the same 8-pixel bucket."""
    return a.width // BUCKET == b.width // BUCKET and a.height // BUCKET == b.height // BUCKET


def read_dimensions(path: Path) -> Dimensions:
    """Read the size of an image without decoding its pixels."""
    try:
        with Image.open(path) as img:
            w, h = img.size
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Cannot read size of {path}: {e}", path=path) from e
    return Dimensions(width=w, height=h)


def compute_difference(path_a: Path, path_b: Path) -> Difference:
    """Compare two thumbnails and return their normalized MSE.

    Both images are cropped to their common top-left box, so the score is
    symmetric in its arguments even when sizes differ by a few pixels.
    """

    try:
        with Image.open(path_a) as ia, Image.open(path_b) as ib:
            w = min(ia.width, ib.width)
            h = min(ia.height, ib.height)
            a = ia.convert("RGB").crop((0, 0, w, h))
            b = ib.convert("RGB").crop((0, 0, w, h))
            diff = ImageChops.difference(a, b)
            stat = ImageStat.Stat(diff)
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Cannot compare {path_a} and {path_b}: {e}", path=path_a) from e

    pixels = w * h
    if pixels == 0:
        raise ImageProcessingError(f"Empty image in comparison: {path_a} / {path_b}", path=path_a)

    # stat.sum2 holds the per-band sum of squared differences.
    mse = sum(stat.sum2) / (pixels * len(stat.sum2))
    equality = mse / (255.0 ** 2)
    return Difference(is_equal=equality == 0.0, equality=equality)
