from __future__ import annotations

import math
from typing import Tuple

from .geometry import round_half_away


def pack_rgb(r: int, g: int, b: int) -> int:
    return ((int(r) & 0xFF) << 16) | ((int(g) & 0xFF) << 8) | (int(b) & 0xFF)


def unpack_rgb(rgb: int) -> Tuple[int, int, int]:
    return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF


def color_distance(rgb1: int, rgb2: int) -> float:
    """Euclidean distance between two packed colours in RGB space (0 .. ~441.7)."""
    r1, g1, b1 = unpack_rgb(rgb1)
    r2, g2, b2 = unpack_rgb(rgb2)
    dr = r1 - r2
    dg = g1 - g2
    db = b1 - b2
    return math.sqrt(dr * dr + dg * dg + db * db)


def blend_colors(rgb1: int, rgb2: int, ratio: float) -> int:
    """
    Move ``rgb1`` towards ``rgb2`` by ``ratio`` (0 keeps rgb1, 1 gives rgb2).

    Channels are rounded half away from zero, so blending a colour with
    itself is a fixed point.
    """
    r1, g1, b1 = unpack_rgb(rgb1)
    r2, g2, b2 = unpack_rgb(rgb2)
    keep = 1.0 - ratio
    return pack_rgb(
        round_half_away(r1 * keep + r2 * ratio),
        round_half_away(g1 * keep + g2 * ratio),
        round_half_away(b1 * keep + b2 * ratio),
    )
