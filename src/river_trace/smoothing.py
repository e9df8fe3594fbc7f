from __future__ import annotations

from typing import List, Sequence

import numpy as np
from scipy.ndimage import correlate1d

from .geometry import Point, round_half_away


_KERNEL = np.array([0.25, 0.5, 0.25])


def smooth_path(path: Sequence[Point], iterations: int) -> List[Point]:
    """
    Round the corners of a polyline with a (1, 2, 1) / 4 averaging kernel.

    Each pass replaces every interior point with
    ``(prev + 2 * current + next) / 4`` using the previous pass's positions;
    the two endpoints never move. Positions stay real-valued across passes
    and are rounded to pixels once at the end.

    Returns a new list; paths shorter than 3 points or ``iterations <= 0``
    come back unchanged.
    """
    points = [tuple(p) for p in path]
    if iterations <= 0 or len(points) < 3:
        return points

    xy = np.asarray(points, dtype=np.float64)
    for _ in range(iterations):
        averaged = correlate1d(xy, _KERNEL, axis=0, mode="nearest")
        averaged[0] = xy[0]
        averaged[-1] = xy[-1]
        xy = averaged

    return [(round_half_away(x), round_half_away(y)) for x, y in xy]
