from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from numba import njit


Point = Tuple[int, int]

TWO_PI = 2.0 * math.pi


########################################
### Angles and rounding              ###
########################################


def normalize_angle(angle: float) -> float:
    """Wrap an angle in radians into the half-open interval (-pi, pi]."""
    angle = math.fmod(angle, TWO_PI)
    while angle <= -math.pi:
        angle += TWO_PI
    while angle > math.pi:
        angle -= TWO_PI
    return angle


def interpolate_angle(old_angle: float, new_angle: float, factor: float) -> float:
    """Move ``old_angle`` towards ``new_angle`` by ``factor`` along the shorter arc."""
    return old_angle + normalize_angle(new_angle - old_angle) * factor


def heading(a: Point, b: Point) -> float:
    return math.atan2(b[1] - a[1], b[0] - a[0])


def turn_angle(prev: Point, current: Point, nxt: Point) -> float:
    """Signed heading change at ``current`` for the walk prev -> current -> nxt, in (-pi, pi]."""
    return normalize_angle(heading(current, nxt) - heading(prev, current))


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3).

    This is the single continuous -> pixel policy used by the scanner, the
    centering corrector, the join projection and the smoother.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def offset_point(origin: Point, angle: float, distance: float) -> Point:
    return (
        round_half_away(origin[0] + math.cos(angle) * distance),
        round_half_away(origin[1] + math.sin(angle) * distance),
    )


########################################
### Segment crossing (numba)         ###
########################################


@njit
def _orientation(ax: float, ay: float, bx: float, by: float, cx: float, cy: float) -> int:
    val = (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)
    if val > 0.0:
        return 1
    if val < 0.0:
        return -1
    return 0


@njit
def _within_box(ax: float, ay: float, bx: float, by: float, px: float, py: float) -> bool:
    return (min(ax, bx) <= px and px <= max(ax, bx)
            and min(ay, by) <= py and py <= max(ay, by))


@njit
def segments_intersect(x1: float, y1: float, x2: float, y2: float,
                       x3: float, y3: float, x4: float, y4: float) -> bool:
    """
    True if segment (x1,y1)-(x2,y2) and segment (x3,y3)-(x4,y4) share any point.

    Touching endpoints and collinear overlap count as intersections.
    """
    o1 = _orientation(x1, y1, x2, y2, x3, y3)
    o2 = _orientation(x1, y1, x2, y2, x4, y4)
    o3 = _orientation(x3, y3, x4, y4, x1, y1)
    o4 = _orientation(x3, y3, x4, y4, x2, y2)

    if o1 != o2 and o3 != o4:
        return True

    # collinear cases
    if o1 == 0 and _within_box(x1, y1, x2, y2, x3, y3):
        return True
    if o2 == 0 and _within_box(x1, y1, x2, y2, x4, y4):
        return True
    if o3 == 0 and _within_box(x3, y3, x4, y4, x1, y1):
        return True
    if o4 == 0 and _within_box(x3, y3, x4, y4, x2, y2):
        return True
    return False


@njit
def _crosses_any(xs: np.ndarray, ys: np.ndarray, n_segments: int,
                 ax: float, ay: float, bx: float, by: float) -> bool:
    for i in range(n_segments):
        if segments_intersect(xs[i], ys[i], xs[i + 1], ys[i + 1], ax, ay, bx, by):
            return True
    return False


def crosses_path(path: Sequence[Point], candidate: Point) -> bool:
    """
    Would the segment from the last point of ``path`` to ``candidate`` cross the path?

    Every earlier segment is tested except the one ending at the last point,
    which always shares that endpoint with the new segment.
    """
    n_segments = len(path) - 2
    if n_segments <= 0:
        return False

    arr = np.asarray(path, dtype=np.float64)
    xs = np.ascontiguousarray(arr[:, 0])
    ys = np.ascontiguousarray(arr[:, 1])
    cx, cy = path[-1]
    return bool(_crosses_any(xs, ys, n_segments,
                             float(cx), float(cy), float(candidate[0]), float(candidate[1])))


########################################
### Point to segment projection      ###
########################################


@dataclass(frozen=True)
class JoinResult:
    point: Point
    distance: float
    segment_index: int


def project_onto_segments(point: Point, segments: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project a point onto every segment at once.

    Parameters
    ----------
    point : (x, y)
    segments : (M,4) array
        Each row: [x1, y1, x2, y2]

    Returns
    -------
    nearest : (M,2) float array
        Closest point on each segment (projection clamped to the segment).
    distance : (M,) float array
        Point-to-segment distance.
    """
    seg = np.asarray(segments, dtype=np.float64).reshape(-1, 4)
    x1, y1, x2, y2 = seg[:, 0], seg[:, 1], seg[:, 2], seg[:, 3]
    dx = x2 - x1
    dy = y2 - y1
    len2 = dx * dx + dy * dy

    px = float(point[0])
    py = float(point[1])

    t = np.zeros(seg.shape[0], dtype=np.float64)
    valid = len2 > 0.0
    t[valid] = ((px - x1[valid]) * dx[valid] + (py - y1[valid]) * dy[valid]) / len2[valid]
    t = np.clip(t, 0.0, 1.0)

    nearest = np.column_stack((x1 + t * dx, y1 + t * dy))
    distance = np.hypot(px - nearest[:, 0], py - nearest[:, 1])
    return nearest, distance


def find_join(point: Point, segments: np.ndarray, threshold: float) -> Optional[JoinResult]:
    """Closest segment strictly within ``threshold`` of ``point``, with the projected pixel."""
    seg = np.asarray(segments, dtype=np.float64).reshape(-1, 4)
    if seg.shape[0] == 0:
        return None

    nearest, distance = project_onto_segments(point, seg)
    idx = int(np.argmin(distance))
    if not distance[idx] < threshold:
        return None

    qx, qy = nearest[idx]
    return JoinResult(
        point=(round_half_away(qx), round_half_away(qy)),
        distance=float(distance[idx]),
        segment_index=idx,
    )
