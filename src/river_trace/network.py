"""
Existing-network adapters.

The tracer only ever sees an (M,4) float array of pixel-space segments
``[x1, y1, x2, y2]``. These helpers build that array from point pairs,
shapely lines or a GeoDataFrame whose geometries are already in pixel
coordinates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

import geopandas as gpd
import numpy as np
from shapely.geometry import LinearRing, LineString, MultiLineString
from shapely.geometry.base import BaseGeometry


LINE_TYPES = ("LineString", "LinearRing", "MultiLineString")


def empty_network() -> np.ndarray:
    return np.empty((0, 4), dtype=np.float64)


def as_segment_array(segments) -> np.ndarray:
    """
    Normalise segments to an (M,4) float array.

    Accepts None, an (M,4) array-like of rows ``[x1, y1, x2, y2]`` or an
    (M,2,2) array-like of point pairs ``((x1, y1), (x2, y2))``.
    """
    if segments is None:
        return empty_network()

    arr = np.asarray(segments, dtype=np.float64)
    if arr.size == 0:
        return empty_network()
    if arr.ndim == 3 and arr.shape[1:] == (2, 2):
        arr = arr.reshape(-1, 4)
    if arr.ndim != 2 or arr.shape[1] != 4:
        raise ValueError(f"Segments must be shaped (M,4) or (M,2,2), got {arr.shape}.")
    return arr


def _line_parts(geom: BaseGeometry):
    if isinstance(geom, (LineString, LinearRing)):
        return [geom]
    if isinstance(geom, MultiLineString):
        return list(geom.geoms)
    raise ValueError(f"Expected line geometries, got {geom.geom_type}.")


def segments_from_geometries(geometries: Iterable[Optional[BaseGeometry]]) -> np.ndarray:
    """One segment per consecutive vertex pair of every line; empty geometries are skipped."""
    blocks = []
    for geom in geometries:
        if geom is None or geom.is_empty:
            continue
        for line in _line_parts(geom):
            coords = np.asarray(line.coords, dtype=np.float64)[:, :2]
            if coords.shape[0] < 2:
                continue
            blocks.append(np.hstack([coords[:-1], coords[1:]]))

    if not blocks:
        return empty_network()
    return np.vstack(blocks)


def segments_from_frame(
    gdf: gpd.GeoDataFrame,
    *,
    tag_column: Optional[str] = "waterway",
    deleted_column: Optional[str] = None,
) -> np.ndarray:
    """
    Segments of every usable waterway feature in a pixel-space GeoDataFrame.

    Features are kept when ``tag_column`` is set (any non-null value), when
    ``deleted_column`` (if given) is not truthy, and when their geometry is
    a non-empty, valid line. Other geometry types are ignored.
    """
    frame = gdf
    if tag_column is not None:
        if tag_column not in frame.columns:
            return empty_network()
        frame = frame[frame[tag_column].notna()]

    if deleted_column is not None and deleted_column in frame.columns:
        deleted = frame[deleted_column].fillna(False).astype(bool)
        frame = frame[~deleted]

    geoms = [
        g for g in frame.geometry
        if g is not None and not g.is_empty and g.geom_type in LINE_TYPES and g.is_valid
    ]
    return segments_from_geometries(geoms)


def read_network(
    path: Union[str, Path],
    *,
    tag_column: Optional[str] = "waterway",
    deleted_column: Optional[str] = None,
) -> np.ndarray:
    """
    Read a vector file (coordinates in raster pixels) and return its waterway segments.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the file exists but cannot be read as vector data.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Network file not found: {path}")
    try:
        gdf = gpd.read_file(str(path))
    except RuntimeError as e:
        raise ValueError(f"Could not read network file {path}: {e}") from e
    return segments_from_frame(gdf, tag_column=tag_column, deleted_column=deleted_column)
