from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

import geopandas as gpd
import pyproj
from rasterio.transform import Affine
from shapely.geometry import LineString

from .geometry import Point
from .options import TracingOptions
from .tracer import TraceResult


CRSLike = Union[str, int, pyproj.CRS]


def to_linestring(points: Sequence[Point], transform: Optional[Affine] = None) -> LineString:
    """
    Turn traced pixels into a LineString.

    Without ``transform`` the coordinates stay in pixels. With an affine
    pixel -> world transform (e.g. from ``load_raster``) each vertex is
    placed at its pixel centre.
    """
    if len(points) < 2:
        raise ValueError("A traced path needs at least 2 points to form a line.")

    coords = [(float(x), float(y)) for x, y in points]
    if transform is not None:
        coords = [transform * (x + 0.5, y + 0.5) for x, y in coords]
    return LineString(coords)


def to_geodataframe(
    result: Union[TraceResult, Sequence[Point]],
    options: Optional[TracingOptions] = None,
    *,
    transform: Optional[Affine] = None,
    crs: Optional[CRSLike] = None,
) -> gpd.GeoDataFrame:
    """
    One-row GeoDataFrame holding the traced line and its waterway tags.

    Columns: ``waterway`` ("river" or "stream"), ``intermittent`` ("yes" or
    None), ``n_points`` and, for a ``TraceResult``, the stop reason of each
    direction.
    """
    opts = options if options is not None else TracingOptions()
    points = result.points if isinstance(result, TraceResult) else list(result)

    row = {
        "geometry": to_linestring(points, transform),
        "waterway": "river" if opts.river else "stream",
        "intermittent": "yes" if opts.intermittent else None,
        "n_points": len(points),
    }
    if isinstance(result, TraceResult):
        row["forward_stop"] = result.forward.stop_reason.value
        row["backward_stop"] = result.backward.stop_reason.value

    out_crs = pyproj.CRS.from_user_input(crs) if crs is not None else None
    return gpd.GeoDataFrame([row], geometry="geometry", crs=out_crs)


def write_geojson(gdf: gpd.GeoDataFrame, path: Union[str, Path]) -> Path:
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    gdf.to_file(str(path), driver="GeoJSON")
    return path
