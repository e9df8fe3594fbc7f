"""
River Trace
===========

Follow a river or stream centerline through raster imagery from a single
seed pixel. The trace walks outwards in both directions, matching colour
against a slowly adapting target, recentering each step on the water's
width, and stopping at sharp turns, self-crossings, colour drift, the image
edge or an existing waterway.

Everything happens in pixel space (x right, y down). Geo-referencing is
only applied when exporting a finished line.

Typical workflow
----------------
>>> import river_trace as rt
>>> snap = rt.load_raster("ortho.tif")
>>> opts = rt.TracingOptions.clamped(step_size=20, color_tolerance=45)
>>> result = rt.RiverTracer(opts).run(snap.sampler, (412, 388))
>>> gdf = rt.to_geodataframe(result, opts, transform=snap.transform, crs=snap.crs)

Submodules
----------
tracer
    Core tracing algorithm: seed heading, multi-stage scan, centering,
    path checks and orchestration.
options
    Tracing parameters and their clamping ranges.
raster
    Pixel sampler interface, numpy-backed sampler and rasterio loader.
geometry
    Angle, rounding, segment crossing and projection helpers.
smoothing
    Corner-rounding pass for finished paths.
network
    Builds existing-waterway segments from shapely / geopandas data.
export
    LineString / GeoDataFrame output with waterway tags.
"""

from __future__ import annotations

from .options import TracingOptions
from .raster import ArraySampler, RasterSampler, RasterSnapshot, load_raster
from .geometry import normalize_angle, round_half_away, find_join
from .smoothing import smooth_path
from .network import as_segment_array, segments_from_geometries, segments_from_frame
from .tracer import (
    RiverTracer,
    FollowResult,
    FollowState,
    StopReason,
    TraceResult,
    trace_river,
)
from .export import to_linestring, to_geodataframe


__all__ = [

    # configuration
    "TracingOptions",

    # raster
    "ArraySampler",
    "RasterSampler",
    "RasterSnapshot",
    "load_raster",

    # core
    "RiverTracer",
    "FollowResult",
    "FollowState",
    "StopReason",
    "TraceResult",
    "trace_river",
    "smooth_path",
    "normalize_angle",
    "round_half_away",
    "find_join",

    # network / export
    "as_segment_array",
    "segments_from_geometries",
    "segments_from_frame",
    "to_linestring",
    "to_geodataframe",
]
__version__ = "0.1.0"
