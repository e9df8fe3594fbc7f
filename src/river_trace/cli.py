"""
Command line entry point: trace one river from a seed pixel in an image.

    river-trace ortho.tif --seed 412 388 --network waterways.geojson -o river.geojson
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rasterio.errors import RasterioError

from .export import to_geodataframe, write_geojson
from .logging_config import get_module_logger, setup_logging
from .network import empty_network, read_network
from .options import TracingOptions
from .raster import load_raster
from .tracer import RiverTracer

logger = get_module_logger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="river-trace",
        description="Trace a river centerline in an image by following similar colour from a seed pixel.",
    )
    parser.add_argument("image", help="Raster image readable by rasterio")
    parser.add_argument("--seed", nargs=2, type=int, metavar=("X", "Y"), required=True,
                        help="Seed pixel (column, row)")
    parser.add_argument("--network",
                        help="Vector file of existing waterways, coordinates in image pixels")
    parser.add_argument("--tag-column", default="waterway",
                        help="Attribute marking a network feature as a waterway (default: waterway)")
    parser.add_argument("--output", "-o", help="Write the traced line to this GeoJSON file")
    parser.add_argument("--pixel-coords", action="store_true",
                        help="Export pixel coordinates instead of applying the image's geotransform")

    tuning = parser.add_argument_group("tracing options (values are clamped to their ranges)")
    tuning.add_argument("--step-size", type=int)
    tuning.add_argument("--color-tolerance", type=float)
    tuning.add_argument("--max-jump", type=float)
    tuning.add_argument("--max-turn-angle", type=float, dest="max_turn_angle_deg")
    tuning.add_argument("--smoothness", type=int)
    tuning.add_argument("--stream", action="store_true", help="Tag the result as a stream, not a river")
    tuning.add_argument("--intermittent", action="store_true", help="Tag the result as intermittent")

    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> TracingOptions:
    return TracingOptions.clamped(
        step_size=args.step_size,
        color_tolerance=args.color_tolerance,
        max_jump=args.max_jump,
        max_turn_angle_deg=args.max_turn_angle_deg,
        smoothness=args.smoothness,
        river=not args.stream,
        intermittent=args.intermittent,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)
    setup_logging(args.log_level, args.log_file)

    options = options_from_args(args)
    logger.info(f"Tracing options: {options.as_dict()}")

    try:
        snapshot = load_raster(args.image)
        network = read_network(args.network, tag_column=args.tag_column) if args.network else empty_network()
    except (RasterioError, ValueError, OSError) as e:
        logger.error(f"Could not read input: {e}")
        return 1

    logger.info(f"Loaded {args.image} ({snapshot.sampler.width}x{snapshot.sampler.height}), "
                f"{network.shape[0]} network segment(s)")

    result = RiverTracer(options).run(snapshot.sampler, tuple(args.seed), network)
    logger.info(f"Traced {len(result.points)} point(s); forward stopped on {result.forward.stop_reason.value}, "
                f"backward on {result.backward.stop_reason.value}")

    if result.is_empty:
        logger.warning("Nothing could be traced from the seed.")
        return 1

    if args.pixel_coords:
        gdf = to_geodataframe(result, options)
    else:
        gdf = to_geodataframe(result, options, transform=snapshot.transform, crs=snapshot.crs)

    if args.output:
        path = write_geojson(gdf, args.output)
        logger.info(f"Wrote {path}")
    else:
        sys.stdout.write(gdf.to_json() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
