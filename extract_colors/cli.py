"""
Command-line entry point.

  extract-colors <image_path> [--pixels N] [--distance D]
      [--saturationDistance S] [--lightnessDistance L] [--hueDistance H]
      [--alphaThreshold A] [--maxColors K] [--seed N] [--workers W]
      [--sort none|score|area] [--compact] [-v]

Prints the extracted colors as a JSON array on stdout.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from extract_colors.config import config
from extract_colors.services.colors import (
    AllocationFailureError, ImageDecodeError, Options,
    rank_by_area, rank_by_score, records_to_json, run_extraction,
)
from extract_colors.services.imaging import load_image_path
from extract_colors.utils.logging import configure_logging, get_logger

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extract-colors",
        description="Extract a palette of representative colors from an image.",
        epilog="Defaults: pixels=64000, distance=0.22, saturationDistance=0.2, "
               "lightnessDistance=0.2, hueDistance=0.083333333 (~30deg), "
               "alphaThreshold=250, maxColors=16",
    )
    parser.add_argument("image_path", type=Path, help="Input image")
    parser.add_argument("--pixels", type=int, default=config.DEFAULT_PIXELS,
                        help="Target sampled pixel budget")
    parser.add_argument("--distance", type=float, default=0.22,
                        help="Normalized RGB merge distance (0..1)")
    parser.add_argument("--saturationDistance", dest="saturation_distance", type=float, default=0.2,
                        help="Saturation merge threshold")
    parser.add_argument("--lightnessDistance", dest="lightness_distance", type=float, default=0.2,
                        help="Lightness merge threshold")
    parser.add_argument("--hueDistance", dest="hue_distance", type=float, default=1.0 / 12.0,
                        help="Hue arc merge threshold (1 = 360 deg)")
    parser.add_argument("--alphaThreshold", dest="alpha_threshold", type=int,
                        default=config.DEFAULT_ALPHA_THRESHOLD,
                        help="Ignore pixels with alpha <= threshold")
    parser.add_argument("--maxColors", dest="max_colors", type=int, default=config.DEFAULT_MAX_COLORS,
                        help="Number of seed clusters")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    parser.add_argument("--workers", type=int, default=config.WORKERS,
                        help="Threads for the nearest-centroid search")
    parser.add_argument("--sort", choices=("none", "score", "area"), default="none",
                        help="Re-order colors after extraction")
    parser.add_argument("--compact", action="store_true", help="Single-line JSON output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline stages to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logger = configure_logging(level="DEBUG") if args.verbose else get_logger()

    try:
        options = Options(
            pixels=args.pixels,
            distance=args.distance,
            saturation_distance=args.saturation_distance,
            lightness_distance=args.lightness_distance,
            hue_distance=args.hue_distance,
            alpha_threshold=args.alpha_threshold,
            max_colors=args.max_colors,
            seed=args.seed,
            workers=args.workers,
        )
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        buffer = load_image_path(args.image_path)
    except ImageDecodeError as e:
        print(f"error: failed to load image: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        result = run_extraction(buffer, options)
    except AllocationFailureError as e:
        logger.error(f"Extraction failed: {e}", extra={"image": str(args.image_path)})
        return EXIT_FAILURE

    records = result.records
    if args.sort == "score":
        records = rank_by_score(records)
    elif args.sort == "area":
        records = rank_by_area(records)

    print(records_to_json(records, indent=None if args.compact else 2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
