"""
mgrs-convert: command-line front end of the coordinate service.

Usage:
    mgrs-convert to-mgrs 38.8895 -77.0353 [--zone 17] [--precision 3]
    mgrs-convert from-mgrs 18SUJ2338306479

Exit status is 0 on success and 2 when the conversion is rejected, with
the error kind and message on stderr.
"""

import argparse
import logging
import sys
from typing import List, Optional

from common.errors import ConversionResult
from conversion.service import ConversionConfig, CoordinateService

EXIT_CONVERSION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mgrs-convert",
        description="Convert between WGS84 latitude/longitude and MGRS grid references."
    )
    parser.add_argument(
        "--backend", choices=("native", "pyproj"), default="native",
        help="transverse Mercator implementation"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log rejected conversions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    to_parser = subparsers.add_parser("to-mgrs", help="latitude/longitude to MGRS")
    to_parser.add_argument("latitude", type=float, help="latitude in degrees")
    to_parser.add_argument("longitude", type=float, help="longitude in degrees")
    to_parser.add_argument("-z", "--zone", type=int, default=0,
                           help="force a UTM zone (within one zone of the computed one)")
    to_parser.add_argument("-p", "--precision", type=int, default=5, choices=range(0, 6),
                           help="digits per axis, 5 = 1 m")

    from_parser = subparsers.add_parser("from-mgrs", help="MGRS to latitude/longitude")
    from_parser.add_argument("mgrs", nargs="+", help="grid reference (spaces allowed)")
    return parser


def _emit(result: ConversionResult) -> int:
    if not result.ok:
        print(f"error: {result.error}", file=sys.stderr)
        return EXIT_CONVERSION_ERROR
    print(result.value)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "to-mgrs":
        precision = args.precision
    else:
        precision = 5
    service = CoordinateService(ConversionConfig(
        precision=precision,
        projection_backend=args.backend,
        log_level=logging.DEBUG if args.verbose else logging.WARNING,
    ))

    if args.command == "to-mgrs":
        return _emit(service.to_mgrs(args.latitude, args.longitude, args.zone))

    result = service.from_mgrs(" ".join(args.mgrs)).map(
        lambda coord: f"{coord.latitude_deg:.6f} {coord.longitude_deg:.6f}"
    )
    return _emit(result)


if __name__ == "__main__":
    sys.exit(main())
