"""
MGRS Decoder: grid reference text to UTM coordinate.

Parsing accepts upper or lower case and embedded whitespace
("18S UJ 23383 06479"). The decoded position is the CENTRE of the
referenced cell, at most half a cell from any point the encoder could
have truncated into it. Truncating the centre gives the same digits, so
re-encoding a decoded reference at the same precision gives it back.

Row Letter Disambiguation
-------------------------
Row letters repeat every 2,000 km of northing, so a square identifier
alone matches up to five northings in a hemisphere. The latitude band
resolves this with an explicit tie-break: among the candidates
base + k * 2,000,000 m, take the one whose cell centre is nearest the
northing of the band's middle latitude on the central meridian. A band
spans at most 12 degrees (about 1,330 km), so exactly one candidate lies
within 1,000 km of the band centre and the choice is unambiguous.
"""

import re
from typing import Tuple

import numpy as np

from common.constants import GeodeticConstants
from common.errors import MalformedMGRSString, PolarRegionUnsupported
from common.types import MGRSCoordinate, UTMCoordinate
from geospatial.utm import MAX_ZONE, MIN_ZONE, SVALBARD_GAP_ZONES, zone_projection
from grid_reference.letters import (
    BAND_CENTRE_NORTHINGS,
    BAND_LETTERS,
    BAND_RANGES,
    POLAR_BAND_LETTERS,
    ROW_LETTERS,
    band_hemisphere,
    column_letters,
    row_offset,
)

_SQUARE = GeodeticConstants.MGRS_SQUARE_SIZE.value
_ROW_PERIOD = GeodeticConstants.MGRS_ROW_PERIOD.value
_MAX_NORTHING = GeodeticConstants.UTM_MAX_NORTHING.value
_MAX_PRECISION = GeodeticConstants.MGRS_MAX_PRECISION

# Accepted distance in degrees between a decoded cell and its latitude band.
_BAND_MARGIN = 0.5

_MGRS_PATTERN = re.compile(r"^([0-9]{1,2})([A-Z])([A-Z])([A-Z])([0-9]*)$")
_UPS_PATTERN = re.compile(rf"^[{POLAR_BAND_LETTERS}][A-Z]{{2}}[0-9]*$")


def parse_mgrs(text: str) -> MGRSCoordinate:
    """Split a grid reference string into its fields.

    Parameters
    ----------
    text : str
        Grid reference, e.g. '18SUJ2338306479' or '4q fj 1 2'.

    Returns
    -------
    MGRSCoordinate

    Raises
    ------
    MalformedMGRSString
        Wrong character classes, zone outside 1..60, grid zones 32X, 34X and
        36X, band or square letters that do not exist, odd or over-long
        digit sequence.
    PolarRegionUnsupported
        A polar (UPS) reference such as 'ZGC...'.
    """
    if not isinstance(text, str):
        raise MalformedMGRSString(f"Expected a string, got {type(text).__name__}")
    cleaned = "".join(text.split()).upper()
    if not cleaned:
        raise MalformedMGRSString("Empty MGRS string")

    match = _MGRS_PATTERN.match(cleaned)
    if match is None:
        if _UPS_PATTERN.match(cleaned):
            raise PolarRegionUnsupported(
                f"{text!r} is a polar (UPS) grid reference, which is not supported"
            )
        raise MalformedMGRSString(f"{text!r} is not of the form <zone><band><square><digits>")

    zone_text, band, column, row, digits = match.groups()
    zone = int(zone_text)
    if not MIN_ZONE <= zone <= MAX_ZONE:
        raise MalformedMGRSString(f"Zone {zone} in {text!r} out of range [{MIN_ZONE}, {MAX_ZONE}]")
    if band not in BAND_LETTERS:
        raise MalformedMGRSString(f"Unknown latitude band {band!r} in {text!r}")
    if band == "X" and zone in SVALBARD_GAP_ZONES:
        raise MalformedMGRSString(f"Grid zone {zone}X in {text!r} does not exist")
    if column not in column_letters(zone):
        raise MalformedMGRSString(
            f"Column letter {column!r} is not used in zone {zone} "
            f"(expected one of {column_letters(zone)})"
        )
    if row not in ROW_LETTERS:
        raise MalformedMGRSString(f"Unknown row letter {row!r} in {text!r}")
    if len(digits) % 2:
        raise MalformedMGRSString(f"Odd number of digits in {text!r}")
    if len(digits) > 2 * _MAX_PRECISION:
        raise MalformedMGRSString(f"More than {_MAX_PRECISION} digits per axis in {text!r}")

    half = len(digits) // 2
    return MGRSCoordinate(zone, band, column + row, digits[:half], digits[half:])


def _row_northing(mgrs: MGRSCoordinate) -> float:
    """Northing of the square's southern edge, resolved with the band."""
    row_index = ROW_LETTERS.index(mgrs.square_id[1])
    base = ((row_index - row_offset(mgrs.zone)) % len(ROW_LETTERS)) * _SQUARE
    target = BAND_CENTRE_NORTHINGS[mgrs.band]
    candidates = np.arange(base, _MAX_NORTHING, _ROW_PERIOD)
    return float(candidates[np.argmin(np.abs(candidates + _SQUARE / 2 - target))])


def _check_band(mgrs: MGRSCoordinate, utm: UTMCoordinate) -> None:
    projection = zone_projection(utm.zone, utm.hemisphere)
    half = mgrs.precision_m / 2
    lat_rad, _ = projection.to_geodetic(
        np.array([utm.easting_m, utm.easting_m]),
        np.array([utm.northing_m - half, utm.northing_m + half]),
    )
    cell_south, cell_north = np.degrees(lat_rad)
    band_south, band_north = BAND_RANGES[mgrs.band]
    if cell_north < band_south - _BAND_MARGIN or cell_south > band_north + _BAND_MARGIN:
        raise MalformedMGRSString(
            f"Square {mgrs.square_id} does not fall within latitude band "
            f"{mgrs.band} of zone {mgrs.zone}"
        )


def mgrs_to_utm(mgrs: MGRSCoordinate) -> UTMCoordinate:
    """Convert parsed grid reference fields to the UTM cell centre.

    Parameters
    ----------
    mgrs : MGRSCoordinate
        Fields from `parse_mgrs` (or built directly).

    Returns
    -------
    UTMCoordinate
        Centre of the referenced cell.

    Raises
    ------
    MalformedMGRSString
        If the square does not lie in the stated latitude band.
    """
    scale = 10 ** (_MAX_PRECISION - mgrs.precision)
    easting_offset = int(mgrs.easting_digits) * scale if mgrs.precision else 0
    northing_offset = int(mgrs.northing_digits) * scale if mgrs.precision else 0

    column_index = column_letters(mgrs.zone).index(mgrs.square_id[0])
    half = mgrs.precision_m / 2
    easting = (column_index + 1) * _SQUARE + easting_offset + half
    northing = _row_northing(mgrs) + northing_offset + half

    utm = UTMCoordinate(mgrs.zone, band_hemisphere(mgrs.band), float(easting), float(northing))
    _check_band(mgrs, utm)
    return utm


def decode(text: str) -> Tuple[UTMCoordinate, int]:
    """Decode a grid reference string.

    Parameters
    ----------
    text : str
        Grid reference string.

    Returns
    -------
    Tuple[UTMCoordinate, int]
        The cell centre and the precision in digits per axis.

    Examples
    --------
    >>> utm, precision = decode("18SUJ2338306479")
    >>> utm.easting_m, utm.northing_m, precision
    (323383.5, 4306479.5, 5)
    """
    mgrs = parse_mgrs(text)
    return mgrs_to_utm(mgrs), mgrs.precision
