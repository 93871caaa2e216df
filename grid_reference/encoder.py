"""
MGRS Encoder: UTM coordinate to grid reference.

A grid reference is the grid zone designator (zone number and latitude
band), the 100km-square identifier, and the easting/northing offsets
within that square TRUNCATED to the requested number of digits. Truncation
means a reference always names the cell the point lies in, whose
centre is what the decoder returns.
"""

from typing import Optional

from common.constants import GeodeticConstants
from common.errors import (
    EastingOutOfRange,
    NorthingOutOfRange,
    PrecisionOutOfRange,
    ZoneOutOfRange,
)
from common.types import MGRSCoordinate, UTMCoordinate
from geospatial.utm import MAX_ZONE, MIN_ZONE, SVALBARD_GAP_ZONES, unproject
from grid_reference.letters import (
    ROW_LETTERS,
    band_for_latitude,
    column_letters,
    row_offset,
)

_SQUARE = int(GeodeticConstants.MGRS_SQUARE_SIZE.value)
_MAX_PRECISION = GeodeticConstants.MGRS_MAX_PRECISION
_MAX_NORTHING = GeodeticConstants.UTM_MAX_NORTHING.value

# Slack for latitudes recovered by inverting the projection at 84N / 80S.
_DERIVED_LATITUDE_TOLERANCE = 1e-9


def _truncate(value_m: float, precision: int) -> str:
    if precision == 0:
        return ""
    digits = int((value_m % _SQUARE) // 10 ** (_MAX_PRECISION - precision))
    return f"{digits:0{precision}d}"


def encode(
    utm: UTMCoordinate,
    precision: int = GeodeticConstants.MGRS_DEFAULT_PRECISION,
    latitude_deg: Optional[float] = None
) -> MGRSCoordinate:
    """Encode a UTM coordinate as an MGRS grid reference.

    Parameters
    ----------
    utm : UTMCoordinate
        Grid position, typically from `geospatial.utm.project`.
    precision : int
        Digits per axis, 0 (100 km) to 5 (1 m).
    latitude_deg : float, optional
        Geodetic latitude of the point. Selects the latitude band; when
        omitted it is recovered by inverting the projection. Passing the
        original latitude avoids round-off flipping the band of a point
        lying exactly on a band boundary.

    Returns
    -------
    MGRSCoordinate

    Raises
    ------
    PrecisionOutOfRange
        precision not an integer in 0..5.
    ZoneOutOfRange, EastingOutOfRange, NorthingOutOfRange
        Grid values that have no 100km square, including zones 32, 34
        and 36 in band X.
    PolarRegionUnsupported
        Latitude outside the band table.

    Examples
    --------
    >>> from common.types import Hemisphere
    >>> str(encode(UTMCoordinate(18, Hemisphere.NORTH, 323383.2, 4306479.9)))
    '18SUJ2338306479'
    """
    if isinstance(precision, bool) or not isinstance(precision, int) \
            or not 0 <= precision <= _MAX_PRECISION:
        raise PrecisionOutOfRange(
            f"Precision {precision!r} out of range [0, {_MAX_PRECISION}] digits per axis"
        )
    if not MIN_ZONE <= utm.zone <= MAX_ZONE:
        raise ZoneOutOfRange(f"Zone {utm.zone} out of range [{MIN_ZONE}, {MAX_ZONE}]")
    if not 0.0 <= utm.northing_m <= _MAX_NORTHING:
        raise NorthingOutOfRange(
            f"Northing {utm.northing_m} m out of range [0, {_MAX_NORTHING:.0f}]"
        )

    column_index = int(utm.easting_m // _SQUARE) - 1
    if not 0 <= column_index < 8:
        raise EastingOutOfRange(
            f"Easting {utm.easting_m} m has no 100km column in zone {utm.zone}"
        )

    if latitude_deg is None:
        band = band_for_latitude(unproject(utm).latitude_deg, _DERIVED_LATITUDE_TOLERANCE)
    else:
        band = band_for_latitude(latitude_deg)
    if band == "X" and utm.zone in SVALBARD_GAP_ZONES:
        raise ZoneOutOfRange(f"Grid zone {utm.zone}X does not exist")

    row_index = (int(utm.northing_m // _SQUARE) + row_offset(utm.zone)) % len(ROW_LETTERS)
    square_id = column_letters(utm.zone)[column_index] + ROW_LETTERS[row_index]

    return MGRSCoordinate(
        zone=utm.zone,
        band=band,
        square_id=square_id,
        easting_digits=_truncate(utm.easting_m, precision),
        northing_digits=_truncate(utm.northing_m, precision),
    )


def format_mgrs(mgrs: MGRSCoordinate) -> str:
    """Render `<zone><band><square><easting digits><northing digits>`."""
    return str(mgrs)
