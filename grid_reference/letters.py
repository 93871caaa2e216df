"""
Letter Tables of the Military Grid Reference System.

All tables are process-wide constants built once at import and never
mutated, like the ellipsoid coefficients they are derived from.

Latitude Bands
--------------
Twenty bands C..X (I and O skipped), 8 degrees each from 80S, with band X
stretched to 12 degrees so that it ends at 84N.

100km Squares (AA scheme)
-------------------------
Column letters cycle through three 8-letter sets, one per zone modulo 3:
A-H, J-R, S-Z. Row letters run A-V (20 letters) every 2,000 km of northing
and start at F instead of A in even zones. Adjacent zones therefore never
share a square identifier.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

import numpy as np

from common.constants import GeodeticConstants
from common.errors import PolarRegionUnsupported
from common.types import Hemisphere
from geospatial.projections import TransverseMercator

BAND_LETTERS = "CDEFGHJKLMNPQRSTUVWX"
COLUMN_LETTER_SETS = ("ABCDEFGH", "JKLMNPQR", "STUVWXYZ")
ROW_LETTERS = "ABCDEFGHJKLMNPQRSTUV"
POLAR_BAND_LETTERS = "ABYZ"

EVEN_ZONE_ROW_OFFSET = 5

_BAND_HEIGHT = GeodeticConstants.MGRS_BAND_HEIGHT.value
_MIN_LAT = GeodeticConstants.UTM_MIN_LATITUDE.value
_MAX_LAT = GeodeticConstants.UTM_MAX_LATITUDE.value


def _build_band_ranges() -> Mapping[str, Tuple[float, float]]:
    ranges = {}
    for i, letter in enumerate(BAND_LETTERS):
        south = _MIN_LAT + i * _BAND_HEIGHT
        north = _MAX_LAT if letter == "X" else south + _BAND_HEIGHT
        ranges[letter] = (south, north)
    return MappingProxyType(ranges)


BAND_RANGES = _build_band_ranges()


def band_hemisphere(band: str) -> Hemisphere:
    """Hemisphere a latitude band lies in (N is the first northern band)."""
    return Hemisphere.NORTH if band >= "N" else Hemisphere.SOUTH


def _build_band_centre_northings() -> Mapping[str, float]:
    # Northing of each band's middle latitude on a central meridian, where
    # it does not depend on the zone.
    projections = {
        Hemisphere.NORTH: TransverseMercator(0.0),
        Hemisphere.SOUTH: TransverseMercator(
            0.0, false_northing=GeodeticConstants.UTM_FALSE_NORTHING_SOUTH.value
        ),
    }
    northings = {}
    for letter, (south, north) in BAND_RANGES.items():
        projection = projections[band_hemisphere(letter)]
        _, northing = projection.to_projected(np.radians((south + north) / 2), 0.0)
        northings[letter] = northing
    return MappingProxyType(northings)


BAND_CENTRE_NORTHINGS = _build_band_centre_northings()


def band_for_latitude(latitude_deg: float, tolerance: float = 0.0) -> str:
    """Latitude band letter of a latitude.

    Parameters
    ----------
    latitude_deg : float
        Geodetic latitude in degrees.
    tolerance : float
        Slack in degrees accepted beyond 80S and 84N, for latitudes that
        were recovered numerically from a grid position.

    Returns
    -------
    str
        Band letter C..X.

    Raises
    ------
    PolarRegionUnsupported
        Outside [-80, 84] degrees (plus tolerance).
    """
    if latitude_deg > _MAX_LAT + tolerance or latitude_deg < _MIN_LAT - tolerance:
        raise PolarRegionUnsupported(
            f"Latitude {latitude_deg} deg has no MGRS latitude band "
            f"(UTM grid covers [{_MIN_LAT}, {_MAX_LAT}])"
        )
    index = int((latitude_deg - _MIN_LAT) // _BAND_HEIGHT)
    return BAND_LETTERS[min(max(index, 0), len(BAND_LETTERS) - 1)]


def column_letters(zone: int) -> str:
    """The 8 column letters used by a zone, west to east."""
    return COLUMN_LETTER_SETS[(zone - 1) % 3]


def row_offset(zone: int) -> int:
    """Position of the row letter at 0 m northing within ROW_LETTERS."""
    return EVEN_ZONE_ROW_OFFSET if zone % 2 == 0 else 0
