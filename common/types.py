"""
Coordinate Value Types for WGS84 / UTM / MGRS Conversion.

This module defines the frozen dataclasses exchanged between the
projection, grid-reference and service layers. Every coordinate is a
transient, immutable value: created from input or produced by one stage,
consumed by the next, never mutated.

Design Rationale
----------------
Using typed dataclasses instead of raw tuples/dicts provides:
1. Self-documenting code - field names carry the unit
2. Static checking with mypy
3. A single place for range validation of geodetic input
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from common.constants import GeodeticConstants
from common.errors import LatitudeOutOfRange, LongitudeOutOfRange


class Hemisphere(Enum):
    """Hemisphere of a UTM coordinate (selects the false northing)."""
    NORTH = "N"
    SOUTH = "S"

    @classmethod
    def from_latitude(cls, latitude_deg: float) -> "Hemisphere":
        return cls.SOUTH if latitude_deg < 0 else cls.NORTH


@dataclass(frozen=True)
class GeodeticCoordinate:
    """A WGS84 geodetic position.

    Unlike the radian-based types used inside the projection math, this
    type stores DEGREES, since it is the external contract of the system.

    Attributes
    ----------
    latitude_deg : float
        Geodetic latitude in degrees. Range: [-90, 90].
    longitude_deg : float
        Geodetic longitude in degrees. Range: [-180, 180].

    Raises
    ------
    LatitudeOutOfRange, LongitudeOutOfRange
        If a component is outside its range (NaN included).

    Examples
    --------
    >>> monument = GeodeticCoordinate(38.8895, -77.0353)
    >>> lat_rad, lon_rad = monument.to_radians()
    """
    latitude_deg: float
    longitude_deg: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise LatitudeOutOfRange(
                f"Latitude {self.latitude_deg} deg out of range [-90, 90]"
            )
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise LongitudeOutOfRange(
                f"Longitude {self.longitude_deg} deg out of range [-180, 180]"
            )

    def to_radians(self) -> Tuple[float, float]:
        """Return (latitude_rad, longitude_rad)."""
        return float(np.radians(self.latitude_deg)), float(np.radians(self.longitude_deg))

    def as_tuple(self) -> Tuple[float, float]:
        return self.latitude_deg, self.longitude_deg


@dataclass(frozen=True)
class UTMCoordinate:
    """A Universal Transverse Mercator position.

    No validation happens here: the inverse projector and the MGRS encoder
    each check the ranges that matter to them and raise their own errors.

    Attributes
    ----------
    zone : int
        UTM zone number, nominally 1..60.
    hemisphere : Hemisphere
        NORTH or SOUTH. Southern northings include the 10,000 km false northing.
    easting_m : float
        Easting in METERS including the 500 km false easting.
    northing_m : float
        Northing in METERS. Range: [0, 10,000,000].
    """
    zone: int
    hemisphere: Hemisphere
    easting_m: float
    northing_m: float

    def __str__(self) -> str:
        return (
            f"{self.zone}{self.hemisphere.value} "
            f"{self.easting_m:.3f}mE {self.northing_m:.3f}mN"
        )


@dataclass(frozen=True)
class MGRSCoordinate:
    """A Military Grid Reference System position.

    Attributes
    ----------
    zone : int
        UTM zone number 1..60.
    band : str
        Latitude band letter, C..X without I and O.
    square_id : str
        Two-letter 100km-square identifier (column letter, row letter).
    easting_digits, northing_digits : str
        Truncated offsets within the square, equal length 0..5.

    Notes
    -----
    Zero-length offsets mean 100 km precision: grid zone and square only.
    """
    zone: int
    band: str
    square_id: str
    easting_digits: str = ""
    northing_digits: str = ""

    def __post_init__(self):
        if len(self.easting_digits) != len(self.northing_digits):
            raise ValueError(
                f"Offsets must have equal length, got "
                f"{self.easting_digits!r} and {self.northing_digits!r}"
            )
        if len(self.easting_digits) > GeodeticConstants.MGRS_MAX_PRECISION:
            raise ValueError(f"At most 5 digits per axis, got {len(self.easting_digits)}")

    @property
    def zone_designator(self) -> str:
        """Grid zone designator, e.g. '18S'."""
        return f"{self.zone}{self.band}"

    @property
    def precision(self) -> int:
        """Number of digits per axis."""
        return len(self.easting_digits)

    @property
    def precision_m(self) -> float:
        """Side length of the referenced cell in meters."""
        return float(10 ** (GeodeticConstants.MGRS_MAX_PRECISION - self.precision))

    def __str__(self) -> str:
        return (
            f"{self.zone_designator}{self.square_id}"
            f"{self.easting_digits}{self.northing_digits}"
        )
