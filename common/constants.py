"""
Geodetic and Grid Constants for WGS84 / UTM / MGRS Conversion.

This module provides the defining constants of the conversion system with
their uncertainty bounds and sources. All constants are defined in SI units
(or degrees where the grid definition is angular) and traceable to
authoritative sources.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- UTM and MGRS definitions: NIMA TM8358.1 (Datums, Ellipsoids, Grids and
  Grid Reference Systems), NGA.SIG.0012 (UTM/UPS)
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A defining constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of constants used throughout the conversion system.

    Earth Geometry (WGS84)
    ----------------------
    These constants define the reference ellipsoid used for both projection
    directions. They are defined exactly by the WGS84 standard and are never
    modified after import.

    Universal Transverse Mercator
    -----------------------------
    Scale factor, false origin offsets and the zone/latitude limits of
    the UTM grid.

    Military Grid Reference System
    ------------------------------
    Sizes of the 100km squares and the letter cycle periods.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    # =========================================================================
    # UTM Projection Parameters
    # Reference: NGA.SIG.0012_2.0.0_UTMUPS
    # =========================================================================

    UTM_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.9996,
        uncertainty=0.0,
        unit="dimensionless",
        source="NGA.SIG.0012",
        description="Scale factor on the central meridian of every UTM zone"
    )

    UTM_FALSE_EASTING: Final[Constant] = Constant(
        value=500_000.0,
        uncertainty=0.0,
        unit="m",
        source="NGA.SIG.0012",
        description="False easting added to every UTM easting"
    )

    UTM_FALSE_NORTHING_SOUTH: Final[Constant] = Constant(
        value=10_000_000.0,
        uncertainty=0.0,
        unit="m",
        source="NGA.SIG.0012",
        description="False northing added in the southern hemisphere"
    )

    UTM_ZONE_WIDTH: Final[Constant] = Constant(
        value=6.0,
        uncertainty=0.0,
        unit="deg",
        source="NGA.SIG.0012",
        description="Longitudinal width of a UTM zone"
    )

    UTM_MAX_LATITUDE: Final[Constant] = Constant(
        value=84.0,
        uncertainty=0.0,
        unit="deg",
        source="NGA.SIG.0012",
        description="Northern limit of the UTM grid (UPS beyond)"
    )

    UTM_MIN_LATITUDE: Final[Constant] = Constant(
        value=-80.0,
        uncertainty=0.0,
        unit="deg",
        source="NGA.SIG.0012",
        description="Southern limit of the UTM grid (UPS beyond)"
    )

    UTM_LATITUDE_OVERLAP: Final[Constant] = Constant(
        value=0.5,
        uncertainty=0.0,
        unit="deg",
        source="GEOTRANS 3.x UTM",
        description="Overlap tolerated past the grid limits when inverting"
    )

    UTM_MIN_EASTING: Final[Constant] = Constant(
        value=100_000.0,
        uncertainty=0.0,
        unit="m",
        source="GEOTRANS 3.x UTM",
        description="Smallest easting accepted by the inverse projection"
    )

    UTM_MAX_EASTING: Final[Constant] = Constant(
        value=900_000.0,
        uncertainty=0.0,
        unit="m",
        source="GEOTRANS 3.x UTM",
        description="Largest easting accepted by the inverse projection"
    )

    UTM_MAX_NORTHING: Final[Constant] = Constant(
        value=10_000_000.0,
        uncertainty=0.0,
        unit="m",
        source="GEOTRANS 3.x UTM",
        description="Largest northing accepted by the inverse projection"
    )

    # =========================================================================
    # MGRS Grid Parameters
    # Reference: NIMA TM8358.1, Chapter 3
    # =========================================================================

    MGRS_SQUARE_SIZE: Final[Constant] = Constant(
        value=100_000.0,
        uncertainty=0.0,
        unit="m",
        source="NIMA TM8358.1",
        description="Side length of an MGRS 100km square"
    )

    MGRS_ROW_PERIOD: Final[Constant] = Constant(
        value=2_000_000.0,
        uncertainty=0.0,
        unit="m",
        source="NIMA TM8358.1",
        description="Northing distance after which the 20 row letters repeat"
    )

    MGRS_BAND_HEIGHT: Final[Constant] = Constant(
        value=8.0,
        uncertainty=0.0,
        unit="deg",
        source="NIMA TM8358.1",
        description="Latitudinal height of a latitude band (X is 12 degrees)"
    )

    MGRS_MAX_PRECISION: Final[int] = 5
    MGRS_DEFAULT_PRECISION: Final[int] = 5
