"""
Universal Transverse Mercator Forward and Inverse Projection.

This module turns the generic transverse Mercator adapters into the UTM
grid: zone selection (including the Norway and Svalbard exceptions),
caller-forced zones, false origins, and the validity limits of the grid.

Zone Rules
----------
1. Default zone = floor((lon + 180) / 6) + 1, clamped to [1, 60].
2. Norway: 56N <= lat < 64N and 3E <= lon < 12E uses zone 32.
3. Svalbard: lat >= 72N uses zones 31/33/35/37 for 0-9E/9-21E/21-33E/33-42E.
4. A forced zone is accepted only if it is the default zone or an
   immediate neighbour; zones 60 and 1 are neighbours across the
   antimeridian.
5. Zones 32, 34 and 36 do not exist above 72N, so they cannot be forced
   there either.

References
----------
- NGA.SIG.0012_2.0.0_UTMUPS, Section 2
- GEOTRANS 3.x UTM module (zone override rules)
"""

from functools import lru_cache
import math
from typing import Optional

from common.constants import GeodeticConstants
from common.errors import (
    EastingOutOfRange,
    InvalidZoneOverride,
    NorthingOutOfRange,
    PolarRegionUnsupported,
    ZoneOutOfRange,
)
from common.types import GeodeticCoordinate, Hemisphere, UTMCoordinate
from geospatial.projections import ProjectionAdapter, create_projection

MIN_ZONE = 1
MAX_ZONE = 60

_ZONE_WIDTH = GeodeticConstants.UTM_ZONE_WIDTH.value
_MAX_LAT = GeodeticConstants.UTM_MAX_LATITUDE.value
_MIN_LAT = GeodeticConstants.UTM_MIN_LATITUDE.value
_OVERLAP = GeodeticConstants.UTM_LATITUDE_OVERLAP.value
_MIN_EASTING = GeodeticConstants.UTM_MIN_EASTING.value
_MAX_EASTING = GeodeticConstants.UTM_MAX_EASTING.value
_MAX_NORTHING = GeodeticConstants.UTM_MAX_NORTHING.value
_FALSE_NORTHING_SOUTH = GeodeticConstants.UTM_FALSE_NORTHING_SOUTH.value

# (west lon inclusive, east lon exclusive, zone) above 72N
_SVALBARD_ZONES = (
    (0.0, 9.0, 31),
    (9.0, 21.0, 33),
    (21.0, 33.0, 35),
    (33.0, 42.0, 37),
)
_SVALBARD_LATITUDE = 72.0

# Absorbed by the widened Svalbard zones; there is no 32X, 34X or 36X.
SVALBARD_GAP_ZONES = frozenset({32, 34, 36})


def central_meridian(zone: int) -> float:
    """Central meridian of a UTM zone in degrees."""
    return zone * _ZONE_WIDTH - 183.0


def false_northing(hemisphere: Hemisphere) -> float:
    return _FALSE_NORTHING_SOUTH if hemisphere is Hemisphere.SOUTH else 0.0


def default_zone(latitude_deg: float, longitude_deg: float) -> int:
    """Compute the UTM zone a position belongs to.

    Parameters
    ----------
    latitude_deg, longitude_deg : float
        Geodetic position in degrees.

    Returns
    -------
    int
        Zone number 1..60 including the Norway/Svalbard exceptions.
    """
    zone = int(math.floor((longitude_deg + 180.0) / _ZONE_WIDTH)) + 1
    zone = min(max(zone, MIN_ZONE), MAX_ZONE)

    if 56.0 <= latitude_deg < 64.0 and 3.0 <= longitude_deg < 12.0:
        zone = 32
    elif latitude_deg >= _SVALBARD_LATITUDE:
        for west, east, svalbard_zone in _SVALBARD_ZONES:
            if west <= longitude_deg < east:
                zone = svalbard_zone
                break
    return zone


def resolve_zone(computed_zone: int, zone_override: Optional[int] = None) -> int:
    """Apply a caller-forced zone to the computed zone.

    Parameters
    ----------
    computed_zone : int
        Zone returned by `default_zone`.
    zone_override : int, optional
        None or 0 to keep the computed zone, otherwise the forced zone.

    Returns
    -------
    int
        The zone to project into.

    Raises
    ------
    InvalidZoneOverride
        If the forced zone is outside 1..60 or not adjacent to the
        computed zone.
    """
    if not zone_override:
        return computed_zone
    if not MIN_ZONE <= zone_override <= MAX_ZONE:
        raise InvalidZoneOverride(
            f"Zone override {zone_override} out of range [{MIN_ZONE}, {MAX_ZONE}]"
        )
    if abs(zone_override - computed_zone) <= 1:
        return zone_override
    if {zone_override, computed_zone} == {MIN_ZONE, MAX_ZONE}:
        return zone_override
    raise InvalidZoneOverride(
        f"Zone override {zone_override} is not within one zone of "
        f"the computed zone {computed_zone}"
    )


@lru_cache(maxsize=None)
def zone_projection(zone: int, hemisphere: Hemisphere, backend: str = "native") -> ProjectionAdapter:
    """Shared, read-only projection adapter for one zone and hemisphere."""
    return create_projection(
        central_meridian(zone),
        false_northing=false_northing(hemisphere),
        backend=backend
    )


def project(
    coord: GeodeticCoordinate,
    zone_override: Optional[int] = None,
    backend: str = "native"
) -> UTMCoordinate:
    """Project a geodetic position onto the UTM grid.

    Parameters
    ----------
    coord : GeodeticCoordinate
        Position to project (its ranges are validated on construction).
    zone_override : int, optional
        Forced zone, see `resolve_zone`.
    backend : str
        Projection backend, "native" or "pyproj".

    Returns
    -------
    UTMCoordinate
        Zone, hemisphere, easting and northing.

    Raises
    ------
    PolarRegionUnsupported
        Above 84N or below 80S (UPS territory).
    InvalidZoneOverride
        See `resolve_zone`; also a forced zone 32, 34 or 36 at or above 72N.

    Examples
    --------
    >>> utm = project(GeodeticCoordinate(38.8895, -77.0353))
    >>> utm.zone, utm.hemisphere
    (18, <Hemisphere.NORTH: 'N'>)
    """
    lat, lon = coord.latitude_deg, coord.longitude_deg
    if lat > _MAX_LAT or lat < _MIN_LAT:
        raise PolarRegionUnsupported(
            f"Latitude {lat} deg is outside the UTM grid [{_MIN_LAT}, {_MAX_LAT}]"
        )

    zone = resolve_zone(default_zone(lat, lon), zone_override)
    if lat >= _SVALBARD_LATITUDE and zone in SVALBARD_GAP_ZONES:
        raise InvalidZoneOverride(
            f"Zone override {zone} does not exist at latitude {lat} deg "
            f"(Svalbard zones 31, 33, 35 and 37 cover 0-42E above 72N)"
        )
    hemisphere = Hemisphere.from_latitude(lat)

    lat_rad, lon_rad = coord.to_radians()
    easting, northing = zone_projection(zone, hemisphere, backend).to_projected(lat_rad, lon_rad)
    return UTMCoordinate(zone, hemisphere, easting, northing)


def unproject(utm: UTMCoordinate, backend: str = "native") -> GeodeticCoordinate:
    """Recover the geodetic position of a UTM coordinate.

    Parameters
    ----------
    utm : UTMCoordinate
        Grid position to invert.
    backend : str
        Projection backend, "native" or "pyproj".

    Returns
    -------
    GeodeticCoordinate
        Latitude and longitude in degrees, longitude in [-180, 180).

    Raises
    ------
    ZoneOutOfRange
        Zone outside 1..60.
    EastingOutOfRange
        Easting outside [100000, 900000] m.
    NorthingOutOfRange
        Northing outside [0, 10000000] m, or one that lands outside the
        UTM latitude limits plus half a degree of overlap.
    """
    if not MIN_ZONE <= utm.zone <= MAX_ZONE:
        raise ZoneOutOfRange(f"Zone {utm.zone} out of range [{MIN_ZONE}, {MAX_ZONE}]")
    if not _MIN_EASTING <= utm.easting_m <= _MAX_EASTING:
        raise EastingOutOfRange(
            f"Easting {utm.easting_m} m out of range [{_MIN_EASTING:.0f}, {_MAX_EASTING:.0f}]"
        )
    if not 0.0 <= utm.northing_m <= _MAX_NORTHING:
        raise NorthingOutOfRange(
            f"Northing {utm.northing_m} m out of range [0, {_MAX_NORTHING:.0f}]"
        )

    projection = zone_projection(utm.zone, utm.hemisphere, backend)
    lat_rad, lon_rad = projection.to_geodetic(utm.easting_m, utm.northing_m)
    lat = math.degrees(lat_rad)
    lon = (math.degrees(lon_rad) + 180.0) % 360.0 - 180.0

    if lat > _MAX_LAT + _OVERLAP or lat < _MIN_LAT - _OVERLAP:
        raise NorthingOutOfRange(
            f"Northing {utm.northing_m} m in the {utm.hemisphere.name.lower()}ern "
            f"hemisphere maps to latitude {lat:.4f} deg, outside the UTM grid"
        )
    return GeodeticCoordinate(lat, lon)
