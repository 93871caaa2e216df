import pytest

from common.errors import (
    EastingOutOfRange,
    InvalidZoneOverride,
    NorthingOutOfRange,
    PolarRegionUnsupported,
    ZoneOutOfRange,
)
from common.types import GeodeticCoordinate, Hemisphere, UTMCoordinate
from geospatial.utm import (
    central_meridian,
    default_zone,
    project,
    resolve_zone,
    unproject,
)


@pytest.mark.parametrize("lat, lon, zone", [
    (0.0, -180.0, 1),
    (0.0, -177.0, 1),
    (0.0, -174.0, 2),
    (38.8895, -77.0353, 18),
    (0.0, 0.0, 31),
    (-33.87, 151.21, 56),
    (0.0, 179.999, 60),
    (0.0, 180.0, 60),
])
def test_default_zone(lat, lon, zone):
    assert default_zone(lat, lon) == zone


@pytest.mark.parametrize("lat, lon, zone", [
    (60.0, 5.0, 32),    # Norway: western coast moves to zone 32
    (60.0, 2.9, 31),
    (55.9, 5.0, 31),    # south of the exception
    (64.0, 5.0, 31),    # north of the exception
    (78.0, 8.9, 31),    # Svalbard
    (78.0, 10.0, 33),
    (78.0, 20.0, 33),
    (78.0, 25.0, 35),
    (78.0, 40.0, 37),
    (78.0, 42.0, 38),
    (71.9, 10.0, 32),
])
def test_norway_and_svalbard_exceptions(lat, lon, zone):
    assert default_zone(lat, lon) == zone


def test_central_meridian():
    assert central_meridian(1) == -177.0
    assert central_meridian(18) == -75.0
    assert central_meridian(31) == 3.0
    assert central_meridian(60) == 177.0


@pytest.mark.parametrize("override, expected", [(None, 18), (0, 18), (17, 17), (18, 18), (19, 19)])
def test_resolve_zone_accepts_neighbours(override, expected):
    assert resolve_zone(18, override) == expected


@pytest.mark.parametrize("override", [16, 20, 61, -1, 1])
def test_resolve_zone_rejects_distant_zones(override):
    with pytest.raises(InvalidZoneOverride):
        resolve_zone(18, override)


def test_resolve_zone_wraps_at_antimeridian():
    assert resolve_zone(1, 60) == 60
    assert resolve_zone(60, 1) == 1
    with pytest.raises(InvalidZoneOverride):
        resolve_zone(60, 2)


def test_project_equator_on_central_meridian():
    utm = project(GeodeticCoordinate(0.0, -75.0))
    assert utm == UTMCoordinate(18, Hemisphere.NORTH, 500000.0, 0.0)


def test_project_null_island():
    utm = project(GeodeticCoordinate(0.0, 0.0))
    assert utm.zone == 31
    assert utm.easting_m == pytest.approx(166021.44, abs=0.01)
    assert utm.northing_m == pytest.approx(0.0, abs=1e-6)


def test_project_known_point():
    utm = project(GeodeticCoordinate(42.0, -93.0))
    assert utm.zone == 15
    assert utm.easting_m == pytest.approx(500000.0, abs=1e-6)
    assert utm.northing_m == pytest.approx(4649776.22, abs=0.05)


def test_project_southern_hemisphere_uses_false_northing():
    utm = project(GeodeticCoordinate(-0.00001, -75.0))
    assert utm.hemisphere is Hemisphere.SOUTH
    assert utm.northing_m == pytest.approx(10000000.0 - 1.1053, abs=1e-3)


def test_project_with_override_moves_easting():
    coord = GeodeticCoordinate(60.0, -99.0)
    west = project(coord, zone_override=13)
    own = project(coord)
    east = project(coord, zone_override=15)
    assert (west.zone, own.zone, east.zone) == (13, 14, 15)
    assert west.easting_m > own.easting_m > east.easting_m
    assert west.easting_m - 500000.0 == pytest.approx(500000.0 - east.easting_m, abs=1e-6)


@pytest.mark.parametrize("lat, lon, zone", [(78.0, 10.0, 32), (78.0, 20.0, 34), (72.0, 31.0, 36)])
def test_project_rejects_forced_svalbard_gap_zone(lat, lon, zone):
    with pytest.raises(InvalidZoneOverride):
        project(GeodeticCoordinate(lat, lon), zone_override=zone)


def test_gap_zones_remain_valid_below_72n():
    assert project(GeodeticCoordinate(71.9, 10.0), zone_override=32).zone == 32
    assert project(GeodeticCoordinate(71.9, 20.0), zone_override=34).zone == 34


@pytest.mark.parametrize("lat", [84.0001, 85.0, 90.0, -80.0001, -90.0])
def test_project_rejects_polar_latitudes(lat):
    with pytest.raises(PolarRegionUnsupported):
        project(GeodeticCoordinate(lat, 10.0))


def test_project_accepts_grid_limits():
    assert project(GeodeticCoordinate(84.0, 10.0)).zone == 33
    assert project(GeodeticCoordinate(-80.0, 10.0)).hemisphere is Hemisphere.SOUTH


@pytest.mark.parametrize("lat, lon", [
    (38.8895, -77.0353),
    (-33.8688, 151.2093),
    (83.9, -30.0),
    (-79.9, 100.0),
    (0.0, 179.9),
    (64.1, 5.0),
])
def test_unproject_inverts_project(lat, lon):
    coord = unproject(project(GeodeticCoordinate(lat, lon)))
    assert coord.latitude_deg == pytest.approx(lat, abs=1e-9)
    assert coord.longitude_deg == pytest.approx(lon, abs=1e-9)


def test_unproject_normalises_longitude():
    coord = unproject(project(GeodeticCoordinate(45.0, 179.5), zone_override=1))
    assert coord.longitude_deg == pytest.approx(179.5, abs=1e-9)


@pytest.mark.parametrize("zone", [0, 61, -3])
def test_unproject_rejects_zone(zone):
    with pytest.raises(ZoneOutOfRange):
        unproject(UTMCoordinate(zone, Hemisphere.NORTH, 500000.0, 1000000.0))


@pytest.mark.parametrize("easting", [99999.9, 900000.1, -5.0])
def test_unproject_rejects_easting(easting):
    with pytest.raises(EastingOutOfRange):
        unproject(UTMCoordinate(18, Hemisphere.NORTH, easting, 1000000.0))


@pytest.mark.parametrize("hemisphere, northing", [
    (Hemisphere.NORTH, -1.0),
    (Hemisphere.SOUTH, 10000000.5),
    (Hemisphere.NORTH, 9900000.0),   # beyond 84.5N
    (Hemisphere.SOUTH, 500000.0),    # beyond 80.5S
])
def test_unproject_rejects_northing(hemisphere, northing):
    with pytest.raises(NorthingOutOfRange):
        unproject(UTMCoordinate(18, hemisphere, 500000.0, northing))


def test_pyproj_backend_agrees():
    coord = GeodeticCoordinate(-33.8688, 151.2093)
    native = project(coord)
    reference = project(coord, backend="pyproj")
    assert native.easting_m == pytest.approx(reference.easting_m, abs=1e-3)
    assert native.northing_m == pytest.approx(reference.northing_m, abs=1e-3)
    back = unproject(native, backend="pyproj")
    assert back.latitude_deg == pytest.approx(-33.8688, abs=1e-8)
