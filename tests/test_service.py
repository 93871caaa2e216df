import json
import logging
import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from common.errors import (
    ConversionResult,
    ConversionStage,
    ErrorKind,
    MalformedMGRSString,
)
from common.logging_config import ConversionAuditLogger
from conversion.service import (
    ConversionConfig,
    CoordinateService,
    from_mgrs,
    to_mgrs,
)

# generous radius so the bound holds for both meridional and normal curvature
EARTH_RADIUS_BOUND = 6400000.0


def ground_distance(lat1, lon1, lat2, lon2):
    dlon = (lon2 - lon1 + 180.0) % 360.0 - 180.0
    dy = math.radians(lat2 - lat1) * EARTH_RADIUS_BOUND
    dx = math.radians(dlon) * EARTH_RADIUS_BOUND * math.cos(math.radians(lat1))
    return math.hypot(dx, dy)


@pytest.fixture
def service():
    return CoordinateService()


@pytest.fixture
def audit():
    ledger = ConversionAuditLogger()
    ledger.reset()
    yield ledger
    ledger.reset()


# ----------------------------------------------------------------------
# Known references
# ----------------------------------------------------------------------

def test_washington_monument(service):
    result = service.to_mgrs(38.8895, -77.0353)
    assert result.ok
    text = result.value
    assert text.startswith("18SUJ")
    assert len(text) == 15
    assert int(text[5:10]) == pytest.approx(23480, abs=150)
    assert int(text[10:]) == pytest.approx(6480, abs=150)


def test_washington_monument_decodes_nearby(service):
    coord = service.from_mgrs("18SUJ2338306479").unwrap()
    assert coord.latitude_deg == pytest.approx(38.8895, abs=0.002)
    assert coord.longitude_deg == pytest.approx(-77.0353, abs=0.002)


@pytest.mark.parametrize("lat, lon, expected", [
    (0.0, 0.0, "31NAA6602100000"),
    (42.0, -93.0, "15TWG0000049776"),
])
def test_known_references(service, lat, lon, expected):
    assert service.to_mgrs(lat, lon).unwrap() == expected


def test_decode_partial_precision(service):
    coord = service.from_mgrs("4QFJ12345678").unwrap()
    assert coord.longitude_deg == pytest.approx(-157.916, abs=0.01)
    assert 16.0 <= coord.latitude_deg < 24.0


# ----------------------------------------------------------------------
# Round trip and precision
# ----------------------------------------------------------------------

def test_round_trip_within_one_metre_cell(service):
    for lat in np.linspace(-80.0, 84.0, 42):
        for lon in np.linspace(-180.0, 180.0, 25):
            text = service.to_mgrs(float(lat), float(lon)).unwrap()
            back = service.from_mgrs(text).unwrap()
            assert ground_distance(lat, lon, back.latitude_deg, back.longitude_deg) <= 1.0, text


def test_decoded_centre_is_within_half_a_cell(service):
    true_utm = service.geodetic_to_utm(-33.8688, 151.2093)
    centre = service.mgrs_to_utm(service.to_mgrs(-33.8688, 151.2093).unwrap())
    assert abs(true_utm.easting_m - centre.easting_m) <= 0.5
    assert abs(true_utm.northing_m - centre.northing_m) <= 0.5


def test_precision_bounds_the_decoding_error():
    centres = []
    for precision in range(6):
        svc = CoordinateService(ConversionConfig(precision=precision))
        true_utm = svc.geodetic_to_utm(38.8895, -77.0353)
        text = svc.to_mgrs(38.8895, -77.0353).unwrap()
        assert len(text) == 5 + 2 * precision
        centre = svc.mgrs_to_utm(text)
        error = math.hypot(true_utm.easting_m - centre.easting_m,
                           true_utm.northing_m - centre.northing_m)
        assert error <= 10 ** (5 - precision)
        centres.append((centre, 10 ** (5 - precision) / 2))

    # every finer cell lies inside the coarser one, so the worst case shrinks
    for (coarse, coarse_half), (fine, fine_half) in zip(centres, centres[1:]):
        assert abs(fine.easting_m - coarse.easting_m) <= coarse_half - fine_half
        assert abs(fine.northing_m - coarse.northing_m) <= coarse_half - fine_half


def test_to_mgrs_is_idempotent(service):
    first = [service.to_mgrs(lat, -77.0353).value for lat in (0.0, 38.8895, -45.0, 84.0)]
    second = [service.to_mgrs(lat, -77.0353).value for lat in (0.0, 38.8895, -45.0, 84.0)]
    assert first == second


# ----------------------------------------------------------------------
# Zone override
# ----------------------------------------------------------------------

@pytest.mark.parametrize("zone", [13, 14, 15])
def test_neighbouring_zone_override_is_accepted(service, zone):
    text = service.to_mgrs(60.0, -99.0, zone).unwrap()
    assert text.startswith(f"{zone}V")
    back = service.from_mgrs(text).unwrap()
    assert ground_distance(60.0, -99.0, back.latitude_deg, back.longitude_deg) <= 1.0


@pytest.mark.parametrize("zone", [12, 16, 61, -1])
def test_distant_zone_override_is_rejected(service, zone):
    result = service.to_mgrs(60.0, -99.0, zone)
    assert result.kind is ErrorKind.INVALID_ZONE_OVERRIDE
    assert result.error.stage is ConversionStage.PROJECT


def test_override_into_missing_svalbard_zone(service):
    result = service.to_mgrs(78.0, 10.0, 32)
    assert result.kind is ErrorKind.INVALID_ZONE_OVERRIDE
    assert result.error.stage is ConversionStage.PROJECT
    assert service.to_mgrs(78.0, 10.0).unwrap().startswith("33X")


def test_override_at_antimeridian(service):
    assert service.to_mgrs(10.0, 179.9, 1).unwrap().startswith("1P")


def test_override_outside_forced_zone_strip(service):
    # zone 19 is adjacent but puts Washington west of the first column
    result = service.to_mgrs(38.8895, -77.0353, 19)
    assert result.kind is ErrorKind.EASTING_OUT_OF_RANGE
    assert result.error.stage is ConversionStage.ENCODE


# ----------------------------------------------------------------------
# Rejected input
# ----------------------------------------------------------------------

@pytest.mark.parametrize("lat, lon, kind, stage", [
    (91.0, 0.0, ErrorKind.LATITUDE_OUT_OF_RANGE, ConversionStage.INPUT),
    (float("nan"), 0.0, ErrorKind.LATITUDE_OUT_OF_RANGE, ConversionStage.INPUT),
    (0.0, 181.0, ErrorKind.LONGITUDE_OUT_OF_RANGE, ConversionStage.INPUT),
    (84.0001, 0.0, ErrorKind.POLAR_REGION_UNSUPPORTED, ConversionStage.PROJECT),
    (-80.5, 0.0, ErrorKind.POLAR_REGION_UNSUPPORTED, ConversionStage.PROJECT),
])
def test_to_mgrs_rejects(service, lat, lon, kind, stage):
    result = service.to_mgrs(lat, lon)
    assert not result.ok
    assert result.value is None
    assert result.kind is kind
    assert result.error.stage is stage


def test_grid_limits_are_inclusive(service):
    assert service.to_mgrs(84.0, 0.0).unwrap().startswith("31X")
    assert service.to_mgrs(-80.0, 0.0).unwrap().startswith("31C")


@pytest.mark.parametrize("text, kind", [
    ("", ErrorKind.MALFORMED_MGRS_STRING),
    ("ZZinvalid", ErrorKind.MALFORMED_MGRS_STRING),
    ("18SUJ233", ErrorKind.MALFORMED_MGRS_STRING),
    ("18RUJ2338306479", ErrorKind.MALFORMED_MGRS_STRING),
    ("ZGC2000000000", ErrorKind.POLAR_REGION_UNSUPPORTED),
    ("32XNG0000000000", ErrorKind.MALFORMED_MGRS_STRING),
])
def test_from_mgrs_rejects(service, text, kind):
    result = service.from_mgrs(text)
    assert result.kind is kind
    assert result.error.stage is ConversionStage.DECODE


def test_unwrap_raises_the_tagged_error(service):
    with pytest.raises(MalformedMGRSString) as excinfo:
        service.from_mgrs("not a grid reference").unwrap()
    assert str(excinfo.value).startswith("MalformedMGRSString [decode]")


def test_result_holds_exactly_one_outcome():
    with pytest.raises(ValueError):
        ConversionResult(value=None, error=None)
    with pytest.raises(ValueError):
        ConversionResult(value="18SUJ", error=MalformedMGRSString("x"))
    assert ConversionResult.success("18SUJ").map(len).value == 5
    failed = ConversionResult.failure(MalformedMGRSString("x"))
    assert failed.map(len) is failed


# ----------------------------------------------------------------------
# Configuration, backends, module functions
# ----------------------------------------------------------------------

@pytest.mark.parametrize("kwargs", [
    {"precision": 6},
    {"precision": -1},
    {"precision": True},
    {"precision": 2.0},
    {"projection_backend": "gdal"},
])
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        ConversionConfig(**kwargs)


def test_pyproj_backend_gives_same_reference():
    native = CoordinateService()
    reference = CoordinateService(ConversionConfig(projection_backend="pyproj"))
    for lat, lon in [(38.8895, -77.0353), (-33.8688, 151.2093), (51.5, -0.12)]:
        assert reference.to_mgrs(lat, lon).unwrap() == native.to_mgrs(lat, lon).unwrap()
    back = reference.from_mgrs("18SUJ2338306479").unwrap()
    assert back.latitude_deg == pytest.approx(
        native.from_mgrs("18SUJ2338306479").unwrap().latitude_deg, abs=1e-8
    )


def test_module_level_functions():
    assert to_mgrs(42.0, -93.0).unwrap() == "15TWG0000049776"
    assert to_mgrs(60.0, -99.0, utm_zone_override=13).unwrap().startswith("13V")
    assert from_mgrs("18SUJ2338306479").ok
    assert from_mgrs("bogus").kind is ErrorKind.MALFORMED_MGRS_STRING


def _service_records(caplog):
    return [r for r in caplog.records if r.name == "conversion.service"]


def test_log_level_is_per_service(caplog):
    loud = CoordinateService(ConversionConfig(log_level=logging.DEBUG))
    quiet = CoordinateService()
    CoordinateService(ConversionConfig(log_level=logging.DEBUG))

    quiet.from_mgrs("bogus")
    from_mgrs("bogus")
    assert _service_records(caplog) == []

    loud.from_mgrs("bogus")
    records = _service_records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.DEBUG
    assert "from_mgrs rejected" in records[0].getMessage()


def test_service_is_safe_to_share_between_threads(service):
    points = [(float(lat), float(lon))
              for lat in np.linspace(-70.0, 70.0, 8)
              for lon in np.linspace(-170.0, 170.0, 8)]
    expected = [service.to_mgrs(lat, lon).unwrap() for lat, lon in points]
    with ThreadPoolExecutor(max_workers=8) as pool:
        actual = list(pool.map(lambda p: service.to_mgrs(*p).unwrap(), points))
    assert actual == expected


# ----------------------------------------------------------------------
# Audit ledger
# ----------------------------------------------------------------------

def test_audit_counts_outcomes(audit):
    svc = CoordinateService(ConversionConfig(audit=True))
    svc.to_mgrs(38.8895, -77.0353)
    svc.to_mgrs(95.0, 0.0)
    svc.from_mgrs("ZZinvalid")
    svc.from_mgrs("18SUJ")

    summary = audit.summary()
    assert summary["successes"] == {"to_mgrs": 1, "from_mgrs": 1}
    assert summary["total_failures"] == 2
    assert summary["failure_counts_by_kind"] == {
        "LatitudeOutOfRange": 1,
        "MalformedMGRSString": 1,
    }


def test_audit_is_off_by_default(audit, service):
    service.to_mgrs(95.0, 0.0)
    assert audit.summary()["total_failures"] == 0


def test_audit_is_a_singleton():
    assert ConversionAuditLogger() is ConversionAuditLogger()


def test_audit_export(audit, tmp_path):
    svc = CoordinateService(ConversionConfig(audit=True))
    svc.from_mgrs("18SUJ233")
    path = tmp_path / "audit.json"
    audit.export(path)

    data = json.loads(path.read_text())
    assert data["summary"]["total_failures"] == 1
    failure = data["failures"][0]
    assert failure["operation"] == "from_mgrs"
    assert failure["kind"] == "MalformedMGRSString"
    assert failure["stage"] == "decode"
    assert failure["context"] == {"mgrs": "18SUJ233"}
