"""
Coordinate Service: WGS84 geodetic <-> MGRS.

This is the only layer with an external contract. It composes

    geodetic -> MGRS :  encode(project(coord, zone_override))
    MGRS -> geodetic :  unproject(decode(text))

and converts the exceptions raised by the inner components into a
`ConversionResult` carrying exactly one error, tagged with the pipeline
stage it came from. Errors are never retried, clamped or partially
returned.

All operations are pure. A service instance holds only its frozen
configuration, so one instance may be shared by any number of threads.
"""

from dataclasses import dataclass
import logging
from typing import Callable, Optional, TypeVar

from common.constants import GeodeticConstants
from common.errors import ConversionError, ConversionResult, ConversionStage
from common.logging_config import ConversionAuditLogger, get_logger
from common.types import GeodeticCoordinate, MGRSCoordinate, UTMCoordinate
from geospatial.projections import PROJECTION_BACKENDS
from geospatial.utm import project, unproject
from grid_reference.decoder import mgrs_to_utm, parse_mgrs
from grid_reference.encoder import encode, format_mgrs

T = TypeVar("T")

# Shared by every service; each instance filters by its own configured level.
logger = get_logger(__name__, level=logging.DEBUG)


@dataclass(frozen=True)
class ConversionConfig:
    """Configuration of a coordinate service.

    Attributes
    ----------
    precision : int
        MGRS digits per axis produced by `to_mgrs`, 0 (100 km) to 5 (1 m).
    projection_backend : str
        "native" (Krüger series) or "pyproj" (PROJ).
    audit : bool
        Record every outcome in the process-wide `ConversionAuditLogger`.
    log_level : int
        Lowest level this service logs at; failures are logged at DEBUG.
    """
    precision: int = GeodeticConstants.MGRS_DEFAULT_PRECISION
    projection_backend: str = "native"
    audit: bool = False
    log_level: int = logging.WARNING

    def __post_init__(self):
        if isinstance(self.precision, bool) or not isinstance(self.precision, int) \
                or not 0 <= self.precision <= GeodeticConstants.MGRS_MAX_PRECISION:
            raise ValueError(f"precision must be an integer in [0, 5], got {self.precision!r}")
        if self.projection_backend not in PROJECTION_BACKENDS:
            raise ValueError(
                f"projection_backend must be one of {PROJECTION_BACKENDS}, "
                f"got {self.projection_backend!r}"
            )


def _run_stage(stage: ConversionStage, func: Callable[..., T], *args, **kwargs) -> T:
    """Call one pipeline stage, tagging any conversion error with the stage."""
    try:
        return func(*args, **kwargs)
    except ConversionError as exc:
        if exc.stage is None:
            exc.stage = stage
        raise


class CoordinateService:
    """Converts between WGS84 latitude/longitude and MGRS strings.

    Parameters
    ----------
    config : ConversionConfig, optional
        Precision, backend and audit settings (defaults: 1 m, native).

    Examples
    --------
    >>> service = CoordinateService()
    >>> service.to_mgrs(38.8895, -77.0353).unwrap()[:5]
    '18SUJ'
    >>> service.from_mgrs("not a grid reference").kind
    <ErrorKind.MALFORMED_MGRS_STRING: 'MalformedMGRSString'>
    """

    def __init__(self, config: Optional[ConversionConfig] = None):
        self.config = config or ConversionConfig()
        self._audit = ConversionAuditLogger() if self.config.audit else None

    # ------------------------------------------------------------------
    # Stage helpers (raise ConversionError tagged with the stage)
    # ------------------------------------------------------------------

    def geodetic_to_utm(
        self,
        latitude_deg: float,
        longitude_deg: float,
        zone_override: int = 0
    ) -> UTMCoordinate:
        coord = _run_stage(ConversionStage.INPUT, GeodeticCoordinate, latitude_deg, longitude_deg)
        return _run_stage(
            ConversionStage.PROJECT, project, coord, zone_override,
            backend=self.config.projection_backend
        )

    def utm_to_mgrs(
        self,
        utm: UTMCoordinate,
        precision: Optional[int] = None,
        latitude_deg: Optional[float] = None
    ) -> MGRSCoordinate:
        if precision is None:
            precision = self.config.precision
        return _run_stage(ConversionStage.ENCODE, encode, utm, precision, latitude_deg)

    def mgrs_to_utm(self, text: str) -> UTMCoordinate:
        mgrs = _run_stage(ConversionStage.DECODE, parse_mgrs, text)
        return _run_stage(ConversionStage.DECODE, mgrs_to_utm, mgrs)

    def utm_to_geodetic(self, utm: UTMCoordinate) -> GeodeticCoordinate:
        return _run_stage(
            ConversionStage.UNPROJECT, unproject, utm,
            backend=self.config.projection_backend
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def to_mgrs(
        self,
        latitude_deg: float,
        longitude_deg: float,
        zone_override: int = 0
    ) -> ConversionResult[str]:
        """Convert a WGS84 position to an MGRS string.

        Parameters
        ----------
        latitude_deg, longitude_deg : float
            Position in degrees.
        zone_override : int
            0 for the computed zone, otherwise a zone 1..60 within one zone
            of the computed one.

        Returns
        -------
        ConversionResult[str]
            The grid reference at the configured precision, or the error.
        """
        try:
            utm = self.geodetic_to_utm(latitude_deg, longitude_deg, zone_override)
            mgrs = self.utm_to_mgrs(utm, latitude_deg=latitude_deg)
        except ConversionError as exc:
            return self._failure("to_mgrs", exc, {
                "latitude_deg": latitude_deg,
                "longitude_deg": longitude_deg,
                "zone_override": zone_override,
            })
        return self._success("to_mgrs", format_mgrs(mgrs))

    def from_mgrs(self, text: str) -> ConversionResult[GeodeticCoordinate]:
        """Convert an MGRS string to a WGS84 position.

        Parameters
        ----------
        text : str
            Grid reference with 0..5 digits per axis.

        Returns
        -------
        ConversionResult[GeodeticCoordinate]
            Centre of the referenced cell, or the error.
        """
        try:
            coord = self.utm_to_geodetic(self.mgrs_to_utm(text))
        except ConversionError as exc:
            return self._failure("from_mgrs", exc, {"mgrs": text})
        return self._success("from_mgrs", coord)

    def _log(self, level: int, message: str) -> None:
        if level >= self.config.log_level:
            logger.log(level, message)

    def _success(self, operation: str, value: T) -> ConversionResult[T]:
        if self._audit is not None:
            self._audit.record_success(operation)
        return ConversionResult.success(value)

    def _failure(self, operation: str, error: ConversionError, context: dict) -> ConversionResult:
        self._log(logging.DEBUG, f"{operation} rejected {context}: {error}")
        if self._audit is not None:
            self._audit.record_failure(operation, error, context)
        return ConversionResult.failure(error)


_default_service = CoordinateService()


def to_mgrs(latitude_deg: float, longitude_deg: float, utm_zone_override: int = 0) -> ConversionResult[str]:
    """Module-level `CoordinateService.to_mgrs` with the default configuration."""
    return _default_service.to_mgrs(latitude_deg, longitude_deg, utm_zone_override)


def from_mgrs(mgrs_string: str) -> ConversionResult[GeodeticCoordinate]:
    """Module-level `CoordinateService.from_mgrs` with the default configuration."""
    return _default_service.from_mgrs(mgrs_string)
