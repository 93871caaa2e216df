"""
Error Taxonomy and Result Type for Coordinate Conversion.

Every failure in the conversion pipeline stems from invalid input, never
from a transient condition, so every error is terminal for the call that
raised it. Components raise one of the `ConversionError` subclasses below;
the coordinate service turns them into a `ConversionResult` carrying
exactly one tagged error.

Error Kinds
-----------
- LatitudeOutOfRange, LongitudeOutOfRange: geodetic input outside
  [-90, 90] / [-180, 180].
- InvalidZoneOverride: requested UTM zone is not the default zone or one
  of its neighbours.
- PolarRegionUnsupported: latitude above 84N or below 80S, where MGRS
  switches to the polar stereographic (UPS) grid.
- ZoneOutOfRange, EastingOutOfRange, NorthingOutOfRange: UTM values that
  are non-physical for the requested operation.
- PrecisionOutOfRange: MGRS precision outside 0..5 digits per axis.
- MalformedMGRSString: text that cannot be parsed as an MGRS reference.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(Enum):
    """Tag identifying which validation rule a conversion violated."""
    LATITUDE_OUT_OF_RANGE = "LatitudeOutOfRange"
    LONGITUDE_OUT_OF_RANGE = "LongitudeOutOfRange"
    INVALID_ZONE_OVERRIDE = "InvalidZoneOverride"
    POLAR_REGION_UNSUPPORTED = "PolarRegionUnsupported"
    ZONE_OUT_OF_RANGE = "ZoneOutOfRange"
    EASTING_OUT_OF_RANGE = "EastingOutOfRange"
    NORTHING_OUT_OF_RANGE = "NorthingOutOfRange"
    PRECISION_OUT_OF_RANGE = "PrecisionOutOfRange"
    MALFORMED_MGRS_STRING = "MalformedMGRSString"


class ConversionStage(Enum):
    """Pipeline stage an error originated from."""
    INPUT = "input"
    PROJECT = "project"
    UNPROJECT = "unproject"
    ENCODE = "encode"
    DECODE = "decode"


class ConversionError(ValueError):
    """Base class of all conversion failures.

    Parameters
    ----------
    message : str
        Human-readable description suitable for showing to an end user.
    stage : ConversionStage, optional
        Stage that raised the error. Usually left unset by the components
        and filled in by the coordinate service.
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, stage: Optional[ConversionStage] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value} [{self.stage.value}]: {self.message}"


class LatitudeOutOfRange(ConversionError):
    kind = ErrorKind.LATITUDE_OUT_OF_RANGE


class LongitudeOutOfRange(ConversionError):
    kind = ErrorKind.LONGITUDE_OUT_OF_RANGE


class InvalidZoneOverride(ConversionError):
    kind = ErrorKind.INVALID_ZONE_OVERRIDE


class PolarRegionUnsupported(ConversionError):
    kind = ErrorKind.POLAR_REGION_UNSUPPORTED


class ZoneOutOfRange(ConversionError):
    kind = ErrorKind.ZONE_OUT_OF_RANGE


class EastingOutOfRange(ConversionError):
    kind = ErrorKind.EASTING_OUT_OF_RANGE


class NorthingOutOfRange(ConversionError):
    kind = ErrorKind.NORTHING_OUT_OF_RANGE


class PrecisionOutOfRange(ConversionError):
    kind = ErrorKind.PRECISION_OUT_OF_RANGE


class MalformedMGRSString(ConversionError):
    kind = ErrorKind.MALFORMED_MGRS_STRING


@dataclass(frozen=True)
class ConversionResult(Generic[T]):
    """Outcome of a public conversion: either a value or exactly one error.

    Attributes
    ----------
    value : T, optional
        The converted coordinate when the conversion succeeded.
    error : ConversionError, optional
        The tagged error when it failed.

    Examples
    --------
    >>> result = ConversionResult.success("18SUJ2338306479")
    >>> result.ok
    True
    >>> result.unwrap()
    '18SUJ2338306479'
    """
    value: Optional[T] = None
    error: Optional[ConversionError] = None

    def __post_init__(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("ConversionResult needs exactly one of value or error")

    @classmethod
    def success(cls, value: T) -> "ConversionResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ConversionError) -> "ConversionResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind of a failed result, None on success."""
        return None if self.error is None else self.error.kind

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def map(self, func: Callable[[T], "U"]) -> "ConversionResult":
        """Apply `func` to a successful value; failures pass through."""
        if self.error is not None:
            return self
        return ConversionResult.success(func(self.value))

