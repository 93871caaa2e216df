"""
Common infrastructure for the WGS84 / UTM / MGRS conversion library.

This package provides foundational components used across all modules:
- Geodetic and grid constants with provenance
- Coordinate value types
- Error taxonomy and the conversion result type
- Logging and conversion audit trail
"""

from common.constants import GeodeticConstants
from common.errors import (
    ConversionError,
    ConversionResult,
    ConversionStage,
    ErrorKind,
)
from common.types import (
    GeodeticCoordinate,
    Hemisphere,
    MGRSCoordinate,
    UTMCoordinate,
)
from common.logging_config import get_logger, ConversionAuditLogger

__all__ = [
    "GeodeticConstants",
    "ConversionError",
    "ConversionResult",
    "ConversionStage",
    "ErrorKind",
    "GeodeticCoordinate",
    "Hemisphere",
    "MGRSCoordinate",
    "UTMCoordinate",
    "get_logger",
    "ConversionAuditLogger",
]
