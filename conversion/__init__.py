"""
Coordinate service: the external contract of the library.
"""

from conversion.service import (
    ConversionConfig,
    CoordinateService,
    from_mgrs,
    to_mgrs,
)

__all__ = [
    "ConversionConfig",
    "CoordinateService",
    "from_mgrs",
    "to_mgrs",
]
