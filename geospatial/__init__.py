"""
Geospatial Module: ellipsoid model and UTM projection.

All Earth-surface calculations of the library originate from this module.
The grid reference layer only shuffles letters and digits on top of it.

This module provides:
- The WGS84 ellipsoid and its Krüger series coefficients
- Transverse Mercator projection adapters (native series, pyproj)
- UTM forward and inverse projection with zone rules
"""

from geospatial.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    conformal_tangent,
    geodetic_tangent,
)

from geospatial.projections import (
    ProjectionAdapter,
    TransverseMercator,
    PyprojTransverseMercator,
    create_projection,
)

from geospatial.utm import (
    central_meridian,
    default_zone,
    resolve_zone,
    project,
    unproject,
)

__all__ = [
    # Ellipsoid model
    "EllipsoidParameters",
    "WGS84Ellipsoid",
    "conformal_tangent",
    "geodetic_tangent",
    # Projections
    "ProjectionAdapter",
    "TransverseMercator",
    "PyprojTransverseMercator",
    "create_projection",
    # UTM
    "central_meridian",
    "default_zone",
    "resolve_zone",
    "project",
    "unproject",
]
