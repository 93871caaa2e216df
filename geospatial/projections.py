"""
Transverse Mercator Projection Backends.

This module provides the ellipsoidal transverse Mercator projection that
underlies UTM, behind a small adapter interface so that the grid layers do
not depend on how the projection is evaluated.

Implementation
--------------
Two adapters are provided:

- `TransverseMercator`: native evaluation of the Krüger n-series (6th
  order) in closed form, with a bounded Newton step for the latitude. This
  is the default and has no runtime requirement beyond numpy.
- `PyprojTransverseMercator`: delegates to PROJ through `pyproj`. Useful as
  an independent implementation to cross-check the native series.

Both accept and return radians and meters, and both operate on scalars or
numpy arrays.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- Karney, C.F.F. (2011). Transverse Mercator with an accuracy of a few
  nanometers. J. Geodesy 85(8), 475-485.
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np
from pyproj import CRS, Transformer

from common.constants import GeodeticConstants
from geospatial.coordinate_models import (
    ArrayLike,
    EllipsoidParameters,
    WGS84Ellipsoid,
    conformal_tangent,
    geodetic_tangent,
)

PROJECTION_BACKENDS = ("native", "pyproj")


def _as_output(value: ArrayLike) -> ArrayLike:
    """Return python floats for scalar input, arrays otherwise."""
    arr = np.asarray(value, dtype=np.float64)
    return float(arr) if arr.ndim == 0 else arr


class ProjectionAdapter(ABC):
    """Abstract base class for transverse Mercator adapters.

    All projection backends in this system implement this interface so
    the UTM layer can swap them without changing results beyond their
    numerical noise.
    """

    def __init__(
        self,
        central_meridian_deg: float,
        scale_factor: float = GeodeticConstants.UTM_SCALE_FACTOR.value,
        false_easting: float = GeodeticConstants.UTM_FALSE_EASTING.value,
        false_northing: float = 0.0
    ):
        self._central_meridian = central_meridian_deg
        self._scale_factor = scale_factor
        self._false_easting = false_easting
        self._false_northing = false_northing

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the projection."""
        pass

    @property
    def central_meridian_deg(self) -> float:
        return self._central_meridian

    @property
    def proj4_string(self) -> str:
        """PROJ.4 definition string."""
        return (
            f"+proj=tmerc +lat_0=0 +lon_0={self._central_meridian} "
            f"+k={self._scale_factor} +x_0={self._false_easting} "
            f"+y_0={self._false_northing} +ellps=WGS84 +units=m +no_defs"
        )

    @abstractmethod
    def to_projected(
        self,
        lat_rad: ArrayLike,
        lon_rad: ArrayLike
    ) -> Tuple[ArrayLike, ArrayLike]:
        """Transform geodetic coordinates to projected coordinates.

        Parameters
        ----------
        lat_rad, lon_rad : float or ndarray
            Geodetic coordinates in radians.

        Returns
        -------
        Tuple
            (x, y) projected coordinates in meters, false origin included.
        """
        pass

    @abstractmethod
    def to_geodetic(
        self,
        x: ArrayLike,
        y: ArrayLike
    ) -> Tuple[ArrayLike, ArrayLike]:
        """Transform projected coordinates to geodetic.

        Parameters
        ----------
        x, y : float or ndarray
            Projected coordinates in meters, false origin included.

        Returns
        -------
        Tuple
            (lat_rad, lon_rad) geodetic coordinates in radians.
        """
        pass


class TransverseMercator(ProjectionAdapter):
    """Ellipsoidal transverse Mercator evaluated with the Krüger series.

    Parameters
    ----------
    central_meridian_deg : float
        Central meridian longitude in degrees.
    scale_factor : float
        Scale factor at central meridian (default: 0.9996 for UTM).
    false_easting : float
        False easting in meters (default: 500000 for UTM).
    false_northing : float
        False northing in meters (0 north, 10000000 south for UTM).
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Notes
    -----
    Forward: geodetic latitude -> conformal latitude -> Gauss-Schreiber
    (spherical TM) coordinates ξ', η' -> Krüger series -> ξ, η.
    Inverse runs the same chain backwards with the β series, which at η = 0
    is the footpoint (rectifying to conformal latitude) series.
    """

    def __init__(
        self,
        central_meridian_deg: float,
        scale_factor: float = GeodeticConstants.UTM_SCALE_FACTOR.value,
        false_easting: float = GeodeticConstants.UTM_FALSE_EASTING.value,
        false_northing: float = 0.0,
        ellipsoid: EllipsoidParameters = WGS84Ellipsoid
    ):
        super().__init__(central_meridian_deg, scale_factor, false_easting, false_northing)
        self._ellipsoid = ellipsoid
        self._lon0_rad = np.radians(central_meridian_deg)
        self._k0_A = scale_factor * ellipsoid.rectifying_radius

    @property
    def name(self) -> str:
        return f"Transverse Mercator (CM={self._central_meridian}°)"

    def to_projected(self, lat_rad: ArrayLike, lon_rad: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        lam = np.asarray(lon_rad, dtype=np.float64) - self._lon0_rad
        # keep the longitude difference in (-pi, pi] across the antimeridian
        lam = np.arctan2(np.sin(lam), np.cos(lam))
        cos_lam = np.cos(lam)

        tau_p = conformal_tangent(np.tan(lat_rad), self._ellipsoid)
        xi_p = np.arctan2(tau_p, cos_lam)
        eta_p = np.arcsinh(np.sin(lam) / np.hypot(tau_p, cos_lam))

        xi = xi_p
        eta = eta_p
        for j, alpha_j in enumerate(self._ellipsoid.alpha, start=1):
            xi = xi + alpha_j * np.sin(2 * j * xi_p) * np.cosh(2 * j * eta_p)
            eta = eta + alpha_j * np.cos(2 * j * xi_p) * np.sinh(2 * j * eta_p)

        x = self._false_easting + self._k0_A * eta
        y = self._false_northing + self._k0_A * xi
        return _as_output(x), _as_output(y)

    def to_geodetic(self, x: ArrayLike, y: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        xi = (np.asarray(y, dtype=np.float64) - self._false_northing) / self._k0_A
        eta = (np.asarray(x, dtype=np.float64) - self._false_easting) / self._k0_A

        xi_p = xi
        eta_p = eta
        for j, beta_j in enumerate(self._ellipsoid.beta, start=1):
            xi_p = xi_p - beta_j * np.sin(2 * j * xi) * np.cosh(2 * j * eta)
            eta_p = eta_p - beta_j * np.cos(2 * j * xi) * np.sinh(2 * j * eta)

        sinh_eta_p = np.sinh(eta_p)
        cos_xi_p = np.cos(xi_p)
        tau_p = np.sin(xi_p) / np.hypot(sinh_eta_p, cos_xi_p)
        lam = np.arctan2(sinh_eta_p, cos_xi_p)

        lat = np.arctan(geodetic_tangent(tau_p, self._ellipsoid))
        lon = self._lon0_rad + lam
        return _as_output(lat), _as_output(lon)


class PyprojTransverseMercator(ProjectionAdapter):
    """Transverse Mercator evaluated by PROJ through pyproj.

    Parameters are identical to `TransverseMercator`. Only WGS84 is
    supported, matching the rest of the system.
    """

    def __init__(
        self,
        central_meridian_deg: float,
        scale_factor: float = GeodeticConstants.UTM_SCALE_FACTOR.value,
        false_easting: float = GeodeticConstants.UTM_FALSE_EASTING.value,
        false_northing: float = 0.0
    ):
        super().__init__(central_meridian_deg, scale_factor, false_easting, false_northing)

        self._crs_geo = CRS.from_epsg(4326)  # WGS84
        self._crs_proj = CRS.from_proj4(self.proj4_string)
        self._to_proj = Transformer.from_crs(self._crs_geo, self._crs_proj, always_xy=True)
        self._to_geo = Transformer.from_crs(self._crs_proj, self._crs_geo, always_xy=True)

    @property
    def name(self) -> str:
        return f"Transverse Mercator via PROJ (CM={self._central_meridian}°)"

    def to_projected(self, lat_rad: ArrayLike, lon_rad: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        lat_deg = np.degrees(lat_rad)
        lon_deg = np.degrees(lon_rad)
        x, y = self._to_proj.transform(lon_deg, lat_deg)
        return _as_output(x), _as_output(y)

    def to_geodetic(self, x: ArrayLike, y: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        lon_deg, lat_deg = self._to_geo.transform(x, y)
        return _as_output(np.radians(lat_deg)), _as_output(np.radians(lon_deg))


def create_projection(
    central_meridian_deg: float,
    false_northing: float = 0.0,
    backend: str = "native"
) -> ProjectionAdapter:
    """Build a UTM-parameterised transverse Mercator adapter.

    Parameters
    ----------
    central_meridian_deg : float
        Central meridian of the zone in degrees.
    false_northing : float
        0 for the northern hemisphere, 10000000 for the southern.
    backend : str
        One of:
        - "native": Krüger series (default)
        - "pyproj": PROJ through pyproj

    Returns
    -------
    ProjectionAdapter
        Adapter with UTM scale factor and false easting.
    """
    if backend == "native":
        return TransverseMercator(central_meridian_deg, false_northing=false_northing)
    if backend == "pyproj":
        return PyprojTransverseMercator(central_meridian_deg, false_northing=false_northing)
    raise ValueError(
        f"Unknown projection backend {backend!r}, expected one of {PROJECTION_BACKENDS}"
    )
