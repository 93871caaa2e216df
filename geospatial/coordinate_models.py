"""
Ellipsoid Model for Transverse Mercator Calculations.

This module holds the WGS84 reference ellipsoid and the quantities derived
from it that both projection directions consume: eccentricity, third
flattening, the rectifying radius and the Krüger series coefficients. All
of them are computed once at import and are read-only thereafter.

Scientific Context
------------------
Domain: Geodesy, conformal map projections
Model: WGS84 reference ellipsoid (not spherical approximation)

The Krüger series expands the ellipsoidal transverse Mercator projection
in powers of the third flattening n = f / (2 - f). For WGS84 n is about
1.7e-3, so truncating at n^6 leaves errors of a few nanometers within
4000 km of the central meridian.

References
----------
- NIMA TR8350.2: WGS84 parameters
- Krüger, L. (1912). Konforme Abbildung des Erdellipsoids in der Ebene.
- Karney, C.F.F. (2011). Transverse Mercator with an accuracy of a few
  nanometers. J. Geodesy 85(8), 475-485.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union

import numpy as np
from numpy.typing import NDArray

from common.constants import GeodeticConstants

ArrayLike = Union[float, NDArray[np.float64]]

# Newton iteration limits for recovering geodetic from conformal latitude.
# Convergence is quadratic; two or three steps suffice below 84 degrees.
_TAU_MAX_ITERATIONS = 10
_TAU_TOLERANCE = 1e-12


def _kruger_alpha(n: float) -> Tuple[float, ...]:
    """Forward series coefficients alpha_1..alpha_6 (Karney 2011, eq. 35)."""
    n2, n3, n4, n5, n6 = n**2, n**3, n**4, n**5, n**6
    return (
        n / 2 - 2 * n2 / 3 + 5 * n3 / 16 + 41 * n4 / 180
        - 127 * n5 / 288 + 7891 * n6 / 37800,
        13 * n2 / 48 - 3 * n3 / 5 + 557 * n4 / 1440
        + 281 * n5 / 630 - 1983433 * n6 / 1935360,
        61 * n3 / 240 - 103 * n4 / 140 + 15061 * n5 / 26880
        + 167603 * n6 / 181440,
        49561 * n4 / 161280 - 179 * n5 / 168 + 6601661 * n6 / 7257600,
        34729 * n5 / 80640 - 3418889 * n6 / 1995840,
        212378941 * n6 / 319334400,
    )


def _kruger_beta(n: float) -> Tuple[float, ...]:
    """Inverse series coefficients beta_1..beta_6 (Karney 2011, eq. 36)."""
    n2, n3, n4, n5, n6 = n**2, n**3, n**4, n**5, n**6
    return (
        n / 2 - 2 * n2 / 3 + 37 * n3 / 96 - n4 / 360
        - 81 * n5 / 512 + 96199 * n6 / 604800,
        n2 / 48 + n3 / 15 - 437 * n4 / 1440
        + 46 * n5 / 105 - 1118711 * n6 / 3870720,
        17 * n3 / 480 - 37 * n4 / 840 - 209 * n5 / 4480
        + 5569 * n6 / 90720,
        4397 * n4 / 161280 - 11 * n5 / 504 - 830251 * n6 / 7257600,
        4583 * n5 / 161280 - 108847 * n6 / 3991680,
        20648693 * n6 / 638668800,
    )


@dataclass(frozen=True)
class EllipsoidParameters:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    f : float
        Flattening: f = (a - b) / a
    name : str
        Identifier for the ellipsoid.

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    e2 : float
        First eccentricity squared: e² = f(2 - f)
    n : float
        Third flattening: n = (a - b) / (a + b)
    rectifying_radius : float
        A = a / (1 + n) * (1 + n²/4 + n⁴/64 + n⁶/256), the radius of the
        sphere with the same meridian length.
    alpha, beta : tuple of float
        Krüger forward and inverse series coefficients.
    """
    a: float
    f: float
    name: str
    alpha: Tuple[float, ...] = field(init=False, repr=False)
    beta: Tuple[float, ...] = field(init=False, repr=False)

    def __post_init__(self):
        # frozen dataclass: the series coefficients are fixed at construction
        object.__setattr__(self, "alpha", _kruger_alpha(self.n))
        object.__setattr__(self, "beta", _kruger_beta(self.n))

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def e(self) -> float:
        """First eccentricity."""
        return float(np.sqrt(self.e2))

    @property
    def n(self) -> float:
        """Third flattening."""
        return self.f / (2 - self.f)

    @property
    def rectifying_radius(self) -> float:
        """Rectifying radius A in meters."""
        n2 = self.n**2
        return self.a / (1 + self.n) * (1 + n2 / 4 + n2**2 / 64 + n2**3 / 256)


# WGS84 ellipsoid - the only ellipsoid this system supports
WGS84Ellipsoid = EllipsoidParameters(
    a=GeodeticConstants.EARTH_SEMI_MAJOR_AXIS.value,
    f=GeodeticConstants.EARTH_FLATTENING.value,
    name="WGS84"
)


def conformal_tangent(
    tau: ArrayLike,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> ArrayLike:
    """Map tan(geodetic latitude) to tan(conformal latitude).

    Parameters
    ----------
    tau : float or ndarray
        Tangent of the geodetic latitude.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float or ndarray
        Tangent of the conformal latitude.

    Notes
    -----
    τ' = τ √(1 + σ²) - σ √(1 + τ²),  σ = sinh(e atanh(e τ / √(1 + τ²)))

    Written in terms of tangents so that it stays well conditioned up to
    the poles.
    """
    e = ellipsoid.e
    tau1 = np.hypot(1.0, tau)
    sig = np.sinh(e * np.arctanh(e * tau / tau1))
    return tau * np.hypot(1.0, sig) - sig * tau1


def geodetic_tangent(
    tau_prime: ArrayLike,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> ArrayLike:
    """Invert `conformal_tangent` by Newton's method.

    Parameters
    ----------
    tau_prime : float or ndarray
        Tangent of the conformal latitude.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Returns
    -------
    float or ndarray
        Tangent of the geodetic latitude.

    Notes
    -----
    The iteration is bounded at 10 steps. Starting from τ = τ' it reaches
    the 1e-12 tolerance in at most three steps anywhere in the UTM range,
    so the bound is never the limiting factor.
    """
    e2 = ellipsoid.e2
    tau = np.asarray(tau_prime, dtype=np.float64) / (1 - e2)
    for _ in range(_TAU_MAX_ITERATIONS):
        tau_i_prime = conformal_tangent(tau, ellipsoid)
        d_tau = (
            (tau_prime - tau_i_prime) / np.hypot(1.0, tau_i_prime)
            * (1 + (1 - e2) * tau**2) / ((1 - e2) * np.hypot(1.0, tau))
        )
        tau = tau + d_tau
        if np.all(np.abs(d_tau) < _TAU_TOLERANCE * np.maximum(1.0, np.abs(tau))):
            break
    return tau
