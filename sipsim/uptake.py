from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from scipy.optimize import brentq
from scipy.special import erf, erfc, jn_zeros

from .errors import ParameterError
from .films import ArrayLike, _out, check_geometry
from .settings import settings

logger = logging.getLogger(__name__)

# below this D t / size^2 the eigenfunction series is replaced by the
# short-time (error function) solutions
_SHORT_TIME_TAU = 1e-3
_SQRT_PI = np.sqrt(np.pi)


def _series_terms(n_terms: Optional[int]) -> int:
    n = settings.series_terms if n_terms is None else int(n_terms)
    if n < 1:
        raise ParameterError("n_terms must be at least 1")
    return n


def _ierfc(x: np.ndarray) -> np.ndarray:
    return np.exp(-x**2) / _SQRT_PI - x * erfc(x)


def _short_time_uptake(tau: np.ndarray, geometry: str) -> np.ndarray:
    """Crank's short-time solutions in tau = D t / size^2."""
    root = np.sqrt(tau)
    if geometry == "cylinder":
        return 4.0 * root / _SQRT_PI - tau - tau * root / (3.0 * _SQRT_PI)
    n = np.arange(1, 6, dtype=float)
    x = n / np.where(root > 0, root, 1.0)[..., None]
    if geometry == "slab":
        images = np.sum((-1.0) ** n * _ierfc(x), axis=-1)
        return 2.0 * root * (1.0 / _SQRT_PI + 2.0 * images)
    images = np.sum(_ierfc(x), axis=-1)
    return 6.0 * root * (1.0 / _SQRT_PI + 2.0 * images) - 3.0 * tau


def fractional_uptake(
    t: ArrayLike,
    D: float,
    size: float,
    geometry: str = "slab",
    n_terms: Optional[int] = None,
) -> ArrayLike:
    """Fraction of equilibrium uptake M_t/M_inf for pure diffusion (Crank).

    size is the thickness of a slab sealed on its back face (the half-thickness
    of a sheet exposed on both faces) or the radius of a cylinder or sphere.
    """
    check_geometry(geometry)
    if D <= 0 or size <= 0:
        raise ParameterError("D and size must be positive")
    ts = np.asarray(t, dtype=float)
    if np.any(ts < 0):
        raise ParameterError("t must be non-negative")
    n = np.arange(_series_terms(n_terms), dtype=float)
    tau = D * ts / size**2
    if geometry == "slab":
        m = 2.0 * n + 1.0
        coeff = 8.0 / (m**2 * np.pi**2)
        rates = m**2 * np.pi**2 / 4.0
    elif geometry == "cylinder":
        alpha = jn_zeros(0, len(n))
        coeff = 4.0 / alpha**2
        rates = alpha**2
    else:
        m = n + 1.0
        coeff = 6.0 / (np.pi**2 * m**2)
        rates = m**2 * np.pi**2
    series = 1.0 - np.sum(coeff * np.exp(-rates * tau[..., None]), axis=-1)
    # a truncated series stalls at the omitted terms for small tau
    fraction = np.where(tau < _SHORT_TIME_TAU, _short_time_uptake(tau, geometry), series)
    fraction = np.where(ts == 0, 0.0, np.clip(fraction, 0.0, 1.0))
    return _out(fraction)


def reactive_uptake_semi_infinite(t: ArrayLike, c_star: float, D: float, k1: float) -> ArrayLike:
    """Total CO2 taken up per unit area (mol/m2) by a semi-infinite reacting medium.

    Q = c* sqrt(D/k1) [(k1 t + 1/2) erf(sqrt(k1 t)) + sqrt(k1 t / pi) exp(-k1 t)]
    """
    if D <= 0 or k1 < 0:
        raise ParameterError("D must be positive and k1 non-negative")
    ts = np.asarray(t, dtype=float)
    if np.any(ts < 0):
        raise ParameterError("t must be non-negative")
    if k1 == 0:
        return _out(2.0 * c_star * np.sqrt(D * ts / np.pi))
    kt = k1 * ts
    q = c_star * np.sqrt(D / k1) * ((kt + 0.5) * erf(np.sqrt(kt)) + np.sqrt(kt / np.pi) * np.exp(-kt))
    return _out(q)


def half_time(D: float, size: float, geometry: str = "slab") -> float:
    """Time at which the fractional uptake reaches one half."""
    check_geometry(geometry)
    if D <= 0 or size <= 0:
        raise ParameterError("D and size must be positive")
    # solve in D t / size^2, where every geometry reaches one half below 0.2
    tau_half = brentq(lambda tau: fractional_uptake(tau, 1.0, 1.0, geometry) - 0.5, 0.0, 1.0, xtol=1e-14)
    t_half = tau_half * size**2 / D
    logger.debug("half time for %s of size %g: %g s", geometry, size, t_half)
    return float(t_half)
