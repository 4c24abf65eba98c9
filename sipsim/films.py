"""Closed-form diffusion-reaction models for SIP films and solvent particles.

All functions accept scalars or numpy arrays and broadcast like numpy; a scalar
input gives a float back.

Conventions
-----------
phi = L * sqrt(k1 / D)
    Thiele modulus of a film of thickness L (or particle radius L). For a
    liquid film this is the Hatta number.
c_star
    Physical solubility of CO2 at the exposed surface (mol/m3).
"""
from __future__ import annotations

from typing import Union

import numpy as np
from scipy.special import i0e, i1e

from .errors import ParameterError

ArrayLike = Union[float, np.ndarray]

GEOMETRIES = ("slab", "cylinder", "sphere")

_SMALL_PHI = 1e-3


def _out(value: np.ndarray) -> ArrayLike:
    return value if value.ndim else float(value)


def _require_positive(name: str, value: np.ndarray) -> None:
    if np.any(value <= 0):
        raise ParameterError(f"{name} must be positive")


def _require_non_negative(name: str, value: np.ndarray) -> None:
    if np.any(value < 0):
        raise ParameterError(f"{name} must be non-negative")


def check_geometry(geometry: str) -> str:
    if geometry not in GEOMETRIES:
        raise ParameterError(f"Unknown geometry {geometry!r}; expected one of {GEOMETRIES}")
    return geometry


def thiele_modulus(length: ArrayLike, k1: ArrayLike, D: ArrayLike) -> ArrayLike:
    """phi = L sqrt(k1/D) for a film thickness or particle radius L (m)."""
    L = np.asarray(length, dtype=float)
    k = np.asarray(k1, dtype=float)
    d = np.asarray(D, dtype=float)
    _require_non_negative("length", L)
    _require_non_negative("k1", k)
    _require_positive("D", d)
    return _out(L * np.sqrt(k / d))


def effectiveness_factor(phi: ArrayLike, geometry: str = "slab") -> ArrayLike:
    """Internal effectiveness factor for first-order reaction.

    slab:     tanh(phi) / phi
    cylinder: 2 I1(phi) / (phi I0(phi))
    sphere:   3 / phi^2 * (phi coth(phi) - 1)
    """
    check_geometry(geometry)
    p = np.asarray(phi, dtype=float)
    _require_non_negative("phi", p)
    small = p < _SMALL_PHI
    ps = np.where(small, 1.0, p)  # keeps the large-phi branch away from 0/0
    if geometry == "slab":
        eta = np.tanh(ps) / ps
        series = 1.0 - p**2 / 3.0
    elif geometry == "cylinder":
        # scaled Bessel functions cancel the exponential growth
        eta = 2.0 * i1e(ps) / (ps * i0e(ps))
        series = 1.0 - p**2 / 8.0
    else:
        eta = 3.0 / ps**2 * (ps / np.tanh(ps) - 1.0)
        series = 1.0 - p**2 / 15.0
    return _out(np.where(small, series, eta))


def sip_film_flux(c_star: ArrayLike, D: ArrayLike, k1: ArrayLike, thickness: ArrayLike) -> ArrayLike:
    """Steady CO2 flux (mol/(m2 s)) into a film with an impermeable backing.

    N = c* sqrt(k1 D) tanh(phi). For thin films this is the reaction-limited
    k1 c* L, for thick films the penetration-limited c* sqrt(k1 D).
    """
    phi = np.asarray(thiele_modulus(thickness, k1, D))
    return _out(np.asarray(c_star, dtype=float) * np.sqrt(np.asarray(k1, dtype=float) * np.asarray(D, dtype=float)) * np.tanh(phi))


def sip_film_profile(x: ArrayLike, c_star: float, D: float, k1: float, thickness: float) -> ArrayLike:
    """c(x) = c* cosh(phi (1 - x/L)) / cosh(phi), x measured from the exposed face."""
    xs = np.asarray(x, dtype=float)
    if np.any((xs < 0) | (xs > thickness)):
        raise ParameterError("x must lie within the film")
    phi = float(thiele_modulus(thickness, k1, D))
    a = phi * (1.0 - xs / thickness)
    # cosh(a)/cosh(phi) written to avoid overflow at large phi
    ratio = np.exp(a - phi) * (1.0 + np.exp(-2.0 * a)) / (1.0 + np.exp(-2.0 * phi))
    return _out(c_star * ratio)


def enhancement_factor_pseudo_first_order(Ha: ArrayLike) -> ArrayLike:
    """Film-theory enhancement E = Ha / tanh(Ha)."""
    h = np.asarray(Ha, dtype=float)
    _require_non_negative("Ha", h)
    hs = np.where(h < _SMALL_PHI, 1.0, h)
    return _out(np.where(h < _SMALL_PHI, 1.0 + h**2 / 3.0, hs / np.tanh(hs)))


def enhancement_factor_infinite(c_star: ArrayLike, c_B: ArrayLike, D_A: ArrayLike, D_B: ArrayLike, nu: float = 1.0) -> ArrayLike:
    """Instantaneous-reaction limit E_inf = 1 + D_B c_B / (nu D_A c*)."""
    cs = np.asarray(c_star, dtype=float)
    _require_positive("c_star", cs)
    _require_positive("D_A", np.asarray(D_A, dtype=float))
    if nu <= 0:
        raise ParameterError("nu must be positive")
    return _out(1.0 + np.asarray(D_B, dtype=float) * np.asarray(c_B, dtype=float) / (nu * np.asarray(D_A, dtype=float) * cs))


def enhancement_factor_decoursey(Ha: ArrayLike, E_inf: ArrayLike) -> ArrayLike:
    """DeCoursey approximation bridging pseudo-first-order and instantaneous regimes."""
    h = np.asarray(Ha, dtype=float)
    ei = np.asarray(E_inf, dtype=float)
    _require_non_negative("Ha", h)
    if np.any(ei <= 1.0):
        raise ParameterError("E_inf must exceed 1")
    a = h**2 / (ei - 1.0)
    return _out(-a / 2.0 + np.sqrt(a**2 / 4.0 + ei * a + 1.0))


def liquid_film_flux(k_L: ArrayLike, c_star: ArrayLike, c_bulk: ArrayLike, Ha: ArrayLike) -> ArrayLike:
    """Hatta film flux with a non-zero bulk concentration.

    N = k_L Ha/tanh(Ha) * (c* - c_b / cosh(Ha))
    """
    h = np.asarray(Ha, dtype=float)
    E = np.asarray(enhancement_factor_pseudo_first_order(h))
    return _out(np.asarray(k_L, dtype=float) * E * (np.asarray(c_star, dtype=float) - np.asarray(c_bulk, dtype=float) / np.cosh(h)))


def particle_profile(r: ArrayLike, c_surface: float, D: float, k1: float, radius: float) -> ArrayLike:
    """Steady profile in a reacting sphere: c = c_s (R/r) sinh(phi r/R) / sinh(phi)."""
    rs = np.asarray(r, dtype=float)
    if np.any((rs < 0) | (rs > radius)):
        raise ParameterError("r must lie within the particle")
    phi = float(thiele_modulus(radius, k1, D))
    if phi < _SMALL_PHI:
        return _out(np.full_like(rs, c_surface))
    u = rs / radius
    centre = u == 0
    us = np.where(centre, 1.0, u)
    # sinh(phi u) / (u sinh(phi)) without overflow
    ratio = np.exp(phi * (us - 1.0)) * (-np.expm1(-2.0 * phi * us)) / (-np.expm1(-2.0 * phi)) / us
    at_centre = 2.0 * phi * np.exp(-phi) / (-np.expm1(-2.0 * phi))
    return _out(c_surface * np.where(centre, at_centre, ratio))
