"""CO2 property correlations in SI units.

Correlations are the usual engineering forms for aqueous CO2 absorption;
rate constants quoted per litre are converted to m3/(mol s).
"""

import math
from typing import Optional

from .kinetics import GAS_CONSTANT_R, Arrhenius, SecondOrderReaction, VantHoff, _check_temperature
from .errors import ParameterError

# 3.3e-4 mol/(m3 Pa) at 298.15 K, d ln H / d(1/T) = 2400 K
HENRY_CO2_WATER = VantHoff(H_ref=3.3e-4, dH_sol=-2400.0 * GAS_CONSTANT_R)

DIFFUSIVITY_CO2_WATER = Arrhenius(A=2.35e-6, Ea=2119.0 * GAS_CONSTANT_R)

_L_PER_M3 = 1000.0
_LN10 = math.log(10.0)

# log10 k2[L/(mol s)] = a - b/T written as Arrhenius laws in m3/(mol s)
CO2_HYDROXIDE = SecondOrderReaction(
    rate=Arrhenius(A=10.0**11.895 / _L_PER_M3, Ea=2382.0 * _LN10 * GAS_CONSTANT_R), nu=2.0
)
CO2_MEA = SecondOrderReaction(
    rate=Arrhenius(A=10.0**10.99 / _L_PER_M3, Ea=2152.0 * _LN10 * GAS_CONSTANT_R), nu=2.0
)


def henry_co2_water(T: float) -> float:
    return HENRY_CO2_WATER.H(T)


def diffusivity_co2_water(T: float) -> float:
    return DIFFUSIVITY_CO2_WATER.k(T)


def k2_co2_hydroxide(T: float) -> float:
    """CO2 + OH- second-order rate constant, m3/(mol s)."""
    return CO2_HYDROXIDE.k2(T)


def k2_co2_mea(T: float) -> float:
    """CO2 + monoethanolamine second-order rate constant, m3/(mol s)."""
    return CO2_MEA.k2(T)


def stokes_einstein_correction(D_ref: float, mu_ref: float, mu: float, T_ref: float, T: float) -> float:
    """Scale a diffusivity to a new viscosity and temperature: D ~ T / mu."""
    _check_temperature(T)
    _check_temperature(T_ref)
    if mu <= 0 or mu_ref <= 0:
        raise ParameterError("Viscosities must be positive")
    return D_ref * (mu_ref / mu) * (T / T_ref)


def gas_concentration(p: float, T: float) -> float:
    """Ideal gas molar concentration (mol/m3) at partial pressure p (Pa)."""
    _check_temperature(T)
    return p / (GAS_CONSTANT_R * T)


def dimensionless_solubility(H: float, T: float) -> float:
    """Liquid/gas partition coefficient m = c_liq/c_gas from H in mol/(m3 Pa)."""
    _check_temperature(T)
    return H * GAS_CONSTANT_R * T


def interfacial_concentration(p: float, T: float, H: Optional[float] = None) -> float:
    """c* = H(T) p; uses the water correlation when H is not given."""
    if p < 0:
        raise ParameterError("Partial pressure must be non-negative")
    if H is None:
        H = henry_co2_water(T)
    return H * p

