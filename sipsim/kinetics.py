from dataclasses import dataclass
import math

from .errors import ParameterError

GAS_CONSTANT_R = 8.314462618  # J/(mol K)


def _check_temperature(T: float) -> None:
    if T <= 0:
        raise ParameterError(f"Temperature must be positive, got {T} K")


@dataclass(frozen=True)
class Arrhenius:
    A: float  # pre-exponential factor (units of k)
    Ea: float  # activation energy (J/mol)
    R: float = GAS_CONSTANT_R

    def k(self, T: float) -> float:
        _check_temperature(T)
        return self.A * math.exp(-self.Ea / (self.R * T))


@dataclass(frozen=True)
class VantHoff:
    """Temperature dependence of a Henry-type solubility.

    H(T) = H_ref * exp(-dH_sol/R * (1/T - 1/T_ref))
    dH_sol is the enthalpy of dissolution (J/mol), negative for CO2 in water,
    so solubility falls as temperature rises.
    """
    H_ref: float  # mol/(m3 Pa)
    dH_sol: float  # J/mol
    T_ref: float = 298.15
    R: float = GAS_CONSTANT_R

    def H(self, T: float) -> float:
        _check_temperature(T)
        return self.H_ref * math.exp(-self.dH_sol / self.R * (1.0 / T - 1.0 / self.T_ref))


@dataclass(frozen=True)
class SecondOrderReaction:
    """CO2 + nu B -> products with r = k2(T) * c_A * c_B (mol/(m3 s))."""
    rate: Arrhenius  # k2 in m3/(mol s)
    nu: float = 1.0

    def k2(self, T: float) -> float:
        return self.rate.k(T)

    def pseudo_first_order(self, T: float, c_B: float) -> float:
        """k1 = k2 * c_B (1/s), valid while B is in excess at the interface."""
        if c_B < 0:
            raise ParameterError("Sorbent concentration must be non-negative")
        return self.k2(T) * c_B

    def rate_of_reaction(self, T: float, c_A: float, c_B: float) -> float:
        return self.k2(T) * max(c_A, 0.0) * max(c_B, 0.0)
