from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict

from .errors import ParameterError

logger = logging.getLogger(__name__)


def gas_film_coefficient(D_gas: float, diameter: float, Re: float, Sc: float) -> float:
    """Ranz-Marshall gas-film coefficient k_g (m/s) around a sphere."""
    if D_gas <= 0 or diameter <= 0:
        raise ParameterError("D_gas and diameter must be positive")
    if Re < 0 or Sc < 0:
        raise ParameterError("Re and Sc must be non-negative")
    sherwood = 2.0 + 0.6 * math.sqrt(Re) * Sc ** (1.0 / 3.0)
    return sherwood * D_gas / diameter


@dataclass(frozen=True)
class MECSParticle:
    """Micro-encapsulated solvent: a reactive liquid core inside a polymer shell.

    Steady absorption is three resistances in series, all written per particle
    against the gas-phase concentration:

    gas film  1 / (4 pi b^2 k_g)
    shell     (b - a) / (4 pi a b D_s K_s)
    core      1 / (4 pi a D_c m_c (phi coth(phi) - 1)),  phi = a sqrt(k1/D_c)

    a is the core radius, b the outer radius, K_s the shell/gas partition
    coefficient and m_c the core liquid/gas partition coefficient.
    """
    core_radius: float  # m
    shell_thickness: float  # m
    D_shell: float  # m2/s
    K_shell: float  # -
    D_core: float  # m2/s
    m_core: float  # -
    k1: float  # 1/s, pseudo-first-order in the core
    capacity: float  # mol/m3 reactive species in the core
    nu: float = 1.0

    def __post_init__(self) -> None:
        if self.core_radius <= 0:
            raise ParameterError("core_radius must be positive")
        if self.shell_thickness < 0:
            raise ParameterError("shell_thickness must be non-negative")
        if self.D_core <= 0 or self.m_core <= 0:
            raise ParameterError("D_core and m_core must be positive")
        if self.shell_thickness > 0 and (self.D_shell <= 0 or self.K_shell <= 0):
            raise ParameterError("D_shell and K_shell must be positive for a finite shell")
        if self.k1 < 0 or self.capacity < 0 or self.nu <= 0:
            raise ParameterError("k1 and capacity must be non-negative, nu positive")

    @property
    def outer_radius(self) -> float:
        return self.core_radius + self.shell_thickness

    @property
    def core_volume(self) -> float:
        return 4.0 / 3.0 * math.pi * self.core_radius**3

    @property
    def external_area(self) -> float:
        return 4.0 * math.pi * self.outer_radius**2

    @property
    def specific_area(self) -> float:
        """External area per particle volume (1/m)."""
        return 3.0 / self.outer_radius

    @property
    def thiele_modulus(self) -> float:
        return self.core_radius * math.sqrt(self.k1 / self.D_core)

    def resistances(self, k_gas: float) -> Dict[str, float]:
        if k_gas <= 0:
            raise ParameterError("k_gas must be positive")
        a = self.core_radius
        b = self.outer_radius
        gas = 1.0 / (self.external_area * k_gas)
        if self.shell_thickness == 0:
            shell = 0.0
        else:
            shell = (b - a) / (4.0 * math.pi * a * b * self.D_shell * self.K_shell)
        phi = self.thiele_modulus
        if phi == 0:
            core = math.inf
        else:
            # phi coth(phi) - 1 ~ phi^2/3 for small phi
            g = phi / math.tanh(phi) - 1.0 if phi > 1e-4 else phi**2 / 3.0
            core = 1.0 / (4.0 * math.pi * a * self.D_core * self.m_core * g)
        return {"gas": gas, "shell": shell, "core": core}

    def controlling_resistance(self, k_gas: float) -> str:
        res = self.resistances(k_gas)
        name = max(res, key=res.get)
        logger.debug("MECS resistances %s, controlling: %s", res, name)
        return name

    def absorption_rate(self, c_gas: float, k_gas: float) -> float:
        """Steady CO2 uptake per particle (mol/s) at gas concentration c_gas."""
        total = sum(self.resistances(k_gas).values())
        if math.isinf(total):
            return 0.0
        return c_gas / total

    def saturation_time(self, c_gas: float, k_gas: float) -> float:
        """Time to consume the core capacity at the initial absorption rate (s)."""
        rate = self.absorption_rate(c_gas, k_gas)
        if rate <= 0:
            return math.inf
        return self.capacity * self.core_volume / self.nu / rate

    def bed_rate(self, c_gas: float, k_gas: float, particle_volume_fraction: float) -> float:
        """Volumetric uptake rate in a packed bed (mol/(m3 bed s))."""
        if not 0 < particle_volume_fraction < 1:
            raise ParameterError("particle_volume_fraction must be between 0 and 1")
        particle_volume = 4.0 / 3.0 * math.pi * self.outer_radius**3
        return particle_volume_fraction / particle_volume * self.absorption_rate(c_gas, k_gas)
