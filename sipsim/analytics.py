from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.optimize import curve_fit

from .errors import ParameterError
from .films import effectiveness_factor, sip_film_flux, thiele_modulus
from .uptake import fractional_uptake, half_time

logger = logging.getLogger(__name__)

KINETIC_LIMIT = 0.3
DIFFUSION_LIMIT = 3.0


@dataclass(frozen=True)
class DiffusivityFit:
    D: float
    D_stderr: float
    rmse: float


def sweep(func: Callable[..., float], **grids: Sequence[float]) -> pd.DataFrame:
    """Evaluate func over the Cartesian product of keyword grids.

    Example: sweep(sip_film_flux, c_star=[1.0], D=[1e-9], k1=[0.1, 1.0], thickness=[1e-5, 1e-4])
    """
    if not grids:
        raise ParameterError("sweep needs at least one parameter grid")
    names = list(grids)
    rows = []
    for combo in itertools.product(*(list(grids[k]) for k in names)):
        params = dict(zip(names, combo))
        rows.append({**params, "value": float(func(**params))})
    return pd.DataFrame(rows, columns=names + ["value"])


def _regime(phi: float) -> str:
    if phi < KINETIC_LIMIT:
        return "kinetic"
    if phi > DIFFUSION_LIMIT:
        return "diffusion"
    return "mixed"


def regime_map(thickness: Sequence[float], k1: Sequence[float], D: float, c_star: float) -> pd.DataFrame:
    """Thiele modulus, effectiveness and flux over a thickness x k1 grid."""
    L, K = np.meshgrid(np.asarray(thickness, dtype=float), np.asarray(k1, dtype=float), indexing="ij")
    phi = np.asarray(thiele_modulus(L, K, D))
    df = pd.DataFrame({
        "thickness": L.ravel(),
        "k1": K.ravel(),
        "phi": phi.ravel(),
        "effectiveness": np.asarray(effectiveness_factor(phi, "slab")).ravel(),
        "flux": np.asarray(sip_film_flux(c_star, D, K, L)).ravel(),
    })
    df["regime"] = [_regime(p) for p in df["phi"]]
    return df


def fit_diffusivity(
    t: Sequence[float],
    fraction: Sequence[float],
    size: float,
    geometry: str = "slab",
    D0: Optional[float] = None,
) -> DiffusivityFit:
    """Least-squares effective diffusivity from a fractional uptake curve.

    The fit runs on log10(D) so the optimiser sees a well-scaled parameter;
    the initial guess comes from the time closest to half uptake.
    """
    ts = np.asarray(t, dtype=float)
    fs = np.asarray(fraction, dtype=float)
    if ts.shape != fs.shape or ts.size < 2:
        raise ParameterError("t and fraction need matching lengths of at least 2")
    if D0 is None:
        k = int(np.argmin(np.abs(fs - 0.5)))
        t_ref = ts[k] if ts[k] > 0 else ts.max()
        # scale the half time of a unit-diffusivity body to the observed one
        D0 = half_time(1.0, size, geometry) / t_ref

    def model(tt, log_d):
        return np.asarray(fractional_uptake(tt, 10.0 ** log_d, size, geometry))

    popt, pcov = curve_fit(model, ts, fs, p0=[np.log10(D0)])
    D = float(10.0 ** popt[0])
    # delta method from log10(D) to D
    stderr = float(np.log(10.0) * D * np.sqrt(pcov[0, 0])) if np.isfinite(pcov[0, 0]) else float("nan")
    rmse = float(np.sqrt(np.mean((model(ts, popt[0]) - fs) ** 2)))
    logger.info("fitted D=%.3e m2/s (stderr %.1e, rmse %.3f)", D, stderr, rmse)
    return DiffusivityFit(D=D, D_stderr=stderr, rmse=rmse)
