import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from scipy.integrate import solve_ivp

from .errors import IntegrationError, ParameterError
from .settings import settings

logger = logging.getLogger(__name__)

_METHODS = {name.upper(): name for name in ("RK23", "RK45", "DOP853", "Radau", "BDF", "LSODA")}


@dataclass(frozen=True)
class SolveResult:
    t: np.ndarray
    y: np.ndarray  # y[i, k] state i at time k
    status: int
    message: str

    @property
    def success(self) -> bool:
        return self.status >= 0

    def raise_for_status(self) -> "SolveResult":
        if not self.success:
            raise IntegrationError(f"Integration failed: {self.message}", status=self.status)
        return self


def integrate_ode(
    rhs: Callable[[float, np.ndarray], Sequence[float]],
    y0: Sequence[float],
    t_span: Tuple[float, float],
    t_eval: Optional[Sequence[float]] = None,
    method: Optional[str] = None,
    rtol: Optional[float] = None,
    atol: Optional[float] = None,
    jac_sparsity=None,
) -> SolveResult:
    requested = method or settings.ode_method
    method_name = _METHODS.get(requested.upper())
    if method_name is None:
        raise ParameterError(f"Unknown integration method {requested!r}")
    options = {}
    # Only the implicit methods accept a sparsity pattern
    if jac_sparsity is not None and method_name in ("BDF", "Radau"):
        options["jac_sparsity"] = jac_sparsity
    y0_arr = np.asarray(y0, dtype=float)
    logger.debug("solve_ivp %s over %s with %d states", method_name, t_span, y0_arr.size)
    sol = solve_ivp(
        fun=rhs,
        y0=y0_arr,
        t_span=t_span,
        t_eval=np.asarray(t_eval, dtype=float) if t_eval is not None else None,
        method=method_name,
        rtol=rtol if rtol is not None else settings.rtol,
        atol=atol if atol is not None else settings.atol,
        **options,
    )
    if sol.status < 0:
        logger.warning("solve_ivp stopped early: %s", sol.message)
    return SolveResult(t=sol.t, y=sol.y, status=sol.status, message=sol.message)
