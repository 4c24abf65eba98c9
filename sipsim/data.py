from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class UptakePoint:
    time_s: float
    fraction: float


def load_uptake_csv(path: str) -> List[UptakePoint]:
    """Load a measured uptake curve.

    The CSV needs a ``time_s`` column and either ``fraction`` (already
    normalised) or ``uptake`` (any units, normalised by its last value).
    """
    df = pd.read_csv(path)
    missing = []
    if "time_s" not in df.columns:
        missing.append("time_s")
    if "fraction" not in df.columns and "uptake" not in df.columns:
        missing.append("fraction|uptake")
    if missing:
        raise ValueError(f"Missing columns in dataset: {missing}")
    df = df.dropna(subset=["time_s"]).sort_values("time_s")
    if (df["time_s"] < 0).any():
        raise ValueError("time_s must be non-negative")
    column = "fraction" if "fraction" in df.columns else "uptake"
    values = df[column].to_numpy(dtype=float)
    if np.isnan(values).any():
        raise ValueError(f"Missing values in column {column!r}")
    if column == "uptake":
        if values.size == 0 or values[-1] == 0:
            raise ValueError("Cannot normalise uptake with a zero final value")
        values = values / values[-1]
    times = df["time_s"].to_numpy(dtype=float)
    return [UptakePoint(time_s=float(t), fraction=float(f)) for t, f in zip(times, values)]
