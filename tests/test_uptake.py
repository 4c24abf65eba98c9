import math

import numpy as np
import pytest

from sipsim.errors import ParameterError
from sipsim.uptake import fractional_uptake, half_time, reactive_uptake_semi_infinite


def test_fractional_uptake_bounds_and_monotonic():
    t = np.linspace(0.0, 50.0, 201)
    for geometry in ("slab", "cylinder", "sphere"):
        f = fractional_uptake(t, 1e-9, 1e-4, geometry)
        assert f[0] == 0.0
        assert np.all(np.diff(f) >= 0)
        assert np.all((f >= 0) & (f <= 1))
        assert f[-1] > 0.99


def test_short_time_slab_follows_square_root_law():
    D, L, t = 1e-9, 1e-4, 0.1
    expected = 2.0 * math.sqrt(D * t / math.pi) / L
    assert fractional_uptake(t, D, L, "slab") == pytest.approx(expected, rel=1e-3)


def test_very_short_times_follow_square_root_law():
    # thin polymer films reach D t / L^2 far below the reach of the series
    tau = np.logspace(-8, -5, 7)
    root = np.sqrt(tau / np.pi)
    assert np.allclose(fractional_uptake(tau, 1.0, 1.0, "slab"), 2.0 * root, rtol=1e-6)
    assert np.allclose(fractional_uptake(tau, 1.0, 1.0, "sphere"), 6.0 * root - 3.0 * tau, rtol=1e-6)
    assert np.allclose(fractional_uptake(tau, 1.0, 1.0, "cylinder"), 4.0 * root - tau, rtol=1e-4)
    # D = 1e-11 m2/s, L = 1 mm, t = 10 s
    assert fractional_uptake(10.0, 1e-11, 1e-3, "slab") == pytest.approx(2.0 * math.sqrt(1e-7 / math.pi), rel=1e-6)


def test_short_time_branch_joins_the_series():
    for geometry in ("slab", "cylinder", "sphere"):
        below = fractional_uptake(0.9999e-3, 1.0, 1.0, geometry)
        above = fractional_uptake(1.0001e-3, 1.0, 1.0, geometry)
        assert 0.0 < above - below < 2e-5


def test_half_times_match_tabulated_values():
    D, size = 1e-9, 1e-4
    scale = size**2 / D
    assert half_time(D, size, "sphere") / scale == pytest.approx(0.0305, rel=0.01)
    assert half_time(D, size, "cylinder") / scale == pytest.approx(0.0631, rel=0.01)
    assert half_time(D, size, "slab") / scale == pytest.approx(4 * 0.04919, rel=0.01)


def test_fractional_uptake_rejects_bad_input():
    with pytest.raises(ParameterError):
        fractional_uptake(1.0, 0.0, 1e-4)
    with pytest.raises(ParameterError):
        fractional_uptake(-1.0, 1e-9, 1e-4)
    with pytest.raises(ParameterError):
        fractional_uptake(1.0, 1e-9, 1e-4, n_terms=0)


def test_reactive_uptake_limits():
    c_star, D = 1.0, 1e-9
    t = 1.0
    physical = 2.0 * c_star * math.sqrt(D * t / math.pi)
    assert reactive_uptake_semi_infinite(t, c_star, D, 0.0) == pytest.approx(physical)
    assert reactive_uptake_semi_infinite(t, c_star, D, 1e-6) == pytest.approx(physical, rel=1e-5)
    k1 = 50.0
    # long times: steady flux c* sqrt(k1 D) plus the initial penetration
    long_time = c_star * math.sqrt(D / k1) * (k1 * t + 0.5)
    assert reactive_uptake_semi_infinite(t, c_star, D, k1) == pytest.approx(long_time, rel=1e-6)
