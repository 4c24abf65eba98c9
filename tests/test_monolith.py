import math

import numpy as np
from scipy.integrate import trapezoid
import pytest

from sipsim.errors import ParameterError
from sipsim.monolith import MonolithChannel


def make_channel(**overrides):
    params = dict(
        hydraulic_diameter=1e-3,
        length=0.2,
        velocity=0.5,
        D_gas=1.6e-5,
        coating_thickness=20e-6,
        D_coating=1e-9,
        m_coating=10.0,
        k1=1e4,
        capacity=100.0,
    )
    params.update(overrides)
    return MonolithChannel(**params)


def test_sherwood_numbers():
    ch = make_channel()
    assert ch.sherwood(developing=False) == pytest.approx(2.98)
    assert ch.sherwood() > ch.sherwood(developing=False)
    assert make_channel(shape="circular").sherwood(developing=False) == pytest.approx(3.66)
    with pytest.raises(ParameterError):
        make_channel(shape="hexagon")


def test_overall_coefficient_is_series_sum():
    ch = make_channel()
    k_g = ch.gas_side_coefficient()
    k_c = ch.coating_coefficient()
    assert k_c == pytest.approx(10.0 * math.sqrt(1e4 * 1e-9) * math.tanh(20e-6 * math.sqrt(1e4 / 1e-9)))
    K = ch.overall_coefficient()
    assert K == pytest.approx(1.0 / (1.0 / k_g + 1.0 / k_c))
    assert K < min(k_g, k_c)


def test_steady_profile_and_efficiency():
    ch = make_channel()
    profile = ch.axial_profile(51)
    assert profile["c_ratio"].iloc[0] == pytest.approx(1.0)
    assert profile["c_ratio"].iloc[-1] == pytest.approx(ch.outlet_ratio())
    assert np.all(np.diff(profile["c_ratio"]) < 0)
    assert ch.capture_efficiency() == pytest.approx(1.0 - math.exp(-ch.ntu()))
    Ka = ch.overall_coefficient() * ch.specific_area()
    assert ch.mass_transfer_zone_length() == pytest.approx(0.5 * math.log(19.0) / Ka)


def test_unreactive_coating_captures_nothing():
    ch = make_channel(k1=0.0)
    assert ch.capture_efficiency() == 0.0
    assert ch.mass_transfer_zone_length() == math.inf


def test_breakthrough_mass_balance_and_zone_length():
    ch = make_channel()
    c_in = 0.4
    res = ch.simulate_breakthrough(c_in, t_end=16.0, n_cells=200, n_times=801)
    assert res.q_max == pytest.approx(100.0 * 4000.0 * 20e-6)
    assert res.outlet_ratio[0] == pytest.approx(0.0, abs=1e-9)
    assert res.outlet_ratio[-1] > 0.99

    # everything that entered and did not leave is held in the channel
    dz = ch.length / 200
    held = np.sum(res.gas_ratio[:, -1] * c_in + res.loading_ratio[:, -1] * res.q_max) * dz
    entered = ch.velocity * c_in * trapezoid(1.0 - res.outlet_ratio, res.times)
    assert held == pytest.approx(entered, rel=1e-2)

    # constant-pattern front for r = K a c (1 - q/q_max)
    Ka = ch.overall_coefficient() * ch.specific_area()
    expected = 2.0 * ch.velocity * math.log(19.0) / Ka * res.q_max / (res.q_max + c_in)
    assert res.mass_transfer_zone() == pytest.approx(expected, rel=0.2)

    t5 = res.breakthrough_time(0.05)
    assert 0.0 < t5 < ch.length / res.front_velocity
    assert res.breakthrough_time(2.0) is None
    frame = res.to_frame()
    assert list(frame.columns) == ["t", "c_out_ratio", "mean_loading"]
    assert frame["mean_loading"].iloc[-1] > 0.9


def test_breakthrough_needs_capacity():
    with pytest.raises(ParameterError):
        make_channel(capacity=0.0).simulate_breakthrough(0.4, t_end=1.0)


def test_breakthrough_solver_failure_raises(monkeypatch):
    from sipsim import monolith
    from sipsim.errors import IntegrationError
    from sipsim.solver import SolveResult

    def failing(rhs, y0, t_span, **kwargs):
        return SolveResult(t=np.array([0.0]), y=np.zeros((len(y0), 1)), status=-1, message="step size too small")

    monkeypatch.setattr(monolith, "integrate_ode", failing)
    with pytest.raises(IntegrationError, match="step size"):
        make_channel().simulate_breakthrough(0.4, t_end=1.0, n_cells=20)
