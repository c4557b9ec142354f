import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import marconi as mc
from marconi.equationNetwork import EquationNetwork, equation_to_network


def attenuator(loss_db=3, *, f, z0):
    s21 = mc.db_2_magnitude(-loss_db)
    return [[0, s21], [s21, 0]]


def series_resistor(r=50, *, f, z0):
    return np.array([[r / (r + 2 * z0), 2 * z0 / (r + 2 * z0)],
                     [2 * z0 / (r + 2 * z0), r / (r + 2 * z0)]])


def rc_load(r=50, c=1e-12, *, f, z0):
    zl = r / (1 + 2j * np.pi * f * r * c)
    return (zl - z0) / (zl + z0)


def test_construction():
    att = EquationNetwork(2, 50, attenuator)
    assert att.nports == 2
    assert att.number_of_ports == 2
    assert att.z0 == 50
    assert str(att) == "2-Port Equation Network: '', z0=50"


@pytest.mark.parametrize("nports, func", [
    (1, attenuator),
    (3, attenuator),
    (2, rc_load),
])
def test_construction_checks_shape(nports, func):
    with pytest.raises(ValueError):
        EquationNetwork(nports, 50, func)


def test_construction_evaluates_at_one_hertz():
    calls = []

    def record_call(*, f, z0):
        calls.append((f, z0))
        return 0.

    EquationNetwork(1, 75, record_call)
    assert calls == [(1, 75)]


def test_s_at():
    att = EquationNetwork(2, 50, attenuator)
    assert_allclose(att.s_at(1e9), [[0, 10**(-3 / 20)], [10**(-3 / 20), 0]])
    assert_allclose(att.s_at(1e9, 20), [[0, 0.1], [0.1, 0]])

    load = EquationNetwork(1, 50, rc_load)
    assert load.s_at(0).shape == (1, 1)
    assert load.s_at(0)[0, 0] == 0


def test_equation_to_network():
    att = EquationNetwork(2, 50, attenuator, name='6 dB pad')
    freqs = np.linspace(1e9, 2e9, 5)
    ntwk = equation_to_network(att, freqs, args=(6,))

    assert isinstance(ntwk, mc.Network)
    assert ntwk.nports == 2
    assert ntwk.z0 == 50
    assert ntwk.name == '6 dB pad'
    assert_array_equal(ntwk.f, freqs)
    assert_allclose(ntwk.s_db[:, 1, 0], -6)
    assert ntwk.is_reciprocal()
    assert ntwk.is_passive()


def test_sample_matches_equation_to_network():
    load = EquationNetwork(1, 50, rc_load)
    freqs = [1e8, 1e9, 1e10]
    assert load.sample(freqs, 100) == equation_to_network(load, freqs, args=(100,))


def test_one_port_frequency_dependence():
    load = EquationNetwork(1, 50, rc_load)
    ntwk = load.sample([0, 1e12])
    assert ntwk.s[0, 0, 0] == 0
    # the capacitor shorts the load at high frequency
    assert abs(ntwk.s[1, 0, 0] + 1) < 0.05


def test_two_port_metrics_of_equation_network():
    resistor = EquationNetwork(2, 50, series_resistor)
    ntwk = resistor.sample([1e9])
    assert_allclose(ntwk.s[0], [[1 / 3, 2 / 3], [2 / 3, 1 / 3]])
    # a series element is only conditionally stable
    assert_allclose(ntwk.stability, [1])
