import os
import unittest
import warnings
from pathlib import Path

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_almost_equal, assert_array_equal

import marconi as mc
from marconi.network import (
    InvalidFrequencyWarning,
    NetworkBuilder,
    SingularMatrixError,
    UnsupportedFeatureError,
)


class NetworkTestCase(unittest.TestCase):
    """
    Network class operation test case.
    """
    def setUp(self):
        """
        this also tests the ability to read touchstone files
        without an error
        """
        self.test_dir = os.path.dirname(os.path.abspath(__file__))+'/'
        self.ntwk1 = mc.Network(os.path.join(self.test_dir, 'ntwk1.s2p'))
        self.line = mc.Network(os.path.join(self.test_dir, 'line.s2p'))
        self.rng = np.random.default_rng(5)

    def test_constructor_from_values(self):
        mc.Network(f=[1, 2], s=[1, 2], z0=50)

    def test_constructor_from_touchstone(self):
        self.assertEqual(self.ntwk1.nports, 2)
        self.assertEqual(len(self.ntwk1), 3)
        self.assertEqual(self.ntwk1.name, 'ntwk1')
        self.assertEqual(self.ntwk1.comments, ' small signal amplifier, Vds = 3 V, Id = 20 mA')
        assert_array_equal(self.ntwk1.f, [1e9, 2e9, 3e9])
        assert_almost_equal(self.ntwk1.s[0, 0, 0], mc.magdeg_2_reim(0.5, 30))
        assert_almost_equal(self.ntwk1.s[0, 1, 0], mc.magdeg_2_reim(5.0, 120))
        assert_almost_equal(self.ntwk1.s[0, 0, 1], mc.magdeg_2_reim(0.01, 170))

    def test_constructor_from_pathlib(self):
        ntwk = mc.Network(Path(self.test_dir) / 'ntwk1.s2p')
        self.assertEqual(ntwk, self.ntwk1)

    def test_constructor_from_fid(self):
        with open(os.path.join(self.test_dir, 'ntwk1.s2p')) as fid:
            ntwk = mc.Network(fid)
        self.assertEqual(ntwk, self.ntwk1)

    def test_one_port_scalar_per_frequency(self):
        ntwk = mc.Network(f=[1e9, 2e9, 3e9], s=[0.1, 0.2j, -0.3], z0=50)
        self.assertEqual(ntwk.nports, 1)
        self.assertEqual(ntwk.s.shape, (3, 1, 1))
        self.assertEqual(ntwk.s[1, 0, 0], 0.2j)

    def test_empty_network(self):
        ntwk = mc.Network()
        self.assertEqual(ntwk.nports, 0)
        self.assertEqual(len(ntwk), 0)
        self.assertEqual(ntwk.s.shape, (0, 0, 0))
        self.assertTrue(ntwk.is_passive())

    def test_constructor_invalid_inputs(self):
        with self.assertRaises(ValueError):
            mc.Network(f=[1, 2, 3], s=[0.1, 0.2])
        with self.assertRaises(ValueError):
            mc.Network(f=[1], s=[[0, 1], [1, 0]], nports=3)
        with self.assertRaises(ValueError):
            mc.Network(f=[1], s=np.zeros((1, 2, 3)))
        with self.assertRaises(ValueError):
            mc.Network(f=[1], s=[0.5], z=[50])
        with self.assertRaises(ValueError):
            mc.Network(f=[1], s=[0.5], unknown=1)

    def test_reference_line_z0_unsupported(self):
        with self.assertRaises(UnsupportedFeatureError):
            mc.Network(f=[1], s=[[0, 1], [1, 0]], z0=[50, 75])

    def test_read_only(self):
        with self.assertRaises(ValueError):
            self.ntwk1.s[0, 0, 0] = 1
        with self.assertRaises(ValueError):
            self.ntwk1.f[0] = 1
        with self.assertRaises(AttributeError):
            self.ntwk1.s = np.zeros((3, 2, 2))
        with self.assertRaises(AttributeError):
            self.ntwk1.z0 = 75

    def test_decreasing_frequency_warns(self):
        with pytest.warns(InvalidFrequencyWarning) as record:
            mc.Network(f=[2e9, 1e9], s=[0.1, 0.2])
        self.assertEqual(os.path.basename(record[0].filename), os.path.basename(__file__))

    def test_equality(self):
        s = self.rng.standard_normal((10, 2, 2)) + 1j * self.rng.standard_normal((10, 2, 2))
        f1 = np.arange(10)
        f2 = np.arange(10)
        n1 = mc.Network(s=s, f=f1)
        n2 = mc.Network(s=s, f=f2)
        self.assertTrue(n1 == n2)
        self.assertFalse(n1 != n2)

        n2 = mc.Network(s=s, f=np.arange(1, 11))
        self.assertFalse(n1 == n2)

        n2 = mc.Network(s=s, f=f1, z0=75)
        self.assertFalse(n1 == n2)

        s2 = s.copy()
        s2[3, 1, 0] += 1e-12
        n2 = mc.Network(s=s2, f=f1)
        self.assertFalse(n1 == n2)

        self.assertFalse(n1 == 'network')

    def test_z0_is_a_scalar(self):
        self.assertEqual(self.ntwk1.z0, 50)
        ntwk = mc.Network(f=[1], s=[0], z0=np.float64(75))
        self.assertIsInstance(ntwk.z0, float)

    def test_from_z(self):
        ntwk = mc.Network.from_z([75.], f=[1e9], z0=50)
        assert_almost_equal(ntwk.s[0, 0, 0], 0.2)

        z = self.rng.uniform(1, 10, (5, 2, 2)) + 50 * np.eye(2)
        ntwk = mc.Network.from_z(z, f=np.arange(5), z0=50)
        assert_allclose(ntwk.z, z)

    def test_from_y(self):
        ntwk = mc.Network.from_y([1 / 50.], f=[1e9], z0=50)
        assert_almost_equal(ntwk.s[0, 0, 0], 0)

        y = self.rng.uniform(1e-3, 1e-2, (5, 3, 3)) + 0.02 * np.eye(3)
        ntwk = mc.Network.from_y(y, f=np.arange(5), z0=50)
        assert_allclose(ntwk.y, y)

    def test_z_y_are_inverse(self):
        z = self.ntwk1.z
        y = self.ntwk1.y
        assert_allclose(z @ y, np.broadcast_to(np.eye(2), z.shape), atol=1e-9)

    def test_is_passive(self):
        self.assertTrue(self.line.is_passive())
        self.assertFalse(self.ntwk1.is_passive())

        ntwk = mc.Network(f=[1, 2], s=[[[0.5, 0.1], [0.1, 0.5]], [[0.5, 0.1], [1.5, 0.5]]])
        self.assertFalse(ntwk.is_passive())
        ntwk = mc.Network(f=[1], s=[[1, 0], [0, -1j]])
        self.assertTrue(ntwk.is_passive())

    def test_is_reciprocal(self):
        self.assertTrue(self.line.is_reciprocal())
        self.assertFalse(self.ntwk1.is_reciprocal())
        ntwk = mc.Network(f=[1], s=[[0, 1], [1 + 1e-3, 0]])
        self.assertFalse(ntwk.is_reciprocal())
        self.assertTrue(ntwk.is_reciprocal(tol=1e-2))

    def test_is_lossless(self):
        self.assertTrue(self.line.is_lossless())
        self.assertFalse(self.ntwk1.is_lossless())
        attenuator = mc.Network(f=[1], s=[[0, 0.5], [0.5, 0]])
        self.assertFalse(attenuator.is_lossless())

    def test_passivity(self):
        assert_allclose(self.line.passivity, np.broadcast_to(np.eye(2), (2, 2, 2)), atol=1e-15)

    def test_reciprocity(self):
        assert_array_equal(self.line.reciprocity, np.zeros((2, 2, 2)))
        self.assertGreater(self.ntwk1.reciprocity[0, 1, 0], 4)

    def test_scalar_projections(self):
        assert_array_equal(self.line.s_re[1], [[0, -1], [-1, 0]])
        assert_array_equal(self.line.s_im[0], [[0, -1], [-1, 0]])
        assert_almost_equal(self.line.s_deg[0, 1, 0], -90)
        assert_almost_equal(self.line.s_mag[0, 1, 0], 1)
        assert_almost_equal(self.line.s_db[0, 1, 0], 0)
        self.assertEqual(self.line.s_db[0, 0, 0], -np.inf)
        assert_almost_equal(self.ntwk1.s_db[0, 1, 0], 20 * np.log10(5))

    def test_interpolate(self):
        ntwk = self.line.interpolate([1e9, 1.5e9, 2e9])
        self.assertEqual(len(ntwk), 3)
        self.assertEqual(ntwk.name, self.line.name)
        assert_allclose(ntwk.s[1, 1, 0], -0.5 - 0.5j)
        assert_array_equal(ntwk.s[0], self.line.s[0])

    def test_interpolate_refuses_to_extrapolate(self):
        with self.assertRaises(ValueError):
            self.line.interpolate([3e9])

    def test_s_at(self):
        assert_array_equal(self.ntwk1.s_at(2e9), self.ntwk1.s[1])
        assert_allclose(self.line.s_at(1.5e9)[0, 1], -0.5 - 0.5j)
        # returned matrices are copies
        s = self.ntwk1.s_at(1e9)
        s[0, 0] = 0
        self.assertNotEqual(self.ntwk1.s[0, 0, 0], 0)

    def test_sample(self):
        ntwk = self.line.sample([1.25e9, 1.75e9])
        assert_array_equal(ntwk.f, [1.25e9, 1.75e9])
        assert_allclose(ntwk.s[:, 0, 1], [-0.25 - 0.75j, -0.75 - 0.25j])

    def test_str(self):
        self.assertEqual(str(self.ntwk1), "2-Port Network: 'ntwk1',  1e+09-3e+09 Hz, 3 pts, z0=50.0")
        self.assertEqual(str(mc.Network()), "0-Port Network: '',  no frequency points, z0=50.0")

    def test_write_touchstone(self):
        s = self.ntwk1.write_touchstone(return_string=True)
        self.assertIn('# Hz S RI R 50', s)
        self.assertEqual(mc.Network(f=[], s=None, nports=2).nports, 2)

    def test_two_port_metrics(self):
        assert_allclose(self.ntwk1.max_stable_gain[0], 500)
        assert_allclose(self.ntwk1.unilateral_gain[0], 25 / (0.75 * 0.64))
        self.assertTrue(np.all(self.ntwk1.stability > 1))
        self.assertTrue(np.all(self.ntwk1.max_gain < self.ntwk1.max_stable_gain))
        assert_allclose(self.ntwk1.delta, np.linalg.det(self.ntwk1.s))


def test_network_builder():
    builder = NetworkBuilder()
    assert len(builder) == 0
    builder.append(1e9, 0.5, z0=75)
    builder.append(2e9, [[0.25j]])
    ntwk = builder.build(name='dut', comments='built')

    assert ntwk.nports == 1
    assert ntwk.z0 == 75
    assert ntwk.name == 'dut'
    assert ntwk.comments == 'built'
    assert_array_equal(ntwk.f, [1e9, 2e9])
    assert_array_equal(ntwk.s[:, 0, 0], [0.5, 0.25j])

    # the builder stays mutable, the network does not
    builder.append(3e9, 0.1)
    assert len(builder) == 3
    assert len(ntwk) == 2


def test_network_builder_empty():
    ntwk = NetworkBuilder(nports=3, z0=50).build()
    assert ntwk.nports == 3
    assert ntwk.s.shape == (0, 3, 3)


def test_network_builder_inconsistent_ports():
    builder = NetworkBuilder()
    builder.append(1e9, 0.5)
    builder.append(2e9, [[0, 1], [1, 0]])
    assert builder.nports == 2
    with pytest.raises(ValueError):
        builder.build()


def test_network_builder_rejects_non_square():
    with pytest.raises(ValueError):
        NetworkBuilder().append(1e9, [[0, 1]])


def test_fix_param_shape():
    assert mc.fix_param_shape(1).shape == (1, 1, 1)
    assert mc.fix_param_shape([1, 2, 3]).shape == (3, 1, 1)
    assert mc.fix_param_shape([[1, 2], [3, 4]]).shape == (1, 2, 2)
    assert mc.fix_param_shape(np.zeros((4, 3, 3))).shape == (4, 3, 3)
    with pytest.raises(ValueError):
        mc.fix_param_shape(np.zeros((4, 2, 3)))
    with pytest.raises(ValueError):
        mc.fix_param_shape(np.zeros((1, 4, 2, 2)))


def test_z2s():
    assert_almost_equal(mc.z2s(75, 50), [[[0.2]]])
    assert_almost_equal(mc.z2s(50, 50), [[[0]]])
    # T network with 50 ohm arms
    z = [[100, 50], [50, 100]]
    s = mc.z2s(z, 50)
    assert_allclose(s, [[[0.25, 0.25], [0.25, 0.25]]])


def test_y2s():
    assert_almost_equal(mc.y2s(0.02, 50), [[[0]]])
    # short circuit
    assert_almost_equal(mc.y2s(1e12, 50), [[[-1]]], decimal=9)


def test_s2z_s2y_are_inverses(rng):
    s = 0.3 * (rng.standard_normal((4, 3, 3)) + 1j * rng.standard_normal((4, 3, 3)))
    assert_allclose(mc.z2s(mc.s2z(s, 50), 50), s, atol=1e-12)
    assert_allclose(mc.y2s(mc.s2y(s, 50), 50), s, atol=1e-12)


def test_singular_conversions():
    with pytest.raises(SingularMatrixError):
        mc.z2s(-50, 50)
    with pytest.raises(SingularMatrixError):
        mc.y2s(-0.5, 2)
    with pytest.raises(SingularMatrixError):
        mc.s2z(1, 50)
    with pytest.raises(SingularMatrixError):
        mc.s2y(-1, 50)
    # subclass of the numpy error
    with pytest.raises(np.linalg.LinAlgError):
        mc.s2z([[1, 0], [0, 1]], 50)


def test_singular_property_open():
    ntwk = mc.Network(f=[1e9], s=[1])
    with pytest.raises(SingularMatrixError):
        ntwk.z


@pytest.mark.parametrize("func", [mc.h2s, mc.g2s])
def test_hybrid_parameters_unsupported(func):
    with pytest.raises(UnsupportedFeatureError):
        func([[[1, 0], [0, 1]]], 50)
    with pytest.raises(NotImplementedError):
        func([[[1, 0], [0, 1]]], 50)


def test_metrics_properties_two_port_only():
    net = mc.Network(f=[1], s=np.eye(3), z0=50)
    for attr in ('delta', 'stability', 'unilateral_gain', 'max_stable_gain', 'max_gain'):
        with pytest.raises(ValueError):
            getattr(net, attr)


def test_fixtures_consistent(ntwk1, line, thru):
    assert ntwk1.nports == line.nports == thru.nports == 2
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert thru.is_lossless()
