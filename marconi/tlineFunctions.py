r"""
.. module:: marconi.tlineFunctions
===============================================
tlineFunctions (:mod:`marconi.tlineFunctions`)
===============================================

Terminated transmission line helpers.

A line of characteristic impedance :math:`Z_0` terminated in :math:`Z_l`
reflects :math:`\Gamma_0` at the load. Moving a distance :math:`\theta`
(complex electrical length, :math:`\theta = \gamma l`) back towards the
source rotates and attenuates that reflection, which in turn sets the
impedance seen at the input.

Every helper is available under a descriptive name and a short alias:

=====================================  ===================
Descriptive name                       Alias
=====================================  ===================
load_impedance_2_reflection_coefficient  zl_2_Gamma0
reflection_coefficient_2_input_impedance Gamma0_2_zl
reflection_coefficient_at_theta          Gamma0_2_Gamma_in
input_impedance_at_theta                 zl_2_zin
=====================================  ===================

All of them broadcast and return 1D complex arrays.

.. autosummary::
        :toctree: generated/

        zl_2_Gamma0
        zl_2_zin
        Gamma0_2_zl
        Gamma0_2_Gamma_in
        electrical_length_deg_2_theta

"""
import numpy as npy
from numpy import exp

from . import mathFunctions as mf
from .constants import INF, ONE, NumberLike


def _as_complex(x: NumberLike) -> npy.ndarray:
    return npy.array(x, dtype=complex).reshape(-1)


def electrical_length_deg_2_theta(deg: NumberLike):
    """
    Electrical length of a lossless line from its length in degrees.

    Parameters
    ----------
    deg : number or array-like
        line length, in degrees of the guided wavelength

    Returns
    -------
    theta : number or array-like
        purely imaginary electrical length, in radians
    """
    return 1j * mf.degree_2_radian(npy.asarray(deg, dtype=float))


def load_impedance_2_reflection_coefficient(z0: NumberLike, zl: NumberLike):
    r"""
    Reflection coefficient of a load on a line of impedance `z0`.

    .. math::
        \Gamma_0 = \frac {Z_l - Z_0}{Z_l + Z_0}

    An infinite load (open circuit) is replaced by a large finite value,
    so the result tends to 1 instead of being NaN.

    Parameters
    ----------
    z0 : number or array-like
        characteristic impedance of the line
    zl : number or array-like
        load impedance

    Returns
    -------
    Gamma0 : :class:`numpy.ndarray`
        reflection coefficient at the load
    """
    z0 = _as_complex(z0)
    zl = _as_complex(zl)
    zl[zl == npy.inf] = INF
    return (zl - z0) / (zl + z0)


def reflection_coefficient_2_input_impedance(z0: NumberLike, Gamma: NumberLike):
    r"""
    Impedance presenting the reflection coefficient `Gamma`.

    .. math::
        Z = Z_0 \frac {1 + \Gamma}{1 - \Gamma}

    Parameters
    ----------
    z0 : number or array-like
        characteristic impedance of the line
    Gamma : number or array-like
        reflection coefficient

    Returns
    -------
    z : :class:`numpy.ndarray`
        impedance; a total reflection in phase gives a large finite value
    """
    Gamma = _as_complex(Gamma)
    z0 = _as_complex(z0)
    Gamma[Gamma == 1] = ONE
    return z0 * (1.0 + Gamma) / (1.0 - Gamma)


def reflection_coefficient_at_theta(Gamma0: NumberLike, theta: NumberLike):
    r"""
    Reflection coefficient seen `theta` away from the load.

    .. math::
        \Gamma_{in} = \Gamma_0 e^{-2 \theta}
    """
    return _as_complex(Gamma0) * exp(-2 * _as_complex(theta))


def input_impedance_at_theta(z0: NumberLike, zl: NumberLike, theta: NumberLike):
    """
    Input impedance of a line of electrical length `theta` ending in `zl`.

    Parameters
    ----------
    z0 : number or array-like
        characteristic impedance of the line
    zl : number or array-like
        load impedance
    theta : number or array-like
        electrical length of the line, complex for a lossy line

    Returns
    -------
    zin : :class:`numpy.ndarray`
        impedance at the line input

    Examples
    --------
    A quarter-wave 50 ohm section inverts a 100 ohm load:

    >>> zl_2_zin(50, 100, electrical_length_deg_2_theta(90))
    array([25.+0.j])
    """
    Gamma0 = load_impedance_2_reflection_coefficient(z0, zl)
    Gamma_in = reflection_coefficient_at_theta(Gamma0, theta)
    return reflection_coefficient_2_input_impedance(z0, Gamma_in)


zl_2_Gamma0 = load_impedance_2_reflection_coefficient
Gamma0_2_zl = reflection_coefficient_2_input_impedance
zl_2_zin = input_impedance_at_theta
Gamma0_2_Gamma_in = reflection_coefficient_at_theta
