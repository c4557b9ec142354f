r"""
.. module:: marconi.stability
========================================
stability (:mod:`marconi.stability`)
========================================

Stability and gain figures of merit of two-port networks.

Every function takes a two-port :class:`~marconi.network.Network` and
returns one value per frequency, or a single value when the 0-based
frequency index `pos` is given. Networks with another number of ports
raise a ValueError.

.. autosummary::
    :toctree: generated/

    delta
    mag_delta
    stability_factor
    unilateral_gain
    max_stable_gain
    max_available_gain

"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .network import Network


def _two_port_s(ntwk: Network, what: str, pos: int | None) -> np.ndarray:
    if ntwk.nports != 2:
        raise ValueError(f"{what} is only defined for two ports")
    if pos is None:
        return ntwk.s
    # fancy indexing keeps the frequency axis and raises IndexError when out of range
    return ntwk.s[[pos]]


def _at(values: np.ndarray, pos: int | None):
    return values if pos is None else values[0]


def delta(ntwk: Network, pos: int | None = None):
    r"""
    Determinant of the scattering matrix.

    .. math::

            \Delta = S_{11} S_{22} - S_{12} S_{21}

    Parameters
    ----------
    ntwk : :class:`~marconi.network.Network`
        two-port network
    pos : int, optional
        frequency index. If None, all frequencies are returned.

    Returns
    -------
    D : complex :class:`numpy.ndarray` of shape `f`, or complex
    """
    s = _two_port_s(ntwk, "Delta", pos)
    return _at(np.linalg.det(s), pos)


def mag_delta(ntwk: Network, pos: int | None = None):
    """
    Magnitude of :func:`delta`.
    """
    s = _two_port_s(ntwk, "|Delta|", pos)
    return _at(np.abs(np.linalg.det(s)), pos)


def stability_factor(ntwk: Network, pos: int | None = None):
    """
    Rollet stability factor.

    .. math::

            K = ( 1 - |S_{11}|^2 - |S_{22}|^2 + |D|^2 ) / (2 * |S_{12}| * |S_{21}|)

    A network with :math:`|S_{12}| |S_{21}| = 0` (unilateral) is reported
    as infinitely stable.

    Parameters
    ----------
    ntwk : :class:`~marconi.network.Network`
        two-port network
    pos : int, optional
        frequency index

    Returns
    -------
    K : :class:`numpy.ndarray` of shape `f`, or float
    """
    s = _two_port_s(ntwk, "Stability factor K", pos)
    D = np.linalg.det(s)
    denom = 2 * np.abs(s[:, 0, 1]) * np.abs(s[:, 1, 0])
    num = (1 - np.abs(s[:, 0, 0]) ** 2 - np.abs(s[:, 1, 1]) ** 2 + np.abs(D) ** 2)
    infs = np.full(num.shape, np.inf)
    # Handle divide by zero
    K = np.divide(num, denom, out=infs, where=denom != 0)
    return _at(K, pos)


def unilateral_gain(ntwk: Network, pos: int | None = None):
    r"""
    Maximum unilateral transducer gain (in linear).

    .. math::

            G_{TU,max} = \frac{|S_{21}|^2}{(1 - |S_{11}|^2)(1 - |S_{22}|^2)}

    Parameters
    ----------
    ntwk : :class:`~marconi.network.Network`
        two-port network
    pos : int, optional
        frequency index

    Returns
    -------
    mug : :class:`numpy.ndarray` of shape `f`, or float

    See Also
    --------
    max_stable_gain
    max_available_gain
    """
    s = _two_port_s(ntwk, "Unilateral gain", pos)
    with np.errstate(divide='ignore', invalid='ignore'):
        mug = (np.abs(s[:, 1, 0]) ** 2
               / ((1 - np.abs(s[:, 0, 0]) ** 2) * (1 - np.abs(s[:, 1, 1]) ** 2)))
    return _at(mug, pos)


def max_stable_gain(ntwk: Network, pos: int | None = None):
    r"""
    Maximum stable power gain (in linear).

    .. math::

            G_{ms} = |S_{21}| / |S_{12}|

    Returns
    -------
    gms : :class:`numpy.ndarray` of shape `f`, or float

    References
    ----------
    ..  [1] M. S. Gupta, "Power gain in feedback amplifiers, a classic revisited,"
        in IEEE Transactions on Microwave Theory and Techniques, vol. 40, no. 5, pp. 864-879, May 1992,
        doi: 10.1109/22.137392.
    """
    s = _two_port_s(ntwk, "Maximum stable gain", pos)
    with np.errstate(divide='ignore', invalid='ignore'):
        gms = np.abs(s[:, 1, 0]) / np.abs(s[:, 0, 1])
    return _at(gms, pos)


def max_available_gain(ntwk: Network, pos: int | None = None):
    r"""
    Maximum available power gain (in linear).

    .. math::

            G_{max}|_{K>1} = \frac{|S_{21}|}{|S_{12}|} \times \frac{1}{K + \sqrt{K^2 - 1}}

    The maximum available gain only exists for an unconditionally stable
    network. Frequencies where :math:`K \le 1` are NaN.

    Returns
    -------
    gmax : :class:`numpy.ndarray` of shape `f`, or float

    See Also
    --------
    max_stable_gain : Maximum stable power gain
    stability_factor : Stability factor
    """
    _two_port_s(ntwk, "Maximum available gain", pos)
    K = np.atleast_1d(stability_factor(ntwk, pos))
    gms = np.atleast_1d(max_stable_gain(ntwk, pos))
    gmax = np.full(K.shape, np.nan)
    stable = K > 1
    with np.errstate(divide='ignore', invalid='ignore'):
        gmax[stable] = gms[stable] / (K[stable] + np.sqrt(np.square(K[stable]) - 1))
    return _at(gmax, pos)
