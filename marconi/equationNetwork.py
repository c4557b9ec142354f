"""
.. module:: marconi.equationNetwork
==================================================
equationNetwork (:mod:`marconi.equationNetwork`)
==================================================

Networks whose scattering parameters are given by a function of frequency.

.. autosummary::
    :toctree: generated/

    EquationNetwork
    equation_to_network

"""
from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from .base_network import BaseNetwork
from .network import Network


class EquationNetwork(BaseNetwork):
    r"""
    An n-port network defined by an equation.

    The equation is called as ``func(*args, f=f, z0=z0)`` and must return
    a single number for a 1-port network, or an `nports` x `nports`
    matrix otherwise. Extra parameters of the equation should have
    default values so the network can be checked at construction.

    Parameters
    ----------
    nports : int
        number of ports
    z0 : number
        reference impedance
    func : callable
        the scattering parameter equation
    name : str, optional
        name of the network

    Raises
    ------
    ValueError
        if `func` evaluated at 1 Hz does not return the right shape

    Examples
    --------
    >>> def attenuator(f, z0, loss_db=3):
    ...     s21 = 10 ** (-loss_db / 20)
    ...     return [[0, s21], [s21, 0]]
    >>> att = EquationNetwork(2, 50, attenuator)
    >>> ntwk = att.sample([1e9, 2e9], 6)
    """

    def __init__(self, nports: int, z0: complex, func: Callable, name: str = None) -> None:
        self._nports = int(nports)
        self._z0 = z0
        self.func = func
        self.name = name
        self._check_shape(func(f=1, z0=z0))

    def _check_shape(self, result) -> np.ndarray:
        result = np.asarray(result, dtype=complex)
        if self._nports == 1:
            if result.size != 1 or result.ndim > 2:
                raise ValueError('1-Port network must be built with a function that returns '
                                 f'a single number, got shape {result.shape}')
            return result.reshape(1, 1)
        if result.shape != (self._nports, self._nports):
            raise ValueError(f'{self._nports}-Port network must be built with a function that '
                             f'returns a {self._nports}x{self._nports} matrix, got shape {result.shape}')
        return result

    def __str__(self) -> str:
        name = '' if self.name is None else self.name
        return '%i-Port Equation Network: \'%s\', z0=%s' % (self._nports, name, str(self._z0))

    def __repr__(self) -> str:
        return self.__str__()

    @property
    def nports(self) -> int:
        return self._nports

    @property
    def z0(self) -> complex:
        return self._z0

    def s_at(self, f: float, *args) -> np.ndarray:
        """
        Evaluate the equation at frequency `f` (Hz).

        Parameters
        ----------
        f : float
            frequency in Hz
        \\*args :
            positional arguments of the equation

        Returns
        -------
        s : complex :class:`numpy.ndarray` of shape (nports, nports)
        """
        return self._check_shape(self.func(*args, f=f, z0=self._z0))


def equation_to_network(eq: EquationNetwork, freqs: Sequence[float] | np.ndarray,
                        args: tuple = ()) -> Network:
    """
    Evaluate an :class:`EquationNetwork` at every frequency of `freqs`.

    Parameters
    ----------
    eq : :class:`EquationNetwork`
        the equation network
    freqs : array-like
        frequencies in Hz
    args : tuple, optional
        positional arguments passed to the equation

    Returns
    -------
    ntwk : :class:`~marconi.network.Network`

    See Also
    --------
    EquationNetwork.sample
    """
    return eq.sample(freqs, *args)
