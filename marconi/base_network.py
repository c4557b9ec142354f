from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

import numpy as npy

if TYPE_CHECKING:
    from .network import Network


class BaseNetwork(ABC):
    """
    Capabilities shared by stored (:class:`~marconi.network.Network`) and
    equation defined (:class:`~marconi.equationNetwork.EquationNetwork`)
    networks: everything that only needs the scattering matrix at a
    frequency.
    """
    name: str | None

    @property
    @abstractmethod
    def nports(self) -> int:
        pass

    @property
    @abstractmethod
    def z0(self) -> complex:
        pass

    @property
    def number_of_ports(self) -> int:
        return self.nports

    @abstractmethod
    def s_at(self, f: float, *args) -> npy.ndarray:
        """
        Scattering matrix of shape (nports, nports) at frequency `f` in Hz.
        """
        pass

    def sample(self, frequencies: Sequence[float] | npy.ndarray, *args) -> Network:
        """
        Sample the network at the given frequencies.

        Parameters
        ----------
        frequencies : array-like
            frequencies in Hz
        \\*args :
            passed to :meth:`s_at`

        Returns
        -------
        ntwk : :class:`~marconi.network.Network`
        """
        from .network import Network

        f = npy.asarray(frequencies, dtype=float).reshape(-1)
        s = npy.empty((len(f), self.nports, self.nports), dtype=complex)
        for k, fk in enumerate(f):
            s[k] = self.s_at(fk, *args)
        return Network(f=f, s=s, z0=self.z0, nports=self.nports, name=self.name)
