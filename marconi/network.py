"""
.. module:: marconi.network
========================================
network (:mod:`marconi.network`)
========================================


Provide an n-port network class and associated functions.

Much of the functionality in this module is provided as methods and
properties of the :class:`Network` Class.


Network Class
===============

.. autosummary::
    :toctree: generated/

    Network
    NetworkBuilder

Building Network
----------------

.. autosummary::
    :toctree: generated/

    Network.from_z
    Network.from_y

Network Representations
============================

.. autosummary::
    :toctree: generated/

    Network.s
    Network.z
    Network.y

IO
====

.. autosummary::

    Network.write_touchstone
    marconi.io.touchstone.read_touchstone
    marconi.io.touchstone.write_touchstone

Supporting Functions
======================

.. autosummary::
    :toctree: generated/

    s2z
    s2y
    z2s
    y2s
    h2s
    g2s
    fix_param_shape
    passivity
    reciprocity

"""
from __future__ import annotations

import warnings
from pathlib import Path
from typing import Sequence, TextIO

import numpy as np
from scipy.interpolate import interp1d  # for Network.interpolate()

from . import mathFunctions as mf
from . import stability as stab
from .base_network import BaseNetwork
from .constants import ALMOST_ZERO, NumberLike
from .util import find_stack_level


class InvalidFrequencyWarning(UserWarning):
    """Thrown if frequency values aren't monotonously increasing
    """
    pass


class SingularMatrixError(np.linalg.LinAlgError):
    """Raised when a network parameter conversion meets a singular matrix.
    """
    pass


class UnsupportedFeatureError(NotImplementedError):
    """Raised for network features marconi explicitly does not support:
    H and G parameters, reference-line (per port) impedances and
    Touchstone 2.0 keywords.
    """
    pass


class Network(BaseNetwork):
    r"""
    An n-port electrical network.

    For instructions on how to create Network see  :func:`__init__`.
    A :class:`Network` is defined by

    =====================  =============================================
    Property               Meaning
    =====================  =============================================
    :attr:`s`              Scattering parameter matrices, shape fxnxn
    :attr:`z0`             Reference impedance (a single scalar)
    :attr:`f`              Frequency vector in Hz
    :attr:`nports`         Number of ports
    =====================  =============================================

    A Network is read-only once built: the arrays are not writeable and
    the properties have no setters. Networks are assembled incrementally
    with a :class:`NetworkBuilder`.

    Scalar projections of the s-matrix are available as properties:

    =====================  =============================================
    Property               Meaning
    =====================  =============================================
    :attr:`s_re`           Real part of the s-matrix.
    :attr:`s_im`           Imaginary part of the s-matrix.
    :attr:`s_mag`          Magnitude of the s-matrix.
    :attr:`s_db`           Magnitude in log scale of the s-matrix.
    :attr:`s_deg`          Phase of the s-matrix in degrees.
    =====================  =============================================

    Two-port figures of merit are provided by :mod:`marconi.stability`
    and exposed as :attr:`delta`, :attr:`stability`,
    :attr:`unilateral_gain`, :attr:`max_stable_gain` and :attr:`max_gain`.
    """

    # CONSTRUCTOR
    def __init__(self, file: str | Path | TextIO = None, name: str = None,
                 comments: str = None, nports: int | None = None, **kwargs) -> None:
        r"""
        Network constructor.

        Creates an n-port microwave network from a `file` or directly
        from data. If no file or data is given, then an empty Network
        is created.

        Parameters
        ----------
        file : str, Path, or file-object
            touchstone file (.sNp) to load.
        name : str, optional
            Name of this Network. if None will try to use file, if it is a str
        comments : str, optional
            Comments associated with the Network
        nports : int, optional
            number of ports. Validated against the data, or used as a
            hint to read wrapped n-port Touchstone rows.
        \*\*kwargs :
            `f`, `z0` and one of `s`, `z` or `y` build the network from
            data. `encoding` and `strict` are passed to the Touchstone
            reader.

        Examples
        --------
        From a touchstone

        >>> n = marconi.Network('ntwk1.s2p')

        Directly from values

        >>> n = marconi.Network(f=[1e9, 2e9], s=[0.1, 0.2], z0=50)

        See Also
        --------
        from_z : init from impedance values
        write_touchstone : write a network to a touchstone file
        """
        self.name = name
        self.comments = comments

        if file is not None:
            from .io import touchstone
            touchstoneFile = touchstone.Touchstone(file, encoding=kwargs.pop('encoding', None),
                                                   strict=kwargs.pop('strict', None),
                                                   nports=nports)
            if kwargs:
                raise ValueError(f'Unexpected arguments with a file: {sorted(kwargs)}')
            ntwk = touchstoneFile.to_network()
            self._set_data(ntwk.f, ntwk.s, ntwk.z0, ntwk.nports)
            if self.comments is None:
                self.comments = ntwk.comments
            if self.name is None:
                self.name = ntwk.name
            return

        # Check for multiple attributes
        params = [attr for attr in ('s', 'z', 'y') if attr in kwargs]
        if len(params) > 1:
            raise ValueError(f'Multiple input parameters provided: {params}')
        unknown = set(kwargs) - {'s', 'z', 'y', 'f', 'z0'}
        if unknown:
            raise ValueError(f'Unexpected arguments: {sorted(unknown)}')

        z0 = kwargs.get('z0', 50.)
        f = kwargs.get('f', [])
        if not params:
            s = None
        elif params[0] == 's':
            s = kwargs['s']
        elif params[0] == 'z':
            s = z2s(kwargs['z'], z0)
        else:
            s = y2s(kwargs['y'], z0)
        self._set_data(f, s, z0, nports)

    def _set_data(self, f: NumberLike, s: NumberLike | None, z0: NumberLike,
                  nports: int | None) -> None:
        f = np.array(f, dtype=float).reshape(-1)

        if s is None or np.size(s) == 0:
            n = nports or 0
            s = np.empty((0, n, n), dtype=complex)
        else:
            s = fix_param_shape(s)

        if len(f) != len(s):
            raise ValueError(f'Frequency vector has {len(f)} points but {len(s)} '
                             'parameter matrices were given')
        if nports is not None and s.shape[1] != nports:
            raise ValueError(f'Parameter matrices are {s.shape[1]}x{s.shape[2]} '
                             f'but the network has {nports} ports')

        if len(f) > 1 and np.any(np.diff(f) < 0):
            warnings.warn('Frequency values are not monotonously increasing!',
                          InvalidFrequencyWarning, stacklevel=find_stack_level())

        f.setflags(write=False)
        s.setflags(write=False)
        self._f = f
        self._s = s
        self._z0 = _check_scalar_z0(z0)
        self._nports = s.shape[1]

    @classmethod
    def from_z(cls, z: NumberLike, **kw) -> Network:
        r"""
        Create a Network from its Z-parameters.

        Parameters
        ----------
        z : Numpy array
            Impedance matrix. Should be of shape fxnxn,
            where f is frequency axis and n is number of ports
        \*\*kwargs :
            key word arguments can be used to assign properties of the
            Network, `f`, `z0` and `name`.

        Returns
        -------
        ntw : :class:`Network`
            Created Network

        Examples
        --------
        >>> ntw = marconi.Network.from_z([75.], f=[1e9], z0=50)
        """
        return cls(z=z, **kw)

    @classmethod
    def from_y(cls, y: NumberLike, **kw) -> Network:
        """
        Create a Network from its Y-parameters.

        See Also
        --------
        from_z
        """
        return cls(y=y, **kw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Network):
            return NotImplemented
        return (self.nports == other.nports
                and self.z0 == other.z0
                and np.array_equal(self.f, other.f)
                and np.array_equal(self.s, other.s))

    def __ne__(self, other: object) -> bool:
        eq = self.__eq__(other)
        if eq is NotImplemented:
            return eq
        return not eq

    __hash__ = None

    def __len__(self) -> int:
        """
        length of frequency axis
        """
        return len(self._s)

    def __str__(self) -> str:
        name = '' if self.name is None else self.name
        if len(self.f):
            band = f'{self.f[0]:g}-{self.f[-1]:g} Hz, {len(self.f)} pts'
        else:
            band = 'no frequency points'
        return '%i-Port Network: \'%s\',  %s, z0=%s' % (self.nports, name, band, str(self.z0))

    def __repr__(self) -> str:
        return self.__str__()

    # PRIMARY PROPERTIES
    @property
    def s(self) -> np.ndarray:
        """
        Scattering parameter matrix.

        Returns
        -------
        s : complex :class:`numpy.ndarray` of shape `fxnxn`
            read-only scattering parameter matrices.
        """
        return self._s

    @property
    def z(self) -> np.ndarray:
        """
        Impedance parameter matrix.

        Returns
        -------
        z : complex :class:`numpy.ndarray` of shape `fxnxn`

        See Also
        --------
        s2z
        """
        return s2z(self._s, self._z0)

    @property
    def y(self) -> np.ndarray:
        """
        Admittance parameter matrix.

        Returns
        -------
        y : complex :class:`numpy.ndarray` of shape `fxnxn`

        See Also
        --------
        s2y
        """
        return s2y(self._s, self._z0)

    @property
    def f(self) -> np.ndarray:
        """
        Frequency vector in Hz.
        """
        return self._f

    @property
    def z0(self) -> complex:
        """
        Reference impedance, shared by all ports and frequencies.
        """
        return self._z0

    @property
    def nports(self) -> int:
        """
        Number of ports the network has.
        """
        return self._nports

    # SECONDARY PROPERTIES
    @property
    def s_re(self) -> np.ndarray:
        return np.real(self._s)

    @property
    def s_im(self) -> np.ndarray:
        return np.imag(self._s)

    @property
    def s_mag(self) -> np.ndarray:
        return mf.complex_2_magnitude(self._s)

    @property
    def s_db(self) -> np.ndarray:
        return mf.complex_2_db(self._s)

    @property
    def s_deg(self) -> np.ndarray:
        return mf.complex_2_degree(self._s)

    @property
    def passivity(self) -> np.ndarray:
        r"""
        Passivity metric for a multi-port network.

        .. math::

                S^H \cdot S

        Returns
        -------
        passivity : :class:`numpy.ndarray` of shape fxnxn
        """
        return passivity(self._s)

    @property
    def reciprocity(self) -> np.ndarray:
        """
        Reciprocity metric, :math:`S - S^T`.

        Returns
        -------
        reciprocity : :class:`numpy.ndarray` of shape `fxnxn`
        """
        return reciprocity(self._s)

    @property
    def delta(self) -> np.ndarray:
        """
        Determinant of the scattering matrix at each frequency.

        See Also
        --------
        marconi.stability.delta
        """
        return stab.delta(self)

    @property
    def stability(self) -> np.ndarray:
        """
        Rollet stability factor K.

        See Also
        --------
        marconi.stability.stability_factor
        """
        return stab.stability_factor(self)

    @property
    def unilateral_gain(self) -> np.ndarray:
        """
        Maximum unilateral gain (in linear).

        See Also
        --------
        marconi.stability.unilateral_gain
        """
        return stab.unilateral_gain(self)

    @property
    def max_stable_gain(self) -> np.ndarray:
        """
        Maximum stable gain (in linear).

        See Also
        --------
        marconi.stability.max_stable_gain
        """
        return stab.max_stable_gain(self)

    @property
    def max_gain(self) -> np.ndarray:
        """
        Maximum available gain (in linear), NaN where K <= 1.

        See Also
        --------
        marconi.stability.max_available_gain
        """
        return stab.max_available_gain(self)

    ## NETWORK CLASSIFIERs
    def is_passive(self) -> bool:
        """
        Test for passivity.

        A network is considered passive when no scattering parameter,
        at any frequency, has a magnitude larger than one.

        Returns
        -------
        bool : boolean
        """
        return bool(np.all(np.abs(self._s) <= 1))

    def is_reciprocal(self, tol: float = ALMOST_ZERO) -> bool:
        """
        Test for reciprocity.

        Parameters
        ----------
        tol : float, optional
            Numerical tolerance. The default is :data:`marconi.constants.ALMOST_ZERO`.

        Returns
        -------
        bool : boolean

        See Also
        --------
        reciprocity
        """
        return bool(np.allclose(reciprocity(self._s), np.zeros_like(self._s), atol=tol))

    def is_lossless(self, tol: float = ALMOST_ZERO) -> bool:
        """
        Test for losslessness.

        [S] is lossless if [S] is unitary, i.e. if :math:`([S][S]^* = [1])`

        Parameters
        ----------
        tol : float, optional
            Numerical tolerance. The default is :data:`marconi.constants.ALMOST_ZERO`

        Returns
        -------
        bool : boolean
        """
        for f_idx in range(len(self._s)):
            if not mf.is_unitary(self._s[f_idx, :, :], tol=tol):
                return False
        return True

    # frequency interpolation
    def interpolate(self, new_f: NumberLike, kind: str = 'linear', **kwargs) -> Network:
        r"""
        Return an interpolated network, from a new frequency vector.

        The real and imaginary parts of the s-matrix are interpolated
        with :func:`scipy.interpolate.interp1d`. Extrapolation outside of
        the stored band raises a ValueError.

        Parameters
        ----------
        new_f : number or array-like
            new frequency vector, in Hz
        kind : str
            interpolation kind, passed to :func:`scipy.interpolate.interp1d`
        \*\*kwargs :
            passed to :func:`scipy.interpolate.interp1d`

        Returns
        -------
        result : :class:`Network`
            an interpolated Network
        """
        new_f = np.array(new_f, dtype=float).reshape(-1)
        if len(self._f) == 0:
            raise ValueError('Cannot interpolate a network without frequency points')
        if len(self._f) == 1:
            if not np.all(new_f == self._f[0]):
                raise ValueError('A single frequency network can only be sampled at its frequency')
            s = np.repeat(self._s, len(new_f), axis=0)
        else:
            f_real = interp1d(self._f, self._s.real, axis=0, kind=kind, **kwargs)
            f_imag = interp1d(self._f, self._s.imag, axis=0, kind=kind, **kwargs)
            s = f_real(new_f) + 1.0j * f_imag(new_f)
        return Network(f=new_f, s=s, z0=self._z0, nports=self._nports, name=self.name,
                       comments=self.comments)

    def s_at(self, f: float) -> np.ndarray:
        """
        Scattering matrix at frequency `f` (Hz).

        Stored points are returned as is, frequencies in between are
        linearly interpolated.
        """
        idx = np.flatnonzero(self._f == f)
        if len(idx):
            return self._s[idx[0]].copy()
        return self.interpolate(f).s[0].copy()

    # touchstone file IO
    def write_touchstone(self, filename: str | Path = None, dir: str | Path = None,
                         return_string: bool = False) -> str | None:
        """
        Write a contents of the :class:`Network` to a touchstone file.

        The file is always written with the option line ``# Hz S RI R 50``.

        Parameters
        ----------
        filename : a string or Path, optional
            touchstone filename, without extension. if 'None', then
            will use the network's :attr:`name`.
        dir : string or Path, optional
            the directory to save the file in.
        return_string : bool, optional
            return the file_string rather than write to a file

        See Also
        --------
        marconi.io.touchstone.write_touchstone
        """
        from .io import touchstone
        return touchstone.write_touchstone(self, filename=filename, dir=dir,
                                           return_string=return_string)


class NetworkBuilder:
    """
    Mutable accumulator of network rows, finalized into a :class:`Network`.

    Every appended row overwrites the port count and, when given, the
    reference impedance. Frequencies and scattering matrices accumulate.

    Examples
    --------
    >>> builder = NetworkBuilder()
    >>> builder.append(1e9, [[0.1]], z0=50)
    >>> ntwk = builder.build(name='dut')
    """
    def __init__(self, nports: int = 0, z0: NumberLike = 50.) -> None:
        self.nports = nports
        self.z0 = z0
        self.f: list[float] = []
        self.s: list[np.ndarray] = []

    def __len__(self) -> int:
        return len(self.f)

    @property
    def last_f(self) -> float | None:
        return self.f[-1] if self.f else None

    def append(self, f: float, s: NumberLike, z0: NumberLike = None) -> None:
        s = np.array(s, dtype=complex)
        if s.ndim == 0:
            s = s.reshape(1, 1)
        if s.ndim != 2 or s.shape[0] != s.shape[1]:
            raise ValueError(f'Parameter matrix must be square, got shape {s.shape}')
        self.nports = s.shape[0]
        if z0 is not None:
            self.z0 = z0
        self.f.append(float(f))
        self.s.append(s)

    def build(self, name: str = None, comments: str = None) -> Network:
        """
        Finalize the accumulated rows into a read-only :class:`Network`.

        Raises
        ------
        ValueError
            if the rows do not all have the same number of ports
        """
        if not self.s:
            return Network(f=[], s=None, z0=self.z0, nports=self.nports,
                           name=name, comments=comments)
        shapes = sorted({m.shape[0] for m in self.s})
        if len(shapes) > 1:
            raise ValueError(f'Rows have inconsistent port counts: {shapes}')
        return Network(f=self.f, s=np.stack(self.s), z0=self.z0, nports=self.nports,
                       name=name, comments=comments)


## Functions operating on s-parameter matrices
def _check_scalar_z0(z0: NumberLike) -> complex:
    if np.ndim(z0) != 0:
        raise UnsupportedFeatureError(
            'Per-port reference impedances (reference-line networks) are not supported, '
            'z0 must be a single number')
    if isinstance(z0, np.generic):
        z0 = z0.item()
    return z0


def _identity_like(p: np.ndarray) -> np.ndarray:
    # Creating Identity matrices of shape (nports,nports) for each nfreqs
    Id = np.zeros_like(p)
    np.einsum('ijj->ij', Id)[...] = 1.0
    return Id


def fix_param_shape(p: NumberLike) -> np.ndarray:
    """
    Attempt to broadcast p to satisfy.
        np.shape(p) == (nfreqs, nports, nports)

    Parameters
    ----------
    p : number, array-like
        p can be:
        * a number (one frequency, one port)
        * 1D array-like (many frequencies, one port)
        * 2D array-like (one frequency, many ports)
        * 3D array-like (many frequencies, many ports)

    Returns
    -------
    p : array of shape == (nfreqs, nports, nports)
        p with the right shape for a nport Network

    """
    # Ensure input is numpy array
    p = np.array(p, dtype=complex)
    if len(p.shape) == 0:
        # Scalar
        return p.reshape(1, 1, 1)
    if len(p.shape) == 1:
        # One port with many frequencies
        return p.reshape(p.shape[0], 1, 1)
    if p.shape[-1] != p.shape[-2]:
        raise ValueError('Input matrix must be square')
    if len(p.shape) == 2:
        # Many port with one frequency
        return p.reshape(-1, p.shape[0], p.shape[0])
    if len(p.shape) != 3:
        raise ValueError(f'Input array has too many dimensions. Shape: {p.shape}')
    return p


def z2s(z: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    r"""
    Convert impedance parameters [#]_ to scattering parameters [#]_.

    .. math::
        S = (Z - Z_0 I) (Z + Z_0 I)^{-1}

    Parameters
    ----------
    z : complex array-like
        impedance parameters, fxnxn (or broadcastable by
        :func:`fix_param_shape`)
    z0 : complex number
        reference impedance

    Returns
    -------
    s : complex array-like
        scattering parameters, shape fxnxn

    Raises
    ------
    SingularMatrixError
        if :math:`Z + Z_0 I` is singular at some frequency

    References
    ----------
    .. [#] http://en.wikipedia.org/wiki/impedance_parameters
    .. [#] http://en.wikipedia.org/wiki/S-parameters

    Examples
    --------
    >>> z2s(75, 50)
    array([[[0.2+0.j]]])
    """
    z = fix_param_shape(z)
    z0 = _check_scalar_z0(z0)
    Id = _identity_like(z)
    try:
        return mf.rsolve(z + z0 * Id, z - z0 * Id)
    except np.linalg.LinAlgError as err:
        raise SingularMatrixError('Z + Z0*I is singular, cannot convert to S-parameters') from err


def y2s(y: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    r"""
    Convert admittance parameters [#]_ to scattering parameters [#]_.

    .. math::
        S = (I - Z_0 Y) (I + Z_0 Y)^{-1}

    Parameters
    ----------
    y : complex array-like
        admittance parameters
    z0 : complex number
        reference impedance

    Returns
    -------
    s : complex array-like
        scattering parameters, shape fxnxn

    Raises
    ------
    SingularMatrixError
        if :math:`I + Z_0 Y` is singular at some frequency

    References
    ----------
    .. [#] http://en.wikipedia.org/wiki/Admittance_parameters
    .. [#] http://en.wikipedia.org/wiki/S-parameters
    """
    y = fix_param_shape(y)
    z0 = _check_scalar_z0(z0)
    Id = _identity_like(y)
    try:
        return mf.rsolve(Id + z0 * y, Id - z0 * y)
    except np.linalg.LinAlgError as err:
        raise SingularMatrixError('I + Z0*Y is singular, cannot convert to S-parameters') from err


def s2z(s: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    r"""
    Convert scattering parameters to impedance parameters.

    .. math::
        Z = Z_0 (I + S) (I - S)^{-1}

    Raises
    ------
    SingularMatrixError
        if :math:`I - S` is singular (e.g. an ideal open)
    """
    s = fix_param_shape(s)
    z0 = _check_scalar_z0(z0)
    Id = _identity_like(s)
    try:
        return z0 * mf.rsolve(Id - s, Id + s)
    except np.linalg.LinAlgError as err:
        raise SingularMatrixError('I - S is singular, cannot convert to Z-parameters') from err


def s2y(s: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    r"""
    Convert scattering parameters to admittance parameters.

    .. math::
        Y = Z_0^{-1} (I - S) (I + S)^{-1}

    Raises
    ------
    SingularMatrixError
        if :math:`I + S` is singular (e.g. an ideal short)
    """
    s = fix_param_shape(s)
    z0 = _check_scalar_z0(z0)
    Id = _identity_like(s)
    try:
        return mf.rsolve(Id + s, Id - s) / z0
    except np.linalg.LinAlgError as err:
        raise SingularMatrixError('I + S is singular, cannot convert to Y-parameters') from err


def h2s(h: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    """
    Hybrid to scattering parameters. Not supported.

    Raises
    ------
    UnsupportedFeatureError
    """
    raise UnsupportedFeatureError('Conversion of H-parameters to S-parameters is not supported')


def g2s(g: NumberLike, z0: NumberLike = 50) -> np.ndarray:
    """
    Inverse hybrid to scattering parameters. Not supported.

    Raises
    ------
    UnsupportedFeatureError
    """
    raise UnsupportedFeatureError('Conversion of G-parameters to S-parameters is not supported')


## these methods are used in the secondary properties
def passivity(s: np.ndarray) -> np.ndarray:
    r"""
    Passivity metric for a multi-port network.

    A metric which is proportional to the amount of power lost in a
    multiport network, depending on the excitation port. Specifically,
    this returns a matrix who's diagonals are equal to the total
    power received at all ports, normalized to the power at a single
    excitement port.

    .. math::

            S^H \cdot S

    Parameters
    ----------
    s : :class:`numpy.ndarray` (shape fxnxn)
        scattering parameter matrices

    Returns
    -------
    passivity : :class:`numpy.ndarray` of shape fxnxn
    """
    s = fix_param_shape(s)
    return np.conjugate(np.transpose(s, (0, 2, 1))) @ s


def reciprocity(s: np.ndarray) -> np.ndarray:
    """
    Reciprocity metric for a multi-port network.

    This returns the magnitude of the difference between the
    s-parameter matrix and its transpose.

    Parameters
    ----------
    s : :class:`numpy.ndarray` (shape fxnxn)
        scattering parameter matrices

    Returns
    -------
    reciprocity : :class:`numpy.ndarray` of shape fxnxn
    """
    s = fix_param_shape(s)
    return np.abs(s - np.transpose(s, (0, 2, 1)))
