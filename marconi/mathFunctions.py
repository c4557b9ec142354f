"""
mathFunctions (:mod:`marconi.mathFunctions`)
=============================================

Complex value helpers, and the codec between complex values and the pairs
of reals a Touchstone file stores them as.

Complex Component Conversion
---------------------------------
.. autosummary::
        :toctree: generated/

        complex_2_reim
        complex_2_magnitude
        complex_2_db
        complex_2_radian
        complex_2_degree

Touchstone Encodings
--------------------------------
A Touchstone value is written as two reals whose meaning depends on the
format of the option line:

======  ===========================  =======================
Format  first value                  second value
======  ===========================  =======================
RI      real part                    imaginary part
MA      linear magnitude             angle in degrees
DB      magnitude in dB (20 log10)   angle in degrees
======  ===========================  =======================

.. autosummary::
        :toctree: generated/

        pair_2_complex
        complex_2_pair
        magdeg_2_reim
        dbdeg_2_reim
        phasor

Unit Conversion
--------------------------------
.. autosummary::
        :toctree: generated/

        radian_2_degree
        degree_2_radian
        magnitude_2_db
        db_2_magnitude

Matrix Utilities
--------------------------
.. autosummary::
        :toctree: generated/

        rsolve
        is_square
        is_unitary
        get_Hermitian_transpose

"""
import numpy as npy
from numpy import pi

from .constants import ALMOST_ZERO, LOG_OF_NEG, NumberLike, SparamFormatT


def complex_2_magnitude(z: NumberLike):
    """Linear magnitude :math:`|z|`."""
    return npy.abs(z)


def complex_2_db(z: NumberLike):
    r"""
    Magnitude of `z` in dB, :math:`20\log_{10}|z|`.

    See Also
    --------
    magnitude_2_db
    """
    return magnitude_2_db(npy.abs(z))


def complex_2_radian(z: NumberLike):
    """Argument of `z` in radians, within ``(-pi, pi]``."""
    return npy.angle(z)


def complex_2_degree(z: NumberLike):
    """Argument of `z` in degrees, within ``(-180, 180]``."""
    return npy.angle(z, deg=True)


def complex_2_reim(z: NumberLike):
    """
    Split `z` into its real and imaginary parts.

    Returns
    -------
    re, im : tuple of numbers or :class:`numpy.ndarray`
    """
    return (npy.real(z), npy.imag(z))


def magnitude_2_db(z: NumberLike, zero_nan: bool = True):
    """
    Linear magnitude to dB.

    Parameters
    ----------
    z : number or array_like
        linear magnitude
    zero_nan : bool, optional
        When True (default), the NaN of a negative magnitude becomes
        :data:`~marconi.constants.LOG_OF_NEG`. A zero magnitude always
        gives -inf.

    Returns
    -------
    db : number or array_like
        ``20*log10(z)``
    """
    with npy.errstate(divide='ignore', invalid='ignore'):
        out = 20 * npy.log10(z)
    if zero_nan:
        return npy.nan_to_num(out, nan=LOG_OF_NEG, neginf=-npy.inf)
    return out


def db_2_magnitude(z: NumberLike):
    """dB to linear magnitude, ``10**(z/20)``."""
    return 10**(z / 20.)


db_2_mag = db_2_magnitude


def magdeg_2_reim(mag: NumberLike, deg: NumberLike):
    """
    Complex value from a linear magnitude and an angle in degrees.

    Examples
    --------
    >>> magdeg_2_reim(2, 90)
    (1.2246467991473532e-16+2j)
    """
    return mag * npy.exp(1j * deg * pi / 180.)


def dbdeg_2_reim(db: NumberLike, deg: NumberLike):
    """Complex value from a dB magnitude and an angle in degrees."""
    return magdeg_2_reim(db_2_magnitude(db), deg)


# mag∠deg
phasor = magdeg_2_reim


def pair_2_complex(a: NumberLike, b: NumberLike, form: SparamFormatT = 'ri'):
    """
    Decode Touchstone pairs into complex values.

    Parameters
    ----------
    a : number or array_like
        first value of each pair: real part, linear magnitude or dB magnitude
    b : number or array_like
        second value of each pair: imaginary part or angle in degrees
    form : {'ri', 'ma', 'db'}
        encoding of the pairs, case insensitive

    Returns
    -------
    z : complex number or :class:`numpy.ndarray`

    Raises
    ------
    ValueError
        if `form` is not a known encoding

    Examples
    --------
    >>> pair_2_complex(0.5, 30, 'ma')
    (0.4330127018922194+0.25j)
    """
    form = form.lower()
    a = npy.asarray(a, dtype=float)
    b = npy.asarray(b, dtype=float)
    if form == 'ri':
        return a + 1j * b
    elif form == 'ma':
        return magdeg_2_reim(a, b)
    elif form == 'db':
        return dbdeg_2_reim(a, b)
    raise ValueError(f'Unknown format {form!r}, must be one of ri, ma, db')


def complex_2_pair(z: NumberLike, form: SparamFormatT = 'ri'):
    """
    Encode complex values as Touchstone pairs, the inverse of
    :func:`pair_2_complex`.

    Returns
    -------
    a, b : tuple of numbers or :class:`numpy.ndarray`
    """
    form = form.lower()
    if form == 'ri':
        return complex_2_reim(z)
    elif form == 'ma':
        return complex_2_magnitude(z), complex_2_degree(z)
    elif form == 'db':
        return complex_2_db(z), complex_2_degree(z)
    raise ValueError(f'Unknown format {form!r}, must be one of ri, ma, db')


def radian_2_degree(rad: NumberLike):
    """Angle conversion, radians to degrees."""
    return rad * 180 / pi


def degree_2_radian(deg: NumberLike):
    """Angle conversion, degrees to radians."""
    return deg * pi / 180.


def is_square(mat: npy.ndarray) -> bool:
    """True for a 2D array with as many rows as columns."""
    return mat.ndim == 2 and mat.shape[0] == mat.shape[1]


def get_Hermitian_transpose(mat: npy.ndarray) -> npy.ndarray:
    """Conjugate transpose of a 2D array."""
    return mat.transpose().conjugate()


def is_unitary(mat: npy.ndarray, tol: float = ALMOST_ZERO) -> bool:
    """
    Check that :math:`M^H M = I` within an absolute tolerance.

    Parameters
    ----------
    mat : :class:`numpy.ndarray`
        matrix to check; a non square matrix is never unitary
    tol : float
        absolute tolerance, defaults to
        :data:`~marconi.constants.ALMOST_ZERO`

    Returns
    -------
    res : bool
    """
    if not is_square(mat):
        return False
    return npy.allclose(get_Hermitian_transpose(mat) @ mat,
                        npy.identity(mat.shape[0]), atol=tol)


def rsolve(A: npy.ndarray, B: npy.ndarray) -> npy.ndarray:
    r"""
    Solve :math:`x A = B` for a stack of matrices.

    Equivalent to ``B @ inv(A)``, computed by solving the conjugate
    transposed system so that no inverse is formed.

    Parameters
    ----------
    A, B : :class:`numpy.ndarray`
        arrays of shape (nfreqs, nports, nports)

    Returns
    -------
    x : :class:`numpy.ndarray`

    Raises
    ------
    numpy.linalg.LinAlgError
        if a matrix of `A` is singular
    """
    At = npy.transpose(A, (0, 2, 1)).conj()
    Bt = npy.transpose(B, (0, 2, 1)).conj()
    return npy.transpose(npy.linalg.solve(At, Bt), (0, 2, 1)).conj()
