"""
.. module:: marconi.io.touchstone

========================================
touchstone (:mod:`marconi.io.touchstone`)
========================================

Touchstone class and utilities

.. autosummary::
   :toctree: generated/

   Touchstone
   TouchstoneFormatError
   TouchstoneOptionWarning

Functions related to reading/writing touchstones.
-------------------------------------------------

.. autosummary::
   :toctree: generated/

   read_touchstone
   write_touchstone

"""
from __future__ import annotations

import logging
import os
import re
import typing
import warnings
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from .. import mathFunctions as mf
from .. import network
from ..constants import (
    FREQ_UNITS,
    PARAMETERS,
    SPARAM_FORMATS,
    TOUCHSTONE_DEFAULTS,
    TOUCHSTONE_STRICT,
    WRITE_FORMAT,
    WRITE_FREQUENCY_UNIT,
    WRITE_Z0,
    FrequencyUnitT,
    ParameterT,
    SparamFormatT,
)
from ..network import Network, NetworkBuilder, UnsupportedFeatureError
from ..util import basename_noext, find_stack_level, get_extn, get_fid

logger = logging.getLogger(__name__)

CREATED_WITH = "Created with marconi"


class TouchstoneFormatError(ValueError):
    """
    Raised when a Touchstone file cannot be parsed.

    Attributes
    ----------
    lineno : int or None
        1-based line number of the offending line
    line : str or None
        the offending line
    expected : int or None
        number of values expected on a data row
    actual : int or None
        number of values found
    """
    def __init__(self, message: str, lineno: int | None = None, line: str | None = None,
                 expected: int | None = None, actual: int | None = None) -> None:
        self.lineno = lineno
        self.line = line
        self.expected = expected
        self.actual = actual
        if lineno is not None:
            message = f"line {lineno}: {message}"
        if line is not None:
            message = f"{message} ({line.strip()!r})"
        super().__init__(message)


class TouchstoneOptionWarning(UserWarning):
    """
    Thrown when an option line token is not recognized and the previous
    value is kept.
    """
    pass


@dataclass
class ParserState:
    """Class to hold dynamic variables while parsing the touchstone file.
    """
    rank: int | None = None
    strict: bool = False
    option_line_parsed: bool = False
    comments: list[str] = field(default_factory=list)
    comments_after_option_line: list[str] = field(default_factory=list)
    frequency_unit: FrequencyUnitT = "ghz"
    parameter: ParameterT = "s"
    format: SparamFormatT = "ma"
    resistance: complex = 50.
    pending: list[float] = field(default_factory=list)
    pending_lineno: int | None = None
    parse_noise: bool = False
    builder: NetworkBuilder = field(default_factory=NetworkBuilder)

    @property
    def frequency_mult(self) -> float:
        return FREQ_UNITS[self.frequency_unit]

    @property
    def numbers_per_row(self) -> int | None:
        """Returns the number of values of a full data row (frequency included),
        if the number of ports is known.
        """
        if self.rank is None:
            return None
        return 1 + 2 * self.rank**2

    def append_comment(self, line: str) -> None:
        """Append comment, and append appropriate comment list.

        Args:
            line (str): Line to parse
        """
        if self.option_line_parsed:
            self.comments_after_option_line.append(line)
        else:
            self.comments.append(line)

    def _reject_option(self, what: str, value: str, lineno: int, line: str) -> None:
        msg = f"illegal {what} {value!r}"
        if self.strict:
            raise TouchstoneFormatError(msg, lineno, line)
        warnings.warn(f"line {lineno}: {msg}, keeping {getattr(self, what)!r}",
                      TouchstoneOptionWarning, stacklevel=find_stack_level())

    def parse_option_line(self, line: str, lineno: int) -> None:
        """Parse the option line starting with #

        Every option line overwrites the active options. Missing trailing
        tokens take the default values ``GHz S MA R 50``.

        Args:
            line (str): Line to parse
            lineno (int): Line number, for error messages

        Raises:
            TouchstoneFormatError: In strict mode, if the option line contains invalid options.
        """
        toks = line.partition("!")[0].lower()[1:].strip().split()
        if self.strict and len(toks) > len(TOUCHSTONE_DEFAULTS):
            raise TouchstoneFormatError("too many option line tokens", lineno, line)
        # fill the option line with the missing defaults
        toks.extend(TOUCHSTONE_DEFAULTS[len(toks):])

        if toks[0] in FREQ_UNITS:
            self.frequency_unit = toks[0]
        else:
            self._reject_option("frequency_unit", toks[0], lineno, line)

        if toks[1] in PARAMETERS:
            self.parameter = toks[1]
        else:
            self._reject_option("parameter", toks[1], lineno, line)

        if toks[2] in SPARAM_FORMATS:
            self.format = toks[2]
        else:
            self._reject_option("format", toks[2], lineno, line)

        if self.strict and toks[3] != "r":
            raise TouchstoneFormatError(f"expected 'R' before the reference impedance, got {toks[3]!r}",
                                        lineno, line)

        try:
            self.resistance = _parse_number(toks[4])
        except ValueError:
            self._reject_option("resistance", toks[4], lineno, line)

        self.option_line_parsed = True
        logger.debug("line %d: options %s %s %s R %s", lineno, self.frequency_unit,
                     self.parameter, self.format, self.resistance)

    def parse_data_line(self, line: str, lineno: int) -> None:
        """Parse a line of numbers, which is a full data row or, for
        networks of 3 ports and more, a part of it.

        Args:
            line (str): Line to parse
            lineno (int): Line number, for error messages
        """
        if self.parse_noise:
            return
        data = line.partition("!")[0]
        toks = data.split()
        if not toks:
            return
        try:
            values = [float(tok) for tok in toks]
        except ValueError as err:
            raise TouchstoneFormatError("non numeric value in data line", lineno, line) from err

        if self.rank is not None and self.rank >= 3:
            if not self.pending:
                self.pending_lineno = lineno
            self.pending.extend(values)
            if len(self.pending) > self.numbers_per_row:
                raise TouchstoneFormatError("too many values for a data row", self.pending_lineno, line,
                                            expected=self.numbers_per_row, actual=len(self.pending))
            if len(self.pending) == self.numbers_per_row:
                values, self.pending = self.pending, []
                self.append_row(values, self.pending_lineno, line)
            return

        last_f = self.builder.last_f
        if (
            self.builder.nports == 2
            and last_f is not None
            and len(values) == 5
            and values[0] * self.frequency_mult <= last_f
        ):
            warnings.warn(f"line {lineno}: noise parameters are not supported, "
                          "ignoring the rest of the file", UserWarning, stacklevel=find_stack_level())
            self.parse_noise = True
            return

        self.append_row(values, lineno, line)

    def append_row(self, values: list[float], lineno: int, line: str) -> None:
        """Decode a full data row with the active options and append it to the network.
        """
        n = int(round(np.sqrt((len(values) - 1) / 2)))
        if n == 0 or 1 + 2 * n**2 != len(values):
            raise TouchstoneFormatError(
                "a data row must hold a frequency and 2*n**2 values for an n-port network, "
                f"got {len(values)} values", lineno, line,
                expected=self.numbers_per_row, actual=len(values))

        f = values[0] * self.frequency_mult
        pairs = np.array(values[1:]).reshape(-1, 2)
        s = mf.pair_2_complex(pairs[:, 0], pairs[:, 1], self.format).reshape(n, n)
        if n == 2:
            # 2-port rows are S11 S21 S12 S22
            s = s.T

        if self.parameter != "s":
            func_name = f"{self.parameter}2s"
            s = getattr(network, func_name)(s, self.resistance)[0]

        self.builder.append(f, s, z0=self.resistance)


def _parse_number(tok: str) -> float | complex:
    try:
        return float(tok)
    except ValueError:
        return complex(tok)


class Touchstone:
    """
    Class to read Touchstone (version 1) s-parameter files.

    The file is read line by line in a single pass. Comment lines start
    with ``!``, the option line with ``#``, and every other line holds
    numbers: a frequency followed by the network parameters.

    Parameters
    ----------
    file : str, Path, or file-object
        touchstone file to load
    encoding : str, optional
        define the file encoding to use. Default value is None,
        meaning the default encoding, then Latin-1 if that fails.
    strict : bool, optional
        raise on unknown option line tokens instead of warning and keeping the
        previous value. Defaults to :data:`marconi.constants.TOUCHSTONE_STRICT`.
    nports : int, optional
        number of ports. Defaults to the number of the ``.sNp`` extension, if
        any. Needed to read networks of 3 ports and more wrapped over several lines.

    Examples
    --------
    From filename

    >>> t = marconi.Touchstone('network.s2p')

    From file-object

    >>> file = open('network.s2p')
    >>> t = marconi.Touchstone(file)

    References
    ----------
    .. [#] https://ibis.org/connector/touchstone_spec11.pdf
    """

    def __init__(self, file: str | Path | typing.TextIO, encoding: str | None = None,
                 strict: bool | None = None, nports: int | None = None) -> None:
        ## comments in the file header
        self.comments = ""
        self.comments_after_option_line = ""
        ## unit of the frequency (Hz, kHz, MHz, GHz)
        self.frequency_unit = None
        ## parameter type (S,Y,Z,G,H)
        self.parameter = None
        ## parameter format (MA, DB, RI)
        self.format = None
        ## reference resistance, global setup
        self.resistance = None
        ## number of ports
        self.rank = None
        self.f = None
        self.s = None
        self.z0 = None

        self.strict = TOUCHSTONE_STRICT if strict is None else bool(strict)

        if isinstance(file, (str, Path)):
            self.filename = str(file)
        else:
            self.filename = getattr(file, "name", None)

        self._rank_hint = nports
        if self._rank_hint is None and self.filename is not None:
            m = re.match(r"[syzgh](\d+)p$", (get_extn(self.filename) or "").lower())
            if m:
                self._rank_hint = int(m.group(1))

        try:
            self._read(file, encoding)
        except UnicodeDecodeError:
            if not isinstance(file, (str, Path)):
                raise
            # Unicode fails -> Force Latin-1
            logger.debug("%s is not valid in the default encoding, reading as Latin-1", self.filename)
            self._read(file, "ISO-8859-1")

    def _read(self, file: str | Path | typing.TextIO, encoding: str | None) -> None:
        if isinstance(file, (str, Path)):
            with get_fid(file, encoding=encoding) as fid:
                self.load_file(fid)
        else:
            self.load_file(file)

    def _parse_file(self, fid: typing.TextIO) -> ParserState:
        """
        Parse the raw file and generate an structured view.

        Parameters
        ----------
        fid : file object

        Returns
        -------
        state: File content as ParserState

        """
        state = ParserState(rank=self._rank_hint, strict=self.strict)
        if self._rank_hint is not None:
            state.builder.nports = self._rank_hint

        for lineno, line in enumerate(fid, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            first = stripped[0]
            if first == "!":
                state.append_comment(stripped)
            elif first == "#":
                state.parse_option_line(stripped, lineno)
            elif first == "[":
                keyword = stripped.partition("]")[0] + "]"
                if keyword.lower() == "[reference]":
                    raise UnsupportedFeatureError(
                        f"line {lineno}: per-port reference impedances ([Reference]) are not supported")
                raise UnsupportedFeatureError(f"line {lineno}: Touchstone 2.0 keyword {keyword} is not supported")
            else:
                state.parse_data_line(line, lineno)

        if state.pending:
            raise TouchstoneFormatError("incomplete data row at end of file", state.pending_lineno,
                                        expected=state.numbers_per_row, actual=len(state.pending))
        return state

    def load_file(self, fid: typing.TextIO) -> None:
        """
        Load the touchstone file into the internal data structures.

        Parameters
        ----------
        fid : file object

        """
        state = self._parse_file(fid=fid)

        self.comments = "\n".join([line[1:] for line in state.comments])
        self.comments_after_option_line = "\n".join([line[1:] for line in state.comments_after_option_line])
        self.frequency_unit = state.frequency_unit
        self.parameter = state.parameter
        self.format = state.format
        self.resistance = state.resistance
        if len(state.builder) == 0:
            state.builder.z0 = state.resistance

        name = basename_noext(self.filename) if self.filename else None
        comments = self.get_comments().rstrip("\n") or None
        try:
            self._network = state.builder.build(name=name, comments=comments)
        except ValueError as err:
            raise TouchstoneFormatError(str(err)) from err

        self.rank = self._network.nports
        self.f = self._network.f
        self.s = self._network.s
        self.z0 = self._network.z0
        logger.debug("%s: read %d frequency points of a %d-port network",
                     self.filename, len(self.f), self.rank)

    def get_comments(self, ignored_comments: list[str] = None) -> str:
        """
        Returns the comments which appear before the option line.

        Comment lines containing ignored comments are removed, empty
        comment lines are kept.
        By default these are comments which contain special meaning withing
        marconi and are not user comments.

        Returns
        -------
        processed_comments : string

        """
        if ignored_comments is None:
            ignored_comments = [CREATED_WITH]
        if not self.comments:
            return ""
        processed_comments = ""
        for comment_line in self.comments.split("\n"):
            if any(ignored in comment_line for ignored in ignored_comments):
                continue
            processed_comments = processed_comments + comment_line + "\n"
        return processed_comments

    def get_format(self) -> str:
        """
        Returns the option line of the file, as it was understood.

        Returns
        -------
        format : string

        """
        return f"# {self.frequency_unit} {self.parameter} {self.format} r {self.resistance}"

    def get_sparameter_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Returns the s-parameters as a tuple of arrays.

        The first element is the frequency vector (in Hz) and the s-parameters are a 3d numpy array.
        The values of the s-parameters are complex number.

        Returns
        -------
        param : tuple of arrays

        Examples
        --------
        >>> f, a = t.get_sparameter_arrays()
        >>> s11 = a[:, 0, 0]

        """
        return self.f, self.s

    def to_network(self) -> Network:
        """
        Returns the read-only :class:`~marconi.network.Network` read from the file.
        """
        return self._network


def read_touchstone(file: str | Path | typing.TextIO, **kwargs) -> Network:
    r"""
    Read a Touchstone file into a :class:`~marconi.network.Network`.

    Parameters
    ----------
    file : str, Path, or file-object
        touchstone file to load
    \*\*kwargs :
        passed to :class:`Touchstone` (`encoding`, `strict`, `nports`)

    Returns
    -------
    ntwk : :class:`~marconi.network.Network`

    Raises
    ------
    TouchstoneFormatError
        if a data row or the option line (in strict mode) is malformed
    UnsupportedFeatureError
        for H or G parameters and Touchstone 2.0 keywords
    """
    return Touchstone(file, **kwargs).to_network()


def _column_labels(nports: int) -> list[list[str]]:
    labels = []
    for i in range(nports):
        row = []
        for j in range(nports):
            row.append(f"ReS{i + 1}{j + 1} ImS{i + 1}{j + 1}")
        labels.append(row)
    return labels


def write_touchstone(ntwk: Network, filename: str | Path = None, dir: str | Path = None,
                     return_string: bool = False) -> str | None:
    """
    Write a :class:`~marconi.network.Network` to a touchstone file.

    The option line is always ``# Hz S RI R 50``: the values are written as
    they are, without renormalization. Numbers are written with the shortest
    representation that reads back to the same float.

    Layout of the data rows:

    * 1-port: ``freq ReS11 ImS11``
    * 2-port: ``freq S11 S21 S12 S22``, on one line
    * n-port: the matrix rows in order, each starting on a new line, with
      at most 4 pairs of values per line

    Parameters
    ----------
    ntwk : :class:`~marconi.network.Network`
        network to write
    filename : str or Path, optional
        touchstone filename. The ``.sNp`` extension is added if missing.
        if None, the network's name is used.
    dir : str or Path, optional
        the directory to save the file in.
    return_string : bool, optional
        return the file content rather than write to a file

    Returns
    -------
    content : str or None
        the file content, if `return_string` is True

    Raises
    ------
    ValueError
        for a network without ports, or if no filename can be determined
    """
    if ntwk.nports == 0:
        raise ValueError("Cannot write a network without ports")

    if ntwk.z0 != WRITE_Z0:
        warnings.warn(f"Network reference impedance is {ntwk.z0} but the file is written with "
                      f"R {WRITE_Z0:g}, the parameters are not renormalized", UserWarning,
                      stacklevel=find_stack_level())

    if not return_string:
        if filename is None:
            if ntwk.name is not None:
                filename = ntwk.name
            else:
                raise ValueError('No filename given. Network must have a name, or you must provide a filename')

        if get_extn(filename) is None:
            filename = str(filename) + '.s%ip' % ntwk.nports

        if dir is not None:
            filename = os.path.join(dir, filename)

    lines = []
    # Add '!' Touchstone comment delimiters to the start of every line in ntwk.comments
    if ntwk.comments:
        for comment_line in ntwk.comments.split('\n'):
            lines.append(f'!{comment_line}')
    lines.append(f'! {CREATED_WITH}')

    # the '#'  line is NOT a comment it is essential and it must be
    # exactly this format, to work
    # [HZ/KHZ/MHZ/GHZ] [S/Y/Z/G/H] [MA/DB/RI] [R n]
    lines.append(f'# {WRITE_FREQUENCY_UNIT} S {WRITE_FORMAT.upper()} R {WRITE_Z0:g}')

    n = ntwk.nports
    labels = _column_labels(n)
    re_part, im_part = mf.complex_2_pair(ntwk.s, WRITE_FORMAT)

    def pair(k: int, i: int, j: int) -> str:
        return '{} {}'.format(float(re_part[k, i, j]), float(im_part[k, i, j]))

    if n == 1:
        lines.append('!freq ' + labels[0][0])
        for k, f in enumerate(ntwk.f):
            lines.append('{} '.format(float(f)) + pair(k, 0, 0))
    elif n == 2:
        # 2-port is a special case with
        # - single line, and
        # - S21,S12 in reverse order: legacy
        order = [(0, 0), (1, 0), (0, 1), (1, 1)]
        lines.append('!freq ' + ' '.join(labels[i][j] for i, j in order))
        for k, f in enumerate(ntwk.f):
            lines.append('{} '.format(float(f)) + ' '.join(pair(k, i, j) for i, j in order))
    else:
        # n-port is written over n lines (at least), one per matrix row
        for i in range(n):
            for start in range(0, n, 4):
                prefix = '!freq ' if i == 0 and start == 0 else '!     '
                lines.append(prefix + ' '.join(labels[i][start:start + 4]))
        for k, f in enumerate(ntwk.f):
            for i in range(n):
                for start in range(0, n, 4):
                    pairs = ' '.join(pair(k, i, j) for j in range(start, min(start + 4, n)))
                    if i == 0 and start == 0:
                        lines.append('{} '.format(float(f)) + pairs)
                    else:
                        lines.append('    ' + pairs)

    content = '\n'.join(lines) + '\n'
    if return_string:
        return content

    with open(filename, 'w') as output:
        output.write(content)
    logger.debug("wrote %d frequency points to %s", len(ntwk.f), filename)
    return None
