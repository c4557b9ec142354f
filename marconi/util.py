"""
.. currentmodule:: marconi.util
========================================
util (:mod:`marconi.util`)
========================================

File name and file object conveniences shared by the readers and writers.

.. autosummary::
   :toctree: generated/

   get_fid
   get_extn
   basename_noext
   find_stack_level

"""
from __future__ import annotations

import inspect
import os
from pathlib import Path

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def get_fid(file, *args, **kwargs):
    r"""
    Open `file` if it is a path, return it untouched otherwise.

    Lets a function accept both file names and open file objects.

    Parameters
    ----------
    file : str, Path or file-object
    \*args, \*\*kwargs : passed to :func:`open` for paths
    """
    if isinstance(file, (str, Path)):
        return open(file, *args, **kwargs)
    return file


def get_extn(filename: str | Path) -> str | None:
    """
    Extension of `filename` without the dot, or None when it has none.

    Examples
    --------
    >>> get_extn('amp.s2p')
    's2p'
    >>> get_extn('amp') is None
    True
    """
    ext = os.path.splitext(str(filename))[-1]
    return ext[1:] if ext else None


def basename_noext(filename: str | Path) -> str:
    """File name without its directory and its extension."""
    return os.path.splitext(os.path.basename(str(filename)))[0]


def _in_package(filename: str) -> bool:
    try:
        rel = os.path.relpath(os.path.abspath(filename), _PACKAGE_DIR)
    except ValueError:
        # another drive
        return False
    parts = Path(rel).parts
    return bool(parts) and parts[0] != os.pardir and 'tests' not in parts


def find_stack_level() -> int:
    """
    Stack level of the first frame outside of marconi.

    Passed as `stacklevel` to :func:`warnings.warn`, the warning points at
    the code calling into marconi however deep inside the package it is
    raised. Test modules count as calling code.

    Returns
    -------
    stacklevel : int
    """
    frame = inspect.currentframe()
    try:
        # the function about to warn is level 1
        frame = frame.f_back
        level = 1
        while frame is not None and _in_package(frame.f_code.co_filename):
            frame = frame.f_back
            level += 1
        return level
    finally:
        del frame
