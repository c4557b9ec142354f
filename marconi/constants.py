"""
.. currentmodule:: marconi.constants

========================================
constants (:mod:`marconi.constants`)
========================================

This module contains constants, numerical approximations, option tables
and defaults used throughout marconi.

.. data:: INF

    A very very large value (1e99)

.. data:: ONE

    1 + epsilon where epsilon is small. Used to avoid numerical error.

.. data:: ALMOST_ZERO

    Tolerance used by the network classifiers (`is_reciprocal`, ...).

.. data:: FREQ_UNITS

    Touchstone frequency units and their multipliers to Hz.

.. data:: TOUCHSTONE_DEFAULTS

    Values used for an empty (or incomplete) Touchstone option line:
    ``# GHz S MA R 50``

.. data:: TOUCHSTONE_STRICT

    Default strictness of the Touchstone option-line parser. Read once from
    the ``MARCONI_TOUCHSTONE_STRICT`` environment variable.

"""
from __future__ import annotations

import os
from numbers import Number
from typing import Literal, Sequence, Union, get_args

import numpy as np

# used as substitutes to handle mathematical singularities.
INF = 1e99
"""
High but not infinite value for numerical purposes.
"""

ALMOST_ZERO = 1e-12
"""
Very tiny but not zero value to handle mathematical singularities.
"""

ONE = 1.0 + 1/1e14
"""
Almost one but not one to handle mathematical singularities.
"""

LOG_OF_NEG = -100
"""
Very low but minus infinity value for numerical purposes.
"""

FrequencyUnitT = Literal["hz", "khz", "mhz", "ghz"]
FREQ_UNITS: dict[FrequencyUnitT, float] = {"hz": 1.0, "khz": 1e3, "mhz": 1e6, "ghz": 1e9}

ParameterT = Literal["s", "y", "z", "g", "h"]
PARAMETERS: list[ParameterT] = list(get_args(ParameterT))

SparamFormatT = Literal["db", "ri", "ma"]
SPARAM_FORMATS: list[SparamFormatT] = list(get_args(SparamFormatT))

# [HZ/KHZ/MHZ/GHZ] [S/Y/Z/G/H] [MA/DB/RI] [R n]
TOUCHSTONE_DEFAULTS = ["ghz", "s", "ma", "r", "50"]

WRITE_FREQUENCY_UNIT = "Hz"
WRITE_FORMAT = "ri"
WRITE_Z0 = 50.
"""
The writer always emits ``# Hz S RI R 50``.
"""

NumberLike = Union[Number, Sequence[Number], np.ndarray]


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


TOUCHSTONE_STRICT = _env_flag("MARCONI_TOUCHSTONE_STRICT")
"""
When True, unknown option-line tokens raise instead of being ignored.
"""
