"""
marconi models linear n-port electrical networks from their scattering
parameters, reads and writes Touchstone files, and computes the
stability and gain figures of merit of two-port networks.
"""

__version__ = '0.1.0'
## Import all  module names for coherent reference of name-space


from . import (
    constants,
    equationNetwork,
    io,
    mathFunctions,
    network,
    stability,
    tlineFunctions,
    util,
)
from .constants import *
from .equationNetwork import *
from .io import *
from .mathFunctions import *

# Import contents into current namespace for ease of calling
from .network import *
from .stability import *
from .tlineFunctions import *
from .util import *

## Shorthand Names
N = Network
EN = EquationNetwork
