
'''
.. module:: marconi.io
========================================
io (:mod:`marconi.io`)
========================================


This Package provides functions and objects for input/output.

Reading and writing touchstone files is supported through the
:class:`~touchstone.Touchstone` class, which can be more easily used
through the Network constructor, :func:`~marconi.network.Network.__init__`
and :func:`~marconi.network.Network.write_touchstone`.


.. automodule:: marconi.io.touchstone


'''

from .touchstone import *
