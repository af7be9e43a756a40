"""xodrnet's error handling, configuration, and geometric support code.

.. raw:: html

   <h2>Submodules</h2>

.. autosummary::
   :toctree:

   errors
   geometry
   utils
"""
