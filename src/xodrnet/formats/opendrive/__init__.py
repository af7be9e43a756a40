"""Support for OpenDRIVE road networks.

.. raw:: html

   <h2>Summary of Modules</h2>

.. autosummary::
   :toctree:

   reader
   profiles
   curves
   plan_view
   reference_line
   lanes
   road
   junction
   routing
   validation
   document
   georeference
   plotting
"""

from xodrnet.formats.opendrive.document import Header, OpenDrive
from xodrnet.formats.opendrive.lanes import LaneKey
from xodrnet.formats.opendrive.reader import parseXodrString, readXodr
from xodrnet.formats.opendrive.routing import RoutingGraph, buildRoutingGraph
from xodrnet.formats.opendrive.validation import checkConsistency, findDanglingReferences
