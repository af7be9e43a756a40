"""Road geometry and lane routing graphs from OpenDRIVE maps."""

from xodrnet.core.errors import setDebuggingOptions
from xodrnet.formats.opendrive import LaneKey, OpenDrive
