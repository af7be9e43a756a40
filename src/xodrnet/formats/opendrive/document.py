"""The OpenDRIVE document: header, roads, junctions, and the routing graph."""

import pathlib
import time
from typing import List, Optional

import attr
import shapely.geometry

from xodrnet.core.errors import MalformedDocumentError
from xodrnet.core.utils import arrayize, toFloat, toInt, toStr, verbosePrint
from xodrnet.formats.opendrive import georeference
from xodrnet.formats.opendrive.junction import Junction
from xodrnet.formats.opendrive.lanes import LaneKey
from xodrnet.formats.opendrive.reader import parseXodrString, readXodr, rootTag, textKey
from xodrnet.formats.opendrive.road import Road
from xodrnet.formats.opendrive.routing import RoutingGraph, buildRoutingGraph


@attr.s(auto_attribs=True, frozen=True, kw_only=True)
class Header:
    revMajor: int = 0
    revMinor: int = 0
    name: Optional[str] = None
    version: Optional[str] = None
    date: Optional[str] = None
    north: float = 0
    south: float = 0
    east: float = 0
    west: float = 0
    vendor: Optional[str] = None
    #: PROJ string (or other CRS description) of the map's projection, if any.
    geoReference: Optional[str] = None

    @classmethod
    def fromRaw(cls, raw):
        if not isinstance(raw, dict):
            raw = {}
        geo = raw.get('geoReference')
        if isinstance(geo, dict):
            geo = geo.get(textKey)
        return cls(revMajor=toInt(raw.get('revMajor')),
                   revMinor=toInt(raw.get('revMinor')),
                   name=raw.get('name'),
                   version=toStr(raw.get('version')),
                   date=raw.get('date'),
                   north=toFloat(raw.get('north')),
                   south=toFloat(raw.get('south')),
                   east=toFloat(raw.get('east')),
                   west=toFloat(raw.get('west')),
                   vendor=raw.get('vendor'),
                   geoReference=geo or None)


class OpenDrive:
    '''A road network decoded from an OpenDRIVE document.

    Construct it from a raw document (see `xodrnet.formats.opendrive.reader`),
    or directly from XML with `fromFile` or `fromString`. Road geometry and the
    routing graph are computed by `process`; afterwards the model is read-only.

    Args:
        raw: the raw document, either the content of the ``OpenDRIVE`` element or
            a dictionary with that content under the key ``OpenDRIVE``.
        step: spacing (in meters) of the uniform sampling grid along each curve.

    Raises:
        MalformedDocumentError: if the root element or the header is missing.
    '''

    #: Default spacing of sampled reference points, in meters.
    defaultStep = 1.0

    def __init__(self, raw, step=None):
        if step is None:
            step = self.defaultStep
        if step <= 0:
            raise ValueError(f'sampling step must be positive (got {step})')
        self.step = step
        if not isinstance(raw, dict):
            raise MalformedDocumentError('document is missing the OpenDRIVE element')
        if rootTag in raw:
            raw = raw[rootTag]
            if not isinstance(raw, dict):
                raise MalformedDocumentError('the OpenDRIVE element is empty')
        if 'header' not in raw:
            raise MalformedDocumentError('document has no header')

        self.header = Header.fromRaw(raw['header'])
        self.roads = [Road.fromRaw(r) for r in arrayize(raw.get('road'))]
        self.junctions = [Junction.fromRaw(j) for j in arrayize(raw.get('junction'))]
        self._roadsById = {road.id_: road for road in self.roads}
        self._junctionsById = {junction.id_: junction for junction in self.junctions}
        self._graph = None

    @classmethod
    def fromFile(cls, path, step=None, process=True):
        '''Read and (by default) process an OpenDRIVE file.'''
        path = pathlib.Path(path)
        verbosePrint(f'Parsing OpenDRIVE file {path}...')
        odr = cls(readXodr(path), step=step)
        if process:
            odr.process()
        return odr

    @classmethod
    def fromString(cls, text, step=None, process=True):
        '''Like `fromFile`, but taking the XML as a string.'''
        odr = cls(parseXodrString(text), step=step)
        if process:
            odr.process()
        return odr

    def process(self):
        '''Compute the geometry of every road, then build the routing graph.'''
        startTime = time.time()
        verbosePrint(f'Computing geometry of {len(self.roads)} roads...')
        for road in self.roads:
            road.process(self.step)
        verbosePrint('Building routing graph...')
        self._graph = buildRoutingGraph(self.roads, self.junctions)
        totalTime = time.time() - startTime
        verbosePrint(f'Finished processing map in {totalTime:.2f} seconds.')
        return self

    ## Queries

    def getHeader(self) -> Header:
        return self.header

    def getRoads(self) -> List[Road]:
        return self.roads

    def getRoadById(self, id_) -> Optional[Road]:
        return self._roadsById.get(toStr(id_))

    def getJunctions(self) -> List[Junction]:
        return self.junctions

    def getJunctionById(self, id_) -> Optional[Junction]:
        return self._junctionsById.get(toStr(id_))

    def getReferenceLines(self):
        '''Reference lines of all processed roads.'''
        return [road.reference_line for road in self.roads if road.isProcessed]

    @property
    def graph(self) -> RoutingGraph:
        '''The routing graph, built on first use if `process` was not called.'''
        if self._graph is None:
            self._graph = buildRoutingGraph(self.roads, self.junctions)
        return self._graph

    def getSuccessors(self, key):
        return self.graph.getSuccessors(key)

    def getPredecessors(self, key):
        return self.graph.getPredecessors(key)

    def getLaneByKey(self, key):
        '''Look up a lane from its `LaneKey` or the string form of one.'''
        key = LaneKey.coerce(key)
        if key is None:
            return None
        road = self.getRoadById(key.road)
        if road is None:
            return None
        for section in road.getLaneSections():
            if section.s == key.section_s:
                return section.getLaneById(key.lane)
        return None

    def laneAt(self, x, y):
        '''The first non-center lane whose area contains the point (x, y), if any.'''
        point = shapely.geometry.Point(x, y)
        for road in self.roads:
            for lane in road.getLanes():
                if lane.id_ != 0 and lane.polygon.covers(point):
                    return lane
        return None

    def worldToST(self, roadId, x, y):
        '''Project (x, y) onto the reference line of a road; None if impossible.'''
        road = self.getRoadById(roadId)
        if road is None or not road.isProcessed:
            return None
        return road.reference_line.worldToST((x, y))

    def toLonLat(self, x, y):
        '''Convert map coordinates to (longitude, latitude) using the geoReference.'''
        return georeference.toLonLat(self.header.geoReference, x, y)
