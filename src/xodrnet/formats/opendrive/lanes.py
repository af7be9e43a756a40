"""Lanes, lane sections, and the construction of lane boundaries."""

from __future__ import annotations

import functools
import math
from typing import List, NamedTuple, Optional, Tuple

import attr

from xodrnet.core.geometry import averageVectors, boundaryPolygon, offsetPosition
from xodrnet.core.utils import arrayize, toFloat, toInt, toStr
from xodrnet.formats.opendrive.profiles import PiecewiseCubic, Poly3

Position = Tuple[float, float, float]


def formatDistance(s) -> str:
    s = float(s)
    return str(int(s)) if s.is_integer() else repr(s)


class LaneKey(NamedTuple):
    """Identity of a lane across a whole document.

    The string form is ``"<road>_<section_s>_<lane>"``; road ids may themselves
    contain underscores.
    """

    road: str
    section_s: float
    lane: int

    def __str__(self):
        return f"{self.road}_{formatDistance(self.section_s)}_{self.lane}"

    @classmethod
    def parse(cls, text: str) -> LaneKey:
        parts = str(text).rsplit("_", 2)
        if len(parts) != 3:
            raise ValueError(f"malformed lane key {text!r}")
        road, s, lane = parts
        try:
            return cls(road, float(s), int(lane))
        except ValueError as e:
            raise ValueError(f"malformed lane key {text!r}") from e

    @classmethod
    def coerce(cls, key) -> Optional[LaneKey]:
        """Convert a key or its string form to a `LaneKey`, or None if impossible."""
        if isinstance(key, cls):
            return key
        if isinstance(key, tuple) and len(key) == 3:
            road, s, lane = key
            try:
                return cls(toStr(road), float(s), int(lane))
            except (TypeError, ValueError):
                return None
        try:
            return cls.parse(key)
        except ValueError:
            return None


class Boundary(NamedTuple):
    """The two edges of a lane, sampled at the same reference points."""

    inner: List[Position]
    outer: List[Position]


## Polynomial records


@attr.s(auto_attribs=True, frozen=True)
class LaneOffset:
    '''Shift of the center lane from the reference line, valid from road distance s.'''
    s: float
    a: float
    b: float
    c: float
    d: float

    @classmethod
    def fromRaw(cls, raw):
        poly = Poly3.fromRaw(raw)
        return cls(toFloat(raw.get('s'), field='s'), poly.a, poly.b, poly.c, poly.d)


@attr.s(auto_attribs=True, frozen=True)
class LaneWidth:
    '''Width of a lane, valid from s_offset (relative to its lane section).'''
    s_offset: float
    a: float
    b: float
    c: float
    d: float

    @classmethod
    def fromRaw(cls, raw):
        poly = Poly3.fromRaw(raw)
        return cls(toFloat(raw.get('sOffset'), field='sOffset'),
                   poly.a, poly.b, poly.c, poly.d)


@attr.s(auto_attribs=True, frozen=True)
class RoadMark:
    s_offset: float = 0
    type_: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    width: float = 0
    lane_change: Optional[str] = None

    @classmethod
    def fromRaw(cls, raw):
        return cls(s_offset=toFloat(raw.get('sOffset')),
                   type_=raw.get('type'),
                   color=raw.get('color'),
                   material=raw.get('material'),
                   width=toFloat(raw.get('width')),
                   lane_change=raw.get('laneChange'))


def _piecewise(records, key):
    return PiecewiseCubic(
        (getattr(rec, key), Poly3(rec.a, rec.b, rec.c, rec.d)) for rec in records)


def _linkedLaneId(rawLink, which):
    if not isinstance(rawLink, dict):
        return None
    entries = arrayize(rawLink.get(which))
    if not entries or not isinstance(entries[0], dict):
        return None
    value = entries[0].get('id')
    if value is None or value == '':
        return None
    return toInt(value, field=f'{which} id')


## Lanes


class Lane:
    '''One lane of a lane section.

    Lane ids are signed: 0 is the center lane, which has no width; negative ids
    are right of the reference line and positive ids are left of it.

    Attributes:
        predecessor, successor: ids of linked lanes in the neighboring lane
            section (or, at the ends of the road, in the linked road), or None.
    '''
    def __init__(self, id_, type_='driving', level=False, widths=(), road_marks=(),
                 predecessor=None, successor=None, side=None):
        self.id_ = id_
        self.type_ = type_
        self.level = level
        self.widths = sorted(widths, key=lambda w: w.s_offset)
        self.road_marks = list(road_marks)
        self.predecessor = predecessor
        self.successor = successor
        if side is None:
            side = 'left' if id_ > 0 else ('right' if id_ < 0 else 'center')
        self.side = side
        self.section = None    # set by the owning LaneSection
        self._width = _piecewise(self.widths, 's_offset')
        self.boundary = Boundary([], [])
        self.boundary_line = []    # the outer edge
        self.centerline = []

    @classmethod
    def fromRaw(cls, raw, side):
        link = raw.get('link')
        return cls(id_=toInt(raw.get('id'), field='lane id'),
                   type_=raw.get('type') or 'none',
                   level=str(raw.get('level', '')).lower() in ('true', '1'),
                   widths=[LaneWidth.fromRaw(w) for w in arrayize(raw.get('width'))],
                   road_marks=[RoadMark.fromRaw(m) for m in arrayize(raw.get('roadMark'))],
                   predecessor=_linkedLaneId(link, 'predecessor'),
                   successor=_linkedLaneId(link, 'successor'),
                   side=side)

    def __repr__(self):
        return f'Lane({self.key or self.id_}, type={self.type_!r})'

    @property
    def direction(self):
        '''+1 for lanes left of the reference line, -1 for lanes right of it.'''
        return 1 if self.id_ > 0 else (-1 if self.id_ < 0 else 0)

    @property
    def key(self) -> Optional[LaneKey]:
        if self.section is None:
            return None
        return LaneKey(self.section.roadId, self.section.s, self.id_)

    def widthAt(self, s):
        '''Width at distance S from the start of the lane section.'''
        return self._width.eval_at(s)

    def generateBoundaries(self, points, innerPositions, crossSlopes):
        '''Extend the running boundary of this lane's side outward by its width.

        Returns the outer positions, which become the inner boundary of the next
        lane on the same side.
        '''
        outerPositions = []
        sign = 1 if self.side == 'left' else -1
        for point, inner, slope in zip(points, innerPositions, crossSlopes):
            width = self.widthAt(point.lane_section_s)
            x, y, z = offsetPosition(inner, point.hdg + sign * math.pi / 2, width)
            outerPositions.append((x, y, z + sign * width * slope))
        self.boundary = Boundary(list(innerPositions), outerPositions)
        self.boundary_line = list(outerPositions)
        self.centerline = [averageVectors(a, b)
                           for a, b in zip(innerPositions, outerPositions)]
        self.__dict__.pop('polygon', None)
        return outerPositions

    def getBoundary(self) -> Boundary:
        '''The inner and outer edges of the lane.'''
        return self.boundary

    def getBoundaryLine(self) -> List[Position]:
        '''The outer edge of the lane.'''
        return self.boundary_line

    @functools.cached_property
    def polygon(self):
        '''2D region covered by the lane, as a shapely polygon.'''
        return boundaryPolygon(self.boundary.inner, self.boundary.outer)


class LaneSection:
    '''A stretch of road over which the set of lanes does not change.

    Attributes:
        s: road distance at which the section starts.
        end: road distance at which the next section (or the road) ends; set by
            the owning road.
    '''
    def __init__(self, s, left=(), center=None, right=(), roadId=None):
        self.s = s
        self.end = None
        self.roadId = roadId
        self.left = sorted(left, key=lambda lane: lane.id_)
        self.center = center
        self.right = sorted(right, key=lambda lane: lane.id_, reverse=True)
        for lane in self.getLanes():
            lane.section = self
        self.reference_points = []

    @classmethod
    def fromRaw(cls, raw, roadId=None):
        def lanesOf(side):
            group = raw.get(side)
            if not isinstance(group, dict):
                return []
            return [Lane.fromRaw(l, side) for l in arrayize(group.get('lane'))]
        centers = lanesOf('center')
        return cls(toFloat(raw.get('s'), field='s'),
                   left=lanesOf('left'),
                   center=centers[0] if centers else None,
                   right=lanesOf('right'),
                   roadId=roadId)

    def __repr__(self):
        return f'LaneSection(road={self.roadId}, s={self.s})'

    def getLanes(self) -> List[Lane]:
        '''All lanes of the section, sorted by ascending id.'''
        lanes = list(self.left) + list(self.right)
        if self.center is not None:
            lanes.append(self.center)
        return sorted(lanes, key=lambda lane: lane.id_)

    def getLaneById(self, id_) -> Optional[Lane]:
        try:
            id_ = int(id_)
        except (TypeError, ValueError):
            return None
        for lane in self.getLanes():
            if lane.id_ == id_:
                return lane
        return None

    def processLanes(self, points, crossSlopes=None):
        '''Build the boundaries of all lanes from this section's reference points.

        The points must already carry their center lane position and their distance
        from the start of this section. Left lanes are walked outward from id 1 and
        right lanes from id -1, each starting at the center lane.
        '''
        self.reference_points = list(points)
        if crossSlopes is None:
            crossSlopes = [0] * len(points)
        centerPositions = [p.center_lane_position for p in points]
        mostLeft = centerPositions
        for lane in self.left:
            mostLeft = lane.generateBoundaries(points, mostLeft, crossSlopes)
        mostRight = centerPositions
        for lane in self.right:
            mostRight = lane.generateBoundaries(points, mostRight, crossSlopes)
        if self.center is not None:
            self.center.boundary = Boundary(list(centerPositions), list(centerPositions))
            self.center.boundary_line = list(centerPositions)
            self.center.centerline = list(centerPositions)
            self.center.__dict__.pop('polygon', None)


class Lanes:
    '''The lane offset and lane sections of a road.'''
    def __init__(self, laneOffsets=(), laneSections=()):
        self.laneOffsets = sorted(laneOffsets, key=lambda o: o.s)
        self.laneSections = sorted(laneSections, key=lambda sec: sec.s)
        self._offset = _piecewise(self.laneOffsets, 's')

    @classmethod
    def fromRaw(cls, raw, roadId=None):
        if not isinstance(raw, dict):
            return cls()
        return cls([LaneOffset.fromRaw(o) for o in arrayize(raw.get('laneOffset'))],
                   [LaneSection.fromRaw(sec, roadId)
                    for sec in arrayize(raw.get('laneSection'))])

    def calculateOffsetByS(self, s):
        '''Lane offset at road distance S (0 before the first offset record).'''
        return self._offset.eval_at(s)
