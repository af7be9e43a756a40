"""Roads: links, objects, and the computation of road geometry."""

import math
from typing import Optional

import attr

from xodrnet.core.geometry import offsetPosition
from xodrnet.core.utils import arrayize, toFloat, toStr, verbosePrint
from xodrnet.formats.opendrive.lanes import Lanes
from xodrnet.formats.opendrive.plan_view import PlanView
from xodrnet.formats.opendrive.profiles import ElevationProfile, LateralProfile
from xodrnet.formats.opendrive.reference_line import ReferenceLine

#: Tolerance used to assign sampled points to the lane section starting at them.
sectionTolerance = 1e-6


@attr.s(auto_attribs=True, frozen=True)
class RoadLink:
    '''A road's connection, at one of its ends, to another road or a junction.'''
    element_type: str
    element_id: str
    contact_point: Optional[str] = None

    @classmethod
    def fromRaw(cls, raw):
        if not isinstance(raw, dict):
            return None
        elementId = toStr(raw.get('elementId'))
        if elementId is None:
            return None
        return cls(raw.get('elementType') or 'road', elementId,
                   raw.get('contactPoint') or None)

    @property
    def isJunction(self):
        return self.element_type == 'junction'


@attr.s(auto_attribs=True, frozen=True)
class Link:
    predecessor: Optional[RoadLink] = None
    successor: Optional[RoadLink] = None

    @classmethod
    def fromRaw(cls, raw):
        if not isinstance(raw, dict):
            return cls()
        return cls(RoadLink.fromRaw(raw.get('predecessor')),
                   RoadLink.fromRaw(raw.get('successor')))


@attr.s(auto_attribs=True, frozen=True, kw_only=True)
class RoadObject:
    '''A static object placed relative to a road (pole, barrier, marking, etc.).'''
    id_: Optional[str] = None
    name: Optional[str] = None
    type_: Optional[str] = None
    s: float = 0
    t: float = 0
    z_offset: float = 0
    hdg: float = 0
    roll: float = 0
    pitch: float = 0
    orientation: Optional[str] = None
    height: float = 0
    width: float = 0
    length: float = 0

    @classmethod
    def fromRaw(cls, raw):
        return cls(id_=toStr(raw.get('id')), name=raw.get('name'),
                   type_=raw.get('type'),
                   s=toFloat(raw.get('s')), t=toFloat(raw.get('t')),
                   z_offset=toFloat(raw.get('zOffset')),
                   hdg=toFloat(raw.get('hdg')), roll=toFloat(raw.get('roll')),
                   pitch=toFloat(raw.get('pitch')),
                   orientation=raw.get('orientation'),
                   height=toFloat(raw.get('height')),
                   width=toFloat(raw.get('width')),
                   length=toFloat(raw.get('length')))


class Road:
    '''A road of an OpenDRIVE document.

    The geometry of the road (its reference line and the boundaries of its lanes)
    is only available after calling `process`.

    Attributes:
        junction: id of the junction this road belongs to, or None for ordinary
            roads (OpenDRIVE uses the id -1 for those).
    '''
    def __init__(self, id_, name=None, length=None, junction=None, link=None,
                 planView=None, lanes=None, elevationProfile=None,
                 lateralProfile=None, objects=()):
        self.id_ = id_
        self.name = name
        self.junction = junction
        self.link = link if link is not None else Link()
        self.planView = planView if planView is not None else PlanView()
        self.lanes = lanes if lanes is not None else Lanes()
        self.elevationProfile = (elevationProfile if elevationProfile is not None
                                 else ElevationProfile())
        self.lateralProfile = (lateralProfile if lateralProfile is not None
                               else LateralProfile())
        self.objects = list(objects)
        if not length:
            length = self.planView.length
        self.length = length
        self.reference_line = None
        for section in self.lanes.laneSections:
            section.roadId = id_

    @classmethod
    def fromRaw(cls, raw):
        id_ = toStr(raw.get('id'), default='')
        junction = toStr(raw.get('junction'))
        if junction in ('', '-1'):
            junction = None
        rawObjects = raw.get('objects')
        objects = arrayize(rawObjects.get('object')) if isinstance(rawObjects, dict) else []
        return cls(id_,
                   name=raw.get('name'),
                   length=toFloat(raw.get('length'), field='length'),
                   junction=junction,
                   link=Link.fromRaw(raw.get('link')),
                   planView=PlanView.fromRaw(raw.get('planView'), roadId=id_),
                   lanes=Lanes.fromRaw(raw.get('lanes'), roadId=id_),
                   elevationProfile=ElevationProfile.fromRaw(raw.get('elevationProfile')),
                   lateralProfile=LateralProfile.fromRaw(raw.get('lateralProfile')),
                   objects=[RoadObject.fromRaw(o) for o in objects])

    def __repr__(self):
        return f'Road({self.id_!r})'

    @property
    def isProcessed(self):
        return self.reference_line is not None

    ## Lane sections

    def getLaneSections(self):
        '''Lane sections sorted by ascending start distance.'''
        return self.lanes.laneSections

    def getFirstLaneSection(self):
        sections = self.getLaneSections()
        return sections[0] if sections else None

    def getLastLaneSection(self):
        sections = self.getLaneSections()
        return sections[-1] if sections else None

    def getLaneSectionByS(self, s):
        '''The lane section with the greatest start distance <= S, or None.'''
        found = None
        for section in self.getLaneSections():
            if section.s <= s:
                found = section
            else:
                break
        return found

    def _sectionIndexByS(self, s):
        index = -1
        for i, section in enumerate(self.getLaneSections()):
            if section.s <= s + sectionTolerance:
                index = i
            else:
                break
        return index

    ## Geometry

    def getReferenceLine(self):
        return self.reference_line

    def process(self, step):
        '''Sample the reference line and build the boundaries of every lane.

        Args:
            step: spacing of the uniform sampling grid along each curve.
        '''
        sections = self.getLaneSections()
        raw = self.planView.sample(self.elevationProfile, step,
                                   [section.s for section in sections])
        points, slopes, owners = [], [], []
        for point in raw:
            s = point.road_s
            offset = self.lanes.calculateOffsetByS(s)
            slope = math.tan(self.lateralProfile.getSuperelevationByS(s))
            cx, cy, cz = offsetPosition(point.position, point.hdg + math.pi / 2, offset)
            index = self._sectionIndexByS(s)
            localS = s - sections[index].s if index >= 0 else s
            points.append(attr.evolve(point, lateral_offset=offset,
                                      lane_section_s=max(localS, 0),
                                      center_lane_position=(cx, cy, cz + offset * slope)))
            slopes.append(slope)
            owners.append(index)

        for i, section in enumerate(sections):
            members = [j for j, owner in enumerate(owners) if owner == i]
            if i + 1 < len(sections):
                section.end = sections[i + 1].s
                following = next((j for j, owner in enumerate(owners) if owner == i + 1),
                                 None)
                if following is not None:
                    closing = attr.evolve(points[following],
                                          lane_section_s=section.end - section.s)
                    sectionPoints = [points[j] for j in members] + [closing]
                    sectionSlopes = [slopes[j] for j in members] + [slopes[following]]
                    section.processLanes(sectionPoints, sectionSlopes)
                    continue
            else:
                section.end = self.length
            section.processLanes([points[j] for j in members],
                                 [slopes[j] for j in members])

        self.reference_line = ReferenceLine(points)
        verbosePrint(f'Road {self.id_}: {len(points)} reference points, '
                     f'{len(sections)} lane section(s).', level=2)
        return self.reference_line

    def getLanes(self):
        return [lane for section in self.getLaneSections() for lane in section.getLanes()]
