"""Optional strict checking of references between the parts of a document.

Building a map never fails because of a reference to a missing road, junction or
lane: such references are ignored. Use `checkConsistency` to find them.
"""

from typing import List

import attr

from xodrnet.core.errors import DanglingReferenceError, warn


@attr.s(auto_attribs=True, frozen=True)
class DanglingReference:
    '''A reference from SOURCE to a TARGET which does not exist.

    Attributes:
        kind: 'road', 'junction', or 'lane'.
    '''
    kind: str
    source: str
    target: str

    def __str__(self):
        return f'{self.source} refers to missing {self.kind} {self.target}'


def _boundaryLanes(road, which):
    section = road.getFirstLaneSection() if which == 'predecessor' else road.getLastLaneSection()
    if section is None:
        return []
    return [lane for lane in section.getLanes() if lane.id_ != 0]


def _targetSection(road, contactPoint):
    if contactPoint == 'start':
        return road.getFirstLaneSection()
    return road.getLastLaneSection()


def findDanglingReferences(odr) -> List[DanglingReference]:
    '''List every unresolved reference in the document ODR.'''
    found = []
    roads = {road.id_: road for road in odr.getRoads()}
    junctions = {junction.id_: junction for junction in odr.getJunctions()}

    for road in odr.getRoads():
        if road.junction is not None and road.junction not in junctions:
            found.append(DanglingReference('junction', f'road {road.id_}', road.junction))

        for which in ('predecessor', 'successor'):
            link = getattr(road.link, which)
            if link is None:
                continue
            if link.isJunction:
                if link.element_id not in junctions:
                    found.append(DanglingReference('junction', f'road {road.id_} {which}',
                                                   link.element_id))
                continue
            target = roads.get(link.element_id)
            if target is None:
                found.append(DanglingReference('road', f'road {road.id_} {which}',
                                               link.element_id))
                continue
            targetSection = _targetSection(target, link.contact_point)
            for lane in _boundaryLanes(road, which):
                linkedId = getattr(lane, which)
                if linkedId is None:
                    continue
                if targetSection is None or targetSection.getLaneById(linkedId) is None:
                    found.append(DanglingReference('lane', f'lane {lane.key} {which}',
                                                   f'{target.id_}:{linkedId}'))

        sections = road.getLaneSections()
        for first, second in zip(sections, sections[1:]):
            for lane in first.getLanes():
                if lane.successor is not None and second.getLaneById(lane.successor) is None:
                    found.append(DanglingReference('lane', f'lane {lane.key} successor',
                                                   f'{road.id_}:{lane.successor}'))
            for lane in second.getLanes():
                if lane.predecessor is not None and first.getLaneById(lane.predecessor) is None:
                    found.append(DanglingReference('lane', f'lane {lane.key} predecessor',
                                                   f'{road.id_}:{lane.predecessor}'))

    for junction in odr.getJunctions():
        for connection in junction.connections:
            source = f'junction {junction.id_} connection {connection.id_}'
            incoming = roads.get(connection.incoming_road)
            connecting = roads.get(connection.connecting_road)
            if incoming is None:
                found.append(DanglingReference('road', source, str(connection.incoming_road)))
            if connecting is None:
                found.append(DanglingReference('road', source, str(connection.connecting_road)))
            if incoming is None or connecting is None:
                continue
            incomingSection = _targetSection(incoming, connection.contact_point)
            connectingSection = connecting.getFirstLaneSection()
            for link in connection.lane_links:
                if incomingSection is None or incomingSection.getLaneById(link.from_) is None:
                    found.append(DanglingReference('lane', source,
                                                   f'{incoming.id_}:{link.from_}'))
                if connectingSection is None or connectingSection.getLaneById(link.to) is None:
                    found.append(DanglingReference('lane', source,
                                                   f'{connecting.id_}:{link.to}'))
    return found


def checkConsistency(odr, strict=False):
    '''Look for dangling references, warning about each of them.

    Raises:
        DanglingReferenceError: if STRICT is true and any reference is dangling.
    '''
    references = findDanglingReferences(odr)
    if strict and references:
        raise DanglingReferenceError(references)
    for reference in references:
        warn(str(reference))
    return references
