"""Junctions and the connections between the roads meeting in them."""

from typing import List, Optional

import attr

from xodrnet.core.utils import arrayize, toInt, toStr


@attr.s(auto_attribs=True, frozen=True)
class LaneLink:
    '''Lane FROM_ of the incoming road continues into lane TO of the connecting road.'''
    from_: int
    to: int

    @classmethod
    def fromRaw(cls, raw):
        return cls(toInt(raw.get('from'), field='from'), toInt(raw.get('to'), field='to'))


@attr.s(auto_attribs=True, frozen=True, kw_only=True)
class Connection:
    id_: Optional[str] = None
    incoming_road: Optional[str] = None
    connecting_road: Optional[str] = None
    contact_point: Optional[str] = None
    lane_links: List[LaneLink] = attr.Factory(list)

    @classmethod
    def fromRaw(cls, raw):
        return cls(id_=toStr(raw.get('id')),
                   incoming_road=toStr(raw.get('incomingRoad')),
                   connecting_road=toStr(raw.get('connectingRoad')),
                   contact_point=raw.get('contactPoint') or None,
                   lane_links=[LaneLink.fromRaw(link)
                               for link in arrayize(raw.get('laneLink'))])


@attr.s(auto_attribs=True, frozen=True, kw_only=True)
class Junction:
    id_: str
    name: Optional[str] = None
    connections: List[Connection] = attr.Factory(list)

    @classmethod
    def fromRaw(cls, raw):
        return cls(id_=toStr(raw.get('id'), default=''),
                   name=raw.get('name'),
                   connections=[Connection.fromRaw(c)
                                for c in arrayize(raw.get('connection'))])

    def getConnections(self):
        return self.connections
