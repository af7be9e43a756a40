"""Lane-level routing graph.

Nodes are `LaneKey` objects (center lanes are never nodes) and a directed edge
from A to B means traffic may flow from lane A into lane B. Right lanes (negative
ids) flow towards increasing road distance and left lanes towards decreasing road
distance.

The graph is built by three passes, each a function taking the graph being built:

1. `addIntraRoadEdges` joins lanes of consecutive lane sections of the same road;
2. `addRoadLinkEdges` joins the end sections of roads linked directly;
3. `addJunctionEdges` joins incoming roads to connecting roads inside junctions.

Passes only ever add edges, and adding an existing edge has no effect.
"""

from typing import Dict, Iterator, List, Optional, Tuple

from xodrnet.core.utils import verbosePrint
from xodrnet.formats.opendrive.lanes import LaneKey


class RoutingGraph:
    '''Adjacency lists of lane successors and predecessors.

    Query methods accept keys either as `LaneKey` objects or in their string form;
    unknown or malformed keys simply have no neighbors.
    '''
    def __init__(self):
        self._successors: Dict[LaneKey, Dict[LaneKey, None]] = {}
        self._predecessors: Dict[LaneKey, Dict[LaneKey, None]] = {}
        self._kinds: Dict[Tuple[LaneKey, LaneKey], str] = {}

    def __len__(self):
        return len(self._successors)

    def __contains__(self, key):
        key = LaneKey.coerce(key)
        return key is not None and key in self._successors

    def nodes(self) -> List[LaneKey]:
        return list(self._successors)

    def addNode(self, key):
        key = LaneKey.coerce(key)
        if key is None or key.lane == 0:
            return None
        self._successors.setdefault(key, {})
        self._predecessors.setdefault(key, {})
        return key

    def addEdge(self, source, target, kind='section'):
        '''Add the edge SOURCE -> TARGET; returns False if nothing was added.'''
        source, target = LaneKey.coerce(source), LaneKey.coerce(target)
        if source is None or target is None or source.lane == 0 or target.lane == 0:
            return False
        self.addNode(source)
        self.addNode(target)
        if target in self._successors[source]:
            return False
        self._successors[source][target] = None
        self._predecessors[target][source] = None
        self._kinds[source, target] = kind
        return True

    def getSuccessors(self, key) -> List[LaneKey]:
        key = LaneKey.coerce(key)
        return list(self._successors.get(key, ())) if key is not None else []

    def getPredecessors(self, key) -> List[LaneKey]:
        key = LaneKey.coerce(key)
        return list(self._predecessors.get(key, ())) if key is not None else []

    def getEdgeKind(self, source, target) -> Optional[str]:
        '''How the edge was inferred: 'section', 'laneLink', or 'junction'.'''
        source, target = LaneKey.coerce(source), LaneKey.coerce(target)
        return self._kinds.get((source, target))

    def edges(self) -> Iterator[Tuple[LaneKey, LaneKey, str]]:
        for (source, target), kind in self._kinds.items():
            yield source, target, kind

    def edgeCount(self):
        return len(self._kinds)

    def findShortestPath(self, start, goal):
        raise NotImplementedError('path search over the routing graph')


def _addFlowEdge(graph, upstream, downstream, kind):
    '''Add an edge between lanes whose sections are ordered UPSTREAM then DOWNSTREAM
    along the road, oriented according to the direction of traffic.'''
    if upstream.id_ < 0:
        graph.addEdge(upstream.key, downstream.key, kind)
    else:
        graph.addEdge(downstream.key, upstream.key, kind)


def _drivable(section):
    return [lane for lane in section.getLanes() if lane.id_ != 0]


def _sameSide(a, b):
    return a.id_ != 0 and b.id_ != 0 and (a.id_ > 0) == (b.id_ > 0)


## Passes


def addIntraRoadEdges(graph, roads):
    '''Connect lanes across each gap between consecutive lane sections.

    Explicit links win over implicit continuation: a lane continues into the lane
    with the same id in the next section only if neither of them is already joined
    by an explicit link in this gap and neither has type "none".
    '''
    for road in roads:
        sections = road.getLaneSections()
        for first, second in zip(sections, sections[1:]):
            explicit = []
            for lane in _drivable(first):
                if lane.successor is not None:
                    target = second.getLaneById(lane.successor)
                    if target is not None and _sameSide(lane, target):
                        explicit.append((lane, target))
            for lane in _drivable(second):
                if lane.predecessor is not None:
                    source = first.getLaneById(lane.predecessor)
                    if source is not None and _sameSide(source, lane):
                        explicit.append((source, lane))

            linkedFirst = {a.id_ for a, _ in explicit}
            linkedSecond = {b.id_ for _, b in explicit}
            for a, b in explicit:
                _addFlowEdge(graph, a, b, 'section')

            for lane in _drivable(first):
                if lane.type_ == 'none' or lane.id_ in linkedFirst:
                    continue
                other = second.getLaneById(lane.id_)
                if other is None or other.type_ == 'none' or other.id_ in linkedSecond:
                    continue
                _addFlowEdge(graph, lane, other, 'section')
    return graph


def _boundarySection(road, contactPoint):
    if contactPoint == 'start':
        return road.getFirstLaneSection()
    return road.getLastLaneSection()


def addRoadLinkEdges(graph, roads, roadsById):
    '''Connect the end sections of roads linked to each other directly.

    Links to junctions are handled by `addJunctionEdges`.
    '''
    for road in roads:
        ends = (('predecessor', road.link.predecessor, road.getFirstLaneSection()),
                ('successor', road.link.successor, road.getLastLaneSection()))
        for which, link, section in ends:
            if link is None or link.isJunction or section is None:
                continue
            target = roadsById.get(link.element_id)
            if target is None:
                continue
            targetSection = _boundarySection(target, link.contact_point)
            if targetSection is None:
                continue
            for lane in _drivable(section):
                linkedId = getattr(lane, which)
                if linkedId is None:
                    continue
                other = targetSection.getLaneById(linkedId)
                if other is None or other.id_ == 0:
                    continue
                # traffic leaves a right lane at the end of its road and a left
                # lane at the start
                leaving = (lane.id_ < 0) == (which == 'successor')
                if leaving:
                    graph.addEdge(lane.key, other.key, 'laneLink')
                else:
                    graph.addEdge(other.key, lane.key, 'laneLink')
    return graph


def addJunctionEdges(graph, junctions, roadsById):
    '''Connect incoming roads to the connecting roads of each junction.

    A lane link is kept only if traffic on the incoming lane actually reaches the
    contact point: right lanes reach the end of their road and left lanes its start.
    '''
    for junction in junctions:
        for connection in junction.connections:
            incoming = roadsById.get(connection.incoming_road)
            connecting = roadsById.get(connection.connecting_road)
            if incoming is None or connecting is None:
                continue
            contact = connection.contact_point
            incomingSection = _boundarySection(incoming, contact)
            connectingSection = connecting.getFirstLaneSection()
            if incomingSection is None or connectingSection is None:
                continue
            for link in connection.lane_links:
                if not ((contact == 'end' and link.from_ < 0)
                        or (contact == 'start' and link.from_ > 0)):
                    continue
                source = incomingSection.getLaneById(link.from_)
                target = connectingSection.getLaneById(link.to)
                if source is None or target is None:
                    continue
                graph.addEdge(source.key, target.key, 'junction')
    return graph


def buildRoutingGraph(roads, junctions=()):
    '''Run all three passes over processed or unprocessed roads.'''
    roads = list(roads)
    roadsById = {road.id_: road for road in roads}
    graph = RoutingGraph()
    for road in roads:
        for section in road.getLaneSections():
            for lane in _drivable(section):
                graph.addNode(lane.key)
    addIntraRoadEdges(graph, roads)
    addRoadLinkEdges(graph, roads, roadsById)
    addJunctionEdges(graph, junctions, roadsById)
    verbosePrint(f'Routing graph has {len(graph)} lanes and {graph.edgeCount()} edges.')
    return graph
