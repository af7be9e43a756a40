from pathlib import Path

import pytest

## Builders for raw (dictionary) documents


def rawWidth(a, sOffset=0, b=0, c=0, d=0):
    return {"sOffset": str(sOffset), "a": str(a), "b": str(b), "c": str(c), "d": str(d)}


def rawLane(id_, width=3.5, type_="driving", predecessor=None, successor=None):
    lane = {"id": str(id_), "type": type_, "level": "false"}
    if id_ != 0:
        lane["width"] = width if isinstance(width, (list, dict)) else rawWidth(width)
    link = {}
    if predecessor is not None:
        link["predecessor"] = {"id": str(predecessor)}
    if successor is not None:
        link["successor"] = {"id": str(successor)}
    if link:
        lane["link"] = link
    return lane


def rawSection(s, left=(), right=()):
    section = {"s": str(s), "center": {"lane": rawLane(0, type_="none")}}
    if left:
        section["left"] = {"lane": list(left)}
    if right:
        section["right"] = {"lane": list(right)}
    return section


def rawLine(length, s=0, x=0, y=0, hdg=0):
    return {"s": str(s), "x": str(x), "y": str(y), "hdg": str(hdg),
            "length": str(length), "line": ""}


def rawRoad(id_, length, sections, geometries=None, predecessor=None, successor=None,
            junction="-1", laneOffsets=()):
    if geometries is None:
        geometries = [rawLine(length)]
    road = {
        "id": str(id_),
        "name": f"road{id_}",
        "length": str(length),
        "junction": junction,
        "planView": {"geometry": geometries},
        "lanes": {"laneSection": list(sections)},
    }
    if laneOffsets:
        road["lanes"]["laneOffset"] = list(laneOffsets)
    link = {}
    if predecessor is not None:
        link["predecessor"] = predecessor
    if successor is not None:
        link["successor"] = successor
    if link:
        road["link"] = link
    return road


def roadLink(elementId, contactPoint=None, elementType="road"):
    link = {"elementType": elementType, "elementId": str(elementId)}
    if contactPoint is not None:
        link["contactPoint"] = contactPoint
    return link


def rawConnection(id_, incoming, connecting, contactPoint, laneLinks):
    return {
        "id": str(id_),
        "incomingRoad": str(incoming),
        "connectingRoad": str(connecting),
        "contactPoint": contactPoint,
        "laneLink": [{"from": str(f), "to": str(t)} for f, t in laneLinks],
    }


def rawDocument(roads=(), junctions=()):
    content = {"header": {"revMajor": "1", "revMinor": "4", "name": "test"}}
    if roads:
        content["road"] = list(roads)
    if junctions:
        content["junction"] = list(junctions)
    return {"OpenDRIVE": content}


class Builders:
    width = staticmethod(rawWidth)
    lane = staticmethod(rawLane)
    section = staticmethod(rawSection)
    line = staticmethod(rawLine)
    road = staticmethod(rawRoad)
    link = staticmethod(roadLink)
    connection = staticmethod(rawConnection)
    document = staticmethod(rawDocument)


@pytest.fixture
def raw():
    """Helpers for building raw documents."""
    return Builders


## A small complete map

samplePath = Path(__file__).parent.parent.parent / "data" / "sample.xodr"


@pytest.fixture
def sampleMapPath():
    return samplePath


@pytest.fixture
def sampleMapText():
    return samplePath.read_text()
