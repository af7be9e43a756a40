import math

import matplotlib
import pytest

import xodrnet.core.errors as errors
from xodrnet.core.errors import MalformedDocumentError
from xodrnet.formats.opendrive import LaneKey, OpenDrive
from xodrnet.formats.opendrive.document import Header


@pytest.fixture
def sampleMap(sampleMapText):
    return OpenDrive.fromString(sampleMapText)


def keys(*texts):
    return [LaneKey.parse(text) for text in texts]

## Construction


def test_header(sampleMap):
    header = sampleMap.getHeader()
    assert header.revMajor == 1 and header.revMinor == 4
    assert header.name == "sample"
    assert header.version == "1.00"
    assert header.date == "2024-01-01"
    assert (header.north, header.south, header.east, header.west) == (20, -10, 40, 0)
    assert header.vendor == "xodrnet"
    assert header.geoReference.startswith("+proj=tmerc")


def test_roads_and_junctions(sampleMap):
    assert [road.id_ for road in sampleMap.getRoads()] == ["1", "2", "3"]
    assert sampleMap.getRoadById("2").name == "Curve"
    assert sampleMap.getRoadById(3).junction == "100"
    assert sampleMap.getRoadById("9") is None
    junction = sampleMap.getJunctionById("100")
    assert junction.name == "J"
    assert len(junction.getConnections()) == 1
    assert sampleMap.getJunctionById("1") is None


def test_road_details(sampleMap):
    road = sampleMap.getRoadById("1")
    assert [obj.name for obj in road.objects] == ["pole"]
    assert road.objects[0].height == 4
    center = road.getFirstLaneSection().center
    assert [mark.type_ for mark in center.road_marks] == ["solid"]
    sidewalk = sampleMap.getLaneByKey("1_0_-2")
    assert sidewalk.type_ == "sidewalk"
    assert sidewalk.level is True


def test_reference_lines(sampleMap):
    lines = sampleMap.getReferenceLines()
    assert [len(line) for line in lines] == [11, 11, 6]
    main = lines[0]
    assert all(p.z == 1 for p in main)
    curve = lines[1]
    # the arc continues the line with a left turn
    assert curve.getPoints()[-1].y > 0
    assert curve.getPoints()[-1].hdg == pytest.approx(0.5)


def test_lane_geometry(sampleMap):
    lane = sampleMap.getLaneByKey(LaneKey("1", 0, -1))
    inner, outer = lane.getBoundary()
    assert len(inner) == len(outer) == 6
    assert [p[1] for p in outer] == pytest.approx([-3.5] * 6)
    assert lane.getBoundaryLine() == outer
    sidewalk = sampleMap.getLaneByKey("1_0_-2")
    assert sidewalk.getBoundary().inner == outer
    assert [p[1] for p in sidewalk.getBoundaryLine()] == pytest.approx([-5.5] * 6)


def test_unprocessed(sampleMapText):
    odr = OpenDrive.fromString(sampleMapText, process=False)
    assert odr.getReferenceLines() == []
    assert odr.worldToST("1", 0, 0) is None
    # the graph only needs lane sections, so it can be built anyway
    assert odr.getSuccessors("1_0_-1") == keys("1_5_-1")


def test_fromFile(sampleMapPath):
    odr = OpenDrive.fromFile(sampleMapPath, step=2.5)
    assert odr.step == 2.5
    assert len(odr.getReferenceLines()[0]) == 5


def test_verbose_processing(sampleMapText, capsys):
    errors.setDebuggingOptions(verbosity=2)
    OpenDrive.fromString(sampleMapText)
    out = capsys.readouterr().out
    assert "Computing geometry of 3 roads" in out
    assert "Road 1: 11 reference points, 2 lane section(s)." in out
    assert "Routing graph has 8 lanes and 5 edges." in out

## Errors


def test_missing_header(raw):
    doc = raw.document()
    del doc["OpenDRIVE"]["header"]
    with pytest.raises(MalformedDocumentError, match="header"):
        OpenDrive(doc)


def test_missing_root():
    with pytest.raises(MalformedDocumentError):
        OpenDrive(None)
    with pytest.raises(MalformedDocumentError):
        OpenDrive({"OpenDRIVE": ""})


def test_unwrapped_document(raw):
    content = raw.document([raw.road(1, 10, [raw.section(0)])])["OpenDRIVE"]
    odr = OpenDrive(content)
    assert odr.getHeader().name == "test"
    assert len(odr.getRoads()) == 1


def test_bad_step(raw):
    with pytest.raises(ValueError):
        OpenDrive(raw.document(), step=0)
    assert OpenDrive(raw.document()).step == OpenDrive.defaultStep


def test_empty_header():
    odr = OpenDrive({"OpenDRIVE": {"header": ""}})
    assert odr.getHeader() == Header()
    assert odr.getRoads() == []

## Routing


def test_graph(sampleMap):
    graph = sampleMap.graph
    assert len(graph) == 8
    assert graph.edgeCount() == 5
    assert sampleMap.getSuccessors("1_0_-1") == keys("1_5_-1")
    assert sampleMap.getSuccessors("1_5_-1") == keys("2_0_-1")
    assert sampleMap.getSuccessors("2_0_-1") == keys("3_0_-1")
    assert sampleMap.getSuccessors("2_0_1") == keys("1_5_1")
    assert sampleMap.getSuccessors("1_5_1") == keys("1_0_1")
    assert sampleMap.getPredecessors("3_0_-1") == keys("2_0_-1")
    assert graph.getEdgeKind("2_0_-1", "3_0_-1") == "junction"
    assert graph.getEdgeKind("1_5_-1", "2_0_-1") == "laneLink"
    # the connection's link from a left lane cannot reach the junction
    assert sampleMap.getSuccessors("2_0_1") == keys("1_5_1")
    assert sampleMap.getSuccessors("nonexistent_key") == []


def test_getLaneByKey(sampleMap):
    lane = sampleMap.getLaneByKey("2_0_1")
    assert lane.key == LaneKey("2", 0, 1)
    assert str(lane.key) == "2_0_1"
    assert sampleMap.getLaneByKey(("2", 0.0, 1)) is lane
    assert sampleMap.getLaneByKey("2_3_1") is None
    assert sampleMap.getLaneByKey("9_0_1") is None
    assert sampleMap.getLaneByKey("junk") is None

## Spatial queries


def test_worldToST(sampleMap):
    st = sampleMap.worldToST("1", 5, 2)
    assert st.s == pytest.approx(5, abs=1e-6)
    assert st.t == pytest.approx(2, abs=1e-6)
    assert sampleMap.worldToST("1", 5, -2).t == pytest.approx(-2)
    assert sampleMap.worldToST("nope", 5, 2) is None


def test_laneAt(sampleMap):
    assert str(sampleMap.laneAt(2, -2).key) == "1_0_-1"
    assert str(sampleMap.laneAt(2, -4.5).key) == "1_0_-2"
    assert str(sampleMap.laneAt(7, 1).key) == "1_5_1"
    assert sampleMap.laneAt(100, -100) is None


def test_toLonLat(sampleMap):
    pytest.importorskip("pyproj")
    lon, lat = sampleMap.toLonLat(0, 0)
    assert lon == pytest.approx(-122.26)
    assert lat == pytest.approx(37.87)


def test_toLonLat_without_geoReference(raw):
    pytest.importorskip("pyproj")
    with pytest.raises(RuntimeError, match="geoReference"):
        OpenDrive(raw.document()).toLonLat(0, 0)

## Plotting


@pytest.mark.graphical
def test_plot(sampleMap):
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from xodrnet.formats.opendrive.plotting import plotLane, plotLanes, plotReferenceLines

    plotReferenceLines(sampleMap, plt)
    plotLanes(sampleMap, plt, laneTypes={"driving"})
    plotLane(sampleMap.getLaneByKey("1_0_-1"), plt)
    assert len(plt.gca().lines) > 0
    plt.close()
