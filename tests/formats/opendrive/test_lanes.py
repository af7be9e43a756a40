import math

import attr
import pytest

from xodrnet.formats.opendrive.curves import Line, sample
from xodrnet.formats.opendrive.lanes import (
    Lane,
    LaneKey,
    LaneSection,
    LaneWidth,
    RoadMark,
)
from xodrnet.formats.opendrive.profiles import ElevationProfile

## Lane keys


def test_lane_key_string_form():
    assert str(LaneKey("12", 0.0, -1)) == "12_0_-1"
    assert str(LaneKey("12", 25.5, 2)) == "12_25.5_2"


def test_lane_key_parse():
    assert LaneKey.parse("12_0_-1") == LaneKey("12", 0, -1)
    assert LaneKey.parse("road_with_underscores_10.25_3") == LaneKey(
        "road_with_underscores", 10.25, 3)
    with pytest.raises(ValueError):
        LaneKey.parse("nonexistent_key")
    with pytest.raises(ValueError):
        LaneKey.parse("a_b_c")


def test_lane_key_coerce():
    key = LaneKey("1", 0, 1)
    assert LaneKey.coerce(key) is key
    assert LaneKey.coerce(("1", 0, 1)) == key
    assert LaneKey.coerce((1, 0, 1)) == key
    assert LaneKey.coerce(("1", "0", "1")) == key
    assert LaneKey.coerce(("1", "start", 1)) is None
    assert LaneKey.coerce("1_0_1") == key
    assert LaneKey.coerce("garbage") is None
    assert LaneKey.coerce(None) is None

## Decoding


def test_lane_fromRaw(raw):
    rawLane = raw.lane(-2, width=[raw.width(3, sOffset=5), raw.width(2)],
                       type_="shoulder", predecessor=-1, successor=-3)
    rawLane["roadMark"] = {"sOffset": "0", "type": "solid", "color": "white",
                           "width": "0.15", "laneChange": "none"}
    lane = Lane.fromRaw(rawLane, "right")
    assert lane.id_ == -2
    assert lane.type_ == "shoulder"
    assert lane.level is False
    assert lane.predecessor == -1 and lane.successor == -3
    assert [w.s_offset for w in lane.widths] == [0, 5]
    assert lane.road_marks == [RoadMark(0, "solid", "white", None, 0.15, "none")]
    assert lane.direction == -1


def test_lane_width_uses_latest_record():
    lane = Lane(1, widths=[LaneWidth(4, 3, 0, 0, 0), LaneWidth(0, 2, 0.25, 0, 0)])
    assert lane.widthAt(0) == 2
    assert lane.widthAt(2) == pytest.approx(2.5)
    assert lane.widthAt(4) == 3
    assert lane.widthAt(10) == 3


def test_section_fromRaw_sorts_lanes(raw):
    rawSec = raw.section(3, left=[raw.lane(2), raw.lane(1)],
                         right=[raw.lane(-2), raw.lane(-1), raw.lane(-3)])
    section = LaneSection.fromRaw(rawSec, roadId="9")
    assert section.s == 3
    assert [l.id_ for l in section.getLanes()] == [-3, -2, -1, 0, 1, 2]
    assert [l.id_ for l in section.left] == [1, 2]
    assert [l.id_ for l in section.right] == [-1, -2, -3]
    assert section.getLaneById("-2").key == LaneKey("9", 3, -2)
    assert section.getLaneById(0) is section.center
    assert section.getLaneById(7) is None
    assert section.getLaneById("x") is None


def test_section_single_lane_sides(raw):
    rawSec = raw.section(0)
    rawSec["right"] = {"lane": raw.lane(-1)}
    section = LaneSection.fromRaw(rawSec)
    assert [l.id_ for l in section.getLanes()] == [-1, 0]

## Boundaries


def straightPoints(length=10, step=5):
    return sample(Line(0, 0, 0, 0, length), ElevationProfile(), step)


def test_boundaries_stack_outward():
    left = [Lane(1, widths=[LaneWidth(0, 3, 0, 0, 0)]), Lane(2, widths=[LaneWidth(0, 2, 0, 0, 0)])]
    right = [Lane(-1, widths=[LaneWidth(0, 3.5, 0, 0, 0)]),
             Lane(-2, widths=[LaneWidth(0, 1, 0, 0, 0)])]
    section = LaneSection(0, left=left, center=Lane(0), right=right, roadId="1")
    section.processLanes(straightPoints())

    l1, l2 = section.getLaneById(1), section.getLaneById(2)
    r1, r2 = section.getLaneById(-1), section.getLaneById(-2)
    assert [p[1] for p in l1.getBoundary().inner] == pytest.approx([0, 0, 0])
    assert [p[1] for p in l1.getBoundary().outer] == pytest.approx([3, 3, 3])
    assert l2.getBoundary().inner == l1.getBoundary().outer
    assert [p[1] for p in l2.getBoundaryLine()] == pytest.approx([5, 5, 5])
    assert [p[1] for p in r1.getBoundaryLine()] == pytest.approx([-3.5] * 3)
    assert r2.getBoundary().inner == r1.getBoundary().outer
    assert [p[1] for p in r2.getBoundaryLine()] == pytest.approx([-4.5] * 3)
    assert [p[0] for p in r2.getBoundaryLine()] == pytest.approx([0, 5, 10])
    assert section.center.getBoundaryLine() == [p.center_lane_position
                                                for p in straightPoints()]
    assert [p[1] for p in r1.centerline] == pytest.approx([-1.75] * 3)


def test_boundary_uses_section_distance():
    points = sample(Line(0, 0, 0, 0, 10), ElevationProfile(), 5)
    # pretend the section starts at road distance 5
    points = [attr.evolve(p, lane_section_s=p.road_s - 5) for p in points[1:]]
    lane = Lane(-1, widths=[LaneWidth(0, 1, 0.2, 0, 0)])
    section = LaneSection(5, right=[lane])
    section.processLanes(points)
    assert [p[1] for p in lane.getBoundaryLine()] == pytest.approx([-1, -2])


def test_boundary_follows_heading():
    points = sample(Line(0, 0, 0, math.pi / 2, 4), ElevationProfile(), 4)
    lane = Lane(-1, widths=[LaneWidth(0, 2, 0, 0, 0)])
    LaneSection(0, right=[lane]).processLanes(points)
    assert [c for p in lane.getBoundaryLine() for c in p[:2]] == pytest.approx([2, 0, 2, 4])


def test_superelevation_tilts_boundaries():
    lane = Lane(-1, widths=[LaneWidth(0, 2, 0, 0, 0)])
    LaneSection(0, right=[lane]).processLanes(straightPoints(), crossSlopes=[0.1] * 3)
    assert [p[2] for p in lane.getBoundaryLine()] == pytest.approx([-0.2] * 3)


def test_lane_polygon():
    lane = Lane(-1, widths=[LaneWidth(0, 2, 0, 0, 0)])
    LaneSection(0, right=[lane]).processLanes(straightPoints())
    assert lane.polygon.area == pytest.approx(20)
    lane.generateBoundaries(straightPoints(), [(0, 0, 0)] * 3, [0] * 3)
    assert lane.polygon.area == pytest.approx(0)


def test_center_polygon_refreshed_by_processing():
    center = Lane(0)
    section = LaneSection(0, center=center, right=[Lane(-1, widths=[LaneWidth(0, 2, 0, 0, 0)])])
    stale = center.polygon
    assert stale.is_empty
    section.processLanes(straightPoints())
    assert center.polygon is not stale
    assert center.getBoundaryLine() == [p.center_lane_position for p in straightPoints()]
