"""Plots of processed road networks, for sanity checks."""

from xodrnet.core.geometry import plotPolygon, plotPolyline


def plotReferenceLines(odr, plt, style='b-'):
    '''Plot the reference line of every processed road.'''
    for line in odr.getReferenceLines():
        plotPolyline(line.positions(), plt, style)


def plotLanes(odr, plt, laneTypes=None, boundaryStyle='k-', centerStyle='y--'):
    '''Plot lane boundaries and center lanes of all processed roads.

    Args:
        laneTypes: if given, only lanes of these types are drawn.
    '''
    for road in odr.getRoads():
        if not road.isProcessed:
            continue
        for section in road.getLaneSections():
            if section.center is not None:
                plotPolyline(section.center.getBoundaryLine(), plt, centerStyle)
            for lane in section.getLanes():
                if lane.id_ == 0:
                    continue
                if laneTypes is not None and lane.type_ not in laneTypes:
                    continue
                plotPolyline(lane.getBoundaryLine(), plt, boundaryStyle)


def plotLane(lane, plt, style='r-'):
    '''Outline the area of a single lane.'''
    plotPolygon(lane.polygon, plt, style)
