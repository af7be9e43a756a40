"""Utility functions for geometric computation."""

import math

import shapely.geometry


def offsetPosition(position, angle, distance):
    """Move a 3D position horizontally by **distance** in direction **angle**."""
    x, y, z = position
    return (x + math.cos(angle) * distance, y + math.sin(angle) * distance, z)


def averageVectors(a, b, weight=0.5):
    aw, bw = 1.0 - weight, weight
    return tuple(ac * aw + bc * bw for ac, bc in zip(a, b))


def crossProduct2D(ax, ay, bx, by):
    return ax * by - ay * bx


def boundaryPolygon(inner, outer):
    """Build the 2D polygon enclosed by a pair of boundary polylines.

    The ring runs along the outer boundary and back along the inner one. Returns an
    empty polygon if there are too few vertices to enclose any area.
    """
    if len(inner) + len(outer) < 3 or not inner or not outer:
        return shapely.geometry.Polygon()
    ring = [p[:2] for p in outer] + [p[:2] for p in reversed(inner)]
    poly = shapely.geometry.Polygon(ring)
    if not poly.is_valid:
        # self-touching rings show up for zero-width lanes and tight curves
        poly = poly.buffer(0)
    return poly

def plotPolyline(points, plt, style="r-", **kwargs):
    if len(points) < 2:
        return
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    plt.plot(xs, ys, style, **kwargs)


def plotPolygon(polygon, plt, style="r-", **kwargs):
    if polygon.is_empty:
        return
    if isinstance(polygon, shapely.geometry.MultiPolygon):
        polys = polygon.geoms
    else:
        polys = (polygon,)
    for poly in polys:
        x, y = poly.exterior.xy
        plt.plot(x, y, style, **kwargs)
