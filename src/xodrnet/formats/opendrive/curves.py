"""Geometric elements which compose road reference lines.

Each kind of curve (`Line`, `Arc`, `Spiral`, `ParamPoly3`) is a plain record of its
placement and shape parameters; `sample` turns any of them into a list of
`ReferencePoint` objects. The set of curve kinds is fixed by the OpenDRIVE format,
so per-kind behavior is registered on `curvePoses` rather than spread over a class
hierarchy. See the OpenDRIVE Format Specification for coordinate system details.
"""

from __future__ import annotations

import functools
import math
from typing import List, Optional, Sequence, Tuple, Union

import attr
import numpy as np

from xodrnet.core.errors import warn
from xodrnet.core.utils import toFloat

#: Sample distances closer together than this are merged.
sampleTolerance = 1e-9

#: Arcs with curvature smaller than this (in absolute value) are sampled as lines.
straightCurvature = 1e-9

## Reference points


@attr.s(auto_attribs=True, frozen=True, kw_only=True)
class ReferencePoint:
    """A sample of a road's reference line.

    Created by curve sampling; the fields after ``road_s`` are filled in when the
    owning road is processed, which produces new points with `attr.evolve`.
    """

    x: float
    y: float
    z: float
    #: Tangent heading, in radians counterclockwise from the positive x axis.
    hdg: float
    #: Distance from the start of the curve which produced this point.
    local_s: float
    #: Distance from the start of the road.
    road_s: float = 0
    #: Distance from the start of the lane section containing this point.
    lane_section_s: float = 0
    #: Lane offset applied to get from the reference line to the center lane.
    lateral_offset: float = 0
    #: Position of the center lane (the reference line shifted by the lane offset).
    center_lane_position: Tuple[float, float, float] = attr.ib(
        default=attr.Factory(lambda self: (self.x, self.y, self.z), takes_self=True)
    )

    @property
    def position(self):
        return (self.x, self.y, self.z)


## Curve kinds


@attr.s(auto_attribs=True, frozen=True)
class _Placement:
    #: Road distance at which the curve starts.
    s: float
    x: float
    y: float
    #: Initial heading, in radians counterclockwise, 0 at positive x-axis.
    hdg: float
    length: float


@attr.s(auto_attribs=True, frozen=True)
class Line(_Placement):
    """A straight line segment."""

    pass


@attr.s(auto_attribs=True, frozen=True)
class Arc(_Placement):
    """A circular arc of constant curvature (positive means turning left)."""

    curvature: float = 0


@attr.s(auto_attribs=True, frozen=True)
class Spiral(_Placement):
    """An Euler spiral with curvature varying linearly between its end values."""

    curvStart: float = 0
    curvEnd: float = 0

    #: Step used to integrate the spiral's position.
    substep = 0.01


@attr.s(auto_attribs=True, frozen=True)
class ParamPoly3(_Placement):
    """A curve given by the parametric cubics u(p) and v(p) in the local frame.

    The parameter p runs over [0, 1] (``pRange="normalized"``) or over [0, length]
    (``pRange="arcLength"``).
    """

    aU: float = 0
    bU: float = 0
    cU: float = 0
    dU: float = 0
    aV: float = 0
    bV: float = 0
    cV: float = 0
    dV: float = 0
    pRange: str = "normalized"


Curve = Union[Line, Arc, Spiral, ParamPoly3]

_shapeNames = ("line", "arc", "spiral", "paramPoly3")


def curveFromRaw(raw) -> Optional[Curve]:
    """Decode one ``planView`` geometry entry.

    Returns None (with an `OpenDriveWarning`) if the entry has none of the
    recognized shapes.
    """
    placement = dict(
        s=toFloat(raw.get("s"), field="s"),
        x=toFloat(raw.get("x"), field="x"),
        y=toFloat(raw.get("y"), field="y"),
        hdg=toFloat(raw.get("hdg"), field="hdg"),
        length=toFloat(raw.get("length"), field="length"),
    )
    kind = next((name for name in _shapeNames if raw.get(name) is not None), None)
    shape = raw.get(kind) if kind else None
    if not isinstance(shape, dict):
        shape = {}
    if kind == "line":
        return Line(**placement)
    elif kind == "arc":
        return Arc(**placement, curvature=toFloat(shape.get("curvature")))
    elif kind == "spiral":
        return Spiral(
            **placement,
            curvStart=toFloat(shape.get("curvStart")),
            curvEnd=toFloat(shape.get("curvEnd")),
        )
    elif kind == "paramPoly3":
        coeffs = {name: toFloat(shape.get(name)) for name in
                  ("aU", "bU", "cU", "dU", "aV", "bV", "cV", "dV")}
        pRange = shape.get("pRange") or "normalized"
        if pRange not in ("normalized", "arcLength"):
            warn(f'unknown pRange "{pRange}" for paramPoly3 at s={placement["s"]}; '
                 'treating it as normalized')
            pRange = "normalized"
        return ParamPoly3(**placement, **coeffs, pRange=pRange)
    else:
        others = sorted(key for key in raw if key not in placement)
        warn(f'geometry at s={placement["s"]} has no recognized shape '
             f'(found {others}); skipping it')
        return None


## Sampling


def sampleDistances(length, step, extraDistances=()) -> List[float]:
    """Local distances at which to sample a curve of the given length.

    This is the uniform grid 0, step, 2*step, ..., length (the last value clamped
    to the length) together with any extra distances lying in [0, length],
    sorted and de-duplicated.
    """
    if step <= 0:
        raise ValueError(f"sampling step must be positive (got {step})")
    length = max(float(length), 0.0)
    num = math.ceil(length / step)
    grid = np.minimum(np.arange(num + 1) * step, length)
    extras = np.array([e for e in extraDistances if 0 <= e <= length], dtype=float)
    values = np.union1d(grid, extras)
    keep = np.concatenate(([True], np.diff(values) > sampleTolerance))
    values = values[keep]
    if length - values[-1] <= sampleTolerance:
        values[-1] = length
    return values.tolist()


def sample(curve: Curve, elevationProfile, step, extraDistances=()) -> List[ReferencePoint]:
    """Sample a curve into reference points covering [0, length].

    Args:
        curve: the curve to sample.
        elevationProfile: source of heights, evaluated at road distance
            (``local_s`` plus the curve's start distance).
        step: spacing of the uniform sampling grid.
        extraDistances: local distances which must be sampled exactly.
    """
    distances = sampleDistances(curve.length, step, extraDistances)
    points = []
    for ls, (x, y, hdg) in zip(distances, curvePoses(curve, distances)):
        roadS = curve.s + ls
        z = elevationProfile.getElevationByS(roadS)
        points.append(ReferencePoint(x=x, y=y, z=z, hdg=hdg, local_s=ls, road_s=roadS))
    return points


@functools.singledispatch
def curvePoses(curve, distances: Sequence[float]):
    """Yield an (x, y, heading) pose for each of the ascending local distances."""
    raise TypeError(f"unknown kind of curve {curve!r}")


@curvePoses.register
def _(curve: Line, distances):
    cos_hdg, sin_hdg = math.cos(curve.hdg), math.sin(curve.hdg)
    for s in distances:
        yield (curve.x + s * cos_hdg, curve.y + s * sin_hdg, curve.hdg)


@curvePoses.register
def _(curve: Arc, distances):
    k = curve.curvature
    if abs(k) < straightCurvature:
        yield from curvePoses(Line(curve.s, curve.x, curve.y, curve.hdg, curve.length),
                              distances)
        return
    sin0, cos0 = math.sin(curve.hdg), math.cos(curve.hdg)
    for s in distances:
        hdg = curve.hdg + k * s
        x = curve.x + (math.sin(hdg) - sin0) / k
        y = curve.y - (math.cos(hdg) - cos0) / k
        yield (x, y, hdg)


class _ClothoidIntegrator:
    '''Integrates a curve with linearly-varying curvature, starting at the origin
    with heading 0. The state only moves forward, so sampling ascending distances
    costs O(length / substep) in total.'''
    def __init__(self, curv0, curveRate, substep):
        self.curv0 = curv0
        self.curveRate = curveRate
        self.substep = substep
        self.s = 0.0
        self.x = 0.0
        self.y = 0.0
        self.theta = 0.0

    def _headingGain(self, s, h):
        # exact integral of the curvature over [s, s + h]
        return (self.curv0 + self.curveRate * (s + h / 2)) * h

    def advance_to(self, target):
        assert target >= self.s - sampleTolerance, 'distances must be ascending'
        while self.s < target:
            h = min(self.substep, target - self.s)
            thetaMid = self.theta + self._headingGain(self.s, h / 2)
            self.x += math.cos(thetaMid) * h
            self.y += math.sin(thetaMid) * h
            self.theta += self._headingGain(self.s, h)
            self.s = target if self.s + h >= target else self.s + h
        return self.x, self.y, self.theta


@curvePoses.register
def _(curve: Spiral, distances):
    rate = (curve.curvEnd - curve.curvStart) / curve.length if curve.length > 0 else 0
    integrator = _ClothoidIntegrator(curve.curvStart, rate, curve.substep)
    cos_hdg, sin_hdg = math.cos(curve.hdg), math.sin(curve.hdg)
    for s in distances:
        u, v, theta = integrator.advance_to(s)
        x = curve.x + u * cos_hdg - v * sin_hdg
        y = curve.y + u * sin_hdg + v * cos_hdg
        yield (x, y, curve.hdg + theta)


def _cubic(a, b, c, d, p):
    return a + b * p + c * p * p + d * p * p * p


def _cubicGrad(b, c, d, p):
    return b + 2 * c * p + 3 * d * p * p


@curvePoses.register
def _(curve: ParamPoly3, distances):
    normalized = curve.pRange == "normalized"
    length = max(curve.length, 1e-9)
    dp_ds = 1 / length if normalized else 1
    cos_hdg, sin_hdg = math.cos(curve.hdg), math.sin(curve.hdg)
    for s in distances:
        p = s / length if normalized else s
        u = _cubic(curve.aU, curve.bU, curve.cU, curve.dU, p)
        v = _cubic(curve.aV, curve.bV, curve.cV, curve.dV, p)
        du_ds = _cubicGrad(curve.bU, curve.cU, curve.dU, p) * dp_ds
        dv_ds = _cubicGrad(curve.bV, curve.cV, curve.dV, p) * dp_ds
        x = curve.x + u * cos_hdg - v * sin_hdg
        y = curve.y + u * sin_hdg + v * cos_hdg
        yield (x, y, curve.hdg + math.atan2(dv_ds, du_ds))
