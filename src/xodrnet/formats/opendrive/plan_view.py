"""The plan view: a road's reference line as a sequence of curves."""

from xodrnet.core.errors import warn
from xodrnet.core.utils import arrayize, toFloat
from xodrnet.formats.opendrive.curves import curveFromRaw, sample


class PlanView:
    '''Ordered list of curves forming one continuous reference line.

    Attributes:
        geometries: the recognized curves, in declaration order.
        length: road distance at the end of the last declared geometry (including
            geometries skipped because their shape was not recognized).
    '''
    def __init__(self, geometries=(), length=None):
        self.geometries = list(geometries)
        if length is None:
            length = max((g.s + g.length for g in self.geometries), default=0)
        self.length = length

    @classmethod
    def fromRaw(cls, raw, roadId=None):
        rawGeometries = arrayize(raw.get('geometry')) if raw else []
        geometries = []
        length = 0
        for rawGeom in rawGeometries:
            end = toFloat(rawGeom.get('s')) + toFloat(rawGeom.get('length'))
            length = max(length, end)
            curve = curveFromRaw(rawGeom)
            if curve is not None:
                geometries.append(curve)
        last = None
        for curve in geometries:
            if last is not None and abs(last.s + last.length - curve.s) > 1e-4:
                warn(f'planView of road {roadId} has inconsistent length at s={curve.s}')
            last = curve
        return cls(geometries, length=length)

    def sample(self, elevationProfile, step, extraDistances=()):
        '''Sample the whole reference line.

        Each point is tagged with its road distance. Extra road distances are
        passed on to every curve containing them (in that curve's local
        coordinates), so that vertices fall exactly at those distances. The first
        point of every curve after the first is dropped, since it duplicates the
        end of the previous curve.
        '''
        points = []
        for i, curve in enumerate(self.geometries):
            start, end = curve.s, curve.s + curve.length
            localExtras = [s - start for s in extraDistances if start <= s <= end]
            piece = sample(curve, elevationProfile, step, localExtras)
            if i > 0:
                piece = [p for p in piece if p.local_s != 0]
            points.extend(piece)
        return points
