"""Piecewise cubic polynomials and the elevation/lateral profiles of roads."""

import bisect

import attr

from xodrnet.core.utils import arrayize, toFloat


class Poly3:
    '''Cubic polynomial.'''
    def __init__(self, a, b, c, d):
        self.a = a
        self.b = b
        self.c = c
        self.d = d

    @classmethod
    def fromRaw(cls, raw):
        return cls(toFloat(raw.get('a'), field='a'),
                   toFloat(raw.get('b'), field='b'),
                   toFloat(raw.get('c'), field='c'),
                   toFloat(raw.get('d'), field='d'))

    def eval_at(self, x):
        return self.a + self.b * x + self.c * x ** 2 + self.d * x ** 3

    def grad_at(self, x):
        return self.b + 2 * self.c * x + 3 * self.d * x ** 2

    def __repr__(self):
        return f'Poly3({self.a}, {self.b}, {self.c}, {self.d})'


class PiecewiseCubic:
    '''A function made of cubic pieces, each valid from its start until the next one.

    Pieces are given as (start, Poly3) pairs in any order; they are sorted once
    here. Evaluating at x uses the piece with the greatest start <= x, in the
    local coordinate x - start. Before the first piece the value is 0.
    '''
    def __init__(self, pieces=()):
        pieces = sorted(pieces, key=lambda piece: piece[0])
        self.starts = [start for start, _ in pieces]
        self.polys = [poly for _, poly in pieces]

    def __len__(self):
        return len(self.starts)

    def __bool__(self):
        return bool(self.starts)

    def piece_index(self, x):
        return bisect.bisect_right(self.starts, x) - 1

    def eval_at(self, x):
        ind = self.piece_index(x)
        if ind < 0:
            return 0
        return self.polys[ind].eval_at(x - self.starts[ind])

    def grad_at(self, x):
        ind = self.piece_index(x)
        if ind < 0:
            return 0
        return self.polys[ind].grad_at(x - self.starts[ind])


@attr.s(auto_attribs=True, frozen=True)
class Elevation:
    '''One ``elevation`` or ``superelevation`` record: a cubic valid from s.'''
    s: float
    a: float
    b: float
    c: float
    d: float

    @classmethod
    def fromRaw(cls, raw):
        poly = Poly3.fromRaw(raw)
        return cls(toFloat(raw.get('s'), field='s'), poly.a, poly.b, poly.c, poly.d)

    @property
    def poly(self):
        return Poly3(self.a, self.b, self.c, self.d)


def _piecewise(records):
    return PiecewiseCubic((rec.s, rec.poly) for rec in records)


class ElevationProfile:
    '''Height of the reference line as a function of road distance.'''
    def __init__(self, elevations=()):
        self.elevations = list(elevations)
        self._function = _piecewise(self.elevations)

    @classmethod
    def fromRaw(cls, raw):
        if not raw:
            return cls()
        return cls(Elevation.fromRaw(e) for e in arrayize(raw.get('elevation')))

    def getElevationByS(self, s):
        return self._function.eval_at(s)

    def getSlopeByS(self, s):
        return self._function.grad_at(s)


class LateralProfile:
    '''Superelevation (roll angle, in radians) as a function of road distance.

    Positive superelevation lowers the right side of the road.
    '''
    def __init__(self, superelevations=()):
        self.superelevations = list(superelevations)
        self._function = _piecewise(self.superelevations)

    @classmethod
    def fromRaw(cls, raw):
        if not raw:
            return cls()
        return cls(Elevation.fromRaw(e) for e in arrayize(raw.get('superelevation')))

    def getSuperelevationByS(self, s):
        return self._function.eval_at(s)
