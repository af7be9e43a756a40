"""Sampled reference lines and projection onto them."""

from __future__ import annotations

import math
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from xodrnet.core.geometry import crossProduct2D
from xodrnet.formats.opendrive.curves import ReferencePoint


class STCoordinates(NamedTuple):
    """Road-relative coordinates: longitudinal distance s and lateral offset t.

    Positive t lies to the left of the reference line (looking towards increasing s).
    """

    s: float
    t: float


class ReferenceLine:
    """Ordered reference points of one road.

    Projection onto the line is brute force over all segments, which is fine for
    interactive queries; use `worldToSTMany` to project many points at once.
    """

    def __init__(self, points: Sequence[ReferencePoint]):
        self.points = tuple(points)

    def getPoints(self) -> Sequence[ReferencePoint]:
        return self.points

    def __len__(self):
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def length(self) -> float:
        return self.points[-1].road_s if self.points else 0

    def positions(self) -> List[tuple]:
        """The raw (x, y, z) positions of the reference line."""
        return [p.position for p in self.points]

    def centerLanePositions(self) -> List[tuple]:
        """The (x, y, z) positions of the center lane (after the lane offset)."""
        return [p.center_lane_position for p in self.points]

    def _segments(self):
        points = self.points
        if len(points) == 1:
            return [(points[0], points[0])]
        return zip(points, points[1:])

    def worldToST(self, position) -> Optional[STCoordinates]:
        """Project a world position onto the line.

        Args:
            position: (x, y) or (x, y, z); only x and y are used.

        Returns:
            The `STCoordinates` of the closest point on the line, or None if the line
            has no points.
        """
        if not self.points:
            return None
        px, py = position[0], position[1]
        minDistSq = math.inf
        closest = None
        for p1, p2 in self._segments():
            vx, vy = p2.x - p1.x, p2.y - p1.y
            wx, wy = px - p1.x, py - p1.y
            lenSq = vx * vx + vy * vy
            param = 0 if lenSq == 0 else (wx * vx + wy * vy) / lenSq
            param = min(max(param, 0), 1)
            dx = px - (p1.x + param * vx)
            dy = py - (p1.y + param * vy)
            distSq = dx * dx + dy * dy
            if distSq < minDistSq:
                minDistSq = distSq
                s = p1.road_s + param * (p2.road_s - p1.road_s)
                dist = math.sqrt(distSq)
                t = dist if crossProduct2D(vx, vy, wx, wy) >= 0 else -dist
                closest = STCoordinates(s, t)
        return closest

    def worldToSTMany(self, positions) -> np.ndarray:
        """Vectorized `worldToST` for an array-like of positions.

        Returns:
            An array of shape (N, 2) holding (s, t) for each position.
        """
        query = np.atleast_2d(np.asarray(positions, dtype=float))[:, :2]
        if not self.points:
            return np.full((len(query), 2), np.nan)
        pts = np.array([(p.x, p.y) for p in self.points], dtype=float)
        ss = np.array([p.road_s for p in self.points], dtype=float)
        if len(pts) == 1:
            pts = np.vstack([pts, pts])
            ss = np.concatenate([ss, ss])
        starts, vecs = pts[:-1], pts[1:] - pts[:-1]
        lenSq = np.einsum('ij,ij->i', vecs, vecs)
        rel = query[:, None, :] - starts[None, :, :]
        dots = np.einsum('kij,ij->ki', rel, vecs)
        with np.errstate(divide='ignore', invalid='ignore'):
            params = np.where(lenSq > 0, dots / lenSq, 0)
        params = np.clip(params, 0, 1)
        feet = starts[None, :, :] + params[:, :, None] * vecs[None, :, :]
        distSq = np.sum((query[:, None, :] - feet) ** 2, axis=2)
        best = np.argmin(distSq, axis=1)
        rows = np.arange(len(query))
        param = params[rows, best]
        s = ss[best] + param * (ss[best + 1] - ss[best])
        v, w = vecs[best], rel[rows, best]
        cross = crossProduct2D(v[:, 0], v[:, 1], w[:, 0], w[:, 1])
        dist = np.sqrt(distSq[rows, best])
        t = np.where(cross >= 0, dist, -dist)
        return np.column_stack([s, t])
