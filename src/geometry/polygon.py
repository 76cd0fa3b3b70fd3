"""Simple polygons and the pairwise overlap predicate used by the spatial index."""

from functools import cached_property
from typing import Iterator

import numpy as np

from .cleanup import segments_intersect
from .errors import InvalidArgumentError
from .primitives import Bounds, Point2d


class Polygon:
    """Immutable polygon of at least three distinct points.

    The ring is stored open: a closing point equal to the first point
    is dropped.  Equality and hashing use the exact coordinates, so two
    polygons with the same vertices in the same order are one entry in
    a set or in a :class:`~src.spatial.grid_index.SpatialIndex`.

    Parameters
    ----------
    points : array-like
        Vertices of shape (N, 2).
    """

    def __init__(self, points):
        coords = np.array(points, dtype=float)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise InvalidArgumentError(f"polygon points must have shape (N, 2), got {coords.shape}")
        if not np.all(np.isfinite(coords)):
            raise InvalidArgumentError("polygon coordinates must be finite")
        if len(coords) > 1 and np.array_equal(coords[0], coords[-1]):
            coords = coords[:-1]
        if len(coords) < 3 or len(np.unique(coords, axis=0)) < 3:
            raise InvalidArgumentError("polygon needs at least 3 distinct points")
        ring = np.vstack([coords, coords[:1]])
        if np.any(np.all(np.diff(ring, axis=0) == 0.0, axis=1)):
            raise InvalidArgumentError("polygon has consecutive duplicate points")
        coords.flags.writeable = False
        self._points = coords

    @classmethod
    def rectangle(cls, bounds: Bounds) -> "Polygon":
        """Counter-clockwise rectangle covering ``bounds``; needs a non-zero area."""
        if bounds.width <= 0.0 or bounds.height <= 0.0:
            raise InvalidArgumentError(f"rectangle needs positive width and height, got {bounds}")
        return cls(bounds.corners())

    @property
    def points(self) -> np.ndarray:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point2d]:
        for x, y in self._points:
            yield Point2d(float(x), float(y))

    @cached_property
    def bounds(self) -> Bounds:
        return Bounds.from_points(self._points)

    @property
    def edges(self):
        """Start and end points of every edge, each of shape (N, 2)."""
        return self._points, np.roll(self._points, -1, axis=0)

    @property
    def area(self) -> float:
        """Signed shoelace area, positive for counter-clockwise rings."""
        x, y = self._points.T
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))

    def contains_point(self, x: float, y: float) -> bool:
        """True if (x, y) is inside the polygon or on its boundary."""
        if not self.bounds.contains_point(x, y):
            return False
        starts, ends = self.edges
        point = np.array([x, y], dtype=float)
        if segments_intersect(starts, ends, point, point).any():
            return True
        xi, yi = starts.T
        xj, yj = ends.T
        crosses = (yi > y) != (yj > y)
        with np.errstate(divide="ignore", invalid="ignore"):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
        return bool(np.count_nonzero(crosses & (x < x_cross)) % 2 == 1)

    def intersects(self, other: "Polygon") -> bool:
        """Closed-set overlap test.

        Polygons intersect when they share any point: overlapping
        interiors, containment, crossing edges, collinear overlapping
        edges, an edge touching a vertex or a shared vertex.  Overlapping
        bounding boxes alone do not count.
        """
        if other is self:
            return True
        if not self.bounds.intersects(other.bounds):
            return False
        a, b = self.edges
        c, d = other.edges
        if segments_intersect(a[:, None, :], b[:, None, :], c[None, :, :], d[None, :, :]).any():
            return True
        # no boundary contact: either disjoint or one inside the other
        return (self.contains_point(*other._points[0])
                or other.contains_point(*self._points[0]))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polygon):
            return NotImplemented
        return self._points.shape == other._points.shape and bool(np.array_equal(self._points, other._points))

    def __hash__(self) -> int:
        return hash(self._points.tobytes())

    def __repr__(self) -> str:
        return f"Polygon(n={len(self)}, bounds={self.bounds})"
