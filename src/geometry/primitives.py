"""Point, pose and bounding-box value types.

These are small immutable values shared by every other module.  Bulk
coordinate work is done on numpy arrays of shape (N, 2); the value
types are used at the interfaces (curve end poses, polyline locations,
index regions).
"""

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class Point2d:
    """A point in the plane."""
    x: float
    y: float

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            raise InvalidArgumentError(f"point coordinates must be finite, got ({self.x}, {self.y})")

    def distance(self, other: "Point2d") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def almost_equals(self, other: "Point2d", epsilon: float) -> bool:
        """Return True if both coordinates differ by at most ``epsilon``."""
        return abs(self.x - other.x) <= epsilon and abs(self.y - other.y) <= epsilon

    def interpolate(self, other: "Point2d", fraction: float) -> "Point2d":
        return Point2d(self.x + fraction * (other.x - self.x), self.y + fraction * (other.y - self.y))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


@dataclass(frozen=True)
class Pose2d:
    """A point with a heading, used as the start and end of curves."""
    x: float
    y: float
    direction: float
    """Heading in radians, counter-clockwise from the x axis."""

    def __post_init__(self):
        if not (math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.direction)):
            raise InvalidArgumentError(
                f"pose values must be finite, got ({self.x}, {self.y}, {self.direction})")

    @property
    def point(self) -> Point2d:
        return Point2d(self.x, self.y)

    @property
    def unit_vector(self) -> np.ndarray:
        return np.array([math.cos(self.direction), math.sin(self.direction)])

    def offset(self, lateral: float) -> Point2d:
        """Point displaced perpendicular to the heading, positive to the left."""
        return Point2d(self.x - math.sin(self.direction) * lateral,
                       self.y + math.cos(self.direction) * lateral)

    def reverse(self) -> "Pose2d":
        return Pose2d(self.x, self.y, self.direction + math.pi)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


@dataclass(frozen=True)
class Bounds:
    """Closed axis-aligned bounding box.

    Zero width or height is allowed, which is what a horizontal or
    vertical line segment or a single point produces.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        values = (self.min_x, self.min_y, self.max_x, self.max_y)
        if not all(math.isfinite(v) for v in values):
            raise InvalidArgumentError(f"bounds must be finite, got {values}")
        if self.max_x < self.min_x or self.max_y < self.min_y:
            raise InvalidArgumentError(f"bounds maximum below minimum: {values}")

    @classmethod
    def from_points(cls, points: Iterable) -> "Bounds":
        """Smallest box containing all points of an (N, 2) array-like."""
        coords = np.asarray(points, dtype=float).reshape(-1, 2)
        if len(coords) == 0:
            raise InvalidArgumentError("cannot compute bounds of an empty point set")
        lo = coords.min(axis=0)
        hi = coords.max(axis=0)
        return cls(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def midpoint(self) -> Point2d:
        return Point2d((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    def intersects(self, other: "Bounds") -> bool:
        """True if the boxes share at least one point (touching counts)."""
        return (self.min_x <= other.max_x and other.min_x <= self.max_x
                and self.min_y <= other.max_y and other.min_y <= self.max_y)

    def contains(self, other: "Bounds") -> bool:
        """True if ``other`` lies entirely inside this box (boundary included)."""
        return (self.min_x <= other.min_x and other.max_x <= self.max_x
                and self.min_y <= other.min_y and other.max_y <= self.max_y)

    def contains_point(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(min(self.min_x, other.min_x), min(self.min_y, other.min_y),
                      max(self.max_x, other.max_x), max(self.max_y, other.max_y))

    def corners(self) -> np.ndarray:
        """Counter-clockwise corners starting at the lower left."""
        return np.array([
            [self.min_x, self.min_y],
            [self.max_x, self.min_y],
            [self.max_x, self.max_y],
            [self.min_x, self.max_y],
        ])
