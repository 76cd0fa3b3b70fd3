"""Geometry value types shared by curves, offsets and the spatial index."""

from .circles import circle_centers, circle_intersections
from .cleanup import (
    collapse_collinear,
    is_simple,
    remove_duplicates,
    remove_loops,
    scaled_epsilon,
    segment_intersection,
    segments_intersect,
)
from .errors import ConvergenceError, GeometryError, InvalidArgumentError, OutOfRangeError
from .polygon import Polygon
from .polyline import Polyline
from .primitives import Bounds, Point2d, Pose2d

__all__ = [
    "Bounds",
    "ConvergenceError",
    "GeometryError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "Point2d",
    "Polygon",
    "Polyline",
    "Pose2d",
    "circle_centers",
    "circle_intersections",
    "collapse_collinear",
    "is_simple",
    "remove_duplicates",
    "remove_loops",
    "scaled_epsilon",
    "segment_intersection",
    "segments_intersect",
]
