"""Exception types raised by the geometry engine.

Degenerate but well-formed input is never an error: it is recovered
locally and reported to the caller's diagnostics instead.
"""


class GeometryError(Exception):
    """Base class of all geometry errors."""


class InvalidArgumentError(GeometryError, ValueError):
    """Malformed input: too few points, mismatched arrays, non-positive sizes."""


class OutOfRangeError(GeometryError, IndexError):
    """Index or position beyond the valid range of a polyline."""


class ConvergenceError(GeometryError):
    """An iterative solver exhausted its iteration ceiling."""
