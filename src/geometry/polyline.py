"""Immutable polyline.

A :class:`Polyline` is the output type of curve flattening and offset
line generation.  It wraps a write-protected (N, 2) float array of at
least two points in which no two consecutive points coincide.  Lengths
along the line are derived once and cached.
"""

import math
from functools import cached_property
from typing import Iterator, List, Tuple

import numpy as np

from .cleanup import remove_duplicates, scaled_epsilon
from .errors import InvalidArgumentError, OutOfRangeError
from .primitives import Bounds, Point2d, Pose2d


class Polyline:
    """Ordered sequence of at least two distinct consecutive points.

    Parameters
    ----------
    points : array-like
        Coordinates of shape (N, 2) with N >= 2.

    Raises
    ------
    InvalidArgumentError
        If the shape is wrong, a coordinate is not finite, fewer than
        two points are given or two consecutive points are equal.
    """

    def __init__(self, points):
        coords = np.array(points, dtype=float)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise InvalidArgumentError(f"polyline points must have shape (N, 2), got {coords.shape}")
        if len(coords) < 2:
            raise InvalidArgumentError(f"polyline needs at least 2 points, got {len(coords)}")
        if not np.all(np.isfinite(coords)):
            raise InvalidArgumentError("polyline coordinates must be finite")
        repeated = np.flatnonzero(np.all(np.diff(coords, axis=0) == 0.0, axis=1))
        if len(repeated) > 0:
            raise InvalidArgumentError(f"polyline has consecutive duplicate points at index {repeated[0]}")
        coords.flags.writeable = False
        self._points = coords

    @classmethod
    def cleaned(cls, points, relative_epsilon: float = 1e-9) -> "Polyline":
        """Build a polyline after dropping consecutive near-duplicates.

        The duplicate epsilon scales with the extent and coordinate
        magnitude of ``points``; first and last points are kept.
        """
        coords = np.asarray(points, dtype=float).reshape(-1, 2)
        if len(coords) < 2:
            raise InvalidArgumentError(f"polyline needs at least 2 points, got {len(coords)}")
        epsilon = scaled_epsilon(coords, relative_epsilon)
        return cls(remove_duplicates(coords, epsilon))

    # Access ------------------------------------------------------------

    @property
    def points(self) -> np.ndarray:
        """Read-only (N, 2) coordinate array."""
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def get(self, index: int) -> Point2d:
        """Return point ``index``; negative indices are out of range."""
        if not 0 <= index < len(self._points):
            raise OutOfRangeError(f"point index {index} outside [0, {len(self._points)})")
        x, y = self._points[index]
        return Point2d(float(x), float(y))

    __getitem__ = get

    def __iter__(self) -> Iterator[Point2d]:
        for x, y in self._points:
            yield Point2d(float(x), float(y))

    @property
    def first(self) -> Point2d:
        return self.get(0)

    @property
    def last(self) -> Point2d:
        return self.get(len(self._points) - 1)

    def to_list(self) -> List[Tuple[float, float]]:
        return [(float(x), float(y)) for x, y in self._points]

    # Lengths -----------------------------------------------------------

    @cached_property
    def segment_lengths(self) -> np.ndarray:
        lengths = np.hypot(*np.diff(self._points, axis=0).T)
        lengths.flags.writeable = False
        return lengths

    @cached_property
    def cumulative_lengths(self) -> np.ndarray:
        """Length along the line at every vertex, starting at 0."""
        cumulative = np.concatenate([[0.0], np.cumsum(self.segment_lengths)])
        cumulative.flags.writeable = False
        return cumulative

    @property
    def length(self) -> float:
        return float(self.cumulative_lengths[-1])

    @cached_property
    def segment_directions(self) -> np.ndarray:
        """Heading of every segment in radians."""
        steps = np.diff(self._points, axis=0)
        directions = np.arctan2(steps[:, 1], steps[:, 0])
        directions.flags.writeable = False
        return directions

    def length_at_index(self, index: int) -> float:
        if not 0 <= index < len(self._points):
            raise OutOfRangeError(f"point index {index} outside [0, {len(self._points)})")
        return float(self.cumulative_lengths[index])

    def vertex_fraction(self, index: int) -> float:
        """Fraction of the total length at vertex ``index``."""
        return self.length_at_index(index) / self.length

    @cached_property
    def bounds(self) -> Bounds:
        return Bounds.from_points(self._points)

    @property
    def centroid(self) -> Point2d:
        return self.bounds.midpoint

    # Locations ---------------------------------------------------------

    def _segment_location(self, index: int, position: float) -> Pose2d:
        start = self._points[index]
        step = self._points[index + 1] - start
        t = (position - self.cumulative_lengths[index]) / self.segment_lengths[index]
        x, y = start + t * step
        return Pose2d(float(x), float(y), float(self.segment_directions[index]))

    def location(self, position: float) -> Pose2d:
        """Pose at ``position`` metres along the line.

        Raises
        ------
        OutOfRangeError
            If ``position`` is outside [0, length].
        """
        if not 0.0 <= position <= self.length:
            raise OutOfRangeError(f"position {position} outside [0, {self.length}]")
        index = int(np.searchsorted(self.cumulative_lengths, position, side="right")) - 1
        index = min(max(index, 0), len(self._points) - 2)
        return self._segment_location(index, position)

    def location_extended(self, position: float) -> Pose2d:
        """Like :meth:`location`, extrapolating along the end segments."""
        if position < 0.0:
            return self._segment_location(0, position)
        if position > self.length:
            return self._segment_location(len(self._points) - 2, position)
        return self.location(position)

    def location_fraction(self, fraction: float, tolerance: float = 0.0) -> Pose2d:
        """Pose at a fraction of the length; fractions within ``tolerance``
        outside [0, 1] are clamped."""
        if not -tolerance <= fraction <= 1.0 + tolerance:
            raise OutOfRangeError(f"fraction {fraction} outside [0, 1]")
        fraction = min(max(fraction, 0.0), 1.0)
        return self.location(min(fraction * self.length, self.length))

    def project_orthogonal(self, x: float, y: float) -> float:
        """Fraction along the line of the point closest to (x, y)."""
        start = self._points[:-1]
        step = np.diff(self._points, axis=0)
        rel = np.array([x, y]) - start
        t = np.clip(np.einsum("ij,ij->i", rel, step) / self.segment_lengths ** 2, 0.0, 1.0)
        distance = np.hypot(*(rel - t[:, None] * step).T)
        index = int(np.argmin(distance))
        along = self.cumulative_lengths[index] + t[index] * self.segment_lengths[index]
        return float(along / self.length)

    # Derived lines -----------------------------------------------------

    def reverse(self) -> "Polyline":
        return Polyline(self._points[::-1])

    def extract(self, start: float, end: float) -> "Polyline":
        """Sub-line between two positions along the line.

        Raises
        ------
        OutOfRangeError
            If either position is outside [0, length].
        InvalidArgumentError
            If ``start >= end``.
        """
        if start >= end:
            raise InvalidArgumentError(f"extract start {start} must be below end {end}")
        if start < 0.0 or end > self.length:
            raise OutOfRangeError(f"extract range [{start}, {end}] outside [0, {self.length}]")
        cumulative = self.cumulative_lengths
        inner = self._points[(cumulative > start) & (cumulative < end)]
        first = self.location(start).to_array()
        last = self.location(end).to_array()
        return Polyline.cleaned(np.vstack([first, inner, last]))

    def extract_fractional(self, start_fraction: float, end_fraction: float) -> "Polyline":
        return self.extract(start_fraction * self.length, min(end_fraction * self.length, self.length))

    def truncate(self, length: float) -> "Polyline":
        """Keep the first ``length`` metres of the line."""
        if length <= 0.0 or length > self.length:
            raise OutOfRangeError(f"truncate length {length} outside (0, {self.length}]")
        if length == self.length:
            return self
        return self.extract(0.0, length)

    @staticmethod
    def concatenate(*lines: "Polyline", tolerance: float = 0.0) -> "Polyline":
        """Join lines end to start.

        Raises
        ------
        InvalidArgumentError
            If no line is given or a gap exceeds ``tolerance``.
        """
        if not lines:
            raise InvalidArgumentError("concatenate needs at least one polyline")
        if len(lines) == 1:
            return lines[0]
        parts = [lines[0].points]
        for previous, line in zip(lines, lines[1:]):
            gap = previous.last.distance(line.first)
            if gap > tolerance:
                raise InvalidArgumentError(f"polylines do not connect: gap {gap} exceeds {tolerance}")
            parts.append(line.points[1:])
        return Polyline.cleaned(np.vstack(parts))

    def simplify(self, epsilon: float) -> "Polyline":
        """Ramer-Douglas-Peucker simplification keeping both end points.

        Vertices deviating less than ``epsilon`` from the simplified
        line are removed.  Uses an explicit stack of index ranges.
        """
        if epsilon < 0.0:
            raise InvalidArgumentError(f"simplify epsilon must be >= 0, got {epsilon}")
        coords = self._points
        keep = np.zeros(len(coords), dtype=bool)
        keep[0] = keep[-1] = True
        stack = [(0, len(coords) - 1)]
        while stack:
            lo, hi = stack.pop()
            if hi - lo < 2:
                continue
            chord = coords[hi] - coords[lo]
            rel = coords[lo + 1:hi] - coords[lo]
            chord_length = math.hypot(*chord)
            if chord_length == 0.0:
                distance = np.hypot(*rel.T)
            else:
                distance = np.abs(chord[0] * rel[:, 1] - chord[1] * rel[:, 0]) / chord_length
            index = int(np.argmax(distance))
            if distance[index] > epsilon:
                split = lo + 1 + index
                keep[split] = True
                stack.append((lo, split))
                stack.append((split, hi))
        return Polyline(coords[keep])

    # Value semantics ---------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polyline):
            return NotImplemented
        return self._points.shape == other._points.shape and bool(np.array_equal(self._points, other._points))

    def __hash__(self) -> int:
        return hash(self._points.tobytes())

    def __repr__(self) -> str:
        return f"Polyline(n={len(self)}, length={self.length:.3f})"
