"""Cubic Bezier curve.

The Bezier parameter is not proportional to arc length.  Length and the
mapping between parameter and arc-length fraction come from a lookup
table of cumulative chord lengths over a dense uniform parameter grid.
"""

import math
from typing import List, Tuple

import numpy as np

from ..geometry.errors import InvalidArgumentError
from ..geometry.primitives import Point2d, Pose2d
from ..utils.angles import angle_difference
from .base import Curve, as_params

LOOKUP_SAMPLES = 1024


class BezierCubic(Curve):
    """Cubic Bezier curve with control points ``p0`` to ``p3``.

    Parameters
    ----------
    p0, p1, p2, p3 : Point2d or array-like of length 2
        Control points.  ``p0`` and ``p3`` must differ.
    """

    def __init__(self, p0, p1, p2, p3):
        controls = np.array([_as_xy(p) for p in (p0, p1, p2, p3)], dtype=float)
        if not np.all(np.isfinite(controls)):
            raise InvalidArgumentError("bezier control points must be finite")
        if np.array_equal(controls[0], controls[3]):
            raise InvalidArgumentError("bezier start and end points coincide")
        controls.flags.writeable = False
        self.controls = controls
        params = np.linspace(0.0, 1.0, LOOKUP_SAMPLES + 1)
        steps = np.hypot(*np.diff(self._evaluate(params), axis=0).T)
        cumulative = np.concatenate([[0.0], np.cumsum(steps)])
        self._lut_params = params
        self._lut_fractions = cumulative / cumulative[-1]
        self._length = float(cumulative[-1])

    @classmethod
    def from_poses(cls, start: Pose2d, end: Pose2d, shape: float = 1.0,
                   weighted: bool = False) -> "BezierCubic":
        """Bezier connecting two poses, tangent to both headings.

        The inner control points lie on the start and end headings.
        Without weighting both handles are ``shape`` times half the
        chord length.  With weighting, the combined handle length is
        divided in proportion to the angle each heading makes with the
        chord, so the end that turns most gets the longer handle.
        """
        if not (math.isfinite(shape) and shape > 0.0):
            raise InvalidArgumentError(f"bezier shape factor must be positive, got {shape}")
        chord = math.hypot(end.x - start.x, end.y - start.y)
        if chord == 0.0:
            raise InvalidArgumentError("bezier start and end points coincide")
        handle = shape * chord / 2.0
        start_handle = end_handle = handle
        if weighted:
            chord_direction = math.atan2(end.y - start.y, end.x - start.x)
            alpha = abs(angle_difference(chord_direction, start.direction))
            beta = abs(angle_difference(chord_direction, end.direction))
            if alpha + beta > 0.0:
                start_handle = 2.0 * handle * alpha / (alpha + beta)
                end_handle = 2.0 * handle * beta / (alpha + beta)
        p1 = (start.x + start_handle * math.cos(start.direction),
              start.y + start_handle * math.sin(start.direction))
        p2 = (end.x - end_handle * math.cos(end.direction),
              end.y - end_handle * math.sin(end.direction))
        return cls((start.x, start.y), p1, p2, (end.x, end.y))

    def _evaluate(self, t: np.ndarray) -> np.ndarray:
        u = 1.0 - t
        basis = np.column_stack([u ** 3, 3.0 * u * u * t, 3.0 * u * t * t, t ** 3])
        return basis @ self.controls

    def _derivatives(self, t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        p = self.controls
        a = p[1] - p[0]
        b = p[2] - 2.0 * p[1] + p[0]
        c = p[3] - 3.0 * p[2] + 3.0 * p[1] - p[0]
        t = t[:, None]
        first = 3.0 * (a + 2.0 * b * t + c * t * t)
        second = 6.0 * (b + c * t)
        return first, second

    @property
    def start_pose(self) -> Pose2d:
        return Pose2d(float(self.controls[0, 0]), float(self.controls[0, 1]), float(self.direction(0.0)[0]))

    @property
    def end_pose(self) -> Pose2d:
        return Pose2d(float(self.controls[3, 0]), float(self.controls[3, 1]), float(self.direction(1.0)[0]))

    @property
    def length(self) -> float:
        return self._length

    def position(self, t) -> np.ndarray:
        return self._evaluate(as_params(t))

    def direction(self, t) -> np.ndarray:
        t = as_params(t)
        first, second = self._derivatives(t)
        tangent = first
        # coinciding control points give a zero derivative at the ends;
        # the second derivative (then the chord) has the limit direction
        degenerate = np.hypot(*tangent.T) == 0.0
        if degenerate.any():
            fallback = np.where(t[:, None] < 0.5, second, -second)
            tangent = np.where(degenerate[:, None], fallback, tangent)
            degenerate = np.hypot(*tangent.T) == 0.0
            if degenerate.any():
                chord = self.controls[3] - self.controls[0]
                tangent = np.where(degenerate[:, None], chord, tangent)
        return np.arctan2(tangent[:, 1], tangent[:, 0])

    def curvature(self, t) -> np.ndarray:
        first, second = self._derivatives(as_params(t))
        cross = first[:, 0] * second[:, 1] - first[:, 1] * second[:, 0]
        speed = np.hypot(*first.T)
        with np.errstate(divide="ignore", invalid="ignore"):
            curvature = cross / speed ** 3
        return np.where(speed > 0.0, curvature, 0.0)

    @property
    def is_straight(self) -> bool:
        rel = self.controls - self.controls[0]
        chord = rel[3]
        cross = chord[0] * rel[:, 1] - chord[1] * rel[:, 0]
        along = rel @ chord
        # inner control points between the ends rule out folding back
        return bool(np.all(cross == 0.0) and np.all((along >= 0.0) & (along <= along[3])))

    def fraction(self, t) -> np.ndarray:
        return np.interp(as_params(t), self._lut_params, self._lut_fractions)

    def param_at_fraction(self, fraction) -> np.ndarray:
        return np.interp(as_params(fraction), self._lut_fractions, self._lut_params)

    def split(self, t: float) -> Tuple["BezierCubic", "BezierCubic"]:
        """Split at parameter ``t`` (de Casteljau)."""
        if not 0.0 < t < 1.0:
            raise InvalidArgumentError(f"bezier split parameter must be in (0, 1), got {t}")
        p = self.controls
        p01 = p[0] + t * (p[1] - p[0])
        p12 = p[1] + t * (p[2] - p[1])
        p23 = p[2] + t * (p[3] - p[2])
        p012 = p01 + t * (p12 - p01)
        p123 = p12 + t * (p23 - p12)
        middle = p012 + t * (p123 - p012)
        return BezierCubic(p[0], p01, p012, middle), BezierCubic(middle, p123, p23, p[3])

    def inflection_params(self) -> List[float]:
        """Parameters in (0, 1) where the curvature changes sign."""
        p = self.controls
        a = p[1] - p[0]
        b = p[2] - 2.0 * p[1] + p[0]
        c = p[3] - 3.0 * p[2] + 3.0 * p[1] - p[0]

        def cross(u, v):
            return float(u[0] * v[1] - u[1] * v[0])

        # cross(B', B'') / 18 = cross(a, b) + cross(a, c) t + cross(b, c) t^2
        roots = np.roots([cross(b, c), cross(a, c), cross(a, b)]) if any(
            (cross(b, c), cross(a, c))) else np.array([])
        return sorted(float(r.real) for r in np.atleast_1d(roots)
                      if abs(r.imag) < 1e-12 and 0.0 < r.real < 1.0)


def _as_xy(point) -> Tuple[float, float]:
    if isinstance(point, (Point2d, Pose2d)):
        return point.x, point.y
    x, y = point
    return float(x), float(y)
