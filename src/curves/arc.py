"""Circular arc."""

import math

import numpy as np

from ..geometry.errors import InvalidArgumentError
from ..geometry.primitives import Pose2d
from .base import Curve, as_params


class Arc(Curve):
    """Circular arc starting at ``start``.

    Parameters
    ----------
    start : Pose2d
        Start point and heading.
    radius : float
        Positive radius.
    left : bool
        Turn side, True for a counter-clockwise (left) turn.
    angle : float
        Non-negative turned angle in radians.  A zero angle is a valid
        value but the arc cannot be flattened.
    """

    def __init__(self, start: Pose2d, radius: float, left: bool, angle: float):
        if not (math.isfinite(radius) and radius > 0.0):
            raise InvalidArgumentError(f"arc radius must be positive, got {radius}")
        if not (math.isfinite(angle) and angle >= 0.0):
            raise InvalidArgumentError(f"arc angle must be >= 0, got {angle}")
        self._start = start
        self.radius = float(radius)
        self.left = bool(left)
        self.angle = float(angle)
        self._sign = 1.0 if left else -1.0
        self.center = start.offset(self._sign * radius)

    @property
    def start_pose(self) -> Pose2d:
        return self._start

    @property
    def end_pose(self) -> Pose2d:
        x, y = self.position(1.0)[0]
        return Pose2d(float(x), float(y), self._start.direction + self._sign * self.angle)

    @property
    def length(self) -> float:
        return self.radius * self.angle

    def position(self, t) -> np.ndarray:
        heading = self.direction(t)
        # the centre lies at sign * radius along the start normal
        return np.column_stack([
            self.center.x + self._sign * self.radius * np.sin(heading),
            self.center.y - self._sign * self.radius * np.cos(heading),
        ])

    def direction(self, t) -> np.ndarray:
        return self._start.direction + self._sign * self.angle * as_params(t)

    def curvature(self, t) -> np.ndarray:
        return np.full(as_params(t).shape, self._sign / self.radius)
