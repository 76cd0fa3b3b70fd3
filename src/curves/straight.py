"""Straight line segment."""

import math

import numpy as np

from ..geometry.errors import InvalidArgumentError
from ..geometry.primitives import Pose2d
from .base import Curve, as_params


class Straight(Curve):
    """Straight segment of ``length`` metres from ``start`` along its heading."""

    def __init__(self, start: Pose2d, length: float):
        if not (math.isfinite(length) and length > 0.0):
            raise InvalidArgumentError(f"straight length must be positive, got {length}")
        self._start = start
        self._length = float(length)

    @property
    def start_pose(self) -> Pose2d:
        return self._start

    @property
    def end_pose(self) -> Pose2d:
        x, y = self.position(1.0)[0]
        return Pose2d(float(x), float(y), self._start.direction)

    @property
    def length(self) -> float:
        return self._length

    @property
    def is_straight(self) -> bool:
        return True

    def position(self, t) -> np.ndarray:
        s = as_params(t) * self._length
        return np.column_stack([
            self._start.x + s * math.cos(self._start.direction),
            self._start.y + s * math.sin(self._start.direction),
        ])

    def direction(self, t) -> np.ndarray:
        return np.full(as_params(t).shape, self._start.direction)

    def curvature(self, t) -> np.ndarray:
        return np.zeros(as_params(t).shape)
