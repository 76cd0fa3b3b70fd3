"""Common interface of the analytic curves.

Every curve is parametrised by ``t`` in [0, 1].  The evaluators are
vectorised: they accept a scalar or an array of parameters and return
arrays, so flattening can refine many intervals at once.
"""

import math
from abc import ABC, abstractmethod
from typing import Iterator, Tuple

import numpy as np

from ..geometry.primitives import Pose2d


def as_params(t) -> np.ndarray:
    """Parameters as a 1-D float array."""
    return np.atleast_1d(np.asarray(t, dtype=float))


class Curve(ABC):
    """Analytic plane curve with a start and end pose."""

    @property
    @abstractmethod
    def start_pose(self) -> Pose2d:
        ...

    @property
    @abstractmethod
    def end_pose(self) -> Pose2d:
        ...

    @property
    @abstractmethod
    def length(self) -> float:
        ...

    @abstractmethod
    def position(self, t) -> np.ndarray:
        """Points at parameters ``t`` as an (N, 2) array."""

    @abstractmethod
    def direction(self, t) -> np.ndarray:
        """Tangent headings (radians) at parameters ``t``."""

    @abstractmethod
    def curvature(self, t) -> np.ndarray:
        """Signed curvature at parameters ``t``, positive turning left."""

    @property
    def is_straight(self) -> bool:
        return False

    def fraction(self, t) -> np.ndarray:
        """Arc-length fraction at parameters ``t``."""
        return as_params(t)

    def param_at_fraction(self, fraction) -> np.ndarray:
        """Inverse of :meth:`fraction`."""
        return as_params(fraction)

    def pose(self, t: float) -> Pose2d:
        x, y = self.position(t)[0]
        return Pose2d(float(x), float(y), float(self.direction(t)[0]))

    def pieces(self) -> Iterator[Tuple["Curve", float, float]]:
        """Yield ``(curve, start_fraction, end_fraction)`` of each sub-curve."""
        yield self, 0.0, 1.0

    @property
    def start_curvature(self) -> float:
        return float(self.curvature(0.0)[0])

    @property
    def end_curvature(self) -> float:
        return float(self.curvature(1.0)[0])

    @property
    def start_radius(self) -> float:
        """Radius at the start, infinite for zero curvature."""
        curvature = self.start_curvature
        return math.inf if curvature == 0.0 else 1.0 / abs(curvature)

    @property
    def end_radius(self) -> float:
        curvature = self.end_curvature
        return math.inf if curvature == 0.0 else 1.0 / abs(curvature)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(start={self.start_pose}, length={self.length:.3f})"
