"""Chain of curves joined end to start."""

import math
from typing import Iterator, Sequence, Tuple

import numpy as np

from ..geometry.errors import InvalidArgumentError
from ..geometry.primitives import Pose2d
from .base import Curve, as_params


class CompositeCurve(Curve):
    """Curves chained into one.

    The global parameter is split over the pieces in proportion to
    their lengths; inside a piece it maps linearly onto the piece's own
    parameter.  Flattening with a fixed count therefore samples each
    piece uniformly in its own parameter, which keeps the density
    consistent at the joints of chained Bezier pieces.

    Parameters
    ----------
    curves : sequence of Curve
        Pieces in order; the end of each must meet the start of the
        next within a tolerance scaled to the coordinates.
    """

    def __init__(self, curves: Sequence[Curve]):
        curves = list(curves)
        if not curves:
            raise InvalidArgumentError("composite curve needs at least one piece")
        for previous, curve in zip(curves, curves[1:]):
            a = previous.end_pose
            b = curve.start_pose
            scale = max(1.0, abs(a.x), abs(a.y), previous.length)
            gap = math.hypot(b.x - a.x, b.y - a.y)
            if gap > 1e-9 * scale:
                raise InvalidArgumentError(f"composite pieces do not connect: gap {gap}")
        lengths = np.array([curve.length for curve in curves])
        if lengths.sum() <= 0.0:
            raise InvalidArgumentError("composite curve has zero length")
        self.curves = curves
        self._breaks = np.concatenate([[0.0], np.cumsum(lengths) / lengths.sum()])
        self._breaks[-1] = 1.0
        self._length = float(lengths.sum())

    @property
    def start_pose(self) -> Pose2d:
        return self.curves[0].start_pose

    @property
    def end_pose(self) -> Pose2d:
        return self.curves[-1].end_pose

    @property
    def length(self) -> float:
        return self._length

    @property
    def is_straight(self) -> bool:
        return False

    def pieces(self) -> Iterator[Tuple[Curve, float, float]]:
        for curve, lo, hi in zip(self.curves, self._breaks[:-1], self._breaks[1:]):
            yield curve, float(lo), float(hi)

    def _locate(self, t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        index = np.clip(np.searchsorted(self._breaks, t, side="right") - 1, 0, len(self.curves) - 1)
        lo = self._breaks[index]
        hi = self._breaks[index + 1]
        with np.errstate(divide="ignore", invalid="ignore"):
            local = np.where(hi > lo, (t - lo) / (hi - lo), 0.0)
        return index, np.clip(local, 0.0, 1.0)

    def _gather(self, t, method: str, width: int = 0) -> np.ndarray:
        t = as_params(t)
        index, local = self._locate(t)
        shape = (len(t), width) if width else (len(t),)
        out = np.empty(shape)
        for i in np.unique(index):
            mask = index == i
            out[mask] = getattr(self.curves[i], method)(local[mask])
        return out

    def position(self, t) -> np.ndarray:
        return self._gather(t, "position", 2)

    def direction(self, t) -> np.ndarray:
        return self._gather(t, "direction")

    def curvature(self, t) -> np.ndarray:
        return self._gather(t, "curvature")

    def fraction(self, t) -> np.ndarray:
        t = as_params(t)
        index, local = self._locate(t)
        out = np.empty(len(t))
        for i in np.unique(index):
            mask = index == i
            lo, hi = self._breaks[i], self._breaks[i + 1]
            out[mask] = lo + (hi - lo) * self.curves[i].fraction(local[mask])
        return out

    def param_at_fraction(self, fraction) -> np.ndarray:
        # the length split of the parameter makes fractions and parameters
        # share the piece boundaries
        fraction = as_params(fraction)
        index, local = self._locate(fraction)
        out = np.empty(len(fraction))
        for i in np.unique(index):
            mask = index == i
            lo, hi = self._breaks[i], self._breaks[i + 1]
            out[mask] = lo + (hi - lo) * self.curves[i].param_at_fraction(local[mask])
        return out
