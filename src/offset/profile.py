"""Piecewise-linear lateral offset along a line.

An :class:`OffsetProfile` maps the normalised arc-length fraction of a
reference line to a signed lateral offset, positive to the left of the
direction of travel.  Between knots the offset is interpolated
linearly; outside the first and last knot it is held constant.
"""

from typing import Iterator, Mapping, Tuple, Union

import numpy as np

from ..geometry.errors import InvalidArgumentError

ArrayLike = Union[float, np.ndarray]


class OffsetProfile:
    """Ordered ``(fraction, offset)`` knots.

    Parameters
    ----------
    fractions : array-like
        Strictly increasing fractions in [0, 1].
    offsets : array-like
        Offset at each fraction, same length as ``fractions``.

    Raises
    ------
    InvalidArgumentError
        If fewer than two knots are given, the lengths differ, a value
        is not finite, a fraction lies outside [0, 1] or the fractions
        are not strictly increasing.
    """

    def __init__(self, fractions, offsets):
        f = np.array(fractions, dtype=float)
        o = np.array(offsets, dtype=float)
        if f.ndim != 1 or o.ndim != 1:
            raise InvalidArgumentError("profile fractions and offsets must be 1-D")
        if len(f) != len(o):
            raise InvalidArgumentError(
                f"profile has {len(f)} fractions but {len(o)} offsets")
        if len(f) < 2:
            raise InvalidArgumentError(f"profile needs at least 2 knots, got {len(f)}")
        if not (np.all(np.isfinite(f)) and np.all(np.isfinite(o))):
            raise InvalidArgumentError("profile values must be finite")
        if f[0] < 0.0 or f[-1] > 1.0:
            raise InvalidArgumentError(f"profile fractions must lie in [0, 1], got [{f[0]}, {f[-1]}]")
        if np.any(np.diff(f) <= 0.0):
            raise InvalidArgumentError("profile fractions must be strictly increasing")
        f.flags.writeable = False
        o.flags.writeable = False
        self._fractions = f
        self._offsets = o

    @classmethod
    def constant(cls, offset: float) -> "OffsetProfile":
        return cls([0.0, 1.0], [offset, offset])

    @classmethod
    def linear(cls, start_offset: float, end_offset: float) -> "OffsetProfile":
        return cls([0.0, 1.0], [start_offset, end_offset])

    @classmethod
    def from_mapping(cls, knots: Mapping[float, float]) -> "OffsetProfile":
        """Profile from a ``{fraction: offset}`` mapping in any order."""
        items = sorted(knots.items())
        return cls([f for f, _ in items], [o for _, o in items])

    @property
    def fractions(self) -> np.ndarray:
        return self._fractions

    @property
    def offsets(self) -> np.ndarray:
        return self._offsets

    @property
    def is_constant(self) -> bool:
        return bool(np.all(self._offsets == self._offsets[0]))

    @property
    def max_abs_offset(self) -> float:
        return float(np.max(np.abs(self._offsets)))

    def apply(self, fraction: ArrayLike) -> ArrayLike:
        """Offset at ``fraction``, clamped outside the knot range."""
        value = np.interp(fraction, self._fractions, self._offsets)
        return float(value) if np.ndim(value) == 0 else value

    def slope(self, fraction: ArrayLike) -> ArrayLike:
        """Derivative of the offset with respect to the fraction.

        Zero outside the knot range; at a knot the slope of the
        following piece is used.
        """
        x = np.asarray(fraction, dtype=float)
        slopes = np.diff(self._offsets) / np.diff(self._fractions)
        index = np.clip(np.searchsorted(self._fractions, x, side="right") - 1, 0, len(slopes) - 1)
        inside = (x >= self._fractions[0]) & (x <= self._fractions[-1])
        value = np.where(inside, slopes[index], 0.0)
        return float(value) if np.ndim(value) == 0 else value

    def mirrored(self) -> "OffsetProfile":
        """Profile with every offset negated (other side of the line)."""
        return OffsetProfile(self._fractions, -self._offsets)

    def reversed(self) -> "OffsetProfile":
        """Profile for the reversed line; offsets keep their side relative to the new direction."""
        return OffsetProfile(1.0 - self._fractions[::-1], -self._offsets[::-1])

    def __len__(self) -> int:
        return len(self._fractions)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        for f, o in zip(self._fractions, self._offsets):
            yield float(f), float(o)

    def __eq__(self, other) -> bool:
        if not isinstance(other, OffsetProfile):
            return NotImplemented
        return (np.array_equal(self._fractions, other._fractions)
                and np.array_equal(self._offsets, other._offsets))

    def __hash__(self) -> int:
        return hash((self._fractions.tobytes(), self._offsets.tobytes()))

    def __repr__(self) -> str:
        pairs = ", ".join(f"{f:g}: {o:g}" for f, o in self)
        return f"OffsetProfile({{{pairs}}})"
