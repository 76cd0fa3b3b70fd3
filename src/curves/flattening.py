"""Flattening of analytic curves into polylines.

A flattening criterion decides where a curve is sampled:

* :class:`FixedCount` samples ``segments`` intervals uniformly in the
  curve parameter (per piece for chained curves);
* :class:`MaxAngle`, :class:`MaxDeviation` and
  :class:`MaxDeviationAndAngle` refine adaptively.  Starting from the
  chord, every interval whose angular change or chord deviation exceeds
  the bound is bisected.  Refinement runs breadth first, one level per
  pass over all open intervals, and stops at a configurable depth.

:func:`flatten_offset` samples the curve displaced by an
:class:`~src.offset.profile.OffsetProfile`; errors are measured on the
displaced curve, so refinement tightens where the offset enlarges the
radius or the profile varies.
"""

import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import numpy as np

from ..geometry.cleanup import remove_duplicates, remove_loops, scaled_epsilon
from ..geometry.errors import InvalidArgumentError
from ..geometry.polyline import Polyline
from ..offset.profile import OffsetProfile
from ..utils.angles import normalize_angles
from ..utils.config import DEFAULT_CONFIG, GeometryConfig
from ..utils.diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..utils.logging import get_logger
from .base import Curve

logger = get_logger(__name__)

SEED_SAMPLES = 64
"""Samples used to estimate the total turn of a curve before refining."""

SEED_TURN = math.pi / 2.0
"""Largest turn of a seed interval, keeps wrapped angle differences unambiguous."""


@dataclass(frozen=True)
class FixedCount:
    """Fixed number of segments."""
    segments: int

    def __post_init__(self):
        if not isinstance(self.segments, (int, np.integer)) or self.segments < 2:
            raise InvalidArgumentError(f"FixedCount needs at least 2 segments, got {self.segments}")


@dataclass(frozen=True)
class MaxAngle:
    """Maximum heading change (radians) per segment."""
    angle: float

    def __post_init__(self):
        if not (math.isfinite(self.angle) and self.angle > 0.0):
            raise InvalidArgumentError(f"MaxAngle needs a positive angle, got {self.angle}")


@dataclass(frozen=True)
class MaxDeviation:
    """Maximum distance (m) between a segment and the curve."""
    deviation: float

    def __post_init__(self):
        if not (math.isfinite(self.deviation) and self.deviation > 0.0):
            raise InvalidArgumentError(f"MaxDeviation needs a positive deviation, got {self.deviation}")


@dataclass(frozen=True)
class MaxDeviationAndAngle:
    """Both bounds at once; an interval is split if either is exceeded."""
    deviation: float
    angle: float

    def __post_init__(self):
        if not (math.isfinite(self.deviation) and self.deviation > 0.0):
            raise InvalidArgumentError(f"MaxDeviationAndAngle needs a positive deviation, got {self.deviation}")
        if not (math.isfinite(self.angle) and self.angle > 0.0):
            raise InvalidArgumentError(f"MaxDeviationAndAngle needs a positive angle, got {self.angle}")


Criterion = Union[FixedCount, MaxAngle, MaxDeviation, MaxDeviationAndAngle]
Evaluator = Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray]]


def _centre_evaluator(curve: Curve) -> Evaluator:
    def evaluate(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return curve.position(t), curve.direction(t)
    return evaluate


def _offset_evaluator(curve: Curve, profile: OffsetProfile) -> Evaluator:
    length = curve.length

    def evaluate(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        heading = curve.direction(t)
        fraction = curve.fraction(t)
        offset = profile.apply(fraction)
        rate = profile.slope(fraction) / length
        normal = np.column_stack([-np.sin(heading), np.cos(heading)])
        points = curve.position(t) + offset[:, None] * normal
        # tangent of P + o N is T (1 - kappa o) + o' N
        heading = heading + np.arctan2(rate, 1.0 - curve.curvature(t) * offset)
        return points, heading
    return evaluate


def _fixed_params(curve: Curve, segments: int) -> np.ndarray:
    pieces = list(curve.pieces())
    if len(pieces) == 1:
        return np.linspace(0.0, 1.0, segments + 1)
    # largest remainder over the piece lengths, at least one segment each
    shares = np.array([hi - lo for _, lo, hi in pieces])
    total = max(segments, len(pieces))
    quota = shares * total
    counts = np.maximum(np.floor(quota).astype(int), 1)
    order = np.argsort(-(quota - np.floor(quota)), kind="stable")
    i = 0
    while counts.sum() < total:
        counts[order[i % len(order)]] += 1
        i += 1
    params = [lo + (hi - lo) * np.linspace(0.0, 1.0, n + 1) for (_, lo, hi), n in zip(pieces, counts)]
    return np.unique(np.concatenate(params))


def _seed_params(evaluate: Evaluator) -> np.ndarray:
    t = np.linspace(0.0, 1.0, SEED_SAMPLES + 1)
    _, heading = evaluate(t)
    turn = float(np.sum(np.abs(normalize_angles(np.diff(heading)))))
    intervals = max(1, int(math.ceil(turn / SEED_TURN)))
    return np.linspace(0.0, 1.0, intervals + 1)


def _exceeds(evaluate: Evaluator, ta: np.ndarray, tb: np.ndarray, criterion: Criterion) -> np.ndarray:
    n = len(ta)
    probes = np.concatenate([ta, tb, (3.0 * ta + tb) / 4.0, (ta + tb) / 2.0, (ta + 3.0 * tb) / 4.0])
    points, heading = evaluate(probes)
    pa, pb = points[:n], points[n:2 * n]
    ha, hb, hm = heading[:n], heading[n:2 * n], heading[3 * n:4 * n]
    result = np.zeros(n, dtype=bool)
    if isinstance(criterion, (MaxAngle, MaxDeviationAndAngle)):
        turn = np.abs(normalize_angles(hm - ha)) + np.abs(normalize_angles(hb - hm))
        result |= turn > criterion.angle
    if isinstance(criterion, (MaxDeviation, MaxDeviationAndAngle)):
        chord = pb - pa
        chord_length = np.hypot(*chord.T)
        deviation = np.zeros(n)
        for k in (2, 3, 4):
            rel = points[k * n:(k + 1) * n] - pa
            cross = np.abs(chord[:, 0] * rel[:, 1] - chord[:, 1] * rel[:, 0])
            with np.errstate(divide="ignore", invalid="ignore"):
                distance = np.where(chord_length > 0.0, cross / chord_length, np.hypot(*rel.T))
            deviation = np.maximum(deviation, distance)
        result |= deviation > criterion.deviation
    return result


def _refine(evaluate: Evaluator, params: np.ndarray, criterion: Criterion,
            max_depth: int, diagnostics: Diagnostics) -> np.ndarray:
    params = np.unique(params)
    open_intervals = np.ones(len(params) - 1, dtype=bool)
    for _ in range(max_depth):
        ta = params[:-1][open_intervals]
        tb = params[1:][open_intervals]
        split = _exceeds(evaluate, ta, tb, criterion)
        if not split.any():
            return params
        added = (ta[split] + tb[split]) / 2.0
        params = np.unique(np.concatenate([params, added]))
        is_new = np.isin(params, added)
        open_intervals = is_new[:-1] | is_new[1:]
    ta = params[:-1][open_intervals]
    tb = params[1:][open_intervals]
    remaining = int(np.count_nonzero(_exceeds(evaluate, ta, tb, criterion)))
    if remaining:
        diagnostics.record("flatten_max_depth", depth=max_depth, intervals=remaining)
        logger.warning("flattening stopped at depth %d with %d intervals above %s",
                       max_depth, remaining, criterion)
    return params


def _check_curve(curve: Curve) -> None:
    if not curve.length > 0.0:
        raise InvalidArgumentError(f"cannot flatten a zero-length {type(curve).__name__}")


def _sample_params(curve: Curve, evaluate: Evaluator, criterion: Criterion, extra: np.ndarray,
                   config: GeometryConfig, diagnostics: Diagnostics) -> np.ndarray:
    if isinstance(criterion, FixedCount):
        return _fixed_params(curve, criterion.segments)
    if not isinstance(criterion, (MaxAngle, MaxDeviation, MaxDeviationAndAngle)):
        raise InvalidArgumentError(f"unknown flattening criterion {criterion!r}")
    seeds = np.concatenate([_seed_params(evaluate), extra])
    return _refine(evaluate, seeds, criterion, config.flatten_max_depth, diagnostics)


def flatten(curve: Curve, criterion: Criterion, config: Optional[GeometryConfig] = None,
            diagnostics: Optional[Diagnostics] = None) -> Polyline:
    """Flatten ``curve`` into a polyline.

    Parameters
    ----------
    curve : Curve
        Curve to sample; must have a positive length.
    criterion : FixedCount, MaxAngle, MaxDeviation or MaxDeviationAndAngle
        Sampling rule.
    config : GeometryConfig, optional
        Refinement depth ceiling and duplicate epsilon.
    diagnostics : Diagnostics, optional
        Receives a ``flatten_max_depth`` event when refinement is cut off.

    Returns
    -------
    Polyline
        Points starting and ending exactly at the curve's start and end
        points.  Straight curves always give two points.
    """
    config = config or DEFAULT_CONFIG
    diagnostics = diagnostics or NULL_DIAGNOSTICS
    _check_curve(curve)
    start = curve.start_pose.to_array()
    end = curve.end_pose.to_array()
    if curve.is_straight:
        return Polyline([start, end])
    evaluate = _centre_evaluator(curve)
    params = _sample_params(curve, evaluate, criterion, np.array([]), config, diagnostics)
    points, _ = evaluate(params)
    points[0] = start
    points[-1] = end
    return Polyline.cleaned(points, config.relative_epsilon)


def flatten_offset(curve: Curve, profile: Union[OffsetProfile, float], criterion: Criterion,
                   config: Optional[GeometryConfig] = None,
                   diagnostics: Optional[Diagnostics] = None) -> Polyline:
    """Flatten ``curve`` displaced laterally by ``profile``.

    Each sample is moved perpendicular to the local tangent by the
    profile value at its arc-length fraction, positive to the left.
    Profile knots are always sampled by the adaptive criteria.  The
    result starts and ends exactly at the offset start and end poses and
    has duplicates and self-intersection loops removed.
    """
    config = config or DEFAULT_CONFIG
    diagnostics = diagnostics or NULL_DIAGNOSTICS
    if not isinstance(profile, OffsetProfile):
        profile = OffsetProfile.constant(float(profile))
    _check_curve(curve)
    start = curve.start_pose.offset(profile.apply(0.0)).to_array()
    end = curve.end_pose.offset(profile.apply(1.0)).to_array()
    if curve.is_straight and profile.is_constant:
        return Polyline([start, end])
    evaluate = _offset_evaluator(curve, profile)
    knots = curve.param_at_fraction(profile.fractions)
    params = _sample_params(curve, evaluate, criterion, knots, config, diagnostics)
    points, _ = evaluate(params)
    points[0] = start
    points[-1] = end
    epsilon = scaled_epsilon(points, config.relative_epsilon)
    points = remove_duplicates(points, epsilon)
    points, removed = remove_loops(points)
    if removed:
        diagnostics.record("flatten_offset_loops", removed=removed)
        logger.debug("removed %d points in loops of offset flattening", removed)
    return Polyline.cleaned(points, config.relative_epsilon)
