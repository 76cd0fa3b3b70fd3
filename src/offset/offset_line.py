"""Lateral offset of polylines.

The offset line of a reference polyline is built in passes over numpy
arrays, each bounded by the number of points:

1. consecutive near-duplicates and near-collinear vertices of the
   reference are removed, using an epsilon scaled to its coordinates;
2. for a variable offset the reference is resampled so the offset
   changes by a bounded step between consecutive vertices;
3. every vertex is displaced: along the miter (bisector scaled by
   ``1 / cos(half turn)``) for moderate turns, and by inserting the end
   points of both adjacent offset segments at sharp kinks, plus an apex
   point on the outside of the kink;
4. interior points closer to the reference than their own offset are
   trimmed, and remaining self-intersection loops are spliced out by a
   forward-only worklist;
5. the result is de-duplicated again.

No pass recurses and every splice shortens the line, so the algorithm
terminates for any finite input.
"""

import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..geometry.cleanup import (
    collapse_collinear,
    is_simple,
    remove_duplicates,
    remove_loops,
    scaled_epsilon,
)
from ..geometry.errors import InvalidArgumentError
from ..geometry.polyline import Polyline
from ..utils.config import DEFAULT_CONFIG, GeometryConfig
from ..utils.diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..utils.logging import get_logger
from .profile import OffsetProfile

logger = get_logger(__name__)

TRIM_CHUNK = 1_000_000
"""Upper bound on point-segment pairs evaluated at once while trimming."""


def _reference_points(line) -> np.ndarray:
    if isinstance(line, Polyline):
        return np.array(line.points)
    coords = np.asarray(line, dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise InvalidArgumentError(f"reference line must have shape (N, 2), got {coords.shape}")
    if len(coords) < 2:
        raise InvalidArgumentError(f"reference line needs at least 2 points, got {len(coords)}")
    if not np.all(np.isfinite(coords)):
        raise InvalidArgumentError("reference line coordinates must be finite")
    return coords


def _fractions(coords: np.ndarray) -> np.ndarray:
    cumulative = np.concatenate([[0.0], np.cumsum(np.hypot(*np.diff(coords, axis=0).T))])
    fractions = cumulative / cumulative[-1]
    fractions[-1] = 1.0
    return fractions


def _resample(coords: np.ndarray, profile: OffsetProfile, config: GeometryConfig,
              diagnostics: Diagnostics) -> Tuple[np.ndarray, np.ndarray]:
    """Insert profile knots and intermediate samples; returns points and fractions."""
    fractions = _fractions(coords)
    knots = profile.fractions[(profile.fractions > 0.0) & (profile.fractions < 1.0)]
    knots = knots[~np.isin(knots, fractions)]
    if len(knots):
        all_fractions = np.union1d(fractions, knots)
        merged = np.column_stack([np.interp(all_fractions, fractions, coords[:, 0]),
                                  np.interp(all_fractions, fractions, coords[:, 1])])
        # vertices keep their exact coordinates
        merged[np.isin(all_fractions, fractions)] = coords
        coords = merged
        fractions = all_fractions
    offsets = profile.apply(fractions)
    steps = np.ceil(np.abs(np.diff(offsets)) / config.offset_max_offset_step).astype(int)
    capped = steps > config.offset_max_resample
    if capped.any():
        diagnostics.record("offset_resample_capped", segments=int(np.count_nonzero(capped)))
        steps = np.minimum(steps, config.offset_max_resample)
    points = [coords[:1]]
    sampled = [fractions[:1]]
    for i, count in enumerate(np.maximum(steps, 1)):
        local = np.linspace(0.0, 1.0, count + 1)[1:]
        points.append(coords[i] + local[:, None] * (coords[i + 1] - coords[i]))
        sampled.append(fractions[i] + local * (fractions[i + 1] - fractions[i]))
    return np.vstack(points), np.concatenate(sampled)


def _displace(coords: np.ndarray, offsets: np.ndarray, kink_angle: float,
              diagnostics: Diagnostics) -> Tuple[np.ndarray, np.ndarray]:
    """Offset every vertex; returns the raw points and the offset each belongs to."""
    steps = np.diff(coords, axis=0)
    unit = steps / np.hypot(*steps.T)[:, None]
    normal = np.column_stack([-unit[:, 1], unit[:, 0]])
    points = [coords[0] + offsets[0] * normal[0]]
    expected = [offsets[0]]
    kinks = 0
    for i in range(1, len(coords) - 1):
        da, db = unit[i - 1], unit[i]
        na, nb = normal[i - 1], normal[i]
        p, o = coords[i], offsets[i]
        turn = math.atan2(da[0] * db[1] - da[1] * db[0], float(np.dot(da, db)))
        if abs(turn) <= kink_angle:
            points.append(p + o * (na + nb) / (1.0 + float(np.dot(na, nb))))
            expected.append(o)
            continue
        kinks += 1
        points.append(p + o * na)
        expected.append(o)
        if turn * o < 0.0:
            # outside of the kink: apex on the bisector
            apex = da - db
            points.append(p + abs(o) * apex / math.hypot(*apex))
            expected.append(o)
        points.append(p + o * nb)
        expected.append(o)
    points.append(coords[-1] + offsets[-1] * normal[-1])
    expected.append(offsets[-1])
    if kinks:
        diagnostics.record("offset_kink", count=kinks)
    return np.array(points), np.array(expected)


def _trim(points: np.ndarray, expected: np.ndarray, coords: np.ndarray,
          epsilon: float) -> Tuple[np.ndarray, int]:
    """Drop interior points closer to the reference than their own offset.

    Distances are measured to the closest point of each segment, end
    points included, so points facing a vertex past the end of a short
    segment are trimmed as well.
    """
    start = coords[:-1]
    step = np.diff(coords, axis=0)
    squared = np.einsum("ij,ij->i", step, step)
    keep = np.ones(len(points), dtype=bool)
    limit = np.abs(expected) - (epsilon + 1e-9 * np.abs(expected))
    candidates = np.flatnonzero(limit > 0.0)
    candidates = candidates[(candidates > 0) & (candidates < len(points) - 1)]
    chunk = max(1, TRIM_CHUNK // max(1, len(start)))
    for lo in range(0, len(candidates), chunk):
        index = candidates[lo:lo + chunk]
        rel = points[index][:, None, :] - start[None, :, :]
        t = np.clip(np.einsum("qsk,sk->qs", rel, step) / squared, 0.0, 1.0)
        gap = rel - t[..., None] * step[None, :, :]
        close = np.hypot(gap[..., 0], gap[..., 1]) < limit[index][:, None]
        keep[index[close.any(axis=1)]] = False
    return points[keep], int(np.count_nonzero(~keep))


def offset_line(line, offset: Union[float, OffsetProfile], config: Optional[GeometryConfig] = None,
                diagnostics: Optional[Diagnostics] = None) -> Polyline:
    """Offset ``line`` laterally, positive to the left of its direction.

    Parameters
    ----------
    line : Polyline or array-like
        Reference line of at least two points.
    offset : float or OffsetProfile
        Constant offset or offset per arc-length fraction.
    config : GeometryConfig, optional
        Kink angle, resampling step and ceiling, duplicate epsilon.
    diagnostics : Diagnostics, optional
        Receives collapse, kink, trim and loop events.

    Returns
    -------
    Polyline
        Offset line whose first and last points are the offset end
        points of the reference.

    Raises
    ------
    InvalidArgumentError
        If the reference has fewer than two distinct points.
    """
    config = config or DEFAULT_CONFIG
    diagnostics = diagnostics or NULL_DIAGNOSTICS
    coords = _reference_points(line)
    profile = offset if isinstance(offset, OffsetProfile) else OffsetProfile.constant(float(offset))

    epsilon = scaled_epsilon(coords, config.relative_epsilon)
    coords = remove_duplicates(coords, epsilon)
    if len(coords) < 2:
        raise InvalidArgumentError("reference line has fewer than 2 distinct points")
    coords, collapsed = collapse_collinear(coords, epsilon)
    if collapsed:
        diagnostics.record("offset_collinear_collapsed", count=collapsed)
        logger.debug("collapsed %d near-collinear reference vertices", collapsed)
    # loops of a self-intersecting reference are part of the shape
    simple = is_simple(coords)

    if profile.is_constant:
        offsets = np.full(len(coords), profile.offsets[0])
    else:
        coords, fractions = _resample(coords, profile, config, diagnostics)
        offsets = profile.apply(fractions)

    points, expected = _displace(coords, offsets, config.offset_kink_angle, diagnostics)
    points, trimmed = _trim(points, expected, coords, epsilon)
    if trimmed:
        diagnostics.record("offset_trimmed", count=trimmed)
    if simple:
        points, removed = remove_loops(points)
        if removed:
            diagnostics.record("offset_loops_removed", count=removed)
            logger.debug("spliced %d points out of offset loops", removed)
    points = remove_duplicates(points, scaled_epsilon(points, config.relative_epsilon))
    if len(points) < 2:
        raise InvalidArgumentError(f"offset {profile!r} collapses the line to a point")
    return Polyline(points)


def offset_line_fractions(line, fractions: Sequence[float], offsets: Sequence[float],
                          config: Optional[GeometryConfig] = None,
                          diagnostics: Optional[Diagnostics] = None) -> Polyline:
    """Offset with knots given as parallel arrays of fractions and offsets."""
    return offset_line(line, OffsetProfile(fractions, offsets), config, diagnostics)


def offset_line_linear(line, start_offset: float, end_offset: float,
                       config: Optional[GeometryConfig] = None,
                       diagnostics: Optional[Diagnostics] = None) -> Polyline:
    """Offset changing linearly from ``start_offset`` to ``end_offset``."""
    return offset_line(line, OffsetProfile.linear(start_offset, end_offset), config, diagnostics)
