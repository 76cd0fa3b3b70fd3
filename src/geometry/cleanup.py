"""Numerical clean-up helpers for point sequences.

Offsetting and flattening produce raw point sequences that may hold
near-duplicate points, nearly collinear runs and small loops where an
offset curve folds back over itself.  The helpers here remove those
artefacts.  All of them work on (N, 2) numpy arrays, never recurse,
and shrink the sequence on every modification, so they terminate in
at most N passes.
"""

from typing import Tuple

import numpy as np


MACHINE_EPSILON = float(np.finfo(float).eps)


def scaled_epsilon(points: np.ndarray, relative: float = 1e-9) -> float:
    """Distance below which two points are considered equal.

    An absolute epsilon is wrong for lines spanning millimetres as
    well as kilometres, so the epsilon is taken relative to the extent
    of the points, but never below what the floating point precision
    at their coordinate magnitude can resolve.

    Parameters
    ----------
    points : numpy.ndarray
        Array of shape (N, 2).
    relative : float
        Epsilon as a fraction of the extent of the points.

    Returns
    -------
    float
        Positive epsilon.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(coords) == 0:
        return MACHINE_EPSILON
    extent = float(np.max(np.ptp(coords, axis=0)))
    magnitude = float(np.max(np.abs(coords)))
    return max(relative * extent, 16.0 * MACHINE_EPSILON * magnitude, np.finfo(float).tiny)


def remove_duplicates(points: np.ndarray, epsilon: float) -> np.ndarray:
    """Drop consecutive points closer than ``epsilon`` to the last kept point.

    The first and the last point of the input are always retained
    (when the last point duplicates the previous kept point, it
    replaces that point), so end points stay exact.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(coords) < 2:
        return coords.copy()
    kept = [coords[0]]
    for point in coords[1:-1]:
        if np.hypot(*(point - kept[-1])) > epsilon:
            kept.append(point)
    last = coords[-1]
    if len(kept) > 1 and np.hypot(*(last - kept[-1])) <= epsilon:
        kept[-1] = last
    elif np.hypot(*(last - kept[-1])) > epsilon:
        kept.append(last)
    return np.array(kept)


def collapse_collinear(points: np.ndarray, epsilon: float) -> Tuple[np.ndarray, int]:
    """Remove interior vertices lying on the chord of their neighbours.

    A vertex is dropped when its perpendicular distance to the line
    from the last kept vertex to the next vertex is at most
    ``epsilon`` and it lies between the two.  Reversals are kept.

    Returns
    -------
    (numpy.ndarray, int)
        Remaining points and the number of collapsed vertices.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(coords) < 3:
        return coords.copy(), 0
    kept = [coords[0]]
    collapsed = 0
    for i in range(1, len(coords) - 1):
        a = kept[-1]
        b = coords[i]
        c = coords[i + 1]
        chord = c - a
        chord_length = float(np.hypot(*chord))
        if chord_length > epsilon:
            deviation = abs(chord[0] * (b[1] - a[1]) - chord[1] * (b[0] - a[0])) / chord_length
            between = np.dot(b - a, chord) > 0.0 and np.dot(b - c, -chord) > 0.0
            if deviation <= epsilon and between:
                collapsed += 1
                continue
        kept.append(b)
    kept.append(coords[-1])
    return np.array(kept), collapsed


def _orient(p: np.ndarray, q: np.ndarray, r: np.ndarray) -> np.ndarray:
    return ((q[..., 0] - p[..., 0]) * (r[..., 1] - p[..., 1])
            - (q[..., 1] - p[..., 1]) * (r[..., 0] - p[..., 0]))


def _within_box(p: np.ndarray, q: np.ndarray, r: np.ndarray, eps: float) -> np.ndarray:
    # q inside the bounding box of p and r
    return ((np.minimum(p[..., 0], r[..., 0]) - eps <= q[..., 0])
            & (q[..., 0] <= np.maximum(p[..., 0], r[..., 0]) + eps)
            & (np.minimum(p[..., 1], r[..., 1]) - eps <= q[..., 1])
            & (q[..., 1] <= np.maximum(p[..., 1], r[..., 1]) + eps))


def _boxes_overlap(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray,
                   pad: float) -> np.ndarray:
    overlap = None
    for k in (0, 1):
        axis = ((np.minimum(a[..., k], b[..., k]) - pad <= np.maximum(c[..., k], d[..., k]))
                & (np.minimum(c[..., k], d[..., k]) - pad <= np.maximum(a[..., k], b[..., k])))
        overlap = axis if overlap is None else overlap & axis
    return overlap


def segments_intersect(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray,
                       eps: float = 0.0) -> np.ndarray:
    """Closed segment intersection test, vectorised by broadcasting.

    Segments ``a-b`` and ``c-d`` intersect when they cross, when an end
    point of one lies on the other, or when they overlap collinearly.
    A crossing also requires overlapping bounding boxes, since the
    orientation signs of disjoint collinear segments are rounding noise.

    Parameters
    ----------
    a, b, c, d : numpy.ndarray
        End points with a trailing axis of length 2; leading axes
        broadcast against each other.
    eps : float
        Tolerance on the orientation determinant (an area) and on the
        collinear overlap test (a distance).

    Returns
    -------
    numpy.ndarray
        Boolean array of the broadcast shape.
    """
    o1 = _orient(a, b, c)
    o2 = _orient(a, b, d)
    o3 = _orient(c, d, a)
    o4 = _orient(c, d, b)
    box_eps = np.sqrt(eps)
    proper = ((((o1 > eps) & (o2 < -eps)) | ((o1 < -eps) & (o2 > eps)))
              & (((o3 > eps) & (o4 < -eps)) | ((o3 < -eps) & (o4 > eps)))
              & _boxes_overlap(a, b, c, d, box_eps))
    touching = (((np.abs(o1) <= eps) & _within_box(a, c, b, box_eps))
                | ((np.abs(o2) <= eps) & _within_box(a, d, b, box_eps))
                | ((np.abs(o3) <= eps) & _within_box(c, a, d, box_eps))
                | ((np.abs(o4) <= eps) & _within_box(c, b, d, box_eps)))
    return proper | touching


def segment_intersection(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray) -> np.ndarray:
    """Intersection point of two segments known to intersect.

    For parallel (collinear overlapping) segments the first point of
    ``c-d`` lying on ``a-b`` is returned, falling back to ``b``.
    """
    r = b - a
    s = d - c
    denominator = r[0] * s[1] - r[1] * s[0]
    scale = float(np.hypot(*r) * np.hypot(*s))
    if abs(denominator) <= MACHINE_EPSILON * scale:
        for candidate in (c, d):
            if _within_box(a, candidate, b, 0.0):
                return np.array(candidate, dtype=float)
        return np.array(b, dtype=float)
    t = ((c[0] - a[0]) * s[1] - (c[1] - a[1]) * s[0]) / denominator
    t = min(max(t, 0.0), 1.0)
    return a + t * r


def _is_closed(coords: np.ndarray) -> bool:
    return len(coords) > 3 and bool(np.array_equal(coords[0], coords[-1]))


class _SegmentSweep:
    """Segments of a point sequence sorted on the lower x of their boxes.

    Candidates for an intersection with segment ``i`` are found by two
    binary searches, widened by the largest segment width, instead of
    testing every later segment.
    """

    def __init__(self, coords: np.ndarray, pad: float):
        start, end = coords[:-1], coords[1:]
        self.lower = np.minimum(start, end) - pad
        self.upper = np.maximum(start, end) + pad
        self.order = np.argsort(self.lower[:, 0], kind="stable")
        self.sorted_lower_x = self.lower[self.order, 0]
        self.max_width = float(np.max(self.upper[:, 0] - self.lower[:, 0]))

    def later_overlapping(self, i: int) -> np.ndarray:
        """Ascending indices ``j > i + 1`` whose boxes overlap that of segment ``i``."""
        lo = np.searchsorted(self.sorted_lower_x, self.lower[i, 0] - self.max_width, side="left")
        hi = np.searchsorted(self.sorted_lower_x, self.upper[i, 0], side="right")
        j = self.order[lo:hi]
        j = j[j > i + 1]
        overlap = ((self.upper[j, 0] >= self.lower[i, 0])
                   & (self.lower[j, 1] <= self.upper[i, 1])
                   & (self.upper[j, 1] >= self.lower[i, 1]))
        return np.sort(j[overlap])


def _crossed(coords: np.ndarray, sweep: _SegmentSweep, i: int, closed: bool, eps: float) -> np.ndarray:
    # later, non-adjacent segments intersecting segment i
    j = sweep.later_overlapping(i)
    if closed and i == 0:
        j = j[j != len(coords) - 2]
    if len(j) == 0:
        return j
    return j[segments_intersect(coords[i], coords[i + 1], coords[j], coords[j + 1], eps)]


def is_simple(points: np.ndarray, eps: float = 0.0) -> bool:
    """True if no two non-adjacent segments of the point sequence intersect.

    A closed sequence (first point equal to the last) may touch itself
    at that shared point.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(coords) < 4:
        return True
    closed = _is_closed(coords)
    sweep = _SegmentSweep(coords, float(np.sqrt(eps)))
    for i in range(len(coords) - 3):
        if len(_crossed(coords, sweep, i, closed, eps)):
            return False
    return True


def remove_loops(points: np.ndarray, eps: float = 0.0) -> Tuple[np.ndarray, int]:
    """Splice out self-intersection loops.

    Segments are visited front to back.  When segment ``i`` intersects
    a later, non-adjacent segment ``j``, everything between them is
    replaced by the intersection point, taking the last such ``j`` so
    that nested loops disappear in one splice.  Every splice removes at
    least one point and the scan position only moves forward, so the
    worklist ends after at most N steps.

    Returns
    -------
    (numpy.ndarray, int)
        Loop-free points and the number of points removed.
    """
    coords = np.asarray(points, dtype=float).reshape(-1, 2).copy()
    closed = _is_closed(coords)
    removed = 0
    sweep = None
    i = 0
    while i < len(coords) - 3:
        if sweep is None:
            sweep = _SegmentSweep(coords, float(np.sqrt(eps)))
        hits = _crossed(coords, sweep, i, closed, eps)
        if len(hits):
            j = int(hits[-1])
            crossing = segment_intersection(coords[i], coords[i + 1], coords[j], coords[j + 1])
            coords = np.vstack([coords[:i + 1], crossing[None, :], coords[j + 1:]])
            removed += j - i - 1
            sweep = None
        i += 1
    return coords, removed
