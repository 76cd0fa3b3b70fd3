"""Circle constructions used when fitting arcs between points."""

import math
from typing import List

from .errors import InvalidArgumentError
from .primitives import Point2d


def _check_radius(radius: float) -> None:
    if not (math.isfinite(radius) and radius > 0.0):
        raise InvalidArgumentError(f"radius must be positive and finite, got {radius}")


def circle_intersections(center_a: Point2d, radius_a: float,
                         center_b: Point2d, radius_b: float,
                         epsilon: float = 1e-9) -> List[Point2d]:
    """Intersection points of two circles.

    Circles that touch within ``epsilon`` (externally or internally)
    yield exactly one point, the tangent point.  Concentric circles
    yield no points, also when they coincide.

    Parameters
    ----------
    center_a, center_b : Point2d
        Circle centres.
    radius_a, radius_b : float
        Positive radii.
    epsilon : float
        Relative tolerance on the tangency test, scaled by the larger
        radius.

    Returns
    -------
    list of Point2d
        Zero, one or two points; two points are ordered left then right
        of the direction from ``center_a`` to ``center_b``.
    """
    _check_radius(radius_a)
    _check_radius(radius_b)
    dx = center_b.x - center_a.x
    dy = center_b.y - center_a.y
    distance = math.hypot(dx, dy)
    tolerance = epsilon * max(radius_a, radius_b)
    if distance <= tolerance:
        return []
    outer = radius_a + radius_b
    inner = abs(radius_a - radius_b)
    if distance > outer + tolerance or distance < inner - tolerance:
        return []
    ux = dx / distance
    uy = dy / distance
    if abs(distance - outer) <= tolerance or abs(distance - inner) <= tolerance:
        # tangent: a single contact point on the centre line
        side = 1.0 if abs(distance - outer) <= tolerance or radius_a > radius_b else -1.0
        return [Point2d(center_a.x + side * radius_a * ux, center_a.y + side * radius_a * uy)]
    along = (distance * distance + radius_a * radius_a - radius_b * radius_b) / (2.0 * distance)
    half_chord = math.sqrt(max(radius_a * radius_a - along * along, 0.0))
    mx = center_a.x + along * ux
    my = center_a.y + along * uy
    return [
        Point2d(mx - half_chord * uy, my + half_chord * ux),
        Point2d(mx + half_chord * uy, my - half_chord * ux),
    ]


def circle_centers(point_a: Point2d, point_b: Point2d, radius: float,
                   epsilon: float = 1e-9) -> List[Point2d]:
    """Centres of the circles of ``radius`` through two points.

    Returns one centre when the points are a diameter apart (within
    ``epsilon`` relative to the radius), two otherwise, and none when
    they are further apart than the diameter or coincide.
    """
    _check_radius(radius)
    half = point_a.distance(point_b) / 2.0
    if half == 0.0:
        return []
    tolerance = epsilon * radius
    if half > radius + tolerance:
        return []
    middle = point_a.interpolate(point_b, 0.5)
    if abs(half - radius) <= tolerance:
        return [middle]
    height = math.sqrt(radius * radius - half * half)
    nx = -(point_b.y - point_a.y) / (2.0 * half)
    ny = (point_b.x - point_a.x) / (2.0 * half)
    return [
        Point2d(middle.x + height * nx, middle.y + height * ny),
        Point2d(middle.x - height * nx, middle.y - height * ny),
    ]
