"""Clothoid (Euler spiral) curves.

A clothoid's curvature changes linearly with arc length,
``kappa(s) = kappa0 + c s`` with ``c = (kappa1 - kappa0) / L``.  The
heading is therefore quadratic in ``s`` and the position is a Fresnel
integral.  Three constructions are supported:

* :meth:`Clothoid.from_poses`, a G1 fit between two poses (iterative);
* :meth:`Clothoid.with_length`, from start pose, length and both end
  curvatures (direct);
* :meth:`Clothoid.with_a_value`, from start pose, the A-value
  ``sqrt(L / |kappa1 - kappa0|)`` and both end curvatures (direct).

The two-pose fit follows Bertolazzi & Frego, "G1 fitting with
clothoids" (2015): in the frame of the chord the heading is
``theta(tau) = phi0 + (delta - A) tau + A tau^2`` and the unknown ``A``
is the root of ``Y(2A, delta - A, phi0) = 0``, solved by Newton
iteration with step halving.
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..geometry.errors import ConvergenceError, InvalidArgumentError
from ..geometry.primitives import Pose2d
from ..utils.angles import angle_difference, rotate_2d
from ..utils.config import DEFAULT_CONFIG, GeometryConfig
from ..utils.diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..utils.logging import get_logger
from .base import Curve, as_params
from .fresnel import fresnel_cs, generalized_fresnel, generalized_fresnel_moment

logger = get_logger(__name__)

ANGLE_TOLERANCE = 2.0 * math.pi / 3600.0
"""Pose angles relative to the chord below this are treated as zero."""

FRESNEL_ARGUMENT_LIMIT = 20.0
"""Largest Fresnel argument evaluated in closed form; beyond it the
curve is integrated by quadrature."""

MAX_STEP_HALVINGS = 30


@dataclass(frozen=True)
class RootResult:
    """Outcome of the bounded two-pose root search."""

    value: float
    """Last iterate of the sharpness parameter ``A``."""

    iterations: int
    converged: bool
    residual: float
    """Absolute value of the end-point mismatch ``Y`` at ``value``."""


def solve_g1(phi0: float, phi1: float, tolerance: float = 1e-12,
             max_iterations: int = 100) -> RootResult:
    """Solve the G1 clothoid fit for the sharpness parameter ``A``.

    Parameters
    ----------
    phi0, phi1 : float
        Start and end headings relative to the chord, in (-pi, pi].
    tolerance : float
        Residual at which the iteration stops.
    max_iterations : int
        Iteration ceiling; hitting it returns ``converged=False``.

    Returns
    -------
    RootResult
        Best iterate, never an unbounded loop.
    """
    delta = phi1 - phi0

    def residual(a: float) -> float:
        return float(generalized_fresnel(2.0 * a, delta - a, phi0)[1])

    value = 3.0 * (phi0 + phi1)
    g = residual(value)
    for iteration in range(max_iterations):
        if abs(g) <= tolerance:
            return RootResult(value, iteration, True, abs(g))
        slope = float(generalized_fresnel_moment(2.0 * value, delta - value, phi0)[0])
        if slope == 0.0 or not math.isfinite(slope):
            return RootResult(value, iteration, False, abs(g))
        step = g / slope
        for _ in range(MAX_STEP_HALVINGS):
            candidate = value - step
            g_candidate = residual(candidate)
            if abs(g_candidate) < abs(g):
                break
            step /= 2.0
        else:
            return RootResult(value, iteration + 1, False, abs(g))
        value, g = candidate, g_candidate
    return RootResult(value, max_iterations, abs(g) <= tolerance, abs(g))


class Clothoid(Curve):
    """Clothoid from ``start`` with the given length and end curvatures.

    The curve parameter is the arc-length fraction.  Prefer the named
    constructors; calling the class directly equals
    :meth:`with_length`.
    """

    def __init__(self, start: Pose2d, length: float, start_curvature: float, end_curvature: float):
        if not (math.isfinite(length) and length > 0.0):
            raise InvalidArgumentError(f"clothoid length must be positive, got {length}")
        if not (math.isfinite(start_curvature) and math.isfinite(end_curvature)):
            raise InvalidArgumentError("clothoid curvatures must be finite")
        self._start = start
        self._origin = start
        self._length = float(length)
        self._k0 = float(start_curvature)
        self._k1 = float(end_curvature)
        self._rate = (self._k1 - self._k0) / self._length
        self._end: Optional[Pose2d] = None
        self._shift = np.zeros(2)
        self.iterations = 0
        self.converged = True

    # Constructors ------------------------------------------------------

    @classmethod
    def with_length(cls, start: Pose2d, length: float, start_curvature: float,
                    end_curvature: float) -> "Clothoid":
        return cls(start, length, start_curvature, end_curvature)

    @classmethod
    def with_a_value(cls, start: Pose2d, a_value: float, start_curvature: float,
                     end_curvature: float) -> "Clothoid":
        """Clothoid with length ``a_value**2 * |end_curvature - start_curvature|``."""
        if not (math.isfinite(a_value) and a_value > 0.0):
            raise InvalidArgumentError(f"clothoid A-value must be positive, got {a_value}")
        change = abs(end_curvature - start_curvature)
        if change == 0.0:
            raise InvalidArgumentError("clothoid A-value needs different start and end curvatures")
        return cls(start, a_value * a_value * change, start_curvature, end_curvature)

    @classmethod
    def from_poses(cls, start: Pose2d, end: Pose2d, config: Optional[GeometryConfig] = None,
                   diagnostics: Optional[Diagnostics] = None) -> "Clothoid":
        """G1 clothoid from ``start`` to ``end``.

        Poses aligned with the chord within :data:`ANGLE_TOLERANCE`
        give a straight, mirror-symmetric poses a circular arc; both
        are reported to ``diagnostics``.  The end point is matched
        exactly: the residual mismatch of the fitted curve is
        distributed linearly over the parameter.

        Raises
        ------
        InvalidArgumentError
            If the two points coincide.
        ConvergenceError
            If the root search does not converge within the configured
            iteration ceiling.
        """
        config = config or DEFAULT_CONFIG
        diagnostics = diagnostics or NULL_DIAGNOSTICS
        dx = end.x - start.x
        dy = end.y - start.y
        distance = math.hypot(dx, dy)
        if distance == 0.0:
            raise InvalidArgumentError("clothoid start and end points coincide")
        chord = math.atan2(dy, dx)
        phi0 = angle_difference(chord, start.direction)
        phi1 = angle_difference(chord, end.direction)

        if abs(phi0) < ANGLE_TOLERANCE and abs(phi1) < ANGLE_TOLERANCE:
            diagnostics.record("clothoid_straight", phi0=phi0, phi1=phi1)
            logger.debug("poses aligned with chord (%.3g, %.3g), using a straight", phi0, phi1)
            root = RootResult(0.0, 0, True, 0.0)
            phi0 = 0.0
            delta = 0.0
        elif abs(phi0 + phi1) < ANGLE_TOLERANCE:
            diagnostics.record("clothoid_arc", phi0=phi0, phi1=phi1)
            root = RootResult(0.0, 0, True, 0.0)
            phi0 = (phi0 - phi1) / 2.0
            delta = -2.0 * phi0
        else:
            root = solve_g1(phi0, phi1, config.clothoid_tolerance, config.clothoid_max_iterations)
            delta = phi1 - phi0
            if not root.converged:
                diagnostics.record("clothoid_no_convergence", iterations=root.iterations,
                                   residual=root.residual)
                raise ConvergenceError(
                    f"clothoid fit did not converge after {root.iterations} iterations "
                    f"(residual {root.residual:.3g})")

        a = root.value
        x_integral = float(generalized_fresnel(2.0 * a, delta - a, phi0)[0])
        if x_integral <= 0.0:
            raise ConvergenceError(f"clothoid fit found no forward solution (A={a:.6g})")
        length = distance / x_integral
        curve = cls(Pose2d(start.x, start.y, chord + phi0), length,
                    (delta - a) / length, (delta + a) / length)
        curve._start = start
        curve._end = end
        curve._shift = end.to_array() - curve._raw_position(np.array([length]))[0]
        curve.iterations = root.iterations
        return curve

    # Evaluation --------------------------------------------------------

    def _raw_position(self, s: np.ndarray) -> np.ndarray:
        x0, y0, theta0 = self._origin.x, self._origin.y, self._origin.direction
        k0, rate = self._k0, self._rate
        if rate == 0.0:
            # arc or straight: chord of length s * sinc(kappa s / 2)
            half = k0 * s / 2.0
            chord = s * np.sinc(half / math.pi)
            return np.column_stack([x0 + chord * np.cos(theta0 + half),
                                    y0 + chord * np.sin(theta0 + half)])
        scale = math.sqrt(math.pi / abs(rate))
        tau0 = (k0 / rate) / scale
        tau = (s + k0 / rate) / scale
        if max(abs(tau0), float(np.max(np.abs(tau)))) <= FRESNEL_ARGUMENT_LIMIT:
            sign = math.copysign(1.0, rate)
            theta_v = theta0 - k0 * k0 / (2.0 * rate)
            c0, s0 = fresnel_cs(tau0)
            c, sn = fresnel_cs(tau)
            # Fresnel frame at the inflection point, rotated onto the curve
            dx, dy = rotate_2d(c - c0, sign * (sn - s0), theta_v)
            return np.column_stack([x0 + scale * dx, y0 + scale * dy])
        # nearly constant curvature, the closed form cancels badly
        x_int, y_int = generalized_fresnel(rate * s * s, k0 * s, theta0)
        return np.column_stack([x0 + s * x_int, y0 + s * y_int])

    def position(self, t) -> np.ndarray:
        t = as_params(t)
        return self._raw_position(t * self._length) + t[:, None] * self._shift

    def direction(self, t) -> np.ndarray:
        s = as_params(t) * self._length
        return self._origin.direction + self._k0 * s + 0.5 * self._rate * s * s

    def curvature(self, t) -> np.ndarray:
        return self._k0 + (self._k1 - self._k0) * as_params(t)

    # Properties --------------------------------------------------------

    @property
    def start_pose(self) -> Pose2d:
        return self._start

    @property
    def end_pose(self) -> Pose2d:
        if self._end is not None:
            return self._end
        x, y = self.position(1.0)[0]
        return Pose2d(float(x), float(y), float(self.direction(1.0)[0]))

    @property
    def length(self) -> float:
        return self._length

    @property
    def start_curvature(self) -> float:
        return self._k0

    @property
    def end_curvature(self) -> float:
        return self._k1

    @property
    def is_straight(self) -> bool:
        return self._k0 == 0.0 and self._k1 == 0.0

    @property
    def a_value(self) -> float:
        """``sqrt(L / |kappa1 - kappa0|)``, infinite for constant curvature."""
        change = abs(self._k1 - self._k0)
        return math.inf if change == 0.0 else math.sqrt(self._length / change)
