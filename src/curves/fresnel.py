"""Fresnel integrals for clothoid evaluation.

Two flavours are provided:

* :func:`fresnel_cs`, the normalised Fresnel integrals
  ``C(t) = int_0^t cos(pi/2 u^2) du`` and ``S(t)`` likewise, from
  :func:`scipy.special.fresnel`;
* :func:`generalized_fresnel`, the integrals
  ``X = int_0^1 cos(a/2 tau^2 + b tau + c) dtau`` and ``Y`` with sine,
  by composite Gauss-Legendre quadrature.  They stay accurate where the
  closed form through ``C`` and ``S`` loses precision (nearly constant
  curvature) and are the building block of the two-pose clothoid fit.
"""

import math
from typing import Tuple

import numpy as np
from numpy.polynomial.legendre import leggauss
from scipy.special import fresnel

GAUSS_ORDER = 16
_NODES, _WEIGHTS = leggauss(GAUSS_ORDER)
# mapped from [-1, 1] to [0, 1]
_NODES = 0.5 * (_NODES + 1.0)
_WEIGHTS = 0.5 * _WEIGHTS

PHASE_PER_PANEL = 1.0
"""Maximum phase change (radians) covered by one quadrature panel."""


def fresnel_cs(t) -> Tuple[np.ndarray, np.ndarray]:
    """Normalised Fresnel integrals ``(C(t), S(t))``."""
    s, c = fresnel(np.asarray(t, dtype=float))
    return c, s


def _quadrature(a: np.ndarray, b: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    span = float(np.max(np.abs(a) / 2.0 + np.abs(b))) if a.size else 0.0
    panels = max(1, int(math.ceil(span / PHASE_PER_PANEL)))
    starts = np.arange(panels) / panels
    tau = (starts[:, None] + _NODES[None, :] / panels).ravel()
    weights = np.tile(_WEIGHTS / panels, panels)
    return tau, weights


def generalized_fresnel(a, b, c) -> Tuple[np.ndarray, np.ndarray]:
    """``(X, Y)`` with ``X = int_0^1 cos(a/2 tau^2 + b tau + c) dtau``.

    Parameters
    ----------
    a, b, c : float or numpy.ndarray
        Quadratic, linear and constant phase coefficients; arrays
        broadcast against each other.

    Returns
    -------
    (numpy.ndarray, numpy.ndarray)
        Cosine and sine integrals of the broadcast shape.
    """
    a, b, c = np.broadcast_arrays(*(np.asarray(v, dtype=float) for v in (a, b, c)))
    tau, weights = _quadrature(a, b)
    phase = a[..., None] / 2.0 * tau ** 2 + b[..., None] * tau + c[..., None]
    return np.cos(phase) @ weights, np.sin(phase) @ weights


def generalized_fresnel_moment(a, b, c) -> Tuple[np.ndarray, np.ndarray]:
    """Integrals of ``cos`` and ``sin`` of the same phase weighted by ``tau^2 - tau``.

    This is the derivative of :func:`generalized_fresnel` along the
    direction in which ``a`` grows by 2 while ``b`` shrinks by 1, used by
    the Newton iteration of the two-pose clothoid fit.
    """
    a, b, c = np.broadcast_arrays(*(np.asarray(v, dtype=float) for v in (a, b, c)))
    tau, weights = _quadrature(a, b)
    phase = a[..., None] / 2.0 * tau ** 2 + b[..., None] * tau + c[..., None]
    moment = weights * (tau ** 2 - tau)
    return np.cos(phase) @ moment, np.sin(phase) @ moment
