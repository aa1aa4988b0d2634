# bezier_curve.py
"""
Single Bezier segment of arbitrary degree.

Functions:
- bezier_position(control_points, t, coefficients)
- bezier_derivative(control_points, t, derivative_coefficients)
- bezier_second_derivative(control_points, t, second_coefficients)
- heading_of(dx, dy, backwards)
- pose_at(control_points, t, context, backwards)
- arc_length(control_points, order, lower, upper, context)
- arc_length_sampling(control_points, number_of_points, lower, upper, context)

Class:
- BezierCurve: immutable segment with its arc length computed at construction
"""

import logging
import math

import numpy as np
from scipy.optimize import brentq

from bezier_motion.exceptions import InvalidGeometryError
from bezier_motion.utils.caches import default_context
from bezier_motion.utils.geometry import Pose, as_xy_array, normalize_angle

logger = logging.getLogger(__name__)

DEFAULT_QUADRATURE_ORDER = 16
TANGENT_EPS = 1e-12


def bezier_position(control_points, t, coefficients):
    """Bernstein sum  sum_i C(n,i) (1-t)^(n-i) t^i P_i  for a scalar t."""
    cp = np.asarray(control_points, dtype=float)
    n = cp.shape[0] - 1
    i = np.arange(n + 1)
    basis = np.asarray(coefficients, dtype=float) * (1.0 - t) ** (n - i) * t ** i
    return basis @ cp


def bezier_derivative(control_points, t, derivative_coefficients):
    """
    Analytic derivative dB/dt. Uses the degree n-1 coefficients scaled by n.
    At t == 1 the tangent is taken directly from the last two control points.
    """
    cp = np.asarray(control_points, dtype=float)
    n = cp.shape[0] - 1
    if t == 1.0:
        return n * (cp[-1] - cp[-2])
    i = np.arange(n)
    basis = np.asarray(derivative_coefficients, dtype=float) * (1.0 - t) ** (n - 1 - i) * t ** i
    return n * (basis @ np.diff(cp, axis=0))


def bezier_second_derivative(control_points, t, second_coefficients):
    """d2B/dt2; zero for curves of degree < 2."""
    cp = np.asarray(control_points, dtype=float)
    n = cp.shape[0] - 1
    if n < 2:
        return np.zeros(2)
    i = np.arange(n - 1)
    basis = np.asarray(second_coefficients, dtype=float) * (1.0 - t) ** (n - 2 - i) * t ** i
    return n * (n - 1) * (basis @ np.diff(cp, n=2, axis=0))


def _derivatives(cp, ts, derivative_coefficients):
    """Vectorized derivative for an array of parameters, shape (len(ts), 2)."""
    n = cp.shape[0] - 1
    T = np.asarray(ts, dtype=float)[:, np.newaxis]
    i = np.arange(n)
    basis = np.asarray(derivative_coefficients, dtype=float) * (1.0 - T) ** (n - 1 - i) * T ** i
    d = n * (basis @ np.diff(cp, axis=0))
    d[np.asarray(ts) == 1.0] = n * (cp[-1] - cp[-2])
    return d


def heading_of(dx, dy, backwards=False):
    """atan2 heading, rotated by pi when travelling backwards, in [0, 2*pi)."""
    angle = math.atan2(dy, dx)
    if backwards:
        angle += math.pi
    return normalize_angle(angle)


def pose_at(control_points, t, context=None, backwards=False):
    """Pose on the segment at parameter t; heading follows the analytic tangent."""
    context = context or default_context()
    cp = np.asarray(control_points, dtype=float)
    n = cp.shape[0] - 1
    x, y = bezier_position(cp, t, context.coefficients(n))
    dx, dy = bezier_derivative(cp, t, context.coefficients(n - 1))
    return Pose(x, y, heading_of(dx, dy, backwards))


def arc_length(control_points, order=DEFAULT_QUADRATURE_ORDER, lower=0.0, upper=1.0, context=None):
    """
    Gauss-Legendre estimate of  integral_lower^upper |B'(t)| dt.
    Nodes/weights come from the context's quadrature cache keyed by (order, lower, upper).
    """
    context = context or default_context()
    cp = np.asarray(control_points, dtype=float)
    nodes, weights = context.quadrature(order, lower, upper)
    d = _derivatives(cp, nodes, context.coefficients(cp.shape[0] - 2))
    return float(weights @ np.linalg.norm(d, axis=1))


def arc_length_sampling(control_points, number_of_points=1000, lower=0.0, upper=1.0, context=None):
    """
    Reference estimator: sum of chord lengths between `number_of_points` + 1
    uniformly spaced samples. Converges to `arc_length` as the count grows.
    """
    context = context or default_context()
    cp = np.asarray(control_points, dtype=float)
    coefficients = context.coefficients(cp.shape[0] - 1)
    ts = np.linspace(lower, upper, int(number_of_points) + 1)
    pts = np.array([bezier_position(cp, t, coefficients) for t in ts])
    return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


class BezierCurve:
    """
    Bezier segment through its first and last control point.

    Args:
        control_points: iterable of (x, y), Pose or PathPoint; degree = len - 1 >= 1
        backwards: robot drives the segment in reverse (heading rotated by pi)
        context: MotionContext holding the shared caches (default: process-wide)
        quadrature_order: Gauss-Legendre order used for the arc length

    Raises:
        InvalidGeometryError: fewer than 2 control points, coincident consecutive control
            points or a zero-length end tangent
    """

    def __init__(self, control_points, backwards=False, context=None,
                 quadrature_order=DEFAULT_QUADRATURE_ORDER):
        cp = as_xy_array(control_points, minimum=2)
        cp.flags.writeable = False
        self._cp = cp
        self.backwards = bool(backwards)
        self.context = context or default_context()
        self.quadrature_order = int(quadrature_order)
        self.degree = cp.shape[0] - 1
        self._coefficients = self.context.coefficients(self.degree)
        self._derivative_coefficients = self.context.coefficients(self.degree - 1)

        repeated = np.flatnonzero(np.all(np.diff(cp, axis=0) == 0.0, axis=1))
        if repeated.size:
            raise InvalidGeometryError(
                f"coincident consecutive control points at index {int(repeated[0])}: {cp.tolist()}")
        for t in (0.0, 1.0):
            d = self.derivative_at(t)
            if math.hypot(d[0], d[1]) <= TANGENT_EPS:
                raise InvalidGeometryError(
                    f"zero-length tangent at t={t}: coincident control points {cp.tolist()}")

        self._arc_length = arc_length(cp, self.quadrature_order, 0.0, 1.0, self.context)
        logger.debug("BezierCurve degree=%d arc_length=%.6f backwards=%s",
                     self.degree, self._arc_length, self.backwards)

    @property
    def control_points(self):
        """Read-only (degree + 1, 2) array."""
        return self._cp

    @property
    def segments(self):
        return (self,)

    @property
    def arc_length(self) -> float:
        return self._arc_length

    @property
    def start(self) -> Pose:
        return self.point_at(0.0)

    @property
    def end(self) -> Pose:
        return self.point_at(1.0)

    def position_at(self, t):
        return bezier_position(self._cp, t, self._coefficients)

    def derivative_at(self, t):
        return bezier_derivative(self._cp, t, self._derivative_coefficients)

    def second_derivative_at(self, t):
        return bezier_second_derivative(self._cp, t, self.context.coefficients(max(self.degree - 2, 0)))

    def point_at(self, percentage) -> Pose:
        """Pose at percentage in [0, 1]; values outside are clamped."""
        t = min(max(float(percentage), 0.0), 1.0)
        x, y = self.position_at(t)
        dx, dy = self.derivative_at(t)
        return Pose(x, y, heading_of(dx, dy, self.backwards))

    def arc_length_between(self, lower, upper, order=None) -> float:
        """Arc length over [lower, upper]; the quadrature table is cached under these exact bounds."""
        return arc_length(self._cp, order or self.quadrature_order, lower, upper, self.context)

    def arc_length_sampling(self, number_of_points=1000, lower=0.0, upper=1.0) -> float:
        return arc_length_sampling(self._cp, number_of_points, lower, upper, self.context)

    def arc_length_to(self, percentage) -> float:
        """
        Arc length from the start to `percentage`. Rescales the canonical [0, 1]
        table instead of caching one per bound.
        """
        t = min(max(float(percentage), 0.0), 1.0)
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return self._arc_length
        nodes, weights = self.context.quadrature(self.quadrature_order, 0.0, 1.0)
        d = _derivatives(self._cp, nodes * t, self._derivative_coefficients)
        return float(t * (weights @ np.linalg.norm(d, axis=1)))

    def percentage_at_arc_length(self, s) -> float:
        """Inverse of arc_length_to; s is clamped to [0, arc_length]."""
        if s <= 0.0:
            return 0.0
        if s >= self._arc_length:
            return 1.0
        return float(brentq(lambda p: self.arc_length_to(p) - s, 0.0, 1.0, xtol=1e-12))

    def __repr__(self):
        return f"BezierCurve(degree={self.degree}, arc_length={self._arc_length:.4f})"
