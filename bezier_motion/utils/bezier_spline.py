# bezier_spline.py
"""
Cubic Bezier spline through a list of knots (C1 continuous at every interior knot).

Control points follow the standard derivation
(https://www.particleincell.com/2012/bezier-splines/):

    first row:     2 P1_0     +   P1_1                 = K_0 + 2 K_1
    interior rows:   P1_{i-1} + 4 P1_i + P1_{i+1}      = 4 K_i + 2 K_{i+1}
    last row:      2 P1_{n-2} + 7 P1_{n-1}             = 8 K_{n-1} + K_n

    P2_i     = 2 K_{i+1} - P1_{i+1}      (i < n-1)
    P2_{n-1} = (K_n + P1_{n-1}) / 2

Functions:
- thomas_solve(a, b, c, r)
- compute_control_points(knots)

Class:
- Spline: chain of cubic BezierCurve segments
"""

import logging

import numpy as np
from scipy.optimize import brentq

from bezier_motion.utils.bezier_curve import DEFAULT_QUADRATURE_ORDER, BezierCurve
from bezier_motion.utils.caches import default_context
from bezier_motion.utils.geometry import Pose, as_xy_array

logger = logging.getLogger(__name__)


def thomas_solve(a, b, c, r):
    """
    Solve a tri-diagonal system with the Thomas algorithm.

    Args:
        a: sub-diagonal (a[0] unused), length n
        b: main diagonal, length n
        c: super-diagonal (c[-1] unused), length n
        r: right-hand side, shape (n,) or (n, k) to solve k systems at once

    Returns:
        x: same shape as r
    """
    b = np.array(b, dtype=float)
    r = np.array(r, dtype=float)
    a = np.asarray(a, dtype=float)
    c = np.asarray(c, dtype=float)
    n = b.shape[0]
    for i in range(1, n):
        m = a[i] / b[i - 1]
        b[i] = b[i] - m * c[i - 1]
        r[i] = r[i] - m * r[i - 1]
    x = np.empty_like(r)
    x[n - 1] = r[n - 1] / b[n - 1]
    for i in range(n - 2, -1, -1):
        x[i] = (r[i] - c[i] * x[i + 1]) / b[i]
    return x


def compute_control_points(knots):
    """
    Cubic Bezier control points for every segment between consecutive knots.

    Args:
        knots: (N, 2) array-like, N >= 2

    Returns:
        list of N-1 arrays of shape (4, 2): [K_i, P1_i, P2_i, K_{i+1}]
    """
    K = as_xy_array(knots, minimum=2)
    n = K.shape[0] - 1

    if n == 1:
        # single segment: straight line with evenly spaced handles
        return [np.array([K[0], (2.0 * K[0] + K[1]) / 3.0, (K[0] + 2.0 * K[1]) / 3.0, K[1]])]

    a = np.ones(n)
    b = np.full(n, 4.0)
    c = np.ones(n)
    r = 4.0 * K[:-1] + 2.0 * K[1:]

    a[0] = 0.0
    b[0] = 2.0
    r[0] = K[0] + 2.0 * K[1]

    a[n - 1] = 2.0
    b[n - 1] = 7.0
    c[n - 1] = 0.0
    r[n - 1] = 8.0 * K[n - 1] + K[n]

    # both axes at once: r has shape (n, 2)
    p1 = thomas_solve(a, b, c, r)

    p2 = np.empty_like(p1)
    p2[:-1] = 2.0 * K[1:-1] - p1[1:]
    p2[-1] = 0.5 * (K[n] + p1[-1])

    return [np.array([K[i], p1[i], p2[i], K[i + 1]]) for i in range(n)]


class Spline:
    """
    Multi-segment cubic path through every knot.

    Percentages map uniformly onto segments: with m segments, percentage p
    falls in segment floor(p * m) at local parameter p * m - floor(p * m).

    Args:
        knots: iterable of (x, y), Pose or PathPoint; at least 2
        backwards: robot drives the path in reverse
        context: MotionContext holding the shared caches
        quadrature_order: Gauss-Legendre order for segment arc lengths
    """

    def __init__(self, knots, backwards=False, context=None,
                 quadrature_order=DEFAULT_QUADRATURE_ORDER):
        self.knots = tuple(Pose(x, y) for x, y in as_xy_array(knots, minimum=2))
        self.backwards = bool(backwards)
        self.context = context or default_context()
        self.quadrature_order = int(quadrature_order)
        self._segments = tuple(
            BezierCurve(cp, backwards=self.backwards, context=self.context,
                        quadrature_order=self.quadrature_order)
            for cp in compute_control_points([(k.x, k.y) for k in self.knots])
        )
        lengths = np.array([seg.arc_length for seg in self._segments])
        self._cumulative = np.concatenate(([0.0], np.cumsum(lengths)))
        logger.debug("Spline knots=%d segments=%d arc_length=%.6f",
                     len(self.knots), len(self._segments), self.arc_length)

    @property
    def segments(self):
        return self._segments

    @property
    def control_points(self):
        """Per-segment (4, 2) control point arrays."""
        return [seg.control_points for seg in self._segments]

    @property
    def arc_length(self) -> float:
        return float(self._cumulative[-1])

    @property
    def degree(self) -> int:
        return len(self.knots) - 1

    def locate(self, percentage):
        """Return (segment index, local parameter) for a global percentage, clamped to [0, 1]."""
        p = min(max(float(percentage), 0.0), 1.0)
        m = len(self._segments)
        scaled = p * m
        index = min(int(scaled), m - 1)
        return index, scaled - index

    def point_at(self, percentage) -> Pose:
        index, t = self.locate(percentage)
        return self._segments[index].point_at(t)

    def derivative_at(self, percentage):
        """Tangent with respect to the global percentage (chain rule factor m)."""
        index, t = self.locate(percentage)
        return len(self._segments) * self._segments[index].derivative_at(t)

    def second_derivative_at(self, percentage):
        index, t = self.locate(percentage)
        return len(self._segments) ** 2 * self._segments[index].second_derivative_at(t)

    def arc_length_to(self, percentage) -> float:
        index, t = self.locate(percentage)
        return float(self._cumulative[index] + self._segments[index].arc_length_to(t))

    def arc_length_sampling(self, number_of_points=1000) -> float:
        return sum(seg.arc_length_sampling(number_of_points) for seg in self._segments)

    def percentage_at_arc_length(self, s) -> float:
        if s <= 0.0:
            return 0.0
        if s >= self.arc_length:
            return 1.0
        return float(brentq(lambda p: self.arc_length_to(p) - s, 0.0, 1.0, xtol=1e-12))

    def __repr__(self):
        return f"Spline(knots={len(self.knots)}, arc_length={self.arc_length:.4f})"
