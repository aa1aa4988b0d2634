"""Spline control-point solver tests."""

import math

import numpy as np
import pytest
from scipy.linalg import solve_banded

from bezier_motion.exceptions import InvalidGeometryError
from bezier_motion.utils.bezier_spline import Spline, compute_control_points, thomas_solve


class TestThomasSolve:
    def test_matches_banded_solver(self):
        rng = np.random.default_rng(7)
        n = 9
        a = rng.uniform(0.5, 1.5, n)
        c = rng.uniform(0.5, 1.5, n)
        b = a + c + rng.uniform(1.0, 2.0, n)
        r = rng.normal(size=(n, 2))
        ab = np.zeros((3, n))
        ab[0, 1:] = c[:-1]
        ab[1] = b
        ab[2, :-1] = a[1:]
        assert thomas_solve(a, b, c, r) == pytest.approx(solve_banded((1, 1), ab, r))

    def test_does_not_modify_inputs(self):
        b = np.array([2.0, 4.0, 7.0])
        r = np.array([1.0, 2.0, 3.0])
        thomas_solve([0.0, 1.0, 2.0], b, [1.0, 1.0, 0.0], r)
        assert b.tolist() == [2.0, 4.0, 7.0]
        assert r.tolist() == [1.0, 2.0, 3.0]


class TestComputeControlPoints:
    def test_two_knots_single_straight_segment(self):
        segments = compute_control_points([(0.0, 0.0), (3.0, 3.0)])
        assert len(segments) == 1
        cp = segments[0]
        assert cp[0].tolist() == [0.0, 0.0]
        assert cp[3].tolist() == [3.0, 3.0]
        assert cp[1] == pytest.approx([1.0, 1.0])
        assert cp[2] == pytest.approx([2.0, 2.0])

    def test_three_knots_known_solution(self):
        segments = compute_control_points([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)])
        assert segments[0][1] == pytest.approx([1.0 / 3.0, 0.5])
        assert segments[0][2] == pytest.approx([2.0 / 3.0, 1.0])
        assert segments[1][1] == pytest.approx([4.0 / 3.0, 1.0])
        assert segments[1][2] == pytest.approx([5.0 / 3.0, 0.5])

    def test_collinear_knots_stay_on_line(self, collinear_knots):
        for cp in compute_control_points(collinear_knots):
            for x, y in cp:
                assert y == pytest.approx(0.5 * x)

    def test_segments_join_at_knots(self):
        knots = [(0.0, 0.0), (1.0, 2.0), (3.0, 1.0), (4.0, 4.0), (6.0, 0.0)]
        segments = compute_control_points(knots)
        for i, cp in enumerate(segments):
            assert cp[0].tolist() == list(knots[i])
            assert cp[3].tolist() == list(knots[i + 1])

    def test_too_few_knots(self):
        with pytest.raises(InvalidGeometryError):
            compute_control_points([(0.0, 0.0)])


class TestSpline:
    knots = [(0.0, 0.0), (1.0, 2.0), (3.0, 1.0), (4.0, 4.0), (6.0, 0.0)]

    def test_passes_through_knots(self, context):
        spline = Spline(self.knots, context=context)
        m = len(self.knots) - 1
        for i, (x, y) in enumerate(self.knots):
            p = spline.point_at(i / m)
            assert (p.x, p.y) == pytest.approx((x, y), abs=1e-9)

    def test_c1_continuity(self, context):
        spline = Spline(self.knots, context=context)
        for left, right in zip(spline.segments, spline.segments[1:]):
            assert left.derivative_at(1.0) == pytest.approx(right.derivative_at(0.0))

    def test_c2_continuity(self, context):
        spline = Spline(self.knots, context=context)
        for left, right in zip(spline.segments, spline.segments[1:]):
            assert left.second_derivative_at(1.0) == pytest.approx(right.second_derivative_at(0.0))

    def test_natural_end_conditions(self, context):
        spline = Spline(self.knots, context=context)
        assert spline.segments[0].second_derivative_at(0.0) == pytest.approx([0.0, 0.0], abs=1e-9)
        assert spline.segments[-1].second_derivative_at(1.0) == pytest.approx([0.0, 0.0], abs=1e-9)

    def test_collinear_heading_constant(self, collinear_knots, context):
        spline = Spline(collinear_knots, context=context)
        expected = math.atan2(1.0, 2.0)
        for p in np.linspace(0.0, 1.0, 41):
            assert spline.point_at(p).heading == pytest.approx(expected)

    def test_two_knot_spline_endpoints_exact(self, context):
        spline = Spline([(1.0, -1.0), (4.0, 3.0)], context=context)
        assert len(spline.segments) == 1
        start, end = spline.point_at(0.0), spline.point_at(1.0)
        assert (start.x, start.y) == (1.0, -1.0)
        assert (end.x, end.y) == pytest.approx((4.0, 3.0))
        assert spline.arc_length == pytest.approx(5.0)

    def test_arc_length_is_sum_of_segments(self, context):
        spline = Spline(self.knots, context=context)
        assert spline.arc_length == pytest.approx(sum(s.arc_length for s in spline.segments))
        assert spline.arc_length_to(1.0) == pytest.approx(spline.arc_length)
        assert spline.arc_length_sampling(2000) == pytest.approx(spline.arc_length, rel=1e-4)

    def test_percentage_inverts_arc_length(self, context):
        spline = Spline(self.knots, context=context)
        for p in (0.1, 0.37, 0.5, 0.92):
            s = spline.arc_length_to(p)
            assert spline.percentage_at_arc_length(s) == pytest.approx(p, abs=1e-9)

    def test_locate(self, context):
        spline = Spline(self.knots, context=context)
        assert spline.locate(0.0) == (0, 0.0)
        assert spline.locate(1.0) == (3, 1.0)
        index, t = spline.locate(0.6)
        assert index == 2
        assert t == pytest.approx(0.4)

    def test_backwards_segments(self, context):
        spline = Spline(self.knots, backwards=True, context=context)
        assert all(seg.backwards for seg in spline.segments)
