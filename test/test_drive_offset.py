"""Wheel path offset tests."""

import math

import pytest

from bezier_motion.utils.drive_offset import offset_path, offset_pose, wheel_step
from bezier_motion.utils.geometry import PathPoint, Pose
from bezier_motion.utils.time_parameterization import MotionLimits
from bezier_motion.utils.trajectory import Trajectory, TrajectoryConfig

TRACK_WIDTH = 0.5


def _arc_step():
    previous = PathPoint(0.0, 0.0, 0.0, distance=0.0)
    point = PathPoint(0.1, 0.0, 0.1, distance=0.1)
    return previous, point


class TestOffsetPose:
    def test_left_and_right_of_heading(self):
        pose = Pose(1.0, 1.0, math.pi / 2)
        left = offset_pose(pose, TRACK_WIDTH, is_right_side=False)
        right = offset_pose(pose, TRACK_WIDTH, is_right_side=True)
        assert (left.x, left.y) == pytest.approx((0.75, 1.0))
        assert (right.x, right.y) == pytest.approx((1.25, 1.0))
        assert left.heading == right.heading == pose.heading


class TestWheelStep:
    def test_inner_wheel_travels_less(self):
        previous, point = _arc_step()
        limits = MotionLimits(v_cruise=1.0, a_max=1000.0)
        step = wheel_step(previous, point, TRACK_WIDTH, limits, length=10.0)
        assert step.dl_left == pytest.approx(0.075)
        assert step.dl_right == pytest.approx(0.125)
        # outer wheel at cruise velocity
        assert step.dt == pytest.approx(0.125)
        assert step.acceleration == 0.0

    def test_accelerating_bound(self):
        previous, point = _arc_step()
        limits = MotionLimits(v_cruise=1.0, a_max=0.5)
        step = wheel_step(previous, point, TRACK_WIDTH, limits, length=10.0)
        assert step.dt == pytest.approx(0.125 / math.sqrt(0.05))
        assert step.acceleration == 0.5

    def test_decelerating_bound(self):
        previous = PathPoint(0.0, 0.0, 0.0, distance=9.9)
        point = PathPoint(0.1, 0.0, 0.0, distance=10.0)
        limits = MotionLimits(v_cruise=1.0, a_max=0.5)
        step = wheel_step(previous, point, TRACK_WIDTH, limits, length=10.0)
        assert step.dt == pytest.approx(0.1 / math.sqrt(0.05))
        assert step.acceleration == -0.5

    def test_backwards_swaps_wheels(self):
        previous, point = _arc_step()
        limits = MotionLimits(v_cruise=1.0, a_max=1000.0)
        step = wheel_step(previous, point, TRACK_WIDTH, limits, length=10.0, backwards=True)
        assert step.dl_left == pytest.approx(0.125)
        assert step.dl_right == pytest.approx(0.075)

    def test_no_motion(self):
        previous, _ = _arc_step()
        step = wheel_step(previous, previous, TRACK_WIDTH, MotionLimits(1.0, 1.0), length=1.0)
        assert step == (0.0, 0.0, 0.0, 0.0)


class TestOffsetPath:
    def test_straight_line(self, straight_points, limits, context):
        traj = Trajectory.from_control_points(straight_points, limits, context=context)
        assert all(p.y == pytest.approx(0.25) for p in traj.left_path)
        assert all(p.y == pytest.approx(-0.25) for p in traj.right_path)
        for left, right in zip(traj.left_path, traj.right_path):
            assert left.distance == pytest.approx(right.distance)
            assert left.velocity == pytest.approx(right.velocity)

    def test_quarter_turn_distances(self, quarter_turn_points, context):
        limits = MotionLimits(v_cruise=1.0, a_max=0.5, start_velocity=0.2, end_velocity=0.1)
        traj = Trajectory.from_control_points(quarter_turn_points, limits,
                                              config=TrajectoryConfig(track_width=TRACK_WIDTH),
                                              context=context)
        left_end = traj.left_path[-1].distance
        right_end = traj.right_path[-1].distance
        assert right_end - left_end == pytest.approx(TRACK_WIDTH * math.pi / 2)
        assert left_end + right_end == pytest.approx(2.0 * traj.center_path[-1].distance)

    def test_endpoint_velocities(self, quarter_turn_points, context):
        limits = MotionLimits(v_cruise=1.0, a_max=0.5, start_velocity=0.2, end_velocity=0.1)
        traj = Trajectory.from_control_points(quarter_turn_points, limits, context=context)
        for wheel in (traj.left_path, traj.right_path):
            assert wheel[0].velocity == 0.2
            assert wheel[0].time == 0.0
            assert wheel[-1].velocity == pytest.approx(0.1)

    def test_start_distance_seeds_wheels(self, quarter_turn_points, limits, context):
        config = TrajectoryConfig(start_distance=3.0)
        traj = Trajectory.from_control_points(quarter_turn_points, limits, config=config,
                                              context=context)
        assert traj.center_path[0].distance == 3.0
        assert traj.left_path[0].distance == 3.0
        assert traj.right_path[0].distance == 3.0
        assert traj.center_path[-1].distance == pytest.approx(3.0 + traj.arc_length)

    def test_wheel_speeds_and_times(self, quarter_turn_points, context):
        limits = MotionLimits(v_cruise=1.0, a_max=0.5)
        traj = Trajectory.from_control_points(quarter_turn_points, limits, context=context)
        for wheel in (traj.left_path, traj.right_path):
            assert all(abs(p.velocity) <= limits.v_cruise + 1e-9 for p in wheel[1:-1])
            times = [p.time for p in wheel]
            assert all(b >= a for a, b in zip(times, times[1:]))
        # both wheels share the step times
        assert [p.time for p in traj.left_path] == [p.time for p in traj.right_path]

    def test_empty_center_path(self, limits):
        assert offset_path((), TRACK_WIDTH, False, limits, 0.0) == ()
