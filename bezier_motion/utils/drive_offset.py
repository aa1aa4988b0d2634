# drive_offset.py
"""
Left/right wheel paths for a differential-drive robot.

Each center sample is shifted perpendicular to its heading by half the
track width. Between two samples the wheels cover different distances:

    dl_left  = ds - dtheta * W / 2
    dl_right = ds + dtheta * W / 2

(signs swap when driving backwards). The time for the step is set by the
faster wheel running at the tightest of three bounds: the cruise velocity,
the velocity reachable from the start at a_max, and the velocity from
which the end velocity is still reachable at a_max. Whichever bound is
active labels the step as accelerating, cruising or decelerating.

Functions:
- offset_pose(pose, track_width, is_right_side)
- wheel_step(previous, point, track_width, limits, length, start_distance, backwards)
- offset_path(center_path, track_width, is_right_side, limits, length, backwards)
"""

import math
from collections import namedtuple

from bezier_motion.utils.geometry import Pose, wrap_angle
from bezier_motion.utils.time_parameterization import MotionLimits

WheelStep = namedtuple('WheelStep', ['dl_left', 'dl_right', 'dt', 'acceleration'])


def offset_pose(pose: Pose, track_width: float, is_right_side: bool) -> Pose:
    """Wheel pose for one side; left is +W/2 along the heading normal, right is -W/2."""
    half = 0.5 * track_width
    return pose.offset_perpendicular(-half if is_right_side else half)


def wheel_step(previous, point, track_width, limits: MotionLimits, length,
               start_distance=0.0, backwards=False) -> WheelStep:
    """
    Wheel travel and time between two consecutive center samples.

    Args:
        previous, point: PathPoint samples with cumulative `distance`
        track_width: distance between the wheels
        limits: MotionLimits of the trajectory
        length: total center path length
        start_distance: distance of the first center sample (baseline)
        backwards: robot drives in reverse

    Returns:
        WheelStep(dl_left, dl_right, dt, acceleration)
    """
    ds = point.distance - previous.distance
    turn = wrap_angle(point.heading - previous.heading) * 0.5 * track_width
    if backwards:
        turn = -turn
    dl_left = ds - turn
    dl_right = ds + turn
    constraining = max(abs(dl_left), abs(dl_right))
    if constraining == 0.0:
        return WheelStep(dl_left, dl_right, 0.0, 0.0)

    # distance from the start at the middle of the step
    s = previous.distance - start_distance + 0.5 * ds
    v_accelerating = math.sqrt(limits.start_velocity ** 2 + 2.0 * limits.a_max * max(s, 0.0))
    v_decelerating = math.sqrt(limits.end_velocity ** 2 + 2.0 * limits.a_max * max(length - s, 0.0))

    bound = limits.v_cruise
    acceleration = 0.0
    if v_accelerating < bound and v_accelerating <= v_decelerating:
        bound = v_accelerating
        acceleration = limits.a_max
    elif v_decelerating < bound:
        bound = v_decelerating
        acceleration = -limits.a_max

    if bound <= 0.0:
        return WheelStep(dl_left, dl_right, 0.0, acceleration)
    return WheelStep(dl_left, dl_right, constraining / bound, acceleration)


def offset_path(center_path, track_width, is_right_side, limits: MotionLimits, length,
                backwards=False, end_velocity=None):
    """
    Offset a sampled center path to one wheel.

    The first and last wheel samples take the start/end velocity directly
    (`end_velocity` overrides limits.end_velocity when the profile cannot reach it);
    interior samples get dl / dt from `wheel_step`. Wheel distances start
    from the center path's first distance, times accumulate from 0.

    Args:
        center_path: sequence of PathPoint (cumulative distance set)
        track_width: wheel separation
        is_right_side: True for the right wheel
        limits: MotionLimits
        length: total center path length
        backwards: robot drives in reverse
        end_velocity: velocity the profile actually ends with

    Returns:
        tuple of PathPoint, same length as center_path
    """
    n = len(center_path)
    if n == 0:
        return ()
    half = 0.5 * track_width
    lateral = -half if is_right_side else half
    start_distance = center_path[0].distance
    if end_velocity is None:
        end_velocity = limits.end_velocity

    wheel_distance = start_distance
    time = 0.0
    result = [center_path[0].offset(lateral, distance=wheel_distance,
                                    velocity=limits.start_velocity,
                                    acceleration=0.0, time=0.0)]
    for i in range(1, n):
        step = wheel_step(center_path[i - 1], center_path[i], track_width, limits, length,
                          start_distance, backwards)
        dl = step.dl_right if is_right_side else step.dl_left
        wheel_distance += dl
        time += step.dt
        if i == n - 1:
            velocity, acceleration = end_velocity, 0.0
        else:
            velocity = dl / step.dt if step.dt > 0.0 else 0.0
            acceleration = step.acceleration
        result.append(center_path[i].offset(lateral, distance=wheel_distance, velocity=velocity,
                                            acceleration=acceleration, time=time))
    return tuple(result)
