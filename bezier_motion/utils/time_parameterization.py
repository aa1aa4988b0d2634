# time_parameterization.py
"""
Trapezoidal time parameterization of a path of known length.

Phases: accelerate at a_max from the start velocity up to the cruise
velocity, cruise, decelerate at a_max down to the end velocity. When the
path is too short to reach cruise speed the profile degrades according to
a ShortPathPolicy.

Velocities are magnitudes along the direction of travel.

Classes:
- MotionLimits: kinematic limits for one trajectory
- ShortPathPolicy: how to time a path that cannot reach cruise speed
- ProfilePhase: accelerating / cruising / decelerating
- MotionProfile: total time, time <-> distance maps
"""

import enum
import logging
import math
from dataclasses import dataclass

from bezier_motion.exceptions import InvalidKinematicsError

logger = logging.getLogger(__name__)


def calculate_time(start_velocity, end_velocity, acceleration):
    """Time to change velocity at constant acceleration."""
    return (end_velocity - start_velocity) / acceleration


def distance(start_velocity, acceleration, time):
    """Distance covered at constant acceleration."""
    return start_velocity * time + 0.5 * acceleration * time * time


def time_constant_acceleration(start_velocity, acceleration, s):
    """Invert s = v0 t + a t^2 / 2 for t >= 0."""
    if acceleration == 0.0:
        return s / start_velocity if start_velocity > 0.0 else 0.0
    disc = start_velocity * start_velocity + 2.0 * acceleration * s
    return (-start_velocity + math.sqrt(max(disc, 0.0))) / acceleration


@dataclass(frozen=True)
class MotionLimits:
    """
    Args:
        v_cruise: cruise velocity (> 0)
        a_max: maximum acceleration magnitude (> 0)
        start_velocity: velocity at the first point, in [0, v_cruise]
        end_velocity: velocity at the last point, in [0, v_cruise]

    Raises:
        InvalidKinematicsError
    """

    v_cruise: float
    a_max: float
    start_velocity: float = 0.0
    end_velocity: float = 0.0

    def __post_init__(self):
        for name in ('v_cruise', 'a_max', 'start_velocity', 'end_velocity'):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise InvalidKinematicsError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)
        if self.a_max <= 0.0:
            raise InvalidKinematicsError(f"a_max must be > 0, got {self.a_max}")
        if self.v_cruise <= 0.0:
            raise InvalidKinematicsError(
                f"v_cruise must be > 0 along the direction of travel, got {self.v_cruise}")
        for name in ('start_velocity', 'end_velocity'):
            value = getattr(self, name)
            if value < 0.0 or value > self.v_cruise:
                raise InvalidKinematicsError(
                    f"{name} must be within [0, v_cruise={self.v_cruise}], got {value}")


class ShortPathPolicy(enum.Enum):
    # total_time reported as (v1 - v0) / a_max; motion itself follows the triangular profile
    REFERENCE = 'reference'
    # peak velocity sqrt(a L + (v0^2 + v1^2) / 2), no cruise phase
    TRIANGULAR = 'triangular'


class ProfilePhase(enum.Enum):
    ACCELERATING = 'accelerating'
    CRUISING = 'cruising'
    DECELERATING = 'decelerating'


class MotionProfile:
    """
    Time/velocity profile along `length` metres of path.

    Args:
        limits: MotionLimits
        length: path arc length (>= 0)
        short_path_policy: used when the accelerate + decelerate distances exceed `length`

    Attributes:
        total_time: seconds to traverse the path (the reference value for short paths)
        end_time: time at which the profile reaches `length`
        end_velocity: velocity at `length`
        is_trapezoidal: True when a cruise phase exists
        peak_velocity: highest velocity reached
        accel_distance, cruise_distance, decel_distance: phase lengths
    """

    def __init__(self, limits: MotionLimits, length: float,
                 short_path_policy: ShortPathPolicy = ShortPathPolicy.REFERENCE):
        length = float(length)
        if not math.isfinite(length) or length < 0.0:
            raise InvalidKinematicsError(f"length must be finite and >= 0, got {length}")
        self.limits = limits
        self.length = length
        self.short_path_policy = ShortPathPolicy(short_path_policy)

        v0, v1, vc, a = limits.start_velocity, limits.end_velocity, limits.v_cruise, limits.a_max

        t_accel = calculate_time(v0, vc, a)
        d_accel = distance(v0, a, t_accel)
        t_decel = calculate_time(vc, v1, -a)
        d_decel = distance(vc, -a, t_decel)

        self.is_trapezoidal = d_accel + d_decel <= length
        if self.is_trapezoidal:
            self.peak_velocity = vc
            self.accel_distance = d_accel
            self.decel_distance = d_decel
            self.cruise_distance = length - d_accel - d_decel
            self.total_time = t_accel + self.cruise_distance / vc + t_decel
            self.end_time = self.total_time
            self.end_velocity = v1
        else:
            # positions, velocities and times follow the triangular profile
            self._solve_triangular(v0, v1, a, length)
            if self.short_path_policy is ShortPathPolicy.REFERENCE:
                # known simplification kept for total_time only
                self.total_time = calculate_time(v0, v1, a)
                logger.warning(
                    "path length %.4f too short to reach cruise velocity %.4f; "
                    "using reference total time (v1 - v0) / a_max = %.4f, path ends at %.4f s",
                    length, vc, self.total_time, self.end_time)

        self._t_accel = self._phase_time(v0, self.peak_velocity)
        self._t_cruise = self.cruise_distance / self.peak_velocity if self.peak_velocity > 0.0 else 0.0
        logger.debug("MotionProfile length=%.4f total_time=%.4f trapezoidal=%s peak=%.4f",
                     length, self.total_time, self.is_trapezoidal, self.peak_velocity)

    def _solve_triangular(self, v0, v1, a, length):
        v_peak = math.sqrt(a * length + 0.5 * (v0 * v0 + v1 * v1))
        if v_peak >= max(v0, v1):
            self.peak_velocity = v_peak
            self.accel_distance = (v_peak * v_peak - v0 * v0) / (2.0 * a)
            self.decel_distance = length - self.accel_distance
        elif v1 > v0:
            # end velocity unreachable: accelerate the whole way
            self.peak_velocity = math.sqrt(v0 * v0 + 2.0 * a * length)
            self.accel_distance = length
            self.decel_distance = 0.0
        else:
            # start velocity too high to slow down to v1: decelerate the whole way
            self.peak_velocity = v0
            self.accel_distance = 0.0
            self.decel_distance = length
        self.cruise_distance = 0.0
        v_end = math.sqrt(max(self.peak_velocity ** 2 - 2.0 * a * self.decel_distance, 0.0))
        self.end_velocity = v_end
        self.total_time = (self._phase_time(v0, self.peak_velocity)
                           + (self.peak_velocity - v_end) / a)
        self.end_time = self.total_time

    def _phase_time(self, v_from, v_to):
        return max(v_to - v_from, 0.0) / self.limits.a_max

    def _clamp_distance(self, s):
        return min(max(float(s), 0.0), self.length)

    def time_to_arc_length(self, s) -> float:
        """
        Elapsed time when the path has covered `s` metres (clamped to [0, length]).

        Accelerating: inverts s = v0 t + a t^2 / 2. Cruising: linear.
        Decelerating: the same quadratic with -a from the cruise boundary.
        """
        s = self._clamp_distance(s)
        v0, a = self.limits.start_velocity, self.limits.a_max
        if s <= self.accel_distance:
            return time_constant_acceleration(v0, a, s)
        if s <= self.accel_distance + self.cruise_distance:
            return self._t_accel + (s - self.accel_distance) / self.peak_velocity
        into_decel = s - self.accel_distance - self.cruise_distance
        return (self._t_accel + self._t_cruise
                + time_constant_acceleration(self.peak_velocity, -a, into_decel))

    def velocity_at_arc_length(self, s) -> float:
        s = self._clamp_distance(s)
        v0, a = self.limits.start_velocity, self.limits.a_max
        if s <= self.accel_distance:
            return math.sqrt(v0 * v0 + 2.0 * a * s)
        if s <= self.accel_distance + self.cruise_distance:
            return self.peak_velocity
        into_decel = s - self.accel_distance - self.cruise_distance
        return math.sqrt(max(self.peak_velocity ** 2 - 2.0 * a * into_decel, 0.0))

    def phase_at_arc_length(self, s) -> ProfilePhase:
        s = self._clamp_distance(s)
        if s < self.accel_distance:
            return ProfilePhase.ACCELERATING
        if s <= self.accel_distance + self.cruise_distance and self.cruise_distance > 0.0:
            return ProfilePhase.CRUISING
        if self.decel_distance > 0.0:
            return ProfilePhase.DECELERATING
        return ProfilePhase.ACCELERATING if self.accel_distance > 0.0 else ProfilePhase.CRUISING

    def acceleration_at_arc_length(self, s) -> float:
        phase = self.phase_at_arc_length(s)
        if phase is ProfilePhase.ACCELERATING:
            return self.limits.a_max
        if phase is ProfilePhase.DECELERATING:
            return -self.limits.a_max
        return 0.0

    def distance_at_time(self, t) -> float:
        """Inverse of time_to_arc_length; t is clamped to [0, end_time]."""
        t = max(float(t), 0.0)
        v0, a = self.limits.start_velocity, self.limits.a_max
        if t <= self._t_accel:
            return min(distance(v0, a, t), self.length)
        t -= self._t_accel
        if t <= self._t_cruise:
            return min(self.accel_distance + self.peak_velocity * t, self.length)
        t -= self._t_cruise
        t_decel = self.end_time - self._t_accel - self._t_cruise
        t = min(t, t_decel)
        return min(self.accel_distance + self.cruise_distance
                   + distance(self.peak_velocity, -a, t), self.length)

    def velocity_at_time(self, t) -> float:
        return self.velocity_at_arc_length(self.distance_at_time(t))

    def __repr__(self):
        return (f"MotionProfile(length={self.length:.4f}, total_time={self.total_time:.4f}, "
                f"trapezoidal={self.is_trapezoidal})")
