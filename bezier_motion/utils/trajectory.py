# trajectory.py
"""
Time-profiled Bezier trajectory for a differential-drive robot.

A Trajectory wraps one of the path geometries (BezierCurve or Spline),
computes its motion profile and the sampled center/left/right paths once
at construction, and answers control-loop queries afterwards:

    traj = Trajectory.through_knots(knots, MotionLimits(v_cruise=1.0, a_max=0.5))
    for sample in traj.samples(update_rate=50.0):
        sample.left, sample.right, sample.left_velocity, sample.right_velocity

Query arguments outside their domain (percentage outside [0, 1], arc
length outside [0, arc_length], time outside [0, end_time]) are clamped.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Protocol, Union

from bezier_motion.exceptions import InvalidGeometryError, InvalidKinematicsError
from bezier_motion.utils.bezier_curve import DEFAULT_QUADRATURE_ORDER, TANGENT_EPS, BezierCurve
from bezier_motion.utils.bezier_spline import Spline
from bezier_motion.utils.drive_offset import offset_path, offset_pose
from bezier_motion.utils.geometry import PathPoint, Pose
from bezier_motion.utils.time_parameterization import MotionLimits, MotionProfile, ShortPathPolicy

logger = logging.getLogger(__name__)


class PathGeometry(Protocol):
    """Capabilities shared by BezierCurve and Spline."""

    backwards: bool

    @property
    def arc_length(self) -> float: ...

    def point_at(self, percentage: float) -> Pose: ...

    def derivative_at(self, percentage: float): ...

    def second_derivative_at(self, percentage: float): ...

    def arc_length_to(self, percentage: float) -> float: ...

    def percentage_at_arc_length(self, s: float) -> float: ...


PathVariant = Union[BezierCurve, Spline]


@dataclass(frozen=True)
class TrajectoryConfig:
    """
    Args:
        track_width: distance between left and right wheels (m)
        number_of_steps: center path samples = number_of_steps + 1
        quadrature_order: Gauss-Legendre order for arc lengths
        start_distance: average wheel encoder distance when the trajectory starts
        short_path_policy: timing used when the path cannot reach cruise velocity
    """

    track_width: float = 0.5
    number_of_steps: int = 50
    quadrature_order: int = DEFAULT_QUADRATURE_ORDER
    start_distance: float = 0.0
    short_path_policy: ShortPathPolicy = ShortPathPolicy.REFERENCE

    def __post_init__(self):
        if not math.isfinite(self.track_width) or self.track_width <= 0.0:
            raise InvalidKinematicsError(f"track_width must be > 0, got {self.track_width}")
        if int(self.number_of_steps) < 1:
            raise InvalidKinematicsError(f"number_of_steps must be >= 1, got {self.number_of_steps}")
        if int(self.quadrature_order) < 1:
            raise InvalidKinematicsError(f"quadrature_order must be >= 1, got {self.quadrature_order}")
        if not math.isfinite(self.start_distance):
            raise InvalidKinematicsError(f"start_distance must be finite, got {self.start_distance}")
        object.__setattr__(self, 'short_path_policy', ShortPathPolicy(self.short_path_policy))


@dataclass(frozen=True)
class TrajectorySample:
    """Where the robot and each wheel should be at `time`."""

    time: float
    percentage: float
    distance: float
    center: Pose
    left: Pose
    right: Pose
    velocity: float
    left_velocity: float
    right_velocity: float
    acceleration: float


def curvature(derivative, second_derivative) -> float:
    """Signed curvature (x'y'' - y'x'') / |r'|^3."""
    dx, dy = derivative
    ddx, ddy = second_derivative
    speed = math.hypot(dx, dy)
    if speed <= TANGENT_EPS:
        return 0.0
    return (dx * ddy - dy * ddx) / speed ** 3


class Trajectory:
    """
    Args:
        path: BezierCurve or Spline
        limits: MotionLimits
        config: TrajectoryConfig (defaults if omitted)

    Raises:
        InvalidGeometryError: zero-length tangent at a sampled percentage
        TypeError: path is not one of the supported geometries
    """

    def __init__(self, path: PathVariant, limits: MotionLimits, config: TrajectoryConfig = None):
        if not isinstance(path, (BezierCurve, Spline)):
            raise TypeError(f"path must be a BezierCurve or Spline, got {type(path).__name__}")
        self.path = path
        self.limits = limits
        self.config = config or TrajectoryConfig()
        self.profile = MotionProfile(limits, path.arc_length, self.config.short_path_policy)

        self.center_path = self._sample_center_path()
        self.left_path = offset_path(self.center_path, self.config.track_width, False,
                                     limits, self.arc_length, self.backwards,
                                     self.profile.end_velocity)
        self.right_path = offset_path(self.center_path, self.config.track_width, True,
                                      limits, self.arc_length, self.backwards,
                                      self.profile.end_velocity)
        logger.debug("Trajectory %r arc_length=%.4f total_time=%.4f samples=%d",
                     path, self.arc_length, self.total_time, len(self.center_path))

    @classmethod
    def from_control_points(cls, control_points, limits: MotionLimits, backwards=False,
                            config: TrajectoryConfig = None, context=None):
        """Single Bezier curve of degree len(control_points) - 1."""
        config = config or TrajectoryConfig()
        curve = BezierCurve(control_points, backwards=backwards, context=context,
                            quadrature_order=config.quadrature_order)
        return cls(curve, limits, config)

    @classmethod
    def through_knots(cls, knots, limits: MotionLimits, backwards=False,
                      config: TrajectoryConfig = None, context=None):
        """Cubic spline passing through every knot."""
        config = config or TrajectoryConfig()
        spline = Spline(knots, backwards=backwards, context=context,
                        quadrature_order=config.quadrature_order)
        return cls(spline, limits, config)

    def _sample_center_path(self):
        steps = int(self.config.number_of_steps)
        points = []
        for k in range(steps + 1):
            p = k / steps
            dx, dy = self.path.derivative_at(p)
            if math.hypot(dx, dy) <= TANGENT_EPS:
                raise InvalidGeometryError(f"zero-length tangent at percentage {p:.4f}")
            pose = self.path.point_at(p)
            s = self.path.arc_length_to(p)
            points.append(PathPoint(
                pose.x, pose.y, pose.heading, float(dx), float(dy),
                distance=self.config.start_distance + s,
                velocity=self.profile.velocity_at_arc_length(s),
                acceleration=self.profile.acceleration_at_arc_length(s),
                time=self.profile.time_to_arc_length(s),
            ))
        return tuple(points)

    @property
    def backwards(self) -> bool:
        return self.path.backwards

    @property
    def arc_length(self) -> float:
        return self.path.arc_length

    @property
    def total_time(self) -> float:
        return self.profile.total_time

    @property
    def end_time(self) -> float:
        """Time at which the profile reaches the end of the path (equals total_time unless
        the reference short-path timing is in effect)."""
        return self.profile.end_time

    def point_at(self, percentage) -> Pose:
        return self.path.point_at(percentage)

    def left_point_at(self, percentage) -> Pose:
        return offset_pose(self.path.point_at(percentage), self.config.track_width, False)

    def right_point_at(self, percentage) -> Pose:
        return offset_pose(self.path.point_at(percentage), self.config.track_width, True)

    def arc_length_at(self, percentage) -> float:
        return self.path.arc_length_to(percentage)

    def percentage_at_arc_length(self, s) -> float:
        return self.path.percentage_at_arc_length(s)

    def time_to_arc_length(self, s) -> float:
        return self.profile.time_to_arc_length(s)

    def curvature_at(self, percentage) -> float:
        return curvature(self.path.derivative_at(percentage),
                         self.path.second_derivative_at(percentage))

    def sample_at_time(self, t) -> TrajectorySample:
        t = min(max(float(t), 0.0), self.end_time)
        s = self.profile.distance_at_time(t)
        p = self.path.percentage_at_arc_length(s)
        center = self.path.point_at(p)
        velocity = self.profile.velocity_at_arc_length(s)
        # wheel speeds from v and path curvature; reversing swaps the inner wheel
        turn = self.curvature_at(p) * 0.5 * self.config.track_width
        if self.backwards:
            turn = -turn
        return TrajectorySample(
            time=t,
            percentage=p,
            distance=self.config.start_distance + s,
            center=center,
            left=offset_pose(center, self.config.track_width, False),
            right=offset_pose(center, self.config.track_width, True),
            velocity=velocity,
            left_velocity=velocity * (1.0 - turn),
            right_velocity=velocity * (1.0 + turn),
            acceleration=self.profile.acceleration_at_arc_length(s),
        )

    def samples(self, update_rate) -> Iterator[TrajectorySample]:
        """Yield samples every 1 / update_rate seconds from 0 through end_time."""
        if update_rate <= 0.0:
            raise ValueError("update_rate must be > 0")
        dt = 1.0 / update_rate
        end = self.end_time
        count = int(math.ceil(end / dt - 1e-9)) if end > 0.0 else 0
        for k in range(count + 1):
            yield self.sample_at_time(min(k * dt, end))

    def __repr__(self):
        return (f"Trajectory(path={self.path!r}, arc_length={self.arc_length:.4f}, "
                f"total_time={self.total_time:.4f})")
