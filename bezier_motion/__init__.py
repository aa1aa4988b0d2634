"""
Bezier trajectory generation for differential-drive robots.

    from bezier_motion import MotionLimits, Trajectory

    traj = Trajectory.through_knots([(0, 0), (1, 1), (2, 0)], MotionLimits(v_cruise=1.0, a_max=0.5))
"""

from .exceptions import InvalidGeometryError, InvalidKinematicsError, TrajectoryError
from .utils.bezier_curve import BezierCurve
from .utils.bezier_spline import Spline, compute_control_points
from .utils.caches import MotionContext, default_context, reset_default_context
from .utils.geometry import PathPoint, Pose
from .utils.time_parameterization import MotionLimits, MotionProfile, ShortPathPolicy
from .utils.trajectory import Trajectory, TrajectoryConfig, TrajectorySample

__all__ = [
    "BezierCurve",
    "Spline",
    "compute_control_points",
    "Trajectory",
    "TrajectoryConfig",
    "TrajectorySample",
    "MotionLimits",
    "MotionProfile",
    "ShortPathPolicy",
    "Pose",
    "PathPoint",
    "MotionContext",
    "default_context",
    "reset_default_context",
    "TrajectoryError",
    "InvalidGeometryError",
    "InvalidKinematicsError",
]
