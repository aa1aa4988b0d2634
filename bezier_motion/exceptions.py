"""Errors raised while building Bezier trajectories."""


class TrajectoryError(ValueError):
    """Base error for invalid trajectory input."""


class InvalidGeometryError(TrajectoryError):
    """Waypoints or control points cannot define a usable path."""


class InvalidKinematicsError(TrajectoryError):
    """Velocity, acceleration or drivetrain limits are inconsistent."""
