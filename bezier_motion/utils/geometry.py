# geometry.py
"""
Planar pose types shared by the curve, spline and offset utilities.

- Pose: (x, y, heading) with heading normalized to [0, 2*pi)
- PathPoint: a sampled pose plus the drivetrain state at that sample
  (tangent, cumulative distance, velocity, acceleration, time)
"""

import math
from dataclasses import dataclass, replace

import numpy as np

from bezier_motion.exceptions import InvalidGeometryError

TWO_PI = 2.0 * math.pi


def normalize_angle(angle: float) -> float:
    """Normalize angle to [0, 2*pi)."""
    a = math.fmod(angle, TWO_PI)
    if a < 0.0:
        a += TWO_PI
    # fmod of a tiny negative value can round back up to 2*pi
    if a >= TWO_PI:
        a = 0.0
    return a


def wrap_angle(angle: float) -> float:
    """Normalize angle to [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


@dataclass(frozen=True)
class Pose:
    """Position (x, y) and heading in radians."""

    x: float
    y: float
    heading: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))
        object.__setattr__(self, 'heading', normalize_angle(float(self.heading)))

    def distance(self, other) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def offset_perpendicular(self, distance: float) -> 'Pose':
        """
        Shift the pose sideways by `distance`, keeping the heading.
        Positive distances move to the left of the heading, negative to the right.
        """
        return Pose(
            self.x - distance * math.sin(self.heading),
            self.y + distance * math.cos(self.heading),
            self.heading,
        )

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


@dataclass(frozen=True)
class PathPoint:
    """
    One sample of a center or wheel path.

    Args:
        x, y: position (m)
        heading: travel heading (rad, [0, 2*pi))
        dx, dy: path tangent at the sample (derivative with respect to percentage)
        distance: cumulative distance travelled, seeded with the start distance
        velocity: speed along the path at this sample
        acceleration: +a_max, 0 or -a_max depending on the profile phase
        time: seconds since the start of the trajectory
    """

    x: float
    y: float
    heading: float
    dx: float = 0.0
    dy: float = 0.0
    distance: float = 0.0
    velocity: float = 0.0
    acceleration: float = 0.0
    time: float = 0.0

    @property
    def pose(self) -> Pose:
        return Pose(self.x, self.y, self.heading)

    def distance_to(self, other) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def offset(self, lateral: float, **state) -> 'PathPoint':
        """Return a copy shifted `lateral` to the left of the heading, with `state` replaced."""
        shifted = self.pose.offset_perpendicular(lateral)
        return replace(self, x=shifted.x, y=shifted.y, **state)


def as_xy_array(points, minimum: int = 2) -> np.ndarray:
    """
    Convert waypoints (Pose, PathPoint, (x, y) or (x, y, heading) items) into an (N, 2) array.

    Raises:
        InvalidGeometryError: wrong shape, non-finite values or fewer than `minimum` points
    """
    rows = []
    for p in points:
        if isinstance(p, (Pose, PathPoint)):
            rows.append((p.x, p.y))
        else:
            rows.append(tuple(p)[:2])
    if len(rows) < minimum:
        raise InvalidGeometryError(f"need at least {minimum} points, got {len(rows)}")
    try:
        arr = np.asarray(rows, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidGeometryError(f"points must be (x, y) pairs: {e}") from e
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidGeometryError("points must be shape (N,2)")
    if not np.all(np.isfinite(arr)):
        raise InvalidGeometryError("points must be finite")
    return arr
