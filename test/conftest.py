"""Shared test fixtures."""

import pytest

from bezier_motion.utils.caches import MotionContext
from bezier_motion.utils.time_parameterization import MotionLimits


@pytest.fixture
def context():
    return MotionContext()


@pytest.fixture
def arch_points():
    return [(0.0, 0.0), (1.0, 2.0), (3.0, 2.0), (4.0, 0.0)]


@pytest.fixture
def quarter_turn_points():
    return [(0.0, 0.0), (0.55, 0.0), (1.0, 0.45), (1.0, 1.0)]


@pytest.fixture
def straight_points():
    return [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0)]


@pytest.fixture
def collinear_knots():
    return [(0.0, 0.0), (2.0, 1.0), (4.0, 2.0), (6.0, 3.0), (8.0, 4.0)]


@pytest.fixture
def limits():
    return MotionLimits(v_cruise=2.0, a_max=1.0, start_velocity=0.0, end_velocity=0.0)
