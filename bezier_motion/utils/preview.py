#!/usr/bin/env python3
"""
preview.py

- Builds a spline trajectory from waypoints (CSV x,y per line, or the built-in example)
- Prints the fixed-rate sample table the control loop would see
- Optionally plots the center / left / right paths with matplotlib

Usage:
  bezier_preview --v-cruise 1.0 --a-max 0.5 --track-width 0.6 --rate 10 --plot
  bezier_preview --waypoints path.csv --backwards
"""

import argparse
import logging
import sys

import numpy as np

from bezier_motion.exceptions import TrajectoryError
from bezier_motion.utils.time_parameterization import MotionLimits, ShortPathPolicy
from bezier_motion.utils.trajectory import Trajectory, TrajectoryConfig

logger = logging.getLogger(__name__)

DEFAULT_WAYPOINTS = [
    (0.0, 0.0),
    (-2.45, 1.54),
    (-3.7, 4.02),
    (-7.0, 0.0),
    (-7.3, 13.7),
]

TABLE_COLUMNS = ('t', 'x', 'y', 'heading', 'left_x', 'left_y', 'right_x', 'right_y',
                 'v', 'v_left', 'v_right')


def load_waypoints(path):
    """Read x,y rows from a CSV file; returns a list of (x, y) tuples."""
    data = np.loadtxt(path, delimiter=',', ndmin=2)
    if data.shape[1] < 2:
        raise ValueError(f"waypoints file '{path}' needs at least two columns (x,y)")
    return [(float(row[0]), float(row[1])) for row in data]


def sample_table(trajectory, update_rate):
    """One row per control-loop tick, columns as in TABLE_COLUMNS."""
    rows = []
    for s in trajectory.samples(update_rate):
        rows.append((s.time, s.center.x, s.center.y, s.center.heading,
                     s.left.x, s.left.y, s.right.x, s.right.y,
                     s.velocity, s.left_velocity, s.right_velocity))
    return np.array(rows, dtype=float).reshape(-1, len(TABLE_COLUMNS))


def plot_trajectory(trajectory, knots=None):
    import matplotlib.pyplot as plt

    center = np.array([(p.x, p.y) for p in trajectory.center_path])
    left = np.array([(p.x, p.y) for p in trajectory.left_path])
    right = np.array([(p.x, p.y) for p in trajectory.right_path])

    plt.figure(figsize=(8, 6))
    plt.plot(center[:, 0], center[:, 1], 'b-', linewidth=2, label='center')
    plt.plot(left[:, 0], left[:, 1], 'g--', label='left wheel')
    plt.plot(right[:, 0], right[:, 1], 'm--', label='right wheel')
    if knots is not None:
        k = np.asarray(knots, dtype=float)
        plt.plot(k[:, 0], k[:, 1], 'ro', label='knots')
    plt.axis('equal')
    plt.legend()
    plt.title(f'Bezier spline: length={trajectory.arc_length:.3f} m, '
              f'time={trajectory.total_time:.3f} s')
    plt.xlabel('x')
    plt.ylabel('y')
    plt.grid(True)
    plt.show()


def build_parser():
    parser = argparse.ArgumentParser(description='Preview a differential-drive Bezier trajectory')
    parser.add_argument('--waypoints', default='', help='CSV file of x,y knots')
    parser.add_argument('--v-cruise', type=float, default=1.0, help='cruise velocity (m/s)')
    parser.add_argument('--a-max', type=float, default=0.5, help='max acceleration (m/s^2)')
    parser.add_argument('--v-start', type=float, default=0.0, help='start velocity (m/s)')
    parser.add_argument('--v-end', type=float, default=0.0, help='end velocity (m/s)')
    parser.add_argument('--track-width', type=float, default=0.5, help='wheel separation (m)')
    parser.add_argument('--steps', type=int, default=50, help='center path samples')
    parser.add_argument('--rate', type=float, default=10.0, help='sample table rate (Hz)')
    parser.add_argument('--backwards', action='store_true', help='drive the path in reverse')
    parser.add_argument('--short-path', choices=[p.value for p in ShortPathPolicy],
                        default=ShortPathPolicy.REFERENCE.value,
                        help='timing when the path cannot reach cruise velocity')
    parser.add_argument('--plot', action='store_true', help='plot the paths with matplotlib')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    knots = load_waypoints(args.waypoints) if args.waypoints else DEFAULT_WAYPOINTS
    try:
        limits = MotionLimits(args.v_cruise, args.a_max, args.v_start, args.v_end)
        config = TrajectoryConfig(track_width=args.track_width, number_of_steps=args.steps,
                                  short_path_policy=ShortPathPolicy(args.short_path))
        trajectory = Trajectory.through_knots(knots, limits, backwards=args.backwards, config=config)
    except TrajectoryError as e:
        logger.error("cannot build trajectory: %s", e)
        return 1

    print(f"knots={len(knots)} arc_length={trajectory.arc_length:.4f} m "
          f"total_time={trajectory.total_time:.4f} s trapezoidal={trajectory.profile.is_trapezoidal}")
    table = sample_table(trajectory, args.rate)
    print('  '.join(f'{c:>9s}' for c in TABLE_COLUMNS))
    for row in table:
        print('  '.join(f'{v:9.4f}' for v in row))

    if args.plot:
        plot_trajectory(trajectory, knots)
    return 0


if __name__ == '__main__':
    sys.exit(main())
