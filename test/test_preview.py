"""bezier_preview command line tests."""

import numpy as np
import pytest

from bezier_motion.utils.preview import (
    DEFAULT_WAYPOINTS,
    TABLE_COLUMNS,
    build_parser,
    load_waypoints,
    main,
    sample_table,
)
from bezier_motion.utils.time_parameterization import MotionLimits
from bezier_motion.utils.trajectory import Trajectory


def test_sample_table(limits):
    traj = Trajectory.through_knots(DEFAULT_WAYPOINTS, limits)
    table = sample_table(traj, 5.0)
    assert table.shape[1] == len(TABLE_COLUMNS)
    assert table[0, 0] == 0.0
    assert table[-1, 0] == pytest.approx(traj.end_time)
    assert tuple(table[-1, 1:3]) == pytest.approx(DEFAULT_WAYPOINTS[-1], abs=1e-6)
    assert np.all(np.diff(table[:, 0]) > 0.0)


def test_load_waypoints(tmp_path):
    path = tmp_path / 'waypoints.csv'
    path.write_text('0,0\n1.5,1\n3,0\n')
    assert load_waypoints(str(path)) == [(0.0, 0.0), (1.5, 1.0), (3.0, 0.0)]


def test_load_waypoints_needs_two_columns(tmp_path):
    path = tmp_path / 'waypoints.csv'
    path.write_text('0\n1\n')
    with pytest.raises(ValueError):
        load_waypoints(str(path))


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.short_path == 'reference'
    assert not args.backwards
    assert args.rate == 10.0


def test_main_prints_table(capsys):
    assert main(['--rate', '5']) == 0
    out = capsys.readouterr().out
    assert out.startswith('knots=5')
    assert 'v_right' in out


def test_main_from_file(tmp_path, capsys):
    path = tmp_path / 'waypoints.csv'
    path.write_text('0,0\n1,1\n2,0\n')
    assert main(['--waypoints', str(path), '--short-path', 'triangular', '--backwards']) == 0
    assert capsys.readouterr().out.startswith('knots=3')


def test_main_rejects_bad_limits(caplog):
    assert main(['--a-max', '0']) == 1
    assert 'cannot build trajectory' in caplog.text


def test_main_rejects_fast_start():
    limits_error = main(['--v-cruise', '1.0', '--v-start', '2.0'])
    assert limits_error == 1
    # sanity check that the same limits are rejected directly
    with pytest.raises(ValueError):
        MotionLimits(1.0, 0.5, start_velocity=2.0)
