"""Test differential-drive kinematics and collision resolution.

Test cases:
    - test_action_to_wheel_speeds()
    - test_wheel_speeds_clamped()
    - test_free_motion_integrates_pose()
    - test_turning_in_place()
    - test_drive_into_wall_collides()
    - test_collision_against_obstacle()

Run:
    pytest tests/test_kinematics.py -v
"""

import math
import numpy as np
import pytest

from sim.kinematics import DifferentialDrive


class Body:
    def __init__(self, x, y, theta):
        self.x, self.y, self.theta = x, y, theta
        self.vl, self.vr = 0.0, 0.0


def never(x, y, r):
    return False


@pytest.fixture
def drive():
    return DifferentialDrive(rng=np.random.RandomState(0))


def test_action_to_wheel_speeds(drive):
    body = Body(0, 0, 0)
    drive.drive(body, np.array([1.0, 0.0]))
    assert body.vl == pytest.approx(95.0) and body.vr == pytest.approx(95.0)

    drive.drive(body, np.array([0.0, 1.0]))
    assert body.vl == pytest.approx(-3.2 * 17.0)
    assert body.vr == pytest.approx(3.2 * 17.0)


def test_wheel_speeds_clamped(drive):
    body = Body(0, 0, 0)
    drive.drive(body, np.array([1.0, 1.0]))
    assert body.vr == 120.0
    assert body.vl == pytest.approx(95.0 - 54.4)

    drive.drive(body, np.array([-1.0, 1.0]))
    assert body.vl == -120.0

    drive.drive_unscaled(body, 1000.0, -50.0)
    assert -120.0 <= body.vl <= 120.0 and -120.0 <= body.vr <= 120.0


def test_free_motion_integrates_pose(drive):
    body = Body(100.0, 200.0, math.pi / 2)
    result = drive.step(body, np.array([1.0, 0.0]), 0.03, never)

    assert not result.collision
    assert body.x == pytest.approx(100.0)
    assert body.y == pytest.approx(200.0 + 95.0 * 0.03)
    assert body.theta == pytest.approx(math.pi / 2)
    assert (result.x, result.y, result.theta) == (body.x, body.y, body.theta)


def test_turning_in_place(drive):
    body = Body(100.0, 200.0, 0.0)
    drive.step(body, np.array([0.0, 0.5]), 0.02, never)
    assert body.x == pytest.approx(100.0)
    assert body.y == pytest.approx(200.0)
    # angular = (vr - vl) / wheel_base = turn rate
    assert body.theta == pytest.approx(1.6 * 0.02)


def test_drive_into_wall_collides(empty_env):
    drive = DifferentialDrive(rng=np.random.RandomState(3))
    body = Body(27.0, 300.0, math.pi)
    assert not empty_env.blocked(body.x, body.y, drive.radius)

    result = drive.step(body, np.array([1.0, 0.0]), 0.03, empty_env.blocked)

    assert result.collision
    assert body.x == 27.0 and body.y == 300.0
    assert body.vl == pytest.approx(95.0 * 0.3)
    assert body.vr == pytest.approx(95.0 * 0.3)
    assert body.theta != math.pi
    assert abs(body.theta - math.pi) <= 0.4


def test_collision_against_obstacle(box_env):
    drive = DifferentialDrive(rng=np.random.RandomState(1))
    body = Body(183.0, 300.0, 0.0)
    assert not box_env.blocked(body.x, body.y, drive.radius)

    for _ in range(20):
        drive.step(body, np.array([1.0, 0.0]), 0.03, box_env.blocked)
        assert not box_env.blocked(body.x, body.y, drive.radius)
