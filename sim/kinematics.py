"""
sim/kinematics.py

Differential-drive kinematics with collision resolution.

Action → wheel speeds:
    forward = action[0] * forward_scale
    turn    = action[1] * turn_scale
    vl = forward - turn * wheel_base / 2
    vr = forward + turn * wheel_base / 2       (each clamped to ±max_wheel_speed)

Wheel speeds → pose (explicit Euler over dt):
    v     = (vl + vr) / 2
    omega = (vr - vl) / wheel_base
    x += cos(theta) * v * dt
    y += sin(theta) * v * dt
    theta += omega * dt

The proposed pose is tested against the environment before it is
committed. A blocked move leaves position and heading in place, jitters
the heading and damps both wheels.
"""

import math
import numpy as np
from typing import Callable, NamedTuple, Optional


class StepResult(NamedTuple):
    collision: bool
    x: float
    y: float
    theta: float


class DifferentialDrive:
    """
    Two-wheel kinematic model.

    Operates on any body exposing mutable x, y, theta, vl, vr attributes.
    It owns no state besides its constants and its random generator.
    """

    def __init__(
        self,
        radius: float = 16.0,
        wheel_base: float = 34.0,
        max_wheel_speed: float = 120.0,
        forward_scale: float = 95.0,
        turn_scale: float = 3.2,
        bounce_angle: float = 0.4,
        bounce_damping: float = 0.3,
        rng: Optional[np.random.RandomState] = None
    ):
        assert radius > 0, "Radius must be positive"
        assert wheel_base > 0, "Wheel base must be positive"
        assert max_wheel_speed > 0, "Max wheel speed must be positive"

        self.radius = radius
        self.wheel_base = wheel_base
        self.max_wheel_speed = max_wheel_speed
        self.forward_scale = forward_scale
        self.turn_scale = turn_scale
        self.bounce_angle = bounce_angle
        self.bounce_damping = bounce_damping
        self.rng = rng if rng is not None else np.random.RandomState()

    # --------------------------------------------------
    # Control
    # --------------------------------------------------

    def _clamp_wheel(self, v: float) -> float:
        return min(max(v, -self.max_wheel_speed), self.max_wheel_speed)

    def drive_unscaled(self, body, forward: float, turn: float) -> None:
        """Set wheel speeds from a forward speed (units/s) and turn rate (rad/s)."""
        half = turn * self.wheel_base / 2.0
        body.vl = self._clamp_wheel(forward - half)
        body.vr = self._clamp_wheel(forward + half)

    def drive(self, body, action: np.ndarray) -> None:
        """Set wheel speeds from a normalized [throttle, turn] action."""
        assert len(action) == 2, "Action must be 2D"
        self.drive_unscaled(
            body,
            float(action[0]) * self.forward_scale,
            float(action[1]) * self.turn_scale
        )

    # --------------------------------------------------
    # Physics update
    # --------------------------------------------------

    def integrate(
        self,
        body,
        dt: float,
        collision_fn: Callable[[float, float, float], bool],
        rng: Optional[np.random.RandomState] = None
    ) -> StepResult:
        """
        Advance the body one Euler step from its current wheel speeds.

        Args:
            body: Object with x, y, theta, vl, vr
            dt: Time step (seconds)
            collision_fn: function(x, y, radius) -> bool
            rng: Generator for the bounce jitter (defaults to the model's own)

        Returns:
            result: StepResult with the collision flag and the final pose
        """
        if rng is None:
            rng = self.rng

        linear = (body.vl + body.vr) / 2.0
        angular = (body.vr - body.vl) / self.wheel_base

        nx = body.x + math.cos(body.theta) * linear * dt
        ny = body.y + math.sin(body.theta) * linear * dt
        nt = body.theta + angular * dt

        if collision_fn(nx, ny, self.radius):
            body.theta += rng.uniform(-self.bounce_angle, self.bounce_angle)
            body.vl *= self.bounce_damping
            body.vr *= self.bounce_damping
            return StepResult(True, body.x, body.y, body.theta)

        body.x, body.y, body.theta = nx, ny, nt
        return StepResult(False, nx, ny, nt)

    def step(
        self,
        body,
        action: np.ndarray,
        dt: float,
        collision_fn: Callable[[float, float, float], bool],
        rng: Optional[np.random.RandomState] = None
    ) -> StepResult:
        """Apply an action and integrate one step."""
        self.drive(body, action)
        return self.integrate(body, dt, collision_fn, rng)
