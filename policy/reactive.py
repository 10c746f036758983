"""
policy/reactive.py

Hand-tuned phototaxis controller (no learning).

Steers toward the brighter side, slows down as the centre ray closes on
an obstacle and turns away from the nearer side obstacle. When boxed in
it backs up and spins.
"""

from typing import Sequence, Tuple

from sim.sensors import SensorReading, normalized_distance


class ReactiveController:
    """
    Braitenberg-style mapping from sensor readings to (forward, turn).

    Outputs are in physical units: forward speed (units/s) and turn rate
    (rad/s), already clamped.
    """

    def __init__(
        self,
        cruise: float = 45.0,
        bright_boost: float = 80.0,
        bright_turn: float = 120.0,
        brake: float = 95.0,
        avoid_turn: float = 220.0,
        escape_speed: float = -20.0,
        escape_turn: float = 130.0,
        forward_limits: Tuple[float, float] = (-40.0, 110.0),
        max_turn: float = 3.2
    ):
        self.cruise = cruise
        self.bright_boost = bright_boost
        self.bright_turn = bright_turn
        self.brake = brake
        self.avoid_turn = avoid_turn
        self.escape_speed = escape_speed
        self.escape_turn = escape_turn
        self.forward_limits = forward_limits
        self.max_turn = max_turn

    def __call__(self, readings: Sequence[SensorReading]) -> Tuple[float, float]:
        left, center, right = readings
        avoid_l = 1.0 - normalized_distance(left)
        avoid_c = 1.0 - normalized_distance(center)
        avoid_r = 1.0 - normalized_distance(right)

        forward = self.cruise + self.bright_boost * center.brightness
        turn = self.bright_turn * (right.brightness - left.brightness)

        forward -= self.brake * avoid_c
        turn += self.avoid_turn * (avoid_l - avoid_r)

        # Boxed in: back up and spin
        if avoid_c > 0.85 and (avoid_l > 0.65 or avoid_r > 0.65):
            forward = self.escape_speed
            turn += -self.escape_turn if avoid_l > avoid_r else self.escape_turn

        lo, hi = self.forward_limits
        forward = min(max(forward, lo), hi)
        turn = min(max(turn, -self.max_turn), self.max_turn)
        return forward, turn
