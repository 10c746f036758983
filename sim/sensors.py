"""
sim/sensors.py

Ray-based distance and brightness sensing.

Each sensing event casts a fan of rays from the agent centre. Every ray
reports the obstacle distance along it and the light brightness at a
point a fixed distance ahead along the same heading.
"""

import math
import numpy as np
from typing import List, NamedTuple, Sequence


class SensorReading(NamedTuple):
    angle: float
    distance: float
    brightness: float
    max_range: float


class SensorArray:
    """
    Three-ray sensor fan (left, centre, right).

    The brightness probe point is pushed `brightness_offset` along the ray
    `offset_passes` times. The default of two passes puts the probe 36
    units ahead; set offset_passes=1 for a single offset.
    """

    def __init__(
        self,
        angles: Sequence[float] = (-0.6, 0.0, 0.6),
        max_range: float = 130.0,
        brightness_offset: float = 18.0,
        offset_passes: int = 2
    ):
        assert max_range > 0, "Sensor range must be positive"
        assert offset_passes >= 0, "Offset passes must be non-negative"

        self.angles = tuple(angles)
        self.max_range = max_range
        self.brightness_offset = brightness_offset
        self.offset_passes = offset_passes

    @property
    def num_rays(self) -> int:
        return len(self.angles)

    def sense(self, env, x: float, y: float, theta: float) -> List[SensorReading]:
        """
        Read every ray.

        Args:
            env: LightEnv (distance_to_obstacle and brightness queries)
            x: Sensor origin X
            y: Sensor origin Y
            theta: Agent heading (radians)

        Returns:
            readings: One SensorReading per ray, in fan order
        """
        readings = []
        for rel in self.angles:
            heading = theta + rel
            cos_h = math.cos(heading)
            sin_h = math.sin(heading)

            distance = env.distance_to_obstacle(x, y, heading, self.max_range)

            sx, sy = x, y
            for _ in range(self.offset_passes):
                sx += cos_h * self.brightness_offset
                sy += sin_h * self.brightness_offset

            readings.append(SensorReading(
                angle=heading,
                distance=distance,
                brightness=env.brightness(sx, sy),
                max_range=self.max_range
            ))
        return readings


def normalized_distance(reading: SensorReading) -> float:
    """Ray distance as a fraction of range, clamped to [0, 1]."""
    return min(max(reading.distance / reading.max_range, 0.0), 1.0)


def center_proximity(readings: Sequence[SensorReading]) -> float:
    """1 when the centre ray touches an obstacle, 0 when it sees nothing."""
    return 1.0 - normalized_distance(readings[1])


def feature_vector(readings: Sequence[SensorReading]) -> np.ndarray:
    """
    Policy input built from a left/centre/right reading triple.

    Layout (9):
        [dist_l, dist_c, dist_r,      normalized distances in [0, 1]
         bright_l, bright_c, bright_r,
         bright_r - bright_l,
         1 - dist_c,                  centre proximity
         1.0]                         bias
    """
    assert len(readings) == 3, f"Expected 3 readings, got {len(readings)}"
    left, center, right = readings
    d_c = normalized_distance(center)
    return np.array([
        normalized_distance(left),
        d_c,
        normalized_distance(right),
        left.brightness,
        center.brightness,
        right.brightness,
        right.brightness - left.brightness,
        1.0 - d_c,
        1.0
    ], dtype=np.float64)


FEATURE_DIM = 9
