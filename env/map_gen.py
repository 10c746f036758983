"""
env/map_gen.py

Random map provider for LightEnv.

Places obstacle rectangles uniformly inside a margin and then finds a
light position clear of them by bounded rejection sampling.
"""

import numpy as np
from typing import List, Tuple

from env.light_env import LightEnv, Light, Rect


def generate_map(
    width: float,
    height: float,
    rng: np.random.RandomState,
    obstacle_count: int = 12,
    margin: float = 80.0,
    obstacle_w: Tuple[float, float] = (45.0, 120.0),
    obstacle_h: Tuple[float, float] = (35.0, 100.0),
    light_margin: float = 80.0,
    light_clearance: float = 30.0,
    light_sigma: float = 110.0,
    max_attempts: int = 200,
    wall_padding: float = 10.0
) -> Tuple[List[Rect], Light]:
    """
    Generate obstacles and a light source.

    The light is resampled until it is at least `light_clearance` away
    from every obstacle; after `max_attempts` the last candidate is kept.

    Args:
        width: World width
        height: World height
        rng: Random number generator
        obstacle_count: Number of rectangles
        margin: Rectangles stay this far from the world edge
        obstacle_w: (min, max) rectangle width
        obstacle_h: (min, max) rectangle height
        light_margin: Light stays this far from the world edge
        light_clearance: Required free radius around the light
        light_sigma: Gaussian spread of the light
        max_attempts: Light placement cap
        wall_padding: Wall padding used for the clearance check

    Returns:
        (obstacles, light)
    """
    assert width > 2 * margin + obstacle_w[1], "World too narrow for obstacle margin"
    assert height > 2 * margin + obstacle_h[1], "World too short for obstacle margin"

    obstacles = []
    for _ in range(obstacle_count):
        w = rng.uniform(*obstacle_w)
        h = rng.uniform(*obstacle_h)
        obstacles.append(Rect(
            x=rng.uniform(margin, width - margin - w),
            y=rng.uniform(margin, height - margin - h),
            w=w,
            h=h
        ))

    probe = LightEnv(width, height, wall_padding=wall_padding, obstacles=obstacles)

    lx, ly = 0.0, 0.0
    for _ in range(max_attempts):
        lx = rng.uniform(light_margin, width - light_margin)
        ly = rng.uniform(light_margin, height - light_margin)
        if not probe.blocked(lx, ly, light_clearance):
            break

    return obstacles, Light(lx, ly, light_sigma)


def regenerate(env: LightEnv, rng: np.random.RandomState, **kwargs) -> None:
    """Generate a new map for `env` and install it in one step."""
    obstacles, light = generate_map(
        env.width, env.height, rng, wall_padding=env.wall_padding, **kwargs
    )
    env.set_map(obstacles, light)
