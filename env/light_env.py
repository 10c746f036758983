"""
env/light_env.py

Static world geometry for the phototaxis task.

This module defines ONLY the geometry, the light field and the spatial
queries agents need. It contains NO reward logic, NO learning, NO policy.

Responsibilities:
- World bounds with a wall padding margin
- Axis-aligned obstacle rectangles
- Gaussian light field (brightness queries)
- Collision queries (circle vs walls / rectangles)
- Ray-casting for distance sensors
- Free position sampling (bounded rejection sampling)

The environment is shared read-only by every agent. The only mutation is
set_map(), which swaps obstacles and light in one assignment.
"""

import math
import numpy as np
from typing import List, NamedTuple, Optional, Sequence, Tuple


class Rect(NamedTuple):
    """Axis-aligned rectangle, (x, y) is the top-left corner."""
    x: float
    y: float
    w: float
    h: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h


class Light(NamedTuple):
    """Light source with Gaussian spread sigma."""
    x: float
    y: float
    sigma: float


def _wall_distance(p: float, direction: float, lo: float, hi: float) -> float:
    """
    Analytic distance along one axis to the wall the ray is heading for.

    A near-zero directional component never reaches a wall on this axis,
    so it returns inf and cannot win a min().
    """
    if abs(direction) < 1e-6:
        return math.inf
    if direction > 0:
        return max(0.0, (hi - p) / direction)
    return max(0.0, (lo - p) / direction)


class LightEnv:
    """
    Continuous 2D arena with rectangular obstacles and one light source.

    This class provides:
    - brightness(x, y): Gaussian light intensity in (0, 1]
    - blocked(x, y, r): circle collision against walls and obstacles
    - distance_to_obstacle(x, y, angle, max_dist): ray distance
    - sample_free_position(rng, clearance): spawn sampling

    This class does NOT provide:
    - Reward computation
    - Agent dynamics
    - Map generation (see env/map_gen.py)
    """

    def __init__(
        self,
        width: float = 900.0,
        height: float = 600.0,
        wall_padding: float = 10.0,
        obstacles: Optional[Sequence[Rect]] = None,
        light: Optional[Light] = None,
        ray_step: float = 4.0
    ):
        """
        Initialize the arena.

        Args:
            width: World width in units
            height: World height in units
            wall_padding: Margin along every edge that counts as wall
            obstacles: Obstacle rectangles (defaults to none)
            light: Light source (defaults to the world centre, sigma 110)
            ray_step: Marching step for obstacle ray-casting
        """
        assert width > 0 and height > 0, "World dimensions must be positive"
        assert wall_padding >= 0, "Wall padding must be non-negative"
        assert ray_step > 0, "Ray step must be positive"

        self.width = width
        self.height = height
        self.wall_padding = wall_padding
        self.ray_step = ray_step

        self.obstacles: List[Rect] = []
        self.light: Light = Light(width / 2.0, height / 2.0, 110.0)
        self.set_map(
            obstacles if obstacles is not None else [],
            light if light is not None else self.light
        )

    # --------------------------------------------------
    # Map state
    # --------------------------------------------------

    def set_map(self, obstacles: Sequence[Rect], light: Light) -> None:
        """Replace obstacles and light together."""
        assert light.sigma > 0, "Light sigma must be positive"
        rects = [Rect(*r) for r in obstacles]
        for r in rects:
            assert r.w >= 0 and r.h >= 0, f"Invalid rectangle {r}"
        self.obstacles, self.light = rects, Light(*light)

    # --------------------------------------------------
    # Light field
    # --------------------------------------------------

    def brightness(self, x: float, y: float) -> float:
        """
        Gaussian light intensity at (x, y).

        Returns 1 at the light centre and decreases strictly with distance.
        Far away the value underflows towards the smallest positive float
        rather than reaching 0.
        """
        dx = x - self.light.x
        dy = y - self.light.y
        d2 = dx * dx + dy * dy
        value = math.exp(-d2 / (2.0 * self.light.sigma * self.light.sigma))
        return max(value, np.finfo(float).tiny)

    def distance_to_light(self, x: float, y: float) -> float:
        return math.hypot(x - self.light.x, y - self.light.y)

    # --------------------------------------------------
    # Collision
    # --------------------------------------------------

    def out_of_bounds(self, x: float, y: float) -> bool:
        return x < 0 or y < 0 or x > self.width or y > self.height

    def blocked(self, x: float, y: float, radius: float) -> bool:
        """
        Check if a circle touches the padded walls or any obstacle.

        Args:
            x: Circle centre X
            y: Circle centre Y
            radius: Circle radius

        Returns:
            blocked: True if the circle is not in free space
        """
        margin = self.wall_padding + radius
        if x < margin or y < margin:
            return True
        if x > self.width - margin or y > self.height - margin:
            return True

        r2 = radius * radius
        for rect in self.obstacles:
            # Closest point on rectangle to circle centre
            closest_x = min(max(x, rect.x), rect.x + rect.w)
            closest_y = min(max(y, rect.y), rect.y + rect.h)
            dx = x - closest_x
            dy = y - closest_y
            if dx * dx + dy * dy <= r2:
                return True

        return False

    # --------------------------------------------------
    # Ray casting
    # --------------------------------------------------

    def _march_obstacles(self, x: float, y: float, dx: float, dy: float, max_dist: float) -> float:
        """March along the ray until a sample leaves the world or enters a rectangle."""
        dist = 0.0
        while dist <= max_dist:
            sx = x + dx * dist
            sy = y + dy * dist
            if self.out_of_bounds(sx, sy):
                return dist
            for rect in self.obstacles:
                if rect.contains(sx, sy):
                    return dist
            dist += self.ray_step
        return max_dist

    def distance_to_obstacle(self, x: float, y: float, angle: float, max_dist: float) -> float:
        """
        Distance from (x, y) along `angle` to the nearest obstacle or wall.

        Obstacles are found by ray marching; the world edges are computed
        analytically so steep rays do not pick up marching error.

        Args:
            x: Ray origin X
            y: Ray origin Y
            angle: Ray heading (radians)
            max_dist: Sensor range

        Returns:
            distance: In [0, max_dist]
        """
        dx = math.cos(angle)
        dy = math.sin(angle)

        nearest = max_dist
        if self.obstacles:
            nearest = self._march_obstacles(x, y, dx, dy, max_dist)

        wall_x = _wall_distance(x, dx, 0.0, self.width)
        wall_y = _wall_distance(y, dy, 0.0, self.height)

        return min(nearest, wall_x, wall_y)

    # --------------------------------------------------
    # Sampling
    # --------------------------------------------------

    def sample_free_position(
        self,
        rng: np.random.RandomState,
        clearance: float,
        margin: float = 50.0,
        max_attempts: int = 300
    ) -> Tuple[float, float]:
        """
        Sample an unblocked position by bounded rejection sampling.

        If every attempt is blocked the last candidate is returned as is.
        On a pathological map that position may be invalid; callers accept
        it as a degraded spawn rather than failing.

        Args:
            rng: Random number generator
            clearance: Radius the position must keep free
            margin: Distance from the world edge to sample within
            max_attempts: Rejection sampling cap

        Returns:
            position: (x, y)
        """
        assert max_attempts > 0, "Need at least one attempt"

        x, y = 0.0, 0.0
        for _ in range(max_attempts):
            x = rng.uniform(margin, self.width - margin)
            y = rng.uniform(margin, self.height - margin)
            if not self.blocked(x, y, clearance):
                break
        return (x, y)


# Validation
if __name__ == "__main__":
    print("LightEnv - phototaxis arena")
    print("=" * 60)

    env = LightEnv(
        width=900, height=600,
        obstacles=[Rect(300, 200, 80, 60)],
        light=Light(700, 300, 110)
    )

    print(f"World: {env.width} x {env.height}, padding {env.wall_padding}")
    print(f"Brightness at light: {env.brightness(700, 300):.3f}")
    print(f"Brightness at (100, 100): {env.brightness(100, 100):.6f}")
    print(f"Blocked inside obstacle: {env.blocked(320, 220, 16)}")
    print(f"Blocked near wall: {env.blocked(5, 300, 16)}")
    print(f"Ray east from (100, 230): {env.distance_to_obstacle(100, 230, 0.0, 400):.1f}")

    pos = env.sample_free_position(np.random.RandomState(0), clearance=20)
    print(f"Free position: ({pos[0]:.1f}, {pos[1]:.1f})")

    print()
    print("✓ Environment implementation complete")
