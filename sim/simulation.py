"""
sim/simulation.py

The simulation object: one environment, one agent pool, one clock.

The clock is driven from outside (a render loop or a headless runner)
with the wall-clock time elapsed since the previous frame. That delta is
clamped to dt_max before it reaches the integrator. While paused, frames
advance nothing.

Control events (pause, pose reset, brain reset, new map, learning
toggles, selection) are plain method calls. Everything runs on one
thread, so they always land between ticks.
"""

import numpy as np
from typing import Dict, Optional

from env.light_env import LightEnv
from env.map_gen import regenerate
from sim.pool import AgentPool


class Simulation:
    """
    Owns the environment, the agent pool and the simulation clock.

    Args:
        env: Arena (a random map is generated if None)
        num_agents: Pool size
        mode: "learning" or "reactive"
        dt_max: Upper bound on one integration step (seconds)
        seed: Master seed (map generation and the pool derive from it)
        pool_config: Extra keyword arguments for AgentPool
        map_config: Extra keyword arguments for generate_map
    """

    def __init__(
        self,
        env: Optional[LightEnv] = None,
        num_agents: int = 1,
        mode: str = "learning",
        dt_max: float = 0.03,
        seed: Optional[int] = None,
        pool_config: Optional[Dict] = None,
        map_config: Optional[Dict] = None
    ):
        assert dt_max > 0, "dt_max must be positive"

        self.rng = np.random.RandomState(seed)
        self.map_config = dict(map_config or {})

        if env is None:
            env = LightEnv()
            regenerate(env, self.rng, **self.map_config)
        self.env = env

        self.pool = AgentPool(
            env,
            size=num_agents,
            mode=mode,
            seed=self.rng.randint(0, 2**31 - 1),
            **(pool_config or {})
        )

        self.dt_max = dt_max
        self.time = 0.0
        self.running = True
        self.selected = 0

    # --------------------------------------------------
    # Clock
    # --------------------------------------------------

    def advance(self, elapsed: float) -> float:
        """
        Run one tick for a frame that took `elapsed` seconds.

        Returns:
            dt: The step actually integrated (0 while paused)
        """
        if not self.running or elapsed <= 0:
            return 0.0
        dt = min(elapsed, self.dt_max)
        self.pool.tick(dt)
        self.time += dt
        return dt

    def run_for(self, seconds: float, dt: Optional[float] = None) -> int:
        """Advance in fixed steps until `seconds` of simulated time pass. Returns tick count."""
        dt = self.dt_max if dt is None else dt
        assert dt > 0, "dt must be positive"
        ticks = 0
        end = self.time + seconds
        while self.running and self.time < end:
            self.advance(dt)
            ticks += 1
        return ticks

    # --------------------------------------------------
    # Control surface
    # --------------------------------------------------

    def pause(self) -> None:
        self.running = False

    def resume(self) -> None:
        self.running = True

    def toggle_running(self) -> bool:
        self.running = not self.running
        return self.running

    def _agent_index(self, index: Optional[int]) -> int:
        index = self.selected if index is None else index
        if not 0 <= index < len(self.pool):
            raise IndexError(f"Agent index {index} out of range for pool of {len(self.pool)}")
        return index

    def reset_pose(self, index: Optional[int] = None) -> None:
        """Respawn one agent's body; its network keeps training where it left off."""
        self.pool.reset_pose(self.pool[self._agent_index(index)])

    def reset_brain(self, index: Optional[int] = None) -> None:
        """Fresh network, trainer state and pose for one agent."""
        self.pool.reset_brain(self.pool[self._agent_index(index)])

    def new_map(self) -> None:
        """Regenerate obstacles and light, then re-place every agent."""
        regenerate(self.env, self.rng, **self.map_config)
        self.pool.reset_all_poses()
        self.time = 0.0

    def set_learning(self, enabled: bool, index: Optional[int] = None) -> None:
        """Enable/disable learning for all agents (index=None) or one."""
        if index is not None:
            index = self._agent_index(index)
        self.pool.set_learning(enabled, index)

    def toggle_learning(self, index: Optional[int] = None) -> bool:
        """Flip the learning flag of the selected (or given) agent and return it."""
        index = self._agent_index(index)
        enabled = not self.pool[index].trainer_state.learning_enabled
        self.pool.set_learning(enabled, index)
        return self.pool[index].trainer_state.learning_enabled

    def select(self, index: int) -> None:
        self.selected = self._agent_index(index)

    def select_next(self) -> int:
        if len(self.pool):
            self.selected = (self.selected + 1) % len(self.pool)
        return self.selected

    def respawn(self, num_agents: int) -> None:
        """Replace the whole pool with `num_agents` fresh agents."""
        self.pool.respawn(num_agents)
        self.selected = 0

    # --------------------------------------------------
    # Telemetry
    # --------------------------------------------------

    def snapshot(self, index: Optional[int] = None) -> Dict:
        """Read-only state of the selected (or given) agent plus clock info."""
        index = self._agent_index(index)
        state = self.pool[index].get_state()
        state["index"] = index
        state["time"] = self.time
        state["running"] = self.running
        state["distance_to_light"] = self.env.distance_to_light(*state["position"])
        return state
