"""
Embodied differential-drive agent for the phototaxis task.

This module holds the agent's state: its body (pose and wheel speeds),
its bounded trail, its most recent sensing/acting record and the brain it
owns (MLPPolicy + TrainerState).

It contains NO dynamics, NO sensing logic and NO learning rule; those are
applied to the agent from outside by the agent pool.

Agents never share state. The only thing they read in common is the
environment.
"""

import numpy as np
from collections import deque
from typing import Optional, Tuple

from algo.reinforce import TrainerState
from policy.mlp_policy import MLPPolicy


class Agent:
    """
    Differential-drive agent with an optional learning brain.

    Pose reset (reset) keeps the brain; brain reset (reset_brain) replaces
    the network and trainer state together.
    """

    def __init__(
        self,
        position: Tuple[float, float],
        theta: float = 0.0,
        policy: Optional[MLPPolicy] = None,
        trainer_state: Optional[TrainerState] = None,
        trail_capacity: int = 900,
        rng: Optional[np.random.RandomState] = None
    ):
        """
        Initialize agent state.

        Args:
            position: Initial (x, y)
            theta: Initial heading (radians)
            policy: Owned network (None for reactive agents)
            trainer_state: Owned learning state
            trail_capacity: Number of trail points kept
            rng: Private generator for this agent's exploration and bounces
        """
        assert trail_capacity > 0, "Trail capacity must be positive"

        self.policy = policy
        self.rng = rng if rng is not None else np.random.RandomState()
        self.trainer_state = trainer_state if trainer_state is not None else TrainerState(
            learning_enabled=policy is not None
        )
        self.trail = deque(maxlen=trail_capacity)

        self.reset(position, theta)

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------

    def reset(self, position: Tuple[float, float], theta: float = 0.0, brightness: float = 0.0):
        """Reset pose, wheels, trail and brightness records. Keeps the brain."""
        self.x, self.y = position
        self.theta = theta
        self.vl, self.vr = 0.0, 0.0

        self.trail.clear()
        self.prev_brightness = brightness
        self.best_brightness = 0.0

        self.last_readings = []
        self.last_action = np.zeros(2)
        self.last_mean = np.zeros(2)
        self.last_cache = None

    def reset_brain(self, rng: np.random.RandomState, trainer_state: TrainerState) -> None:
        """Fresh network weights and fresh trainer state."""
        if self.policy is not None:
            self.policy.reset_parameters(rng)
        self.trainer_state = trainer_state

    # --------------------------------------------------
    # Bookkeeping
    # --------------------------------------------------

    def record_position(self, brightness: float) -> None:
        """Append to the trail and update brightness records."""
        self.trail.append((self.x, self.y))
        self.best_brightness = max(self.best_brightness, brightness)
        self.prev_brightness = brightness

    # --------------------------------------------------
    # Introspection
    # --------------------------------------------------

    @property
    def learning(self) -> bool:
        return self.policy is not None

    def get_state(self) -> dict:
        """Read-only snapshot for telemetry and rendering."""
        return {
            "position": (self.x, self.y),
            "theta": self.theta,
            "wheels": (self.vl, self.vr),
            "trail": list(self.trail),
            "readings": list(self.last_readings),
            "action": self.last_action.copy(),
            "mean": self.last_mean.copy(),
            "brightness": self.prev_brightness,
            "best_brightness": self.best_brightness,
            "learning": self.learning,
            **self.trainer_state.metrics()
        }
