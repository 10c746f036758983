"""
algo/reinforce.py

Online single-sample REINFORCE with a running reward baseline.

Every tick, for the action a drawn from N(mean, sigma²I):
    baseline ← β·baseline + (1-β)·r
    advantage = r - baseline                 (baseline already includes r)
    ∂log π/∂mean = (a - mean) / sigma²
    θ ← θ + lr · advantage · ∂log π/∂θ       (ascent, clamped per parameter)
    sigma ← max(sigma_min, sigma · decay)

The advantage uses the baseline after it has absorbed the current reward.
That biases the estimator slightly toward zero advantage.
"""

import numpy as np
from typing import Dict

from policy.mlp_policy import ForwardCache, MLPPolicy


class TrainerState:
    """
    Per-agent learning state.

    Owned by exactly one agent alongside its MLPPolicy. reward_avg follows
    the same recurrence as reward_baseline and exists for reporting only.
    """

    def __init__(
        self,
        learning_rate: float = 0.015,
        sigma: float = 0.45,
        sigma_min: float = 0.08,
        sigma_decay: float = 0.99995,
        learning_enabled: bool = True
    ):
        assert learning_rate >= 0, "Learning rate must be non-negative"
        assert sigma_min > 0, "sigma_min must be positive"
        assert sigma >= sigma_min, "Initial sigma must be at least sigma_min"
        assert 0 < sigma_decay <= 1, "sigma_decay must be in (0, 1]"

        self.learning_rate = learning_rate
        self.sigma = sigma
        self.sigma_min = sigma_min
        self.sigma_decay = sigma_decay
        self.learning_enabled = learning_enabled

        self.reward_baseline = 0.0
        self.reward_avg = 0.0
        self.last_reward = 0.0

        self.steps = 0
        self.collisions = 0
        self.goals = 0

    def metrics(self) -> Dict:
        return {
            'steps': self.steps,
            'collisions': self.collisions,
            'goals': self.goals,
            'sigma': self.sigma,
            'learning_rate': self.learning_rate,
            'reward_avg': self.reward_avg,
            'last_reward': self.last_reward,
            'learning_enabled': self.learning_enabled
        }


class Reinforce:
    """
    Policy-gradient update rule shared by every agent.

    Holds only hyperparameters; all mutable state lives in the TrainerState
    and MLPPolicy passed to update().
    """

    def __init__(self, baseline_decay: float = 0.995, weight_clip: float = 3.0):
        assert 0 <= baseline_decay < 1, "baseline_decay must be in [0, 1)"
        assert weight_clip > 0, "weight_clip must be positive"
        self.baseline_decay = baseline_decay
        self.weight_clip = weight_clip

    def track_reward(self, state: TrainerState, reward: float) -> None:
        """Fold a reward into the baseline and the reported average."""
        b = self.baseline_decay
        state.last_reward = reward
        state.reward_baseline = b * state.reward_baseline + (1.0 - b) * reward
        state.reward_avg = b * state.reward_avg + (1.0 - b) * reward

    def mean_gradient(self, state: TrainerState, cache: ForwardCache, action: np.ndarray) -> np.ndarray:
        """Advantage-weighted gradient of the Gaussian log-likelihood w.r.t. the mean."""
        advantage = state.last_reward - state.reward_baseline
        return advantage * (np.asarray(action) - cache.mean) / (state.sigma ** 2)

    def update(
        self,
        policy: MLPPolicy,
        state: TrainerState,
        cache: ForwardCache,
        action: np.ndarray,
        reward: float
    ) -> None:
        """
        One online learning step.

        Args:
            policy: Network that produced cache (mutated in place)
            state: Trainer state of the same agent (mutated in place)
            cache: Forward cache of the pass that produced the mean
            action: Executed (sampled, clipped) action
            reward: Reward observed for that action
        """
        self.track_reward(state, reward)

        if not state.learning_enabled:
            return

        d_mean = self.mean_gradient(state, cache, action)
        policy.ascend(cache, d_mean, state.learning_rate, clip=self.weight_clip)

        state.sigma = max(state.sigma_min, state.sigma * state.sigma_decay)
