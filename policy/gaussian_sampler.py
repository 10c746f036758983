"""
policy/gaussian_sampler.py

Gaussian exploration around a policy mean.

    action = clip(mean + sigma * ε, -1, 1),   ε ~ N(0, I)

One scalar sigma is shared by every action dimension; the noise itself is
drawn independently per dimension. The clipped sample is what gets
executed. The unclipped mean is kept separately by the caller for the
policy-gradient step.
"""

import numpy as np
from typing import Optional


class GaussianActionSampler:

    def __init__(self, rng: Optional[np.random.RandomState] = None, low: float = -1.0, high: float = 1.0):
        assert low < high, "Action bounds must be ordered"
        self.rng = rng if rng is not None else np.random.RandomState()
        self.low = low
        self.high = high

    def sample(
        self,
        mean: np.ndarray,
        sigma: float,
        rng: Optional[np.random.RandomState] = None
    ) -> np.ndarray:
        """
        Draw one exploratory action.

        Args:
            mean: Policy mean (action_dim,)
            sigma: Exploration scale (>= 0)
            rng: Generator to draw from (defaults to the sampler's own)

        Returns:
            action: Clipped action (action_dim,)
        """
        assert sigma >= 0, f"Exploration scale must be non-negative, got {sigma}"
        if rng is None:
            rng = self.rng
        mean = np.asarray(mean, dtype=np.float64)
        noise = rng.randn(*mean.shape) * sigma
        return np.clip(mean + noise, self.low, self.high)

    def __call__(self, mean: np.ndarray, sigma: float) -> np.ndarray:
        return self.sample(mean, sigma)
