"""
policy/mlp_policy.py

Two-layer tanh network producing action means for continuous control.

Policy form:
    hidden = tanh(W1 @ obs + b1)
    mean   = tanh(W2 @ hidden + b2)

where:
    W1 ∈ ℝ^(hidden_dim × obs_dim),    b1 ∈ ℝ^hidden_dim
    W2 ∈ ℝ^(action_dim × hidden_dim), b2 ∈ ℝ^action_dim
    mean = [throttle, turn] in [-1, 1]

The forward pass returns a ForwardCache holding the input, the hidden
activations and the mean. The gradient step consumes that cache directly;
nothing is recomputed.

This class does NOT:
- Sample actions (see policy/gaussian_sampler.py)
- Compute rewards or advantages
- Decide when to learn (see algo/reinforce.py)
"""

import numpy as np
from typing import NamedTuple, Optional


class ForwardCache(NamedTuple):
    inputs: np.ndarray
    hidden: np.ndarray
    mean: np.ndarray


class MLPPolicy:
    """
    Feedforward policy network 9 → 14 (tanh) → 2 (tanh).

    Weights are initialised uniform in [-init_scale, init_scale] and biases
    at zero. All parameters are owned by this instance and mutated in place
    only by ascend() and reset_parameters().
    """

    def __init__(
        self,
        obs_dim: int = 9,
        hidden_dim: int = 14,
        action_dim: int = 2,
        init_scale: float = 0.25,
        rng: Optional[np.random.RandomState] = None
    ):
        """
        Initialize network with random weights.

        Args:
            obs_dim: Feature vector dimension
            hidden_dim: Hidden layer width
            action_dim: Output dimension
            init_scale: Half-width of the uniform weight initialisation
            rng: Random number generator (creates new one if None)
        """
        assert obs_dim > 0 and hidden_dim > 0 and action_dim > 0, \
            "Dimensions must be positive"

        self.obs_dim = obs_dim
        self.hidden_dim = hidden_dim
        self.action_dim = action_dim
        self.init_scale = init_scale

        self.num_params = (
            hidden_dim * obs_dim + hidden_dim +
            action_dim * hidden_dim + action_dim
        )

        self.reset_parameters(rng)

    def reset_parameters(self, rng: Optional[np.random.RandomState] = None) -> None:
        """Fresh uniform weights, zero biases."""
        if rng is None:
            rng = np.random.RandomState()

        s = self.init_scale
        self.W1 = rng.uniform(-s, s, size=(self.hidden_dim, self.obs_dim))
        self.b1 = np.zeros(self.hidden_dim)
        self.W2 = rng.uniform(-s, s, size=(self.action_dim, self.hidden_dim))
        self.b2 = np.zeros(self.action_dim)

    # --------------------------------------------------
    # Forward
    # --------------------------------------------------

    def forward(self, obs: np.ndarray) -> ForwardCache:
        """
        Compute action means from a feature vector (deterministic).

        Args:
            obs: Feature vector (obs_dim,)

        Returns:
            cache: ForwardCache(inputs, hidden, mean)
        """
        obs = np.asarray(obs, dtype=np.float64)
        assert obs.shape == (self.obs_dim,), \
            f"Expected observation shape ({self.obs_dim},), got {obs.shape}"

        hidden = np.tanh(self.W1 @ obs + self.b1)
        mean = np.tanh(self.W2 @ hidden + self.b2)

        return ForwardCache(inputs=obs.copy(), hidden=hidden, mean=mean)

    def __call__(self, obs: np.ndarray) -> np.ndarray:
        """Action means only."""
        return self.forward(obs).mean

    # --------------------------------------------------
    # Gradient ascent
    # --------------------------------------------------

    def ascend(
        self,
        cache: ForwardCache,
        d_mean: np.ndarray,
        lr: float,
        clip: float = 3.0
    ) -> None:
        """
        Backpropagate a gradient on the means and take an ascent step.

        The hidden gradient is taken through W2 before W2 is updated.
        Every parameter is clamped to [-clip, clip] after its update.

        Args:
            cache: Forward cache from the pass that produced the action
            d_mean: Objective gradient w.r.t. the means (action_dim,)
            lr: Learning rate
            clip: Parameter bound
        """
        d_mean = np.asarray(d_mean, dtype=np.float64)
        assert d_mean.shape == (self.action_dim,), \
            f"Expected gradient shape ({self.action_dim},), got {d_mean.shape}"

        # Output layer (tanh)
        d_out = d_mean * (1.0 - cache.mean ** 2)
        d_hidden = self.W2.T @ d_out

        self.W2 += lr * np.outer(d_out, cache.hidden)
        self.b2 += lr * d_out
        np.clip(self.W2, -clip, clip, out=self.W2)
        np.clip(self.b2, -clip, clip, out=self.b2)

        # Hidden layer (tanh)
        d_pre = d_hidden * (1.0 - cache.hidden ** 2)

        self.W1 += lr * np.outer(d_pre, cache.inputs)
        self.b1 += lr * d_pre
        np.clip(self.W1, -clip, clip, out=self.W1)
        np.clip(self.b1, -clip, clip, out=self.b1)

    # --------------------------------------------------
    # Parameters
    # --------------------------------------------------

    def get_parameters(self) -> np.ndarray:
        """
        Get parameters as flat vector θ.

        Format: [W1.flatten(), b1, W2.flatten(), b2]
        """
        return np.concatenate([
            self.W1.flatten(), self.b1, self.W2.flatten(), self.b2
        ])

    def set_parameters(self, theta: np.ndarray) -> None:
        """Set parameters from flat vector θ."""
        assert theta.shape == (self.num_params,), \
            f"Expected {self.num_params} parameters, got {theta.shape[0]}"

        i = 0
        n = self.hidden_dim * self.obs_dim
        self.W1 = theta[i:i + n].reshape(self.hidden_dim, self.obs_dim).copy()
        i += n
        self.b1 = theta[i:i + self.hidden_dim].copy()
        i += self.hidden_dim
        n = self.action_dim * self.hidden_dim
        self.W2 = theta[i:i + n].reshape(self.action_dim, self.hidden_dim).copy()
        i += n
        self.b2 = theta[i:i + self.action_dim].copy()

    def clone(self) -> 'MLPPolicy':
        """Deep copy with identical parameters."""
        copy = MLPPolicy(
            obs_dim=self.obs_dim,
            hidden_dim=self.hidden_dim,
            action_dim=self.action_dim,
            init_scale=self.init_scale,
            rng=np.random.RandomState(0)
        )
        copy.set_parameters(self.get_parameters())
        return copy


# Validation
if __name__ == "__main__":
    print("MLPPolicy - phototaxis control network")
    print("=" * 60)

    policy = MLPPolicy(rng=np.random.RandomState(42))
    print(f"  W1: {policy.W1.shape}  W2: {policy.W2.shape}")
    print(f"  Total parameters: {policy.num_params}")

    obs = np.random.RandomState(1).uniform(0, 1, size=9)
    cache = policy.forward(obs)
    print(f"  Mean: {cache.mean}")
    assert np.all(np.abs(cache.mean) <= 1.0)

    again = policy.forward(obs)
    print(f"  Deterministic: {np.array_equal(cache.mean, again.mean)}")

    policy.ascend(cache, np.array([1e6, -1e6]), lr=1.0)
    theta = policy.get_parameters()
    print(f"  Parameter range after huge step: [{theta.min():.2f}, {theta.max():.2f}]")
    assert np.all(np.abs(theta) <= 3.0)

    print()
    print("✓ MLPPolicy implementation complete")
