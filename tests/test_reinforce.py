"""Test the online REINFORCE update and trainer state.

Test cases:
    - test_baseline_and_average_converge_geometrically()
    - test_advantage_uses_updated_baseline()
    - test_update_ascends_along_log_policy_gradient()
    - test_sigma_anneals_to_floor()
    - test_learning_disabled_freezes_parameters()
    - test_weights_bounded_under_extreme_rewards()

Run:
    pytest tests/test_reinforce.py -v
"""

import numpy as np
import pytest

from algo.reinforce import Reinforce, TrainerState
from policy.mlp_policy import MLPPolicy


@pytest.fixture
def policy():
    return MLPPolicy(rng=np.random.RandomState(21))


@pytest.fixture
def obs():
    return np.random.RandomState(4).uniform(0.0, 1.0, size=9)


def test_baseline_and_average_converge_geometrically():
    trainer = Reinforce()
    state = TrainerState()
    r = 0.37
    for n in range(1, 1201):
        trainer.track_reward(state, r)
        expected = r * (1.0 - 0.995 ** n)
        assert state.reward_baseline == pytest.approx(expected, rel=1e-9, abs=1e-12)
        assert state.reward_avg == pytest.approx(expected, rel=1e-9, abs=1e-12)
    assert state.last_reward == r


def test_advantage_uses_updated_baseline(policy, obs):
    trainer = Reinforce()
    state = TrainerState(sigma=0.5)
    cache = policy.forward(obs)
    action = cache.mean + np.array([0.1, -0.2])

    trainer.track_reward(state, 1.0)
    d_mean = trainer.mean_gradient(state, cache, action)

    # Baseline is 0.005 after absorbing r=1, so the advantage is 0.995
    np.testing.assert_allclose(d_mean, 0.995 * np.array([0.1, -0.2]) / 0.25)


def test_update_ascends_along_log_policy_gradient(policy, obs):
    trainer = Reinforce()
    state = TrainerState(learning_rate=0.01, sigma=0.5)
    cache = policy.forward(obs)
    action = np.clip(cache.mean + np.array([0.3, 0.0]), -1.0, 1.0)

    expected = policy.clone()
    expected.ascend(cache, 0.995 * (action - cache.mean) / 0.25, 0.01)

    trainer.update(policy, state, cache, action, reward=1.0)

    np.testing.assert_allclose(policy.get_parameters(), expected.get_parameters())
    # Positive advantage pulls the mean toward the executed action
    assert policy(obs)[0] > cache.mean[0]
    assert state.sigma == pytest.approx(0.5 * 0.99995)


def test_sigma_anneals_to_floor(policy, obs):
    trainer = Reinforce()
    state = TrainerState(sigma=0.2, sigma_min=0.08, sigma_decay=0.9)
    previous = state.sigma
    for _ in range(50):
        cache = policy.forward(obs)
        trainer.update(policy, state, cache, cache.mean, reward=0.1)
        assert state.sigma <= previous
        assert state.sigma >= state.sigma_min
        previous = state.sigma
    assert state.sigma == 0.08


def test_learning_disabled_freezes_parameters(policy, obs):
    trainer = Reinforce()
    state = TrainerState(learning_enabled=False)
    theta = policy.get_parameters()
    sigma = state.sigma

    for _ in range(20):
        cache = policy.forward(obs)
        trainer.update(policy, state, cache, np.array([1.0, -1.0]), reward=5.0)

    np.testing.assert_array_equal(policy.get_parameters(), theta)
    assert state.sigma == sigma
    # Reward tracking continues while frozen
    assert state.reward_avg > 0.0
    assert state.last_reward == 5.0


def test_weights_bounded_under_extreme_rewards(policy):
    trainer = Reinforce()
    state = TrainerState(learning_rate=0.5, sigma=0.08, sigma_min=0.08)
    rng = np.random.RandomState(8)
    for _ in range(400):
        cache = policy.forward(rng.uniform(0.0, 1.0, size=9))
        action = np.clip(cache.mean + rng.randn(2) * 0.5, -1.0, 1.0)
        trainer.update(policy, state, cache, action, reward=rng.choice([-50.0, 50.0]))
        theta = policy.get_parameters()
        assert np.all(np.isfinite(theta))
        assert np.all(np.abs(theta) <= 3.0)


def test_trainer_state_validation():
    with pytest.raises(AssertionError):
        TrainerState(sigma=0.01, sigma_min=0.08)
    with pytest.raises(AssertionError):
        TrainerState(sigma_decay=1.5)
