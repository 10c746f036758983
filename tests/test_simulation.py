"""Test the agent pool pipeline and the simulation control surface.

Test cases:
    - test_spawned_agents_are_unblocked()
    - test_invariants_hold_over_many_ticks()
    - test_trail_is_bounded()
    - test_dt_is_clamped()
    - test_paused_simulation_does_not_change()
    - test_reset_pose_keeps_network()
    - test_reset_brain_reinitialises()
    - test_new_map_keeps_networks()
    - test_learning_toggle_freezes_weights()
    - test_agent_on_light_reward()
    - test_reactive_pool()
    - test_snapshot_and_stats()

Run:
    pytest tests/test_simulation.py -v
"""

import numpy as np
import pytest

from env.light_env import LightEnv, Light
from sim.pool import AgentPool
from sim.simulation import Simulation
from sim.telemetry import format_stats, progress_line


@pytest.fixture
def sim():
    return Simulation(num_agents=3, seed=17)


def test_spawned_agents_are_unblocked(sim):
    assert len(sim.pool) == 3
    for agent in sim.pool:
        assert not sim.env.blocked(agent.x, agent.y, sim.pool.drive.radius)
        assert agent.prev_brightness == pytest.approx(sim.env.brightness(agent.x, agent.y))
        assert agent.policy is not None
        assert agent.trail.maxlen == 900


def test_agents_do_not_share_state(sim):
    a, b = sim.pool[0], sim.pool[1]
    assert a.policy is not b.policy
    assert a.trainer_state is not b.trainer_state
    assert a.rng is not b.rng
    assert not np.array_equal(a.policy.W1, b.policy.W1)


def test_invariants_hold_over_many_ticks(sim):
    radius = sim.pool.drive.radius
    for _ in range(300):
        sim.advance(0.03)
        for agent in sim.pool:
            state = agent.trainer_state
            assert not sim.env.blocked(agent.x, agent.y, radius)
            assert -120.0 <= agent.vl <= 120.0 and -120.0 <= agent.vr <= 120.0
            assert np.all(np.abs(agent.last_action) <= 1.0)
            assert state.sigma >= state.sigma_min
            assert np.all(np.abs(agent.policy.get_parameters()) <= 3.0)

    for agent in sim.pool:
        assert agent.trainer_state.steps == 300
        assert 0.0 < agent.best_brightness <= 1.0
    assert sim.time == pytest.approx(9.0)


def test_sigma_non_increasing_while_learning(sim):
    agent = sim.pool[0]
    previous = agent.trainer_state.sigma
    for _ in range(50):
        sim.advance(0.03)
        assert agent.trainer_state.sigma <= previous
        previous = agent.trainer_state.sigma
    assert previous < 0.45


def test_trail_is_bounded():
    sim = Simulation(num_agents=1, seed=5, pool_config={'trail_capacity': 5})
    agent = sim.pool[0]
    for _ in range(12):
        sim.advance(0.03)
    assert len(agent.trail) == 5
    assert agent.trail[-1] == (agent.x, agent.y)


def test_dt_is_clamped(sim):
    assert sim.advance(1.0) == 0.03
    assert sim.advance(0.01) == 0.01
    assert sim.advance(-1.0) == 0.0
    assert sim.time == pytest.approx(0.04)


def test_paused_simulation_does_not_change(sim):
    sim.advance(0.03)
    sim.pause()
    agent = sim.pool[0]
    before = (agent.x, agent.y, agent.theta, agent.trainer_state.steps)
    theta = agent.policy.get_parameters()

    for _ in range(10):
        assert sim.advance(0.03) == 0.0

    assert (agent.x, agent.y, agent.theta, agent.trainer_state.steps) == before
    np.testing.assert_array_equal(agent.policy.get_parameters(), theta)
    assert sim.time == pytest.approx(0.03)

    assert sim.toggle_running() is True
    sim.advance(0.03)
    assert agent.trainer_state.steps == before[3] + 1


def test_reset_pose_keeps_network(sim):
    for _ in range(20):
        sim.advance(0.03)
    agent = sim.pool[1]
    theta = agent.policy.get_parameters()
    steps = agent.trainer_state.steps

    sim.reset_pose(1)

    np.testing.assert_array_equal(agent.policy.get_parameters(), theta)
    assert agent.trainer_state.steps == steps
    assert len(agent.trail) == 0
    assert agent.vl == 0.0 and agent.vr == 0.0
    assert not sim.env.blocked(agent.x, agent.y, sim.pool.drive.radius)


def test_reset_brain_reinitialises(sim):
    for _ in range(20):
        sim.advance(0.03)
    agent = sim.pool[0]
    theta = agent.policy.get_parameters()

    sim.reset_brain(0)

    assert not np.array_equal(agent.policy.get_parameters(), theta)
    assert np.all(agent.policy.b1 == 0.0) and np.all(agent.policy.b2 == 0.0)
    assert agent.trainer_state.steps == 0
    assert agent.trainer_state.sigma == 0.45
    assert agent.trainer_state.reward_baseline == 0.0
    assert len(agent.trail) == 0


def test_new_map_keeps_networks(sim):
    for _ in range(10):
        sim.advance(0.03)
    params = [a.policy.get_parameters() for a in sim.pool]
    old_light = sim.env.light

    sim.new_map()

    assert sim.env.light != old_light
    assert sim.time == 0.0
    for agent, theta in zip(sim.pool, params):
        np.testing.assert_array_equal(agent.policy.get_parameters(), theta)
        assert not sim.env.blocked(agent.x, agent.y, sim.pool.drive.radius)
        assert len(agent.trail) == 0


def test_learning_toggle_freezes_weights(sim):
    sim.set_learning(False)
    thetas = [a.policy.get_parameters() for a in sim.pool]
    sigmas = [a.trainer_state.sigma for a in sim.pool]

    for _ in range(30):
        sim.advance(0.03)

    for agent, theta, sigma in zip(sim.pool, thetas, sigmas):
        np.testing.assert_array_equal(agent.policy.get_parameters(), theta)
        assert agent.trainer_state.sigma == sigma
        assert agent.trainer_state.steps == 30

    assert sim.toggle_learning(2) is True
    sim.advance(0.03)
    assert not np.array_equal(sim.pool[2].policy.get_parameters(), thetas[2])
    np.testing.assert_array_equal(sim.pool[0].policy.get_parameters(), thetas[0])


def test_bad_agent_index(sim):
    with pytest.raises(IndexError):
        sim.reset_pose(3)
    with pytest.raises(IndexError):
        sim.set_learning(False, index=-1)
    with pytest.raises(IndexError):
        sim.select(10)


def test_agent_on_light_reward():
    env = LightEnv(900, 600, obstacles=[], light=Light(450, 300, 110))
    pool = AgentPool(env, size=1, seed=0)
    agent = pool[0]
    agent.reset((450.0, 300.0), 0.0, brightness=1.0)

    pool.tick(1e-6)

    assert env.brightness(agent.x, agent.y) == pytest.approx(1.0)
    # delta ~0, intensity 0.025, step penalty, no proximity, goal bonus
    assert agent.trainer_state.last_reward == pytest.approx(0.025 - 0.008 + 0.12, abs=1e-6)
    assert agent.trainer_state.goals == 1
    assert agent.trainer_state.collisions == 0


def test_reactive_pool():
    sim = Simulation(num_agents=2, mode="reactive", seed=9)
    for agent in sim.pool:
        assert agent.policy is None
        assert not agent.trainer_state.learning_enabled

    for _ in range(100):
        sim.advance(0.03)

    sim.set_learning(True)
    for agent in sim.pool:
        assert agent.last_cache is None
        assert not agent.trainer_state.learning_enabled
        assert agent.trainer_state.steps == 100
        assert np.all(np.abs(agent.last_action) <= 1.0)
        assert not sim.env.blocked(agent.x, agent.y, sim.pool.drive.radius)


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        Simulation(num_agents=1, mode="evolution", seed=0)


def test_respawn_replaces_agents(sim):
    old = list(sim.pool)
    sim.select(2)
    sim.respawn(5)
    assert len(sim.pool) == 5
    assert sim.selected == 0
    assert all(a not in old for a in sim.pool)


def test_snapshot_and_stats(sim):
    sim.advance(0.03)
    sim.select(1)
    snap = sim.snapshot()

    assert snap["index"] == 1
    for key in ("position", "theta", "wheels", "trail", "readings", "action", "mean",
                "steps", "collisions", "goals", "sigma", "learning_rate",
                "reward_avg", "last_reward"):
        assert key in snap
    assert len(snap["readings"]) == 3

    # The snapshot is a copy
    snap["action"][0] = 99.0
    assert sim.pool[1].last_action[0] != 99.0

    text = "\n".join(format_stats(snap, num_agents=3))
    assert "Agent: 2 / 3" in text
    assert "sigma=" in text
    assert "Reward avg" in text
    assert "Distance to Brightest Spot" in text

    assert "Reward avg" in progress_line(sim)
