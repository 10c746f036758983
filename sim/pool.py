"""
sim/pool.py

A fixed-size population of independent phototaxis agents.

One tick, per agent, in order:
    sense → forward pass → sample action → integrate & resolve collision
          → reward → gradient step (if enabled) → trail / best brightness

Reactive pools replace the forward pass, sampling and gradient step with
the hand-tuned controller.

Agents do not see or collide with each other. Each agent has its own
random generator, network and trainer state, so the per-agent updates
inside a tick are independent; the pool simply runs them in order.
"""

import math
import numpy as np
from typing import Dict, Iterator, List, Optional

from algo.reinforce import Reinforce, TrainerState
from eval.reward import RewardModel
from policy.gaussian_sampler import GaussianActionSampler
from policy.mlp_policy import MLPPolicy
from policy.reactive import ReactiveController
from sim.agent import Agent
from sim.kinematics import DifferentialDrive
from sim.sensors import SensorArray, center_proximity, feature_vector

MODES = ("learning", "reactive")


class AgentPool:
    """
    Owns N agents and the shared, stateless pipeline components.

    The environment is read, never written, during a tick.
    """

    def __init__(
        self,
        env,
        size: int = 1,
        mode: str = "learning",
        seed: Optional[int] = None,
        sensors: Optional[SensorArray] = None,
        drive: Optional[DifferentialDrive] = None,
        reward_model: Optional[RewardModel] = None,
        trainer: Optional[Reinforce] = None,
        reactive: Optional[ReactiveController] = None,
        policy_config: Optional[Dict] = None,
        trainer_config: Optional[Dict] = None,
        spawn_margin: float = 50.0,
        spawn_clearance: float = 4.0,
        spawn_attempts: int = 300,
        trail_capacity: int = 900
    ):
        """
        Initialize pipeline components and spawn the agents.

        Args:
            env: LightEnv shared by all agents
            size: Number of agents
            mode: "learning" (network + REINFORCE) or "reactive"
            seed: Seed for the pool generator (agents derive theirs from it)
            sensors: Sensor fan (default SensorArray())
            drive: Kinematic model (default DifferentialDrive())
            reward_model: Reward shaping (default RewardModel())
            trainer: Learning rule (default Reinforce())
            reactive: Controller for reactive mode
            policy_config: Keyword arguments for each MLPPolicy
            trainer_config: Keyword arguments for each TrainerState
            spawn_margin: Spawn positions keep this far from the edges
            spawn_clearance: Extra free radius required around a spawn
            spawn_attempts: Rejection sampling cap for spawns
            trail_capacity: Trail length per agent
        """
        if mode not in MODES:
            raise ValueError(f"Unknown pool mode {mode!r}, expected one of {MODES}")
        assert size >= 0, "Pool size must be non-negative"

        self.env = env
        self.mode = mode
        self.rng = np.random.RandomState(seed)

        self.sensors = sensors if sensors is not None else SensorArray()
        self.drive = drive if drive is not None else DifferentialDrive(rng=self.rng)
        self.sampler = GaussianActionSampler(rng=self.rng)
        self.reward_model = reward_model if reward_model is not None else RewardModel()
        self.trainer = trainer if trainer is not None else Reinforce()
        self.reactive = reactive if reactive is not None else ReactiveController()

        self.policy_config = dict(policy_config or {})
        self.trainer_config = dict(trainer_config or {})

        self.spawn_margin = spawn_margin
        self.spawn_clearance = spawn_clearance
        self.spawn_attempts = spawn_attempts
        self.trail_capacity = trail_capacity

        self.agents: List[Agent] = []
        self.respawn(size)

    # --------------------------------------------------
    # Population
    # --------------------------------------------------

    def __len__(self) -> int:
        return len(self.agents)

    def __getitem__(self, index: int) -> Agent:
        return self.agents[index]

    def __iter__(self) -> Iterator[Agent]:
        return iter(self.agents)

    def _new_trainer_state(self) -> TrainerState:
        config = dict(self.trainer_config)
        if self.mode == "reactive":
            config["learning_enabled"] = False
        return TrainerState(**config)

    def spawn_agent(self) -> Agent:
        agent_rng = np.random.RandomState(self.rng.randint(0, 2**31 - 1))

        policy = None
        if self.mode == "learning":
            policy = MLPPolicy(rng=agent_rng, **self.policy_config)

        agent = Agent(
            position=(0.0, 0.0),
            policy=policy,
            trainer_state=self._new_trainer_state(),
            trail_capacity=self.trail_capacity,
            rng=agent_rng
        )
        self.reset_pose(agent)
        return agent

    def respawn(self, size: int) -> None:
        """Destroy every agent and create `size` fresh ones."""
        self.agents = [self.spawn_agent() for _ in range(size)]

    # --------------------------------------------------
    # Control events
    # --------------------------------------------------

    def reset_pose(self, agent: Agent) -> None:
        """Resample the agent's pose. The network is untouched."""
        x, y = self.env.sample_free_position(
            agent.rng,
            clearance=self.drive.radius + self.spawn_clearance,
            margin=self.spawn_margin,
            max_attempts=self.spawn_attempts
        )
        theta = agent.rng.uniform(0.0, 2.0 * math.pi)
        agent.reset((x, y), theta, brightness=self.env.brightness(x, y))

    def reset_brain(self, agent: Agent) -> None:
        """Fresh network and trainer state, then a fresh pose."""
        learning = agent.trainer_state.learning_enabled
        state = self._new_trainer_state()
        if self.mode == "learning":
            state.learning_enabled = learning
        agent.reset_brain(agent.rng, state)
        self.reset_pose(agent)

    def reset_all_poses(self) -> None:
        for agent in self.agents:
            self.reset_pose(agent)

    def set_learning(self, enabled: bool, index: Optional[int] = None) -> None:
        """Toggle learning for one agent or, with index=None, all of them."""
        targets = self.agents if index is None else [self.agents[index]]
        for agent in targets:
            agent.trainer_state.learning_enabled = bool(enabled) and agent.learning

    # --------------------------------------------------
    # Tick
    # --------------------------------------------------

    def tick(self, dt: float) -> None:
        """Advance every agent by one step of length dt."""
        for agent in self.agents:
            self.step_agent(agent, dt)

    def step_agent(self, agent: Agent, dt: float) -> None:
        env = self.env
        state = agent.trainer_state

        readings = self.sensors.sense(env, agent.x, agent.y, agent.theta)

        if agent.learning:
            cache = agent.policy.forward(feature_vector(readings))
            action = self.sampler.sample(cache.mean, state.sigma, rng=agent.rng)
            result = self.drive.step(agent, action, dt, env.blocked, rng=agent.rng)
        else:
            cache = None
            forward, turn = self.reactive(readings)
            self.drive.drive_unscaled(agent, forward, turn)
            action = np.clip(
                [forward / self.drive.forward_scale, turn / self.drive.turn_scale], -1.0, 1.0
            )
            result = self.drive.integrate(agent, dt, env.blocked, rng=agent.rng)

        brightness = env.brightness(agent.x, agent.y)
        outcome = self.reward_model.compute(
            prev_brightness=agent.prev_brightness,
            brightness=brightness,
            center_proximity=center_proximity(readings),
            collided=result.collision,
            distance_to_goal=env.distance_to_light(agent.x, agent.y),
            agent_radius=self.drive.radius
        )

        state.steps += 1
        if result.collision:
            state.collisions += 1
        if outcome.goal_hit:
            state.goals += 1

        if cache is not None:
            self.trainer.update(agent.policy, state, cache, action, outcome.reward)
        else:
            self.trainer.track_reward(state, outcome.reward)

        agent.last_readings = readings
        agent.last_action = action
        agent.last_mean = cache.mean if cache is not None else action
        agent.last_cache = cache
        agent.record_position(brightness)
