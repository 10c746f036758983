"""
eval/reward.py

Per-tick reward shaping for phototaxis.

Reward components:
1. Brightness shaping: gain for moving into brighter light
2. Intensity term: small standing reward for being in bright light
3. Step penalty: constant cost per tick
4. Proximity penalty: cost for facing a nearby obstacle
5. Collision penalty: cost for a blocked move
6. Goal bonus: reward for being within reach of the light centre

Reaching the goal only raises the bonus flag; nothing terminates.
"""

from typing import NamedTuple


class RewardBreakdown(NamedTuple):
    reward: float
    delta_brightness: float
    brightness: float
    goal_hit: bool


class RewardModel:
    """
    Scalar reward from one tick's outcome.

    This class does NOT:
    - Track baselines or averages (see algo/reinforce.py)
    - Modify the agent or the policy
    """

    def __init__(
        self,
        delta_scale: float = 5.4,
        intensity_scale: float = 0.025,
        step_penalty: float = 0.008,
        proximity_penalty: float = 0.03,
        collision_penalty: float = 0.08,
        goal_bonus: float = 0.12,
        goal_margin: float = 15.0
    ):
        """
        Args:
            delta_scale: Weight on brightness change
            intensity_scale: Weight on brightness at the new pose
            step_penalty: Constant subtracted every tick
            proximity_penalty: Weight on centre-ray proximity
            collision_penalty: Subtracted when the move was blocked
            goal_bonus: Added when close enough to the light
            goal_margin: Goal distance beyond the agent radius
        """
        self.delta_scale = delta_scale
        self.intensity_scale = intensity_scale
        self.step_penalty = step_penalty
        self.proximity_penalty = proximity_penalty
        self.collision_penalty = collision_penalty
        self.goal_bonus = goal_bonus
        self.goal_margin = goal_margin

    def compute(
        self,
        prev_brightness: float,
        brightness: float,
        center_proximity: float,
        collided: bool,
        distance_to_goal: float,
        agent_radius: float
    ) -> RewardBreakdown:
        """
        Compute reward for a single tick.

        Args:
            prev_brightness: Brightness at the pose the tick started from
            brightness: Brightness at the pose after integration
            center_proximity: 1 - normalized centre ray distance
            collided: Whether the move was blocked
            distance_to_goal: Distance from the new pose to the light
            agent_radius: Agent body radius

        Returns:
            breakdown: RewardBreakdown(reward, delta_brightness, brightness, goal_hit)
        """
        delta = brightness - prev_brightness
        goal_hit = distance_to_goal < agent_radius + self.goal_margin

        reward = self.delta_scale * delta
        reward += self.intensity_scale * brightness
        reward -= self.step_penalty
        reward -= self.proximity_penalty * center_proximity
        if collided:
            reward -= self.collision_penalty
        if goal_hit:
            reward += self.goal_bonus

        return RewardBreakdown(reward, delta, brightness, goal_hit)
