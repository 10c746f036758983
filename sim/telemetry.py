"""
sim/telemetry.py

Text formatting of an agent snapshot for the stats panel and console.
"""

import math
from typing import Dict, List


def format_stats(snapshot: Dict, num_agents: int = 1) -> List[str]:
    """
    Human-readable lines for one Simulation.snapshot().

    Args:
        snapshot: Dict returned by Simulation.snapshot()
        num_agents: Pool size (shown next to the agent index)

    Returns:
        lines: One string per stat
    """
    x, y = snapshot["position"]
    vl, vr = snapshot["wheels"]
    heading = snapshot["theta"] % (2.0 * math.pi)

    lines = [
        f"Agent: {snapshot['index'] + 1} / {num_agents}"
        f"{'' if snapshot['running'] else '  (paused)'}",
        f"Time: {snapshot['time']:.1f} s",
        f"Position: ({x:.1f}, {y:.1f})",
        f"Heading: {heading:.2f} rad",
        f"Wheel Speeds (L/R): {vl:.1f} / {vr:.1f}",
        f"Current Brightness: {snapshot['brightness']:.3f}",
        f"Best Brightness: {snapshot['best_brightness']:.3f}",
        f"Distance to Brightest Spot: {snapshot['distance_to_light']:.1f} px",
        f"Steps: {snapshot['steps']}  Collisions: {snapshot['collisions']}  Goals: {snapshot['goals']}",
    ]

    if snapshot["learning"]:
        action = snapshot["action"]
        mean = snapshot["mean"]
        lines += [
            f"Learning: {'on' if snapshot['learning_enabled'] else 'off'}"
            f"  lr={snapshot['learning_rate']:.4f}  sigma={snapshot['sigma']:.3f}",
            f"Reward avg: {snapshot['reward_avg']:+.4f}  last: {snapshot['last_reward']:+.4f}",
            f"Action: ({action[0]:+.2f}, {action[1]:+.2f})  Mean: ({mean[0]:+.2f}, {mean[1]:+.2f})",
        ]
    else:
        lines.append("Controller: reactive")

    return lines


def progress_line(sim) -> str:
    """One-line pool summary for console progress output."""
    states = [agent.trainer_state for agent in sim.pool]
    if not states:
        return f"t={sim.time:7.1f}s | no agents"

    reward = sum(s.reward_avg for s in states) / len(states)
    sigma = sum(s.sigma for s in states) / len(states)
    goals = sum(s.goals for s in states)
    collisions = sum(s.collisions for s in states)
    best = max(agent.best_brightness for agent in sim.pool)

    return (
        f"t={sim.time:7.1f}s | "
        f"Reward avg: {reward:+.4f} | "
        f"Sigma: {sigma:.3f} | "
        f"Goals: {goals:6d} | "
        f"Collisions: {collisions:6d} | "
        f"Best brightness: {best:.3f}"
    )
