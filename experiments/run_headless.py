"""
experiments/run_headless.py

Headless training run of a phototaxis pool.

Runs the learning pool at a fixed dt for a given amount of simulated time,
printing pool progress at a fixed interval, then compares it with the
reactive controller on the same map.
"""

import sys
import os
import time
import numpy as np
from typing import Dict

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def get_shared_config():
    return {
        'num_agents': 4,
        'dt': 0.03,
        'seconds': 120.0,
        'report_every': 10.0,
        'seed': 42,
        'trainer': {
            'learning_rate': 0.015,
            'sigma': 0.45,
            'sigma_min': 0.08,
            'sigma_decay': 0.99995
        },
        'map': {
            'obstacle_count': 12,
            'light_sigma': 110.0
        }
    }


def create_simulation(config: Dict, mode: str):
    from sim.simulation import Simulation

    return Simulation(
        num_agents=config['num_agents'],
        mode=mode,
        dt_max=config['dt'],
        seed=config['seed'],
        pool_config={'trainer_config': config['trainer']},
        map_config=config['map']
    )


def run(config: Dict, mode: str, verbose: bool = True) -> Dict:
    from sim.telemetry import progress_line

    sim = create_simulation(config, mode)

    if verbose:
        print("=" * 70)
        print(f"MODE: {mode.upper()}  ({config['num_agents']} agents, "
              f"{config['seconds']:.0f}s simulated, dt={config['dt']})")
        print("=" * 70)

    start = time.time()
    ticks = 0
    while sim.time < config['seconds']:
        ticks += sim.run_for(config['report_every'], dt=config['dt'])
        if verbose:
            print(progress_line(sim))
    total_time = time.time() - start

    states = [a.trainer_state for a in sim.pool]
    results = {
        'mode': mode,
        'ticks': ticks,
        'total_time': total_time,
        'mean_reward_avg': float(np.mean([s.reward_avg for s in states])),
        'goals': int(sum(s.goals for s in states)),
        'collisions': int(sum(s.collisions for s in states)),
        'mean_best_brightness': float(np.mean([a.best_brightness for a in sim.pool])),
        'final_sigma': float(np.mean([s.sigma for s in states]))
    }

    if verbose:
        print(f"\n{mode} finished: {ticks:,} ticks in {total_time:.1f}s wall time")

    return results


def print_comparison_table(results):
    print("\n")
    print("=" * 70)
    print("RESULTS SUMMARY")
    print("=" * 70)
    print(f"{'Mode':<10} | {'Reward avg':<11} | {'Goals':<8} | {'Collisions':<10} | {'Best bright':<11}")
    print("-" * 70)
    for r in results:
        print(
            f"{r['mode']:<10} | {r['mean_reward_avg']:+11.4f} | {r['goals']:<8d} | "
            f"{r['collisions']:<10d} | {r['mean_best_brightness']:<11.3f}"
        )
    print("=" * 70)


if __name__ == "__main__":
    config = get_shared_config()

    print("Shared configuration:")
    for key, value in config.items():
        print(f"  {key}: {value}")
    print()

    results = [run(config, 'learning'), run(config, 'reactive')]
    print_comparison_table(results)
