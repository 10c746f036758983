"""
Interactive phototaxis viewer.

Usage:
  python main.py                       # one learning agent
  python main.py --agents 6            # six independent learners
  python main.py --mode reactive       # hand-tuned controller, no learning
  python main.py --seed 7 --no-learning
"""

import argparse
import pygame

from render.renderer import LightRenderer
from sim.simulation import Simulation


def parse_args():
    p = argparse.ArgumentParser(description="Phototaxis agents with online policy-gradient learning")
    p.add_argument("--agents", type=int, default=1, help="Number of agents")
    p.add_argument("--mode", default="learning", choices=["learning", "reactive"],
                   help="Controller for every agent")
    p.add_argument("--seed", type=int, default=None, help="Random seed")
    p.add_argument("--fps", type=int, default=60, help="Frame rate cap")
    p.add_argument("--no-learning", action="store_true", help="Start with learning disabled")
    return p.parse_args()


def handle_key(sim, event):
    if event.key == pygame.K_SPACE:
        sim.toggle_running()
    elif event.key == pygame.K_r:
        sim.reset_pose()
    elif event.key == pygame.K_b:
        sim.reset_brain()
    elif event.key == pygame.K_n:
        sim.new_map()
    elif event.key == pygame.K_l and event.mod & pygame.KMOD_SHIFT:
        enabled = not all(a.trainer_state.learning_enabled for a in sim.pool)
        sim.set_learning(enabled)
    elif event.key == pygame.K_l:
        sim.toggle_learning()
    elif event.key == pygame.K_TAB:
        sim.select_next()


def main():
    args = parse_args()

    pygame.init()
    sim = Simulation(num_agents=args.agents, mode=args.mode, seed=args.seed)
    if args.no_learning:
        sim.set_learning(False)

    renderer = LightRenderer(sim)
    clock = pygame.time.Clock()

    print(f"Phototaxis: {args.agents} agent(s), mode={args.mode}, seed={args.seed}")

    running = True
    while running:
        # dt is clamped inside Simulation.advance
        elapsed = clock.tick(args.fps) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                else:
                    handle_key(sim, event)

        sim.advance(elapsed)
        renderer.draw()

    pygame.quit()


if __name__ == "__main__":
    main()
