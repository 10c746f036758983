import math
import pygame

from sim.telemetry import format_stats


class LightRenderer:
    def __init__(self, sim, panel_width=330, field_step=14):
        self.sim = sim
        self.env = sim.env
        self.panel_width = panel_width
        self.field_step = field_step

        self.width_px = int(self.env.width)
        self.height_px = int(self.env.height)

        self.screen = pygame.display.set_mode(
            (self.width_px + panel_width, self.height_px)
        )
        pygame.display.set_caption("Phototaxis Agents")
        self.font = pygame.font.SysFont("consolas", 15)

        self.colors = {
            "bg": (14, 20, 33),
            "panel": (22, 28, 44),
            "text": (220, 228, 240),
            "obstacle": (51, 74, 113),
            "obstacle_edge": (143, 180, 249),
            "trail": (255, 140, 66, 128),
            "ray": (190, 220, 255, 115),
            "agent": (255, 140, 66),
            "agent_dim": (150, 110, 80),
            "agent_edge": (255, 214, 183),
            "heading": (255, 255, 255),
            "goal": (255, 230, 138),
            "goal_halo": (255, 229, 145, 46),
            "goal_edge": (255, 247, 202),
        }

    # =====================
    # LIGHT FIELD
    # =====================
    def draw_light_field(self, surface):
        step = self.field_step
        for y in range(0, self.height_px, step):
            for x in range(0, self.width_px, step):
                b = self.env.brightness(x, y)
                if b < 0.015:
                    continue
                alpha = int(255 * min(max(b * 0.28, 0.0), 0.32))
                surface.fill((255, 215, 90, alpha), (x, y, step, step))

    # =====================
    # DRAW MAP
    # =====================
    def draw(self):
        self.screen.fill(self.colors["bg"])

        overlay = pygame.Surface((self.width_px, self.height_px), pygame.SRCALPHA)
        self.draw_light_field(overlay)

        for rect in self.env.obstacles:
            r = pygame.Rect(int(rect.x), int(rect.y), int(rect.w), int(rect.h))
            pygame.draw.rect(self.screen, self.colors["obstacle"], r)
            pygame.draw.rect(self.screen, self.colors["obstacle_edge"], r, 1)

        for agent in self.sim.pool:
            self.draw_trail(overlay, agent)
        self.draw_goal(overlay)

        for agent in self.sim.pool:
            self.draw_rays(overlay, agent)

        self.screen.blit(overlay, (0, 0))

        for i, agent in enumerate(self.sim.pool):
            self.draw_agent(agent, selected=(i == self.sim.selected))

        self.draw_panel()
        pygame.display.flip()

    def draw_trail(self, surface, agent):
        if len(agent.trail) < 2:
            return
        points = [(int(x), int(y)) for x, y in agent.trail]
        pygame.draw.lines(surface, self.colors["trail"], False, points, 2)

    def draw_goal(self, surface):
        light = self.env.light
        pulse = 6 + 3 * math.sin(self.sim.time * 2.6)
        center = (int(light.x), int(light.y))
        pygame.draw.circle(surface, self.colors["goal_halo"], center, int(pulse + 8))
        pygame.draw.circle(self.screen, self.colors["goal"], center, 6)
        pygame.draw.circle(self.screen, self.colors["goal_edge"], center, 6, 1)

    def draw_rays(self, surface, agent):
        for s in agent.last_readings:
            ex = agent.x + math.cos(s.angle) * s.distance
            ey = agent.y + math.sin(s.angle) * s.distance
            pygame.draw.line(
                surface, self.colors["ray"],
                (int(agent.x), int(agent.y)), (int(ex), int(ey))
            )

    # =====================
    # DRAW AGENT
    # =====================
    def draw_agent(self, agent, selected=False):
        radius = int(self.sim.pool.drive.radius)
        center = (int(agent.x), int(agent.y))
        color = self.colors["agent"] if selected else self.colors["agent_dim"]

        pygame.draw.circle(self.screen, color, center, radius)
        pygame.draw.circle(self.screen, self.colors["agent_edge"], center, radius, 2)

        hx = agent.x + math.cos(agent.theta) * radius
        hy = agent.y + math.sin(agent.theta) * radius
        pygame.draw.line(self.screen, self.colors["heading"], center, (int(hx), int(hy)), 2)

    # =====================
    # STATS PANEL
    # =====================
    def draw_panel(self):
        panel = pygame.Rect(self.width_px, 0, self.panel_width, self.height_px)
        pygame.draw.rect(self.screen, self.colors["panel"], panel)

        if not len(self.sim.pool):
            return

        lines = format_stats(self.sim.snapshot(), num_agents=len(self.sim.pool))
        lines += [
            "",
            "[space] pause   [r] reset pose",
            "[b] reset brain [n] new map",
            "[l] learning    [L] learning (all)",
            "[tab] next agent",
        ]

        y = 12
        for line in lines:
            text = self.font.render(line, True, self.colors["text"])
            self.screen.blit(text, (self.width_px + 12, y))
            y += 20
