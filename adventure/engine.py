"""
Pygame game engine.

Purpose: Main game loop, rendering, input handling, room transitions.

Inputs:
    - Settings (window size, fps, planner and player options)
    - Starting room name

Outputs:
    - Interactive window: click the floor to walk
    - Planning log CSV and end-of-session summary

Params:
    settings: dict - Merged settings from adventure.config.load_settings
    room_name: str - Room to start in
"""

from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pygame

from adventure.actors import Character
from adventure.config import load_room
from reporting.logger import PlanLogger
from reporting.metrics import PlanningMetrics

# Clicks this close to a door (scene units) walk the player out through it
DOOR_RADIUS = 40


class GameEngine:
    """Main Pygame adventure engine."""

    def __init__(self, settings: Dict, room_name: Optional[str] = None):
        """
        Initialize game engine.

        Args:
            settings: Settings dictionary
            room_name: Starting room (defaults to settings['start_room'])
        """
        self.settings = settings
        sim = settings["sim"]

        pygame.init()
        self.width = sim["window_width"]
        self.height = sim["window_height"]
        self.screen = pygame.display.set_mode((self.width, self.height))
        self.clock = pygame.time.Clock()
        self.fps = sim.get("fps", 60)
        self.font = pygame.font.Font(None, 22)

        # Rooms are authored at default_size; scale uniformly to the window
        default_w, default_h = sim.get("default_size", [self.width, self.height])
        self.stage_size = (default_w, default_h)
        self.page_scale = min(self.width / default_w, self.height / default_h)

        self.running = True
        self.paused = False
        self.show_grid = False
        self.sim_time = 0.0

        player_cfg = settings["player"]
        start_x, start_y = player_cfg.get("start", [default_w / 2, default_h / 2])
        self.player = Character(
            "player", x=start_x, y=start_y,
            width=player_cfg["width"], height=player_cfg["height"],
            speed=player_cfg["speed"],
        )

        self.metrics = PlanningMetrics()
        room_name = room_name or settings.get("start_room", "hallway")
        self.plan_logger = PlanLogger(session=room_name, log_dir=settings["logging"]["log_dir"])

        self.rooms = {}
        self._backgrounds = {}
        self.room = None
        self.enter_room(room_name)

    def _get_room(self, name):
        if name not in self.rooms:
            room = load_room(name, self.settings)
            room.plan_listeners.append(self._on_plan)
            self.rooms[name] = room
        return self.rooms[name]

    def _background_for(self, room):
        """Background surface (image) or colour tuple for a room."""
        if room.name in self._backgrounds:
            return self._backgrounds[room.name]
        background = room.background
        if isinstance(background, str):
            image = pygame.image.load(background)
            room.scale_background(self.stage_size, image.get_size())
            background = pygame.transform.smoothscale(image, (self.width, self.height))
        else:
            background = tuple(background)
        self._backgrounds[room.name] = background
        return background

    def enter_room(self, name, from_room=None):
        """Leave the current room and load another."""
        room = self._get_room(name)
        if self.room is not None:
            self.room.exit()

        door = None
        if from_room is not None:
            for candidate in room.doors.values():
                if candidate.get("to") == from_room:
                    door = candidate
                    break

        self._background_for(room)
        room.load(self.player, door, self.stage_size)
        self.room = room
        pygame.display.set_caption(f"Adventure - {room.name}")
        print(f"Entered room {room.name}")

    def _on_plan(self, room, result):
        self.metrics.record_plan(result)
        self.plan_logger.log(room.name, result)
        if result.success:
            print(f"Path planned: {len(result.waypoints)} waypoints, {result.cpu_ms:.2f}ms")
        else:
            print(f"Path planning failed ({result.outcome}): {result.message}")

    def to_scene(self, pos):
        """Convert a screen position to scene coordinates."""
        return (pos[0] / self.page_scale, pos[1] / self.page_scale)

    def to_screen(self, point):
        """Convert scene coordinates to a screen position."""
        return (int(point[0] * self.page_scale), int(point[1] * self.page_scale))

    def run(self):
        """Main loop."""
        while self.running:
            dt = self.clock.tick(self.fps) / 1000.0
            self._handle_input()
            if not self.paused:
                self._update(dt)
                self.sim_time += dt
            self._render()
        self._cleanup()

    def _handle_input(self):
        """Handle keyboard and mouse input."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_g:
                    self.show_grid = not self.show_grid
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if not self.paused:
                    self._on_click(self.to_scene(event.pos))

    def _door_at(self, x, y):
        for door in self.room.doors.values():
            door_pos = np.array([door["x"], door["y"]]) / 100.0 * np.array(self.stage_size)
            if np.hypot(x - door_pos[0], y - door_pos[1]) <= DOOR_RADIUS and door.get("to"):
                return door
        return None

    def _on_click(self, point):
        x, y = point
        door = self._door_at(x, y)
        if door is None:
            self.room.handle_click(x, y)
            return

        target_x, target_y = self.room.door_target(door, self.stage_size)
        source = self.room.name
        target_room = door["to"]

        def _through_door(character):
            self.enter_room(target_room, from_room=source)

        self.room.handle_click(target_x, target_y, callback=_through_door)

    def _update(self, dt):
        self.player.update(dt)
        for character in self.room.characters.values():
            character.update(dt)
        self.metrics.update_distance(self.player.distance_walked)

    def _render(self):
        background = self._backgrounds.get(self.room.name)
        if isinstance(background, pygame.Surface):
            self.screen.blit(background, (0, 0))
        else:
            self.screen.fill(background or (0, 0, 0))

        self._render_floor()
        if self.show_grid:
            self._render_grid()
        self._render_entities()
        self._render_route()
        self._render_hud()
        pygame.display.flip()

    def _render_floor(self):
        floor = self.room.floor.geometry
        points = [self.to_screen(p) for p in list(floor.exterior.coords)[:-1]]
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        pygame.draw.polygon(overlay, (255, 255, 255, 54), points)
        self.screen.blit(overlay, (0, 0))

    def _render_grid(self):
        """Lattice nodes, green where walkable for the player."""
        planner = self.room.planner()
        step = planner.step_size
        minx, miny, maxx, maxy = self.room.floor.geometry.bounds
        snapshot = self.room.scene.snapshot()
        for gx in np.arange(planner.grid.snap(minx), maxx + step, step):
            for gy in np.arange(planner.grid.snap(miny), maxy + step, step):
                hits = snapshot.objects_at_point((gx, gy))
                if not any(h is self.room.floor for h in hits):
                    continue
                blocked = any(h is not self.room.floor and h is not self.player for h in hits)
                color = (220, 60, 60) if blocked else (60, 200, 90)
                pygame.draw.circle(self.screen, color, self.to_screen((gx, gy)), 3)

    def _render_entities(self):
        for entity in self.room.scene.draw_order():
            if entity is self.room.floor:
                continue
            minx, miny, maxx, maxy = entity.geometry.bounds
            left, top = self.to_screen((minx, miny))
            right, bottom = self.to_screen((maxx, maxy))
            rect = pygame.Rect(left, top, right - left, bottom - top)
            if entity is self.player:
                pygame.draw.rect(self.screen, (60, 140, 255), rect)
            elif isinstance(entity, Character):
                pygame.draw.rect(self.screen, (255, 180, 60), rect)
            elif getattr(entity, "blocking", True):
                pygame.draw.rect(self.screen, (139, 69, 19), rect)
            else:
                pygame.draw.rect(self.screen, (170, 120, 90), rect, 2)

    def _render_route(self):
        if not self.player.is_walking:
            return
        remaining = [self.player.get_position()] + self.player.route[self.player.waypoint_idx:]
        points = [self.to_screen(p) for p in remaining]
        if len(points) > 1:
            pygame.draw.lines(self.screen, (100, 200, 255), False, points, 3)
        pygame.draw.circle(self.screen, (255, 0, 0), points[-1], 6)

    def _render_hud(self):
        metrics = self.metrics.get_current_metrics()
        lines = [
            f"Room: {self.room.name}  FPS: {int(self.clock.get_fps())}",
            f"Plans: {metrics['plans']}  ok: {metrics['successes']}  "
            f"avg: {metrics['plan_time_ms']:.1f}ms",
            f"Walked: {metrics['distance_walked']:.0f}",
        ]
        if self.room.last_result is not None and not self.room.last_result.success:
            lines.append(f"Last: {self.room.last_result.outcome}")
        if self.paused:
            lines.append("PAUSED")
        for i, text in enumerate(lines):
            surface = self.font.render(text, True, (255, 255, 255))
            self.screen.blit(surface, (10, 8 + i * 20))

    def _cleanup(self):
        """Exit the room, print the summary and shut pygame down."""
        if self.room is not None:
            self.room.exit()

        summary = self.metrics.finalize()
        print("\n=== Session Summary ===")
        print(f"Plans: {summary['plans']} (successes: {summary['successes']})")
        for reason, count in sorted(summary["failures"].items()):
            print(f"  {reason}: {count}")
        print(f"Average planning time: {summary['avg_plan_ms']:.2f}ms")
        print(f"Average expansions: {summary['avg_expansions']:.1f}")
        print(f"Distance walked: {summary['distance_walked']:.1f}")
        if self.plan_logger.rows_written:
            print(f"Logs saved to {Path(self.plan_logger.path)}")

        pygame.quit()
