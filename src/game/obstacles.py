# src/game/obstacles.py
from __future__ import annotations
import logging
import random
from dataclasses import dataclass
from typing import Any, List, Optional
from .collision import Bounds
from .config import (
    WIDTH, GROUND_Y, PIPE_W, PIPE_HITBOX_PADDING, SPAWN_MARGIN,
    DifficultyProfile
)

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    """A pipe standing on the ground. Size is fixed at spawn; only x changes."""
    x: float
    y: float
    width: int
    height: int
    kind: str = "pipe"
    hitbox_padding: float = PIPE_HITBOX_PADDING

    @classmethod
    def pipe(cls, x: float, height: int) -> "Obstacle":
        return cls(x=float(x), y=float(GROUND_Y - height), width=PIPE_W, height=height)

    def bounds(self) -> Bounds:
        return Bounds(self.x, self.y, self.width, self.height).shrink(self.hitbox_padding)

    def update(self, speed: float):
        self.x -= speed

    def is_off_screen(self) -> bool:
        return self.x + self.width < 0


class ObstacleManager:
    """
    Spawns pipes by accumulated scroll distance, not by time, so density on screen
    doesn't depend on frame pacing. Spawning starts disabled; the owner enables it
    after the round's grace delay.
    """
    def __init__(self, seed: int | None = None, spawn_x: float = WIDTH + SPAWN_MARGIN):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.spawn_x = float(spawn_x)
        self.obstacles: List[Obstacle] = []
        self.profile: Optional[DifficultyProfile] = None
        self.distance_since_last = 0.0
        self.next_spawn_distance = 300.0
        self.spawn_enabled = False
        self.sprite: Any = None

    def set_difficulty(self, profile: DifficultyProfile):
        self.profile = profile
        self.next_spawn_distance = profile.min_spawn_distance

    def enable_spawning(self):
        self.spawn_enabled = True

    def _draw_spawn_distance(self) -> float:
        lo, hi = self.profile.min_spawn_distance, self.profile.max_spawn_distance
        # random() is in [0, 1) so the draw never reaches hi
        return lo + self.rng.random() * (hi - lo)

    def _spawn(self) -> Optional[Obstacle]:
        if not self.spawn_enabled or self.profile is None:
            return None
        height = self.rng.randrange(self.profile.min_height, self.profile.max_height)
        ob = Obstacle.pipe(self.spawn_x, height)
        self.obstacles.append(ob)
        self.next_spawn_distance = self._draw_spawn_distance()
        logger.debug("spawned pipe h=%d, next in %.1f px", height, self.next_spawn_distance)
        return ob

    def update(self, speed: float):
        """Accumulate distance, maybe spawn, then scroll everything and cull."""
        self.distance_since_last += speed
        if self.distance_since_last >= self.next_spawn_distance:
            self._spawn()
            self.distance_since_last = 0.0

        for ob in self.obstacles:
            ob.update(speed)
        self.obstacles = [ob for ob in self.obstacles if not ob.is_off_screen()]

    def reset(self):
        self.obstacles = []
        self.distance_since_last = 0.0
        if self.profile is not None:
            self.next_spawn_distance = self.profile.min_spawn_distance
        self.spawn_enabled = False

    def next_obstacle_ahead(self, x: float) -> Optional[Obstacle]:
        """Closest obstacle whose right edge is still at or past x."""
        ahead = [ob for ob in self.obstacles if ob.x + ob.width >= x]
        return min(ahead, key=lambda ob: ob.x, default=None)
