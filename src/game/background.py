# src/game/background.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Any, List
from .config import (
    WIDTH, CLOUD_PARALLAX, GROUND_PARALLAX, CLOUD_W, CLOUD_RESPAWN_X,
    CLOUD_MIN_Y, CLOUD_Y_RANGE, CLOUD_START, BRICK_SIZE
)


@dataclass
class Cloud:
    x: float
    y: float


class Background:
    """Decorative scroll state: drifting clouds and the brick ground offset."""
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.ground_offset = 0.0
        self.clouds: List[Cloud] = []
        self.sprite: Any = None
        self.reset()

    def update(self, speed: float):
        self.ground_offset -= speed * GROUND_PARALLAX
        if self.ground_offset <= -BRICK_SIZE:
            self.ground_offset = 0.0

        cloud_speed = speed * CLOUD_PARALLAX
        for cloud in self.clouds:
            cloud.x -= cloud_speed
            if cloud.x < -CLOUD_W:
                cloud.x = float(WIDTH + CLOUD_RESPAWN_X)
                cloud.y = CLOUD_MIN_Y + self.rng.random() * CLOUD_Y_RANGE

    def reset(self):
        self.ground_offset = 0.0
        self.clouds = [Cloud(float(x), float(y)) for x, y in CLOUD_START]
