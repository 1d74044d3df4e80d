# src/game/character.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any
from .collision import Bounds
from .config import (
    CHARACTER_X, CHARACTER_W, CHARACTER_H, CHARACTER_HITBOX_PADDING, GROUND_Y,
    GRAVITY, JUMP_VELOCITY, MAX_FALL_SPEED, ANIM_FRAME_DELAY, ANIM_FRAMES
)

@dataclass
class Character:
    """
    The running dog. x is fixed (the world scrolls left), y is the sprite's top.
    - vy > 0 falls, vy < 0 rises
    - jumping stays True from take-off until the next landing
    """
    x: float = float(CHARACTER_X)
    y: float = float(GROUND_Y - CHARACTER_H)
    vy: float = 0.0
    width: int = CHARACTER_W
    height: int = CHARACTER_H
    jumping: bool = False
    frame_index: int = 0
    frame_count: int = 0
    sprite: Any = None

    gravity: float = GRAVITY
    jump_velocity: float = JUMP_VELOCITY
    max_fall_speed: float = MAX_FALL_SPEED
    hitbox_padding: float = CHARACTER_HITBOX_PADDING

    @property
    def ground_y(self) -> float:
        """Largest y the sprite's top may take (feet on the ground line)."""
        return float(GROUND_Y - self.height)

    def bounds(self) -> Bounds:
        return Bounds(self.x, self.y, self.width, self.height).shrink(self.hitbox_padding)

    def jump(self) -> bool:
        """Take off only from the ground (no double jump). Returns True if performed."""
        if self.jumping:
            return False
        self.vy = self.jump_velocity
        self.jumping = True
        return True

    def update(self):
        """One tick: gravity, terminal clamp, integrate, land."""
        self.vy += self.gravity
        if self.vy > self.max_fall_speed:
            self.vy = self.max_fall_speed

        self.y += self.vy

        if self.y >= self.ground_y:
            self.y = self.ground_y
            self.vy = 0.0
            self.jumping = False

        # run cycle only on the ground
        if not self.jumping:
            self.frame_count += 1
            if self.frame_count >= ANIM_FRAME_DELAY:
                self.frame_index = (self.frame_index + 1) % ANIM_FRAMES
                self.frame_count = 0

    def reset(self):
        self.y = self.ground_y
        self.vy = 0.0
        self.jumping = False
        self.frame_index = 0
        self.frame_count = 0
