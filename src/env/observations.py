# src/env/observations.py
from __future__ import annotations
import numpy as np
from ..game.config import WIDTH, CHARACTER_H, GROUND_Y, MAX_FALL_SPEED, JUMP_VELOCITY

OBS_SIZE = 6
# [y_norm, vy_norm, jumping, speed_norm, next_gap_norm, next_height_norm]
OBS_LOW = np.array([0.0, -1.0, 0.0, 0.0, 0.0, 0.0], dtype=np.float32)
OBS_HIGH = np.array([1.0, 1.0, 1.0, 1.0, 1.0, 1.0], dtype=np.float32)

MAX_SPEED_REF = 13.0   # fastest profile (HARD)
HEIGHT_REF = 100.0     # pipe max height


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else (hi if x > hi else x)


def build_observation(game) -> np.ndarray:
    """
    Compact vector for the agent.
    - y_norm: 1.0 on the ground, 0.0 at the top of the screen
    - vy_norm: vy scaled by the larger of jump impulse / terminal speed
    - next_gap_norm: distance from the dog's front to the next pipe, 1.0 = none on screen
    """
    ch = game.character
    ground_top = GROUND_Y - CHARACTER_H
    y_norm = _clamp(ch.y / max(1.0, ground_top), 0.0, 1.0)
    vy_ref = max(abs(JUMP_VELOCITY), MAX_FALL_SPEED)
    vy_norm = _clamp(ch.vy / vy_ref, -1.0, 1.0)
    jumping = 1.0 if ch.jumping else 0.0
    speed_norm = _clamp(game.speed / MAX_SPEED_REF, 0.0, 1.0)

    front = ch.x + ch.width
    nxt = game.obstacles.next_obstacle_ahead(ch.x)
    if nxt is None:
        gap_norm, h_norm = 1.0, 0.0
    else:
        gap_norm = _clamp((nxt.x - front) / WIDTH, 0.0, 1.0)
        h_norm = _clamp(nxt.height / HEIGHT_REF, 0.0, 1.0)

    return np.array([y_norm, vy_norm, jumping, speed_norm, gap_norm, h_norm], dtype=np.float32)
