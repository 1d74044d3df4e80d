# src/game/config.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)

VERSION = "v1.0.0"

# --- Display ---
WIDTH = 1600
HEIGHT = 800
FPS = 60
TICK_S = 1.0 / 60.0          # fixed simulation step (s); per-tick constants assume it
MAX_TICKS_PER_UPDATE = 4     # per update(dt); the rest of a stall is dropped

# --- World / Physics (per tick) ---
GROUND_Y = 600               # top of the ground strip
GROUND_H = 200
GRAVITY = 0.3
JUMP_VELOCITY = -15.0
MAX_FALL_SPEED = 15.0        # terminal velocity

# --- Character ---
CHARACTER_X = 200
CHARACTER_W = 96
CHARACTER_H = 96
CHARACTER_HITBOX_PADDING = 12
ANIM_FRAME_DELAY = 5         # ticks per run frame
ANIM_FRAMES = 2
CHARACTER_NAMES = ("Buddy", "Neet")

# --- Obstacles ---
PIPE_W = 80
PIPE_MIN_H = 60
PIPE_MAX_H = 100
PIPE_HITBOX_PADDING = 4
SPAWN_MARGIN = 20            # pipes appear just past the right edge

# --- Scoring ---
SCORE_INCREMENT_PER_TICK = 0.5

# --- Background ---
CLOUD_PARALLAX = 0.4         # clouds move at 40% of game speed
GROUND_PARALLAX = 0.4
CLOUD_W = 128
CLOUD_H = 48
CLOUD_RESPAWN_X = 50         # past the right edge
CLOUD_MIN_Y = 60
CLOUD_Y_RANGE = 140
CLOUD_START = ((100, 50), (300, 80), (500, 60), (700, 40))
BRICK_SIZE = 32

# --- Input ---
TAP_MAX_MS = 300
TAP_MAX_PX = 30
SWIPE_MIN_PX = 50
ZONE_LOW = 0.33              # left/top third
ZONE_HIGH = 0.67             # right/bottom third
GAME_OVER_SPLIT = 0.6        # tap above = restart, below = change character

# --- Colors (RGB) ---
COLOR_SKY = (92, 148, 252)
COLOR_GROUND = (200, 76, 12)
COLOR_GROUND_DARK = (156, 56, 16)
COLOR_GROUND_LIGHT = (224, 100, 40)
COLOR_PIPE = (0, 168, 0)
COLOR_HIGHLIGHT = (248, 144, 40)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
COLOR_OVERLAY = (0, 0, 0, 178)


@dataclass(frozen=True)
class DifficultyProfile:
    """Speed and spawn tuning for one difficulty. Speeds/distances are per tick / in px."""
    name: str
    initial_speed: float
    speed_increment: float
    max_speed: float
    min_spawn_distance: float
    max_spawn_distance: float
    first_obstacle_delay_ms: int
    min_height: int = PIPE_MIN_H
    max_height: int = PIPE_MAX_H

    @property
    def first_obstacle_delay_s(self) -> float:
        return self.first_obstacle_delay_ms / 1000.0


EASY = DifficultyProfile("EASY", 3.0, 0.0003, 6.0, 700.0, 1400.0, 2000)
MEDIUM = DifficultyProfile("MEDIUM", 5.0, 0.0006, 9.0, 500.0, 1100.0, 1500)
HARD = DifficultyProfile("HARD", 6.0, 0.001, 13.0, 400.0, 900.0, 1000)

DIFFICULTY_PROFILES = MappingProxyType({p.name: p for p in (EASY, MEDIUM, HARD)})
DIFFICULTY_ORDER = ("EASY", "MEDIUM", "HARD")
DEFAULT_DIFFICULTY = "MEDIUM"


def get_difficulty(key: str | None) -> DifficultyProfile:
    """Look up a profile by name (case-insensitive); unknown keys fall back to MEDIUM."""
    profile = DIFFICULTY_PROFILES.get((key or "").upper())
    if profile is None:
        logger.warning("Unknown difficulty level: %r, defaulting to %s", key, DEFAULT_DIFFICULTY)
        return DIFFICULTY_PROFILES[DEFAULT_DIFFICULTY]
    return profile
