# src/game/state.py
from enum import Enum, auto


class ScreenState(Enum):
    """Screens of the game. Exactly one is active; only Game changes it."""
    LOADING = auto()
    SELECT_CHARACTER = auto()
    SELECT_DIFFICULTY = auto()
    PLAYING = auto()
    GAME_OVER = auto()
