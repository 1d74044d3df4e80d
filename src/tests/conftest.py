"""Shared fakes. Everything here runs headless; nothing opens a window or the network."""
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from src.game.game import Game
from src.game.storage import MemoryStore
from src.game.timers import ManualClock


class RecordingCanvas:
    """Canvas that remembers every call as (op, args...)."""
    width, height = 1600, 800

    def __init__(self):
        self.calls = []

    def fill_rect(self, rect, color):
        self.calls.append(("fill_rect", tuple(rect), tuple(color)))

    def stroke_rect(self, rect, color, width=1):
        self.calls.append(("stroke_rect", tuple(rect), tuple(color)))

    def blit_image(self, image, x, y, w, h):
        self.calls.append(("blit_image", image, (x, y, w, h)))

    def draw_text(self, text, x, y, size, color, align="left"):
        self.calls.append(("draw_text", text, align))

    def fill_overlay(self, color):
        self.calls.append(("fill_overlay", tuple(color)))

    def texts(self):
        return [c[1] for c in self.calls if c[0] == "draw_text"]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def game(clock, store):
    """A loaded game sitting on the character selection screen."""
    g = Game(store=store, clock=clock, seed=1234)
    g.finish_loading(None)
    return g


@pytest.fixture
def canvas():
    return RecordingCanvas()
