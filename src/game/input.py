# src/game/input.py
"""
Raw device events -> semantic actions, scoped by the current screen.

Keyboard, mouse and touch all end up as one of the `Action` values below; the
Game decides what an action does. Pointer input is classified as a tap (short,
small movement) or a swipe (large movement); anything in between is dropped.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Set, Tuple
import pygame
from .config import (
    WIDTH, HEIGHT, TAP_MAX_MS, TAP_MAX_PX, SWIPE_MIN_PX,
    ZONE_LOW, ZONE_HIGH, GAME_OVER_SPLIT
)
from .state import ScreenState


class Action(Enum):
    NAVIGATE_PREV = auto()
    NAVIGATE_NEXT = auto()
    CONFIRM = auto()
    JUMP = auto()
    RESTART = auto()            # secondary action on GAME_OVER
    CHANGE_CHARACTER = auto()   # secondary action on GAME_OVER


_CONFIRM_KEYS = (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER)

KEY_ACTIONS = {
    ScreenState.SELECT_CHARACTER: {
        pygame.K_LEFT: Action.NAVIGATE_PREV,
        pygame.K_RIGHT: Action.NAVIGATE_NEXT,
        **{k: Action.CONFIRM for k in _CONFIRM_KEYS},
    },
    ScreenState.SELECT_DIFFICULTY: {
        pygame.K_UP: Action.NAVIGATE_PREV,
        pygame.K_DOWN: Action.NAVIGATE_NEXT,
        **{k: Action.CONFIRM for k in _CONFIRM_KEYS},
    },
    ScreenState.PLAYING: {
        pygame.K_SPACE: Action.JUMP,
        pygame.K_UP: Action.JUMP,
    },
    ScreenState.GAME_OVER: {
        pygame.K_SPACE: Action.RESTART,
        pygame.K_c: Action.CHANGE_CHARACTER,
    },
}


@dataclass(frozen=True)
class Gesture:
    """One completed pointer press: where it started/ended and how long it took."""
    start: Tuple[float, float]
    end: Tuple[float, float]
    duration_ms: float

    @property
    def dx(self) -> float:
        return self.end[0] - self.start[0]

    @property
    def dy(self) -> float:
        return self.end[1] - self.start[1]

    @property
    def is_tap(self) -> bool:
        return (self.duration_ms < TAP_MAX_MS and
                abs(self.dx) < TAP_MAX_PX and abs(self.dy) < TAP_MAX_PX)

    @property
    def is_swipe(self) -> bool:
        return abs(self.dx) > SWIPE_MIN_PX or abs(self.dy) > SWIPE_MIN_PX


def map_key(state: ScreenState, key: int) -> Optional[Action]:
    return KEY_ACTIONS.get(state, {}).get(key)


def map_gesture(state: ScreenState, g: Gesture,
                viewport: Tuple[int, int] = (WIDTH, HEIGHT)) -> Optional[Action]:
    """Pure mapping of a finished gesture to an action for `state`."""
    vw, vh = viewport
    x, y = g.end

    if state == ScreenState.SELECT_CHARACTER:
        if g.is_swipe and abs(g.dx) > abs(g.dy):
            return Action.NAVIGATE_NEXT if g.dx > 0 else Action.NAVIGATE_PREV
        if g.is_tap:
            if x < vw * ZONE_LOW:
                return Action.NAVIGATE_PREV
            if x > vw * ZONE_HIGH:
                return Action.NAVIGATE_NEXT
            return Action.CONFIRM

    elif state == ScreenState.SELECT_DIFFICULTY:
        if g.is_swipe and abs(g.dy) > abs(g.dx):
            return Action.NAVIGATE_NEXT if g.dy > 0 else Action.NAVIGATE_PREV
        if g.is_tap:
            if y < vh * ZONE_LOW:
                return Action.NAVIGATE_PREV
            if y > vh * ZONE_HIGH:
                return Action.NAVIGATE_NEXT
            return Action.CONFIRM

    elif state == ScreenState.PLAYING:
        if g.is_tap:
            return Action.JUMP

    elif state == ScreenState.GAME_OVER:
        if g.is_tap:
            return Action.RESTART if y < vh * GAME_OVER_SPLIT else Action.CHANGE_CHARACTER

    return None


class InputMapper:
    """
    Stateful front of the pure mappers: suppresses key auto-repeat and pairs
    pointer down/up into gestures.
    """
    def __init__(self, viewport: Tuple[int, int] = (WIDTH, HEIGHT),
                 now_ms: Callable[[], int] = pygame.time.get_ticks):
        self.viewport = viewport
        self.now_ms = now_ms
        self._held: Set[int] = set()
        self._press: Optional[Tuple[Tuple[float, float], float]] = None

    def key_down(self, state: ScreenState, key: int) -> Optional[Action]:
        if key in self._held:
            return None
        self._held.add(key)
        return map_key(state, key)

    def key_up(self, key: int):
        self._held.discard(key)

    def pointer_down(self, pos: Tuple[float, float], t_ms: Optional[float] = None):
        self._press = (pos, self.now_ms() if t_ms is None else t_ms)

    def pointer_up(self, state: ScreenState, pos: Tuple[float, float],
                   t_ms: Optional[float] = None) -> Optional[Action]:
        if self._press is None:
            return None
        start, t0 = self._press
        self._press = None
        t1 = self.now_ms() if t_ms is None else t_ms
        return map_gesture(state, Gesture(start, pos, t1 - t0), self.viewport)

    def translate(self, event: pygame.event.Event, state: ScreenState) -> Optional[Action]:
        """Feed one pygame event; returns the action it completes, if any."""
        if event.type == pygame.KEYDOWN:
            return self.key_down(state, event.key)
        if event.type == pygame.KEYUP:
            self.key_up(event.key)
        elif event.type == pygame.MOUSEBUTTONDOWN and self._is_primary_mouse(event):
            self.pointer_down(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and self._is_primary_mouse(event):
            return self.pointer_up(state, event.pos)
        elif event.type == pygame.FINGERDOWN:
            self.pointer_down(self._finger_pos(event))
        elif event.type == pygame.FINGERUP:
            return self.pointer_up(state, self._finger_pos(event))
        return None

    @staticmethod
    def _is_primary_mouse(event) -> bool:
        # SDL mirrors touches as mouse events; the FINGER path already handles those
        return event.button == 1 and not getattr(event, "touch", False)

    def _finger_pos(self, event) -> Tuple[float, float]:
        # finger coords are normalized to [0, 1]
        return event.x * self.viewport[0], event.y * self.viewport[1]
