# src/game/game.py
from __future__ import annotations
import logging
import math
import random
import time
from typing import Callable, Dict, Optional

from .assets import Assets
from .background import Background
from .character import Character
from .collision import check_collisions
from .config import (
    TICK_S, MAX_TICKS_PER_UPDATE, SCORE_INCREMENT_PER_TICK, CHARACTER_NAMES,
    DIFFICULTY_ORDER, DifficultyProfile, get_difficulty
)
from .input import Action
from .obstacles import ObstacleManager
from .render import draw_game
from .online import GUEST, Session
from .state import ScreenState
from .storage import LocalStore, MemoryStore
from .timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class Game:
    """
    Screen state machine + round simulation.

    The loop calls `update(dt)` then `render(canvas)` once per frame. `update` turns
    wall time into whole fixed ticks (TICK_S) so per-tick tuning means the same
    thing at any frame rate. Input reaches the game only as `Action`s through
    `handle_action`; actions that don't apply to the current screen are ignored.

    Collaborators are injected: `store` (local save), `session` + `reporter`
    (online scores), `clock` (wall clock for the grace timer), `seed` (obstacles).
    """
    def __init__(self,
                 store: Optional[LocalStore] = None,
                 session: Session = GUEST,
                 reporter=None,
                 clock: Callable[[], float] = time.monotonic,
                 seed: int | None = None,
                 tick_s: float = TICK_S):
        self.store = store if store is not None else MemoryStore()
        self.session = session
        self.reporter = reporter
        self.scheduler = Scheduler(clock)
        self.tick_s = float(tick_s)

        self.state = ScreenState.LOADING
        self.assets: Optional[Assets] = None

        self.obstacles = ObstacleManager(seed)
        self.background = Background(random.Random(self.obstacles.seed))
        self.character = Character()

        # round state
        self.speed = 0.0
        self.score = 0.0
        self.ticks = 0
        self.high_score = self.store.get_high_score()
        self.profile: Optional[DifficultyProfile] = None

        # selections
        self.character_index = self.store.get_selected_character() % len(CHARACTER_NAMES)
        self.difficulty_index = 0

        self._grace: Optional[TimerHandle] = None
        self._accumulator = 0.0
        self.last_submission = None

        self._actions: Dict[ScreenState, Dict[Action, Callable[[], None]]] = {
            ScreenState.SELECT_CHARACTER: {
                Action.NAVIGATE_PREV: self.select_previous_character,
                Action.NAVIGATE_NEXT: self.select_next_character,
                Action.CONFIRM: self.proceed_to_difficulty,
            },
            ScreenState.SELECT_DIFFICULTY: {
                Action.NAVIGATE_PREV: self.select_previous_difficulty,
                Action.NAVIGATE_NEXT: self.select_next_difficulty,
                Action.CONFIRM: self.start_round,
            },
            ScreenState.PLAYING: {
                Action.JUMP: self.jump,
            },
            ScreenState.GAME_OVER: {
                Action.RESTART: self.restart,
                Action.CHANGE_CHARACTER: self.return_to_character_selection,
            },
        }

    # -------------------- Properties --------------------

    @property
    def character_name(self) -> str:
        return CHARACTER_NAMES[self.character_index]

    @property
    def difficulty_name(self) -> str:
        return DIFFICULTY_ORDER[self.difficulty_index]

    @property
    def grace_pending(self) -> bool:
        return self._grace is not None and self._grace.active

    # -------------------- Transitions --------------------

    def _set_state(self, new: ScreenState):
        if new is self.state:
            return
        if self.state is ScreenState.PLAYING:
            self._cancel_grace()
        logger.debug("state %s -> %s", self.state.name, new.name)
        self.state = new

    def _cancel_grace(self):
        if self._grace is not None:
            self._grace.cancel()
            self._grace = None

    def finish_loading(self, assets: Optional[Assets] = None):
        """Assets are resolved: hand sprites out and show character selection."""
        if self.state is not ScreenState.LOADING:
            return
        self.assets = assets
        if assets is not None:
            self.obstacles.sprite = assets.pipe
            self.background.sprite = assets.cloud
        self._sync_character_sprite()
        self._set_state(ScreenState.SELECT_CHARACTER)

    def handle_action(self, action: Optional[Action]) -> bool:
        """Apply `action` if the current screen accepts it. Returns True if it did."""
        if action is None:
            return False
        handler = self._actions.get(self.state, {}).get(action)
        if handler is None:
            return False
        handler()
        return True

    def _sync_character_sprite(self):
        if self.assets is not None and self.assets.dogs:
            self.character.sprite = self.assets.dogs[self.character_index % len(self.assets.dogs)]

    def _select_character(self, step: int):
        self.character_index = (self.character_index + step) % len(CHARACTER_NAMES)
        self.store.set_selected_character(self.character_index)
        self._sync_character_sprite()

    def select_previous_character(self):
        self._select_character(-1)

    def select_next_character(self):
        self._select_character(+1)

    def proceed_to_difficulty(self):
        self._sync_character_sprite()
        self._set_state(ScreenState.SELECT_DIFFICULTY)

    def select_previous_difficulty(self):
        self.difficulty_index = (self.difficulty_index - 1) % len(DIFFICULTY_ORDER)

    def select_next_difficulty(self):
        self.difficulty_index = (self.difficulty_index + 1) % len(DIFFICULTY_ORDER)

    def start_round(self):
        """Round setup. Also used by restart, so selections carry over."""
        self._cancel_grace()
        self.profile = get_difficulty(self.difficulty_name)

        self._sync_character_sprite()
        self.character.reset()
        self.background.reset()
        self.obstacles.reset()
        self.obstacles.set_difficulty(self.profile)

        self.speed = self.profile.initial_speed
        self.score = 0.0
        self.ticks = 0
        self._accumulator = 0.0

        self._set_state(ScreenState.PLAYING)
        self._grace = self.scheduler.call_later(self.profile.first_obstacle_delay_s,
                                                self.obstacles.enable_spawning)
        logger.info("round start: %s / %s", self.character_name, self.profile.name)

    def jump(self):
        self.character.jump()

    def restart(self):
        self.start_round()

    def return_to_character_selection(self):
        self._cancel_grace()
        self.character.reset()
        self.background.reset()
        self.obstacles.reset()
        self.speed = 0.0
        self.score = 0.0
        self.ticks = 0
        self._set_state(ScreenState.SELECT_CHARACTER)

    def _game_over(self):
        """Round teardown after a hit. Local save first, online report never waits."""
        self._cancel_grace()
        final = math.floor(self.score)
        if final > self.high_score:
            self.high_score = final
            self.store.set_high_score(final)
            logger.info("new high score: %d", final)

        if self.session.is_authenticated and self.reporter is not None:
            try:
                self.last_submission = self.reporter.submit(
                    self.session, final, self.difficulty_name, self.character_name)
            except RuntimeError as e:  # reporter loop already shut down
                logger.warning("Score not submitted: %s", e)
        else:
            logger.debug("Not logged in, score not saved online")

        self._set_state(ScreenState.GAME_OVER)

    # -------------------- Simulation --------------------

    def update(self, dt: float) -> int:
        """Advance by `dt` seconds of wall time. Returns the number of ticks run."""
        self.scheduler.poll()
        self._accumulator += max(0.0, dt)
        n = int(self._accumulator // self.tick_s)
        if n > MAX_TICKS_PER_UPDATE:
            n = MAX_TICKS_PER_UPDATE
            self._accumulator = 0.0
        else:
            self._accumulator -= n * self.tick_s
        for _ in range(n):
            self.tick()
        return n

    def step(self):
        """One externally driven tick: fire due timers, then simulate."""
        self.scheduler.poll()
        self.tick()

    def tick(self):
        if self.state is ScreenState.PLAYING:
            self._update_playing()

    def _update_playing(self):
        p = self.profile
        self.speed = min(self.speed + p.speed_increment, p.max_speed)
        if p.max_speed - self.speed < 1e-9:  # summed increments drift by ~1e-12
            self.speed = p.max_speed

        self.character.update()
        self.background.update(self.speed)
        self.obstacles.update(self.speed)

        self.score += SCORE_INCREMENT_PER_TICK
        self.ticks += 1

        if check_collisions(self.character, self.obstacles.obstacles):
            self._game_over()

    # -------------------- Rendering --------------------

    def render(self, canvas):
        draw_game(canvas, self)
