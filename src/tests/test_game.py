"""Screen state machine, round lifecycle, grace timer and score bookkeeping."""
import logging

import pytest

from src.game.config import EASY, MEDIUM, HARD, TICK_S, MAX_TICKS_PER_UPDATE, get_difficulty
from src.game.game import Game
from src.game.input import Action
from src.game.obstacles import Obstacle
from src.game.online import Session
from src.game.state import ScreenState
from src.game.storage import MemoryStore

PLAYER = Session(user_id="u-1", username="rex", access_token="tok")


class FakeReporter:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.submitted = []

    def submit(self, session, score, difficulty, character):
        if self.fail:
            raise RuntimeError("reporter closed")
        self.submitted.append((session.username, score, difficulty, character))


def crash(game):
    """Drop a pipe right under the dog and run one tick."""
    game.obstacles.obstacles.append(Obstacle.pipe(game.character.x, 80))
    game.tick()


def start(game, difficulty_steps=0):
    game.handle_action(Action.CONFIRM)
    for _ in range(difficulty_steps):
        game.handle_action(Action.NAVIGATE_NEXT)
    game.handle_action(Action.CONFIRM)
    assert game.state is ScreenState.PLAYING


# -------------------- Screens --------------------

def test_starts_loading_and_ignores_input(clock):
    g = Game(store=MemoryStore(), clock=clock, seed=1)
    assert g.state is ScreenState.LOADING
    assert g.handle_action(Action.CONFIRM) is False
    g.finish_loading(None)
    assert g.state is ScreenState.SELECT_CHARACTER
    g.finish_loading(None)
    assert g.state is ScreenState.SELECT_CHARACTER


def test_full_flow(game):
    assert game.handle_action(Action.CONFIRM)
    assert game.state is ScreenState.SELECT_DIFFICULTY
    assert game.handle_action(Action.CONFIRM)
    assert game.state is ScreenState.PLAYING
    crash(game)
    assert game.state is ScreenState.GAME_OVER
    assert game.handle_action(Action.CHANGE_CHARACTER)
    assert game.state is ScreenState.SELECT_CHARACTER


@pytest.mark.parametrize("action", [Action.JUMP, Action.RESTART, Action.CHANGE_CHARACTER, None])
def test_foreign_actions_ignored_on_character_select(game, action):
    assert game.handle_action(action) is False
    assert game.state is ScreenState.SELECT_CHARACTER


def test_confirm_ignored_while_playing(game):
    start(game)
    assert game.handle_action(Action.CONFIRM) is False
    assert game.state is ScreenState.PLAYING


def test_character_selection_wraps_and_persists(game, store):
    assert game.character_name == "Buddy"
    game.handle_action(Action.NAVIGATE_NEXT)
    assert game.character_name == "Neet"
    assert store.get_selected_character() == 1
    game.handle_action(Action.NAVIGATE_NEXT)
    assert game.character_index == 0
    game.handle_action(Action.NAVIGATE_PREV)
    assert game.character_index == 1
    assert store.get_selected_character() == 1


def test_stored_character_is_restored(clock):
    g = Game(store=MemoryStore(character=1), clock=clock)
    assert g.character_name == "Neet"
    g = Game(store=MemoryStore(character=7), clock=clock)
    assert g.character_index == 1


def test_difficulty_selection_wraps(game):
    game.handle_action(Action.CONFIRM)
    assert game.difficulty_name == "EASY"
    game.handle_action(Action.NAVIGATE_PREV)
    assert game.difficulty_name == "HARD"
    game.handle_action(Action.NAVIGATE_NEXT)
    game.handle_action(Action.NAVIGATE_NEXT)
    assert game.difficulty_name == "MEDIUM"


# -------------------- Round --------------------

@pytest.mark.parametrize("steps, profile", [(0, EASY), (1, MEDIUM), (2, HARD)])
def test_round_starts_from_profile(game, steps, profile):
    start(game, steps)
    assert game.profile is profile
    assert game.speed == profile.initial_speed
    assert game.score == 0
    assert game.obstacles.obstacles == []
    assert not game.obstacles.spawn_enabled
    assert game.grace_pending


def test_grace_period_enables_spawning(game, clock):
    start(game, 1)  # MEDIUM: 1500 ms
    clock.advance(1.49)
    game.update(0.0)
    assert not game.obstacles.spawn_enabled
    clock.advance(0.02)
    game.update(0.0)
    assert game.obstacles.spawn_enabled
    assert not game.grace_pending


def test_speed_ramps_to_cap(game):
    start(game)  # EASY: 3 -> 6 in 10,000 ticks
    prev = game.speed
    for i in range(10_000):
        game.tick()
        assert game.speed >= prev
        assert game.speed <= EASY.max_speed
        prev = game.speed
        if i == 9_000:
            assert game.speed < EASY.max_speed
    assert game.state is ScreenState.PLAYING
    assert game.speed == 6.0
    assert game.score == 5000.0
    game.tick()
    assert game.speed == 6.0


def test_jump_only_once_in_the_air(game):
    start(game)
    assert game.handle_action(Action.JUMP)
    vy = game.character.vy
    game.handle_action(Action.JUMP)
    assert game.character.vy == vy
    game.tick()
    assert game.character.jumping


def test_collision_ends_round_and_saves_high_score(game, store):
    start(game)
    for _ in range(300):
        game.tick()
    crash(game)
    assert game.state is ScreenState.GAME_OVER
    assert game.high_score == 150
    assert store.get_high_score() == 150


def test_high_score_never_lowered(clock):
    store = MemoryStore(high_score=1000)
    g = Game(store=store, clock=clock, seed=3)
    g.finish_loading(None)
    start(g)
    for _ in range(10):
        g.tick()
    crash(g)
    assert g.high_score == 1000
    assert store.get_high_score() == 1000
    assert store.writes == 0


def test_frozen_after_game_over(game):
    start(game)
    crash(game)
    score, speed, ticks = game.score, game.speed, game.ticks
    for _ in range(10):
        game.tick()
    assert (game.score, game.speed, game.ticks) == (score, speed, ticks)


def test_restart_keeps_selections(game):
    game.handle_action(Action.NAVIGATE_NEXT)
    start(game, 2)
    for _ in range(50):
        game.tick()
    crash(game)
    assert game.handle_action(Action.RESTART)
    assert game.state is ScreenState.PLAYING
    assert game.character_name == "Neet"
    assert game.profile is HARD
    assert game.speed == HARD.initial_speed
    assert game.score == 0
    assert game.obstacles.obstacles == []


def test_change_character_resets_round_but_keeps_high_score(game):
    start(game)
    for _ in range(100):
        game.tick()
    crash(game)
    best = game.high_score
    game.handle_action(Action.CHANGE_CHARACTER)
    assert game.state is ScreenState.SELECT_CHARACTER
    assert game.score == 0
    assert game.speed == 0
    assert game.high_score == best == 50


def test_grace_cancelled_by_game_over(game, clock):
    start(game)
    crash(game)
    clock.advance(10.0)
    game.update(0.0)
    assert not game.obstacles.spawn_enabled


def test_restart_discards_previous_grace_timer(game, clock):
    start(game, 1)           # deadline at 1.5 s
    clock.advance(1.0)
    crash(game)
    game.handle_action(Action.RESTART)   # new deadline at 2.5 s
    clock.advance(0.6)
    game.update(0.0)
    assert not game.obstacles.spawn_enabled
    clock.advance(1.0)
    game.update(0.0)
    assert game.obstacles.spawn_enabled


# -------------------- Online submission --------------------

def _online_game(clock, reporter, session=PLAYER):
    g = Game(store=MemoryStore(), session=session, reporter=reporter, clock=clock, seed=9)
    g.finish_loading(None)
    return g


def test_score_submitted_when_signed_in(clock):
    reporter = FakeReporter()
    g = _online_game(clock, reporter)
    start(g, 2)
    for _ in range(21):
        g.tick()
    crash(g)
    assert reporter.submitted == [("rex", 11, "HARD", "Buddy")]


def test_guest_scores_stay_local(clock):
    reporter = FakeReporter()
    g = _online_game(clock, reporter, session=Session())
    start(g)
    crash(g)
    assert reporter.submitted == []


def test_reporter_failure_does_not_block_game_over(clock, caplog):
    g = _online_game(clock, FakeReporter(fail=True))
    start(g)
    with caplog.at_level(logging.WARNING):
        crash(g)
    assert g.state is ScreenState.GAME_OVER
    assert "Score not submitted" in caplog.text


# -------------------- Frame pacing --------------------

def test_update_runs_whole_ticks(game):
    start(game)
    assert game.update(TICK_S * 0.5) == 0
    assert game.update(TICK_S * 0.5) == 1
    assert game.ticks == 1
    assert game.update(TICK_S * 3.5) == 3
    assert game.ticks == 4


def test_update_clamps_long_stalls(game):
    start(game)
    assert game.update(1.0) == MAX_TICKS_PER_UPDATE
    assert game.ticks == MAX_TICKS_PER_UPDATE
    assert game.update(0.0) == 0


def test_update_does_nothing_off_the_playing_screen(game):
    game.update(1.0)
    assert game.ticks == 0
    assert game.score == 0


# -------------------- Difficulty lookup --------------------

def test_get_difficulty_is_case_insensitive():
    assert get_difficulty("hard") is HARD


@pytest.mark.parametrize("key", ["INSANE", "", None])
def test_unknown_difficulty_falls_back_to_medium(key, caplog):
    with caplog.at_level(logging.WARNING):
        assert get_difficulty(key) is MEDIUM
    assert "Unknown difficulty level" in caplog.text
