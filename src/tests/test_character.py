"""Character physics: gravity, terminal speed, ground clamp, jumping, run animation."""
import random

from src.game.character import Character
from src.game.config import (
    GROUND_Y, CHARACTER_H, CHARACTER_X, JUMP_VELOCITY, MAX_FALL_SPEED, GRAVITY,
    ANIM_FRAME_DELAY, CHARACTER_HITBOX_PADDING
)


def test_starts_on_ground():
    ch = Character()
    assert ch.x == CHARACTER_X
    assert ch.y == GROUND_Y - CHARACTER_H == ch.ground_y
    assert not ch.jumping


def test_update_on_ground_stays_put():
    ch = Character()
    ch.update()
    assert ch.y == ch.ground_y
    assert ch.vy == 0.0
    assert not ch.jumping


def test_jump_sets_impulse_and_no_double_jump():
    ch = Character()
    assert ch.jump() is True
    assert ch.vy == JUMP_VELOCITY
    assert ch.jumping

    # second request on the same tick: ignored
    assert ch.jump() is False
    assert ch.vy == JUMP_VELOCITY

    # and again mid-air, after some integration
    ch.update()
    vy_mid = ch.vy
    assert ch.jump() is False
    assert ch.vy == vy_mid
    assert ch.y < ch.ground_y


def test_lands_and_can_jump_again():
    ch = Character()
    ch.jump()
    for _ in range(500):
        ch.update()
        if not ch.jumping:
            break
    assert not ch.jumping
    assert ch.y == ch.ground_y and ch.vy == 0.0
    assert ch.jump() is True


def test_terminal_fall_speed():
    ch = Character(y=0.0, vy=MAX_FALL_SPEED - GRAVITY / 2, jumping=True)
    ch.update()
    assert ch.vy == MAX_FALL_SPEED


def test_invariants_under_random_jumps():
    rng = random.Random(7)
    ch = Character()
    for _ in range(5000):
        if rng.random() < 0.05:
            ch.jump()
        ch.update()
        assert ch.y <= ch.ground_y
        assert ch.vy <= MAX_FALL_SPEED


def test_animation_only_while_grounded():
    ch = Character()
    for _ in range(ANIM_FRAME_DELAY):
        ch.update()
    assert ch.frame_index == 1

    ch.jump()
    ch.update()
    frame, count = ch.frame_index, ch.frame_count
    for _ in range(10):
        ch.update()
        if not ch.jumping:
            break
        assert (ch.frame_index, ch.frame_count) == (frame, count)


def test_bounds_are_padded():
    ch = Character()
    b = ch.bounds()
    p = CHARACTER_HITBOX_PADDING
    assert b.left == ch.x + p
    assert b.top == ch.y + p
    assert b.width == ch.width - 2 * p
    assert b.height == ch.height - 2 * p


def test_reset_restores_ground_state():
    ch = Character()
    ch.jump()
    for _ in range(12):
        ch.update()
    ch.reset()
    assert (ch.y, ch.vy, ch.jumping, ch.frame_index, ch.frame_count) == (ch.ground_y, 0.0, False, 0, 0)
