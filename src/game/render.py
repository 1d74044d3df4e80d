# src/game/render.py
"""Per-screen scenes. Everything is drawn through the Canvas interface, back to front."""
from __future__ import annotations
import math
from .canvas import Canvas
from .config import (
    WIDTH, HEIGHT, GROUND_Y, GROUND_H, BRICK_SIZE, CLOUD_W, CLOUD_H, VERSION,
    CHARACTER_NAMES, DIFFICULTY_ORDER,
    COLOR_SKY, COLOR_GROUND, COLOR_GROUND_DARK, COLOR_GROUND_LIGHT, COLOR_PIPE,
    COLOR_HIGHLIGHT, COLOR_WHITE, COLOR_BLACK, COLOR_OVERLAY
)
from .state import ScreenState


# --- world layers ---

def draw_sky(c: Canvas):
    c.fill_rect((0, 0, WIDTH, GROUND_Y), COLOR_SKY)


def draw_clouds(c: Canvas, background):
    for cloud in background.clouds:
        if background.sprite is not None:
            c.blit_image(background.sprite, cloud.x, cloud.y, CLOUD_W, CLOUD_H)
        else:
            c.fill_rect((cloud.x, cloud.y, CLOUD_W, CLOUD_H), COLOR_WHITE)
            c.fill_rect((cloud.x + CLOUD_W * 0.125, cloud.y - CLOUD_H * 0.167,
                         CLOUD_W * 0.75, CLOUD_H * 0.5), COLOR_WHITE)


def draw_ground(c: Canvas, background):
    c.fill_rect((0, GROUND_Y, WIDTH, GROUND_H), COLOR_GROUND)
    start_x = math.floor(background.ground_offset)
    for x in range(start_x, WIDTH + BRICK_SIZE, BRICK_SIZE):
        for y in range(GROUND_Y, HEIGHT, BRICK_SIZE):
            c.stroke_rect((x, y, BRICK_SIZE, BRICK_SIZE), COLOR_BLACK, width=4)
            c.fill_rect((x + 4, y + 4, BRICK_SIZE - 16, BRICK_SIZE - 16), COLOR_GROUND_LIGHT)
            c.fill_rect((x + BRICK_SIZE - 12, y + BRICK_SIZE - 12, 8, 8), COLOR_GROUND_DARK)


def draw_obstacles(c: Canvas, manager):
    for ob in manager.obstacles:
        if manager.sprite is not None:
            c.blit_image(manager.sprite, ob.x, ob.y, ob.width, ob.height)
        else:
            c.fill_rect((ob.x, ob.y, ob.width, ob.height), COLOR_PIPE)


def draw_character(c: Canvas, ch):
    bob = 2 if (not ch.jumping and ch.frame_index == 1) else 0
    if ch.sprite is not None:
        c.blit_image(ch.sprite, ch.x, ch.y - bob, ch.width, ch.height)
    else:
        c.fill_rect((ch.x, ch.y - bob, ch.width, ch.height), COLOR_GROUND_DARK)


def draw_score(c: Canvas, game):
    c.draw_text(f"HI {game.high_score:05d}", 40, 60, 32, COLOR_BLACK)
    c.draw_text(f"{math.floor(game.score):05d}", 500, 60, 32, COLOR_BLACK)


def draw_world(c: Canvas, game):
    draw_sky(c)
    draw_clouds(c, game.background)
    draw_ground(c, game.background)
    draw_obstacles(c, game.obstacles)
    draw_character(c, game.character)
    draw_score(c, game)


# --- screens ---

def draw_loading(c: Canvas, game):
    c.fill_rect((0, 0, WIDTH, HEIGHT), COLOR_SKY)
    c.draw_text("LOADING...", WIDTH / 2, HEIGHT / 2, 32, COLOR_BLACK, align="center")


def _option_box(c: Canvas, x, y, w, h, selected: bool):
    if selected:
        c.fill_rect((x - 5, y - 5, w + 10, h + 10), COLOR_HIGHLIGHT)
    c.fill_rect((x, y, w, h), COLOR_WHITE)
    c.stroke_rect((x, y, w, h), COLOR_BLACK, width=6)


def draw_character_select(c: Canvas, game):
    c.fill_rect((0, 0, WIDTH, HEIGHT), COLOR_SKY)
    c.draw_text("BARKOUR", WIDTH / 2, 120, 64, COLOR_BLACK, align="center")
    c.draw_text("SELECT YOUR DOG", WIDTH / 2, 180, 24, COLOR_BLACK, align="center")

    size = 300
    dogs = game.assets.dogs if game.assets is not None else []
    for i, name in enumerate(CHARACTER_NAMES):
        x = WIDTH / 2 - 350 + i * 400
        y = 220
        _option_box(c, x - 15, y - 15, size + 30, size + 30, game.character_index == i)
        if i < len(dogs):
            c.blit_image(dogs[i], x, y, size, size)
        c.draw_text(name, x + size / 2, y + size + 50, 32, COLOR_BLACK, align="center")

    c.draw_text("ARROW KEYS / CLICK / TAP TO SELECT", WIDTH / 2, 700, 20, COLOR_BLACK, align="center")
    c.draw_text("SPACE / CLICK / TAP TO CONTINUE", WIDTH / 2, 750, 20, COLOR_BLACK, align="center")


def draw_difficulty_select(c: Canvas, game):
    c.fill_rect((0, 0, WIDTH, HEIGHT), COLOR_SKY)
    c.draw_text("SELECT DIFFICULTY", WIDTH / 2, 120, 48, COLOR_BLACK, align="center")
    w, h = 600, 100
    for i, name in enumerate(DIFFICULTY_ORDER):
        cy = 280 + i * 140
        _option_box(c, WIDTH / 2 - w / 2, cy - h / 2, w, h, game.difficulty_index == i)
        c.draw_text(name, WIDTH / 2, cy + 16, 40, COLOR_BLACK, align="center")
    c.draw_text("UP / DOWN / TAP TO SELECT", WIDTH / 2, 700, 20, COLOR_BLACK, align="center")
    c.draw_text("SPACE / TAP CENTER TO START", WIDTH / 2, 750, 20, COLOR_BLACK, align="center")


def draw_game_over(c: Canvas, game):
    draw_world(c, game)  # frozen last frame
    c.fill_overlay(COLOR_OVERLAY)
    c.draw_text("GAME OVER", WIDTH / 2, 250, 64, COLOR_WHITE, align="center")
    c.draw_text(f"SCORE: {math.floor(game.score)}", WIDTH / 2, 350, 32, COLOR_WHITE, align="center")
    c.draw_text(f"BEST: {game.high_score}", WIDTH / 2, 410, 32, COLOR_WHITE, align="center")
    c.draw_text("SPACE / TAP TOP TO RESTART", WIDTH / 2, 500, 20, COLOR_WHITE, align="center")
    c.draw_text("C / TAP BOTTOM TO CHANGE CHARACTER", WIDTH / 2, 550, 20, COLOR_WHITE, align="center")
    if game.session.is_authenticated:
        c.draw_text(f"PLAYING AS {game.session.username}", WIDTH / 2, 620, 20, COLOR_WHITE,
                    align="center")


SCENES = {
    ScreenState.LOADING: draw_loading,
    ScreenState.SELECT_CHARACTER: draw_character_select,
    ScreenState.SELECT_DIFFICULTY: draw_difficulty_select,
    ScreenState.PLAYING: draw_world,
    ScreenState.GAME_OVER: draw_game_over,
}


def draw_game(c: Canvas, game):
    SCENES[game.state](c, game)
    c.draw_text(VERSION, WIDTH - 20, 30, 16, COLOR_BLACK, align="right")
