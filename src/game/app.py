# src/game/app.py
"""
Playable game window.

  python -m src.game.app
  python -m src.game.app --assets assets/sprites --scale 0.6
  BARKOUR_SUPABASE_URL=... BARKOUR_SUPABASE_KEY=... python -m src.game.app --email me@x.io --password ...
"""
from __future__ import annotations
import argparse
import concurrent.futures
import logging
import os
import sys
import pygame
from .assets import AssetLoader, AssetLoadError
from .canvas import PygameCanvas
from .config import WIDTH, HEIGHT, FPS, COLOR_SKY, COLOR_BLACK, DIFFICULTY_ORDER
from .game import Game
from .input import InputMapper
from .online import GUEST, ScoreReporter, ScoreStoreError, SupabaseClient
from .storage import DEFAULT_SAVE_FILE, LocalStore

logger = logging.getLogger(__name__)

SIGN_IN_TIMEOUT_S = 10.0


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="barkour")
    p.add_argument("--seed", type=int, default=None,
                   help="Obstacle seed. Omit for a random layout each launch.")
    p.add_argument("--assets", type=str, default=None,
                   help="Directory with Buddy.png, Neet.png, pipe.svg, cloud.svg. "
                        "Omit to use built-in sprites.")
    p.add_argument("--save-file", type=str, default=str(DEFAULT_SAVE_FILE),
                   help="Where the high score and selected dog are kept.")
    p.add_argument("--difficulty", type=str.upper, default=DIFFICULTY_ORDER[0], choices=DIFFICULTY_ORDER,
                   help="Difficulty highlighted when the selection screen opens.")
    p.add_argument("--scale", type=float, default=0.75, help="Window size relative to 1600x800.")
    p.add_argument("--fps", type=int, default=FPS)
    p.add_argument("--email", type=str, default=os.environ.get("BARKOUR_EMAIL"))
    p.add_argument("--password", type=str, default=os.environ.get("BARKOUR_PASSWORD"))
    p.add_argument("--log-level", type=str, default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def connect_online(email, password):
    """Returns (session, reporter). Any failure just means playing as a guest."""
    client = SupabaseClient.from_env()
    if client is None:
        logger.info("Online leaderboard not configured, playing offline")
        return GUEST, None
    if not (email and password):
        logger.info("No credentials given, playing as guest")
        return GUEST, None
    reporter = ScoreReporter(client)
    try:
        session = reporter.call(client.sign_in(email, password), SIGN_IN_TIMEOUT_S)
    except (ScoreStoreError, concurrent.futures.TimeoutError) as e:
        logger.warning("Login error: %s (playing as guest)", e)
        reporter.close()
        return GUEST, None
    logger.info("Logged in as %s", session.username)
    return session, reporter


def show_fatal(screen: pygame.Surface, canvas: PygameCanvas, message: str):
    """Keep the window up with the error until the user closes it."""
    clock = pygame.time.Clock()
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT or (event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE):
                return
        canvas.fill_rect((0, 0, WIDTH, HEIGHT), COLOR_SKY)
        canvas.draw_text("FAILED TO LOAD GAME ASSETS", WIDTH / 2, HEIGHT / 2 - 20, 40,
                         COLOR_BLACK, align="center")
        canvas.draw_text(message[:90], WIDTH / 2, HEIGHT / 2 + 40, 20, COLOR_BLACK, align="center")
        present(screen, canvas.surface)
        clock.tick(10)


def present(screen: pygame.Surface, frame: pygame.Surface):
    if screen.get_size() == frame.get_size():
        screen.blit(frame, (0, 0))
    else:
        pygame.transform.smoothscale(frame, screen.get_size(), screen)
    pygame.display.flip()


def run(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    session, reporter = connect_online(args.email, args.password)
    game = Game(store=LocalStore(args.save_file), session=session, reporter=reporter,
                seed=args.seed)
    game.difficulty_index = DIFFICULTY_ORDER.index(args.difficulty)

    pygame.init()
    pygame.display.set_caption("Barkour")
    win_size = (max(320, int(WIDTH * args.scale)), max(160, int(HEIGHT * args.scale)))
    screen = pygame.display.set_mode(win_size)
    frame = pygame.Surface((WIDTH, HEIGHT))
    canvas = PygameCanvas(frame)
    mapper = InputMapper(viewport=win_size)
    clock = pygame.time.Clock()

    try:
        game.render(canvas)
        present(screen, frame)
        try:
            assets = AssetLoader(args.assets).load()
        except AssetLoadError as e:
            logger.error("Failed to initialize game: %s", e)
            show_fatal(screen, canvas, str(e))
            return 1
        game.finish_loading(assets)

        while True:
            dt = clock.tick(args.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return 0
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    return 0
                game.handle_action(mapper.translate(event, game.state))

            game.update(dt)
            game.render(canvas)
            present(screen, frame)
    finally:
        if reporter is not None:
            reporter.close()
        pygame.quit()


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
