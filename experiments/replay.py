# experiments/replay.py
"""
Replay a recorded RunnerEnv episode in a window, with a small debug overlay.

# Typical usage (run from REPO ROOT so `src/...` imports work)

# Replay a HEURISTIC episode by seed (uses experiments/runs/traces/heuristic/<seed>_actions.npy)
python -m experiments.replay --policy heuristic --seed 105

# Replay by pointing directly to a specific actions file
python -m experiments.replay --trace experiments/runs/traces/random/112_actions.npy --difficulty HARD

# Slow the display to ~decision rate (~15 fps) for readability
python -m experiments.replay --policy heuristic --seed 105 --slow

# Controls during replay
SPACE = pause/resume
N     = single step (when paused)
R     = restart episode
ESC   = quit

# Notes
- Deterministic: same seed + difficulty + frame_skip + actions = same episode.
- With --policy/--seed, difficulty and frame_skip come from <seed>_meta.txt when present.
"""

from __future__ import annotations
import argparse
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pygame

from src.env.runner_env import RunnerEnv
from src.game.state import ScreenState

DEFAULT_OUT_DIR = "experiments/runs"


def _find_trace(out_dir: Path, policy: str, seed: int) -> Path:
    p = out_dir / "traces" / policy / f"{seed}_actions.npy"
    if not p.exists():
        raise FileNotFoundError(f"Trace not found: {p}")
    return p


def _read_meta(trace_path: Path) -> Dict[str, str]:
    meta_path = trace_path.with_name(trace_path.name.replace("_actions.npy", "_meta.txt"))
    meta: Dict[str, str] = {}
    if meta_path.exists():
        for line in meta_path.read_text(encoding="utf-8").splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                meta[k.strip()] = v.strip()
    return meta


def _draw_overlay(env: RunnerEnv, step_idx: int, action: Optional[int]):
    surf = pygame.display.get_surface()
    if surf is None or env.game is None:
        return
    font = pygame.font.SysFont("jetbrainsmono", 16)
    game = env.game
    ch = game.character

    lines: List[str] = [
        f"Step={step_idx}  Action={'-' if action is None else ('JUMP' if action == 1 else 'NOOP')}",
        f"Score={game.score:.1f}  Speed={game.speed:.3f}",
        f"y={ch.y:.1f}  vy={ch.vy:+.2f}  jumping={int(ch.jumping)}",
    ]
    nxt = game.obstacles.next_obstacle_ahead(ch.x)
    if nxt is not None:
        lines.append(f"next pipe: gap={nxt.x - (ch.x + ch.width):.0f}px  h={nxt.height:.0f}")
    if game.state is ScreenState.GAME_OVER:
        lines.append("HIT")

    panel = pygame.Surface((340, 20 * (len(lines) + 1)), pygame.SRCALPHA)
    panel.fill((10, 20, 35, 160))
    surf.blit(panel, (12, 12))
    for i, txt in enumerate(lines):
        surf.blit(font.render(txt, True, (210, 230, 255)), (20, 18 + i * 20))
    pygame.display.flip()


def replay_episode(seed: int, actions: np.ndarray, difficulty: str, frame_skip: int,
                   slow: bool = False):
    """
    Replays an episode deterministically with an on-screen overlay.
    Controls:
      SPACE: pause/resume   N: single-step when paused
      R: restart episode    ESC: quit
    """
    env = RunnerEnv(render_mode="human", difficulty=difficulty, frame_skip=frame_skip,
                    time_limit_seconds=None)
    env.reset(seed=seed)
    env.render()

    paused = False
    single = False
    step_idx = 0
    action: Optional[int] = None
    clock = pygame.time.Clock()

    try:
        running = True
        while running and step_idx < len(actions):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_SPACE:
                        paused = not paused
                    elif event.key == pygame.K_n and paused:
                        single = True
                    elif event.key == pygame.K_r:
                        env.reset(seed=seed)
                        step_idx = 0
                        action = None
                        paused = False

            if paused and not single:
                env.render()
                _draw_overlay(env, step_idx, action=None)
                clock.tick(60)
                continue
            single = False

            action = int(actions[step_idx])
            _, _, term, trunc, _ = env.step(action)   # human mode renders inside step
            _draw_overlay(env, step_idx, action)
            step_idx += 1

            clock.tick(15 if slow else 60)

            if term or trunc:
                pygame.time.delay(600)
                break
    finally:
        env.close()


def main(argv=None):
    ap = argparse.ArgumentParser(description="Replay a recorded RunnerEnv episode with overlay.")
    ap.add_argument("--seed", type=int, help="Episode seed")
    ap.add_argument("--policy", type=str, default="random",
                    help="Trace subfolder name, e.g. random / heuristic")
    ap.add_argument("--trace", type=str, default="",
                    help="Optional explicit path to a .npy action file")
    ap.add_argument("--out-dir", type=str, default=DEFAULT_OUT_DIR)
    ap.add_argument("--difficulty", type=str, default=None, choices=["EASY", "MEDIUM", "HARD"],
                    help="Override difficulty. Default: meta file, else MEDIUM")
    ap.add_argument("--frame-skip", type=int, default=-1,
                    help="Override frame_skip. If <0, use meta or default=4")
    ap.add_argument("--slow", action="store_true", help="Slow display (~15 fps) for readability")
    args = ap.parse_args(argv)

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise FileNotFoundError(f"Trace file not found: {trace_path}")
        if args.seed is None:
            stem = trace_path.stem.split("_")[0]
            if not stem.isdigit():
                raise SystemExit("Can't infer the seed from the file name, pass --seed")
            args.seed = int(stem)
    else:
        if args.seed is None:
            raise SystemExit("Please provide --seed or --trace")
        trace_path = _find_trace(Path(args.out_dir), args.policy, args.seed)

    actions = np.load(trace_path)
    if actions.ndim != 1:
        raise ValueError(f"Expected 1D action array, got shape {actions.shape}")

    meta = _read_meta(trace_path)
    difficulty = args.difficulty or meta.get("difficulty", "MEDIUM")
    fs = args.frame_skip if args.frame_skip > 0 else int(meta.get("frame_skip", 4))

    print(f"Replaying seed={args.seed}  difficulty={difficulty}  steps={len(actions)}  frame_skip={fs}")
    print("Controls: SPACE pause/resume | N step (when paused) | R restart | ESC quit")

    replay_episode(seed=args.seed, actions=actions, difficulty=difficulty, frame_skip=fs,
                   slow=args.slow)


if __name__ == "__main__":
    main()
