# src/env/runner_env.py
from __future__ import annotations
from typing import Any, Dict, Optional
import numpy as np
import gymnasium as gym
import pygame

from ..game.canvas import PygameCanvas
from ..game.config import WIDTH, HEIGHT, DIFFICULTY_ORDER
from ..game.game import Game
from ..game.state import ScreenState
from ..game.storage import MemoryStore
from ..game.timers import ManualClock
from .observations import build_observation, OBS_LOW, OBS_HIGH


class RunnerEnv(gym.Env):
    """
    Barkour Gymnasium environment (vector observations).
    - Runs the real Game state machine headless at its fixed 60 Hz tick.
    - Agent acts every `frame_skip` ticks (default 4) -> 15 decisions/sec.
    - The grace timer runs on a simulated clock, so a seed fully determines an episode.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 difficulty: str = "MEDIUM",
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        self.render_mode = render_mode
        self.difficulty = difficulty.upper() if difficulty.upper() in DIFFICULTY_ORDER else "MEDIUM"
        self.frame_skip = int(frame_skip)

        self.sim_fps = 60
        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        # Actions: 0 = NOOP, 1 = JUMP
        self.action_space = gym.spaces.Discrete(2)
        self.observation_space = gym.spaces.Box(low=OBS_LOW, high=OBS_HIGH, dtype=np.float32)

        self.game: Optional[Game] = None
        self.clock: Optional[ManualClock] = None
        self.timestep = 0

        self.screen = None
        self.frame = None
        self.canvas = None
        self.pg_clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)
        difficulty = str((options or {}).get("difficulty", self.difficulty)).upper()

        # no seed -> draw one from the env RNG so the episode is still reproducible via info
        level_seed = int(seed) if seed is not None else int(self.np_random.integers(0, 2**31 - 1))

        self.clock = ManualClock()
        self.game = Game(store=MemoryStore(), clock=self.clock, seed=level_seed)
        self.game.finish_loading(None)
        self.game.difficulty_index = DIFFICULTY_ORDER.index(difficulty) \
            if difficulty in DIFFICULTY_ORDER else DIFFICULTY_ORDER.index("MEDIUM")
        self.game.start_round()
        self.timestep = 0

        obs = build_observation(self.game)
        info = {"seed": level_seed, "difficulty": self.game.difficulty_name, "score": 0.0}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.game is not None and self.clock is not None

        if action == 1:
            self.game.jump()

        for _ in range(self.frame_skip):
            self.clock.advance(self.game.tick_s)
            self.game.step()
            if self.game.state is not ScreenState.PLAYING:
                break

        alive = self.game.state is ScreenState.PLAYING
        reward = 1.0 if alive else -1.0

        self.timestep += 1
        terminated = not alive
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = build_observation(self.game)
        info = {
            "score": self.game.score,
            "speed": self.game.speed,
            "timestep": self.timestep,
            "seed": self.game.obstacles.seed,
            "jumping": self.game.character.jumping,
            "obstacles": len(self.game.obstacles.obstacles),
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.game is None:
            return None

        if self.frame is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH // 2, HEIGHT // 2))
                pygame.display.set_caption("Barkour - RunnerEnv")
                self.pg_clock = pygame.time.Clock()
            self.frame = pygame.Surface((WIDTH, HEIGHT))
            self.canvas = PygameCanvas(self.frame)

        self.game.render(self.canvas)

        if self.render_mode == "human":
            pygame.event.pump()
            pygame.transform.smoothscale(self.frame, self.screen.get_size(), self.screen)
            pygame.display.flip()
            self.pg_clock.tick(self.metadata["render_fps"])
            return None

        arr = pygame.surfarray.array3d(self.frame)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.frame is not None:
            if self.screen is not None:
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.frame = None
            self.canvas = None
            self.pg_clock = None
