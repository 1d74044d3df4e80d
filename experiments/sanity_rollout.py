# /experiments/sanity_rollout.py
"""
Sanity rollouts for RunnerEnv:
- Runs RANDOM and/or TINY-HEURISTIC policies over fixed seeds
- Writes an episodes CSV for notebook analysis
- Saves per-episode action sequences for exact replay (same seed + actions = same episode)

Usage examples (from repo root):
  # Both policies over 20 default seeds on MEDIUM, save traces:
  python -m experiments.sanity_rollout --policies both --save-traces

  # Only heuristic, custom seeds, HARD:
  python -m experiments.sanity_rollout --policies heuristic --seeds 111,222,333 --difficulty HARD
"""

from __future__ import annotations
import argparse
import csv
from pathlib import Path
from typing import List, Tuple

import numpy as np

from src.env.runner_env import RunnerEnv


# ------------------------ Policies ------------------------

def random_policy_init(action_seed: int, jump_prob: float = 0.1):
    rng = np.random.RandomState(action_seed)
    def act(_obs: np.ndarray) -> int:
        return int(rng.random_sample() < jump_prob)
    return act

def tiny_heuristic_policy_init(trigger_gap: float = 0.06):
    """
    Jump when grounded and the next pipe's near edge is closer than `trigger_gap`
    (fraction of screen width), scaled up a little with speed.
    """
    def act(obs: np.ndarray) -> int:
        jumping, speed_n, gap_n = obs[2], obs[3], obs[4]
        if jumping > 0.5:
            return 0
        return 1 if gap_n < trigger_gap * (1.0 + speed_n) else 0
    return act


# ------------------------ Rollout core ------------------------

def write_episode_row(csv_path: Path, header: List[str], row: List):
    exists = csv_path.exists()
    with csv_path.open("a", newline="") as f:
        w = csv.writer(f)
        if not exists:
            w.writerow(header)
        w.writerow(row)

def run_one_episode(policy_name: str, seed: int, difficulty: str, frame_skip: int,
                    steps_limit: int, save_traces: bool, out_dir: Path
                    ) -> Tuple[int, float, float, bool, bool]:
    """Returns: (ep_len, ret_sum, score, terminated, truncated)."""
    env = RunnerEnv(difficulty=difficulty, frame_skip=frame_skip)

    if policy_name == "random":
        policy = random_policy_init(10_000 + seed)
    elif policy_name == "heuristic":
        policy = tiny_heuristic_policy_init()
    else:
        raise ValueError("Unknown policy")

    actions: List[int] = []
    ret_sum = 0.0
    ep_len = 0
    term = trunc = False
    info = {}

    try:
        obs, info = env.reset(seed=seed)
        for _ in range(steps_limit):
            a = policy(obs)
            actions.append(int(a))
            obs, r, term, trunc, info = env.step(a)
            ret_sum += float(r)
            ep_len += 1
            if term or trunc:
                break
    finally:
        env.close()

    if save_traces:
        trace_dir = out_dir / "traces" / policy_name
        trace_dir.mkdir(parents=True, exist_ok=True)
        np.save(trace_dir / f"{seed}_actions.npy", np.asarray(actions, dtype=np.int8))
        (trace_dir / f"{seed}_meta.txt").write_text(
            f"seed={seed}\ndifficulty={difficulty}\nframe_skip={frame_skip}\n", encoding="utf-8")

    return ep_len, ret_sum, float(info.get("score", 0.0)), bool(term), bool(trunc)


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--policies", type=str, default="both",
                    choices=["random", "heuristic", "both"])
    ap.add_argument("--seeds", type=str, default="",
                    help="Comma-separated seeds. If empty, uses 20 defaults: 101..120")
    ap.add_argument("--difficulty", type=str, default="MEDIUM", choices=["EASY", "MEDIUM", "HARD"])
    ap.add_argument("--frame-skip", type=int, default=4)
    ap.add_argument("--steps", type=int, default=10_000,
                    help="Hard cap on decision steps (env may truncate earlier)")
    ap.add_argument("--out-dir", type=str, default="experiments/runs")
    ap.add_argument("--save-traces", action="store_true")
    args = ap.parse_args(argv)

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    if args.seeds.strip():
        seeds = [int(s) for s in args.seeds.split(",") if s.strip()]
    else:
        seeds = list(range(101, 121))

    episodes_csv = out_dir / "episodes.csv"
    header = ["policy_name", "seed", "difficulty", "frame_skip",
              "episode_len_decisions", "return_sum", "score", "terminated", "truncated"]

    to_run = ["random", "heuristic"] if args.policies == "both" else [args.policies]
    print(f"Running policies={to_run} on {len(seeds)} seeds ({args.difficulty}, "
          f"frame_skip={args.frame_skip}) -> {episodes_csv}")

    for policy_name in to_run:
        for seed in seeds:
            ep_len, ret_sum, score, terminated, truncated = run_one_episode(
                policy_name, seed, args.difficulty, args.frame_skip,
                args.steps, args.save_traces, out_dir)
            write_episode_row(episodes_csv, header, [
                policy_name, seed, args.difficulty, args.frame_skip,
                ep_len, f"{ret_sum:.1f}", f"{score:.1f}", int(terminated), int(truncated),
            ])
            print(f"[{policy_name}] seed={seed}  len={ep_len}  score={score:.0f}  "
                  f"term={terminated} trunc={truncated}")

    print("✓ Sanity rollouts complete")


if __name__ == "__main__":
    main()
