from __future__ import annotations

import argparse
import random
from typing import Optional

import gymnasium as gym

import chroma_blocks.env  # noqa: F401  (registers the environments)


def run_random(env_id: str = "ChromaBlocks-Classic-v0", steps: int = 200, seed: Optional[int] = None) -> float:
    """Play uniformly among legal placements; returns the summed reward."""
    rng = random.Random(seed)
    env = gym.make(env_id)
    _, info = env.reset(seed=seed)
    total = 0.0
    finished = 0
    for _ in range(steps):
        legal = info["valid_actions"]
        action = rng.choice(legal) if legal else env.action_space.sample()
        _, reward, terminated, truncated, info = env.step(action)
        total += float(reward)
        if terminated or truncated:
            finished += 1
            print(f"episode {finished}: score {int(info['score'])} after {info['steps']} moves")
            _, info = env.reset()
    env.close()
    return total


def main() -> None:
    p = argparse.ArgumentParser(description="Random legal-move baseline for Chroma Blocks")
    p.add_argument("--mode", choices=["classic", "chaos"], default="classic")
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    env_id = f"ChromaBlocks-{args.mode.title()}-v0"
    print(f"Random agent total reward: {run_random(env_id, args.steps, args.seed):.2f}")


if __name__ == "__main__":  # pragma: no cover
    main()
