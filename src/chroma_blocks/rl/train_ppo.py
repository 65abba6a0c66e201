from __future__ import annotations

import argparse
import os
from typing import Callable, List

import gymnasium as gym

# Registers the ChromaBlocks-* ids
import chroma_blocks.env  # noqa: F401
from chroma_blocks.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper


ENV_BY_MODE = {
    "classic": "ChromaBlocks-Classic-v0",
    "chaos": "ChromaBlocks-Chaos-v0",
}


def make_env(env_id: str, seed: int | None = None, resample: bool = True) -> gym.Env:
    """Flat-action env; `resample` hides illegal picks from vanilla PPO."""
    env: gym.Env = FlattenDiscreteActionWrapper(gym.make(env_id))
    if resample:
        env = ResampleInvalidActionWrapper(env)
    if seed is not None:
        env.reset(seed=seed)
    return env


def env_factories(env_id: str, n_envs: int, masked: bool) -> List[Callable[[], gym.Env]]:
    def factory() -> gym.Env:
        if not masked:
            return make_env(env_id)
        from sb3_contrib.common.wrappers import ActionMasker

        return ActionMasker(make_env(env_id, resample=False), lambda env: env.get_action_mask())

    return [factory for _ in range(n_envs)]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Train a PPO agent on Chroma Blocks")
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo",
                   help="ppo resamples illegal actions; maskable uses sb3-contrib MaskablePPO")
    p.add_argument("--mode", choices=sorted(ENV_BY_MODE), default="classic",
                   help="classic (8x8, 3 pieces) or chaos (10x10, 5 pieces)")
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_chroma_blocks.zip")
    p.add_argument("--n_envs", type=int, default=4)
    return p


def main() -> None:
    args = build_parser().parse_args()
    env_id = ENV_BY_MODE[args.mode]
    masked = args.algo == "maskable"

    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    if masked:
        from sb3_contrib import MaskablePPO as Algo
    else:
        from stable_baselines3 import PPO as Algo

    vec_env = VecMonitor(SubprocVecEnv(env_factories(env_id, args.n_envs, masked)))
    model = Algo(policy="MultiInputPolicy", env=vec_env, verbose=1, tensorboard_log=args.logdir)
    print(f"Training {args.algo} on {env_id} for {args.timesteps} steps ({args.n_envs} envs)")
    model.learn(total_timesteps=args.timesteps)

    save_dir = os.path.dirname(args.save_path)
    if save_dir:
        os.makedirs(save_dir, exist_ok=True)
    model.save(args.save_path)
    print(f"Saved model to {args.save_path}")
    vec_env.close()


if __name__ == "__main__":  # pragma: no cover
    main()
