import gymnasium as gym
import numpy as np
import pytest
from gymnasium import spaces

from chroma_blocks.env.wrappers import ResampleInvalidActionWrapper
from chroma_blocks.rl.random_agent import run_random
from chroma_blocks.rl.train_ppo import ENV_BY_MODE, build_parser, make_env


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.algo == "ppo"
    assert args.mode == "classic"
    assert args.n_envs == 4
    args = build_parser().parse_args(["--algo", "maskable", "--mode", "chaos"])
    assert ENV_BY_MODE[args.mode] == "ChromaBlocks-Chaos-v0"


def test_make_env_flattens_actions():
    env = make_env(ENV_BY_MODE["classic"], seed=0)
    assert isinstance(env.action_space, spaces.Discrete)
    assert env.action_space.n == 3 * 8 * 8
    assert env.get_action_mask().shape == (192,)
    env.close()


def test_resample_wrapper_replaces_invalid_actions():
    env = make_env(ENV_BY_MODE["classic"], seed=0)
    mask = env.get_action_mask()
    invalid = int(np.flatnonzero(~mask)[0])
    _, _, _, _, info = env.step(invalid)
    assert info["resampled"]
    assert "invalid" not in info["reward_components"]
    assert info["reward_components"]["blocks"] > 0


def test_random_agent_runs():
    total = run_random("ChromaBlocks-Classic-v0", steps=60, seed=0)
    assert isinstance(total, float)
    assert total > 0


def test_resample_wrapper_needs_a_mask():
    with pytest.raises(TypeError):
        ResampleInvalidActionWrapper(gym.make("ChromaBlocks-Classic-v0"))
