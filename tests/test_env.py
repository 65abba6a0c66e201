import gymnasium as gym
import numpy as np
import pytest

from chroma_blocks.env import ENV_IDS, ChromaBlocksEnv
from chroma_blocks.env.wrappers import FlattenDiscreteActionWrapper
from tests.helpers import BLUE, GREEN, RED, fill_to_last_move, piece_of


@pytest.mark.parametrize("env_id,size,hand", [(ENV_IDS[0], 8, 3), (ENV_IDS[1], 10, 5)])
def test_registered_envs_reset_into_their_spaces(env_id, size, hand):
    env = gym.make(env_id)
    obs, info = env.reset(seed=0)
    assert env.observation_space.contains(obs)
    assert obs["cells"].shape == (size, size)
    assert np.all(obs["cells"] == -1)
    assert obs["pieces"].shape == (hand,)
    assert np.all(obs["pieces"] >= 0)
    assert info["action_mask"].shape == (hand, size, size)
    assert info["valid_actions"]
    assert info["fill_ratio"] == 0.0
    env.close()


def test_valid_step_places_and_rewards():
    env = ChromaBlocksEnv(mode="classic")
    obs, info = env.reset(seed=3)
    slot, x, y = info["valid_actions"][0]
    assert info["action_mask"][slot, y, x]
    obs, reward, terminated, truncated, info = env.step((slot, x, y))
    assert reward > 0
    assert info["reward_components"]["blocks"] > 0
    assert info["engine_score_delta"] == env.game.score
    assert obs["pieces"][slot] == -1
    assert np.count_nonzero(obs["cells"] >= 0) > 0
    assert info["fill_ratio"] == np.count_nonzero(obs["cells"] >= 0) / 64
    assert not terminated and not truncated


def test_invalid_step_is_penalised_and_changes_nothing():
    env = ChromaBlocksEnv(invalid_action_penalty=-0.5)
    obs, info = env.reset(seed=1)
    # no catalog shape is 1x1, so nothing fits at the bottom-right corner
    obs2, reward, terminated, truncated, info = env.step((0, 7, 7))
    assert reward == -0.5
    assert info["reward_components"] == {"invalid": -0.5}
    assert np.array_equal(obs["cells"], obs2["cells"])
    assert np.array_equal(obs["pieces"], obs2["pieces"])
    assert env.game.score == 0


def test_same_seed_resets_to_same_hand():
    env = ChromaBlocksEnv()
    first, _ = env.reset(seed=11)
    env.step(env.reset(seed=5)[1]["valid_actions"][0])
    again, _ = env.reset(seed=11)
    assert np.array_equal(first["pieces"], again["pieces"])
    assert np.array_equal(first["piece_colors"], again["piece_colors"])


def test_episode_terminates_when_nothing_fits():
    env = ChromaBlocksEnv(terminal_penalty=-1.0)
    env.reset(seed=0)
    game = env.game
    fill_to_last_move(game.grid)
    game.state.hand = [piece_of("I2h", BLUE), piece_of("O3", GREEN), piece_of("I4h", RED)]
    obs, reward, terminated, truncated, info = env.step((0, 0, 0))
    assert terminated and not truncated
    assert info["reward_components"]["terminal"] == -1.0
    assert info["valid_actions"] == []
    assert not info["action_mask"].any()


def test_truncates_at_step_limit():
    env = ChromaBlocksEnv(max_episode_steps=2)
    env.reset(seed=0)
    assert not env.step((0, 7, 7))[3]
    assert env.step((0, 7, 7))[3]


def test_rgb_render():
    env = ChromaBlocksEnv(render_mode="rgb_array")
    obs, info = env.reset(seed=0)
    env.step(info["valid_actions"][0])
    frame = env.render()
    assert frame.shape == (96, 96, 3)
    assert frame.dtype == np.uint8
    assert ChromaBlocksEnv().render() is None


def test_flatten_wrapper_matches_three_dimensional_mask():
    env = FlattenDiscreteActionWrapper(ChromaBlocksEnv(mode="chaos"))
    obs, info = env.reset(seed=2)
    assert env.action_space.n == 5 * 10 * 10
    flat = env.get_action_mask()
    assert flat.shape == (500,)
    assert np.array_equal(flat, info["action_mask"].reshape(-1))
    for idx in np.flatnonzero(flat)[:20]:
        slot, x, y = env.placement(int(idx))
        assert info["action_mask"][slot, y, x]
        assert env.index_of(slot, x, y) == idx
