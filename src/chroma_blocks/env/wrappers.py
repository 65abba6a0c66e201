from __future__ import annotations

from typing import Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .chroma_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Exposes every (slot, x, y) placement as one Discrete action id.

    Ids follow the [slot, y, x] layout of the env's action mask, so
    `get_action_mask()` lines up with the ids and can be handed straight to
    MaskablePPO.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        if not isinstance(env.action_space, spaces.MultiDiscrete):
            raise TypeError(f"expected a MultiDiscrete placement space, got {env.action_space}")
        hand_size, width, height = (int(n) for n in env.action_space.nvec)
        self.mask_shape = (hand_size, height, width)
        self.action_space = spaces.Discrete(hand_size * width * height)

    def placement(self, index: int) -> Tuple[int, int, int]:
        slot, y, x = np.unravel_index(int(index), self.mask_shape)
        return int(slot), int(x), int(y)

    def index_of(self, slot: int, x: int, y: int) -> int:
        return int(np.ravel_multi_index((slot, y, x), self.mask_shape))

    def action(self, action: int):  # type: ignore[override]
        return np.array(self.placement(action), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game).reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps an illegal flat action for a legal one drawn uniformly.

    Lets vanilla PPO (no masking) train without paying the invalid-action
    penalty. `info["resampled"]` tells whether the action was swapped.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        if not hasattr(env, "get_action_mask"):
            raise TypeError("wrap a FlattenDiscreteActionWrapper, which provides get_action_mask()")

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        index = int(action)
        resampled = False
        if not (0 <= index < mask.size and mask[index]):
            legal = np.flatnonzero(mask)
            if legal.size > 0:
                index = int(self.np_random.choice(legal))
                resampled = True
        obs, reward, terminated, truncated, info = self.env.step(index)
        info["resampled"] = resampled
        return obs, reward, terminated, truncated, info

    def get_action_mask(self) -> np.ndarray:
        return self.env.get_action_mask()
