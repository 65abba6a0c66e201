from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from chroma_blocks.game import (
    CATALOG,
    PALETTE,
    CellState,
    ChromaBlocksGame,
    DropResult,
    GameConfig,
    GameMode,
    palette_index,
    shape_index,
)


EMPTY_RGB = (30, 41, 59)
RENDER_CELL = 12

DEFAULT_REWARD_WEIGHTS: Dict[str, float] = {
    "score": 0.01,          # engine score gained by the move
    "blocks": 0.05,         # per block placed
    "color_blocks": 0.5,    # per block removed by a color match
    "lines": 10.0,          # per line broken
}


def _compute_action_mask(game: ChromaBlocksGame) -> np.ndarray:
    """Legal placements as a bool array indexed [slot, y, x]."""
    size = game.board_size
    mask = np.zeros((game.hand_size, size, size), dtype=np.bool_)
    for slot, piece in enumerate(game.hand[: game.hand_size]):
        if piece is not None:
            mask[slot] = game.grid.legal_origins(piece)
    return mask


def _valid_actions(mask: np.ndarray) -> List[Tuple[int, int, int]]:
    return [(int(slot), int(x), int(y)) for slot, y, x in np.argwhere(mask)]


class ChromaBlocksEnv(gym.Env):
    """Single-agent view of a Chroma Blocks session.

    Each step places one hand piece: the action is ``(slot, x, y)``. Illegal
    actions cost `invalid_action_penalty` and leave the session untouched.
    The episode terminates when no hand piece fits the board.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, mode: Optional[str] = None,
                 render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -0.1,
                 terminal_penalty: float = 0.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.game = ChromaBlocksGame(config or GameConfig.for_mode(mode or GameMode.CLASSIC))
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights = dict(DEFAULT_REWARD_WEIGHTS)
        self.reward_weights.update({name: float(w) for name, w in (reward_weights or {}).items()})
        self._steps = 0

        size = self.game.board_size
        k = self.game.hand_size
        n_colors = len(PALETTE)
        self.observation_space = spaces.Dict(
            {
                # -1 marks an empty cell or slot, otherwise a palette / catalog index
                "cells": spaces.Box(low=-1, high=n_colors - 1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(CATALOG) - 1, shape=(k,), dtype=np.int8),
                "piece_colors": spaces.Box(low=-1, high=n_colors - 1, shape=(k,), dtype=np.int8),
                "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, size, size))

    # ----- observation -----
    def _observe(self) -> Dict[str, np.ndarray]:
        grid = self.game.grid
        cells = np.full(grid.states.shape, -1, dtype=np.int8)
        for y, x in np.argwhere(grid.states == CellState.FILLED):
            cells[y, x] = palette_index(grid.colors[y, x])

        k = self.game.hand_size
        pieces = np.full((k,), -1, dtype=np.int8)
        piece_colors = np.full((k,), -1, dtype=np.int8)
        for slot, piece in enumerate(self.game.hand[:k]):
            if piece is None:
                continue
            pieces[slot] = shape_index(piece.shape)
            piece_colors[slot] = palette_index(piece.color)

        return {
            "cells": cells,
            "pieces": pieces,
            "piece_colors": piece_colors,
            "combo": np.array([self.game.combo], dtype=np.int32),
        }

    def _info(self) -> Dict[str, Any]:
        mask = _compute_action_mask(self.game)
        return {
            "action_mask": mask,
            "valid_actions": _valid_actions(mask),
            "score": self.game.score,
            "combo": self.game.combo,
            "fill_ratio": self.game.grid.filled_ratio(),
            "steps": self._steps,
        }

    def _placement_rewards(self, result: DropResult) -> Dict[str, float]:
        w = self.reward_weights
        return {
            "score": w["score"] * float(result.score_gained),
            "blocks": w["blocks"] * float(result.blocks_placed),
            "color_blocks": w["color_blocks"] * float(result.color_blocks_removed),
            "lines": w["lines"] * float(result.lines_broken),
        }

    # ----- gym API -----
    def reset(self, *, seed: Optional[int] = None,
              options: Optional[dict] = None) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        # board and hand sizes are fixed by the spaces, so the mode never changes here
        self.game.reset()
        self._steps = 0
        return self._observe(), self._info()

    def step(self, action):
        slot, x, y = (int(a) for a in action)
        piece = self.game.hand[slot] if 0 <= slot < len(self.game.hand) else None

        score_delta = 0.0
        if piece is not None and self.game.grid.fits_at(piece, x, y):
            result = self.game.place(slot, x, y)
            components = self._placement_rewards(result)
            score_delta = float(result.score_gained)
        else:
            components = {"invalid": self.invalid_action_penalty}

        self._steps += 1
        terminated = self.game.is_over
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            components["terminal"] = self.terminal_penalty

        info = self._info()
        info["reward_components"] = components
        info["engine_score_delta"] = score_delta
        return self._observe(), float(sum(components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.grid
        filled = (grid.states == CellState.FILLED)[..., None]
        board = np.where(filled, np.rint(grid.colors), EMPTY_RGB).astype(np.uint8)
        # one board cell becomes a RENDER_CELL x RENDER_CELL block of pixels
        return np.repeat(np.repeat(board, RENDER_CELL, axis=0), RENDER_CELL, axis=1)
