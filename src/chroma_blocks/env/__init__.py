"""Gymnasium environments for Chroma Blocks."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .chroma_env import ChromaBlocksEnv

# Classic: 8x8 board, 3-piece hands
register(
    id="ChromaBlocks-Classic-v0",
    entry_point="chroma_blocks.env.chroma_env:ChromaBlocksEnv",
    kwargs={"mode": "classic"},
)

# Chaos: 10x10 board, 5-piece hands
register(
    id="ChromaBlocks-Chaos-v0",
    entry_point="chroma_blocks.env.chroma_env:ChromaBlocksEnv",
    kwargs={"mode": "chaos"},
)

ENV_IDS = ["ChromaBlocks-Classic-v0", "ChromaBlocks-Chaos-v0"]

__all__ = ["ChromaBlocksEnv", "ENV_IDS"]
