from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .colors import PALETTE, Color
from .grid import GameGrid, count_fittable_pieces
from .pieces import Piece, deal_piece


logger = logging.getLogger(__name__)

Hand = List[Optional[Piece]]

MAX_HAND_ATTEMPTS = 100


def hand_colors(size: int, available: Sequence[Color], rng: Optional[random.Random] = None) -> List[Color]:
    """Pick `size` distinct colors, preferring the first ones in `available`, shuffled.

    When fewer than `size` colors are available the selection is topped up
    with unused palette colors so that hand colors stay distinct; only if the
    palette itself is smaller than `size` do colors repeat.
    """
    rng = rng or random
    chosen: List[Color] = list(available)[:size]
    for color in PALETTE:
        if len(chosen) >= size:
            break
        if not any(color.matches(c) for c in chosen):
            chosen.append(color)
    i = 0
    while len(chosen) < size:
        chosen.append(chosen[i])
        i += 1
    # Fisher-Yates
    for i in range(len(chosen) - 1, 0, -1):
        j = rng.randrange(i + 1)
        chosen[i], chosen[j] = chosen[j], chosen[i]
    return chosen


def deal_hand(size: int, available: Sequence[Color], rng: Optional[random.Random] = None) -> Hand:
    rng = rng or random
    return [deal_piece(color, rng) for color in hand_colors(size, available, rng)]


def generate_hand(
    size: int,
    available: Sequence[Color],
    grid: Optional[GameGrid] = None,
    min_placeable: int = 0,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_HAND_ATTEMPTS,
) -> Hand:
    """Deal a hand of distinct colors that keeps the board playable.

    With a board and a positive `min_placeable`, hands are resampled until at
    least that many pieces fit somewhere. After `max_attempts` the last hand
    is returned as is.
    """
    if size <= 0:
        raise ValueError("hand size must be positive")
    rng = rng or random
    hand = deal_hand(size, available, rng)
    if grid is None or min_placeable <= 0:
        return hand

    for attempt in range(1, max(1, max_attempts) + 1):
        if attempt > 1:
            hand = deal_hand(size, available, rng)
        placeable = count_fittable_pieces(grid, hand)
        if placeable >= min_placeable:
            logger.debug("dealt hand after %d attempt(s), %d placeable", attempt, placeable)
            return hand

    logger.warning(
        "no hand with %d placeable piece(s) after %d attempts; keeping last hand (%d placeable)",
        min_placeable,
        max_attempts,
        count_fittable_pieces(grid, hand),
    )
    return hand


def hand_is_empty(hand: Sequence[Optional[Piece]]) -> bool:
    return all(piece is None for piece in hand)
