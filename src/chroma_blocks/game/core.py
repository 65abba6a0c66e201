from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
from blinker import Signal

from .colors import ColorPool
from .grid import CellState, Coordinate, GameGrid, HoverPreview, PlacementError, any_piece_fits, count_fittable_pieces
from .hand import MAX_HAND_ATTEMPTS, Hand, generate_hand, hand_is_empty
from .pieces import Piece
from .rules import ScoringRules


logger = logging.getLogger(__name__)


class GameMode(Enum):
    CLASSIC = "classic"
    CHAOS = "chaos"


# (board size, hand size)
MODE_DIMENSIONS: Dict[GameMode, Tuple[int, int]] = {
    GameMode.CLASSIC: (8, 3),
    GameMode.CHAOS: (10, 5),
}


@dataclass
class GameConfig:
    mode: GameMode = GameMode.CLASSIC
    board_size: Optional[int] = None
    hand_size: Optional[int] = None
    min_placeable: int = 2
    max_hand_attempts: int = MAX_HAND_ATTEMPTS
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.mode = GameMode(self.mode)
        board_size, hand_size = MODE_DIMENSIONS[self.mode]
        if self.board_size is None:
            self.board_size = board_size
        if self.hand_size is None:
            self.hand_size = hand_size

    @classmethod
    def for_mode(cls, mode: GameMode | str, **overrides: Any) -> "GameConfig":
        return cls(mode=GameMode(mode), **overrides)


class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    GAME_OVER = "game_over"


class DropOutcome(Enum):
    PLACED = "placed"
    CANCELLED = "cancelled"
    IGNORED = "ignored"


@dataclass
class DropResult:
    outcome: DropOutcome
    hand_index: Optional[int] = None
    origin: Optional[Coordinate] = None
    blocks_placed: int = 0
    color_blocks_removed: int = 0
    lines_broken: int = 0
    score_gained: float = 0.0
    refilled: bool = False
    game_over: bool = False

    @property
    def placed(self) -> bool:
        return self.outcome == DropOutcome.PLACED


@dataclass(frozen=True)
class ScoreRecord:
    """Plain record handed to whatever persists high scores."""

    score: float
    timestamp: int
    mode: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "timestamp": self.timestamp, "mode": self.mode}


@dataclass
class GameState:
    grid: GameGrid
    hand: Hand
    color_pool: ColorPool = field(default_factory=ColorPool)
    score: float = 0.0
    combo: int = 0
    no_break_streak: int = 0
    game_over: bool = False


def new_board(size: int, rng: Optional[random.Random] = None) -> GameGrid:
    return GameGrid(size, rng)


def new_game_state(config: GameConfig | GameMode | str = GameMode.CLASSIC,
                   rng: Optional[random.Random] = None) -> GameState:
    """Fresh state for a config, or for a mode given by enum or name."""
    if not isinstance(config, GameConfig):
        config = GameConfig.for_mode(config)
    grid = new_board(int(config.board_size), rng)
    pool = ColorPool()
    hand = generate_hand(
        int(config.hand_size),
        pool.colors,
        grid,
        config.min_placeable,
        rng,
        config.max_hand_attempts,
    )
    return GameState(grid=grid, hand=hand, color_pool=pool)


class ChromaBlocksGame:
    """One play session: board, hand, score and the drag/drop state machine.

    The hosting layer drives it with `begin_drag`, `update_hover`,
    `resolve_drop` and `cancel_drag`; everything runs synchronously.
    Listeners may connect to `piece_placed`, `clear_resolved` and
    `game_over` to observe the session.
    """

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)

        self.piece_placed = Signal("Sent after a piece lands on the board.")
        self.clear_resolved = Signal("Sent when a placement removed color groups or lines.")
        self.game_over = Signal("Sent once when no hand piece fits anymore.")

        self.state: GameState
        self._phase = DragPhase.IDLE
        self._drag_index: Optional[int] = None
        self._legal_origins: Optional[np.ndarray] = None
        self._last_valid_origin: Optional[Coordinate] = None
        self.reset()

    # ----- lifecycle -----
    def reset(self, mode: Optional[GameMode | str] = None) -> None:
        if mode is not None and GameMode(mode) != self.config.mode:
            self.config = replace(self.config, mode=GameMode(mode), board_size=None, hand_size=None)
        self.state = new_game_state(self.config, self.rng)
        self._end_drag()
        self._phase = DragPhase.IDLE
        logger.debug("new %s game: board %d, hand %d", self.config.mode.value, self.board_size, self.hand_size)

    # ----- read-only views -----
    @property
    def grid(self) -> GameGrid:
        return self.state.grid

    @property
    def hand(self) -> Hand:
        return self.state.hand

    @property
    def score(self) -> float:
        return self.state.score

    @property
    def combo(self) -> int:
        return self.state.combo

    @property
    def no_break_streak(self) -> int:
        return self.state.no_break_streak

    @property
    def is_over(self) -> bool:
        return self.state.game_over

    @property
    def board_size(self) -> int:
        return int(self.config.board_size)

    @property
    def hand_size(self) -> int:
        return int(self.config.hand_size)

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def dragging_index(self) -> Optional[int]:
        return self._drag_index

    @property
    def dragging_piece(self) -> Optional[Piece]:
        if self._drag_index is None:
            return None
        return self.state.hand[self._drag_index]

    @property
    def legal_origins(self) -> Optional[np.ndarray]:
        """Origins cached at drag start, indexed ``[y, x]``; None when idle."""
        return self._legal_origins

    @property
    def last_valid_origin(self) -> Optional[Coordinate]:
        return self._last_valid_origin

    def any_piece_fits(self) -> bool:
        return any_piece_fits(self.grid, self.hand)

    def count_fittable_pieces(self) -> int:
        return count_fittable_pieces(self.grid, self.hand)

    def score_record(self) -> ScoreRecord:
        return ScoreRecord(score=self.state.score, timestamp=int(time.time() * 1000), mode=self.config.mode.value)

    # ----- drag state machine -----
    def begin_drag(self, hand_index: int) -> bool:
        if self.state.game_over:
            return False
        if self._phase == DragPhase.DRAGGING:
            self.cancel_drag()
        if not 0 <= hand_index < len(self.state.hand):
            return False
        piece = self.state.hand[hand_index]
        if piece is None:
            return False
        self.grid.clear_hover_marks()
        self._drag_index = hand_index
        self._legal_origins = self.grid.legal_origins(piece)
        self._last_valid_origin = None
        self._phase = DragPhase.DRAGGING
        logger.debug("drag slot %d (%s)", hand_index, piece.shape.name)
        return True

    def update_hover(self, origin: Optional[Coordinate]) -> Optional[HoverPreview]:
        """Preview a drop at `origin`; None clears the preview."""
        if self._phase != DragPhase.DRAGGING:
            return None
        self.grid.clear_hover_marks()
        if origin is None:
            self._last_valid_origin = None
            return None
        x, y = int(origin[0]), int(origin[1])
        if not self._is_cached_legal(x, y):
            return None
        self._last_valid_origin = (x, y)
        return self.grid.hover_preview(self.dragging_piece, x, y)  # type: ignore[arg-type]

    def cancel_drag(self) -> None:
        if self._phase != DragPhase.DRAGGING:
            return
        self.grid.clear_hover_marks()
        self._end_drag()
        self._phase = DragPhase.IDLE
        logger.debug("drag cancelled")

    def resolve_drop(self, origin: Optional[Coordinate] = None) -> DropResult:
        """Finish the current drag.

        An explicit `origin` is trusted as the drop target and must fit;
        otherwise the last legal hover origin is used, and failing that the
        first legal origin in row-major order. With no legal origin at all
        the drag is cancelled.
        """
        if self.state.game_over or self._phase != DragPhase.DRAGGING:
            self.grid.clear_hover_marks()
            return DropResult(DropOutcome.IGNORED)

        index = int(self._drag_index)  # type: ignore[arg-type]
        piece = self.state.hand[index]
        assert piece is not None
        self.grid.clear_hover_marks()

        target: Optional[Coordinate]
        if origin is not None:
            target = (int(origin[0]), int(origin[1]))
            if not self.grid.fits_at(piece, *target):
                self._end_drag()
                self._phase = DragPhase.IDLE
                raise PlacementError(f"piece {piece.shape.name} dropped at {target} where it does not fit")
        elif self._last_valid_origin is not None and self.grid.fits_at(piece, *self._last_valid_origin):
            target = self._last_valid_origin
        else:
            target = self.grid.first_legal_origin(piece)

        self._end_drag()
        if target is None:
            self._phase = DragPhase.IDLE
            logger.debug("drop cancelled: %s has no legal origin", piece.shape.name)
            return DropResult(DropOutcome.CANCELLED, hand_index=index)

        result = self._place(index, piece, target)
        self._phase = DragPhase.GAME_OVER if result.game_over else DragPhase.IDLE
        return result

    def place(self, hand_index: int, x: int, y: int) -> DropResult:
        """Drag slot `hand_index` and drop it at ``(x, y)`` in one step."""
        if not self.begin_drag(hand_index):
            return DropResult(DropOutcome.IGNORED, hand_index=hand_index)
        return self.resolve_drop((x, y))

    # ----- internals -----
    def _is_cached_legal(self, x: int, y: int) -> bool:
        if self._legal_origins is None or not self.grid.is_inside(x, y):
            return False
        return bool(self._legal_origins[y, x])

    def _end_drag(self) -> None:
        self._drag_index = None
        self._legal_origins = None
        self._last_valid_origin = None

    def _place(self, index: int, piece: Piece, origin: Coordinate) -> DropResult:
        state = self.state
        cells = state.grid.stamp(piece, origin[0], origin[1], CellState.FILLED)
        color_removed = state.grid.break_color_matches(cells, self.rules.color_group_size)
        lines = state.grid.break_full_lines()

        update = self.rules.apply(
            state.score,
            state.combo,
            state.no_break_streak,
            blocks_placed=piece.block_count,
            color_blocks_removed=color_removed,
            lines_broken=lines,
            board_length=state.grid.size,
            hand_size=self.hand_size,
        )
        state.score = update.score
        state.combo = update.combo
        state.no_break_streak = update.no_break_streak

        state.color_pool.consume(piece.color)
        state.hand[index] = None
        refilled = hand_is_empty(state.hand)
        if refilled:
            state.hand = generate_hand(
                self.hand_size,
                state.color_pool.colors,
                state.grid,
                self.config.min_placeable,
                self.rng,
                self.config.max_hand_attempts,
            )
        logger.debug(
            "placed %s at %s: +%.1f (colors %d, lines %d, combo %d)%s",
            piece.shape.name, origin, update.gained, color_removed, lines, update.combo,
            " refilled hand" if refilled else "",
        )

        self.piece_placed.send(self, blocks_placed=piece.block_count, origin=origin, hand_index=index)
        if color_removed > 0 or lines > 0:
            self.clear_resolved.send(self, color_blocks_removed=color_removed, lines_broken=lines)

        if not any_piece_fits(state.grid, state.hand):
            state.game_over = True
            logger.info("game over: %s score %d", self.config.mode.value, int(state.score))
            self.game_over.send(self, final_score=state.score, record=self.score_record())

        return DropResult(
            DropOutcome.PLACED,
            hand_index=index,
            origin=origin,
            blocks_placed=piece.block_count,
            color_blocks_removed=color_removed,
            lines_broken=lines,
            score_gained=update.gained,
            refilled=refilled,
            game_over=state.game_over,
        )
