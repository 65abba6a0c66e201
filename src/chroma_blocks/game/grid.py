from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np

from .colors import PALETTE, Color
from .pieces import Piece


Coordinate = Tuple[int, int]


class PlacementError(ValueError):
    """Raised when a piece is stamped or dropped at an origin where it does not fit."""


class CellState(IntEnum):
    EMPTY = 0
    HOVERED = 1
    HOVERED_BREAK_FILLED = 2
    HOVERED_BREAK_EMPTY = 3
    FILLED = 4


# States whose `color` is authoritative.
OCCUPIED_STATES = (CellState.FILLED, CellState.HOVERED_BREAK_FILLED)


class BoardCell(NamedTuple):
    state: CellState
    color: Color
    preview_color: Color


@dataclass
class HoverPreview:
    rows: List[int]
    cols: List[int]

    @property
    def lines(self) -> int:
        return len(self.rows) + len(self.cols)


class GameGrid:
    """Square board of cells.

    Cell state lives in an int8 array indexed ``[y, x]``; colors live in two
    float arrays of shape ``(size, size, 3)``, one authoritative and one for
    the hover preview overlay.
    """

    def __init__(self, size: int, rng: Optional[random.Random] = None) -> None:
        if size <= 0:
            raise ValueError("board size must be positive")
        self.size = int(size)
        self.states = np.zeros((self.size, self.size), dtype=np.int8)
        self.colors = np.zeros((self.size, self.size, 3), dtype=np.float32)
        self.preview_colors = np.zeros((self.size, self.size, 3), dtype=np.float32)
        self.reset(rng)

    def reset(self, rng: Optional[random.Random] = None) -> None:
        rng = rng or random
        self.states.fill(CellState.EMPTY)
        self.preview_colors.fill(0)
        # Empty cells still carry a palette color for the board load animation.
        for y in range(self.size):
            for x in range(self.size):
                self.colors[y, x] = PALETTE[rng.randrange(len(PALETTE))]

    # ----- cell access -----
    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def cell(self, x: int, y: int) -> BoardCell:
        return BoardCell(
            CellState(int(self.states[y, x])),
            Color(*(float(c) for c in self.colors[y, x])),
            Color(*(float(c) for c in self.preview_colors[y, x])),
        )

    def state_at(self, x: int, y: int) -> CellState:
        return CellState(int(self.states[y, x]))

    def set_filled(self, x: int, y: int, color: Color) -> None:
        self.states[y, x] = CellState.FILLED
        self.colors[y, x] = color

    def occupied_mask(self) -> np.ndarray:
        return np.isin(self.states, [int(s) for s in OCCUPIED_STATES])

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.states == CellState.FILLED)) / float(self.size * self.size)

    def copy(self) -> "GameGrid":
        new_grid = GameGrid.__new__(GameGrid)
        new_grid.size = self.size
        new_grid.states = self.states.copy()
        new_grid.colors = self.colors.copy()
        new_grid.preview_colors = self.preview_colors.copy()
        return new_grid

    # ----- fit testing -----
    def fits_at(self, piece: Piece, origin_x: int, origin_y: int) -> bool:
        """True iff every occupied piece cell lands in bounds on an unoccupied cell."""
        occupied = self.occupied_mask()
        for x, y in piece.cells_at(origin_x, origin_y):
            if not self.is_inside(x, y):
                return False
            if occupied[y, x]:
                return False
        return True

    def legal_origins(self, piece: Piece) -> np.ndarray:
        """Boolean ``(size, size)`` map indexed ``[y, x]`` of origins where `piece` fits."""
        spots = np.zeros((self.size, self.size), dtype=np.bool_)
        occupied = self.occupied_mask()
        shape = piece.matrix().astype(np.bool_)
        h, w = shape.shape
        for y in range(self.size - h + 1):
            for x in range(self.size - w + 1):
                if not np.any(occupied[y:y + h, x:x + w] & shape):
                    spots[y, x] = True
        return spots

    def first_legal_origin(self, piece: Piece) -> Optional[Coordinate]:
        """First origin in row-major order where `piece` fits, as ``(x, y)``."""
        occupied = self.occupied_mask()
        shape = piece.matrix().astype(np.bool_)
        h, w = shape.shape
        for y in range(self.size - h + 1):
            for x in range(self.size - w + 1):
                if not np.any(occupied[y:y + h, x:x + w] & shape):
                    return x, y
        return None

    def can_place_piece(self, piece: Optional[Piece]) -> bool:
        return piece is not None and self.first_legal_origin(piece) is not None

    # ----- mutation -----
    def stamp(self, piece: Piece, origin_x: int, origin_y: int, target_state: CellState) -> List[Coordinate]:
        """Write `target_state` into the cells covered by `piece` and return them.

        The origin must already have been validated with `fits_at`; an
        origin that does not fit raises PlacementError before anything is
        written.
        """
        if not self.fits_at(piece, origin_x, origin_y):
            raise PlacementError(
                f"piece {piece.shape.name} does not fit at ({origin_x}, {origin_y})"
            )
        cells = piece.cells_at(origin_x, origin_y)
        for x, y in cells:
            self.states[y, x] = target_state
            if target_state in OCCUPIED_STATES:
                self.colors[y, x] = piece.color
            elif target_state == CellState.HOVERED:
                self.preview_colors[y, x] = piece.color
        return cells

    def clear_hover_marks(self) -> None:
        hovered = (self.states == CellState.HOVERED) | (self.states == CellState.HOVERED_BREAK_EMPTY)
        break_filled = self.states == CellState.HOVERED_BREAK_FILLED
        self.states[hovered] = CellState.EMPTY
        self.states[break_filled] = CellState.FILLED
        self.preview_colors.fill(0)

    def has_hover_marks(self) -> bool:
        return bool(np.any((self.states != CellState.EMPTY) & (self.states != CellState.FILLED)))

    def hover_preview(self, piece: Piece, origin_x: int, origin_y: int) -> HoverPreview:
        """Overlay the hovered piece and the lines its drop would break.

        Only overlay states are written; `clear_hover_marks` restores the
        authoritative board exactly.
        """
        self.clear_hover_marks()
        if not self.fits_at(piece, origin_x, origin_y):
            return HoverPreview(rows=[], cols=[])

        scratch = self.copy()
        cells = scratch.stamp(piece, origin_x, origin_y, CellState.HOVERED)
        covered = (scratch.states == CellState.FILLED) | (scratch.states == CellState.HOVERED)
        rows = [int(r) for r in np.flatnonzero(np.all(covered, axis=1))]
        cols = [int(c) for c in np.flatnonzero(np.all(covered, axis=0))]

        for x, y in cells:
            self.states[y, x] = CellState.HOVERED
            self.preview_colors[y, x] = piece.color

        line_mask = np.zeros((self.size, self.size), dtype=np.bool_)
        line_mask[rows, :] = True
        line_mask[:, cols] = True
        filled = line_mask & (self.states == CellState.FILLED)
        others = line_mask & ~filled
        self.states[filled] = CellState.HOVERED_BREAK_FILLED
        self.states[others] = CellState.HOVERED_BREAK_EMPTY
        self.preview_colors[line_mask] = piece.color
        return HoverPreview(rows=rows, cols=cols)

    # ----- clearing -----
    def full_lines(self) -> Tuple[List[int], List[int]]:
        filled = self.states == CellState.FILLED
        rows = [int(r) for r in np.flatnonzero(np.all(filled, axis=1))]
        cols = [int(c) for c in np.flatnonzero(np.all(filled, axis=0))]
        return rows, cols

    def break_full_lines(self) -> int:
        """Empty every full row and column; rows and columns count separately."""
        rows, cols = self.full_lines()
        count = len(rows) + len(cols)
        if count == 0:
            return 0
        self.states[rows, :] = CellState.EMPTY
        self.states[:, cols] = CellState.EMPTY
        return count

    def color_group(self, start_x: int, start_y: int, visited: np.ndarray) -> List[Coordinate]:
        """4-connected FILLED cells matching the color at the start cell."""
        target = Color(*(float(c) for c in self.colors[start_y, start_x]))
        group: List[Coordinate] = []
        stack: List[Coordinate] = [(start_x, start_y)]
        while stack:
            x, y = stack.pop()
            if not self.is_inside(x, y) or visited[y, x]:
                continue
            if self.states[y, x] != CellState.FILLED:
                continue
            if not target.matches(self.colors[y, x]):
                continue
            visited[y, x] = True
            group.append((x, y))
            stack.append((x + 1, y))
            stack.append((x - 1, y))
            stack.append((x, y + 1))
            stack.append((x, y - 1))
        return group

    def break_color_matches(self, seed_cells: Iterable[Coordinate], min_group: int = 3) -> int:
        """Remove same-color groups connected to the seed cells.

        A group qualifies when it has at least `min_group` cells and contains
        at least one cell outside `seed_cells`, so a freshly placed piece
        never clears itself. Returns the number of cells removed.
        """
        seeds: Set[Coordinate] = {(int(x), int(y)) for x, y in seed_cells}
        visited = np.zeros((self.size, self.size), dtype=np.bool_)
        to_remove: List[Coordinate] = []
        for x, y in sorted(seeds, key=lambda c: (c[1], c[0])):
            if not self.is_inside(x, y) or visited[y, x]:
                continue
            if self.states[y, x] != CellState.FILLED:
                continue
            group = self.color_group(x, y, visited)
            if len(group) < min_group:
                continue
            if all(cell in seeds for cell in group):
                continue
            to_remove.extend(group)
        for x, y in to_remove:
            self.states[y, x] = CellState.EMPTY
        return len(to_remove)


def any_piece_fits(grid: GameGrid, hand: Sequence[Optional[Piece]]) -> bool:
    return any(grid.can_place_piece(piece) for piece in hand)


def count_fittable_pieces(grid: GameGrid, hand: Sequence[Optional[Piece]]) -> int:
    return sum(1 for piece in hand if grid.can_place_piece(piece))
