from __future__ import annotations

from typing import Iterable, Tuple

from chroma_blocks.game import PALETTE, Color, GameGrid, Piece
from chroma_blocks.game.pieces import SHAPES_BY_NAME


RED = PALETTE[0]
GREEN = PALETTE[1]
BLUE = PALETTE[2]
CHECKER = (PALETTE[6], PALETTE[7])


def piece_of(name: str, color: Color = RED) -> Piece:
    """Piece with a named catalog shape, e.g. 'I4h' or 'O2'."""
    return Piece(SHAPES_BY_NAME[name], color)


def checker_color(x: int, y: int) -> Color:
    # no two orthogonal neighbours share a color, so fills never color-match
    return CHECKER[(x + y) % 2]


def fill_cells(grid: GameGrid, cells: Iterable[Tuple[int, int]], color: Color | None = None) -> None:
    for x, y in cells:
        grid.set_filled(x, y, color if color is not None else checker_color(x, y))


def fill_all_except(grid: GameGrid, holes: Iterable[Tuple[int, int]]) -> None:
    skip = set(holes)
    fill_cells(grid, [(x, y) for y in range(grid.size) for x in range(grid.size) if (x, y) not in skip])


def fill_row_except(grid: GameGrid, y: int, skip: Iterable[int] = ()) -> None:
    skipped = set(skip)
    fill_cells(grid, [(x, y) for x in range(grid.size) if x not in skipped])


# One hole per row and per column, none of them adjacent: no catalog piece
# fits and no line is complete.
SCATTERED_HOLES = [(3, 0), (0, 1), (2, 2), (4, 3), (6, 4), (1, 5), (7, 6), (5, 7)]
# Extra holes where an I2h still fits at (0, 0) without completing a line.
LAST_SLOT = [(0, 0), (1, 0)]


def fill_to_last_move(grid: GameGrid) -> None:
    """Fill an 8x8 board so that an I2h dropped at (0, 0) is the last legal move."""
    fill_all_except(grid, SCATTERED_HOLES + LAST_SLOT)
