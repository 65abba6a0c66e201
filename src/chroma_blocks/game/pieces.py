from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .colors import Color, random_color


Shape = np.ndarray


@dataclass(frozen=True)
class PieceShape:
    """Immutable occupancy matrix plus its selection weight."""

    name: str
    matrix: Tuple[Tuple[int, ...], ...]
    distribution_points: float
    _array: Shape = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.distribution_points <= 0:
            raise ValueError(f"{self.name}: distribution_points must be positive")
        arr = np.array(self.matrix, dtype=np.int8)
        arr.setflags(write=False)
        object.__setattr__(self, "_array", arr)

    @property
    def array(self) -> Shape:
        return self._array

    @property
    def height(self) -> int:
        return int(self._array.shape[0])

    @property
    def width(self) -> int:
        return int(self._array.shape[1])

    @property
    def block_count(self) -> int:
        return int(self._array.sum())


def _shape(name: str, rows: List[List[int]], points: float) -> PieceShape:
    return PieceShape(name, tuple(tuple(r) for r in rows), points)


# Catalog order is part of the selection contract; do not reorder.
CATALOG: Tuple[PieceShape, ...] = (
    # L / J
    _shape("L0", [[1, 0, 0], [1, 1, 1]], 2),
    _shape("L1", [[1, 1], [1, 0], [1, 0]], 2),
    _shape("L2", [[1, 1, 1], [0, 0, 1]], 2),
    _shape("L3", [[0, 1], [0, 1], [1, 1]], 2),
    _shape("J0", [[0, 0, 1], [1, 1, 1]], 2),
    _shape("J1", [[1, 0], [1, 0], [1, 1]], 2),
    _shape("J2", [[1, 1, 1], [1, 0, 0]], 2),
    _shape("J3", [[1, 1], [0, 1], [0, 1]], 2),
    # triangle
    _shape("T0", [[1, 1, 1], [0, 1, 0]], 1.5),
    _shape("T1", [[1, 0], [1, 1], [1, 0]], 1.5),
    _shape("T2", [[0, 1, 0], [1, 1, 1]], 1.5),
    _shape("T3", [[0, 1], [1, 1], [0, 1]], 1.5),
    # S / Z
    _shape("S0", [[0, 1, 1], [1, 1, 0]], 1),
    _shape("S1", [[1, 0], [1, 1], [0, 1]], 1),
    _shape("Z0", [[1, 1, 0], [0, 1, 1]], 1),
    _shape("Z1", [[0, 1], [1, 1], [1, 0]], 1),
    # blocks
    _shape("O3", [[1, 1, 1], [1, 1, 1], [1, 1, 1]], 3),
    _shape("O2", [[1, 1], [1, 1]], 6),
    # bars
    _shape("I4v", [[1], [1], [1], [1]], 2),
    _shape("I4h", [[1, 1, 1, 1]], 2),
    _shape("I3v", [[1], [1], [1]], 4),
    _shape("I3h", [[1, 1, 1]], 4),
    _shape("I2v", [[1], [1]], 2),
    _shape("I2h", [[1, 1]], 2),
)

TOTAL_DISTRIBUTION_POINTS = float(sum(s.distribution_points for s in CATALOG))

SHAPES_BY_NAME = {s.name: s for s in CATALOG}


def shape_index(shape: PieceShape) -> int:
    return CATALOG.index(shape)


def select_random_shape(rng: Optional[random.Random] = None) -> PieceShape:
    """Weighted pick: walk the catalog subtracting weights until the remainder goes negative."""
    rng = rng or random
    position = rng.random() * TOTAL_DISTRIBUTION_POINTS
    for shape in CATALOG:
        position -= shape.distribution_points
        if position < 0:
            return shape
    # float drift can leave a tiny non-negative remainder
    return CATALOG[-1]


@dataclass(frozen=True)
class Piece:
    shape: PieceShape
    color: Color

    def matrix(self) -> Shape:
        return self.shape.array

    @property
    def block_count(self) -> int:
        return self.shape.block_count

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        s = self.shape.array
        h, w = s.shape
        cells: List[Tuple[int, int]] = []
        for dy in range(h):
            for dx in range(w):
                if s[dy, dx]:
                    cells.append((origin_x + dx, origin_y + dy))
        return cells


def deal_piece(color: Optional[Color] = None, rng: Optional[random.Random] = None) -> Piece:
    rng = rng or random
    shape = select_random_shape(rng)
    return Piece(shape=shape, color=color if color is not None else random_color(rng))
