from __future__ import annotations

import random
from typing import Iterable, Iterator, List, NamedTuple, Optional


class Color(NamedTuple):
    r: float
    g: float
    b: float

    def matches(self, other: Iterable[float]) -> bool:
        """Channel-wise equality with a tolerance of less than 1."""
        return all(abs(a - b) < 1 for a, b in zip(self, other))


PALETTE: tuple[Color, ...] = (
    Color(239, 68, 68),    # red
    Color(34, 197, 94),    # green
    Color(59, 130, 246),   # blue
    Color(245, 158, 11),   # amber
    Color(168, 85, 247),   # purple
    Color(236, 72, 153),   # pink
    Color(6, 182, 212),    # cyan
    Color(251, 146, 60),   # orange
)


def random_color(rng: Optional[random.Random] = None) -> Color:
    rng = rng or random
    return PALETTE[rng.randrange(len(PALETTE))]


def palette_index(color: Iterable[float]) -> int:
    """Index of `color` in PALETTE, or -1 if it is not a palette color."""
    for idx, candidate in enumerate(PALETTE):
        if candidate.matches(color):
            return idx
    return -1


class ColorPool:
    """Colors not yet used up in the current placement cycle.

    Placing a piece removes its color; once every color is used the pool
    starts over with the full palette.
    """

    def __init__(self, colors: Optional[Iterable[Color]] = None) -> None:
        self._colors: List[Color] = list(colors) if colors is not None else list(PALETTE)

    def consume(self, color: Color) -> None:
        self._colors = [c for c in self._colors if not c.matches(color)]
        if not self._colors:
            self.reset()

    def reset(self) -> None:
        self._colors = list(PALETTE)

    @property
    def colors(self) -> List[Color]:
        return list(self._colors)

    def __len__(self) -> int:
        return len(self._colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(list(self._colors))

    def __contains__(self, color: object) -> bool:
        return any(c.matches(color) for c in self._colors)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"ColorPool({len(self._colors)} colors)"
