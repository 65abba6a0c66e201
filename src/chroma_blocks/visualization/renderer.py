from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import pygame

from chroma_blocks.game import CellState, ChromaBlocksGame, Piece


RGB = Tuple[int, int, int]

BACKGROUND: RGB = (15, 23, 42)
EMPTY_CELL: RGB = (30, 41, 59)
LEGAL_OUTLINE: RGB = (99, 102, 241)
TEXT: RGB = (230, 230, 230)
GAME_OVER_TEXT: RGB = (236, 72, 153)


def _rgb(color: Iterable[float]) -> RGB:
    r, g, b = (int(round(c)) for c in color)
    return r, g, b


def _blend(a: Iterable[float], b: Iterable[float], t: float) -> RGB:
    """Linear mix: t=0 gives `a`, t=1 gives `b`."""
    return _rgb(x + (y - x) * t for x, y in zip(a, b))


def cell_fill_color(state: CellState, color: Iterable[float], preview_color: Iterable[float]) -> RGB:
    if state == CellState.FILLED:
        return _rgb(color)
    if state == CellState.HOVERED:
        return _blend(preview_color, EMPTY_CELL, 0.5)
    if state == CellState.HOVERED_BREAK_FILLED:
        return _rgb(preview_color)
    if state == CellState.HOVERED_BREAK_EMPTY:
        return _blend(preview_color, EMPTY_CELL, 0.65)
    return EMPTY_CELL


@dataclass
class BoardLayout:
    """Pixel geometry of the board and the hand tray below it."""

    board_size: int
    hand_size: int
    cell_size: int = 40
    hand_cell_size: int = 20
    margin: int = 20
    hud_height: int = 40

    @property
    def board_origin(self) -> Tuple[int, int]:
        return self.margin, self.margin + self.hud_height

    @property
    def board_pixels(self) -> int:
        return self.board_size * self.cell_size

    @property
    def slot_width(self) -> int:
        return self.hand_cell_size * 5

    @property
    def tray_top(self) -> int:
        return self.board_origin[1] + self.board_pixels + self.margin

    @property
    def window_size(self) -> Tuple[int, int]:
        width = max(self.board_pixels, self.hand_size * self.slot_width) + self.margin * 2
        height = self.tray_top + self.slot_width + self.margin
        return width, height

    def cell_rect(self, x: int, y: int) -> Tuple[int, int, int, int]:
        bx, by = self.board_origin
        return bx + x * self.cell_size, by + y * self.cell_size, self.cell_size - 2, self.cell_size - 2

    def cell_at(self, px: float, py: float) -> Optional[Tuple[int, int]]:
        bx, by = self.board_origin
        x = int(math.floor((px - bx) / self.cell_size))
        y = int(math.floor((py - by) / self.cell_size))
        if 0 <= x < self.board_size and 0 <= y < self.board_size:
            return x, y
        return None

    def origin_under(self, px: float, py: float, width: int, height: int) -> Optional[Tuple[int, int]]:
        """Top-left cell for a piece centred on the pointer; None off the board."""
        if self.cell_at(px, py) is None:
            return None
        bx, by = self.board_origin
        x = int(math.floor((px - bx) / self.cell_size - width / 2.0 + 0.5))
        y = int(math.floor((py - by) / self.cell_size - height / 2.0 + 0.5))
        return x, y

    def slot_rect(self, index: int) -> Tuple[int, int, int, int]:
        tray_w = self.hand_size * self.slot_width
        left = (self.window_size[0] - tray_w) // 2
        return left + index * self.slot_width, self.tray_top, self.slot_width, self.slot_width

    def slot_at(self, px: float, py: float) -> Optional[int]:
        for index in range(self.hand_size):
            sx, sy, sw, sh = self.slot_rect(index)
            if sx <= px < sx + sw and sy <= py < sy + sh:
                return index
        return None


class Renderer:
    def __init__(self, layout: BoardLayout) -> None:
        self.layout = layout
        self._font: Optional[pygame.font.Font] = None

    @property
    def font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 28)
        return self._font

    def _draw_piece(self, screen: pygame.Surface, piece: Piece, left: float, top: float, cell: int) -> None:
        color = _rgb(piece.color)
        for px, py in piece.cells_at(0, 0):
            rect = pygame.Rect(int(left + px * cell), int(top + py * cell), cell - 1, cell - 1)
            pygame.draw.rect(screen, color, rect, border_radius=cell // 2)

    def draw_board(self, screen: pygame.Surface, game: ChromaBlocksGame) -> None:
        grid = game.grid
        legal = game.legal_origins
        for y in range(grid.size):
            for x in range(grid.size):
                cell = grid.cell(x, y)
                rect = pygame.Rect(*self.layout.cell_rect(x, y))
                pygame.draw.rect(screen, cell_fill_color(cell.state, cell.color, cell.preview_color), rect,
                                 border_radius=self.layout.cell_size // 2)
                if legal is not None and legal[y, x]:
                    pygame.draw.rect(screen, LEGAL_OUTLINE, rect, 1, border_radius=self.layout.cell_size // 2)

    def draw_hand(self, screen: pygame.Surface, game: ChromaBlocksGame,
                  pointer: Optional[Tuple[int, int]] = None) -> None:
        hc = self.layout.hand_cell_size
        for index, piece in enumerate(game.hand):
            if piece is None:
                continue
            if index == game.dragging_index and pointer is not None:
                cs = self.layout.cell_size
                left = pointer[0] - piece.shape.width * cs / 2.0
                top = pointer[1] - piece.shape.height * cs / 2.0
                self._draw_piece(screen, piece, left, top, cs)
                continue
            sx, sy, sw, sh = self.layout.slot_rect(index)
            left = sx + (sw - piece.shape.width * hc) / 2.0
            top = sy + (sh - piece.shape.height * hc) / 2.0
            self._draw_piece(screen, piece, left, top, hc)

    def draw_hud(self, screen: pygame.Surface, game: ChromaBlocksGame) -> None:
        text = f"Score: {int(game.score)}   Combo: {game.combo}   {game.config.mode.value.title()}"
        screen.blit(self.font.render(text, True, TEXT), (self.layout.margin, self.layout.margin // 2))
        if game.is_over:
            over = self.font.render("Game Over - N: new game, M: switch mode", True, GAME_OVER_TEXT)
            screen.blit(over, (self.layout.margin, self.layout.tray_top - self.layout.margin))

    def draw(self, screen: pygame.Surface, game: ChromaBlocksGame,
             pointer: Optional[Tuple[int, int]] = None) -> None:
        screen.fill(BACKGROUND)
        self.draw_hud(screen, game)
        self.draw_board(screen, game)
        self.draw_hand(screen, game, pointer)
        pygame.display.flip()
