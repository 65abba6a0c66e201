from __future__ import annotations

import argparse
import logging
from typing import Optional

import pygame

from chroma_blocks.game import ChromaBlocksGame, DragPhase, GameConfig, GameMode, ScoreRecord
from .renderer import BoardLayout, Renderer


def _report_game_over(sender: ChromaBlocksGame, final_score: float, record: ScoreRecord) -> None:
    # Score persistence belongs to the host; here the record is just printed.
    print(f"Game over: {record.to_dict()}")


def _pointer_origin(game: ChromaBlocksGame, layout: BoardLayout, pos) -> Optional[tuple[int, int]]:
    piece = game.dragging_piece
    if piece is None:
        return None
    return layout.origin_under(pos[0], pos[1], piece.shape.width, piece.shape.height)


def run(mode: str = "classic", seed: Optional[int] = None) -> None:
    pygame.init()
    try:
        game = ChromaBlocksGame(GameConfig.for_mode(mode, random_seed=seed))
        game.game_over.connect(_report_game_over, sender=game)
        layout = BoardLayout(game.board_size, game.hand_size)
        renderer = Renderer(layout)
        screen = pygame.display.set_mode(layout.window_size)
        pygame.display.set_caption("Chroma Blocks")

        pointer: Optional[tuple[int, int]] = None
        running = True
        clock = pygame.time.Clock()
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        if game.phase == DragPhase.DRAGGING:
                            game.cancel_drag()
                        else:
                            running = False
                    elif event.key == pygame.K_n:
                        game.reset()
                    elif event.key == pygame.K_m:
                        other = GameMode.CHAOS if game.config.mode == GameMode.CLASSIC else GameMode.CLASSIC
                        game.reset(other)
                        layout = BoardLayout(game.board_size, game.hand_size)
                        renderer = Renderer(layout)
                        screen = pygame.display.set_mode(layout.window_size)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    slot = layout.slot_at(*event.pos)
                    if slot is not None and game.begin_drag(slot):
                        pointer = event.pos
                        game.update_hover(_pointer_origin(game, layout, event.pos))
                elif event.type == pygame.MOUSEMOTION and game.phase == DragPhase.DRAGGING:
                    pointer = event.pos
                    game.update_hover(_pointer_origin(game, layout, event.pos))
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and game.phase == DragPhase.DRAGGING:
                    origin = _pointer_origin(game, layout, event.pos)
                    piece = game.dragging_piece
                    # an explicit origin must fit; anything else falls back to the last hover
                    if origin is not None and piece is not None and not game.grid.fits_at(piece, *origin):
                        origin = None
                    game.resolve_drop(origin)
                    pointer = None

            renderer.draw(screen, game, pointer)
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--mode", choices=[m.value for m in GameMode], default="classic")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    run(args.mode, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
