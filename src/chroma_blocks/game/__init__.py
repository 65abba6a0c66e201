"""Game module for Chroma Blocks.

Exports the rule engine:
- Color, ColorPool, PALETTE: colors and the rotating color pool
- PieceShape, Piece, CATALOG: weighted shape catalog and dealt pieces
- GameGrid, CellState: board cells, fit testing, previews and clearing
- generate_hand: playability-constrained hand dealing
- ScoringRules: score and combo formula
- ChromaBlocksGame: one play session and its drag/drop state machine
"""

from .colors import Color, ColorPool, PALETTE, palette_index, random_color
from .pieces import CATALOG, Piece, PieceShape, deal_piece, select_random_shape, shape_index
from .grid import (
    BoardCell,
    CellState,
    GameGrid,
    HoverPreview,
    PlacementError,
    any_piece_fits,
    count_fittable_pieces,
)
from .hand import Hand, generate_hand
from .rules import ScoreUpdate, ScoringRules
from .core import (
    ChromaBlocksGame,
    DragPhase,
    DropOutcome,
    DropResult,
    GameConfig,
    GameMode,
    GameState,
    ScoreRecord,
    new_board,
    new_game_state,
)

__all__ = [
    "Color",
    "ColorPool",
    "PALETTE",
    "palette_index",
    "random_color",
    "CATALOG",
    "Piece",
    "PieceShape",
    "deal_piece",
    "select_random_shape",
    "shape_index",
    "BoardCell",
    "CellState",
    "GameGrid",
    "HoverPreview",
    "PlacementError",
    "any_piece_fits",
    "count_fittable_pieces",
    "Hand",
    "generate_hand",
    "ScoreUpdate",
    "ScoringRules",
    "ChromaBlocksGame",
    "DragPhase",
    "DropOutcome",
    "DropResult",
    "GameConfig",
    "GameMode",
    "GameState",
    "ScoreRecord",
    "new_board",
    "new_game_state",
]
