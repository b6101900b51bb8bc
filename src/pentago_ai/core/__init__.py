"""Core board representation and rules."""

from .board import (
    EMPTY,
    LINE_CORES,
    WIN_LINES,
    Board,
    Outcome,
    Token,
    quadrant_cell_to_coords,
)
from .errors import IllegalMove, NoLegalMove, PentagoError, SearchCancelled
from .move import Direction, Move
from .rules import (
    apply_move,
    boards_equal,
    can_place,
    generate_legal_moves,
    get_game_result,
    has_legal_move,
    is_terminal,
    place,
    random_position,
    rotate,
    winner,
)

__all__ = [
    "EMPTY",
    "LINE_CORES",
    "WIN_LINES",
    "Board",
    "Outcome",
    "Token",
    "quadrant_cell_to_coords",
    "IllegalMove",
    "NoLegalMove",
    "PentagoError",
    "SearchCancelled",
    "Direction",
    "Move",
    "apply_move",
    "boards_equal",
    "can_place",
    "generate_legal_moves",
    "get_game_result",
    "has_legal_move",
    "is_terminal",
    "place",
    "random_position",
    "rotate",
    "winner",
]
