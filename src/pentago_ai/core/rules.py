"""
Pentago game rules implementation.

A turn is:
1. Place a token on any empty cell
2. Rotate one quadrant 90 degrees left or right

The first player with five in a row (row, column or diagonal) wins. If the
placement alone completes five in a row, the game is over and the rotation
is not applied. If a rotation completes lines for both players, the game is
a tie.
"""

import random
from typing import List, Set, Tuple, Union

from .board import (
    EMPTY,
    QUADRANT_OFFSETS,
    QUADRANT_SIZE,
    SIZE,
    WIN_WINDOWS,
    Board,
    Outcome,
    Token,
    index_of,
    quadrant_cell_to_coords,
)
from .errors import IllegalMove
from .move import Direction, Move


def _rotation_sources(quadrant: int, direction: Direction) -> Tuple[int, ...]:
    """For each destination cell, the index it is copied from."""
    row_offset, col_offset = QUADRANT_OFFSETS[quadrant]
    last = QUADRANT_SIZE - 1
    sources = list(range(SIZE * SIZE))

    for r in range(QUADRANT_SIZE):
        for c in range(QUADRANT_SIZE):
            if direction is Direction.RIGHT:
                nr, nc = c, last - r
            else:
                nr, nc = last - c, r
            sources[index_of(row_offset + nr, col_offset + nc)] = index_of(
                row_offset + r, col_offset + c
            )
    return tuple(sources)


_ROTATION_SOURCES = {
    (quadrant, direction): _rotation_sources(quadrant, direction)
    for quadrant in QUADRANT_OFFSETS
    for direction in Direction
}


def can_place(board: Board, quadrant: int, cell: int) -> bool:
    """Check whether the cell at quadrant/cell is empty."""
    row, col = quadrant_cell_to_coords(quadrant, cell)
    return board.cells[index_of(row, col)] == EMPTY


def place(board: Board, token: Token, quadrant: int, cell: int) -> Board:
    """
    Place a token without rotating.

    Args:
        board: Current board
        token: Token to place
        quadrant: Quadrant number (1-4)
        cell: Cell number within the quadrant (1-9)

    Returns:
        New Board with the cell set to token

    Raises:
        IllegalMove: If the cell is already occupied
    """
    row, col = quadrant_cell_to_coords(quadrant, cell)
    idx = index_of(row, col)
    if board.cells[idx] != EMPTY:
        raise IllegalMove(f"Cell {quadrant}/{cell} is already occupied")

    cells = list(board.cells)
    cells[idx] = Token(token).value
    return Board(cells=tuple(cells))


def rotate(board: Board, quadrant: int, direction: Union[Direction, str]) -> Board:
    """
    Rotate one quadrant by 90 degrees.

    In the quadrant's local 3x3 frame, clockwise ('r') moves (r, c) to
    (c, 2 - r) and counter-clockwise ('l') moves (r, c) to (2 - c, r).
    Cells outside the quadrant are unchanged.

    Args:
        board: Current board
        quadrant: Quadrant number (1-4)
        direction: Direction.LEFT or Direction.RIGHT (or 'l' / 'r')

    Returns:
        New rotated Board
    """
    if quadrant not in QUADRANT_OFFSETS:
        raise IllegalMove(f"Quadrant {quadrant} out of range (1-4)")
    try:
        direction = Direction(direction.lower())
    except (AttributeError, ValueError):
        raise IllegalMove(f"Invalid direction {direction!r}, must be 'l' or 'r'") from None

    sources = _ROTATION_SOURCES[quadrant, direction]
    cells = board.cells
    return Board(cells=tuple(cells[i] for i in sources))


def _line_winners(board: Board) -> Set[str]:
    """Collect every token that has five in a row on some line."""
    cells = board.cells
    winners = set()
    for a, b, c, d, e in WIN_WINDOWS:
        first = cells[a]
        if first != EMPTY and first == cells[b] == cells[c] == cells[d] == cells[e]:
            winners.add(first)
    return winners


def winner(board: Board) -> Outcome:
    """
    Scan the board for five in a row.

    Returns:
        Outcome.BLACK / Outcome.WHITE if exactly one token has a line,
        Outcome.TIE if both do, Outcome.NONE otherwise
    """
    winners = _line_winners(board)
    if len(winners) == 2:
        return Outcome.TIE
    if winners:
        return Outcome(winners.pop())
    return Outcome.NONE


def is_terminal(board: Board) -> bool:
    """A board is terminal once decided or full."""
    return winner(board).decided or not has_legal_move(board)


def has_legal_move(board: Board) -> bool:
    """Check whether any cell is still empty."""
    return EMPTY in board.cells


def boards_equal(a: Board, b: Board) -> bool:
    """Cell-by-cell equality."""
    return a.cells == b.cells


def apply_move(board: Board, token: Token, move: Union[Move, str]) -> Board:
    """
    Apply a full turn and return the resulting board.

    The placement is applied first. If it already produces five in a row the
    rotation is skipped, so the winning line is never disturbed. Otherwise the
    rotation is mandatory.

    Args:
        board: Current board (never modified)
        token: Token to place
        move: Move or move label

    Returns:
        New Board after the turn

    Raises:
        IllegalMove: If the cell is occupied, or the rotation is missing on a
            placement that does not win
    """
    if not isinstance(move, Move):
        move = Move.parse(move)

    placed = place(board, token, move.place_quadrant, move.place_cell)
    if winner(placed).decided:
        return placed

    if not move.has_rotation:
        raise IllegalMove(f"Move {move.label!r} needs a rotation")

    return rotate(placed, move.rotate_quadrant, move.direction)


def generate_legal_moves(board: Board) -> List[Move]:
    """
    Generate every legal move.

    Order: placement quadrant, cell, rotation quadrant, then left before
    right. Empty result means the board is full.
    """
    moves = []
    for quadrant in range(1, 5):
        for cell in range(1, 10):
            if not can_place(board, quadrant, cell):
                continue
            for rotate_quadrant in range(1, 5):
                for direction in (Direction.LEFT, Direction.RIGHT):
                    moves.append(Move(quadrant, cell, rotate_quadrant, direction))
    return moves


def get_game_result(board: Board) -> str:
    """Human-readable game result."""
    outcome = winner(board)
    if outcome is Outcome.BLACK:
        return "Token B has won!"
    elif outcome is Outcome.WHITE:
        return "Token W has won!"
    elif outcome is Outcome.TIE:
        return "It's a tie!"
    return "Game ended! No more moves to be made."


def random_position(rng: random.Random, plies: int, max_attempts: int = 100) -> Board:
    """
    Play random legal moves from the empty board.

    The position returned is undecided and still has an empty cell, so it is
    a valid starting point for a search.

    Args:
        rng: Random number generator (seeded by the caller)
        plies: Number of moves to play (alternating, black first)
        max_attempts: Restarts allowed when a random game ends early

    Returns:
        Undecided Board with exactly `plies` tokens
    """
    if not 0 <= plies < 36:
        raise ValueError(f"plies must be in [0, 36), got {plies}")

    for _ in range(max_attempts):
        board = Board.empty()
        token = Token.BLACK
        for _ in range(plies):
            board = apply_move(board, token, rng.choice(generate_legal_moves(board)))
            if winner(board).decided:
                break
            token = token.opponent
        else:
            return board

    raise RuntimeError(f"No undecided position after {max_attempts} random games")
