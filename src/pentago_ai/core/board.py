"""
Pentago board representation.

The board is a 6x6 grid split into four 3x3 quadrants:

         +-------+-------+
         | 1 2 3 | 1 2 3 |
   Q1    | 4 5 6 | 4 5 6 |    Q2
         | 7 8 9 | 7 8 9 |
         +-------+-------+
         | 1 2 3 | 1 2 3 |
   Q3    | 4 5 6 | 4 5 6 |    Q4
         | 7 8 9 | 7 8 9 |
         +-------+-------+

Cells are stored row-major in a flat tuple of 36 characters:
'.' for empty, 'b' and 'w' for the two tokens.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Tuple

from .errors import IllegalMove

SIZE = 6
QUADRANT_SIZE = 3
EMPTY = "."

# Quadrant number -> (row offset, column offset)
QUADRANT_OFFSETS = {
    1: (0, 0),
    2: (0, 3),
    3: (3, 0),
    4: (3, 3),
}


class Token(str, Enum):
    """A player's token."""

    BLACK = "b"
    WHITE = "w"

    @property
    def opponent(self) -> "Token":
        return Token.WHITE if self is Token.BLACK else Token.BLACK

    @classmethod
    def parse(cls, text: str) -> "Token":
        """Parse 'b' / 'w' (any case, surrounding whitespace ignored)."""
        try:
            return cls(text.strip().lower()[:1])
        except ValueError:
            raise ValueError(f"Invalid token {text!r}, must be 'b' or 'w'") from None


class Outcome(Enum):
    """Result of scanning a board for five in a row."""

    NONE = "n"
    BLACK = "b"
    WHITE = "w"
    TIE = "t"

    @classmethod
    def for_token(cls, token: Token) -> "Outcome":
        return cls(token.value)

    @property
    def decided(self) -> bool:
        return self is not Outcome.NONE


def _build_win_lines() -> Tuple[Tuple[Tuple[int, int], ...], ...]:
    """
    Build the 18 candidate lines of the board.

    Every five-in-a-row on a 6x6 grid lies on one of:
    - 6 rows and 6 columns (length 6)
    - the two main diagonals (length 6)
    - the four diagonals offset by one from the main ones (length 5)

    A diagonal needs at least five cells, so for a down-right diagonal
    starting at (r, c) the length is 6 - |r - c|, and only offsets 0 and 1
    qualify. The same holds for the down-left direction mirrored on columns.
    """
    lines = []
    for r in range(SIZE):
        lines.append(tuple((r, c) for c in range(SIZE)))
    for c in range(SIZE):
        lines.append(tuple((r, c) for r in range(SIZE)))

    for offset in (0, 1, -1):
        # Down-right diagonals: col - row == offset
        lines.append(
            tuple(
                (r, r + offset) for r in range(SIZE) if 0 <= r + offset < SIZE
            )
        )
    for offset in (0, 1, -1):
        # Down-left diagonals: row + col == SIZE - 1 + offset
        total = SIZE - 1 + offset
        lines.append(
            tuple(
                (r, total - r) for r in range(SIZE) if 0 <= total - r < SIZE
            )
        )
    return tuple(lines)


WIN_LINES = _build_win_lines()

# Flat indices of every five-cell window (two per length-6 line)
WIN_WINDOWS = tuple(
    tuple(r * SIZE + c for r, c in line[start : start + 5])
    for line in WIN_LINES
    for start in range(len(line) - 4)
)

# Per line, the cells shared by all of its five-cell windows. A line is still
# winnable for a token only while none of these hold the other token.
LINE_CORES = tuple(
    tuple(r * SIZE + c for r, c in (line[1:-1] if len(line) == SIZE else line))
    for line in WIN_LINES
)


def index_of(row: int, col: int) -> int:
    """Flat index of (row, col)."""
    return row * SIZE + col


def quadrant_cell_to_coords(quadrant: int, cell: int) -> Tuple[int, int]:
    """
    Convert a quadrant/cell address to board coordinates.

    Args:
        quadrant: Quadrant number (1-4)
        cell: Cell number within the quadrant (1-9, row-major)

    Returns:
        (row, col) on the 6x6 board
    """
    if quadrant not in QUADRANT_OFFSETS:
        raise IllegalMove(f"Quadrant {quadrant} out of range (1-4)")
    if not 1 <= cell <= 9:
        raise IllegalMove(f"Cell {cell} out of range (1-9)")

    row_offset, col_offset = QUADRANT_OFFSETS[quadrant]
    local_row, local_col = divmod(cell - 1, QUADRANT_SIZE)
    return row_offset + local_row, col_offset + local_col


@dataclass(frozen=True)
class Board:
    """
    Immutable 6x6 Pentago board.

    Every operation that changes cells returns a new Board, so a board held by
    a search node is never aliased by the boards derived from it.
    """

    cells: Tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate board invariants."""
        if len(self.cells) != SIZE * SIZE:
            raise ValueError(
                f"Board size {len(self.cells)} doesn't match expected {SIZE * SIZE}"
            )
        bad = set(self.cells) - {EMPTY, Token.BLACK.value, Token.WHITE.value}
        if bad:
            raise ValueError(f"Invalid cell values: {sorted(bad)}")

    @classmethod
    def empty(cls) -> "Board":
        return cls(cells=(EMPTY,) * (SIZE * SIZE))

    @classmethod
    def from_rows(cls, rows: Iterable[str]) -> "Board":
        """
        Build a board from six strings of six characters each.

        Whitespace inside a row is ignored, so "bbb www" is accepted.
        """
        cells: List[str] = []
        rows = list(rows)
        if len(rows) != SIZE:
            raise ValueError(f"Expected {SIZE} rows, got {len(rows)}")
        for row in rows:
            compact = "".join(row.split()).lower()
            if len(compact) != SIZE:
                raise ValueError(f"Row {row!r} must have {SIZE} cells")
            cells.extend(compact)
        return cls(cells=tuple(cells))

    def cell(self, row: int, col: int) -> str:
        return self.cells[index_of(row, col)]

    def rows(self) -> List[str]:
        return [
            "".join(self.cells[r * SIZE : (r + 1) * SIZE]) for r in range(SIZE)
        ]

    def empty_cells(self) -> Iterator[Tuple[int, int]]:
        for idx, value in enumerate(self.cells):
            if value == EMPTY:
                yield divmod(idx, SIZE)

    def count(self, token: Token) -> int:
        return self.cells.count(token.value)

    def __str__(self) -> str:
        """Human-readable board with quadrant borders."""
        border = " +-------+-------+"
        lines = [border]
        for r, row in enumerate(self.rows()):
            if r == QUADRANT_SIZE:
                lines.append(border)
            left = " ".join(row[:QUADRANT_SIZE])
            right = " ".join(row[QUADRANT_SIZE:])
            lines.append(f" | {left} | {right} |")
        lines.append(border)
        return "\n".join(lines)
