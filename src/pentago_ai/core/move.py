"""
Move representation and the textual move-label grammar.

A label has the form ``"<quadrant>/<cell> <quadrant><direction>"``, for
example ``"1/5 2r"``: place in quadrant 1 cell 5, then rotate quadrant 2
clockwise. The rotation suffix may be omitted for a placement that wins on
its own (``"1/5"``). Labels are case-insensitive; ``Move.label`` is always
lower-case.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .board import QUADRANT_OFFSETS
from .errors import IllegalMove

_LABEL_RE = re.compile(r"^\s*(\d)\s*/\s*(\d)(?:\s+(\d)\s*([a-z]))?\s*$")


class Direction(str, Enum):
    """Quadrant rotation direction."""

    LEFT = "l"  # counter-clockwise
    RIGHT = "r"  # clockwise


@dataclass(frozen=True)
class Move:
    """
    One player's turn: a placement plus an optional rotation.

    Moves are hashable and compare by value, so they key a search node's
    children directly.
    """

    place_quadrant: int
    place_cell: int
    rotate_quadrant: Optional[int] = None
    direction: Optional[Direction] = None

    def __post_init__(self) -> None:
        """Re-validate structural bounds."""
        if self.place_quadrant not in QUADRANT_OFFSETS:
            raise IllegalMove(f"Quadrant {self.place_quadrant} out of range (1-4)")
        if not 1 <= self.place_cell <= 9:
            raise IllegalMove(f"Cell {self.place_cell} out of range (1-9)")
        if (self.rotate_quadrant is None) != (self.direction is None):
            raise IllegalMove("Rotation needs both a quadrant and a direction")
        if self.rotate_quadrant is not None:
            if self.rotate_quadrant not in QUADRANT_OFFSETS:
                raise IllegalMove(
                    f"Rotation quadrant {self.rotate_quadrant} out of range (1-4)"
                )
            if not isinstance(self.direction, Direction):
                # Accept raw 'l'/'r' and normalise to the enum
                try:
                    object.__setattr__(
                        self, "direction", Direction(str(self.direction).lower())
                    )
                except ValueError:
                    raise IllegalMove(
                        f"Invalid direction {self.direction!r}, must be 'l' or 'r'"
                    ) from None

    @property
    def has_rotation(self) -> bool:
        return self.rotate_quadrant is not None

    @property
    def placement(self) -> "Move":
        """This move without its rotation."""
        return Move(self.place_quadrant, self.place_cell)

    @property
    def label(self) -> str:
        text = f"{self.place_quadrant}/{self.place_cell}"
        if self.has_rotation:
            text += f" {self.rotate_quadrant}{self.direction.value}"
        return text

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, label: str) -> "Move":
        """
        Parse a move label.

        Args:
            label: Text such as "1/5 2r" or "3/9" (case-insensitive)

        Returns:
            The parsed Move

        Raises:
            IllegalMove: If the label is malformed or out of range
        """
        if not isinstance(label, str):
            raise IllegalMove(f"Move label must be a string, got {type(label).__name__}")

        match = _LABEL_RE.match(label.lower())
        if not match:
            raise IllegalMove(f"Malformed move {label!r}, expected 'q/c qd'")

        place_quadrant, place_cell, rotate_quadrant, direction = match.groups()
        return cls(
            place_quadrant=int(place_quadrant),
            place_cell=int(place_cell),
            rotate_quadrant=int(rotate_quadrant) if rotate_quadrant else None,
            direction=direction,
        )
