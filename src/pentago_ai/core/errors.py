"""Error kinds raised by the Pentago core."""


class PentagoError(Exception):
    """Base class for all Pentago engine errors."""


class IllegalMove(PentagoError, ValueError):
    """
    A move cannot be applied to the board.

    Raised for placement on an occupied cell and for labels that reference an
    out-of-range quadrant, cell or rotation direction.
    """


class NoLegalMove(PentagoError):
    """The engine was asked to choose a move on a full board."""


class SearchCancelled(PentagoError):
    """Tree expansion was stopped by the caller's cancellation hook."""
