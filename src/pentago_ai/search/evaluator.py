"""
Heuristic evaluation of search-tree leaves.

Scores are always from the maximizing (AI) side's point of view. The basic
heuristic is the number of lines still open for the side to move minus the
number still open for its opponent. The advanced heuristic additionally
weights how much each side's open-line count changed since the parent board,
which rewards moves that close off the opponent's lines.
"""

import logging
import sys
from typing import Mapping, Optional, Tuple, Union

from ..core import LINE_CORES, Board, Outcome, Token, winner

logger = logging.getLogger(__name__)

MAX_SCORE = sys.maxsize
MIN_SCORE = -sys.maxsize - 1


def open_lines(board: Board, token: Token) -> int:
    """
    Count lines that are still winnable for token.

    A line is open while none of its deciding cells hold the opposing token.
    Empty lines count for both sides.
    """
    other = Token(token).opponent.value
    cells = board.cells
    return sum(
        1 for core in LINE_CORES if all(cells[i] != other for i in core)
    )


def line_counts(board: Board, token: Token) -> Tuple[int, int]:
    """Open-line counts as (for token, for its opponent)."""
    token = Token(token)
    return open_lines(board, token), open_lines(board, token.opponent)


class Evaluator:
    """
    Leaf evaluation function.

    A blocking bonus of 0 selects the basic heuristic; any positive value
    selects the advanced heuristic with that weight.
    """

    def __init__(self, blocking_bonus: int = 0):
        """
        Initialize evaluator.

        Args:
            blocking_bonus: Weight applied to the change in open lines since
                the parent board (0 = basic mode)
        """
        if not isinstance(blocking_bonus, int) or isinstance(blocking_bonus, bool):
            raise ValueError(f"blocking_bonus must be an int, got {blocking_bonus!r}")
        if blocking_bonus < 0:
            raise ValueError(f"blocking_bonus must be non-negative, got {blocking_bonus}")
        self.blocking_bonus = blocking_bonus

    @classmethod
    def from_config(cls, config: Optional[Union[Mapping, int, "Evaluator"]]) -> "Evaluator":
        """Build an evaluator from a {"blocking_bonus": n} mapping."""
        if isinstance(config, Evaluator):
            return config
        if config is None:
            return cls()
        if isinstance(config, int):
            return cls(blocking_bonus=config)

        unknown = set(config) - {"blocking_bonus"}
        if unknown:
            raise ValueError(f"Unknown evaluator options: {sorted(unknown)}")
        return cls(blocking_bonus=config.get("blocking_bonus", 0))

    @property
    def advanced(self) -> bool:
        return self.blocking_bonus > 0

    def __repr__(self) -> str:
        mode = "advanced" if self.advanced else "basic"
        return f"Evaluator({mode}, blocking_bonus={self.blocking_bonus})"

    def terminal_score(self, node) -> Optional[int]:
        """Sentinel score for a decided board, None if no single side has won."""
        outcome = winner(node.board)
        if outcome in (Outcome.NONE, Outcome.TIE):
            return None

        ai_token = node.mover_token if node.is_maximizer else node.mover_token.opponent
        if outcome is Outcome.for_token(ai_token):
            return MAX_SCORE
        return MIN_SCORE

    def heuristic(self, node) -> int:
        """Heuristic score of a non-terminal node."""
        mover_open, opponent_open = line_counts(node.board, node.mover_token)

        parent = node.parent
        if self.advanced and parent is not None:
            parent_mover, parent_opponent = line_counts(parent.board, node.mover_token)
            mover_open += (mover_open - parent_mover) * self.blocking_bonus
            opponent_open += (opponent_open - parent_opponent) * self.blocking_bonus

        if node.is_maximizer:
            return mover_open - opponent_open
        return opponent_open - mover_open

    def evaluate(self, node) -> int:
        """Score a leaf node, store the score on it and return it."""
        score = self.terminal_score(node)
        if score is None:
            score = self.heuristic(node)
        node.set_score(score)
        return score

    def evaluate_tree(self, root) -> int:
        """
        Evaluate every unevaluated leaf below root.

        Returns:
            Number of leaves evaluated
        """
        evaluated = 0
        for leaf in root.iter_leaves():
            if not leaf.evaluated:
                self.evaluate(leaf)
                evaluated += 1
        logger.debug(f"Evaluated {evaluated:,} leaves with {self!r}")
        return evaluated
