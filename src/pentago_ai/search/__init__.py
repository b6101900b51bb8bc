"""Game-tree search: evaluation, tree expansion and minimax."""

from .engine import SearchEngine, SearchStats
from .evaluator import MAX_SCORE, MIN_SCORE, Evaluator, line_counts, open_lines
from .node import SearchNode

__all__ = [
    "SearchEngine",
    "SearchStats",
    "MAX_SCORE",
    "MIN_SCORE",
    "Evaluator",
    "line_counts",
    "open_lines",
    "SearchNode",
]
