"""
Minimax game-tree search with optional alpha-beta pruning.

The engine keeps one game tree for the whole game. After each committed move
(its own or the opponent's) the tree is re-rooted at the matching child, so
subtrees expanded on earlier turns are reused instead of rebuilt.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Tuple, Union

from ..core import (
    Board,
    Move,
    NoLegalMove,
    Token,
    apply_move,
    winner,
)
from .evaluator import Evaluator
from .node import SearchNode

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Counters for the most recent search."""

    nodes_created: int = 0
    nodes_evaluated: int = 0
    cutoffs: int = 0
    tree_size: int = 0
    elapsed: float = 0.0


class SearchEngine:
    """
    Depth-limited minimax player.

    The root is always the current position. The AI's own nodes are
    maximizers; the opponent's are minimizers.
    """

    def __init__(
        self,
        board: Board,
        ai_token: Token,
        lookahead_depth: int = 2,
        evaluator: Optional[Evaluator] = None,
        use_alpha_beta: bool = True,
        should_stop: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize search engine.

        Args:
            board: Current board; the AI is to move from it
            ai_token: Token played by the AI
            lookahead_depth: Plies searched below the current root
            evaluator: Leaf evaluator (basic heuristic if None)
            use_alpha_beta: Enable alpha-beta pruning
            should_stop: Optional cancellation hook polled during expansion
        """
        if lookahead_depth < 1:
            raise ValueError(f"lookahead_depth must be at least 1, got {lookahead_depth}")

        self.ai_token = Token(ai_token)
        self.lookahead_depth = lookahead_depth
        self.evaluator = evaluator if evaluator is not None else Evaluator()
        self.use_alpha_beta = use_alpha_beta
        self.should_stop = should_stop
        self.stats = SearchStats()
        self._root = SearchNode(board, mover_token=self.ai_token, is_maximizer=True)

    @classmethod
    def initialize(
        cls,
        board: Board,
        ai_token: Token,
        lookahead_depth: int,
        evaluator_config: Optional[Union[Mapping, int, Evaluator]] = None,
        use_alpha_beta: bool = True,
    ) -> "SearchEngine":
        """Build an engine from a {"blocking_bonus": n} evaluator config."""
        return cls(
            board=board,
            ai_token=ai_token,
            lookahead_depth=lookahead_depth,
            evaluator=Evaluator.from_config(evaluator_config),
            use_alpha_beta=use_alpha_beta,
        )

    @property
    def root(self) -> SearchNode:
        return self._root

    @property
    def board(self) -> Board:
        return self._root.board

    def choose_next(self) -> Tuple[Move, Board]:
        """
        Pick and commit the AI's move.

        Expands the tree to the lookahead depth, scores it with minimax and
        re-roots at the best child.

        Returns:
            (move, resulting board)

        Raises:
            NoLegalMove: If the current board has no legal move
        """
        start = time.perf_counter()
        self.stats = SearchStats()

        root = self._root
        self.stats.nodes_created = root.expand_to_depth(
            root.depth + self.lookahead_depth, should_stop=self.should_stop
        )
        if root.is_leaf:
            if winner(root.board).decided:
                raise NoLegalMove("Game is already decided")
            raise NoLegalMove("Board is full")

        self.minimax(root)
        best = root.best_child()

        self.stats.tree_size = best.count_nodes()
        self.stats.elapsed = time.perf_counter() - start
        logger.info(
            f"{self.ai_token.value} chooses {best.move.label} "
            f"(score {best.score}, {self.stats.nodes_created:,} new nodes, "
            f"{self.stats.nodes_evaluated:,} evaluated, {self.stats.cutoffs:,} cutoffs, "
            f"{self.stats.elapsed:.2f}s)"
        )

        self._reroot(best)
        return best.move, best.board

    def advance(self, move: Union[Move, str]) -> Board:
        """
        Commit a move made from the current root (normally the opponent's).

        Reuses the matching child if it was already expanded; otherwise
        applies the move directly and starts a fresh tree at the result.

        Returns:
            Board after the move

        Raises:
            IllegalMove: If the move is malformed or not legal here
        """
        if not isinstance(move, Move):
            move = Move.parse(move)

        root = self._root
        child = root.get_child(move)
        if child is None:
            board = apply_move(root.board, root.mover_token, move)
            child = SearchNode(
                board,
                mover_token=root.mover_token.opponent,
                depth=root.depth + 1,
                is_maximizer=not root.is_maximizer,
                move=move,
            )
            logger.debug(f"Move {move.label} was not expanded, starting a fresh tree")

        self._reroot(child)
        return child.board

    def minimax(self, node: SearchNode) -> int:
        """Score the subtree below node and return node's backed-up score."""
        if self.use_alpha_beta:
            return self._alphabeta(node, -math.inf, math.inf)
        return self._minimax(node)

    def _score_leaf(self, node: SearchNode) -> int:
        if not node.evaluated:
            self.evaluator.evaluate(node)
            self.stats.nodes_evaluated += 1
        return node.score

    def _minimax(self, node: SearchNode) -> int:
        if node.is_leaf:
            return self._score_leaf(node)

        scores = [self._minimax(child) for child in node.children.values()]
        score = max(scores) if node.is_maximizer else min(scores)
        node.set_score(score)
        return score

    def _alphabeta(self, node: SearchNode, alpha: float, beta: float) -> int:
        """
        Fail-soft alpha-beta.

        Children skipped after a cutoff keep a stale score. The root never
        cuts off (its window stays open on one side), so every root child
        carries an exact score or a bound no better than the best one.
        """
        if node.is_leaf:
            return self._score_leaf(node)

        if node.is_maximizer:
            best = -math.inf
            for child in node.children.values():
                best = max(best, self._alphabeta(child, alpha, beta))
                alpha = max(alpha, best)
                if alpha >= beta:
                    self.stats.cutoffs += 1
                    break
        else:
            best = math.inf
            for child in node.children.values():
                best = min(best, self._alphabeta(child, alpha, beta))
                beta = min(beta, best)
                if alpha >= beta:
                    self.stats.cutoffs += 1
                    break

        node.set_score(best)
        return best

    def _reroot(self, child: SearchNode) -> None:
        """Promote child to root, dropping its siblings and the old root."""
        old_root = self._root
        child.detach()
        self._root = child
        old_root.children.clear()
        logger.debug(f"Re-rooted at {child.move} (depth {child.depth})")
