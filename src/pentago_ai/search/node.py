"""
Game-tree nodes and tree expansion.

Each node owns its children (keyed by the Move that produced them) and keeps
only a weak reference to its parent, so dropping a subtree during re-rooting
releases it immediately.
"""

import logging
import weakref
from typing import Callable, Dict, Iterator, Optional

from ..core import (
    Board,
    Direction,
    Move,
    SearchCancelled,
    Token,
    can_place,
    place,
    rotate,
    winner,
)

logger = logging.getLogger(__name__)

ROTATIONS = tuple(
    (quadrant, direction)
    for quadrant in range(1, 5)
    for direction in (Direction.LEFT, Direction.RIGHT)
)

# (quadrant, cell) -> the eight full moves for that placement, in order
_MOVES_BY_PLACEMENT = {
    (quadrant, cell): tuple(
        Move(quadrant, cell, rotate_quadrant, direction)
        for rotate_quadrant, direction in ROTATIONS
    )
    for quadrant in range(1, 5)
    for cell in range(1, 10)
}


class SearchNode:
    """
    A position in the game tree.

    mover_token is the token that moves *from* this board; every child has
    the opposite token and the opposite maximizer flag.
    """

    __slots__ = (
        "board",
        "mover_token",
        "depth",
        "is_maximizer",
        "move",
        "children",
        "score",
        "evaluated",
        "_parent",
        "__weakref__",
    )

    def __init__(
        self,
        board: Board,
        mover_token: Token,
        depth: int = 0,
        is_maximizer: bool = True,
        parent: Optional["SearchNode"] = None,
        move: Optional[Move] = None,
    ):
        self.board = board
        self.mover_token = Token(mover_token)
        self.depth = depth
        self.is_maximizer = is_maximizer
        self.move = move  # Move that generated this node (None for the root)
        self.children: Dict[Move, "SearchNode"] = {}
        self.score = 0
        self.evaluated = False
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional["SearchNode"]:
        return self._parent() if self._parent is not None else None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def detach(self) -> None:
        """Drop the parent link, making this node a root."""
        self._parent = None

    def set_score(self, score: int) -> None:
        self.score = score
        self.evaluated = True

    def get_child(self, move: Move) -> Optional["SearchNode"]:
        return self.children.get(move)

    def __repr__(self) -> str:
        role = "max" if self.is_maximizer else "min"
        return (
            f"SearchNode(move={self.move}, depth={self.depth}, {role}, "
            f"mover={self.mover_token.value}, children={len(self.children)}, "
            f"score={self.score if self.evaluated else None})"
        )

    def expand_one_level(self) -> int:
        """
        Create a child for every legal move from this board.

        Moves are enumerated by placement quadrant, cell, rotation quadrant
        and direction (left before right). A placement that wins on its own
        yields the unrotated board for all eight rotation choices.

        Returns:
            Number of children created (0 for a full or decided board)
        """
        if self.children or winner(self.board).decided:
            return 0

        next_token = self.mover_token.opponent
        created = 0
        for quadrant in range(1, 5):
            for cell in range(1, 10):
                if not can_place(self.board, quadrant, cell):
                    continue

                placed = place(self.board, self.mover_token, quadrant, cell)
                won = winner(placed).decided

                for move in _MOVES_BY_PLACEMENT[quadrant, cell]:
                    board = placed if won else rotate(placed, move.rotate_quadrant, move.direction)
                    self.children[move] = SearchNode(
                        board=board,
                        mover_token=next_token,
                        depth=self.depth + 1,
                        is_maximizer=not self.is_maximizer,
                        parent=self,
                        move=move,
                    )
                    created += 1

        if created:
            # Former leaf scores are replaced by backed-up values
            self.evaluated = False
        return created

    def expand_to_depth(
        self,
        target_depth: int,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> int:
        """
        Expand this subtree until every branch reaches target_depth.

        Already-expanded nodes are descended into rather than rebuilt. A
        branch that cannot be expanded (full or decided board) simply ends
        there as a leaf.

        Args:
            target_depth: Absolute depth to expand to
            should_stop: Optional callable checked before each expansion;
                returning True aborts the expansion

        Returns:
            Number of nodes created

        Raises:
            SearchCancelled: If should_stop returned True
        """
        created = 0
        stack = [self]

        while stack:
            node = stack.pop()
            if node.depth >= target_depth:
                continue

            if node.is_leaf:
                if should_stop is not None and should_stop():
                    logger.info(f"Expansion cancelled after {created:,} nodes")
                    raise SearchCancelled(
                        f"Expansion cancelled after {created:,} nodes"
                    )
                if node.expand_one_level() == 0:
                    continue
                created += len(node.children)

            stack.extend(node.children.values())

        logger.debug(f"Expanded {created:,} nodes to depth {target_depth}")
        return created

    def iter_nodes(self) -> Iterator["SearchNode"]:
        """Depth-first walk of this subtree (including self)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(node.children.values())

    def iter_leaves(self) -> Iterator["SearchNode"]:
        for node in self.iter_nodes():
            if node.is_leaf:
                yield node

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def max_depth(self) -> int:
        return max(node.depth for node in self.iter_nodes())

    def best_child(self) -> Optional["SearchNode"]:
        """
        Best-scoring child for this node's side.

        Maximum for a maximizer, minimum for a minimizer; ties go to the
        first child in enumeration order.
        """
        best = None
        for child in self.children.values():
            if best is None:
                best = child
            elif self.is_maximizer and child.score > best.score:
                best = child
            elif not self.is_maximizer and child.score < best.score:
                best = child
        return best
