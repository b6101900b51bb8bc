"""Tests for search-tree nodes and expansion."""

import gc
import random

import pytest
from pentago_ai.core import (
    Board,
    Move,
    SearchCancelled,
    Token,
    generate_legal_moves,
    has_legal_move,
    place,
    random_position,
    winner,
)
from pentago_ai.search import SearchNode

FULL_DRAWN = Board.from_rows(
    ["bbwwbb", "wwbbww", "bbwwbb", "wwbbww", "bbwwbb", "wwbbww"]
)


def test_expand_one_level_empty_board():
    """Test expanding the empty board."""
    root = SearchNode(Board.empty(), Token.BLACK, is_maximizer=True)
    assert root.is_leaf
    assert root.is_root

    assert root.expand_one_level() == 288
    assert not root.is_leaf
    assert list(root.children) == generate_legal_moves(Board.empty())

    child = root.get_child(Move.parse("2/4 3r"))
    assert child.mover_token is Token.WHITE
    assert child.depth == 1
    assert not child.is_maximizer
    assert child.parent is root
    assert child.move == Move.parse("2/4 3r")
    assert child.board.count(Token.BLACK) == 1


def test_expand_one_level_is_idempotent():
    """Test an expanded node is not expanded again."""
    root = SearchNode(Board.empty(), Token.BLACK)
    root.expand_one_level()
    children = dict(root.children)

    assert root.expand_one_level() == 0
    assert root.children == children


def test_expand_full_and_decided_boards():
    """Test full and decided boards have no children."""
    assert SearchNode(FULL_DRAWN, Token.BLACK).expand_one_level() == 0

    won = Board.from_rows(
        ["wwwww.", "......", "......", "......", "......", "......"]
    )
    assert SearchNode(won, Token.BLACK).expand_one_level() == 0


def test_winning_placement_children_unrotated():
    """Test all rotations of a winning placement share the placed board."""
    board = Board.from_rows(
        [".bbbb.", "......", "......", "w.w...", "..w...", "w....."]
    )
    root = SearchNode(board, Token.BLACK)
    root.expand_one_level()

    placed = place(board, Token.BLACK, 2, 3)
    for move, child in root.children.items():
        if move.placement == Move(2, 3):
            assert child.board == placed


def test_expand_to_depth():
    """Test expansion reaches the target depth on every open branch."""
    board = random_position(random.Random(4), 28)
    root = SearchNode(board, Token.BLACK)

    created = root.expand_to_depth(2)
    assert created == root.count_nodes() - 1
    assert root.max_depth() == 2

    for leaf in root.iter_leaves():
        if leaf.depth < 2:
            # Branch ended early on a decided or full board
            assert winner(leaf.board).decided or not has_legal_move(leaf.board)


def test_expand_to_depth_reuses_existing_nodes():
    """Test repeated expansion only adds the missing levels."""
    board = random_position(random.Random(8), 30)
    root = SearchNode(board, Token.WHITE)

    first = root.expand_to_depth(1)
    child = next(iter(root.children.values()))

    assert root.expand_to_depth(1) == 0
    assert root.expand_to_depth(2) > 0
    assert next(iter(root.children.values())) is child
    assert root.count_nodes() - 1 > first


def test_expand_to_depth_cancellation():
    """Test the cancellation hook stops expansion."""
    root = SearchNode(Board.empty(), Token.BLACK)
    calls = []

    def should_stop():
        calls.append(1)
        return len(calls) > 3

    with pytest.raises(SearchCancelled):
        root.expand_to_depth(3, should_stop=should_stop)


def test_parent_is_weak():
    """Test a child does not keep its parent alive."""
    root = SearchNode(Board.empty(), Token.BLACK)
    root.expand_one_level()
    child = root.get_child(Move.parse("1/1 1r"))
    assert child.parent is root

    root.children.pop(child.move)
    del root
    gc.collect()
    assert child.parent is None
    assert child.is_root


def test_detach():
    """Test detaching makes a node a root."""
    root = SearchNode(Board.empty(), Token.BLACK)
    root.expand_one_level()
    child = root.get_child(Move.parse("3/3 4l"))
    child.detach()
    assert child.parent is None


def test_best_child():
    """Test best child selection and tie breaking."""
    root = SearchNode(Board.empty(), Token.BLACK, is_maximizer=True)
    root.expand_one_level()
    children = list(root.children.values())
    for child in children:
        child.set_score(0)

    # Ties go to the first enumerated move
    assert root.best_child() is children[0]

    children[10].set_score(5)
    children[20].set_score(5)
    children[30].set_score(-5)
    assert root.best_child() is children[10]

    root.is_maximizer = False
    assert root.best_child() is children[30]
