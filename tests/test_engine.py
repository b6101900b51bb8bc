"""Tests for the search engine."""

import gc
import random
import weakref

import pytest
from pentago_ai.core import (
    Board,
    IllegalMove,
    Move,
    NoLegalMove,
    Outcome,
    SearchCancelled,
    Token,
    apply_move,
    generate_legal_moves,
    random_position,
    winner,
)
from pentago_ai.search import MAX_SCORE, Evaluator, SearchEngine

FULL_DRAWN = Board.from_rows(
    ["bbwwbb", "wwbbww", "bbwwbb", "wwbbww", "bbwwbb", "wwbbww"]
)


def test_initialize():
    """Test the root is the AI's maximizing node."""
    engine = SearchEngine.initialize(
        Board.empty(), Token.WHITE, 2, {"blocking_bonus": 2}, use_alpha_beta=False
    )
    assert engine.root.mover_token is Token.WHITE
    assert engine.root.is_maximizer
    assert engine.root.is_root
    assert engine.evaluator.advanced
    assert not engine.use_alpha_beta
    assert engine.board == Board.empty()


def test_invalid_lookahead():
    """Test lookahead must be positive."""
    with pytest.raises(ValueError):
        SearchEngine(Board.empty(), Token.BLACK, lookahead_depth=0)


def test_takes_immediate_win():
    """Test the engine completes its own five in a row."""
    board = Board.from_rows(
        ["bbbb..", "......", "......", "......", "ww....", "ww...."]
    )
    engine = SearchEngine(board, Token.BLACK, lookahead_depth=1)
    move, result = engine.choose_next()

    assert winner(result) is Outcome.BLACK
    assert engine.root.score == MAX_SCORE
    assert engine.board == result
    assert engine.root.move == move


def test_blocks_opponent_win():
    """Test the engine stops an immediate opponent win at depth 2."""
    board = Board.from_rows(
        ["wwww..", "......", "......", "......", "....b.", "...bb."]
    )
    engine = SearchEngine(board, Token.BLACK, lookahead_depth=2, evaluator=Evaluator(2))
    _, result = engine.choose_next()

    assert winner(result) is Outcome.NONE
    for reply in generate_legal_moves(result):
        assert winner(apply_move(result, Token.WHITE, reply)) is not Outcome.WHITE


def test_choose_next_reroots():
    """Test the chosen child becomes the root and siblings are released."""
    board = random_position(random.Random(12), 26)
    engine = SearchEngine(board, Token.BLACK, lookahead_depth=2)
    old_root = engine.root
    old_root.expand_to_depth(2)

    siblings = [weakref.ref(child) for child in old_root.children.values()]
    old_root_ref = weakref.ref(old_root)
    del old_root

    move, result = engine.choose_next()
    gc.collect()

    assert engine.root.is_root
    assert engine.root.depth == 1
    assert engine.root.mover_token is Token.WHITE
    assert not engine.root.is_maximizer
    assert old_root_ref() is None

    alive = [ref() for ref in siblings if ref() is not None]
    assert alive == [engine.root]
    assert engine.stats.nodes_created == 0  # Tree was already expanded
    assert engine.stats.nodes_evaluated > 0


def test_advance_reuses_expanded_child():
    """Test advance re-roots into an existing child."""
    for seed in range(20):
        board = random_position(random.Random(seed), 24)
        engine = SearchEngine(board, Token.BLACK, lookahead_depth=2)
        engine.choose_next()
        if not engine.root.is_leaf:
            break

    # The opponent's replies were expanded during the search
    reply, expected = next(iter(engine.root.children.items()))
    result = engine.advance(reply.label.upper())

    assert engine.root is expected
    assert engine.root.is_root
    assert result == expected.board
    assert engine.root.mover_token is Token.BLACK
    assert engine.root.is_maximizer


def test_advance_unexpanded_move():
    """Test advance builds a fresh root for a move that was not expanded."""
    engine = SearchEngine(Board.empty(), Token.BLACK, lookahead_depth=1)
    _, board = engine.choose_next()
    assert engine.root.is_leaf

    move = next(m for m in generate_legal_moves(board))
    result = engine.advance(move)

    assert result == apply_move(board, Token.WHITE, move)
    assert engine.root.is_leaf
    assert engine.root.is_root
    assert engine.root.depth == 2
    assert engine.root.mover_token is Token.BLACK
    assert engine.root.is_maximizer


def test_advance_illegal_move():
    """Test illegal moves leave the engine untouched."""
    board = Board.from_rows(
        ["b.....", "......", "......", "......", "......", "......"]
    )
    engine = SearchEngine(board, Token.WHITE, lookahead_depth=1)
    root = engine.root

    with pytest.raises(IllegalMove):
        engine.advance("1/1 2r")  # Occupied
    with pytest.raises(IllegalMove):
        engine.advance("7/1 2r")
    with pytest.raises(IllegalMove):
        engine.advance("not a move")

    assert engine.root is root


def test_advance_winning_placement_ignores_rotation():
    """Test a winning placement is applied without its rotation."""
    board = Board.from_rows(
        [".wwww.", "......", "......", "b.b...", "..b...", "b....."]
    )
    engine = SearchEngine(board, Token.WHITE, lookahead_depth=1)
    result = engine.advance(Move.parse("1/1 1r"))

    assert winner(result) is Outcome.WHITE
    assert result.rows()[0] == "wwwww."


def test_no_legal_move_on_full_board():
    """Test choosing on a full board fails."""
    engine = SearchEngine(FULL_DRAWN, Token.BLACK, lookahead_depth=2)
    with pytest.raises(NoLegalMove):
        engine.choose_next()


def test_no_legal_move_on_decided_board():
    """Test choosing on a finished game fails."""
    board = Board.from_rows(
        ["bbbbb.", "......", "......", "......", "......", "......"]
    )
    engine = SearchEngine(board, Token.WHITE, lookahead_depth=1)
    with pytest.raises(NoLegalMove):
        engine.choose_next()


def test_cancellation_hook():
    """Test a cancelled search raises SearchCancelled."""
    engine = SearchEngine(Board.empty(), Token.BLACK, lookahead_depth=2, should_stop=lambda: True)
    with pytest.raises(SearchCancelled):
        engine.choose_next()


@pytest.mark.parametrize("blocking_bonus", [0, 2])
def test_alpha_beta_matches_minimax(blocking_bonus):
    """Test pruning never changes the chosen move or its score."""
    rng = random.Random(2024 + blocking_bonus)
    evaluator = Evaluator(blocking_bonus)
    total_cutoffs = 0

    for _ in range(50):
        plies = rng.randint(24, 28)
        board = random_position(rng, plies)
        ai_token = Token.BLACK if plies % 2 == 0 else Token.WHITE

        plain = SearchEngine(board, ai_token, 2, evaluator, use_alpha_beta=False)
        pruned = SearchEngine(board, ai_token, 2, evaluator, use_alpha_beta=True)

        plain_move, plain_board = plain.choose_next()
        pruned_move, pruned_board = pruned.choose_next()

        assert plain_move == pruned_move
        assert plain_board == pruned_board
        assert plain.root.score == pruned.root.score
        assert (plain.root.score == MAX_SCORE) == (pruned.root.score == MAX_SCORE)

        assert plain.stats.cutoffs == 0
        total_cutoffs += pruned.stats.cutoffs
        assert pruned.stats.nodes_evaluated <= plain.stats.nodes_evaluated

    assert total_cutoffs > 0


def test_game_between_engines():
    """Test two engines can play a full game through choose_next/advance."""
    black = SearchEngine(Board.empty(), Token.BLACK, lookahead_depth=1)
    white = None
    board = Board.empty()

    for ply in range(36):
        if ply % 2 == 0:
            move, board = black.choose_next()
            if white is None:
                white = SearchEngine(board, Token.WHITE, lookahead_depth=1)
            else:
                assert white.advance(move) == board
        else:
            move, board = white.choose_next()
            assert black.advance(move) == board

        if winner(board).decided or "." not in board.cells:
            break

    assert winner(board).decided or "." not in board.cells
