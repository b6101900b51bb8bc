"""
Main CLI for the Pentago engine.

Commands:
- play: play a console game against the engine
- compare: check that alpha-beta and plain minimax agree on random positions
"""

import argparse
import logging
import random
import sys
import time
from typing import Callable, Optional

from tqdm import tqdm

from ..core import (
    Board,
    IllegalMove,
    Move,
    NoLegalMove,
    Token,
    apply_move,
    get_game_result,
    has_legal_move,
    random_position,
    winner,
)
from ..search import Evaluator, SearchEngine
from ..utils.rich_display import GameDisplay, setup_rich_logging


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def ai_goes_first(rng: random.Random) -> bool:
    """Coin flip for the opening move."""
    return rng.randrange(2) == 0


class ConsoleGame:
    """
    One game between a human at the console and the search engine.

    Input and randomness are injected so the loop can be driven by tests.
    """

    def __init__(
        self,
        player_name: str,
        player_token: Token,
        ai_name: str = "Computer",
        lookahead_depth: int = 2,
        evaluator: Optional[Evaluator] = None,
        use_alpha_beta: bool = True,
        display: Optional[GameDisplay] = None,
        read_line: Callable[[str], str] = input,
        rng: Optional[random.Random] = None,
    ):
        self.player_name = player_name
        self.player_token = Token(player_token)
        self.ai_token = self.player_token.opponent
        self.ai_name = ai_name
        self.lookahead_depth = lookahead_depth
        self.evaluator = evaluator if evaluator is not None else Evaluator(blocking_bonus=2)
        self.use_alpha_beta = use_alpha_beta
        self.display = display or GameDisplay()
        self.read_line = read_line
        self.rng = rng or random.Random()
        self.engine: Optional[SearchEngine] = None
        self.logger = logging.getLogger(__name__)

    def _new_engine(self, board: Board) -> SearchEngine:
        return SearchEngine(
            board=board,
            ai_token=self.ai_token,
            lookahead_depth=self.lookahead_depth,
            evaluator=self.evaluator,
            use_alpha_beta=self.use_alpha_beta,
        )

    def read_player_move(self, board: Board) -> Move:
        """Prompt until the player enters a legal move for this board."""
        prompt = (
            f"{self.player_name}'s turn (token = {self.player_token.value}) "
            f"- Enter your move (b/p bd): "
        )
        while True:
            text = self.read_line(prompt)
            try:
                move = Move.parse(text)
                apply_move(board, self.player_token, move)
            except IllegalMove as e:
                self.display.log_warning(f"Invalid move: {e}")
                continue
            return move

    def ai_turn(self) -> Board:
        move, board = self.engine.choose_next()
        self.display.log_info(
            f"{self.ai_name} (token = {self.ai_token.value}) chooses: {move.label}"
        )
        return board

    def player_turn(self, board: Board) -> Board:
        move = self.read_player_move(board)
        if self.engine is None:
            board = apply_move(board, self.player_token, move)
            self.engine = self._new_engine(board)
            return board
        return self.engine.advance(move)

    def run(self, ai_first: Optional[bool] = None) -> Board:
        """
        Play until someone wins or the board fills up.

        Args:
            ai_first: Who opens; None flips a coin

        Returns:
            Final board
        """
        if ai_first is None:
            ai_first = ai_goes_first(self.rng)

        board = Board.empty()
        self.display.show_board_with_key(board)
        if ai_first:
            self.display.log(f"{self.ai_name} goes first!")
            self.engine = self._new_engine(board)
            board = self.ai_turn()
        else:
            self.display.log(f"{self.player_name} goes first!")
            board = self.player_turn(board)

        ai_turn = not ai_first
        while not winner(board).decided and has_legal_move(board):
            self.display.show_board_with_key(board)
            if ai_turn:
                try:
                    board = self.ai_turn()
                except NoLegalMove:
                    self.logger.info("Engine has no legal move")
                    break
            else:
                board = self.player_turn(board)
            ai_turn = not ai_turn

        self.display.log("")
        self.display.log_success(get_game_result(board))
        self.display.log("Final Board State:")
        self.display.show_board(board)
        return board


def play_command(args):
    """Play a console game against the engine."""
    if args.rich_logging:
        setup_rich_logging(args.log_level)
    else:
        setup_logging(args.log_level)

    rng = random.Random(args.seed)
    display = GameDisplay()
    evaluator = Evaluator(blocking_bonus=args.blocking_bonus)

    game = ConsoleGame(
        player_name=args.name,
        player_token=Token.parse(args.token),
        ai_name=args.ai_name,
        lookahead_depth=args.depth,
        evaluator=evaluator,
        use_alpha_beta=not args.no_pruning,
        display=display,
        rng=rng,
    )
    display.show_header(
        "Pentago", args.ai_name, args.depth, evaluator, not args.no_pruning
    )

    ai_first = {"ai": True, "human": False, "random": None}[args.first]
    try:
        game.run(ai_first=ai_first)
    except (EOFError, KeyboardInterrupt):
        display.log_error("Game aborted")
        sys.exit(1)


def compare_positions(
    num_boards: int,
    depth: int,
    seed: int,
    blocking_bonus: int = 0,
    min_plies: int = 8,
    max_plies: int = 20,
    show_progress: bool = True,
) -> dict:
    """
    Search random positions with and without alpha-beta pruning.

    Returns:
        Summary dict with counts of agreeing moves and total cutoffs
    """
    logger = logging.getLogger(__name__)
    rng = random.Random(seed)
    evaluator = Evaluator(blocking_bonus=blocking_bonus)

    summary = {"boards": 0, "agree": 0, "cutoffs": 0, "plain_seconds": 0.0, "pruned_seconds": 0.0}
    mismatches = []

    for _ in tqdm(range(num_boards), desc="Comparing", unit=" board", disable=not show_progress):
        plies = rng.randint(min_plies, max_plies)
        board = random_position(rng, plies)
        ai_token = Token.BLACK if plies % 2 == 0 else Token.WHITE

        plain = SearchEngine(board, ai_token, depth, evaluator, use_alpha_beta=False)
        pruned = SearchEngine(board, ai_token, depth, evaluator, use_alpha_beta=True)

        start = time.perf_counter()
        plain_move, _ = plain.choose_next()
        summary["plain_seconds"] += time.perf_counter() - start

        start = time.perf_counter()
        pruned_move, _ = pruned.choose_next()
        summary["pruned_seconds"] += time.perf_counter() - start

        summary["boards"] += 1
        summary["cutoffs"] += pruned.stats.cutoffs
        if plain_move == pruned_move and plain.root.score == pruned.root.score:
            summary["agree"] += 1
        else:
            mismatches.append((board, plain_move, pruned_move))
            logger.warning(
                f"Mismatch: minimax {plain_move.label} vs alpha-beta {pruned_move.label}\n{board}"
            )

    summary["mismatches"] = mismatches
    return summary


def compare_command(args):
    """Compare alpha-beta and plain minimax on random positions."""
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    logger.info(f"Comparing {args.boards} random positions at depth {args.depth}")
    summary = compare_positions(
        num_boards=args.boards,
        depth=args.depth,
        seed=args.seed,
        blocking_bonus=args.blocking_bonus,
    )

    logger.info("=" * 60)
    logger.info(f"Boards: {summary['boards']}")
    logger.info(f"Same move: {summary['agree']}/{summary['boards']}")
    logger.info(f"Alpha-beta cutoffs: {summary['cutoffs']:,}")
    logger.info(
        f"Time: minimax {summary['plain_seconds']:.1f}s, "
        f"alpha-beta {summary['pruned_seconds']:.1f}s"
    )

    if summary["agree"] != summary["boards"]:
        sys.exit(1)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Pentago against a minimax engine")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game at the console")
    play_parser.add_argument("--name", default="Player", help="Your name")
    play_parser.add_argument(
        "--token", default="b", choices=["b", "w"], help="Your token"
    )
    play_parser.add_argument("--ai-name", default="Computer", help="Name of the AI")
    play_parser.add_argument(
        "--depth", type=int, default=2, help="AI lookahead in plies"
    )
    play_parser.add_argument(
        "--blocking-bonus",
        type=int,
        default=2,
        help="Advanced evaluator weight (0 = basic evaluator)",
    )
    play_parser.add_argument(
        "--no-pruning", action="store_true", help="Disable alpha-beta pruning"
    )
    play_parser.add_argument(
        "--first",
        choices=["ai", "human", "random"],
        default="random",
        help="Who makes the opening move",
    )
    play_parser.add_argument("--seed", type=int, default=None, help="Coin-flip seed")
    play_parser.add_argument(
        "--rich-logging", action="store_true", help="Route log output through rich"
    )
    play_parser.set_defaults(func=play_command)

    # Compare command
    compare_parser = subparsers.add_parser(
        "compare", help="Check alpha-beta against plain minimax"
    )
    compare_parser.add_argument("--boards", type=int, default=50)
    compare_parser.add_argument("--depth", type=int, default=2)
    compare_parser.add_argument("--seed", type=int, default=42)
    compare_parser.add_argument("--blocking-bonus", type=int, default=0)
    compare_parser.set_defaults(func=compare_command)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if getattr(args, "depth", 1) < 1:
        parser.error("--depth must be at least 1")
    if getattr(args, "blocking_bonus", 0) < 0:
        parser.error("--blocking-bonus must be non-negative")

    args.func(args)


if __name__ == "__main__":
    main()
