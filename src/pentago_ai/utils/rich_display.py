"""
Rich-based console output for the game.

Provides:
- Board rendering with the quadrant/cell input key alongside
- Coloured status messages
- Logging routed through the rich console
"""

import logging
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core import EMPTY, Board

console = Console()
logger = logging.getLogger(__name__)

TOKEN_STYLES = {
    "b": "bold cyan",
    "w": "bold magenta",
    EMPTY: "dim",
}

# Cell numbers as typed by the player, laid out like the board
KEY_ROWS = ["123123", "456456", "789789", "123123", "456456", "789789"]


def _grid_text(rows, styles: Optional[dict] = None) -> Text:
    """Render six rows of six characters with quadrant borders."""
    border = "+-------+-------+\n"
    text = Text(border)
    for r, row in enumerate(rows):
        if r == 3:
            text.append(border)
        text.append("| ")
        for c, value in enumerate(row):
            style = styles.get(value, "") if styles else ""
            text.append(value, style=style)
            text.append(" ")
            if c == 2:
                text.append("| ")
        text.append("|\n")
    text.append(border.rstrip("\n"))
    return text


class GameDisplay:
    """Console display for a Pentago game."""

    def __init__(self, target: Optional[Console] = None):
        self.console = target or console

    def log(self, message: str, style: str = ""):
        self.console.print(message, style=style)

    def log_info(self, message: str):
        self.console.print(f"[blue]ℹ[/blue] {message}")

    def log_success(self, message: str):
        self.console.print(f"[green]✓[/green] {message}")

    def log_warning(self, message: str):
        self.console.print(f"[yellow]⚠[/yellow]  {message}")

    def log_error(self, message: str):
        self.console.print(f"[red]✗[/red] {message}")

    def show_header(self, title: str, ai_name: str, depth: int, evaluator, pruning: bool):
        """Show game header."""
        self.console.rule(f"[bold blue]{title}[/bold blue]")
        self.console.print(f"Opponent: {ai_name}")
        self.console.print(f"Lookahead: {depth} plies ({'alpha-beta' if pruning else 'plain minimax'})")
        self.console.print(f"Evaluator: {evaluator!r}")
        self.console.print()

    def show_board(self, board: Board):
        """Show the board only."""
        self.console.print(_grid_text(board.rows(), TOKEN_STYLES))

    def show_board_with_key(self, board: Board):
        """Show the board next to the quadrant/cell input key."""
        table = Table(show_header=True, box=None, padding=(0, 3))
        table.add_column("Current State", justify="center")
        table.add_column("Input Key (quadrants 1 2 / 3 4)", justify="center")
        table.add_row(
            _grid_text(board.rows(), TOKEN_STYLES),
            _grid_text(KEY_ROWS),
        )
        self.console.print(table)


def setup_rich_logging(level: str = "INFO"):
    """Configure logging to work nicely with rich console."""
    from rich.logging import RichHandler

    # Remove existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[rich_handler],
        format="%(message)s",
    )
