"""Pentago decision engine: board rules and minimax game-tree search."""

__version__ = "0.1.0"
