"""Tic-tac-toe package exposing game rules, the computer opponent, and the web application."""

from .ai import Difficulty, best_move, select_computer_move
from .game import InvalidMove, apply_move, evaluate, legal_moves, new_board
from .ui import app

__all__ = [
    "Difficulty",
    "InvalidMove",
    "app",
    "apply_move",
    "best_move",
    "evaluate",
    "legal_moves",
    "new_board",
    "select_computer_move",
]
