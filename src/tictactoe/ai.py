"""Computer move selection: random, blended, and exhaustive minimax play."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Union
import logging
import math
import random

from .game import (
    COMPUTER,
    DRAW,
    WIN,
    Board,
    Player,
    apply_move,
    evaluate,
    legal_moves,
    other,
)

logger = logging.getLogger(__name__)

# Probability that the medium tier plays the optimal move
MEDIUM_BEST_MOVE_RATE = 0.5
WIN_SCORE = 10


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Any object with ``random()`` and ``choice(seq)``; ``random.Random`` fits.
RandomSource = Any


def _rng(rng: Optional[RandomSource]) -> RandomSource:
    return rng if rng is not None else random.Random()


# ---- strategies ----


def random_move(board: Board, rng: Optional[RandomSource] = None) -> Optional[int]:
    """Uniformly pick an empty cell, or ``None`` when the game is over."""
    moves = legal_moves(board)
    if not moves or evaluate(board).finished:
        return None
    return _rng(rng).choice(moves)


def medium_move(
    board: Board, rng: Optional[RandomSource] = None, computer: Player = COMPUTER
) -> Optional[int]:
    rng = _rng(rng)
    if rng.random() < MEDIUM_BEST_MOVE_RATE:
        return best_move(board, computer)
    return random_move(board, rng)


def best_move(board: Board, computer: Player = COMPUTER) -> Optional[int]:
    """Optimal move for ``computer``; ties go to the lowest index."""
    if evaluate(board).finished:
        return None
    best_score = -math.inf
    best: Optional[int] = None
    for index in legal_moves(board):
        child = apply_move(board, index, computer)
        score = minimax(child, 0, False, computer)
        if score > best_score:
            best_score, best = score, index
    return best


@lru_cache(maxsize=None)
def minimax(board: Board, depth: int, is_maximizing: bool, computer: Player = COMPUTER) -> int:
    """Score ``board`` from the computer's point of view.

    Wins are worth ``10 - depth`` and losses ``depth - 10`` so that faster
    wins and slower losses are preferred. The cache is keyed on the full
    argument tuple and boards are immutable, so it never changes a result.
    """
    outcome = evaluate(board)
    if outcome.status == WIN:
        return WIN_SCORE - depth if outcome.winner == computer else depth - WIN_SCORE
    if outcome.status == DRAW:
        return 0

    mover = computer if is_maximizing else other(computer)
    scores = (
        minimax(apply_move(board, index, mover), depth + 1, not is_maximizing, computer)
        for index in legal_moves(board)
    )
    return max(scores) if is_maximizing else min(scores)


# ---- public API ----


def select_computer_move(
    board: Board,
    difficulty: Union[Difficulty, str],
    rng: Optional[RandomSource] = None,
    computer: Player = COMPUTER,
) -> Optional[int]:
    """Pick the computer's next cell for ``difficulty``.

    Returns ``None`` when there is nothing to play: the board is full or the
    game is already decided.
    """
    difficulty = Difficulty(difficulty)
    if evaluate(board).finished:
        return None

    if difficulty is Difficulty.EASY:
        move = random_move(board, rng)
    elif difficulty is Difficulty.MEDIUM:
        move = medium_move(board, rng, computer)
    else:
        move = best_move(board, computer)
    logger.debug("%s move for %s: %s", difficulty.value, computer, move)
    return move
