"""Core rules for classic 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Board = Tuple[str, ...]

EMPTY = " "
HUMAN: Player = "X"
COMPUTER: Player = "O"
PLAYERS: Tuple[Player, Player] = (HUMAN, COMPUTER)

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

IN_PROGRESS = "in_progress"
WIN = "win"
DRAW = "draw"


class InvalidMove(ValueError):
    """Raised when a move targets an occupied cell or a finished board."""


@dataclass(frozen=True)
class Outcome:
    status: str
    winner: Optional[Player] = None
    line: Optional[Tuple[int, int, int]] = None

    @property
    def finished(self) -> bool:
        return self.status != IN_PROGRESS


# ---------- Board construction ----------


def new_board() -> Board:
    return (EMPTY,) * 9


def make_board(cells: Sequence[str]) -> Board:
    """Build a board from 9 marks; ``""`` is accepted as an empty cell."""
    if len(cells) != 9:
        raise ValueError(f"A board has 9 cells, got {len(cells)}")
    board = tuple(EMPTY if c in ("", EMPTY) else c for c in cells)
    for c in board:
        if c != EMPTY and c not in PLAYERS:
            raise ValueError(f"Unknown cell mark {c!r}")
    return board


def other(player: Player) -> Player:
    return COMPUTER if player == HUMAN else HUMAN


# ---------- Rules ----------


def evaluate(board: Board) -> Outcome:
    # First completed line wins; line order is fixed
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return Outcome(WIN, winner=v, line=(a, b, c))
    if EMPTY not in board:
        return Outcome(DRAW)
    return Outcome(IN_PROGRESS)


def is_terminal(board: Board) -> bool:
    return evaluate(board).finished


def legal_moves(board: Board) -> List[int]:
    """Empty cell indices in ascending order."""
    return [i for i, c in enumerate(board) if c == EMPTY]


def apply_move(board: Board, index: int, player: Player) -> Board:
    """Return a copy of ``board`` with ``player`` placed at ``index``."""
    if player not in PLAYERS:
        raise InvalidMove(f"Unknown player {player!r}")
    if not 0 <= index < 9:
        raise InvalidMove(f"Cell index {index} is off the board")
    if board[index] != EMPTY:
        raise InvalidMove("Cell already occupied")
    if is_terminal(board):
        raise InvalidMove("Game already finished")
    cells = list(board)
    cells[index] = player
    return tuple(cells)
