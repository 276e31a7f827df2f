"""Tests for the computer opponent."""

import random

import pytest

from tictactoe.ai import (
    Difficulty,
    best_move,
    medium_move,
    minimax,
    random_move,
    select_computer_move,
)
from tictactoe.game import COMPUTER, HUMAN, WIN, apply_move, evaluate, make_board, new_board


class FixedRandom:
    """Deterministic stand-in for ``random.Random``."""

    def __init__(self, value, pick=-1):
        self.value = value
        self.pick = pick

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[self.pick]


def test_ai_takes_immediate_win():
    board = make_board(["O", "O", "", "X", "X", "", "", "", ""])
    assert best_move(board) == 2


def test_ai_blocks_opponent():
    board = make_board(["X", "X", "", "", "O", "", "", "", ""])
    assert best_move(board) == 2


def test_ai_prefers_lowest_index_on_ties():
    # Every opening draws under perfect play, so the first cell wins the tie
    assert best_move(new_board()) == 0


def test_minimax_scores_terminal_positions():
    won = make_board(["O", "O", "O", "X", "X", "", "", "", ""])
    lost = make_board(["X", "X", "X", "O", "O", "", "", "", ""])
    drawn = make_board(["X", "O", "X", "X", "O", "O", "O", "X", "X"])
    assert minimax(won, 3, False) == 7
    assert minimax(lost, 3, True) == -7
    assert minimax(drawn, 0, True) == 0


def test_best_move_returns_none_on_full_board():
    drawn = make_board(["X", "O", "X", "X", "O", "O", "O", "X", "X"])
    assert best_move(drawn) is None
    assert random_move(drawn, random.Random(1)) is None


def test_random_move_with_single_empty_cell():
    board = make_board(["X", "O", "X", "X", "O", "O", "O", "X", ""])
    for seed in range(20):
        assert random_move(board, random.Random(seed)) == 8


def test_random_move_only_picks_empty_cells():
    board = make_board(["X", "", "O", "", "X", "", "O", "", ""])
    rng = random.Random(42)
    for _ in range(50):
        assert board[random_move(board, rng)] == " "


def test_medium_below_half_plays_best_move():
    board = make_board(["X", "X", "", "", "O", "", "", "", ""])
    assert medium_move(board, FixedRandom(0.49)) == best_move(board) == 2


def test_medium_above_half_plays_random_move():
    board = make_board(["X", "X", "", "", "O", "", "", "", ""])
    # The stub picks the last legal cell, which is not the blocking move
    assert medium_move(board, FixedRandom(0.51)) == 8
    assert medium_move(board, FixedRandom(0.51, pick=0)) == 2


@pytest.mark.parametrize("difficulty", list(Difficulty) + ["easy", "medium", "hard"])
def test_select_computer_move_returns_legal_cell(difficulty):
    board = make_board(["X", "", "", "", "", "", "", "", ""])
    move = select_computer_move(board, difficulty, random.Random(3))
    assert move in range(1, 9)


def test_select_computer_move_on_finished_board():
    board = make_board(["X", "X", "X", "O", "O", "", "", "", ""])
    assert select_computer_move(board, Difficulty.HARD) is None


def test_select_computer_move_rejects_unknown_difficulty():
    with pytest.raises(ValueError):
        select_computer_move(new_board(), "impossible")


def test_select_computer_move_does_not_mutate_board():
    board = make_board(["X", "", "", "", "O", "", "", "", ""])
    snapshot = tuple(board)
    select_computer_move(board, Difficulty.HARD)
    assert board == snapshot


def _worst_result_for_computer(board):
    """Play every human line against the hard computer; return the worst outcome."""
    outcome = evaluate(board)
    if outcome.finished:
        return outcome
    results = []
    for index in range(9):
        if board[index] != " ":
            continue
        after_human = apply_move(board, index, HUMAN)
        if evaluate(after_human).finished:
            results.append(evaluate(after_human))
            continue
        reply = select_computer_move(after_human, Difficulty.HARD)
        results.append(_worst_result_for_computer(apply_move(after_human, reply, COMPUTER)))
    for result in results:
        if result.status == WIN and result.winner == HUMAN:
            return result
    return results[0]


def test_hard_computer_never_loses():
    outcome = _worst_result_for_computer(new_board())
    assert not (outcome.status == WIN and outcome.winner == HUMAN)


def test_hard_computer_draws_against_optimal_human():
    board = new_board()
    player = HUMAN
    while not evaluate(board).finished:
        if player == HUMAN:
            move = best_move(board, computer=HUMAN)
        else:
            move = select_computer_move(board, Difficulty.HARD)
        board = apply_move(board, move, player)
        player = COMPUTER if player == HUMAN else HUMAN
    assert evaluate(board).status == "draw"


def _human_can_win(board):
    """Try every human reply on ``board``, answering each with the hard computer."""
    for index in range(9):
        if board[index] != " ":
            continue
        after_human = apply_move(board, index, HUMAN)
        outcome = evaluate(after_human)
        if outcome.status == WIN:
            return True
        if outcome.finished:
            continue
        reply = select_computer_move(after_human, Difficulty.HARD)
        after_computer = apply_move(after_human, reply, COMPUTER)
        if not evaluate(after_computer).finished and _human_can_win(after_computer):
            return True
    return False


def test_hard_computer_moving_first_never_loses():
    opening = select_computer_move(new_board(), Difficulty.HARD)
    assert opening == best_move(new_board())
    assert not _human_can_win(apply_move(new_board(), opening, COMPUTER))


def test_strategies_return_none_on_decided_board():
    board = make_board(["X", "X", "X", "O", "O", "", "", "", ""])
    assert best_move(board) is None
    assert random_move(board, random.Random(0)) is None
    assert medium_move(board, FixedRandom(0.1)) is None
    assert medium_move(board, FixedRandom(0.9)) is None
