"""Tests for the easy / medium / hard move selection."""

import random

import pytest

from game_logic import (
    EMPTY, Difficulty, MinimaxAI, Board,
    check_result, choose_move, other_mark,
)


def cells(layout):
    return [EMPTY if c == " " else c for c in layout]


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_full_board_returns_none(difficulty):
    assert choose_move(cells("XOXXOOOXX"), difficulty, "O", "X") is None


def test_difficulty_accepts_strings():
    assert Difficulty.parse("HARD") is Difficulty.HARD
    assert Difficulty.parse(" medium ") is Difficulty.MEDIUM
    assert choose_move(cells("XX OO    "), "hard", "X", "O") == 2
    with pytest.raises(ValueError):
        Difficulty.parse("impossible")
    with pytest.raises(ValueError):
        choose_move(cells("XX OO    "), "nightmare", "X", "O")


def test_easy_single_empty_cell():
    board = cells("XOXXOOO X")
    for _ in range(50):
        assert choose_move(board, Difficulty.EASY, "O", "X") == 7


def test_easy_picks_an_empty_cell():
    board = cells("X   O    ")
    rng = random.Random(7)
    for _ in range(30):
        assert board[choose_move(board, Difficulty.EASY, "X", "O", rng)] == EMPTY


def test_medium_prefers_win_over_block():
    # O wins at 2, X threatens 5
    assert choose_move(cells("OO XX    "), Difficulty.MEDIUM, "O", "X") == 2


def test_medium_blocks():
    assert choose_move(cells("XX  O    "), Difficulty.MEDIUM, "O", "X") == 2
    assert choose_move(cells("  OXXO   "), Difficulty.MEDIUM, "X", "O") == 8


def test_medium_takes_first_win_in_pattern_order():
    # wins available at 2, 5, 6, 7 and 8; row 0 is checked first
    assert choose_move(cells("OO OO    "), Difficulty.MEDIUM, "O", "X") == 2
    assert choose_move(cells(" XXXO X O"), Difficulty.MEDIUM, "X", "O") == 0


def test_medium_falls_back_to_random():
    board = cells("X   O    ")
    rng = random.Random(3)
    for _ in range(20):
        move = choose_move(board, Difficulty.MEDIUM, "X", "O", rng)
        assert board[move] == EMPTY


def test_hard_takes_win_before_block():
    assert choose_move(cells("OO XX    "), Difficulty.HARD, "O", "X") == 2


def test_hard_blocks():
    assert choose_move(cells("XX  O    "), Difficulty.HARD, "O", "X") == 2


def test_hard_tie_break_is_lowest_index():
    # every opening move draws with perfect play
    assert choose_move([EMPTY] * 9, Difficulty.HARD, "X", "O") == 0


def test_hard_answers_corner_with_center():
    assert choose_move(cells("X        "), Difficulty.HARD, "O", "X") == 4


def test_choose_move_leaves_board_untouched():
    board = cells("X   O    ")
    snapshot = list(board)
    for difficulty in Difficulty:
        choose_move(board, difficulty, "X", "O")
        assert board == snapshot


def test_choose_move_rejects_wrong_length():
    with pytest.raises(AssertionError):
        choose_move([EMPTY] * 10, Difficulty.EASY, "X", "O")


def _ai_never_loses(board, to_move, ai, human, cache):
    result = check_result(board)
    if result is not None:
        return getattr(result, "winner", None) != human
    if to_move == ai:
        key = tuple(board)
        if key not in cache:
            cache[key] = choose_move(board, Difficulty.HARD, ai, human)
        board[cache[key]] = ai
        ok = _ai_never_loses(board, human, ai, human, cache)
        board[cache[key]] = EMPTY
        return ok
    for i in range(9):
        if board[i] != EMPTY:
            continue
        board[i] = human
        ok = _ai_never_loses(board, ai, ai, human, cache)
        board[i] = EMPTY
        if not ok:
            return False
    return True


@pytest.mark.parametrize("ai", ["X", "O"])
def test_hard_is_unbeatable(ai):
    human = other_mark(ai)
    # X always opens
    assert _ai_never_loses([EMPTY] * 9, "X", ai, human, {})


def test_minimax_ai_defaults_and_validation():
    ai = MinimaxAI()
    assert (ai.ai_player, ai.human_player) == ("O", "X")
    assert MinimaxAI("X").human_player == "O"
    with pytest.raises(ValueError):
        MinimaxAI("Z")
    with pytest.raises(ValueError):
        MinimaxAI("X", "X")


def test_minimax_ai_works_on_a_copy():
    board = Board(cells("XX  O    "))
    ai = MinimaxAI("O", "X")
    assert ai.choose_move(board, "hard") == 2
    assert board.cells == cells("XX  O    ")
    assert ai.choose_move(board.cells, Difficulty.MEDIUM) == 2
    assert ai.choose_move(Board(cells("XOXXOOOXX"))) is None
