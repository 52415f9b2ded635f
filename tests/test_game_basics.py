from itertools import combinations

import pytest

from ttt_ladder.game_basics import (
    CELL_MASKS,
    EMPTY_BOARD,
    FULL_MASK,
    LINES,
    Board,
    Outcome,
    Player,
    apply_move,
    current_player,
    deserialize_board,
    evaluate,
    evaluate_score,
    has_won,
    is_move_playable,
    is_valid_state,
    legal_moves,
    serialize_board,
)


def _mask(cells):
    m = 0
    for c in cells:
        m |= CELL_MASKS[c]
    return m


def test_cell_masks_are_disjoint_and_cover_lines():
    for a, b in combinations(range(9), 2):
        assert CELL_MASKS[a] & CELL_MASKS[b] == 0
    # one bit per (line, position), separators never used
    assert bin(FULL_MASK).count("1") == 3 * len(LINES)
    for t in range(len(LINES)):
        assert FULL_MASK & (1 << (4 * t)) == 0


@pytest.mark.parametrize("line", LINES)
def test_every_line_wins(line):
    assert has_won(_mask(line))


def test_only_lines_win():
    lines = {frozenset(l) for l in LINES}
    for size in range(1, 6):
        for cells in combinations(range(9), size):
            expected = any(l <= set(cells) for l in lines)
            assert has_won(_mask(cells)) == expected, cells


def test_apply_move_is_pure_and_checks_legality():
    b1 = apply_move(EMPTY_BOARD, 4, Player.O)
    assert EMPTY_BOARD == Board(0, 0)
    assert not is_move_playable(b1, 4)
    assert is_move_playable(b1, 0)
    assert b1.x & b1.o == 0
    with pytest.raises(ValueError):
        apply_move(b1, 4, Player.X)
    with pytest.raises(ValueError):
        is_move_playable(b1, 9)


def test_evaluate_outcomes():
    assert evaluate(EMPTY_BOARD) is Outcome.IN_PROGRESS
    x_row = deserialize_board("111220200")
    assert evaluate(x_row) is Outcome.MAXIMIZER_WIN
    assert evaluate_score(x_row) == 10
    o_diag = deserialize_board("212120002")
    assert evaluate(o_diag) is Outcome.MINIMIZER_WIN
    assert evaluate_score(o_diag) == -10
    draw = deserialize_board("212211122")
    assert evaluate(draw) is Outcome.DRAW
    assert legal_moves(draw) == []
    # won on the last cell is a win, not a draw
    full_win = deserialize_board("222112121")
    assert evaluate(full_win) is Outcome.MINIMIZER_WIN


def test_board_string_codec():
    s = "120010002"
    b = deserialize_board(s)
    assert serialize_board(b) == s
    assert legal_moves(b) == [2, 3, 5, 6, 7]
    for bad in ["abc", "0123456789", "12345678x", "123000000"]:
        with pytest.raises(ValueError):
            deserialize_board(bad)


def test_turn_order_and_validity():
    assert current_player(EMPTY_BOARD) is Player.O
    assert current_player(deserialize_board("000020000")) is Player.X
    assert is_valid_state(deserialize_board("000020000"))
    # X cannot have moved first
    assert not is_valid_state(deserialize_board("000010000"))
    # both sides winning is unreachable
    assert not is_valid_state(deserialize_board("111222000"))
    # X wins only right after X moved (equal counts)
    assert is_valid_state(deserialize_board("111220200"))
    assert not is_valid_state(deserialize_board("111220000"))
