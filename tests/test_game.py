from dataclasses import replace

import pytest

from ttt_ladder.game import (
    GameMode,
    GameOverError,
    GameSession,
    HintUnavailableError,
    IllegalMoveError,
)
from ttt_ladder.game_basics import Outcome, Player, legal_moves
from ttt_ladder.ranking import PlayerRecord, RankingStore


@pytest.fixture
def store():
    return RankingStore([
        PlayerRecord("olga", win_count=1, score=6),
        PlayerRecord("xavier", lose_count=1, score=-2),
    ])


def _start(store, mode=GameMode.VERSUS):
    return GameSession.start(store, {Player.O: "olga", Player.X: "xavier"}, mode)


def test_start_checks_both_players_out(store):
    s = _start(store)
    assert len(store) == 0
    assert s.current_player is Player.O
    s.play(4)
    assert s.current_player is Player.X


def test_o_win_updates_records(store):
    s = _start(store)
    for cell in (0, 3, 1, 4):
        assert s.play(cell) is Outcome.IN_PROGRESS
    assert s.play(2) is Outcome.MINIMIZER_WIN
    with pytest.raises(GameOverError):
        s.play(8)
    s.finish(store)
    olga, xavier = store.get("olga"), store.get("xavier")
    assert (olga.win_count, olga.score) == (2, 12)
    assert (xavier.lose_count, xavier.score) == (2, -4)
    assert [r.name for r in store.records] == ["olga", "xavier"]


def test_draw_updates_both(store):
    s = _start(store)
    # O X O / O X X / X O O
    for cell in (0, 1, 2, 4, 3, 5, 7, 6, 8):
        s.play(cell)
    assert s.outcome is Outcome.DRAW
    s.finish(store)
    assert store.get("olga").draw_count == 1
    assert store.get("xavier").draw_count == 1


def test_occupied_cell_is_rejected(store):
    s = _start(store)
    s.play(0)
    with pytest.raises(IllegalMoveError):
        s.play(0)
    assert s.current_player is Player.X


def test_hint_costs_a_point_and_needs_score(store):
    s = _start(store)
    mv = s.hint()
    assert mv is not None
    assert s.players[Player.O].score == 5
    # X has a negative score
    with pytest.raises(HintUnavailableError):
        s.hint()
    assert s.current_player is Player.X


def test_abort_restores_checked_out_records(store):
    before = [replace(r) for r in store.records]
    s = _start(store)
    assert s.hint() == 0
    s.play(8)
    s.finish(store, aborted=True)
    assert store.records == before


def test_unfinished_game_counts_as_aborted(store):
    before = store.records
    s = _start(store)
    s.play(4)
    assert s.finish(store) is Outcome.IN_PROGRESS
    assert store.records == before
    with pytest.raises(GameOverError):
        s.finish(store)


def test_same_name_twice_is_refused(store):
    with pytest.raises(ValueError):
        GameSession.start(store, {Player.O: "olga", Player.X: "olga"})
    assert len(store) == 2


def test_new_players_get_fresh_records():
    store = RankingStore()
    s = GameSession.start(store, {Player.O: "ann", Player.X: "ben"})
    for cell in (0, 3, 1, 4, 2):
        s.play(cell)
    s.finish(store)
    assert store.records == [
        PlayerRecord("ann", win_count=1, score=6),
        PlayerRecord("ben", lose_count=1, score=-2),
    ]


@pytest.mark.parametrize("human", list(Player))
def test_computer_never_loses(human):
    # human plays the lowest free cell every turn
    store = RankingStore()
    names = {human: "human", human.opponent: None}
    s = GameSession.start(store, names, GameMode.COMPUTER)
    assert s.computer_side is human.opponent
    while not s.is_over:
        if s.current_player is s.computer_side:
            s.computer_move()
        else:
            with pytest.raises(HintUnavailableError):
                s.hint()
            s.play(legal_moves(s.board)[0])
    outcome = s.finish(store)
    human_won = outcome is (Outcome.MAXIMIZER_WIN if human is Player.X else Outcome.MINIMIZER_WIN)
    assert not human_won
    assert len(store) == 1
    assert store.get("human").win_count == 0


def test_wrong_side_count_checks_nobody_out(store):
    before = [replace(r) for r in store.records]
    with pytest.raises(ValueError):
        GameSession.start(store, {Player.O: "olga", Player.X: "xavier"}, GameMode.COMPUTER)
    with pytest.raises(ValueError):
        GameSession.start(store, {Player.O: "olga", Player.X: None}, GameMode.VERSUS)
    assert store.records == before
