"""
One game between two sides, from the first move to committing the results.

Scoring: a win is worth +6 score, a loss -2, a draw nothing; every hint costs
one point and needs a positive score. An aborted game commits the players'
records exactly as they were checked out.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Dict, List, Optional

from .game_basics import (
    EMPTY_BOARD,
    Board,
    Outcome,
    Player,
    apply_move,
    evaluate,
    is_move_playable,
)
from .ranking import PlayerRecord, RankingStore
from .solver import best_move

WIN_POINTS = 6
LOSS_POINTS = -2
HINT_COST = 1


class GameMode(Enum):
    VERSUS = "1v1"
    COMPUTER = "computer"


class IllegalMoveError(ValueError):
    pass


class GameOverError(RuntimeError):
    pass


class HintUnavailableError(Exception):
    pass


def _check_sides(sides: Dict[Player, object], mode: GameMode) -> None:
    humans = [p for p in Player if sides.get(p) is not None]
    if mode is GameMode.VERSUS and len(humans) != 2:
        raise ValueError("A 1v1 game needs a player for both X and O")
    if mode is GameMode.COMPUTER and len(humans) != 1:
        raise ValueError("A computer game needs exactly one human player")


class GameSession:
    """Turn order, move application and result bookkeeping for one game.

    ``players`` maps each side to its checked-out record; in computer mode
    the computer's side maps to None.
    """

    def __init__(self, players: Dict[Player, Optional[PlayerRecord]], mode: GameMode = GameMode.VERSUS) -> None:
        _check_sides(players, mode)
        self.mode = mode
        self.players: Dict[Player, Optional[PlayerRecord]] = {p: players.get(p) for p in Player}
        self.board: Board = EMPTY_BOARD
        self.turn = 0
        self.moves: List[int] = []
        self._checked_out = {p: replace(r) for p, r in self.players.items() if r is not None}
        self._finished = False

    @classmethod
    def start(
        cls,
        store: RankingStore,
        names: Dict[Player, Optional[str]],
        mode: GameMode = GameMode.VERSUS,
    ) -> "GameSession":
        """Check the named players out of ``store`` and open a session."""
        _check_sides(names, mode)
        given = [n for n in names.values() if n is not None]
        if len(set(given)) != len(given):
            raise ValueError("Both players must have different names")
        players = {p: (store.checkout(names[p]) if names.get(p) is not None else None) for p in Player}
        return cls(players, mode)

    @property
    def current_player(self) -> Player:
        return Player.O if self.turn % 2 == 0 else Player.X

    @property
    def computer_side(self) -> Optional[Player]:
        if self.mode is not GameMode.COMPUTER:
            return None
        return next(p for p in Player if self.players[p] is None)

    @property
    def outcome(self) -> Outcome:
        return evaluate(self.board)

    @property
    def is_over(self) -> bool:
        return self.outcome.is_terminal

    def play(self, cell: int) -> Outcome:
        if self.is_over:
            raise GameOverError("The game is already over")
        if not is_move_playable(self.board, cell):
            raise IllegalMoveError("This location has already been used!")
        self.board = apply_move(self.board, cell, self.current_player)
        self.moves.append(cell)
        self.turn += 1
        return self.outcome

    def hint(self) -> Optional[int]:
        """Play the engine's move for the side to move, paying one score point."""
        if self.mode is not GameMode.VERSUS:
            raise HintUnavailableError("Hints are only available in 1v1 games")
        record = self.players[self.current_player]
        if record.score <= 0:
            raise HintUnavailableError("You don't have enough score to use computer help :(")
        mv = best_move(self.board, self.current_player)
        if mv is None:
            return None
        self.play(mv)
        record.score -= HINT_COST
        logging.debug("%s used a hint: cell %d", record.name, mv + 1)
        return mv

    def computer_move(self) -> Optional[int]:
        if self.current_player is not self.computer_side:
            raise RuntimeError("It is not the computer's turn")
        mv = best_move(self.board, self.current_player)
        if mv is not None:
            self.play(mv)
        return mv

    def _apply_result(self, outcome: Outcome) -> None:
        if outcome is Outcome.DRAW:
            for record in self.players.values():
                if record is not None:
                    record.draw_count += 1
            return
        winner = Player.X if outcome is Outcome.MAXIMIZER_WIN else Player.O
        won, lost = self.players[winner], self.players[winner.opponent]
        if won is not None:
            won.win_count += 1
            won.score += WIN_POINTS
        if lost is not None:
            lost.lose_count += 1
            lost.score += LOSS_POINTS

    def finish(self, store: RankingStore, aborted: bool = False) -> Outcome:
        """Commit both records back to ``store`` and re-sort it.

        Only a completed, non-aborted game changes the records; otherwise the
        records go back exactly as checked out.
        """
        if self._finished:
            raise GameOverError("Results were already committed")
        self._finished = True
        outcome = self.outcome
        if aborted or not outcome.is_terminal:
            logging.debug("Game aborted after %d moves; records left unchanged", len(self.moves))
            for record in self._checked_out.values():
                store.commit(replace(record))
        else:
            self._apply_result(outcome)
            logging.debug("Game over (%s) after %d moves", outcome.value, len(self.moves))
            for record in self.players.values():
                if record is not None:
                    store.commit(record)
        store.resort()
        return outcome
