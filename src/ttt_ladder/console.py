"""
Terminal front end: board rendering, input parsing and the menu loop.

Ctrl-C or end of input at any prompt sets the cancellation token. Inside a
game that aborts the game without recording a result; at the menu it exits.
"""
from __future__ import annotations

import logging
import sys
import threading
from typing import Callable, Optional, TextIO, Union

from .game import GameMode, GameSession, HintUnavailableError, IllegalMoveError
from .game_basics import Board, Outcome, Player, occupant
from .ranking import RankingStore, validate_name

HINT = "hint"
HINT_CODES = {"27", "h", "hint"}
CLEAR = "\033[H\033[2J"


class InvalidInputError(ValueError):
    pass


def parse_move(text: str) -> Union[int, str]:
    """Turn a typed move into a cell index 0..8, or HINT."""
    raw = text.strip().lower()
    if raw in HINT_CODES:
        return HINT
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInputError("invalid input") from None
    if not 1 <= value <= 9:
        raise InvalidInputError("you must enter a value between 1~9")
    return value - 1


def parse_name(text: str) -> str:
    try:
        return validate_name(text.strip())
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from None


def parse_side(text: str) -> Player:
    raw = text.strip().upper()
    if raw not in ("X", "O"):
        raise InvalidInputError("choose X or O")
    return Player[raw]


def _cell_char(board: Board, cell: int) -> str:
    who = occupant(board, cell)
    if who == Player.X:
        return "X"
    if who == Player.O:
        return "O"
    return str(cell + 1)


def render_board(board: Board) -> str:
    c = [_cell_char(board, i) for i in range(9)]
    rows = []
    for r in range(3):
        rows.append("     |     |     ")
        rows.append(f"  {c[3 * r]}  |  {c[3 * r + 1]}  |  {c[3 * r + 2]} ")
        rows.append("_____|_____|_____" if r < 2 else "     |     |     ")
    return "\n".join(["", "\tTic Tac Toe", "", "Player 1 (X)  -  Player 2 (O)", ""] + rows) + "\n"


def format_scoreboard(store: RankingStore) -> str:
    if len(store) == 0:
        return "no entry\n"
    lines = ["username\tscore\twin_count\tlose_count\tdraw_count"]
    for r in store.records:
        lines.append(f"{r.name:>40}\t{r.score:5d}\t{r.win_count:5d}\t{r.lose_count:5d}\t{r.draw_count:5d}")
    return "\n".join(lines) + "\n"


def describe_outcome(outcome: Outcome) -> str:
    return {
        Outcome.DRAW: "draw",
        Outcome.MAXIMIZER_WIN: "X won",
        Outcome.MINIMIZER_WIN: "O won",
    }.get(outcome, "game aborted")


class Console:
    def __init__(
        self,
        cancel: Optional[threading.Event] = None,
        input_fn: Optional[Callable[[], str]] = None,
        output: Optional[TextIO] = None,
    ) -> None:
        self.cancel = cancel if cancel is not None else threading.Event()
        self.input_fn = input_fn if input_fn is not None else input
        self.output = output if output is not None else sys.stdout

    def write(self, text: str = "") -> None:
        self.output.write(text)
        self.output.flush()

    def clear(self) -> None:
        if self.output.isatty():
            self.write(CLEAR)

    def ask(self, prompt: str) -> Optional[str]:
        """Prompt once; None means the user cancelled."""
        self.write(prompt)
        try:
            return self.input_fn()
        except (EOFError, KeyboardInterrupt):
            self.write("\n")
            self.cancel.set()
            return None

    def ask_until_valid(self, prompt: str, parse: Callable[[str], object]):
        while not self.cancel.is_set():
            text = self.ask(prompt)
            if text is None:
                return None
            try:
                return parse(text)
            except InvalidInputError as exc:
                self.write(f"{exc}\n")
        return None

    def show_board(self, board: Board) -> None:
        self.clear()
        self.write(render_board(board))

    def _human_turn(self, session: GameSession) -> bool:
        """Read and apply one human move; False ends the game loop."""
        p = session.current_player
        prompt = f"Enter your move {p.name} (1~9)"
        if session.mode is GameMode.VERSUS:
            prompt += "[27 for computer move]"
        move = self.ask_until_valid(prompt + ":", parse_move)
        if move is None:
            return False
        if move == HINT:
            try:
                if session.hint() is None:
                    return False
            except HintUnavailableError as exc:
                self.write(f"{exc}\n")
                return True
        else:
            try:
                session.play(move)
            except IllegalMoveError as exc:
                self.write(f"You can't use this location\n{exc}\n")
                return True
        self.show_board(session.board)
        return True

    def play(self, store: RankingStore, mode: GameMode) -> Optional[Outcome]:
        """Run one game to completion or abort; returns the outcome or None if aborted."""
        self.clear()
        names = {}
        if mode is GameMode.VERSUS:
            names[Player.O] = self.ask_until_valid("player O enter your name (max length is 39): ", parse_name)
            names[Player.X] = self.ask_until_valid("player X enter your name (max length is 39): ", parse_name)
            if None in names.values():
                self.cancel.clear()
                return None
        else:
            name = self.ask_until_valid("enter your name (max length is 39): ", parse_name)
            side = self.ask_until_valid("play as X or O (O moves first): ", parse_side) if name else None
            if side is None:
                self.cancel.clear()
                return None
            names = {side: name, side.opponent: None}
        try:
            session = GameSession.start(store, names, mode)
        except ValueError as exc:
            self.write(f"{exc}\n")
            return None

        try:
            self.show_board(session.board)
            while not session.is_over and not self.cancel.is_set():
                if session.current_player is session.computer_side:
                    session.computer_move()
                    self.show_board(session.board)
                    continue
                if not self._human_turn(session):
                    break
        except KeyboardInterrupt:
            # Ctrl-C outside a prompt, e.g. during the computer's search
            self.write("\n")
            self.cancel.set()
        finally:
            aborted = self.cancel.is_set()
            self.cancel.clear()
            outcome = session.finish(store, aborted=aborted)
        if aborted or not outcome.is_terminal:
            self.write("game aborted\n")
            logging.info("Game aborted; scoreboard unchanged")
            return None
        self.write(describe_outcome(outcome) + "\n")
        return outcome

    def run_menu(self, store: RankingStore) -> None:
        while not self.cancel.is_set():
            self.write("1)Start 1v1 game\n2)Play against the computer\n3)Scoreboard\n4)Exit\n")
            choice = self.ask("enter your choice:")
            if choice is None:
                break
            choice = choice.strip()
            try:
                if choice == "1":
                    self.play(store, GameMode.VERSUS)
                elif choice == "2":
                    self.play(store, GameMode.COMPUTER)
                elif choice == "3":
                    self.clear()
                    self.write(format_scoreboard(store))
                elif choice == "4":
                    break
                else:
                    self.write("invalid choice\n")
            except KeyboardInterrupt:
                self.write("\n")
                break
        self.clear()


def run_menu(
    store: RankingStore,
    cancel: Optional[threading.Event] = None,
    input_fn: Optional[Callable[[], str]] = None,
    output: Optional[TextIO] = None,
) -> None:
    Console(cancel=cancel, input_fn=input_fn, output=output).run_menu(store)
