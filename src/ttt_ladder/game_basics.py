"""
Game basics: board representation, rules, winner/draw checks, validity.
Teaching notes:
- A board is two disjoint bitmasks, one per side. O always starts.
- Cells are 0..8 internally (row-major) and 1..9 on screen.
- Each of the eight lines (3 rows, 3 columns, 2 diagonals) owns one 4-bit
  nibble. Line t uses bits 4t+3, 4t+2, 4t+1; bit 4t is a separator that is
  never set. A cell's mask has its bit in every line that passes through it.
- Because separators stay clear, ``m & (m << 1) & (m >> 1)`` is non-zero
  exactly when ``m`` holds three consecutive bits, i.e. a complete line.
"""
import operator
from enum import Enum, IntEnum
from functools import reduce
from typing import List, NamedTuple, Tuple

LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

MAXIMIZER_WIN_SCORE = 10
MINIMIZER_WIN_SCORE = -10


def _line_bit(line: int, position: int) -> int:
    return 1 << (4 * line + 3 - position)


def _cell_mask(cell: int) -> int:
    mask = 0
    for t, line in enumerate(LINES):
        if cell in line:
            mask |= _line_bit(t, line.index(cell))
    return mask


CELL_MASKS: Tuple[int, ...] = tuple(_cell_mask(c) for c in range(9))
FULL_MASK = reduce(operator.or_, CELL_MASKS)


class Player(IntEnum):
    X = 1  # maximizer
    O = 2  # minimizer

    @property
    def opponent(self) -> "Player":
        return Player.O if self is Player.X else Player.X


class Outcome(Enum):
    IN_PROGRESS = "in_progress"
    DRAW = "draw"
    MAXIMIZER_WIN = "x_wins"
    MINIMIZER_WIN = "o_wins"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.IN_PROGRESS


class Board(NamedTuple):
    x: int = 0
    o: int = 0

    def mask(self, player: Player) -> int:
        return self.x if player is Player.X else self.o

    def swapped(self) -> "Board":
        return Board(x=self.o, o=self.x)


EMPTY_BOARD = Board(0, 0)


def _check_cell(cell: int) -> int:
    if not 0 <= cell <= 8:
        raise ValueError(f"Cell out of range 0..8: {cell}")
    return CELL_MASKS[cell]


def is_move_playable(board: Board, cell: int) -> bool:
    return ((board.x | board.o) & _check_cell(cell)) == 0


def apply_move(board: Board, cell: int, player: Player) -> Board:
    if not is_move_playable(board, cell):
        raise ValueError(f"Cell {cell + 1} is already taken")
    c = CELL_MASKS[cell]
    if player is Player.X:
        return Board(board.x | c, board.o)
    return Board(board.x, board.o | c)


def occupant(board: Board, cell: int) -> int:
    """0 for an empty cell, otherwise the occupying Player value."""
    c = _check_cell(cell)
    if board.x & c:
        return Player.X
    if board.o & c:
        return Player.O
    return 0


def legal_moves(board: Board) -> List[int]:
    taken = board.x | board.o
    return [i for i, c in enumerate(CELL_MASKS) if not taken & c]


def is_any_move_left(board: Board) -> bool:
    return (board.x | board.o) != FULL_MASK


def has_won(mask: int) -> bool:
    return (mask & (mask << 1) & (mask >> 1)) != 0


def evaluate_score(board: Board) -> int:
    if has_won(board.o):
        return MINIMIZER_WIN_SCORE
    if has_won(board.x):
        return MAXIMIZER_WIN_SCORE
    return 0


def evaluate(board: Board) -> Outcome:
    score = evaluate_score(board)
    if score == MAXIMIZER_WIN_SCORE:
        return Outcome.MAXIMIZER_WIN
    if score == MINIMIZER_WIN_SCORE:
        return Outcome.MINIMIZER_WIN
    if not is_any_move_left(board):
        return Outcome.DRAW
    return Outcome.IN_PROGRESS


def get_piece_counts(board: Board) -> Tuple[int, int]:
    xs = sum(1 for c in CELL_MASKS if board.x & c)
    os_ = sum(1 for c in CELL_MASKS if board.o & c)
    return xs, os_


def current_player(board: Board) -> Player:
    x, o = get_piece_counts(board)
    return Player.O if x == o else Player.X


def serialize_board(board: Board) -> str:
    return ''.join(str(int(occupant(board, i))) for i in range(9))


def deserialize_board(board_str: str) -> Board:
    if len(board_str) != 9 or any(ch not in "012" for ch in board_str):
        raise ValueError("Invalid board string. Must be 9 chars of 0/1/2.")
    x = o = 0
    for i, ch in enumerate(board_str):
        if ch == "1":
            x |= CELL_MASKS[i]
        elif ch == "2":
            o |= CELL_MASKS[i]
    return Board(x, o)


def is_valid_state(board: Board) -> bool:
    if board.x & board.o:
        return False
    x_count, o_count = get_piece_counts(board)
    if not (o_count == x_count or o_count == x_count + 1):
        return False
    x_won = has_won(board.x)
    o_won = has_won(board.o)
    # no double winners
    if x_won and o_won:
        return False
    if x_won and x_count != o_count:
        return False
    if o_won and o_count != x_count + 1:
        return False
    return True
