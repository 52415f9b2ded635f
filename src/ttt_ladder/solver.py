"""
Exhaustive minimax over the 3x3 board.
Scoring convention:
- X maximizes, O minimizes. A maximizer win scores +10, a minimizer win -10, a draw 0.
- Wins are discounted by depth (10 - depth) and losses inflated (-10 + depth), so
  among equally winning lines the faster win scores higher and the slower loss
  is preferred.
- best_move always searches as X; for O the two masks are swapped first.
"""
from functools import lru_cache
from typing import Dict, List, Optional

from .game_basics import (
    CELL_MASKS,
    MAXIMIZER_WIN_SCORE,
    MINIMIZER_WIN_SCORE,
    Board,
    Player,
    current_player,
    evaluate,
    evaluate_score,
    is_any_move_left,
    legal_moves,
)

INFINITY = 1000


@lru_cache(maxsize=None)
def minimax(board: Board, depth: int, is_maximizing: bool) -> int:
    score = evaluate_score(board)
    if score == MAXIMIZER_WIN_SCORE:
        return score - depth
    if score == MINIMIZER_WIN_SCORE:
        return score + depth
    if not is_any_move_left(board):
        return 0
    if is_maximizing:
        best = -INFINITY
        for mv in legal_moves(board):
            child = Board(board.x | CELL_MASKS[mv], board.o)
            best = max(best, minimax(child, depth + 1, False))
        return best
    best = INFINITY
    for mv in legal_moves(board):
        child = Board(board.x, board.o | CELL_MASKS[mv])
        best = min(best, minimax(child, depth + 1, True))
    return best


def move_values(board: Board, player: Player) -> List[Optional[int]]:
    """Minimax value of every cell for ``player`` (None where not playable).

    Values are from the mover's perspective: positive means the mover wins.
    A board that is already decided has no playable cells.
    """
    values: List[Optional[int]] = [None] * 9
    if evaluate(board).is_terminal:
        return values
    if player is Player.O:
        board = board.swapped()
    for mv in legal_moves(board):
        child = Board(board.x | CELL_MASKS[mv], board.o)
        values[mv] = minimax(child, 0, False)
    return values


def best_move(board: Board, player: Player) -> Optional[int]:
    """Optimal cell (0..8) for ``player``, or None when no move is available.

    Ties go to the lowest cell index.
    """
    move: Optional[int] = None
    best_val = -INFINITY
    for mv, val in enumerate(move_values(board, player)):
        if val is not None and val > best_val:
            best_val = val
            move = mv
    return move


def solve_state(board: Board) -> Dict:
    """Summary of the side-to-move's options, as printed by ``ttt --solve``."""
    to_move = current_player(board)
    values = move_values(board, to_move)
    mv = best_move(board, to_move)
    return {
        'to_move': to_move,
        'outcome': evaluate(board),
        'best_move': mv,
        'value': values[mv] if mv is not None else None,
        'move_values': tuple(values),
    }
