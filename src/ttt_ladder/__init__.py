"""ttt_ladder package.

Bitboard game engine, exhaustive minimax, a persistent player ranking, and a
terminal front end.

Convenience imports are exposed for common workflows.
"""

from .game_basics import Board, Outcome, Player, apply_move, evaluate, is_move_playable
from .ranking import PlayerRecord, RankingIOError, RankingStore, load, save
from .solver import best_move, minimax

__all__ = [
    "Board",
    "Outcome",
    "Player",
    "apply_move",
    "evaluate",
    "is_move_playable",
    "best_move",
    "minimax",
    "PlayerRecord",
    "RankingStore",
    "RankingIOError",
    "load",
    "save",
]
