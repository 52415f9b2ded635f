"""
Tactics: immediate wins and forks for one side.
"""
from typing import List

from .game_basics import Board, Player, apply_move, has_won, legal_moves


def immediate_winning_moves(board: Board, player: Player) -> List[int]:
    wins: List[int] = []
    for i in legal_moves(board):
        if has_won(apply_move(board, i, player).mask(player)):
            wins.append(i)
    return wins


def fork_moves(board: Board, player: Player) -> List[int]:
    forks: List[int] = []
    for i in legal_moves(board):
        b = apply_move(board, i, player)
        if has_won(b.mask(player)):
            continue
        if len(immediate_winning_moves(b, player)) >= 2:
            forks.append(i)
    return forks
