from __future__ import annotations

from typing import Dict

from .execute import execute_move
from .position import Position
from .rules import all_legal_moves


def perft(pos: Position, depth: int) -> int:
    """Compute perft node count for ``pos`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    A move is one (from, to) pair; promotions count once (the choice of piece
    is made at execution time, queen here).
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = all_legal_moves(pos.board, pos.side_to_move, pos.en_passant, pos.castling)
    if depth == 1:
        return len(moves)
    nodes = 0
    for mv in moves:
        res = execute_move(pos.board, mv.from_sq, mv.to_sq, pos.castling, pos.en_passant)
        child = Position(
            board=res.board,
            side_to_move=pos.side_to_move.opponent,
            castling=res.castling,
            en_passant=res.en_passant,
        )
        nodes += perft(child, depth - 1)
    return nodes


def divide(pos: Position, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by coordinate move string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for mv in all_legal_moves(pos.board, pos.side_to_move, pos.en_passant, pos.castling):
        res = execute_move(pos.board, mv.from_sq, mv.to_sq, pos.castling, pos.en_passant)
        child = Position(res.board, pos.side_to_move.opponent, res.castling, res.en_passant)
        out[mv.to_str(pos.board.rows)] = perft(child, depth - 1)
    return out
