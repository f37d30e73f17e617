"""Sliding-path clearance and square-attack queries.

Attack detection only ever looks at basic piece geometry: castling and en
passant never attack a square, which keeps king-safety checks from recursing
back into full move legality.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .board import Board, Color, PieceType, Square, pawn_direction


KNIGHT_DELTAS = ((-1, 2), (1, 2), (-2, 1), (2, 1), (-2, -1), (2, -1), (-1, -2), (1, -2))
KING_DELTAS = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))
DIAGONALS = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ORTHOGONALS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def path_is_clear(board: Board, from_sq: Tuple[int, int], to_sq: Tuple[int, int]) -> bool:
    """Return True if every square strictly between the endpoints is empty.

    Only meaningful for straight or diagonal lines; callers check geometry first.
    """
    dr = _sign(to_sq[0] - from_sq[0])
    dc = _sign(to_sq[1] - from_sq[1])
    r, c = from_sq[0] + dr, from_sq[1] + dc
    while (r, c) != (to_sq[0], to_sq[1]):
        if board.piece_at((r, c)) is not None:
            return False
        r += dr
        c += dc
    return True


def square_under_attack(board: Board, sq: Tuple[int, int], attacker: Color) -> bool:
    """Return True if a piece of ``attacker`` has a basic move landing on ``sq``.

    Covers: pawns (diagonal captures only), knights, king, and slider rays for
    bishops/rooks/queens. A square occupied by one of the attacker's own
    pieces is never attacked, since no basic move lands on a friendly piece.
    """
    if not board.in_bounds(sq):
        return False
    occupant = board.piece_at(sq)
    if occupant is not None and occupant.color is attacker:
        return False
    r, c = sq

    # Pawns: a pawn one step "behind" sq (relative to its direction) on an adjacent file
    pr = r - pawn_direction(attacker)
    for pc in (c - 1, c + 1):
        p = board.piece_at((pr, pc))
        if p is not None and p.color is attacker and p.type is PieceType.PAWN:
            return True

    for dr, dc in KNIGHT_DELTAS:
        p = board.piece_at((r + dr, c + dc))
        if p is not None and p.color is attacker and p.type is PieceType.KNIGHT:
            return True

    for dr, dc in KING_DELTAS:
        p = board.piece_at((r + dr, c + dc))
        if p is not None and p.color is attacker and p.type is PieceType.KING:
            return True

    for dirs, sliders in (
        (DIAGONALS, (PieceType.BISHOP, PieceType.QUEEN)),
        (ORTHOGONALS, (PieceType.ROOK, PieceType.QUEEN)),
    ):
        for dr, dc in dirs:
            tr, tc = r + dr, c + dc
            while board.in_bounds((tr, tc)):
                p = board.piece_at((tr, tc))
                if p is not None:
                    if p.color is attacker and p.type in sliders:
                        return True
                    break
                tr += dr
                tc += dc
    return False


def find_king(board: Board, color: Color) -> Optional[Square]:
    for piece, sq in board.pieces(color):
        if piece.type is PieceType.KING:
            return sq
    return None


def king_in_check(board: Board, color: Color) -> bool:
    """Return True if ``color``'s king is attacked; a missing king is not in check."""
    king_sq = find_king(board, color)
    if king_sq is None:
        return False
    return square_under_attack(board, king_sq, color.opponent)
