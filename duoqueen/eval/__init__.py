"""Static position evaluation.

Pure, deterministic, and side-effect free. Scores are in pawn units from the
point of view of one side (positive favors ``perspective``).
"""

from __future__ import annotations

from typing import Dict, Final, Optional

from duoqueen.engine.attacks import king_in_check
from duoqueen.engine.board import Board, Color, PieceType, Square
from duoqueen.engine.position import CastlingRights
from duoqueen.engine.rules import has_legal_moves


MATE_SCORE: Final = 10000
CHECK_BONUS: Final = 50

PIECE_VALUES: Final[Dict[PieceType, int]] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}

# Center proximity weights; files count double ranks
CENTER_COL_WEIGHT: Final = 0.1
CENTER_ROW_WEIGHT: Final = 0.05


def center_bonus(board: Board, row: int, col: int) -> float:
    mid_col = board.cols // 2
    mid_row = board.rows // 2
    return (mid_col - abs(mid_col - col)) * CENTER_COL_WEIGHT + (
        mid_row - abs(mid_row - row)
    ) * CENTER_ROW_WEIGHT


def _mated(
    board: Board,
    color: Color,
    en_passant: Optional[Square],
    castling: Optional[CastlingRights],
) -> bool:
    return king_in_check(board, color) and not has_legal_moves(
        board, color, en_passant, castling
    )


def evaluate(
    board: Board,
    perspective: Color = Color.WHITE,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> float:
    """Return a coarse score of ``board`` for ``perspective``.

    Components: a mate score when either side is checkmated, a fixed bonus
    for giving check, material, and a small center-proximity bonus per piece.
    """
    sign = 1 if perspective is Color.WHITE else -1

    # Scored from white's side, flipped at the end
    if _mated(board, Color.WHITE, en_passant, castling):
        return -MATE_SCORE * sign
    if _mated(board, Color.BLACK, en_passant, castling):
        return MATE_SCORE * sign

    score = 0.0
    if king_in_check(board, Color.BLACK):
        score += CHECK_BONUS
    if king_in_check(board, Color.WHITE):
        score -= CHECK_BONUS

    for piece, sq in board.pieces():
        value = PIECE_VALUES[piece.type] + center_bonus(board, sq.row, sq.col)
        score += value if piece.color is Color.WHITE else -value
    return score * sign
