from __future__ import annotations

from typing import Optional

from .board import Piece, PieceType, Square
from .move import SpecialMove, square_to_str


def move_notation(
    from_sq: Square,
    to_sq: Square,
    piece: Piece,
    captured: Optional[Piece] = None,
    rows: int = 8,
    is_check: bool = False,
    is_checkmate: bool = False,
    special: Optional[SpecialMove] = None,
    promoted_to: Optional[PieceType] = None,
) -> str:
    """Render a move for display, e.g. ``"Nb1-c3"``, ``"e5xd6 e.p.+"``, ``"O-O"``.

    Files start at ``a``; rank 1 is white's back rank. Promotion without an
    explicit piece is shown as ``=Q``.
    """
    suffix = "#" if is_checkmate else ("+" if is_check else "")
    if special is SpecialMove.CASTLE_KINGSIDE:
        return "O-O" + suffix
    if special is SpecialMove.CASTLE_QUEENSIDE:
        return "O-O-O" + suffix

    letter = "" if piece.type is PieceType.PAWN else piece.type.letter
    sep = "x" if captured is not None else "-"
    promo = ""
    if special is SpecialMove.PROMOTION:
        promo = "=" + (promoted_to or PieceType.QUEEN).letter
    ep = " e.p." if special is SpecialMove.EN_PASSANT else ""
    return (
        f"{letter}{square_to_str(from_sq, rows)}{sep}{square_to_str(to_sq, rows)}"
        f"{promo}{ep}{suffix}"
    )
