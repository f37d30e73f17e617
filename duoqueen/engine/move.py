from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .board import BOARD_COLS, Piece, PieceType, Square


PROMOTION_PIECES = {
    "q": PieceType.QUEEN,
    "r": PieceType.ROOK,
    "b": PieceType.BISHOP,
    "n": PieceType.KNIGHT,
}


class SpecialMove(Enum):
    EN_PASSANT = "enPassant"
    CASTLE_KINGSIDE = "castleKingside"
    CASTLE_QUEENSIDE = "castleQueenside"
    PROMOTION = "promotion"


@dataclass(frozen=True)
class Move:
    """Engine move representation.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        piece (Optional[Piece]): Moving piece, informational only; ignored by
            equality.
        promotion (Optional[PieceType]): Promotion choice, if any.
    """

    from_sq: Square
    to_sq: Square
    piece: Optional[Piece] = field(default=None, compare=False)
    promotion: Optional[PieceType] = None

    def to_str(self, rows: int) -> str:
        """Serialize into coordinate form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = ""
        if self.promotion is not None:
            promo = self.promotion.letter.lower()
        return square_to_str(self.from_sq, rows) + square_to_str(self.to_sq, rows) + promo


def parse_move(text: str, rows: int) -> Move:
    """Parse a coordinate move string such as ``"e2e4"`` or ``"e7e8n"``.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    from_sq = str_to_square(text[0:2], rows)
    to_sq = str_to_square(text[2:4], rows)
    promo: Optional[PieceType] = None
    if len(text) == 5:
        ch = text[4].lower()
        if ch not in PROMOTION_PIECES:
            raise ValueError(f"invalid promotion piece: {ch!r}")
        promo = PROMOTION_PIECES[ch]
    return Move(from_sq, to_sq, promotion=promo)


def str_to_square(s: str, rows: int) -> Square:
    """Convert a square name (files ``a..i``, ranks ``1..rows``) to a Square.

    Rank 1 is white's back rank, i.e. row ``rows - 1``.

    Raises:
        ValueError: If ``s`` is not a valid square on a board of ``rows`` rows.
    """
    last_file = chr(ord("a") + BOARD_COLS - 1)
    if len(s) != 2 or not ("a" <= s[0] <= last_file) or not s[1].isdigit():
        raise ValueError(f"invalid square: {s!r}")
    rank = int(s[1])
    if rank < 1 or rank > rows:
        raise ValueError(f"invalid square: {s!r}")
    return Square(rows - rank, ord(s[0]) - ord("a"))


def square_to_str(sq: Square, rows: int) -> str:
    """Convert a Square into its name, e.g. ``(6, 4)`` -> ``"e2"`` on 8 rows.

    Raises:
        ValueError: If ``sq`` lies outside the board.
    """
    row, col = sq
    if not (0 <= row < rows and 0 <= col < BOARD_COLS):
        raise ValueError(f"invalid square: {tuple(sq)}")
    return chr(ord("a") + col) + str(rows - row)
