from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, NamedTuple, Optional, Tuple


BOARD_COLS = 9
SUPPORTED_ROWS = (8, 9)

# Home files of the pieces that castle
KING_COL = 4
QUEENSIDE_ROOK_COL = 0
KINGSIDE_ROOK_COL = BOARD_COLS - 1


class Color(Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def short(self) -> str:
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_short(cls, s: str) -> "Color":
        if s == "w":
            return cls.WHITE
        if s == "b":
            return cls.BLACK
        raise ValueError(f"invalid color: {s!r}")


class PieceType(Enum):
    KING = "king"
    QUEEN = "queen"
    ROOK = "rook"
    BISHOP = "bishop"
    KNIGHT = "knight"
    PAWN = "pawn"

    @property
    def letter(self) -> str:
        """Uppercase piece letter (``N`` for knight)."""
        return _TYPE_TO_LETTER[self]

    @classmethod
    def from_letter(cls, ch: str) -> "PieceType":
        try:
            return _LETTER_TO_TYPE[ch.upper()]
        except KeyError:
            raise ValueError(f"invalid piece letter: {ch!r}") from None


_TYPE_TO_LETTER = {
    PieceType.KING: "K",
    PieceType.QUEEN: "Q",
    PieceType.ROOK: "R",
    PieceType.BISHOP: "B",
    PieceType.KNIGHT: "N",
    PieceType.PAWN: "P",
}
_LETTER_TO_TYPE = {v: k for k, v in _TYPE_TO_LETTER.items()}


class BoardSize(Enum):
    NINE_BY_EIGHT = "9x8"
    NINE_BY_NINE = "9x9"

    @property
    def rows(self) -> int:
        return 9 if self is BoardSize.NINE_BY_NINE else 8

    @classmethod
    def from_rows(cls, rows: int) -> "BoardSize":
        if rows == 8:
            return cls.NINE_BY_EIGHT
        if rows == 9:
            return cls.NINE_BY_NINE
        raise ValueError(f"unsupported board height: {rows}")


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @property
    def symbol(self) -> str:
        """FEN-style symbol: uppercase for white, lowercase for black."""
        ch = self.type.letter
        return ch if self.color is Color.WHITE else ch.lower()

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(PieceType.from_letter(ch), color)


class Square(NamedTuple):
    row: int
    col: int


BACK_RANK: Tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.QUEEN,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass(frozen=True)
class Board:
    """Immutable grid of squares.

    Notes:
    - Squares are stored row-major in a flat tuple; row 0 is black's back rank.
    - Every change goes through :meth:`with_changes`, which returns a new board,
      so a board handed to a caller is never mutated afterwards.
    """

    rows: int
    cols: int
    squares: Tuple[Optional[Piece], ...]

    def __post_init__(self) -> None:
        if len(self.squares) != self.rows * self.cols:
            raise ValueError("square count does not match board dimensions")

    @classmethod
    def empty(cls, rows: int = 8, cols: int = BOARD_COLS) -> "Board":
        return cls(rows, cols, (None,) * (rows * cols))

    @classmethod
    def from_pieces(
        cls, pieces: Dict[Square, Piece], rows: int = 8, cols: int = BOARD_COLS
    ) -> "Board":
        """Build a board holding exactly ``pieces``."""
        return cls.empty(rows, cols).with_changes(pieces)

    def in_bounds(self, sq: Tuple[int, int]) -> bool:
        return 0 <= sq[0] < self.rows and 0 <= sq[1] < self.cols

    def piece_at(self, sq: Tuple[int, int]) -> Optional[Piece]:
        if not self.in_bounds(sq):
            return None
        return self.squares[sq[0] * self.cols + sq[1]]

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Piece, Square]]:
        """Yield ``(piece, square)`` pairs in row-major order.

        Args:
            color (Optional[Color]): Restrict to one side when given.
        """
        for idx, piece in enumerate(self.squares):
            if piece is None:
                continue
            if color is not None and piece.color is not color:
                continue
            yield piece, Square(idx // self.cols, idx % self.cols)

    def with_changes(self, changes: Dict[Square, Optional[Piece]]) -> "Board":
        """Return a new board with ``changes`` applied (``None`` clears a square)."""
        cells = list(self.squares)
        for sq, piece in changes.items():
            if not self.in_bounds(sq):
                raise ValueError(f"square out of bounds: {tuple(sq)}")
            cells[sq[0] * self.cols + sq[1]] = piece
        return Board(self.rows, self.cols, tuple(cells))

    def home_row(self, color: Color) -> int:
        """Back-rank row for ``color``."""
        return self.rows - 1 if color is Color.WHITE else 0

    def pawn_row(self, color: Color) -> int:
        """Row the pawns of ``color`` start on."""
        return self.rows - 2 if color is Color.WHITE else 1

    def promotion_row(self, color: Color) -> int:
        return 0 if color is Color.WHITE else self.rows - 1


def pawn_direction(color: Color) -> int:
    """Row delta of a single pawn step; white advances toward row 0."""
    return -1 if color is Color.WHITE else 1


def initial_board(rows: int = 8) -> Board:
    """Create the start position for a 9-column board with ``rows`` rows.

    Args:
        rows (int): Board height, 8 or 9.

    Returns:
        Board: Back ranks ``R N B Q K Q B N R`` with a full pawn row in front.

    Raises:
        ValueError: If ``rows`` is not a supported height.
    """
    if rows not in SUPPORTED_ROWS:
        raise ValueError(f"unsupported board height: {rows}")
    changes: Dict[Square, Optional[Piece]] = {}
    for col, kind in enumerate(BACK_RANK):
        changes[Square(0, col)] = Piece(kind, Color.BLACK)
        changes[Square(rows - 1, col)] = Piece(kind, Color.WHITE)
    for col in range(BOARD_COLS):
        changes[Square(1, col)] = Piece(PieceType.PAWN, Color.BLACK)
        changes[Square(rows - 2, col)] = Piece(PieceType.PAWN, Color.WHITE)
    return Board.empty(rows, BOARD_COLS).with_changes(changes)
