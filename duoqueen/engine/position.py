from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .board import (
    BOARD_COLS,
    SUPPORTED_ROWS,
    Board,
    Color,
    Piece,
    Square,
    initial_board,
)
from .move import square_to_str, str_to_square


@dataclass(frozen=True)
class CastlingRights:
    """Per-side, per-direction castling flags. Rights are only ever cleared."""

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    def allows(self, color: Color, kingside: bool) -> bool:
        if color is Color.WHITE:
            return self.white_kingside if kingside else self.white_queenside
        return self.black_kingside if kingside else self.black_queenside

    def without(self, color: Color, kingside: Optional[bool] = None) -> "CastlingRights":
        """Return rights with ``color``'s kingside/queenside (or both) cleared."""
        changes: Dict[str, bool] = {}
        prefix = color.value
        if kingside is None or kingside:
            changes[f"{prefix}_kingside"] = False
        if kingside is None or not kingside:
            changes[f"{prefix}_queenside"] = False
        return replace(self, **changes)

    def to_str(self) -> str:
        s = (
            ("K" if self.white_kingside else "")
            + ("Q" if self.white_queenside else "")
            + ("k" if self.black_kingside else "")
            + ("q" if self.black_queenside else "")
        )
        return s or "-"

    @classmethod
    def from_str(cls, s: str) -> "CastlingRights":
        if s == "-":
            return cls.none()
        if not s or any(ch not in "KQkq" for ch in s):
            raise ValueError("invalid castling rights")
        return cls("K" in s, "Q" in s, "k" in s, "q" in s)


def start_fen(rows: int = 8) -> str:
    return Position.initial(rows).to_fen()


@dataclass(frozen=True)
class Position:
    """A board plus the auxiliary state needed to continue play from it.

    The text form mirrors FEN: ranks are listed from row 0 (black's back rank)
    down, files ``a..i``, then side to move, castling rights, en passant square,
    half-move clock and full-move number.
    """

    board: Board
    side_to_move: Color = Color.WHITE
    castling: CastlingRights = CastlingRights()
    en_passant: Optional[Square] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @classmethod
    def initial(cls, rows: int = 8) -> "Position":
        return cls(board=initial_board(rows))

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from its FEN-style text.

        Args:
            fen (str): Text with six space-separated fields.

        Returns:
            Position: Parsed position.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid placement, castling rights, en passant square,
                or move counters.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        rows = len(ranks)
        if rows not in SUPPORTED_ROWS:
            raise ValueError("FEN board must have 8 or 9 ranks")
        pieces: Dict[Square, Optional[Piece]] = {}
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > BOARD_COLS:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if col >= BOARD_COLS:
                        raise ValueError("too many squares in FEN rank")
                    pieces[Square(row, col)] = Piece.from_symbol(ch)
                    col += 1
            if col != BOARD_COLS:
                raise ValueError(f"rank does not sum to {BOARD_COLS} squares in FEN")
        board = Board.empty(rows, BOARD_COLS).with_changes(pieces)

        side = Color.from_short(stm)
        rights = CastlingRights.from_str(castling)

        en_passant: Optional[Square] = None
        if ep != "-":
            en_passant = str_to_square(ep, rows)
            # ep target sits behind a pawn that just advanced two squares
            if en_passant.row not in (2, rows - 3):
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(board, side, rights, en_passant, halfmove_clock, fullmove_number)

    def to_fen(self) -> str:
        """Serialize into normalized FEN-style text."""
        return (
            f"{placement(self.board)} {self.side_to_move.short} {self.castling.to_str()} "
            f"{self._ep_str()} {self.halfmove_clock} {self.fullmove_number}"
        )

    def _ep_str(self) -> str:
        if self.en_passant is None:
            return "-"
        return square_to_str(self.en_passant, self.board.rows)


def placement(board: Board) -> str:
    """Piece-placement field of the FEN-style text for ``board``."""
    ranks: List[str] = []
    for row in range(board.rows):
        run = 0
        out = []
        for col in range(board.cols):
            piece = board.piece_at((row, col))
            if piece is None:
                run += 1
                continue
            if run:
                out.append(str(run))
                run = 0
            out.append(piece.symbol)
        if run:
            out.append(str(run))
        ranks.append("".join(out))
    return "/".join(ranks)
