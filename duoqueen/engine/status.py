"""Check, mate, stalemate and draw detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .attacks import find_king, king_in_check
from .board import Board, Color, PieceType, Square
from .position import CastlingRights, placement
from .move import square_to_str
from .rules import has_legal_moves


FIFTY_MOVE_HALFMOVES = 100


class DrawReason(Enum):
    STALEMATE = "stalemate"
    THREEFOLD = "threefold"
    FIFTY_MOVE = "fifty-move"
    INSUFFICIENT = "insufficient"
    AGREEMENT = "agreement"


@dataclass(frozen=True)
class CheckStatus:
    in_check: bool
    is_checkmate: bool
    checked_king: Optional[Square]


@dataclass(frozen=True)
class DrawStatus:
    is_draw: bool
    reason: Optional[DrawReason]


def is_checkmate(
    board: Board,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> bool:
    if not king_in_check(board, color):
        return False
    return not has_legal_moves(board, color, en_passant, castling)


def is_stalemate(
    board: Board,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> bool:
    if king_in_check(board, color):
        return False
    return not has_legal_moves(board, color, en_passant, castling)


def check_status(
    board: Board,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> CheckStatus:
    in_check = king_in_check(board, color)
    mate = in_check and not has_legal_moves(board, color, en_passant, castling)
    return CheckStatus(in_check, mate, find_king(board, color) if in_check else None)


def position_signature(
    board: Board,
    side_to_move: Color,
    castling: CastlingRights,
    en_passant: Optional[Square],
) -> str:
    """Canonical key for repetition detection.

    Same as the first four fields of the FEN-style text: piece placement
    (row-major, so each occupied square maps to one piece symbol), side to
    move, castling rights and en passant target.
    """
    ep = "-" if en_passant is None else square_to_str(en_passant, board.rows)
    return f"{placement(board)} {side_to_move.short} {castling.to_str()} {ep}"


def is_threefold_repetition(history: Sequence[str], signature: str) -> bool:
    """True if ``signature`` already occurs twice in ``history`` (this is the third)."""
    return sum(1 for s in history if s == signature) >= 2


def is_fifty_move_rule(halfmove_clock: int) -> bool:
    return halfmove_clock >= FIFTY_MOVE_HALFMOVES


def is_insufficient_material(board: Board) -> bool:
    """Recognize K v K, K+minor v K, and two kings with two same-parity bishops."""
    pieces = list(board.pieces())
    kings = [sq for p, sq in pieces if p.type is PieceType.KING]
    others = [(p, sq) for p, sq in pieces if p.type is not PieceType.KING]
    if len(kings) != 2:
        return False
    if not others:
        return True
    if len(others) == 1:
        return others[0][0].type in (PieceType.BISHOP, PieceType.KNIGHT)
    if len(others) == 2 and all(p.type is PieceType.BISHOP for p, _ in others):
        (_, a), (_, b) = others
        return (a.row + a.col) % 2 == (b.row + b.col) % 2
    return False


def draw_status(
    board: Board,
    side_to_move: Color,
    en_passant: Optional[Square],
    castling: CastlingRights,
    history: Sequence[str],
    halfmove_clock: int,
) -> DrawStatus:
    """Report the first draw reason that holds, checked in a fixed order."""
    if is_stalemate(board, side_to_move, en_passant, castling):
        return DrawStatus(True, DrawReason.STALEMATE)
    signature = position_signature(board, side_to_move, castling, en_passant)
    if is_threefold_repetition(history, signature):
        return DrawStatus(True, DrawReason.THREEFOLD)
    if is_fifty_move_rule(halfmove_clock):
        return DrawStatus(True, DrawReason.FIFTY_MOVE)
    if is_insufficient_material(board):
        return DrawStatus(True, DrawReason.INSUFFICIENT)
    return DrawStatus(False, None)
