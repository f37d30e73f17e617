from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .board import (
    KINGSIDE_ROOK_COL,
    QUEENSIDE_ROOK_COL,
    Board,
    Color,
    Piece,
    PieceType,
    Square,
    pawn_direction,
)
from .move import SpecialMove
from .position import CastlingRights
from .rules import special_move_type


@dataclass(frozen=True)
class MoveResult:
    board: Board
    captured: Optional[Piece]
    en_passant: Optional[Square]
    castling: CastlingRights
    special: Optional[SpecialMove]


def execute_move(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    castling: CastlingRights,
    en_passant: Optional[Square] = None,
    promotion: PieceType = PieceType.QUEEN,
) -> MoveResult:
    """Apply an already-validated move and return the resulting state.

    Args:
        board (Board): Board before the move; it is not modified.
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        castling (CastlingRights): Rights before the move.
        en_passant (Optional[Square]): En passant target before the move.
        promotion (PieceType): Piece a promoting pawn becomes.

    Returns:
        MoveResult: New board, captured piece, new en passant target, new
            castling rights and the special-move tag.

    Notes:
        No legality check is made. An empty origin square yields the board
        unchanged with no capture and no en passant target. The half-move
        clock and position history are the caller's to maintain.
    """
    piece = board.piece_at(from_sq)
    if piece is None:
        return MoveResult(board, None, None, castling, None)

    from_sq, to_sq = Square(*from_sq), Square(*to_sq)
    captured = board.piece_at(to_sq)
    special = special_move_type(board, from_sq, to_sq, en_passant)
    changes: Dict[Square, Optional[Piece]] = {}

    if special is SpecialMove.EN_PASSANT:
        victim_sq = Square(to_sq.row - pawn_direction(piece.color), to_sq.col)
        captured = board.piece_at(victim_sq)
        changes[victim_sq] = None

    if special in (SpecialMove.CASTLE_KINGSIDE, SpecialMove.CASTLE_QUEENSIDE):
        kingside = special is SpecialMove.CASTLE_KINGSIDE
        rook_from = KINGSIDE_ROOK_COL if kingside else QUEENSIDE_ROOK_COL
        rook_to = to_sq.col - 1 if kingside else to_sq.col + 1
        changes[Square(to_sq.row, rook_to)] = board.piece_at((to_sq.row, rook_from))
        changes[Square(to_sq.row, rook_from)] = None

    changes[from_sq] = None
    if special is SpecialMove.PROMOTION:
        changes[to_sq] = Piece(promotion, piece.color)
    else:
        changes[to_sq] = piece

    new_ep: Optional[Square] = None
    if piece.type is PieceType.PAWN and abs(to_sq.row - from_sq.row) == 2:
        new_ep = Square((from_sq.row + to_sq.row) // 2, to_sq.col)

    rights = _updated_rights(board, castling, piece, from_sq, captured, to_sq)
    return MoveResult(board.with_changes(changes), captured, new_ep, rights, special)


def _updated_rights(
    board: Board,
    rights: CastlingRights,
    piece: Piece,
    from_sq: Square,
    captured: Optional[Piece],
    to_sq: Square,
) -> CastlingRights:
    if piece.type is PieceType.KING:
        rights = rights.without(piece.color)
    if piece.type is PieceType.ROOK:
        rights = _clear_for_rook_square(board, rights, piece.color, from_sq)
    if captured is not None and captured.type is PieceType.ROOK:
        rights = _clear_for_rook_square(board, rights, captured.color, to_sq)
    return rights


def _clear_for_rook_square(
    board: Board, rights: CastlingRights, color: Color, sq: Square
) -> CastlingRights:
    if sq.row != board.home_row(color):
        return rights
    if sq.col == QUEENSIDE_ROOK_COL:
        return rights.without(color, kingside=False)
    if sq.col == KINGSIDE_ROOK_COL:
        return rights.without(color, kingside=True)
    return rights
