"""Move legality: per-piece geometry, castling preconditions and king safety.

``is_valid_move_basic`` ignores king safety; ``is_valid_move`` adds it by
simulating the move on a copy of the board. Attack detection lives in
``attacks`` and never calls back into this module.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .attacks import king_in_check, path_is_clear, square_under_attack
from .board import (
    KING_COL,
    KINGSIDE_ROOK_COL,
    QUEENSIDE_ROOK_COL,
    Board,
    Color,
    Piece,
    PieceType,
    Square,
    pawn_direction,
)
from .move import Move, SpecialMove
from .position import CastlingRights


def is_valid_move_basic(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> bool:
    """Return True if the piece on ``from_sq`` may move to ``to_sq`` by geometry alone.

    Castling is only considered when ``castling`` is supplied.
    """
    if not board.in_bounds(to_sq):
        return False
    piece = board.piece_at(from_sq)
    if piece is None:
        return False
    target = board.piece_at(to_sq)
    if target is not None and target.color is piece.color:
        return False
    if tuple(from_sq) == tuple(to_sq):
        return False

    dr = to_sq[0] - from_sq[0]
    dc = to_sq[1] - from_sq[1]
    adr, adc = abs(dr), abs(dc)
    kind = piece.type

    if kind is PieceType.PAWN:
        direction = pawn_direction(piece.color)
        if dc == 0 and target is None:
            if dr == direction:
                return True
            if (
                from_sq[0] == board.pawn_row(piece.color)
                and dr == 2 * direction
                and board.piece_at((from_sq[0] + direction, from_sq[1])) is None
            ):
                return True
        if adc == 1 and dr == direction:
            if target is not None:
                return True
            if en_passant is not None and tuple(to_sq) == tuple(en_passant):
                return True
        return False
    if kind is PieceType.KNIGHT:
        return (adr, adc) in ((1, 2), (2, 1))
    if kind is PieceType.BISHOP:
        return adr == adc and path_is_clear(board, from_sq, to_sq)
    if kind is PieceType.ROOK:
        return (dr == 0 or dc == 0) and path_is_clear(board, from_sq, to_sq)
    if kind is PieceType.QUEEN:
        if adr != adc and dr != 0 and dc != 0:
            return False
        return path_is_clear(board, from_sq, to_sq)
    if kind is PieceType.KING:
        if adr <= 1 and adc <= 1:
            return True
        if castling is not None and adr == 0 and adc == 2:
            return can_castle(board, from_sq, to_sq, piece.color, castling)
        return False
    return False


def can_castle(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    color: Color,
    castling: CastlingRights,
) -> bool:
    """Return True if the king on ``from_sq`` may castle toward ``to_sq``.

    Direction is the sign of the column delta. All clauses must hold: king on
    its home square, right still granted, king not in check, rook on its home
    square, squares between king and rook empty, and the two squares the king
    crosses and lands on not attacked.
    """
    row = board.home_row(color)
    if tuple(from_sq) != (row, KING_COL):
        return False
    kingside = to_sq[1] > from_sq[1]
    if not castling.allows(color, kingside):
        return False
    if king_in_check(board, color):
        return False

    rook_col = KINGSIDE_ROOK_COL if kingside else QUEENSIDE_ROOK_COL
    rook = board.piece_at((row, rook_col))
    if rook != Piece(PieceType.ROOK, color):
        return False

    for col in range(min(KING_COL, rook_col) + 1, max(KING_COL, rook_col)):
        if board.piece_at((row, col)) is not None:
            return False

    step = 1 if kingside else -1
    for i in (1, 2):
        if square_under_attack(board, (row, KING_COL + step * i), color.opponent):
            return False
    return True


def _simulated_board(
    board: Board, from_sq: Square, to_sq: Square, en_passant: Optional[Square]
) -> Board:
    piece = board.piece_at(from_sq)
    changes: Dict[Square, Optional[Piece]] = {Square(*to_sq): piece, Square(*from_sq): None}
    if piece is None:
        return board.with_changes(changes)
    if (
        piece.type is PieceType.PAWN
        and en_passant is not None
        and tuple(to_sq) == tuple(en_passant)
    ):
        changes[Square(to_sq[0] - pawn_direction(piece.color), to_sq[1])] = None
    if piece.type is PieceType.KING and abs(to_sq[1] - from_sq[1]) == 2:
        kingside = to_sq[1] > from_sq[1]
        rook_from = KINGSIDE_ROOK_COL if kingside else QUEENSIDE_ROOK_COL
        rook_to = to_sq[1] - 1 if kingside else to_sq[1] + 1
        changes[Square(to_sq[0], rook_to)] = board.piece_at((to_sq[0], rook_from))
        changes[Square(to_sq[0], rook_from)] = None
    return board.with_changes(changes)


def would_leave_king_in_check(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    color: Color,
    en_passant: Optional[Square] = None,
) -> bool:
    """Simulate the move (with en passant and castling side effects) and test check."""
    return king_in_check(_simulated_board(board, from_sq, to_sq, en_passant), color)


def is_valid_move(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> bool:
    """Full legality: basic geometry and the mover's king is safe afterwards."""
    piece = board.piece_at(from_sq)
    if piece is None:
        return False
    if not is_valid_move_basic(board, from_sq, to_sq, en_passant, castling):
        return False
    return not would_leave_king_in_check(board, from_sq, to_sq, piece.color, en_passant)


def valid_moves_from(
    board: Board,
    from_sq: Square,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> List[Square]:
    """Return every legal destination for the piece on ``from_sq`` in row-major order."""
    moves: List[Square] = []
    for row in range(board.rows):
        for col in range(board.cols):
            if is_valid_move(board, from_sq, Square(row, col), en_passant, castling):
                moves.append(Square(row, col))
    return moves


def all_legal_moves(
    board: Board,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> List[Move]:
    moves: List[Move] = []
    for piece, sq in board.pieces(color):
        for to_sq in valid_moves_from(board, sq, en_passant, castling):
            moves.append(Move(sq, to_sq, piece=piece))
    return moves


def has_legal_moves(
    board: Board,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
) -> bool:
    """Like ``bool(all_legal_moves(...))`` but stops at the first legal move."""
    for _, sq in board.pieces(color):
        for row in range(board.rows):
            for col in range(board.cols):
                if is_valid_move(board, sq, Square(row, col), en_passant, castling):
                    return True
    return False


def is_promotion_move(board: Board, from_sq: Square, to_sq: Square) -> bool:
    piece = board.piece_at(from_sq)
    if piece is None or piece.type is not PieceType.PAWN:
        return False
    return to_sq[0] == board.promotion_row(piece.color)


def special_move_type(
    board: Board,
    from_sq: Square,
    to_sq: Square,
    en_passant: Optional[Square] = None,
) -> Optional[SpecialMove]:
    """Classify an already-legal move by its geometry."""
    piece = board.piece_at(from_sq)
    if piece is None:
        return None
    if piece.type is PieceType.KING and abs(to_sq[1] - from_sq[1]) == 2:
        return SpecialMove.CASTLE_KINGSIDE if to_sq[1] > from_sq[1] else SpecialMove.CASTLE_QUEENSIDE
    if (
        piece.type is PieceType.PAWN
        and en_passant is not None
        and tuple(to_sq) == tuple(en_passant)
    ):
        return SpecialMove.EN_PASSANT
    if is_promotion_move(board, from_sq, to_sq):
        return SpecialMove.PROMOTION
    return None
