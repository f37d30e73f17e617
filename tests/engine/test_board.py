from __future__ import annotations

import pytest

from duoqueen.engine.board import (
    Board,
    BoardSize,
    Color,
    Piece,
    PieceType,
    Square,
    initial_board,
)


def test_initial_board_back_ranks_and_pawns() -> None:
    b = initial_board(8)
    assert b.rows == 8 and b.cols == 9
    letters = "".join(b.piece_at((7, c)).symbol for c in range(9))
    assert letters == "RNBQKQBNR"
    assert "".join(b.piece_at((0, c)).symbol for c in range(9)) == "rnbqkqbnr"
    for c in range(9):
        assert b.piece_at((6, c)) == Piece(PieceType.PAWN, Color.WHITE)
        assert b.piece_at((1, c)) == Piece(PieceType.PAWN, Color.BLACK)
    for r in range(2, 6):
        assert all(b.piece_at((r, c)) is None for c in range(9))


def test_initial_board_nine_rows_keeps_pawns_in_front_of_back_rank() -> None:
    b = initial_board(9)
    assert b.piece_at((8, 4)) == Piece(PieceType.KING, Color.WHITE)
    assert b.piece_at((7, 0)) == Piece(PieceType.PAWN, Color.WHITE)
    assert b.pawn_row(Color.WHITE) == 7
    assert b.promotion_row(Color.BLACK) == 8


def test_initial_board_has_two_queens_per_side() -> None:
    b = initial_board(8)
    for color in (Color.WHITE, Color.BLACK):
        queens = [sq for p, sq in b.pieces(color) if p.type is PieceType.QUEEN]
        assert len(queens) == 2
        assert len(list(b.pieces(color))) == 18


def test_initial_board_rejects_unsupported_height() -> None:
    with pytest.raises(ValueError):
        initial_board(7)


def test_with_changes_returns_new_board() -> None:
    b = Board.empty(8)
    knight = Piece(PieceType.KNIGHT, Color.BLACK)
    b2 = b.with_changes({Square(3, 3): knight})
    assert b.piece_at((3, 3)) is None
    assert b2.piece_at((3, 3)) == knight
    with pytest.raises(ValueError):
        b.with_changes({Square(8, 0): knight})


def test_piece_at_out_of_bounds_is_empty() -> None:
    b = initial_board(8)
    assert b.piece_at((-1, 0)) is None
    assert b.piece_at((0, 9)) is None
    assert b.piece_at((8, 0)) is None


def test_board_size_rows() -> None:
    assert BoardSize("9x8").rows == 8
    assert BoardSize("9x9").rows == 9
    assert BoardSize.from_rows(9) is BoardSize.NINE_BY_NINE
    with pytest.raises(ValueError):
        BoardSize.from_rows(10)


def test_piece_symbols() -> None:
    assert Piece(PieceType.KNIGHT, Color.WHITE).symbol == "N"
    assert Piece(PieceType.KING, Color.BLACK).symbol == "k"
    assert Piece.from_symbol("q") == Piece(PieceType.QUEEN, Color.BLACK)
    with pytest.raises(ValueError):
        Piece.from_symbol("x")
