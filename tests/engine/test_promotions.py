from __future__ import annotations

import pytest

from duoqueen.engine.board import Color, Piece, PieceType, Square
from duoqueen.engine.execute import execute_move
from duoqueen.engine.game import Game
from duoqueen.engine.move import Move, SpecialMove
from duoqueen.engine.position import CastlingRights, Position
from duoqueen.engine.rules import is_promotion_move


PAWN_ON_SEVENTH = "4k4/P8/9/9/9/9/9/4K4 w - - 0 1"


def test_promotion_defaults_to_queen() -> None:
    pos = Position.from_fen(PAWN_ON_SEVENTH)
    res = execute_move(pos.board, Square(1, 0), Square(0, 0), pos.castling)
    assert res.special is SpecialMove.PROMOTION
    assert res.board.piece_at((0, 0)) == Piece(PieceType.QUEEN, Color.WHITE)
    assert res.board.piece_at((1, 0)) is None


@pytest.mark.parametrize("kind", [PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT])
def test_underpromotion(kind: PieceType) -> None:
    pos = Position.from_fen(PAWN_ON_SEVENTH)
    res = execute_move(pos.board, Square(1, 0), Square(0, 0), pos.castling, promotion=kind)
    assert res.board.piece_at((0, 0)) == Piece(kind, Color.WHITE)


def test_black_promotes_on_last_row_of_nine_row_board() -> None:
    pos = Position.from_fen("4k4/9/9/9/9/9/9/p8/4K4 b - - 0 1")
    assert is_promotion_move(pos.board, Square(7, 0), Square(8, 0))
    res = execute_move(pos.board, Square(7, 0), Square(8, 0), pos.castling)
    assert res.board.piece_at((8, 0)) == Piece(PieceType.QUEEN, Color.BLACK)


def test_game_promotion_notation_and_check() -> None:
    game = Game.from_fen(PAWN_ON_SEVENTH)
    rec = game.apply_move(Move(Square(1, 0), Square(0, 0)))
    assert rec.promoted_to is PieceType.QUEEN
    assert rec.notation == "a7-a8=Q+"
    assert rec.is_check and not rec.is_checkmate


def test_game_underpromotion_from_string() -> None:
    game = Game.from_fen(PAWN_ON_SEVENTH)
    rec = game.apply_str("a7a8n")
    assert rec.notation == "a7-a8=N"
    assert game.board.piece_at((0, 0)) == Piece(PieceType.KNIGHT, Color.WHITE)


def test_game_rejects_bad_promotion_choices() -> None:
    game = Game.from_fen(PAWN_ON_SEVENTH)
    with pytest.raises(ValueError):
        game.apply_move(Move(Square(1, 0), Square(0, 0), promotion=PieceType.KING))
    with pytest.raises(ValueError):
        game.apply_move(Move(Square(7, 4), Square(7, 3), promotion=PieceType.QUEEN))


def test_execute_from_empty_square_is_a_no_op() -> None:
    pos = Position.from_fen(PAWN_ON_SEVENTH)
    rights = CastlingRights()
    res = execute_move(pos.board, Square(4, 4), Square(3, 4), rights, en_passant=Square(2, 4))
    assert res.board == pos.board
    assert res.captured is None
    assert res.en_passant is None
    assert res.castling == rights
