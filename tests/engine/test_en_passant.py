from __future__ import annotations

from duoqueen.engine.board import Color, Piece, PieceType, Square
from duoqueen.engine.execute import execute_move
from duoqueen.engine.game import Game
from duoqueen.engine.move import SpecialMove
from duoqueen.engine.position import CastlingRights, Position
from duoqueen.engine.rules import is_valid_move


# Black pawn on d7 about to pass the white pawn on e5
BEFORE_DOUBLE_STEP = "4k4/3p5/9/4P4/9/9/9/4K4 b - - 0 1"


def test_double_step_sets_target_behind_pawn() -> None:
    pos = Position.from_fen(BEFORE_DOUBLE_STEP)
    res = execute_move(pos.board, Square(1, 3), Square(3, 3), pos.castling)
    assert res.en_passant == Square(2, 3)
    assert res.captured is None


def test_single_step_leaves_no_target() -> None:
    pos = Position.from_fen(BEFORE_DOUBLE_STEP)
    res = execute_move(pos.board, Square(1, 3), Square(2, 3), pos.castling, en_passant=Square(5, 0))
    assert res.en_passant is None


def test_en_passant_only_with_matching_target() -> None:
    pos = Position.from_fen(BEFORE_DOUBLE_STEP)
    res = execute_move(pos.board, Square(1, 3), Square(3, 3), pos.castling)
    assert is_valid_move(res.board, Square(3, 4), Square(2, 3), res.en_passant)
    assert not is_valid_move(res.board, Square(3, 4), Square(2, 3), None)


def test_en_passant_capture_removes_passed_pawn() -> None:
    pos = Position.from_fen(BEFORE_DOUBLE_STEP)
    first = execute_move(pos.board, Square(1, 3), Square(3, 3), pos.castling)
    res = execute_move(
        first.board, Square(3, 4), Square(2, 3), CastlingRights.none(), first.en_passant
    )
    assert res.special is SpecialMove.EN_PASSANT
    assert res.captured == Piece(PieceType.PAWN, Color.BLACK)
    assert res.board.piece_at((3, 3)) is None
    assert res.board.piece_at((2, 3)) == Piece(PieceType.PAWN, Color.WHITE)
    assert res.en_passant is None


def test_en_passant_through_game_records_notation() -> None:
    game = Game.from_fen(BEFORE_DOUBLE_STEP)
    game.apply_str("d7d5")
    assert game.to_fen() == "4k4/9/9/3pP4/9/9/9/4K4 w - d6 0 2"
    rec = game.apply_str("e5d6")
    assert rec.notation == "e5xd6 e.p."
    assert game.captured_by_white == [Piece(PieceType.PAWN, Color.BLACK)]
    assert game.state.en_passant is None


def test_en_passant_expires_after_one_move() -> None:
    game = Game.from_fen(BEFORE_DOUBLE_STEP)
    game.apply_str("d7d5")
    game.apply_str("e1d1")
    game.apply_str("e8e7")
    assert game.state.en_passant is None
    assert Square(2, 3) not in game.legal_destinations(Square(3, 4))
