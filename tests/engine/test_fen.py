from __future__ import annotations

import pytest

from duoqueen.engine.board import Color, Square
from duoqueen.engine.move import Move, parse_move, square_to_str, str_to_square
from duoqueen.engine.position import CastlingRights, Position, start_fen


START_9X8 = "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0 1"
START_9X9 = "rnbqkqbnr/ppppppppp/9/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0 1"


def test_start_fen_both_heights() -> None:
    assert start_fen(8) == START_9X8
    assert start_fen(9) == START_9X9


def test_fen_roundtrip_preserves_all_fields() -> None:
    fen = "r3k3r/ppp2pppp/9/3pP4/9/9/PPPP1PPPP/R3K3R w Kq d6 12 30"
    pos = Position.from_fen(fen)
    assert pos.side_to_move is Color.WHITE
    assert pos.castling == CastlingRights(True, False, False, True)
    assert pos.en_passant == Square(2, 3)
    assert pos.halfmove_clock == 12
    assert pos.fullmove_number == 30
    assert pos.to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "9/9/9 w - - 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBN w KQkq - 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNRR w KQkq - 0 1",
        "rnbqkqbnr/ppppxpppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR x KQkq - 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KX - 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq e4 0 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - -1 1",
        "rnbqkqbnr/ppppppppp/9/9/9/9/PPPPPPPPP/RNBQKQBNR w KQkq - 0 0",
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(ValueError):
        Position.from_fen(fen)


def test_square_names_depend_on_height() -> None:
    assert str_to_square("e2", 8) == Square(6, 4)
    assert str_to_square("e2", 9) == Square(7, 4)
    assert str_to_square("i9", 9) == Square(0, 8)
    assert square_to_str(Square(0, 8), 8) == "i8"
    assert square_to_str(Square(8, 0), 9) == "a1"


@pytest.mark.parametrize("name", ["j1", "a0", "a9", "e", "e22"])
def test_invalid_square_names_raise(name: str) -> None:
    with pytest.raises(ValueError):
        str_to_square(name, 8)


def test_parse_move_with_promotion() -> None:
    mv = parse_move("a7a8n", 8)
    assert mv.from_sq == Square(1, 0)
    assert mv.to_sq == Square(0, 0)
    assert mv.promotion is not None and mv.promotion.letter == "N"
    assert mv.to_str(8) == "a7a8n"
    assert parse_move("e2e4", 8) == Move(Square(6, 4), Square(4, 4))
    with pytest.raises(ValueError):
        parse_move("a7a8k", 8)
    with pytest.raises(ValueError):
        parse_move("e2", 8)
