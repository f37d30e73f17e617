from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from .board import Board, BoardSize, Color, Piece, PieceType, Square
from .execute import execute_move
from .move import Move, SpecialMove, parse_move, square_to_str, str_to_square
from .notation import move_notation
from .position import CastlingRights, Position, placement
from .rules import all_legal_moves, is_promotion_move, is_valid_move, valid_moves_from
from .status import (
    CheckStatus,
    DrawReason,
    DrawStatus,
    check_status,
    draw_status,
    position_signature,
)

if TYPE_CHECKING:  # pragma: no cover
    from duoqueen.search.service import SearchService


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    """Everything needed to continue a game: the value passed to the engine."""

    board: Board
    side_to_move: Color
    castling: CastlingRights
    en_passant: Optional[Square]
    position_history: Tuple[str, ...]
    halfmove_clock: int
    fullmove_number: int = 1

    @classmethod
    def from_position(cls, pos: Position) -> "GameState":
        sig = position_signature(pos.board, pos.side_to_move, pos.castling, pos.en_passant)
        return cls(
            board=pos.board,
            side_to_move=pos.side_to_move,
            castling=pos.castling,
            en_passant=pos.en_passant,
            position_history=(sig,),
            halfmove_clock=pos.halfmove_clock,
            fullmove_number=pos.fullmove_number,
        )

    def to_position(self) -> Position:
        return Position(
            self.board,
            self.side_to_move,
            self.castling,
            self.en_passant,
            self.halfmove_clock,
            self.fullmove_number,
        )

    @property
    def signature(self) -> str:
        return position_signature(self.board, self.side_to_move, self.castling, self.en_passant)


@dataclass(frozen=True)
class MoveRecord:
    move: Move
    piece: Piece
    captured: Optional[Piece]
    notation: str
    is_check: bool
    is_checkmate: bool
    special: Optional[SpecialMove]
    promoted_to: Optional[PieceType]


@dataclass
class Game:
    """Game wrapper around a GameState with helper operations.

    Responsibility: validate and apply moves, thread the half-move clock and
    position history the engine leaves to its caller, record moves for
    display and replay, and track the game result.

    The position history holds one signature per position reached, starting
    with the initial one, so its last entry is always the current position.
    """

    state: GameState
    start_fen: str
    moves: List[MoveRecord] = field(default_factory=list)
    captured_by_white: List[Piece] = field(default_factory=list)
    captured_by_black: List[Piece] = field(default_factory=list)
    game_over: bool = False
    winner: Optional[Color] = None
    draw_reason: Optional[DrawReason] = None

    @classmethod
    def new(cls, size: BoardSize = BoardSize.NINE_BY_EIGHT) -> "Game":
        return cls.from_position(Position.initial(size.rows))

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls.from_position(Position.from_fen(fen))

    @classmethod
    def from_position(cls, pos: Position) -> "Game":
        game = cls(state=GameState.from_position(pos), start_fen=pos.to_fen())
        game._update_result()
        return game

    def to_fen(self) -> str:
        return self.state.to_position().to_fen()

    @property
    def board(self) -> Board:
        return self.state.board

    @property
    def size(self) -> BoardSize:
        return BoardSize.from_rows(self.state.board.rows)

    # --- Queries ---
    def legal_moves(self) -> List[Move]:
        s = self.state
        return all_legal_moves(s.board, s.side_to_move, s.en_passant, s.castling)

    def legal_destinations(self, from_sq: Square) -> List[Square]:
        s = self.state
        piece = s.board.piece_at(from_sq)
        if piece is None or piece.color is not s.side_to_move:
            return []
        return valid_moves_from(s.board, from_sq, s.en_passant, s.castling)

    def check_status(self) -> CheckStatus:
        s = self.state
        return check_status(s.board, s.side_to_move, s.en_passant, s.castling)

    def draw_status(self) -> DrawStatus:
        s = self.state
        # Repetition counts earlier occurrences only; the last entry is the current position
        return draw_status(
            s.board,
            s.side_to_move,
            s.en_passant,
            s.castling,
            s.position_history[:-1],
            s.halfmove_clock,
        )

    def in_check(self) -> bool:
        return self.check_status().in_check

    def checkmate(self) -> bool:
        return self.check_status().is_checkmate

    def stalemate(self) -> bool:
        return self.draw_status().reason is DrawReason.STALEMATE

    def is_draw(self) -> bool:
        return self.draw_reason is not None

    def move_history(self) -> List[str]:
        return [rec.notation for rec in self.moves]

    # --- Transitions ---
    def apply_move(self, move: Move) -> MoveRecord:
        """Validate and play ``move`` for the side to move.

        Raises:
            ValueError: If the game is over, the move is illegal, or the
                promotion piece is missing where not allowed or invalid.
        """
        if self.game_over:
            raise ValueError("game is over")
        s = self.state
        piece = s.board.piece_at(move.from_sq)
        if piece is None or piece.color is not s.side_to_move:
            raise ValueError("illegal move")
        if not is_valid_move(s.board, move.from_sq, move.to_sq, s.en_passant, s.castling):
            raise ValueError("illegal move")

        promotion = move.promotion
        promoting = is_promotion_move(s.board, move.from_sq, move.to_sq)
        if promotion is not None and not promoting:
            raise ValueError("promotion piece given for a non-promotion move")
        if promotion in (PieceType.KING, PieceType.PAWN):
            raise ValueError(f"cannot promote to {promotion.value}")
        if promoting and promotion is None:
            promotion = PieceType.QUEEN

        res = execute_move(
            s.board,
            move.from_sq,
            move.to_sq,
            s.castling,
            s.en_passant,
            promotion or PieceType.QUEEN,
        )
        mover = s.side_to_move
        opponent = mover.opponent
        resets_clock = piece.type is PieceType.PAWN or res.captured is not None
        new_sig = position_signature(res.board, opponent, res.castling, res.en_passant)
        self.state = GameState(
            board=res.board,
            side_to_move=opponent,
            castling=res.castling,
            en_passant=res.en_passant,
            position_history=s.position_history + (new_sig,),
            halfmove_clock=0 if resets_clock else s.halfmove_clock + 1,
            fullmove_number=s.fullmove_number + (1 if mover is Color.BLACK else 0),
        )

        if res.captured is not None:
            captures = self.captured_by_white if mover is Color.WHITE else self.captured_by_black
            captures.append(res.captured)

        status = self.check_status()
        record = MoveRecord(
            move=Move(move.from_sq, move.to_sq, piece=piece, promotion=promotion),
            piece=piece,
            captured=res.captured,
            notation=move_notation(
                move.from_sq,
                move.to_sq,
                piece,
                res.captured,
                s.board.rows,
                status.in_check,
                status.is_checkmate,
                res.special,
                promotion,
            ),
            is_check=status.in_check,
            is_checkmate=status.is_checkmate,
            special=res.special,
            promoted_to=promotion,
        )
        self.moves.append(record)
        self._update_result(status)
        return record

    def apply_str(self, text: str) -> MoveRecord:
        return self.apply_move(parse_move(text, self.state.board.rows))

    def engine_move(self, service: "SearchService", depth: int = 3) -> Optional[MoveRecord]:
        """Let ``service`` pick and play a move for the side to move."""
        if self.game_over:
            raise ValueError("game is over")
        result = service.search(self, depth=depth)
        if result.best_move is None:
            return None
        return self.apply_move(result.best_move)

    def agree_draw(self) -> None:
        if self.game_over:
            raise ValueError("game is over")
        self.game_over = True
        self.winner = None
        self.draw_reason = DrawReason.AGREEMENT
        logger.info("game drawn by agreement after %d moves", len(self.moves))

    def undo_move(self) -> None:
        """Take back the last move by replaying all earlier moves from the start."""
        if not self.moves:
            raise ValueError("no moves to undo")
        replay = [rec.move for rec in self.moves[:-1]]
        fresh = Game.from_fen(self.start_fen)
        for mv in replay:
            fresh.apply_move(mv)
        self.state = fresh.state
        self.moves = fresh.moves
        self.captured_by_white = fresh.captured_by_white
        self.captured_by_black = fresh.captured_by_black
        self.game_over = fresh.game_over
        self.winner = fresh.winner
        self.draw_reason = fresh.draw_reason

    def _update_result(self, status: Optional[CheckStatus] = None) -> None:
        if status is None:
            status = self.check_status()
        if status.is_checkmate:
            self.game_over = True
            self.winner = self.state.side_to_move.opponent
            self.draw_reason = None
            logger.info("checkmate: %s wins", self.winner.value)
            return
        draw = self.draw_status()
        if draw.is_draw:
            self.game_over = True
            self.winner = None
            self.draw_reason = draw.reason
            logger.info("draw by %s", draw.reason.value if draw.reason else None)
            return
        self.game_over = False
        self.winner = None
        self.draw_reason = None

    # --- Serialization ---
    def to_dict(self) -> Dict[str, Any]:
        """Serialize every field of the game into JSON-compatible values."""
        s = self.state
        rows = s.board.rows
        return {
            "board_size": self.size.value,
            "start_fen": self.start_fen,
            "placement": placement(s.board),
            "side_to_move": s.side_to_move.value,
            "castling": s.castling.to_str(),
            "en_passant": square_to_str(s.en_passant, rows) if s.en_passant else None,
            "position_history": list(s.position_history),
            "halfmove_clock": s.halfmove_clock,
            "fullmove_number": s.fullmove_number,
            "moves": [_record_to_dict(rec, rows) for rec in self.moves],
            "captured_by_white": [p.symbol for p in self.captured_by_white],
            "captured_by_black": [p.symbol for p in self.captured_by_black],
            "game_over": self.game_over,
            "winner": self.winner.value if self.winner else None,
            "draw_reason": self.draw_reason.value if self.draw_reason else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        """Rebuild a game saved by :meth:`to_dict`.

        The stored moves are replayed from ``start_fen`` and the saved
        position, history, records and result must match the replay.

        Raises:
            ValueError: If a field is missing or malformed, or the saved
                fields contradict each other.
        """
        try:
            size = BoardSize(data["board_size"])
            side = Color(data["side_to_move"])
            ep = data["en_passant"]
            fen = " ".join(
                [
                    data["placement"],
                    side.short,
                    data["castling"],
                    ep if ep else "-",
                    str(int(data["halfmove_clock"])),
                    str(int(data["fullmove_number"])),
                ]
            )
            pos = Position.from_fen(fen)
            if pos.board.rows != size.rows:
                raise ValueError("placement does not match board size")
            history = tuple(str(h) for h in data["position_history"])
            if not history:
                raise ValueError("position history must not be empty")
            moves = [_record_from_dict(d, size.rows) for d in data["moves"]]
            game = cls(
                state=replace(GameState.from_position(pos), position_history=history),
                start_fen=data["start_fen"],
                moves=moves,
                captured_by_white=[Piece.from_symbol(c) for c in data["captured_by_white"]],
                captured_by_black=[Piece.from_symbol(c) for c in data["captured_by_black"]],
                game_over=bool(data["game_over"]),
                winner=Color(data["winner"]) if data["winner"] else None,
                draw_reason=DrawReason(data["draw_reason"]) if data["draw_reason"] else None,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"malformed saved game: {e}") from e
        if history[-1] != game.state.signature:
            raise ValueError("position history does not end at the saved position")
        game._check_against_replay()
        return game

    def _check_against_replay(self) -> None:
        replayed = Game.from_fen(self.start_fen)
        for rec in self.moves:
            try:
                replayed.apply_move(rec.move)
            except ValueError as e:
                raise ValueError(f"saved moves do not replay: {e}") from e
        if self.draw_reason is DrawReason.AGREEMENT and not replayed.game_over:
            replayed.agree_draw()
        if replayed.state != self.state:
            raise ValueError("saved position does not match its moves")
        if replayed.moves != self.moves:
            raise ValueError("saved move records do not match their replay")
        if (
            replayed.captured_by_white != self.captured_by_white
            or replayed.captured_by_black != self.captured_by_black
        ):
            raise ValueError("saved captures do not match their moves")
        if (replayed.game_over, replayed.winner, replayed.draw_reason) != (
            self.game_over,
            self.winner,
            self.draw_reason,
        ):
            raise ValueError("saved result does not match the position")


def _record_to_dict(rec: MoveRecord, rows: int) -> Dict[str, Any]:
    return {
        "from": square_to_str(rec.move.from_sq, rows),
        "to": square_to_str(rec.move.to_sq, rows),
        "piece": rec.piece.symbol,
        "captured": rec.captured.symbol if rec.captured else None,
        "notation": rec.notation,
        "is_check": rec.is_check,
        "is_checkmate": rec.is_checkmate,
        "special": rec.special.value if rec.special else None,
        "promoted_to": rec.promoted_to.value if rec.promoted_to else None,
    }


def _record_from_dict(d: Dict[str, Any], rows: int) -> MoveRecord:
    piece = Piece.from_symbol(d["piece"])
    promoted = PieceType(d["promoted_to"]) if d["promoted_to"] else None
    move = Move(
        str_to_square(d["from"], rows),
        str_to_square(d["to"], rows),
        piece=piece,
        promotion=promoted,
    )
    return MoveRecord(
        move=move,
        piece=piece,
        captured=Piece.from_symbol(d["captured"]) if d["captured"] else None,
        notation=str(d["notation"]),
        is_check=bool(d["is_check"]),
        is_checkmate=bool(d["is_checkmate"]),
        special=SpecialMove(d["special"]) if d["special"] else None,
        promoted_to=promoted,
    )
