from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from duoqueen.engine.attacks import king_in_check
from duoqueen.engine.board import Board, Color, PieceType, Square
from duoqueen.engine.execute import execute_move
from duoqueen.engine.move import Move
from duoqueen.engine.position import CastlingRights
from duoqueen.engine.rules import all_legal_moves, is_promotion_move
from duoqueen.eval import MATE_SCORE, evaluate

if TYPE_CHECKING:  # pragma: no cover
    from duoqueen.engine.game import Game


logger = logging.getLogger(__name__)

INF = float("inf")


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: Optional[float]
    nodes: int
    depth: int
    time_ms: int


class _Counter:
    def __init__(self) -> None:
        self.nodes = 0


def minimax(
    board: Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    perspective: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
    *,
    prune: bool = True,
    _counter: Optional[_Counter] = None,
) -> float:
    """Fixed-depth minimax with alpha-beta cutoffs.

    The maximizing side is ``perspective``; the side to move is ``perspective``
    when ``maximizing`` is true and its opponent otherwise. Scores come from
    :func:`duoqueen.eval.evaluate` for ``perspective``.

    Args:
        prune (bool): When false, every child is searched (no cutoffs); the
            returned value is identical, only slower.
    """
    if _counter is not None:
        _counter.nodes += 1
    if castling is None:
        castling = CastlingRights.none()
    if depth <= 0:
        return evaluate(board, perspective, en_passant, castling)

    color = perspective if maximizing else perspective.opponent
    moves = all_legal_moves(board, color, en_passant, castling)
    if not moves:
        if king_in_check(board, color):
            return -MATE_SCORE if maximizing else MATE_SCORE
        # Stalemate
        return 0.0

    best = -INF if maximizing else INF
    for mv in moves:
        res = execute_move(board, mv.from_sq, mv.to_sq, castling, en_passant)
        value = minimax(
            res.board,
            depth - 1,
            alpha,
            beta,
            not maximizing,
            perspective,
            res.en_passant,
            res.castling,
            prune=prune,
            _counter=_counter,
        )
        if maximizing:
            best = max(best, value)
            alpha = max(alpha, value)
        else:
            best = min(best, value)
            beta = min(beta, value)
        if prune and beta <= alpha:
            break
    return best


def score_root_moves(
    board: Board,
    depth: int,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
    *,
    _counter: Optional[_Counter] = None,
) -> List[tuple[Move, float]]:
    """Return every legal move of ``color`` with its full-window minimax score."""
    if castling is None:
        castling = CastlingRights.none()
    scored: List[tuple[Move, float]] = []
    for mv in all_legal_moves(board, color, en_passant, castling):
        res = execute_move(board, mv.from_sq, mv.to_sq, castling, en_passant)
        value = minimax(
            res.board,
            depth - 1,
            -INF,
            INF,
            False,
            color,
            res.en_passant,
            res.castling,
            _counter=_counter,
        )
        if is_promotion_move(board, mv.from_sq, mv.to_sq):
            # Automated side always promotes to a queen
            mv = Move(mv.from_sq, mv.to_sq, piece=mv.piece, promotion=PieceType.QUEEN)
        scored.append((mv, value))
    return scored


def _select(
    board: Board,
    depth: int,
    color: Color,
    en_passant: Optional[Square],
    castling: Optional[CastlingRights],
    rng: random.Random,
    randomness: float,
    counter: Optional[_Counter],
) -> tuple[Optional[Move], Optional[float]]:
    chosen: Optional[Move] = None
    chosen_score: Optional[float] = None
    best_adjusted = -INF
    for mv, score in score_root_moves(
        board, depth, color, en_passant, castling, _counter=counter
    ):
        adjusted = score + (rng.random() * randomness if randomness else 0.0)
        if chosen is None or adjusted > best_adjusted:
            chosen, chosen_score, best_adjusted = mv, score, adjusted
    return chosen, chosen_score


def best_move(
    board: Board,
    depth: int,
    color: Color,
    en_passant: Optional[Square] = None,
    castling: Optional[CastlingRights] = None,
    *,
    rng: Optional[random.Random] = None,
    randomness: float = 0.5,
) -> Optional[Move]:
    """Pick a move for ``color`` searching ``depth`` plies (root move included).

    Each root move is scored completely, then nudged by
    ``rng.random() * randomness`` so repeated games do not replay identically.
    With ``randomness=0`` the first best-scoring move in generation order wins.

    Returns:
        Optional[Move]: Chosen move with its ``piece`` set, or ``None`` when
            ``color`` has no legal move.
    """
    if depth < 1:
        raise ValueError("depth must be >= 1")
    move, _ = _select(
        board,
        depth,
        color,
        en_passant,
        castling,
        rng if rng is not None else random.Random(),
        randomness,
        None,
    )
    return move


class SearchService:
    """Search entry point used by the game wrapper and the HTTP API."""

    def __init__(self, randomness: float = 0.5, rng: Optional[random.Random] = None) -> None:
        self.randomness = randomness
        self.rng = rng if rng is not None else random.Random()

    def search(self, game: "Game", depth: int = 3) -> SearchResult:
        """Search the game's current position for the side to move.

        The reported score is the unperturbed minimax value of the chosen move
        for the side to move. With no legal move it is the mate score (side to
        move is mated) or 0 (stalemate).
        """
        if depth < 1:
            raise ValueError("depth must be >= 1")
        state = game.state
        counter = _Counter()
        start = time.perf_counter()
        move, score = _select(
            state.board,
            depth,
            state.side_to_move,
            state.en_passant,
            state.castling,
            self.rng,
            self.randomness,
            counter,
        )
        if move is None:
            mated = king_in_check(state.board, state.side_to_move)
            score = -float(MATE_SCORE) if mated else 0.0
        time_ms = int((time.perf_counter() - start) * 1000)
        logger.debug(
            "search depth=%d nodes=%d time_ms=%d best=%s score=%s",
            depth,
            counter.nodes,
            time_ms,
            move.to_str(state.board.rows) if move else None,
            score,
        )
        return SearchResult(
            best_move=move, score=score, nodes=counter.nodes, depth=depth, time_ms=time_ms
        )
