from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore
from ...config import Config
from ...engine.board import BoardSize
from ...engine.game import Game
from ...engine.move import parse_move, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.position import Position
from ...search.service import SearchService


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    board_size: Optional[str] = Field(default=None, pattern=r"^9x[89]$")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    board_size: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN-style position text")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move, e.g. e2e4 or e7e8n")


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1, le=6)


class PerftRequest(BaseModel):
    fen: Optional[str] = None
    rows: int = Field(default=8, ge=8, le=9)
    depth: int = Field(default=1, ge=0, le=4)


class GameStateModel(BaseModel):
    game_id: str
    fen: str
    board_size: str
    side_to_move: str
    legal_moves: List[str]
    in_check: bool
    checked_king: Optional[str]
    checkmate: bool
    game_over: bool
    winner: Optional[str]
    draw_reason: Optional[str]
    halfmove_clock: int
    last_move: Optional[str]
    move_history: List[str]
    captured_by_white: List[str]
    captured_by_black: List[str]


def create_app(config: Optional[Config] = None) -> FastAPI:
    cfg = config if config is not None else Config.from_env()
    app = FastAPI(title="Duoqueen Engine API", version="0.1.0")

    logging.basicConfig(level=getattr(logging, cfg.log_level.upper(), logging.INFO))

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    search_service = SearchService(randomness=cfg.search.randomness)
    app.state.store = store
    app.state.config = cfg

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        size = BoardSize((req.board_size if req else None) or cfg.game.board_size)
        game = Game.new(size)
        game_id = store.create(game)
        logger.info("created game %s (%s)", game_id, size.value)
        return CreateGameResponse(game_id=game_id, fen=game.to_fen(), board_size=size.value)

    @app.get("/api/games/{game_id}/state", response_model=GameStateModel)
    async def get_state(game_id: str) -> GameStateModel:
        with store.lock:
            return _state_model(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/position", response_model=GameStateModel)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStateModel:
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        with store.lock:
            _require_game(store, game_id)
            store.set(game_id, game)
            return _state_model(game_id, game)

    @app.get("/api/games/{game_id}/moves/{square}")
    async def legal_destinations(game_id: str, square: str) -> Dict[str, Any]:
        with store.lock:
            game = _require_game(store, game_id)
            rows = game.board.rows
            from_sq = str_to_square(square, rows)
            dests = game.legal_destinations(from_sq)
            return {"from": square, "to": [square_to_str(sq, rows) for sq in dests]}

    @app.post("/api/games/{game_id}/move", response_model=GameStateModel)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateModel:
        with store.lock:
            game = _require_game(store, game_id)
            move = parse_move(req.move, game.board.rows)
            game.apply_move(move)
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/engine-move", response_model=GameStateModel)
    def engine_move(game_id: str, req: Optional[SearchRequest] = None) -> GameStateModel:
        depth = (req.depth if req else None) or cfg.search.depth
        with store.lock:
            game = _require_game(store, game_id)
            if game.game_over:
                raise ValueError("game is over")
            snapshot = replace(game)
        res = search_service.search(snapshot, depth=depth)
        with store.lock:
            game = _require_game(store, game_id)
            if game.state is not snapshot.state:
                raise HTTPException(status_code=409, detail="position changed during search")
            if res.best_move is None:
                raise HTTPException(status_code=409, detail="no legal moves")
            game.apply_move(res.best_move)
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/search")
    def search(game_id: str, req: Optional[SearchRequest] = None) -> Dict[str, Any]:
        depth = (req.depth if req else None) or cfg.search.depth
        with store.lock:
            snapshot = replace(_require_game(store, game_id))
        res = search_service.search(snapshot, depth=depth)
        rows = snapshot.board.rows
        return {
            "best_move": res.best_move.to_str(rows) if res.best_move else None,
            "score": res.score,
            "nodes": res.nodes,
            "depth": res.depth,
            "time_ms": res.time_ms,
        }

    @app.post("/api/games/{game_id}/undo", response_model=GameStateModel)
    async def undo(game_id: str) -> GameStateModel:
        with store.lock:
            game = _require_game(store, game_id)
            game.undo_move()
            return _state_model(game_id, game)

    @app.post("/api/games/{game_id}/draw", response_model=GameStateModel)
    async def agree_draw(game_id: str) -> GameStateModel:
        with store.lock:
            game = _require_game(store, game_id)
            game.agree_draw()
            return _state_model(game_id, game)

    @app.get("/api/games/{game_id}/export")
    async def export_game(game_id: str) -> Dict[str, Any]:
        with store.lock:
            return _require_game(store, game_id).to_dict()

    @app.post("/api/games/import", response_model=CreateGameResponse)
    async def import_game(payload: Dict[str, Any]) -> CreateGameResponse:
        game = Game.from_dict(payload)
        game_id = store.create(game)
        logger.info("imported game %s after %d moves", game_id, len(game.moves))
        return CreateGameResponse(game_id=game_id, fen=game.to_fen(), board_size=game.size.value)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, bool]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"deleted": True}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, Any]:
        try:
            pos = Position.from_fen(req.fen) if req.fen else Position.initial(req.rows)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(pos, req.depth), "depth": req.depth}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _state_model(game_id: str, game: Game) -> GameStateModel:
    s = game.state
    rows = s.board.rows
    status = game.check_status()
    history = game.move_history()
    return GameStateModel(
        game_id=game_id,
        fen=game.to_fen(),
        board_size=game.size.value,
        side_to_move=s.side_to_move.value,
        legal_moves=[] if game.game_over else [m.to_str(rows) for m in game.legal_moves()],
        in_check=status.in_check,
        checked_king=square_to_str(status.checked_king, rows) if status.checked_king else None,
        checkmate=status.is_checkmate,
        game_over=game.game_over,
        winner=game.winner.value if game.winner else None,
        draw_reason=game.draw_reason.value if game.draw_reason else None,
        halfmove_clock=s.halfmove_clock,
        last_move=history[-1] if history else None,
        move_history=history,
        captured_by_white=[p.symbol for p in game.captured_by_white],
        captured_by_black=[p.symbol for p in game.captured_by_black],
    )


# Default app for non-factory servers
app = create_app()
