from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from ...engine.game import Game


class InMemorySessionStore:
    """Thread-safe in-memory store of games keyed by ``game_id``.

    Games are mutable; callers that change one must hold :attr:`lock` so a
    concurrent reader never sees a half-applied move.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._games: Dict[str, Game] = {}

    def create(self, game: Optional[Game] = None) -> str:
        """Store ``game`` (a new default game if omitted) and return its id."""
        gid = uuid.uuid4().hex
        if game is None:
            game = Game.new()
        with self.lock:
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self.lock:
            return self._games.get(game_id)

    def set(self, game_id: str, game: Game) -> None:
        with self.lock:
            if game_id not in self._games:
                raise KeyError(game_id)
            self._games[game_id] = game

    def delete(self, game_id: str) -> bool:
        with self.lock:
            return self._games.pop(game_id, None) is not None

