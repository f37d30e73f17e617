from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "DUOQUEEN_CONFIG_TOML"
DEFAULT_CONFIG_PATH = "duoqueen.toml"


@dataclass
class SearchConfig:
    # Plies searched by the automated side, root move included
    depth: int = 3
    # Upper bound of the random nudge added to each root move's score
    randomness: float = 0.5


@dataclass
class GameConfig:
    board_size: str = "9x8"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    game: GameConfig = field(default_factory=GameConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = DEFAULT_CONFIG_PATH) -> "Config":
        """Load settings from ``path``; a missing file yields the defaults.

        Unknown keys are ignored. Sections map onto the nested dataclasses by
        name (``[search]``, ``[game]``, ``[server]``).
        """
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "game", "server"):
            if section in raw:
                _merge(getattr(cfg, section), raw[section])
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg

    @staticmethod
    def from_env(environ: Optional[Dict[str, str]] = None) -> "Config":
        """Load the TOML file named by the environment, then apply env overrides."""
        env = os.environ if environ is None else environ
        cfg = Config.load_from_toml(env.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))
        depth = env.get("DUOQUEEN_SEARCH_DEPTH")
        if depth:
            try:
                cfg.search.depth = int(depth)
            except ValueError:
                logger.warning("ignoring invalid DUOQUEEN_SEARCH_DEPTH=%r", depth)
        level = env.get("DUOQUEEN_LOG_LEVEL")
        if level:
            cfg.log_level = level.upper()
        return cfg


def _merge(target: Any, values: Dict[str, Any]) -> None:
    """Copy known keys onto ``target``, converted to the type of the current value.

    Raises:
        ValueError: If a value cannot be converted.
    """
    known = {f.name for f in fields(target)}
    for k, v in values.items():
        if k not in known:
            continue
        kind = type(getattr(target, k))
        try:
            setattr(target, k, kind(v))
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid value for {k}: {v!r}") from e
