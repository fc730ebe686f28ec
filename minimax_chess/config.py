# minimax_chess/config.py
from dataclasses import dataclass, field
from typing import Dict, Optional
import os
import tomllib

from loguru import logger

# Defaults (centipawns). King material is excluded; king safety is scored separately.
PIECE_VALUES = {
    "PAWN": 100,
    "KNIGHT": 320,
    "BISHOP": 330,
    "ROOK": 500,
    "QUEEN": 900,
    "KING": 0,
}

KING_SAFETY_WEIGHTS = {
    "shield_bonus": 10,
    "exposure_penalty": 5,
    "back_rank_bonus": 20,
    "center_penalty": 30,
}

ORDERING_BONUSES = {
    "checkmate": 100000,
    "check": 300,
    "promotion": 500,
}


@dataclass
class SearchConfig:
    depth: int = 3
    max_depth: int = 4
    order_moves: bool = True
    cache_capacity: Optional[int] = None  # None means unbounded
    engine_color: str = "black"
    reply_delay_ms: int = 500


@dataclass
class EvalConfig:
    piece_values: Dict[str, int] = field(default_factory=lambda: PIECE_VALUES.copy())
    king_safety_weights: Dict[str, int] = field(default_factory=lambda: KING_SAFETY_WEIGHTS.copy())
    ordering_bonuses: Dict[str, int] = field(default_factory=lambda: ORDERING_BONUSES.copy())


@dataclass
class UIConfig:
    engine_name: str = "MinimaxChess"
    engine_author: str = "minimax-chess"
    api_port: int = 8000


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "config.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "ui"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if not hasattr(target, k):
                    logger.warning("Unknown config key [{}].{} in {}", section, k, path)
                    continue
                current = getattr(target, k)
                # dict-valued settings merge, so a partial table keeps the other defaults
                if isinstance(current, dict) and isinstance(v, dict):
                    current.update(v)
                else:
                    setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"]).upper()
        return cfg


def engine_color(cfg: Optional[Config] = None) -> bool:
    """Configured engine side as a python-chess color (True = white)."""
    name = (cfg or CONFIG).search.engine_color.lower()
    if name not in ("white", "black"):
        raise ValueError(f"engine_color must be 'white' or 'black', got {name!r}")
    return name == "white"


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("MINIMAX_CHESS_CONFIG", "config.toml"))
# allow env override of depth for quick debugging
override_depth = os.environ.get("MINIMAX_CHESS_DEPTH")
if override_depth:
    try:
        CONFIG.search.depth = int(override_depth)
    except ValueError:
        logger.warning("Ignoring MINIMAX_CHESS_DEPTH={!r}: not an integer", override_depth)
