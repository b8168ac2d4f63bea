"""Конфигурация приложения."""
import os
from dataclasses import dataclass
from functools import lru_cache

from .constants import MIN_BOARD_WIDTH


@dataclass(frozen=True)
class Config:
    board_width: int
    debug: bool
    allowed_origins: list[str]
    log_level: str
    host: str
    port: int


@lru_cache
def get_config() -> Config:
    width = int(os.environ.get("BOARD_WIDTH", "3"))
    if width < MIN_BOARD_WIDTH:
        raise ValueError(f"BOARD_WIDTH must be at least {MIN_BOARD_WIDTH}, got {width}")
    return Config(
        board_width=width,
        debug=os.environ.get("DEBUG", "0").lower() in ("1", "true", "yes"),
        allowed_origins=os.environ.get("ALLOWED_ORIGINS", "*").split(","),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )
