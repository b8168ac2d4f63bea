"""Константы игры."""
from typing import TypedDict

PLAYER_LIMIT = 2
ACTIONS: tuple[str, str] = ("x", "o")
LINE_LENGTH = 3
MIN_BOARD_WIDTH = LINE_LENGTH


class Direction(TypedDict):
    key: str
    d_row: int
    d_col: int


DIRECTIONS: list[Direction] = [
    {"key": "row", "d_row": 0, "d_col": 1},
    {"key": "col", "d_row": 1, "d_col": 0},
    {"key": "diag", "d_row": 1, "d_col": 1},
    {"key": "anti", "d_row": 1, "d_col": -1},
]
