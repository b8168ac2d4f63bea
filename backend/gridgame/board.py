"""
Доска N x N: индексация клеток и канонический набор выигрышных линий.
Индекс клетки плоский: row = index // width, col = index % width.
"""
from dataclasses import dataclass

from .config import Config
from .constants import DIRECTIONS, LINE_LENGTH, MIN_BOARD_WIDTH
from .models import Board, Cell, Occupant, WinCondition


def cell_position(index: int, width: int) -> tuple[int, int]:
    return index // width, index % width


def in_bounds(index: int, width: int) -> bool:
    return 0 <= index < width * width


def empty_board(width: int) -> Board:
    return tuple(
        tuple(Cell(row=i, col=j) for j in range(width))
        for i in range(width)
    )


def cell_at(board: Board, index: int) -> Cell:
    i, j = cell_position(index, len(board))
    return board[i][j]


def place(board: Board, index: int, occupant: Occupant) -> Board:
    """Новая доска с занятой клеткой index. Исходная доска не меняется."""
    i, j = cell_position(index, len(board))
    row = board[i]
    new_row = row[:j] + (Cell(row=i, col=j, occupant=occupant),) + row[j + 1:]
    return board[:i] + (new_row,) + board[i + 1:]


def winning_lines(width: int) -> tuple[WinCondition, ...]:
    """
    Все горизонтальные, вертикальные и диагональные отрезки из трёх клеток.
    Порядок: по начальной клетке (row-major), затем по направлению.
    """
    if width < MIN_BOARD_WIDTH:
        raise ValueError(f"board width must be at least {MIN_BOARD_WIDTH}, got {width}")
    lines: list[WinCondition] = []
    for start in range(width * width):
        row, col = cell_position(start, width)
        for d in DIRECTIONS:
            end_row = row + d["d_row"] * (LINE_LENGTH - 1)
            end_col = col + d["d_col"] * (LINE_LENGTH - 1)
            if not (0 <= end_row < width and 0 <= end_col < width):
                continue
            lines.append(tuple(
                (row + d["d_row"] * k) * width + col + d["d_col"] * k
                for k in range(LINE_LENGTH)
            ))
    return tuple(lines)


@dataclass(frozen=True)
class GameRules:
    width: int
    win_conditions: tuple[WinCondition, ...]

    @classmethod
    def for_width(cls, width: int) -> "GameRules":
        return cls(width=width, win_conditions=winning_lines(width))

    @classmethod
    def from_config(cls, config: Config) -> "GameRules":
        return cls.for_width(config.board_width)

    def __post_init__(self) -> None:
        for line in self.win_conditions:
            if len(line) != LINE_LENGTH or not all(in_bounds(c, self.width) for c in line):
                raise ValueError(f"win condition {line} does not fit a {self.width}x{self.width} board")
