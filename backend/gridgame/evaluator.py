"""Определение конца партии и отсечение линий, которые уже нельзя выиграть."""
from dataclasses import dataclass

from .board import cell_at
from .models import Board, WinCondition


@dataclass(frozen=True)
class Evaluation:
    finished: bool
    surviving: tuple[WinCondition, ...]
    winner: str | None = None
    winning_line: WinCondition | None = None


def evaluate(board: Board, win_conditions: tuple[WinCondition, ...]) -> Evaluation:
    surviving: list[WinCondition] = []
    for line in win_conditions:
        owners = [cell.occupant.player_id if cell.occupant else None
                  for cell in (cell_at(board, c) for c in line)]
        taken = [o for o in owners if o is not None]
        if len(taken) == len(line) and len(set(taken)) == 1:
            return Evaluation(
                finished=True,
                surviving=tuple(win_conditions),
                winner=taken[0],
                winning_line=line,
            )
        # два разных игрока на линии — её уже не выиграть
        if len(set(taken)) > 1:
            continue
        surviving.append(line)
    if not surviving:
        return Evaluation(finished=True, surviving=())
    return Evaluation(finished=False, surviving=tuple(surviving))
