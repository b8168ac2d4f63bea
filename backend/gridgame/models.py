"""
Неизменяемые снимки состояния партии.
Любое изменение — новый объект через dataclasses.replace, затем store.put().
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

WinCondition = tuple[int, int, int]


@dataclass(frozen=True)
class Occupant:
    player_id: str
    action: str


@dataclass(frozen=True)
class Cell:
    row: int
    col: int
    occupant: Occupant | None = None


Board = tuple[tuple[Cell, ...], ...]


@dataclass(frozen=True)
class Player:
    player_id: str
    nickname: str
    action: str | None = None
    is_turn: bool = False
    wins: int = 0
    rematch_request: bool = False


@dataclass(frozen=True)
class GameSession:
    id: str
    board: Board
    win_conditions: tuple[WinCondition, ...]
    players: Mapping[str, Player] = field(default_factory=dict, hash=False)  # порядок вставки = порядок входа
    is_finished: bool = False
    won_by: str | None = None
    winner_cells: WinCondition | None = None
    count: int = 0  # сыграно партий в этой сессии, переживает reset

    def __post_init__(self) -> None:
        # своя копия только для чтения: снимок не разделяет dict с вызывающим
        object.__setattr__(self, "players", MappingProxyType(dict(self.players)))

    @property
    def players_joined(self) -> int:
        return len(self.players)

    @property
    def rematch_consents(self) -> int:
        return sum(p.rematch_request for p in self.players.values())

    @property
    def width(self) -> int:
        return len(self.board)

    def player_to_move(self) -> Player | None:
        for p in self.players.values():
            if p.is_turn:
                return p
        return None

    def opponent_of(self, player_id: str) -> Player | None:
        for pid, p in self.players.items():
            if pid != player_id:
                return p
        return None
