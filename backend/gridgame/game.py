"""
Игровое ядро целиком: подбор, ходы, реванш, сдача.
Транспорт вызывает только GameService и рассылает возвращённый снимок.
"""
import logging
import random
from dataclasses import replace
from typing import Any

from .board import GameRules, cell_at
from .config import get_config
from .constants import PLAYER_LIMIT
from .models import GameSession
from .moves import MoveEngine
from .pairing import Matchmaker
from .rematch import RematchCoordinator
from .store import SessionStore

logger = logging.getLogger(__name__)


class GameService:
    def __init__(
        self,
        store: SessionStore | None = None,
        rules: GameRules | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store if store is not None else SessionStore()
        self.rules = rules or GameRules.from_config(get_config())
        rng = rng or random.Random()
        self.matchmaker = Matchmaker(self.store, self.rules, rng)
        self.moves = MoveEngine(self.store)
        self.rematches = RematchCoordinator(self.store, self.rules, rng)

    def join(self, player_id: str, nickname: str) -> GameSession:
        return self.matchmaker.join(player_id, nickname)

    def play(self, game_id: str, player_id: str, cell_index: int) -> GameSession:
        return self.moves.play(game_id, player_id, cell_index)

    def resign(self, game_id: str, player_id: str) -> GameSession:
        return self.rematches.resign(game_id, player_id)

    def rematch(self, game_id: str, player_id: str) -> GameSession:
        return self.rematches.rematch(game_id, player_id)

    def reset(self, game_id: str) -> GameSession:
        return self.rematches.reset(game_id)

    def get_by_id(self, game_id: str) -> GameSession | None:
        return self.store.get(game_id)

    def abandon(self, player_id: str) -> list[GameSession]:
        """
        Игрок ушёл (обрыв соединения). В идущих партиях — сдача за него,
        из ожидающих сессий его убираем. Возвращает изменённые сессии.
        """
        changed: list[GameSession] = []
        with self.store.join_lock:
            for s in self.store.sessions():
                if s.is_finished or player_id not in s.players:
                    continue
                if s.players_joined == PLAYER_LIMIT:
                    changed.append(self.rematches.resign(s.id, player_id))
                    continue
                with self.store.locked(s.id):
                    fresh = self.store.get(s.id)
                    rest = {pid: p for pid, p in fresh.players.items() if pid != player_id}
                    fresh = replace(fresh, players=rest)
                    self.store.put(fresh)
                changed.append(fresh)
                logger.info("abandon: %s left waiting game %s", player_id, s.id)
        return changed


def session_payload(s: GameSession) -> dict[str, Any]:
    """Собрать payload game_state для отправки клиенту."""
    cells = []
    for index in range(s.width * s.width):
        occupant = cell_at(s.board, index).occupant
        cells.append(
            {"player_id": occupant.player_id, "action": occupant.action} if occupant else None
        )
    return {
        "type": "game_state",
        "game_id": s.id,
        "board_width": s.width,
        "board": cells,
        "players": [
            {
                "player_id": p.player_id,
                "nickname": p.nickname,
                "action": p.action,
                "is_turn": p.is_turn,
                "wins": p.wins,
                "rematch_request": p.rematch_request,
            }
            for p in s.players.values()
        ],
        "players_joined": s.players_joined,
        "rematch_consents": s.rematch_consents,
        "is_finished": s.is_finished,
        "won_by": s.won_by,
        "winner_cells": list(s.winner_cells) if s.winner_cells else None,
        "count": s.count,
    }
