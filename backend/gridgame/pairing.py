"""
Подбор партий (in-memory): первая сессия со свободным местом или новая.
Когда игроков двое — случайно раздаём символы и первый ход.
"""
import logging
import random
import uuid
from dataclasses import replace

from .board import GameRules, empty_board
from .constants import ACTIONS, PLAYER_LIMIT
from .models import GameSession, Player
from .store import SessionStore

logger = logging.getLogger(__name__)


def new_session(
    rules: GameRules,
    game_id: str | None = None,
    players: dict[str, Player] | None = None,
    count: int = 0,
) -> GameSession:
    return GameSession(
        id=game_id or str(uuid.uuid4()),
        board=empty_board(rules.width),
        win_conditions=rules.win_conditions,
        players=dict(players or {}),
        count=count,
    )


def assign_roles(players: dict[str, Player], rng: random.Random) -> dict[str, Player]:
    """
    Одна совместная выборка из четырёх равновероятных вариантов (символ x первый ход).
    Первый вошедший получает выпавший символ, второй — другой; ход ровно у одного.
    """
    if len(players) != PLAYER_LIMIT:
        raise ValueError(f"roles need exactly {PLAYER_LIMIT} players, got {len(players)}")
    first, second = list(players)
    action_idx, turn_idx = divmod(rng.randrange(len(ACTIONS) * 2), 2)
    return {
        first: replace(players[first], action=ACTIONS[action_idx], is_turn=turn_idx == 0),
        second: replace(players[second], action=ACTIONS[1 - action_idx], is_turn=turn_idx == 1),
    }


def has_room(session: GameSession) -> bool:
    return session.players_joined < PLAYER_LIMIT and not session.is_finished


class Matchmaker:
    def __init__(self, store: SessionStore, rules: GameRules, rng: random.Random | None = None):
        self.store = store
        self.rules = rules
        self.rng = rng or random.Random()

    def join(self, player_id: str, nickname: str) -> GameSession:
        """
        Посадить игрока в сессию. Повторный join игрока, уже сидящего
        в незаконченной сессии, возвращает её без изменений.
        """
        with self.store.join_lock:
            current = self._active_session_of(player_id)
            if current is not None:
                logger.info("join: %s already in game %s", player_id, current.id)
                return current

            target = self._available_session()
            if target is None:
                target = new_session(self.rules)
                logger.info("join: created game %s", target.id)

            with self.store.locked(target.id):
                target = self.store.get(target.id) or target
                players = {**target.players, player_id: Player(player_id=player_id, nickname=nickname)}
                if len(players) == PLAYER_LIMIT:
                    players = assign_roles(players, self.rng)
                    logger.info(
                        "join: game %s full, roles %s",
                        target.id,
                        {pid: (p.action, p.is_turn) for pid, p in players.items()},
                    )
                target = replace(target, players=players)
                self.store.put(target)

            self.leave_finished(player_id, keep=target.id)
        return target

    def leave_finished(self, player_id: str, keep: str | None = None) -> int:
        """Убрать игрока из всех законченных сессий (кроме keep). Возвращает число затронутых."""
        touched = 0
        for s in self.store.sessions():
            if s.id == keep or not s.is_finished or player_id not in s.players:
                continue
            with self.store.locked(s.id):
                fresh = self.store.get(s.id)
                if fresh is None or not fresh.is_finished or player_id not in fresh.players:
                    continue
                rest = {pid: p for pid, p in fresh.players.items() if pid != player_id}
                self.store.put(replace(fresh, players=rest))
            touched += 1
            logger.info("leave: %s removed from finished game %s", player_id, s.id)
        return touched

    def _available_session(self) -> GameSession | None:
        for s in self.store.sessions():
            if has_room(s):
                return s
        return None

    def _active_session_of(self, player_id: str) -> GameSession | None:
        for s in self.store.sessions():
            if not s.is_finished and player_id in s.players:
                return s
        return None
