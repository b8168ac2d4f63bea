"""Реванш, сброс партии и сдача."""
import logging
import random
from dataclasses import replace

from .board import GameRules
from .constants import PLAYER_LIMIT
from .errors import InvalidState, SessionNotFound
from .models import GameSession
from .moves import finish
from .pairing import assign_roles, new_session
from .store import SessionStore

logger = logging.getLogger(__name__)


class RematchCoordinator:
    def __init__(self, store: SessionStore, rules: GameRules, rng: random.Random | None = None):
        self.store = store
        self.rules = rules
        self.rng = rng or random.Random()

    def rematch(self, game_id: str, player_id: str) -> GameSession:
        """Согласие игрока на реванш. Когда согласны оба — партия сбрасывается сразу."""
        with self.store.locked(game_id):
            session = self._load(game_id)
            if not session.is_finished:
                raise InvalidState(f"game {game_id} is not finished")
            if player_id not in session.players:
                raise InvalidState(f"player {player_id} is not in game {game_id}")
            if session.players_joined < PLAYER_LIMIT:
                raise InvalidState(f"opponent has left game {game_id}")
            player = session.players[player_id]
            session = replace(
                session,
                players={**session.players, player_id: replace(player, rematch_request=True)},
            )
            if session.rematch_consents == PLAYER_LIMIT:
                session = self._reset(session)
            self.store.put(session)
            return session

    def reset(self, game_id: str) -> GameSession:
        with self.store.locked(game_id):
            session = self._load(game_id)
            if not session.is_finished:
                raise InvalidState(f"game {game_id} is not finished")
            if session.players_joined < PLAYER_LIMIT or session.rematch_consents < session.players_joined:
                raise InvalidState(
                    f"game {game_id} has {session.rematch_consents}/{PLAYER_LIMIT} rematch requests"
                )
            session = self._reset(session)
            self.store.put(session)
            return session

    def resign(self, game_id: str, player_id: str) -> GameSession:
        """Сдача: победа сопернику, засчитывается как обычная победа."""
        with self.store.locked(game_id):
            session = self._load(game_id)
            if session.is_finished:
                raise InvalidState(f"game {game_id} is already finished")
            if player_id not in session.players:
                raise InvalidState(f"player {player_id} is not in game {game_id}")
            opponent = session.opponent_of(player_id)
            if opponent is None:
                raise InvalidState(f"game {game_id} has no opponent yet")
            session = finish(session, opponent.player_id)
            self.store.put(session)
            logger.info("resign: %s resigned game %s, won_by=%s", player_id, game_id, opponent.player_id)
            return session

    def _reset(self, session: GameSession) -> GameSession:
        players = {
            pid: replace(p, action=None, is_turn=False, rematch_request=False)
            for pid, p in session.players.items()
        }
        fresh = new_session(
            self.rules,
            game_id=session.id,
            players=assign_roles(players, self.rng),
            count=session.count,
        )
        logger.info("reset: game %s, round %d", session.id, session.count + 1)
        return fresh

    def _load(self, game_id: str) -> GameSession:
        session = self.store.get(game_id)
        if session is None:
            raise SessionNotFound(game_id)
        return session
