"""
Хранилище сессий (in-memory).
Сессия заменяется целиком; чтение-расчёт-запись одной сессии идёт под её замком.
"""
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from .models import GameSession


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()
        # Подбор партии просматривает все сессии, поэтому join сериализуется целиком.
        # Порядок захвата: join_lock, затем замок сессии.
        self.join_lock = threading.Lock()

    def get(self, game_id: str) -> GameSession | None:
        with self._guard:
            return self._sessions.get(game_id)

    def put(self, session: GameSession) -> None:
        with self._guard:
            self._sessions[session.id] = session

    def sessions(self) -> list[GameSession]:
        """Снимок всех сессий в порядке создания."""
        with self._guard:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)

    @contextmanager
    def locked(self, game_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(game_id, threading.Lock())
        with lock:
            yield
