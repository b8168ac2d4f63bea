"""
Pytest fixtures for gridgame tests.
"""

import random
from dataclasses import replace

import pytest

from gridgame.board import GameRules
from gridgame.game import GameService
from gridgame.models import GameSession
from gridgame.store import SessionStore


@pytest.fixture
def rules() -> GameRules:
    """Standard 3x3 board with the 8 classic lines."""
    return GameRules.for_width(3)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def service(store, rules) -> GameService:
    """Game service with a seeded random source."""
    return GameService(store=store, rules=rules, rng=random.Random(42))


@pytest.fixture
def started(service) -> GameSession:
    """alice and bob in one session; alice plays "x" and moves first."""
    service.join("alice", "Alice")
    session = service.join("bob", "Bob")
    return seat(service.store, session.id, first="alice", action="x")


def seat(store: SessionStore, game_id: str, first: str, action: str = "x") -> GameSession:
    """Overwrite the random role assignment so `first` moves with `action`."""
    session = store.get(game_id)
    other_action = "o" if action == "x" else "x"
    players = {
        pid: replace(p, action=action if pid == first else other_action, is_turn=pid == first)
        for pid, p in session.players.items()
    }
    session = replace(session, players=players)
    store.put(session)
    return session


def play_all(service: GameService, game_id: str, moves: list[tuple[str, int]]) -> GameSession:
    session = None
    for player_id, cell in moves:
        session = service.play(game_id, player_id, cell)
    return session
