"""
Tests for rematch negotiation, reset and resignation.
"""

from dataclasses import replace

import pytest

from gridgame.board import cell_at
from gridgame.errors import InvalidState, SessionNotFound

from conftest import play_all

ROW_WIN = [("alice", 0), ("bob", 3), ("alice", 1), ("bob", 4), ("alice", 2)]


@pytest.fixture
def finished(service, started):
    return play_all(service, started.id, ROW_WIN)


class TestRematch:
    def test_rematch_on_unfinished_game(self, service, started):
        with pytest.raises(InvalidState):
            service.rematch(started.id, "alice")
        assert service.get_by_id(started.id) == started

    def test_first_request_is_recorded(self, service, finished):
        session = service.rematch(finished.id, "alice")

        assert session.is_finished
        assert session.players["alice"].rematch_request
        assert not session.players["bob"].rematch_request
        assert session.rematch_consents == 1

    def test_repeated_request_counts_once(self, service, finished):
        service.rematch(finished.id, "alice")
        session = service.rematch(finished.id, "alice")
        assert session.rematch_consents == 1
        assert session.is_finished

    def test_both_requests_reset_the_game(self, service, finished, rules):
        service.rematch(finished.id, "bob")
        session = service.rematch(finished.id, "alice")

        assert session.id == finished.id
        assert not session.is_finished
        assert session.won_by is None
        assert session.winner_cells is None
        assert session.count == finished.count == 1
        assert session.win_conditions == rules.win_conditions
        assert all(cell_at(session.board, i).occupant is None for i in range(9))
        assert session.players["alice"].wins == 1
        assert session.players["bob"].wins == 0
        assert not any(p.rematch_request for p in session.players.values())
        assert {p.action for p in session.players.values()} == {"x", "o"}
        assert sum(p.is_turn for p in session.players.values()) == 1
        assert service.get_by_id(finished.id) == session

    def test_reset_game_is_playable(self, service, finished):
        service.rematch(finished.id, "alice")
        session = service.rematch(finished.id, "bob")
        mover = session.player_to_move()

        session = service.play(session.id, mover.player_id, 4)
        assert cell_at(session.board, 4).occupant.action == mover.action

    def test_count_grows_per_game(self, service, finished):
        service.rematch(finished.id, "alice")
        session = service.rematch(finished.id, "bob")
        session = service.resign(session.id, session.player_to_move().player_id)
        assert session.count == 2

    def test_non_member(self, service, finished):
        with pytest.raises(InvalidState):
            service.rematch(finished.id, "mallory")

    def test_opponent_left(self, service, finished):
        service.join("bob", "Bob")  # drops bob from the finished game
        with pytest.raises(InvalidState):
            service.rematch(finished.id, "alice")

    def test_unknown_session(self, service):
        with pytest.raises(SessionNotFound):
            service.rematch("missing", "alice")


class TestReset:
    def test_reset_needs_full_consent(self, service, finished):
        service.rematch(finished.id, "alice")
        before = service.get_by_id(finished.id)

        with pytest.raises(InvalidState):
            service.reset(finished.id)
        assert service.get_by_id(finished.id) == before

    def test_reset_on_unfinished_game(self, service, started):
        with pytest.raises(InvalidState):
            service.reset(started.id)

    def test_explicit_reset_after_consent(self, service, finished, store):
        # both flags set without triggering the automatic reset
        players = {pid: replace(p, rematch_request=True) for pid, p in finished.players.items()}
        store.put(replace(finished, players=players))

        session = service.reset(finished.id)
        assert not session.is_finished
        assert session.count == 1
        assert session.rematch_consents == 0


class TestResign:
    def test_opponent_wins(self, service, started):
        session = service.resign(started.id, "alice")

        assert session.is_finished
        assert session.won_by == "bob"
        assert session.winner_cells is None
        assert session.players["bob"].wins == 1
        assert session.players["alice"].wins == 0
        assert session.count == 1
        assert service.get_by_id(started.id) == session

    def test_resign_finished_game(self, service, finished):
        with pytest.raises(InvalidState):
            service.resign(finished.id, "bob")
        assert service.get_by_id(finished.id) == finished

    def test_resign_without_opponent(self, service):
        session = service.join("alice", "Alice")
        with pytest.raises(InvalidState):
            service.resign(session.id, "alice")

    def test_resign_non_member(self, service, started):
        with pytest.raises(InvalidState):
            service.resign(started.id, "mallory")

    def test_resign_unknown_session(self, service):
        with pytest.raises(SessionNotFound):
            service.resign("missing", "alice")
