"""Применение хода: проверка, отметка клетки, проверка конца партии, передача хода."""
import logging
from dataclasses import replace

from .board import cell_at, in_bounds, place
from .errors import InvalidMove, SessionNotFound
from .evaluator import evaluate
from .models import GameSession, Occupant, Player, WinCondition
from .store import SessionStore

logger = logging.getLogger(__name__)


def finish(session: GameSession, won_by: str | None, winner_cells: WinCondition | None = None) -> GameSession:
    """Закрыть партию: count += 1, победителю wins += 1."""
    players = session.players
    if won_by is not None:
        winner = players[won_by]
        players = {**players, won_by: replace(winner, wins=winner.wins + 1)}
    return replace(
        session,
        players=players,
        is_finished=True,
        won_by=won_by,
        winner_cells=winner_cells,
        count=session.count + 1,
    )


class MoveEngine:
    def __init__(self, store: SessionStore):
        self.store = store

    def play(self, game_id: str, player_id: str, cell_index: int) -> GameSession:
        with self.store.locked(game_id):
            session = self.store.get(game_id)
            if session is None:
                raise SessionNotFound(game_id)
            player = self._validate(session, player_id, cell_index)

            board = place(session.board, cell_index, Occupant(player_id=player_id, action=player.action))
            result = evaluate(board, session.win_conditions)
            session = replace(session, board=board)

            if result.finished:
                session = finish(session, result.winner, result.winning_line)
                logger.info(
                    "play: game %s finished, won_by=%s cells=%s",
                    game_id, result.winner, result.winning_line,
                )
            else:
                players = {pid: replace(p, is_turn=not p.is_turn) for pid, p in session.players.items()}
                session = replace(session, win_conditions=result.surviving, players=players)

            self.store.put(session)
            return session

    @staticmethod
    def _validate(session: GameSession, player_id: str, cell_index: int) -> Player:
        if session.is_finished:
            raise InvalidMove(f"game {session.id} is finished")
        if not in_bounds(cell_index, session.width):
            raise InvalidMove(f"cell {cell_index} is outside the board")
        if cell_at(session.board, cell_index).occupant is not None:
            raise InvalidMove(f"cell {cell_index} is already taken")
        player = session.players.get(player_id)
        if player is None:
            raise InvalidMove(f"player {player_id} is not in game {session.id}")
        if not player.is_turn or player.action is None:
            raise InvalidMove(f"not {player_id}'s turn")
        return player
