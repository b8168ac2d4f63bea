"""Ошибки игрового ядра. Поднимаются до любой записи в хранилище."""


class GameError(Exception):
    code = "game_error"


class SessionNotFound(GameError):
    code = "session_not_found"

    def __init__(self, game_id: str):
        super().__init__(f"game {game_id} not found")
        self.game_id = game_id


class InvalidMove(GameError):
    code = "invalid_move"


class InvalidState(GameError):
    code = "invalid_state"
