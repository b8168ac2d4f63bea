"""
Менеджер WebSocket: подключения по player_id, рассылка снимков партии.
"""
import logging
from collections.abc import Iterable
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, player_id: str, nickname: str):
        self.ws = ws
        self.player_id = player_id
        self.nickname = nickname


class WSManager:
    def __init__(self):
        self._by_player: dict[str, Connection] = {}

    def get(self, player_id: str) -> Connection | None:
        return self._by_player.get(player_id)

    async def connect(self, ws: WebSocket, player_id: str, nickname: str) -> None:
        old = self._by_player.get(player_id)
        if old is not None:
            try:
                await old.ws.close(code=4000)
            except Exception as e:
                logger.debug("close old connection %s: %s", player_id, e)
        self._by_player[player_id] = Connection(ws, player_id, nickname)

    def disconnect(self, player_id: str, ws: WebSocket | None = None) -> None:
        conn = self._by_player.get(player_id)
        # старое соединение, вытесненное новым, не трогает новое
        if conn is not None and (ws is None or conn.ws is ws):
            self._by_player.pop(player_id)

    async def send_to_user(self, player_id: str, payload: dict[str, Any]) -> bool:
        conn = self._by_player.get(player_id)
        if not conn:
            return False
        try:
            await conn.ws.send_json(payload)
            return True
        except Exception as e:
            logger.warning("send_to_user %s: %s", player_id, e)
            return False

    async def send_to_players(self, player_ids: Iterable[str], payload: dict[str, Any]) -> None:
        for player_id in player_ids:
            await self.send_to_user(player_id, payload)
