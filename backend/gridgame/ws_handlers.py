"""
Обработка сообщений WebSocket: hello, join, play, resign, rematch, subscribe_game.
После каждой операции снимок партии рассылается всем её игрокам.
"""
import json
import logging
import uuid

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from .errors import GameError, InvalidMove
from .game import GameService, session_payload
from .models import GameSession
from .ws_manager import WSManager

logger = logging.getLogger(__name__)


async def _broadcast(manager: WSManager, session: GameSession, extra: tuple[str, ...] = ()) -> None:
    recipients = dict.fromkeys((*session.players, *extra))
    await manager.send_to_players(recipients, session_payload(session))


def _game_op(service: GameService, t: str, data: dict, player_id: str, nickname: str) -> GameSession | None:
    game_id = data.get("game_id")
    if t == "join":
        return service.join(player_id, data.get("nickname") or nickname)
    if not isinstance(game_id, str):
        raise InvalidMove(f"{t} needs a game_id")
    if t == "play":
        cell = data.get("cell")
        if not isinstance(cell, int) or isinstance(cell, bool):
            raise InvalidMove(f"cell must be an integer, got {cell!r}")
        return service.play(game_id, player_id, cell)
    if t == "resign":
        return service.resign(game_id, player_id)
    if t == "rematch":
        return service.rematch(game_id, player_id)
    return None


async def handle_ws_message(
    manager: WSManager,
    service: GameService,
    raw: str,
    player_id: str,
    nickname: str,
) -> bool:
    """
    Обрабатывает одно сообщение от представившегося клиента.
    Возвращает False если соединение нужно закрыть.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("WS: invalid JSON from %s: %s", player_id, e)
        return True
    if not isinstance(data, dict):
        return True
    t = data.get("type")
    logger.info("WS: msg from %s type=%s", player_id, t)
    if t == "subscribe_game":
        game_id = data.get("game_id")
        g = service.get_by_id(game_id) if isinstance(game_id, str) else None
        if g and player_id in g.players:
            await manager.send_to_user(player_id, session_payload(g))
        return True
    if t in ("join", "play", "resign", "rematch"):
        try:
            session = _game_op(service, t, data, player_id, nickname)
        except GameError as e:
            logger.warning("WS: %s from %s rejected: %s", t, player_id, e)
            await manager.send_to_user(
                player_id,
                {"type": "error", "code": e.code, "message": str(e)},
            )
            return True
        if session is not None:
            # игрок сам вызвал операцию, поэтому получает снимок даже если его уже нет в партии
            await _broadcast(manager, session, extra=(player_id,))
        return True
    if t == "bye":
        return False
    return True


async def ws_hello_and_loop(ws: WebSocket, manager: WSManager, service: GameService) -> None:
    """
    Первое сообщение — hello с необязательными player_id и nickname.
    Дальше цикл приёма сообщений.
    """
    player_id = None
    try:
        await ws.accept()
        logger.info("WS: accepted, waiting for hello")
        raw = await ws.receive_text()
        data = json.loads(raw)
        msg_type = data.get("type") if isinstance(data, dict) else None
        if msg_type != "hello":
            logger.warning("WS: expected hello, got %s, closing 4001", msg_type)
            await ws.close(code=4001)
            return
        player_id = str(data.get("player_id") or uuid.uuid4())
        nickname = str(data.get("nickname") or f"player_{player_id[:8]}")
        await manager.connect(ws, player_id, nickname)
        await manager.send_to_user(player_id, {"type": "welcome", "player_id": player_id, "nickname": nickname})
        logger.info("WS: hello ok player_id=%s nickname=%s", player_id, nickname)
        while True:
            msg = await ws.receive_text()
            if not await handle_ws_message(manager, service, msg, player_id, nickname):
                await ws.close()
                break
    except WebSocketDisconnect as e:
        logger.info("WS: client disconnected code=%s reason=%s player_id=%s", e.code, e.reason or "", player_id)
    except json.JSONDecodeError as e:
        logger.warning("WS: invalid hello: %s", e)
        await ws.close(code=4001)
    except Exception as e:
        logger.exception("WS: error player_id=%s: %s", player_id, e)
    finally:
        conn = manager.get(player_id) if player_id else None
        # если соединение вытеснено новым, партии игрока не трогаем
        if conn is not None and conn.ws is ws:
            manager.disconnect(player_id, ws)
            for session in service.abandon(player_id):
                await _broadcast(manager, session)
            logger.info("WS: disconnected player_id=%s", player_id)
