"""
Gridgame API и WebSocket.
"""
import logging

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .board import GameRules
from .config import get_config
from .game import GameService
from .ws_handlers import ws_hello_and_loop
from .ws_manager import WSManager

config = get_config()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app(service: GameService | None = None) -> FastAPI:
    app = FastAPI(title="Gridgame API", debug=config.debug)
    app.state.games = service or GameService(rules=GameRules.from_config(config))
    app.state.ws_manager = WSManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok", "sessions": len(app.state.games.store)}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        logger.info("WS: connection attempt from %s", ws.client)
        await ws_hello_and_loop(ws, app.state.ws_manager, app.state.games)

    return app


app = create_app()


def run() -> None:
    logger.info("starting on %s:%s, board width %d", config.host, config.port, config.board_width)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
