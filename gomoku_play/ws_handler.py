"""WebSocket endpoint and message routing."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from gomoku_play.errors import GameError
from gomoku_play.game import GameConfig
from gomoku_play.models import (
    ErrorMsg,
    NewGameMsg,
    PlaceStoneMsg,
    RestartMsg,
    SetAIMsg,
    SetModeMsg,
    UndoMsg,
    parse_client_message,
)
from gomoku_play.session import session_manager

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    try:
        while True:
            try:
                data = await ws.receive_json()
            except ValueError:
                await ws.send_json(ErrorMsg(message="Message is not valid JSON").model_dump())
                continue
            msg = parse_client_message(data)
            if msg is None:
                await ws.send_json(ErrorMsg(message="Unknown or invalid message").model_dump())
                continue

            if isinstance(msg, NewGameMsg):
                config = GameConfig(
                    board_size=msg.board_size,
                    win_condition=msg.win_condition,
                    mode=msg.mode,
                    ai_player=msg.ai_player,
                )
                await session_manager.open_session(ws, config)
                continue

            session = session_manager.get_session(ws)
            if session is None:
                session = await session_manager.open_session(ws)

            try:
                if isinstance(msg, PlaceStoneMsg):
                    await session.place_stone(msg.row, msg.col)
                elif isinstance(msg, UndoMsg):
                    await session.undo()
                elif isinstance(msg, RestartMsg):
                    await session.restart()
                elif isinstance(msg, SetModeMsg):
                    await session.set_mode(msg.mode)
                elif isinstance(msg, SetAIMsg):
                    await session.set_ai(msg.difficulty, msg.provider)
            except GameError as exc:
                await ws.send_json(ErrorMsg(code=exc.code, message=exc.message).model_dump())
    except WebSocketDisconnect:
        pass
    finally:
        session_manager.handle_disconnect(ws)
