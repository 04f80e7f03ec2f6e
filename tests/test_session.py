"""Tests for the session driver: human moves, AI turns, undo, restart."""

import asyncio
import random
from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import chat_transport, make_settings
from gomoku_play import game
from gomoku_play.ai_client import AIClient, AISettings, Difficulty, Provider
from gomoku_play.board import Player, Position
from gomoku_play.errors import AIBusy, CellOccupied, NoMovesAvailable, TurnMismatch
from gomoku_play.game import GameConfig, GameMode, GameStatus
from gomoku_play.models import GameStateMsg
from gomoku_play.session import GameSession, SessionManager


def make_mock_ws():
    """Create a mock WebSocket that tracks sent messages."""
    ws = AsyncMock()
    ws.send_json = AsyncMock()
    return ws


def last_state(ws):
    return ws.send_json.call_args[0][0]["state"]


def make_session(content='{"row": 0, "col": 0}', mode=GameMode.PVA, transport=None, **config):
    ws = make_mock_ws()
    client = AIClient(make_settings(), httpx.AsyncClient(transport=transport or chat_transport(content)))
    session = GameSession(
        ws=ws,
        ai_client=client,
        state=game.new_game(GameConfig(mode=mode, **config)),
        ai=AISettings(provider=Provider.DEEPSEEK),
        move_delay=0,
        rng=random.Random(0),
    )
    return session, ws


class SlowTransport(httpx.AsyncBaseTransport):
    """Holds every request until ``release`` is set."""

    def __init__(self, content):
        self.content = content
        self.release = asyncio.Event()

    async def handle_async_request(self, request):
        await self.release.wait()
        return httpx.Response(200, json={"choices": [{"message": {"content": self.content}}]})


class TestHumanMoves:
    @pytest.mark.asyncio
    async def test_pvp_alternates(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.place_stone(7, 7)
        await session.place_stone(7, 8)
        state = last_state(ws)
        assert state["current_player"] == "black"
        assert state["board"][7][8] == "white"
        assert session.ai_task is None

    @pytest.mark.asyncio
    async def test_occupied_leaves_state(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.place_stone(7, 7)
        before = session.state
        with pytest.raises(CellOccupied):
            await session.place_stone(7, 7)
        assert session.state is before


class TestAITurn:
    @pytest.mark.asyncio
    async def test_ai_replies_after_human(self):
        session, ws = make_session('{"row": 7, "col": 8}')
        await session.place_stone(7, 7)
        assert ws.send_json.call_args[0][0]["ai_busy"] is True
        await session.ai_task

        msg = ws.send_json.call_args[0][0]
        assert msg["ai_busy"] is False
        assert msg["state"]["board"][7][8] == "white"
        assert msg["state"]["current_player"] == "black"

    @pytest.mark.asyncio
    async def test_ai_garbage_still_moves(self):
        session, ws = make_session("I refuse to answer")
        await session.place_stone(7, 7)
        await session.ai_task
        assert len(session.state.moves) == 2
        assert session.state.moves[-1].player is Player.WHITE

    @pytest.mark.asyncio
    async def test_human_cannot_move_for_ai(self):
        transport = SlowTransport('{"row": 0, "col": 0}')
        session, ws = make_session(transport=transport)
        await session.place_stone(7, 7)
        with pytest.raises(TurnMismatch):
            await session.place_stone(8, 8)
        transport.release.set()
        await session.ai_task

    @pytest.mark.asyncio
    async def test_undo_blocked_while_ai_thinking(self):
        transport = SlowTransport('{"row": 0, "col": 0}')
        session, ws = make_session(transport=transport)
        await session.place_stone(7, 7)
        with pytest.raises(AIBusy):
            await session.undo()
        with pytest.raises(AIBusy):
            await session.set_mode(GameMode.PVP)
        transport.release.set()
        await session.ai_task
        assert session.ai_busy is False

    @pytest.mark.asyncio
    async def test_restart_discards_pending_ai(self):
        transport = SlowTransport('{"row": 0, "col": 0}')
        session, ws = make_session(transport=transport)
        await session.place_stone(7, 7)
        pending = session.ai_task
        await session.restart()
        transport.release.set()
        with pytest.raises(asyncio.CancelledError):
            await pending
        assert session.state.moves == ()
        assert session.ai_busy is False

    @pytest.mark.asyncio
    async def test_ai_opens_as_black(self):
        session, ws = make_session('{"row": 7, "col": 7}', ai_player=Player.BLACK)
        await session.start()
        await session.ai_task
        assert session.state.board.get(Position(7, 7)) is Player.BLACK
        assert session.state.current_player is Player.WHITE


class TestUndoAndMode:
    @pytest.mark.asyncio
    async def test_undo_rewinds_ai_reply(self):
        session, ws = make_session('{"row": 0, "col": 0}')
        await session.place_stone(7, 7)
        await session.ai_task
        await session.undo()
        assert session.state.moves == ()
        assert session.state.current_player is Player.BLACK
        assert session.ai_busy is False

    @pytest.mark.asyncio
    async def test_pvp_undo_single_move(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.place_stone(7, 7)
        await session.place_stone(7, 8)
        await session.undo()
        assert len(session.state.moves) == 1
        assert session.state.current_player is Player.WHITE

    @pytest.mark.asyncio
    async def test_set_mode_restarts(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.place_stone(7, 7)
        old_id = session.state.id
        await session.set_mode(GameMode.PVA)
        assert session.state.id != old_id
        assert session.state.config.mode is GameMode.PVA
        assert session.state.status is GameStatus.PLAYING
        assert last_state(ws)["moves"] == []

    @pytest.mark.asyncio
    async def test_set_ai(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.set_ai(difficulty=Difficulty.MASTER)
        msg = ws.send_json.call_args[0][0]
        assert msg["difficulty"] == "master"
        assert msg["provider"] == "deepseek"


class TestSessionManager:
    @pytest.mark.asyncio
    async def test_open_session_publishes_state(self):
        manager = SessionManager(make_settings(), AIClient(make_settings()))
        ws = make_mock_ws()
        session = await manager.open_session(ws, GameConfig(mode=GameMode.PVP))

        assert manager.get_session(ws) is session
        ws.send_json.assert_called_once()
        msg = ws.send_json.call_args[0][0]
        assert msg["type"] == "game_state"
        assert msg["state"]["status"] == "playing"
        await manager.aclose()

    @pytest.mark.asyncio
    async def test_new_game_replaces_session(self):
        manager = SessionManager(make_settings(), AIClient(make_settings()))
        ws = make_mock_ws()
        first = await manager.open_session(ws, GameConfig(mode=GameMode.PVP))
        second = await manager.open_session(ws, GameConfig(mode=GameMode.PVP, board_size=9))
        assert first is not second
        assert manager.get_session(ws).state.board.size == 9
        await manager.aclose()

    @pytest.mark.asyncio
    async def test_disconnect_removes_session(self):
        manager = SessionManager(make_settings(), AIClient(make_settings()))
        ws = make_mock_ws()
        await manager.open_session(ws)
        manager.handle_disconnect(ws)
        assert manager.get_session(ws) is None
        await manager.aclose()


class FailingClient(AIClient):
    """AI client whose move choice always raises ``error``."""

    def __init__(self, error):
        super().__init__(make_settings())
        self.error = error

    async def choose_move(self, *args, **kwargs):
        raise self.error


class TestAIFailures:
    @pytest.mark.asyncio
    async def test_oversized_number_still_moves(self):
        session, ws = make_session("[" + "9" * 5000 + ", 1]")
        await session.place_stone(7, 7)
        await session.ai_task
        assert len(session.state.moves) == 2
        assert session.state.current_player is Player.BLACK
        assert session.ai_busy is False

    @pytest.mark.asyncio
    async def test_client_crash_falls_back_to_random(self):
        session, ws = make_session()
        session.ai_client = FailingClient(RuntimeError("boom"))
        await session.place_stone(7, 7)
        await session.ai_task
        assert len(session.state.moves) == 2
        assert session.state.moves[-1].player is Player.WHITE
        assert ws.send_json.call_args[0][0]["ai_busy"] is False

    @pytest.mark.asyncio
    async def test_no_moves_reports_error(self):
        session, ws = make_session()
        session.ai_client = FailingClient(NoMovesAvailable())
        await session.place_stone(7, 7)
        await session.ai_task
        sent = [c[0][0] for c in ws.send_json.call_args_list]
        assert any(m["type"] == "error" and m["code"] == "no_moves_available" for m in sent)
        assert sent[-1]["type"] == "game_state"
        assert sent[-1]["ai_busy"] is False
        assert len(session.state.moves) == 1


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_snapshot_is_typed(self):
        session, ws = make_session(mode=GameMode.PVP)
        await session.place_stone(7, 7)
        msg = GameStateMsg.model_validate(session.snapshot())
        assert msg.state.current_player is Player.WHITE
        assert msg.state.moves[0].position.row == 7
        assert msg.state.config.mode is GameMode.PVP
        assert msg.state.status is GameStatus.PLAYING
