"""Session driver: serialises human moves and AI replies for one client."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field, replace

from fastapi import WebSocket

from gomoku_play import game
from gomoku_play.ai_client import AIClient, AISettings, Difficulty, Provider
from gomoku_play.board import Board, Player, Position
from gomoku_play.config import Settings, get_settings
from gomoku_play.errors import GameError, NoMovesAvailable
from gomoku_play.game import GameConfig, GameMode, GameState
from gomoku_play.models import ErrorMsg, GameSnapshot, GameStateMsg
from gomoku_play.resolver import random_empty_cell

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    ws: WebSocket
    ai_client: AIClient
    state: GameState
    ai: AISettings = field(default_factory=AISettings)
    move_delay: float = 0.5  # seconds
    rng: random.Random | None = field(default=None, repr=False)
    ai_busy: bool = False
    ai_task: asyncio.Task | None = field(default=None, repr=False)

    def snapshot(self) -> dict:
        return GameStateMsg(
            state=GameSnapshot.model_validate(self.state.to_dict()),
            ai_busy=self.ai_busy,
            difficulty=self.ai.difficulty,
            provider=self.ai.provider,
        ).model_dump(mode="json")

    async def publish(self):
        try:
            await self.ws.send_json(self.snapshot())
        except Exception:
            logger.debug("Could not deliver state for game %s", self.state.id)

    async def send_error(self, exc: GameError):
        try:
            await self.ws.send_json(ErrorMsg(code=exc.code, message=exc.message).model_dump())
        except Exception:
            logger.debug("Could not deliver error for game %s", self.state.id)

    async def start(self):
        self._schedule_ai()
        await self.publish()

    async def place_stone(self, row: int, col: int):
        config = self.state.config
        acting = config.human_player if config.mode is GameMode.PVA else None
        self.state = game.apply_move(self.state, Position(row, col), acting_player=acting)
        self._schedule_ai()
        await self.publish()

    async def undo(self):
        state = game.undo(self.state, ai_busy=self.ai_busy)
        # Against the AI, also take back its reply so the human is to move
        if game.is_ai_turn(state) and state.moves:
            state = game.undo(state)
        self.state = state
        self._schedule_ai()
        await self.publish()

    async def restart(self, config: GameConfig | None = None):
        self._cancel_ai()
        self.state = game.restart(config or self.state.config)
        self._schedule_ai()
        await self.publish()

    async def set_mode(self, mode: GameMode):
        self.state = game.set_mode(self.state, mode, ai_busy=self.ai_busy)
        self._schedule_ai()
        await self.publish()

    async def set_ai(self, difficulty: Difficulty | None = None, provider: Provider | None = None):
        self.ai = replace(
            self.ai,
            difficulty=difficulty or self.ai.difficulty,
            provider=provider or self.ai.provider,
        )
        await self.publish()

    def close(self):
        self._cancel_ai()

    def _cancel_ai(self):
        if self.ai_task and not self.ai_task.done():
            self.ai_task.cancel()
        self.ai_task = None
        self.ai_busy = False

    def _schedule_ai(self):
        if self.ai_busy or not game.is_ai_turn(self.state):
            return
        self.ai_busy = True
        self.ai_task = asyncio.create_task(self._ai_turn())

    async def _ai_turn(self):
        game_id = self.state.id
        player = self.state.current_player
        board = self.state.board
        position = None
        try:
            await asyncio.sleep(self.move_delay)
            position = await self._choose_move(board, player)
        except NoMovesAvailable as exc:
            if self.state.id == game_id:
                await self.send_error(exc)
        finally:
            if self.state.id == game_id:
                self.ai_busy = False

        if self.state.id != game_id:
            logger.info("Discarding AI move for replaced game %s", game_id)
            return

        if position is not None:
            try:
                self.state = game.apply_move(self.state, position, acting_player=player)
            except GameError as exc:
                logger.warning("AI move %s rejected: %s", position, exc.message)
        await self.publish()

    async def _choose_move(self, board: Board, player: Player) -> Position:
        try:
            return await self.ai_client.choose_move(
                board,
                player,
                self.ai,
                self.state.config.win_condition,
                self.rng,
            )
        except GameError:
            raise
        except Exception:
            logger.exception("AI move failed, playing a random move")
            return random_empty_cell(board, self.rng)


class SessionManager:
    def __init__(self, settings: Settings | None = None, ai_client: AIClient | None = None):
        self.settings = settings or get_settings()
        self._ai_client = ai_client
        self.sessions: dict[WebSocket, GameSession] = {}

    @property
    def ai_client(self) -> AIClient:
        if self._ai_client is None:
            self._ai_client = AIClient(self.settings)
        return self._ai_client

    @ai_client.setter
    def ai_client(self, client: AIClient):
        self._ai_client = client

    def default_config(self) -> GameConfig:
        return GameConfig(
            board_size=self.settings.board_size,
            win_condition=self.settings.win_condition,
            mode=GameMode(self.settings.default_mode),
        )

    def default_ai(self) -> AISettings:
        return AISettings(
            provider=Provider(self.settings.ai_provider),
            difficulty=Difficulty(self.settings.ai_difficulty),
        )

    async def open_session(self, ws: WebSocket, config: GameConfig | None = None) -> GameSession:
        """Start a new game for ``ws``, replacing any game it already has."""
        previous = self.sessions.get(ws)
        if previous is not None:
            previous.close()
        session = GameSession(
            ws=ws,
            ai_client=self.ai_client,
            state=game.new_game(config or self.default_config()),
            ai=previous.ai if previous else self.default_ai(),
            move_delay=self.settings.ai_move_delay,
        )
        self.sessions[ws] = session
        await session.start()
        return session

    def get_session(self, ws: WebSocket) -> GameSession | None:
        return self.sessions.get(ws)

    def handle_disconnect(self, ws: WebSocket):
        session = self.sessions.pop(ws, None)
        if session is not None:
            session.close()

    async def aclose(self):
        for session in self.sessions.values():
            session.close()
        self.sessions.clear()
        if self._ai_client is not None:
            await self._ai_client.aclose()
            self._ai_client = None


session_manager = SessionManager()
