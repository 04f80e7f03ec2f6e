"""Pydantic models for the WebSocket and HTTP protocol."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from gomoku_play.ai_client import Difficulty, Provider
from gomoku_play.board import Player
from gomoku_play.game import GameMode, GameStatus


# ---------------------------------------------------------------------------
# Client → Server
# ---------------------------------------------------------------------------

class NewGameMsg(BaseModel):
    type: Literal["new_game"] = "new_game"
    board_size: int = Field(default=15, ge=1, le=50)
    win_condition: int = Field(default=5, ge=1)
    mode: GameMode = GameMode.PVA
    ai_player: Player = Player.WHITE

    @model_validator(mode="after")
    def check_size(self) -> NewGameMsg:
        if self.board_size < self.win_condition:
            raise ValueError("board_size must be at least win_condition")
        return self


class PlaceStoneMsg(BaseModel):
    type: Literal["place_stone"] = "place_stone"
    row: int
    col: int


class UndoMsg(BaseModel):
    type: Literal["undo"] = "undo"


class RestartMsg(BaseModel):
    type: Literal["restart"] = "restart"


class SetModeMsg(BaseModel):
    type: Literal["set_mode"] = "set_mode"
    mode: GameMode


class SetAIMsg(BaseModel):
    type: Literal["set_ai"] = "set_ai"
    difficulty: Difficulty | None = None
    provider: Provider | None = None


ClientMessage = NewGameMsg | PlaceStoneMsg | UndoMsg | RestartMsg | SetModeMsg | SetAIMsg


# ---------------------------------------------------------------------------
# Server → Client
# ---------------------------------------------------------------------------

class PositionModel(BaseModel):
    row: int
    col: int


class MoveModel(BaseModel):
    position: PositionModel
    player: Player
    timestamp: float


class GameConfigModel(BaseModel):
    board_size: int
    win_condition: int
    mode: GameMode
    ai_player: Player


class GameSnapshot(BaseModel):
    id: str
    board: list[list[Player | None]]
    current_player: Player
    status: GameStatus
    moves: list[MoveModel]
    winner: Player | None
    winning_line: list[PositionModel]
    config: GameConfigModel
    created_at: float
    updated_at: float


class GameStateMsg(BaseModel):
    type: Literal["game_state"] = "game_state"
    state: GameSnapshot
    ai_busy: bool
    difficulty: Difficulty
    provider: Provider


class ErrorMsg(BaseModel):
    type: Literal["error"] = "error"
    code: str = "invalid_message"
    message: str


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

class AIMoveRequest(BaseModel):
    board: list[list[Player | None]]
    current_player: Player
    board_size: int | None = None
    win_condition: int = Field(default=5, ge=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    provider: Provider = Provider.MINIMAX


class AIMoveResponse(BaseModel):
    success: bool
    position: PositionModel | None = None
    error: str | None = None


def parse_client_message(data: dict) -> ClientMessage | None:
    """Parse a raw dict into a typed client message, or None if invalid."""
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type")
    if not isinstance(msg_type, str):
        return None
    mapping: dict[str, type[BaseModel]] = {
        "new_game": NewGameMsg,
        "place_stone": PlaceStoneMsg,
        "undo": UndoMsg,
        "restart": RestartMsg,
        "set_mode": SetModeMsg,
        "set_ai": SetAIMsg,
    }
    model = mapping.get(msg_type)  # type: ignore[arg-type]
    if model is None:
        return None
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValueError:
        return None
