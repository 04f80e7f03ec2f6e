"""Game logic: the game state aggregate and its transitions.

All transitions are pure: they take a ``GameState`` and return a new one,
raising a ``GameError`` without touching the input when the move is illegal.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from uuid import uuid4

from gomoku_play import ledger
from gomoku_play.board import DEFAULT_BOARD_SIZE, Board, Player, Position
from gomoku_play.errors import AIBusy, CellOccupied, GameFinished, InvalidPosition, TurnMismatch
from gomoku_play.evaluator import evaluate, is_draw
from gomoku_play.ledger import Move

DEFAULT_WIN_CONDITION = 5


class GameStatus(str, Enum):
    PLAYING = "playing"
    BLACK_WIN = "black_win"
    WHITE_WIN = "white_win"
    DRAW = "draw"

    @property
    def is_terminal(self) -> bool:
        return self is not GameStatus.PLAYING

    @classmethod
    def win_for(cls, player: Player) -> GameStatus:
        return cls.BLACK_WIN if player is Player.BLACK else cls.WHITE_WIN


class GameMode(str, Enum):
    PVP = "pvp"
    PVA = "pva"


@dataclass(frozen=True)
class GameConfig:
    board_size: int = DEFAULT_BOARD_SIZE
    win_condition: int = DEFAULT_WIN_CONDITION
    mode: GameMode = GameMode.PVA
    ai_player: Player = Player.WHITE

    def __post_init__(self):
        if self.win_condition < 1:
            raise ValueError("win_condition must be at least 1")
        if self.board_size < self.win_condition:
            raise ValueError("board_size must be at least win_condition")

    @property
    def human_player(self) -> Player:
        return self.ai_player.opponent


@dataclass(frozen=True)
class GameState:
    id: str
    board: Board
    config: GameConfig
    current_player: Player = Player.BLACK
    status: GameStatus = GameStatus.PLAYING
    moves: tuple[Move, ...] = ()
    winner: Player | None = None
    winning_line: tuple[Position, ...] = ()
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "board": self.board.to_rows(),
            "current_player": self.current_player.value,
            "status": self.status.value,
            "moves": [m.to_dict() for m in self.moves],
            "winner": self.winner.value if self.winner else None,
            "winning_line": [p.to_dict() for p in self.winning_line],
            "config": {
                "board_size": self.config.board_size,
                "win_condition": self.config.win_condition,
                "mode": self.config.mode.value,
                "ai_player": self.config.ai_player.value,
            },
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


def new_game(config: GameConfig | None = None) -> GameState:
    config = config or GameConfig()
    return GameState(id=str(uuid4()), board=Board.empty(config.board_size), config=config)


def restart(config: GameConfig) -> GameState:
    return new_game(config)


def apply_move(state: GameState, position: Position, acting_player: Player | None = None) -> GameState:
    """Place the current player's stone at ``position``.

    ``acting_player`` guards against stale callers: when given it must match
    ``state.current_player``.
    """
    if state.status.is_terminal:
        raise GameFinished()
    if not state.board.in_bounds(position):
        raise InvalidPosition()
    if state.board.get(position) is not None:
        raise CellOccupied()
    player = state.current_player
    if acting_player is not None and acting_player != player:
        raise TurnMismatch()

    board = state.board.with_stone(position, player)
    moves = ledger.append(state.moves, Move(position=position, player=player))
    result = evaluate(board, position, player, state.config.win_condition)

    if result.won:
        status, winner, line = GameStatus.win_for(player), player, result.line
    elif is_draw(board, result.won):
        status, winner, line = GameStatus.DRAW, None, ()
    else:
        status, winner, line = GameStatus.PLAYING, None, ()

    return replace(
        state,
        board=board,
        moves=moves,
        status=status,
        winner=winner,
        winning_line=line,
        current_player=player if status.is_terminal else player.opponent,
        updated_at=time.time(),
    )


def undo(state: GameState, ai_busy: bool = False) -> GameState:
    """Take back the last move by replaying the rest of the ledger."""
    if ai_busy:
        raise AIBusy()
    if state.status.is_terminal:
        raise GameFinished("Game is over, restart instead of undoing")
    remaining, removed = ledger.drop_last(state.moves)
    return replace(
        state,
        board=ledger.replay(remaining, state.config.board_size),
        moves=remaining,
        current_player=removed.player,
        status=GameStatus.PLAYING,
        winner=None,
        winning_line=(),
        updated_at=time.time(),
    )


def set_mode(state: GameState, mode: GameMode, ai_busy: bool = False) -> GameState:
    if ai_busy:
        raise AIBusy()
    return restart(replace(state.config, mode=mode))


def is_ai_turn(state: GameState) -> bool:
    return (
        state.status is GameStatus.PLAYING
        and state.config.mode is GameMode.PVA
        and state.current_player is state.config.ai_player
    )
