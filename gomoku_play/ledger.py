"""Move ledger: the append-only history a board is rebuilt from."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable

from gomoku_play.board import Board, Player, Position
from gomoku_play.errors import NothingToUndo


@dataclass(frozen=True)
class Move:
    position: Position
    player: Player
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "position": self.position.to_dict(),
            "player": self.player.value,
            "timestamp": self.timestamp,
        }


def append(moves: tuple[Move, ...], move: Move) -> tuple[Move, ...]:
    return moves + (move,)


def replay(moves: Iterable[Move], size: int) -> Board:
    """Rebuild a board by applying ``moves`` in order onto an empty one."""
    board = Board.empty(size)
    for move in moves:
        board = board.with_stone(move.position, move.player)
    return board


def drop_last(moves: tuple[Move, ...]) -> tuple[tuple[Move, ...], Move]:
    if not moves:
        raise NothingToUndo()
    return moves[:-1], moves[-1]
