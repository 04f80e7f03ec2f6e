"""Win and draw detection around the stone that was just placed."""

from __future__ import annotations

from typing import NamedTuple

from gomoku_play.board import Board, Player, Position

# Four directions: horizontal, vertical, diagonal ↘, diagonal ↙
DIRECTIONS = [
    (0, 1),
    (1, 0),
    (1, 1),
    (1, -1),
]


class Evaluation(NamedTuple):
    won: bool
    line: tuple[Position, ...] = ()


def _walk(board: Board, start: Position, dr: int, dc: int, player: Player) -> list[Position]:
    run = []
    r, c = start.row + dr, start.col + dc
    while 0 <= r < board.size and 0 <= c < board.size and board.cells[r][c] == player:
        run.append(Position(r, c))
        r, c = r + dr, c + dc
    return run


def evaluate(board: Board, last_move: Position, player: Player, win_condition: int) -> Evaluation:
    """Check whether the stone at ``last_move`` completes a line.

    Directions are scanned in the order of ``DIRECTIONS`` and the first one
    reaching ``win_condition`` wins. The reported line is the whole
    contiguous run through ``last_move`` (overlines included), ordered from
    the negative end to the positive end.
    """
    for dr, dc in DIRECTIONS:
        backward = _walk(board, last_move, -dr, -dc, player)
        forward = _walk(board, last_move, dr, dc, player)
        if len(backward) + 1 + len(forward) >= win_condition:
            line = tuple(reversed(backward)) + (last_move,) + tuple(forward)
            return Evaluation(won=True, line=line)
    return Evaluation(won=False)


def is_draw(board: Board, won: bool) -> bool:
    # Win check always precedes draw check
    return board.is_full() and not won
