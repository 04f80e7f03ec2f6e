"""Board model: an immutable square grid of stones."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from gomoku_play.errors import CellOccupied, OutOfBounds

DEFAULT_BOARD_SIZE = 15


class Player(str, Enum):
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> Player:
        return Player.WHITE if self is Player.BLACK else Player.BLACK


# None marks an empty cell
Cell = Optional[Player]


@dataclass(frozen=True)
class Position:
    row: int
    col: int

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}


@dataclass(frozen=True)
class Board:
    size: int
    cells: tuple[tuple[Cell, ...], ...]

    @classmethod
    def empty(cls, size: int = DEFAULT_BOARD_SIZE) -> Board:
        if size < 1:
            raise ValueError(f"Board size must be at least 1, got {size}")
        return cls(size=size, cells=tuple((None,) * size for _ in range(size)))

    @classmethod
    def from_rows(cls, rows: list[list[str | None]]) -> Board:
        """Build a board from a JSON-style grid of "black"/"white"/None."""
        size = len(rows)
        if size < 1 or any(len(row) != size for row in rows):
            raise ValueError("Board must be a non-empty square grid")
        cells = tuple(
            tuple(Player(cell) if cell is not None else None for cell in row)
            for row in rows
        )
        return cls(size=size, cells=cells)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.size and 0 <= pos.col < self.size

    def get(self, pos: Position) -> Cell:
        if not self.in_bounds(pos):
            raise OutOfBounds(f"({pos.row}, {pos.col}) is outside a {self.size}x{self.size} board")
        return self.cells[pos.row][pos.col]

    def with_stone(self, pos: Position, player: Player) -> Board:
        """Return a copy of the board with ``player``'s stone at ``pos``."""
        if self.get(pos) is not None:
            raise CellOccupied(f"Cell ({pos.row}, {pos.col}) is already occupied")
        row = self.cells[pos.row]
        new_row = row[: pos.col] + (player,) + row[pos.col + 1 :]
        cells = self.cells[: pos.row] + (new_row,) + self.cells[pos.row + 1 :]
        return Board(size=self.size, cells=cells)

    def is_full(self) -> bool:
        return all(cell is not None for row in self.cells for cell in row)

    def empty_cells(self) -> Iterator[Position]:
        for r, row in enumerate(self.cells):
            for c, cell in enumerate(row):
                if cell is None:
                    yield Position(r, c)

    def stone_count(self) -> int:
        return sum(cell is not None for row in self.cells for cell in row)

    def to_rows(self) -> list[list[str | None]]:
        return [[cell.value if cell is not None else None for cell in row] for row in self.cells]
