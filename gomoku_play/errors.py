"""Game errors. Every failure leaves the game state untouched."""

from __future__ import annotations


class GameError(Exception):
    code = "game_error"
    default_message = "Invalid operation"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidPosition(GameError):
    code = "invalid_position"
    default_message = "Coordinates out of bounds"


class OutOfBounds(GameError):
    code = "out_of_bounds"
    default_message = "Position is outside the board"


class CellOccupied(GameError):
    code = "cell_occupied"
    default_message = "Cell is already occupied"


class GameFinished(GameError):
    code = "game_finished"
    default_message = "Game is already over"


class TurnMismatch(GameError):
    code = "turn_mismatch"
    default_message = "Not your turn"


class AIBusy(GameError):
    code = "ai_busy"
    default_message = "AI is still thinking"


class NothingToUndo(GameError):
    code = "nothing_to_undo"
    default_message = "No moves to undo"


class NoMovesAvailable(GameError):
    code = "no_moves_available"
    default_message = "Board is full"
