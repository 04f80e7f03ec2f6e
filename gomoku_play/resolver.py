"""Turn an AI opponent's free-form answer into a legal board position.

The answer is treated as untrusted text. A list of extractors is tried in
order; the first one producing a playable position wins. When nothing
usable comes out, a random empty cell is chosen so the game can always
continue.
"""

from __future__ import annotations

import json
import logging
import random
import re
from typing import Any

from gomoku_play.board import Board, Position
from gomoku_play.errors import NoMovesAvailable

logger = logging.getLogger(__name__)


class StructuredPattern:
    """Regex with two capture groups: row then column."""

    def __init__(self, name: str, pattern: str):
        self.name = name
        self.regex = re.compile(pattern)

    def extract(self, text: str) -> tuple[int, int] | None:
        for match in self.regex.finditer(text):
            try:
                return int(match.group(1)), int(match.group(2))
            except ValueError:
                # digit strings past the int conversion limit
                continue
        return None


class GenericJSONProbe:
    """Parse the first balanced ``{...}`` block and look for coordinates."""

    name = "json_probe"
    nested_keys = ("position", "move")

    def extract(self, text: str) -> tuple[int, int] | None:
        block = find_balanced_object(text)
        if block is None:
            return None
        try:
            data = json.loads(block)
        except (ValueError, RecursionError):
            return None
        if not isinstance(data, dict):
            return None

        found = _coords_from(data)
        if found is not None:
            return found
        for key in self.nested_keys:
            found = _coords_from(data.get(key))
            if found is not None:
                return found
        return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _coords_from(value: Any) -> tuple[int, int] | None:
    if isinstance(value, dict):
        row, col = _as_int(value.get("row")), _as_int(value.get("col"))
    elif isinstance(value, list) and len(value) == 2:
        row, col = _as_int(value[0]), _as_int(value[1])
    else:
        return None
    if row is None or col is None:
        return None
    return row, col


def find_balanced_object(text: str) -> str | None:
    """Return the first ``{...}`` substring whose braces balance, or None.

    Braces inside JSON string literals are ignored.
    """
    opened: list[int] = []
    earliest: tuple[int, int] | None = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"' and opened:
            in_string = True
        elif ch == "{":
            opened.append(i)
        elif ch == "}" and opened:
            start = opened.pop()
            if not opened:
                return text[start : i + 1]
            if earliest is None or start < earliest[0]:
                earliest = (start, i)
    if earliest is None:
        return None
    return text[earliest[0] : earliest[1] + 1]


# Most specific first
EXTRACTORS = [
    StructuredPattern("row_col_object", r'\{\s*"row"\s*:\s*(-?\d+)\s*,\s*"col"\s*:\s*(-?\d+)\s*\}'),
    StructuredPattern("array", r"\[\s*(-?\d+)\s*,\s*(-?\d+)\s*\]"),
    StructuredPattern(
        "nested_position",
        r'"position"\s*:\s*\{\s*"row"\s*:\s*(-?\d+)\s*,\s*"col"\s*:\s*(-?\d+)\s*\}',
    ),
    GenericJSONProbe(),
]


def _clamp(value: int, size: int) -> int:
    return max(0, min(value, size - 1))


def random_empty_cell(board: Board, rng: random.Random | None = None) -> Position:
    empty = list(board.empty_cells())
    if not empty:
        raise NoMovesAvailable()
    return (rng or random).choice(empty)


def resolve(
    raw_text: str | None,
    board: Board,
    board_size: int | None = None,
    rng: random.Random | None = None,
) -> Position:
    """Return a legal, empty, in-bounds position for ``board``.

    Raises ``NoMovesAvailable`` only when the board has no empty cell.
    """
    size = board_size or board.size
    if not isinstance(raw_text, str):
        if raw_text is not None:
            logger.warning("AI response is not text: %r", type(raw_text).__name__)
        raw_text = None
    if raw_text:
        logger.debug("AI response: %r", raw_text)
        for extractor in EXTRACTORS:
            coords = extractor.extract(raw_text)
            if coords is None:
                continue
            pos = Position(_clamp(coords[0], size), _clamp(coords[1], size))
            if board.in_bounds(pos) and board.get(pos) is None:
                logger.debug("Parsed %s via %s", pos, extractor.name)
                return pos
            logger.debug("Candidate %s from %s is not playable", pos, extractor.name)

    logger.warning("Could not use AI response, falling back to a random move")
    return random_empty_cell(board, rng)
