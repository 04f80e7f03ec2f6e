"""AI opponent transport: prompt building and chat-completion calls.

The transport never raises for provider problems. A missing key, an HTTP
error, a timeout or an unexpected body all come back as ``None``, which the
resolver treats like unusable text.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

import httpx

from gomoku_play.board import Board, Player, Position
from gomoku_play.config import Settings
from gomoku_play.resolver import resolve

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    DEEPSEEK = "deepseek"
    MINIMAX = "minimax"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MASTER = "master"


@dataclass(frozen=True)
class DifficultyConfig:
    level: Difficulty
    name: str
    description: str
    max_tokens: int
    temperature: float
    system_prompt: str


RULES = """
[Gomoku rules]
- Black moves first, white second
- Stones may only be placed on empty intersections
- Five in a row horizontally, vertically or diagonally wins
"""

STRATEGY = """
[Attack and defence]

Attack priorities:
1. Five in a row -> win immediately
2. Open four -> forced win
3. Closed four -> forces a reply
4. Open three -> expand

Defence priorities:
1. Opponent open four -> must block!
2. Opponent closed four -> block first
"""

DIFFICULTY_CONFIGS: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(
        Difficulty.EASY, "Beginner", "Just learning", 80, 0.9,
        RULES + "\nYou are a Gomoku beginner and only look one move ahead.",
    ),
    Difficulty.MEDIUM: DifficultyConfig(
        Difficulty.MEDIUM, "Intermediate", "Club player", 120, 0.6,
        RULES + STRATEGY + "\nYou are an intermediate Gomoku player.",
    ),
    Difficulty.HARD: DifficultyConfig(
        Difficulty.HARD, "Expert", "Strong player", 180, 0.3,
        RULES + STRATEGY + "\nYou are a strong Gomoku player who reads 4-5 moves deep.",
    ),
    Difficulty.MASTER: DifficultyConfig(
        Difficulty.MASTER, "Master", "Professional", 250, 0.1,
        RULES + STRATEGY + "\nYou are a professional Gomoku master who reads 6+ moves deep.",
    ),
}


@dataclass(frozen=True)
class AISettings:
    """Per-session choice of provider and strength."""

    provider: Provider = Provider.MINIMAX
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def difficulty_config(self) -> DifficultyConfig:
        return DIFFICULTY_CONFIGS[self.difficulty]


def board_to_string(board: Board) -> str:
    header = "    " + " ".join(f"{c + 1:>2}" for c in range(board.size))
    lines = [header]
    for r, row in enumerate(board.cells):
        marks = []
        for cell in row:
            if cell is None:
                marks.append(" ·")
            elif cell is Player.BLACK:
                marks.append(" ●")
            else:
                marks.append(" ○")
        lines.append(f" {r + 1:>2} " + " ".join(marks))
    return "\n".join(lines) + "\n"


def build_prompt(board: Board, player: Player, difficulty: DifficultyConfig, win_condition: int = 5) -> str:
    stone = "●" if player is Player.BLACK else "○"
    return (
        f"{difficulty.system_prompt}\n\n"
        f"Current board ({board.size}x{board.size}, {win_condition} in a row wins, "
        f"rows and columns are shown 1-based):\n"
        f"{board_to_string(board)}\n"
        f"It is {stone} ({player.value})'s turn.\n\n"
        f"Reply with JSON only, using 0-based coordinates:\n"
        f'{{"row": <number>, "col": <number>}}'
    )


def _text_content(content, provider: str) -> str | None:
    if content is None or content == "":
        return None
    if not isinstance(content, str):
        logger.error("%s returned non-text content: %r", provider, content)
        return None
    return content


class AIClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None):
        self.settings = settings
        self._client = http_client or httpx.AsyncClient(timeout=settings.ai_timeout)

    async def aclose(self):
        await self._client.aclose()

    async def request_move(
        self,
        board: Board,
        player: Player,
        ai: AISettings,
        win_condition: int = 5,
    ) -> str | None:
        """Ask the configured provider for a move. Returns raw text or None."""
        difficulty = ai.difficulty_config
        prompt = build_prompt(board, player, difficulty, win_condition)
        logger.info("AI (%s, %s) thinking as %s", ai.provider.value, difficulty.level.value, player.value)
        if ai.provider is Provider.DEEPSEEK:
            return await self._call_deepseek(prompt, difficulty)
        return await self._call_minimax(prompt, difficulty)

    async def choose_move(
        self,
        board: Board,
        player: Player,
        ai: AISettings,
        win_condition: int = 5,
        rng: random.Random | None = None,
    ) -> Position:
        content = await self.request_move(board, player, ai, win_condition)
        return resolve(content, board, board.size, rng)

    async def _call_deepseek(self, prompt: str, difficulty: DifficultyConfig) -> str | None:
        if not self.settings.deepseek_api_key:
            logger.warning("DeepSeek API key is not configured")
            return None
        body = {
            "model": self.settings.deepseek_model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": difficulty.max_tokens,
            "temperature": difficulty.temperature,
        }
        data = await self._post(self.settings.deepseek_api_url, self.settings.deepseek_api_key, body)
        if data is None:
            return None
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.error("Unexpected DeepSeek response: %r", data)
            return None
        return _text_content(content, "DeepSeek")

    async def _call_minimax(self, prompt: str, difficulty: DifficultyConfig) -> str | None:
        if not self.settings.minimax_api_key:
            logger.warning("MiniMax API key is not configured")
            return None
        body = {
            "model": self.settings.minimax_model,
            "messages": [{"role": "user", "content": prompt}],
            "tokens_to_generate": difficulty.max_tokens,
            "temperature": difficulty.temperature,
        }
        data = await self._post(self.settings.minimax_api_url, self.settings.minimax_api_key, body)
        if data is None:
            return None
        try:
            choice = data["choices"][0]
        except (KeyError, IndexError, TypeError):
            logger.error("Unexpected MiniMax response: %r", data)
            return None
        if not isinstance(choice, dict):
            logger.error("Unexpected MiniMax response: %r", data)
            return None
        message = choice.get("message")
        if isinstance(message, dict) and message.get("content"):
            return _text_content(message["content"], "MiniMax")
        return _text_content(choice.get("content"), "MiniMax")

    async def _post(self, url: str, api_key: str, body: dict) -> dict | None:
        try:
            response = await self._client.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {api_key}"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("AI API error %s: %s", exc.response.status_code, exc.response.text)
            return None
        except httpx.HTTPError as exc:
            logger.error("AI request failed: %s", exc)
            return None
        except (ValueError, RecursionError):
            logger.error("AI response is not JSON")
            return None
        return data if isinstance(data, dict) else None
