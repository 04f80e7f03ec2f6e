"""Environment configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    cors_origins: list[str]
    log_level: str
    board_size: int
    win_condition: int
    default_mode: str
    ai_provider: str
    ai_difficulty: str
    ai_timeout: float  # seconds
    ai_move_delay: float  # seconds before the AI is consulted
    deepseek_api_url: str
    deepseek_api_key: str
    deepseek_model: str
    minimax_api_url: str
    minimax_api_key: str
    minimax_model: str


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:5174")
    return Settings(
        cors_origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        board_size=int(os.getenv("BOARD_SIZE", "15")),
        win_condition=int(os.getenv("WIN_CONDITION", "5")),
        default_mode=os.getenv("DEFAULT_MODE", "pva"),
        ai_provider=os.getenv("AI_PROVIDER", "minimax"),
        ai_difficulty=os.getenv("AI_DIFFICULTY", "medium"),
        ai_timeout=float(os.getenv("AI_TIMEOUT", "30")),
        ai_move_delay=float(os.getenv("AI_MOVE_DELAY", "0.5")),
        deepseek_api_url=os.getenv("DEEPSEEK_API_URL", "https://api.deepseek.com/chat/completions"),
        deepseek_api_key=os.getenv("DEEPSEEK_API_KEY", ""),
        deepseek_model=os.getenv("DEEPSEEK_MODEL", "deepseek-chat").strip(),
        minimax_api_url=os.getenv(
            "MINIMAX_API_URL", "https://api.minimax.chat/v1/text/chatcompletion_v2"
        ),
        minimax_api_key=os.getenv("MINIMAX_API_KEY", ""),
        minimax_model=os.getenv("MINIMAX_MODEL", "minimax-m2.1"),
    )
