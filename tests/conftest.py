import json

import httpx
import pytest

from gomoku_play.config import Settings


def make_settings(**overrides) -> Settings:
    values = dict(
        cors_origins=["http://localhost:5173"],
        log_level="DEBUG",
        board_size=15,
        win_condition=5,
        default_mode="pva",
        ai_provider="deepseek",
        ai_difficulty="medium",
        ai_timeout=5.0,
        ai_move_delay=0.0,
        deepseek_api_url="https://deepseek.test/chat/completions",
        deepseek_api_key="test-key",
        deepseek_model="deepseek-chat",
        minimax_api_url="https://minimax.test/v1/text/chatcompletion_v2",
        minimax_api_key="test-key",
        minimax_model="minimax-m2.1",
    )
    values.update(overrides)
    return Settings(**values)


def chat_transport(content, status_code=200, requests=None):
    """MockTransport answering every request with an OpenAI-style completion."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(json.loads(request.content))
        if status_code != 200:
            return httpx.Response(status_code, text="upstream error")
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})

    return httpx.MockTransport(handler)


@pytest.fixture
def settings():
    return make_settings()
