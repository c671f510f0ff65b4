"""Shared pytest fixtures."""

from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx
import pytest

from ventapp.config import Settings
from ventapp.i18n import Language
from ventapp.llm.prompts import SystemPromptTable

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that call the real completion API (needs OPENROUTER_API_KEY)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="needs --run-live flag")
    for item in items:
        if "requires_live" in item.keywords:
            item.add_marker(skip_live)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "requires_live: test calls the real completion API"
    )


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def completion_body(content: str) -> dict[str, object]:
    """Minimal OpenAI-compatible chat-completion response body."""
    return {
        "id": "gen-123",
        "object": "chat.completion",
        "model": "deepseek/deepseek-chat",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def mock_client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture()
def make_completion_body() -> Callable[[str], dict[str, object]]:
    return completion_body


@pytest.fixture()
def make_client() -> Callable[[Handler], httpx.AsyncClient]:
    return mock_client


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def prompt_table() -> SystemPromptTable:
    return SystemPromptTable(
        version="test",
        system_prompts={
            Language.ZH: "你是一个朋友。",
            Language.EN: "You are a friend.",
        },
    )


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="testing",  # type: ignore[arg-type]
        openrouter_api_key="sk-or-test",  # type: ignore[arg-type]
        state_path=tmp_path / "state.json",
        _env_file=None,
    )
